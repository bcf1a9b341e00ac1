from __future__ import annotations

import logging
import threading

from .domain.entities import BatchResult, ChangeRecord, DocumentRef
from .domain.ports import DocumentStore
from .frontmatter import parse_document, render_document
from .scope import Scope, resolve_scope
from .transform import TagOperation, apply_tags, extract_tags, transform_tags, validate_operation

logger = logging.getLogger("tagsmith.batch")


class CancelToken:
    """Cancellation flag polled by run_batch between documents."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def process_document(
    store: DocumentStore,
    ref: DocumentRef,
    operation: TagOperation,
    *,
    dry_run: bool,
) -> ChangeRecord | None:
    content = store.read_document(ref)
    parsed = parse_document(content)
    if parsed.error:
        logger.debug("frontmatter_ignored", extra={"path": ref.path, "error": parsed.error})

    result = transform_tags(extract_tags(parsed.frontmatter), operation)
    if not result.changed:
        return None

    updated = apply_tags(parsed.frontmatter, result.new)
    new_content = render_document(updated, parsed.body)
    if not dry_run:
        store.write_document(ref, new_content)
    return ChangeRecord(path=ref.path, old_tags=result.old, new_tags=result.new)


def run_batch(
    store: DocumentStore,
    operation: TagOperation,
    scope: Scope,
    *,
    dry_run: bool,
    cancel: CancelToken | None = None,
) -> BatchResult:
    validate_operation(operation)
    targets = resolve_scope(scope, store.list_documents())
    logger.info(
        "batch_start",
        extra={"operation": type(operation).__name__, "targets": len(targets), "dry_run": dry_run},
    )

    changed: list[ChangeRecord] = []
    cancelled = False
    for position, ref in enumerate(targets):
        if cancel is not None and cancel.cancelled:
            cancelled = True
            logger.info("batch_cancelled", extra={"processed": position, "targets": len(targets)})
            break
        try:
            record = process_document(store, ref, operation, dry_run=dry_run)
        except Exception:
            logger.exception("document_failed", extra={"path": ref.path})
            continue
        if record is not None:
            changed.append(record)

    logger.info("batch_done", extra={"changed": len(changed), "considered": len(targets), "dry_run": dry_run})
    return BatchResult(changed=changed, considered=len(targets), dry_run=dry_run, cancelled=cancelled)
