from __future__ import annotations

import logging
import threading

from .batch import CancelToken, run_batch
from .config import Settings
from .domain.entities import BatchResult
from .domain.exceptions import RootChangesNotAllowedError, ScopeRequiredError
from .domain.ports import DocumentStore
from .scope import Scope, describe_scope, is_vault_wide
from .transform import TagOperation

logger = logging.getLogger("tagsmith.batch")


def check_scope_allowed(settings: Settings, scope: Scope, *, dry_run: bool) -> None:
    if not is_vault_wide(scope) or settings.allow_root_changes:
        return
    if settings.require_scope:
        raise ScopeRequiredError("scope_required")
    if not dry_run:
        raise RootChangesNotAllowedError("root_changes_not_allowed")


def summarize(result: BatchResult, scope: Scope) -> str:
    verb = "would change" if result.dry_run else "updated"
    line = f"{len(result.changed)} of {result.considered} files {verb} {describe_scope(scope)}"
    if result.cancelled:
        line += " (cancelled)"
    return line


class PreviewCoordinator:
    """Keeps one in-flight preview per client; a newer one cancels the older."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._inflight: dict[str, CancelToken] = {}

    def begin(self, client_id: str) -> CancelToken:
        token = CancelToken()
        with self._lock:
            previous = self._inflight.get(client_id)
            self._inflight[client_id] = token
        if previous is not None:
            previous.cancel()
            logger.debug("preview_superseded", extra={"client": client_id})
        return token

    def finish(self, client_id: str, token: CancelToken) -> None:
        with self._lock:
            if self._inflight.get(client_id) is token:
                self._inflight.pop(client_id, None)

    def cancel(self, client_id: str) -> bool:
        with self._lock:
            token = self._inflight.pop(client_id, None)
        if token is None:
            return False
        token.cancel()
        return True


class TagUpdater:
    def __init__(self, store: DocumentStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings
        self.previews = PreviewCoordinator()

    def preview(self, operation: TagOperation, scope: Scope, *, client_id: str = "default") -> BatchResult:
        check_scope_allowed(self.settings, scope, dry_run=True)
        token = self.previews.begin(client_id)
        try:
            return run_batch(self.store, operation, scope, dry_run=True, cancel=token)
        finally:
            self.previews.finish(client_id, token)

    def apply(self, operation: TagOperation, scope: Scope, *, dry_run: bool | None = None) -> BatchResult:
        if dry_run is None:
            dry_run = self.settings.dry_run_by_default
        check_scope_allowed(self.settings, scope, dry_run=dry_run)
        return run_batch(self.store, operation, scope, dry_run=dry_run)
