import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from tagsmith_api.dependencies import get_updater, get_vault
from tagsmith_api.domain.entities import BatchResult
from tagsmith_api.domain.exceptions import (
    EmptyTagListError,
    NoTargetsError,
    PathError,
    PreconditionError,
    RootChangesNotAllowedError,
    ScopeRequiredError,
)
from tagsmith_api.domain.schemas import (
    BatchResultOut,
    ChangeRecordOut,
    DocumentListOut,
    DocumentOut,
    TagUpdateIn,
)
from tagsmith_api.scope import Scope, strip_slashes
from tagsmith_api.updater import TagUpdater, summarize
from tagsmith_api.util import rfc3339_from_timestamp
from tagsmith_api.vault import FileVault

router = APIRouter()
logger = logging.getLogger("tagsmith.api")


def _result_out(result: BatchResult, scope: Scope) -> BatchResultOut:
    return BatchResultOut(
        changed=[ChangeRecordOut(**c.__dict__) for c in result.changed],
        considered=result.considered,
        dry_run=result.dry_run,
        cancelled=result.cancelled,
        summary=summarize(result, scope),
    )


def _precondition_http_error(e: PreconditionError) -> HTTPException:
    if isinstance(e, NoTargetsError):
        return HTTPException(status_code=404, detail="no_targets")
    if isinstance(e, EmptyTagListError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, (ScopeRequiredError, RootChangesNotAllowedError)):
        return HTTPException(status_code=403, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.get("/health")
def health():
    return {"ok": True}


@router.get("/documents", response_model=DocumentListOut)
def list_documents(
    prefix: Optional[str] = None,
    limit: int = Query(500, ge=1, le=5000),
    vault: FileVault = Depends(get_vault),
):
    wanted = strip_slashes(prefix) if prefix else ""
    items = [
        DocumentOut(path=ref.path, updated_at=rfc3339_from_timestamp(ref.mtime))
        for ref in vault.list_documents()
        if ref.path.startswith(wanted)
    ]
    return DocumentListOut(items=items[:limit])


@router.post("/tags/preview", response_model=BatchResultOut)
def preview_tags(
    payload: TagUpdateIn,
    request: Request,
    x_client_id: Optional[str] = Header(None),
    updater: TagUpdater = Depends(get_updater),
):
    operation = payload.to_operation()
    scope = payload.scope.to_scope()
    try:
        result = updater.preview(operation, scope, client_id=x_client_id or "default")
    except PreconditionError as e:
        raise _precondition_http_error(e) from e
    except PathError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    logger.debug(
        "tags_preview",
        extra={"rid": getattr(request.state, "request_id", ""), "changed": len(result.changed), "considered": result.considered},
    )
    return _result_out(result, scope)


@router.post("/tags/preview/cancel")
def cancel_preview(
    x_client_id: Optional[str] = Header(None),
    updater: TagUpdater = Depends(get_updater),
):
    return {"cancelled": updater.previews.cancel(x_client_id or "default")}


@router.post("/tags/apply", response_model=BatchResultOut)
def apply_tags(
    payload: TagUpdateIn,
    request: Request,
    updater: TagUpdater = Depends(get_updater),
):
    operation = payload.to_operation()
    scope = payload.scope.to_scope()
    try:
        result = updater.apply(operation, scope, dry_run=payload.dry_run)
    except PreconditionError as e:
        raise _precondition_http_error(e) from e
    except PathError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    logger.info(
        "tags_apply",
        extra={
            "rid": getattr(request.state, "request_id", ""),
            "operation": payload.operation,
            "changed": len(result.changed),
            "considered": result.considered,
            "dry_run": result.dry_run,
        },
    )
    return _result_out(result, scope)
