from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tagsmith_api.config import Settings
from tagsmith_api.dependencies import get_settings
from tagsmith_api.interface.api.routes import router

# Paths reachable without a bearer token.
PUBLIC_PATHS = frozenset({"/health"})


def _authorized(settings: Settings, request: Request) -> bool:
    if settings.api_auth_mode != "bearer" or request.url.path in PUBLIC_PATHS:
        return True
    token = settings.api_auth_token or ""
    return bool(token) and request.headers.get("authorization") == f"Bearer {token}"


def create_app() -> FastAPI:
    app = FastAPI(title="Tagsmith API", version="0.1.0")

    settings = get_settings()
    logger = logging.getLogger("tagsmith.api")
    if settings.debug:
        logging.getLogger("tagsmith").setLevel(logging.DEBUG)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        # Previews from the same client supersede each other, so log who sent them.
        client_id = request.headers.get("x-client-id")
        echo = {"X-Request-ID": request_id}
        if client_id:
            echo["X-Client-ID"] = client_id
        start = time.perf_counter()

        if not _authorized(settings, request):
            return JSONResponse(status_code=401, content={"detail": "unauthorized"}, headers=echo)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_error",
                extra={"rid": request_id, "client": client_id, "path": request.url.path},
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "internal_error", "request_id": request_id},
                headers=echo,
            )

        extra = {
            "rid": request_id,
            "client": client_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "ms": (time.perf_counter() - start) * 1000.0,
        }
        if settings.debug:
            extra["query"] = request.url.query
        logger.info("request", extra=extra)
        response.headers.update(echo)
        return response

    app.include_router(router)
    return app


app = create_app()
