from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentnet.cache import SnapshotCache
from agentnet.config import Settings
from agentnet.service import build_snapshot_cache

_LOGGER = logging.getLogger("agentnet.api")
_LOGGER.setLevel(logging.INFO)

_SETTINGS = Settings.from_env()
_SNAPSHOT_CACHE: Optional[SnapshotCache] = None

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
_CLIENT_CACHE_CONTROL = "public, max-age=60"


def _snapshot_cache() -> SnapshotCache:
    global _SNAPSHOT_CACHE
    if _SNAPSHOT_CACHE is None:
        _LOGGER.info(
            "snapshot cache init ddb_table=%s ttl=%s",
            _SETTINGS.ddb_table,
            _SETTINGS.cache_ttl,
        )
        _SNAPSHOT_CACHE = build_snapshot_cache(_SETTINGS)
    return _SNAPSHOT_CACHE


app = FastAPI(
    title="Agentnet API",
    version="0.1",
    root_path=_SETTINGS.root_path,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    redirect_slashes=False,
)


@app.middleware("http")
async def log_http_request(request: Request, call_next):
    _LOGGER.info(
        "http request method=%s path=%s client=%s",
        request.method,
        request.url.path,
        request.client.host if request.client else "unknown",
    )
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        response = await call_next(request)
    response.headers.update(_CORS_HEADERS)
    _LOGGER.info("http response status=%s path=%s", response.status_code, request.url.path)
    return response


@app.exception_handler(StarletteHTTPException)
async def not_found(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return PlainTextResponse("not found", status_code=404)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.on_event("startup")
def _log_startup() -> None:
    _LOGGER.info(
        "startup rpc_configured=%s registry=%s github_token=%s ddb_table=%s cache_ttl=%s known_tokens=%s",
        bool(_SETTINGS.rpc_url),
        _SETTINGS.registry_address,
        bool(_SETTINGS.github_token),
        _SETTINGS.ddb_table,
        _SETTINGS.cache_ttl,
        len(_SETTINGS.known_tokens),
    )


@app.get("/")
@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/network")
def network() -> Response:
    try:
        cached = _snapshot_cache().get_or_build()
    except Exception as exc:
        _LOGGER.exception("network snapshot failed")
        return JSONResponse({"error": str(exc) or "unknown error"}, status_code=500)
    _LOGGER.info("network served cache_hit=%s bytes=%s", cached.hit, len(cached.body))
    return Response(
        content=cached.body,
        media_type="application/json",
        headers={"Cache-Control": _CLIENT_CACHE_CONTROL},
    )


_MANGUM_HANDLER = Mangum(app)


def handler(event, context):
    request_context = event.get("requestContext", {}) if isinstance(event, dict) else {}
    http_ctx = request_context.get("http", {}) if isinstance(request_context, dict) else {}
    _LOGGER.info(
        "lambda event method=%s path=%s stage=%s source=%s",
        http_ctx.get("method"),
        event.get("rawPath") if isinstance(event, dict) else None,
        request_context.get("stage"),
        http_ctx.get("sourceIp"),
    )
    return _MANGUM_HANDLER(event, context)
