from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from app.api.deps import get_fragment_store
from app.api.v1.router import api_router
from app.config.loaders import load_trait_config_v1
from app.core.exceptions import RenderFailure
from app.core.logging import configure_logging
from app.core.metrics import get_metrics_payload
from app.core.request_context import reset_request_id, set_request_id
from app.core.settings import settings
from app.services.frames import mini_app_manifest


logger = logging.getLogger("app")


def _is_image_request(method: str, path: str) -> bool:
    return method == "GET" and (path.startswith("/v1/images/") or path.startswith("/v1/static/"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_file)

    # Static configuration is read once and shared read-only by every request.
    config = load_trait_config_v1()
    store = get_fragment_store()
    logger.info(
        "startup",
        extra={
            "base_url": settings.base_url,
            "trait_config_version": config.version,
            "categories": len(config.order),
            "fragments": len(store),
        },
    )
    yield


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                },
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        request_logger = logger.debug if _is_image_request(request.method, request.url.path) else logger.info
        request_logger(
            "request_complete",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers["x-request-id"] = request_id
        return response
    finally:
        reset_request_id(token)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "request_id": request_id},
    )


@app.exception_handler(KeyError)
async def key_error_handler(request: Request, exc: KeyError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=400,
        content={"detail": f"{exc}", "request_id": request_id},
    )


@app.exception_handler(RenderFailure)
async def render_failure_handler(request: Request, exc: RenderFailure):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=500,
        content={"detail": exc.detail, "request_id": request_id},
    )


@app.get("/health")
def health():
    return {"status": "ok", "base_url": settings.base_url}


@app.get("/metrics")
def metrics_endpoint():
    return PlainTextResponse(get_metrics_payload(), media_type="text/plain; version=0.0.4; charset=utf-8")


@app.get("/.well-known/farcaster.json")
def farcaster_manifest():
    return mini_app_manifest(settings)


app.include_router(api_router)
