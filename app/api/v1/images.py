import asyncio
import logging

from fastapi import APIRouter, Query
from fastapi.responses import Response

from app.api.deps import ImageServiceDep
from app.core.exceptions import RenderFailure
from app.core.metrics import record_render_failure
from app.core.request_context import log_context
from app.core.settings import settings
from app.services.traits import coerce_identifier


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])

_CACHE_HEADERS = {"cache-control": "public, max-age=300"}


@router.get("/{fid}.svg")
def image_svg(fid: str, service=ImageServiceDep):
    resolved = coerce_identifier(fid)
    with log_context(fid=resolved):
        svg = service.render_svg(resolved)
    return Response(content=svg, media_type="image/svg+xml", headers=_CACHE_HEADERS)


@router.get("/{fid}.png")
async def image_png(
    fid: str,
    size: int | None = Query(default=None, ge=1),
    service=ImageServiceDep,
):
    resolved = coerce_identifier(fid)
    target = min(size or settings.image_size, settings.max_image_size)
    with log_context(fid=resolved):
        try:
            png = await asyncio.to_thread(service.render_png, resolved, target)
        except RenderFailure as exc:
            record_render_failure()
            logger.error("render_failed", extra={"size": target, "error": exc.detail})
            raise
    return Response(content=png, media_type="image/png", headers=_CACHE_HEADERS)
