import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, Response

from app.api.deps import MintRegistryDep
from app.api.v1.schemas import TransactionRead
from app.core.metrics import record_frame_action, record_mint
from app.core.request_context import log_context
from app.core.settings import settings
from app.services import frames
from app.services.traits import coerce_identifier


logger = logging.getLogger(__name__)

router = APIRouter(tags=["frames"])

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_frame_payload(request: Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            logger.warning("frame_payload_invalid_json")
            return {}
        return data if isinstance(data, dict) else {}
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return dict(form)
    return {}


@router.get("/frame", response_class=HTMLResponse)
def landing():
    record_frame_action("landing")
    return HTMLResponse(frames.landing_frame(settings))


@router.post("/frame/preview", response_class=HTMLResponse)
async def preview(request: Request, registry=MintRegistryDep):
    fid = frames.extract_fid(await _read_frame_payload(request))
    with log_context(fid=fid):
        record_frame_action("preview")
        already = await asyncio.to_thread(registry.contains, fid)
        logger.info("frame_preview", extra={"already_minted": already})
        return HTMLResponse(frames.preview_frame(settings, fid, already))


@router.api_route("/frame/tx", methods=["GET", "POST"], response_model=TransactionRead)
async def transaction(request: Request, fid: str | None = None):
    if fid is None:
        resolved = frames.extract_fid(await _read_frame_payload(request))
    else:
        resolved = coerce_identifier(fid)
    with log_context(fid=resolved):
        record_frame_action("tx")
        logger.info("frame_tx_requested")
        return frames.transaction_payload(settings)


@router.post("/frame/mint", response_class=HTMLResponse)
async def mint(request: Request, registry=MintRegistryDep):
    fid = frames.extract_fid(await _read_frame_payload(request))
    with log_context(fid=fid):
        record_frame_action("mint")
        already = not await asyncio.to_thread(registry.add, fid)
        record_mint(already)
        logger.info("frame_mint", extra={"already_minted": already})
        return HTMLResponse(frames.mint_result_frame(settings, fid, already))


@router.get("/static/{filename}")
def static_card(filename: str):
    svg = frames.placeholder_card(filename, settings.app_name)
    if svg is None:
        raise HTTPException(status_code=404, detail="not found")
    return Response(content=svg, media_type="image/svg+xml")


@router.get("/dev", response_class=HTMLResponse)
def dev():
    return HTMLResponse(frames.dev_page(settings))
