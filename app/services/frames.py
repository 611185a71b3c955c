"""Farcaster frame pages, placeholder cards, transaction stubs and the Mini App manifest."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from app.core.settings import Settings
from app.services.traits import coerce_identifier

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

FRAME_ASPECT_RATIO = "1:1"
CARD_WIDTH = 1200
CARD_HEIGHT = 630
PREVIEW_COLORS = ["ff66cc", "66ccff", "ccff66", "ffd166", "cdb4db"]

# Mint ABI for the stub contract: `mint()` payable.
MINT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "mint",
        "inputs": [],
        "outputs": [],
        "stateMutability": "payable",
    }
]
MINT_CALLDATA = "0x1249c58b"


@dataclass(frozen=True)
class FrameButton:
    label: str
    action: str = "post"
    target: str | None = None


@lru_cache(maxsize=1)
def _jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        undefined=StrictUndefined,
        autoescape=select_autoescape(["html", "svg", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def extract_fid(payload: Mapping[str, Any] | None) -> int:
    """Pull the caller's fid out of a frame POST body (form or JSON); 0 when absent."""
    if not payload:
        return 0
    raw = payload.get("untrustedData[fid]") or payload.get("fid")
    if raw is None:
        untrusted = payload.get("untrustedData")
        if isinstance(untrusted, Mapping):
            raw = untrusted.get("fid")
    if raw is None:
        return 0
    return coerce_identifier(raw)


def render_frame(
    *,
    title: str,
    image_url: str,
    buttons: list[FrameButton],
    post_url: str | None,
    heading: str,
    body_text: str | None = None,
) -> str:
    template = _jinja_env().get_template("frame.html.j2")
    return template.render(
        title=title,
        image_url=image_url,
        aspect_ratio=FRAME_ASPECT_RATIO,
        buttons=buttons,
        post_url=post_url,
        heading=heading,
        body_text=body_text,
    )


def landing_frame(settings: Settings) -> str:
    base = settings.base_url
    return render_frame(
        title=f"Mint your {settings.app_name}",
        image_url=f"{base}/v1/static/intro.png",
        buttons=[FrameButton("Preview")],
        post_url=f"{base}/v1/frame/preview",
        heading=f"{settings.app_name} Frame",
        body_text=f"Click Preview to see your {settings.app_name}",
    )


def preview_frame(settings: Settings, fid: int, already_minted: bool) -> str:
    base = settings.base_url
    if already_minted:
        buttons = [FrameButton("Already Minted — View", action="link", target=f"{base}/v1/metadata/{fid}")]
        post_url = None
    else:
        buttons = [FrameButton("Mint", action="tx", target=f"{base}/v1/frame/tx?fid={fid}")]
        post_url = f"{base}/v1/frame/mint"
    return render_frame(
        title=f"Your {settings.app_name} Preview",
        image_url=f"{base}/v1/images/{fid}.png",
        buttons=buttons,
        post_url=post_url,
        heading=f"{settings.app_name} Preview (FID: {fid})",
    )


def mint_result_frame(settings: Settings, fid: int, already_minted: bool) -> str:
    base = settings.base_url
    if already_minted:
        title = "Already Minted"
        image = f"{base}/v1/static/already.png"
    else:
        title = f"{settings.app_name} Minted"
        image = f"{base}/v1/static/thanks.png"
    return render_frame(
        title=title,
        image_url=image,
        buttons=[FrameButton("Back")],
        post_url=f"{base}/v1/frame",
        heading=f"{title} (FID: {fid})",
    )


def dev_page(settings: Settings, sample_fid: int = 12345) -> str:
    template = _jinja_env().get_template("dev.html.j2")
    return template.render(app_name=settings.app_name, base_url=settings.base_url, sample_fid=sample_fid)


def placeholder_card(filename: str, app_name: str) -> str | None:
    """SVG card for the static frame images; None for unknown names."""
    if filename.startswith("preview_"):
        digits = re.search(r"\d+", filename)
        idx = int(digits.group(0) if digits else 0) % len(PREVIEW_COLORS)
        fill, ink, label = PREVIEW_COLORS[idx], "111111", f"{app_name} Preview"
    elif filename == "intro.png":
        fill, ink, label = "2b2d42", "ffffff", f"{app_name} — Tap to Preview"
    elif filename == "thanks.png":
        fill, ink, label = "2b2d42", "ffffff", "Minted!"
    elif filename == "already.png":
        fill, ink, label = "2b2d42", "ffffff", "Already Minted"
    else:
        return None

    template = _jinja_env().get_template("card.svg.j2")
    return template.render(width=CARD_WIDTH, height=CARD_HEIGHT, fill=fill, ink=ink, label=label)


def transaction_payload(settings: Settings) -> dict[str, Any]:
    """Transaction stub for the client wallet; nothing is submitted server-side."""
    return {
        "chainId": settings.chain_id,
        "method": "eth_sendTransaction",
        "params": {
            "abi": MINT_ABI,
            "to": settings.mint_contract_address,
            "data": MINT_CALLDATA,
            "value": settings.mint_price_wei,
        },
        "attribution": False,
    }


def mini_app_manifest(settings: Settings) -> dict[str, Any]:
    base = settings.base_url
    manifest: dict[str, Any] = {
        "frame": {
            "version": "1",
            "name": settings.app_name,
            "iconUrl": f"{base}/v1/static/intro.png",
            "homeUrl": f"{base}/v1/frame",
            "imageUrl": f"{base}/v1/static/intro.png",
            "buttonTitle": "Preview",
            "splashImageUrl": f"{base}/v1/static/intro.png",
            "splashBackgroundColor": "#2b2d42",
        }
    }
    if settings.farcaster_header and settings.farcaster_payload and settings.farcaster_signature:
        manifest["accountAssociation"] = {
            "header": settings.farcaster_header,
            "payload": settings.farcaster_payload,
            "signature": settings.farcaster_signature,
        }
    return manifest
