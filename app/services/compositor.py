"""Layered SVG composition and PNG rasterization for trait selections."""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Mapping, Sequence
from xml.sax.saxutils import escape, quoteattr

import cairosvg
from PIL import Image

from app.config.loaders import TraitOption
from app.core.exceptions import MissingFragment, RenderFailure
from app.core.metrics import record_fragment_miss
from app.services.fragments import FragmentStore
from app.services.traits import Selection, coerce_identifier

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
DEFAULT_CANVAS_SIZE = 512

_XML_DECL_RE = re.compile(r"<\?xml[^>]*\?>", re.IGNORECASE)
_DOCTYPE_RE = re.compile(r"<!DOCTYPE[^>\[]*(\[.*?\])?\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_META_BLOCK_RE = re.compile(r"<(metadata|title|desc)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_META_EMPTY_RE = re.compile(r"<(metadata|title|desc)\b[^>]*/>", re.IGNORECASE)
_SVG_OPEN_RE = re.compile(r"^\s*<svg\b[^>]*>", re.IGNORECASE)
_SVG_CLOSE_RE = re.compile(r"</svg\s*>\s*$", re.IGNORECASE)

_DOCUMENT_TEMPLATE = (
    '<svg xmlns="{ns}" width="{size}" height="{size}" viewBox="0 0 {size} {size}">\n'
    '<rect id="canvas" width="{size}" height="{size}" fill="#ffffff"/>\n'
    "{layers}\n"
    "</svg>\n"
)


def strip_fragment(markup: str) -> str:
    """Reduce a standalone SVG file to the inner markup of its root element."""
    text = _XML_DECL_RE.sub("", markup)
    text = _DOCTYPE_RE.sub("", text)
    text = _COMMENT_RE.sub("", text)
    text = _META_BLOCK_RE.sub("", text)
    text = _META_EMPTY_RE.sub("", text)

    opening = _SVG_OPEN_RE.match(text)
    if opening:
        if opening.group(0).rstrip().endswith("/>"):
            return ""
        text = text[opening.end():]
        text = _SVG_CLOSE_RE.sub("", text)
    return text.strip()


def _resolve_fragment(
    category: str,
    option: TraitOption,
    store: FragmentStore,
    defaults: Mapping[str, str],
) -> str | None:
    attempts = [option.svg_id]
    default_asset = defaults.get(category)
    if default_asset and default_asset != option.svg_id:
        attempts.append(default_asset)

    for asset_id in attempts:
        try:
            markup = store.require(category, asset_id)
        except MissingFragment:
            continue
        if asset_id != option.svg_id:
            logger.warning(
                "fragment_missing",
                extra={"category": category, "asset_id": option.svg_id, "fallback": asset_id},
            )
            record_fragment_miss(category, "default")
        return markup

    logger.warning(
        "fragment_missing",
        extra={"category": category, "asset_id": option.svg_id, "fallback": None},
    )
    record_fragment_miss(category, "skipped")
    return None


def _label_layer(fid: int, size: int) -> str:
    font_size = max(size // 16, 8)
    inset = max(size // 32, 4)
    return (
        '<g id="layer-label">'
        f'<text x="{size - inset}" y="{size - inset}" text-anchor="end" '
        f'font-family="sans-serif" font-weight="bold" font-size="{font_size}" '
        'fill="#ffffff" stroke="#111111" stroke-width="1">'
        f"#{escape(str(fid))}</text></g>"
    )


def compose(
    identifier: object,
    selection: Selection,
    order: Sequence[str],
    store: FragmentStore,
    *,
    defaults: Mapping[str, str] | None = None,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
) -> str:
    """Assemble the selected fragments into one SVG document.

    Layers follow `order`, so later categories paint over earlier ones. The
    identifier label is always the topmost layer. Missing fragments fall back
    to the category default, or the layer is left out.
    """
    fid = coerce_identifier(identifier)
    defaults = defaults or {}

    layers: list[str] = []
    for category in order:
        option = selection.get(category)
        if option is None:
            continue
        markup = _resolve_fragment(category, option, store, defaults)
        if markup is None:
            continue
        layers.append(
            f"<g id={quoteattr('layer-' + category)} data-trait={quoteattr(option.id)}>"
            f"{strip_fragment(markup)}</g>"
        )
    layers.append(_label_layer(fid, canvas_size))

    return _DOCUMENT_TEMPLATE.format(ns=SVG_NS, size=canvas_size, layers="\n".join(layers))


def resize_and_crop(image: Image.Image, width: int, height: int) -> Image.Image:
    """Resize an image to exactly width x height, center-cropping the overflow."""
    src_w, src_h = image.size
    target_ratio = width / height
    src_ratio = src_w / src_h

    if src_ratio > target_ratio:
        new_h = height
        new_w = max(width, round(src_w * (height / src_h)))
    else:
        new_w = width
        new_h = max(height, round(src_h * (width / src_w)))

    if (new_w, new_h) != (src_w, src_h):
        image = image.resize((new_w, new_h), Image.Resampling.LANCZOS)

    left = (new_w - width) // 2
    top = (new_h - height) // 2
    return image.crop((left, top, left + width, top + height))


def rasterize(svg: str, width: int, height: int) -> bytes:
    """Render an SVG document to PNG bytes of exactly width x height."""
    if width <= 0 or height <= 0:
        raise ValueError("raster size must be positive")

    try:
        png = cairosvg.svg2png(bytestring=svg.encode("utf-8"), output_width=max(width, height))
        image = Image.open(io.BytesIO(png))
        image.load()
    except Exception as exc:  # noqa: BLE001
        raise RenderFailure("rasterization failed", detail=str(exc)) from exc

    image = resize_and_crop(image.convert("RGBA"), width, height)
    buffer = io.BytesIO()
    image.save(buffer, "PNG")
    return buffer.getvalue()
