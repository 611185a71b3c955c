from __future__ import annotations

from app.config.loaders import TraitConfigV1
from app.core.metrics import track_render
from app.services.compositor import compose, rasterize
from app.services.fragments import FragmentStore
from app.services.traits import Selection, select_for_config


class ImageService:
    def __init__(self, config: TraitConfigV1, store: FragmentStore):
        self.config = config
        self.store = store

    def select(self, fid: int) -> Selection:
        return select_for_config(fid, self.config)

    def render_svg(self, fid: int) -> str:
        with track_render("svg"):
            return compose(
                fid,
                self.select(fid),
                self.config.order,
                self.store,
                defaults=self.config.defaults,
                canvas_size=self.config.canvas_size,
            )

    def render_png(self, fid: int, size: int) -> bytes:
        svg = self.render_svg(fid)
        with track_render("png"):
            return rasterize(svg, size, size)

    def token_metadata(self, fid: int, base_url: str, app_name: str) -> dict:
        selection = self.select(fid)
        return {
            "name": f"{app_name} #{fid}",
            "description": f"A {app_name} generated for Farcaster ID {fid}.",
            "image": f"{base_url}/v1/images/{fid}.png",
            "attributes": selection.attributes(),
        }
