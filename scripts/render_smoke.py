"""Simple smoke harness to render trait composites for quick visual checks.

Usage: python scripts/render_smoke.py [--start 1] [--count 12] [--png]
Writes files into storage/media/smoke/
"""
import argparse
from pathlib import Path

from app.api.deps import get_fragment_store
from app.config.loaders import load_trait_config_v1
from app.services.images import ImageService

OUT_DIR = Path(__file__).resolve().parent.parent / "storage" / "media" / "smoke"


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", type=int, default=1)
    parser.add_argument("--count", type=int, default=12)
    parser.add_argument("--png", action="store_true", help="also rasterize each composite")
    parser.add_argument("--size", type=int, default=512)
    args = parser.parse_args()

    OUT_DIR.mkdir(parents=True, exist_ok=True)
    service = ImageService(load_trait_config_v1(), get_fragment_store())
    for fid in range(args.start, args.start + args.count):
        traits = ", ".join(f"{k}={v}" for k, v in service.select(fid).ids().items())
        out = OUT_DIR / f"{fid}.svg"
        out.write_text(service.render_svg(fid), encoding="utf-8")
        print(f"Wrote {out} [{traits}]")
        if args.png:
            png_out = OUT_DIR / f"{fid}.png"
            png_out.write_bytes(service.render_png(fid, args.size))
            print(f"Wrote {png_out}")


if __name__ == "__main__":
    main()
