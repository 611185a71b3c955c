import io
import xml.etree.ElementTree as ET

import pytest
from PIL import Image

from app.api.deps import image_service
from app.core import settings as settings_module
from app.core.exceptions import RenderFailure
from app.main import app


@pytest.mark.anyio
async def test_svg_image(client):
    resp = await client.get("/v1/images/12345.svg")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("image/svg+xml")
    root = ET.fromstring(resp.text)
    assert list(root)[-1].get("id") == "layer-label"


@pytest.mark.anyio
async def test_svg_image_is_stable_across_requests(client):
    first = await client.get("/v1/images/777.svg")
    second = await client.get("/v1/images/777.svg")
    assert first.text == second.text


@pytest.mark.anyio
async def test_png_image_respects_size(client):
    resp = await client.get("/v1/images/12345.png", params={"size": 64})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert Image.open(io.BytesIO(resp.content)).size == (64, 64)


@pytest.mark.anyio
async def test_png_size_is_capped(client, monkeypatch):
    monkeypatch.setattr(settings_module.settings, "max_image_size", 32)
    resp = await client.get("/v1/images/1.png", params={"size": 500})
    assert Image.open(io.BytesIO(resp.content)).size == (32, 32)


@pytest.mark.anyio
async def test_png_rejects_non_positive_size(client):
    resp = await client.get("/v1/images/1.png", params={"size": 0})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_invalid_fid_renders_as_zero(client):
    bad = await client.get("/v1/images/not-a-fid.svg")
    zero = await client.get("/v1/images/0.svg")
    assert bad.status_code == 200
    assert bad.text == zero.text


class _FailingService:
    def render_png(self, fid, size):
        raise RenderFailure("rasterization failed", detail="cairo exploded")


@pytest.mark.anyio
async def test_render_failure_maps_to_500(client):
    app.dependency_overrides[image_service] = lambda: _FailingService()
    try:
        resp = await client.get("/v1/images/1.png")
    finally:
        app.dependency_overrides.pop(image_service, None)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "cairo exploded"
    assert resp.json()["request_id"]


@pytest.mark.anyio
async def test_metadata(client, trait_config):
    resp = await client.get("/v1/metadata/12345")
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "WarpCat #12345"
    assert body["image"] == "http://test/v1/images/12345.png"
    assert [a["trait_type"] for a in body["attributes"]] == trait_config.order


@pytest.mark.anyio
async def test_traits_catalog(client, trait_config):
    resp = await client.get("/v1/traits")
    body = resp.json()
    assert body["version"] == trait_config.version
    assert body["order"] == trait_config.order
    assert "laser" in body["categories"]["eyes"]


@pytest.mark.anyio
async def test_selection_matches_metadata(client):
    selection = (await client.get("/v1/traits/2024")).json()
    metadata = (await client.get("/v1/metadata/2024")).json()
    assert selection["fid"] == 2024
    assert {a["trait_type"]: a["value"] for a in metadata["attributes"]} == selection["traits"]
