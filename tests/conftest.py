import pytest
import httpx

from app.api.deps import get_fragment_store
from app.config.loaders import TraitOption, load_trait_config_v1
from app.core import settings as settings_module
from app.main import app


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings_module.settings, "minted_file", str(tmp_path / "data" / "minted.json"))
    monkeypatch.setattr(settings_module.settings, "public_base_url", "http://test")
    yield


@pytest.fixture()
def trait_config():
    return load_trait_config_v1()


@pytest.fixture()
def fragment_store():
    return get_fragment_store()


@pytest.fixture()
def make_option():
    def _make(option_id: str, weight: float = 1.0, svg_id: str | None = None) -> TraitOption:
        return TraitOption(id=option_id, svg_id=svg_id or option_id, weight=weight)

    return _make


@pytest.fixture()
async def client():
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
