import asyncio
import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.api.deps import mint_registry
from app.services.minted import MintRegistry


def test_file_created_on_first_add(tmp_path):
    path = tmp_path / "data" / "minted.json"
    registry = MintRegistry(path)
    assert registry.load() == []
    assert not path.exists()

    assert registry.add(42) is True
    assert json.loads(path.read_text(encoding="utf-8")) == {"fids": [42]}


def test_add_is_idempotent(tmp_path):
    registry = MintRegistry(tmp_path / "minted.json")
    assert registry.add(7) is True
    assert registry.add(7) is False
    assert registry.load() == [7]
    assert registry.contains(7)
    assert not registry.contains(8)


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "minted.json"
    path.write_text("{not json", encoding="utf-8")
    registry = MintRegistry(path)
    assert registry.load() == []
    assert registry.add(1) is True
    assert registry.load() == [1]


def test_string_fids_are_normalized(tmp_path):
    path = tmp_path / "minted.json"
    path.write_text(json.dumps({"fids": ["12", 13, "x"]}), encoding="utf-8")
    assert MintRegistry(path).load() == [12, 13]


def test_unexpected_shape_reads_as_empty(tmp_path):
    path = tmp_path / "minted.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert MintRegistry(path).load() == []


@pytest.mark.parametrize("fids", [None, "12", {"a": 1}, 5])
def test_non_list_fids_read_as_empty(tmp_path, fids):
    path = tmp_path / "minted.json"
    path.write_text(json.dumps({"fids": fids}), encoding="utf-8")
    registry = MintRegistry(path)
    assert registry.load() == []
    assert not registry.contains(12)


def test_boolean_entries_are_not_fids(tmp_path):
    path = tmp_path / "minted.json"
    path.write_text(json.dumps({"fids": [True, False, 3]}), encoding="utf-8")
    assert MintRegistry(path).load() == [3]


def test_dependency_shares_one_registry_per_file():
    first = mint_registry()
    second = mint_registry()
    assert first is second
    assert first._lock is second._lock


def test_concurrent_adds_keep_every_fid(tmp_path):
    registry = MintRegistry(tmp_path / "minted.json")
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(registry.add, range(40)))
    assert all(results)
    assert sorted(registry.load()) == list(range(40))


@pytest.mark.anyio
async def test_concurrent_mint_requests_keep_every_fid(client):
    await asyncio.gather(*(client.post("/v1/frame/mint", data={"fid": str(fid)}) for fid in range(1, 21)))
    assert sorted(mint_registry().load()) == list(range(1, 21))
