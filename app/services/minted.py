"""File-backed record of identifiers that have already minted.

A single JSON document `{"fids": [...]}`. Writes are serialized within the
process only.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


def _is_stored_fid(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, str) and value.isdigit())


class MintRegistry:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write([])

    def _write(self, fids: list[int]) -> None:
        self.path.write_text(json.dumps({"fids": fids}, indent=2), encoding="utf-8")

    def load(self) -> list[int]:
        try:
            with self._lock:
                data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            logger.warning("minted_file_unreadable", extra={"path": str(self.path), "error": str(exc)})
            return []
        fids = data.get("fids") if isinstance(data, dict) else None
        if not isinstance(fids, list):
            return []
        return [int(f) for f in fids if _is_stored_fid(f)]

    def contains(self, fid: int) -> bool:
        return fid in self.load()

    def add(self, fid: int) -> bool:
        """Record `fid`; returns False when it was already present."""
        with self._lock:
            self._ensure_file()
            fids = self.load()
            if fid in fids:
                return False
            fids.append(fid)
            self._write(fids)
        logger.info("fid_minted", extra={"minted_fid": fid, "total": len(fids)})
        return True
