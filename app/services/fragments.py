from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from app.core.exceptions import MissingFragment

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIX = ".svg"


class FragmentStore:
    """Read-only `(category, asset_id) -> markup` lookup.

    Built once at startup; lookups never touch the filesystem, so asset ids
    coming from configuration cannot escape the fragment root.
    """

    def __init__(self, fragments: Mapping[tuple[str, str], str]):
        self._fragments = MappingProxyType(dict(fragments))

    @classmethod
    def from_directory(cls, root: str | Path) -> "FragmentStore":
        root = Path(root)
        fragments: dict[tuple[str, str], str] = {}
        if not root.is_dir():
            logger.warning("fragment_root_missing", extra={"path": str(root)})
            return cls(fragments)

        for category_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            for path in sorted(category_dir.glob(f"*{FRAGMENT_SUFFIX}")):
                fragments[(category_dir.name, path.stem)] = path.read_text(encoding="utf-8")

        logger.info("fragments_loaded", extra={"path": str(root), "count": len(fragments)})
        return cls(fragments)

    def get(self, category: str, asset_id: str) -> str | None:
        return self._fragments.get((category, asset_id))

    def require(self, category: str, asset_id: str) -> str:
        markup = self.get(category, asset_id)
        if markup is None:
            raise MissingFragment(category, asset_id)
        return markup

    def without_category(self, category: str) -> "FragmentStore":
        return FragmentStore({key: value for key, value in self._fragments.items() if key[0] != category})

    def categories(self) -> list[str]:
        return sorted({category for category, _ in self._fragments})

    def __contains__(self, key: object) -> bool:
        return key in self._fragments

    def __len__(self) -> int:
        return len(self._fragments)
