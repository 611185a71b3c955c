from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from app.core.exceptions import ConfigurationError
from app.core.settings import settings


class TraitOption(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    svg_id: str = Field(min_length=1, alias="svgId")
    weight: float = Field(default=1.0, ge=0.0)


class ConflictRule(BaseModel):
    """If `category` resolved to one of `when`, unset each listed category whose pick is denied."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(min_length=1)
    when: list[str] = Field(min_length=1)
    deny: dict[str, list[str]] = Field(min_length=1)


class RequirementRule(BaseModel):
    """If `category` resolved to one of `when`, `target` must be one of `allowed`."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(min_length=1)
    when: list[str] = Field(min_length=1)
    target: str = Field(default="body", min_length=1)
    allowed: list[str] = Field(min_length=1)


class TraitRules(BaseModel):
    conflicts: list[ConflictRule] = Field(default_factory=list)
    requirements: list[RequirementRule] = Field(default_factory=list)


class TraitConfigV1(BaseModel):
    version: str
    salt: str = Field(min_length=1)
    canvas_size: int = Field(default=512, ge=1)
    order: list[str] = Field(min_length=1)
    tables: dict[str, list[TraitOption]]
    defaults: dict[str, str] = Field(default_factory=dict)
    rules: TraitRules = Field(default_factory=TraitRules)

    @model_validator(mode="after")
    def _check_consistency(self) -> "TraitConfigV1":
        if len(set(self.order)) != len(self.order):
            raise ValueError("order contains duplicate categories")
        unknown = [category for category in self.order if category not in self.tables]
        if unknown:
            raise ValueError(f"order names categories without a table: {unknown}")

        for category, options in self.tables.items():
            ids = [o.id for o in options]
            if len(set(ids)) != len(ids):
                raise ValueError(f"duplicate option ids in table '{category}'")

        # Rules on unknown categories are allowed and resolve to no-ops; a rule
        # that empties a known table would break the fallback fill.
        for rule in self.rules.conflicts:
            for target, denied in rule.deny.items():
                table = self.tables.get(target)
                if table and all(o.id in denied for o in table):
                    raise ValueError(f"conflict rule on '{rule.category}' denies every option of '{target}'")

        for rule in self.rules.requirements:
            table = self.tables.get(rule.target)
            if table and not any(o.id in rule.allowed for o in table):
                raise ValueError(f"requirement rule on '{rule.category}' allows no option of '{rule.target}'")

        return self

    def table(self, category: str) -> list[TraitOption]:
        return self.tables.get(category, [])

    def categories(self) -> list[str]:
        return list(self.order)


_CONFIG_DIR = Path(__file__).parent
_ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


def clear_config_cache():
    """Clear all cached config data. Call this to force config reload."""
    load_trait_config_v1.cache_clear()


def traits_config_path() -> Path:
    if settings.traits_config_path:
        return Path(settings.traits_config_path)
    return _CONFIG_DIR / "traits_v1.json"


def fragments_dir() -> Path:
    if settings.fragments_dir:
        return Path(settings.fragments_dir)
    return _ASSETS_DIR / "fragments"


def parse_trait_config(data: dict) -> TraitConfigV1:
    try:
        return TraitConfigV1.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError("invalid trait configuration", detail=str(exc)) from exc


# ============================================================================
# Config Loaders
# ============================================================================


@lru_cache(maxsize=1)
def load_trait_config_v1() -> TraitConfigV1:
    """Load trait tables, paint order and compatibility rules."""
    path = traits_config_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"trait configuration not found: {path}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"trait configuration is not valid JSON: {path}", detail=str(exc)) from exc
    return parse_trait_config(data)
