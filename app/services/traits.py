"""Deterministic trait selection.

Every identifier maps to exactly one pick per trait category. The only source
of randomness is a SHA-256 digest of the identifier and the configured salt,
consumed through an explicit `DigestRng` so that selections are reproducible
and safe to compute concurrently.

Resolution order matters and is fixed:

    weighted draw -> conflict rules -> requirement rules -> fallback fill
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass

from app.config.loaders import TraitConfigV1, TraitOption, TraitRules
from app.core.exceptions import EmptyCategoryTable, InvalidIdentifier

logger = logging.getLogger(__name__)

_CHUNK_HEX_CHARS = 8
_CHUNK_SCALE = float(16 ** _CHUNK_HEX_CHARS)


def parse_identifier(raw: object) -> int:
    """Parse an identifier strictly, raising `InvalidIdentifier` on anything but a non-negative integer."""
    if isinstance(raw, bool):
        raise InvalidIdentifier(raw)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidIdentifier(raw)
        value = int(raw)
    elif isinstance(raw, (str, bytes)):
        text = raw.decode("ascii", errors="replace") if isinstance(raw, bytes) else raw
        try:
            value = int(text.strip())
        except ValueError as exc:
            raise InvalidIdentifier(raw) from exc
    else:
        raise InvalidIdentifier(raw)
    if value < 0:
        raise InvalidIdentifier(raw)
    return value


def coerce_identifier(raw: object) -> int:
    """Fail-soft identifier parsing: anything invalid becomes 0."""
    try:
        return parse_identifier(raw)
    except InvalidIdentifier as exc:
        logger.warning("identifier_invalid", extra={"raw_identifier": repr(exc.raw)})
        return 0


class DigestRng:
    """Pseudo-random floats in [0, 1) read from a fixed digest.

    Each draw consumes the next 4-byte chunk of the hex digest. When the digest
    is exhausted the cursor wraps to the start.
    """

    def __init__(self, hexdigest: str, cursor: int = 0):
        if len(hexdigest) < _CHUNK_HEX_CHARS:
            raise ValueError("digest too short")
        self.hexdigest = hexdigest
        self.cursor = cursor

    @classmethod
    def from_seed(cls, identifier: int, salt: str) -> "DigestRng":
        digest = hashlib.sha256(f"{identifier}:{salt}".encode("utf-8")).hexdigest()
        return cls(digest)

    def __call__(self) -> float:
        if self.cursor + _CHUNK_HEX_CHARS > len(self.hexdigest):
            self.cursor = 0
        chunk = self.hexdigest[self.cursor : self.cursor + _CHUNK_HEX_CHARS]
        self.cursor += _CHUNK_HEX_CHARS
        return int(chunk, 16) / _CHUNK_SCALE

    def copy(self) -> "DigestRng":
        return DigestRng(self.hexdigest, self.cursor)


def weighted_pick(category: str, options: Sequence[TraitOption], rng: Callable[[], float]) -> TraitOption:
    """Draw one option proportionally to its weight.

    Zero-weight options are skipped while walking the table. If float
    accumulation leaves a positive remainder past the end, the last option
    in the table wins, whatever its weight.
    """
    total = sum(o.weight for o in options)
    if not options or total <= 0:
        raise EmptyCategoryTable(category)

    r = rng() * total
    for option in options:
        if option.weight <= 0:
            continue
        r -= option.weight
        if r <= 0:
            return option
    return options[-1]


@dataclass(frozen=True)
class Selection:
    """Resolved category -> option mapping for a single identifier."""

    identifier: int
    picks: tuple[tuple[str, TraitOption | None], ...]

    def get(self, category: str) -> TraitOption | None:
        for name, option in self.picks:
            if name == category:
                return option
        return None

    def __getitem__(self, category: str) -> TraitOption | None:
        for name, option in self.picks:
            if name == category:
                return option
        raise KeyError(category)

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self.picks)

    def __len__(self) -> int:
        return len(self.picks)

    def items(self) -> tuple[tuple[str, TraitOption | None], ...]:
        return self.picks

    def ids(self) -> dict[str, str | None]:
        return {name: (option.id if option else None) for name, option in self.picks}

    def attributes(self) -> list[dict[str, str]]:
        """Metadata attribute list, skipping categories without a pick."""
        return [
            {"trait_type": name, "value": option.id}
            for name, option in self.picks
            if option is not None
        ]


def _apply_conflicts(
    picks: dict[str, TraitOption | None],
    rules: TraitRules,
    excluded: dict[str, set[str]],
) -> None:
    for rule in rules.conflicts:
        trigger = picks.get(rule.category)
        if trigger is None or trigger.id not in rule.when:
            continue
        for target, denied in rule.deny.items():
            excluded.setdefault(target, set()).update(denied)
            current = picks.get(target)
            if current is not None and current.id in denied:
                picks[target] = None


def _apply_requirements(
    picks: dict[str, TraitOption | None],
    rules: TraitRules,
    restricted: dict[str, set[str]],
) -> None:
    for rule in rules.requirements:
        trigger = picks.get(rule.category)
        if trigger is None or trigger.id not in rule.when:
            continue
        if rule.target not in picks:
            continue
        allowed = set(rule.allowed)
        if rule.target in restricted:
            restricted[rule.target] &= allowed
        else:
            restricted[rule.target] = allowed
        current = picks[rule.target]
        if current is not None and current.id not in allowed:
            picks[rule.target] = None


def _fallback_candidates(
    options: Sequence[TraitOption],
    excluded: set[str],
    allowed: set[str] | None,
) -> Iterable[TraitOption]:
    for option in options:
        if option.id in excluded:
            continue
        if allowed is not None and option.id not in allowed:
            continue
        yield option
    # Tables are never empty here; the first entry is the last resort.
    yield options[0]


def select_traits(
    identifier: object,
    tables: Mapping[str, Sequence[TraitOption]],
    order: Sequence[str],
    rules: TraitRules | None = None,
    *,
    salt: str,
) -> Selection:
    """Resolve one option per category in `order` for `identifier`."""
    fid = coerce_identifier(identifier)
    rules = rules or TraitRules()
    rng = DigestRng.from_seed(fid, salt)

    picks: dict[str, TraitOption | None] = {}
    for category in order:
        options = tables.get(category) or []
        try:
            picks[category] = weighted_pick(category, options, rng)
        except EmptyCategoryTable:
            logger.debug("category_empty", extra={"category": category})
            picks[category] = None

    excluded: dict[str, set[str]] = {}
    restricted: dict[str, set[str]] = {}
    _apply_conflicts(picks, rules, excluded)
    _apply_requirements(picks, rules, restricted)

    for category in order:
        if picks[category] is not None:
            continue
        options = tables.get(category) or []
        if not options:
            continue
        candidates = _fallback_candidates(
            options,
            excluded.get(category, set()),
            restricted.get(category),
        )
        picks[category] = next(iter(candidates))

    return Selection(identifier=fid, picks=tuple((category, picks[category]) for category in order))


def select_for_config(identifier: object, config: TraitConfigV1) -> Selection:
    return select_traits(
        identifier,
        config.tables,
        config.order,
        config.rules,
        salt=config.salt,
    )
