from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

IMAGE_RENDER_DURATION = Histogram(
    "warpcat_image_render_duration_seconds",
    "Duration (seconds) of composite image rendering by output format.",
    ["format"],
    registry=registry,
)

RENDER_FAILURES = Counter(
    "warpcat_render_failures_total",
    "Number of rasterization failures.",
    registry=registry,
)

FRAGMENT_MISSES = Counter(
    "warpcat_fragment_misses_total",
    "Layers composed without their selected fragment, by category and outcome.",
    ["category", "outcome"],
    registry=registry,
)

FRAME_ACTIONS = Counter(
    "warpcat_frame_actions_total",
    "Frame interactions by action.",
    ["action"],
    registry=registry,
)

MINTS_TOTAL = Counter(
    "warpcat_mints_total",
    "Mint requests partitioned by result.",
    ["result"],
    registry=registry,
)


@contextmanager
def track_render(fmt: str):
    with IMAGE_RENDER_DURATION.labels(format=fmt).time():
        yield


def record_render_failure() -> None:
    RENDER_FAILURES.inc()


def record_fragment_miss(category: str, outcome: str) -> None:
    FRAGMENT_MISSES.labels(category=category, outcome=outcome).inc()


def record_frame_action(action: str) -> None:
    FRAME_ACTIONS.labels(action=action).inc()


def record_mint(already_minted: bool) -> None:
    MINTS_TOTAL.labels(result="already_minted" if already_minted else "minted").inc()


def get_metrics_payload() -> bytes:
    return generate_latest(registry)
