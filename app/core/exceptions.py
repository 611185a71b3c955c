"""
Application-level exception types.

Only `RenderFailure` is expected to reach the HTTP layer; the others are
raised at the edges of the trait and fragment code and recovered by their
callers.
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail or message
        super().__init__(message)


class ConfigurationError(AppError):
    """Raised when required configuration is missing or invalid."""


class InvalidIdentifier(AppError):
    """Raised when an identifier cannot be coerced to a non-negative integer."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"invalid identifier: {raw!r}", detail="invalid identifier")
        self.raw = raw


class MissingFragment(AppError):
    """Raised when a trait option's visual fragment is absent from the store."""

    def __init__(self, category: str, asset_id: str) -> None:
        super().__init__(
            f"fragment not found: {category}/{asset_id}",
            detail="fragment not found",
        )
        self.category = category
        self.asset_id = asset_id


class EmptyCategoryTable(AppError):
    """Raised when a weighted draw is attempted over a table with no positive weight."""

    def __init__(self, category: str) -> None:
        super().__init__(f"category has no drawable options: {category}")
        self.category = category


class RenderFailure(AppError):
    """Raised when a vector document cannot be rasterized."""
