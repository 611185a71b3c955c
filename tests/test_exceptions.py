"""Tests for application-level exception types."""

import pytest

from app.core.exceptions import (
    AppError,
    ConfigurationError,
    EmptyCategoryTable,
    InvalidIdentifier,
    MissingFragment,
    RenderFailure,
)


class TestAppError:
    def test_message_and_detail(self):
        err = AppError("something broke", detail="user-friendly msg")
        assert str(err) == "something broke"
        assert err.detail == "user-friendly msg"

    def test_detail_defaults_to_message(self):
        err = AppError("fallback message")
        assert err.detail == "fallback message"

    def test_inherits_exception(self):
        assert issubclass(AppError, Exception)


class TestDomainExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [ConfigurationError, InvalidIdentifier, MissingFragment, EmptyCategoryTable, RenderFailure],
    )
    def test_inherits_app_error(self, exc_class):
        assert issubclass(exc_class, AppError)

    def test_invalid_identifier_keeps_raw_value(self):
        err = InvalidIdentifier("abc")
        assert err.raw == "abc"
        assert "'abc'" in str(err)
        assert err.detail == "invalid identifier"

    def test_missing_fragment_names_key(self):
        err = MissingFragment("eyes", "laser")
        assert err.category == "eyes"
        assert err.asset_id == "laser"
        assert "eyes/laser" in str(err)

    def test_empty_category_table(self):
        err = EmptyCategoryTable("aura")
        assert err.category == "aura"

    def test_render_failure_detail(self):
        err = RenderFailure("rasterization failed", detail="bad xml")
        assert err.detail == "bad xml"
