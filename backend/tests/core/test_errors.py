"""Tests for the randraw exception hierarchy.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import pytest

from randraw.core.exceptions import (
    ClockSyncError,
    InvalidCanvasError,
    MalformedPayloadError,
    PlanningError,
    RandrawError,
    ServiceError,
    StoreError,
    StoreUnavailableError,
    UnknownGeneratorError,
    classify_error,
)

__all__ = ()


class TestRandrawError:
    """Tests for the base RandrawError."""

    def test_basic_creation(self) -> None:
        """Error should carry message, empty context and be recoverable."""
        error = RandrawError("Test error")

        assert str(error) == "Test error"
        assert error.context == {}
        assert error.recoverable is True

    def test_inheritance(self) -> None:
        """Should inherit from Exception."""
        assert isinstance(RandrawError("x"), Exception)


class TestPlanningErrors:
    """Tests for planning errors."""

    def test_unknown_generator_is_fatal(self) -> None:
        """Unknown generators are programming errors, not recoverable ones."""
        error = UnknownGeneratorError("volcano")

        assert "volcano" in str(error)
        assert error.generator_id == "volcano"
        assert error.recoverable is False
        assert isinstance(error, PlanningError)

    def test_invalid_canvas(self) -> None:
        """Canvas errors record the offending size."""
        error = InvalidCanvasError(0, 480)

        assert error.context == {"width": 0, "height": 480}
        assert "0x480" in str(error)


class TestStoreAndServiceErrors:
    """Tests for storage and service errors."""

    def test_store_unavailable(self) -> None:
        """Store errors name the failed operation."""
        error = StoreUnavailableError("get", "timeout")

        assert error.operation == "get"
        assert isinstance(error, StoreError)

    def test_malformed_payload(self) -> None:
        """Malformed payload errors name the key."""
        error = MalformedPayloadError("randraw:bandit", "not JSON")

        assert error.key == "randraw:bandit"

    def test_clock_sync_is_service_error(self) -> None:
        """Clock errors are service errors for the time service."""
        error = ClockSyncError("bad status", status_code=502)

        assert isinstance(error, ServiceError)
        assert error.service == "time"
        assert error.status_code == 502


class TestClassifyError:
    """Tests for error classification."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (UnknownGeneratorError("x"), ("fatal", "abort")),
            (MalformedPayloadError("k", "bad"), ("recoverable", "skip")),
            (StoreUnavailableError("set", "down"), ("transient", "fallback")),
            (ServiceError("recipe", "down"), ("transient", "fallback")),
            (InvalidCanvasError(0, 0), ("recoverable", "fallback")),
            (RandrawError("fatal", recoverable=False), ("fatal", "abort")),
            (RuntimeError("other"), ("transient", "retry")),
        ],
    )
    def test_classification(self, exc: Exception, expected: tuple[str, str]) -> None:
        """Each error maps to a category and recovery strategy."""
        assert classify_error(exc) == expected
