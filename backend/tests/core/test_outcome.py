"""Tests for best-effort outcomes.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from randraw.core.outcome import Ok, Unavailable, value_or

__all__ = ()


class TestOutcome:
    """Tests for Ok and Unavailable."""

    def test_ok_flags(self) -> None:
        """Ok reports success and carries its value."""
        outcome = Ok(3)

        assert outcome.ok is True
        assert outcome.value == 3

    def test_unavailable_flags(self) -> None:
        """Unavailable reports failure and carries a reason."""
        outcome = Unavailable("store disabled")

        assert outcome.ok is False
        assert outcome.reason == "store disabled"

    def test_value_or(self) -> None:
        """value_or unwraps Ok and substitutes the default otherwise."""
        assert value_or(Ok(None), 5) is None
        assert value_or(Unavailable("down"), 5) == 5
