"""Tests for the command-line entry point.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import pytest

from randraw import __version__
from randraw.__main__ import main
from randraw.recipes.catalog import ALL_GENERATORS

__all__ = ()


class TestMain:
    """Tests for ``python -m randraw``."""

    def test_prints_version_and_current_cycle(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The current cycle's deterministic recipe is reported."""
        main()
        lines = capsys.readouterr().out.splitlines()

        assert lines[0] == f"randraw version {__version__}"
        assert lines[1].startswith("cycle ")
        assert any(generator in lines[1] for generator in ALL_GENERATORS)
