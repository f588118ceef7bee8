"""Tests for duration parsing."""

from __future__ import annotations

import pytest

from cloudsweep.errors import ConfigError
from cloudsweep.utils.duration import parse_duration


class TestParseDuration:
    """Test suite for parse_duration."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("30s", 30.0),
            ("5m", 300.0),
            ("1.5h", 5400.0),
            ("1h30m", 5400.0),
            ("250ms", 0.25),
            (" 10s ", 10.0),
            ("0s", 0.0),
        ],
    )
    def test_valid(self, value: str, expected: float) -> None:
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "  ", "-1s", "-5m"])
    def test_no_limit(self, value) -> None:
        assert parse_duration(value) is None

    @pytest.mark.parametrize("value", ["10", "abc", "5 minutes", "1h-30m", "s"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ConfigError, match="Invalid duration"):
            parse_duration(value)
