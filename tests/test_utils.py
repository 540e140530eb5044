"""Tests for _utils.py — pure helpers."""

import pytest

from kaiten_cli._utils import (
    _as_list,
    _first_present,
    _format_timestamp,
    _require,
    _timestamp_sort_key,
)
from kaiten_cli.exceptions import CliError


class TestFirstPresent:
    def test_first_truthy_wins(self):
        assert _first_present({"a": "", "b": "x", "c": "y"}, ("a", "b", "c")) == "x"

    def test_default(self):
        assert _first_present({"a": None}, ("a",), "dflt") == "dflt"

    def test_non_dict(self):
        assert _first_present(None, ("a",), 1) == 1


class TestAsList:
    def test_list_passthrough(self):
        assert _as_list([1]) == [1]

    def test_non_list(self):
        assert _as_list(None) == []
        assert _as_list({"a": 1}) == []


class TestRequire:
    def test_blank_string(self):
        with pytest.raises(CliError, match="name is required"):
            _require("  ", "name")

    def test_none(self):
        with pytest.raises(CliError):
            _require(None, "card_id")

    def test_value_returned(self):
        assert _require(5, "x") == 5


class TestTimestamps:
    def test_format_z_suffix(self):
        assert _format_timestamp("2024-01-02T03:04:05Z") == "2024-01-02 03:04:05"

    def test_format_fractional(self):
        assert _format_timestamp("2024-01-02T03:04:05.123Z") == "2024-01-02 03:04:05"

    def test_unparseable_is_raw(self):
        assert _format_timestamp("yesterday") == "yesterday"

    def test_empty(self):
        assert _format_timestamp(None) == ""

    def test_sort_key_orders(self):
        older = _timestamp_sort_key("2024-01-01T00:00:00Z")
        newer = _timestamp_sort_key("2024-06-01T00:00:00Z")
        bad = _timestamp_sort_key("garbage")
        assert bad < older < newer
