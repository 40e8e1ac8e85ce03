"""Tests for fuzzy boolean parsing."""

import pytest

from settable.domain.fuzzy import parse_fuzzy_bool


class TestParseFuzzyBool:
    @pytest.mark.parametrize("text", ["true", "TRUE", " yes ", "Y", "on", "1", "checked"])
    def test_truthy(self, text: str) -> None:
        assert parse_fuzzy_bool(text, None) is True

    @pytest.mark.parametrize("text", ["false", "F", "no", "off", "0", "", "  "])
    def test_falsy(self, text: str) -> None:
        assert parse_fuzzy_bool(text, None) is False

    def test_ambiguous_uses_default(self) -> None:
        assert parse_fuzzy_bool("maybe", False) is False
        assert parse_fuzzy_bool("maybe", True) is True
        assert parse_fuzzy_bool("maybe", None) is None

    def test_null_is_ambiguous(self) -> None:
        assert parse_fuzzy_bool("null", None) is None
        assert parse_fuzzy_bool("null", False) is False

    def test_none_input(self) -> None:
        assert parse_fuzzy_bool(None, None) is None
