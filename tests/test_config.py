"""Tests for stashfmt.config."""

import pytest

from stashfmt.config import DEFAULT_MAX_FILES, DEFAULT_MAX_LINES, DiffLimits
from stashfmt.errors import InvalidArgumentError


class TestDiffLimitsFromEnvironment:
    def test_defaults_when_unset(self, monkeypatch):
        monkeypatch.delenv("STASHFMT_MAX_LINES", raising=False)
        monkeypatch.delenv("STASHFMT_MAX_FILES", raising=False)
        limits = DiffLimits.from_environment()
        assert limits == DiffLimits(DEFAULT_MAX_LINES, DEFAULT_MAX_FILES)
        assert (limits.max_lines, limits.max_files) == (2000, 50)

    def test_reads_values(self, monkeypatch):
        monkeypatch.setenv("STASHFMT_MAX_LINES", "500")
        monkeypatch.setenv("STASHFMT_MAX_FILES", "7")
        assert DiffLimits.from_environment() == DiffLimits(500, 7)

    @pytest.mark.parametrize("raw", ["abc", "0", "-10", "  "])
    def test_invalid_values_fall_back(self, monkeypatch, raw):
        monkeypatch.setenv("STASHFMT_MAX_LINES", raw)
        monkeypatch.delenv("STASHFMT_MAX_FILES", raising=False)
        assert DiffLimits.from_environment().max_lines == DEFAULT_MAX_LINES


class TestDiffLimitsValidate:
    def test_valid_returns_self(self):
        limits = DiffLimits(10, 2)
        assert limits.validate() is limits

    @pytest.mark.parametrize("max_lines,max_files,name", [(0, 1, "max_lines"), (1, -1, "max_files")])
    def test_non_positive_rejected(self, max_lines, max_files, name):
        with pytest.raises(InvalidArgumentError) as exc_info:
            DiffLimits(max_lines, max_files).validate()
        assert exc_info.value.context["argument"] == name
