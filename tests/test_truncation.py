"""Tests for stashfmt.truncation."""

from unittest.mock import MagicMock, patch

import pytest

from stashfmt import truncation
from stashfmt.truncation import (
    DIFF_TRUNCATION_HINT,
    MAX_RESPONSE_LENGTH,
    available_length,
    clamp_limit,
    estimate_tokens,
    truncate_diff,
    truncate_if_needed,
    would_truncate,
)


class TestTruncateIfNeeded:
    def test_under_limit_returns_original(self):
        assert truncate_if_needed("Short content", "[Truncated]") == "Short content"

    def test_exactly_at_limit_returns_original(self):
        content = "x" * 100
        assert truncate_if_needed(content, "[Truncated]", 100) == content

    def test_over_limit_truncates_with_hint(self):
        result = truncate_if_needed("x" * 100, "[Truncated]", 50)
        assert result.endswith("[Truncated]")
        assert len(result) <= 50

    @pytest.mark.parametrize("content", ["", None])
    def test_empty_returned_unchanged(self, content):
        assert truncate_if_needed(content, "[T]") == content

    def test_cuts_at_line_boundary_near_the_end(self):
        content = "a" * 20 + "\n" + "b" * 20 + "\n" + "c" * 20
        result = truncate_if_needed(content, "[T]", 50)
        # Cut point is 47; the newline at 41 is past 80% of it
        assert result == "a" * 20 + "\n" + "b" * 20 + "[T]"

    def test_ignores_early_line_boundary(self):
        content = "a" * 10 + "\n" + "b" * 80
        result = truncate_if_needed(content, "[T]", 50)
        assert result == content[:47] + "[T]"

    def test_default_limit(self):
        content = "z" * (MAX_RESPONSE_LENGTH + 1)
        result = truncate_diff(content)
        assert result.endswith(DIFF_TRUNCATION_HINT)
        assert len(result) <= MAX_RESPONSE_LENGTH


class TestClampLimit:
    @pytest.mark.parametrize("limit,expected", [(0, 50), (-3, 50), (1, 1), (75, 75), (500, 100)])
    def test_defaults(self, limit, expected):
        assert clamp_limit(limit) == expected

    def test_custom_bounds(self):
        assert clamp_limit(0, default=10, maximum=20) == 10
        assert clamp_limit(30, default=10, maximum=20) == 20


class TestHelpers:
    def test_would_truncate(self):
        assert would_truncate("x" * 11, 10)
        assert not would_truncate("x" * 10, 10)
        assert not would_truncate(None)

    def test_available_length(self):
        assert available_length("[T]", 100) == 97
        assert available_length(DIFF_TRUNCATION_HINT) == MAX_RESPONSE_LENGTH - len(DIFF_TRUNCATION_HINT)


class TestEstimateTokens:
    def test_uses_cl100k_encoding_once(self):
        encoder = MagicMock()
        encoder.encode.return_value = [1, 2, 3]
        with patch.object(truncation, "_encoder", None), \
                patch("stashfmt.truncation.tiktoken.get_encoding", return_value=encoder) as get:
            assert estimate_tokens("hello world") == 3
            assert estimate_tokens("again") == 3
        get.assert_called_once_with("cl100k_base")
