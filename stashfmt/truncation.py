"""Response size guards for large tool results.

Keeps rendered text inside an LLM context budget: byte-length truncation with
an actionable hint, list limit clamping and token estimation.
"""

from __future__ import annotations

import tiktoken

# Maximum response length (characters)
MAX_RESPONSE_LENGTH = 50 * 1024

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100

# Only back up to a newline if it keeps at least this share of the cut
LINE_BOUNDARY_RATIO = 0.8

DIFF_TRUNCATION_HINT = (
    "\n\n[Diff truncated at 50KB. Use get_file_content for specific files "
    "or get_pull_request_changes to see the list of changed files.]"
)
FILE_TRUNCATION_HINT = (
    "\n\n[Content truncated at 50KB. Use offset/limit parameters to read the remaining content.]"
)
SEARCH_TRUNCATION_HINT = (
    "\n\n[Results truncated at 50KB. Narrow your search with more specific query or path filters.]"
)
LIST_TRUNCATION_HINT = (
    "\n\n[Results limited. Use offset parameter to paginate through additional items.]"
)

# Tiktoken encoder for token counting (cl100k_base)
_encoder: tiktoken.Encoding | None = None


def estimate_tokens(content: str) -> int:
    """Count tokens using tiktoken (cl100k_base encoding)."""
    global _encoder
    if _encoder is None:
        _encoder = tiktoken.get_encoding("cl100k_base")
    return len(_encoder.encode(content))


def truncate_if_needed(content: str, hint: str, max_length: int | None = None) -> str:
    """Truncate content that exceeds ``max_length`` and append ``hint``.

    The cut is made at ``max_length - len(hint)`` so the result, hint
    included, never exceeds ``max_length``. When a newline sits in the last
    fifth of the kept text the cut moves back to it so no partial line is
    left dangling.

    Args:
        content: Text to check. Empty content is returned unchanged.
        hint: Message appended when truncation happens.
        max_length: Optional limit, defaults to MAX_RESPONSE_LENGTH.

    Returns:
        The original content, or the truncated content with hint.
    """
    if not content:
        return content

    limit = max_length if max_length is not None else MAX_RESPONSE_LENGTH
    if len(content) <= limit:
        return content

    cut = max(limit - len(hint), 0)
    truncated = content[:cut]
    last_newline = truncated.rfind("\n")
    if last_newline > cut * LINE_BOUNDARY_RATIO:
        truncated = truncated[:last_newline]

    return truncated + hint


def truncate_diff(content: str, max_length: int | None = None) -> str:
    return truncate_if_needed(content, DIFF_TRUNCATION_HINT, max_length)


def truncate_file_content(content: str, max_length: int | None = None) -> str:
    return truncate_if_needed(content, FILE_TRUNCATION_HINT, max_length)


def truncate_search_results(content: str, max_length: int | None = None) -> str:
    return truncate_if_needed(content, SEARCH_TRUNCATION_HINT, max_length)


def clamp_limit(
    limit: int,
    default: int = DEFAULT_LIST_LIMIT,
    maximum: int = MAX_LIST_LIMIT,
) -> int:
    """Clamp a caller-provided list limit; non-positive means "use the default"."""
    if limit <= 0:
        return default
    return min(limit, maximum)


def would_truncate(content: str | None, max_length: int | None = None) -> bool:
    limit = max_length if max_length is not None else MAX_RESPONSE_LENGTH
    return content is not None and len(content) > limit


def available_length(hint: str, max_length: int | None = None) -> int:
    """Room left for content once ``hint`` is appended."""
    limit = max_length if max_length is not None else MAX_RESPONSE_LENGTH
    return limit - len(hint)
