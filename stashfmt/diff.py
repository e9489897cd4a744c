"""Diff rendering - whole diffs and bounded streams of per-file diffs.

Both entry points emit the same per-file layout::

    File: src/app.py (Modified)
    ------------------------------
    @@ -10,3 +10,4 @@
     context
    -removed
    +added

Streams are bounded by a line cap and a file cap. Files are never split: a
file whose lines would push the total past ``max_lines`` is left out
entirely. Rendering also stops right after a file that meets either cap
exactly, without pulling another file from the source. Either way a
truncation notice names the limit that was hit, unless ``total_files`` shows
that every file was rendered.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass
from typing import Literal, Protocol

from .config import DEFAULT_MAX_FILES, DEFAULT_MAX_LINES, DiffLimits
from .errors import OperationCancelledError
from .log import get_logger
from .models import Diff, Differences

logger = get_logger(__name__)

NO_DIFF_MESSAGE = "No diff content returned."
BINARY_PLACEHOLDER = "[Binary or large file - content not shown]"
FILE_SEPARATOR = "-" * 30
TRUNCATION_FOLLOWUP = (
    "[Use get_file_content for specific files or get_pull_request_changes "
    "to see the list of changed files.]"
)

TruncationReason = Literal["lines", "files"]


class CancelSignal(Protocol):
    """Anything with ``is_set()``, e.g. ``asyncio.Event`` or ``threading.Event``."""

    def is_set(self) -> bool: ...


@dataclass
class DiffStreamResult:
    """Outcome of rendering a diff stream."""

    text: str
    files: int  # Files rendered
    lines: int  # Change lines rendered
    truncated: bool = False
    reason: TruncationReason | None = None


def _check_cancelled(cancel: CancelSignal | None, processed_files: int) -> None:
    if cancel is not None and cancel.is_set():
        logger.debug("Diff rendering cancelled after %d files", processed_files)
        raise OperationCancelledError(processed_files)


def _render_file(diff: Diff) -> list[str]:
    """Render one file diff as output lines (without trailing newlines)."""
    kind = diff.change_kind
    lines = [f"File: {diff.display_path} ({kind})", FILE_SEPARATOR]

    # Modified with no hunks: binary, or a metadata-only change
    if not diff.hunks and kind == "Modified":
        lines.append(BINARY_PLACEHOLDER)
        lines.append("")
        return lines

    for hunk in diff.hunks:
        lines.append(
            f"@@ -{hunk.source_line},{hunk.source_span} "
            f"+{hunk.destination_line},{hunk.destination_span} @@"
        )
        for segment in hunk.segments:
            prefix = segment.prefix
            lines.extend(f"{prefix}{ln.line}" for ln in segment.lines)
        lines.append("")

    lines.append("")
    return lines


def _join(lines: Iterable[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


def format_diff_text(diff: Differences | None, cancel: CancelSignal | None = None) -> str:
    """Render a fully materialized diff.

    No truncation is applied; the caller is expected to bound the payload.
    Output is a pure function of the input.

    Raises:
        OperationCancelledError: If ``cancel`` is set while files are rendered.
    """
    if diff is None or diff.diffs is None:
        logger.warning("Diff payload has no diffs; nothing to render")
        return _join([NO_DIFF_MESSAGE])

    out: list[str] = []
    for index, file_diff in enumerate(diff.diffs):
        _check_cancelled(cancel, index)
        out.extend(_render_file(file_diff))

    return _join(out)


def _truncation_notice(
    reason: TruncationReason,
    limits: DiffLimits,
    files: int,
    lines: int,
    total_files: int | None,
) -> str:
    limit = limits.max_lines if reason == "lines" else limits.max_files
    of_total = f" of {total_files}" if total_files is not None else ""
    return (
        f"[Diff truncated: {reason} limit reached (max_{reason}={limit}). "
        f"Showing {files}{of_total} files, {lines} lines.]"
    )


async def _close_source(source) -> None:
    aclose = getattr(source, "aclose", None)
    if aclose is not None:
        await aclose()


async def render_diff_stream(
    diffs: AsyncIterable[Diff],
    max_lines: int = DEFAULT_MAX_LINES,
    max_files: int = DEFAULT_MAX_FILES,
    *,
    cancel: CancelSignal | None = None,
    total_files: int | None = None,
) -> DiffStreamResult:
    """Render diffs from an async source until a limit is hit.

    The source is consumed in delivery order and closed (when it supports
    ``aclose``) as soon as rendering stops. No file is requested once a cap
    has been met exactly, so a source is never asked for data that could
    not be shown.

    Args:
        diffs: Lazy, finite async iterable of per-file diffs.
        max_lines: Cap on rendered change lines across all files.
        max_files: Cap on rendered files.
        cancel: Optional signal checked before each file is rendered.
        total_files: Total file count, if the caller knows it. Shown in the
            truncation notice, and suppresses the notice when a cap is met
            by the last file.

    Returns:
        DiffStreamResult with the rendered text and counters.

    Raises:
        InvalidArgumentError: If either limit is not positive.
        OperationCancelledError: If ``cancel`` is set mid-stream. No partial
            text is returned.
        Exception: Whatever the source raises, unchanged.
    """
    limits = DiffLimits(max_lines=max_lines, max_files=max_files).validate()

    out: list[str] = []
    files = 0
    lines = 0
    reason: TruncationReason | None = None

    _check_cancelled(cancel, files)
    source = aiter(diffs)
    try:
        async for file_diff in source:
            _check_cancelled(cancel, files)

            chunk_lines = file_diff.line_count
            if lines + chunk_lines > limits.max_lines:
                reason = "lines"
                break

            out.extend(_render_file(file_diff))
            files += 1
            lines += chunk_lines

            # A cap reached exactly ends the stream without fetching more
            if files >= limits.max_files:
                reason = "files"
                break
            if lines >= limits.max_lines:
                reason = "lines"
                break
    finally:
        await _close_source(source)

    if reason is not None and total_files is not None and files >= total_files:
        # Every file fit; the cap was met by the last one
        reason = None

    if reason is None:
        text = _join(out) if out else _join([NO_DIFF_MESSAGE])
        return DiffStreamResult(text=text, files=files, lines=lines)

    logger.debug(
        "Diff stream truncated by %s limit after %d files, %d lines", reason, files, lines
    )
    if out:
        out.append("")
    out.append(_truncation_notice(reason, limits, files, lines, total_files))
    out.append(TRUNCATION_FOLLOWUP)
    return DiffStreamResult(
        text=_join(out), files=files, lines=lines, truncated=True, reason=reason
    )


async def format_diff_stream(
    diffs: AsyncIterable[Diff],
    max_lines: int = DEFAULT_MAX_LINES,
    max_files: int = DEFAULT_MAX_FILES,
    *,
    cancel: CancelSignal | None = None,
    total_files: int | None = None,
) -> str:
    """Render a bounded diff stream and return only the text.

    See ``render_diff_stream`` for limits, cancellation and error behavior.
    """
    result = await render_diff_stream(
        diffs,
        max_lines=max_lines,
        max_files=max_files,
        cancel=cancel,
        total_files=total_files,
    )
    return result.text
