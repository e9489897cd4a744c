"""Read-only records for Bitbucket Server REST API payloads.

Every record is built from the JSON body the API returns via ``from_dict``.
Missing or null keys are tolerated: optional fields come back as ``None``,
required text and numbers as ``""`` and ``0``, and
collections as empty tuples, so a partially populated response still renders.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import InvalidPayloadError


class SegmentType(str, Enum):
    """Line-level change kinds inside a hunk."""

    ADDED = "ADDED"
    REMOVED = "REMOVED"
    CONTEXT = "CONTEXT"


class PullRequestState(str, Enum):
    """Pull request lifecycle states."""

    OPEN = "OPEN"
    MERGED = "MERGED"
    DECLINED = "DECLINED"


def _enum_or_none(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        return None


def values_of(payload: Any, kind: str = "list") -> list[dict]:
    """Unwrap a paged response (``{"values": [...]}``) or accept a bare list."""
    if isinstance(payload, dict) and "values" in payload:
        payload = payload["values"]
    if not isinstance(payload, list):
        raise InvalidPayloadError(kind)
    return payload


@dataclass(frozen=True)
class Path:
    """File path as the API reports it (``{"toString": "src/app.py"}``)."""

    to_string: str

    @classmethod
    def from_dict(cls, data: dict | None) -> Path | None:
        if not data:
            return None
        to_string = data.get("toString")
        if to_string is None:
            components = data.get("components") or []
            to_string = "/".join(components) if components else None
        return cls(to_string) if to_string else None


@dataclass(frozen=True)
class DiffLine:
    line: str

    @classmethod
    def from_dict(cls, data: dict) -> DiffLine:
        return cls(line=data.get("line") or "")


@dataclass(frozen=True)
class Segment:
    """A run of lines sharing one change kind."""

    type: SegmentType | None
    lines: tuple[DiffLine, ...] = ()

    @property
    def prefix(self) -> str:
        if self.type == SegmentType.ADDED:
            return "+"
        if self.type == SegmentType.REMOVED:
            return "-"
        return " "

    @classmethod
    def from_dict(cls, data: dict) -> Segment:
        return cls(
            type=_enum_or_none(SegmentType, data.get("type")),
            lines=tuple(DiffLine.from_dict(ln) for ln in data.get("lines") or []),
        )


@dataclass(frozen=True)
class Hunk:
    source_line: int
    source_span: int
    destination_line: int
    destination_span: int
    segments: tuple[Segment, ...] = ()

    @property
    def line_count(self) -> int:
        return sum(len(seg.lines) for seg in self.segments)

    @classmethod
    def from_dict(cls, data: dict) -> Hunk:
        return cls(
            source_line=data.get("sourceLine") or 0,
            source_span=data.get("sourceSpan") or 0,
            destination_line=data.get("destinationLine") or 0,
            destination_span=data.get("destinationSpan") or 0,
            segments=tuple(Segment.from_dict(s) for s in data.get("segments") or []),
        )


NULL_DEVICE_PATH = "/dev/null"


@dataclass(frozen=True)
class Diff:
    """Changes to a single file."""

    source: Path | None = None
    destination: Path | None = None
    hunks: tuple[Hunk, ...] = ()

    @property
    def source_path(self) -> str:
        return self.source.to_string if self.source else NULL_DEVICE_PATH

    @property
    def destination_path(self) -> str:
        return self.destination.to_string if self.destination else NULL_DEVICE_PATH

    @property
    def change_kind(self) -> str:
        """One of "Added", "Deleted" or "Modified"."""
        if self.source_path == NULL_DEVICE_PATH:
            return "Added"
        if self.destination_path == NULL_DEVICE_PATH:
            return "Deleted"
        return "Modified"

    @property
    def display_path(self) -> str:
        if self.change_kind == "Deleted":
            return self.source_path
        return self.destination_path

    @property
    def line_count(self) -> int:
        """Number of rendered change lines (hunk bodies only)."""
        return sum(h.line_count for h in self.hunks)

    @classmethod
    def from_dict(cls, data: dict) -> Diff:
        return cls(
            source=Path.from_dict(data.get("source")),
            destination=Path.from_dict(data.get("destination")),
            hunks=tuple(Hunk.from_dict(h) for h in data.get("hunks") or []),
        )


@dataclass(frozen=True)
class Differences:
    """Whole-diff aggregate. ``diffs`` is None when the API sent no payload."""

    diffs: tuple[Diff, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> Differences:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidPayloadError("diff")
        raw = data.get("diffs")
        if raw is None:
            return cls()
        try:
            return cls(diffs=tuple(Diff.from_dict(d) for d in raw))
        except (AttributeError, TypeError) as e:
            raise InvalidPayloadError("diff", f"Malformed diff entry: {e}") from e


@dataclass(frozen=True)
class User:
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> User | None:
        if not data:
            return None
        return cls(name=data.get("name"))


@dataclass(frozen=True)
class Project:
    key: str
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        return cls(key=data.get("key") or "", name=data.get("name"))


@dataclass(frozen=True)
class Repository:
    slug: str
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Repository:
        return cls(slug=data.get("slug") or "", name=data.get("name"))


@dataclass(frozen=True)
class PullRequest:
    id: int
    title: str = ""
    state: PullRequestState | None = None
    author: User | None = None

    @classmethod
    def from_dict(cls, data: dict) -> PullRequest:
        # The API nests the author as a participant: {"author": {"user": {...}}}
        participant = data.get("author") or {}
        return cls(
            id=data.get("id") or 0,
            title=data.get("title") or "",
            state=_enum_or_none(PullRequestState, data.get("state")),
            author=User.from_dict(participant.get("user")),
        )


@dataclass(frozen=True)
class Branch:
    display_id: str
    is_default: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> Branch:
        return cls(
            display_id=data.get("displayId") or data.get("id") or "",
            is_default=bool(data.get("isDefault", False)),
        )


@dataclass(frozen=True)
class Tag:
    display_id: str

    @classmethod
    def from_dict(cls, data: dict) -> Tag:
        return cls(display_id=data.get("displayId") or data.get("id") or "")


@dataclass(frozen=True)
class Commit:
    id: str | None = None
    display_id: str | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Commit:
        return cls(
            id=data.get("id"),
            display_id=data.get("displayId"),
            message=data.get("message"),
        )


def parse_records(record_cls, payload: Any, kind: str) -> list:
    """Build records of ``record_cls`` from a paged response or bare list."""
    items: Iterable[Any] = values_of(payload, kind)
    try:
        return [record_cls.from_dict(item) for item in items]
    except AttributeError as e:
        raise InvalidPayloadError(kind, f"Malformed {kind} entry: {e}") from e
