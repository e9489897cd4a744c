"""CLI interface for stashfmt.

Renders saved Bitbucket Server API responses (JSON files, or ``-`` for stdin)
the same way a tool-calling layer would, so output can be inspected and its
token cost checked without a live server.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Iterable
from typing import Any, NoReturn

import click
from rich.console import Console

from . import __version__
from .config import DiffLimits
from .diff import format_diff_text, render_diff_stream
from .errors import ErrorResponse, InvalidPayloadError, StashFormatError
from .minimal import (
    format_branches,
    format_commits,
    format_files,
    format_projects,
    format_pull_requests,
    format_repositories,
    format_tags,
)
from .models import (
    Branch,
    Commit,
    Differences,
    Project,
    PullRequest,
    Repository,
    Tag,
    parse_records,
    values_of,
)
from .truncation import estimate_tokens

console = Console()
err_console = Console(stderr=True)

payload_argument = click.argument("payload", type=click.File("r"), default="-")
tokens_option = click.option(
    "--tokens", is_flag=True, help="Report the estimated token count of the output on stderr"
)


def _load(payload, kind: str) -> Any:
    try:
        return json.load(payload)
    except json.JSONDecodeError as e:
        raise InvalidPayloadError(kind, f"Invalid JSON for {kind}: {e}") from e


def _emit(output: str, tokens: bool) -> None:
    # Plain echo: rendered diffs must reach stdout byte for byte (tabs included)
    click.echo(output, nl=False)
    if tokens:
        err_console.print(f"~{estimate_tokens(output)} tokens", markup=False, highlight=False)


def _fail(exc: StashFormatError) -> NoReturn:
    err = ErrorResponse.from_exception(exc)
    console.print(err.format_compact(), markup=False, highlight=False)
    raise SystemExit(1)


async def _iterate(diffs: Iterable) -> AsyncIterator:
    for file_diff in diffs:
        yield file_diff


@click.group()
@click.version_option(__version__)
def main():
    """stashfmt - Compact text rendering of Bitbucket Server API results."""
    pass


@main.command()
@payload_argument
@click.option("--stream", is_flag=True, help="Render file by file with line/file limits")
@click.option(
    "--max-lines", type=int, default=None,
    help="Maximum diff lines when streaming. Default: $STASHFMT_MAX_LINES or 2000"
)
@click.option(
    "--max-files", type=int, default=None,
    help="Maximum files when streaming. Default: $STASHFMT_MAX_FILES or 50"
)
@click.option(
    "--total-files", type=int, default=None,
    help="Total changed files, shown in the truncation notice when known"
)
@tokens_option
def diff(payload, stream: bool, max_lines: int | None, max_files: int | None,
         total_files: int | None, tokens: bool):
    """Render a diff response ({"diffs": [...]}).

    Without --stream the whole diff is rendered. With --stream files are fed
    one at a time and rendering stops at the first file that would exceed
    --max-lines or --max-files.

    EXAMPLES:
      stashfmt diff pr-42-diff.json
      stashfmt diff --stream --max-lines 500 pr-42-diff.json
    """
    try:
        differences = Differences.from_dict(_load(payload, "diff"))
        if not stream:
            output = format_diff_text(differences)
        else:
            defaults = DiffLimits.from_environment()
            diffs = differences.diffs or ()
            result = asyncio.run(render_diff_stream(
                _iterate(diffs),
                max_lines=max_lines if max_lines is not None else defaults.max_lines,
                max_files=max_files if max_files is not None else defaults.max_files,
                total_files=total_files if total_files is not None else len(diffs),
            ))
            output = result.text
    except StashFormatError as e:
        _fail(e)
    _emit(output, tokens)


@main.command()
@payload_argument
@click.option("--project", "-p", required=True, help="Project key")
@tokens_option
def repos(payload, project: str, tokens: bool):
    """Render a repository list."""
    try:
        records = parse_records(Repository, _load(payload, "repos"), "repos")
    except StashFormatError as e:
        _fail(e)
    _emit(format_repositories(records, project), tokens)


@main.command()
@payload_argument
@click.option("--project", "-p", required=True, help="Project key")
@click.option("--repo", "-r", required=True, help="Repository slug")
@click.option("--state", default="OPEN", show_default=True, help="State filter shown in the heading")
@tokens_option
def prs(payload, project: str, repo: str, state: str, tokens: bool):
    """Render a pull request list."""
    try:
        records = parse_records(PullRequest, _load(payload, "prs"), "prs")
    except StashFormatError as e:
        _fail(e)
    _emit(format_pull_requests(records, project, repo, state), tokens)


@main.command()
@payload_argument
@click.option("--project", "-p", required=True, help="Project key")
@click.option("--repo", "-r", required=True, help="Repository slug")
@click.option("--show-default", is_flag=True, help="Mark the default branch with *")
@tokens_option
def branches(payload, project: str, repo: str, show_default: bool, tokens: bool):
    """Render a branch list."""
    try:
        records = parse_records(Branch, _load(payload, "branches"), "branches")
    except StashFormatError as e:
        _fail(e)
    _emit(format_branches(records, project, repo, show_default=show_default), tokens)


@main.command()
@payload_argument
@click.option("--project", "-p", required=True, help="Project key")
@click.option("--repo", "-r", required=True, help="Repository slug")
@tokens_option
def tags(payload, project: str, repo: str, tokens: bool):
    """Render a tag list."""
    try:
        records = parse_records(Tag, _load(payload, "tags"), "tags")
    except StashFormatError as e:
        _fail(e)
    _emit(format_tags(records, project, repo), tokens)


@main.command()
@payload_argument
@click.option("--project", "-p", required=True, help="Project key")
@click.option("--repo", "-r", required=True, help="Repository slug")
@click.option("--ref", default=None, help="Branch, tag or commit the listing was taken at")
@click.option("--total", type=int, default=None, help="Total file count. Default: number of paths")
@tokens_option
def files(payload, project: str, repo: str, ref: str | None, total: int | None, tokens: bool):
    """Render a file listing (a list of path strings)."""
    try:
        paths = values_of(_load(payload, "files"), "files")
        if not all(isinstance(p, str) for p in paths):
            raise InvalidPayloadError("files", "File listing must contain path strings")
    except StashFormatError as e:
        _fail(e)
    total_count = total if total is not None else len(paths)
    _emit(format_files(paths, project, repo, ref, total_count), tokens)


@main.command()
@payload_argument
@tokens_option
def projects(payload, tokens: bool):
    """Render a project list."""
    try:
        records = parse_records(Project, _load(payload, "projects"), "projects")
    except StashFormatError as e:
        _fail(e)
    _emit(format_projects(records), tokens)


@main.command()
@payload_argument
@click.option("--project", "-p", required=True, help="Project key")
@click.option("--repo", "-r", default=None, help="Repository slug (omit for project-wide results)")
@tokens_option
def commits(payload, project: str, repo: str | None, tokens: bool):
    """Render commit search results."""
    try:
        records = parse_records(Commit, _load(payload, "commits"), "commits")
    except StashFormatError as e:
        _fail(e)
    _emit(format_commits(records, project, repo), tokens)


if __name__ == "__main__":
    main()
