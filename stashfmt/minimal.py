"""Minimal output formatting for list-style API results.

Each formatter emits one heading line naming the scope, then one compact line
per record. Lists are rendered in full; bounding their length is the
caller's job (pagination). Only single field values that could dominate the
output, such as commit messages, are shortened.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Branch, Commit, Project, PullRequest, PullRequestState, Repository, Tag

COMMIT_MESSAGE_LIMIT = 60
ELLIPSIS = "..."
SHORT_HASH_LENGTH = 7
UNKNOWN = "?"

STATE_ICONS = {
    PullRequestState.OPEN: "O",
    PullRequestState.MERGED: "M",
    PullRequestState.DECLINED: "D",
}


def _join(lines: Iterable[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def repository_label(repo: Repository) -> str:
    """Repository name, or its slug when the name is missing."""
    return repo.name if repo.name is not None else repo.slug


def author_label(pr: PullRequest) -> str:
    """Author user name, or "?" when unknown."""
    if pr.author is None or pr.author.name is None:
        return UNKNOWN
    return pr.author.name


def short_hash(commit: Commit) -> str:
    """Display id, else the first 7 characters of the full id, else "?"."""
    if commit.display_id is not None:
        return commit.display_id
    if commit.id is not None:
        return commit.id[:SHORT_HASH_LENGTH]
    return UNKNOWN


def summarize_message(message: str | None, limit: int = COMMIT_MESSAGE_LIMIT) -> str:
    """First line of ``message``, capped at ``limit`` characters including "..."."""
    first_line = (message or "").split("\n", 1)[0]
    if len(first_line) > limit:
        return first_line[: limit - len(ELLIPSIS)] + ELLIPSIS
    return first_line


def format_repositories(repositories: Iterable[Repository], project_key: str) -> str:
    lines = [f"Repositories in {project_key}:"]
    lines.extend(f"- {repo.slug}: {repository_label(repo)}" for repo in repositories)
    return _join(lines)


def format_pull_requests(
    pull_requests: Iterable[PullRequest],
    project_key: str,
    repo_slug: str,
    state_filter: str,
) -> str:
    """Output: "- #ID: title [O|M|D|?] @author"."""
    lines = [f"PRs [{state_filter}] {project_key}/{repo_slug}:"]
    for pr in pull_requests:
        icon = STATE_ICONS.get(pr.state, UNKNOWN)
        lines.append(f"- #{pr.id}: {pr.title} [{icon}] @{author_label(pr)}")
    return _join(lines)


def format_branches(
    branches: Iterable[Branch],
    project_key: str,
    repo_slug: str,
    show_default: bool = False,
) -> str:
    lines = [f"Branches in {project_key}/{repo_slug}:"]
    for branch in branches:
        marker = " *" if show_default and branch.is_default else ""
        lines.append(f"- {branch.display_id}{marker}")
    return _join(lines)


def format_tags(tags: Iterable[Tag], project_key: str, repo_slug: str) -> str:
    lines = [f"Tags in {project_key}/{repo_slug}:"]
    lines.extend(f"- {tag.display_id}" for tag in tags)
    return _join(lines)


def format_files(
    file_paths: Iterable[str],
    project_key: str,
    repo_slug: str,
    ref_name: str | None,
    total_count: int,
) -> str:
    """File paths only, one per line, under a heading carrying the total count."""
    ref_info = "" if _blank(ref_name) else f"@{ref_name}"
    lines = [f"Files in {project_key}/{repo_slug}{ref_info} ({total_count} total):"]
    lines.extend(file_paths)
    return _join(lines)


def format_projects(projects: Iterable[Project]) -> str:
    lines = ["Projects:"]
    lines.extend(f"- {project.key}: {project.name or ''}" for project in projects)
    return _join(lines)


def format_commits(
    commits: Iterable[Commit],
    project_key: str,
    repo_slug: str | None = None,
) -> str:
    """Output: "- shortHash: first line of message"."""
    scope = project_key if _blank(repo_slug) else f"{project_key}/{repo_slug}"
    lines = [f"Commits in {scope}:"]
    lines.extend(
        f"- {short_hash(commit)}: {summarize_message(commit.message)}" for commit in commits
    )
    return _join(lines)
