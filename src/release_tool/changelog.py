"""
Changelog extraction and link rewriting.

Turns ``git log --oneline`` output into change records and optionally
rewrites commits and merge subjects into GitHub markdown links.
"""

import re
from dataclasses import replace
from typing import Callable, List, Optional

from .dependency import Change
from .error_handling import MalformedInputError, log_parsing_error
from .parsers import split_lines
from .structured_logging import get_changelog_logger

LinkFunc = Callable[[Change], str]

_MERGE_PR = re.compile(r"^Merge pull request #[0-9]+")


def parse_changelog(raw: str) -> List[Change]:
    """
    Parse one-line-per-commit log output.

    The first token of each line is the short hash and the remaining tokens,
    joined by single spaces, form the description.

    Raises:
        MalformedInputError: If a line is blank
    """
    changes = []
    for line in split_lines(raw):
        fields = line.split()
        if not fields:
            log_parsing_error("empty changelog line", "changelog", "parse_changelog", line=line)
            raise MalformedInputError(f"invalid changelog line: {line!r}")
        changes.append(Change(commit=fields[0], description=" ".join(fields[1:])))
    return changes


def changelog(git, previous: Optional[str], commit: str) -> List[Change]:
    """Read and parse the changelog for a revision range."""
    changes = parse_changelog(git.log_oneline(previous, commit))
    get_changelog_logger().info(
        "changelog_parsed", previous=previous, commit=commit, changes=len(changes)
    )
    return changes


def linkify_changes(changes: List[Change], commit: LinkFunc, msg: LinkFunc) -> None:
    """
    Rewrite each change in place with a commit link and linked description.

    Both links are resolved from the original record before it is replaced.
    The first failure aborts the pass.
    """
    for i, change in enumerate(changes):
        commit_link = commit(change)
        description = msg(change)

        changes[i] = replace(
            change,
            commit=f"[`{change.commit}`]({commit_link})",
            description=description,
        )


def github_commit_link(repo: str, git) -> LinkFunc:
    """Build a function mapping a change to its GitHub commit URL."""

    def link(change: Change) -> str:
        full = git.rev_parse(change.commit)
        return f"https://github.com/{repo}/commit/{full}"

    return link


def github_pr_link(repo: str) -> LinkFunc:
    """Build a function linking ``Merge pull request #N`` subjects to the PR."""

    def link(change: Change) -> str:
        def substitute(match: re.Match) -> str:
            m = match.group(0)
            idx = m.index("#")
            pr = m[idx + 1:]
            url = f"https://github.com/{repo}/pull/{pr}"
            return f"{m[:idx]}[#{pr}]({url})"

        return _MERGE_PR.sub(substitute, change.description)

    return link
