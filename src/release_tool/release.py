"""
Release file loading and release notes assembly.

A release file is a TOML document naming the project, the revision range and
any hand-written notes. ``build_release`` combines it with the dependency
diff, the changelog and the ranked contributors of that range.
"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .changelog import changelog, github_commit_link, github_pr_link, linkify_changes
from .contributors import add_contributors, order_contributors
from .dependency import Change, Dependency, Note, ProjectRename
from .dependency_diff import rename_dependencies, updated_deps
from .error_handling import (
    ConfigurationMissingError,
    ErrorCategory,
    MalformedInputError,
    get_error_handler,
)
from .parsers import parse_dependencies
from .structured_logging import get_release_logger, log_release_complete, log_release_start


@dataclass
class Release:
    """The decoded release file."""

    commit: str
    project_name: str = ""
    github_repo: str = ""
    previous: str = ""
    pre_release: bool = False
    preface: str = ""
    notes: Dict[str, Note] = field(default_factory=dict)
    breaking: Dict[str, Note] = field(default_factory=dict)
    rename_deps: Dict[str, ProjectRename] = field(default_factory=dict)


@dataclass
class ReleaseNotes:
    """Everything the release notes template renders."""

    release: Release
    tag: str
    version: str
    changes: List[Change] = field(default_factory=list)
    dependencies: List[Dependency] = field(default_factory=list)
    contributors: List[str] = field(default_factory=list)

    def template_context(self) -> Dict[str, Any]:
        context = asdict(self.release)
        context.update(
            tag=self.tag,
            version=self.version,
            changes=self.changes,
            dependencies=self.dependencies,
            contributors=self.contributors,
        )
        return context


def parse_tag(path: str) -> str:
    """Derive the release tag from a release file name."""
    name = Path(path).name
    if name.endswith(".toml"):
        return name[: -len(".toml")]
    return name


def version_from_tag(tag: str) -> str:
    return tag[1:] if tag.startswith("v") else tag


def _parse_notes(data: Any, key: str) -> Dict[str, Note]:
    if not isinstance(data, dict):
        raise MalformedInputError(f"release file: {key} must be a table")
    notes = {}
    for name, entry in data.items():
        if not isinstance(entry, dict):
            raise MalformedInputError(f"release file: {key}.{name} must be a table")
        notes[name] = Note(
            title=str(entry.get("title", "")),
            description=str(entry.get("description", "")),
        )
    return notes


def _parse_renames(data: Any) -> Dict[str, ProjectRename]:
    if not isinstance(data, dict):
        raise MalformedInputError("release file: rename_deps must be a table")
    renames = {}
    for shortname, entry in data.items():
        if not isinstance(entry, dict) or "old" not in entry or "new" not in entry:
            raise MalformedInputError(
                f"release file: rename_deps.{shortname} needs both old and new"
            )
        renames[shortname] = ProjectRename(old=str(entry["old"]), new=str(entry["new"]))
    return renames


def release_from_dict(data: Dict[str, Any]) -> Release:
    """
    Build a Release from decoded TOML.

    Raises:
        MalformedInputError: If required keys are missing or tables are malformed
    """
    commit = data.get("commit")
    if not commit:
        raise MalformedInputError("release file must specify the commit to release")

    return Release(
        commit=str(commit),
        project_name=str(data.get("project_name", "")),
        github_repo=str(data.get("github_repo", "")),
        previous=str(data.get("previous", "")),
        pre_release=bool(data.get("pre_release", False)),
        preface=str(data.get("preface", "")),
        notes=_parse_notes(data.get("notes", {}), "notes"),
        breaking=_parse_notes(data.get("breaking", {}), "breaking"),
        rename_deps=_parse_renames(data.get("rename_deps", {})),
    )


def load_release(path: str) -> Release:
    """
    Load a release file.

    Raises:
        ConfigurationMissingError: If the file does not exist
        MalformedInputError: If the file is not valid TOML or lacks a commit
    """
    error_handler = get_error_handler()
    try:
        data = toml.load(path)
    except FileNotFoundError as e:
        error_handler.error(
            ErrorCategory.CONFIGURATION,
            "release file not found",
            "release",
            "load_release",
            exception=e,
            details={"path": str(path)},
            suggestions=["Pass the path of the release TOML file"],
        )
        raise ConfigurationMissingError(
            "please specify the release file as the first argument"
        ) from e
    except toml.TomlDecodeError as e:
        error_handler.error(
            ErrorCategory.PARSING,
            f"Invalid TOML format in release file: {e}",
            "release",
            "load_release",
            exception=e,
            details={"path": str(path)},
        )
        raise MalformedInputError(f"invalid release file {path}: {e}") from e

    return release_from_dict(data)


def build_release(
    release: Release,
    git,
    tag: str,
    linkify: bool = False,
) -> ReleaseNotes:
    """
    Assemble release notes for the range ``release.previous..release.commit``.

    Args:
        release: Decoded release file
        git: GitClient for the project repository
        tag: Tag of the release being described
        linkify: Rewrite commits and merged pull requests into GitHub links

    Returns:
        ReleaseNotes: Dependency diff, changelog and contributors of the range
    """
    logger = get_release_logger()
    log_release_start(tag, release.previous, release.commit)

    previous_deps: List[Dependency] = []
    if release.previous:
        previous_deps = parse_dependencies(git, release.previous)
        rename_dependencies(previous_deps, release.rename_deps)

    deps = parse_dependencies(git, release.commit)
    rename_dependencies(deps, release.rename_deps)
    dependencies = updated_deps(previous_deps, deps)

    changes = changelog(git, release.previous or None, release.commit)
    if linkify:
        if not release.github_repo:
            raise ConfigurationMissingError(
                "github_repo must be set in the release file to linkify changes"
            )
        linkify_changes(
            changes,
            github_commit_link(release.github_repo, git),
            github_pr_link(release.github_repo),
        )
        logger.debug("changes_linkified", repo=release.github_repo, changes=len(changes))

    tally: Counter = Counter()
    add_contributors(git, release.previous or None, release.commit, tally)
    contributors = order_contributors(tally)

    log_release_complete(tag, len(changes), len(dependencies), len(contributors))

    return ReleaseNotes(
        release=release,
        tag=tag,
        version=version_from_tag(tag),
        changes=changes,
        dependencies=dependencies,
        contributors=contributors,
    )
