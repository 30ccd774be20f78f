from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Dependency:
    """A dependency pinned by a manifest at one revision."""

    name: str
    commit: str
    clone_url: str
    previous: Optional[str] = None


@dataclass(frozen=True)
class ProjectRename:
    """A dependency that moved from one import path to another."""

    old: str
    new: str


@dataclass(frozen=True)
class Change:
    """One line of the changelog."""

    commit: str
    description: str


@dataclass(frozen=True)
class Contributor:
    name: str
    email: str


@dataclass(frozen=True)
class Note:
    title: str
    description: str
