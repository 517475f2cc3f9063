"""Data models shared by the selection, assembly and grouping pipeline.

Everything here is created fresh for each submission and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class RepoRef:
    """Owner, repository name and branch hint parsed from a repository URL."""

    owner: str
    repo: str
    branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class FileEntry:
    """One node of a recursive tree listing. Only kind == "file" is reviewable."""

    path: str
    kind: str  # "file" | "directory"
    size: int | None = None


@dataclass
class AssembledCode:
    """Marker-wrapped file contents concatenated for review, built incrementally."""

    text: str = ""
    files_included: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Commit:
    sha: str
    message: str
    author_name: str
    author_email: str
    author_date: datetime
    html_url: str


@dataclass
class CommitGroup:
    """Commits sharing a scope: "Issue #<n>" or the default bucket."""

    scope: str
    commits: list[Commit] = field(default_factory=list)
