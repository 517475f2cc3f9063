"""Group commit history by the issue each commit references."""

from __future__ import annotations

import re

from repolens_core.models import Commit, CommitGroup

DEFAULT_SCOPE = "General Improvements"

# First match only: "fixes #12 and #13" is scoped to issue 12.
_ISSUE_RE = re.compile(r"(?:fixes|closes|resolves)\s+#(\d+)|#(\d+)", re.IGNORECASE)


def scope_for(message: str) -> str:
    """Return "Issue #<n>" for the first issue referenced in message, else the default scope."""
    match = _ISSUE_RE.search(message or "")
    if match:
        number = match.group(1) or match.group(2)
        if number:
            return f"Issue #{number}"
    return DEFAULT_SCOPE


def group_commits(commits: list[Commit]) -> list[CommitGroup]:
    """Group commits by scope.

    Commits within a group are newest first (ties keep their input order).
    Groups are ordered by plain string comparison of their scope, so
    "Issue #10" sorts before "Issue #2"; the default scope always comes last.
    """
    groups: dict[str, list[Commit]] = {}
    for commit in commits:
        groups.setdefault(scope_for(commit.message), []).append(commit)

    result = [
        CommitGroup(scope=scope, commits=sorted(members, key=lambda c: c.author_date, reverse=True))
        for scope, members in groups.items()
    ]
    result.sort(key=lambda g: (g.scope == DEFAULT_SCOPE, g.scope))
    return result
