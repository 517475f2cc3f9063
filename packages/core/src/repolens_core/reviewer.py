"""Repository review pipeline: select files, assemble code, request review, group commits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from repolens_core.config import require_api_key
from repolens_core.errors import ConfigurationError, ContentUnavailableError, FileFetchError, NoMatchingFilesError
from repolens_core.gh.repository import fetch_commits, fetch_file_content, fetch_tree_with_fallback
from repolens_core.models import AssembledCode, CommitGroup, FileEntry, RepoRef
from repolens_core.providers.anthropic import AnthropicReviewer
from repolens_core.providers.openai import OpenAIReviewer
from repolens_core.utils.code import MAX_FILES_TO_REVIEW, get_extensions, select_files
from repolens_core.utils.commits import group_commits

logger = logging.getLogger(__name__)

MAX_CODE_LENGTH_FOR_REVIEW = 70000


@dataclass
class ReviewReport:
    """Result of the code-review branch of a submission."""

    repo: str
    branch: str
    language: str
    feedback: str
    files_reviewed: list[str] = field(default_factory=list)
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class CommitHistory:
    """Result of the commit branch. Empty groups means no commits, not a failure."""

    branch: str
    groups: list[CommitGroup] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return sum(len(g.commits) for g in self.groups)


def _get_reviewer(config: dict):
    api_key = require_api_key(config)
    model = config["model"]
    if model == "anthropic":
        return AnthropicReviewer(api_key=api_key, model=config.get("model_name"))
    if model == "openai":
        return OpenAIReviewer(api_key=api_key, model=config.get("model_name"))
    raise ConfigurationError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def _wrap(path: str, content: str) -> str:
    return f"File: {path}\n\n{content}\n\nEnd of File: {path}\n\n"


def assemble_code(
    selected: list[FileEntry],
    fetch_content: Callable[[str], str],
    budget: int = MAX_CODE_LENGTH_FOR_REVIEW,
) -> AssembledCode:
    """Concatenate selected files in rank order until the character budget is reached.

    Fetches are sequential: the budget check for a file happens before the
    next file is requested. A file that would push the text over budget ends
    assembly, unless nothing has been included yet, in which case it is
    included whole. Files that fail to fetch are skipped.

    The budget counts each file's whole block, start and end markers
    included, so the returned text never exceeds it once two or more files
    are in. A later file whose content alone would fit can still be dropped
    because its markers push the block over.
    """
    assembled = AssembledCode()
    parts: list[str] = []
    length = 0

    for entry in selected:
        try:
            content = fetch_content(entry.path)
        except FileFetchError as e:
            logger.warning("Could not fetch content for %s: %s", entry.path, e)
            continue

        block = _wrap(entry.path, content)
        if assembled.files_included and length + len(block) > budget:
            logger.warning(
                "Skipping remaining files as total code length would exceed %d characters.",
                budget,
            )
            break

        parts.append(block)
        assembled.files_included.append(entry.path)
        length += len(block)
        if length >= budget:
            break

    assembled.text = "".join(parts)
    return assembled


def review_repository(repo, ref: RepoRef, language: str, reviewer, config: dict) -> ReviewReport:
    """Run the code-review branch: tree → select → assemble → review.

    Raises NoMatchingFilesError when no file qualifies and
    ContentUnavailableError when files qualified but none could be fetched.
    """
    branch, entries = fetch_tree_with_fallback(
        repo,
        ref.branch,
        default_branch=config.get("default_branch", "main"),
        fallback=config.get("fallback_branch", "master"),
    )
    logger.info("Fetched %d tree entries for %s@%s", len(entries), ref.full_name, branch)

    selected = select_files(entries, language, config.get("max_files", MAX_FILES_TO_REVIEW))
    if not selected:
        raise NoMatchingFilesError(language, get_extensions(language))
    logger.debug("Selected for review: %s", [e.path for e in selected])

    assembled = assemble_code(
        selected,
        lambda path: fetch_file_content(repo, branch, path),
        config.get("max_code_chars", MAX_CODE_LENGTH_FOR_REVIEW),
    )
    if not assembled.files_included:
        raise ContentUnavailableError(language, [e.path for e in selected])

    feedback = reviewer.review(assembled.text, language, assembled.files_included)
    return ReviewReport(
        repo=ref.full_name,
        branch=branch,
        language=language,
        feedback=feedback,
        files_reviewed=list(assembled.files_included),
    )


def load_commit_history(repo, branch: str) -> CommitHistory:
    """Run the commit branch: fetch one page of commits and group them by issue."""
    commits = fetch_commits(repo, branch)
    logger.info("Fetched %d commit(s) for branch %s", len(commits), branch)
    return CommitHistory(branch=branch, groups=group_commits(commits))
