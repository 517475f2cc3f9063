"""Submission orchestration: two independent branches joined at the end.

A submission runs the code-review branch and the commit-history branch
concurrently. PyGithub and the provider SDKs are blocking, so each branch runs
on a worker thread via asyncio.to_thread; inside the review branch file
fetches stay sequential because the budget check gates the next request.

Each branch reports through its own Outcome. Nothing is shared between them,
so a failure in one cannot cancel or corrupt the other.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from repolens_core.errors import InvalidRepoURLError, RepoLensError, UnsupportedLanguageError
from repolens_core.gh.repository import get_repo, parse_repo_url
from repolens_core.models import RepoRef
from repolens_core.reviewer import CommitHistory, ReviewReport, _get_reviewer, load_commit_history, review_repository
from repolens_core.utils.code import get_extensions

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Tagged result of one branch: exactly one of value / error is set."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SubmissionResult:
    ref: RepoRef
    language: str
    review: Outcome[ReviewReport]
    commits: Outcome[CommitHistory]

    @property
    def errors(self) -> list[str]:
        """Branch errors, review first. Both are kept when both branches fail."""
        return [o.error for o in (self.review, self.commits) if o.error is not None]

    @property
    def error_message(self) -> str:
        return "\n\n".join(self.errors)


async def _capture(awaitable: Awaitable[Any], branch: str) -> Outcome:
    try:
        return Outcome(value=await awaitable)
    except RepoLensError as e:
        logger.warning("%s failed: %s", branch, e)
        return Outcome(error=str(e))
    except Exception as e:
        logger.exception("Unexpected error in %s", branch)
        return Outcome(error=f"An unexpected error occurred during {branch}: {e}")


def validate_submission(repo_url: str, language: str, default_branch: str = "main") -> RepoRef:
    """Check the URL and language without touching the network."""
    ref = parse_repo_url(repo_url, default_branch=default_branch)
    if ref is None:
        raise InvalidRepoURLError(repo_url)
    if not get_extensions(language):
        raise UnsupportedLanguageError(language)
    return ref


async def run_submission(repo_url: str, language: str, config: dict, github=None) -> SubmissionResult:
    """Validate input, then run the review and commit branches concurrently.

    Raises ValidationError / ConfigurationError before any network call.
    Failures inside either branch end up in that branch's Outcome instead.
    """
    ref = validate_submission(repo_url, language, config.get("default_branch", "main"))
    language = language.lower()
    reviewer = _get_reviewer(config)
    repo = get_repo(ref, token=config.get("github_token"), client=github)

    logger.info("Reviewing %s@%s as %s", ref.full_name, ref.branch, language)
    review, commits = await asyncio.gather(
        _capture(
            asyncio.to_thread(review_repository, repo, ref, language, reviewer, config),
            "code review",
        ),
        _capture(asyncio.to_thread(load_commit_history, repo, ref.branch), "commit history"),
    )
    return SubmissionResult(ref=ref, language=language, review=review, commits=commits)


class ReviewSession:
    """Holds the latest submission result and discards superseded ones.

    Every submit() takes a new sequence number; when a submission finishes
    after a newer one has started, its result is dropped rather than
    overwriting the newer state.
    """

    def __init__(self, config: dict, github=None):
        self.config = config
        self.github = github
        self.latest: SubmissionResult | None = None
        self._sequence = 0

    async def submit(self, repo_url: str, language: str) -> SubmissionResult | None:
        self._sequence += 1
        sequence = self._sequence
        self.latest = None

        result = await run_submission(repo_url, language, self.config, github=self.github)
        if sequence != self._sequence:
            logger.warning("Discarding stale result for %s (superseded by a newer submission).", repo_url)
            return None
        self.latest = result
        return result
