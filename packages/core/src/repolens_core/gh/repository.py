from __future__ import annotations

import logging
from urllib.parse import urlparse

from github import Github, GithubException

from repolens_core.errors import (
    FileFetchError,
    GitHubError,
    GitHubRequestError,
    RateLimitError,
    RepositoryNotFoundError,
)
from repolens_core.models import Commit, FileEntry, RepoRef

logger = logging.getLogger(__name__)

GITHUB_HOSTS = {"github.com", "www.github.com"}
DEFAULT_BRANCH = "main"
FALLBACK_BRANCH = "master"

_TREE_KINDS = {"blob": "file", "tree": "directory"}


def parse_repo_url(url: str, default_branch: str = DEFAULT_BRANCH) -> RepoRef | None:
    """Parse https://github.com/<owner>/<repo>[/tree/<branch>] into a RepoRef.

    A URL without a /tree/ segment gets default_branch. Returns None for
    anything that is not an http(s) github.com URL with at least an owner
    and a repository segment.
    """
    try:
        parsed = urlparse((url or "").strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or (parsed.hostname or "") not in GITHUB_HOSTS:
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        return None

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        return None
    branch = parts[3] if len(parts) > 3 and parts[2] == "tree" else default_branch
    return RepoRef(owner=owner, repo=repo, branch=branch)


def get_repo(ref: RepoRef, token: str | None = None, client: Github | None = None):
    """Return a lazy repository handle; no request is made until first use."""
    gh = client if client is not None else Github(token)
    return gh.get_repo(ref.full_name, lazy=True)


def _to_github_error(e: GithubException, not_found: str, failure: str) -> GitHubError:
    if e.status == 404:
        return RepositoryNotFoundError(not_found, status=404)
    if e.status == 403:
        return RateLimitError(
            "GitHub API rate limit exceeded or access forbidden. Please try again later "
            "or set GITHUB_TOKEN to raise the rate limit.",
            status=403,
        )
    return GitHubRequestError(f"{failure} (status {e.status}).", status=e.status)


def fetch_tree(repo, branch: str) -> list[FileEntry]:
    """Return the full recursive listing of a branch as FileEntry objects."""
    try:
        tree = repo.get_git_tree(branch, recursive=True)
    except GithubException as e:
        raise _to_github_error(
            e,
            not_found=f"Repository or branch not found (branch: {branch}). "
            "Please check the URL and ensure the branch exists.",
            failure="Failed to fetch repository file tree",
        ) from e

    entries = []
    for element in tree.tree:
        kind = _TREE_KINDS.get(element.type)
        if kind is None:
            continue  # submodule pointers
        entries.append(FileEntry(path=element.path, kind=kind, size=getattr(element, "size", None)))
    return entries


def fetch_tree_with_fallback(
    repo,
    branch: str,
    default_branch: str = DEFAULT_BRANCH,
    fallback: str = FALLBACK_BRANCH,
) -> tuple[str, list[FileEntry]]:
    """Fetch the tree for branch, retrying once with fallback if the default branch is missing.

    Returns the branch that actually served the tree alongside its entries.
    """
    try:
        return branch, fetch_tree(repo, branch)
    except RepositoryNotFoundError:
        if branch != default_branch or not fallback or fallback == branch:
            raise
        logger.warning("Branch %r not found, trying %r.", branch, fallback)

    try:
        return fallback, fetch_tree(repo, fallback)
    except GitHubError as e:
        raise type(e)(
            f"Failed to fetch repository tree. Neither '{branch}' nor '{fallback}' branch found "
            f"or other API error: {e}",
            status=e.status,
        ) from e


def fetch_file_content(repo, branch: str, path: str) -> str:
    """Return the text of a single file at branch. No retry."""
    try:
        content = repo.get_contents(path, ref=branch)
    except GithubException as e:
        raise FileFetchError(path, f"status {e.status}") from e
    if isinstance(content, list):
        raise FileFetchError(path, "path is a directory")
    return content.decoded_content.decode("utf-8", errors="replace")


def _to_commit(item) -> Commit | None:
    git_commit = item.commit
    author = git_commit.author
    date = getattr(author, "date", None) or getattr(getattr(git_commit, "committer", None), "date", None)
    if date is None:
        logger.warning("Skipping commit %s: no author or committer date.", item.sha)
        return None
    return Commit(
        sha=item.sha,
        message=git_commit.message or "",
        author_name=getattr(author, "name", None) or "",
        author_email=getattr(author, "email", None) or "",
        author_date=date,
        html_url=item.html_url,
    )


def fetch_commits(repo, branch: str) -> list[Commit]:
    """Return the first page of the branch's commit log, newest first.

    An empty list is a valid result (the branch has no commits to show).
    """
    try:
        page = repo.get_commits(sha=branch).get_page(0)
    except GithubException as e:
        if e.status == 409:
            # GitHub answers 409 for a repository with no commits at all.
            return []
        raise _to_github_error(
            e,
            not_found=f"Repository or branch not found (branch: {branch}). Could not load commit history.",
            failure="Failed to fetch commit history",
        ) from e
    commits = (_to_commit(item) for item in page)
    return [c for c in commits if c is not None]
