"""Error taxonomy for repository reviews.

Every error carries a message that is safe to show to the user as-is; the
submission boundary converts them into per-branch failure outcomes.
"""

from __future__ import annotations


class RepoLensError(Exception):
    """Base exception for all repolens errors."""


class ConfigurationError(RepoLensError):
    """Raised when required configuration (e.g. an API key) is missing or invalid."""


# --------------------------------------------------------------------------- #
# Validation — detected before any network call                              #
# --------------------------------------------------------------------------- #


class ValidationError(RepoLensError):
    """Raised when user input is rejected before any network call."""


class InvalidRepoURLError(ValidationError):
    def __init__(self, url: str):
        self.url = url
        super().__init__("Invalid GitHub repository URL. Please use a format like https://github.com/owner/repo.")


class UnsupportedLanguageError(ValidationError):
    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported language: {language!r}. No file extensions are registered for it.")


# --------------------------------------------------------------------------- #
# GitHub                                                                      #
# --------------------------------------------------------------------------- #


class GitHubError(RepoLensError):
    """Raised when the GitHub API rejects a request."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class RepositoryNotFoundError(GitHubError):
    """404 — the repository or branch does not exist (or is private)."""


class RateLimitError(GitHubError):
    """403 — rate limit exceeded or access forbidden."""


class GitHubRequestError(GitHubError):
    """Any other non-2xx response."""


class FileFetchError(RepoLensError):
    """Raised when the content of a single file cannot be retrieved."""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        message = f"Failed to fetch content for file: {path}"
        super().__init__(f"{message} ({detail})" if detail else message)


class NoMatchingFilesError(RepoLensError):
    """No file in the repository matched the language and directory rules."""

    def __init__(self, language: str, extensions: list[str]):
        self.language = language
        self.extensions = extensions
        super().__init__(
            f"No relevant {language} files found in the repository. "
            f"Supported extensions: {', '.join(extensions)}"
        )


class ContentUnavailableError(RepoLensError):
    """Files matched, but none of them could be retrieved."""

    def __init__(self, language: str, paths: list[str]):
        self.language = language
        self.paths = paths
        super().__init__(
            f"Successfully identified {language} files, but failed to fetch content for all selected files: "
            f"{', '.join(paths)}. Please check file accessibility or try again."
        )


# --------------------------------------------------------------------------- #
# Upstream AI service — never retried                                        #
# --------------------------------------------------------------------------- #


class ReviewError(RepoLensError):
    """Raised when the AI review request fails."""


class InvalidCredentialsError(ReviewError):
    pass


class QuotaExceededError(ReviewError):
    pass


class MalformedRequestError(ReviewError):
    pass


class ContentBlockedError(ReviewError):
    pass


class ReviewServiceError(ReviewError):
    """Unclassified failure, including an empty response."""
