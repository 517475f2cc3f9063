"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → _build_system_prompt() + _build_user_prompt()
             → _call_api()   ← only this differs per provider
             → _classify_error() on failure

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

Prompt construction and error classification live here so every provider
reports failures through the same ReviewError subclasses. Nothing is retried:
a failed review is surfaced to the user, who can resubmit.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from repolens_core.errors import (
    ContentBlockedError,
    InvalidCredentialsError,
    MalformedRequestError,
    QuotaExceededError,
    ReviewError,
    ReviewServiceError,
)

logger = logging.getLogger(__name__)

_MAX_TOKENS = 8192


class BaseReviewer(ABC):
    MODEL: str = ""
    MAX_TOKENS: int = _MAX_TOKENS
    # Environment variable named in credential errors.
    API_KEY_ENV: str = "API key"

    def __init__(self, model: str | None = None):
        self.model = model or self.MODEL

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(self, code: str, language: str, files_reviewed: list[str] | None = None) -> str:
        """Return free-text markdown feedback for the assembled code.

        Raises a ReviewError subclass when the provider call fails or returns
        nothing usable.
        """
        system = self._build_system_prompt()
        user = self._build_user_prompt(code, language, files_reviewed or [])
        try:
            text = self._call_api(system, user)
        except ReviewError:
            raise
        except Exception as e:
            logger.error("%s API call failed: %s", self.__class__.__name__, e)
            raise self._classify_error(e) from e

        if not text or not text.strip():
            logger.warning("%s returned an empty response.", self.__class__.__name__)
            raise ReviewServiceError(
                "Received no feedback from the AI. The response might be empty or in an unexpected format."
            )
        return text

    # ------------------------------------------------------------------ #
    # Abstract — implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise the SDK's own exception on failure (review() classifies
        it), or ContentBlockedError when the response reports a safety stop.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _classify_error(self, error: Exception) -> ReviewError:
        """Map an SDK exception onto the user-facing ReviewError subclasses.

        Both SDKs expose the HTTP status as ``status_code`` on their status
        errors. The status decides when present; message keywords only cover
        errors raised without one. Safety stops arrive as 400s, so the safety
        keywords are checked before the malformed-request statuses.
        """
        status = getattr(error, "status_code", None)
        message = str(error)
        lowered = message.lower()
        keywords = status is None

        if status in (401, 403) or (keywords and ("api key" in lowered or "api_key" in lowered)):
            return InvalidCredentialsError(
                f"Invalid API key. Please check your {self.API_KEY_ENV} environment variable."
            )
        if status == 429 or (keywords and "quota" in lowered):
            return QuotaExceededError("API quota exceeded. Please check your API quota or try again later.")
        if "safety" in lowered or "content_filter" in lowered or "content filter" in lowered:
            return ContentBlockedError(
                "The code review was blocked due to safety concerns with the input or output content."
            )
        if status in (400, 413, 422) or (keywords and "parse input error" in lowered):
            return MalformedRequestError(
                "The AI model could not process the request, possibly due to the input format or content. "
                f"Details: {message}"
            )
        return ReviewServiceError(f"Failed to get review from AI: {message or 'Unknown error from the AI service'}")

    def _build_system_prompt(self) -> str:
        return """You are an expert AI code reviewer.
Analyze the provided code and offer a detailed, constructive review.
Structure your feedback with markdown: headings, bold text, bullet points
and fenced code blocks with a language tag for code suggestions.
Be thorough and actionable. If the code is too short or lacks context for a
full review, say so and review what is available."""

    def _build_user_prompt(self, code: str, language: str, files_reviewed: list[str]) -> str:
        if files_reviewed:
            context = (
                f"The code provided below is a concatenation of the following file(s) from a {language} "
                f"repository: {', '.join(files_reviewed)}. Please consider this context in your review."
            )
        else:
            context = f"The code provided below is from a {language} context."

        return f"""{context}

Address each of the following sections relevant to the provided code:

**1. Overview & General Impression:**
   - A brief summary of the code's purpose (if discernible) and your overall assessment.

**2. Potential Bugs & Logical Errors:**
   - Identify bugs, logical flaws or unhandled edge cases, with specific examples from the code.

**3. Code Quality & Readability:**
   - Comment on clarity, organization, naming conventions and comments.

**4. Adherence to Best Practices & Conventions ({language}-specific):**
   - Evaluate whether the code follows idiomatic patterns and style guides for {language}.

**5. Performance Considerations (if applicable):**
   - Point out potential bottlenecks and suggest optimizations.

**6. Security Vulnerabilities (if applicable):**
   - Highlight security concerns such as input validation or data exposure.

**7. Suggestions for Improvement & Refactoring:**
   - Give concrete suggestions, with code examples where helpful.

**8. Positive Aspects:**
   - Mention parts of the code that are well written.

Code to review:
```{language}
{code}
```"""
