"""Tests for AI provider implementations.

Shared behaviour (prompt construction, error classification, empty-response
handling) lives in BaseReviewer and is tested once via a lightweight stub.
Provider-specific tests cover only the SDK call and its safety signal.
"""

import types
from unittest.mock import MagicMock, patch

import pytest

from repolens_core.errors import (
    ContentBlockedError,
    InvalidCredentialsError,
    MalformedRequestError,
    QuotaExceededError,
    ReviewServiceError,
)
from repolens_core.providers.anthropic import AnthropicReviewer
from repolens_core.providers.base import BaseReviewer
from repolens_core.providers.openai import OpenAIReviewer

FEEDBACK = "## Overview\nLooks fine."


class _StubReviewer(BaseReviewer):
    MODEL = "stub-model"
    API_KEY_ENV = "STUB_API_KEY"

    def __init__(self, response=FEEDBACK, error=None):
        super().__init__()
        self.response = response
        self.error = error
        self.calls = []

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.response


class _StatusError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Shared behaviour — tested once through the stub, not per provider
# ---------------------------------------------------------------------------


class TestBaseReviewerPrompts:
    def test_code_is_fenced_with_language_tag(self):
        prompt = _StubReviewer()._build_user_prompt("print(1)", "python", ["src/main.py"])
        assert "```python\nprint(1)\n```" in prompt

    def test_files_are_listed(self):
        prompt = _StubReviewer()._build_user_prompt("x", "go", ["cmd/main.go", "pkg/a.go"])
        assert "cmd/main.go, pkg/a.go" in prompt

    def test_without_files_mentions_language(self):
        prompt = _StubReviewer()._build_user_prompt("x", "rust", [])
        assert "from a rust context" in prompt

    def test_all_review_sections_requested(self):
        prompt = _StubReviewer()._build_user_prompt("x", "java", [])
        for heading in ("Overview", "Bugs", "Readability", "Best Practices", "Performance", "Security", "Refactoring"):
            assert heading in prompt

    def test_model_defaults_to_class_model(self):
        assert _StubReviewer().model == "stub-model"


class TestBaseReviewerReview:
    def test_returns_feedback(self):
        reviewer = _StubReviewer()
        assert reviewer.review("code", "python", ["a.py"]) == FEEDBACK
        assert len(reviewer.calls) == 1

    def test_empty_response_raises(self):
        with pytest.raises(ReviewServiceError, match="no feedback"):
            _StubReviewer(response="   ").review("code", "python")

    def test_failure_is_not_retried(self):
        reviewer = _StubReviewer(error=RuntimeError("boom"))
        with pytest.raises(ReviewServiceError, match="boom"):
            reviewer.review("code", "python")
        assert len(reviewer.calls) == 1

    def test_review_errors_pass_through(self):
        reviewer = _StubReviewer(error=ContentBlockedError("blocked"))
        with pytest.raises(ContentBlockedError, match="blocked"):
            reviewer.review("code", "python")


class TestClassifyError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (_StatusError("invalid x-api-key", 401), InvalidCredentialsError),
            (_StatusError("forbidden", 403), InvalidCredentialsError),
            (_StatusError("API key not valid"), InvalidCredentialsError),
            (_StatusError("rate limited", 429), QuotaExceededError),
            (_StatusError("You exceeded your current quota"), QuotaExceededError),
            (_StatusError("Rate limit reached for this API key", 429), QuotaExceededError),
            (_StatusError("api_key header has an invalid format", 400), MalformedRequestError),
            (_StatusError("prompt flagged by content_filter", 400), ContentBlockedError),
            (_StatusError("Candidate was blocked due to safety"), ContentBlockedError),
            (_StatusError("prompt is too long", 400), MalformedRequestError),
            (_StatusError("Parse input error"), MalformedRequestError),
            (_StatusError("overloaded", 529), ReviewServiceError),
            (RuntimeError("connection reset"), ReviewServiceError),
        ],
    )
    def test_classification(self, error, expected):
        assert isinstance(_StubReviewer()._classify_error(error), expected)

    def test_credential_message_names_env_var(self):
        error = _StubReviewer()._classify_error(_StatusError("nope", 401))
        assert "STUB_API_KEY" in str(error)

    def test_malformed_message_includes_details(self):
        error = _StubReviewer()._classify_error(_StatusError("prompt is too long", 400))
        assert "prompt is too long" in str(error)


# ---------------------------------------------------------------------------
# Provider-specific — only what differs between Anthropic and OpenAI
# ---------------------------------------------------------------------------


class TestAnthropicReviewer:
    def test_raises_import_error_without_sdk(self):
        with patch.dict("sys.modules", {"anthropic": None}):
            with pytest.raises(ImportError):
                AnthropicReviewer(api_key="key")

    def test_model_defaults_to_claude(self):
        assert "claude" in AnthropicReviewer(api_key="key").model

    def test_model_override(self):
        assert AnthropicReviewer(api_key="key", model="claude-opus-4-1").model == "claude-opus-4-1"

    def test_call_api_joins_text_blocks(self):
        from anthropic.types import TextBlock

        reviewer = AnthropicReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.messages.create.return_value = types.SimpleNamespace(
            stop_reason="end_turn",
            content=[TextBlock(type="text", text="## Review\n"), TextBlock(type="text", text="All good.")],
        )
        assert reviewer.review("x = 1", "python") == "## Review\nAll good."
        kwargs = reviewer.client.messages.create.call_args.kwargs
        assert kwargs["model"] == AnthropicReviewer.MODEL
        assert "```python" in kwargs["messages"][0]["content"]

    def test_refusal_is_content_blocked(self):
        reviewer = AnthropicReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.messages.create.return_value = types.SimpleNamespace(stop_reason="refusal", content=[])
        with pytest.raises(ContentBlockedError):
            reviewer.review("x", "python")


class TestOpenAIReviewer:
    def test_raises_import_error_without_sdk(self):
        import repolens_core.providers.openai as openai_mod

        real_openai = openai_mod._OpenAI
        openai_mod._OpenAI = None
        try:
            with pytest.raises(ImportError):
                OpenAIReviewer(api_key="key")
        finally:
            openai_mod._OpenAI = real_openai

    def test_model_defaults_to_gpt(self):
        assert "gpt" in OpenAIReviewer(api_key="key").model

    def _response(self, content, finish_reason="stop"):
        message = types.SimpleNamespace(content=content)
        return types.SimpleNamespace(choices=[types.SimpleNamespace(message=message, finish_reason=finish_reason)])

    def test_call_api_returns_message(self):
        reviewer = OpenAIReviewer(api_key="key", model="gpt-4.1")
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.create.return_value = self._response("Nice code.")
        assert reviewer.review("x", "go") == "Nice code."
        assert reviewer.client.chat.completions.create.call_args.kwargs["model"] == "gpt-4.1"

    def test_content_filter_is_content_blocked(self):
        reviewer = OpenAIReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.create.return_value = self._response(None, "content_filter")
        with pytest.raises(ContentBlockedError):
            reviewer.review("x", "go")

    def test_none_content_is_empty_response(self):
        reviewer = OpenAIReviewer(api_key="key")
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.create.return_value = self._response(None)
        with pytest.raises(ReviewServiceError):
            reviewer.review("x", "go")
