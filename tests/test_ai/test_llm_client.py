"""test_llm_client.py
Test LLMClient class.
"""
import asyncio
import os
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from dotenv import load_dotenv
load_dotenv()  # load environment variables from .env

from langchain_core.messages import AIMessage

from canvas_cv.ai.llm_client import LLMClient
from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.exceptions import (
    LLMConfigError,
    LLMInitializationError,
    LLMQueryError,
)
from canvas_cv.test_helpers.llm_client_test_helpers import expected_test_responses


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture
def fake_key(monkeypatch):
    """Provide a syntactically valid (never used) Anthropic key."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")


@pytest.fixture
def has_anthropic_key():
    """Skip tests if Anthropic API key is missing or placeholder."""
    key = os.getenv("ANTHROPIC_API_KEY")
    if not key or key == "<REPLACE_ME>":
        pytest.skip("Anthropic API key not defined in .env")
    return key


# -----------------------------
# Initialization tests
# -----------------------------
def test_invalid_provider_raises():
    """Ensure initializing LLMClient with unsupported provider raises LLMConfigError."""
    with pytest.raises(LLMConfigError):
        LLMClient(provider="unsupported")


def test_model_resolution_defaults(fake_key):
    """Check that model defaults to EDITOR_DEFAULTS if not provided."""
    client = LLMClient(provider="anthropic", model=None)
    assert client.model == EDITOR_DEFAULTS.ANTHROPIC_MODEL_ID


def test_missing_api_key_raises(monkeypatch):
    """Check that missing API key raises LLMConfigError."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(LLMConfigError):
        LLMClient(provider="anthropic")


def test_missing_api_key_allowed_in_test_mode(monkeypatch):
    """Test mode never needs a key."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    client = LLMClient(provider="anthropic", test_mode=True, function_name="rewrite_text")
    assert client.api_key is None


# -----------------------------
# Client initialization
# -----------------------------
@patch("langchain_anthropic.ChatAnthropic")
def test_initialize_client_anthropic(mock_chatanthropic, fake_key):
    """Verify Anthropic client initializes correctly with API key and model."""
    client = LLMClient(provider="anthropic", model="test-model")
    client.initialize_client()
    mock_chatanthropic.assert_called_once()
    assert client.client is not None


@patch("langchain_anthropic.ChatAnthropic", side_effect=RuntimeError("boom"))
def test_initialize_client_failure_wrapped(mock_chatanthropic, fake_key):
    client = LLMClient(provider="anthropic", model="test-model")
    with pytest.raises(LLMInitializationError):
        client.initialize_client()


# -----------------------------
# Query tests
# -----------------------------
def test_aquery_without_client_raises(fake_key):
    """aquery without initializing client should raise LLMInitializationError."""
    client = LLMClient(provider="anthropic", model="test-model")
    with pytest.raises(LLMInitializationError):
        asyncio.run(client.aquery(system_prompt="Hi", user_prompt="Hello"))


def test_aquery_test_mode_returns_mock():
    """Verify test_mode returns the canned response for the calling feature."""
    client = LLMClient(
        provider="anthropic",
        model="test-model",
        test_mode=True,
        function_name="rewrite_text",
        test_response_type="success"
    )
    client.client = MagicMock()
    result = asyncio.run(client.aquery(system_prompt="sys", user_prompt="user"))
    assert result == expected_test_responses["rewrite_text"]["success"]


def test_aquery_test_mode_parses_json():
    """Async query in test mode returns the parsed analysis dict."""
    client = LLMClient(test_mode=True, function_name="analyze_ats")
    client.client = MagicMock()
    result = asyncio.run(client.aquery(system_prompt="sys", user_prompt="user", expect_json=True))
    assert result["score"] == 72


def test_aquery_live_path_uses_ainvoke(fake_key):
    """Outside test mode the LangChain client's ainvoke is awaited."""
    client = LLMClient(provider="anthropic", model="test-model")
    client.client = MagicMock()
    client.client.ainvoke = AsyncMock(return_value=AIMessage(content="  Shipped it.  "))
    result = asyncio.run(client.aquery(system_prompt="sys", user_prompt="user"))
    assert result == "Shipped it."
    messages = client.client.ainvoke.call_args.args[0]
    assert [m.type for m in messages] == ["system", "human"]


def test_aquery_provider_error_wrapped(fake_key):
    client = LLMClient(provider="anthropic", model="test-model")
    client.client = MagicMock()
    client.client.ainvoke = AsyncMock(side_effect=RuntimeError("overloaded"))
    with pytest.raises(LLMQueryError) as e:
        asyncio.run(client.aquery(system_prompt=None, user_prompt="user"))
    assert "overloaded" in str(e.value)


def test_aquery_not_json_warns_and_returns_text():
    """A non-JSON answer to a JSON request comes back as text with a warning."""
    client = LLMClient(test_mode=True, function_name="analyze_ats", test_response_type="not_json")
    client.client = MagicMock()
    with pytest.warns(UserWarning):
        result = asyncio.run(client.aquery(system_prompt="sys", user_prompt="user", expect_json=True))
    assert result == expected_test_responses["analyze_ats"]["not_json"]


def test_aquery_empty_response_raises():
    """An empty model message is an error, wrapped as LLMQueryError."""
    client = LLMClient(test_mode=True, function_name="rewrite_text")
    client.client = object()  # just needs to exist; won't be used in test_mode

    with patch("canvas_cv.ai.llm_client.create_mock_llm_response") as mock_create:
        mock_create.return_value = AIMessage(content="")
        with pytest.raises(LLMQueryError):
            asyncio.run(client.aquery(system_prompt="sys", user_prompt="user"))


def test_aquery_fallback_message():
    """Test that fallback_message is returned if the response is only whitespace."""
    client = LLMClient(
        test_mode=True,
        function_name="rewrite_text",
        fallback_message="fallback",
    )
    client.client = object()

    with patch("canvas_cv.ai.llm_client.create_mock_llm_response") as mock_create:
        mock_create.return_value = AIMessage(content="   ")
        assert asyncio.run(client.aquery(system_prompt="sys", user_prompt="user")) == "fallback"


def test_test_mode_without_function_name_raises():
    client = LLMClient(test_mode=True)
    client.client = object()
    with pytest.raises(LLMQueryError):
        asyncio.run(client.aquery(system_prompt="sys", user_prompt="user"))


# -----------------------------
# Live tests
# -----------------------------
def test_live_rewrite(LLM_TEST_MODE, has_anthropic_key):
    """One real rewrite call (only with --llm-mode basic_only / full)."""
    if LLM_TEST_MODE == "mock_only":
        pytest.skip("Live LLM tests disabled in mock_only mode")
    client = LLMClient(function_name="rewrite_text")
    client.initialize_client()
    result = asyncio.run(client.aquery(
        system_prompt="Return only the improved text.",
        user_prompt="Fix grammar: 'i has led a team'",
    ))
    assert isinstance(result, str) and result
