"""
llm_client.py

Universal LangChain-based client for multiple LLM providers.
Supports Anthropic (Claude).
Includes configuration validation, flexible prompting, async queries
and optional JSON parsing.
"""
import os
from typing import Optional, Literal, List
import warnings

from dotenv import load_dotenv

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from canvas_cv.ai.json_extraction import clean_llm_json_response
from canvas_cv.config import EDITOR_DEFAULTS
from canvas_cv.exceptions import (
    LLMConfigError,
    LLMInitializationError,
    LLMQueryError,
    LLMEmptyResponse
)
from canvas_cv.test_helpers.llm_client_test_helpers import (
    create_mock_llm_response
)

SUPPORTED_PROVIDERS = ["anthropic"]
load_dotenv()

class LLMClient:
    """
    A flexible, provider-agnostic client for interacting with large language models (LLMs)
    through the LangChain interface. Must be "initialized" using "initialize_client()" function
    before it can be used to make queries.

    Handles:
        - Pulling API keys from .env file
        - Resolving provider, model ID, and API keys
        - Validating configuration
        - Optional test mode with deterministic responses
        - Integration with LangChain clients (Anthropic)

    Initialization uses defaults from `EDITOR_DEFAULTS` if values are not provided.

    Attributes:
        provider (Optional[str]): Name of the LLM provider (e.g., "anthropic"). Defaults
            to EDITOR_DEFAULTS.LLM_PROVIDER.
        model (Optional[str]): Model identifier or name. If none provided then will automatically match
            the provided provider to its EDITOR_DEFAULTS default model name.
        api_key (Optional[str]): Provider-specific API key used for authentication pulled from .env. Will
            automatically match to selected provider.
        function_name (Optional[str]): Name of the editor feature invoking the LLM.
        fallback_message (Optional[str]): Default message returned when the model response is empty.
        test_mode (bool): If True, returns mock responses instead of making real API calls.
        test_response_type (str): Mock response type used in test mode.
        client (Any): Initialized LangChain chat model client.

    Raises:
        LLMConfigError: If required environment variables are missing or invalid.
        LLMInitializationError: If the model client cannot be initialized.
        LLMQueryError: If a query fails during execution.

    Example:
        >>> client = LLMClient(provider="anthropic", model="claude-haiku-4-5")
        >>> client.initialize_client()
        >>> text = await client.aquery(
        ...     system_prompt="You are an expert resume writer.",
        ...     user_prompt="Make this bullet more concise: ...",
        ... )
    """

    def __init__(
        self,
        provider: Optional[str] = EDITOR_DEFAULTS.LLM_PROVIDER,
        model: Optional[str] = None,
        function_name: Optional[str] = None,
        fallback_message: Optional[str] = None,
        test_mode: Optional[bool] = False,
        test_response_type: Literal["success", "failed", "unexpected_json", "not_json"] = "success",
    ):
        """Initialize an LLMClient instance and resolve provider-specific configuration.

        Args:
            provider (Optional[str], optional): Name of the LLM provider (e.g., "anthropic").
                Defaults to `EDITOR_DEFAULTS.LLM_PROVIDER`.
            model (Optional[str], optional): Model identifier to use for the provider.
                If None, the default model from EDITOR_DEFAULTS will be used.
            function_name (Optional[str], optional): Name of the editor feature invoking the LLM
                (e.g. "rewrite_text"). Selects the canned response in test mode.
            fallback_message (Optional[str], optional): Message to return if the model response is empty.
                Defaults to None.
            test_mode (Optional[bool], optional): If True, the client will return deterministic mock responses
                instead of querying the live LLM. Defaults to False.
            test_response_type (Literal["success", "failed", "unexpected_json", "not_json"], optional):
                Type of mock response to use when `test_mode` is True. Defaults to "success".
        """
        self.function_name = function_name
        self.fallback_message = fallback_message
        self.test_mode = test_mode
        self.test_response_type = test_response_type

        # --- Resolve configuration ---
        self.provider = provider
        self._resolve_provider()

        self._resolve_model(model)
        self._resolve_api_key()

        # Only fill client when `initialize_client()` is run
        self.client = None

    # --- Init helpers ---
    def _resolve_provider(self) -> None:
        """
        Validate that self.provider is valid and supported LLM provider in this class.

        Raises:
            LLMConfigError: If the provider is not one of the supported providers.
        """
        if self.provider not in SUPPORTED_PROVIDERS:
            raise LLMConfigError(
                variable_name="LLM_PROVIDER",
                extra_info=f"Choices are: {SUPPORTED_PROVIDERS}"
            )

    def _resolve_model(self, model: Optional[str]) -> None:
        """
        Resolve and set the model ID for the selected provider.
        - Uses the `model` parameter if provided.
        - Otherwise, falls back to the default model ID from `EDITOR_DEFAULTS`.

        Raises:
            LLMConfigError: If no model ID is provided or available for the selected provider.
        """
        default_models = {
            "anthropic": EDITOR_DEFAULTS.ANTHROPIC_MODEL_ID,
        }

        resolved_model = model or default_models.get(self.provider)
        if not resolved_model:
            raise LLMConfigError(
                variable_name=f"{self.provider}_MODEL_ID",
                message=(
                    f"You must provide a model ID for `{self.provider}` either via EDITOR_DEFAULTS "
                    "or by explicitly passing `model` when initializing LLMClient."
                )
            )

        self.model = resolved_model

    def _resolve_api_key(self) -> None:
        """
        Retrieve and validate the API key for the selected provider from environment variables.
        Does not check if the API key is valid, simply loads it. Test mode never needs a key.

        Raises:
            LLMConfigError: If the API key is missing or the provider is invalid.
        """
        api_key_map = {
            "anthropic": "ANTHROPIC_API_KEY",
        }

        key_name = api_key_map.get(self.provider)
        if not key_name:
            raise LLMConfigError(
                variable_name="LLM_PROVIDER",
                message=f"No API key mapping defined for provider `{self.provider}`"
            )

        api_key = os.getenv(key_name)
        if not api_key or api_key == "<REPLACE_ME>":
            if self.test_mode:
                self.api_key = None
                return
            raise LLMConfigError(
                variable_name=f"{self.provider}_API_KEY",
                message=(
                    f"You must set a `{self.provider}` API key in your environment variables "
                    "to run LLM queries to their services."
                )
            )

        self.api_key = api_key

    def initialize_client(self) -> None:
        """
        Initialize the LangChain chat model client for the selected provider.
        - Imports the provider-specific client dynamically.
        - Initializes the client using the resolved `self.model` and `self.api_key`.
        - Assigns the initialized client to `self.client`.

        Notes:
            - No API call is made during initialization, so this method does not incur costs.

        Raises:
            LLMConfigError: If the provider is not supported.
            LLMInitializationError: If the client cannot be initialized due to an internal error.
        """
        try:
            if self.provider == "anthropic":
                from langchain_anthropic import ChatAnthropic
                self.client = ChatAnthropic(
                    model=self.model,
                    anthropic_api_key=self.api_key or "test-mode",
                    temperature=EDITOR_DEFAULTS.LLM_TEMPERATURE
                )
            else:
                raise LLMConfigError(
                    variable_name="LLM_PROVIDER",
                    extra_info=f"Unsupported provider: {self.provider}"
                )
        except Exception as e:
            raise LLMInitializationError(
                provider=self.provider,
                model=self.model,
                original_exception=e
            )

    # --- QUERY EXECUTION ---
    def _build_messages(self, system_prompt: Optional[str], user_prompt: str) -> List[BaseMessage]:
        messages = [
            SystemMessage(content=system_prompt) if system_prompt else None,
            HumanMessage(content=user_prompt)
        ]
        return [m for m in messages if m]  # Remove None

    def _mock_response(self) -> AIMessage:
        """Return the canned test response for `self.function_name`."""
        if self.function_name and self.test_response_type:
            return create_mock_llm_response(
                function_name=self.function_name,
                response_type=self.test_response_type,
                provider=self.provider
            )
        # Raise incorrect test config error
        raise LLMQueryError(
            provider=self.provider,
            model=self.model,
            additional_message=(
                "Test mode is enabled without valid test variables having been defined. "
                f"self.test_mode = {self.test_mode} "
                f"self.function_name = {self.function_name} "
            ),
        )

    def _process_response(self, response: AIMessage, expect_json: bool) -> str | dict:
        """Validate a model response and optionally parse its JSON content."""
        # Raise error if no response
        if not response or not response.content:
            raise LLMEmptyResponse(provider=self.provider, model=self.model)

        # Get the result text
        response_content = response.content.strip()

        if expect_json:
            try:
                # Try to parse the json
                response_content = clean_llm_json_response(response_text=response_content)
            except Exception as e:
                # Warn the user if we're expecting a json response but didn't get one (LLM failure)
                warnings.warn(
                    (
                        f"LLM did not return valid JSON when it was expected to. "
                        f"Provider: `{self.provider}` "
                        f"Model: `{self.model}` "
                        f"Function: `{self.function_name}` \n"
                        f"Exception: `{e}` \n"
                        "This may occur if the LLM output was malformed or test mode variables "
                        "were not correctly defined."
                    ),
                    category=UserWarning,
                )

        # Return fallback message if result text is empty
        if not response_content:
            response_content = self.fallback_message or "No query result"

        return response_content

    async def aquery(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float = EDITOR_DEFAULTS.LLM_TEMPERATURE,
        expect_json: bool = False,
    ) -> str | dict:
        """
        Query the model without blocking the event loop while the provider responds.

        Args:
            system_prompt (Optional[str]): Instruction or behavioral setup for the model.
            user_prompt (str): Input text or main query.
            temperature (float): Model creativity level (0.0-1.0).
            expect_json (bool): Whether to parse response as JSON.

        Returns:
            str | dict: dict if `expect_json` is True otherwise str. str may be returned even
                when `expect_json` is True if the LLM does not behave as expected.

        Raises:
            LLMInitializationError: If `initialize_client()` has not been run.
            LLMQueryError: If the query (or its validation) fails.
        """
        if not self.client:
            raise LLMInitializationError(provider=self.provider, model=self.model)

        try:
            if self.test_mode == False:
                response: AIMessage = await self.client.ainvoke(
                    self._build_messages(system_prompt, user_prompt),
                    temperature=temperature
                )
            else:
                response = self._mock_response()

            return self._process_response(response, expect_json)

        except Exception as e:
            raise LLMQueryError(provider=self.provider, model=self.model, original_exception=e)
