"""exceptions.py
Defines custom exceptions for this project.
"""
from typing import Optional, List

# ------------------------ Resume Store Errors ------------------------
class ResumeStoreError(Exception):
    """Base exception for resume store errors."""
    pass

class InvalidBlockDataError(ResumeStoreError):
    """Raised when a partial update names fields the block payload does not have."""
    def __init__(
        self,
        block_type: str,
        invalid_fields: List[str],
        context: Optional[str] = None
    ):
        self.block_type = block_type
        self.invalid_fields = invalid_fields
        message = (
            f"Block of type '{block_type}' has no field(s) {invalid_fields}."
        )
        if context:
            message += f" Context: {context}"
        super().__init__(message)

class UnsupportedBlockTypeError(ResumeStoreError):
    """Raised when a block type has no payload, renderer or serializer registered."""
    def __init__(self, block_type: str, supported_types: List[str]):
        self.block_type = block_type
        self.supported_types = supported_types
        super().__init__(
            f"Block type '{block_type}' is not supported. "
            f"Supported types: {supported_types}"
        )

# ------------------------ Field Target Errors ------------------------
class FieldPathError(Exception):
    """
    Raised when a field path string (e.g. ``items[0].description``) cannot be
    turned into a field target.

    Attributes:
        field_path (str): The path that failed to parse.
        message (str): Human-readable description of the error.
    """
    def __init__(self, field_path: str, message: str = "Invalid field path"):
        self.field_path = field_path
        self.message = message
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        return f"{self.message}: '{self.field_path}'"

# ------------------------ ATS Analysis Errors ------------------------
class AnalysisParseError(Exception):
    """
    Raised when an ATS analysis response cannot be turned into an ATSAnalysisResult.

    Attributes:
        message (str): Human-readable description of the error.
        raw_response (str | None): The response that failed to parse, kept for debugging.
    """

    def __init__(
        self,
        message: str = "Failed to parse ATS analysis",
        raw_response: str | None = None,
    ):
        self.message = message
        self.raw_response = raw_response
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        """Construct the complete error message including a preview of the response."""
        if self.raw_response:
            preview = self.raw_response[:200]
            return f"{self.message}\n\nRaw Response:\n{preview}"
        return self.message


# ------------------------ LLM Querying Errors ------------------------
class LLMConfigError(Exception):
    """Raised when a required configuration (in .env by default) for LLMClient to function
    is missing or invalid."""

    def __init__(
        self,
        variable_name: str,
        message: str = None,
        extra_info: str = None
    ):
        """
        Args:
            variable_name: Name of the config variable.
            message: Optional custom message for the error.
            extra_info: Additional information to append to the error message.
        """
        if message is None:
            message = f"Missing or invalid configuration: {variable_name}. Please set it in your .env file."
        if extra_info:
            message += f" | {extra_info}"
        super().__init__(message)
        self.variable_name = variable_name
        self.extra_info = extra_info

    def __str__(self):
        return f"[CONFIG ERROR] {super().__str__()} | Variable: {self.variable_name}"

class LLMError(Exception):
    """Base exception for all LLM-related errors."""
    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        self.provider = provider
        self.model = model
        self.original_exception = original_exception

        base_msg = message
        if provider:
            base_msg += f" | Provider: {provider}"
        if model:
            base_msg += f" | Model: {model}"
        if original_exception:
            base_msg += f" | Original Exception: {original_exception}"

        super().__init__(base_msg)


class LLMInitializationError(LLMError):
    """Raised when the LLM client fails to initialize."""
    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        original_exception: Optional[Exception] = None,
        additional_message: Optional[str] = None
    ):
        message = "Failed to initialize LLM client"
        if additional_message:
            message += f": {additional_message}"
        super().__init__(
            message=message,
            provider=provider,
            model=model,
            original_exception=original_exception,
        )


class LLMQueryError(LLMError):
    """Raised when a query to the LLM fails."""
    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        additional_message: Optional[str] = None,
        original_exception: Exception = None,
    ):
        message = "LLM query failed"
        if additional_message:
            message += f": {additional_message}"

        super().__init__(
            message=message,
            provider=provider,
            model=model,
            original_exception=original_exception,
        )


class LLMEmptyResponse(LLMError):
    """Raised when the LLM returns an empty response."""
    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ):
        super().__init__(
            message="LLM returned an empty response",
            provider=provider,
            model=model,
        )
