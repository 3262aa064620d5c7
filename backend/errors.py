"""
Error taxonomy for todo generation and summaries.

Input errors are user-correctable and carry a message that can be shown as-is.
Model errors wrap whatever the OpenAI client (or response validation) raised,
classified into the few kinds the HTTP layer knows how to surface.
"""
import json
import logging

import openai
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class TodoAIError(Exception):
    """Base class for every error raised by the todo pipelines."""


# ============ INPUT ERRORS ============
class InputValidationError(TodoAIError):
    """Raw user input was rejected before any model call."""


class EmptyInput(InputValidationError):
    pass


class TooShort(InputValidationError):
    pass


class TooLong(InputValidationError):
    pass


class IllegalCharacters(InputValidationError):
    pass


# ============ MODEL ERRORS ============
class ModelError(TodoAIError):
    """The external model call failed."""

    # Message safe to show to an end user
    public_message = "AI processing failed. Please try again later."


class SchemaViolation(ModelError):
    public_message = "The AI did not respond in the expected format. Please try again."


class AuthError(ModelError):
    public_message = "The AI API key is missing or invalid. Please check the server configuration."


class RateLimited(ModelError):
    public_message = "The AI usage limit was exceeded. Please try again in a few minutes."


class TransportError(ModelError):
    public_message = "A network error occurred. Please check the connection and try again later."


class UnclassifiedError(ModelError):
    public_message = "An unexpected error occurred. Please try again later."


AUTH_KEYWORDS = ("api key", "api_key", "unauthorized", "permission denied")
RATE_LIMIT_KEYWORDS = ("rate limit", "rate_limit", "quota", "429", "insufficient", "billing")
TRANSPORT_KEYWORDS = ("network", "connection", "timed out", "timeout", "econnrefused", "fetch")


def classify_model_error(exc: BaseException) -> ModelError:
    """
    Map an exception raised around a model call to a ModelError kind.

    Typed exceptions from the openai SDK and pydantic are checked first; the
    keyword heuristics only apply to errors the SDK did not type.
    """
    if isinstance(exc, ModelError):
        return exc

    if isinstance(exc, (ValidationError, json.JSONDecodeError)):
        return SchemaViolation(str(exc))

    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthError(str(exc))
    if isinstance(exc, openai.RateLimitError):
        return RateLimited(str(exc))
    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(exc, openai.APIConnectionError):
        return TransportError(str(exc))
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code in (401, 403):
            return AuthError(str(exc))
        if exc.status_code == 429:
            return RateLimited(str(exc))

    error_str = str(exc).lower()
    if any(keyword in error_str for keyword in AUTH_KEYWORDS):
        return AuthError(str(exc))
    if any(keyword in error_str for keyword in RATE_LIMIT_KEYWORDS):
        return RateLimited(str(exc))
    if any(keyword in error_str for keyword in TRANSPORT_KEYWORDS):
        return TransportError(str(exc))

    logger.error(f"Unclassified model error ({type(exc).__name__}): {exc}")
    return UnclassifiedError(str(exc))
