"""
Unit tests for classifying model-call failures.
"""
import json

import httpx
import openai
import pytest
from pydantic import ValidationError
from backend.errors import (
    AuthError,
    RateLimited,
    SchemaViolation,
    TransportError,
    UnclassifiedError,
    classify_model_error,
)
from backend.models import TodoDraft

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def status_error(error_cls, status_code, message="error"):
    request = httpx.Request("POST", OPENAI_URL)
    return error_cls(message, response=httpx.Response(status_code, request=request), body=None)


class TestSdkErrors:
    def test_authentication(self):
        assert isinstance(classify_model_error(status_error(openai.AuthenticationError, 401)), AuthError)

    def test_permission_denied(self):
        assert isinstance(classify_model_error(status_error(openai.PermissionDeniedError, 403)), AuthError)

    def test_rate_limit(self):
        assert isinstance(classify_model_error(status_error(openai.RateLimitError, 429)), RateLimited)

    def test_connection(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL))
        assert isinstance(classify_model_error(error), TransportError)

    def test_timeout(self):
        error = openai.APITimeoutError(request=httpx.Request("POST", OPENAI_URL))
        assert isinstance(classify_model_error(error), TransportError)

    def test_generic_status_by_code(self):
        assert isinstance(classify_model_error(status_error(openai.APIStatusError, 429)), RateLimited)
        assert isinstance(classify_model_error(status_error(openai.APIStatusError, 401)), AuthError)

    def test_server_error_unclassified(self):
        error = status_error(openai.InternalServerError, 500, "The server had an error")
        assert isinstance(classify_model_error(error), UnclassifiedError)


class TestSchemaErrors:
    def test_pydantic_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            TodoDraft.model_validate({"priority": "urgent"})
        assert isinstance(classify_model_error(exc_info.value), SchemaViolation)

    def test_json_decode(self):
        error = json.JSONDecodeError("Expecting value", "not json", 0)
        assert isinstance(classify_model_error(error), SchemaViolation)


class TestKeywordFallback:
    @pytest.mark.parametrize("message,kind", [
        ("Invalid API key provided", AuthError),
        ("You exceeded your current quota", RateLimited),
        ("Rate limit reached for requests", RateLimited),
        ("Network is unreachable", TransportError),
        ("Request timed out", TransportError),
        ("boom", UnclassifiedError),
    ])
    def test_message_keywords(self, message, kind):
        assert type(classify_model_error(RuntimeError(message))) is kind


class TestPassthrough:
    def test_model_error_returned_as_is(self):
        error = SchemaViolation("bad shape")
        assert classify_model_error(error) is error

    def test_public_messages_differ(self):
        messages = {cls.public_message for cls in (AuthError, RateLimited, SchemaViolation, TransportError, UnclassifiedError)}
        assert len(messages) == 5
