"""
OpenAI client wrapper for structured and free-text generation.
"""
import os
import json
import logging
from typing import Any, Dict, Type, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel

from backend.errors import AuthError, SchemaViolation, classify_model_error

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def get_client() -> AsyncOpenAI:
    api_key = os.environ.get('OPENAI_API_KEY')
    if not api_key:
        raise AuthError("OPENAI_API_KEY not configured")
    return AsyncOpenAI(api_key=api_key)


def strip_code_fences(response_text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    response_text = response_text.strip()
    if response_text.startswith("```json"):
        response_text = response_text[7:]
    elif response_text.startswith("```"):
        response_text = response_text[3:]
    if response_text.endswith("```"):
        response_text = response_text[:-3]
    return response_text.strip()


async def generate_json(
    system_prompt: str,
    user_prompt: str,
    model: str = "gpt-4o-mini",
    temperature: float = 0.7
) -> Dict[str, Any]:
    """
    Generate a JSON response from OpenAI chat completion with strict JSON mode.

    Args:
        system_prompt: System message for the AI
        user_prompt: User message/input
        model: OpenAI model to use (default: gpt-4o-mini)
        temperature: Sampling temperature (default: 0.7)

    Returns:
        Parsed JSON dictionary from the response

    Raises:
        AuthError: If the API key is not configured
        SchemaViolation: If the response is empty or not a JSON object
        Exception: For other OpenAI API errors (classified by the caller)
    """
    client = get_client()

    response = await client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ],
        temperature=temperature,
        response_format={"type": "json_object"}  # Force strict JSON output
    )

    response_text = response.choices[0].message.content
    if not response_text:
        logger.error("OpenAI returned empty response")
        raise SchemaViolation("Empty response from OpenAI API")

    try:
        parsed = json.loads(strip_code_fences(response_text))
    except json.JSONDecodeError as e:
        # Log the raw model output for debugging
        logger.error("=" * 80)
        logger.error("JSON PARSING FAILED - Raw model output:")
        logger.error(response_text)
        logger.error("=" * 80)
        raise SchemaViolation(f"Failed to parse AI response as JSON: {e}") from e

    if not isinstance(parsed, dict):
        logger.error(f"AI response is not a JSON object: {type(parsed).__name__}")
        raise SchemaViolation("AI returned invalid response format")
    return parsed


async def generate_structured(
    system_prompt: str,
    user_prompt: str,
    schema: Type[SchemaT],
    model: str = "gpt-4o-mini",
    temperature: float = 0.1
) -> SchemaT:
    """
    Generate a JSON response and validate it against a pydantic schema.

    Every failure is re-raised as a classified ModelError.
    """
    try:
        raw_result = await generate_json(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=model,
            temperature=temperature
        )
        logger.info(f"🔍 Raw AI response ({schema.__name__}): {json.dumps(raw_result, ensure_ascii=False)}")
        return schema.model_validate(raw_result)
    except Exception as e:
        error = classify_model_error(e)
        logger.error(f"❌ {schema.__name__} generation failed ({type(error).__name__}): {e}")
        if error is e:
            raise
        raise error from e


async def generate_text(
    prompt: str,
    model: str = "gpt-4o-mini",
    temperature: float = 0.7
) -> str:
    """Generate a plain-text completion for a single user prompt."""
    try:
        client = get_client()
        response = await client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
        )
        text = response.choices[0].message.content
        if not text:
            raise SchemaViolation("Empty response from OpenAI API")
        return text.strip()
    except Exception as e:
        error = classify_model_error(e)
        logger.error(f"❌ Text generation failed ({type(error).__name__}): {e}")
        if error is e:
            raise
        raise error from e
