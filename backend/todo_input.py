"""
Validation and preprocessing of raw todo input before it is sent to the model.
"""
import re

from backend.errors import EmptyInput, TooShort, TooLong, IllegalCharacters

INPUT_MIN_LENGTH = 2
INPUT_MAX_LENGTH = 500

# C0 controls, DEL and C1 controls
CONTROL_CHAR_RE = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def validate_input(raw) -> None:
    """
    Validate raw free-text input.

    Rules:
    - Must not be empty after trimming
    - Trimmed length must be at least 2 characters
    - Raw (untrimmed) length must be at most 500 characters
    - Must not contain control characters

    Raises an InputValidationError subclass whose message is shown to the user.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise EmptyInput("Input text is required.")

    trimmed_length = len(raw.strip())
    if trimmed_length < INPUT_MIN_LENGTH:
        raise TooShort(
            f"Input must be at least {INPUT_MIN_LENGTH} characters long. (current: {trimmed_length})"
        )

    if len(raw) > INPUT_MAX_LENGTH:
        raise TooLong(
            f"Input must be at most {INPUT_MAX_LENGTH} characters long. (current: {len(raw)})"
        )

    if CONTROL_CHAR_RE.search(raw):
        raise IllegalCharacters("Input contains characters that are not allowed.")


def preprocess_input(raw: str) -> str:
    """Trim and collapse whitespace. Letter case is left alone."""
    if not raw:
        return ""
    return re.sub(r'\s+', ' ', raw.strip())
