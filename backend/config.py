"""
Environment-driven configuration.

The .env file is only loaded outside production; production sets env vars directly.
"""
import os
import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).parent

ENV = os.environ.get('ENV', 'development')
if ENV != 'production':
    env_path = ROOT_DIR / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"✓ Loaded environment variables from {env_path}")
    else:
        logger.info(f"⚠ .env file not found at {env_path}. Using system environment variables.")

DEFAULT_MODEL = "gpt-4o-mini"

TODO_MODEL = os.environ.get('TODO_MODEL', DEFAULT_MODEL)
SUMMARY_MODEL = os.environ.get('SUMMARY_MODEL', DEFAULT_MODEL)
TIP_MODEL = os.environ.get('TIP_MODEL', DEFAULT_MODEL)

# Local reference timezone for "today", due times and analytics buckets
TODO_TIMEZONE = os.environ.get('TODO_TIMEZONE', 'UTC')

default_origins = ['http://localhost:3000', 'http://127.0.0.1:3000']
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get('CORS_ORIGINS', ','.join(default_origins)).split(',')
    if origin.strip()
]


def get_reference_timezone() -> tzinfo:
    """Return the configured reference timezone, falling back to UTC for unknown names."""
    try:
        return ZoneInfo(TODO_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown TODO_TIMEZONE '{TODO_TIMEZONE}', using UTC")
        return timezone.utc


def current_time() -> datetime:
    """Read the wall clock once, in the reference timezone."""
    return datetime.now(get_reference_timezone())


def validate_required_env_vars():
    """Warn at startup about missing environment variables."""
    required_vars = {
        'OPENAI_API_KEY': 'OpenAI API key for todo generation and summaries (get from https://platform.openai.com/api-keys)',
    }

    missing_vars = []
    for var_name, description in required_vars.items():
        if not os.environ.get(var_name):
            missing_vars.append(f"  - {var_name}: {description}")

    if missing_vars:
        # Not fatal: the model client raises AuthError on first use
        warning_msg = (
            "\n" + "=" * 80 + "\n"
            "WARNING: Missing environment variables:\n"
            + "\n".join(missing_vars) + "\n\n"
            "Set these in backend/.env or as environment variables.\n"
            + "=" * 80 + "\n"
        )
        logger.warning(warning_msg)
    return missing_vars


def ensure_aware(now: datetime) -> datetime:
    """Attach the reference timezone to a naive datetime."""
    if now.tzinfo is None or now.utcoffset() is None:
        return now.replace(tzinfo=get_reference_timezone())
    return now
