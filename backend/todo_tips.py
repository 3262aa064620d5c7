"""Single free-text focus tip."""
from typing import Optional

from backend import config
from backend.llm.openai_client import generate_text

FOCUS_TIP_PROMPT = "Give me one tip for improving focus while studying."


async def get_focus_tip(model: Optional[str] = None) -> str:
    return await generate_text(FOCUS_TIP_PROMPT, model=model or config.TIP_MODEL)
