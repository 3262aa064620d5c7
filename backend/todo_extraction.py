"""
Todo generation from natural language.

Builds the schema + prompt contract for the model, repairs whatever the model
returns into a valid todo, and combines date and time into a due timestamp.
"""
import re
import logging
from datetime import date, datetime
from typing import Optional

from backend import config
from backend.date_refs import (
    DEFAULT_DUE_TIME,
    combine_date_and_time,
    resolve_date_references,
)
from backend.llm.openai_client import generate_structured
from backend.models import NormalizedTodo, Task, TodoDraft, TITLE_MAX_LENGTH
from backend.todo_input import preprocess_input, validate_input

logger = logging.getLogger(__name__)

TITLE_PLACEHOLDER = "To-do"
ELLIPSIS = "..."

TIME_PATTERN = re.compile(r'([01][0-9]|2[0-3]):[0-5][0-9]')

# Keyword rulebook handed to the model. Not re-checked locally: the enums are
# enforced by the schema and titles are free text.
PRIORITY_KEYWORDS = {
    "high": ["urgent", "important", "asap", "must", "definitely"],
    "medium": ["normal", "moderate"],
    "low": ["whenever", "slowly", "someday", "no rush"],
}

CATEGORY_KEYWORDS = {
    "work": ["meeting", "report", "project", "work"],
    "personal": ["shopping", "friend", "family", "personal"],
    "health": ["exercise", "hospital", "health", "yoga"],
    "learning": ["study", "book", "lecture", "learning"],
}

TIME_WORDS = [
    ("morning", "09:00"),
    ("lunch / noon", "12:00"),
    ("afternoon", "14:00"),
    ("evening", "18:00"),
    ("night", "21:00"),
]

TODO_SYSTEM_PROMPT = """You are a todo extraction engine for a productivity app.
Convert the user's natural-language input into exactly one todo as a JSON object.
Follow the conversion rules in the user message exactly and return ONLY valid JSON."""


def _quoted(words) -> str:
    return ", ".join(f'"{word}"' for word in words)


def build_todo_prompt(processed_input: str, now: datetime) -> str:
    """Build the user prompt for one todo extraction."""
    refs = resolve_date_references(now)
    current_date = refs.today.isoformat()
    current_time = now.strftime("%H:%M")

    time_rules = "\n".join(f'   - "{word}" -> {value}' for word, value in TIME_WORDS)
    category_rules = "\n".join(
        f'   - "{category}": if any of these keywords appear: {_quoted(words)}'
        for category, words in CATEGORY_KEYWORDS.items()
    )

    return f"""Convert the following natural-language input into todo data in JSON format.

Current date: {current_date} ({refs.weekday_name})
Current time: {current_time}
Current weekday: {refs.weekday_name}

Input: "{processed_input}"

=== CONVERSION RULES (MUST FOLLOW) ===

1. title:
   - Extract only the core content, concisely
   - Remove date/time expressions from the title
   - Example: "prepare the important team meeting by 3pm tomorrow" -> "Prepare team meeting"

2. due_date - return in YYYY-MM-DD format:
   - "today" -> {current_date} (current date)
   - "tomorrow" -> {refs.tomorrow.isoformat()} (current date + 1 day)
   - "the day after tomorrow" -> {refs.day_after_tomorrow.isoformat()} (current date + 2 days)
   - "this [weekday]" -> the nearest date of that weekday
     * Example: "this Friday" -> {refs.this_week_friday.isoformat()}
   - "next [weekday]" -> that weekday in next week
     * Example: "next Monday" -> {refs.next_week_monday.isoformat()}
   - If no date is mentioned, use {current_date} (today)

3. due_time - return in HH:mm format (24-hour clock):
{time_rules}
   - "[n] am / [n] pm" -> convert to 24-hour format
     * Example: "10 am" -> 10:00
     * Example: "3 pm" -> 15:00
     * Example: "3:30 pm" -> 15:30
   - If no time is mentioned, use "{DEFAULT_DUE_TIME}" as the default

4. priority - decide strictly by these keywords:
   - "high": if any of these keywords appear: {_quoted(PRIORITY_KEYWORDS["high"])}
   - "medium": if any of these keywords appear: {_quoted(PRIORITY_KEYWORDS["medium"])}
     * also when no priority keyword appears at all
   - "low": if any of these keywords appear: {_quoted(PRIORITY_KEYWORDS["low"])}

5. category - classify strictly by these keywords:
{category_rules}
   - "other" if none of the keywords above appear

=== OUTPUT FORMAT ===
Return exactly this JSON shape:
{{
  "title": "todo title",
  "due_date": "YYYY-MM-DD",
  "due_time": "HH:mm",
  "priority": "high|medium|low",
  "category": "work|personal|learning|health|other"
}}

=== EXAMPLES ===
Input: "prepare the important team meeting by 3pm tomorrow"
Output: {{
  "title": "Prepare team meeting",
  "due_date": "{refs.tomorrow.isoformat()}",
  "due_time": "15:00",
  "priority": "high",
  "category": "work"
}}

Input: "meet a friend for lunch this Friday"
Output: {{
  "title": "Meet a friend",
  "due_date": "{refs.this_week_friday.isoformat()}",
  "due_time": "12:00",
  "priority": "medium",
  "category": "personal"
}}

Input: "exercise next Monday morning"
Output: {{
  "title": "Exercise",
  "due_date": "{refs.next_week_monday.isoformat()}",
  "due_time": "09:00",
  "priority": "medium",
  "category": "health"
}}"""


def normalize_todo_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        logger.warning(f"Empty title from model, using placeholder '{TITLE_PLACEHOLDER}'")
        return TITLE_PLACEHOLDER
    if len(title) > TITLE_MAX_LENGTH:
        logger.warning(f"Title too long ({len(title)} chars), truncating")
        return title[:TITLE_MAX_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return title


def normalize_due_date(due_date: str, reference_date: date) -> str:
    """Return due_date as YYYY-MM-DD, clamped to never precede reference_date."""
    try:
        parsed = datetime.strptime((due_date or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        logger.warning(f"Unparseable due_date '{due_date}', using {reference_date.isoformat()}")
        return reference_date.isoformat()

    if parsed < reference_date:
        logger.warning(f"Past due_date {parsed.isoformat()} replaced with {reference_date.isoformat()}")
        return reference_date.isoformat()
    return parsed.isoformat()


def normalize_due_time(due_time: str) -> str:
    if due_time and TIME_PATTERN.fullmatch(due_time):
        return due_time
    logger.warning(f"Invalid due_time '{due_time}', using {DEFAULT_DUE_TIME}")
    return DEFAULT_DUE_TIME


def postprocess_todo_draft(draft: TodoDraft, reference_date: date) -> NormalizedTodo:
    """
    Repair a model draft into a valid todo. Never raises.

    Rules:
    - Title trimmed; empty -> placeholder; over 100 chars -> 97 chars + "..."
    - Unparseable or past due_date -> reference_date
    - due_time not strict HH:mm (00-23 / 00-59) -> 09:00
    - Missing priority -> medium, missing category -> other
    """
    return NormalizedTodo(
        title=normalize_todo_title(draft.title),
        due_date=normalize_due_date(draft.due_date, reference_date),
        due_time=normalize_due_time(draft.due_time),
        priority=draft.priority or "medium",
        category=draft.category or "other",
    )


async def request_todo_draft(processed_input: str, now: datetime, model: Optional[str] = None) -> TodoDraft:
    """Single model call for one todo. Raises a classified ModelError on failure."""
    prompt = build_todo_prompt(processed_input, now)
    return await generate_structured(
        system_prompt=TODO_SYSTEM_PROMPT,
        user_prompt=prompt,
        schema=TodoDraft,
        model=model or config.TODO_MODEL,
        temperature=0.1
    )


async def generate_todo(raw_input: str, now: Optional[datetime] = None, model: Optional[str] = None) -> Task:
    """
    Turn free text into a Task.

    Steps:
    1. Validate and preprocess the raw input
    2. Ask the model for a draft, with date references resolved against `now`
    3. Repair the draft and combine its date and time into `due_at`

    `now` is read once (in the reference timezone) when not supplied, and the
    same instant is used by every step.
    """
    validate_input(raw_input)
    processed = preprocess_input(raw_input)
    now = config.ensure_aware(now) if now else config.current_time()

    logger.info(f"🔍 Generating todo from input: '{processed[:100]}' (now: {now.isoformat()})")

    draft = await request_todo_draft(processed, now, model=model)
    normalized = postprocess_todo_draft(draft, now.date())
    due_at = combine_date_and_time(normalized.due_date, normalized.due_time, now)

    task = Task(
        title=normalized.title,
        description=None,
        due_at=due_at,
        priority=normalized.priority,
        category=normalized.category,
    )
    logger.info(f"✅ Generated todo: '{task.title}' due {task.due_at.isoformat()} ({task.priority}, {task.category})")
    return task
