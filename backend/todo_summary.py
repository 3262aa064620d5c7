"""
AI summaries of a task collection.

The analytics snapshot is rendered into a prompt and the model returns a
summary, urgent tasks, insights and recommendations.
"""
import logging
from datetime import datetime
from typing import List, Optional

from backend import config
from backend.llm.openai_client import generate_structured
from backend.models import AnalyticsSnapshot, Task, TodoSummary
from backend.todo_analytics import NO_TASKS_MESSAGES, analyze_tasks

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = """You are a productivity coach inside a todo app.
Analyze the user's task statistics and return an encouraging summary with concrete,
actionable insights and recommendations. Return ONLY valid JSON matching the requested format."""

TIME_SLOT_LABELS = {
    "morning": "morning (06-12)",
    "afternoon": "afternoon (12-18)",
    "evening": "evening (18-24)",
    "night": "night (00-06)",
}

PERIOD_FOCUS = {
    "today": "Today's tasks (focus on today's concentration and which remaining tasks to prioritize)",
    "week": "This week's tasks (focus on weekly patterns and suggestions for next week's plan)",
}

SUMMARY_FOCUS = {
    "today": "- Emphasize today's focus and current progress",
    "week": "- Summarize the weekly completion rate and overall progress",
}

INSIGHT_GUIDES = {
    "today": """a) Today's focus: how today's tasks are spread across times of day and when focus is highest
   b) Remaining priorities: which tasks to concentrate on for the rest of today
   c) Priority completion pattern: how well high-priority tasks are being handled
   d) Time management: deadline compliance and whether anything is overdue""",
    "week": """a) Weekly completion: overall completion rate this week and patterns by priority
   b) Productivity patterns: the most productive weekday and time of day
   c) Time management patterns: deadline compliance, how often and which tasks get overdue
   d) Category patterns: which kinds of tasks get finished and which get postponed
   e) Workload concentration: when the most tasks pile up""",
}

RECOMMENDATION_GUIDES = {
    "today": """a) Use of the remaining time today: concrete suggestions for the rest of the day
   b) Priority adjustment: handle urgent tasks first
   c) Time-of-day placement: put important work in the most focused time slot""",
    "week": """a) Next week's plan: how to adjust next week's schedule based on this week's patterns
   b) Priority rebalancing: reschedule considering completion by priority
   c) Load spreading: if a weekday or time slot is overloaded, suggest how to spread it
   d) Productivity boost: plan around the most productive weekday and time of day""",
}


def empty_summary(period: str) -> TodoSummary:
    """Canned bundle for an empty task collection; no model call needed."""
    return TodoSummary(
        summary=NO_TASKS_MESSAGES[period],
        urgent_tasks=[],
        insights=["Add a task to get started!"],
        recommendations=["Try adding a new task."],
    )


def _due_label(days_until: int) -> str:
    if days_until > 0:
        return f"(in {days_until} days)"
    if days_until == 0:
        return "(today)"
    return f"({abs(days_until)} days late)"


def _format_task_lines(snapshot: AnalyticsSnapshot) -> str:
    lines = []
    for idx, line in enumerate(snapshot.task_lines, 1):
        status = "done" if line.completed else "not done"
        overdue = ", overdue" if line.overdue else ""
        lines.append(
            f"{idx}. {line.title} ({status}{overdue}, priority: {line.priority}, "
            f"category: {line.category}, due: {line.due_date} {_due_label(line.days_until)})"
        )
    return "\n".join(lines)


def _format_productive(bucket, labels=None) -> str:
    if bucket is None:
        return "not enough data"
    name = labels.get(bucket.name, bucket.name) if labels else bucket.name
    return f"{name} (completion rate {bucket.rate:.1f}%, {bucket.count} completed)"


def build_summary_prompt(snapshot: AnalyticsSnapshot) -> str:
    """Render every figure of the snapshot into the summary prompt."""
    period = snapshot.period
    priority = snapshot.priority_stats
    high_rate = priority["high"].rate

    category_lines = "\n".join(
        f"- {cat}: {data.completed} of {data.total} completed (completion rate {data.rate}%)"
        for cat, data in snapshot.category_stats.items()
    )

    overdue = ""
    if snapshot.overdue_tasks:
        overdue = " (" + ", ".join(f"{t.title} ({t.days_overdue} days late)" for t in snapshot.overdue_tasks) + ")"

    distribution = snapshot.time_distribution
    urgent = (
        f"- Urgent tasks: {', '.join(snapshot.urgent_tasks)}"
        if snapshot.urgent_tasks
        else "- No urgent tasks"
    )
    upcoming = ""
    if snapshot.upcoming_deadlines:
        upcoming = "- Deadlines within 3 days: " + ", ".join(
            f"{d.title} (in {d.days_until} days)" for d in snapshot.upcoming_deadlines
        )

    positive_opener = (
        f'"You completed {snapshot.completed} tasks today!"'
        if period == "today"
        else f'"You completed {snapshot.completion_rate}% of your tasks this week!"'
    )

    return f"""Analyze the following todo list in depth and provide a refined summary with actionable insights.

=== ANALYSIS PERIOD ===
{PERIOD_FOCUS[period]}

=== TASKS ===
{_format_task_lines(snapshot)}

=== KEY STATISTICS ===
- Total tasks: {snapshot.total}
- Completed: {snapshot.completed}
- Not completed: {snapshot.pending}
- Overall completion rate: {snapshot.completion_rate}%

=== COMPLETION BY PRIORITY ===
- High priority: {priority["high"].completed} of {priority["high"].total} completed (completion rate {priority["high"].rate}%)
- Medium priority: {priority["medium"].completed} of {priority["medium"].total} completed (completion rate {priority["medium"].rate}%)
- Low priority: {priority["low"].completed} of {priority["low"].total} completed (completion rate {priority["low"].rate}%)

=== COMPLETION BY CATEGORY ===
{category_lines}

=== TIME MANAGEMENT ===
- Deadline compliance: {snapshot.on_time_completed} completed tasks were finished by their deadline ({snapshot.on_time_rate}%)
- Overdue tasks: {len(snapshot.overdue_tasks)}{overdue}
- Open tasks by time of day: morning {distribution["morning"]}, afternoon {distribution["afternoon"]}, evening {distribution["evening"]}, night {distribution["night"]}

=== PRODUCTIVITY PATTERNS ===
- Most productive time of day: {_format_productive(snapshot.most_productive_time, TIME_SLOT_LABELS)}
- Most productive weekday: {_format_productive(snapshot.most_productive_weekday)}
- Often postponed task types: {', '.join(snapshot.postponed_categories) or 'none'}
- Easy-to-complete task types: {', '.join(snapshot.easy_categories) or 'none'}

=== URGENT ===
{urgent}
{upcoming}

=== REQUIREMENTS ===

1. summary:
   {SUMMARY_FOCUS[period]}
   - Include the completion rate and briefly mention the priority pattern
   - Start with a positive tone (e.g. {positive_opener})

2. urgentTasks:
   - Only incomplete, high-priority tasks due within 2 days
   - Include overdue tasks too if they are high priority

3. insights - provide 3-5:
   {INSIGHT_GUIDES[period]}
   - Each insight must be specific and actionable
   - Mention positive points too (e.g. "High-priority completion is a strong {high_rate}%")

4. recommendations - provide 3-4:
   {RECOMMENDATION_GUIDES[period]}
   - Give specific, actionable advice
   - Include time management tips, priority adjustments, rescheduling and load spreading
   - e.g. "{distribution["afternoon"]} tasks are concentrated in the afternoon. Moving some to the morning could ease the load"

=== STYLE AND TONE ===
- Natural, friendly and conversational English
- No emojis or special symbols
- Positive and encouraging; highlight what the user is doing well first
- Frame improvements as "room to grow"
- Short sentences the user can act on right away

=== OUTPUT FORMAT ===
{{
  "summary": "summary text (completion rate, priority pattern, positive tone)",
  "urgentTasks": ["urgent task 1", "urgent task 2"],
  "insights": ["insight 1 (specific and actionable)", "insight 2", "insight 3"],
  "recommendations": ["recommendation 1 (with concrete steps)", "recommendation 2", "recommendation 3"]
}}"""


async def request_summary(snapshot: AnalyticsSnapshot, model: Optional[str] = None) -> TodoSummary:
    """Single model call for a summary. Raises a classified ModelError on failure."""
    return await generate_structured(
        system_prompt=SUMMARY_SYSTEM_PROMPT,
        user_prompt=build_summary_prompt(snapshot),
        schema=TodoSummary,
        model=model or config.SUMMARY_MODEL,
        temperature=0.7
    )


async def summarize_tasks(
    tasks: List[Task],
    period: str,
    now: Optional[datetime] = None,
    model: Optional[str] = None
) -> TodoSummary:
    """Analyze the tasks and ask the model for an insight bundle."""
    now = config.ensure_aware(now) if now else config.current_time()
    snapshot = analyze_tasks(tasks, now, period)
    if snapshot.empty:
        return empty_summary(period)

    logger.info(f"🔍 Requesting {period} summary for {snapshot.total} tasks")
    summary = await request_summary(snapshot, model=model)
    logger.info(
        f"✅ Summary generated: {len(summary.insights)} insights, "
        f"{len(summary.recommendations)} recommendations"
    )
    return summary
