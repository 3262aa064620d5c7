#!/usr/bin/env python3
"""
Reproduce a todo summary from a JSON file of tasks.

The file holds a list of task objects (title, due_date or due_at, priority,
category, completed). With --offline only the analytics snapshot is printed
and no model call is made.

Usage:
    python backend/scripts/repro_summary.py --file tasks.json --period week --offline
    python backend/scripts/repro_summary.py --file tasks.json --period today --now 2024-01-10T12:00:00+00:00
"""
import sys
import json
import asyncio
import argparse
from datetime import datetime
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

backend_dir = Path(__file__).parent.parent

env_path = backend_dir / '.env'
if env_path.exists():
    load_dotenv(env_path)

from backend import config
from backend.errors import TodoAIError
from backend.models import Task
from backend.todo_analytics import analyze_tasks
from backend.todo_summary import build_summary_prompt, summarize_tasks


async def main():
    parser = argparse.ArgumentParser(description="Reproduce a todo summary from a JSON task file.")
    parser.add_argument("--file", type=str, required=True, help="Path to a JSON list of tasks.")
    parser.add_argument("--period", choices=["today", "week"], default="today")
    parser.add_argument("--now", type=str, help="Reference time (ISO 8601). Defaults to the current time.")
    parser.add_argument("--model", type=str, default=config.SUMMARY_MODEL, help="OpenAI model to use.")
    parser.add_argument("--offline", action="store_true", help="Only print the analytics snapshot and prompt.")
    args = parser.parse_args()

    with open(args.file, 'r', encoding='utf-8') as f:
        raw_tasks = json.load(f)

    try:
        tasks = TypeAdapter(List[Task]).validate_python(raw_tasks)
    except ValidationError as e:
        print(f"❌ ERROR: Invalid task file: {e}")
        sys.exit(1)

    now = config.ensure_aware(datetime.fromisoformat(args.now)) if args.now else config.current_time()
    snapshot = analyze_tasks(tasks, now, args.period)

    print("=" * 80)
    print(f"Analytics snapshot ({len(tasks)} tasks, period={args.period}, now={now.isoformat()})")
    print("=" * 80)
    print(json.dumps(snapshot.model_dump(mode="json", exclude={"task_lines"}), indent=2, ensure_ascii=False))

    if args.offline:
        if not snapshot.empty:
            print()
            print("=" * 80)
            print("Prompt")
            print("=" * 80)
            print(build_summary_prompt(snapshot))
        return

    try:
        summary = await summarize_tasks(tasks, args.period, now=now, model=args.model)
    except TodoAIError as e:
        print(f"❌ ERROR ({type(e).__name__}): {e}")
        sys.exit(1)

    print()
    print("=" * 80)
    print("Summary")
    print("=" * 80)
    print(json.dumps(summary.model_dump(by_alias=True), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
