#!/usr/bin/env python3
"""
Reproduce todo generation for a single input (no UI, CLI only).

Runs validation, the model call, normalization and date/time combination once
and prints every intermediate step.

Usage:
    python backend/scripts/repro_generate_todo.py --input "prepare the important team meeting by 3pm tomorrow"
    python backend/scripts/repro_generate_todo.py --file input.txt --now 2024-01-10T08:00:00+09:00
"""
import os
import sys
import asyncio
import argparse
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

backend_dir = Path(__file__).parent.parent

env_path = backend_dir / '.env'
if env_path.exists():
    load_dotenv(env_path)
    print(f"✓ Loaded environment from {env_path}")
else:
    print(f"⚠️  No .env file found at {env_path}, using system environment")

from backend import config
from backend.errors import TodoAIError
from backend.todo_extraction import (
    build_todo_prompt,
    postprocess_todo_draft,
    request_todo_draft,
)
from backend.todo_input import preprocess_input, validate_input
from backend.date_refs import combine_date_and_time


async def main():
    parser = argparse.ArgumentParser(description="Reproduce todo generation for a single input.")
    parser.add_argument("--input", type=str, help="The natural-language todo to process.")
    parser.add_argument("--file", type=str, help="Path to a file containing the input.")
    parser.add_argument("--model", type=str, default=config.TODO_MODEL, help="OpenAI model to use.")
    parser.add_argument("--now", type=str, help="Reference time (ISO 8601). Defaults to the current time.")
    parser.add_argument("--show-prompt", action="store_true", help="Print the full prompt sent to the model.")
    args = parser.parse_args()

    raw_input = None
    if args.file:
        with open(args.file, 'r') as f:
            raw_input = f.read()
    elif args.input is not None:
        raw_input = args.input
    else:
        print("❌ ERROR: Must provide either --input or --file")
        sys.exit(1)

    now = config.ensure_aware(datetime.fromisoformat(args.now)) if args.now else config.current_time()

    print("=" * 80)
    print("Reproduce Todo Generation")
    print("=" * 80)
    print(f"Reference time: {now.isoformat()}")
    print(f"Model: {args.model}")
    print(f"Has OpenAI API key: {bool(os.environ.get('OPENAI_API_KEY'))}")
    print()

    try:
        validate_input(raw_input)
        processed = preprocess_input(raw_input)
        print(f"Preprocessed input: '{processed}'")

        if args.show_prompt:
            print("-" * 80)
            print(build_todo_prompt(processed, now))
            print("-" * 80)

        draft = await request_todo_draft(processed, now, model=args.model)
        print(f"Raw draft:  {draft.model_dump()}")

        normalized = postprocess_todo_draft(draft, now.date())
        print(f"Normalized: {normalized.model_dump()}")

        due_at = combine_date_and_time(normalized.due_date, normalized.due_time, now)
        print(f"Due at:     {due_at.isoformat()}")
    except TodoAIError as e:
        print()
        print("=" * 80)
        print(f"ERROR ({type(e).__name__})")
        print("=" * 80)
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
