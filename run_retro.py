#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "pyyaml>=6.0",
#     "requests>=2.31.0",
# ]
# ///
"""
Weekly Retro Generator

Reads each week's task summary and calendar summary from the recap database
and writes the "What went well?" and "What didn't go so well?" fields.

Usage:
    uv run run_retro.py --weeks 5,6
    uv run run_retro.py --weeks 5 --mode good --dry-run
    uv run run_retro.py                # interactive
"""

import argparse
import sys

from notion_store import NotionError, NotionRecapStore, truncate_for_notion, utf16_length
from recap_cli import ask_question, confirm, parse_weeks, print_banner, prompt_weeks
from recap_config import field_name, load_config, notion_settings
from retro_extraction import BAD, GOOD, build_retro_document

DEFAULT_TARGET_WEEKS = [1]

# --mode value -> documents to generate
MODE_CHOICES = {
    'both': (GOOD, BAD),
    'good': (GOOD,),
    'bad': (BAD,),
}


def build_week_documents(task_summary: str, cal_summary: str, config: dict,
                         modes=(GOOD, BAD)) -> dict[str, str]:
    """Build the requested documents, keyed by mode."""
    retro_config = config.get('retro') or {}
    return {mode: build_retro_document(task_summary, cal_summary, mode, retro_config) for mode in modes}


def process_week(store: NotionRecapStore, week: int, config: dict,
                 modes=(GOOD, BAD), dry_run: bool = False) -> bool:
    """Extract and write the good/bad documents for one week. Returns True on success."""
    print_banner(f"Processing Week {week:02d} retro ({' + '.join(modes)})")

    try:
        page = store.find_week_page(week)
    except NotionError as e:
        print(f"  Error: {e}")
        return False

    if not page:
        print(f"  Error: Could not find Week {week} Recap")
        return False

    task_summary = store.read_field(page, field_name(config, 'task_summary'))
    cal_summary = store.read_field(page, field_name(config, 'cal_summary'))
    if not task_summary and not cal_summary:
        print("  Warning: task and calendar summaries are both empty")

    documents = build_week_documents(task_summary, cal_summary, config, modes)
    limit = notion_settings(config)['text_limit']

    fields = {}
    for mode, document in documents.items():
        if utf16_length(document) > limit:
            print(f"  Warning: {mode} document is {utf16_length(document)} chars, truncating to {limit}")
        fields[field_name(config, mode)] = truncate_for_notion(document, limit)

    if dry_run:
        for name, content in fields.items():
            print(f"\n[DRY RUN] Would write to '{name}':")
            print("---")
            print(content)
            print("---")
        return True

    ok, message = store.write_fields(page['id'], fields)
    if not ok:
        print(f"  Error: {message}")
        return False

    print(f"  Week {week} retro updated ({message})")
    return True


def prompt_mode() -> str:
    print("\nWhat recaps would you like to generate?\n")
    print("1. Both (Good + Bad)")
    print("2. Good only (What went well)")
    print("3. Bad only (What didn't go so well)")
    answer = ask_question("\nChoose option (1-3): ").strip()
    return {'2': 'good', '3': 'bad'}.get(answer, 'both')


def main():
    parser = argparse.ArgumentParser(
        description='Split weekly summaries into "went well" / "didn\'t go so well" recap columns.'
    )
    parser.add_argument('--weeks', default=None,
                        help='Comma-separated week numbers (e.g. 1,2,3). Prompts when omitted.')
    parser.add_argument('--mode', choices=sorted(MODE_CHOICES), default=None,
                        help='Which documents to generate. Default: both.')
    parser.add_argument('--config', default=None,
                        help='Path to recap_config.yaml. Default: RECAP_CONFIG env var, or the script directory.')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show the documents without writing to Notion.')
    args = parser.parse_args()

    config = load_config(args.config)

    if args.weeks is not None:
        weeks = parse_weeks(args.weeks)
        if not weeks:
            print(f"Error: No valid week numbers in --weeks {args.weeks!r}")
            sys.exit(1)
        mode = args.mode or 'both'
    else:
        mode = args.mode or prompt_mode()
        weeks = prompt_weeks(DEFAULT_TARGET_WEEKS)
        print(f"\nProcessing weeks: {', '.join(str(w) for w in weeks)}")
        print(f"Recaps to generate: {mode}")
        if not confirm():
            print("Cancelled")
            sys.exit(0)

    try:
        store = NotionRecapStore.from_settings(notion_settings(config))
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    failed = 0
    for week in weeks:
        if not process_week(store, week, config, MODE_CHOICES[mode], dry_run=args.dry_run):
            failed += 1

    print_banner(f"Retro generation complete: {len(weeks) - failed} successful, {failed} failed")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
