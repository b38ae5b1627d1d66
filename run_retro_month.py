#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "pyyaml>=6.0",
#     "requests>=2.31.0",
# ]
# ///
"""
Monthly Retro Generator

Reads the "What went well?" and "What didn't go so well?" fields of the
month's weekly recap pages, rolls them up (totals summed, repeats removed,
habits counted per week) and writes the result to the month's page in the
monthly recap database.

Usage:
    uv run run_retro_month.py --month 3 --weeks 9,10,11,12,13
    uv run run_retro_month.py --month 3 --weeks 9,10 --dry-run
    uv run run_retro_month.py                # interactive
"""

import argparse
import sys

from notion_store import NotionError, NotionRecapStore, truncate_for_notion, utf16_length
from recap_cli import ask_question, confirm, parse_weeks, print_banner, prompt_weeks
from recap_config import field_name, load_config, month_settings, notion_settings
from retro_monthly import build_month_retro

DEFAULT_TARGET_WEEKS = [1, 2, 3, 4]


def collect_weekly_documents(store: NotionRecapStore, weeks: list[int],
                             config: dict) -> tuple[list[str], list[str]]:
    """Good and bad documents of every week that has a recap page.

    Weeks without a page are reported and left out of the month.
    """
    good_documents = []
    bad_documents = []
    for week in weeks:
        page = store.find_week_page(week)
        if not page:
            print(f"  Warning: Could not find Week {week} Recap, leaving it out")
            continue
        good_documents.append(store.read_field(page, field_name(config, 'good')))
        bad_documents.append(store.read_field(page, field_name(config, 'bad')))
        print(f"  Week {week}: read")
    return good_documents, bad_documents


def process_month(week_store: NotionRecapStore, month_store: NotionRecapStore | None,
                  month: int, weeks: list[int], config: dict, dry_run: bool = False) -> bool:
    """Build and write the month's retro. Returns True on success."""
    print_banner(f"Processing Month {month:02d} retro (weeks {', '.join(str(w) for w in weeks)})")

    try:
        good_documents, bad_documents = collect_weekly_documents(week_store, weeks, config)
    except NotionError as e:
        print(f"  Error: {e}")
        return False

    if not good_documents:
        print("  Error: None of the weeks have a recap page")
        return False

    retro = build_month_retro(good_documents, bad_documents, config.get('monthly') or {})
    if not retro:
        print("  Warning: No monthly retro generated, nothing to write")
        return True

    limit = notion_settings(config)['text_limit']
    if utf16_length(retro) > limit:
        print(f"  Warning: month retro is {utf16_length(retro)} chars, truncating to {limit}")
    retro = truncate_for_notion(retro, limit)
    target = field_name(config, 'month_retro')

    if dry_run:
        print(f"\n[DRY RUN] Would write to '{target}':")
        print("---")
        print(retro)
        print("---")
        return True

    if month_store is None:
        print("  Error: Monthly recap database is not configured")
        return False

    try:
        page = month_store.find_month_page(month)
    except NotionError as e:
        print(f"  Error: {e}")
        return False

    if not page:
        print(f"  Error: Could not find Month {month} Recap")
        return False

    ok, message = month_store.write_fields(page['id'], {target: retro})
    if not ok:
        print(f"  Error: {message}")
        return False

    print(f"  Month {month} retro updated")
    return True


def parse_month(text: str | None) -> int | None:
    """1-12 from user input, or None."""
    text = (text or '').strip()
    if text.isdigit() and 1 <= int(text) <= 12:
        return int(text)
    return None


def main():
    parser = argparse.ArgumentParser(
        description='Roll weekly "went well" / "didn\'t go so well" columns up into the month page.'
    )
    parser.add_argument('--month', default=None,
                        help='Month number (1-12). Prompts when omitted.')
    parser.add_argument('--weeks', default=None,
                        help='Comma-separated week numbers in the month (e.g. 9,10,11,12). Prompts when omitted.')
    parser.add_argument('--config', default=None,
                        help='Path to recap_config.yaml. Default: RECAP_CONFIG env var, or the script directory.')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show the month retro without writing to Notion.')
    args = parser.parse_args()

    config = load_config(args.config)
    interactive = args.month is None or args.weeks is None

    if args.month is not None:
        month = parse_month(args.month)
    else:
        month = parse_month(ask_question("Which month to process? (1-12): "))
    if month is None:
        print("Error: Month must be a number from 1 to 12")
        sys.exit(1)

    if args.weeks is not None:
        weeks = parse_weeks(args.weeks)
        if not weeks:
            print(f"Error: No valid week numbers in --weeks {args.weeks!r}")
            sys.exit(1)
    else:
        weeks = prompt_weeks(DEFAULT_TARGET_WEEKS)

    if interactive:
        print(f"\nProcessing month {month} from weeks: {', '.join(str(w) for w in weeks)}")
        if not confirm():
            print("Cancelled")
            sys.exit(0)

    try:
        week_store = NotionRecapStore.from_settings(notion_settings(config))
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    month_store = None
    try:
        month_store = NotionRecapStore.from_settings(month_settings(config))
    except ValueError as e:
        if not args.dry_run:
            print(f"Error: {e}")
            sys.exit(1)

    ok = process_month(week_store, month_store, month, weeks, config, dry_run=args.dry_run)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
