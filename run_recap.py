#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "pyyaml>=6.0",
#     "requests>=2.31.0",
# ]
# ///
"""
Weekly Recap Overview Generator

Combines the "What went well?" and "What didn't go so well?" fields of each
week's recap page into the "Overview?" field, with per-category totals and
evaluation labels.

Usage:
    uv run run_recap.py --weeks 5,6
    uv run run_recap.py --weeks 5 --dry-run
    uv run run_recap.py                # interactive
"""

import argparse
import sys

from notion_store import NotionError, NotionRecapStore, truncate_for_notion, utf16_length
from recap_cli import confirm, parse_weeks, print_banner, prompt_weeks
from recap_combine import generate_overview
from recap_config import field_name, load_config, notion_settings

DEFAULT_TARGET_WEEKS = [1]


def process_week(store: NotionRecapStore, week: int, config: dict, dry_run: bool = False) -> bool:
    """Generate and write the overview for one week. Returns True on success."""
    print_banner(f"Processing Week {week:02d} overview")

    try:
        page = store.find_week_page(week)
    except NotionError as e:
        print(f"  Error: {e}")
        return False

    if not page:
        print(f"  Error: Could not find Week {week} Recap")
        return False

    good = store.read_field(page, field_name(config, 'good'))
    bad = store.read_field(page, field_name(config, 'bad'))
    print(f"  Good column: {'has content' if good else 'empty'}")
    print(f"  Bad column: {'has content' if bad else 'empty'}")

    if not good and not bad:
        print("  Both good and bad columns are empty, skipping")
        return True

    overview = generate_overview(good, bad, config.get('recap') or {})
    limit = notion_settings(config)['text_limit']
    if utf16_length(overview) > limit:
        print(f"  Warning: overview is {utf16_length(overview)} chars, truncating to {limit}")
    overview = truncate_for_notion(overview, limit)

    if dry_run:
        print(f"\n[DRY RUN] Would write to '{field_name(config, 'overview')}':")
        print("---")
        print(overview)
        print("---")
        return True

    ok, message = store.write_fields(page['id'], {field_name(config, 'overview'): overview})
    if not ok:
        print(f"  Error: {message}")
        return False

    print(f"  Week {week} overview updated")
    return True


def process_weeks(store: NotionRecapStore, weeks: list[int], config: dict,
                  dry_run: bool = False) -> tuple[int, int]:
    """Process weeks one at a time. Returns (successful, failed)."""
    successful = 0
    failed = 0
    for week in weeks:
        if process_week(store, week, config, dry_run=dry_run):
            successful += 1
        else:
            failed += 1

    print_banner(f"Overview generation complete: {successful} successful, {failed} failed")
    return successful, failed


def main():
    parser = argparse.ArgumentParser(
        description='Combine good/bad recap columns into the overview column.'
    )
    parser.add_argument('--weeks', default=None,
                        help='Comma-separated week numbers (e.g. 1,2,3). Prompts when omitted.')
    parser.add_argument('--config', default=None,
                        help='Path to recap_config.yaml. Default: RECAP_CONFIG env var, or the script directory.')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show the overview without writing to Notion.')
    args = parser.parse_args()

    config = load_config(args.config)

    if args.weeks is not None:
        weeks = parse_weeks(args.weeks)
        if not weeks:
            print(f"Error: No valid week numbers in --weeks {args.weeks!r}")
            sys.exit(1)
    else:
        print("Combines 'What went well?' + 'What didn't go so well?' into 'Overview?'")
        weeks = prompt_weeks(DEFAULT_TARGET_WEEKS)
        print(f"\nProcessing weeks: {', '.join(str(w) for w in weeks)}")
        if not confirm():
            print("Cancelled")
            sys.exit(0)

    try:
        store = NotionRecapStore.from_settings(notion_settings(config))
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    successful, failed = process_weeks(store, weeks, config, dry_run=args.dry_run)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
