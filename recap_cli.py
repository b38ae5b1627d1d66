"""Shared command-line helpers for run_retro.py, run_recap.py and run_retro_month.py."""

import sys


def parse_weeks(text: str | None) -> list[int]:
    """Parse "1,2, 3" into [1, 2, 3]; entries that aren't numbers are ignored."""
    weeks = []
    for part in (text or '').split(','):
        part = part.strip()
        if part.isdigit():
            weeks.append(int(part))
    return weeks


def ask_question(question: str) -> str:
    try:
        return input(question)
    except EOFError:
        return ''


def confirm(question: str = "Continue? (y/n): ") -> bool:
    return ask_question(question).strip().lower() == 'y'


def prompt_weeks(default_weeks: list[int]) -> list[int]:
    """Ask which weeks to process, falling back to the defaults on blank input."""
    print(f"\nDefault: Week {','.join(str(w) for w in default_weeks)}\n")
    answer = ask_question("Which weeks to process? (comma-separated, e.g., 1,2,3): ")
    weeks = parse_weeks(answer) if answer.strip() else list(default_weeks)
    if not weeks:
        print("Error: No valid week numbers given")
        sys.exit(1)
    return weeks


def print_banner(text: str) -> None:
    print(f"\n{'='*60}")
    print(text)
    print(f"{'='*60}")
