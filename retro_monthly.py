"""
Monthly roll-up of weekly retro documents.

A month is the list of its weekly "went well" (or "didn't go so well")
documents, as written by run_retro.py. Each section is aggregated across the
weeks according to its type:

    cal_events   "Social time (5 events, 9.5 hours total):" plus unique events
    tasks        "Home Tasks: 7 total", with the task list for chosen categories
    cal_summary  category hours summed, "No X Time" lines counted per week
    habits       "Good sleep (3/4 weeks)"
    unique       everything else: deduplicated, day-of-week references removed

The good and bad month documents are then stacked under their own headers
into the text written to the month's recap page.
"""

import re

from recap_categories import (
    DAY_TOKEN_PATTERN,
    ITEM_STYLE_COMMAS,
    METRIC_COUNT,
    METRIC_HOURS,
    format_number,
    merge_categories,
    parse_categories,
    parse_category_header,
)
from recap_config import get_nested
from recap_markers import strip_status_marker, strip_trailing_parenthetical
from recap_sections import DEFAULT_HEADER_TEMPLATE, encode_sections, extract_section, format_section_header
from retro_extraction import BAD, GOOD, MODES

CAL_EVENTS = 'cal_events'
CAL_SUMMARY = 'cal_summary'
TASKS = 'tasks'
HABITS = 'habits'
UNIQUE = 'unique'

DEFAULT_SECTION_ORDER = ['TRIPS', 'EVENTS', 'ROCKS', 'HABITS', 'CAL SUMMARY', 'CAL EVENTS', 'TASKS']
DEFAULT_SECTION_TYPES = {
    'HABITS': HABITS,
    'CAL SUMMARY': CAL_SUMMARY,
    'CAL EVENTS': CAL_EVENTS,
    'TASKS': TASKS,
}
DEFAULT_HEADERS = {GOOD: 'WHAT WENT WELL', BAD: "WHAT DIDN'T GO WELL"}

ON_DAY_PATTERN = re.compile(r'\s+on\s+' + DAY_TOKEN_PATTERN.pattern, re.IGNORECASE)
DASH_DAY_PATTERN = re.compile(r'\s*-\s*' + DAY_TOKEN_PATTERN.pattern + r'(?=\s|$)', re.IGNORECASE)
NO_TIME_PATTERN = re.compile(r'^No .+ Time$')


def remove_days_of_week(text: str) -> str:
    """Drop " on Tue" and " - Tuesday" references; a leading day stays."""
    text = ON_DAY_PATTERN.sub('', text)
    text = DASH_DAY_PATTERN.sub('', text)
    return text.strip()


def _lines(text: str) -> list[str]:
    return [line.strip() for line in (text or '').split('\n') if line.strip()]


def _unique(items) -> list[str]:
    return list(dict.fromkeys(item for item in items if item))


def _split_commas(items: list[str]) -> list[str]:
    """Individual events out of comma lists, days removed."""
    return [remove_days_of_week(part) for item in items for part in item.split(',') if part.strip()]


def aggregate_unique(weekly_bodies: list[str], config: dict) -> str:
    separator = get_nested(config, ['formatting', 'unique_separator'], ', ')
    return separator.join(_unique(remove_days_of_week(line) for body in weekly_bodies for line in _lines(body)))


def aggregate_cal_events(weekly_bodies: list[str], config: dict) -> str:
    merged = []
    for body in weekly_bodies:
        merged = merge_categories(merged, parse_categories(body, METRIC_HOURS, ITEM_STYLE_COMMAS))

    hidden = set(config.get('cal_events_hide_details') or [])
    blocks = []
    for category in merged:
        header = f"{category.name} ({category.events or 0} events, {format_number(category.metric)} hours total)"
        events = _unique(_split_commas(category.items))
        if category.name in hidden or not events:
            blocks.append(header)
        else:
            blocks.append(f"{header}:\n{', '.join(events)}")
    return '\n\n'.join(blocks)


def aggregate_tasks(weekly_bodies: list[str], config: dict) -> str:
    merged = []
    for body in weekly_bodies:
        merged = merge_categories(merged, parse_categories(body, METRIC_COUNT, ITEM_STYLE_COMMAS))

    shown = set(config.get('tasks_show_details') or [])
    blocks = []
    for category in merged:
        line = f"{category.name}: {format_number(category.metric)} total"
        tasks = _unique(_split_commas(category.items)) if category.name in shown else []
        blocks.append(f"{line}\n{', '.join(tasks)}" if tasks else line)
    return '\n'.join(blocks)


def aggregate_cal_summary(weekly_bodies: list[str], week_count: int) -> str:
    """Sum "X (N events, H hours)" lines and count "No X Time" weeks.

    Lines of any other shape pass through once, ahead of the totals.
    """
    passthrough = []
    totals = {}
    missing = {}

    for body in weekly_bodies:
        for line in _lines(body):
            header = parse_category_header(line)
            plain = strip_status_marker(line)
            if header and header[2] is not None:
                name, events, hours = header
                events_total, hours_total = totals.get(name, (0, 0))
                totals[name] = (events_total + events, hours_total + hours)
            elif NO_TIME_PATTERN.match(plain):
                missing[plain] = missing.get(plain, 0) + 1
            elif line not in passthrough:
                passthrough.append(line)

    lines = list(passthrough)
    for name, (events, hours) in totals.items():
        lines.append(f"{name} ({format_number(events)} events, {format_number(hours)} hours total)")
    for name, count in missing.items():
        lines.append(f"{name} ({count}/{week_count} weeks)")
    return '\n'.join(lines)


def aggregate_habits(weekly_bodies: list[str], week_count: int) -> str:
    """Count each habit once per week it shows up, as "Habit (X/Y weeks)".

    Details in a trailing parenthetical vary week to week and are dropped.
    """
    counts = {}
    for body in weekly_bodies:
        seen = set()
        for line in _lines(body):
            habit = strip_trailing_parenthetical(line).strip()
            if habit and habit not in seen:
                seen.add(habit)
                counts[habit] = counts.get(habit, 0) + 1
    return '\n'.join(f"{habit} ({count}/{week_count} weeks)" for habit, count in counts.items())


def monthly_section_type(section_name: str, config: dict) -> str:
    types = config.get('section_types') or DEFAULT_SECTION_TYPES
    return types.get(section_name, UNIQUE)


def aggregate_section(section_name: str, weekly_documents: list[str], config: dict) -> str:
    """Aggregate one section over every week of the month."""
    ignored = set(config.get('ignore_lines') or [])
    bodies = []
    for document in weekly_documents:
        body = extract_section(document, section_name)
        bodies.append('\n'.join(line for line in _lines(body) if line not in ignored))

    week_count = len(weekly_documents)
    kind = monthly_section_type(section_name, config)
    if kind == CAL_EVENTS:
        return aggregate_cal_events(bodies, config)
    if kind == TASKS:
        return aggregate_tasks(bodies, config)
    if kind == CAL_SUMMARY:
        return aggregate_cal_summary(bodies, week_count)
    if kind == HABITS:
        return aggregate_habits(bodies, week_count)
    return aggregate_unique(bodies, config)


def build_month_document(weekly_documents: list[str], mode: str, config: dict) -> str:
    """Roll the weekly documents of one mode up into a month document."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r} (expected one of {', '.join(MODES)})")
    if not weekly_documents:
        return ''

    always_show = get_nested(config, ['always_show', mode], {}) or {}
    sections = []
    for section_name in config.get('section_order') or DEFAULT_SECTION_ORDER:
        content = aggregate_section(section_name, weekly_documents, config)
        sections.append((section_name, content or always_show.get(section_name, '')))

    return encode_sections(
        sections,
        header_template=get_nested(config, ['formatting', 'section_header'], DEFAULT_HEADER_TEMPLATE),
        separator=get_nested(config, ['formatting', 'section_separator'], '\n'),
    )


def build_month_retro(good_documents: list[str], bad_documents: list[str], config: dict) -> str:
    """Good and bad month documents, each under its own header; '' when both are empty."""
    headers = {**DEFAULT_HEADERS, **(config.get('headers') or {})}
    header_template = get_nested(config, ['formatting', 'section_header'], DEFAULT_HEADER_TEMPLATE)

    parts = []
    for mode, documents in ((GOOD, good_documents), (BAD, bad_documents)):
        document = build_month_document(documents, mode, config)
        if document:
            parts.append(f"{format_section_header(headers[mode], header_template)}\n{document}")
    return '\n\n'.join(parts)
