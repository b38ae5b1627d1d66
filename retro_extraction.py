"""
Good/bad extraction for the weekly retro.

Reads the weekly task summary and calendar summary and builds two
documents in the section format:

- good: "What went well?"
- bad:  "What didn't go so well?"

Which lines land in each document is decided by the per-section criteria
in the `retro` block of recap_config.yaml (see recap_markers for the
criteria forms). Habit and rock lines lose their status glyph on the way
out; category headers keep theirs.
"""

import re

from recap_config import get_nested
from recap_markers import (
    clean_rock,
    leading_status_marker,
    matches_criteria,
    strip_bullet,
    strip_status_marker,
    strip_trailing_parenthetical,
)
from recap_sections import (
    DEFAULT_HEADER_TEMPLATE,
    DEFAULT_SECTION_SEPARATOR,
    extract_section,
    format_section_header,
)

GOOD = 'good'
BAD = 'bad'
MODES = (GOOD, BAD)

CAL_CATEGORY_MARKERS = ('✅', '❌', '☑️')
TASK_CATEGORY_MARKERS = ('✅', '❌', '⚠️')

CAL_CATEGORY_PATTERN = re.compile(r'^\s*(?:✅|❌|☑️?)\s*(?P<name>.+?)\s*\((?P<stats>[^)]+)\)')
TASK_CATEGORY_PATTERN = re.compile(r'^\s*(?:✅|❌|⚠️?)\s*(?P<name>.+?)\s*\((?P<count>\d+/\d+|\d+)\)')


def _lines(text: str) -> list[str]:
    return [line.strip() for line in (text or '').split('\n') if line.strip()]


def extract_trips(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    trips = extract_section(task_summary, 'TRIPS')
    if not trips or 'No trips' in trips:
        return []
    return [trips] if matches_criteria(trips, criteria) else []


def extract_events(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    events = extract_section(task_summary, 'EVENTS')
    if not events or 'No events' in events:
        return []
    return [line for line in _lines(events) if '=====' not in line and matches_criteria(line, criteria)]


def extract_rocks(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    rocks = extract_section(task_summary, 'ROCKS')
    cleaned = [clean_rock(line) for line in _lines(rocks) if matches_criteria(line, criteria)]
    return [rock for rock in cleaned if rock]


def extract_habits(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    # Habit lines are tracked on the calendar side.
    habits = extract_section(cal_summary, 'HABITS')
    cleaned = [strip_status_marker(line) for line in _lines(habits) if matches_criteria(line, criteria)]
    return [habit for habit in cleaned if habit]


def extract_cal_summary(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    summary = extract_section(cal_summary, 'CAL SUMMARY')
    return [line for line in _lines(summary) if matches_criteria(line, criteria)]


def _decorate(text: str, mode: str, config: dict) -> str:
    for old, new in (get_nested(config, ['decorations', mode], {}) or {}).items():
        if new not in text:
            text = re.sub(rf'\b{re.escape(old)}\b', new, text)
    return text


def extract_cal_events(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    """Group calendar events under their category headers.

    Output blocks look like "✅ Social time (2 events, 3 hours):\\nDinner, Games".
    """
    source = extract_section(cal_summary, 'CAL EVENTS') or cal_summary or ''
    mappings = config.get('category_mappings') or {}

    blocks = []
    header = None
    events = []

    def flush():
        if header and events and matches_criteria(header, criteria):
            blocks.append(f"{header}:\n{', '.join(events)}")

    for line in _lines(source):
        marker = leading_status_marker(line, CAL_CATEGORY_MARKERS)
        if marker and '(' in line:
            flush()
            events = []
            match = CAL_CATEGORY_PATTERN.match(line)
            if match:
                name = match.group('name').strip()
                name = mappings.get(name, name)
                header = f"{marker} {name} ({match.group('stats')})"
            else:
                header = None
        elif line.startswith('•'):
            event = strip_trailing_parenthetical(strip_bullet(line))
            if event:
                events.append(_decorate(event, mode, config))

    flush()
    return blocks


def extract_tasks(task_summary: str, cal_summary: str, criteria, config: dict, mode: str) -> list[str]:
    """Group completed tasks under their category headers.

    Output blocks look like "✅ Personal Tasks (2)\\nClean, Cook".
    """
    tasks_section = extract_section(task_summary, 'TASKS')
    blocks = []
    header = None
    tasks = []

    def flush():
        if header and tasks:
            blocks.append(f"{header}\n{', '.join(tasks)}")

    for line in _lines(tasks_section):
        match = TASK_CATEGORY_PATTERN.match(line)
        if match:
            flush()
            tasks = []
            header = None
            if matches_criteria(line, criteria):
                marker = leading_status_marker(line, TASK_CATEGORY_MARKERS)
                header = f"{marker} {match.group('name').strip()} ({match.group('count')})"
        elif line.startswith('•') and header:
            task = strip_bullet(line)
            if task:
                tasks.append(task)

    flush()
    return blocks


SECTION_EXTRACTORS = {
    'TRIPS': extract_trips,
    'EVENTS': extract_events,
    'ROCKS': extract_rocks,
    'HABITS': extract_habits,
    'CAL_SUMMARY': extract_cal_summary,
    'CAL_EVENTS': extract_cal_events,
    'TASKS': extract_tasks,
}


def extract_section_items(task_summary: str, cal_summary: str, section_name: str,
                          mode: str, config: dict) -> list[str]:
    """Items of one section that match the section's criteria for this mode."""
    criteria = get_nested(config, ['evaluation_criteria', section_name, mode])
    extractor = SECTION_EXTRACTORS.get(section_name)
    if criteria is None or extractor is None:
        return []
    return extractor(task_summary or '', cal_summary or '', criteria, config, mode)


def _item_joiner(section: dict, mode: str, config: dict) -> str:
    if section.get('blocks'):
        return '\n\n'
    separator = section.get('item_separator')
    if isinstance(separator, dict):
        separator = separator.get(mode)
    if separator is None:
        separator = get_nested(config, ['formatting', 'item_separator'], '\n')
    return separator


def build_retro_document(task_summary: str, cal_summary: str, mode: str, config: dict) -> str:
    """Build the good or bad document for one week."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r} (expected one of {', '.join(MODES)})")

    header_template = get_nested(config, ['formatting', 'section_header'], DEFAULT_HEADER_TEMPLATE)
    section_separator = get_nested(config, ['formatting', 'section_separator'], DEFAULT_SECTION_SEPARATOR)

    output = ''
    for section_name in config.get('section_order', []):
        section = get_nested(config, ['sections', section_name], {}) or {}
        if not section.get(f'include_in_{mode}'):
            continue

        items = extract_section_items(task_summary, cal_summary, section_name, mode, config)
        if not items and not section.get(f'always_show_{mode}'):
            continue

        output += format_section_header(section.get('title') or section_name, header_template) + '\n'
        if items:
            output += _item_joiner(section, mode, config).join(items) + '\n'
        else:
            output += section.get('empty_message', '') + '\n'
        output += section_separator

    return output.strip()
