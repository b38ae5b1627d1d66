"""
Category parsing and merging for CAL EVENTS and TASKS sections.

A categorized section looks like:

    ✅ Social time (2 events, 3.5 hours):
    Tue dinner with Sam, Sat board games
    Personal Tasks (2)
    • Clean
    • Cook

Header lines open a category; every following line up to the next header
belongs to it. Lines before the first header have no category and are
dropped.
"""

import re
from dataclasses import dataclass, field

from recap_markers import STATUS_MARKERS, strip_bullet, strip_status_marker

METRIC_COUNT = 'count'
METRIC_HOURS = 'hours'

ITEM_STYLE_BULLETS = 'bullets'
ITEM_STYLE_COMMAS = 'commas'

CATEGORY_HEADER_PATTERN = re.compile(
    r'^(?P<name>[^()]+?)\s*\(\s*(?:'
    r'(?P<count>\d+)(?:\s*/\s*\d+)?'
    r'|(?P<events>\d+)\s+events?\s*,\s*(?P<hours>\d+(?:\.\d+)?)\s+hours?'
    r')\s*\)\s*:?\s*$',
    re.IGNORECASE,
)

DAY_TOKEN_PATTERN = re.compile(
    r'\b(Sun(?:day)?|Mon(?:day)?|Tue(?:s|sday)?|Wed(?:nesday)?|'
    r'Thu(?:r|rs|rsday)?|Fri(?:day)?|Sat(?:urday)?)\b'
)

DAY_ORDER = {'Sun': 0, 'Mon': 1, 'Tue': 2, 'Wed': 3, 'Thu': 4, 'Fri': 5, 'Sat': 6}


@dataclass
class Category:
    name: str
    metric: float
    items: list[str] = field(default_factory=list)
    events: int | None = None


def _number(text: str) -> float:
    value = float(text)
    return int(value) if value.is_integer() else value


def format_number(value: float) -> str:
    """Render 4.0 as "4" and 4.5 as "4.5"; floats keep one decimal at most."""
    if isinstance(value, float):
        value = round(value, 1)
        if value.is_integer():
            value = int(value)
    return str(value)


def clean_category_name(raw: str) -> str:
    name = strip_status_marker(strip_bullet(raw), STATUS_MARKERS)
    return name.strip().rstrip(':').strip()


def parse_category_header(line: str) -> tuple[str, float | None, float | None] | None:
    """Parse "<name> (<N>)", "<name> (<N>/<total>)" or "<name> (<N> events, <M> hours)".

    Returns (name, count, hours); count is the event count for the hours
    form. Returns None for anything that isn't a header.
    """
    match = CATEGORY_HEADER_PATTERN.match(line.strip())
    if not match:
        return None

    name = clean_category_name(match.group('name'))
    if not name:
        return None

    if match.group('count') is not None:
        return name, _number(match.group('count')), None
    return name, _number(match.group('events')), _number(match.group('hours'))


def split_items(line: str, item_style: str = ITEM_STYLE_BULLETS) -> list[str]:
    """Turn one body line into items according to the section's item style.

    A bulleted line is one item with its bullet removed. A comma line is a
    list of events written on one line; it stays a single item so titles
    containing commas survive and the line sorts by its first day token.
    """
    text = strip_bullet(line) if item_style == ITEM_STYLE_BULLETS else line.strip()
    return [text] if text else []


def parse_categories(content: str, metric: str = METRIC_COUNT,
                     item_style: str = ITEM_STYLE_BULLETS) -> list[Category]:
    """Scan a section body top to bottom and group its lines into categories."""
    categories = []
    current = None

    for line in (content or '').split('\n'):
        if not line.strip():
            continue

        header = parse_category_header(line)
        if header:
            name, count, hours = header
            if metric == METRIC_HOURS:
                current = Category(name=name, metric=hours or 0, events=count)
            else:
                current = Category(name=name, metric=count or 0)
            categories.append(current)
        elif current is not None:
            current.items.extend(split_items(line, item_style))

    return categories


def merge_categories(first: list[Category], second: list[Category]) -> list[Category]:
    """Merge two category lists by name.

    Metrics are summed and items of `first` come before items of `second`.
    Output order is first-seen order across `first` then `second`.
    """
    merged: dict[str, Category] = {}

    for category in [*first, *second]:
        existing = merged.get(category.name)
        if existing is None:
            merged[category.name] = Category(
                name=category.name,
                metric=category.metric,
                items=list(category.items),
                events=category.events,
            )
            continue

        existing.metric += category.metric
        existing.items.extend(category.items)
        if category.events is not None:
            existing.events = (existing.events or 0) + category.events

    return list(merged.values())


def day_index(text: str) -> int:
    """Sun=0 ... Sat=6 for the first day token; lines without one sort as Sunday."""
    match = DAY_TOKEN_PATTERN.search(text)
    if not match:
        return 0
    return DAY_ORDER[match.group(1)[:3]]


def sort_by_day(items: list[str]) -> list[str]:
    return sorted(items, key=day_index)
