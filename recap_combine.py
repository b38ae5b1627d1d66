"""
Combine the good and bad recap documents into one overview.

Each section listed in the configured order is pulled from both documents
and merged with the strategy named by its section type:

    simple       good then bad, joined by the item separator
    day_sorted   all lines sorted Sun..Sat by their first day token
    cal_events   categories merged by name, hours summed and labeled
    tasks        categories merged by name, counts summed and labeled
    habits       all lines kept, summary label from the habit score

Malformed input never raises; it only produces less output.
"""

from recap_categories import (
    ITEM_STYLE_BULLETS,
    ITEM_STYLE_COMMAS,
    METRIC_COUNT,
    METRIC_HOURS,
    format_number,
    merge_categories,
    parse_categories,
    sort_by_day,
)
from recap_config import get_nested
from recap_evaluation import DEFAULT_HABIT_LABEL, DEFAULT_LABEL, evaluation_label, habit_score
from recap_sections import (
    DEFAULT_HEADER_TEMPLATE,
    DEFAULT_SECTION_SEPARATOR,
    encode_sections,
    extract_section,
    has_section,
)

SIMPLE = 'simple'
DAY_SORTED = 'day_sorted'
CAL_EVENTS = 'cal_events'
TASKS = 'tasks'
HABITS = 'habits'

# Names used by older configs.
TYPE_ALIASES = {
    'simple+daySort': DAY_SORTED,
    'calEvents': CAL_EVENTS,
}

DEFAULT_ITEM_SEPARATOR = '\n'
DEFAULT_CATEGORY_HEADER = '{evaluation} {category_lower}'


def section_type(section_name: str, config: dict) -> str | None:
    """Resolve a section's combination type.

    Returns None when the section has no type entry; unknown type names
    fall back to simple.
    """
    raw = get_nested(config, ['section_types', section_name])
    if not raw:
        return None
    raw = TYPE_ALIASES.get(raw, raw)
    if raw not in (SIMPLE, DAY_SORTED, CAL_EVENTS, TASKS, HABITS):
        return SIMPLE
    return raw


def _item_separator(config: dict) -> str:
    return get_nested(config, ['formatting', 'item_separator'], DEFAULT_ITEM_SEPARATOR)


def _item_style(section_name: str, config: dict) -> str:
    return get_nested(config, ['item_styles', section_name], ITEM_STYLE_BULLETS)


def format_category_header(evaluation: str, category: str, config: dict) -> str:
    template = get_nested(config, ['formatting', 'category_header'], DEFAULT_CATEGORY_HEADER)
    return template.format(evaluation=evaluation, category=category, category_lower=category.lower())


def _format_items(items: list[str], item_style: str) -> str:
    if item_style == ITEM_STYLE_COMMAS:
        return '\n'.join(items)
    return '\n'.join(f'• {item}' for item in items)


def _lines(content: str) -> list[str]:
    return [line.strip() for line in (content or '').split('\n') if line.strip()]


def combine_simple(good: str, bad: str, config: dict) -> str:
    parts = [part.strip() for part in (good, bad) if part and part.strip()]
    return _item_separator(config).join(parts)


def combine_day_sorted(good: str, bad: str, config: dict) -> str:
    items = _lines(good) + _lines(bad)
    return _item_separator(config).join(sort_by_day(items))


def combine_cal_events(good: str, bad: str, config: dict, section_name: str = 'CAL EVENTS') -> str:
    item_style = _item_style(section_name, config)
    categories = merge_categories(
        parse_categories(good, METRIC_HOURS, item_style),
        parse_categories(bad, METRIC_HOURS, item_style),
    )
    ranges = get_nested(config, ['evaluation_rules', 'cal_events', 'ranges'], [])
    default = get_nested(config, ['evaluation_rules', 'cal_events', 'default'], DEFAULT_LABEL)

    blocks = []
    for category in categories:
        evaluation = evaluation_label(category.metric, ranges, default)
        header = format_category_header(evaluation, category.name, config)
        block = f"{header} ({format_number(category.metric)} hours)"
        if category.items:
            block += '\n' + _format_items(sort_by_day(category.items), item_style)
        blocks.append(block)

    return '\n\n'.join(blocks).strip()


def combine_tasks(good: str, bad: str, config: dict, section_name: str = 'TASKS') -> str:
    item_style = _item_style(section_name, config)
    categories = merge_categories(
        parse_categories(good, METRIC_COUNT, item_style),
        parse_categories(bad, METRIC_COUNT, item_style),
    )
    ranges = get_nested(config, ['evaluation_rules', 'tasks', 'ranges'], [])
    default = get_nested(config, ['evaluation_rules', 'tasks', 'default'], DEFAULT_LABEL)

    blocks = []
    for category in categories:
        evaluation = evaluation_label(category.metric, ranges, default)
        header = format_category_header(evaluation, category.name, config)
        block = f"{header} ({format_number(category.metric)})"
        if category.items:
            block += '\n' + _format_items(category.items, item_style)
        blocks.append(block)

    return '\n\n'.join(blocks).strip()


def combine_habits(good: str, bad: str, config: dict) -> str:
    lines = _lines(good) + _lines(bad)
    if not lines:
        return ''

    rules = get_nested(config, ['evaluation_rules', 'habits'], {}) or {}
    result = habit_score(
        lines,
        scoring=rules.get('scoring'),
        ranges=rules.get('overall_evaluation'),
        markers=rules.get('markers'),
        default=rules.get('default', DEFAULT_HABIT_LABEL),
    )
    return result.evaluation + '\n' + '\n'.join(result.lines)


def combine_section(section_name: str, good: str, bad: str, config: dict) -> str:
    """Merge one section's good and bad content. Returns '' when there is nothing to show."""
    kind = section_type(section_name, config)
    if kind is None:
        return ''
    if kind == DAY_SORTED:
        return combine_day_sorted(good, bad, config)
    if kind == CAL_EVENTS:
        return combine_cal_events(good, bad, config, section_name)
    if kind == TASKS:
        return combine_tasks(good, bad, config, section_name)
    if kind == HABITS:
        return combine_habits(good, bad, config)
    return combine_simple(good, bad, config)


def generate_overview(good_document: str, bad_document: str, config: dict) -> str:
    """Build the overview document from the good and bad documents."""
    sections = []
    for section_name in config.get('section_order', []):
        if not (has_section(good_document, section_name) or has_section(bad_document, section_name)):
            continue
        combined = combine_section(
            section_name,
            extract_section(good_document, section_name),
            extract_section(bad_document, section_name),
            config,
        )
        if combined and combined.strip():
            sections.append((section_name, combined))

    return encode_sections(
        sections,
        header_template=get_nested(config, ['formatting', 'section_header'], DEFAULT_HEADER_TEMPLATE),
        separator=get_nested(config, ['formatting', 'section_separator'], DEFAULT_SECTION_SEPARATOR),
    )
