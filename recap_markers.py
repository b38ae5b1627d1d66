"""
Marker classification for recap line items.

Summary lines carry their status inline, either as an emoji glyph
("✅ Workout") or a keyword ("Went well - Ship the garden bed"). A criteria
value from configuration decides which lines belong in the good or bad
document:

    "all"                 every line
    "none"                no line
    ["✅", "Went well"]   lines containing any of the markers
    {"not": ["😔"]}       lines containing none of the markers

Emoji markers are matched exactly; keyword markers ignore case.
"""

import re

ALL = 'all'
NONE = 'none'

VARIATION_SELECTOR = '\ufe0f'

# Leading status glyphs consumed when a line is copied into a good/bad document.
STATUS_MARKERS = ('✅', '❌', '⚠️', '☑️')

BULLETS = ('•', '-', '*', '·')

TRAILING_PARENTHETICAL = re.compile(r'\s*\([^)]*\)\s*$')

# (glyph, keyword prefix, replacement for the keyword prefix)
ROCK_STATUSES = (
    ('✅', 'Went well', ''),
    ('👾', 'Made progress', 'made progress on '),
    ('🥊', 'Went bad', ''),
    ('🚧', "Didn't go so well", ''),
)


def _is_keyword(marker: str) -> bool:
    return any(ch.isalpha() for ch in marker)


def contains_marker(line: str, marker: str) -> bool:
    """Check a single marker against a line (keywords are case-insensitive)."""
    if not marker:
        return False
    if _is_keyword(marker):
        return marker.lower() in line.lower()
    if marker in line:
        return True
    # "⚠️" and "⚠" are the same status; tolerate a missing variation selector.
    bare = marker.replace(VARIATION_SELECTOR, '')
    return bool(bare) and bare in line.replace(VARIATION_SELECTOR, '')


def contains_any(line: str, markers) -> bool:
    return any(contains_marker(line, m) for m in markers)


def matches_criteria(line: str, criteria) -> bool:
    """Return True if the line belongs to the bucket described by criteria."""
    if criteria == ALL:
        return True
    if criteria == NONE or criteria is None:
        return False
    if isinstance(criteria, (list, tuple)):
        return contains_any(line, criteria)
    if isinstance(criteria, dict) and isinstance(criteria.get('not'), (list, tuple)):
        return not contains_any(line, criteria['not'])
    return False


def strip_status_marker(line: str, markers=STATUS_MARKERS) -> str:
    """Remove one leading status glyph and the whitespace after it."""
    text = line.strip()
    for marker in markers:
        for variant in (marker, marker.replace(VARIATION_SELECTOR, '')):
            if variant and text.startswith(variant):
                text = text[len(variant):]
                if text.startswith(VARIATION_SELECTOR):
                    text = text[1:]
                return text.strip()
    return text


def strip_bullet(line: str) -> str:
    text = line.strip()
    while text and text[0] in BULLETS:
        text = text[1:].lstrip()
    return text


def strip_trailing_parenthetical(text: str) -> str:
    """Drop a trailing "(...)" such as a time range or completion date."""
    return TRAILING_PARENTHETICAL.sub('', text)


def leading_status_marker(line: str, markers=STATUS_MARKERS) -> str | None:
    text = line.strip()
    for marker in markers:
        if text.startswith(marker) or text.startswith(marker.replace(VARIATION_SELECTOR, '')):
            return marker
    return None


def clean_rock(line: str) -> str:
    """Turn a rock status line into plain prose.

    "👾 Made progress - Garden bed (2/4)" -> "made progress on Garden bed"
    """
    text = line.strip()
    for glyph, keyword, replacement in ROCK_STATUSES:
        if glyph in text or keyword.lower() in text.lower():
            text = text.replace(glyph, '', 1).strip()
            text = re.sub(rf'^{re.escape(keyword)}\s*-\s*', replacement, text, flags=re.IGNORECASE)
            text = strip_trailing_parenthetical(text)
            break
    return text.strip()
