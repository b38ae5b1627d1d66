"""
Section codec for recap documents.

A recap document is plain text split into named sections:

    ===== EVENTS =====
    Mon call with Alice
    ===== TASKS =====
    Personal Tasks (2)

Section names are matched case-insensitively and trimmed. Missing sections
resolve to an empty string rather than an error.
"""

import re
from typing import Iterable

DEFAULT_HEADER_TEMPLATE = '===== {title} ====='
DEFAULT_SECTION_SEPARATOR = '\n'

# A header occupies its own line: "===== NAME =====". CRLF line endings are accepted.
SECTION_HEADER_PATTERN = re.compile(r'^[ \t]*=====[ \t]*([^=\r\n]+?)[ \t]*=====[ \t]*\r?$', re.MULTILINE)


def _normalize_name(name: str) -> str:
    return ' '.join(name.split()).upper()


def _iter_sections(document: str):
    """Yield (name, body) pairs in document order."""
    document = document.replace('\r\n', '\n')
    headers = list(SECTION_HEADER_PATTERN.finditer(document))
    for i, match in enumerate(headers):
        body_start = match.end()
        body_end = headers[i + 1].start() if i + 1 < len(headers) else len(document)
        yield match.group(1).strip(), document[body_start:body_end].strip()


def decode_sections(document: str | None) -> dict[str, str]:
    """Parse a document into a mapping of section name -> trimmed content.

    The first occurrence of a name wins; later duplicates are ignored.
    """
    sections = {}
    if not document:
        return sections

    seen = set()
    for name, body in _iter_sections(document):
        key = _normalize_name(name)
        if key in seen:
            continue
        seen.add(key)
        sections[name] = body
    return sections


def extract_section(document: str | None, section_name: str) -> str:
    """Return the content of one section, or '' if the document doesn't have it."""
    if not document:
        return ''

    wanted = _normalize_name(section_name)
    for name, body in _iter_sections(document):
        if _normalize_name(name) == wanted:
            return body
    return ''


def extract_section_names(document: str | None) -> list[str]:
    """Return the section names in the order they appear."""
    if not document:
        return []
    return [m.group(1).strip() for m in SECTION_HEADER_PATTERN.finditer(document)]


def has_section(document: str | None, section_name: str) -> bool:
    wanted = _normalize_name(section_name)
    return any(_normalize_name(n) == wanted for n in extract_section_names(document))


def format_section_header(title: str, template: str = DEFAULT_HEADER_TEMPLATE) -> str:
    return template.format(title=title)


def encode_sections(sections: Iterable[tuple[str, str]],
                    header_template: str = DEFAULT_HEADER_TEMPLATE,
                    separator: str = DEFAULT_SECTION_SEPARATOR) -> str:
    """Serialize (name, content) pairs in the given order.

    Sections with blank content are omitted. The result is trimmed, so the
    trailing separator never survives.
    """
    output = ''
    for name, content in sections:
        if not content or not content.strip():
            continue
        output += format_section_header(name, header_template) + '\n'
        output += content.strip() + '\n'
        output += separator
    return output.strip()
