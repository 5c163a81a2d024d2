"""
Message Splitter

Splits long messages into segments no longer than a ceiling.

Three tiers, coarsest first:
1. Section boundaries (a line starting with a section marker)
2. Blank-line paragraph boundaries inside an oversized section
3. Hard cuts inside an oversized paragraph

Splitting is lossless: joining the segments reproduces the input.
"""

import html
import re
from typing import Optional, Pattern

# A section starts with an emoji or a bold title at the beginning of a line
SECTION_MARKER = re.compile(r"^(?:[\u2600-\u27BF\U0001F300-\U0001FAFF]|<b>)", re.MULTILINE)

PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n\s*")

# Room kept for the "(i/N)" marker appended to multi-segment messages
PART_MARKER_RESERVE = 16

# Only tag-shaped tokens; a bare "<" in prose is text
_TAG_RE = re.compile(r"</?[a-zA-Z][^<>]*>")

# How far back a hard cut looks for an unfinished tag or entity
CUT_LOOKBACK = 16


def _cut(text: str, positions: list[int]) -> list[str]:
    bounds = sorted({0, len(text), *positions})
    return [text[a:b] for a, b in zip(bounds, bounds[1:]) if b > a]


def split_sections(text: str, marker: Pattern = SECTION_MARKER) -> list[str]:
    """Cut before every line that starts a section."""
    return _cut(text, [m.start() for m in marker.finditer(text)])


def split_paragraphs(text: str) -> list[str]:
    """Cut after every blank-line run; the break stays with the paragraph before it."""
    return _cut(text, [m.end() for m in PARAGRAPH_BREAK.finditer(text)])


def _safe_cut(text: str, start: int, end: int) -> int:
    """Move a cut back so it never lands inside a tag or an entity."""
    floor = max(start + 1, end - CUT_LOOKBACK)
    for opener, closer in (("<", ">"), ("&", ";")):
        pos = text.rfind(opener, floor, end)
        if pos != -1 and closer not in text[pos:end]:
            end = pos
    return end


def hard_split(text: str, limit: int) -> list[str]:
    pieces = []
    start = 0
    while start < len(text):
        end = start + limit
        if end < len(text):
            end = _safe_cut(text, start, end)
        pieces.append(text[start:end])
        start = end
    return pieces


def _pack(units: list[str], limit: int) -> list[str]:
    """Greedily join consecutive units while they fit."""
    segments = []
    current = ""
    for unit in units:
        if current and len(current) + len(unit) > limit:
            segments.append(current)
            current = unit
        else:
            current += unit
    if current:
        segments.append(current)
    return segments


def split_message(
    text: str, limit: int, marker: Optional[Pattern] = None
) -> list[str]:
    """
    Split text into segments of at most `limit` characters.

    Returns a single segment when the text already fits.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    if not text:
        return []
    if len(text) <= limit:
        return [text]

    units = []
    for section in split_sections(text, marker or SECTION_MARKER):
        if len(section) <= limit:
            units.append(section)
            continue
        for paragraph in split_paragraphs(section):
            if len(paragraph) <= limit:
                units.append(paragraph)
            else:
                units.extend(hard_split(paragraph, limit))

    return _pack(units, limit)


def part_marker(index: int, total: int) -> str:
    return f"\n\n({index}/{total})"


def build_segments(text: str, max_length: int) -> list[str]:
    """
    Split for delivery and number the parts.

    Every returned segment, marker included, fits in `max_length`.
    """
    if len(text) <= max_length:
        return [text] if text else []

    parts = split_message(text, max_length - PART_MARKER_RESERVE)
    total = len(parts)
    return [part + part_marker(i, total) for i, part in enumerate(parts, start=1)]


def strip_markup(text: str) -> str:
    """Remove HTML tags and unescape entities for a plain-text resend."""
    return html.unescape(_TAG_RE.sub("", text))
