"""Contributor and date metadata extractor.

Attribution sits at the top of a message by convention (``by <@id>`` or a
bare mention), independently of the structured block below it.
"""

from __future__ import annotations

import re
from typing import Final

from formable_wiki.parsers.text import non_blank_lines
from formable_wiki.parsers.types import MessageMetadata, suggested_by_from_ids

# Discord user mention, optionally in nickname form: <@123...> or <@!123...>
MENTION_PATTERN: Final[re.Pattern[str]] = re.compile(r"<@!?(\d{17,20})>")

# "suggested by" / "made by" / "by" followed by one or more contributor tokens
SUGGESTED_BY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:suggested\s+by|made\s+by|\bby)\s*:?\s*"
    r"((?:(?:<@!?\d{17,20}>|@[\w.]+|\b\d{17,20}\b)(?:\s*,\s*|\s+and\s+|\s*&\s*|\s+)?)+)",
    re.IGNORECASE,
)

# Tokens accepted after a "suggested by" phrase
CONTRIBUTOR_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"<@!?(\d{17,20})>|@([\w.]+)|\b(\d{17,20})\b"
)

DATE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\b(\d{2}/\d{2}/\d{4})\b")

MENTION_SCAN_LINES: Final[int] = 10
PHRASE_SCAN_LINES: Final[int] = 5


def _mention_ids(lines: list[str]) -> list[str]:
    ids: list[str] = []
    for line in lines:
        ids.extend(MENTION_PATTERN.findall(line))
    return ids


def _phrase_ids(lines: list[str]) -> list[str]:
    for line in lines:
        match = SUGGESTED_BY_PATTERN.search(line)
        if match is None:
            continue
        ids = [
            m.group(1) or m.group(2) or m.group(3)
            for m in CONTRIBUTOR_TOKEN_PATTERN.finditer(match.group(1))
        ]
        if ids:
            return ids
    return []


def extract_metadata(text: str) -> MessageMetadata:
    """Extract contributor mentions and a message date.

    Mentions are collected from the first ten non-blank lines in encounter
    order. When none are found, the first five non-blank lines are searched
    for a "suggested by" / "made by" / "by" phrase, which also accepts bare
    ids and ``@name`` handles. The date is the first ``DD/MM/YYYY`` token
    anywhere in the text.

    Args:
        text: Raw message text.

    Returns:
        MessageMetadata; ``suggested_by`` is None when no contributor was
        found, a single variant for one id and a multiple variant otherwise.

    Examples:
        >>> meta = extract_metadata("by <@123456789012345678>\\nFormableName = 'X'")
        >>> meta.suggested_by
        SingleContributor(contributor_id='123456789012345678')
        >>> extract_metadata("Suggested by @kaiser and @tsar").mention_ids
        ('kaiser', 'tsar')
    """
    lines = non_blank_lines(text)

    ids = _mention_ids(lines[:MENTION_SCAN_LINES])
    if not ids:
        ids = _phrase_ids(lines[:PHRASE_SCAN_LINES])

    date_match = DATE_PATTERN.search(text)

    return MessageMetadata(
        suggested_by=suggested_by_from_ids(ids),
        primary_contributor_id=ids[0] if ids else None,
        timestamp=date_match.group(1) if date_match else None,
        mention_ids=tuple(ids),
    )
