"""Array extractor for brace-delimited list fields.

Handles ``Key = {"a", "b", "c"}`` lists as posted by the upstream bot,
including the malformed variants seen in practice: curly quotes, missing
commas, inline tables inside the list and invisible characters pasted in
from chat clients.
"""

from __future__ import annotations

import re
from functools import lru_cache

from formable_wiki.parsers.text import (
    block_interior,
    key_pattern,
    normalize_quotes,
    strip_quotes_and_invisibles,
)

# Either a quoted run or a bare run of non-space, non-comma characters
ITEM_TOKEN_PATTERN: re.Pattern[str] = re.compile(r"([\"'])(.*?)\1|([^,\s]+)")

COMMENT_MARKER: str = "//"


@lru_cache(maxsize=64)
def _compile_anchors(key: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    k = key_pattern(key)
    primary = re.compile(rf"(?<!\w){k}\s*=\s*\{{", re.IGNORECASE)
    # Key followed by anything on the same line, then the opening brace
    fallback = re.compile(rf"(?<!\w){k}(?!\w)[^\n{{}}]*\s*\{{", re.IGNORECASE)
    return primary, fallback


def _find_block(text: str, key: str) -> str | None:
    """Locate the interior of ``key``'s brace block.

    Raises:
        UnbalancedBraceError: If the block is found but never closes.
    """
    primary, fallback = _compile_anchors(key)
    match = primary.search(text) or fallback.search(text)
    if match is None:
        return None
    return block_interior(text, match.end() - 1)


def _split_items(block: str) -> list[str]:
    """Split on commas, or tokenize when commas are missing."""
    items = block.split(",")
    meaningful = [item for item in items if strip_quotes_and_invisibles(item)]
    if len(meaningful) <= 1:
        items = [m.group(2) or m.group(3) or "" for m in ITEM_TOKEN_PATTERN.finditer(block)]
    return items


def _clean_items(items: list[str]) -> list[str]:
    seen: set[str] = set()
    cleaned: list[str] = []
    for item in items:
        value = strip_quotes_and_invisibles(item)
        if not value or COMMENT_MARKER in value or value in seen:
            continue
        seen.add(value)
        cleaned.append(value)
    return cleaned


def extract_array(text: str, key: str) -> list[str]:
    """Extract the list value of ``key``.

    The block interior is captured with a depth-counting scan, so inline
    tables inside the list do not end it early. Items are stripped of
    quotes and invisible characters, empty items and ``//`` comments are
    dropped, and duplicates are removed keeping first-seen order.

    Args:
        text: Raw message text.
        key: Field name, matched case-insensitively.

    Returns:
        Ordered list of items; empty when the field is missing.

    Raises:
        UnbalancedBraceError: If the field's block never closes.

    Examples:
        >>> extract_array('RequiredCountries = {"Russia", "Ukraine", "Russia"}', "RequiredCountries")
        ['Russia', 'Ukraine']
        >>> extract_array("RequiredTiles = {A.1 B.2 C.3}", "RequiredTiles")
        ['A.1', 'B.2', 'C.3']
        >>> extract_array("FormableName = 'x'", "RequiredTiles")
        []
    """
    normalized = normalize_quotes(text)
    block = _find_block(normalized, key)
    if not block:
        return []
    return _clean_items(_split_items(block))
