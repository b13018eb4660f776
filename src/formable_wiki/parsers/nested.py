"""Nested-object extractor for ``FormableButton`` / ``CustomAlert`` blocks.

These blocks hold a handful of quoted sub-fields and are not expected to
nest, so a single-level brace capture is enough.
"""

from __future__ import annotations

import re
from functools import lru_cache

from formable_wiki.parsers.text import key_pattern, normalize_quotes
from formable_wiki.parsers.types import NestedObject

# Quoted value in either quote style, embedded opposite quotes allowed
_QUOTED_VALUE = r"\s*=\s*([\"'])(.*?)\1"

NAME_PATTERN: re.Pattern[str] = re.compile(r"(?:ButtonName|Name)" + _QUOTED_VALUE, re.IGNORECASE)
DESCRIPTION_PATTERN: re.Pattern[str] = re.compile(
    r"(?:ButtonDescription|Description|Desc)" + _QUOTED_VALUE,
    re.IGNORECASE,
)
TITLE_PATTERN: re.Pattern[str] = re.compile(r"Title" + _QUOTED_VALUE, re.IGNORECASE)
BUTTON_PATTERN: re.Pattern[str] = re.compile(r"Button" + _QUOTED_VALUE, re.IGNORECASE)


@lru_cache(maxsize=16)
def _compile_block(key: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){key_pattern(key)}\s*=\s*\{{([^}}]*)\}}", re.IGNORECASE)


def _quoted(pattern: re.Pattern[str], content: str) -> str | None:
    match = pattern.search(content)
    if match is None:
        return None
    return match.group(2).strip()


def extract_object(text: str, key: str) -> NestedObject | None:
    """Extract the Name/Description/Title/Button sub-fields of a block.

    Args:
        text: Raw message text.
        key: Block name such as ``FormableButton`` or ``CustomAlert``.

    Returns:
        NestedObject with whichever sub-fields were found, or None when the
        block itself is missing.

    Examples:
        >>> obj = extract_object('CustomAlert = { Title = "Rus!", Button = "Glory" }', "CustomAlert")
        >>> obj.title, obj.button, obj.description
        ('Rus!', 'Glory', None)
    """
    normalized = normalize_quotes(text)
    block = _compile_block(key).search(normalized)
    if block is None:
        return None

    content = block.group(1)
    return NestedObject(
        name=_quoted(NAME_PATTERN, content),
        description=_quoted(DESCRIPTION_PATTERN, content),
        title=_quoted(TITLE_PATTERN, content),
        button=_quoted(BUTTON_PATTERN, content),
    )
