"""Tokenized field extractor.

Recovers a scalar value for a named field from loosely formatted text.
Upstream bots emit several dialects, so the rules below are tried in order
and the first one that matches wins:

1. ``Key = "value"`` / ``Key = 'value'``
2. ``Key = value`` (runs to a comma, newline or closing brace)
3. ``["Key"] = value`` (attribute tables)
4. ``Key: [value]`` (colon-array dialect; empty brackets mean absent)
5. Linear scan: the key, then the nearer of ``=`` or ``:``, then the value

Key matching is case-insensitive throughout.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from formable_wiki.parsers.text import QUOTE_TRANSLATION, key_pattern, normalize_quotes, strip_wrapping

# Characters allowed between a key and its "=" / ":" in the linear scan
SCAN_GAP_PATTERN: re.Pattern[str] = re.compile(r"[\s\"'\]]*")

# Terminators for an unquoted value
VALUE_END_PATTERN: re.Pattern[str] = re.compile(r"[\n,}]")


@dataclass(frozen=True)
class FieldMatch:
    """Location and value of a field found by :func:`locate_field`.

    Attributes:
        value: Cleaned value (may be empty).
        start: Offset of the key in the searched text.
        end: Offset just past the raw value.
    """

    value: str
    start: int
    end: int


@lru_cache(maxsize=256)
def _compile_rules(key: str) -> tuple[re.Pattern[str], ...]:
    k = key_pattern(key)
    flags = re.IGNORECASE
    return (
        re.compile(rf"(?<!\w){k}\s*=\s*(?:\"([^\"\n]*)\"|'([^'\n]*)')", flags),
        re.compile(rf"(?<!\w){k}\s*=\s*([^,}}\n]+)", flags),
        re.compile(rf"\[\s*[\"']{k}[\"']\s*\]\s*=\s*([^,}}\n]+)", flags),
        re.compile(rf"(?<!\w){k}\s*:\s*\[([^\]\n]*)\]", flags),
        re.compile(rf"(?<!\w){k}(?!\w)", flags),
    )


def _clean_unquoted(raw: str) -> str | None:
    value = raw.strip().rstrip(",").strip()
    if value.startswith("{"):
        # A block, not a scalar
        return None
    value = strip_wrapping(value, "\"'")
    return value or None


def _scan_after_key(text: str, pattern: re.Pattern[str]) -> str | None:
    """Rule 5: take whatever follows the nearest ``=`` or ``:`` after the key."""
    for key_match in pattern.finditer(text):
        gap = SCAN_GAP_PATTERN.match(text, key_match.end())
        position = gap.end() if gap else key_match.end()
        if position >= len(text) or text[position] not in "=:":
            continue
        remainder = text[position + 1 :]
        value = VALUE_END_PATTERN.split(remainder, maxsplit=1)[0]
        value = strip_wrapping(value)
        if value and not value.startswith("{"):
            return value
    return None


def extract_field(text: str, key: str) -> str | None:
    """Extract a scalar value for ``key``.

    Args:
        text: Raw message text.
        key: Field name, matched case-insensitively. Spaces in the key match
            any run of whitespace.

    Returns:
        The trimmed value, or None when no rule found the field.

    Examples:
        >>> extract_field('FormableName = "Great Kievan Rus",', "FormableName")
        'Great Kievan Rus'
        >>> extract_field("MissionName = Unite Iberia\\n", "missionname")
        'Unite Iberia'
        >>> extract_field('["StabilityGain"] = 15,', "StabilityGain")
        '15'
        >>> extract_field("Demonym: [Ilkhanid]", "Demonym")
        'Ilkhanid'
        >>> extract_field('"FormableName": "Rome"', "FormableName")
        'Rome'
        >>> extract_field("Nothing here", "FormableName")
    """
    normalized = normalize_quotes(text)
    quoted, unquoted, attribute, colon_array, bare_key = _compile_rules(key)

    match = quoted.search(normalized)
    if match:
        value = (match.group(1) or match.group(2) or "").strip()
        if value:
            return value

    match = unquoted.search(normalized)
    if match:
        value = _clean_unquoted(match.group(1))
        if value:
            return value

    match = attribute.search(normalized)
    if match:
        value = _clean_unquoted(match.group(1))
        if value:
            return value

    match = colon_array.search(normalized)
    if match:
        value = strip_wrapping(match.group(1), "\"'")
        return value or None

    return _scan_after_key(normalized, bare_key)


@lru_cache(maxsize=32)
def _compile_locator(key: str) -> re.Pattern[str]:
    k = key_pattern(key)
    return re.compile(
        rf"(?<!\w){k}[\"']?\]?\s*[=:]\s*(\[[^\]\n]*\]|\"[^\"\n]*\"|'[^'\n]*'|[^\n,}}]*)",
        re.IGNORECASE,
    )


def locate_field(text: str, key: str) -> FieldMatch | None:
    """Find a field in its quoted, bracketed, colon-array or bare form.

    Unlike :func:`extract_field` this reports where the field sits, so the
    caller can cut the text at the line holding it. Offsets refer to
    ``text`` itself; only smart quotes are folded, which keeps lengths equal.

    Examples:
        >>> m = locate_field('Name = "A"\\nDemonym = "Kievan"\\ntrailing', "Demonym")
        >>> m.value, m.start
        ('Kievan', 11)
        >>> locate_field("Demonym: []", "Demonym").value
        ''
    """
    searchable = text.translate(QUOTE_TRANSLATION)
    match = _compile_locator(key).search(searchable)
    if match is None:
        return None
    value = strip_wrapping(match.group(1))
    return FieldMatch(value=value, start=match.start(), end=match.end())
