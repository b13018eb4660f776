"""CustomAttributes and custom-modifier extraction.

``CustomAttributes = { ["StabilityGain"] = 15, ... }`` carries the numeric
rewards of a formable/mission under several key spellings. Custom modifiers
appear either as flat ``formable_modifier = ...`` fields (wiki copy-paste)
or as ``Modifier = { ... }`` / ``AddModifiers = { ["x"] = { ... } }`` tables.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Final

from formable_wiki.parsers.field import extract_field
from formable_wiki.parsers.text import block_interior, normalize_quotes, strip_wrapping
from formable_wiki.parsers.types import CustomModifier, UnbalancedBraceError

logger = logging.getLogger("formable_wiki.parse")

CUSTOM_ATTRIBUTES_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"CustomAttributes\s*=\s*\{",
    re.IGNORECASE,
)

# Attribute name -> accepted key spellings, in priority order
ATTRIBUTE_KEYS: Final[dict[str, tuple[str, ...]]] = {
    "stability_gain": ("Stability_Gain", "StabilityGain"),
    "pp_gain": ("PoliticalPowerGain", "PP_Gain", "PPGain"),
    "required_stability": ("StabilityRequirement", "Stability_Requirement", "RequiredStability"),
}

MODIFIER_BLOCK_PATTERN: Final[re.Pattern[str]] = re.compile(r"Modifier\s*[:=]?\s*\{", re.IGNORECASE)
ADD_MODIFIERS_PATTERN: Final[re.Pattern[str]] = re.compile(r"AddModifiers\s*=\s*\{", re.IGNORECASE)
MODIFIER_ENTRY_PATTERN: Final[re.Pattern[str]] = re.compile(r"\[\s*\"[^\"]+\"\s*\]\s*=\s*\{")

MODIFIER_TITLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"Title\s*=\s*\"([^\"]+)\"", re.IGNORECASE)
MODIFIER_DESCRIPTION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"Description\s*=\s*\"([^\"]+)\"",
    re.IGNORECASE,
)
MODIFIER_ICON_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"Icon\s*=\s*\{[^}]*ID\s*=\s*\"?(\d+)\"?",
    re.IGNORECASE,
)


def _attribute_value(content: str, key: str) -> str | None:
    pattern = re.compile(rf"\[\s*\"{re.escape(key)}\"\s*\]\s*=\s*([^,\n}}]+)", re.IGNORECASE)
    match = pattern.search(content)
    if match is None:
        return None
    value = strip_wrapping(match.group(1), "\"'")
    return value or None


def extract_custom_attributes(text: str) -> dict[str, str]:
    """Pull stability gain, political-power gain and stability requirement.

    Args:
        text: Raw message text.

    Returns:
        Dict with any of ``stability_gain``, ``pp_gain`` and
        ``required_stability``; empty when there is no CustomAttributes block.

    Raises:
        UnbalancedBraceError: If the CustomAttributes block never closes.

    Examples:
        >>> extract_custom_attributes('CustomAttributes = { ["PP_Gain"] = 50, ["StabilityGain"] = 5 }')
        {'stability_gain': '5', 'pp_gain': '50'}
    """
    normalized = normalize_quotes(text)
    match = CUSTOM_ATTRIBUTES_PATTERN.search(normalized)
    if match is None:
        return {}

    content = block_interior(normalized, match.end() - 1)
    result: dict[str, str] = {}
    for attribute, keys in ATTRIBUTE_KEYS.items():
        for key in keys:
            value = _attribute_value(content, key)
            if value:
                result[attribute] = value
                break
    return result


def _key_variants(prefix: str, suffix: str) -> tuple[str, ...]:
    """Underscored and spaced spellings of a modifier key.

    Examples:
        >>> _key_variants("formable", "modifier_icon")
        ('formable_modifier_icon', 'formable modifier icon')
    """
    underscored = f"{prefix}_{suffix}"
    return (underscored, underscored.replace("_", " "))


def extract_modifier_fields(text: str, prefix: str) -> CustomModifier:
    """Resolve ``<prefix>_modifier``, ``_description`` and ``_icon`` fields.

    Both ``formable_modifier_icon = 123`` and the spaced
    ``formable modifier icon = 123`` spellings are accepted, as are the
    ``| formable_modifier = ...`` lines of a wiki page.
    """

    def first(suffix: str) -> str:
        for key in _key_variants(prefix, suffix):
            value = extract_field(text, key)
            if value:
                return value
        return ""

    return CustomModifier(
        name=first("modifier"),
        description=first("modifier_description"),
        icon=first("modifier_icon"),
    )


def _blocks_after(text: str, pattern: re.Pattern[str]) -> Iterator[str]:
    """Yield the interior of every block opened by ``pattern``; skip unclosed ones."""
    for match in pattern.finditer(text):
        try:
            yield block_interior(text, match.end() - 1)
        except UnbalancedBraceError as e:
            logger.debug(f"Skipping unclosed modifier block: {e}")


def iter_modifier_blocks(text: str) -> Iterator[str]:
    """Yield ``Modifier`` blocks, then the entries nested in ``AddModifiers``."""
    normalized = normalize_quotes(text)
    yield from _blocks_after(normalized, MODIFIER_BLOCK_PATTERN)
    for add_modifiers in _blocks_after(normalized, ADD_MODIFIERS_PATTERN):
        yield from _blocks_after(add_modifiers, MODIFIER_ENTRY_PATTERN)


def read_modifier_block(block: str) -> CustomModifier:
    """Read title, description and icon asset id from one modifier block.

    Examples:
        >>> read_modifier_block('Title = "Kievan Legacy", Icon = { ID = "1234" }')
        CustomModifier(name='Kievan Legacy', description='', icon='1234')
    """
    title = MODIFIER_TITLE_PATTERN.search(block)
    description = MODIFIER_DESCRIPTION_PATTERN.search(block)
    icon = MODIFIER_ICON_PATTERN.search(block)
    return CustomModifier(
        name=title.group(1).strip() if title else "",
        description=description.group(1).strip() if description else "",
        icon=icon.group(1).strip() if icon else "",
    )


def scan_modifier_blocks(text: str) -> CustomModifier:
    """Return the first modifier block that yields at least one field."""
    for block in iter_modifier_blocks(text):
        modifier = read_modifier_block(block)
        if not modifier.is_empty():
            return modifier
    return CustomModifier()


def merge_modifiers(primary: CustomModifier, fallback: CustomModifier) -> CustomModifier:
    """Fill the empty fields of ``primary`` from ``fallback``."""
    return CustomModifier(
        name=primary.name or fallback.name,
        description=primary.description or fallback.description,
        icon=primary.icon or fallback.icon,
    )
