"""Parse orchestrator for formable/mission messages.

This module provides the main entry point for turning a pasted chat message
into a TemplateData record. It sequences the individual extractors (field,
array, nested object, metadata, custom attributes) against the field names
for the requested kind.

The extraction pipeline:
1. Rejects empty input
2. Cuts the working text after the Demonym line (or the last top-level block)
3. Extracts metadata and CustomAttributes
4. Resolves name, country/tile lists, decision and alert blocks
5. Resolves custom modifier fields, scanning Modifier blocks as a fallback
6. Detects releasable forms and records soft-validation warnings
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Final

from formable_wiki.parsers.array import extract_array
from formable_wiki.parsers.attributes import (
    extract_custom_attributes,
    extract_modifier_fields,
    merge_modifiers,
    scan_modifier_blocks,
)
from formable_wiki.parsers.field import extract_field, locate_field
from formable_wiki.parsers.metadata import extract_metadata
from formable_wiki.parsers.nested import extract_object
from formable_wiki.parsers.text import normalize_quotes
from formable_wiki.parsers.types import (
    AUTO_CONTINENT,
    CustomModifier,
    FormType,
    MessageMetadata,
    ParseFailure,
    ParseResult,
    ParseSuccess,
    TemplateData,
    TemplateKind,
    suggested_by_from_ids,
)

# Name keys in lookup order, per kind; upstream bots sometimes mislabel the key
NAME_KEYS: Final[dict[str, tuple[str, str]]] = {
    "formable": ("FormableName", "MissionName"),
    "mission": ("MissionName", "FormableName"),
}

# Scalar fallbacks used when CustomAttributes does not supply a value
SCALAR_FALLBACK_KEYS: Final[dict[str, tuple[str, ...]]] = {
    "stability_gain": ("StabilityGain", "Stability_Gain"),
    "pp_gain": ("PPGain", "PoliticalPowerGain", "PP_Gain"),
    "required_stability": ("StabilityRequirement", "RequiredStability"),
}

# Fields whose absence is reported as a warning, never as a failure
EXPECTED_FIELDS: Final[tuple[str, ...]] = ("name", "required_countries", "required_tiles")

# Fields that carry no extracted content on their own
_NON_CONTENT_FIELDS: Final[frozenset[str]] = frozenset({"continent", "suggested_by", "form_type"})

RELEASABLE_MARKER: Final[str] = "releasable"

EMPTY_INPUT_MESSAGE: Final[str] = "Input is empty. Paste a formable or mission message to parse."
NO_FIELDS_MESSAGE: Final[str] = (
    "Could not extract any template fields. Check that the message contains "
    "a FormableName/MissionName or a RequiredCountries block."
)


def _truncate_working_text(text: str) -> str:
    """Cut trailing commentary after the structured block.

    Demonym is reliably the last structured field, so when it is present the
    text ends with its line. Otherwise the text ends where the last
    top-level block opened at or after the first ``{`` closes; flat messages
    carry several such blocks. When no block ever closes the text ends at the
    last ``}``, or is kept whole when there is none.

    Examples:
        >>> _truncate_working_text('Name = "A"\\nDemonym = "Rus"\\nthanks all!')
        'Name = "A"\\nDemonym = "Rus"'
        >>> _truncate_working_text("X = { a = {1} } trailing")
        'X = { a = {1} }'
        >>> _truncate_working_text("A = {1},\\nB = {2},\\nthanks")
        'A = {1},\\nB = {2}'
    """
    demonym = locate_field(text, "Demonym")
    if demonym is not None:
        line_end = text.find("\n", demonym.end)
        end = len(text) if line_end == -1 else line_end
        return text[:end].rstrip()

    start = text.find("{")
    if start == -1:
        return text.rstrip()

    depth = 0
    end = -1
    for position in range(start, len(text)):
        char = text[position]
        if char == "{":
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                end = position + 1
    if end == -1:
        end = text.rfind("}", start) + 1 or len(text)
    return text[:end].rstrip()


def _first_field(text: str, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = extract_field(text, key)
        if value:
            return value
    return ""


def _resolve_start_nations(text: str) -> list[str]:
    nations = extract_array(text, "CountriesCanForm")
    if nations:
        return nations
    nations = extract_array(text, "StartingNation")
    if nations:
        return nations
    single = extract_field(text, "StartingNation")
    return [single] if single else []


def _resolve_modifier(working: str, full_text: str, kind: TemplateKind) -> CustomModifier:
    modifier = extract_modifier_fields(working, kind)
    if kind == "formable" and not (modifier.name and modifier.description and modifier.icon):
        # Modifier tables may sit after the Demonym line, so scan the whole message
        modifier = merge_modifiers(modifier, scan_modifier_blocks(full_text))
    return modifier


def _missing_expected(data: TemplateData) -> list[str]:
    return [name for name in EXPECTED_FIELDS if not getattr(data, name).strip()]


def _has_content(data: TemplateData) -> bool:
    return any(getattr(data, f.name) for f in fields(data) if f.name not in _NON_CONTENT_FIELDS)


def _build_record(raw: str, kind: TemplateKind) -> tuple[TemplateData, MessageMetadata]:
    """Run every extractor and assemble the record."""
    normalized = normalize_quotes(raw)
    working = _truncate_working_text(normalized)

    metadata = extract_metadata(working)
    attributes = extract_custom_attributes(working)

    demonym_match = locate_field(working, "Demonym")
    demonym = demonym_match.value if demonym_match else ""

    scalars = {
        attribute: attributes.get(attribute) or _first_field(working, keys)
        for attribute, keys in SCALAR_FALLBACK_KEYS.items()
    }

    button = extract_object(working, "FormableButton")
    alert = extract_object(working, "CustomAlert")
    modifier = _resolve_modifier(working, normalized, kind)

    form_type: FormType = "releasable" if RELEASABLE_MARKER in normalized.lower() else "regular"

    # Drop repeated mentions of the same contributor, keeping first-seen order
    unique_ids = list(dict.fromkeys(metadata.mention_ids))

    data = TemplateData(
        name=_first_field(working, NAME_KEYS[kind]),
        start_nation=", ".join(_resolve_start_nations(working)),
        required_countries=", ".join(extract_array(working, "RequiredCountries")),
        required_tiles=", ".join(extract_array(working, "RequiredTiles")),
        continent=AUTO_CONTINENT,
        stability_gain=scalars["stability_gain"],
        pp_gain=scalars["pp_gain"],
        required_stability=scalars["required_stability"],
        demonym=demonym,
        decision_name=(button.name or "") if button else "",
        decision_description=(button.description or "") if button else "",
        alert_title=(alert.title or "") if alert else "",
        alert_description=(alert.description or "") if alert else "",
        alert_button=(alert.button or "") if alert else "",
        suggested_by=suggested_by_from_ids(unique_ids),
        form_type=form_type,
        **{f"{kind}_modifier": modifier.name},
        **{f"{kind}_modifier_description": modifier.description},
        **{f"{kind}_modifier_icon": modifier.icon},
    )
    return data, metadata


def parse_message(
    text: str,
    kind: TemplateKind = "formable",
    *,
    logger: logging.Logger | None = None,
) -> ParseResult:
    """Parse a formable or mission message into a normalized record.

    Never raises: formatting problems and extractor bugs both come back as a
    ParseFailure whose ``kind`` tells them apart.

    Args:
        text: Message exactly as pasted by the user.
        kind: ``"formable"`` or ``"mission"``; selects the name key order and
            which modifier fields are read.
        logger: Logger to use instead of the module logger.

    Returns:
        ParseSuccess carrying the record, metadata and soft-validation
        warnings, or ParseFailure with kind ``empty_input``, ``no_fields``
        or ``parser_error``.

    Examples:
        >>> result = parse_message('FormableName = "Rome"\\nRequiredCountries = {"Italy"}')
        >>> result.success, result.data.name, result.data.required_countries
        (True, 'Rome', 'Italy')
        >>> parse_message("   ").kind
        'empty_input'
    """
    log = logger or logging.getLogger("formable_wiki.parse")

    if not text or not text.strip():
        log.info("Rejected empty message")
        return ParseFailure(raw_content=text, error=EMPTY_INPUT_MESSAGE, kind="empty_input")

    try:
        data, metadata = _build_record(text, kind)
    except Exception as e:
        log.error(f"Parser error while reading {kind} message: {e}", exc_info=True)
        return ParseFailure(raw_content=text, error=f"Unexpected parser error: {e}", kind="parser_error")

    if not _has_content(data):
        log.warning(f"No template fields found in {kind} message")
        return ParseFailure(raw_content=text, error=NO_FIELDS_MESSAGE, kind="no_fields")

    missing = _missing_expected(data)
    warnings: tuple[str, ...] = ()
    if missing:
        warning = f"Missing or empty expected fields: {', '.join(missing)}"
        log.warning(warning)
        warnings = (warning,)

    log.debug(f"Parsed {kind} '{data.name}' ({data.form_type})")
    return ParseSuccess(raw_content=text, data=data, metadata=metadata, warnings=warnings)
