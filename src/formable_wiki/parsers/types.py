"""Shared type definitions for parser modules.

This module contains the dataclasses, tagged variants and type aliases used
across the field, array, nested-object and metadata extractors, the parse
orchestrator and the renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal, get_args

# Type aliases for literal string types
TemplateKind = Literal["formable", "mission"]
"""Kind of wiki document being produced."""

FormType = Literal["regular", "releasable"]
"""Whether a formable/mission is a regular one or a releasable nation."""

ParseErrorKind = Literal["empty_input", "no_fields", "parser_error"]
"""Failure classes surfaced to the user after a parse attempt."""

AUTO_CONTINENT: str = "auto"
"""Sentinel continent value meaning "detect from requiredCountries"."""


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ParserError(Exception):
    """Base class for errors raised inside an extractor."""

    pass


class UnbalancedBraceError(ParserError):
    """Raised when a brace-delimited block never returns to depth zero."""

    def __init__(self, start: int) -> None:
        self.start = start
        super().__init__(f"Unbalanced braces in block starting at offset {start}")


# =============================================================================
# CONTRIBUTORS (tagged variant)
# =============================================================================


@dataclass(frozen=True)
class SingleContributor:
    """Exactly one contributor was credited."""

    contributor_id: str


@dataclass(frozen=True)
class MultipleContributors:
    """Two or more contributors were credited, in encounter order."""

    contributor_ids: tuple[str, ...]


SuggestedBy = SingleContributor | MultipleContributors
"""Who suggested a formable/mission."""


def suggested_by_from_ids(ids: list[str] | tuple[str, ...]) -> SuggestedBy | None:
    """Build the contributor variant for a list of ids.

    Examples:
        >>> suggested_by_from_ids([])
        >>> suggested_by_from_ids(["1"])
        SingleContributor(contributor_id='1')
        >>> suggested_by_from_ids(["1", "2"])
        MultipleContributors(contributor_ids=('1', '2'))
    """
    if not ids:
        return None
    if len(ids) == 1:
        return SingleContributor(ids[0])
    return MultipleContributors(tuple(ids))


def contributor_ids(suggested_by: SuggestedBy | None) -> list[str]:
    """Flatten either contributor variant into an ordered id list."""
    if suggested_by is None:
        return []
    if isinstance(suggested_by, SingleContributor):
        return [suggested_by.contributor_id]
    if isinstance(suggested_by, MultipleContributors):
        return list(suggested_by.contributor_ids)
    raise TypeError(f"Unknown contributor variant: {type(suggested_by).__name__}")


def suggested_by_to_json(suggested_by: SuggestedBy | None) -> str | list[str]:
    """Wire shape used by JSON output: a string for one id, a list for several."""
    if suggested_by is None:
        return ""
    if isinstance(suggested_by, SingleContributor):
        return suggested_by.contributor_id
    return list(suggested_by.contributor_ids)


# =============================================================================
# EXTRACTOR OUTPUTS
# =============================================================================


@dataclass(frozen=True)
class NestedObject:
    """Sub-fields recovered from a ``Key = { ... }`` block.

    Every attribute is independent and optional; a partial object is valid.

    Attributes:
        name: ``ButtonName`` / ``Name`` value.
        description: ``ButtonDescription`` / ``Description`` / ``Desc`` value.
        title: ``Title`` value.
        button: ``Button`` value.
    """

    name: str | None = None
    description: str | None = None
    title: str | None = None
    button: str | None = None


@dataclass(frozen=True)
class MessageMetadata:
    """Attribution data found near the top of a message.

    Attributes:
        suggested_by: Contributor variant, or None when no mention was found.
        primary_contributor_id: First contributor id encountered.
        timestamp: First ``DD/MM/YYYY`` token in the message.
        mention_ids: Every mention id collected, duplicates included.
    """

    suggested_by: SuggestedBy | None = None
    primary_contributor_id: str | None = None
    timestamp: str | None = None
    mention_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class CustomModifier:
    """Name/description/icon triple for a custom modifier."""

    name: str = ""
    description: str = ""
    icon: str = ""

    def is_empty(self) -> bool:
        return not (self.name or self.description or self.icon)


# =============================================================================
# NORMALIZED RECORD
# =============================================================================


@dataclass(frozen=True)
class TemplateData:
    """Normalized record produced by parsing one message.

    All scalar fields default to the empty string so the renderer can test
    truthiness uniformly. List-valued fields are stored comma-joined
    (``"Russia, Ukraine"``) and never contain duplicate or empty tokens.

    Attributes:
        name: Display name of the formable/mission.
        start_nation: Comma-joined nations eligible to trigger the item.
        required_countries: Comma-joined countries that must be controlled.
        required_tiles: Comma-joined ``<country>.<tileId>`` tokens.
        continent: ``"auto"`` or an explicit continent name.
        suggested_by: Contributor variant, or None when nobody was credited.
        form_type: ``"regular"`` or ``"releasable"``.
    """

    name: str = ""
    start_nation: str = ""
    required_countries: str = ""
    required_tiles: str = ""
    continent: str = AUTO_CONTINENT
    stability_gain: str = ""
    pp_gain: str = ""
    required_stability: str = ""
    city_count: str = ""
    square_count: str = ""
    population: str = ""
    manpower: str = ""
    demonym: str = ""
    decision_name: str = ""
    decision_description: str = ""
    alert_title: str = ""
    alert_description: str = ""
    alert_button: str = ""
    suggested_by: SuggestedBy | None = None
    form_type: FormType = "regular"
    formable_modifier_icon: str = ""
    formable_modifier: str = ""
    formable_modifier_description: str = ""
    mission_modifier_icon: str = ""
    mission_modifier: str = ""
    mission_modifier_description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "suggested_by":
                value = suggested_by_to_json(value)
            result[f.name] = value
        return result


EDITABLE_SCALAR_FIELDS: frozenset[str] = frozenset(
    f.name for f in fields(TemplateData) if f.name not in ("suggested_by", "form_type")
)
"""Record fields that may be overridden with a plain string."""


# =============================================================================
# PARSE RESULT (tagged outcome)
# =============================================================================


@dataclass(frozen=True)
class ParseSuccess:
    """Successful parse.

    Attributes:
        raw_content: The message exactly as submitted.
        data: The normalized record.
        metadata: Attribution metadata.
        warnings: Soft-validation messages (missing expected fields).
    """

    raw_content: str
    data: TemplateData
    metadata: MessageMetadata
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def success(self) -> Literal[True]:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "rawContent": self.raw_content,
            "extractedData": self.data.to_dict(),
            "metadata": {
                "suggestedBy": suggested_by_to_json(self.metadata.suggested_by) or None,
                "primaryContributorId": self.metadata.primary_contributor_id,
                "timestamp": self.metadata.timestamp,
            },
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ParseFailure:
    """Failed parse.

    Attributes:
        raw_content: The message exactly as submitted.
        error: Human-readable message.
        kind: Failure class, lets the caller tell formatting problems from bugs.
    """

    raw_content: str
    error: str
    kind: ParseErrorKind = "parser_error"

    @property
    def success(self) -> Literal[False]:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "rawContent": self.raw_content,
            "error": self.error,
            "errorKind": self.kind,
        }


ParseResult = ParseSuccess | ParseFailure
"""Outcome of :func:`formable_wiki.extraction.parse_message`."""


def edit_record(record: TemplateData, changes: dict[str, str]) -> TemplateData:
    """Return a copy of ``record`` with user edits applied.

    Args:
        record: Record to copy.
        changes: Field name to new value. Scalar fields (including
            ``continent``) take any string; ``form_type`` must be
            ``regular`` or ``releasable``.

    Raises:
        ValueError: If a field is unknown or ``form_type`` is invalid.

    Examples:
        >>> edit_record(TemplateData(name="A"), {"demonym": "Rus"}).demonym
        'Rus'
    """
    unknown = set(changes) - EDITABLE_SCALAR_FIELDS - {"form_type"}
    if unknown:
        raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    if changes.get("form_type", "regular") not in get_args(FormType):
        raise ValueError(f"form_type must be 'regular' or 'releasable', got {changes['form_type']!r}")
    return replace(record, **changes)
