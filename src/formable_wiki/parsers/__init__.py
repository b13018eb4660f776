"""Tolerant extractors for formable/mission chat messages.

Messages are Lua-table-like blocks posted by an upstream bot (and by hand),
in several slightly different dialects:

- **Fields**: ``Key = "value"``, ``Key = value``, ``["Key"] = value``, ``Key: [value]``
- **Arrays**: ``Key = {"a", "b"}``, with nested tables and missing commas
- **Nested objects**: ``FormableButton = { Name = "...", Description = "..." }``
- **Metadata**: contributor mentions and a ``DD/MM/YYYY`` date near the top

Example usage::

    from formable_wiki.parsers import extract_array, extract_field

    extract_field('FormableName = "Great Kievan Rus"', "FormableName")
    # 'Great Kievan Rus'
    extract_array('RequiredCountries = {"Russia", "Ukraine"}', "RequiredCountries")
    # ['Russia', 'Ukraine']

Public API:
    Types:
        - TemplateData: Normalized record for one message
        - SingleContributor / MultipleContributors: Contributor variant
        - MessageMetadata, NestedObject, CustomModifier
        - ParseSuccess / ParseFailure: Parse outcome
        - TemplateKind, FormType, ParseErrorKind: Literal types

    Functions:
        - extract_field / locate_field: Scalar fields
        - extract_array: Brace-delimited lists
        - extract_object: Name/Description/Title/Button blocks
        - extract_metadata: Contributors and date
        - extract_custom_attributes: CustomAttributes table
"""

from formable_wiki.parsers.array import extract_array
from formable_wiki.parsers.attributes import (
    extract_custom_attributes,
    extract_modifier_fields,
    merge_modifiers,
    scan_modifier_blocks,
)
from formable_wiki.parsers.field import FieldMatch, extract_field, locate_field
from formable_wiki.parsers.metadata import extract_metadata
from formable_wiki.parsers.nested import extract_object
from formable_wiki.parsers.types import (
    AUTO_CONTINENT,
    CustomModifier,
    FormType,
    MessageMetadata,
    MultipleContributors,
    NestedObject,
    ParseErrorKind,
    ParseFailure,
    ParserError,
    ParseResult,
    ParseSuccess,
    SingleContributor,
    SuggestedBy,
    TemplateData,
    TemplateKind,
    UnbalancedBraceError,
    contributor_ids,
    suggested_by_from_ids,
)

__all__ = [
    "AUTO_CONTINENT",
    "CustomModifier",
    "FieldMatch",
    "FormType",
    "MessageMetadata",
    "MultipleContributors",
    "NestedObject",
    "ParseErrorKind",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "ParserError",
    "SingleContributor",
    "SuggestedBy",
    "TemplateData",
    "TemplateKind",
    "UnbalancedBraceError",
    "contributor_ids",
    "extract_array",
    "extract_custom_attributes",
    "extract_field",
    "extract_metadata",
    "extract_modifier_fields",
    "extract_object",
    "locate_field",
    "merge_modifiers",
    "scan_modifier_blocks",
    "suggested_by_from_ids",
]
