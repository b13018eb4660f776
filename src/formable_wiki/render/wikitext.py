"""Read a rendered (or already wikified) page back into fields.

Uses mwparserfromhell so hand-edited pages with reordered or extra
parameters still read correctly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

import mwparserfromhell

from formable_wiki.parsers.types import (
    AUTO_CONTINENT,
    FormType,
    TemplateData,
    TemplateKind,
    suggested_by_from_ids,
)
from formable_wiki.render.markup import CONTINENT_PLACEHOLDER

if TYPE_CHECKING:
    from mwparserfromhell.nodes import Template
    from mwparserfromhell.wikicode import Wikicode

# Template name -> document kind
DOCUMENT_TEMPLATES: Final[dict[str, TemplateKind]] = {
    "consideredformable": "formable",
    "consideredmission": "mission",
}

# Frame templates that are not part of the tagline
FRAME_TEMPLATES: Final[frozenset[str]] = frozenset(
    {"stub", "considered", "description", "navbox formables", "navbox missions"}
)

DESCRIPTION_PARAM: Final[str] = "Country forming description"

FLAG_PATTERN: Final[re.Pattern[str]] = re.compile(r"\{\{\s*Flag\s*\|\s*Name\s*=\s*([^}|]+?)\s*\}\}", re.IGNORECASE)
BR_TAG_PATTERN: Final[re.Pattern[str]] = re.compile(r"<br\s*/?\s*>", re.IGNORECASE)
CONTINENT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\{\{\s*([^{}|]+?)\s*\}\}$")
NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"'''(.+?)'''")
RELEASABLE_CATEGORY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\[\[:Category:Considered (?:Formables|Missions)\|",
    re.IGNORECASE,
)

# Infobox parameter -> record field, where the names differ
PARAM_FIELDS: Final[dict[str, str]] = {
    "stab_gain": "stability_gain",
}

# Plain scalar parameters copied as-is
SCALAR_PARAMS: Final[tuple[str, ...]] = (
    "demonym",
    "stab_gain",
    "city_count",
    "square_count",
    "population",
    "manpower",
    "decision_name",
    "decision_description",
    "alert_title",
    "alert_description",
    "alert_button",
    "pp_gain",
    "required_stability",
    "formable_modifier_icon",
    "formable_modifier",
    "formable_modifier_description",
    "mission_modifier_icon",
    "mission_modifier",
    "mission_modifier_description",
)


@dataclass(frozen=True)
class WikiDocument:
    """Structure of a rendered page.

    Attributes:
        kind: Document kind derived from the infobox template name.
        template_name: Infobox template name as written.
        params: Infobox parameters in page order.
        description: Value of the Description template, if any.
        tagline: Free text left after removing the frame templates.
    """

    kind: TemplateKind
    template_name: str
    params: dict[str, str] = field(default_factory=dict)
    description: str = ""
    tagline: str = ""


def _template_key(template: Template) -> str:
    return str(template.name).strip().lower()


def _find_document_template(wikicode: Wikicode) -> Template | None:
    for template in wikicode.filter_templates(recursive=False):
        if _template_key(template) in DOCUMENT_TEMPLATES:
            return template
    return None


def _description(wikicode: Wikicode) -> str:
    for template in wikicode.filter_templates(recursive=False):
        if _template_key(template) == "description" and template.has(DESCRIPTION_PARAM):
            return str(template.get(DESCRIPTION_PARAM).value).strip()
    return ""


def read_document(markup: str) -> WikiDocument | None:
    """Parse a ConsideredFormable/ConsideredMission page.

    Args:
        markup: Page wikitext.

    Returns:
        WikiDocument, or None when the page has no such infobox.

    Examples:
        >>> doc = read_document("{{ConsideredMission\\n| pp_gain = 50\\n}}")
        >>> doc.kind, doc.params
        ('mission', {'pp_gain': '50'})
    """
    wikicode: Wikicode = mwparserfromhell.parse(markup)
    template = _find_document_template(wikicode)
    if template is None:
        return None

    params = {str(param.name).strip(): str(param.value).strip() for param in template.params}
    description = _description(wikicode)

    for node in wikicode.filter_templates(recursive=False):
        if node is template or _template_key(node) in FRAME_TEMPLATES:
            wikicode.remove(node)

    return WikiDocument(
        kind=DOCUMENT_TEMPLATES[_template_key(template)],
        template_name=str(template.name).strip(),
        params=params,
        description=description,
        tagline=str(wikicode).strip(),
    )


def unwrap_flags(value: str) -> list[str]:
    """Country names from flag macros.

    Examples:
        >>> unwrap_flags("{{Flag|Name=Russia}}<br>\\n{{Flag|Name=Ukraine}}<br><small>(TBD city required)</small>")
        ['Russia', 'Ukraine']
    """
    return FLAG_PATTERN.findall(value)


def _continent(value: str) -> str:
    if not value or value == CONTINENT_PLACEHOLDER:
        return AUTO_CONTINENT
    match = CONTINENT_PATTERN.match(value.strip())
    return match.group(1) if match else value.strip()


def record_from_document(markup: str) -> TemplateData | None:
    """Rebuild a TemplateData from a rendered page.

    Flag macros are unwrapped into country names. Tile ids are not written
    to the page, so ``required_tiles`` stays empty; countries that carried
    tiles come back as plain required countries.

    Returns:
        The record, or None when the page has no ConsideredFormable or
        ConsideredMission infobox.
    """
    document = read_document(markup)
    if document is None:
        return None

    params = document.params
    scalars = {PARAM_FIELDS.get(name, name): params.get(name, "") for name in SCALAR_PARAMS}
    if not scalars["alert_description"]:
        scalars["alert_description"] = document.description

    contributors = [part.strip() for part in BR_TAG_PATTERN.split(params.get("suggested_by", "")) if part.strip()]
    name_match = NAME_PATTERN.search(document.tagline)
    form_type: FormType = "releasable" if RELEASABLE_CATEGORY_PATTERN.search(document.tagline) else "regular"

    return TemplateData(
        name=name_match.group(1).strip() if name_match else "",
        start_nation=", ".join(unwrap_flags(params.get("start_nation", ""))),
        required_countries=", ".join(dict.fromkeys(unwrap_flags(params.get("required", "")))),
        continent=_continent(params.get("continent", "")),
        suggested_by=suggested_by_from_ids(contributors),
        form_type=form_type,
        **scalars,
    )
