"""Wiki document rendering.

Turns a TemplateData record into a ``{{ConsideredFormable}}`` or
``{{ConsideredMission}}`` page: infobox parameters in a fixed order (so wiki
diffs stay stable), a description line, the tagline and the navbox.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from formable_wiki.lookup.continent import CONTINENTS, static_continent
from formable_wiki.parsers.types import AUTO_CONTINENT, TemplateData, TemplateKind, contributor_ids
from formable_wiki.render.markup import (
    CONTINENT_PLACEHOLDER,
    LINE_BREAK,
    city_text,
    continent_template,
    flag,
    split_list,
)
from formable_wiki.render.tagline import TileHint, render_tagline

ContinentResolver = Callable[[str], str | None]
ContributorResolver = Callable[[str], str]

TEMPLATE_NAMES: Final[dict[str, str]] = {
    "formable": "ConsideredFormable",
    "mission": "ConsideredMission",
}

NAVBOXES: Final[dict[str, str]] = {
    "formable": "{{Navbox Formables}}",
    "mission": "{{Navbox Missions}}",
}

# Infobox parameter order; pp_gain and required_stability are mission-only
FIELD_ORDER: Final[tuple[str, ...]] = (
    "image1",
    "image2",
    "start_nation",
    "required",
    "continent",
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
    "suggested_by",
    "pp_gain",
    "required_stability",
)

MISSION_ONLY_FIELDS: Final[frozenset[str]] = frozenset({"pp_gain", "required_stability"})

# Modifier suffixes in output order
MODIFIER_SUFFIXES: Final[tuple[str, ...]] = ("modifier_icon", "modifier", "modifier_description")


@dataclass(frozen=True)
class GeneratedDocument:
    """Rendered page plus its tagline.

    Attributes:
        markup: Full wiki markup, tagline included.
        tagline: The summary sentence on its own.
    """

    markup: str
    tagline: str


# =============================================================================
# TILES AND CONTINENT
# =============================================================================


def group_tiles_by_country(required_tiles: str) -> dict[str, list[str]]:
    """Group ``<country>.<tileId>`` tokens by country, keeping first-seen order.

    Examples:
        >>> group_tiles_by_country("Russia.1, Russia.2, Poland.7")
        {'Russia': ['Russia.1', 'Russia.2'], 'Poland': ['Poland.7']}
    """
    groups: dict[str, list[str]] = {}
    for tile in split_list(required_tiles):
        country = tile.split(".", 1)[0].strip()
        if country:
            groups.setdefault(country, []).append(tile)
    return groups


def tile_hint(groups: dict[str, list[str]]) -> TileHint | None:
    """Tagline hint for the first tile-bearing country."""
    for country, tiles in groups.items():
        return TileHint(country=country, tile_count=len(tiles))
    return None


def detect_continent(countries: str, lookup: ContinentResolver | None = None) -> str | None:
    """Majority vote of the continents of a comma-joined country list.

    Ties go to the continent listed first in ``CONTINENTS``.

    Args:
        countries: Comma-joined country names.
        lookup: Single-country resolver; defaults to the built-in table.

    Returns:
        The winning continent, or None when no country resolved.

    Examples:
        >>> detect_continent("Russia, Ukraine, Kazakhstan")
        'Europe'
        >>> detect_continent("Atlantis")
    """
    resolve = lookup or static_continent
    counts: Counter[str] = Counter()
    for country in split_list(countries):
        continent = resolve(country)
        if continent:
            counts[continent] += 1
    if not counts:
        return None

    def rank(continent: str) -> tuple[int, int]:
        order = CONTINENTS.index(continent) if continent in CONTINENTS else len(CONTINENTS)
        return (-counts[continent], order)

    return min(counts, key=rank)


def resolve_continent_text(
    record: TemplateData,
    lookup: ContinentResolver | None = None,
    logger: logging.Logger | None = None,
) -> str:
    """Continent template for the record, or the placeholder."""
    log = logger or logging.getLogger("formable_wiki.render")
    if record.continent and record.continent != AUTO_CONTINENT:
        return continent_template(record.continent)
    if not record.required_countries:
        return CONTINENT_PLACEHOLDER

    try:
        continent = detect_continent(record.required_countries, lookup)
    except LookupError as e:
        log.warning(f"Continent detection failed: {e}")
        continent = None
    if continent is None:
        log.info(f"No continent detected for {record.required_countries!r}")
        return CONTINENT_PLACEHOLDER
    return continent_template(continent)


# =============================================================================
# FIELD FORMATTING
# =============================================================================


def format_country_list(countries: str) -> str:
    """Flag macros joined by line breaks, none after the last.

    Examples:
        >>> print(format_country_list("Russia, Ukraine"))
        {{Flag|Name=Russia}}<br>
        {{Flag|Name=Ukraine}}
    """
    items = split_list(countries)
    return "\n".join(
        flag(country) + (LINE_BREAK if index < len(items) - 1 else "") for index, country in enumerate(items)
    )


def format_required(record: TemplateData) -> str:
    """The ``required`` parameter: plain countries first, then tile countries.

    Every country with tiles gets a "(TBD city/cities required)" qualifier;
    missions and formables use the same wording.
    """
    groups = group_tiles_by_country(record.required_tiles)
    plain = [country for country in split_list(record.required_countries) if country not in groups]

    entries = [flag(country) for country in plain]
    entries.extend(
        f"{flag(country)}{LINE_BREAK}<small>(TBD {city_text(len(tiles), required=True)})</small>"
        for country, tiles in groups.items()
    )
    return f"{LINE_BREAK}\n".join(entries)


def format_suggested_by(record: TemplateData, resolver: ContributorResolver | None = None) -> str:
    """Contributors joined by line breaks, names resolved when possible."""
    names = []
    for contributor_id in contributor_ids(record.suggested_by):
        names.append(resolver(contributor_id) if resolver else contributor_id)
    return LINE_BREAK.join(name for name in names if name)


def template_fields(
    record: TemplateData,
    kind: TemplateKind,
    continent_text: str,
    contributor_resolver: ContributorResolver | None = None,
) -> dict[str, str]:
    """Infobox parameters in output order; empty values are dropped."""
    values = {
        "image1": "",
        "image2": "",
        "start_nation": format_country_list(record.start_nation),
        "required": format_required(record),
        "continent": continent_text,
        "demonym": record.demonym.strip(),
        "stab_gain": record.stability_gain,
        "city_count": record.city_count,
        "square_count": record.square_count,
        "population": record.population,
        "manpower": record.manpower,
        "decision_name": record.decision_name,
        "decision_description": record.decision_description,
        "alert_title": record.alert_title,
        "alert_description": record.alert_description,
        "alert_button": record.alert_button,
        "suggested_by": format_suggested_by(record, contributor_resolver),
        "pp_gain": record.pp_gain,
        "required_stability": record.required_stability,
    }
    fields = {
        key: values[key]
        for key in FIELD_ORDER
        if values[key] and (kind == "mission" or key not in MISSION_ONLY_FIELDS)
    }
    for suffix in MODIFIER_SUFFIXES:
        key = f"{kind}_{suffix}"
        value = getattr(record, key)
        if value:
            fields[key] = value
    return fields


# =============================================================================
# DOCUMENT
# =============================================================================


def generate_document(
    record: TemplateData,
    kind: TemplateKind,
    *,
    continent_lookup: ContinentResolver | None = None,
    contributor_resolver: ContributorResolver | None = None,
    rng: random.Random | None = None,
    logger: logging.Logger | None = None,
) -> GeneratedDocument:
    """Render the full wiki page and its tagline.

    Args:
        record: Parsed (and possibly edited) record.
        kind: ``"formable"`` or ``"mission"``.
        continent_lookup: Single-country continent resolver used when the
            record's continent is ``"auto"``; defaults to the built-in table.
        contributor_resolver: Maps contributor ids to display names.
        rng: Random source for the tagline phrases.
        logger: Logger to use instead of the module logger.

    Returns:
        GeneratedDocument with the markup and the tagline.
    """
    log = logger or logging.getLogger("formable_wiki.render")
    continent_text = resolve_continent_text(record, continent_lookup, log)
    groups = group_tiles_by_country(record.required_tiles)
    tagline = render_tagline(record, kind, tile_hint(groups), continent_text, rng=rng)

    lines = [f"{{{{Stub}}}}{{{{Considered}}}}{{{{{TEMPLATE_NAMES[kind]}"]
    lines.extend(
        f"| {key} = {value}"
        for key, value in template_fields(record, kind, continent_text, contributor_resolver).items()
    )
    lines.append("}}")
    lines.append(f"{{{{Description|Country forming description={record.alert_description}}}}}")
    lines.append("")
    lines.append(tagline)
    lines.append("")
    lines.append(NAVBOXES[kind])

    log.debug(f"Rendered {kind} document for '{record.name}'")
    return GeneratedDocument(markup="\n".join(lines), tagline=tagline)


def render_document(
    record: TemplateData,
    kind: TemplateKind,
    *,
    continent_lookup: ContinentResolver | None = None,
    contributor_resolver: ContributorResolver | None = None,
    rng: random.Random | None = None,
    logger: logging.Logger | None = None,
) -> str:
    """Render the full wiki page markup; see :func:`generate_document`."""
    return generate_document(
        record,
        kind,
        continent_lookup=continent_lookup,
        contributor_resolver=contributor_resolver,
        rng=rng,
        logger=logger,
    ).markup
