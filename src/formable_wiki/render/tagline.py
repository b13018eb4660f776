"""Tagline generation.

The tagline is the one-sentence summary that opens a wiki page. Its wording
is drawn at random from interchangeable phrase pools, so two renders of the
same record may read differently while keeping the same structure. Pass a
seeded ``random.Random`` for reproducible output.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Final

from formable_wiki.parsers.types import TemplateData, TemplateKind
from formable_wiki.render.markup import CONTINENT_PLACEHOLDER, city_text, flag, prose_flags, split_list

DEFAULT_NAME: Final[str] = "Unnamed Template"

# Module-level random source used when no rng is injected
_RANDOM: Final[random.Random] = random.Random()

# Formables with more start nations than this are described as "for many nations"
MANY_NATIONS_THRESHOLD: Final[int] = 3

# =============================================================================
# PHRASE POOLS
# =============================================================================

LOCATION_PHRASES: Final[tuple[str, ...]] = (
    "primarily located in",
    "situated mainly in",
    "predominantly found in",
    "largely concentrated in",
    "mainly situated within",
    "principally based in",
    "mostly located within",
    "chiefly situated in",
    "primarily based in",
    "mainly found in",
)

REQUIREMENT_PHRASES: Final[tuple[str, ...]] = (
    "requires conquering",
    "requires taking",
    "requires controlling",
    "necessitates the conquest of",
    "demands the acquisition of",
    "calls for the control of",
    "requires the annexation of",
    "demands securing",
    "requires seizing",
    "necessitates taking",
)

CONNECTION_PHRASES: Final[tuple[str, ...]] = (
    "along with",
    "as well as",
    "in addition to",
    "plus",
    "together with",
    "alongside",
    "and also",
    "including",
    "combined with",
    "accompanied by",
)

TILE_PHRASES: Final[tuple[str, ...]] = (
    "parts of",
    "portions of",
    "territories within",
    "regions of",
    "certain areas of",
    "select provinces of",
    "specific regions in",
    "designated areas in",
    "territorial sections of",
    "specific territories in",
)

MISSION_OPENING_PHRASES: Final[tuple[str, ...]] = (
    "tasks the nation with",
    "challenges the player with",
    "is completed by",
    "calls for",
    "centres on",
    "revolves around",
    "asks the player to focus on",
    "is achieved by",
    "sets the goal of",
    "is fulfilled by",
)

MISSION_ACTION_PHRASES: Final[tuple[str, ...]] = (
    "conquering",
    "taking control of",
    "securing",
    "annexing",
    "seizing",
    "capturing",
    "occupying",
    "taking over",
    "gaining control of",
    "claiming",
)

# (kind, form_type) -> (category page, link text)
CATEGORY_LINKS: Final[dict[tuple[str, str], tuple[str, str]]] = {
    ("formable", "regular"): ("Considered Formable", "formable"),
    ("formable", "releasable"): ("Considered Formables", "releasable formable"),
    ("mission", "regular"): ("Considered Mission", "mission"),
    ("mission", "releasable"): ("Considered Missions", "releasable mission"),
}


@dataclass(frozen=True)
class TileHint:
    """First tile-bearing country and how many of its tiles are required.

    Attributes:
        country: Country prefix of the first required tile.
        tile_count: Number of required tiles in that country.
    """

    country: str
    tile_count: int

    @property
    def city_text(self) -> str:
        return city_text(self.tile_count)


def _category_link(kind: TemplateKind, form_type: str) -> str:
    category, text = CATEGORY_LINKS[(kind, form_type)]
    return f"[[:Category:{category}|{text}]]"


def _formable_target(start_nations: list[str]) -> str:
    if len(start_nations) > MANY_NATIONS_THRESHOLD:
        return "for many nations"
    if not start_nations:
        return ""
    return "for " + ", ".join(flag(nation) for nation in start_nations)


def _tiles_clause(
    record: TemplateData,
    required: list[str],
    tile_hint: TileHint | None,
    rng: random.Random,
) -> str:
    """Describe tile countries that are not already required outright."""
    tile_countries = list(
        dict.fromkeys(
            country
            for country in (tile.split(".", 1)[0].strip() for tile in split_list(record.required_tiles))
            if country and country not in required
        )
    )
    if not tile_countries:
        return ""

    if len(tile_countries) == 1 and tile_hint is not None and tile_hint.country == tile_countries[0]:
        cities = tile_hint.city_text
    else:
        cities = "cities"

    tiles = f"{rng.choice(TILE_PHRASES)} {prose_flags(tile_countries)} (TBD {cities})"
    if not required:
        return tiles
    return f" {rng.choice(CONNECTION_PHRASES)} {tiles}"


def render_tagline(
    record: TemplateData,
    kind: TemplateKind,
    tile_hint: TileHint | None = None,
    continent_text: str = CONTINENT_PLACEHOLDER,
    *,
    rng: random.Random | None = None,
) -> str:
    """Compose the summary sentence for a record.

    Args:
        record: Parsed (and possibly edited) record.
        kind: ``"formable"`` or ``"mission"``.
        tile_hint: First tile-bearing country, used for the city/cities
            qualifier.
        continent_text: Continent template (``{{Europe}}``) or placeholder.
        rng: Random source; any object with a ``choice`` method. Defaults to
            a module-level ``random.Random``.

    Returns:
        One sentence of wiki markup.

    Examples:
        >>> record = TemplateData(name="Rus", start_nation="Russia", required_countries="Ukraine")
        >>> render_tagline(record, "formable", None, "{{Europe}}", rng=random.Random(1)).startswith(
        ...     "'''Rus''' is a [[:Category:Considered|considered]] [[:Category:Considered Formable|formable]]"
        ... )
        True
    """
    source = rng if rng is not None else _RANDOM
    name = record.name or DEFAULT_NAME
    required = split_list(record.required_countries)
    start_nations = split_list(record.start_nation)
    category = _category_link(kind, record.form_type)

    targets = prose_flags(required) + _tiles_clause(record, required, tile_hint, source)
    location = source.choice(LOCATION_PHRASES)
    opening = f"'''{name}''' is a [[:Category:Considered|considered]] {category}"

    if kind == "mission":
        for_text = f" for {flag(start_nations[0])}" if start_nations else ""
        opening_phrase = source.choice(MISSION_OPENING_PHRASES)
        action = source.choice(MISSION_ACTION_PHRASES)
        task = f" {opening_phrase} {action} {targets}, and" if targets else ""
        return f"{opening}{for_text}. This mission{task} is {location} {continent_text}."

    target = _formable_target(start_nations)
    for_text = f" {target}" if target else ""
    requirement = f" and {source.choice(REQUIREMENT_PHRASES)} {targets}" if targets else ""
    return f"{opening}{for_text}. It is {location} {continent_text}{requirement}."
