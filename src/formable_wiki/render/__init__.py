"""Rendering of parsed records into wiki pages and taglines.

Public API:
    - render_document / generate_document: Full ConsideredFormable/Mission page
    - render_tagline: Randomized one-sentence summary
    - detect_continent: Majority-vote continent for a country list
    - group_tiles_by_country: Required tiles grouped by country prefix
    - read_document / record_from_document: Read a rendered page back
"""

from formable_wiki.render.tagline import TileHint, render_tagline
from formable_wiki.render.template import (
    GeneratedDocument,
    detect_continent,
    generate_document,
    group_tiles_by_country,
    render_document,
    tile_hint,
)
from formable_wiki.render.wikitext import WikiDocument, read_document, record_from_document

__all__ = [
    "GeneratedDocument",
    "TileHint",
    "WikiDocument",
    "detect_continent",
    "generate_document",
    "group_tiles_by_country",
    "read_document",
    "record_from_document",
    "render_document",
    "render_tagline",
    "tile_hint",
]
