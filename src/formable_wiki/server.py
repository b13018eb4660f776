"""Formable Wiki MCP Server - exposes parsing, rendering and storage tools to AI assistants."""

from __future__ import annotations

import json
import logging
import random
from functools import lru_cache

from mcp.server.fastmcp import FastMCP

from formable_wiki.db.store import NewTemplate, StoredTemplate, TemplateStore
from formable_wiki.extraction import parse_message as parse_chat_message
from formable_wiki.lookup import ContinentLookup, ContributorLookup, ThumbnailLookup, describe_thumbnail
from formable_wiki.lookup.continent import static_continent
from formable_wiki.parsers.types import ParseFailure, TemplateData, TemplateKind, edit_record
from formable_wiki.render.tagline import render_tagline
from formable_wiki.render.template import (
    generate_document,
    group_tiles_by_country,
    resolve_continent_text,
    tile_hint,
)

logger = logging.getLogger("formable_wiki.server")

mcp: FastMCP = FastMCP("formable-wiki")

VALID_KINDS: frozenset[str] = frozenset({"formable", "mission"})


# =============================================================================
# SHARED STATE
# =============================================================================


@lru_cache(maxsize=1)
def get_store() -> TemplateStore:
    """Process-wide template store."""
    return TemplateStore()


@lru_cache(maxsize=1)
def get_continent_lookup() -> ContinentLookup:
    return ContinentLookup()


@lru_cache(maxsize=1)
def get_contributor_lookup() -> ContributorLookup:
    return ContributorLookup()


@lru_cache(maxsize=1)
def get_thumbnail_lookup() -> ThumbnailLookup:
    return ThumbnailLookup()


# =============================================================================
# HELPERS
# =============================================================================


def _check_kind(kind: str) -> TemplateKind:
    if kind not in VALID_KINDS:
        raise ValueError(f"kind must be 'formable' or 'mission', got '{kind}'")
    return kind  # type: ignore[return-value]


def _record_from_message(
    message: str,
    kind: TemplateKind,
    continent: str | None = None,
    form_type: str | None = None,
    overrides: dict[str, str] | None = None,
) -> TemplateData:
    """Parse a message and apply edits.

    Raises:
        ValueError: If the message cannot be parsed or an edit is invalid.
    """
    result = parse_chat_message(message, kind)
    if isinstance(result, ParseFailure):
        raise ValueError(f"{result.kind}: {result.error}")

    changes = dict(overrides or {})
    if continent:
        changes["continent"] = continent
    if form_type:
        changes["form_type"] = form_type
    return edit_record(result.data, changes)


def format_templates(templates: list[StoredTemplate]) -> str:
    """Format stored templates as a markdown list.

    Format:
        - **#{id} {name}** ({type}, {form_type}) start: {start_nation} [wikified]
    """
    if not templates:
        return "No templates found."

    lines: list[str] = []
    for template in templates:
        name = template.name or "Unnamed Template"
        line = f"- **#{template.id} {name}** ({template.type}, {template.form_type})"
        if template.start_nation:
            line += f" start: {template.start_nation}"
        if template.wikified:
            line += " [wikified]"
        lines.append(line)
    return "\n".join(lines)


# =============================================================================
# TOOLS
# =============================================================================


@mcp.tool()
async def parse_message(message: str, kind: str = "formable") -> str:
    """Parse a formable or mission chat message into structured fields.

    Args:
        message: The message exactly as posted
        kind: "formable" or "mission"

    Returns:
        JSON object with success, rawContent, extractedData, metadata and
        warnings, or success=false with error and errorKind.
    """
    result = parse_chat_message(message, _check_kind(kind))
    return json.dumps(result.to_dict(), ensure_ascii=False)


@mcp.tool()
async def generate_template(
    message: str,
    kind: str = "formable",
    continent: str | None = None,
    form_type: str | None = None,
    overrides: dict[str, str] | None = None,
    resolve_contributors: bool = False,
    offline: bool = False,
) -> str:
    """Render the full wiki page for a message.

    Args:
        message: The message exactly as posted
        kind: "formable" or "mission"
        continent: Explicit continent (default: detect from required countries)
        form_type: "regular" or "releasable" (default: detected)
        overrides: Record fields to replace, e.g. {"population": "1.2M"}
        resolve_contributors: Replace contributor ids with Discord display names
        offline: Use only the built-in continent table and skip name lookups

    Returns:
        Wiki markup for the page.

    Raises:
        ValueError: If the message cannot be parsed or an override is invalid.
    """
    template_kind = _check_kind(kind)
    record = _record_from_message(message, template_kind, continent, form_type, overrides)
    resolver = None
    if resolve_contributors and not offline:
        resolver = get_contributor_lookup().display_name
    return generate_document(
        record,
        template_kind,
        continent_lookup=static_continent if offline else get_continent_lookup(),
        contributor_resolver=resolver,
    ).markup


@mcp.tool()
async def generate_tagline(
    message: str,
    kind: str = "formable",
    continent: str | None = None,
    seed: int | None = None,
    offline: bool = False,
) -> str:
    """Render only the one-sentence tagline for a message.

    Args:
        message: The message exactly as posted
        kind: "formable" or "mission"
        continent: Explicit continent (default: detect from required countries)
        seed: Seed for reproducible phrasing
        offline: Use only the built-in continent table

    Returns:
        The tagline sentence.
    """
    template_kind = _check_kind(kind)
    record = _record_from_message(message, template_kind, continent)
    continent_text = resolve_continent_text(record, static_continent if offline else get_continent_lookup())
    hint = tile_hint(group_tiles_by_country(record.required_tiles))
    rng = random.Random(seed) if seed is not None else None
    return render_tagline(record, template_kind, hint, continent_text, rng=rng)


@mcp.tool()
async def save_template(
    message: str,
    kind: str = "formable",
    continent: str | None = None,
    offline: bool = False,
) -> str:
    """Parse a message, render it and keep it in the template store.

    Args:
        message: The message exactly as posted
        kind: "formable" or "mission"
        continent: Explicit continent (default: detect from required countries)
        offline: Use only the built-in continent table

    Returns:
        Confirmation with the new template id.
    """
    template_kind = _check_kind(kind)
    record = _record_from_message(message, template_kind, continent)
    continent_lookup = static_continent if offline else get_continent_lookup()
    markup = generate_document(record, template_kind, continent_lookup=continent_lookup).markup
    store = get_store()
    stored = store.create(
        NewTemplate.from_record(record, template_kind, source_message=message, generated_code=markup)
    )
    logger.info(f"Saved template {stored.id} ({stored.type}), {len(store)} stored")
    return f"Saved template #{stored.id}: {stored.name or 'Unnamed Template'}"


@mcp.tool()
async def render_saved_template(template_id: int, offline: bool = False) -> str:
    """Render the wiki page for a stored template from its stored fields.

    Args:
        template_id: Template id
        offline: Use only the built-in continent table
    """
    stored = get_store().get(template_id)
    if stored is None:
        return f"Template #{template_id} not found."
    return generate_document(
        stored.to_record(),
        stored.type,
        continent_lookup=static_continent if offline else get_continent_lookup(),
    ).markup


@mcp.tool()
async def list_templates(kind: str | None = None) -> str:
    """List stored templates, optionally only one kind.

    Args:
        kind: "formable" or "mission" (default: all)
    """
    store = get_store()
    templates = store.list() if kind is None else store.list_by_type(_check_kind(kind))
    return format_templates(templates)


@mcp.tool()
async def search_templates(query: str) -> str:
    """Search stored templates by name or start nation (case-insensitive).

    Args:
        query: Text to look for
    """
    return format_templates(get_store().search(query))


@mcp.tool()
async def set_wikified(template_id: int, wikified: bool = True) -> str:
    """Mark a stored template as added to (or removed from) the wiki.

    Args:
        template_id: Template id
        wikified: New flag value
    """
    updated = get_store().set_wikified(template_id, wikified)
    if updated is None:
        return f"Template #{template_id} not found."
    state = "wikified" if updated.wikified else "not wikified"
    return f"Template #{template_id} marked {state}."


@mcp.tool()
async def delete_template(template_id: int) -> str:
    """Delete a stored template.

    Args:
        template_id: Template id
    """
    if get_store().delete(template_id):
        return f"Deleted template #{template_id}."
    return f"Template #{template_id} not found."


@mcp.tool()
async def lookup_contributor(contributor_id: str) -> str:
    """Resolve a Discord user id to a display name.

    Args:
        contributor_id: 17 to 20 digit Discord user id

    Returns:
        The display name, or the id with the reason it could not be resolved.
    """
    info = get_contributor_lookup().lookup(contributor_id)
    if info.ok:
        return info.label
    return f"{info.contributor_id} (unresolved: {info.error})"


@mcp.tool()
async def lookup_modifier_icon(asset_id: str) -> str:
    """Look up the thumbnail for a custom modifier icon.

    Args:
        asset_id: Numeric asset id from the modifier's Icon field
    """
    return describe_thumbnail(get_thumbnail_lookup().lookup(asset_id))


def main() -> None:
    """Run the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
