"""In-memory template store.

Keeps parsed (and edited) templates between tool calls, keyed by an
auto-incrementing id, with a flag recording whether a template has already
been added to the wiki.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from formable_wiki.parsers.types import (
    AUTO_CONTINENT,
    TemplateData,
    TemplateKind,
    contributor_ids,
    suggested_by_from_ids,
)


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class NewTemplate(BaseModel):
    """A template about to be stored."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str
    type: Literal["formable", "mission"]
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
    suggested_by: list[str] = Field(default_factory=list)
    form_type: Literal["regular", "releasable"] = "regular"
    formable_modifier_icon: str = ""
    formable_modifier: str = ""
    formable_modifier_description: str = ""
    mission_modifier_icon: str = ""
    mission_modifier: str = ""
    mission_modifier_description: str = ""
    source_message: str = ""
    generated_code: str = ""
    created_at: str = Field(default_factory=_utc_now)

    @classmethod
    def from_record(
        cls,
        record: TemplateData,
        kind: TemplateKind,
        *,
        source_message: str = "",
        generated_code: str = "",
    ) -> NewTemplate:
        """Build a row from a parsed record."""
        values = record.to_dict()
        values["suggested_by"] = contributor_ids(record.suggested_by)
        return cls(type=kind, source_message=source_message, generated_code=generated_code, **values)

    def to_record(self) -> TemplateData:
        """Convert the row back into a record for rendering."""
        values = self.model_dump(exclude={"type", "source_message", "generated_code", "created_at", "id", "wikified"})
        values["suggested_by"] = suggested_by_from_ids(values["suggested_by"])
        return TemplateData(**values)


class StoredTemplate(NewTemplate):
    """A stored template."""

    id: int
    wikified: bool = False


# Fields that update() may not change
_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class TemplateStore:
    """In-memory create/read/update/delete/search over templates.

    Args:
        logger: Logger to use instead of the module logger.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._templates: dict[int, StoredTemplate] = {}
        self._next_id = 1
        self._logger = logger or logging.getLogger("formable_wiki.db")

    def __len__(self) -> int:
        return len(self._templates)

    def create(self, new: NewTemplate) -> StoredTemplate:
        stored = StoredTemplate(id=self._next_id, **new.model_dump())
        self._templates[stored.id] = stored
        self._next_id += 1
        self._logger.debug(f"Stored template {stored.id}: {stored.name!r} ({stored.type})")
        return stored

    def get(self, template_id: int) -> StoredTemplate | None:
        return self._templates.get(template_id)

    def list(self) -> list[StoredTemplate]:
        return list(self._templates.values())

    def list_by_type(self, kind: TemplateKind) -> list[StoredTemplate]:
        return [template for template in self._templates.values() if template.type == kind]

    def update(self, template_id: int, **changes: Any) -> StoredTemplate | None:
        """Apply field changes and return the updated row.

        Returns:
            The updated template, or None when ``template_id`` is unknown.

        Raises:
            ValueError: If ``changes`` touches ``id`` or ``created_at``.
            pydantic.ValidationError: If a change fails validation.
        """
        existing = self._templates.get(template_id)
        if existing is None:
            return None
        blocked = _IMMUTABLE_FIELDS.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot update {', '.join(sorted(blocked))}")

        updated = StoredTemplate.model_validate({**existing.model_dump(), **changes})
        self._templates[template_id] = updated
        return updated

    def delete(self, template_id: int) -> bool:
        removed = self._templates.pop(template_id, None) is not None
        if removed:
            self._logger.debug(f"Deleted template {template_id}")
        return removed

    def search(self, query: str) -> list[StoredTemplate]:
        """Case-insensitive substring match on name or start nation."""
        needle = query.lower()
        return [
            template
            for template in self._templates.values()
            if needle in template.name.lower() or needle in template.start_nation.lower()
        ]

    def set_wikified(self, template_id: int, wikified: bool = True) -> StoredTemplate | None:
        return self.update(template_id, wikified=wikified)
