"""In-memory storage for parsed templates."""

from formable_wiki.db.store import NewTemplate, StoredTemplate, TemplateStore

__all__ = [
    "NewTemplate",
    "StoredTemplate",
    "TemplateStore",
]
