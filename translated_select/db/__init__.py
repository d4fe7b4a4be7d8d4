"""translated_select DB — Storage collaborator and session helpers."""

from translated_select.db.base import ReferenceStore  # noqa: F401

__all__ = ["ReferenceStore"]
