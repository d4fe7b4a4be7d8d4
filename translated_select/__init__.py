"""
translated_select — Translated select attributes for MetaModels-style data models.

An attribute of this type stores a foreign key into a reference table that
holds one row per (logical value, language). The package resolves stored
keys to translated rows with fallback-language behavior, sorts items by
their value, builds filter options and searches values.

    from translated_select import TranslatedSelectAttribute, LanguageContext
"""

from translated_select.attribute import LanguageContext, MetaModel, TranslatedSelectAttribute  # noqa: F401
from translated_select.db import ReferenceStore  # noqa: F401
from translated_select.engine.config import AttributeConfig  # noqa: F401

__version__ = "1.0.0"
__all__ = [
    "AttributeConfig",
    "LanguageContext",
    "MetaModel",
    "ReferenceStore",
    "TranslatedSelectAttribute",
]
