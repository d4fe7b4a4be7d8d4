"""translated_select Attribute — Reference resolution, ordering, filter options and search."""

from translated_select.attribute.context import LanguageContext, MetaModel  # noqa: F401
from translated_select.attribute.options import FilterOption, OptionSetBuilder  # noqa: F401
from translated_select.attribute.ordering import OrderingEngine  # noqa: F401
from translated_select.attribute.resolver import ReferenceResolver  # noqa: F401
from translated_select.attribute.search import SearchIndexer  # noqa: F401
from translated_select.attribute.source import ReferenceSource  # noqa: F401
from translated_select.attribute.translated_select import TranslatedSelectAttribute  # noqa: F401

__all__ = [
    "LanguageContext",
    "MetaModel",
    "FilterOption",
    "OptionSetBuilder",
    "OrderingEngine",
    "ReferenceResolver",
    "SearchIndexer",
    "ReferenceSource",
    "TranslatedSelectAttribute",
]
