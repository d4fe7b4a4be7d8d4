"""
ReferenceSource — the data-source description shared by all components.

Wraps an AttributeConfig plus the owning table name and turns them into
SQLAlchemy Core building blocks: table aliases, the opaque additional
predicate, the language priority ordering and the correlated
"first translation by priority" subquery that stands in for
ORDER BY FIELD(lang, active, fallback) LIMIT 1.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from sqlalchemy import case, select, text
from sqlalchemy.sql import ColumnElement, FromClause

from translated_select.db.base import ReferenceStore
from translated_select.engine.config import AttributeConfig
from translated_select.engine.errors import ConfigError

# Primary key of the owning table and of every reference/override table row.
ROW_ID = "id"
COUNT_LABEL = "mm_count"

# Outer copy of the reference table when a query also holds the translation
# subquery; the subquery keeps the real table name for the additional predicate.
SOURCE_ALIAS = "source_table"
OVERRIDE_ALIAS = "sort_override"


class ReferenceSource:
    """Reference table + language column + optional extra WHERE, for one attribute."""

    def __init__(self, config: AttributeConfig, model_table: str, store: ReferenceStore):
        self.config = config
        self.model_table = model_table
        self.store = store

    @property
    def attribute_ref(self) -> str:
        return f"{self.model_table}.{self.config.col_name}"

    @property
    def configured(self) -> bool:
        return self.config.is_configured

    @property
    def item_id_label(self) -> str:
        """Label carrying the owning item id next to reference columns."""
        return f"{self.model_table}_id"

    # ------------------------------------------------------------------
    # Tables and columns
    # ------------------------------------------------------------------

    def model(self) -> FromClause:
        return self.store.table(self.model_table)

    def reference(self, alias: Optional[str] = None) -> FromClause:
        """The reference table, or an alias of it when ``alias`` is given."""
        table = self.store.table(self.config.source_table)
        return table.alias(alias) if alias else table

    def override(self) -> FromClause:
        return self.store.table(self.config.sort_override_table).alias(OVERRIDE_ALIAS)

    def col(self, table: FromClause, name: str) -> ColumnElement:
        try:
            return table.c[name]
        except KeyError:
            raise ConfigError(
                f"Column '{name}' not found in '{getattr(table, 'name', table)}'",
                attribute_ref=self.attribute_ref,
                column=name,
            ) from None

    def stored_column(self, model: FromClause) -> ColumnElement:
        """The owning table column holding the reference id."""
        return self.col(model, self.config.col_name)

    # ------------------------------------------------------------------
    # Predicates and ordering
    # ------------------------------------------------------------------

    def restrictions(self) -> List[Any]:
        """The raw additional predicate, grouped so it cannot bleed into siblings."""
        if not self.config.additional_where:
            return []
        return [text(f"({self.config.additional_where})")]

    def language_priority(self, lang_col: ColumnElement, languages: Sequence[str]) -> ColumnElement:
        """Position of the row's language in the priority list; unknown languages sort last."""
        whens = {}
        for position, language in enumerate(languages):
            whens.setdefault(language, position)
        return case(whens, value=lang_col, else_=len(whens))

    def first_translation_id(
        self,
        key: ColumnElement,
        languages: Sequence[str],
        correlate: FromClause,
    ) -> ColumnElement:
        """
        Scalar subquery selecting the row id of the first translation of
        ``key`` in priority order, restricted by the additional predicate.
        """
        translation = self.reference()
        lang_col = self.col(translation, self.config.language_column)
        return (
            select(self.col(translation, ROW_ID))
            .where(
                lang_col.in_(list(languages)),
                self.col(translation, self.config.id_column) == key,
                *self.restrictions(),
            )
            .order_by(
                self.language_priority(lang_col, languages),
                self.col(translation, ROW_ID),
            )
            .limit(1)
            .correlate(correlate)
            .scalar_subquery()
        )

    def override_position(self, key: ColumnElement) -> Optional[ColumnElement]:
        """Sort value of ``key`` in the override table, if one is configured."""
        if not self.config.has_sort_override:
            return None
        override = self.override()
        return (
            select(self.col(override, self.config.sort_override_column))
            .where(self.col(override, ROW_ID) == key)
            .limit(1)
            .scalar_subquery()
        )

    def natural_sort(self, ref: FromClause) -> ColumnElement:
        return self.col(ref, self.config.effective_sort_column)
