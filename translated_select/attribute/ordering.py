"""
OrderingEngine — sorts owning item ids by their select value.

Two strategies:
    - override table configured: order by the override table's sort column,
      joined on the stored reference id; languages play no part.
    - otherwise: pick each item's first translation by language priority and
      order by the reference table's natural sort column.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from sqlalchemy import select

from translated_select.attribute.context import LanguageContext
from translated_select.attribute.source import ROW_ID, SOURCE_ALIAS, ReferenceSource
from translated_select.engine.errors import ValidationError

logger = logging.getLogger("translated_select.attribute.ordering")

ASC = "ASC"
DESC = "DESC"


def normalize_direction(direction: str) -> str:
    """Upper-case ``direction`` and reject anything but ASC/DESC."""
    normalized = (direction or "").strip().upper()
    if normalized not in (ASC, DESC):
        raise ValidationError(
            f"Sort direction must be ASC or DESC, got '{direction}'",
            field="direction",
            value=direction,
        )
    return normalized


class OrderingEngine:
    """Computes the order of item ids for one attribute."""

    def __init__(self, source: ReferenceSource):
        self.source = source

    def sort_ids(self, ids: Iterable[int], direction: str, lang: LanguageContext) -> List[int]:
        """
        Return ``ids`` ordered by this attribute.

        Ties keep whatever order the store yields.
        """
        direction = normalize_direction(direction)
        ids = list(ids)
        if not ids:
            return []

        if self.source.config.has_sort_override:
            return self._sort_by_override(ids, direction)
        if not self.source.configured:
            logger.debug(f"{self.source.attribute_ref}: no reference table, keeping input order")
            return ids
        return self._sort_by_translation(ids, direction, lang)

    def _sort_by_override(self, ids: List[int], direction: str) -> List[int]:
        src = self.source
        model = src.model()
        override = src.override()
        model_id = src.col(model, ROW_ID)
        sort_key = src.col(override, src.config.sort_override_column)

        stmt = (
            select(model_id)
            .select_from(
                model.outerjoin(override, src.col(override, ROW_ID) == src.stored_column(model))
            )
            .where(model_id.in_(ids))
            .order_by(sort_key.desc() if direction == DESC else sort_key.asc())
        )
        return src.store.fetch_column(stmt, model_id.key)

    def _sort_by_translation(self, ids: List[int], direction: str, lang: LanguageContext) -> List[int]:
        src = self.source
        model = src.model()
        ref = src.reference(SOURCE_ALIAS)
        model_id = src.col(model, ROW_ID)
        first = src.first_translation_id(src.stored_column(model), lang.priority, correlate=model)
        sort_key = src.natural_sort(ref)

        stmt = (
            select(model_id)
            .select_from(model.outerjoin(ref, src.col(ref, ROW_ID) == first))
            .where(model_id.in_(ids))
            .order_by(sort_key.desc() if direction == DESC else sort_key.asc())
        )
        return src.store.fetch_column(stmt, model_id.key)
