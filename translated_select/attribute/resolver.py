"""
ReferenceResolver — item ids → translated reference rows, with fallback.

Provides:
    - resolve: rows in exactly one language
    - resolve_with_fallback: active language first, fallback for the rest
    - set_translated_values / unset_values: writes to the owning column
    - translate_row / lookup_alias: value ↔ widget alias conversion
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import and_, select, update

from translated_select.attribute.context import LanguageContext
from translated_select.attribute.source import ROW_ID, ReferenceSource
from translated_select.engine.logging import log, log_store_write

logger = logging.getLogger("translated_select.attribute.resolver")


class ReferenceResolver:
    """Resolves owning item ids to rows of the reference table."""

    def __init__(self, source: ReferenceSource):
        self.source = source

    def resolve(self, ids: Iterable[int], lang_code: str) -> Dict[int, Dict[str, Any]]:
        """
        Return {item_id: reference row} for the rows in ``lang_code``.

        Ids without a matching row are absent. An empty id set or an
        unconfigured source returns {} without touching the store.
        """
        ids = list(ids)
        if not ids or not self.source.configured:
            return {}

        src = self.source
        cfg = src.config
        model = src.model()
        ref = src.reference()
        label = src.item_id_label

        stmt = (
            select(ref, src.col(model, ROW_ID).label(label))
            .select_from(
                ref.join(
                    model,
                    and_(
                        src.col(ref, cfg.language_column) == lang_code,
                        src.col(ref, cfg.id_column) == src.stored_column(model),
                    ),
                )
            )
            .where(src.col(model, ROW_ID).in_(ids), *src.restrictions())
        )

        result: Dict[int, Dict[str, Any]] = {}
        for row in src.store.fetch_all(stmt):
            item_id = row.pop(label)
            result[item_id] = row
        logger.debug(f"{src.attribute_ref}: resolved {len(result)}/{len(ids)} ids in '{lang_code}'")
        return result

    def resolve_with_fallback(
        self, ids: Iterable[int], lang: LanguageContext
    ) -> Dict[int, Dict[str, Any]]:
        """
        Resolve in the active language, then fill the gaps from the fallback
        language. Active-language rows are never overwritten.
        """
        ids = list(dict.fromkeys(ids))
        result = self.resolve(ids, lang.active)

        if len(result) < len(ids) and lang.needs_fallback:
            missing = [item_id for item_id in ids if item_id not in result]
            if missing:
                for item_id, row in self.resolve(missing, lang.fallback).items():
                    result.setdefault(item_id, row)
        return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_translated_values(self, values: Mapping[int, Mapping[str, Any]], lang_code: str) -> int:
        """
        Point every item at the reference id found in its value row.

        One UPDATE per item, each committed on its own unless the caller
        holds a store transaction. ``lang_code`` is informational: the
        owning column is not partitioned by language.

        Returns:
            Total number of rows updated.
        """
        src = self.source
        if not src.configured or not values:
            return 0

        model = src.model()
        stored = src.stored_column(model)
        id_column = src.config.id_column
        total = 0
        for item_id, value in values.items():
            stmt = (
                update(model)
                .where(src.col(model, ROW_ID) == item_id)
                .values({stored.key: value[id_column]})
            )
            affected = src.store.execute(stmt)
            log(log_store_write(src.model_table, src.config.col_name, affected, item_id=item_id))
            total += affected
        logger.debug(f"{src.attribute_ref}: wrote {total} rows ({lang_code})")
        return total

    def unset_values(self, ids: Iterable[int]) -> int:
        """Clear the owning column of the given items."""
        ids = list(ids)
        src = self.source
        if not ids:
            return 0
        model = src.model()
        stmt = (
            update(model)
            .where(src.col(model, ROW_ID).in_(ids))
            .values({src.stored_column(model).key: None})
        )
        affected = src.store.execute(stmt)
        log(log_store_write(src.model_table, src.config.col_name, affected))
        return affected

    # ------------------------------------------------------------------
    # Widget conversion
    # ------------------------------------------------------------------

    def translate_row(self, row: Optional[Mapping[str, Any]], lang: LanguageContext) -> Optional[Any]:
        """
        Alias of ``row`` as seen in the active language.

        A row already in the active language is returned as-is; otherwise the
        active translation of the same logical id is looked up.
        """
        if not row:
            return None
        src = self.source
        cfg = src.config
        alias_column = cfg.effective_alias_column

        if row.get(cfg.language_column) == lang.active:
            return row.get(alias_column)
        if not src.configured:
            return None

        ref = src.reference()
        stmt = (
            select(src.col(ref, alias_column))
            .where(
                src.col(ref, cfg.id_column) == row.get(cfg.id_column),
                src.col(ref, cfg.language_column) == lang.active,
                *src.restrictions(),
            )
            .limit(1)
        )
        aliases = src.store.fetch_column(stmt, alias_column)
        return aliases[0] if aliases else None

    def lookup_alias(self, alias: Any, lang: LanguageContext) -> Optional[Dict[str, Any]]:
        """The reference row carrying ``alias`` in the active or fallback language."""
        src = self.source
        if alias is None or not src.configured:
            return None

        cfg = src.config
        ref = src.reference()
        lang_col = src.col(ref, cfg.language_column)
        stmt = (
            select(ref)
            .where(
                src.col(ref, cfg.effective_alias_column) == alias,
                lang_col.in_(lang.priority),
                *src.restrictions(),
            )
            .order_by(src.language_priority(lang_col, lang.priority))
            .limit(1)
        )
        rows = src.store.fetch_all(stmt)
        return rows[0] if rows else None
