"""
SearchIndexer — wildcard search over reference values and aliases.

Patterns use ``*`` for any run of characters and ``?`` for exactly one.
Matching is case-sensitive or not depending on the store's collation.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from sqlalchemy import or_, select

from translated_select.attribute.context import LanguageContext
from translated_select.attribute.source import ROW_ID, ReferenceSource

logger = logging.getLogger("translated_select.attribute.search")

LIKE_ESCAPE = "\\"


def wildcard_to_like(pattern: str) -> str:
    """Translate a ``*``/``?`` pattern into a LIKE pattern, escaping LIKE's own wildcards."""
    escaped = (
        pattern.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return escaped.replace("*", "%").replace("?", "_")


class SearchIndexer:
    """Finds owning items whose select value matches a pattern."""

    def __init__(self, source: ReferenceSource):
        self.source = source

    def search(self, pattern: str, lang: LanguageContext) -> List[int]:
        """Search in the active language only."""
        return self.search_in_languages(pattern, [lang.active])

    def search_in_languages(self, pattern: str, languages: Iterable[str] = ()) -> List[int]:
        """
        Return ids of owning items whose reference value or alias matches.

        An empty ``languages`` searches every language. An item is listed
        once per matching translation row, so ids may repeat.
        """
        src = self.source
        if not src.configured:
            return []

        cfg = src.config
        languages = list(languages)
        like = wildcard_to_like(pattern)
        model = src.model()
        ref = src.reference()
        label = src.item_id_label

        conditions = [
            or_(
                src.col(ref, cfg.value_column).like(like, escape=LIKE_ESCAPE),
                src.col(ref, cfg.effective_alias_column).like(like, escape=LIKE_ESCAPE),
            ),
            *src.restrictions(),
        ]
        if languages:
            conditions.append(src.col(ref, cfg.language_column).in_(languages))

        stmt = (
            select(src.col(model, ROW_ID).label(label))
            .select_from(
                ref.join(model, src.col(ref, cfg.id_column) == src.stored_column(model))
            )
            .where(*conditions)
        )
        ids = src.store.fetch_column(stmt, label)
        logger.debug(f"{src.attribute_ref}: '{pattern}' matched {len(ids)} rows in {languages or 'all languages'}")
        return ids
