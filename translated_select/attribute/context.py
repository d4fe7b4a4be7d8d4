"""
Owning-model and language context passed into every attribute operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from translated_select.engine.config import MetaModelConfig


@dataclass(frozen=True)
class LanguageContext:
    """Active and fallback language of one request."""
    active: str
    fallback: str

    @property
    def needs_fallback(self) -> bool:
        return self.active != self.fallback

    @property
    def priority(self) -> List[str]:
        """Languages in lookup order, without duplicates."""
        return [self.active] if not self.needs_fallback else [self.active, self.fallback]

    def __repr__(self) -> str:
        return f"<LanguageContext({self.active} → {self.fallback})>"


@dataclass(frozen=True)
class MetaModel:
    """The model owning the attribute: its table and default languages."""
    table_name: str
    active_language: str = "en"
    fallback_language: str = "en"

    @classmethod
    def from_config(cls, config: MetaModelConfig) -> "MetaModel":
        return cls(
            table_name=config.table_name,
            active_language=config.active_language,
            fallback_language=config.fallback_language,
        )

    def language_context(self) -> LanguageContext:
        return LanguageContext(self.active_language, self.fallback_language)
