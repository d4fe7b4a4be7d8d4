"""
Capability interfaces implemented by select-style attributes.

    SelectAttribute — reference table description + filter options
    Translatable    — per-language get/set/search
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional


class SelectAttribute(ABC):
    """An attribute whose value is a row of a reference table."""

    @abstractmethod
    def get_select_source(self) -> str:
        ...

    @abstractmethod
    def get_id_column(self) -> str:
        ...

    @abstractmethod
    def get_value_column(self) -> str:
        ...

    @abstractmethod
    def get_alias_column(self) -> str:
        ...

    @abstractmethod
    def get_additional_where(self) -> Optional[str]:
        ...

    @abstractmethod
    def get_sorting_column(self) -> str:
        ...

    @abstractmethod
    def get_filter_options(self, id_list: Optional[Iterable[int]], used_only: bool, lang=None) -> List[Any]:
        ...


class Translatable(ABC):
    """An attribute whose values differ per language."""

    @abstractmethod
    def get_language_column(self) -> str:
        ...

    @abstractmethod
    def get_translated_data_for(self, ids: Iterable[int], lang_code: str) -> Dict[int, Dict[str, Any]]:
        ...

    @abstractmethod
    def set_translated_data_for(self, values: Mapping[int, Mapping[str, Any]], lang_code: str) -> None:
        ...

    @abstractmethod
    def unset_value_for(self, ids: Iterable[int], lang_code: str) -> None:
        ...

    @abstractmethod
    def search_for_in_languages(self, pattern: str, languages: Iterable[str] = ()) -> List[int]:
        ...
