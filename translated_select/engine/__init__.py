"""translated_select Engine — Configuration, errors and structured logging."""

from translated_select.engine.config import AttributeConfig, Settings, get_settings, load_settings  # noqa: F401
from translated_select.engine.errors import (  # noqa: F401
    ConfigError,
    StoreOperationError,
    TranslatedSelectError,
    ValidationError,
)

__all__ = [
    "AttributeConfig",
    "Settings",
    "get_settings",
    "load_settings",
    "TranslatedSelectError",
    "StoreOperationError",
    "ConfigError",
    "ValidationError",
]
