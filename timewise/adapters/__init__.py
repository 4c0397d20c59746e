"""
Adapters layer - Settings persistence backends.
"""

from .file_store import JsonFileSettingsStore
from .http_store import HttpSettingsStore

__all__ = ["HttpSettingsStore", "JsonFileSettingsStore"]
