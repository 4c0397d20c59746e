"""
JSON-file settings store.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence

from ..domain.codec import decode_settings, encode_settings
from ..domain.constants import ALL_POSSIBLE_TIMES
from ..domain.exceptions import SettingsStoreError
from ..domain.models import AvailabilitySettings
from ..services.settings_controller import SaveResult

logger = logging.getLogger(__name__)


class JsonFileSettingsStore:
    """
    Stores availability settings as a single JSON document on disk.
    
    A missing file hydrates empty settings (nothing bookable). Writes go to a
    temporary file that replaces the document, so a save either replaces the
    whole document or leaves the previous one in place.
    """
    
    def __init__(self, path: Path, catalog: Sequence[str] = ALL_POSSIBLE_TIMES):
        """
        Initialize the store.
        
        Args:
            path: Location of the JSON document
            catalog: Time-slot catalog used to validate stored slots
        """
        self.path = Path(path)
        self.catalog = tuple(catalog)
    
    async def fetch_settings(self) -> AvailabilitySettings:
        """
        Read settings from disk.
        
        Raises:
            SettingsStoreError: If the file cannot be read or is not JSON
            SettingsFormatError: If the document is not a valid settings payload
        """
        if not self.path.exists():
            logger.info("No settings file at %s; starting with empty settings", self.path)
            return AvailabilitySettings(catalog=self.catalog)
        
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise SettingsStoreError(f"Could not read settings file {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SettingsStoreError(f"Invalid JSON in {self.path}: {exc}") from exc
        
        return decode_settings(data, catalog=self.catalog)
    
    async def save_settings(self, settings: AvailabilitySettings) -> SaveResult:
        """Replace the settings document with ``settings``."""
        payload = encode_settings(settings)
        
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.warning("Could not save settings to %s: %s", self.path, exc)
            return SaveResult(success=False, message=f"Could not write {self.path}: {exc}")
        
        logger.debug("Wrote settings to %s", self.path)
        return SaveResult(success=True)
