"""
HTTP settings store for a remote scheduler settings endpoint.
"""

import asyncio
import logging
from typing import Any, Dict, Sequence

import requests

from ..domain.codec import decode_settings, encode_settings
from ..domain.constants import ALL_POSSIBLE_TIMES
from ..domain.exceptions import SettingsStoreError
from ..domain.models import AvailabilitySettings
from ..services.settings_controller import SaveResult

logger = logging.getLogger(__name__)


class HttpSettingsStore:
    """
    Client for a settings endpoint exposing ``GET`` and ``PUT /settings``.
    
    ``PUT`` responds with ``{"success": bool, "message": str?}``. Blocking
    requests run in a worker thread so the event loop is not held up.
    """
    
    SETTINGS_PATH = "/settings"
    
    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        catalog: Sequence[str] = ALL_POSSIBLE_TIMES
    ):
        """
        Initialize the HTTP store.
        
        Args:
            base_url: Base URL of the settings service
            timeout: Request timeout in seconds
            catalog: Time-slot catalog used to validate fetched slots
        """
        self.url = base_url.rstrip("/") + self.SETTINGS_PATH
        self.timeout = timeout
        self.catalog = tuple(catalog)
        self.headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }
    
    async def fetch_settings(self) -> AvailabilitySettings:
        """
        Fetch settings from the remote endpoint.
        
        Raises:
            SettingsStoreError: If the request fails or the body is not JSON
            SettingsFormatError: If the body is not a valid settings payload
        """
        data = await asyncio.to_thread(self._request, "GET")
        return decode_settings(data, catalog=self.catalog)
    
    async def save_settings(self, settings: AvailabilitySettings) -> SaveResult:
        """
        Send the full settings document to the remote endpoint.
        
        Raises:
            SettingsStoreError: If the request fails
        """
        data = await asyncio.to_thread(self._request, "PUT", encode_settings(settings))
        
        if not isinstance(data, dict):
            raise SettingsStoreError("Unexpected response body from settings endpoint")
        
        message = data.get("message")
        return SaveResult(
            success=data.get("success") is True,
            message=message if isinstance(message, str) else None
        )
    
    def _request(self, method: str, payload: Dict[str, Any] | None = None) -> Any:
        try:
            response = requests.request(
                method,
                self.url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        
        except requests.exceptions.RequestException as e:
            raise SettingsStoreError(f"{method} {self.url} failed: {e}") from e
        
        except ValueError as e:
            raise SettingsStoreError(f"{method} {self.url} returned invalid JSON: {e}") from e
