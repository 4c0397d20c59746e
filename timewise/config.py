"""
Configuration management using Pydantic Settings.
"""

import logging
from pathlib import Path
from typing import Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.constants import build_time_catalog


class CatalogConfig(BaseModel):
    """Range and granularity of the schedulable time-slot catalog."""
    start_hour: int = 8
    end_hour: int = 20
    interval_minutes: int = 30

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Ensure the slot interval is positive and aligns with the hour."""
        if value <= 0:
            raise ValueError("interval_minutes must be greater than zero")
        if 60 % value and value % 60:
            raise ValueError("interval_minutes must divide 60 or be a multiple of 60")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "CatalogConfig":
        """Ensure the catalog opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def build(self) -> Tuple[str, ...]:
        """Get the catalog of HH:mm tokens."""
        return build_time_catalog(self.start_hour, self.end_hour, self.interval_minutes)


class StoreConfig(BaseModel):
    """Where availability settings are persisted."""
    backend: Literal["file", "http"] = "file"
    path: Path = Path("scheduler_settings.json")
    url: Optional[str] = None
    timeout_seconds: float = 30

    @model_validator(mode="after")
    def validate_backend(self) -> "StoreConfig":
        """Ensure the http backend has an endpoint."""
        if self.backend == "http" and not self.url:
            raise ValueError("store.url is required when store.backend is 'http'")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    preview_url: str = "/booking"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative store paths are resolved next to the config file
        if not config.store.path.is_absolute():
            config.store.path = config_path.parent / config.store.path

        return config

    @classmethod
    def load_or_default(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """Load the given or default config file, falling back to defaults if absent."""
        path = config_path or get_default_config_path()
        if config_path is None and not path.exists():
            return cls()
        return cls.load_from_yaml(path)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
