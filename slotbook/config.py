"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .adapters.booking_store import SupabaseBookingStore
from .adapters.mock_booking_store import MockBookingStore
from .domain.exceptions import ConfigurationError
from .domain.slot_calculator import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_GRANULARITY_MINUTES,
    SlotCalculator,
)
from .domain.models import MINUTES_PER_DAY


class SlotsConfig(BaseModel):
    """Slot grid settings."""
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES

    @field_validator("granularity_minutes")
    @classmethod
    def validate_granularity(cls, value: int) -> int:
        """Ensure the grid step evenly partitions a day."""
        if value <= 0 or MINUTES_PER_DAY % value != 0:
            raise ValueError(
                f"granularity_minutes must be a positive divisor of {MINUTES_PER_DAY}, got {value}"
            )
        return value

    @field_validator("default_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure the fallback duration is positive."""
        if value <= 0:
            raise ValueError("default_duration_minutes must be greater than zero")
        return value


class StorageConfig(BaseModel):
    """Hosted backend connection settings."""
    url: str = ""
    api_key: str = ""
    table: str = "appointments"
    timeout_seconds: float = 10

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    def is_configured(self) -> bool:
        """Whether enough is set to talk to the real backend."""
        return bool(self.url and self.api_key)


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 8000


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    slots: SlotsConfig = Field(default_factory=SlotsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def build_slot_calculator(self) -> SlotCalculator:
        """Create the engine configured by this file."""
        return SlotCalculator(
            granularity_minutes=self.slots.granularity_minutes,
            default_duration_minutes=self.slots.default_duration_minutes,
            timezone=self.timezone,
        )

    def build_booking_store(self, mock: bool = False):
        """
        Create the storage adapter: the JSON mock or the hosted backend.

        Raises:
            ConfigurationError: If the hosted backend is requested but not configured
        """
        if mock:
            return MockBookingStore()

        if not self.storage.is_configured():
            raise ConfigurationError(
                "storage.url and storage.api_key must be set (or use mock mode)."
            )

        return SupabaseBookingStore(
            base_url=self.storage.url,
            api_key=self.storage.api_key,
            table=self.storage.table,
            timeout_seconds=self.storage.timeout_seconds,
        )

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
            ConfigurationError: If config is invalid
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
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a mapping at the root level.")

        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {config_path}:\n{exc}") from exc


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


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load the config file, falling back to defaults when none exists.
    """
    path = config_path or get_default_config_path()
    if config_path is None and not path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(path)
