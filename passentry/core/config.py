"""Configuration management using Pydantic Settings."""

import codecs
import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class GeneralConfig(BaseSettings):
    """General application configuration."""

    log_level: str = "INFO"
    log_file: Path | None = None
    log_file_max_bytes: int = 1_000_000
    log_file_backup_count: int = 3
    # Logger category → level, e.g. {"otp": "DEBUG"}
    log_overrides: dict[str, str] = Field(default_factory=dict)
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".passentry"
    )
    # Runtime metadata - not serialized to config file
    config_file: Path | None = Field(default=None, exclude=True)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v

    @field_validator("data_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path | None) -> Path | None:
        """Expand user home directory in paths."""
        if v is None:
            return None
        return Path(v).expanduser().resolve()


class EntryConfig(BaseSettings):
    """Configuration for parsing record bodies."""

    encoding: str = "utf-8"
    username_fields: list[str] = Field(
        default_factory=lambda: ["login", "username"]
    )

    @field_validator("encoding", mode="before")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate that the encoding is known to Python."""
        try:
            return codecs.lookup(v).name
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e

    @field_validator("username_fields", mode="before")
    @classmethod
    def normalize_username_fields(cls, v: list[str]) -> list[str]:
        """Lower-case field names and reject an empty list."""
        fields = [name.strip().lower() for name in v if name and name.strip()]
        if not fields:
            raise ValueError("At least one username field name is required")
        return fields


class AppConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PASSENTRY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    entry: EntryConfig = Field(default_factory=EntryConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a TOML file."""
        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}, using defaults")
            return cls()

        import tomllib

        with open(config_path, "rb") as f:
            config_dict = tomllib.load(f)

        return cls(**config_dict)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to a TOML file."""
        try:
            import tomli_w
        except ImportError as e:
            logger.error("tomli_w not installed, cannot save config")
            raise ImportError("Install tomli_w to save configuration: pip install tomli-w") from e

        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Convert to dict, handling Path objects and excluding None values
        config_dict = self.model_dump(mode="json", exclude_none=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(config_dict, f)

        logger.info(f"Configuration saved to {config_path}")

    @property
    def default_config_path(self) -> Path:
        """Get default configuration file path."""
        return self.general.data_dir / "config.toml"


# Global configuration instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from file or create default."""
    if config_path is None:
        config = AppConfig()
        config_path = config.default_config_path

    if config_path.exists():
        config = AppConfig.load_from_file(config_path)
    else:
        config = AppConfig()

    config.general.config_file = config_path
    set_config(config)
    return config
