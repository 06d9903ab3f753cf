"""
Configuration management for feed percolator.

Uses Pydantic for validation and pydantic-settings for environment variable support.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FetcherConfig(BaseSettings):
    """Syndication source fetcher configuration."""

    model_config = SettingsConfigDict(env_prefix="FETCHER_")

    # HTTP settings
    timeout_seconds: int = Field(default=30, ge=1, le=300, description="Request timeout")
    user_agent: str = Field(
        default="Feed-Percolator/0.1.0 (+https://github.com/feed-percolator)",
        description="User-Agent header"
    )

    # Follow redirects
    follow_redirects: bool = Field(default=True)
    max_redirects: int = Field(default=5, ge=0, le=20)

    # Concurrency (0 = one in-flight request per source)
    max_concurrency: int = Field(
        default=0, ge=0, le=1000,
        description="Max concurrent source requests (0=unlimited)"
    )


class DeduplicatorConfig(BaseSettings):
    """Deduplication configuration."""

    model_config = SettingsConfigDict(env_prefix="DEDUP_")

    # unique: items without a title skip the title check
    # error: items without a title abort the run
    missing_title_policy: str = Field(
        default="unique",
        description="Handling of items without a title: unique or error"
    )

    @field_validator("missing_title_policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        """Validate missing title policy."""
        v = v.lower().strip()
        valid_policies = ["unique", "error"]
        if v not in valid_policies:
            raise ValueError(f"Invalid missing_title_policy: {v!r}. Must be one of {valid_policies}")
        return v


LOGURU_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
STDLIB_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseSettings):
    """Logging configuration (loguru sinks)."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Level of the percolator's own messages")
    library_level: str = Field(default="WARNING", description="Level of forwarded httpx/httpcore messages")
    format: str = Field(
        default="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan> - <level>{message}</level>",
        description="loguru format string"
    )

    console_enabled: bool = Field(default=True, description="Log to stderr")

    # Optional rotating file sink
    file_enabled: bool = Field(default=False)
    file_path: str = Field(default="logs/feed_percolator.log")
    rotation: str = Field(default="10 MB")
    retention: str = Field(default="14 days")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        v = v.upper()
        if v not in LOGURU_LEVELS:
            raise ValueError(f"Log level must be one of {LOGURU_LEVELS}")
        return v

    @field_validator("library_level")
    @classmethod
    def validate_library_level(cls, v: str) -> str:
        """Validate the forwarded library log level."""
        v = v.upper()
        if v not in STDLIB_LEVELS:
            raise ValueError(f"Library log level must be one of {STDLIB_LEVELS}")
        return v


class OutputConfig(BaseSettings):
    """Defaults for the merged output feed."""

    model_config = SettingsConfigDict(env_prefix="OUTPUT_")

    title: str = Field(default="Percolated Feed", description="Default feed title")
    description: str = Field(default="", description="Default feed description")


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PERCOLATOR_",
        case_sensitive=False,
    )

    # Sub-configurations
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    deduplicator: DeduplicatorConfig = Field(default_factory=DeduplicatorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


_SECTIONS = {
    "fetcher": FetcherConfig,
    "deduplicator": DeduplicatorConfig,
    "logging": LoggingConfig,
    "output": OutputConfig,
}

_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration, building it from the environment on first use."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Replace the global configuration (None resets it)."""
    global _config
    _config = config


def _read_yaml(yaml_path: str, kind: str) -> dict:
    """Read a YAML mapping, raising FileNotFoundError when the file is absent."""
    import yaml

    path = Path(yaml_path)
    if not path.is_file():
        raise FileNotFoundError(f"{kind} file not found: {yaml_path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{kind} file must contain a mapping: {yaml_path}")
    return data


def load_config_from_yaml(yaml_path: str) -> Config:
    """Load configuration from a YAML file.

    Top-level keys are the ``fetcher``, ``deduplicator``, ``logging`` and
    ``output`` sections; anything else is rejected by ``Config``. YAML values
    win over environment variables, which still fill whatever the file leaves
    out.

    Args:
        yaml_path: Path to the YAML configuration file

    Returns:
        Config instance
    """
    data = _read_yaml(yaml_path, "Configuration")

    values = {key: value for key, value in data.items() if key not in _SECTIONS}
    for key, section_class in _SECTIONS.items():
        values[key] = section_class(**(data.get(key) or {}))

    return Config(**values)


def load_pipeline_settings(yaml_path: str, **overrides):
    """Load a pipeline definition from a YAML file.

    Args:
        yaml_path: Path to a YAML file with inputs, output, title,
            description and filters keys
        **overrides: Values replacing those from the file

    Returns:
        PipelineSettings instance
    """
    from feed_percolator.models import PipelineSettings

    data = _read_yaml(yaml_path, "Pipeline")
    data.update(overrides)
    return PipelineSettings(**data)


def reload_config(yaml_path: Optional[str] = None) -> Config:
    """Rebuild the global configuration from the environment and an optional YAML file."""
    global _config
    _config = load_config_from_yaml(yaml_path) if yaml_path else Config()
    return _config
