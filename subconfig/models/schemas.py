"""Pydantic settings and data records for the subconfig loader.

This module defines:
- Loader settings (directories, naming conventions, environment keys)
- Logging settings used by ``subconfig.utils.logging``
- Records describing tiers, store changes and loading results
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# Enumerations
# =============================================================================


class ConfigSource(str, Enum):
    """Where a configuration value came from."""

    STORE = "store"
    FILE = "file"
    RUNTIME = "runtime"


class ApplyMode(str, Enum):
    """How a tier payload is applied to the store."""

    OVERWRITE = "overwrite"
    MERGE = "merge"


class LogLevel(str, Enum):
    """Logging level enumeration."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


# =============================================================================
# Data Classes for Loading Records
# =============================================================================


@dataclass
class ConfigChange:
    """Configuration change event."""

    key: str
    old_value: Any
    new_value: Any
    source: ConfigSource
    timestamp: float


@dataclass(frozen=True)
class TierPayload:
    """Data loaded for one tier, with the merge flag lifted out of it."""

    data: dict[str, Any]
    merge: bool = False
    source: ConfigSource = ConfigSource.FILE

    @property
    def mode(self) -> ApplyMode:
        return ApplyMode.MERGE if self.merge else ApplyMode.OVERWRITE


@dataclass
class TierResult:
    """Outcome of processing one tier of the loading scenario."""

    descriptor: tuple[str, ...]
    applied: bool
    source: Optional[ConfigSource] = None
    mode: Optional[ApplyMode] = None
    keys: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        return ".".join(self.descriptor)


# =============================================================================
# Settings
# =============================================================================


class BaseConfig(BaseModel):
    """Base configuration class with common functionality."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


class SubconfigLogging(BaseConfig):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.WARNING, description="Console log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    datefmt: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="Date format for log messages"
    )
    env_key: str = Field(
        default="SUBCONFIG_LOG_CFG",
        description="Environment variable holding a logging config file path",
    )
    default_config_path: Optional[Path] = Field(
        default=None, description="Logging dictConfig YAML file"
    )


class SubconfigSettings(BaseConfig):
    """Settings for subproject/environment configuration loading."""

    config_root: Path = Field(
        default=Path("config"), description="Root directory of configuration files"
    )
    base_key: str = Field(
        default="env", description="Namespace holding environment configurations"
    )
    common_name: str = Field(
        default="common", description="Name of the tier shared by all members"
    )
    default_subproject: str = Field(
        default="front",
        description="Subproject used when the request host gives no answer",
    )
    cli_subproject: str = Field(
        default="cli", description="Subproject used for command-line execution"
    )
    file_extension: str = Field(
        default="yaml", description="Extension of tier configuration files"
    )
    merge_key: str = Field(
        default="merge_config",
        description="Payload key selecting merge mode for a tier",
    )
    environment_key: str = Field(
        default="APP_ENV", description="Environment variable naming the environment"
    )
    default_environment: str = Field(
        default="production", description="Environment used when none is set"
    )
    logging: SubconfigLogging = Field(
        default_factory=SubconfigLogging, description="Logging configuration"
    )

    @field_validator(
        "base_key", "common_name", "default_subproject", "cli_subproject", "merge_key"
    )
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Tokens are used as path segments and must be non-empty and dot-free."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        if "." in v or "/" in v:
            raise ValueError(f"'{v}' must not contain '.' or '/'")
        return v

    @field_validator("default_subproject", "cli_subproject")
    @classmethod
    def validate_lowercase(cls, v: str) -> str:
        return v.lower()

    @field_validator("file_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        v = v.strip().lstrip(".").lower()
        if not v:
            raise ValueError("file extension must not be empty")
        return v

    @classmethod
    def from_environment(
        cls, prefix: str = "SUBCONFIG_", **overrides: Any
    ) -> "SubconfigSettings":
        """Build settings from ``<prefix>*`` environment variables.

        Explicit keyword overrides take precedence over the environment.
        """
        from ..loader.env import EnvironmentLoader

        values = EnvironmentLoader(prefix=prefix).load_environment(
            fields=set(cls.model_fields)
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
