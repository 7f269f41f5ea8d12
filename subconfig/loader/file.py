"""File-based configuration loading for scenario tiers.

Supports JSON, YAML, INI and TOML files, and provides the two-step tier
lookup: the live store first, then the tier's file under the config root.
"""

import configparser
import copy
import json
import logging
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..models.schemas import ConfigSource, TierPayload
from ..scenario import TierDescriptor

logger = logging.getLogger(__name__)


class ConfigFormat(Enum):
    """Supported configuration file formats."""

    JSON = "json"
    YAML = "yaml"
    YML = "yml"
    INI = "ini"
    TOML = "toml"


class ConfigurationError(Exception):
    """Base exception for configuration errors."""

    pass


class FileLoadError(ConfigurationError):
    """Exception raised when file loading fails."""

    pass


class FormatError(ConfigurationError):
    """Exception raised when file format is unsupported or invalid."""

    pass


class FileLoader:
    """Configuration file loader with support for multiple formats."""

    def __init__(self, encoding: str = "utf-8"):
        """Initialize the file loader.

        Args:
            encoding: File encoding to use
        """
        self.encoding = encoding

    def load_file(
        self, file_path: Union[str, Path], format: Optional[ConfigFormat] = None
    ) -> dict[str, Any]:
        """Load configuration from a single file.

        Args:
            file_path: Path to configuration file
            format: File format (auto-detected if None)

        Returns:
            Configuration dictionary

        Raises:
            FileLoadError: If file cannot be read
            FormatError: If file format is unsupported, invalid or not a mapping
        """
        path = Path(file_path)

        if not path.is_file():
            raise FileLoadError(f"Configuration file not found: {path}")

        if format is None:
            format = self._detect_format(path)

        try:
            with open(path, encoding=self.encoding) as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileLoadError(f"Failed to read file {path}: {e}") from e

        config = self._parse_content(content, format)
        if not isinstance(config, dict):
            raise FormatError(
                f"{path} holds a {type(config).__name__}, expected a mapping"
            )

        logger.debug(f"Loaded configuration from {path} ({format.value})")
        return config

    def load_optional(
        self, file_path: Union[str, Path], format: Optional[ConfigFormat] = None
    ) -> Optional[dict[str, Any]]:
        """Load a configuration file that is allowed to be absent.

        Returns:
            Configuration dictionary, or None if the file is missing,
            unreadable or does not hold a mapping
        """
        path = Path(file_path)
        if not path.exists():
            logger.debug(f"No configuration file at {path}")
            return None

        try:
            return self.load_file(path, format)
        except ConfigurationError as e:
            logger.warning(f"Ignoring configuration file: {e}")
            return None

    def _detect_format(self, path: Path) -> ConfigFormat:
        """Auto-detect configuration file format from extension.

        Raises:
            FormatError: If format cannot be detected
        """
        suffix = path.suffix.lower().lstrip(".")

        try:
            return ConfigFormat(suffix)
        except ValueError:
            raise FormatError(f"Unsupported file format: .{suffix}") from None

    def _parse_content(self, content: str, format: ConfigFormat) -> Any:
        """Parse configuration content based on format.

        Raises:
            FormatError: If parsing fails
        """
        try:
            if format == ConfigFormat.JSON:
                return json.loads(content)

            elif format in (ConfigFormat.YAML, ConfigFormat.YML):
                return yaml.safe_load(content) or {}

            elif format == ConfigFormat.INI:
                parser = configparser.ConfigParser()
                parser.read_string(content)

                config = {}
                for section_name in parser.sections():
                    config[section_name] = dict(parser[section_name])

                if parser.defaults():
                    config["DEFAULT"] = dict(parser.defaults())

                return config

            elif format == ConfigFormat.TOML:
                return tomllib.loads(content)

            else:
                raise FormatError(f"Unsupported format: {format}")

        except FormatError:
            raise
        except Exception as e:
            raise FormatError(f"Failed to parse {format.value} content: {e}") from e


def _is_enabled(value: Any) -> bool:
    """Interpret a merge flag, accepting the string forms INI files produce."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class TierDataProvider:
    """Fetches the payload of a scenario tier.

    The live store is consulted first so that trees preloaded by the host
    (or written by an earlier tier) take precedence over files on disk.
    """

    def __init__(
        self,
        store,
        config_root: Union[str, Path],
        file_extension: str = "yaml",
        merge_key: str = "merge_config",
        file_loader: Optional[FileLoader] = None,
    ):
        self.store = store
        self.config_root = Path(config_root)
        self.file_extension = file_extension.lstrip(".")
        self.merge_key = merge_key
        self.file_loader = file_loader or FileLoader()

    def tier_file(self, descriptor: TierDescriptor) -> Path:
        """Path of the file backing a tier: ``<root>/<a>/<b>/<c>.<ext>``."""
        *dirs, name = descriptor
        return self.config_root.joinpath(*dirs, f"{name}.{self.file_extension}")

    def is_within_root(self, file_path: Path) -> bool:
        """Check that a tier file resolves to a location under the config root."""
        return file_path.resolve().is_relative_to(self.config_root.resolve())

    def fetch(self, descriptor: TierDescriptor) -> Optional[TierPayload]:
        """Return the tier payload, or None when the tier has no data."""
        path = ".".join(descriptor)

        data = self.store.get(path)
        if self._has_data(data):
            payload = self.to_payload(data, ConfigSource.STORE)
            if self.merge_key in data:
                # Control key must not stay in the live tree
                self.store.delete(f"{path}.{self.merge_key}")
            logger.debug(f"Tier {path} found in store")
            return payload

        tier_file = self.tier_file(descriptor)
        if not self.is_within_root(tier_file):
            logger.warning(
                f"Ignoring tier {path}: {tier_file} is outside {self.config_root}"
            )
            return None

        data = self.file_loader.load_optional(tier_file)
        if not self._has_data(data):
            logger.debug(f"No configuration for tier {path}")
            return None

        logger.debug(f"Tier {path} loaded from {tier_file}")
        return self.to_payload(data, ConfigSource.FILE)

    def to_payload(
        self, data: Mapping[str, Any], source: ConfigSource = ConfigSource.FILE
    ) -> TierPayload:
        """Split the merge control key from the tier's data."""
        data = copy.deepcopy(dict(data))
        merge = _is_enabled(data.pop(self.merge_key, False))
        return TierPayload(data=data, merge=merge, source=source)

    @staticmethod
    def _has_data(data: Any) -> bool:
        if data is None:
            return False
        if not isinstance(data, Mapping):
            logger.warning(
                f"Ignoring tier data of type {type(data).__name__}, expected a mapping"
            )
            return False
        return bool(data)
