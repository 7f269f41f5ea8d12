"""Configuration loader package.

This package provides the loaders used to fetch tier data (store lookup,
then files) and the merger applying it to the configuration store.
"""

from .env import EnvironmentLoader
from .file import (
    ConfigFormat,
    ConfigurationError,
    FileLoader,
    FileLoadError,
    FormatError,
    TierDataProvider,
)
from .merger import ConfigurationMerger, ValueKind, flatten, value_kind

__all__ = [
    "ConfigFormat",
    "ConfigurationError",
    "ConfigurationMerger",
    "EnvironmentLoader",
    "FileLoadError",
    "FileLoader",
    "FormatError",
    "TierDataProvider",
    "ValueKind",
    "flatten",
    "value_kind",
]
