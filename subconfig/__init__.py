"""Subproject and environment configuration loading."""

from .loader import ConfigurationError, FileLoadError, FormatError
from .models import SubconfigSettings
from .provider import SubconfigProvider, init
from .resolver import (
    CommandLineContext,
    ExecutionContext,
    RequestContext,
    SubprojectResolver,
)
from .scenario import generate_scenario
from .store import ConfigStore

__all__ = [
    "CommandLineContext",
    "ConfigStore",
    "ConfigurationError",
    "ExecutionContext",
    "FileLoadError",
    "FormatError",
    "RequestContext",
    "SubconfigProvider",
    "SubconfigSettings",
    "SubprojectResolver",
    "generate_scenario",
    "init",
]
