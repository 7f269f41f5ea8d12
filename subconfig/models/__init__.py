"""Settings and data records."""

from .schemas import (
    ApplyMode,
    ConfigChange,
    ConfigSource,
    SubconfigLogging,
    SubconfigSettings,
    TierPayload,
    TierResult,
)

__all__ = [
    "ApplyMode",
    "ConfigChange",
    "ConfigSource",
    "SubconfigLogging",
    "SubconfigSettings",
    "TierPayload",
    "TierResult",
]
