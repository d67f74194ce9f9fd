from tract_lookup.shared.config import Settings, get_config, reload_config
from tract_lookup.shared.errors import (
    ConfigurationError,
    MissingCoordinateError,
    NoRegionMatchError,
    TractLookupError,
)
from tract_lookup.shared.logging_setup import configure_logging

__all__ = [
    "get_config",
    "reload_config",
    "Settings",
    "configure_logging",
    "TractLookupError",
    "ConfigurationError",
    "MissingCoordinateError",
    "NoRegionMatchError",
]
