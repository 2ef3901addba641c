"""
wsdeps Common Package

Shared primitives used across all wsdeps packages.

This package provides:
- Exception classes for consistent error handling
- Constants for supported values and defaults (namespaced)
- Logging helpers

Usage:
    from wsdeps_common import WorkspaceError, Defaults, get_logger

    logger = get_logger(__name__)
    min_members = Defaults.MIN_MEMBERS
"""

# Error classes
from .errors import (
    WsdepsError,
    ValidationError,
    WorkspaceError,
    ManifestError,
    CheckFailedError,
    VersionResolutionError,
    VersionParseError,
    PolicyRejectionError,
    IncompatibleRequirementsError,
)

# Constants
from .constants import (
    Defaults,
    EnvVars,
    Manifest,
    WSDEPS_VERSION,
    OUTPUT_SCHEMA_VERSION,
    OUTPUT_FORMATS,
    LOG_LEVELS,
    SHARED_POOL_MARKER,
)

# Logger
from .logger import (
    JsonFormatter,
    get_logger,
    configure_logging,
)

__version__ = WSDEPS_VERSION

__all__ = [
    # Errors
    "WsdepsError",
    "ValidationError",
    "WorkspaceError",
    "ManifestError",
    "CheckFailedError",
    "VersionResolutionError",
    "VersionParseError",
    "PolicyRejectionError",
    "IncompatibleRequirementsError",
    # Constants
    "Defaults",
    "EnvVars",
    "Manifest",
    "WSDEPS_VERSION",
    "OUTPUT_SCHEMA_VERSION",
    "OUTPUT_FORMATS",
    "LOG_LEVELS",
    "SHARED_POOL_MARKER",
    # Logger
    "JsonFormatter",
    "get_logger",
    "configure_logging",
]
