"""
wsdeps Shared Constants

Single source of truth for defaults, manifest keys and environment variable
names used across the wsdeps packages.

Usage:
    from wsdeps_common.constants import Defaults, Manifest

    if spec.get(Manifest.WORKSPACE_KEY):
        ...
"""

# =============================================================================
# VERSION INFORMATION
# =============================================================================

WSDEPS_VERSION = "0.3.0"
"""Current wsdeps release"""

OUTPUT_SCHEMA_VERSION = "1"
"""Version of the structured (JSON) report layout"""


# =============================================================================
# SUPPORTED VALUES
# =============================================================================

OUTPUT_FORMATS = ["text", "json"]
"""Report formats"""

LOG_LEVELS = ["debug", "info", "warning", "error"]
"""Valid log levels for WSDEPS_LOG_LEVEL"""

SHARED_POOL_MARKER = "workspace"
"""Pseudo member name used when a version comes from [workspace.dependencies]"""


# =============================================================================
# DEFAULT VALUES
# =============================================================================


class Defaults:
    """Defaults applied when options are not given explicitly."""

    MIN_MEMBERS = 2
    """Minimum members sharing a dependency before it is consolidated"""

    STRATEGY = "highest-compatible"
    """Default version resolution strategy"""

    OUTPUT_FORMAT = "text"
    """Default report format"""

    LOG_LEVEL = "warning"
    """Default log level (keeps CLI text output clean)"""

    LOG_FORMAT = "console"
    """Default log format"""


# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================


class EnvVars:
    """Environment variables read by wsdeps."""

    LOG_LEVEL = "WSDEPS_LOG_LEVEL"
    """Log level override (debug, info, warning, error)"""

    LOG_FORMAT = "WSDEPS_LOG_FORMAT"
    """Log format override (console or json)"""


# =============================================================================
# MANIFEST KEYS
# =============================================================================


class Manifest:
    """Key names used in Cargo.toml manifests."""

    FILE_NAME = "Cargo.toml"
    WORKSPACE = "workspace"
    PACKAGE = "package"
    MEMBERS = "members"
    EXCLUDE = "exclude"
    DEPENDENCIES = "dependencies"

    VERSION_KEY = "version"
    PACKAGE_KEY = "package"
    REGISTRY_KEY = "registry"
    DEFAULT_FEATURES_KEY = "default-features"
    LEGACY_DEFAULT_FEATURES_KEY = "default_features"
    WORKSPACE_KEY = "workspace"
    PATH_KEY = "path"
    GIT_KEY = "git"

    CONSOLIDATED_FIELDS = ("version", "package", "registry", "default-features")
    """Fields owned by the shared entry; everything else stays with the member"""
