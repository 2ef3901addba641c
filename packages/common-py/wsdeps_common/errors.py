"""
wsdeps Error Classes

All errors raised by wsdeps packages derive from WsdepsError so callers can
catch a single base class. Each error carries a machine-readable code and can
be serialized for structured (JSON) output.

Usage:
    from wsdeps_common.errors import WorkspaceError

    raise WorkspaceError("No workspace members found. Is this a workspace?")
"""

from typing import Any, Dict, Optional


class WsdepsError(Exception):
    """
    Base class for all wsdeps errors.

    Attributes:
        message: Human readable description
        code: Stable machine-readable error code
    """

    code = "WSDEPS_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error for structured output."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }


class ValidationError(WsdepsError):
    """Raised when configuration or input values are invalid."""

    code = "VALIDATION_ERROR"


class WorkspaceError(WsdepsError):
    """Raised when the workspace layout cannot be discovered."""

    code = "WORKSPACE_ERROR"


class ManifestError(WsdepsError):
    """Raised when a manifest cannot be read, parsed or written."""

    code = "MANIFEST_ERROR"

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.path:
            data["path"] = self.path
        return data


class CheckFailedError(WsdepsError):
    """
    Raised in check mode when the workspace is not fully consolidated.

    kind is "consolidation" when dependencies could still be moved to the
    shared pool, or "conflicts" when unresolved conflicts remain.
    """

    code = "CHECK_FAILED"

    CONSOLIDATION = "consolidation"
    CONFLICTS = "conflicts"

    def __init__(self, kind: str, count: int):
        self.kind = kind
        self.count = count
        if kind == self.CONSOLIDATION:
            message = f"Check failed: {count} dependencies could be consolidated"
        else:
            message = f"Check failed: {count} unresolved conflicts"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind
        data["count"] = self.count
        return data


# =============================================================================
# VERSION RESOLUTION ERRORS
# =============================================================================
# These never abort a run. The analyzer converts them into a per-dependency
# conflict entry.


class VersionResolutionError(WsdepsError):
    """Base class for failures while picking one version for a dependency."""

    code = "VERSION_RESOLUTION_ERROR"


class VersionParseError(VersionResolutionError):
    """A version string could not be interpreted, even leniently."""

    code = "VERSION_PARSE_ERROR"


class PolicyRejectionError(VersionResolutionError):
    """The skip or fail strategy was applied to a multi-version dependency."""

    code = "POLICY_REJECTION"


class IncompatibleRequirementsError(VersionResolutionError):
    """No candidate version satisfies every requirement at once."""

    code = "INCOMPATIBLE_REQUIREMENTS"
