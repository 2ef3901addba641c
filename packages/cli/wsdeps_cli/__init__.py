"""wsdeps CLI - command line interface for Cargo workspace dependency consolidation."""

from wsdeps_common.constants import WSDEPS_VERSION

__version__ = WSDEPS_VERSION
