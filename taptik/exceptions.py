"""Taptik exception hierarchy.

All public exceptions inherit from TaptikError, giving callers a single
base class to catch when they want to handle any Taptik-specific failure
without swallowing unrelated errors. Content problems found while
sanitizing, converting or validating are reported inside result objects
and are never raised.
"""


class TaptikError(Exception):
    """Base exception for all Taptik errors."""


class PackagingError(TaptikError):
    """Raised when a package cannot be assembled.

    Covers missing title or version, contexts that cannot be serialized
    (circular references, non-JSON values) and unsupported compression.
    No partial package is ever returned alongside this error.
    """


class PackageFormatError(TaptikError):
    """Raised when a stored package cannot be read back.

    Covers undecodable payloads, invalid JSON and unknown format tags.
    """


class ConfigError(TaptikError):
    """Raised when the Taptik configuration file is unusable."""
