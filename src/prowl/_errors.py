"""Prowl error hierarchy.

All prowl-specific errors inherit from ProwlError for easy catching.
"""


class ProwlError(Exception):
    """Base error for all prowl operations."""


class ConfigError(ProwlError):
    """Invalid or missing configuration."""


class BuildError(ProwlError):
    """Fatal build failure (missing pages directory, manifest write failure)."""


class PageError(ProwlError):
    """A page module is unloadable or one of its capabilities misbehaved."""


class ManifestError(ProwlError):
    """The route manifest is missing, malformed, or mutated illegally."""


class RenderError(ProwlError):
    """A request could not be rendered (SSR failure or missing artifact)."""


class ClientError(ProwlError):
    """Misuse of the client navigation layer."""
