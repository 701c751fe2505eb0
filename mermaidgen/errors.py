"""
Error types raised by mermaidgen.

Duplicate identifiers are not errors: the ``add_*`` methods return ``None``
instead. Everything here is raised synchronously and never retried.
"""

from pydantic import ValidationError


class MermaidGenError(Exception):
    """Base class for all mermaidgen errors."""


class InvalidConfigurationError(MermaidGenError, ValueError):
    """A configuration value has the wrong type or an unknown field was given."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, what: str, exc: ValidationError) -> "InvalidConfigurationError":
        """Summarize a pydantic ValidationError into a single message."""
        details = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
            details.append(f"{loc}: {err.get('msg', 'invalid value')}")
        return cls(f"invalid {what}: {'; '.join(details)}", errors=exc.errors())


class DependencyCycleError(MermaidGenError):
    """A task's ``after`` chain loops back onto itself."""


class ExportError(MermaidGenError):
    """The rendered text could not be encoded into (or decoded from) a view URL."""


class UnsupportedPlatformError(MermaidGenError):
    """No known way to open a browser on this operating system."""

    def __init__(self, platform: str):
        super().__init__(f"unsupported platform: {platform}")
        self.platform = platform
