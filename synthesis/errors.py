"""
errors.py -- Errors that cross the synthesis pipeline boundary.

Only provider-side failures are errors. Sections missing from the provider's
text are never raised; they resolve to fallback values inside the pipeline.
"""

from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    """The text-generation provider failed to produce a response.

    ``kind`` names the generation kind that was being produced so the caller
    can retry that request alone. ``transient`` marks failures worth retrying
    (rate limits, timeouts, dropped connections, provider 5xx).
    """

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.transient = transient

    def __str__(self) -> str:
        if self.kind:
            return f"{self.kind}: {self.message}"
        return self.message


class ProviderError(GenerationError):
    """Raised by GenerativeClient implementations."""


class GenerationTimeout(GenerationError):
    """The provider call did not finish within the configured timeout."""

    def __init__(self, message: str, kind: Optional[str] = None) -> None:
        super().__init__(message, kind=kind, transient=True)


class GenerationCancelled(GenerationError):
    """The caller cancelled the request before or after the provider call."""
