"""Error taxonomy for the consolidator."""

from __future__ import annotations

from typing import Optional


class ConsolidatorError(RuntimeError):
    """Base class for every error raised by this package."""


class ValidationError(ConsolidatorError):
    """Malformed input (relay body, recipient address, CLI arguments). Never retried."""


class TemplateError(ConsolidatorError):
    """The uploaded wallet CSV cannot be read or lacks the required columns."""


class SigningError(ConsolidatorError):
    """Bad mnemonic, foreign address, or a signature of an unusable shape."""


class ServiceError(ConsolidatorError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TransientServiceError(ServiceError):
    """429 / 408 or a network failure: retried up to the attempt cap."""


class TerminalServiceError(ServiceError):
    """Any other non-2xx response: surfaced immediately, never retried."""
