"""Consolidate Scavenger rewards from many donor wallets into one recipient address."""

from .errors import (
    ConsolidatorError,
    SigningError,
    TemplateError,
    TerminalServiceError,
    TransientServiceError,
    ValidationError,
)
from .models import WalletInput, WalletResult, WalletStatus
from .orchestrator import BatchOrchestrator
from .registry import RegistryClient
from .signing import SigningAdapter

__version__ = "0.1.0"

__all__ = [
    "BatchOrchestrator",
    "ConsolidatorError",
    "RegistryClient",
    "SigningAdapter",
    "SigningError",
    "TemplateError",
    "TerminalServiceError",
    "TransientServiceError",
    "ValidationError",
    "WalletInput",
    "WalletResult",
    "WalletStatus",
]
