"""Data types shared by the signer, the registry client and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


# ------------------------ inputs ------------------------

@dataclass(frozen=True)
class WalletInput:
    wallet_number: str
    mnemonic: Tuple[str, ...] = field(repr=False)
    wallet_name: str


@dataclass(frozen=True)
class ConsolidationClaim:
    recipient: str
    donor: str
    signature: str

    def to_json(self) -> Dict[str, str]:
        return {"recipient": self.recipient, "donor": self.donor, "signature": self.signature}


# ------------------------ signatures ------------------------

@dataclass(frozen=True)
class RawSignature:
    value: str


@dataclass(frozen=True)
class StructuredSignature:
    signature: str   # COSE_Sign1 hex
    key: str = ""    # COSE_Key hex


SignatureResult = Union[RawSignature, StructuredSignature]


# ------------------------ registry outcomes ------------------------

@dataclass(frozen=True)
class Success:
    body: Any   # parsed JSON, or raw text when the body is not JSON
    status: int = 200


@dataclass(frozen=True)
class Failure:
    error: str
    status: Optional[int] = None
    attempts: int = 1


Outcome = Union[Success, Failure]


# ------------------------ results ------------------------

class WalletStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    PENDING = "pending"   # type-level placeholder; never recorded by the orchestrator


@dataclass(frozen=True)
class WalletResult:
    wallet_number: str
    wallet_name: str
    status: WalletStatus
    donor_address: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    solutions_consolidated: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status is not WalletStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """camelCase record consumed by presentation layers."""
        data: Dict[str, Any] = {
            "walletNumber": self.wallet_number,
            "walletName": self.wallet_name,
            "status": self.status.value,
            "solutionsConsolidated": self.solutions_consolidated,
        }
        if self.donor_address is not None:
            data["donorAddress"] = self.donor_address
        if self.message is not None:
            data["message"] = self.message
        if self.error is not None:
            data["error"] = self.error
        return data
