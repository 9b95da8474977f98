"""
Signing adapter.

Derives the donor base address from a mnemonic (CIP-1852) and signs the
claim message as a CIP-8 COSE_Sign1 structure, the same shape a CIP-30
wallet returns from signData.

Derivation path (CIP-1852):
  payment: m / 1852' / 1815' / ACCOUNT' / 0 / INDEX
  stake  : m / 1852' / 1815' / ACCOUNT' / 2 / 0
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

import cbor2
from pycardano import (
    Address,
    HDWallet,
    Network,
    PaymentVerificationKey,
    StakeVerificationKey,
)
from pycardano.crypto.bip32 import BIP32ED25519PrivateKey

from .config import NETWORK_IDS
from .errors import SigningError
from .models import RawSignature, SignatureResult, StructuredSignature

logger = logging.getLogger(__name__)

VALID_WORD_COUNTS = {12, 15, 18, 21, 24}


def normalize_mnemonic(mnemonic: Union[str, Sequence[str]]) -> str:
    """Join and validate the word count; checksum is checked by the HD wallet."""
    if isinstance(mnemonic, str):
        words = mnemonic.split()
    else:
        words = [w for w in (str(x).strip() for x in mnemonic) if w]
    if not words:
        raise SigningError("Mnemonic is empty")
    if len(words) not in VALID_WORD_COUNTS:
        raise SigningError(f"Mnemonic has {len(words)} words (expected 12/15/18/21/24)")
    return " ".join(words)


def normalize_signature(result: Any) -> str:
    """
    Collapse a signData result into the signature string.

    Accepts a RawSignature or plain string, or anything exposing a
    ``signature`` string (StructuredSignature, a mapping, a wallet object).
    """
    if result is None:
        raise SigningError("Failed to sign message")
    if isinstance(result, RawSignature):
        value = result.value
    elif isinstance(result, str):
        value = result
    elif isinstance(result, Mapping):
        value = result.get("signature")
    else:
        value = getattr(result, "signature", None)
    if not isinstance(value, str) or not value:
        raise SigningError("Invalid signature format")
    return value


class SigningIdentity:
    """
    Key material for a single donor wallet.

    Use as a context manager; keys are dropped on exit whether or not
    signing succeeded.
    """

    def __init__(self, address: Address, xprivate_key: bytes, chain_code: bytes, public_key: bytes) -> None:
        self._address = address
        self._xprivate_key: Optional[bytes] = xprivate_key
        self._chain_code: Optional[bytes] = chain_code
        self._public_key = public_key

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<SigningIdentity {self.address} ({state})>"

    def __enter__(self) -> "SigningIdentity":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def address(self) -> str:
        return str(self._address)

    @property
    def closed(self) -> bool:
        return self._xprivate_key is None

    def close(self) -> None:
        self._xprivate_key = None
        self._chain_code = None

    def sign_data(self, message: str, address: str) -> SignatureResult:
        """CIP-8 sign ``message`` for ``address``; returns the structured result."""
        if self.closed:
            raise SigningError("Signing identity already released")
        if address != self.address:
            raise SigningError("Address does not belong to this wallet")

        payload = message.encode("utf-8")
        protected = cbor2.dumps({1: -8, "address": self._address.to_primitive()})
        sig_structure = cbor2.dumps(["Signature1", protected, b"", payload])

        key = BIP32ED25519PrivateKey(private_key=self._xprivate_key, chain_code=self._chain_code)
        signature_bytes = key.sign(sig_structure)
        if not signature_bytes:
            raise SigningError("Failed to sign message")

        cose_sign1 = cbor2.dumps([protected, {"hashed": False}, payload, signature_bytes])
        cose_key = cbor2.dumps({1: 1, 3: -8, -1: 6, -2: self._public_key})
        return StructuredSignature(signature=cose_sign1.hex(), key=cose_key.hex())

    def sign(self, message: str, address: str) -> str:
        return normalize_signature(self.sign_data(message, address))


class SigningAdapter:
    """Turns mnemonics into single-use signing identities."""

    def __init__(self, network_id: int = NETWORK_IDS["mainnet"], account: int = 0, index: int = 0) -> None:
        self.network = Network(network_id)
        self.account = account
        self.index = index

    def identity(self, mnemonic: Union[str, Sequence[str]]) -> SigningIdentity:
        phrase = normalize_mnemonic(mnemonic)
        try:
            root = HDWallet.from_mnemonic(phrase)
        except ValueError as e:
            raise SigningError(f"Invalid mnemonic: {e}") from e

        account = root.derive_from_path(f"m/1852'/1815'/{self.account}'")
        payment = account.derive_from_path(f"m/0/{self.index}")
        stake = account.derive_from_path("m/2/0")

        address = Address(
            payment_part=PaymentVerificationKey.from_primitive(payment.public_key).hash(),
            staking_part=StakeVerificationKey.from_primitive(stake.public_key).hash(),
            network=self.network,
        )
        return SigningIdentity(address, payment.xprivate_key, payment.chain_code, payment.public_key)

    def derive(self, mnemonic: Union[str, Sequence[str]]) -> str:
        with self.identity(mnemonic) as identity:
            return identity.address
