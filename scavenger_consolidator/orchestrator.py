"""
Batch orchestrator.

Processes donor wallets strictly one after another:

  derive address -> build claim message -> sign -> submit -> record result

A failure in any step is recorded as an ``error`` result for that wallet
only; the batch always yields one terminal result per input wallet, in
input order. Between wallets the orchestrator pauses for a constant delay
to stay under the registry's rate limit.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .config import PACE_SECONDS, build_message
from .models import Failure, Success, WalletInput, WalletResult, WalletStatus
from .registry import RegistryClient
from .signing import SigningAdapter

logger = logging.getLogger(__name__)

ProgressSink = Callable[[Tuple[WalletResult, ...]], None]


def solutions_from(body: Any) -> int:
    if not isinstance(body, dict):
        return 0
    val = body.get("solutions_consolidated")
    try:
        count = int(val) if val is not None else 0
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def message_from(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        msg = body.get("message")
        return str(msg) if msg is not None else None
    if isinstance(body, str) and body:
        return body
    return None


class BatchOrchestrator:
    def __init__(
        self,
        signer: SigningAdapter,
        registry: RegistryClient,
        *,
        pace_seconds: float = PACE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.signer = signer
        self.registry = registry
        self.pace_seconds = pace_seconds
        self.sleep = sleep

    def process_wallet(self, wallet: WalletInput, recipient: str) -> WalletResult:
        donor: Optional[str] = None
        try:
            message = build_message(recipient)
            with self.signer.identity(wallet.mnemonic) as identity:
                donor = identity.address
                signature = identity.sign(message, donor)

            outcome = self.registry.submit(recipient, donor, signature)
        except Exception as e:
            logger.warning("Wallet %s (%s) failed: %s", wallet.wallet_number, wallet.wallet_name, e)
            return WalletResult(
                wallet_number=wallet.wallet_number,
                wallet_name=wallet.wallet_name,
                status=WalletStatus.ERROR,
                donor_address=donor,
                error=f"Processing failed: {e}",
            )

        if isinstance(outcome, Success):
            return WalletResult(
                wallet_number=wallet.wallet_number,
                wallet_name=wallet.wallet_name,
                status=WalletStatus.SUCCESS,
                donor_address=donor,
                message=message_from(outcome.body),
                solutions_consolidated=solutions_from(outcome.body),
            )
        return self._failed(wallet, donor, outcome)

    @staticmethod
    def _failed(wallet: WalletInput, donor: Optional[str], outcome: Failure) -> WalletResult:
        return WalletResult(
            wallet_number=wallet.wallet_number,
            wallet_name=wallet.wallet_name,
            status=WalletStatus.ERROR,
            donor_address=donor,
            message=outcome.error,
            solutions_consolidated=0,
        )

    def run(
        self,
        wallets: Sequence[WalletInput],
        recipient: str,
        progress: Optional[ProgressSink] = None,
    ) -> List[WalletResult]:
        logger.info("Processing %d wallets", len(wallets))
        results: Tuple[WalletResult, ...] = ()
        for i, wallet in enumerate(wallets):
            logger.info("Processing wallet %s: %s", wallet.wallet_number, wallet.wallet_name)
            result = self.process_wallet(wallet, recipient)
            results = results + (result,)
            if progress is not None:
                try:
                    progress(results)
                except Exception:
                    logger.exception("Progress sink failed after wallet %s", wallet.wallet_number)
            if i < len(wallets) - 1 and self.pace_seconds > 0:
                self.sleep(self.pace_seconds)
        return list(results)
