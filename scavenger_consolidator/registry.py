"""
Registry client.

Submits a signed claim to the relay and classifies the response:

  2xx        -> Success (JSON body, or raw text)
  429 / 408  -> transient, exponential backoff (20s, 40s, ...)
  network    -> transient, same backoff
  other      -> terminal, mapped to a human-readable message

One attempt counter covers both transient paths, so a wallet never gets
more than ``max_attempts`` submissions in total.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional

import requests

from .config import BACKOFF_BASE_SECONDS, DEFAULT_RELAY_URL, MAX_ATTEMPTS, REQUEST_TIMEOUT
from .errors import TerminalServiceError, TransientServiceError
from .models import ConsolidationClaim, Failure, Outcome, Success

logger = logging.getLogger(__name__)

TRANSIENT_STATUSES = {408, 429}

STATUS_MESSAGES = {
    409: "409 Conflict: You already donated from this address - no action needed",
    400: "400 Bad Request: Invalid signature - ensure message format is exact",
    404: "404 Not Found: Address not registered in Scavenger Mine",
}

MAX_ATTEMPTS_MESSAGE = "Max retry attempts reached"


def backoff_delay(attempt: int, base: float = BACKOFF_BASE_SECONDS) -> float:
    """Delay before retrying after failed attempt number ``attempt`` (1-based)."""
    return base * (2 ** (attempt - 1))


def parse_body(text: str) -> Any:
    """JSON if it parses, otherwise the raw text."""
    if not text:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def error_message(status: int, body: Any, reason: str = "") -> str:
    if status in STATUS_MESSAGES:
        return STATUS_MESSAGES[status]
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        if detail:
            return str(detail)
        return f"HTTP {status}"
    message = f"HTTP {status}"
    if reason:
        message += f": {reason}"
    return message


class RegistryClient:
    def __init__(
        self,
        relay_url: str = DEFAULT_RELAY_URL,
        session: Optional[requests.Session] = None,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_base: float = BACKOFF_BASE_SECONDS,
        timeout: int = REQUEST_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.relay_url = relay_url
        self.session = session or requests.Session()
        self.max_attempts = max(max_attempts, 1)
        self.backoff_base = backoff_base
        self.timeout = timeout
        self.sleep = sleep

    def _attempt(self, claim: ConsolidationClaim) -> Success:
        """One POST to the relay; raises Transient/TerminalServiceError on failure."""
        try:
            resp = self.session.post(
                self.relay_url,
                json=claim.to_json(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransientServiceError(str(e)) from e

        body = parse_body(resp.text)
        if 200 <= resp.status_code < 300:
            return Success(body=body, status=resp.status_code)
        if resp.status_code in TRANSIENT_STATUSES:
            raise TransientServiceError(f"HTTP {resp.status_code}", status=resp.status_code)
        raise TerminalServiceError(
            error_message(resp.status_code, body, resp.reason or ""),
            status=resp.status_code,
        )

    def submit(self, recipient: str, donor: str, signature: str) -> Outcome:
        claim = ConsolidationClaim(recipient=recipient, donor=donor, signature=signature)
        attempts = 0
        last_status: Optional[int] = None
        while attempts < self.max_attempts:
            attempts += 1
            try:
                outcome = self._attempt(claim)
            except TerminalServiceError as e:
                logger.info("Registry rejected %s: %s", donor, e)
                return Failure(error=str(e), status=e.status, attempts=attempts)
            except TransientServiceError as e:
                last_status = e.status
                if attempts >= self.max_attempts:
                    if e.status is None:
                        return Failure(
                            error=f"Network error after {self.max_attempts} attempts: {e}",
                            attempts=attempts,
                        )
                    break
                delay = backoff_delay(attempts, self.backoff_base)
                if e.status is None:
                    logger.warning("Network error attempt %d/%d: %s", attempts, self.max_attempts, e)
                else:
                    logger.warning("Rate limited attempt %d/%d, retrying in %.0fs", attempts, self.max_attempts, delay)
                self.sleep(delay)
                continue
            logger.info("Registry accepted %s (HTTP %d)", donor, outcome.status)
            return outcome

        return Failure(error=MAX_ATTEMPTS_MESSAGE, status=last_status, attempts=attempts)
