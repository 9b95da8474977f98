"""Defaults and run settings."""

from __future__ import annotations

from dataclasses import dataclass


DONATE_MESSAGE_PREFIX = "Assign accumulated Scavenger rights to: "
DEFAULT_API_URL = "https://scavenger.prod.gd.midnighttge.io"
RELAY_USER_AGENT = "ScavengerMine-Consolidation-Tool/1.0"
RELAY_PATH = "/api/consolidate"
DEFAULT_RELAY_HOST = "127.0.0.1"
DEFAULT_RELAY_PORT = 3000
DEFAULT_RELAY_URL = f"http://{DEFAULT_RELAY_HOST}:{DEFAULT_RELAY_PORT}{RELAY_PATH}"

BACKOFF_BASE_SECONDS = 20.0
MAX_ATTEMPTS = 3
PACE_SECONDS = 2.0
REQUEST_TIMEOUT = 60

NETWORK_IDS = {"mainnet": 1, "testnet": 0}

TEMPLATE_HEADER = ("WalletNumber", "MnemonicPhrase", "WalletName")
TEMPLATE_FILENAME = "scavenger_consolidation_template.csv"


@dataclass(frozen=True)
class Settings:
    relay_url: str = DEFAULT_RELAY_URL
    network_tag: str = "mainnet"
    backoff_base: float = BACKOFF_BASE_SECONDS
    max_attempts: int = MAX_ATTEMPTS
    pace_seconds: float = PACE_SECONDS
    timeout: int = REQUEST_TIMEOUT

    @property
    def network_id(self) -> int:
        return NETWORK_IDS[self.network_tag]


def build_message(recipient: str) -> str:
    """The claim text the registry verifies; must match byte-for-byte."""
    return f"{DONATE_MESSAGE_PREFIX}{recipient}"
