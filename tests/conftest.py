from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

import pytest

# BIP-39 test vectors
MNEMONIC_A = ("abandon " * 11 + "about").split()
MNEMONIC_B = ("zoo " * 11 + "wrong").split()

RECIPIENT = "addr1q9recipientrecipientrecipientrecipientrecipient0000"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        if body is None:
            self.text = ""
        elif isinstance(body, str):
            self.text = body
        else:
            self.text = json.dumps(body)
        self.content = self.text.encode("utf-8")
        self.headers = headers if headers is not None else {"Content-Type": "application/json"}
        self.reason = reason


class FakeSession:
    """Returns scripted responses in order; an Exception entry is raised instead."""

    def __init__(self, *script: Union[FakeResponse, Exception]) -> None:
        self.script = list(script)
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()
