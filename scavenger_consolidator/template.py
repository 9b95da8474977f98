"""
Wallet CSV template.

Format (header required):
  WalletNumber,MnemonicPhrase,WalletName
  1,"","Wallet 1"
  2,"","Wallet 2"

The user fills in MnemonicPhrase. On upload, rows with an empty mnemonic
are skipped and a missing WalletName defaults to "Wallet <row>".
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import List, TextIO

from .config import TEMPLATE_HEADER
from .errors import TemplateError, ValidationError
from .models import WalletInput

logger = logging.getLogger(__name__)


def render_template(count: int) -> str:
    if count <= 0:
        raise ValidationError("Please enter a valid number of wallets")
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buf.write(",".join(TEMPLATE_HEADER) + "\n")
    for i in range(1, count + 1):
        w.writerow([i, "", f"Wallet {i}"])
    return buf.getvalue()


def write_template(path: Path, count: int) -> Path:
    content = render_template(count)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(content)
    return path


def _clean(value: object) -> str:
    return str(value or "").replace('"', "").strip()


def parse_wallets(f: TextIO) -> List[WalletInput]:
    reader = csv.DictReader(f)
    required = set(TEMPLATE_HEADER[:2])
    if not required.issubset(reader.fieldnames or []):
        raise TemplateError(f"CSV must have columns: {', '.join(TEMPLATE_HEADER)}")

    wallets: List[WalletInput] = []
    for row_no, rec in enumerate(reader, start=1):
        words = tuple(_clean(rec.get("MnemonicPhrase")).split())
        if not words:
            logger.debug("Skipping CSV row %d: empty mnemonic", row_no)
            continue
        wallets.append(WalletInput(
            wallet_number=_clean(rec.get("WalletNumber")),
            mnemonic=words,
            wallet_name=_clean(rec.get("WalletName")) or f"Wallet {row_no}",
        ))
    return wallets


def load_wallets(path: Path) -> List[WalletInput]:
    try:
        with path.open(newline="", encoding="utf-8-sig") as f:
            return parse_wallets(f)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise TemplateError(f"Cannot read wallet CSV {path}: {e}") from e
