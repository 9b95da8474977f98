"""
scavenger-consolidate: command line front end.

Subcommands
-----------
template
    Write the wallet CSV template (WalletNumber,MnemonicPhrase,WalletName).

consolidate
    Read the filled template, sign a claim for every wallet and submit it
    through the relay to the Scavenger API.

relay
    Serve the /api/consolidate relay.

Outputs (consolidate, per run folder)
-------------------------------------
- log.jsonl        : one JSON result per wallet, written as each completes
- summary.csv      : one row per wallet
- job_summary.txt  : human-readable summary

Security note
-------------
Mnemonics are read from the CSV only; they are never logged or written to
the run folder. Keep the filled template somewhere safe and delete it when
you are done.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import requests

from .config import (
    BACKOFF_BASE_SECONDS,
    DEFAULT_API_URL,
    DEFAULT_RELAY_HOST,
    DEFAULT_RELAY_PORT,
    DEFAULT_RELAY_URL,
    MAX_ATTEMPTS,
    NETWORK_IDS,
    PACE_SECONDS,
    REQUEST_TIMEOUT,
    TEMPLATE_FILENAME,
    Settings,
)
from .errors import ConsolidatorError, ValidationError
from .logging_utils import configure_logging
from .models import WalletResult, WalletStatus
from .orchestrator import BatchOrchestrator
from .registry import STATUS_MESSAGES, RegistryClient
from .relay import create_app
from .signing import SigningAdapter
from .template import load_wallets, write_template

logger = logging.getLogger(__name__)


# ------------------------ helpers ------------------------

def validate_recipient(addr: str, network_tag: str) -> str:
    """Basic recipient address sanity checks."""
    addr = addr.strip()
    if not addr:
        raise ValidationError("recipient address is empty")
    if len(addr) < 20:
        logger.warning("recipient address looks unusually short")

    if network_tag == "mainnet" and addr.startswith("addr_test1"):
        raise ValidationError("recipient address looks like testnet but --network-tag=mainnet")
    if network_tag == "testnet" and addr.startswith("addr1"):
        raise ValidationError("recipient address looks like mainnet but --network-tag=testnet")
    return addr


def human_bucket(result: WalletResult) -> str:
    """
    Bucket results for the job summary:
      consolidated    : registry accepted the claim
      already_donated : 409, nothing to do
      failed          : everything else
    """
    if result.status is WalletStatus.SUCCESS:
        return "consolidated"
    if result.message == STATUS_MESSAGES[409]:
        return "already_donated"
    return "failed"


def write_summary_csv(path: Path, results: Sequence[WalletResult]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["wallet_number", "wallet_name", "donor_address", "status",
                    "solutions_consolidated", "detail"])
        for r in results:
            w.writerow([
                r.wallet_number,
                r.wallet_name,
                r.donor_address or "",
                r.status.value,
                r.solutions_consolidated,
                r.error or r.message or "",
            ])


def write_job_summary(path: Path, run_dir: Path, recipient: str, results: Sequence[WalletResult]) -> None:
    counts = {"consolidated": 0, "already_donated": 0, "failed": 0}
    lines: List[str] = []
    lines.append("=== Scavenger Consolidation Job Summary ===")
    lines.append(f"run_folder      : {run_dir.name}")
    lines.append(f"recipient       : {recipient}")
    lines.append(f"total_wallets   : {len(results)}")
    lines.append("")
    lines.append("Results:")
    for r in results:
        bucket = human_bucket(r)
        counts[bucket] += 1
        label = f"Wallet {r.wallet_number} ({r.wallet_name})"
        if bucket == "consolidated":
            lines.append(f"- {label}: consolidated, {r.solutions_consolidated} solutions")
        elif bucket == "already_donated":
            lines.append(f"- {label}: already donated")
        else:
            lines.append(f"- {label}: failed ({r.error or r.message})")
    lines.append("")
    lines.append(f"consolidated    : {counts['consolidated']}")
    lines.append(f"already_donated : {counts['already_donated']}")
    lines.append(f"failed          : {counts['failed']}")
    lines.append(f"solutions       : {sum(r.solutions_consolidated for r in results)}")

    with path.open("w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def print_result(result: WalletResult, position: int, total: int) -> None:
    print("-" * 72)
    print(f"[{position}/{total}] Wallet {result.wallet_number}: {result.wallet_name}")
    if result.donor_address:
        print(f"  donor : {result.donor_address[:20]}...{result.donor_address[-10:]}")
    if result.status is WalletStatus.SUCCESS:
        print(f"  OK    : {result.message or 'consolidated'}")
        if result.solutions_consolidated > 0:
            print(f"  solutions consolidated: {result.solutions_consolidated}")
    else:
        print(f"  ERROR : {result.error or result.message}")


# ------------------------ commands ------------------------

def cmd_template(args: argparse.Namespace) -> int:
    path = write_template(Path(args.out), args.count)
    print(f"Wrote template for {args.count} wallets: {path}")
    return 0


def cmd_consolidate(args: argparse.Namespace) -> int:
    settings = Settings(
        relay_url=args.relay_url,
        network_tag=args.network_tag,
        backoff_base=args.backoff_base,
        max_attempts=args.max_attempts,
        pace_seconds=args.pace,
        timeout=args.timeout,
    )
    recipient = validate_recipient(args.recipient, settings.network_tag)
    wallets = load_wallets(Path(args.csv))
    if not wallets:
        print("Nothing to do: no rows with a mnemonic in the CSV", file=sys.stderr)
        return 1

    base_dir = Path(args.out_dir)
    run_ts = time.strftime("%Y%m%dT%H%M%SZ", time.gmtime())
    run_dir = base_dir / f"run-{run_ts}"
    run_dir.mkdir(parents=True, exist_ok=True)
    log_path = run_dir / "log.jsonl"
    summary_csv_path = run_dir / "summary.csv"
    job_summary_path = run_dir / "job_summary.txt"

    print("Scavenger Consolidator")
    print(f"Relay URL     : {settings.relay_url}")
    print(f"Network       : {settings.network_tag}")
    print(f"Wallets total : {len(wallets)}")
    print(f"Recipient     : {recipient}")
    print(f"Run directory : {run_dir}")
    print()

    session = requests.Session()
    orchestrator = BatchOrchestrator(
        SigningAdapter(network_id=settings.network_id),
        RegistryClient(
            settings.relay_url,
            session,
            max_attempts=settings.max_attempts,
            backoff_base=settings.backoff_base,
            timeout=settings.timeout,
        ),
        pace_seconds=settings.pace_seconds,
    )

    with log_path.open("a", encoding="utf-8") as log_f:
        def on_progress(results: Tuple[WalletResult, ...]) -> None:
            latest = results[-1]
            log_f.write(json.dumps(latest.to_dict()) + "\n")
            log_f.flush()
            print_result(latest, len(results), len(wallets))

        results = orchestrator.run(wallets, recipient, progress=on_progress)

    write_summary_csv(summary_csv_path, results)
    write_job_summary(job_summary_path, run_dir, recipient, results)

    print("\nWrote:")
    print(f"  {log_path}")
    print(f"  {summary_csv_path}")
    print(f"  {job_summary_path}")
    return 0


def cmd_relay(args: argparse.Namespace) -> int:
    app = create_app(api_url=args.api_url, timeout=args.timeout)
    app.run(host=args.host, port=args.port)
    return 0


# ------------------------ main ------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="scavenger-consolidate",
        description="Consolidate Scavenger rewards from many wallets into one recipient address.",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    tp = sub.add_parser("template", help="Write the wallet CSV template")
    tp.add_argument("--count", type=int, required=True, help="Number of wallets")
    tp.add_argument("--out", default=TEMPLATE_FILENAME, help=f"Output path (default: {TEMPLATE_FILENAME})")
    tp.set_defaults(func=cmd_template)

    cp = sub.add_parser("consolidate", help="Sign and submit a claim for every wallet in the CSV")
    cp.add_argument("--csv", required=True, help="Filled template: WalletNumber,MnemonicPhrase,WalletName")
    cp.add_argument("--recipient", required=True, help="Recipient addr1... receiving all rewards")
    cp.add_argument("--relay-url", default=DEFAULT_RELAY_URL, help=f"Relay endpoint (default: {DEFAULT_RELAY_URL})")
    cp.add_argument("--network-tag", choices=sorted(NETWORK_IDS), default="mainnet",
                    help="Network used for donor address derivation (default: mainnet)")
    cp.add_argument("--backoff-base", type=float, default=BACKOFF_BASE_SECONDS,
                    help=f"Base seconds for exponential backoff on 429/408 (default: {BACKOFF_BASE_SECONDS})")
    cp.add_argument("--max-attempts", type=int, default=MAX_ATTEMPTS,
                    help=f"Submission attempts per wallet (default: {MAX_ATTEMPTS})")
    cp.add_argument("--pace", type=float, default=PACE_SECONDS,
                    help=f"Seconds to wait between wallets (default: {PACE_SECONDS})")
    cp.add_argument("--timeout", type=int, default=REQUEST_TIMEOUT, help="HTTP timeout in seconds")
    cp.add_argument("--out-dir", default="consolidate-logs",
                    help="Base output directory; a timestamped run subfolder will be created inside")
    cp.set_defaults(func=cmd_consolidate)

    rp = sub.add_parser("relay", help="Serve the /api/consolidate relay")
    rp.add_argument("--host", default=DEFAULT_RELAY_HOST)
    rp.add_argument("--port", type=int, default=DEFAULT_RELAY_PORT)
    rp.add_argument("--api-url", default=DEFAULT_API_URL, help="Scavenger API base URL")
    rp.add_argument("--timeout", type=int, default=REQUEST_TIMEOUT, help="HTTP timeout in seconds")
    rp.set_defaults(func=cmd_relay)

    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        return args.func(args)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except ConsolidatorError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        return 130
