import json

import pytest

from scavenger_consolidator import cli
from scavenger_consolidator.errors import ValidationError
from scavenger_consolidator.models import WalletResult, WalletStatus
from scavenger_consolidator.registry import STATUS_MESSAGES

from conftest import MNEMONIC_A, MNEMONIC_B, RECIPIENT, FakeResponse, FakeSession


def test_validate_recipient():
    assert cli.validate_recipient(f"  {RECIPIENT} ", "mainnet") == RECIPIENT
    with pytest.raises(ValidationError, match="empty"):
        cli.validate_recipient("   ", "mainnet")
    with pytest.raises(ValidationError, match="testnet"):
        cli.validate_recipient("addr_test1qxyzxyzxyzxyzxyzxyz", "mainnet")
    with pytest.raises(ValidationError, match="mainnet"):
        cli.validate_recipient(RECIPIENT, "testnet")


def test_human_bucket():
    def result(status, message=None):
        return WalletResult(wallet_number="1", wallet_name="W", status=status, message=message)

    assert cli.human_bucket(result(WalletStatus.SUCCESS)) == "consolidated"
    assert cli.human_bucket(result(WalletStatus.ERROR, STATUS_MESSAGES[409])) == "already_donated"
    assert cli.human_bucket(result(WalletStatus.ERROR, "HTTP 500")) == "failed"


def test_template_command(tmp_path, capsys):
    out = tmp_path / "t.csv"
    assert cli.main(["template", "--count", "2", "--out", str(out)]) == 0
    assert out.read_text(encoding="utf-8").splitlines()[0] == "WalletNumber,MnemonicPhrase,WalletName"
    assert "2 wallets" in capsys.readouterr().out


def test_template_command_rejects_zero(tmp_path):
    assert cli.main(["template", "--count", "0", "--out", str(tmp_path / "t.csv")]) == 2


def test_consolidate_rejects_bad_recipient(tmp_path, capsys):
    code = cli.main(["consolidate", "--csv", str(tmp_path / "x.csv"), "--recipient", "addr_test1qabc"])
    assert code == 2
    assert "ERROR" in capsys.readouterr().err


def test_consolidate_missing_csv(tmp_path):
    code = cli.main(["consolidate", "--csv", str(tmp_path / "missing.csv"), "--recipient", RECIPIENT])
    assert code == 1


def test_consolidate_writes_run_artifacts(tmp_path, monkeypatch, capsys):
    csv_path = tmp_path / "wallets.csv"
    csv_path.write_text(
        "WalletNumber,MnemonicPhrase,WalletName\n"
        f'1,"{" ".join(MNEMONIC_A)}","Main"\n'
        '2,"","Unused"\n'
        f'3,"{" ".join(MNEMONIC_B)}",""\n'
        '4,"abandon abandon","Typo"\n',
        encoding="utf-8",
    )
    session = FakeSession(
        FakeResponse(200, {"message": "Donation recorded", "solutions_consolidated": 9}),
        FakeResponse(409, {"message": "duplicate"}),
    )
    monkeypatch.setattr(cli.requests, "Session", lambda: session)

    code = cli.main([
        "consolidate", "--csv", str(csv_path), "--recipient", RECIPIENT,
        "--pace", "0", "--out-dir", str(tmp_path / "logs"),
    ])
    assert code == 0

    run_dir = next((tmp_path / "logs").iterdir())
    log_lines = [json.loads(line) for line in (run_dir / "log.jsonl").read_text().splitlines()]
    assert [r["walletNumber"] for r in log_lines] == ["1", "3", "4"]
    assert [r["status"] for r in log_lines] == ["success", "error", "error"]
    assert log_lines[0]["solutionsConsolidated"] == 9
    assert log_lines[1]["walletName"] == "Wallet 3"
    assert "Processing failed" in log_lines[2]["error"]

    summary = (run_dir / "job_summary.txt").read_text()
    assert "consolidated    : 1" in summary
    assert "already_donated : 1" in summary
    assert "failed          : 1" in summary

    written = (run_dir / "summary.csv").read_text() + (run_dir / "log.jsonl").read_text()
    assert MNEMONIC_A[0] + " " + MNEMONIC_A[1] not in written
    assert "Wallet 3" in capsys.readouterr().out
