import json
import logging

import pytest

import fairplay.config as config
from fairplay.cli import main

SEEDS = ["--server", "abc123", "--client", "xyz789"]
HASH = "6ca13d52ca70c883e0f0bb101e425a89e8624de51db2d2392593af6a84118090"


@pytest.fixture(autouse=True)
def restore_log_streams():
    """main() points package loggers at stderr; undo that after each test."""
    handlers = [h for name, lg in logging.root.manager.loggerDict.items()
                if name.startswith("fairplay") and isinstance(lg, logging.Logger)
                for h in lg.handlers if isinstance(h, logging.StreamHandler)]
    saved = [(h, h.stream) for h in handlers]
    default = config._log_stream
    yield
    for h, stream in saved:
        # capsys has already closed the stream main() set, so setStream's flush would fail
        h.stream = stream
    config._log_stream = default


def test_hash(capsys):
    main(["hash", "--server", "abc123"])
    assert capsys.readouterr().out.strip() == HASH


def test_float(capsys):
    main(["float", *SEEDS, "--nonce", "1", "--rounds", "2", "--digest"])
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("nonce=1  f=0.274546974654607")
    assert "hmac=4648b5e55b76a" in lines[0]


def test_seed(capsys):
    main(["seed", "--reveal"])
    out = dict(line.split("=", 1) for line in capsys.readouterr().out.splitlines())
    assert len(out["server_seed_hash"]) == 64
    assert len(out["client_seed"]) == 32


def test_outcome_plinko(capsys):
    main(["outcome", "--game", "plinko", *SEEDS, "--nonce", "1", "--rows", "8", "--risk", "medium"])
    out = capsys.readouterr().out
    assert "final_slot: 5" in out
    assert "multiplier: 0.7" in out


def test_verify_json(capsys):
    main(["verify", "--game", "mines", *SEEDS, "--hash", HASH, "--nonce", "1", "--expected", "19,5,14",
          "--mines", "3", "--json"])
    res = json.loads(capsys.readouterr().out)
    assert res["isValid"] is True


def test_verify_text(capsys):
    main(["verify", "--game", "dice", *SEEDS, "--hash", HASH, "--nonce", "1", "--expected", "27.45",
          "--target", "50"])
    out = capsys.readouterr().out
    assert out.strip().splitlines()[-1] == "VALID"
    assert "MISMATCH" not in out


def test_invalid_input_exits_2(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["verify", "--game", "limbo", *SEEDS, "--hash", "nothex", "--nonce", "1", "--expected", "3.6"])
    assert exc.value.code == 2
    assert "64 hexadecimal" in capsys.readouterr().err


def test_verify_log(tmp_path, capsys):
    log = tmp_path / "bets.json"
    log.write_text(json.dumps([{
        "server_seed": "abc123", "server_seed_hash": HASH, "client_seed": "xyz789", "nonce": 1,
        "game_type": "limbo", "expected_outcome": 3.6,
    }]), encoding="utf-8")
    out = tmp_path / "results.csv"
    main(["verify-log", "--data", str(log), "--out", str(out)])
    assert "Verified 1 bets: 1 valid, 0 invalid" in capsys.readouterr().out
    assert out.exists()


def test_audit(capsys):
    main(["audit", *SEEDS, "--n", "300"])
    assert "Derived floats (n=300)" in capsys.readouterr().out


def test_verify_json_mismatch_keeps_stdout_parseable(capsys):
    main(["verify", "--game", "limbo", *SEEDS, "--hash", HASH, "--nonce", "1", "--expected", "5", "--json"])
    captured = capsys.readouterr()
    res = json.loads(captured.out)
    assert res["isValid"] is False
    assert res["outcomeMatch"] is False
    assert "Verification failed" in captured.err
