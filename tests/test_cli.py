from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from multibridge import cli
from multibridge.chains import ARBITRUM, INK, OPTIMISM
from multibridge.exceptions import InvalidSelection


def _args(*argv: str):
    return cli.build_parser().parse_args(list(argv))


def test_flags_only_configuration() -> None:
    args = _args("--source", "2", "--destinations", "3,4", "--cycles", "2", "--amount", "0.02")
    config = cli.prompt_run_config(args, prompt=_no_prompt, interactive=False)

    assert config.source_chain == OPTIMISM
    assert config.destination_chains == (ARBITRUM, INK)
    assert config.cycles == 2
    assert config.amount == Decimal("0.02")
    assert config.destination_gas == 0


def test_interactive_prompts_use_defaults(capsys: pytest.CaptureFixture[str]) -> None:
    answers = iter(["2", "1,2,3", "", "", "", "", "y", "0.0002"])
    config = cli.prompt_run_config(_args(), prompt=lambda _: next(answers), interactive=True)

    assert config.source_chain == OPTIMISM
    assert [chain.chain_id for chain in config.destination_chains] == [8453, 42161]
    assert config.cycles == 1
    assert config.amount == Decimal("0.01")
    assert config.slippage == Decimal("0.005")
    assert config.destination_gas == Decimal("0.0002")
    assert "Select the SOURCE chain" in capsys.readouterr().out


def test_invalid_source_selection() -> None:
    with pytest.raises(InvalidSelection):
        cli.prompt_run_config(
            _args("--source", "9", "--destinations", "1"), prompt=_no_prompt, interactive=False
        )


def test_main_missing_credentials_aborts_before_any_leg(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fail_run(self, secrets):  # pragma: no cover - must not be reached
        raise AssertionError("engine should not start")

    monkeypatch.setattr(cli.BridgeOrchestrator, "run", fail_run)
    code = cli.main(
        [
            "--source",
            "2",
            "--destinations",
            "3",
            "--accounts",
            str(tmp_path / "account.txt"),
            "--no-banner",
        ]
    )
    assert code == 2


def test_main_empty_credentials_aborts(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    accounts = tmp_path / "account.txt"
    accounts.write_text("# no keys\n", encoding="utf-8")
    monkeypatch.setattr(
        cli.BridgeOrchestrator, "run", lambda self, secrets: pytest.fail("engine started")
    )
    code = cli.main(
        ["--source", "2", "--destinations", "3", "--accounts", str(accounts), "--no-banner"]
    )
    assert code == 2


def test_main_runs_engine(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    accounts = tmp_path / "account.txt"
    accounts.write_text("abc\n", encoding="utf-8")
    seen: list[list[str]] = []
    monkeypatch.setattr(cli.BridgeOrchestrator, "run", lambda self, secrets: seen.append(secrets))

    code = cli.main(
        ["--source", "1", "--destinations", "2", "--accounts", str(accounts), "--no-banner"]
    )

    assert code == 0
    assert seen == [["0xabc"]]


def test_main_fatal_error_exits_nonzero(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    accounts = tmp_path / "account.txt"
    accounts.write_text("abc\n", encoding="utf-8")

    def explode(self, secrets):
        raise RuntimeError("rpc down")

    monkeypatch.setattr(cli.BridgeOrchestrator, "run", explode)
    code = cli.main(
        ["--source", "1", "--destinations", "2", "--accounts", str(accounts), "--no-banner"]
    )
    assert code == 1


def _no_prompt(_: str) -> str:
    raise AssertionError("unexpected prompt")
