import json

import dotenv
import pytest

from bridger.cli import main as cli
from fakes import WETH_ARBITRUM


@pytest.fixture
def config_file(tmp_path, config_data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda *args, **kwargs: False)
    for name in ("PRIVATE_KEY", "BRIDGER_CONFIG"):
        # set before deleting so values loaded from .env are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_missing_private_key_exits(config_file):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(config_file)])
    assert excinfo.value.code == 1


def test_invalid_config_exits(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"bridge_operations": [{"name": "broken"}]}', encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(path)])
    assert excinfo.value.code == 1


def test_missing_config_file_exits(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["--config", str(tmp_path / "nope.json")])


def test_check_config_runs_without_key(config_file, capsys):
    cli.main(["--check-config", "--config", str(config_file)])

    out = capsys.readouterr().out
    assert "Arbitrum (42161)" in out
    assert WETH_ARBITRUM in out
    assert "Bridge 0.001 ETH from Arbitrum to Optimism using ETH (native)" in out


def test_routes_lists_pairs(config_file, capsys):
    cli.main(["--routes", "WBTC", "--config", str(config_file)])

    out = capsys.readouterr().out.splitlines()
    wbtc_ethereum = "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"
    wbtc_arbitrum = "0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f"
    assert out == [
        f"- Ethereum -> Arbitrum: {wbtc_ethereum} -> {wbtc_arbitrum}",
        f"- Arbitrum -> Ethereum: {wbtc_arbitrum} -> {wbtc_ethereum}",
    ]


def test_dry_run_disables_auto_execute(config_file, monkeypatch):
    captured = {}

    class RecordingRunner:
        def __init__(self, *, config, client, session):
            captured["config"] = config

        def run(self):
            return []

    monkeypatch.setenv("PRIVATE_KEY", "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318")
    monkeypatch.setattr(cli, "BridgeRunner", RecordingRunner)

    cli.main(["--dry-run", "--config", str(config_file)])

    assert captured["config"].options.auto_execute is False


def test_load_account_accepts_unprefixed_key():
    key = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
    assert cli.load_account(key).address == cli.load_account(f"0x{key}").address


def test_version_flag_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip()


def test_config_path_from_dotenv(tmp_path, config_data, monkeypatch, capsys):
    other = tmp_path / "configs" / "other.json"
    other.parent.mkdir()
    other.write_text(json.dumps(config_data), encoding="utf-8")
    (tmp_path / ".env").write_text(f"BRIDGER_CONFIG={other}\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "load_dotenv", dotenv.load_dotenv)

    cli.main(["--check-config"])

    assert "Arbitrum (42161)" in capsys.readouterr().out
