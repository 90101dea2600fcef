"""
TxBridge - CLI Tests
======================
"""

import json

import pytest
from typer.testing import CliRunner

from tx_bridge.cli.main import app
from tx_bridge.version import __version__, get_version_tuple

from conftest import COINBASE_TXID, SEGWIT_TXID, SEGWIT_WTXID


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def verbose_file(tmp_path):
    def write(payload):
        path = tmp_path / "tx.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return write


class TestTransactionCommands:
    """Test decode / txid / verify"""

    def test_txid(self, runner, segwit_tx_hex):
        result = runner.invoke(app, ["txid", segwit_tx_hex])

        assert result.exit_code == 0
        assert f"txid:  {SEGWIT_TXID}" in result.output
        assert f"wtxid: {SEGWIT_WTXID}" in result.output

    def test_decode(self, runner, coinbase_tx_hex):
        result = runner.invoke(app, ["decode", coinbase_tx_hex])

        assert result.exit_code == 0
        assert "Coinbase Transaction" in result.output
        assert "Inputs (1)" in result.output
        assert "Outputs (2)" in result.output

    def test_decode_invalid_hex(self, runner, legacy_tx_hex):
        result = runner.invoke(app, ["decode", legacy_tx_hex + "00"])

        assert result.exit_code == 1
        assert "Invalid transaction" in result.output

    def test_verify(self, runner, verbose_file, verbose_coinbase_rpc):
        result = runner.invoke(app, ["verify", verbose_file(verbose_coinbase_rpc)])

        assert result.exit_code == 0
        assert "Consistent" in result.output
        assert COINBASE_TXID in result.output

    def test_verify_rpc_envelope(self, runner, verbose_file, verbose_coinbase_rpc):
        envelope = {"result": verbose_coinbase_rpc, "error": None, "id": "curltest"}
        result = runner.invoke(app, ["verify", verbose_file(envelope)])

        assert result.exit_code == 0
        assert "Consistent" in result.output

    def test_verify_inconsistent(self, runner, verbose_file, verbose_coinbase_rpc):
        verbose_coinbase_rpc["locktime"] = 5
        result = runner.invoke(app, ["verify", verbose_file(verbose_coinbase_rpc)])

        assert result.exit_code == 1
        assert "Inconsistent transaction" in result.output

    def test_verify_malformed(self, runner, verbose_file, verbose_coinbase_rpc):
        del verbose_coinbase_rpc["vin"]
        result = runner.invoke(app, ["verify", verbose_file(verbose_coinbase_rpc)])

        assert result.exit_code == 1
        assert "Invalid transaction" in result.output

    def test_verify_missing_file(self, runner, tmp_path):
        result = runner.invoke(app, ["verify", str(tmp_path / "missing.json")])
        assert result.exit_code == 2


class TestAddressCommand:
    """Test address validation"""

    def test_valid_on_default_network(self, runner):
        result = runner.invoke(app, ["address", "1A6Ei5cRfDJ8jjhwxfzLJph8B9ZEthR9Z"])

        assert result.exit_code == 0
        assert "p2pkh" in result.output
        assert "Valid on mainnet" in result.output

    def test_explicit_network(self, runner):
        result = runner.invoke(
            app, ["address", "bcrt1qjz9teszaa7mt543sy69njkcl4vv665xhkjzpxh", "--network", "regtest"]
        )

        assert result.exit_code == 0
        assert "Valid on regtest" in result.output

    def test_configured_network(self, runner, monkeypatch):
        monkeypatch.setenv("TXBRIDGE_NETWORK", "testnet")
        result = runner.invoke(app, ["address", "mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe"])

        assert result.exit_code == 0
        assert "Valid on testnet" in result.output

    def test_wrong_network(self, runner):
        result = runner.invoke(app, ["address", "mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe", "-n", "mainnet"])

        assert result.exit_code == 1
        assert "Wrong network" in result.output

    def test_invalid_address(self, runner):
        result = runner.invoke(app, ["address", "1A6Ei5cRfDJ8jjhwxfzLJph8B9ZEthR9Y"])

        assert result.exit_code == 1
        assert "Invalid address" in result.output


class TestGlobalOptions:
    """Test version and configuration handling"""

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"txbridge {__version__}" in result.output

    def test_verbose_flag(self, runner):
        result = runner.invoke(app, ["--verbose", "version"])

        assert result.exit_code == 0
        assert "Verbose mode enabled" in result.output

    def test_invalid_configuration(self, runner, monkeypatch):
        monkeypatch.setenv("TXBRIDGE_NETWORK", "moonnet")
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_version_tuple_matches_string(self):
        assert ".".join(str(part) for part in get_version_tuple()) == __version__
