"""
TxBridge - Errors, Configuration & Logging Tests
==================================================
"""

import json
import logging

import pytest

from tx_bridge.config import BridgeSettings, get_settings, override_settings, reload_settings
from tx_bridge.constants import Network
from tx_bridge.errors import (
    ConfigError,
    ConsensusDecodeError,
    DecodeError,
    HexDecodeError,
    TxBridgeException,
    WireFormatError,
    format_decode_error,
)
from tx_bridge.logging_setup import (
    JSONFormatter,
    PerformanceLogger,
    get_logger,
    setup_logging,
)


# ============================================================================
# ERRORS
# ============================================================================

class TestErrors:
    """Test exception hierarchy and formatting"""

    def test_code_defaults_to_class_name(self):
        error = WireFormatError("boom")

        assert error.code == "WireFormatError"
        assert error.details == {}
        assert str(error) == "[WireFormatError] boom"

    def test_to_dict(self):
        error = HexDecodeError("bad hex", code="HEX_ODD_LENGTH", details={"field": "hex"})

        assert error.to_dict() == {
            "error": "HEX_ODD_LENGTH",
            "message": "bad hex",
            "details": {"field": "hex"},
        }
        assert "Details" in str(error)

    def test_hierarchy(self):
        for cls in (HexDecodeError, ConsensusDecodeError, WireFormatError):
            assert issubclass(cls, DecodeError)
            assert issubclass(cls, TxBridgeException)

    def test_format_with_field(self):
        error = WireFormatError("Missing", details={"field": "vin[0].sequence"})
        assert format_decode_error(error) == "Missing (at vin[0].sequence)"

    def test_format_with_offset(self):
        error = ConsensusDecodeError("Truncated", details={"offset": 12})
        assert format_decode_error(error) == "Truncated (at byte 12)"

    def test_format_without_location(self):
        assert format_decode_error(DecodeError("Plain")) == "Plain"


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestConfig:
    """Test BridgeSettings"""

    def test_defaults(self):
        settings = get_settings()

        assert settings.network == Network.MAINNET
        assert settings.log_level == "INFO"
        assert settings.log_to_file is False

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("TXBRIDGE_NETWORK", "REGTEST")
        monkeypatch.setenv("TXBRIDGE_LOG_LEVEL", "debug")

        settings = reload_settings()

        assert settings.network == Network.REGTEST
        assert settings.log_level == "DEBUG"

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_override(self):
        settings = override_settings(network="signet", log_format="TEXT")

        assert settings.network == Network.SIGNET
        assert settings.log_format == "text"
        assert isinstance(settings, BridgeSettings)

    def test_invalid_value_raises_config_error(self):
        with pytest.raises(ConfigError) as exc_info:
            override_settings(log_level="LOUD")

        assert exc_info.value.code == "INVALID_CONFIG"
        assert exc_info.value.details["errors"][0]["field"] == "log_level"

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("TXBRIDGE_NETWORK", "moonnet")

        with pytest.raises(ConfigError):
            get_settings()


# ============================================================================
# LOGGING
# ============================================================================

@pytest.fixture
def restore_logging():
    root = logging.getLogger("txbridge")
    level = root.level
    yield
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(level)


class TestLogging:
    """Test structured logging"""

    def test_logger_namespace(self):
        assert get_logger("codec").name == "txbridge.codec"

    def test_json_formatter(self):
        record = logging.LogRecord(
            name="txbridge.script",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Unrecognised script type",
            args=(),
            exc_info=None,
        )
        record.extra_data = {"type": "witness_v1_taproot"}

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "txbridge.script"
        assert data["message"] == "Unrecognised script type"
        assert data["extra_data"] == {"type": "witness_v1_taproot"}
        assert data["timestamp"].endswith("Z")

    def test_file_logging(self, tmp_path, restore_logging):
        setup_logging(log_level="DEBUG", log_to_file=True, log_dir=tmp_path, enable_console=False)

        logger = get_logger("test")
        logger.set_context(network="regtest")
        logger.info("Decoded", extra_data={"size": 223})

        for handler in logging.getLogger("txbridge").handlers:
            handler.flush()

        line = (tmp_path / "txbridge.log").read_text(encoding="utf-8").strip().splitlines()[-1]
        data = json.loads(line)

        assert data["message"] == "Decoded"
        assert data["extra_data"] == {"network": "regtest", "size": 223}

    def test_performance_logger(self, caplog):
        logger = get_logger("perf")

        with caplog.at_level(logging.DEBUG, logger="txbridge.perf"):
            with PerformanceLogger(logger, "decode"):
                pass

        assert "decode completed" in caplog.text
