"""
TxBridge - Configuration Management
=====================================
Central configuration with Pydantic Settings.
Supports environment variables, .env files and runtime overrides.

Example:
    # From environment
    export TXBRIDGE_NETWORK=regtest
    export TXBRIDGE_LOG_LEVEL=DEBUG

    # From code
    config = BridgeSettings(network="testnet")
"""

from pathlib import Path
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tx_bridge.constants import Network
from tx_bridge.errors import ConfigError


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

class BridgeSettings(BaseSettings):
    """
    TxBridge configuration.

    Only the CLI and applications embedding the package read settings;
    the models and codec are configuration free.
    """

    model_config = SettingsConfigDict(
        env_prefix='TXBRIDGE_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # ========================================================================
    # NETWORK
    # ========================================================================

    network: Network = Field(
        default=Network.MAINNET,
        description="Network addresses are expected to belong to"
    )

    # ========================================================================
    # LOGGING
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    log_format: str = Field(
        default="json",
        description="Log file format: json or text"
    )

    log_to_file: bool = Field(
        default=False,
        description="Write a rotating log file"
    )

    log_dir: Path = Field(
        default=Path("./logs"),
        description="Log file directory"
    )

    enable_console_log: bool = Field(
        default=True,
        description="Log to stderr"
    )

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator('network', mode='before')
    @classmethod
    def validate_network(cls, v):
        if isinstance(v, str):
            v = v.lower()
            if v not in {n.value for n in Network}:
                raise ValueError(
                    f"Invalid network: {v}. Must be one of {[n.value for n in Network]}"
                )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid:
            raise ValueError(f"Invalid log level: {v}. Must be one of {sorted(valid)}")
        return v

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"json", "text"}:
            raise ValueError(f"Invalid log format: {v}. Must be json or text")
        return v

    def __repr__(self) -> str:
        return (
            f"BridgeSettings(network={self.network.value}, "
            f"log_level={self.log_level}, log_format={self.log_format})"
        )


# ============================================================================
# SINGLETON ACCESS
# ============================================================================

def _load(**kwargs) -> BridgeSettings:
    try:
        return BridgeSettings(**kwargs)
    except ValidationError as e:
        raise ConfigError(
            "Invalid configuration",
            code="INVALID_CONFIG",
            details={"errors": [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]}
        ) from e


@lru_cache()
def get_settings() -> BridgeSettings:
    """
    Get the cached settings instance.

    Returns:
        BridgeSettings: Settings loaded from environment/.env

    Raises:
        ConfigError: If a setting is invalid
    """
    return _load()


def reload_settings() -> BridgeSettings:
    """Drop the cached settings and load them again"""
    get_settings.cache_clear()
    return get_settings()


def override_settings(**kwargs) -> BridgeSettings:
    """
    Build settings with explicit overrides (tests, CLI flags).

    Example:
        >>> config = override_settings(network="regtest")
        >>> config.network
        <Network.REGTEST: 'regtest'>
    """
    return _load(**kwargs)


__all__ = [
    "BridgeSettings",
    "get_settings",
    "reload_settings",
    "override_settings",
]
