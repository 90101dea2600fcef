"""
TxBridge - Bitcoin Core RPC Transaction Bridge
================================================
Typed, immutable models for the node's JSON-RPC transaction responses and
the canonical consensus transaction codec.

License: MIT
"""

from tx_bridge.version import __version__

__author__ = "TxBridge Team"
__license__ = "MIT"

# Codec
from tx_bridge.codec import (
    Transaction,
    TransactionId,
    BlockHash,
    OutPoint,
)

# Domain
from tx_bridge.domain import (
    Address,
    ScriptPubKey,
    ScriptSig,
    TransactionInput,
    CoinbaseInput,
    StandardInput,
    TransactionOutput,
    UnspentTransactionOutput,
    SerializedRawTransaction,
    DecodedRawTransaction,
    VerboseRawTransaction,
    WalletTransaction,
    FundingOptions,
    FundingResult,
    SigningResult,
    coin_to_minimal,
    minimal_to_coin,
)

# Configuration
from tx_bridge.config import BridgeSettings, get_settings

__all__ = [
    # Version
    "__version__",

    # Codec
    "Transaction",
    "TransactionId",
    "BlockHash",
    "OutPoint",

    # Domain
    "Address",
    "ScriptPubKey",
    "ScriptSig",
    "TransactionInput",
    "CoinbaseInput",
    "StandardInput",
    "TransactionOutput",
    "UnspentTransactionOutput",
    "SerializedRawTransaction",
    "DecodedRawTransaction",
    "VerboseRawTransaction",
    "WalletTransaction",
    "FundingOptions",
    "FundingResult",
    "SigningResult",
    "coin_to_minimal",
    "minimal_to_coin",

    # Config
    "BridgeSettings",
    "get_settings",
]
