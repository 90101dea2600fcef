"""
TxBridge - Codec Package
==========================
Canonical consensus transaction encoding.
"""

from tx_bridge.codec.hashes import (
    Hash256,
    TransactionId,
    BlockHash,
    double_sha256,
)
from tx_bridge.codec.consensus import (
    OutPoint,
    TxIn,
    TxOut,
    Transaction,
)

__all__ = [
    # Hashes
    "Hash256",
    "TransactionId",
    "BlockHash",
    "double_sha256",

    # Consensus
    "OutPoint",
    "TxIn",
    "TxOut",
    "Transaction",
]
