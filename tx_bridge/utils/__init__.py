"""
TxBridge - Utilities Package
==============================
Hex, compact size and Base58 helpers.
"""

from tx_bridge.utils.serialization import (
    hex_to_bytes,
    compact_size,
    read_compact_size,
    ByteReader,
)
from tx_bridge.utils.base58 import (
    base58_decode,
    base58check_decode,
)

__all__ = [
    # Serialization
    "hex_to_bytes",
    "compact_size",
    "read_compact_size",
    "ByteReader",

    # Base58
    "base58_decode",
    "base58check_decode",
]
