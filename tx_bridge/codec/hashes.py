"""
TxBridge - Hash Identifiers
=============================
Fixed-length 32-byte identifiers for transactions and blocks.

Bytes are stored in internal (serialization) order. The text form is the
byte-reversed hex the node displays, so
``TransactionId.from_hex(str(txid)) == txid`` always holds.
"""

from __future__ import annotations
from dataclasses import dataclass
import hashlib
from typing import Optional

from tx_bridge.constants import HASH_LENGTH
from tx_bridge.errors import HexDecodeError
from tx_bridge.utils.serialization import hex_to_bytes


def double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


@dataclass(frozen=True)
class Hash256:
    """
    32-byte hash in internal byte order.

    Equality and hashing are byte-wise; subclasses never compare equal to
    each other because dataclass equality also checks the class.
    """

    raw: bytes

    def __post_init__(self):
        if not isinstance(self.raw, bytes) or len(self.raw) != HASH_LENGTH:
            raise HexDecodeError(
                f"{type(self).__name__} must be {HASH_LENGTH} bytes",
                code="INVALID_HASH_LENGTH"
            )

    @classmethod
    def from_hex(cls, value: str, field: Optional[str] = None):
        """
        Parse the display (byte-reversed) hex form.

        Raises:
            HexDecodeError: If not 64 hex characters
        """
        raw = hex_to_bytes(value, field=field)
        if len(raw) != HASH_LENGTH:
            raise HexDecodeError(
                f"{cls.__name__} must be {HASH_LENGTH * 2} hex characters, got {len(value)}",
                code="INVALID_HASH_LENGTH",
                details={"field": field} if field else {}
            )
        return cls(raw[::-1])

    @classmethod
    def zero(cls):
        return cls(bytes(HASH_LENGTH))

    def is_zero(self) -> bool:
        return self.raw == bytes(HASH_LENGTH)

    def to_hex(self) -> str:
        return self.raw[::-1].hex()

    def __str__(self) -> str:
        return self.to_hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_hex()})"


class TransactionId(Hash256):
    """Transaction identifier (txid or wtxid)"""

    @classmethod
    def from_serialization(cls, data: bytes) -> TransactionId:
        """Hash a serialized transaction"""
        return cls(double_sha256(data))


class BlockHash(Hash256):
    """Block header hash"""


__all__ = [
    "Hash256",
    "TransactionId",
    "BlockHash",
    "double_sha256",
]
