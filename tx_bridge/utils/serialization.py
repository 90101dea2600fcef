"""
TxBridge - Serialization Utilities
====================================
Hex and consensus binary helpers shared by the codec and the wire models.
"""

import re
import struct
from typing import Optional

from tx_bridge.errors import HexDecodeError, ConsensusDecodeError


_HEX_RE = re.compile(r'^(?:[0-9a-fA-F]{2})*$')
_CANONICAL_HEX_RE = re.compile(r'^(?:[0-9a-f]{2})*$')


# ============================================================================
# BYTES/HEX CONVERSION
# ============================================================================

def hex_to_bytes(hex_str: str, field: Optional[str] = None, canonical: bool = False) -> bytes:
    """
    Convert hex string to bytes.

    Unlike bytes.fromhex(), whitespace is rejected.

    Args:
        hex_str: Hex string
        field: Wire field path reported on failure
        canonical: Only accept lowercase hex

    Returns:
        bytes: Decoded bytes

    Raises:
        HexDecodeError: If not a string, odd length or invalid characters

    Examples:
        >>> hex_to_bytes('000102')
        b'\\x00\\x01\\x02'
    """
    details = {"field": field} if field else {}

    if not isinstance(hex_str, str):
        raise HexDecodeError(
            f"Expected hex string, got {type(hex_str).__name__}",
            code="HEX_NOT_STRING",
            details=details
        )

    if len(hex_str) % 2:
        raise HexDecodeError(
            f"Odd-length hex string ({len(hex_str)} characters)",
            code="HEX_ODD_LENGTH",
            details=details
        )

    pattern = _CANONICAL_HEX_RE if canonical else _HEX_RE
    if not pattern.match(hex_str):
        raise HexDecodeError(
            "Invalid characters in hex string",
            code="HEX_INVALID_CHARACTER",
            details=details
        )

    return bytes.fromhex(hex_str)


# ============================================================================
# BINARY SERIALIZATION
# ============================================================================

def compact_size(value: int) -> bytes:
    """
    Encode integer in Bitcoin compact size format.

    Args:
        value: Non-negative integer to encode

    Returns:
        bytes: Compact size bytes
    """
    if value < 0xfd:
        return bytes([value])
    elif value <= 0xffff:
        return b'\xfd' + value.to_bytes(2, 'little')
    elif value <= 0xffffffff:
        return b'\xfe' + value.to_bytes(4, 'little')
    else:
        return b'\xff' + value.to_bytes(8, 'little')


def read_compact_size(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Read compact size from bytes.

    Non-minimal encodings are rejected: each value has exactly one valid
    encoding, which keeps re-encoding byte-identical.

    Args:
        data: Bytes data
        offset: Start offset

    Returns:
        tuple: (value, bytes_read)

    Raises:
        ConsensusDecodeError: If truncated or non-minimal
    """
    if offset >= len(data):
        raise ConsensusDecodeError(
            "Unexpected end of data reading compact size",
            code="UNEXPECTED_EOF",
            details={"offset": offset}
        )

    first = data[offset]

    if first < 0xfd:
        return first, 1

    width = {0xfd: 2, 0xfe: 4, 0xff: 8}[first]
    minimum = {0xfd: 0xfd, 0xfe: 0x10000, 0xff: 0x100000000}[first]

    if offset + 1 + width > len(data):
        raise ConsensusDecodeError(
            "Unexpected end of data reading compact size",
            code="UNEXPECTED_EOF",
            details={"offset": offset}
        )

    value = int.from_bytes(data[offset + 1:offset + 1 + width], 'little')
    if value < minimum:
        raise ConsensusDecodeError(
            f"Non-minimal compact size encoding for {value}",
            code="NON_MINIMAL_COMPACT_SIZE",
            details={"offset": offset}
        )

    return value, 1 + width


class ByteReader:
    """
    Sequential reader over a consensus-encoded payload.

    Every read checks bounds and raises ConsensusDecodeError carrying the
    offset where the read started.
    """

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def read(self, length: int) -> bytes:
        if length > self.remaining:
            raise ConsensusDecodeError(
                f"Unexpected end of data: wanted {length} bytes, {self.remaining} left",
                code="UNEXPECTED_EOF",
                details={"offset": self.offset}
            )
        chunk = self.data[self.offset:self.offset + length]
        self.offset += length
        return chunk

    def peek_byte(self) -> int:
        if not self.remaining:
            raise ConsensusDecodeError(
                "Unexpected end of data",
                code="UNEXPECTED_EOF",
                details={"offset": self.offset}
            )
        return self.data[self.offset]

    def read_uint8(self) -> int:
        return self.read(1)[0]

    def read_uint32(self) -> int:
        return struct.unpack('<I', self.read(4))[0]

    def read_uint64(self) -> int:
        return struct.unpack('<Q', self.read(8))[0]

    def read_compact_size(self) -> int:
        value, consumed = read_compact_size(self.data, self.offset)
        self.offset += consumed
        return value

    def read_count(self, min_item_size: int = 1) -> int:
        """Read a collection length, rejecting counts the payload cannot hold"""
        start = self.offset
        count = self.read_compact_size()
        if count * min_item_size > self.remaining:
            raise ConsensusDecodeError(
                f"Count {count} exceeds remaining payload ({self.remaining} bytes)",
                code="COUNT_TOO_LARGE",
                details={"offset": start}
            )
        return count

    def read_var_bytes(self) -> bytes:
        return self.read(self.read_count())

    def at_end(self) -> bool:
        return self.remaining == 0


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "hex_to_bytes",
    "compact_size",
    "read_compact_size",
    "ByteReader",
]
