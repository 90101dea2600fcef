"""
TxBridge - Base58 Decoding
============================
Base58 and Base58Check decoding (Bitcoin alphabet).
"""

import hashlib

from tx_bridge.errors import AddressFormatError


# Bitcoin Base58 alphabet (no 0, O, I, l)
BASE58_ALPHABET = '123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz'


def _checksum(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()[:4]


# ============================================================================
# BASE58 DECODING
# ============================================================================

def base58_decode(encoded: str) -> bytes:
    """
    Decode Base58 string to bytes.

    Raises:
        AddressFormatError: If the string has non-alphabet characters

    Examples:
        >>> base58_decode('Cn8eVZg')
        b'hello'
    """
    num = 0
    for char in encoded:
        index = BASE58_ALPHABET.find(char)
        if index < 0:
            raise AddressFormatError(
                f"Invalid Base58 character: {char!r}",
                code="INVALID_BASE58_CHARACTER"
            )
        num = num * 58 + index

    decoded = num.to_bytes((num.bit_length() + 7) // 8, byteorder='big')

    # Leading '1' characters stand for zero bytes
    num_leading_zeros = len(encoded) - len(encoded.lstrip('1'))
    return b'\x00' * num_leading_zeros + decoded


def base58check_decode(encoded: str) -> tuple[bytes, bytes]:
    """
    Decode Base58Check string.

    Returns:
        tuple: (version, payload)

    Raises:
        AddressFormatError: If too short or checksum invalid
    """
    decoded = base58_decode(encoded)

    if len(decoded) < 5:
        raise AddressFormatError(
            "Invalid Base58Check: too short",
            code="BASE58_TOO_SHORT"
        )

    data = decoded[:-4]
    checksum = decoded[-4:]

    if checksum != _checksum(data):
        raise AddressFormatError(
            "Invalid Base58Check: checksum mismatch",
            code="BASE58_CHECKSUM_MISMATCH"
        )

    return data[:1], data[1:]


__all__ = [
    "base58_decode",
    "base58check_decode",
]
