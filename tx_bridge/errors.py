"""
TxBridge - Custom Exceptions
==============================
Exception hierarchy for the RPC translation and codec layer.

Every exception carries a machine readable ``code`` and a ``details`` dict.
Decode errors always name the offending wire field (``details["field"]``)
or byte position (``details["offset"]``).
"""

from typing import Optional


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class TxBridgeException(Exception):
    """
    Base exception for all TxBridge errors.

    Attributes:
        message (str): Error message
        code (str): Error code (e.g. "NON_MINIMAL_COMPACT_SIZE")
        details (dict): Additional context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serialize exception for API/logging"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} | Details: {self.details}"
        return f"[{self.code}] {self.message}"


# ============================================================================
# CONFIGURATION ERRORS
# ============================================================================

class ConfigError(TxBridgeException):
    """Invalid configuration"""
    pass


# ============================================================================
# PROGRAMMING ERRORS
# ============================================================================

class VariantMismatchError(TxBridgeException, AssertionError):
    """
    Accessor called on the wrong transaction input variant.

    This is a bug in the caller, not a data problem: it derives from
    AssertionError so generic ``except TxBridgeException`` handlers around
    decoding code are not the natural place to swallow it.
    """
    pass


# ============================================================================
# DECODE ERRORS
# ============================================================================

class DecodeError(TxBridgeException):
    """Wire or binary payload could not be decoded (base)"""
    pass


class HexDecodeError(DecodeError):
    """Malformed hex string"""
    pass


class ConsensusDecodeError(DecodeError):
    """Bytes are not a structurally valid transaction"""
    pass


class WireFormatError(DecodeError):
    """RPC object is missing a field or has a field of the wrong type"""
    pass


class InvalidInputShapeError(WireFormatError):
    """Input object is neither exactly coinbase nor exactly standard"""
    pass


# ============================================================================
# AMOUNT ERRORS
# ============================================================================

class AmountError(TxBridgeException):
    """Amount conversion error (base)"""
    pass


class PrecisionLossError(AmountError):
    """Conversion to minimal units would discard value"""
    pass


class InvalidAmountError(AmountError):
    """Amount is not a finite number"""
    pass


# ============================================================================
# ADDRESS ERRORS
# ============================================================================

class AddressFormatError(TxBridgeException):
    """Malformed or wrong-network address"""
    pass


# ============================================================================
# CONSISTENCY ERRORS
# ============================================================================

class InconsistentTransactionError(TxBridgeException):
    """Decoded fields disagree with the transaction's own hex encoding"""
    pass


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def format_decode_error(error: DecodeError) -> str:
    """
    Format a decode error for display.

    Args:
        error: DecodeError instance

    Returns:
        str: Message including the field path or byte offset
    """
    location = error.details.get("field")
    if location is None and "offset" in error.details:
        location = f"byte {error.details['offset']}"

    if location:
        return f"{error.message} (at {location})"
    return error.message


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    # Base
    "TxBridgeException",

    # Configuration
    "ConfigError",

    # Programming errors
    "VariantMismatchError",

    # Decoding
    "DecodeError",
    "HexDecodeError",
    "ConsensusDecodeError",
    "WireFormatError",
    "InvalidInputShapeError",

    # Amounts
    "AmountError",
    "PrecisionLossError",
    "InvalidAmountError",

    # Addresses
    "AddressFormatError",

    # Consistency
    "InconsistentTransactionError",

    # Helpers
    "format_decode_error",
]
