"""
TxBridge - Core Constants
===========================
Units, consensus sentinels and the closed enumerations used to type the
node's open-ended categorical strings.
"""

from decimal import Decimal
from enum import Enum
from typing import Final


# ============================================================================
# UNITS
# ============================================================================

COIN_DECIMALS: Final[int] = 8
MINIMAL_UNITS_PER_COIN: Final[int] = 100_000_000

# Rounding delta (in minimal units) still attributed to binary floating
# point noise rather than to a sub-unit fraction.
AMOUNT_EPSILON: Final[Decimal] = Decimal("0.000001")

# Consensus encoding stores output values as 8-byte integers
MAX_OUTPUT_VALUE: Final[int] = 0xFFFFFFFFFFFFFFFF


# ============================================================================
# CONSENSUS SENTINELS
# ============================================================================

HASH_LENGTH: Final[int] = 32

UINT32_MAX: Final[int] = 0xFFFFFFFF

# Previous-output index of the null outpoint spent by coinbase inputs
NULL_OUTPOINT_INDEX: Final[int] = UINT32_MAX

SEQUENCE_FINAL: Final[int] = UINT32_MAX

SEGWIT_MARKER: Final[int] = 0x00
SEGWIT_FLAG: Final[int] = 0x01

WITNESS_SCALE_FACTOR: Final[int] = 4

# fundrawtransaction reports this change position when no change was added
NO_CHANGE_POSITION: Final[int] = -1


# ============================================================================
# NETWORKS
# ============================================================================

class Network(str, Enum):
    """Networks whose address encodings are recognised"""
    MAINNET = "mainnet"
    TESTNET = "testnet"
    REGTEST = "regtest"
    SIGNET = "signet"


# Base58Check version bytes
P2PKH_VERSIONS: Final[dict] = {
    0x00: (Network.MAINNET,),
    0x6F: (Network.TESTNET, Network.REGTEST, Network.SIGNET),
}

P2SH_VERSIONS: Final[dict] = {
    0x05: (Network.MAINNET,),
    0xC4: (Network.TESTNET, Network.REGTEST, Network.SIGNET),
}

# Bech32 human readable parts
BECH32_HRPS: Final[dict] = {
    "bc": (Network.MAINNET,),
    "tb": (Network.TESTNET, Network.SIGNET),
    "bcrt": (Network.REGTEST,),
}


# ============================================================================
# WIRE ENUMERATIONS
# ============================================================================

class ScriptType(str, Enum):
    """
    Script kind as reported in scriptPubKey.type.

    Unrecognised strings map to UNKNOWN so newly introduced script kinds
    do not break decoding.
    """
    NONSTANDARD = "nonstandard"
    PUBKEY = "pubkey"
    PUBKEYHASH = "pubkeyhash"
    SCRIPTHASH = "scripthash"
    MULTISIG = "multisig"
    NULLDATA = "nulldata"
    WITNESS_V0_KEYHASH = "witness_v0_keyhash"
    WITNESS_V0_SCRIPTHASH = "witness_v0_scripthash"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class Bip125Replaceable(str, Enum):
    """Replace-by-fee signalling state (bip125-replaceable)"""
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


class TransactionCategory(str, Enum):
    """Wallet transaction detail category"""
    SEND = "send"
    RECEIVE = "receive"
    IMMATURE = "immature"
    GENERATE = "generate"
    ORPHAN = "orphan"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


# ============================================================================
# EXPORT ALL
# ============================================================================

__all__ = [
    # Units
    "COIN_DECIMALS",
    "MINIMAL_UNITS_PER_COIN",
    "AMOUNT_EPSILON",
    "MAX_OUTPUT_VALUE",

    # Consensus
    "HASH_LENGTH",
    "UINT32_MAX",
    "NULL_OUTPOINT_INDEX",
    "SEQUENCE_FINAL",
    "SEGWIT_MARKER",
    "SEGWIT_FLAG",
    "WITNESS_SCALE_FACTOR",
    "NO_CHANGE_POSITION",

    # Networks
    "Network",
    "P2PKH_VERSIONS",
    "P2SH_VERSIONS",
    "BECH32_HRPS",

    # Enums
    "ScriptType",
    "Bip125Replaceable",
    "TransactionCategory",
]
