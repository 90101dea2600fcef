"""
TxBridge - Domain Package
===========================
Typed models of the node's JSON-RPC transaction objects.
"""

# Amounts
from tx_bridge.domain.amount import (
    coin_to_minimal,
    minimal_to_coin,
    format_amount,
)

# Addresses
from tx_bridge.domain.addressing import Address, AddressKind

# Scripts
from tx_bridge.domain.script import ScriptSig, ScriptPubKey

# Inputs / outputs
from tx_bridge.domain.inputs import (
    TransactionInput,
    CoinbaseInput,
    StandardInput,
)
from tx_bridge.domain.outputs import (
    TransactionOutput,
    UnspentTransactionOutput,
)

# Transactions
from tx_bridge.domain.transaction import (
    SerializedRawTransaction,
    DecodedRawTransaction,
    VerboseRawTransaction,
    TransactionDetail,
    WalletTransaction,
)

# Funding / signing
from tx_bridge.domain.funding import (
    NewTransactionInput,
    NewTransactionOutputs,
    TransactionOutputDetail,
    FundingOptions,
    FundingResult,
    SigningError,
    SigningResult,
)

__all__ = [
    # Amounts
    "coin_to_minimal",
    "minimal_to_coin",
    "format_amount",

    # Addresses
    "Address",
    "AddressKind",

    # Scripts
    "ScriptSig",
    "ScriptPubKey",

    # Inputs / outputs
    "TransactionInput",
    "CoinbaseInput",
    "StandardInput",
    "TransactionOutput",
    "UnspentTransactionOutput",

    # Transactions
    "SerializedRawTransaction",
    "DecodedRawTransaction",
    "VerboseRawTransaction",
    "TransactionDetail",
    "WalletTransaction",

    # Funding / signing
    "NewTransactionInput",
    "NewTransactionOutputs",
    "TransactionOutputDetail",
    "FundingOptions",
    "FundingResult",
    "SigningError",
    "SigningResult",
]
