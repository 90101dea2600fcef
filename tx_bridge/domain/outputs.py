"""
TxBridge - Output Models
==========================
Transaction outputs (``vout`` elements) and wallet UTXOs (``listunspent``).

Values are held in minimal units; conversion from the node's coin amounts
fails on precision loss instead of rounding silently.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from tx_bridge.codec.consensus import OutPoint, TxOut
from tx_bridge.codec.hashes import TransactionId
from tx_bridge.constants import MAX_OUTPUT_VALUE
from tx_bridge.domain.addressing import Address
from tx_bridge.domain.script import ScriptPubKey
from tx_bridge.domain.wire import (
    expect_object,
    get_amount,
    get_bool,
    get_field,
    get_hex,
    get_int,
    get_str,
    get_txid,
    get_uint32,
    join_path,
)
from tx_bridge.errors import InvalidAmountError


# ============================================================================
# TRANSACTION OUTPUT
# ============================================================================

@dataclass(frozen=True)
class TransactionOutput:
    """
    Output of a decoded transaction.

    Attributes:
        value (int): Amount in minimal units
        n (int): Output index
        script_pub_key (ScriptPubKey): Locking script

    Examples:
        >>> out = TransactionOutput.from_rpc({
        ...     "value": 0.0699, "n": 0,
        ...     "scriptPubKey": {"asm": "", "hex": "51", "type": "nonstandard"},
        ... })
        >>> out.value
        6990000
    """

    value: int
    n: int
    script_pub_key: ScriptPubKey

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Output value cannot be negative: {self.value}")
        if self.n < 0:
            raise ValueError(f"Output index cannot be negative: {self.n}")

    @classmethod
    def from_rpc(cls, data: Any, path: str = "vout") -> TransactionOutput:
        obj = expect_object(data, path)
        return cls(
            value=_output_amount(obj, "value", path),
            n=get_uint32(obj, "n", path),
            script_pub_key=ScriptPubKey.from_rpc(
                get_field(obj, "scriptPubKey", path),
                join_path(path, "scriptPubKey")
            )
        )

    def to_txout(self) -> TxOut:
        return TxOut(self.value, self.script_pub_key.hex)


# ============================================================================
# UNSPENT OUTPUT
# ============================================================================

@dataclass(frozen=True)
class UnspentTransactionOutput:
    """
    Wallet UTXO as listed by ``listunspent``.

    Attributes:
        txid (TransactionId): Transaction holding the output
        vout (int): Output index
        address (Optional[Address]): Paying address, if any
        account (Optional[str]): Wallet label (``label`` or legacy ``account``)
        script_pub_key (bytes): Locking script
        redeem_script (Optional[bytes]): P2SH redeem script
        amount (int): Value in minimal units
        confirmations (int): Confirmation depth
        spendable (bool): Wallet holds the keys
        solvable (bool): Wallet knows how to spend it
        safe (Optional[bool]): Considered safe to spend (newer nodes)
    """

    txid: TransactionId
    vout: int
    script_pub_key: bytes
    amount: int
    confirmations: int
    spendable: bool
    solvable: bool
    address: Optional[Address] = None
    account: Optional[str] = None
    redeem_script: Optional[bytes] = None
    safe: Optional[bool] = None

    @classmethod
    def from_rpc(cls, data: Any, path: str = "") -> UnspentTransactionOutput:
        obj = expect_object(data, path)

        address = get_str(obj, "address", path, required=False)
        account = get_str(obj, "label", path, required=False)
        if account is None:
            account = get_str(obj, "account", path, required=False)

        return cls(
            txid=get_txid(obj, "txid", path),
            vout=get_uint32(obj, "vout", path),
            script_pub_key=get_hex(obj, "scriptPubKey", path),
            amount=_output_amount(obj, "amount", path),
            confirmations=get_int(obj, "confirmations", path),
            spendable=get_bool(obj, "spendable", path),
            solvable=get_bool(obj, "solvable", path),
            address=(
                Address.parse(address, field=join_path(path, "address"))
                if address is not None else None
            ),
            account=account,
            redeem_script=get_hex(obj, "redeemScript", path, required=False),
            safe=get_bool(obj, "safe", path, required=False)
        )

    def outpoint(self) -> OutPoint:
        return OutPoint(self.txid, self.vout)


def _output_amount(obj, key: str, path: str) -> int:
    value = get_amount(obj, key, path)
    if value < 0:
        raise InvalidAmountError(
            f"Field '{key}' cannot be negative",
            code="NEGATIVE_AMOUNT",
            details={"field": join_path(path, key)}
        )
    if value > MAX_OUTPUT_VALUE:
        raise InvalidAmountError(
            f"Field '{key}' exceeds the 64-bit output value range",
            code="AMOUNT_OUT_OF_RANGE",
            details={"field": join_path(path, key)}
        )
    return value


__all__ = [
    "TransactionOutput",
    "UnspentTransactionOutput",
]
