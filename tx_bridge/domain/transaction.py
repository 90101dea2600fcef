"""
TxBridge - Transaction Aggregates
===================================
Transaction views returned by the node and their assembly into the
canonical consensus form.

Models:
- SerializedRawTransaction: hex text form (``hex`` fields, signrawtransaction)
- DecodedRawTransaction: ``decoderawtransaction``
- VerboseRawTransaction: ``getrawtransaction`` with verbose=true
- WalletTransaction / TransactionDetail: ``gettransaction``

Assembly copies version and lock time and converts inputs and outputs in
wire order. Contextual metadata (confirmations, timestamps, block hash,
size fields) is not part of the consensus encoding and is dropped.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from tx_bridge.codec.consensus import Transaction
from tx_bridge.codec.hashes import BlockHash, TransactionId
from tx_bridge.constants import Bip125Replaceable, TransactionCategory
from tx_bridge.domain.addressing import Address
from tx_bridge.domain.inputs import TransactionInput
from tx_bridge.domain.outputs import TransactionOutput
from tx_bridge.domain.wire import (
    expect_object,
    get_amount,
    get_block_hash,
    get_bool,
    get_int,
    get_str,
    get_txid,
    get_uint32,
    join_path,
    loads,
    parse_list,
)
from tx_bridge.errors import InconsistentTransactionError, WireFormatError
from tx_bridge.logging_setup import get_logger
from tx_bridge.utils.serialization import hex_to_bytes


logger = get_logger("transaction")


# ============================================================================
# SERIALIZED TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class SerializedRawTransaction:
    """
    Transaction in hex text form.

    Stored lowercase, the only form the codec reproduces, so two values are
    equal iff they encode the same bytes.
    """

    hex: str

    def __post_init__(self):
        hex_to_bytes(self.hex, field="hex")
        object.__setattr__(self, "hex", self.hex.lower())

    @classmethod
    def from_transaction(cls, tx: Transaction) -> SerializedRawTransaction:
        return cls(tx.to_hex())

    @classmethod
    def from_rpc(cls, data: Any, path: str = "hex") -> SerializedRawTransaction:
        hex_to_bytes(data, field=path)
        return cls(data)

    def to_transaction(self) -> Transaction:
        """
        Decode to the consensus form.

        Raises:
            ConsensusDecodeError: If the bytes are not a valid transaction
        """
        return Transaction.from_hex(self.hex)

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.hex)

    def __str__(self) -> str:
        return self.hex


def _serialized_field(obj: Dict[str, Any], key: str, path: str) -> SerializedRawTransaction:
    return SerializedRawTransaction.from_rpc(get_str(obj, key, path), join_path(path, key))


# ============================================================================
# DECODED TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class DecodedRawTransaction:
    """
    Transaction as returned by ``decoderawtransaction``.

    Attributes:
        txid (TransactionId): Transaction id
        hash (str): Witness hash as displayed by the node
        size (int): Serialized size in bytes
        vsize (int): Virtual size
        version (int): Format version
        locktime (int): Lock time
        vin (tuple): Inputs in wire order
        vout (tuple): Outputs, ``vout[i].n == i``
        weight (Optional[int]): Weight units (newer nodes)
    """

    txid: TransactionId
    hash: str
    size: int
    vsize: int
    version: int
    locktime: int
    vin: Tuple[TransactionInput, ...]
    vout: Tuple[TransactionOutput, ...]
    weight: Optional[int] = field(default=None, kw_only=True)

    def __post_init__(self):
        object.__setattr__(self, "vin", tuple(self.vin))
        object.__setattr__(self, "vout", tuple(self.vout))

        for index, output in enumerate(self.vout):
            if output.n != index:
                raise WireFormatError(
                    f"Output index {output.n} found at position {index}",
                    code="NON_DENSE_OUTPUT_INDEX",
                    details={"field": f"vout[{index}].n"}
                )

    @classmethod
    def _fields_from_rpc(cls, obj: Dict[str, Any], path: str) -> Dict[str, Any]:
        return {
            "txid": get_txid(obj, "txid", path),
            "hash": get_str(obj, "hash", path),
            "size": get_int(obj, "size", path, minimum=0),
            "vsize": get_int(obj, "vsize", path, minimum=0),
            "version": get_uint32(obj, "version", path),
            "locktime": get_uint32(obj, "locktime", path),
            "vin": parse_list(obj, "vin", path, TransactionInput.from_rpc),
            "vout": parse_list(obj, "vout", path, TransactionOutput.from_rpc),
            "weight": get_int(obj, "weight", path, required=False, minimum=0),
        }

    @classmethod
    def from_rpc(cls, data: Any, path: str = ""):
        """
        Build from a decoded transaction object.

        Raises:
            WireFormatError: Missing or mistyped field, non-dense outputs
            InvalidInputShapeError: Malformed ``vin`` element
            HexDecodeError: Malformed hex field
            AmountError: Output value not representable in minimal units
            AddressFormatError: Malformed address
        """
        return cls(**cls._fields_from_rpc(expect_object(data, path), path))

    @classmethod
    def from_json(cls, text: Union[str, bytes]):
        return cls.from_rpc(loads(text))

    def to_transaction(self) -> Transaction:
        """Assemble the consensus transaction from the decoded fields"""
        return Transaction(
            version=self.version,
            lock_time=self.locktime,
            inputs=tuple(txin.to_txin() for txin in self.vin),
            outputs=tuple(txout.to_txout() for txout in self.vout)
        )

    def is_coinbase(self) -> bool:
        return len(self.vin) == 1 and self.vin[0].is_coinbase()

    def total_output_value(self) -> int:
        return sum(output.value for output in self.vout)


# ============================================================================
# VERBOSE TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class VerboseRawTransaction(DecodedRawTransaction):
    """
    Transaction as returned by ``getrawtransaction`` (verbose).

    The decoded fields and ``hex`` describe the same transaction:
    ``to_transaction() == hex.to_transaction()``. verify_consistency()
    checks it.

    Block fields are None for mempool transactions.
    """

    hex: SerializedRawTransaction
    blockhash: Optional[BlockHash] = None
    confirmations: int = 0
    time: Optional[int] = None
    blocktime: Optional[int] = None

    @classmethod
    def _fields_from_rpc(cls, obj: Dict[str, Any], path: str) -> Dict[str, Any]:
        fields = super()._fields_from_rpc(obj, path)
        fields.update(
            hex=_serialized_field(obj, "hex", path),
            blockhash=get_block_hash(obj, "blockhash", path, required=False),
            confirmations=get_int(obj, "confirmations", path, required=False, default=0),
            time=get_int(obj, "time", path, required=False, minimum=0),
            blocktime=get_int(obj, "blocktime", path, required=False, minimum=0),
        )
        return fields

    def is_confirmed(self) -> bool:
        return self.blockhash is not None and self.confirmations > 0

    def verify_consistency(self) -> Transaction:
        """
        Check the decoded fields against the transaction's own hex.

        Returns:
            Transaction: The transaction decoded from ``hex``

        Raises:
            InconsistentTransactionError: On the first field that disagrees
            ConsensusDecodeError: If ``hex`` is not a valid transaction
        """
        from_hex = self.hex.to_transaction()
        from_fields = self.to_transaction()

        mismatch = _first_mismatch(from_fields, from_hex)
        if mismatch is None:
            checks = [
                ("txid", str(self.txid), str(from_hex.txid())),
                ("hash", self.hash.lower(), str(from_hex.wtxid())),
                ("size", self.size, from_hex.size()),
                ("vsize", self.vsize, from_hex.vsize()),
            ]
            if self.weight is not None:
                checks.append(("weight", self.weight, from_hex.weight()))

            for name, reported, actual in checks:
                if reported != actual:
                    mismatch = (name, reported, actual)
                    break

        if mismatch is not None:
            name, reported, actual = mismatch
            logger.warning(
                "Verbose transaction disagrees with its hex",
                extra_data={"txid": str(self.txid), "field": name}
            )
            raise InconsistentTransactionError(
                f"Field '{name}' does not match the transaction hex",
                code="INCONSISTENT_TRANSACTION",
                details={"field": name, "reported": str(reported), "actual": str(actual)}
            )

        return from_hex


def _first_mismatch(ours: Transaction, theirs: Transaction) -> Optional[Tuple[str, Any, Any]]:
    if ours.version != theirs.version:
        return "version", ours.version, theirs.version
    if ours.lock_time != theirs.lock_time:
        return "locktime", ours.lock_time, theirs.lock_time
    if len(ours.inputs) != len(theirs.inputs):
        return "vin", len(ours.inputs), len(theirs.inputs)
    if len(ours.outputs) != len(theirs.outputs):
        return "vout", len(ours.outputs), len(theirs.outputs)

    for index, (a, b) in enumerate(zip(ours.inputs, theirs.inputs)):
        if a != b:
            return f"vin[{index}]", a.serialize().hex(), b.serialize().hex()
    for index, (a, b) in enumerate(zip(ours.outputs, theirs.outputs)):
        if a != b:
            return f"vout[{index}]", a.serialize().hex(), b.serialize().hex()

    return None


# ============================================================================
# WALLET TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class TransactionDetail:
    """
    One wallet-relevant output of a wallet transaction.

    Amounts are signed: sends are negative.
    """

    category: TransactionCategory
    amount: int
    vout: int
    account: Optional[str] = None
    address: Optional[Address] = None
    fee: Optional[int] = None
    involves_watchonly: Optional[bool] = None
    abandoned: Optional[bool] = None

    @classmethod
    def from_rpc(cls, data: Any, path: str = "details") -> TransactionDetail:
        obj = expect_object(data, path)

        account = get_str(obj, "label", path, required=False)
        if account is None:
            account = get_str(obj, "account", path, required=False)

        address = get_str(obj, "address", path, required=False)

        return cls(
            category=TransactionCategory(get_str(obj, "category", path)),
            amount=get_amount(obj, "amount", path),
            vout=get_uint32(obj, "vout", path),
            account=account,
            address=(
                Address.parse(address, field=join_path(path, "address"))
                if address is not None else None
            ),
            fee=get_amount(obj, "fee", path, required=False),
            involves_watchonly=get_bool(obj, "involvesWatchonly", path, required=False),
            abandoned=get_bool(obj, "abandoned", path, required=False)
        )


@dataclass(frozen=True)
class WalletTransaction:
    """
    Wallet transaction as returned by ``gettransaction``.

    Attributes:
        txid (TransactionId): Transaction id
        amount (int): Net effect on the wallet in minimal units (signed)
        fee (Optional[int]): Fee paid, negative, sends only
        confirmations (int): Depth; negative when conflicted
        time (int): Creation time
        timereceived (int): Time the wallet first saw it
        bip125_replaceable (Bip125Replaceable): RBF signalling state
        details (tuple): Per-output wallet details
        hex (SerializedRawTransaction): Full transaction
    """

    txid: TransactionId
    amount: int
    confirmations: int
    time: int
    timereceived: int
    details: Tuple[TransactionDetail, ...]
    hex: SerializedRawTransaction
    fee: Optional[int] = None
    generated: Optional[bool] = None
    blockhash: Optional[BlockHash] = None
    blocktime: Optional[int] = None
    blockindex: Optional[int] = None
    walletconflicts: Tuple[TransactionId, ...] = ()
    comment: Optional[str] = None
    to: Optional[str] = None
    bip125_replaceable: Bip125Replaceable = Bip125Replaceable.UNKNOWN

    @classmethod
    def from_rpc(cls, data: Any, path: str = "") -> WalletTransaction:
        obj = expect_object(data, path)

        conflicts = parse_list(
            obj, "walletconflicts", path,
            _txid_value,
            required=False
        )
        bip125 = get_str(obj, "bip125-replaceable", path, required=False)

        return cls(
            txid=get_txid(obj, "txid", path),
            amount=get_amount(obj, "amount", path),
            confirmations=get_int(obj, "confirmations", path),
            time=get_int(obj, "time", path, minimum=0),
            timereceived=get_int(obj, "timereceived", path, minimum=0),
            details=parse_list(obj, "details", path, TransactionDetail.from_rpc),
            hex=_serialized_field(obj, "hex", path),
            fee=get_amount(obj, "fee", path, required=False),
            generated=get_bool(obj, "generated", path, required=False),
            blockhash=get_block_hash(obj, "blockhash", path, required=False),
            blocktime=get_int(obj, "blocktime", path, required=False, minimum=0),
            blockindex=get_int(obj, "blockindex", path, required=False, minimum=0),
            walletconflicts=conflicts or (),
            comment=get_str(obj, "comment", path, required=False),
            to=get_str(obj, "to", path, required=False),
            bip125_replaceable=(
                Bip125Replaceable(bip125) if bip125 is not None
                else Bip125Replaceable.UNKNOWN
            )
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> WalletTransaction:
        return cls.from_rpc(loads(text))

    def to_transaction(self) -> Transaction:
        return self.hex.to_transaction()

    def is_confirmed(self) -> bool:
        return self.confirmations > 0


def _txid_value(value: Any, path: str) -> TransactionId:
    if not isinstance(value, str):
        raise WireFormatError(
            f"Transaction id must be a string, got {type(value).__name__}",
            code="EXPECTED_STRING",
            details={"field": path}
        )
    return TransactionId.from_hex(value, field=path)


__all__ = [
    "SerializedRawTransaction",
    "DecodedRawTransaction",
    "VerboseRawTransaction",
    "TransactionDetail",
    "WalletTransaction",
]
