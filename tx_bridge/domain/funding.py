"""
TxBridge - Funding & Signing Records
======================================
Request-side records used to build transactions and the results the node
returns for funding and signing them.

Requests (to_rpc):
- NewTransactionInput / NewTransactionOutputs: createrawtransaction
- FundingOptions: fundrawtransaction options
- TransactionOutputDetail: previous outputs for signrawtransaction

Results (from_rpc):
- FundingResult: fundrawtransaction
- SigningResult / SigningError: signrawtransaction

Signing can fail for some inputs only. SigningResult is a value, not an
exception: ``complete`` is False and ``errors`` lists every failed input;
inputs not listed were signed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from tx_bridge.codec.consensus import OutPoint
from tx_bridge.codec.hashes import TransactionId
from tx_bridge.constants import NO_CHANGE_POSITION, UINT32_MAX
from tx_bridge.domain.addressing import Address
from tx_bridge.domain.amount import minimal_to_coin
from tx_bridge.domain.outputs import UnspentTransactionOutput
from tx_bridge.domain.transaction import SerializedRawTransaction
from tx_bridge.domain.wire import (
    expect_object,
    get_amount,
    get_bool,
    get_hex,
    get_int,
    get_str,
    get_txid,
    get_uint32,
    join_path,
    loads,
    parse_list,
)
from tx_bridge.errors import WireFormatError


def _coin_value(units: int) -> float:
    # 8-digit decimals survive the float round trip through json.dumps
    return float(minimal_to_coin(units))


def _check_uint32(name: str, value: Optional[int]):
    if value is not None and (
        isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT32_MAX
    ):
        raise ValueError(f"{name} must be an unsigned 32-bit integer, got {value!r}")


# ============================================================================
# CREATERAWTRANSACTION
# ============================================================================

@dataclass(frozen=True)
class NewTransactionInput:
    """
    Input of a transaction to create.

    Attributes:
        txid (TransactionId): Transaction holding the spent output
        vout (int): Spent output index
        sequence (Optional[int]): Sequence number, None for the node default
    """

    txid: TransactionId
    vout: int
    sequence: Optional[int] = None

    def __post_init__(self):
        _check_uint32("vout", self.vout)
        _check_uint32("sequence", self.sequence)

    @classmethod
    def from_utxo(cls, utxo: UnspentTransactionOutput, sequence: Optional[int] = None) -> NewTransactionInput:
        return cls(utxo.txid, utxo.vout, sequence)

    def outpoint(self) -> OutPoint:
        return OutPoint(self.txid, self.vout)

    def to_rpc(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"txid": str(self.txid), "vout": self.vout}
        if self.sequence is not None:
            result["sequence"] = self.sequence
        return result


@dataclass(frozen=True)
class NewTransactionOutputs:
    """
    Outputs of a transaction to create, address to minimal units.

    Order is preserved: the node creates outputs in the order given.

    Examples:
        >>> outputs = NewTransactionOutputs.from_mapping(
        ...     {"mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe": 1012345000}
        ... )
        >>> outputs.to_rpc()
        {'mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe': 10.12345}
    """

    outputs: Tuple[Tuple[Address, int], ...]

    def __post_init__(self):
        seen = set()
        for address, value in self.outputs:
            if address.value in seen:
                raise ValueError(f"Duplicate output address: {address}")
            seen.add(address.value)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Output value must be a non-negative integer, got {value!r}")

    @classmethod
    def from_mapping(cls, mapping: Union[Mapping[str, int], Iterable[Tuple[str, int]]]) -> NewTransactionOutputs:
        """
        Build from address strings and minimal-unit values.

        Raises:
            AddressFormatError: Malformed address
            ValueError: Duplicate address or negative value
        """
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        return cls(tuple(
            (addr if isinstance(addr, Address) else Address.parse(addr), value)
            for addr, value in items
        ))

    def total(self) -> int:
        return sum(value for _, value in self.outputs)

    def to_rpc(self) -> Dict[str, float]:
        return {str(address): _coin_value(value) for address, value in self.outputs}

    def __len__(self) -> int:
        return len(self.outputs)


# ============================================================================
# SIGNRAWTRANSACTION PREVIOUS OUTPUTS
# ============================================================================

@dataclass(frozen=True)
class TransactionOutputDetail:
    """
    Previous output description passed to signrawtransaction.

    ``amount`` is required by the node for segwit inputs only.
    """

    txid: TransactionId
    vout: int
    script_pub_key: bytes
    redeem_script: Optional[bytes] = None
    amount: Optional[int] = None

    def __post_init__(self):
        _check_uint32("vout", self.vout)

    @classmethod
    def from_utxo(cls, utxo: UnspentTransactionOutput) -> TransactionOutputDetail:
        return cls(
            txid=utxo.txid,
            vout=utxo.vout,
            script_pub_key=utxo.script_pub_key,
            redeem_script=utxo.redeem_script,
            amount=utxo.amount
        )

    def to_rpc(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "txid": str(self.txid),
            "vout": self.vout,
            "scriptPubKey": self.script_pub_key.hex(),
        }
        if self.redeem_script is not None:
            result["redeemScript"] = self.redeem_script.hex()
        if self.amount is not None:
            result["amount"] = _coin_value(self.amount)
        return result


# ============================================================================
# FUNDRAWTRANSACTION
# ============================================================================

@dataclass(frozen=True)
class FundingOptions:
    """
    fundrawtransaction options.

    Every field defaults to None, meaning "use the node default"; unset
    fields are left out of the request.

    Attributes:
        change_address (Optional[Address]): Address receiving change
        change_position (Optional[int]): Index of the change output
        include_watching (Optional[bool]): Spend watch-only outputs
        lock_unspents (Optional[bool]): Lock the selected outputs
        reserve_change_key (Optional[bool]): Reserve the change key
        fee_rate (Optional[int]): Fee rate in minimal units per 1000 vbytes
        subtract_fee_from_outputs (Optional[tuple]): Output indexes paying the fee

    Examples:
        >>> FundingOptions(lock_unspents=True, fee_rate=20000).to_rpc()
        {'lockUnspents': True, 'feeRate': 0.0002}
    """

    change_address: Optional[Address] = None
    change_position: Optional[int] = None
    include_watching: Optional[bool] = None
    lock_unspents: Optional[bool] = None
    reserve_change_key: Optional[bool] = None
    fee_rate: Optional[int] = None
    subtract_fee_from_outputs: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        _check_uint32("change_position", self.change_position)
        if self.fee_rate is not None and self.fee_rate < 0:
            raise ValueError(f"fee_rate cannot be negative: {self.fee_rate}")
        if self.subtract_fee_from_outputs is not None:
            indexes = tuple(self.subtract_fee_from_outputs)
            for index in indexes:
                _check_uint32("subtract_fee_from_outputs", index)
            object.__setattr__(self, "subtract_fee_from_outputs", indexes)

    def to_rpc(self) -> Dict[str, Any]:
        options = {
            "changeAddress": str(self.change_address) if self.change_address is not None else None,
            "changePosition": self.change_position,
            "includeWatching": self.include_watching,
            "lockUnspents": self.lock_unspents,
            "reserveChangeKey": self.reserve_change_key,
            "feeRate": _coin_value(self.fee_rate) if self.fee_rate is not None else None,
            "subtractFeeFromOutputs": (
                list(self.subtract_fee_from_outputs)
                if self.subtract_fee_from_outputs is not None else None
            ),
        }
        return {key: value for key, value in options.items() if value is not None}


@dataclass(frozen=True)
class FundingResult:
    """
    fundrawtransaction result.

    Attributes:
        hex (SerializedRawTransaction): Funded, unsigned transaction
        fee (int): Fee in minimal units
        change_position (Optional[int]): Index of the added change output,
            None when no change output was added
    """

    hex: SerializedRawTransaction
    fee: int
    change_position: Optional[int] = None

    def __post_init__(self):
        _check_uint32("change_position", self.change_position)

    @classmethod
    def from_rpc(cls, data: Any, path: str = "") -> FundingResult:
        """
        Raises:
            WireFormatError: ``changepos`` outside [-1, 2**32-1], or other field errors
        """
        obj = expect_object(data, path)

        change_pos = get_int(obj, "changepos", path, maximum=UINT32_MAX)
        if change_pos < NO_CHANGE_POSITION:
            raise WireFormatError(
                f"Invalid change position {change_pos}",
                code="INVALID_CHANGE_POSITION",
                details={"field": join_path(path, "changepos")}
            )

        return cls(
            hex=SerializedRawTransaction.from_rpc(get_str(obj, "hex", path), join_path(path, "hex")),
            fee=get_amount(obj, "fee", path),
            change_position=None if change_pos == NO_CHANGE_POSITION else change_pos
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> FundingResult:
        return cls.from_rpc(loads(text))

    def has_change(self) -> bool:
        return self.change_position is not None

    def to_rpc(self) -> Dict[str, Any]:
        return {
            "hex": str(self.hex),
            "fee": _coin_value(self.fee),
            "changepos": NO_CHANGE_POSITION if self.change_position is None else self.change_position,
        }


# ============================================================================
# SIGNRAWTRANSACTION
# ============================================================================

@dataclass(frozen=True)
class SigningError:
    """
    Failure to sign one input.

    Attributes:
        txid (TransactionId): Spent transaction
        vout (int): Spent output index
        script_sig (bytes): Partially built unlocking script
        sequence (int): Input sequence number
        error (str): Node's description of the failure
    """

    txid: TransactionId
    vout: int
    script_sig: bytes
    sequence: int
    error: str

    @classmethod
    def from_rpc(cls, data: Any, path: str = "errors") -> SigningError:
        obj = expect_object(data, path)
        return cls(
            txid=get_txid(obj, "txid", path),
            vout=get_uint32(obj, "vout", path),
            script_sig=get_hex(obj, "scriptSig", path),
            sequence=get_uint32(obj, "sequence", path),
            error=get_str(obj, "error", path)
        )

    @property
    def outpoint(self) -> OutPoint:
        return OutPoint(self.txid, self.vout)


@dataclass(frozen=True)
class SigningResult:
    """
    signrawtransaction result.

    ``complete`` is True iff every input is signed. Partial failure is
    normal: check ``complete`` rather than the presence of ``errors``.

    Examples:
        >>> result = SigningResult.from_rpc(node_response)
        >>> if not result.complete:
        ...     for outpoint in result.failed_outpoints():
        ...         retry(outpoint)
    """

    hex: SerializedRawTransaction
    complete: bool
    errors: Optional[Tuple[SigningError, ...]] = None

    def __post_init__(self):
        if self.errors is not None:
            object.__setattr__(self, "errors", tuple(self.errors))

    @classmethod
    def from_rpc(cls, data: Any, path: str = "") -> SigningResult:
        """
        Raises:
            WireFormatError: ``complete`` is true but errors are listed
        """
        obj = expect_object(data, path)

        complete = get_bool(obj, "complete", path)
        errors = parse_list(obj, "errors", path, SigningError.from_rpc, required=False)
        if complete and errors:
            raise WireFormatError(
                f"Signing reported complete with {len(errors)} errors",
                code="INCONSISTENT_SIGNING_RESULT",
                details={"field": join_path(path, "errors")}
            )

        return cls(
            hex=SerializedRawTransaction.from_rpc(get_str(obj, "hex", path), join_path(path, "hex")),
            complete=complete,
            errors=errors
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> SigningResult:
        return cls.from_rpc(loads(text))

    def failed_outpoints(self) -> Tuple[OutPoint, ...]:
        return tuple(error.outpoint for error in self.errors or ())

    def is_input_signed(self, outpoint: OutPoint) -> bool:
        return outpoint not in self.failed_outpoints()


__all__ = [
    "NewTransactionInput",
    "NewTransactionOutputs",
    "TransactionOutputDetail",
    "FundingOptions",
    "FundingResult",
    "SigningError",
    "SigningResult",
]
