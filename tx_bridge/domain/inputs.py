"""
TxBridge - Transaction Input Variant
======================================
The two input shapes the node reports through one ``vin`` schema:

- CoinbaseInput: block reward input carrying arbitrary coinbase data
- StandardInput: spends a previous output with an unlocking script

The shape is decided once, in TransactionInput.from_rpc(). An object with
both ``coinbase`` and ``txid``/``vout`` (or neither) never becomes an
input. Asking an input for the other shape's data raises
VariantMismatchError.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from tx_bridge.codec.consensus import OutPoint, TxIn
from tx_bridge.constants import SEQUENCE_FINAL
from tx_bridge.domain.script import ScriptSig
from tx_bridge.domain.wire import (
    expect_object,
    get_field,
    get_hex,
    get_list,
    get_txid,
    get_uint32,
    join_path,
)
from tx_bridge.errors import InvalidInputShapeError, VariantMismatchError
from tx_bridge.utils.serialization import hex_to_bytes


def _parse_witness(obj: Dict[str, Any], path: str) -> Tuple[bytes, ...]:
    items = get_list(obj, "txinwitness", path, required=False)
    if items is None:
        return ()

    list_path = join_path(path, "txinwitness")
    return tuple(
        hex_to_bytes(item, field=join_path(list_path, index))
        for index, item in enumerate(items)
    )


# ============================================================================
# BASE
# ============================================================================

class TransactionInput(ABC):
    """
    Transaction input, either CoinbaseInput or StandardInput.

    ``sequence`` and ``witness`` are common to both shapes. The
    shape-specific accessors raise VariantMismatchError on the wrong shape;
    check is_coinbase() first.
    """

    sequence: int
    witness: Tuple[bytes, ...]

    @staticmethod
    def from_rpc(data: Any, path: str = "vin") -> TransactionInput:
        """
        Build the right input shape from a ``vin`` element.

        Raises:
            InvalidInputShapeError: Both or neither shape's fields present
            WireFormatError: Missing or mistyped field
            HexDecodeError: Malformed coinbase, script or witness hex
        """
        obj = expect_object(data, path)

        has_coinbase = get_field(obj, "coinbase", path, required=False) is not None
        has_txid = get_field(obj, "txid", path, required=False) is not None
        has_vout = get_field(obj, "vout", path, required=False) is not None

        if has_coinbase and not (has_txid or has_vout):
            return CoinbaseInput(
                data=get_hex(obj, "coinbase", path),
                sequence=get_uint32(obj, "sequence", path),
                witness=_parse_witness(obj, path)
            )

        if has_txid and has_vout and not has_coinbase:
            script_data = get_field(obj, "scriptSig", path, required=False)
            script = (
                ScriptSig.empty() if script_data is None
                else ScriptSig.from_rpc(script_data, join_path(path, "scriptSig"))
            )
            return StandardInput(
                outpoint=OutPoint(get_txid(obj, "txid", path), get_uint32(obj, "vout", path)),
                script=script,
                sequence=get_uint32(obj, "sequence", path),
                witness=_parse_witness(obj, path)
            )

        if has_coinbase:
            reason = "has both 'coinbase' and a previous output reference"
        elif has_txid or has_vout:
            reason = "needs both 'txid' and 'vout'"
        else:
            reason = "has neither 'coinbase' nor 'txid'/'vout'"

        raise InvalidInputShapeError(
            f"Input {reason}",
            code="INVALID_INPUT_SHAPE",
            details={"field": path}
        )

    @abstractmethod
    def is_coinbase(self) -> bool:
        ...

    @abstractmethod
    def to_txin(self) -> TxIn:
        """Convert to the consensus input"""
        ...

    def _mismatch(self, accessor: str):
        raise VariantMismatchError(
            f"{accessor} is not available on {type(self).__name__}",
            code="VARIANT_MISMATCH",
            details={"accessor": accessor, "variant": type(self).__name__}
        )

    @property
    def previous_output(self) -> OutPoint:
        self._mismatch("previous_output")

    @property
    def script_sig(self) -> ScriptSig:
        self._mismatch("script_sig")

    @property
    def coinbase_data(self) -> bytes:
        self._mismatch("coinbase_data")


# ============================================================================
# VARIANTS
# ============================================================================

@dataclass(frozen=True)
class CoinbaseInput(TransactionInput):
    """
    Block reward input.

    Attributes:
        data (bytes): Coinbase data, used as the script of the null outpoint
        sequence (int): Sequence number
        witness (tuple): Witness stack
    """

    data: bytes
    sequence: int = SEQUENCE_FINAL
    witness: Tuple[bytes, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "witness", tuple(self.witness))

    def is_coinbase(self) -> bool:
        return True

    @property
    def coinbase_data(self) -> bytes:
        return self.data

    def to_txin(self) -> TxIn:
        return TxIn(OutPoint.null(), self.data, self.sequence, self.witness)


@dataclass(frozen=True)
class StandardInput(TransactionInput):
    """
    Input spending a previous output.

    Attributes:
        outpoint (OutPoint): Spent output
        script (ScriptSig): Unlocking script (empty for native segwit)
        sequence (int): Sequence number
        witness (tuple): Witness stack
    """

    outpoint: OutPoint
    script: ScriptSig = field(default_factory=ScriptSig.empty)
    sequence: int = SEQUENCE_FINAL
    witness: Tuple[bytes, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "witness", tuple(self.witness))

    def is_coinbase(self) -> bool:
        return False

    @property
    def previous_output(self) -> OutPoint:
        return self.outpoint

    @property
    def script_sig(self) -> ScriptSig:
        return self.script

    def to_txin(self) -> TxIn:
        return TxIn(self.outpoint, self.script.hex, self.sequence, self.witness)


__all__ = [
    "TransactionInput",
    "CoinbaseInput",
    "StandardInput",
]
