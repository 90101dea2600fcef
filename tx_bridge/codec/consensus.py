"""
TxBridge - Consensus Transaction Codec
========================================
Canonical binary transaction form and its hex text form.

Wire format (BIP144 extended serialization when witnesses are present):
- version (4, little-endian)
- [marker 0x00, flag 0x01]            extended format only
- input count (compact size), inputs
    previous txid (32) + index (4), script (compact size + bytes), sequence (4)
- output count (compact size), outputs
    value (8), script (compact size + bytes)
- [per input: item count, items]       extended format only
- lock time (4)

Decoding is strict: any payload accepted by Transaction.deserialize()
re-encodes to exactly the same bytes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple
import struct

from tx_bridge.codec.hashes import TransactionId
from tx_bridge.constants import (
    NULL_OUTPOINT_INDEX,
    SEGWIT_MARKER,
    SEGWIT_FLAG,
    UINT32_MAX,
    MAX_OUTPUT_VALUE,
    WITNESS_SCALE_FACTOR,
)
from tx_bridge.errors import ConsensusDecodeError
from tx_bridge.logging_setup import get_logger
from tx_bridge.utils.serialization import (
    ByteReader,
    compact_size,
    hex_to_bytes,
)


logger = get_logger("codec")

# Smallest possible encodings, used to bound counts before allocating
MIN_TXIN_SIZE = 32 + 4 + 1 + 4
MIN_TXOUT_SIZE = 8 + 1


def _check_uint32(name: str, value: int):
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= UINT32_MAX:
        raise ValueError(f"{name} must be an unsigned 32-bit integer, got {value!r}")


# ============================================================================
# OUTPOINT
# ============================================================================

@dataclass(frozen=True)
class OutPoint:
    """Reference to a previous transaction output (txid + index)"""

    txid: TransactionId
    vout: int

    def __post_init__(self):
        _check_uint32("vout", self.vout)

    @classmethod
    def null(cls) -> OutPoint:
        """The outpoint spent by coinbase inputs"""
        return cls(TransactionId.zero(), NULL_OUTPOINT_INDEX)

    def is_null(self) -> bool:
        return self.txid.is_zero() and self.vout == NULL_OUTPOINT_INDEX

    def serialize(self) -> bytes:
        return self.txid.raw + struct.pack('<I', self.vout)

    @classmethod
    def read_from(cls, reader: ByteReader) -> OutPoint:
        txid = TransactionId(reader.read(32))
        return cls(txid, reader.read_uint32())

    def __str__(self) -> str:
        return f"{self.txid}:{self.vout}"


# ============================================================================
# TRANSACTION INPUT / OUTPUT
# ============================================================================

@dataclass(frozen=True)
class TxIn:
    """Consensus transaction input"""

    previous_output: OutPoint
    script_sig: bytes = b''
    sequence: int = UINT32_MAX
    witness: Tuple[bytes, ...] = field(default_factory=tuple)

    def __post_init__(self):
        _check_uint32("sequence", self.sequence)
        # Accept any sequence of byte strings, store a tuple
        object.__setattr__(self, "witness", tuple(bytes(item) for item in self.witness))

    def serialize(self) -> bytes:
        return (
            self.previous_output.serialize()
            + compact_size(len(self.script_sig))
            + self.script_sig
            + struct.pack('<I', self.sequence)
        )

    def serialize_witness(self) -> bytes:
        data = compact_size(len(self.witness))
        for item in self.witness:
            data += compact_size(len(item)) + item
        return data

    @classmethod
    def read_from(cls, reader: ByteReader) -> TxIn:
        previous_output = OutPoint.read_from(reader)
        script_sig = reader.read_var_bytes()
        return cls(previous_output, script_sig, reader.read_uint32())


@dataclass(frozen=True)
class TxOut:
    """Consensus transaction output"""

    value: int
    script_pubkey: bytes = b''

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool) \
                or not 0 <= self.value <= MAX_OUTPUT_VALUE:
            raise ValueError(f"value must be a non-negative 64-bit integer, got {self.value!r}")

    def serialize(self) -> bytes:
        return (
            struct.pack('<Q', self.value)
            + compact_size(len(self.script_pubkey))
            + self.script_pubkey
        )

    @classmethod
    def read_from(cls, reader: ByteReader) -> TxOut:
        value = reader.read_uint64()
        return cls(value, reader.read_var_bytes())


# ============================================================================
# TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class Transaction:
    """
    Transaction in canonical consensus form.

    Two transactions are equal iff their canonical encodings are equal;
    all fields take part in the encoding, so field equality is the same
    thing.

    Examples:
        >>> tx = Transaction.from_hex(raw_hex)
        >>> tx.to_hex() == raw_hex
        True
        >>> str(tx.txid())
        '85a42342de714d4fa39af1fa503b9363df8a31450ff22869b300f686737370e4'
    """

    version: int
    lock_time: int
    inputs: Tuple[TxIn, ...] = field(default_factory=tuple)
    outputs: Tuple[TxOut, ...] = field(default_factory=tuple)

    def __post_init__(self):
        _check_uint32("version", self.version)
        _check_uint32("lock_time", self.lock_time)
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))

    # ========================================================================
    # ENCODING
    # ========================================================================

    def has_witness(self) -> bool:
        return any(txin.witness for txin in self.inputs)

    def _uses_extended_format(self) -> bool:
        # An empty input list would otherwise be read back as the marker
        return self.has_witness() or not self.inputs

    def serialize(self, include_witness: bool = True) -> bytes:
        """
        Serialize to consensus bytes.

        Args:
            include_witness: False gives the legacy form hashed into the txid

        Returns:
            bytes: Encoded transaction
        """
        extended = include_witness and self._uses_extended_format()

        data = struct.pack('<I', self.version)
        if extended:
            data += bytes([SEGWIT_MARKER, SEGWIT_FLAG])

        data += compact_size(len(self.inputs))
        for txin in self.inputs:
            data += txin.serialize()

        data += compact_size(len(self.outputs))
        for txout in self.outputs:
            data += txout.serialize()

        if extended:
            for txin in self.inputs:
                data += txin.serialize_witness()

        data += struct.pack('<I', self.lock_time)
        return data

    def to_hex(self) -> str:
        return self.serialize().hex()

    # ========================================================================
    # DECODING
    # ========================================================================

    @classmethod
    def deserialize(cls, data: bytes) -> Transaction:
        """
        Parse consensus bytes.

        Raises:
            ConsensusDecodeError: If the payload is not exactly one
                structurally valid transaction in canonical encoding
        """
        reader = ByteReader(bytes(data))

        try:
            tx = cls._read(reader)
        except ConsensusDecodeError as e:
            logger.debug(
                "Transaction decode failed",
                extra_data={"code": e.code, **e.details}
            )
            raise

        if not reader.at_end():
            raise ConsensusDecodeError(
                f"{reader.remaining} trailing bytes after transaction",
                code="TRAILING_DATA",
                details={"offset": reader.offset}
            )

        return tx

    @classmethod
    def _read(cls, reader: ByteReader) -> Transaction:
        version = reader.read_uint32()

        extended = False
        if reader.peek_byte() == SEGWIT_MARKER:
            marker_offset = reader.offset
            reader.read_uint8()
            flag = reader.read_uint8()
            if flag != SEGWIT_FLAG:
                raise ConsensusDecodeError(
                    f"Unsupported segwit flag: {flag}",
                    code="UNSUPPORTED_SEGWIT_FLAG",
                    details={"offset": marker_offset + 1}
                )
            extended = True

        input_count = reader.read_count(MIN_TXIN_SIZE)
        inputs = [TxIn.read_from(reader) for _ in range(input_count)]

        output_count = reader.read_count(MIN_TXOUT_SIZE)
        outputs = [TxOut.read_from(reader) for _ in range(output_count)]

        if extended:
            witness_offset = reader.offset
            for index, txin in enumerate(inputs):
                item_count = reader.read_count()
                items = tuple(reader.read_var_bytes() for _ in range(item_count))
                inputs[index] = TxIn(
                    txin.previous_output, txin.script_sig, txin.sequence, items
                )

            if inputs and not any(txin.witness for txin in inputs):
                raise ConsensusDecodeError(
                    "Witness flag set but no witnesses present",
                    code="SUPERFLUOUS_WITNESS_RECORD",
                    details={"offset": witness_offset}
                )

        lock_time = reader.read_uint32()

        return cls(version, lock_time, tuple(inputs), tuple(outputs))

    @classmethod
    def from_hex(cls, hex_str: str) -> Transaction:
        """
        Parse the hex text form.

        Only lowercase hex is accepted: it is the only form to_hex() can
        reproduce.

        Raises:
            HexDecodeError: If not canonical hex
            ConsensusDecodeError: If not a valid transaction
        """
        return cls.deserialize(hex_to_bytes(hex_str, field="hex", canonical=True))

    # ========================================================================
    # IDENTITY & SIZE
    # ========================================================================

    def txid(self) -> TransactionId:
        """Hash of the legacy serialization (witness excluded)"""
        return TransactionId.from_serialization(self.serialize(include_witness=False))

    def wtxid(self) -> TransactionId:
        """Hash of the full serialization (equals txid without witnesses)"""
        return TransactionId.from_serialization(self.serialize())

    def size(self) -> int:
        return len(self.serialize())

    def weight(self) -> int:
        base_size = len(self.serialize(include_witness=False))
        return base_size * (WITNESS_SCALE_FACTOR - 1) + self.size()

    def vsize(self) -> int:
        return -(-self.weight() // WITNESS_SCALE_FACTOR)

    def is_coinbase(self) -> bool:
        return len(self.inputs) == 1 and self.inputs[0].previous_output.is_null()

    def __repr__(self) -> str:
        return (
            f"Transaction(txid={self.txid()}, version={self.version}, "
            f"inputs={len(self.inputs)}, outputs={len(self.outputs)}, "
            f"lock_time={self.lock_time})"
        )


__all__ = [
    "OutPoint",
    "TxIn",
    "TxOut",
    "Transaction",
]
