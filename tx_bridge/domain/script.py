"""
TxBridge - Script Model
=========================
Signature scripts (scriptSig) and locking scripts (scriptPubKey) as the
node reports them.

The raw bytes are authoritative; ``asm`` is the node's disassembly, kept
for display only. Script kinds come from the node's ``type`` string and
are never re-derived from the bytes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from tx_bridge.constants import ScriptType
from tx_bridge.domain.addressing import Address
from tx_bridge.domain.wire import (
    expect_object,
    get_hex,
    get_int,
    get_list,
    get_str,
    join_path,
)
from tx_bridge.errors import WireFormatError
from tx_bridge.logging_setup import get_logger


logger = get_logger("script")


# ============================================================================
# SIGNATURE SCRIPT
# ============================================================================

@dataclass(frozen=True)
class ScriptSig:
    """
    Unlocking script of a standard input.

    Attributes:
        asm (str): Disassembly
        hex (bytes): Raw script
    """

    asm: str = ""
    hex: bytes = b""

    @classmethod
    def empty(cls) -> ScriptSig:
        return cls()

    @classmethod
    def from_rpc(cls, data: Any, path: str = "scriptSig") -> ScriptSig:
        obj = expect_object(data, path)
        return cls(
            asm=get_str(obj, "asm", path, required=False, default=""),
            hex=get_hex(obj, "hex", path)
        )

    def __len__(self) -> int:
        return len(self.hex)


# ============================================================================
# LOCKING SCRIPT
# ============================================================================

@dataclass(frozen=True)
class ScriptPubKey:
    """
    Locking script of an output.

    Attributes:
        asm (str): Disassembly
        hex (bytes): Raw script
        script_type (ScriptType): Script kind, UNKNOWN for unrecognised kinds
        req_sigs (Optional[int]): Required signature count (older nodes only)
        addresses (Optional[tuple]): Derived addresses, None when the node
            reports none (e.g. nulldata)

    Examples:
        >>> spk = ScriptPubKey.from_rpc({
        ...     "asm": "OP_RETURN aa21a9ed",
        ...     "hex": "6a04aa21a9ed",
        ...     "type": "nulldata",
        ... })
        >>> spk.script_type
        <ScriptType.NULLDATA: 'nulldata'>
        >>> spk.addresses is None
        True
    """

    asm: str
    hex: bytes
    script_type: ScriptType = ScriptType.NONSTANDARD
    req_sigs: Optional[int] = None
    addresses: Optional[Tuple[Address, ...]] = field(default=None)

    @classmethod
    def from_rpc(cls, data: Any, path: str = "scriptPubKey") -> ScriptPubKey:
        """
        Build from a scriptPubKey object.

        Accepts both the ``addresses`` array and the single ``address``
        field written by newer nodes.

        Raises:
            WireFormatError: Missing or mistyped field
            HexDecodeError: Malformed script hex
            AddressFormatError: Malformed address
        """
        obj = expect_object(data, path)

        type_name = get_str(obj, "type", path)
        script_type = ScriptType(type_name)
        if script_type is ScriptType.UNKNOWN and type_name != ScriptType.UNKNOWN.value:
            logger.warning(
                "Unrecognised script type",
                extra_data={"type": type_name, "field": join_path(path, "type")}
            )

        return cls(
            asm=get_str(obj, "asm", path, required=False, default=""),
            hex=get_hex(obj, "hex", path),
            script_type=script_type,
            req_sigs=get_int(obj, "reqSigs", path, required=False, minimum=0),
            addresses=_parse_addresses(obj, path)
        )

    @property
    def address(self) -> Optional[Address]:
        """The single derived address, if there is exactly one"""
        if self.addresses and len(self.addresses) == 1:
            return self.addresses[0]
        return None

    def __len__(self) -> int:
        return len(self.hex)


def _parse_addresses(obj: Dict[str, Any], path: str) -> Optional[Tuple[Address, ...]]:
    addresses = get_list(obj, "addresses", path, required=False)
    single = get_str(obj, "address", path, required=False)

    if addresses is not None and single is not None:
        if addresses != [single]:
            raise WireFormatError(
                "Fields 'address' and 'addresses' disagree",
                code="CONFLICTING_ADDRESSES",
                details={"field": join_path(path, "address")}
            )
        single = None

    if single is not None:
        return (Address.parse(single, field=join_path(path, "address")),)

    if addresses is None:
        return None

    list_path = join_path(path, "addresses")
    return tuple(
        Address.parse(value, field=join_path(list_path, index))
        for index, value in enumerate(addresses)
    )


__all__ = [
    "ScriptSig",
    "ScriptPubKey",
]
