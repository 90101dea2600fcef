"""
TxBridge - Wire Field Extraction
==================================
Typed access to fields of decoded JSON-RPC objects.

Every helper takes the path of the enclosing object (e.g. "vin[0]") so
errors report the exact field: "vin[0].scriptSig.hex".
"""

from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union
import json

from tx_bridge.codec.hashes import BlockHash, TransactionId
from tx_bridge.constants import UINT32_MAX
from tx_bridge.domain.amount import coin_to_minimal
from tx_bridge.errors import WireFormatError
from tx_bridge.utils.serialization import hex_to_bytes


T = TypeVar("T")

_MISSING = object()


def loads(text: Union[str, bytes]) -> Any:
    """
    Parse an RPC JSON document.

    Fractional numbers become Decimal so amounts never pass through binary
    floating point.

    Raises:
        WireFormatError: If the text is not valid JSON
    """
    try:
        return json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise WireFormatError(
            f"Invalid JSON: {e.msg}",
            code="INVALID_JSON",
            details={"offset": e.pos}
        ) from e


def join_path(path: str, key) -> str:
    """
    Build a child field path.

    Examples:
        >>> join_path("vin[0]", "scriptSig")
        'vin[0].scriptSig'
        >>> join_path("vin", 0)
        'vin[0]'
        >>> join_path("", "txid")
        'txid'
    """
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else key


def expect_object(data: Any, path: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise WireFormatError(
            f"Expected JSON object, got {type(data).__name__}",
            code="EXPECTED_OBJECT",
            details={"field": path or "<root>"}
        )
    return data


def get_field(data: Dict[str, Any], key: str, path: str, required: bool = True, default=None):
    """
    Read a raw field.

    JSON null is treated like an absent field.

    Raises:
        WireFormatError: If required and absent
    """
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise WireFormatError(
                f"Missing required field '{key}'",
                code="MISSING_FIELD",
                details={"field": join_path(path, key)}
            )
        return default
    return value


def get_int(
    data: Dict[str, Any],
    key: str,
    path: str,
    required: bool = True,
    default: Optional[int] = None,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> Optional[int]:
    value = get_field(data, key, path, required, _MISSING)
    if value is _MISSING:
        return default

    if isinstance(value, bool) or not isinstance(value, int):
        raise WireFormatError(
            f"Field '{key}' must be an integer, got {type(value).__name__}",
            code="EXPECTED_INTEGER",
            details={"field": join_path(path, key)}
        )

    if minimum is not None and value < minimum:
        raise WireFormatError(
            f"Field '{key}' must be >= {minimum}, got {value}",
            code="INTEGER_OUT_OF_RANGE",
            details={"field": join_path(path, key)}
        )

    if maximum is not None and value > maximum:
        raise WireFormatError(
            f"Field '{key}' must be <= {maximum}, got {value}",
            code="INTEGER_OUT_OF_RANGE",
            details={"field": join_path(path, key)}
        )

    return value


def get_str(data: Dict[str, Any], key: str, path: str, required: bool = True,
            default: Optional[str] = None) -> Optional[str]:
    value = get_field(data, key, path, required, _MISSING)
    if value is _MISSING:
        return default

    if not isinstance(value, str):
        raise WireFormatError(
            f"Field '{key}' must be a string, got {type(value).__name__}",
            code="EXPECTED_STRING",
            details={"field": join_path(path, key)}
        )
    return value


def get_bool(data: Dict[str, Any], key: str, path: str, required: bool = True,
             default: Optional[bool] = None) -> Optional[bool]:
    value = get_field(data, key, path, required, _MISSING)
    if value is _MISSING:
        return default

    if not isinstance(value, bool):
        raise WireFormatError(
            f"Field '{key}' must be a boolean, got {type(value).__name__}",
            code="EXPECTED_BOOLEAN",
            details={"field": join_path(path, key)}
        )
    return value


def get_hex(data: Dict[str, Any], key: str, path: str, required: bool = True) -> Optional[bytes]:
    value = get_str(data, key, path, required)
    if value is None:
        return None
    return hex_to_bytes(value, field=join_path(path, key))


def get_uint32(data: Dict[str, Any], key: str, path: str, required: bool = True) -> Optional[int]:
    return get_int(data, key, path, required, minimum=0, maximum=UINT32_MAX)


def get_txid(data: Dict[str, Any], key: str, path: str, required: bool = True) -> Optional[TransactionId]:
    value = get_str(data, key, path, required)
    if value is None:
        return None
    return TransactionId.from_hex(value, field=join_path(path, key))


def get_block_hash(data: Dict[str, Any], key: str, path: str, required: bool = True) -> Optional[BlockHash]:
    value = get_str(data, key, path, required)
    if value is None:
        return None
    return BlockHash.from_hex(value, field=join_path(path, key))


def get_amount(data: Dict[str, Any], key: str, path: str, required: bool = True) -> Optional[int]:
    """
    Read a coin-denominated amount as minimal units.

    Raises:
        WireFormatError: If the field is not a JSON number
        PrecisionLossError: If the amount has sub-unit value
        InvalidAmountError: If the field is not a finite number
    """
    value = get_field(data, key, path, required, _MISSING)
    if value is _MISSING:
        return None

    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise WireFormatError(
            f"Field '{key}' must be a number, got {type(value).__name__}",
            code="EXPECTED_NUMBER",
            details={"field": join_path(path, key)}
        )
    return coin_to_minimal(value, field=join_path(path, key))


def get_list(data: Dict[str, Any], key: str, path: str, required: bool = True) -> Optional[List[Any]]:
    value = get_field(data, key, path, required, _MISSING)
    if value is _MISSING:
        return None

    if not isinstance(value, list):
        raise WireFormatError(
            f"Field '{key}' must be an array, got {type(value).__name__}",
            code="EXPECTED_ARRAY",
            details={"field": join_path(path, key)}
        )
    return value


def parse_list(
    data: Dict[str, Any],
    key: str,
    path: str,
    parse: Callable[[Any, str], T],
    required: bool = True,
) -> Optional[tuple]:
    """
    Parse every element of an array field.

    Args:
        parse: Called as parse(element, element_path)

    Returns:
        tuple: Parsed elements in wire order (None if optional and absent)
    """
    items = get_list(data, key, path, required)
    if items is None:
        return None

    list_path = join_path(path, key)
    return tuple(
        parse(item, join_path(list_path, index))
        for index, item in enumerate(items)
    )


__all__ = [
    "loads",
    "join_path",
    "expect_object",
    "get_field",
    "get_int",
    "get_str",
    "get_bool",
    "get_hex",
    "get_uint32",
    "get_txid",
    "get_block_hash",
    "get_amount",
    "get_list",
    "parse_list",
]
