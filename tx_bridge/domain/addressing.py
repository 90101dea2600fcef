"""
TxBridge - Address Parsing
============================
Validation of the address strings the node reports in scriptPubKey and
wallet responses.

Supported encodings:
- Base58Check P2PKH / P2SH (mainnet and test networks)
- Bech32 / Bech32m segwit addresses (bc, tb, bcrt)

The network is inferred from the encoding. Base58 test-network prefixes
are shared by testnet, regtest and signet, so an address may belong to
several networks.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from bitcoinutils import bech32

from tx_bridge.constants import (
    BECH32_HRPS,
    P2PKH_VERSIONS,
    P2SH_VERSIONS,
    Network,
)
from tx_bridge.errors import AddressFormatError
from tx_bridge.utils.base58 import base58check_decode


class AddressKind(str, Enum):
    """Output template an address pays to"""
    P2PKH = "p2pkh"
    P2SH = "p2sh"
    WITNESS = "witness"


@dataclass(frozen=True)
class Address:
    """
    Parsed, validated address.

    Attributes:
        value (str): Address as written by the node
        kind (AddressKind): Encoded output template
        networks (tuple): Networks the encoding is valid on
        payload (bytes): Hash or witness program
        witness_version (Optional[int]): Segwit version (WITNESS only)

    Examples:
        >>> addr = Address.parse("1A6Ei5cRfDJ8jjhwxfzLJph8B9ZEthR9Z")
        >>> addr.kind
        <AddressKind.P2PKH: 'p2pkh'>
        >>> addr.is_valid_for(Network.MAINNET)
        True
    """

    value: str
    kind: AddressKind
    networks: Tuple[Network, ...]
    payload: bytes
    witness_version: Optional[int] = None

    @classmethod
    def parse(cls, value: str, field: Optional[str] = None) -> Address:
        """
        Parse and validate an address string.

        Args:
            value: Address string
            field: Wire field path reported on failure

        Raises:
            AddressFormatError: If the string is not a valid address
        """
        details = {"field": field} if field else {}

        if not isinstance(value, str) or not value:
            raise AddressFormatError(
                f"Address must be a non-empty string, got {value!r}",
                code="INVALID_ADDRESS",
                details=details
            )

        hrp = value.lower().rpartition("1")[0]
        if hrp in BECH32_HRPS:
            return cls._parse_segwit(value, hrp, details)

        try:
            version, payload = base58check_decode(value)
        except AddressFormatError as e:
            raise AddressFormatError(
                f"Invalid address {value!r}: {e.message}",
                code=e.code,
                details=details
            ) from e

        if len(payload) != 20:
            raise AddressFormatError(
                f"Invalid address {value!r}: payload is {len(payload)} bytes, expected 20",
                code="INVALID_ADDRESS_PAYLOAD",
                details=details
            )

        if version[0] in P2PKH_VERSIONS:
            return cls(value, AddressKind.P2PKH, P2PKH_VERSIONS[version[0]], payload)
        if version[0] in P2SH_VERSIONS:
            return cls(value, AddressKind.P2SH, P2SH_VERSIONS[version[0]], payload)

        raise AddressFormatError(
            f"Invalid address {value!r}: unknown version byte 0x{version.hex()}",
            code="UNKNOWN_ADDRESS_VERSION",
            details=details
        )

    @classmethod
    def _parse_segwit(cls, value: str, hrp: str, details: dict) -> Address:
        # BIP350: version 0 uses the bech32 checksum, versions 1-16 bech32m
        witness_version, program = bech32.decode(hrp, value)
        if witness_version is None:
            raise AddressFormatError(
                f"Invalid segwit address {value!r}",
                code="INVALID_SEGWIT_ADDRESS",
                details=details
            )

        return cls(
            value,
            AddressKind.WITNESS,
            BECH32_HRPS[hrp],
            bytes(program),
            witness_version
        )

    def is_valid_for(self, network: Network) -> bool:
        return network in self.networks

    def require_network(self, network: Network) -> Address:
        """
        Check the address belongs to a network.

        Raises:
            AddressFormatError: If it belongs to another network
        """
        if not self.is_valid_for(network):
            raise AddressFormatError(
                f"Address {self.value} is not valid on {network.value}",
                code="WRONG_NETWORK_ADDRESS",
                details={"networks": [n.value for n in self.networks]}
            )
        return self

    def __str__(self) -> str:
        return self.value


__all__ = [
    "Address",
    "AddressKind",
]
