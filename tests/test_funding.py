"""
TxBridge - Funding & Signing Tests
====================================
"""

import json

import pytest

from tx_bridge.codec.consensus import OutPoint
from tx_bridge.codec.hashes import TransactionId
from tx_bridge.domain.addressing import Address
from tx_bridge.domain.funding import (
    FundingOptions,
    FundingResult,
    NewTransactionInput,
    NewTransactionOutputs,
    SigningResult,
    TransactionOutputDetail,
)
from tx_bridge.domain.outputs import UnspentTransactionOutput
from tx_bridge.errors import AddressFormatError, WireFormatError

from conftest import LEGACY_TX_HEX, SEGWIT_TXID


SIGNED_TXID = "2ac0daff49a4ff82a35a4864797f99f23c396b0529c5ba1e04b3d7b97521feba"


# ============================================================================
# CREATERAWTRANSACTION
# ============================================================================

class TestNewTransactionInput:
    """Test createrawtransaction inputs"""

    def test_to_rpc_omits_default_sequence(self):
        txin = NewTransactionInput(TransactionId.from_hex(SEGWIT_TXID), 3)
        assert txin.to_rpc() == {"txid": SEGWIT_TXID, "vout": 3}

    def test_to_rpc_with_sequence(self):
        txin = NewTransactionInput(TransactionId.from_hex(SEGWIT_TXID), 0, sequence=0xfffffffd)
        assert txin.to_rpc()["sequence"] == 4294967293

    def test_from_utxo(self, utxo_rpc):
        utxo = UnspentTransactionOutput.from_rpc(utxo_rpc)
        txin = NewTransactionInput.from_utxo(utxo)

        assert txin.outpoint() == utxo.outpoint()
        assert txin.to_rpc() == {"txid": utxo_rpc["txid"], "vout": 1}

    @pytest.mark.parametrize("vout,sequence", [(-1, None), (0, 2 ** 32), (True, None)])
    def test_out_of_range(self, vout, sequence):
        with pytest.raises(ValueError):
            NewTransactionInput(TransactionId.from_hex(SEGWIT_TXID), vout, sequence)


class TestNewTransactionOutputs:
    """Test createrawtransaction outputs"""

    def test_to_rpc_uses_coin_amounts(self):
        outputs = NewTransactionOutputs.from_mapping({
            "mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe": 1_012_345_000,
            "tb1qjz9teszaa7mt543sy69njkcl4vv665xh5mmv37": 1,
        })

        assert outputs.to_rpc() == {
            "mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe": 10.12345,
            "tb1qjz9teszaa7mt543sy69njkcl4vv665xh5mmv37": 0.00000001,
        }
        assert outputs.total() == 1_012_345_001
        assert len(outputs) == 2

    def test_order_is_preserved(self):
        pairs = [
            ("tb1qjz9teszaa7mt543sy69njkcl4vv665xh5mmv37", 5),
            ("mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe", 6),
        ]
        outputs = NewTransactionOutputs.from_mapping(pairs)

        assert list(outputs.to_rpc()) == [address for address, _ in pairs]

    def test_json_amounts_are_exact(self):
        outputs = NewTransactionOutputs.from_mapping({"mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe": 6_990_000})
        assert json.dumps(outputs.to_rpc()) == '{"mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe": 0.0699}'

    def test_accepts_parsed_addresses(self):
        address = Address.parse("mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe")
        outputs = NewTransactionOutputs.from_mapping([(address, 10)])
        assert outputs.outputs == ((address, 10),)

    def test_duplicate_address(self):
        with pytest.raises(ValueError):
            NewTransactionOutputs.from_mapping([
                ("mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe", 1),
                ("mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe", 2),
            ])

    def test_negative_value(self):
        with pytest.raises(ValueError):
            NewTransactionOutputs.from_mapping({"mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe": -1})

    def test_bad_address(self):
        with pytest.raises(AddressFormatError):
            NewTransactionOutputs.from_mapping({"not-an-address": 1})


# ============================================================================
# SIGNRAWTRANSACTION INPUTS
# ============================================================================

class TestTransactionOutputDetail:
    """Test previous output descriptions"""

    def test_from_utxo(self, utxo_rpc):
        detail = TransactionOutputDetail.from_utxo(UnspentTransactionOutput.from_rpc(utxo_rpc))

        assert detail.to_rpc() == {
            "txid": utxo_rpc["txid"],
            "vout": 1,
            "scriptPubKey": utxo_rpc["scriptPubKey"],
            "amount": 0.0001,
        }

    def test_redeem_script(self):
        detail = TransactionOutputDetail(
            TransactionId.from_hex(SEGWIT_TXID), 0,
            script_pub_key=bytes.fromhex("a914" + "00" * 20 + "87"),
            redeem_script=bytes.fromhex("5121" + "02" * 33 + "51ae"),
        )
        rpc = detail.to_rpc()

        assert rpc["redeemScript"].startswith("5121")
        assert "amount" not in rpc


# ============================================================================
# FUNDRAWTRANSACTION
# ============================================================================

class TestFundingOptions:
    """Test fundrawtransaction options"""

    def test_defaults_are_omitted(self):
        assert FundingOptions().to_rpc() == {}

    def test_all_options(self):
        options = FundingOptions(
            change_address=Address.parse("mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe"),
            change_position=1,
            include_watching=False,
            lock_unspents=True,
            reserve_change_key=False,
            fee_rate=20000,
            subtract_fee_from_outputs=[0, 2],
        )

        assert options.to_rpc() == {
            "changeAddress": "mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe",
            "changePosition": 1,
            "includeWatching": False,
            "lockUnspents": True,
            "reserveChangeKey": False,
            "feeRate": 0.0002,
            "subtractFeeFromOutputs": [0, 2],
        }
        assert options.subtract_fee_from_outputs == (0, 2)

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            FundingOptions(fee_rate=-1)
        with pytest.raises(ValueError):
            FundingOptions(change_position=-1)
        with pytest.raises(ValueError):
            FundingOptions(subtract_fee_from_outputs=[-1])


class TestFundingResult:
    """Test fundrawtransaction results"""

    def test_with_change(self):
        result = FundingResult.from_rpc({"hex": LEGACY_TX_HEX, "fee": 0.0000452, "changepos": 0})

        assert result.fee == 4520
        assert result.change_position == 0
        assert result.has_change()

    def test_without_change(self):
        """-1 means no change output, distinct from position 0"""
        result = FundingResult.from_rpc({"hex": LEGACY_TX_HEX, "fee": 0.0001, "changepos": -1})

        assert result.change_position is None
        assert not result.has_change()
        assert result.to_rpc()["changepos"] == -1

    def test_invalid_change_position(self):
        with pytest.raises(WireFormatError) as exc_info:
            FundingResult.from_rpc({"hex": LEGACY_TX_HEX, "fee": 0.0001, "changepos": -2})

        assert exc_info.value.code == "INVALID_CHANGE_POSITION"
        assert exc_info.value.details["field"] == "changepos"

    def test_change_position_beyond_32_bits(self):
        with pytest.raises(WireFormatError) as exc_info:
            FundingResult.from_rpc({"hex": LEGACY_TX_HEX, "fee": 0.0001, "changepos": 2 ** 33})

        assert exc_info.value.code == "INTEGER_OUT_OF_RANGE"
        assert exc_info.value.details["field"] == "changepos"

    def test_fee_must_be_a_number(self):
        with pytest.raises(WireFormatError) as exc_info:
            FundingResult.from_rpc({"hex": LEGACY_TX_HEX, "fee": "1.5", "changepos": 0})

        assert exc_info.value.code == "EXPECTED_NUMBER"
        assert exc_info.value.details["field"] == "fee"

    def test_from_json(self):
        text = '{"hex": "%s", "fee": 0.00004520, "changepos": 1}' % LEGACY_TX_HEX
        result = FundingResult.from_json(text)

        assert result.fee == 4520
        assert result.hex.to_transaction().outputs[0].value == 6990000
        assert result.to_rpc() == {"hex": LEGACY_TX_HEX, "fee": 0.0000452, "changepos": 1}


# ============================================================================
# SIGNRAWTRANSACTION
# ============================================================================

class TestSigningResult:
    """Test signrawtransaction results"""

    def test_complete(self):
        result = SigningResult.from_rpc({"hex": LEGACY_TX_HEX, "complete": True})

        assert result.complete
        assert result.errors is None
        assert result.failed_outpoints() == ()

    def test_partial_failure(self):
        """One of two inputs failed to sign"""
        result = SigningResult.from_rpc({
            "hex": LEGACY_TX_HEX,
            "complete": False,
            "errors": [
                {
                    "txid": SEGWIT_TXID,
                    "vout": 1,
                    "scriptSig": "",
                    "sequence": 4294967295,
                    "error": "Operation not valid with the current stack size"
                }
            ]
        })

        failed = OutPoint(TransactionId.from_hex(SEGWIT_TXID), 1)
        signed = OutPoint(TransactionId.from_hex(SIGNED_TXID), 0)

        assert not result.complete
        assert len(result.errors) == 1
        assert result.errors[0].script_sig == b""
        assert result.errors[0].error.startswith("Operation not valid")
        assert result.failed_outpoints() == (failed,)
        assert not result.is_input_signed(failed)
        assert result.is_input_signed(signed)

    def test_complete_with_errors(self):
        with pytest.raises(WireFormatError) as exc_info:
            SigningResult.from_rpc({
                "hex": LEGACY_TX_HEX,
                "complete": True,
                "errors": [{
                    "txid": SEGWIT_TXID,
                    "vout": 0,
                    "scriptSig": "",
                    "sequence": 0,
                    "error": "x"
                }]
            })

        assert exc_info.value.code == "INCONSISTENT_SIGNING_RESULT"

    def test_bad_error_entry(self):
        with pytest.raises(WireFormatError) as exc_info:
            SigningResult.from_json(json.dumps({
                "hex": LEGACY_TX_HEX,
                "complete": False,
                "errors": [{"txid": SEGWIT_TXID, "vout": 0, "scriptSig": "", "sequence": 0}]
            }))

        assert exc_info.value.details["field"] == "errors[0].error"

    def test_complete_must_be_boolean(self):
        with pytest.raises(WireFormatError) as exc_info:
            SigningResult.from_rpc({"hex": LEGACY_TX_HEX, "complete": "true"})

        assert exc_info.value.code == "EXPECTED_BOOLEAN"
