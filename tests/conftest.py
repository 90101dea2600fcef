"""
TxBridge - Pytest Configuration
=================================
Fixtures: raw transactions and node JSON-RPC payloads.
"""

import copy
import json
import os

import pytest

from tx_bridge.config import get_settings


# ============================================================================
# RAW TRANSACTIONS
# ============================================================================

# Testnet P2WPKH spend: one input, two segwit outputs
SEGWIT_TX_HEX = (
    "0200000000010144af9381cd3cb3d14d549b27c8d8a4c87d1d58e501df656342363886"
    "277f62e10000000000feffffff02aba9ac0300000000160014908abcc05defb6ba5630"
    "268b395b1fab19ad50d760566c0000000000220020c39353c0df01296ab055e83b7017"
    "15b765636cf91c795deb7573e4b055ada53302473044022010d3b0f0e48977b5c7af7f"
    "6a0839a8ed24cd760c4e95668ed7b3275fca727360022007a27825d82a1e69bff2e8cb"
    "f195aa4280c214f1cf7650afb6fa2eb49a9765040121036bc4598b0de6ac9c560f1322"
    "ce86a0bf27e934837ac86196337db06002c3a352f83a1400"
)
SEGWIT_TXID = "85a42342de714d4fa39af1fa503b9363df8a31450ff22869b300f686737370e4"
SEGWIT_WTXID = "955c841626f90109480f6b2aeeec0986a10c910fe1d26cd35b3eac07394e4a51"

# Regtest coinbase with witness commitment
COINBASE_TX_HEX = (
    "020000000001010000000000000000000000000000000000000000000000000000000000"
    "000000ffffffff0603142d010101ffffffff0200000000000000002321039b0e80cdda15"
    "ac2164392dfaf4f3eb36dd914dcb1c405eec3dd8c9ebf6c13fc1ac0000000000000000"
    "266a24aa21a9ede2f61c3f71d1defd3fa999dfa36953755c690689799962b48bebd836"
    "974e8cf9012000000000000000000000000000000000000000000000000000000000000000"
    "0000000000"
)
COINBASE_TXID = "96e038ae072e3328cc3fe7dfbac8748127a26335461f8b61bb2082a67c230e38"
COINBASE_WTXID = "b1826b1f6514187abcfcb95cdc870d74125bebaa408e3bab015139990f4c1f5b"

# Mainnet P2PKH spend without witness
LEGACY_TX_HEX = (
    "0100000001bafe2175b9d7b3041ebac529056b393cf2997f7964485aa382ffa449ffda"
    "c02a000000008a473044022013d212c22f0b46bb33106d148493b9a9723adb2c3dd3a3"
    "ebe3a9c9e3b95d8cb00220461661710202fbab550f973068af45c294667fc4dc526627"
    "a7463eb23ab39e9b01410479be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d9"
    "59f2815b16f81798483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d0"
    "8ffb10d4b8ffffffff01b0a86a00000000001976a91401b81d5fa1e55e069e3cc2db9c"
    "19e2e80358f30688ac00000000"
)
LEGACY_TXID = "52309405287e737cf412fc42883d65a392ab950869fae80b2a5f1e33326aca46"

# Regtest block reward, as returned inside gettransaction
WALLET_TX_HEX = (
    "0200000000010100000000000000000000000000000000000000000000000000000000"
    "00000000ffffffff0401180101ffffffff0200f2052a01000000232102ec5601272cb7"
    "1c84d0216661534cfea0d617decbc84a626b7f9f30fb4b0e65d9ac0000000000000000"
    "266a24aa21a9ede2f61c3f71d1defd3fa999dfa36953755c690689799962b48bebd836"
    "974e8cf901200000000000000000000000000000000000000000000000000000000000"
    "00000000000000"
)
WALLET_TXID = "7e7c52b1f46e7ea2511e885d8c0e5df9297f65b6fff6907ceb1377d0582e45f4"

WITNESS_COMMITMENT_SCRIPT = (
    "6a24aa21a9ede2f61c3f71d1defd3fa999dfa36953755c690689799962b48bebd836974e8cf9"
)


@pytest.fixture
def segwit_tx_hex():
    return SEGWIT_TX_HEX


@pytest.fixture
def coinbase_tx_hex():
    return COINBASE_TX_HEX


@pytest.fixture
def legacy_tx_hex():
    return LEGACY_TX_HEX


# ============================================================================
# NODE PAYLOADS
# ============================================================================

@pytest.fixture
def verbose_coinbase_rpc():
    """getrawtransaction <txid> true for COINBASE_TX_HEX"""
    return copy.deepcopy({
        "txid": COINBASE_TXID,
        "hash": COINBASE_WTXID,
        "version": 2,
        "size": 184,
        "vsize": 157,
        "weight": 628,
        "locktime": 0,
        "vin": [
            {
                "coinbase": "03142d010101",
                "txinwitness": ["00" * 32],
                "sequence": 4294967295
            }
        ],
        "vout": [
            {
                "value": 0.0,
                "n": 0,
                "scriptPubKey": {
                    "asm": "039b0e80cdda15ac2164392dfaf4f3eb36dd914dcb1c405eec3dd8c9ebf6c13fc1 OP_CHECKSIG",
                    "hex": "21039b0e80cdda15ac2164392dfaf4f3eb36dd914dcb1c405eec3dd8c9ebf6c13fc1ac",
                    "reqSigs": 1,
                    "type": "pubkey",
                    "addresses": ["my9XdXbMLZm3v8uqGLuPRKatWjnpXw2boX"]
                }
            },
            {
                "value": 0.0,
                "n": 1,
                "scriptPubKey": {
                    "asm": "OP_RETURN aa21a9ede2f61c3f71d1defd3fa999dfa36953755c690689799962b48bebd836974e8cf9",
                    "hex": WITNESS_COMMITMENT_SCRIPT,
                    "type": "nulldata"
                }
            }
        ],
        "hex": COINBASE_TX_HEX,
        "blockhash": "796d7a2dbb1213b65dc2f7170575755efdfae8340b2183e971ed5a89113bbedf",
        "confirmations": 9,
        "time": 1525393130,
        "blocktime": 1525393130
    })


@pytest.fixture
def decoded_segwit_rpc():
    """decoderawtransaction for SEGWIT_TX_HEX"""
    return copy.deepcopy({
        "txid": SEGWIT_TXID,
        "hash": SEGWIT_WTXID,
        "version": 2,
        "size": 234,
        "vsize": 153,
        "weight": 609,
        "locktime": 1325816,
        "vin": [
            {
                "txid": "e1627f27863836426365df01e5581d7dc8a4d8c8279b544dd1b33ccd8193af44",
                "vout": 0,
                "scriptSig": {"asm": "", "hex": ""},
                "txinwitness": [
                    "3044022010d3b0f0e48977b5c7af7f6a0839a8ed24cd760c4e95668ed7b3275fca"
                    "727360022007a27825d82a1e69bff2e8cbf195aa4280c214f1cf7650afb6fa2eb4"
                    "9a97650401",
                    "036bc4598b0de6ac9c560f1322ce86a0bf27e934837ac86196337db06002c3a352"
                ],
                "sequence": 4294967294
            }
        ],
        "vout": [
            {
                "value": 0.61647275,
                "n": 0,
                "scriptPubKey": {
                    "asm": "0 908abcc05defb6ba5630268b395b1fab19ad50d7",
                    "hex": "0014908abcc05defb6ba5630268b395b1fab19ad50d7",
                    "reqSigs": 1,
                    "type": "witness_v0_keyhash",
                    "addresses": ["tb1qjz9teszaa7mt543sy69njkcl4vv665xh5mmv37"]
                }
            },
            {
                "value": 0.071,
                "n": 1,
                "scriptPubKey": {
                    "asm": "0 c39353c0df01296ab055e83b701715b765636cf91c795deb7573e4b055ada533",
                    "hex": "0020c39353c0df01296ab055e83b701715b765636cf91c795deb7573e4b055ada533",
                    "reqSigs": 1,
                    "type": "witness_v0_scripthash",
                    "addresses": ["tb1qcwf48sxlqy5k4vz4aqahq9c4kajkxm8er3u4m6m4w0jtq4dd55esvl03ua"]
                }
            }
        ]
    })


@pytest.fixture
def decoded_legacy_rpc():
    """decoderawtransaction for LEGACY_TX_HEX"""
    return copy.deepcopy({
        "txid": LEGACY_TXID,
        "hash": LEGACY_TXID,
        "version": 1,
        "size": 223,
        "vsize": 223,
        "locktime": 0,
        "vin": [
            {
                "txid": "2ac0daff49a4ff82a35a4864797f99f23c396b0529c5ba1e04b3d7b97521feba",
                "vout": 0,
                "scriptSig": {
                    "asm": "3044022013d212c22f0b46bb33106d148493b9a9723adb2c3dd3a3ebe3a9c9e3b95d8cb0"
                           "0220461661710202fbab550f973068af45c294667fc4dc526627a7463eb23ab39e9b[ALL] "
                           "0479be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798483ada"
                           "7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8",
                    "hex": "473044022013d212c22f0b46bb33106d148493b9a9723adb2c3dd3a3ebe3a9c9e3b95d8c"
                           "b00220461661710202fbab550f973068af45c294667fc4dc526627a7463eb23ab39e9b"
                           "01410479be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
                           "483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8"
                },
                "sequence": 4294967295
            }
        ],
        "vout": [
            {
                "value": 0.0699,
                "n": 0,
                "scriptPubKey": {
                    "asm": "OP_DUP OP_HASH160 01b81d5fa1e55e069e3cc2db9c19e2e80358f306 OP_EQUALVERIFY OP_CHECKSIG",
                    "hex": "76a91401b81d5fa1e55e069e3cc2db9c19e2e80358f30688ac",
                    "reqSigs": 1,
                    "type": "pubkeyhash",
                    "addresses": ["1A6Ei5cRfDJ8jjhwxfzLJph8B9ZEthR9Z"]
                }
            }
        ]
    })


@pytest.fixture
def wallet_tx_rpc():
    """gettransaction for WALLET_TX_HEX"""
    return copy.deepcopy({
        "amount": 50.0,
        "confirmations": 1,
        "generated": True,
        "blockhash": "0ccd5f1f7d9a7c2b6bb3aa98d3e5f27e8fb5b0eb2f1a5d54ac3efe3c7e4bd01f",
        "blockindex": 0,
        "blocktime": 1525393300,
        "txid": WALLET_TXID,
        "walletconflicts": [],
        "time": 1525393300,
        "timereceived": 1525393300,
        "bip125-replaceable": "no",
        "details": [
            {
                "account": "",
                "address": "n3e8z6HmMDPQGDr3seFjpg88PeagBg2EeR",
                "category": "immature",
                "amount": 50.0,
                "vout": 0
            }
        ],
        "hex": WALLET_TX_HEX
    })


@pytest.fixture
def utxo_rpc():
    """One listunspent entry"""
    return copy.deepcopy({
        "txid": "d54994ece1d11b19785c7248868696250ab195605b469632b7bd68130e880c9a",
        "vout": 1,
        "address": "mgnucj8nYqdrPFh2JfZSB1NmUThUGnmsqe",
        "account": "test label",
        "scriptPubKey": "76a9140dfc8bafc8419853b34d5e072ad37d1a5159f58488ac",
        "amount": 0.0001,
        "confirmations": 6210,
        "spendable": True,
        "solvable": True
    })


@pytest.fixture
def to_json():
    """Serialize a payload the way the node writes it"""
    return json.dumps


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from TXBRIDGE_* variables and the settings cache"""
    for key in list(os.environ):
        if key.startswith("TXBRIDGE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("TXBRIDGE_ENABLE_CONSOLE_LOG", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
