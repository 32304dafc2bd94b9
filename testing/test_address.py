#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Address <=> lock script.
#
import pytest

from ckbpop.constants import SECP256K1_BLAKE160_CODE_HASH
from ckbpop.address import (parse_address, address_to_script, encode_address, render_address,
                                pubkey_to_script, script_to_json, script_from_json, Script,
                                bech32_text, BECH32, BECH32M)
from ckbpop.compat import blake160, CT_pick_keypair
from ckbpop.utils import from_hex
from ckbpop.exceptions import FormatError

ADDR_A = 'ckb1qzda0cr08m85hc8jlnfp3zer7xulejywt49kt2rr0vthywaa50xwsqdnnw7qkdnnclfkg59uzn8umtfd2kwxceqxwquc4'
ARGS_A = '0xb39bbc0b3673c7d36450bc14cfcdad2d559c6c64'

def test_full_address():
    script, testnet = parse_address(ADDR_A)
    assert testnet == False
    assert script == Script(SECP256K1_BLAKE160_CODE_HASH, 'type', ARGS_A)

    assert encode_address(script, testnet=False) == ADDR_A
    assert address_to_script(ADDR_A.upper()) == script

    t = encode_address(script, testnet=True)
    assert t.startswith('ckt1')
    assert parse_address(t) == (script, True)

def test_deprecated_formats():
    args = from_hex(ARGS_A)
    code = from_hex(SECP256K1_BLAKE160_CODE_HASH)

    short = bech32_text('ckb', bytes([1, 0]) + args, BECH32)
    assert address_to_script(short) == Script(SECP256K1_BLAKE160_CODE_HASH, 'type', ARGS_A)

    full_type = bech32_text('ckt', bytes([4]) + code + args, BECH32)
    assert parse_address(full_type) == (Script(SECP256K1_BLAKE160_CODE_HASH, 'type', ARGS_A), True)

    full_data = bech32_text('ckt', bytes([2]) + code + args, BECH32)
    assert address_to_script(full_data).hash_type == 'data'

def test_known_vectors():
    # RFC 0021 examples: both checksum kinds, long and short
    short = 'ckb1qyqt8xaupvm8837nv3gtc9x0ekkj64vud3jqfwyw5v'
    assert address_to_script(short) == address_to_script(ADDR_A)
    assert bech32_text('ckb', bytes([1, 0]) + from_hex(ARGS_A), BECH32) == short

    assert bech32_text('ckb', from_hex('0x00' + SECP256K1_BLAKE160_CODE_HASH[2:] + '01')
                            + from_hex(ARGS_A), BECH32M) == ADDR_A

@pytest.mark.parametrize('bad', [
    '',
    'hello',
    ADDR_A[:-1] + ('q' if ADDR_A[-1] != 'q' else 'p'),      # checksum
    ADDR_A[0:10] + ADDR_A[10:].upper(),                     # mixed case
    'bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4',           # not ckb
])
def test_bad_address(bad):
    with pytest.raises(FormatError):
        parse_address(bad)

def test_wrong_checksum_kind():
    args = from_hex(ARGS_A)
    code = from_hex(SECP256K1_BLAKE160_CODE_HASH)

    # full format with old checksum
    with pytest.raises(FormatError):
        parse_address(bech32_text('ckb', bytes([0]) + code + b'\x01' + args, BECH32))

    # short format with new checksum
    with pytest.raises(FormatError):
        parse_address(bech32_text('ckb', bytes([1, 0]) + args, BECH32M))

    # unknown code index
    with pytest.raises(FormatError):
        parse_address(bech32_text('ckb', bytes([1, 5]) + args, BECH32))

def test_render():
    priv, pub = CT_pick_keypair()
    addr = render_address(pub)

    s = address_to_script(addr)
    assert s == pubkey_to_script(pub)
    assert from_hex(s.args) == blake160(pub)

    with pytest.raises(FormatError):
        pubkey_to_script(pub[1:])

def test_json():
    s = address_to_script(ADDR_A)
    d = script_to_json(s)
    assert d == dict(code_hash=SECP256K1_BLAKE160_CODE_HASH, hash_type='type', args=ARGS_A)
    assert script_from_json(d) == s

    with pytest.raises(FormatError):
        script_from_json(dict(code_hash='0x'))

# EOF
