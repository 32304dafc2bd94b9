#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# CKB addresses <=> lock scripts.
#
# Payload formats (RFC 0021):
#   0x00 | code_hash(32) | hash_type(1) | args        full, bech32m (current)
#   0x01 | code_index(1) | args(20)                   short, bech32 (deprecated)
#   0x02 | code_hash(32) | args                       full data, bech32 (deprecated)
#   0x04 | code_hash(32) | args                       full type, bech32 (deprecated)
#
# CKB addresses are longer than 90 chars, so we can't use bech32_decode()
# as-is: it enforces the BIP-173 length limit. The bech32 module also predates
# bech32m, so we pick the checksum constant ourselves and use its polymod.
#
from collections import namedtuple
from bech32 import CHARSET, bech32_polymod, bech32_hrp_expand, convertbits
from .constants import *
from .compat import blake160
from .utils import to_hex, from_hex
from .exceptions import FormatError

Script = namedtuple('Script', 'code_hash hash_type args')

# checksum constants: BIP-173 and BIP-350
BECH32 = 1
BECH32M = 0x2bc830a3

_HASH_TYPE_NAMES = dict((v, k) for k, v in HASH_TYPES.items())

# short format code index => (code_hash, hash_type, args length)
_SHORT_CODES = {
    0x00: (SECP256K1_BLAKE160_CODE_HASH, 'type', 20),
}

def _decode_long(text):
    # bech32_decode() minus the length limit
    if any(ord(x) < 33 or ord(x) > 126 for x in text) \
            or (text.lower() != text and text.upper() != text):
        raise FormatError("Address has bad characters or mixed case")

    text = text.lower()
    pos = text.rfind('1')
    if pos < 1 or pos + 7 > len(text):
        raise FormatError("Address is not bech32")
    if not all(x in CHARSET for x in text[pos+1:]):
        raise FormatError("Address is not bech32")

    hrp = text[:pos]
    data = [CHARSET.find(x) for x in text[pos+1:]]
    enc = bech32_polymod(bech32_hrp_expand(hrp) + data)
    if enc not in (BECH32, BECH32M):
        raise FormatError("Address checksum is wrong")

    payload = convertbits(data[:-6], 5, 8, False)
    if payload is None:
        raise FormatError("Address has bad padding")

    return hrp, bytes(payload), enc

def parse_address(address):
    # Address text => (Script, is_testnet). Raises FormatError.
    if not isinstance(address, str) or not address:
        raise FormatError("Address required")

    hrp, payload, enc = _decode_long(address.strip())

    if hrp not in (MAINNET_HRP, TESTNET_HRP):
        raise FormatError(f"Not a CKB address (hrp={hrp})")
    if not payload:
        raise FormatError("Empty address payload")

    fmt = payload[0]
    if fmt == 0x00:
        if enc != BECH32M:
            raise FormatError("Full address must use bech32m")
        if len(payload) < 34:
            raise FormatError("Full address is too short")
        if payload[33] not in _HASH_TYPE_NAMES:
            raise FormatError(f"Unknown hash_type: {payload[33]}")

        script = Script(to_hex(payload[1:33]), _HASH_TYPE_NAMES[payload[33]], to_hex(payload[34:]))

    elif fmt == 0x01:
        if enc != BECH32:
            raise FormatError("Short address must use bech32")
        if len(payload) < 2 or payload[1] not in _SHORT_CODES:
            raise FormatError("Unsupported short address code index")

        code_hash, hash_type, args_len = _SHORT_CODES[payload[1]]
        args = payload[2:]
        if len(args) != args_len:
            raise FormatError("Short address args have wrong length")

        script = Script(code_hash, hash_type, to_hex(args))

    elif fmt in (0x02, 0x04):
        if enc != BECH32:
            raise FormatError("Deprecated full address must use bech32")
        if len(payload) < 33:
            raise FormatError("Full address is too short")

        hash_type = 'data' if fmt == 0x02 else 'type'
        script = Script(to_hex(payload[1:33]), hash_type, to_hex(payload[33:]))

    else:
        raise FormatError(f"Unknown address format: 0x{fmt:02x}")

    return script, (hrp == TESTNET_HRP)

def address_to_script(address):
    # lock script for an address
    return parse_address(address)[0]

def encode_address(script, testnet=True):
    # Script => full format (0x00) address text
    if script.hash_type not in HASH_TYPES:
        raise FormatError(f"Unknown hash_type: {script.hash_type}")

    payload = bytes([0x00]) + from_hex(script.code_hash, 32) \
                + bytes([HASH_TYPES[script.hash_type]]) + from_hex(script.args)

    hrp = TESTNET_HRP if testnet else MAINNET_HRP
    return bech32_text(hrp, payload, BECH32M)

def bech32_text(hrp, payload, const=BECH32M):
    # bytes => address text, no length limit
    data = convertbits(payload, 8, 5)
    pm = bech32_polymod(bech32_hrp_expand(hrp) + data + [0]*6) ^ const
    data += [(pm >> 5 * (5 - i)) & 31 for i in range(6)]

    return hrp + '1' + ''.join(CHARSET[d] for d in data)

def pubkey_to_script(pubkey):
    # default lock for a compressed pubkey
    if len(pubkey) != 33:
        raise FormatError("Expecting compressed pubkey")

    return Script(SECP256K1_BLAKE160_CODE_HASH, 'type', to_hex(blake160(pubkey)))

def render_address(pubkey, testnet=True):
    # make the text string used as an address
    return encode_address(pubkey_to_script(pubkey), testnet=testnet)

def script_to_json(script):
    # for RPC: plain dict
    return dict(code_hash=script.code_hash, hash_type=script.hash_type, args=script.args)

def script_from_json(d):
    try:
        return Script(d['code_hash'], d['hash_type'], d['args'])
    except (KeyError, TypeError):
        raise FormatError(f"Bad script: {d!r}")

# EOF
