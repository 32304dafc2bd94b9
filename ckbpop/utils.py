#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Digest and hex helpers used everywhere.
#
import os, struct
from binascii import b2a_hex
from .constants import *
from .compat import sha256s
from .exceptions import FormatError

# show bytes as hex in a string
B2A = lambda x: b2a_hex(x).decode('ascii')

def digest(data):
    # the protocol's one hash: SHA256, 32 bytes
    return sha256s(force_bytes(data))

def force_bytes(foo):
    # convert strings to bytes where needed (UTF-8, never hex-decoded)
    return foo.encode('utf-8') if isinstance(foo, str) else bytes(foo)

def to_hex(raw, prefix=True):
    # bytes => '0x...' as CKB RPC wants it
    return ('0x' if prefix else '') + B2A(raw)

def from_hex(text, length=None):
    # '0x...' or bare hex => bytes, raises FormatError on junk
    if not isinstance(text, str):
        raise FormatError(f"Expected hex string, got {type(text).__name__}")

    h = text[2:] if text[0:2] in ('0x', '0X') else text
    try:
        rv = bytes.fromhex(h)
    except ValueError:
        raise FormatError(f"Malformed hex: {text[0:20]}")

    if length is not None and len(rv) != length:
        raise FormatError(f"Expected {length} bytes of hex, got {len(rv)}")

    return rv

def hex_int(n):
    # CKB RPC encodes integers as 0x-prefixed hex
    return hex(int(n))

def int_hex(text):
    # ... and back
    try:
        return int(text, 16)
    except (TypeError, ValueError):
        raise FormatError(f"Malformed hex number: {text!r}")

def le64(n):
    # 8-byte little-endian, signed (matches i64::to_le_bytes)
    return struct.pack('<q', n)

def pick_nonce():
    # random nonce, shown as hex; must not be a trivial value
    for retry in range(3):
        rv = os.urandom(EVENT_NONCE_SIZE)
        if len(set(rv)) >= 2:
            return B2A(rv)

    raise RuntimeError("stuck RNG?")

# EOF
