#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Type script args: the uniqueness key for anchor and badge cells.
#
#   args = sha256(event_id) || sha256(party_address)      (64 bytes)
#
# party is the creator for an anchor, the recipient for a badge. The first
# half alone is used for prefix searches ("everything about this event").
#
from .constants import HASH_LEN, ARGS_LEN
from .utils import digest, to_hex, from_hex
from .exceptions import FormatError

def event_hash(event_id):
    # leading 32 bytes of args
    if not event_id:
        raise FormatError("Event id required")
    return digest(event_id)

def build_args_bytes(event_id, party_address):
    if not party_address:
        raise FormatError("Party address required")

    rv = event_hash(event_id) + digest(party_address)
    assert len(rv) == ARGS_LEN
    return rv

def build_args(event_id, party_address):
    # hex form, as used in scripts
    return to_hex(build_args_bytes(event_id, party_address))

def prefix_args(event_id):
    # for prefix searches
    return to_hex(event_hash(event_id))

def split_args(args):
    # reverse: (event_id_hash, party_hash), both bytes
    raw = from_hex(args) if isinstance(args, str) else bytes(args)
    if len(raw) != ARGS_LEN:
        raise FormatError(f"Script args must be {ARGS_LEN} bytes, got {len(raw)}")

    return raw[0:HASH_LEN], raw[HASH_LEN:]

# EOF
