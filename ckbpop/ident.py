#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Event identifiers.
#
# The anchor validator recomputes this, so every byte matters:
#
#   event_id = hex(sha256(creator_address_utf8 || timestamp_i64_le || nonce_utf8))
#
# - address is the text form, as the wallet reports it
# - nonce is also text (hex digits), not decoded
#
import time
from collections import namedtuple
from .utils import digest, force_bytes, le64, pick_nonce, B2A, from_hex
from .exceptions import FormatError

EventIdPreimage = namedtuple('EventIdPreimage', 'event_id timestamp nonce')

def compute_event_id(creator_address, timestamp, nonce):
    # deterministic part
    if not creator_address:
        raise FormatError("Creator address required")
    if not isinstance(timestamp, int) or isinstance(timestamp, bool):
        raise FormatError("Timestamp must be integer seconds")

    md = digest(force_bytes(creator_address) + le64(timestamp) + force_bytes(nonce))

    return B2A(md)

def derive_event_id(creator_address, timestamp=None, nonce=None):
    # Fresh event id for a creator. Nonce is random per attempt.
    # - returns (event_id, timestamp, nonce) so the preimage can be shown/stored
    if timestamp is None:
        timestamp = int(time.time())
    if nonce is None:
        nonce = pick_nonce()

    return EventIdPreimage(compute_event_id(creator_address, timestamp, nonce), timestamp, nonce)

def check_event_id(event_id):
    # 64 hex chars, lower-case, no 0x
    if not isinstance(event_id, str) or len(event_id) != 64 or event_id != event_id.lower():
        raise FormatError(f"Bad event id: {event_id!r}")
    from_hex(event_id, 32)
    return event_id

# EOF
