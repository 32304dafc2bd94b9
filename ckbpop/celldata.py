#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Cell data encodings.
#
# Anchor cells: UTF-8 JSON, canonical (sorted keys, no spaces) so the same
#   event always produces the same bytes. Readable by anyone with an indexer.
#
# Badge cells: 34 bytes, a commitment only:
#
#   [version:1][flags:1][content_hash:32]
#
#   flags bit0 set => content_hash is an attendance proof hash
#   otherwise      => sha256(canonical CBOR of off-chain badge metadata)
#
import json, cbor2
from .constants import *
from .utils import digest, from_hex
from .exceptions import FormatError

# these must be present in anchor JSON
ANCHOR_REQUIRED = ('event_id', 'creator', 'name')

# optional fields, in the order humans think about them
ANCHOR_OPTIONAL = ('start_time', 'location', 'description', 'image_url', 'timestamp', 'nonce')

def anchor_metadata(event_id, creator, name, **kws):
    # Make the dict that goes into anchor cell data. Blank optional values are skipped.
    unknown = set(kws) - set(ANCHOR_OPTIONAL)
    if unknown:
        raise FormatError(f"Unknown anchor fields: {', '.join(sorted(unknown))}")

    rv = dict(protocol=PROTOCOL_ID, version='1', event_id=event_id, creator=creator, name=name)
    for k in ANCHOR_OPTIONAL:
        v = kws.get(k)
        if v is not None and v != '':
            rv[k] = v

    return rv

def encode_anchor_data(metadata):
    # dict => bytes
    for k in ANCHOR_REQUIRED:
        if not isinstance(metadata.get(k), str) or not metadata[k]:
            raise FormatError(f"Anchor metadata needs '{k}'")

    try:
        rv = json.dumps(metadata, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"Anchor metadata is not JSON-able: {exc}")

    return rv.encode('utf-8')

def decode_anchor_data(data):
    # bytes (or 0x-hex from RPC) => dict
    if isinstance(data, str):
        data = from_hex(data)

    try:
        rv = json.loads(bytes(data).decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        raise FormatError("Anchor cell data is not UTF-8 JSON")

    if not isinstance(rv, dict):
        raise FormatError("Anchor cell data is not a JSON object")

    for k in ANCHOR_REQUIRED:
        if not isinstance(rv.get(k), str):
            raise FormatError(f"Anchor cell data lacks '{k}'")

    return rv

def badge_metadata(event_id, issuer, recipient):
    # off-chain badge record, which the cell commits to
    return dict(protocol=PROTOCOL_ID, version='1', event_id=event_id,
                    issuer=issuer, recipient=recipient)

def badge_content_hash(metadata):
    # canonical CBOR keeps this stable across implementations
    return digest(cbor2.dumps(metadata, canonical=True))

def encode_badge_data(content_hash, flags=0):
    if len(content_hash) != HASH_LEN:
        raise FormatError(f"Content hash must be {HASH_LEN} bytes")
    if not (0 <= flags <= 0xff):
        raise FormatError("Flags must fit in a byte")

    return bytes([BADGE_DATA_VERSION, flags]) + bytes(content_hash)

def decode_badge_data(data):
    # => (version, flags, content_hash)
    if isinstance(data, str):
        data = from_hex(data)

    if len(data) != BADGE_DATA_LEN:
        raise FormatError(f"Badge cell data must be {BADGE_DATA_LEN} bytes, got {len(data)}")
    if data[0] != BADGE_DATA_VERSION:
        raise FormatError(f"Unknown badge data version: {data[0]}")

    return data[0], data[1], bytes(data[2:])

def occupied_capacity(lock, type_script, data):
    # Bytes a cell occupies, in shannons. Capacity field itself is 8 bytes.
    size = 8 + len(data)
    for s in (lock, type_script):
        if s is not None:
            size += 32 + 1 + len(from_hex(s.args))

    return size * SHANNONS

# EOF
