#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Attendance proofs.
#
# After scanning, the attendee signs:
#
#     CKB-PoP|<event_id>|<qr_timestamp>|<attendee_address>
#
# which ties "this address saw that QR frame". Its hash is what the badge
# cell commits to, so anyone holding the proof can match it to the badge.
#
from collections import namedtuple
from .constants import PROTOCOL_TAG
from .utils import digest
from .signer import require_signer, verify_message
from .kiosk import parse_payload
from .exceptions import FormatError

AttendanceProof = namedtuple('AttendanceProof',
                        'event_id qr_timestamp attendee_address signature')

def attendance_message(event_id, qr_timestamp, attendee_address):
    return f'{PROTOCOL_TAG}|{event_id}|{int(qr_timestamp)}|{attendee_address}'

def make_proof(signer, raw_payload, attendee_address=None):
    # Have the attendee's wallet sign for the scanned payload. Bare codes
    # have no timestamp, so they're proven at time zero.
    require_signer(signer)
    p = parse_payload(raw_payload)
    addr = attendee_address or signer.get_recommended_address()
    ts = p.issued_at or 0

    sig = signer.sign_message(attendance_message(p.event_id, ts, addr))

    return AttendanceProof(p.event_id, ts, addr, sig)

def verify_proof(proof):
    # True if signature is from the attendee address
    try:
        return verify_message(proof.attendee_address,
                    attendance_message(proof.event_id, proof.qr_timestamp, proof.attendee_address),
                    proof.signature)
    except FormatError:
        return False

def proof_hash(proof):
    # 32 bytes; goes into badge cell data
    msg = attendance_message(proof.event_id, proof.qr_timestamp, proof.attendee_address)
    return digest(msg + '|' + proof.signature.lower())

# EOF
