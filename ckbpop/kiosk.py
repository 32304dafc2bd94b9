#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# kiosk.py
#
# Rotating QR codes for check-in.
#
# The organizer's wallet signs once per kiosk activation:
#
#     CKB-PoP-Kiosk|<event_id>|<session_start>
#
# then the screen shows a new payload every few seconds:
#
#     <event_id>|<now>|<session_start>.<signature>
#
# Attendee side checks freshness (60s old, 10s future) and that the
# signature is from the event's creator. Two weaker forms are also read:
#
#     <event_id>|<ts>                   timed, unsigned
#     <event_id>                        bare code, typed in by hand, never expires
#
# Whether those are acceptable is a QrPolicy decision, not a silent fallback.
#
import time, threading
from collections import namedtuple
from .constants import *
from .signer import require_signer, verify_message
from .exceptions import QrRejected, Malformed, Expired, ClockSkew, SignatureInvalid, FormatError

QrPayload = namedtuple('QrPayload', 'event_id issued_at signature')
QrPayload.__new__.__defaults__ = (None, None)

KioskSession = namedtuple('KioskSession', 'event_id session_start signature')

QrPolicy = namedtuple('QrPolicy', 'max_age_ms max_future_ms allow_bare allow_unsigned max_session')
DEFAULT_POLICY = QrPolicy(QR_MAX_AGE_MS, QR_MAX_FUTURE_MS, True, True, KIOSK_SESSION_MAX)
STRICT_POLICY = DEFAULT_POLICY._replace(allow_bare=False, allow_unsigned=False)

# outcome of validate_payload(); assurance is 'signed', 'timed' or 'bare'
QrCheck = namedtuple('QrCheck', 'event_id ok reason assurance timestamp')

def session_message(event_id, session_start):
    return f'{PROTOCOL_TAG}-Kiosk|{event_id}|{int(session_start)}'

def session_token(session):
    # what goes in the 3rd field of each payload
    return f'{session.session_start}.{session.signature}'

def start_session(signer, event_id, now=None):
    # One wallet prompt per kiosk activation.
    require_signer(signer)
    start = int(now if now is not None else time.time())

    sig = signer.sign_message(session_message(event_id, start))

    return KioskSession(event_id, start, sig)

def next_payload(session, now=None):
    # new frame for the screen; cheap, no signing
    ts = int(now if now is not None else time.time())
    return QrPayload(session.event_id, ts, session_token(session))

def encode_payload(payload):
    parts = [payload.event_id]
    if payload.issued_at is not None:
        parts.append(str(payload.issued_at))
        if payload.signature:
            parts.append(payload.signature)

    return '|'.join(parts)

def parse_payload(raw):
    # text => QrPayload, raise Malformed
    if not isinstance(raw, str):
        raise Malformed("QR payload is not text")

    parts = raw.strip().split('|')
    if len(parts) > 3:
        raise Malformed("QR payload has too many fields")

    event_id = parts[0].strip()
    if not event_id or any(c.isspace() for c in event_id):
        raise Malformed("QR payload has no event id")

    ts = None
    if len(parts) >= 2:
        if not (parts[1].isascii() and parts[1].isdigit()):
            raise Malformed("QR timestamp is not a number", event_id)
        ts = int(parts[1])

    sig = None
    if len(parts) == 3:
        sig = parts[2].strip()
        if not sig:
            raise Malformed("QR signature field is empty", event_id)

    return QrPayload(event_id, ts, sig)

def to_millis(ts):
    # accept either unit; big numbers are already ms
    return ts if ts >= MS_THRESHOLD else ts * 1000

def _split_token(token, claimed_ts):
    # "<start>.<sig>" or just "<sig>" (then start is the frame time)
    if '.' in token:
        start, sig = token.split('.', 1)
        if not (start.isascii() and start.isdigit()):
            raise ValueError("bad session start")
        return int(start), sig

    return claimed_ts, token

def check_payload(raw, now=None, creator_lookup=None, policy=DEFAULT_POLICY):
    # Validate a scanned payload. Returns QrCheck, raises QrRejected subclasses.
    # - now is unix seconds (float ok)
    # - creator_lookup(event_id) => creator address or None; needed for signed payloads
    p = parse_payload(raw)
    eid = p.event_id

    if p.issued_at is None:
        if not policy.allow_bare:
            raise SignatureInvalid("Bare event codes are not accepted here", eid)
        return QrCheck(eid, True, None, 'bare', None)

    now_ms = int((now if now is not None else time.time()) * 1000)
    ts_ms = to_millis(p.issued_at)

    if now_ms - ts_ms > policy.max_age_ms:
        raise Expired("QR Code Expired. Please scan the live screen again.", eid)
    if ts_ms - now_ms > policy.max_future_ms:
        raise ClockSkew("QR code is from the future. Check device clock.", eid)

    if p.signature is None:
        if not policy.allow_unsigned:
            raise SignatureInvalid("Unsigned QR codes are not accepted here", eid)
        return QrCheck(eid, True, None, 'timed', p.issued_at)

    creator = creator_lookup(eid) if creator_lookup else None
    if not creator:
        raise SignatureInvalid("Cannot check signature: event creator unknown", eid)

    ts_s = ts_ms // 1000
    try:
        start, sig = _split_token(p.signature, ts_s)
    except ValueError:
        raise Malformed("QR signature field is garbled", eid)

    if start > ts_s:
        raise SignatureInvalid("QR frame predates its kiosk session", eid)
    if ts_s - start > policy.max_session:
        raise Expired("Kiosk session is too old; organizer must restart it", eid)

    try:
        ok = verify_message(creator, session_message(eid, start), sig)
    except FormatError:
        ok = False

    if not ok:
        raise SignatureInvalid("QR signature is not from the event creator", eid)

    return QrCheck(eid, True, None, 'signed', p.issued_at)

def validate_payload(raw, now=None, creator_lookup=None, policy=DEFAULT_POLICY):
    # Same as check_payload, but failures come back as QrCheck(ok=False, reason=...)
    try:
        return check_payload(raw, now=now, creator_lookup=creator_lookup, policy=policy)
    except QrRejected as exc:
        return QrCheck(exc.event_id, False, exc.reason, None, None)

class Kiosk:
    #
    # One kiosk activation: unsigned -> active -> expired/closed.
    #
    def __init__(self, signer, event_id, max_session=KIOSK_SESSION_MAX, clock=time.time):
        self.signer = signer
        self.event_id = event_id
        self.max_session = max_session
        self.clock = clock
        self.session = None
        self.state = 'unsigned'
        self.error = None
        self._rotator = None

    def __repr__(self):
        return '<Kiosk %s.. %s>' % (self.event_id[0:8], self.state)

    def start(self):
        assert self.state == 'unsigned', self.state
        self.session = start_session(self.signer, self.event_id, now=self.clock())
        self.state = 'active'
        return self.session

    def payload(self):
        # current frame, as text
        if self.state != 'active':
            raise RuntimeError(f"Kiosk is {self.state}")

        now = self.clock()
        if now - self.session.session_start > self.max_session:
            self.close('expired')
            raise Expired("Kiosk session ran too long; start a new one", self.event_id)

        return encode_payload(next_payload(self.session, now=now))

    def rotate(self, callback, interval=QR_ROTATE_SECS):
        # background refresh; returns the rotator (already running)
        assert self._rotator is None, 'already rotating'
        self._rotator = QrRotator(self.payload, callback, interval, on_error=self._display_failed)
        self._rotator.start()
        return self._rotator

    def _display_failed(self, exc):
        # callback blew up: a frozen QR must not look live
        self.error = exc
        self.close()

    def close(self, state='closed'):
        # stop timer, forget the signature
        if self._rotator is not None:
            self._rotator.stop()
            self._rotator = None
        self.session = None
        self.state = state

    def __enter__(self):
        if self.state == 'unsigned':
            self.start()
        return self

    def __exit__(self, *a):
        self.close()

class QrRotator:
    #
    # Calls callback(payload_text) now and then every interval seconds.
    # stop() returns only after the thread is gone. If the callback raises,
    # the error is kept, on_error(exc) is called, and rotation ends.
    #
    def __init__(self, make_payload, callback, interval=QR_ROTATE_SECS, on_error=None):
        self.make_payload = make_payload
        self.callback = callback
        self.interval = interval
        self.count = 0
        self.on_error = on_error
        self.error = None
        self._halt = threading.Event()
        self._thread = None

    def start(self):
        self._thread = threading.Thread(target=self._run, name='qr-rotator', daemon=True)
        self._thread.start()

    def _run(self):
        while not self._halt.is_set():
            try:
                text = self.make_payload()
            except QrRejected as exc:
                # session over
                self.error = exc
                break
            try:
                self.callback(text)
            except Exception as exc:
                self.error = exc
                if self.on_error:
                    self.on_error(exc)
                break
            self.count += 1
            if self._halt.wait(self.interval):
                break

    def stop(self):
        self._halt.set()
        th = self._thread
        if th is not None and th is not threading.current_thread():
            th.join()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *a):
        self.stop()

# EOF
