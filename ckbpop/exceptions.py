#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Exceptions, and classification of chain rejections.
#
import re
from .constants import VALIDATOR_ERRORS, GENERIC_REJECTION, ERR_ALREADY_EXISTS

class PopError(RuntimeError):
    pass

class FormatError(PopError, ValueError):
    # malformed hex, address, cell data or payload: caller's fault
    pass

class SignerUnavailable(PopError):
    def __init__(self, msg='Wallet not connected'):
        super().__init__(msg)

class NetworkUnavailable(PopError):
    pass

class EventNotFound(PopError):
    pass

class RpcError(PopError):
    # error reply from a JSON-RPC node
    def __init__(self, msg, code, raw_msg):
        self.code = code
        self.raw_msg = raw_msg
        super().__init__(msg)

class ChainRejection(PopError):
    # a transaction proposal the chain refused
    def __init__(self, message, code=None, raw=None):
        self.message = message
        self.code = code
        self.raw = raw if raw is not None else message
        super().__init__(message)

    @property
    def already_exists(self):
        return self.code == ERR_ALREADY_EXISTS

    def __repr__(self):
        return '<ChainRejection code=%r: %s>' % (self.code, self.message)

#
# QR payload failures. All are shown to the user and need a fresh scan.
#
class QrRejected(PopError):
    reason = 'Rejected'

    def __init__(self, msg, event_id=None):
        self.event_id = event_id
        super().__init__(msg)

class Malformed(QrRejected, FormatError):
    reason = 'Malformed'

class Expired(QrRejected):
    reason = 'Expired'

class ClockSkew(QrRejected):
    reason = 'ClockSkew'

class SignatureInvalid(QrRejected):
    reason = 'SignatureInvalid'


# CKB reports script failures as "ValidationFailure: see error code 3 on page ..."
# and older nodes as "ValidationFailure(3)"
_CODE_PATTERNS = [
    re.compile(r'ValidationFailure\b.*?error code (-?\d+)', re.S),
    re.compile(r'ValidationFailure\((-?\d+)\)'),
]

def classify(raw_error):
    # Map a raw broadcast failure (exception or text) into ChainRejection.
    # - validator codes are re-parsed from the actual rejection text, every time
    if isinstance(raw_error, ChainRejection):
        return raw_error

    if isinstance(raw_error, BaseException):
        raw = getattr(raw_error, 'raw_msg', None) or str(raw_error)
        if raw != str(raw_error):
            raw = '%s %s' % (raw_error, raw)
    else:
        raw = str(raw_error)

    if 'ValidationFailure' not in raw:
        # network, timeout, wallet refusal... keep their words
        return ChainRejection(str(raw_error), None, raw)

    for pat in _CODE_PATTERNS:
        m = pat.search(raw)
        if m:
            code = int(m.group(1))
            return ChainRejection(VALIDATOR_ERRORS.get(code, GENERIC_REJECTION), code, raw)

    return ChainRejection(GENERIC_REJECTION, None, raw)

# EOF
