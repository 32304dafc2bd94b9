#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Message signing and recovery.
#
import pytest

from ckbpop.signer import (KeySigner, WatchOnlySigner, verify_message, recover_pubkey,
                                message_digest, require_signer, SignerABC)
from ckbpop.compat import ckb_hash
from ckbpop.utils import from_hex, to_hex
from ckbpop.address import encode_address, Script
from ckbpop.exceptions import SignerUnavailable, FormatError

def test_digest():
    assert message_digest('hi') == ckb_hash(b'Nervos Message:hi')

def test_sign_verify(organizer, attendee):
    sig = organizer.sign_message('hello')
    assert len(from_hex(sig)) == 65
    assert sig.startswith('0x')

    assert recover_pubkey('hello', sig) == organizer.pubkey
    assert verify_message(organizer.address, 'hello', sig)

    assert not verify_message(organizer.address, 'hellO', sig)
    assert not verify_message(attendee.address, 'hello', sig)

def test_recid_offset(organizer):
    raw = from_hex(organizer.sign_message('hello'))
    alt = raw[0:64] + bytes([raw[64] + 27])
    assert verify_message(organizer.address, 'hello', to_hex(alt))

def test_bad_sigs(organizer):
    with pytest.raises(FormatError):
        recover_pubkey('hello', '0x1234')
    with pytest.raises(FormatError):
        recover_pubkey('hello', '0x' + '00'*64 + '09')
    with pytest.raises(FormatError):
        recover_pubkey('hello', 'not hex')

def test_other_locks(organizer):
    sig = organizer.sign_message('hello')
    multisig = Script('0x' + 'aa'*32, 'type', '0x' + '00'*20)
    assert verify_message(encode_address(multisig), 'hello', sig) == False

def test_connection():
    s = KeySigner(bytes([3]) * 32)
    assert not s.is_connected
    with pytest.raises(SignerUnavailable):
        s.sign_message('x')
    with pytest.raises(SignerUnavailable):
        require_signer(s)
    with pytest.raises(SignerUnavailable):
        require_signer(None)

    assert s.connect() == s.address
    assert s.get_recommended_address() == s.address

    # no client to send with
    with pytest.raises(SignerUnavailable):
        s.send_transaction(dict())

    s.disconnect()
    with pytest.raises(SignerUnavailable):
        s.get_recommended_address()

def test_hex_key(organizer):
    k = KeySigner('0x' + '01' * 32)
    assert k.address == organizer.address
    assert k.address.startswith('ckt1')
    assert KeySigner(bytes([1])*32, testnet=False).address.startswith('ckb1')

def test_watch_only(organizer):
    w = WatchOnlySigner(organizer.address)
    assert require_signer(w) is w
    assert w.get_recommended_address() == organizer.address
    with pytest.raises(SignerUnavailable):
        w.sign_message('x')
    with pytest.raises(SignerUnavailable):
        w.send_transaction({})

def test_abc():
    s = SignerABC()
    with pytest.raises(NotImplementedError):
        s.connect()
    with pytest.raises(NotImplementedError):
        s.sign_message('x')

# EOF
