#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# signer.py
#
# What we need from a wallet, and how to check what it signed.
#
# Any object with these methods can be used: browser bridge, hardware
# wallet, remote signer, or the KeySigner below. Nothing here subclasses a
# wallet; it's handed in.
#
from .constants import *
from .compat import ckb_hash, blake160, CT_sig_to_pubkey, CT_sign, CT_priv_to_pubkey
from .utils import from_hex, to_hex, force_bytes
from .address import parse_address, render_address
from .exceptions import FormatError, SignerUnavailable

class SignerABC:
    #
    # Abstract base class. Documents the signer contract.
    #

    @property
    def is_connected(self):
        raise NotImplementedError

    def connect(self):
        # ask the wallet for access; may prompt the user
        raise NotImplementedError

    def get_recommended_address(self):
        # address text the wallet wants us to use
        raise NotImplementedError

    def sign_message(self, text):
        # CKB personal-sign of text, returns hex (65-byte recoverable sig)
        raise NotImplementedError

    def send_transaction(self, tx):
        # complete inputs + fee, sign, broadcast. Returns tx hash.
        raise NotImplementedError

def require_signer(signer):
    # raise unless we have a signer we can use right now
    if signer is None or not getattr(signer, 'is_connected', False):
        raise SignerUnavailable()
    return signer

def message_digest(text):
    # what CKB wallets actually sign for a text message
    return ckb_hash(force_bytes(CKB_MESSAGE_PREFIX) + force_bytes(text))

def recover_pubkey(text, signature):
    # Pubkey from message + recoverable sig (hex). Raises FormatError on junk.
    sig = from_hex(signature) if isinstance(signature, str) else bytes(signature)
    if len(sig) != 65:
        raise FormatError(f"Signature must be 65 bytes, got {len(sig)}")

    try:
        return CT_sig_to_pubkey(message_digest(text), sig)
    except ValueError as exc:
        raise FormatError(f"Unrecoverable signature: {exc}")

def verify_message(address, text, signature):
    # Did the owner of this (default lock) address sign this text?
    # - returns True/False; malformed signature/address raise FormatError
    lock, _ = parse_address(address)

    if lock.code_hash != SECP256K1_BLAKE160_CODE_HASH or lock.hash_type != 'type':
        # can't check multisig, omnilock, etc. from a bare signature
        return False

    args = from_hex(lock.args)
    if len(args) != 20:
        return False

    pubkey = recover_pubkey(text, signature)

    return blake160(pubkey) == args

class KeySigner(SignerABC):
    #
    # A software key. Good for kiosks and dev chains.
    #
    # Doesn't collect inputs or pay fees: transactions are handed to the
    # client as-is, which only works on a chain that doesn't care (devnet).
    #
    def __init__(self, privkey, client=None, testnet=True):
        if isinstance(privkey, str):
            privkey = from_hex(privkey, 32)
        assert len(privkey) == 32

        self._privkey = privkey
        self.pubkey = CT_priv_to_pubkey(privkey)
        self.address = render_address(self.pubkey, testnet=testnet)
        self.client = client
        self._connected = False

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.address)

    @property
    def is_connected(self):
        return self._connected

    def connect(self):
        self._connected = True
        return self.address

    def disconnect(self):
        self._connected = False

    def get_recommended_address(self):
        require_signer(self)
        return self.address

    def sign_message(self, text):
        require_signer(self)
        return to_hex(CT_sign(self._privkey, message_digest(text)))

    def send_transaction(self, tx):
        require_signer(self)
        if self.client is None:
            raise SignerUnavailable("No chain client to broadcast with")

        return self.client.send_transaction(tx)

class WatchOnlySigner(SignerABC):
    #
    # Knows an address, can't sign. Lets us build proposals for some other
    # wallet to complete (see CLI).
    #
    def __init__(self, address):
        self.address = address

    @property
    def is_connected(self):
        return True

    def connect(self):
        return self.address

    def get_recommended_address(self):
        return self.address

    def sign_message(self, text):
        raise SignerUnavailable("Watch-only: cannot sign")

    def send_transaction(self, tx):
        raise SignerUnavailable("Watch-only: cannot send")

# EOF
