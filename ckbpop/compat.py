#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Wrappers for the crypto we need. AKA API Cleanup
#
# My standards:
# - pubkeys: 33 bytes, always compressed
# - private key: 32 bytes
# - signature: 65 bytes, recoverable, r|s|rec_id (CKB ordering, not BIP-137)
# - no DER, no PEM, no other serializations
# - message digests (for sig/verify) are already digested
# - recovery raises ValueError on garbage, never returns junk
#
from hashlib import sha256, blake2b
from .constants import CKB_HASH_PERSONAL

__all__ = [ 'sha256s', 'ckb_hash', 'blake160',
            'CT_sig_to_pubkey', 'CT_sign', 'CT_pick_keypair', 'CT_priv_to_pubkey']

def sha256s(msg):
    # single-shot SHA256
    return sha256(msg).digest()

def ckb_hash(msg):
    # CKB's default hash: blake2b-256 with personalization
    return blake2b(msg, digest_size=32, person=CKB_HASH_PERSONAL).digest()

def blake160(msg):
    # lock args for the default lock: first 20 bytes of ckb_hash
    return ckb_hash(msg)[0:20]

from ckbpop.wrap_coincurve import CT_sig_to_pubkey, CT_sign, CT_pick_keypair, CT_priv_to_pubkey

# EOF
