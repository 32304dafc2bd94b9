#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
#
# Compatibility wrapper for "coincurve".
#
# nice docs: <https://ofek.dev/coincurve/api/>
#
# - recoverable sigs from coincurve are already r|s|rec_id which is what CKB wallets emit
# - hasher=None everywhere: we always hand over a finished digest
#
from coincurve import PrivateKey, PublicKey

def CT_sig_to_pubkey(msg_digest, sig):
    assert len(msg_digest) == 32
    if len(sig) != 65:
        raise ValueError(f'need 65-byte recoverable sig, got {len(sig)}')

    rec_id = sig[64]
    if 27 <= rec_id <= 30:
        rec_id -= 27        # some wallets add ethereum-style offset
    if not (0 <= rec_id <= 3):
        raise ValueError(f'bad recovery id: {sig[64]}')

    sig2 = sig[0:64] + bytes([rec_id])
    try:
        nxt = PublicKey.from_signature_and_message(sig2, msg_digest, hasher=None)
    except Exception as exc:
        # coincurve raises plain Exception when no point recovers
        raise ValueError(str(exc))

    return nxt.format()

def CT_pick_keypair():
    # Choose pub/private pair, return private key (32 bytes) and compressed pubkey
    pk = PrivateKey()
    return pk.secret, pk.public_key.format()

def CT_sign(privkey, msg_digest):
    # returns 65-byte recoverable sig: r|s|rec_id
    assert len(msg_digest) == 32
    return PrivateKey(privkey).sign_recoverable(msg_digest, hasher=None)

def CT_priv_to_pubkey(priv):
    pk = PrivateKey(priv)
    return pk.public_key.format()

# EOF
