#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# flows.py
#
# The user actions, start to finish:
#
#   create event:  derive id -> args -> anchor tx -> wallet broadcast
#   check in:      validate QR -> resolve event -> attendance proof -> badge tx
#                  -> wallet broadcast -> (track confirmation)
#
# Rejections from the chain come back as ChainRejection, parsed from what
# the node said. Nothing here retries a write.
#
from .constants import *
from .ident import derive_event_id
from .txn import TxBuilder
from .records import EventRecord, BadgeRecord
from .kiosk import check_payload, DEFAULT_POLICY
from .attendance import make_proof, proof_hash
from .confirm import ConfirmationTracker
from .signer import require_signer
from .exceptions import classify, NetworkUnavailable, SignerUnavailable, EventNotFound

def broadcast(signer, tx):
    # Hand proposal to wallet. Returns tx hash or raises ChainRejection.
    # - network trouble and missing wallet are passed along as-is
    try:
        return signer.send_transaction(tx)
    except (NetworkUnavailable, SignerUnavailable):
        raise
    except Exception as exc:
        # wallets raise all sorts of types; classify reads the text
        raise classify(exc) from exc

def create_event(signer, contracts, name, repo=None, **fields):
    # Anchor a new event for the connected wallet. Returns EventRecord.
    # - fields: start_time, location, description, image_url
    require_signer(signer)
    creator = signer.get_recommended_address()

    pre = derive_event_id(creator)

    md = dict(fields, name=name, timestamp=pre.timestamp, nonce=pre.nonce)
    tx = TxBuilder(signer, contracts).build_anchor_tx(pre.event_id, creator, md)

    tx_hash = broadcast(signer, tx)

    ev = EventRecord(event_id=pre.event_id, name=name,
                        start_time=fields.get('start_time'), location=fields.get('location'),
                        description=fields.get('description'), image_url=fields.get('image_url'),
                        creator_address=creator, anchor_tx_hash=tx_hash)
    if repo is not None:
        repo.add_event(ev)

    return ev

def resolve_event(event_id, query=None, backend=None, repo=None):
    # Chain first. Local cache covers "just created, not indexed yet", and the
    # backend is only asked when the chain can't be reached.
    chain_down = False
    if query is not None:
        try:
            ev = query.find_event_by_id(event_id)
        except NetworkUnavailable:
            ev = None
            chain_down = True

        if ev is not None:
            if repo is not None:
                repo.add_event(ev)
            return ev

    if repo is not None:
        ev = repo.get_event(event_id)
        if ev is not None:
            return ev

    if backend is not None and (chain_down or query is None):
        return backend.get_event(event_id)

    return None

def check_in(raw_payload, signer, query, contracts, now=None, policy=DEFAULT_POLICY,
                backend=None, repo=None, role='Attendee'):
    # Scan -> badge mint. Returns BadgeRecord (block_number pending).
    require_signer(signer)

    found = {}
    def lookup(eid):
        if eid not in found:
            found[eid] = resolve_event(eid, query=query, backend=backend, repo=repo)
        ev = found[eid]
        return ev.creator_address if ev else None

    chk = check_payload(raw_payload, now=now, creator_lookup=lookup, policy=policy)

    lookup(chk.event_id)
    event = found[chk.event_id]
    if event is None or not event.creator_address:
        raise EventNotFound(f"No event with id {chk.event_id}")

    recipient = signer.get_recommended_address()
    proof = make_proof(signer, raw_payload, recipient)

    # no existence pre-check: the badge type script is the judge
    tx = TxBuilder(signer, contracts).build_badge_mint_tx(event.event_id,
                                        event.creator_address, recipient, proof_hash(proof))

    tx_hash = broadcast(signer, tx)

    badge = BadgeRecord(event.event_id, recipient, tx_hash, role=role)
    if repo is not None:
        repo.add_badge(badge)

    return badge

def track(client, badge, **kws):
    # start a background confirmation tracker for a badge
    return ConfirmationTracker(client, badge.tx_hash, record=badge, **kws).start()

# EOF
