#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Chain queries, against the in-memory chain.
#
import pytest

from ckbpop.txn import TxBuilder
from ckbpop.signer import KeySigner
from ckbpop.celldata import encode_anchor_data, anchor_metadata
from ckbpop.utils import to_hex, digest
from ckbpop.exceptions import NetworkUnavailable

EVENT = '4cdd574178607061a4b041aefcba19f1755de1efda16dac3a7e53fbb470d07ba'

def anchor(signer, contracts, event_id=EVENT, name='Meetup'):
    tx = TxBuilder(signer, contracts).build_anchor_tx(event_id, signer.address, dict(name=name))
    return signer.send_transaction(tx)

def mint(signer, contracts, recipient, event_id=EVENT):
    tx = TxBuilder(signer, contracts).build_badge_mint_tx(event_id, signer.address, recipient)
    return signer.send_transaction(tx)

def test_find_event(chain, query, organizer, contracts):
    h = anchor(organizer, contracts)

    # not indexed until committed
    assert query.find_event_by_id(EVENT) is None

    chain.mine()
    ev = query.find_event_by_id(EVENT)
    assert ev.event_id == EVENT
    assert ev.name == 'Meetup'
    assert ev.creator_address == organizer.address
    assert ev.anchor_tx_hash == h

    assert query.find_event_by_id(EVENT[::-1]) is None
    assert query.find_anchor_by_hash(to_hex(digest(EVENT))) == ev

def test_event_forged_creator(chain, query, organizer, attendee, contracts):
    # anchor data claims a creator the args don't commit to
    tx = TxBuilder(attendee, contracts).build_anchor_tx(EVENT, attendee.address, dict(name='Fake'))
    md = anchor_metadata(EVENT, organizer.address, 'Fake')
    tx['outputs_data'][0] = to_hex(encode_anchor_data(md))
    attendee.send_transaction(tx)
    chain.mine()

    assert query.find_event_by_id(EVENT) is None

def test_badges(chain, query, organizer, contracts):
    people = [KeySigner(bytes([10+i])*32) for i in range(5)]
    for p in people:
        mint(organizer, contracts, p.address)
    # another event, same people
    mint(organizer, contracts, people[0].address, event_id='other')
    chain.mine()

    holders = query.find_badges_by_event(EVENT)
    assert sorted(h.holder_address for h in holders) == sorted(p.address for p in people)
    assert len(set(h.tx_hash for h in holders)) == 5

    held = query.find_badges_by_address(people[0].address)
    assert sorted(h.event_id_hash for h in held) == sorted([to_hex(digest(EVENT)),
                                                            to_hex(digest('other'))])
    assert query.find_badges_by_address(organizer.address) == []

def test_paging(chain, query, organizer, contracts):
    # page size is 2 in tests
    for i in range(5):
        mint(organizer, contracts, KeySigner(bytes([20+i])*32).address)
    chain.mine()

    chain.calls.clear()
    assert len(query.find_badges_by_event(EVENT)) == 5
    assert chain.calls.count('get_cells') == 3

def test_exists_hint(chain, query, organizer, attendee, contracts):
    assert query.exists_hint(EVENT, attendee.address) == False

    mint(organizer, contracts, attendee.address)
    # pending: hint can't see it yet
    assert query.exists_hint(EVENT, attendee.address) == False

    chain.mine()
    assert query.exists_hint(EVENT, attendee.address) == True
    assert query.exists_hint(EVENT, organizer.address) == False
    assert query.exists_hint(EVENT, attendee.address, kind='anchor') == False

def test_offline(chain, query):
    chain.offline = True
    with pytest.raises(NetworkUnavailable):
        query.find_event_by_id(EVENT)

# EOF
