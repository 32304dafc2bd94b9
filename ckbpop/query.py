#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# query.py
#
# Find anchor and badge cells on chain.
#
# Type script args are sha256(event_id) || sha256(party), so:
#   - exact search: we know both (does this badge exist?)
#   - prefix search: we know only the event (all badges of an event, or its anchor)
#
# Indexers lag and can show a cell twice for a while; nothing here is
# authoritative about uniqueness. The type script is.
#
from collections import namedtuple
from .constants import *
from .utils import digest, to_hex, from_hex
from .address import Script, address_to_script, encode_address, script_to_json, script_from_json
from .scriptargs import build_args, prefix_args, split_args
from .celldata import decode_anchor_data
from .records import event_from_anchor
from .txn import type_script
from .exceptions import FormatError

EXACT = 'exact'
PREFIX = 'prefix'

PAGE_SIZE = 100

BadgeHolder = namedtuple('BadgeHolder', 'holder_address tx_hash')
HeldBadge = namedtuple('HeldBadge', 'event_id_hash tx_hash')

class ChainQuery:

    def __init__(self, client, contracts, testnet=True, page_size=PAGE_SIZE):
        self.client = client
        self.contracts = contracts
        self.testnet = testnet
        self.page_size = page_size

    def find_cells(self, script, script_type='type', mode=EXACT, with_data=True):
        # Generator over every live cell matching, following cursors.
        assert mode in (EXACT, PREFIX)
        assert script_type in ('type', 'lock')

        search_key = dict(script=script_to_json(script), script_type=script_type,
                            script_search_mode=mode, with_data=with_data)

        after = None
        while 1:
            page = self.client.get_cells(search_key, 'asc', self.page_size, after) or {}
            objects = page.get('objects') or []

            for cell in objects:
                yield cell

            after = page.get('last_cursor')
            if len(objects) < self.page_size or not after:
                break

    def _anchor_prefix(self, event_id):
        return type_script(self.contracts.anchor, prefix_args(event_id))

    def find_event_by_id(self, event_id):
        # Prefix search on sha256(event_id); first cell that decodes (and agrees
        # with its own args) wins. Returns EventRecord or None.
        for cell in self.find_cells(self._anchor_prefix(event_id), mode=PREFIX):
            try:
                md = decode_anchor_data(cell.get('output_data') or '0x')
            except FormatError:
                continue

            if md['event_id'] != event_id:
                continue

            try:
                _, party_hash = split_args(cell['output']['type']['args'])
            except (FormatError, KeyError, TypeError):
                continue
            if party_hash != digest(md['creator']):
                # data claims a creator the args don't
                continue

            return event_from_anchor(md, cell['out_point']['tx_hash'])

        return None

    def find_badges_by_event(self, event_id):
        # everyone holding a badge for this event
        script = type_script(self.contracts.badge, prefix_args(event_id))

        rv = []
        for cell in self.find_cells(script, mode=PREFIX, with_data=False):
            lock = script_from_json(cell['output']['lock'])
            rv.append(BadgeHolder(encode_address(lock, testnet=self.testnet),
                                    cell['out_point']['tx_hash']))

        return rv

    def find_badges_by_address(self, address):
        # Every badge this address holds. Indexer can't filter by lock and type
        # at the same time, so we take all cells of the lock and keep badges.
        lock = address_to_script(address)
        badge = self.contracts.badge

        rv = []
        for cell in self.find_cells(lock, script_type='lock', mode=EXACT, with_data=False):
            ty = cell['output'].get('type')
            if not ty:
                continue
            if ty['code_hash'].lower() != badge.code_hash or ty['hash_type'] != badge.hash_type:
                continue
            try:
                eid_hash, _ = split_args(ty['args'])
            except FormatError:
                continue

            rv.append(HeldBadge(to_hex(eid_hash), cell['out_point']['tx_hash']))

        return rv

    def find_anchor_by_hash(self, event_id_hash):
        # For a badge we only know sha256(event_id); find the anchor with that prefix.
        if isinstance(event_id_hash, str):
            event_id_hash = from_hex(event_id_hash, HASH_LEN)

        script = type_script(self.contracts.anchor, to_hex(event_id_hash))
        for cell in self.find_cells(script, mode=PREFIX):
            try:
                md = decode_anchor_data(cell.get('output_data') or '0x')
            except FormatError:
                continue
            if digest(md['event_id']) == event_id_hash:
                return event_from_anchor(md, cell['out_point']['tx_hash'])

        return None

    def exists_hint(self, event_id, party, kind='badge'):
        # ADVISORY ONLY. True means we saw a cell with these exact args.
        # False means "didn't see one", not "safe to mint": indexer may lag,
        # another mint may be in flight. Never skip or allow a mint on this;
        # the chain's verdict (ChainRejection code 3) is the only real answer.
        config = getattr(self.contracts, kind)
        script = type_script(config, build_args(event_id, party))

        for _ in self.find_cells(script, mode=EXACT, with_data=False):
            return True

        return False

# EOF
