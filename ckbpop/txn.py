#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# txn.py
#
# Build anchor and badge transaction proposals.
#
# A proposal is one output cell + cell deps, in CKB JSON-RPC shape. The
# wallet adds inputs, change and fee, then signs. We never ask the chain
# whether the cell already exists before building: the type script
# decides that when the transaction is verified.
#
from .constants import *
from .utils import to_hex, hex_int, from_hex
from .address import Script, address_to_script, script_to_json
from .scriptargs import build_args
from .celldata import anchor_metadata, encode_anchor_data
from .celldata import badge_metadata, badge_content_hash, encode_badge_data, occupied_capacity
from .config import cell_dep_json
from .signer import require_signer
from .exceptions import FormatError

def type_script(config, args):
    return Script(config.code_hash, config.hash_type, args)

def empty_tx():
    return dict(version='0x0', cell_deps=[], header_deps=[], inputs=[],
                    outputs=[], outputs_data=[], witnesses=[])

class TxBuilder:
    #
    # Needs a signer (for the "are we connected" check) and the deployment config.
    #
    def __init__(self, signer, contracts, min_capacity=MIN_CELL_CAPACITY):
        self.signer = signer
        self.contracts = contracts
        self.min_capacity = min_capacity

    def _one_output_tx(self, config, lock, args, data):
        ts = type_script(config, args)
        capacity = max(occupied_capacity(lock, ts, data), self.min_capacity)

        tx = empty_tx()
        tx['outputs'].append(dict(capacity=hex_int(capacity),
                                  lock=script_to_json(lock),
                                  type=script_to_json(ts)))
        tx['outputs_data'].append(to_hex(data))
        tx['cell_deps'].append(cell_dep_json(config))

        return tx

    def build_anchor_tx(self, event_id, creator_address, metadata):
        # Anchor cell: lock = creator, data = canonical JSON.
        # - metadata is a dict with at least 'name', other fields optional
        require_signer(self.signer)

        lock = address_to_script(creator_address)
        args = build_args(event_id, creator_address)

        md = dict(metadata)
        name = md.pop('name', None)
        if not name:
            raise FormatError("Event needs a name")
        for k in ('event_id', 'creator', 'protocol', 'version'):
            md.pop(k, None)

        data = encode_anchor_data(anchor_metadata(event_id, creator_address, name, **md))

        return self._one_output_tx(self.contracts.anchor, lock, args, data)

    def build_badge_mint_tx(self, event_id, issuer_address, recipient_address, proof_hash=None):
        # Badge cell: lock = recipient, data = 34-byte commitment.
        require_signer(self.signer)

        lock = address_to_script(recipient_address)
        args = build_args(event_id, recipient_address)

        if proof_hash is not None:
            if isinstance(proof_hash, str):
                proof_hash = from_hex(proof_hash, HASH_LEN)
            data = encode_badge_data(proof_hash, BADGE_FLAG_PROOF)
        else:
            md = badge_metadata(event_id, issuer_address, recipient_address)
            data = encode_badge_data(badge_content_hash(md), 0)

        return self._one_output_tx(self.contracts.badge, lock, args, data)

# EOF
