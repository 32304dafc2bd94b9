#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Deployment config: where the anchor and badge validators live.
#
# Must match what's deployed exactly. A wrong code_hash gives transactions
# that look fine here and get rejected (or worse, ignored) on chain.
#
# File / $CKBPOP_CONTRACTS format (JSON):
#
#   { "anchor": { "code_hash": "0x..", "hash_type": "type",
#                 "cell_dep": { "out_point": { "tx_hash": "0x..", "index": 0 },
#                               "dep_type": "code" } },
#     "badge": { ... } }
#
import os, json
from collections import namedtuple
from .constants import *
from .utils import from_hex, hex_int
from .exceptions import FormatError

ContractConfig = namedtuple('ContractConfig', 'code_hash hash_type cell_dep')
Contracts = namedtuple('Contracts', 'anchor badge')

def _check_one(kind, d):
    try:
        code_hash = d['code_hash'].lower()
        hash_type = d['hash_type']
        dep = d['cell_dep']
        tx_hash = dep['out_point']['tx_hash'].lower()
        index = dep['out_point']['index']
        dep_type = dep.get('dep_type', 'code')
    except (KeyError, TypeError, AttributeError):
        raise FormatError(f"Incomplete contract config for {kind}")

    from_hex(code_hash, 32)
    from_hex(tx_hash, 32)

    if hash_type not in HASH_TYPES:
        raise FormatError(f"{kind}: bad hash_type {hash_type!r}")

    # accept the camel-case spelling some tools write
    if dep_type == 'depGroup':
        dep_type = 'dep_group'
    if dep_type not in DEP_TYPES:
        raise FormatError(f"{kind}: bad dep_type {dep_type!r}")

    if isinstance(index, str):
        try:
            index = int(index, 0)
        except ValueError:
            raise FormatError(f"{kind}: bad out_point index")
    if not isinstance(index, int) or index < 0:
        raise FormatError(f"{kind}: bad out_point index")

    return ContractConfig(code_hash, hash_type,
                            dict(out_point=dict(tx_hash=tx_hash, index=index), dep_type=dep_type))

def parse_contracts(d):
    # dict => Contracts
    if not isinstance(d, dict):
        raise FormatError("Contract config must be an object")

    return Contracts(anchor=_check_one('anchor', d.get('anchor', DEFAULT_CONTRACTS['anchor'])),
                     badge=_check_one('badge', d.get('badge', DEFAULT_CONTRACTS['badge'])))

def load_contracts(path=None):
    # Load from file, $CKBPOP_CONTRACTS (path or inline JSON), or defaults.
    src = path or os.environ.get('CKBPOP_CONTRACTS')

    if not src:
        return parse_contracts(DEFAULT_CONTRACTS)

    if src.lstrip().startswith('{'):
        text = src
    else:
        with open(src, 'rt') as fd:
            text = fd.read()

    try:
        d = json.loads(text)
    except json.decoder.JSONDecodeError as exc:
        raise FormatError(f"Bad contract config JSON: {exc}")

    return parse_contracts(d)

def is_placeholder(contracts):
    # still using the zero deployments?
    return any(c.cell_dep['out_point']['tx_hash'] == ZERO_HASH for c in contracts)

def rpc_url(testnet=True):
    # $CKB_RPC_URL wins
    return os.environ.get('CKB_RPC_URL') or (TESTNET_RPC_URL if testnet else MAINNET_RPC_URL)

def cell_dep_json(config):
    # for the transaction's cell_deps list
    op = config.cell_dep['out_point']
    return dict(out_point=dict(tx_hash=op['tx_hash'], index=hex_int(op['index'])),
                dep_type=config.cell_dep['dep_type'])

# EOF
