#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# In-memory stand-in for a CKB node + indexer, for tests.
#
# Applies the anchor/badge type script rules to every output that uses one
# of our validators, and fails the way a real node does:
#
#   args != 64 bytes                      => error code 1
#   same type script twice in outputs     => error code 2
#   same type script already on chain     => error code 3
#
# Transactions sit in the "pool" (pending) until mine() is called.
#
import json, threading
from hashlib import sha256
from ckbpop.exceptions import RpcError, NetworkUnavailable

VERIFY_FAIL = ('TransactionFailedToVerify: Verification failed Script(TransactionScriptError '
               '{{ source: Outputs[{idx}].Type, cause: ValidationFailure: see error code {code} '
               'on page https://nervosnetwork.github.io/ckb-script-error-codes/by-type-script-hash/'
               '{ch}.html#{code} }})')

class MemoryChain:

    def __init__(self, contracts):
        self.validators = { c.code_hash for c in contracts }
        self.cells = []             # dict(output, output_data, out_point, block_number, committed)
        self.txns = {}              # hash => dict(tx, status, block_hash)
        self.headers = {}           # block hash => number
        self.height = 1000
        self.offline = False
        self.calls = []
        self.lock = threading.Lock()

    def _net(self, method):
        self.calls.append(method)
        if self.offline:
            raise NetworkUnavailable(f"{method}: connection refused")

    def _reject(self, idx, code, code_hash):
        msg = VERIFY_FAIL.format(idx=idx, code=code, ch=code_hash[2:])
        raise RpcError(f"-302 on send_transaction: {msg}", -302, msg)

    def send_transaction(self, tx, outputs_validator=None):
        self._net('send_transaction')

        with self.lock:
            outs = tx['outputs']
            for idx, out in enumerate(outs):
                ty = out.get('type')
                if not ty or ty['code_hash'] not in self.validators:
                    continue

                if len(bytes.fromhex(ty['args'][2:])) != 64:
                    self._reject(idx, 1, ty['code_hash'])

                same = [o for o in outs if o.get('type') == ty]
                if len(same) != 1:
                    self._reject(idx, 2, ty['code_hash'])

                if any(c['output'].get('type') == ty for c in self.cells):
                    self._reject(idx, 3, ty['code_hash'])

            tx_hash = '0x' + sha256(json.dumps(tx, sort_keys=True).encode()).hexdigest()
            if tx_hash in self.txns:
                raise RpcError("-1107 on send_transaction: PoolRejectedDuplicatedTransaction",
                                    -1107, "PoolRejectedDuplicatedTransaction")

            self.txns[tx_hash] = dict(tx=tx, status='pending', block_hash=None)
            for idx, out in enumerate(outs):
                self.cells.append(dict(output=out, output_data=tx['outputs_data'][idx],
                                    out_point=dict(tx_hash=tx_hash, index=hex(idx)),
                                    block_number=None, committed=False))
            return tx_hash

    def mine(self):
        # commit everything pending into a new block
        with self.lock:
            self.height += 1
            bh = '0x' + sha256(b'block%d' % self.height).hexdigest()
            self.headers[bh] = self.height

            for h, t in self.txns.items():
                if t['status'] == 'pending':
                    t['status'] = 'committed'
                    t['block_hash'] = bh
            for c in self.cells:
                if not c['committed']:
                    c['committed'] = True
                    c['block_number'] = self.height

            return self.height

    def _matches(self, script, want, mode):
        if script is None:
            return False
        if script['code_hash'] != want['code_hash'] or script['hash_type'] != want['hash_type']:
            return False
        if mode == 'exact':
            return script['args'] == want['args']
        return script['args'].startswith(want['args'])

    def get_cells(self, search_key, order='asc', limit=100, after=None):
        self._net('get_cells')

        want = search_key['script']
        field = search_key['script_type']
        mode = search_key.get('script_search_mode', 'prefix')
        with_data = search_key.get('with_data', True)

        with self.lock:
            hits = [c for c in self.cells
                        if c['committed'] and self._matches(c['output'].get(field), want, mode)]

        start = int(after, 16) if after else 0
        page = hits[start:start+limit]

        objs = []
        for c in page:
            o = dict(output=c['output'], out_point=c['out_point'],
                        block_number=hex(c['block_number']), tx_index='0x0')
            if with_data:
                o['output_data'] = c['output_data']
            objs.append(o)

        return dict(objects=objs, last_cursor=hex(start + len(page)))

    def get_transaction(self, tx_hash):
        self._net('get_transaction')
        t = self.txns.get(tx_hash)
        if not t:
            return None
        return dict(transaction=t['tx'],
                    tx_status=dict(status=t['status'], block_hash=t['block_hash']))

    def get_header(self, block_hash):
        self._net('get_header')
        n = self.headers.get(block_hash)
        if n is None:
            return None
        return dict(number=hex(n), hash=block_hash)

    def close(self):
        pass

# EOF
