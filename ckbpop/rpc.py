#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# rpc.py
#
# Talk JSON-RPC to a CKB node (with its built-in indexer).
#
# - read calls retry with backoff when the network is flaky
# - send_transaction never retries: same proposal, same answer
#
import time, json
from pprint import pformat
from .constants import *
from .exceptions import NetworkUnavailable, RpcError

# Change this to see traffic details
VERBOSE = False

class ChainClientABC:
    #
    # Abstract base class. What the query adapter and confirmation tracker need.
    # Must be safe to share between threads: request/response only.
    #

    def get_cells(self, search_key, order='asc', limit=100, after=None):
        # indexer search => dict(objects=[...], last_cursor='0x..')
        raise NotImplementedError

    def get_transaction(self, tx_hash):
        # => dict(transaction=..., tx_status=dict(status=..., block_hash=...)) or None
        raise NotImplementedError

    def get_header(self, block_hash):
        # => dict(number='0x..', ...) or None
        raise NotImplementedError

    def send_transaction(self, tx):
        # => tx hash
        raise NotImplementedError

    def close(self):
        # release resources
        pass

class CkbRpcClient(ChainClientABC):

    def __init__(self, url, timeout=NET_TIMEOUT, retries=NET_RETRIES, backoff=NET_BACKOFF):
        import requests
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self.ses = requests.Session()
        self.ses.headers['content-type'] = 'application/json'
        self._id = 0

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.url)

    def close(self):
        self.ses.close()

    def call(self, method, *params):
        # one round trip, raise on any trouble
        import requests

        self._id += 1
        body = dict(jsonrpc='2.0', id=self._id, method=method, params=list(params))

        if VERBOSE:
            print(f">> {method} (%s)" % ', '.join(str(p) if len(str(p)) < 20 else '...'
                                                    for p in params))

        try:
            r = self.ses.post(self.url, data=json.dumps(body), timeout=self.timeout)
            r.raise_for_status()
            resp = r.json()
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise NetworkUnavailable(f"{method}: {exc}")
        except requests.HTTPError as exc:
            if exc.response is not None and exc.response.status_code >= 500:
                raise NetworkUnavailable(f"{method}: {exc}")
            raise RpcError(f"HTTP error on {method}: {exc}", None, str(exc))
        except ValueError:
            raise RpcError(f"Bad JSON from node on {method}", None, r.text)

        if 'error' in resp and resp['error']:
            err = resp['error']
            if VERBOSE:
                print("<< " + pformat(err))
            msg = err.get('message', str(err))
            data = err.get('data')
            raw = msg + ((' ' + str(data)) if data else '')
            raise RpcError(f"{err.get('code')} on {method}: {msg}", err.get('code'), raw)

        if VERBOSE:
            res = resp.get('result')
            print("<< " + (', '.join(res.keys()) if isinstance(res, dict) else str(res)[0:40]))

        return resp.get('result')

    def call_retry(self, method, *params):
        # read-path: retry network failures with exponential backoff
        delay = self.backoff
        for attempt in range(self.retries):
            try:
                return self.call(method, *params)
            except NetworkUnavailable:
                if attempt == self.retries - 1:
                    raise
                time.sleep(delay)
                delay *= 2

    def get_cells(self, search_key, order='asc', limit=100, after=None):
        args = [search_key, order, hex(limit)]
        if after:
            args.append(after)
        return self.call_retry('get_cells', *args)

    def get_transaction(self, tx_hash):
        return self.call_retry('get_transaction', tx_hash)

    def get_header(self, block_hash):
        return self.call_retry('get_header', block_hash)

    def get_tip_block_number(self):
        return int(self.call_retry('get_tip_block_number'), 16)

    def send_transaction(self, tx, outputs_validator='passthrough'):
        # our type scripts are not "well known" to the node, so passthrough
        return self.call('send_transaction', tx, outputs_validator)

# EOF
