#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# confirm.py
#
# Wait for a broadcast transaction to be committed, then record its block.
#
# One tracker per tx hash. Polls on a fixed interval with a cap on attempts,
# gives up quietly (record stays pending) and can be cancelled at any time
# from another thread; cancel() returns once the poller has stopped.
#
import threading
from .constants import *
from .utils import int_hex
from .exceptions import NetworkUnavailable, FormatError

class ConfirmationTracker:

    def __init__(self, client, tx_hash, record=None, interval=CONFIRM_INTERVAL,
                        max_attempts=CONFIRM_MAX_ATTEMPTS):
        self.client = client
        self.tx_hash = tx_hash
        self.record = record
        self.interval = interval
        self.max_attempts = max_attempts

        self.attempts = 0
        self.status = 'unknown'
        self.block_number = record.block_number if record is not None else None
        self._halt = threading.Event()
        self._thread = None
        self._done = threading.Event()

    def __repr__(self):
        return '<%s %s.. %s after %d>' % (self.__class__.__name__, self.tx_hash[0:10],
                                            self.status, self.attempts)

    def poll_once(self):
        # One look at the chain. Returns block number once committed, else None.
        # - network trouble counts as "not yet"
        try:
            resp = self.client.get_transaction(self.tx_hash)
        except NetworkUnavailable:
            return None

        st = (resp or {}).get('tx_status') or {}
        self.status = st.get('status', 'unknown')
        if self.status != 'committed':
            return None

        block_hash = st.get('block_hash')
        if not block_hash:
            return None

        if st.get('block_number'):
            # newer nodes include it, saves a call
            return int_hex(st['block_number'])

        try:
            hdr = self.client.get_header(block_hash)
        except NetworkUnavailable:
            return None
        if not hdr or 'number' not in hdr:
            return None

        return int_hex(hdr['number'])

    def run(self):
        # Blocking. Returns block number, or None if we gave up / were cancelled.
        try:
            if self.block_number is not None:
                # already known; never recompute
                return self.block_number

            while self.attempts < self.max_attempts and not self._halt.is_set():
                self.attempts += 1
                try:
                    height = self.poll_once()
                except FormatError:
                    height = None

                if height is not None:
                    self._found(height)
                    return self.block_number

                if self.attempts < self.max_attempts:
                    if self._halt.wait(self.interval):
                        break

            return None
        finally:
            self._done.set()

    def _found(self, height):
        self.block_number = height
        if self.record is not None:
            self.record.set_block_number(height)
            # record may have been confirmed elsewhere first
            self.block_number = self.record.block_number

    def start(self):
        # run() in the background
        assert self._thread is None, 'already started'
        self._thread = threading.Thread(target=self.run, name='confirm-' + self.tx_hash[0:10],
                                            daemon=True)
        self._thread.start()
        return self

    def cancel(self):
        # stop polling; synchronous
        self._halt.set()
        th = self._thread
        if th is not None and th is not threading.current_thread():
            th.join()

    def wait(self, timeout=None):
        # wait for background run to end; returns block number or None
        self._done.wait(timeout)
        return self.block_number

    @property
    def cancelled(self):
        return self._halt.is_set()

    @property
    def finished(self):
        return self._done.is_set()

# EOF
