#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Convenience REST backend. Fast, but only a cache: anything it says can be
# stale or wrong, and chain data wins whenever we have both.
#
#   GET /health
#   GET /events/<event_id>
#   GET /events/<event_id>/badges
#   GET /badges/<address>
#
import json
from .constants import NET_TIMEOUT
from .records import EventRecord
from .exceptions import NetworkUnavailable, FormatError

class BackendClient:

    def __init__(self, server, timeout=NET_TIMEOUT):
        import requests
        self.ses = requests.Session()
        self.server = server.rstrip('/')
        self.timeout = timeout

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.server)

    def get_json(self, path, missing_ok=False):
        # fetch a JSON response
        import requests
        assert path[0] == '/'
        try:
            r = self.ses.get(self.server + path, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise NetworkUnavailable(f"backend: {exc}")

        if missing_ok and r.status_code == 404:
            return None
        if r.status_code >= 500:
            raise NetworkUnavailable(f"backend: HTTP {r.status_code}")
        r.raise_for_status()

        try:
            return r.json()
        except json.decoder.JSONDecodeError:
            raise FormatError("Bad json: " + r.text[0:80])

    def health(self):
        try:
            return bool(self.get_json('/health'))
        except NetworkUnavailable:
            return False

    def get_event(self, event_id):
        # => EventRecord (advisory) or None
        d = self.get_json(f'/events/{event_id}', missing_ok=True)
        if not d:
            return None
        try:
            return EventRecord(event_id=d.get('event_id', event_id), name=d['name'],
                            start_time=d.get('start_time'), location=d.get('location'),
                            description=d.get('description'), image_url=d.get('image_url'),
                            creator_address=d.get('creator_address') or d.get('creator'),
                            anchor_tx_hash=d.get('anchor_tx_hash'))
        except (KeyError, AttributeError):
            raise FormatError("Backend event is missing fields")

    def get_event_badges(self, event_id):
        # list of dicts: holder_address, tx_hash, block_number?
        d = self.get_json(f'/events/{event_id}/badges', missing_ok=True) or {}
        return list(d.get('badges', []))

    def get_address_badges(self, address):
        d = self.get_json(f'/badges/{address}', missing_ok=True) or {}
        return list(d.get('badges', []))

# EOF
