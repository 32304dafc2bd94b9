#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Events and badges, as the client sees them.
#
import uuid
from collections import namedtuple

# immutable once anchored
EventRecord = namedtuple('EventRecord',
                'event_id name start_time location description image_url creator_address anchor_tx_hash')
EventRecord.__new__.__defaults__ = (None,) * 8

ROLES = ('Attendee', 'Speaker', 'Organizer')

def event_from_anchor(md, tx_hash=None):
    # decoded anchor JSON => EventRecord
    return EventRecord(event_id=md['event_id'], name=md['name'],
                        start_time=md.get('start_time'), location=md.get('location'),
                        description=md.get('description'), image_url=md.get('image_url'),
                        creator_address=md['creator'], anchor_tx_hash=tx_hash)

class BadgeRecord:
    #
    # A minted badge. block_number is None until the mint is committed,
    # then set once and never again.
    #
    __slots__ = ('badge_id', 'event_id', 'holder_address', 'tx_hash', 'role', '_block_number')

    def __init__(self, event_id, holder_address, tx_hash, role='Attendee', badge_id=None,
                        block_number=None):
        assert role in ROLES, role
        self.badge_id = badge_id or str(uuid.uuid4())
        self.event_id = event_id
        self.holder_address = holder_address
        self.tx_hash = tx_hash
        self.role = role
        self._block_number = block_number

    def __repr__(self):
        return '<BadgeRecord %s.. for %s.. tx=%s.. block=%s>' % (
                    self.event_id[0:8], self.holder_address[0:12], self.tx_hash[0:10],
                    self._block_number if self.is_confirmed else 'pending')

    @property
    def block_number(self):
        return self._block_number

    @property
    def is_confirmed(self):
        return self._block_number is not None

    def set_block_number(self, height):
        # first one wins; returns True if this call set it
        if self._block_number is not None:
            return False
        self._block_number = int(height)
        return True

# EOF
