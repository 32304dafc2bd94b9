#
# (c) Copyright 2024 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# In-memory cache of events and badges for one identity.
#
# One per process. Reset on logout, or when a different address connects:
# never mix what we know about two wallets.
#
class Repository:

    def __init__(self, identity=None):
        self.identity = identity
        self.events = {}        # event_id => EventRecord
        self.badges = []        # BadgeRecord, newest first

    def __repr__(self):
        return '<Repository %s: %d events, %d badges>' % (self.identity,
                                                len(self.events), len(self.badges))

    def bind(self, address):
        # switch identity; drops everything if it changed
        if address != self.identity:
            self.reset()
            self.identity = address

    def reset(self):
        self.events.clear()
        self.badges.clear()

    def logout(self):
        self.reset()
        self.identity = None

    def add_event(self, event):
        self.events[event.event_id] = event
        return event

    def get_event(self, event_id):
        # case-insensitive, like manual entry
        ev = self.events.get(event_id)
        if ev is None:
            low = event_id.lower()
            for k, v in self.events.items():
                if k.lower() == low:
                    return v
        return ev

    def created_by(self, address):
        return [e for e in self.events.values() if e.creator_address == address]

    def add_badge(self, badge):
        self.badges.insert(0, badge)
        return badge

    def badges_for(self, address):
        return [b for b in self.badges if b.holder_address == address]

    def pending_badges(self):
        return [b for b in self.badges if not b.is_confirmed]

# EOF
