"""
Shared pytest fixtures for arraysync tests.
"""

import pytest

from arraysync import Model, array_member_observer


class EventLog:
    """Records added/removed callbacks as ("added" | "removed", item, index)."""

    def __init__(self):
        self.events = []
        self.owners = []

    def added(self, owner, item, index):
        self.owners.append(owner)
        self.events.append(("added", item, index))

    def removed(self, owner, item, index):
        self.owners.append(owner)
        self.events.append(("removed", item, index))

    def clear(self):
        self.events.clear()
        self.owners.clear()


class SpliceRecorder:
    """Array observer that records will/did notifications with array snapshots."""

    def __init__(self):
        self.calls = []

    def array_will_change(self, array, start, removed_count, added_count):
        self.calls.append(("will", list(array), start, removed_count, added_count))

    def array_did_change(self, array, start, removed_count, added_count):
        self.calls.append(("did", list(array), start, removed_count, added_count))


@pytest.fixture
def events():
    """Provide a fresh EventLog."""
    return EventLog()


@pytest.fixture
def splices():
    """Provide a fresh SpliceRecorder."""
    return SpliceRecorder()


@pytest.fixture
def tracked_class(events):
    """A Model subclass whose 'items' array reports to the events fixture."""

    class Tracked(Model):
        tracking = array_member_observer("items", added=events.added, removed=events.removed)

    return Tracked
