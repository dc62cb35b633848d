"""
arraysync Observers - Per-Item Array Change Callbacks
=====================================================

This module turns the low-level splice notifications of ObservableArray into
per-item ``added`` and ``removed`` callbacks, and builds a nested observer for
arrays of arrays on top of them.

Array Member Observer
---------------------

```python
from arraysync import A, Model, array_member_observer

class Playlist(Model):
    tracking = array_member_observer(
        "songs",
        added=lambda owner, song, index: print("added", song, index),
        removed=lambda owner, song, index: print("removed", song, index),
    )

playlist = Playlist(songs=A(["intro"]))  # added intro 0
playlist.songs.append("outro")           # added outro 1
playlist.songs = A(["remix"])            # removed intro 0, removed outro 1, added remix 0
```

For every owner instance the observer:

1. reports every existing item as ``added`` when the instance is created,
2. hooks the array so later mutations report the removed slice (read before
   the mutation) and then the added slice (read after it),
3. watches the dependent key, and when a different array is assigned swaps
   over to it: unhook the old array, report its items as ``removed``, report
   the new array's items as ``added``, hook the new array.

Assigning ``None`` (or any other non-sequence) to the key is ignored; the
previous array stays hooked until an array replaces it.

Nested Array Observer
---------------------

``nested_array_observer`` treats each element of the outer array as an
ObservableArray in its own right and calls ``observer_fn(owner, inner)`` once
when an inner array arrives and again whenever its contents change. Each
owner keeps its own cache of attached inner arrays, keyed by ``id(inner)``;
each entry holds its array, so the id stays unique while cached.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .array import ObservableArray, is_array, is_observable_array
from .exceptions import invariant
from .model import InitHook, Model

ItemCallback = Callable[[Model, Any, int], Any]


class ArrayObservation:
    """
    One owner's subscription to the array stored at one dependent key.

    ``watched`` is the array currently hooked. ``swap`` is the only way it
    changes, and it always unhooks the previous array before hooking the next.
    """

    def __init__(
        self,
        owner: Model,
        dependent_key: str,
        added: Optional[ItemCallback] = None,
        removed: Optional[ItemCallback] = None,
    ) -> None:
        self.owner = owner
        self.dependent_key = dependent_key
        self._added = added
        self._removed = removed
        self.watched: Optional[ObservableArray] = None

    def attach(self) -> None:
        array = self.owner.get(self.dependent_key)
        invariant(
            is_observable_array(array),
            f"array_member_observer only works on arrays. The dependent key you provided "
            f"('{self.dependent_key}') is not an observable array ({array!r}).",
        )
        logging.debug(f"Observing '{self.dependent_key}' on {self.owner!r}")
        self._watch(array)
        self.owner.add_observer(self.dependent_key, self._on_key_changed)
        self.owner.on_destroy(self.detach)

    def detach(self) -> None:
        self.owner.remove_observer(self.dependent_key, self._on_key_changed)
        if self.watched is not None:
            self.watched.remove_array_observer(self)
            self.watched = None

    def swap(self, array: ObservableArray) -> None:
        """Move the subscription to ``array``; a no-op if it is already watched."""
        if array is self.watched:
            return

        previous = self.watched
        if previous is not None:
            previous.remove_array_observer(self)
            self.watched = None
            logging.debug(f"Swapping array at '{self.dependent_key}' on {self.owner!r}")
            if self._removed is not None:
                for index, item in enumerate(list(previous)):
                    self._removed(self.owner, item, index)

        self._watch(array)

    def _watch(self, array: ObservableArray) -> None:
        self.watched = array
        if self._added is not None:
            for index, item in enumerate(list(array)):
                self._added(self.owner, item, index)
        array.add_array_observer(self)

    def _on_key_changed(self, owner: Model, key: str) -> None:
        value = owner.get(key)
        if not is_array(value):
            logging.debug(f"Ignoring non-array value {value!r} assigned to '{key}'")
            return
        invariant(
            is_observable_array(value),
            f"array_member_observer only works on observable arrays. The value assigned to "
            f"'{key}' is a plain sequence ({value!r}); wrap it with A().",
        )
        self.swap(value)

    # Array observer protocol

    def array_will_change(
        self, array: ObservableArray, start: int, removed_count: int, added_count: int
    ) -> None:
        if removed_count > 0 and self._removed is not None:
            for offset, item in enumerate(array[start : start + removed_count]):
                self._removed(self.owner, item, start + offset)

    def array_did_change(
        self, array: ObservableArray, start: int, removed_count: int, added_count: int
    ) -> None:
        if added_count > 0 and self._added is not None:
            for offset, item in enumerate(array[start : start + added_count]):
                self._added(self.owner, item, start + offset)

    def __repr__(self) -> str:
        return f"ArrayObservation({self.dependent_key!r}, watched={self.watched!r})"


class ArrayMemberObserver(InitHook):
    """
    Declaration that calls ``added(owner, item, index)`` and
    ``removed(owner, item, index)`` as the array at ``dependent_key`` changes.
    """

    def __init__(
        self,
        dependent_key: str,
        added: Optional[ItemCallback] = None,
        removed: Optional[ItemCallback] = None,
    ) -> None:
        super().__init__()
        self.dependent_key = dependent_key
        self._on_added = added
        self._on_removed = removed

    def added(self, owner: Model, item: Any, index: int) -> None:
        if self._on_added is not None:
            self._on_added(owner, item, index)

    def removed(self, owner: Model, item: Any, index: int) -> None:
        if self._on_removed is not None:
            self._on_removed(owner, item, index)

    def install(self, owner: Model) -> None:
        observation = owner.instance_state(
            self, lambda: ArrayObservation(owner, self.dependent_key, self.added, self.removed)
        )
        observation.attach()

    def observation_for(self, owner: Model) -> Optional[ArrayObservation]:
        return owner.instance_state_for(self)


def array_member_observer(
    dependent_key: str,
    added: Optional[ItemCallback] = None,
    removed: Optional[ItemCallback] = None,
) -> ArrayMemberObserver:
    """
    Provide callbacks for whenever an item is added to or removed from the
    array at ``dependent_key``.

    Args:
        dependent_key: Key of the observed array on the owner.
        added: Called as ``added(owner, item, index)`` for existing items on
            creation, for inserted items, and for every item of a replacement
            array.
        removed: Called as ``removed(owner, item, index)`` for removed items
            (before they leave the array) and for every item of a replaced
            array.
    """
    return ArrayMemberObserver(dependent_key, added, removed)


@dataclass(eq=False)
class NestedObservation:
    """Bookkeeping for one inner array attached on behalf of one owner."""

    owner: Model
    target: ObservableArray
    callback: Callable[[Model, ObservableArray], Any]
    count: int = 1

    def __call__(self, *args: Any) -> None:
        self.callback(self.owner, self.target)


class NestedArrayObserver(ArrayMemberObserver):
    """ArrayMemberObserver whose items are themselves observed arrays."""

    def __init__(
        self, dependent_key: str, observer_fn: Callable[[Model, ObservableArray], Any]
    ) -> None:
        super().__init__(dependent_key)
        self.observer_fn = observer_fn

    def cache_for(self, owner: Model) -> Dict[int, NestedObservation]:
        """Attached inner arrays of ``owner``, keyed by ``id(inner)``."""
        return owner.instance_state((self, "nested"), dict)

    def install(self, owner: Model) -> None:
        super().install(owner)
        owner.on_destroy(lambda: self._release_all(owner))

    def added(self, owner: Model, inner: Any, index: int) -> None:
        invariant(
            is_observable_array(inner),
            f"The outer array at '{self.dependent_key}' contains a non-array value ({inner!r}). "
            f"nested_array_observer must be used on an array of arrays.",
        )
        cache = self.cache_for(owner)
        entry = cache.get(id(inner))
        if entry is None:
            entry = NestedObservation(owner, inner, self.observer_fn)
            cache[id(inner)] = entry
            inner.add_observer(entry)
            logging.debug(f"Attached nested array {inner!r} at '{self.dependent_key}'")
        else:
            entry.count += 1

        # A new inner array counts as a change even though its contents did not move
        entry()

    def removed(self, owner: Model, inner: Any, index: int) -> None:
        if not is_observable_array(inner):
            return
        cache = self.cache_for(owner)
        entry = cache.get(id(inner))
        if entry is None:
            logging.debug(f"No nested observation for {inner!r} at '{self.dependent_key}'")
            return

        entry.count -= 1
        if entry.count == 0:
            inner.remove_observer(entry)
            del cache[id(inner)]
            logging.debug(f"Released nested array {inner!r} at '{self.dependent_key}'")

    def _release_all(self, owner: Model) -> None:
        cache = self.cache_for(owner)
        for entry in cache.values():
            entry.target.remove_observer(entry)
        cache.clear()


def nested_array_observer(
    dependent_key: str, observer_fn: Callable[[Model, ObservableArray], Any]
) -> NestedArrayObserver:
    """
    Observe the inner arrays of the array of arrays at ``dependent_key``.

    Args:
        dependent_key: Key of the outer array on the owner.
        observer_fn: Called as ``observer_fn(owner, inner)`` when ``inner``
            joins the outer array and whenever its contents change.
    """
    return NestedArrayObserver(dependent_key, observer_fn)
