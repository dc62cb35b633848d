"""
arraysync ObservableArray - Mutable Sequence with Change Hooks
==============================================================

This module provides the array type that the observers in arraysync attach to.
A plain Python list cannot tell anyone that it changed, so ObservableArray
wraps one and routes every mutation through a single splice primitive,
``replace(start, remove_count, items)``.

Each splice notifies two kinds of listeners:

1. **Array observers** receive ``array_will_change(array, start, removed_count,
   added_count)`` before the contents change and ``array_did_change(...)``
   afterwards. Together they describe exactly which slice went away and which
   slice arrived, which is what ArrayMemberObserver turns into per-item
   ``removed`` and ``added`` callbacks.

2. **Content observers** are called as ``callback(array)`` once the mutation is
   complete. They carry no detail, only the fact that something changed.

```python
from arraysync import A

tags = A(["a", "b"])
tags.add_observer(lambda array: print(list(array)))
tags.append("c")  # prints ['a', 'b', 'c']
```

Mutating an array while it is still dispatching notifications for a previous
mutation raises ReentrantMutationError.
"""

from collections.abc import MutableSequence, Sequence
from typing import Any, Callable, Iterable, Iterator, List, Optional, TypeVar

from .exceptions import ReentrantMutationError

T = TypeVar("T")


class ObservableArray(MutableSequence):
    """
    A list-like sequence that reports every mutation to registered observers.

    Equality compares contents (against other ObservableArrays, lists and
    tuples). Like list, an ObservableArray is unhashable; caches that track
    arrays key them by ``id()``.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: List[T] = list(items)
        self._array_observers: List[Any] = []
        self._observers: List[Callable[["ObservableArray"], Any]] = []
        self._is_notifying = False

    # ------------------------------------------------------------------
    # Observer registration
    # ------------------------------------------------------------------

    def add_array_observer(self, observer: Any) -> None:
        """Register an object with array_will_change/array_did_change hooks."""
        if not self.has_array_observer(observer):
            self._array_observers.append(observer)

    def remove_array_observer(self, observer: Any) -> None:
        self._array_observers = [o for o in self._array_observers if o is not observer]

    def has_array_observer(self, observer: Any) -> bool:
        return any(o is observer for o in self._array_observers)

    def add_observer(self, callback: Callable[["ObservableArray"], Any]) -> None:
        """Register a content observer, called with the array after each change."""
        if not self.has_observer(callback):
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[["ObservableArray"], Any]) -> None:
        self._observers = [c for c in self._observers if c is not callback]

    def has_observer(self, callback: Callable[["ObservableArray"], Any]) -> bool:
        return any(c is callback for c in self._observers)

    # ------------------------------------------------------------------
    # Splice primitive
    # ------------------------------------------------------------------

    def replace(self, start: int, remove_count: int, items: Iterable[T] = ()) -> None:
        """
        Remove ``remove_count`` items at ``start`` and insert ``items`` there.

        All other mutators are expressed in terms of this method, so it is the
        only place where observers are notified. A splice that neither removes
        nor adds anything notifies nobody.
        """
        items = list(items)
        length = len(self._items)
        if start < 0:
            start = max(length + start, 0)
        start = min(start, length)
        remove_count = max(0, min(remove_count, length - start))
        added_count = len(items)

        if remove_count == 0 and added_count == 0:
            return

        if self._is_notifying:
            raise ReentrantMutationError(
                f"Cannot mutate {self!r} while it is notifying observers of a previous change"
            )

        self._is_notifying = True
        try:
            for observer in tuple(self._array_observers):
                observer.array_will_change(self, start, remove_count, added_count)

            self._items[start : start + remove_count] = items

            for observer in tuple(self._array_observers):
                observer.array_did_change(self, start, remove_count, added_count)

            for callback in tuple(self._observers):
                callback(self)
        finally:
            self._is_notifying = False

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __contains__(self, item: Any) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableArray):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    # Mutable with content equality, like list
    __hash__ = None

    def __repr__(self) -> str:
        return f"ObservableArray({self._items!r})"

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def _normalize_index(self, index: int) -> int:
        length = len(self._items)
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError("array index out of range")
        return index

    def _slice_bounds(self, index: slice):
        start, stop, step = index.indices(len(self._items))
        if step != 1:
            raise ValueError("ObservableArray does not support extended slices")
        return start, max(stop - start, 0)

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            start, count = self._slice_bounds(index)
            self.replace(start, count, value)
        else:
            self.replace(self._normalize_index(index), 1, [value])

    def __delitem__(self, index) -> None:
        if isinstance(index, slice):
            start, count = self._slice_bounds(index)
            self.replace(start, count)
        else:
            self.replace(self._normalize_index(index), 1)

    def insert(self, index: int, value: T) -> None:
        length = len(self._items)
        if index < 0:
            index = max(length + index, 0)
        self.replace(min(index, length), 0, [value])

    def append(self, value: T) -> None:
        self.replace(len(self._items), 0, [value])

    def extend(self, values: Iterable[T]) -> None:
        # One notification for the whole batch
        self.replace(len(self._items), 0, list(values))

    def __iadd__(self, values: Iterable[T]) -> "ObservableArray":
        self.extend(values)
        return self

    def pop(self, index: int = -1) -> T:
        if not self._items:
            raise IndexError("pop from empty array")
        index = self._normalize_index(index)
        item = self._items[index]
        self.replace(index, 1)
        return item

    def remove(self, value: T) -> None:
        self.replace(self._items.index(value), 1)

    def clear(self) -> None:
        self.replace(0, len(self._items))

    def reverse(self) -> None:
        if len(self._items) > 1:
            self.replace(0, len(self._items), self._items[::-1])

    def sort(self, *, key: Optional[Callable[[T], Any]] = None, reverse: bool = False) -> None:
        if len(self._items) > 1:
            self.replace(0, len(self._items), sorted(self._items, key=key, reverse=reverse))

    def add_object(self, item: T) -> None:
        """Append ``item`` unless an equal item is already present."""
        if item not in self._items:
            self.append(item)

    def remove_object(self, item: T) -> None:
        """Remove every occurrence equal to ``item``; absent items are ignored."""
        for index in range(len(self._items) - 1, -1, -1):
            if self._items[index] == item:
                self.replace(index, 1)


def A(items: Iterable[T] = ()) -> ObservableArray:
    """Return ``items`` as an ObservableArray, reusing it if it already is one."""
    if isinstance(items, ObservableArray):
        return items
    return ObservableArray(items)


def is_array(value: Any) -> bool:
    """True for any non-string sequence (lists, tuples, ObservableArrays)."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_observable_array(value: Any) -> bool:
    """True when ``value`` can be hooked for change notifications."""
    return isinstance(value, ObservableArray)
