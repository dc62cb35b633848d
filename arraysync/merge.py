"""
arraysync Merge - In-Place Array Merging
========================================

``merge_arrays`` makes one array look like another by mutating it, so that
anyone holding a reference to the original array (or observing it) keeps
seeing the same object.

```python
from arraysync import A, merge_arrays

tags = A(["a", "b", "c"])
merge_arrays(tags, ["c", "a", "d"])
tags  # ObservableArray(['a', 'c', 'd'])
```

Retained items keep their relative order and new items are appended at the
end, so the result matches ``update`` as a set, not necessarily as a
sequence. When ``original`` is an ObservableArray every append and removal
goes through its notifying mutators.
"""

from typing import Any, Callable, MutableSequence, Optional, Sequence, TypeVar

T = TypeVar("T")

Comparator = Callable[[Any, Any], bool]

# Immutable values that match by value; everything else matches by identity
_VALUE_TYPES = (str, bytes, int, float, complex, bool, tuple, frozenset, type(None))


def strict_equal(a: Any, b: Any) -> bool:
    """
    Default merge comparator: the same object, or equal immutable values.

    Strings produced by ``str.split`` match equal strings already in the
    array, while two distinct mutable objects (lists, dicts, ObservableArrays)
    never match even when their contents are equal.
    """
    if a is b:
        return True
    return isinstance(a, _VALUE_TYPES) and isinstance(b, _VALUE_TYPES) and a == b


def _has_match(item: Any, candidates: Sequence[Any], comparator: Comparator) -> bool:
    return any(comparator(item, candidate) for candidate in candidates)


def merge_arrays(
    original: MutableSequence[T],
    update: Sequence[T],
    comparator: Optional[Comparator] = None,
) -> MutableSequence[T]:
    """
    Merge ``update`` into ``original`` in place and return ``original``.

    Args:
        original: Array to mutate.
        update: Array whose membership ``original`` should end up with. Never
            mutated.
        comparator: ``comparator(a, b)`` returns True when ``a`` and ``b``
            should be considered the same item. Defaults to ``strict_equal``.

    Returns:
        ``original``, mutated.
    """
    comparator = comparator or strict_equal

    # ``update`` may be ``original`` itself; iterate a snapshot either way
    update = list(update)

    for item in update:
        if not _has_match(item, original, comparator):
            original.append(item)

    for item in list(original):
        if not _has_match(item, update, comparator):
            _remove_item(original, item)

    return original


def _remove_item(array: MutableSequence[Any], item: Any) -> None:
    # Identity, not equality: only the snapshot item that failed to match goes
    for index, candidate in enumerate(array):
        if candidate is item:
            del array[index]
            return
