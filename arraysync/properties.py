"""
arraysync Properties - Instance-Scoped and Array-Derived Computed Properties
============================================================================

Computed properties declared on a class share one definition across every
instance, including any state captured in the getter's closure. The helpers
here install their property per instance instead, so closure state such as a
cached default belongs to exactly one owner.

instance_scoped
---------------

```python
from arraysync import Model, computed, instance_scoped

def make_counter():
    reads = 0

    def get(owner, key):
        nonlocal reads
        reads += 1
        return reads

    return computed(get)

class Widget(Model):
    reads = instance_scoped("reads", make_counter)

Widget().reads  # 1
Widget().reads  # 1, a fresh closure for each instance
```

joined_array
------------

A two-way string view of an array. Reading joins the items with the
separator. Assigning a string splits it and merges the pieces into the
existing array in place, so observers of the array see ordinary
``added``/``removed`` changes rather than a replacement.

```python
from arraysync import A, Model, joined_array

class Post(Model):
    tag_string = joined_array("tags", ",")

post = Post(tags=A(["a", "b"]))
post.tag_string               # "a,b"
post.tag_string = "a,b,c"
post.tags                     # ObservableArray(['a', 'b', 'c'])
post.tag_string = ""
post.tags                     # ObservableArray([])
post.tag_string = None        # restores the contents first seen: ['a', 'b']
```

The value reported by an assignment is the join of the merged array, which
can differ from the assigned string when a custom merge function drops or
reorders items.

merged_array
------------

An array property whose identity never changes: assigning a sequence merges
it into the instance's private ObservableArray.
"""

from collections.abc import MutableSequence
from typing import Any, Callable, List, Optional, Sequence

from .array import A, is_array
from .exceptions import invariant
from .merge import merge_arrays
from .model import ComputedProperty, InitHook, Model, define_computed_property

_MISSING = object()

MergeFunction = Callable[[MutableSequence, Sequence], MutableSequence]


class ScopedProperty(InitHook):
    """
    Declaration that installs ``factory()`` as a computed property on each
    new instance. Without an explicit key the class attribute name is used.

    A plain value stored at the key before installation (for example from the
    constructor's keyword arguments) is assigned again through the new
    property.
    """

    def __init__(self, factory: Callable[[], ComputedProperty], key: Optional[str] = None) -> None:
        super().__init__()
        self._factory = factory
        self.key = key

    def __set_name__(self, owner: type, name: str) -> None:
        super().__set_name__(owner, name)
        if self.key is None:
            self.key = name

    def install(self, owner: Model) -> None:
        invariant(self.key is not None, f"{self!r} has no key to install on {owner!r}")
        pending = owner._values.get(self.key, _MISSING)
        define_computed_property(owner, self.key, self._factory())
        if pending is not _MISSING:
            owner.set(self.key, pending)


def instance_scoped(key: Optional[str], factory: Callable[[], ComputedProperty]) -> ScopedProperty:
    """
    Create a computed property that has a private closure scope per instance.

    Args:
        key: Property to install the computed property at.
        factory: Returns a ComputedProperty; called once per instance.
    """
    return ScopedProperty(factory, key)


def _join(items: Sequence[Any], separator: str) -> str:
    return separator.join("" if item is None else str(item) for item in items)


def joined_array(
    dependent_key: str, separator: str, merge_fn: Optional[MergeFunction] = None
) -> ScopedProperty:
    """
    Computed property representing the array at ``dependent_key`` as a string
    of its items joined by ``separator``.

    Args:
        dependent_key: The underlying array.
        separator: String placed between items, and split on when assigning.
        merge_fn: ``merge_fn(existing, new_items)`` merges the incoming items
            into the existing array and returns the result. Defaults to
            ``merge_arrays``.
    """
    invariant(
        isinstance(separator, str) and separator != "",
        f"joined_array needs a non-empty string separator, got {separator!r}",
    )
    merge_fn = merge_fn or merge_arrays

    def factory() -> ComputedProperty:
        default: Optional[List[Any]] = None

        def cache_default(owner: Model) -> None:
            # Snapshot, so a later "None" assignment can restore it
            nonlocal default
            if default is None:
                value = owner.get(dependent_key)
                default = list(value) if is_array(value) else []

        def get(owner: Model, key: str) -> Optional[str]:
            cache_default(owner)
            value = owner.get(dependent_key)
            if value is None:
                return None
            invariant(
                is_array(value),
                f"joined_array only works on arrays. The dependent key you provided "
                f"('{dependent_key}') holds {value!r}, which is not an array.",
            )
            return _join(value, separator)

        def set(owner: Model, key: str, value: Optional[str]) -> str:
            invariant(
                value is None or isinstance(value, str),
                f"You must supply a string when setting '{key}'. "
                f"The value you provided ({value!r}) is not a string.",
            )
            cache_default(owner)

            if isinstance(value, str):
                new_items = value.split(separator) if value else []
            else:
                new_items = list(default)

            existing = owner.get(dependent_key)
            invariant(
                isinstance(existing, MutableSequence),
                f"joined_array can only update a mutable array. The dependent key you "
                f"provided ('{dependent_key}') holds {existing!r}.",
            )
            result = merge_fn(existing, new_items)
            return _join(result, separator)

        return ComputedProperty(get, set)

    return ScopedProperty(factory)


def merged_array(merge_fn: Optional[MergeFunction] = None, key: Optional[str] = None) -> ScopedProperty:
    """
    An array that, when set, merges the incoming array into the instance's
    own array instead of replacing it.

    Args:
        merge_fn: ``merge_fn(source, update)`` returns the result of the set.
            Defaults to ``merge_arrays``, which preserves the source array.
        key: Property name; defaults to the class attribute name.
    """
    merge_fn = merge_fn or merge_arrays

    def factory() -> ComputedProperty:
        source = A()

        def get(owner: Model, key: str):
            return source

        def set(owner: Model, key: str, update: Sequence[Any]):
            invariant(
                is_array(update),
                f"merged_array '{key}' can only be set to an array ({update!r})",
            )
            return merge_fn(source, update)

        return ComputedProperty(get, set)

    return ScopedProperty(factory, key)
