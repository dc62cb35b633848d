"""
arraysync - Reactive Array Synchronization

Keeps derived values (a joined string, per-item added/removed callbacks,
observers of nested arrays) consistent with an underlying mutable array
across in-place mutation, wholesale replacement, and arrays of arrays.
"""

from .array import A, ObservableArray, is_array, is_observable_array
from .exceptions import InvariantViolation, ReentrantMutationError, invariant
from .merge import merge_arrays, strict_equal
from .model import (
    ComputedProperty,
    InitHook,
    Model,
    ModelMeta,
    computed,
    define_computed_property,
    on_init,
)
from .observers import (
    ArrayMemberObserver,
    ArrayObservation,
    NestedArrayObserver,
    NestedObservation,
    array_member_observer,
    nested_array_observer,
)
from .properties import ScopedProperty, instance_scoped, joined_array, merged_array

__all__ = [
    # Host array
    "A",
    "ObservableArray",
    "is_array",
    "is_observable_array",
    # Host object system
    "Model",
    "ModelMeta",
    "ComputedProperty",
    "InitHook",
    "computed",
    "define_computed_property",
    "on_init",
    # Merging
    "merge_arrays",
    "strict_equal",
    # Observers
    "ArrayMemberObserver",
    "ArrayObservation",
    "NestedArrayObserver",
    "NestedObservation",
    "array_member_observer",
    "nested_array_observer",
    # Properties
    "ScopedProperty",
    "instance_scoped",
    "joined_array",
    "merged_array",
    # Exceptions
    "InvariantViolation",
    "ReentrantMutationError",
    "invariant",
]
