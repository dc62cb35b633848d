"""Unit tests for instance-scoped and merged-array properties."""

import pytest

from arraysync import (
    A,
    InvariantViolation,
    Model,
    ObservableArray,
    ScopedProperty,
    computed,
    instance_scoped,
    merge_arrays,
    merged_array,
    nested_array_observer,
)


def make_read_counter():
    reads = 0

    def get(owner, key):
        nonlocal reads
        reads += 1
        return reads

    return computed(get)


@pytest.mark.unit
def test_factory_runs_once_per_instance():
    """Closure state created by the factory is private to each instance"""

    class Widget(Model):
        counter = instance_scoped("reads", make_read_counter)

    first, second = Widget(), Widget()

    assert first.reads == 1
    assert first.reads == 2
    assert second.reads == 1


@pytest.mark.unit
def test_property_is_installed_on_the_instance_not_the_class():
    """Scoped properties appear in the instance registry only"""

    class Widget(Model):
        reads = instance_scoped(None, make_read_counter)

    widget = Widget()

    assert "reads" in widget._computed
    assert "reads" not in Widget._computed_properties
    assert isinstance(Widget._init_hooks["reads"], ScopedProperty)
    assert Widget._init_hooks["reads"].key == "reads"


@pytest.mark.unit
def test_scoped_property_reapplies_constructor_value():
    """A keyword value for the key is assigned through the installed property"""
    assigned = []

    def factory():
        return computed(
            lambda owner, key: "read",
            lambda owner, key, value: assigned.append(value) or value,
        )

    class Widget(Model):
        label = instance_scoped("label", factory)

    widget = Widget(label="initial")

    assert assigned == ["initial"]
    assert widget.label == "read"


@pytest.mark.unit
def test_merged_array_preserves_identity():
    """Assigning to a merged array merges into the same ObservableArray"""

    class Selection(Model):
        chosen = merged_array()

    selection = Selection()
    source = selection.chosen

    selection.chosen = ["a", "b"]
    selection.chosen = ["b", "c"]

    assert isinstance(source, ObservableArray)
    assert selection.chosen is source
    assert source == ["b", "c"]


@pytest.mark.unit
def test_merged_array_is_private_per_instance():
    """Two instances never share the merged array"""

    class Selection(Model):
        chosen = merged_array()

    first, second = Selection(chosen=["a"]), Selection()

    assert first.chosen == ["a"]
    assert second.chosen == []
    assert first.chosen is not second.chosen


@pytest.mark.unit
def test_merged_array_with_custom_merge_function():
    """A custom merge function decides the result of the assignment"""

    def merge_by_lowercase(source, update):
        return merge_arrays(source, update, comparator=lambda a, b: a.lower() == b.lower())

    class Selection(Model):
        chosen = merged_array(merge_by_lowercase)

    selection = Selection(chosen=["Apple"])
    result = selection.set("chosen", ["APPLE", "pear"])

    assert result is selection.chosen
    assert selection.chosen == ["Apple", "pear"]


@pytest.mark.unit
def test_merged_array_rejects_non_arrays():
    """Only sequences can be merged"""

    class Selection(Model):
        chosen = merged_array(key="chosen")

    with pytest.raises(InvariantViolation, match="chosen"):
        Selection().chosen = "abc"


@pytest.mark.unit
@pytest.mark.observable
def test_merged_array_changes_are_observable():
    """Mutations from a merge are visible to content observers"""

    class Selection(Model):
        chosen = merged_array()

    selection = Selection()
    seen = []
    selection.chosen.add_observer(lambda array: seen.append(list(array)))

    selection.chosen = A(["x"])

    assert seen == [["x"]]


@pytest.mark.unit
@pytest.mark.observable
def test_merged_array_of_arrays_observes_the_assigned_inner_arrays():
    """Assigning a fresh inner array with equal contents swaps the nested observation"""
    calls = []

    class Grid(Model):
        rows = merged_array()
        watch = nested_array_observer("rows", lambda owner, row: calls.append(list(row)))

    old = A([1])
    grid = Grid(rows=[old])
    fresh = A([1])
    calls.clear()

    grid.rows = [fresh]
    fresh.append(2)
    old.append(9)

    assert grid.rows[0] is fresh
    assert calls == [[1], [1, 2]]
