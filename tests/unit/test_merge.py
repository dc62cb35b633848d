"""Unit tests for in-place array merging."""

import pytest

from arraysync import A, merge_arrays, strict_equal

MERGE_CASES = [
    ([], []),
    ([], ["a", "b"]),
    (["a", "b"], []),
    (["a", "b", "c"], ["c", "a", "d"]),
    (["a", "b"], ["b", "a"]),
    (["x"], ["y", "z", "x"]),
    ([1, 2, 3, 4], [4, 5, 1]),
]


@pytest.mark.unit
def test_merge_appends_new_items_and_removes_stale_ones():
    """Retained items keep their order and new items go to the end"""
    original = A(["a", "b", "c"])

    result = merge_arrays(original, ["c", "a", "d"])

    assert result is original
    assert original == ["a", "c", "d"]


@pytest.mark.unit
@pytest.mark.parametrize("original_items, update", MERGE_CASES)
def test_merge_leaves_original_matching_update(original_items, update):
    """After a merge every update item is in original and vice versa"""
    original = A(original_items)
    identity = id(original)

    merge_arrays(original, update)

    assert id(original) == identity
    assert all(item in original for item in update)
    assert all(item in update for item in original)


@pytest.mark.unit
@pytest.mark.parametrize("items", [[], ["a"], ["a", "b", "c"], [3, 1, 2]])
def test_merging_an_array_with_itself_changes_nothing(items):
    """merge_arrays(O, O) leaves O unchanged"""
    original = A(items)

    merge_arrays(original, original)

    assert original == items


@pytest.mark.unit
def test_merge_never_mutates_update():
    """The update array is only read"""
    update = ["b", "c"]

    merge_arrays(["a", "b"], update)

    assert update == ["b", "c"]


@pytest.mark.unit
def test_merge_works_on_plain_lists():
    """Any mutable sequence can be merged into"""
    original = ["a", "b"]

    result = merge_arrays(original, ["b", "c"])

    assert result is original
    assert original == ["b", "c"]


@pytest.mark.unit
def test_merge_uses_value_equality_by_default():
    """Strings built at runtime match equal strings already in the array"""
    first = "".join(["al", "pha"])
    original = A([first, "beta"])
    update = "-".join(["alpha", "beta"]).split("-")
    original.add_observer(lambda array: pytest.fail("no change expected"))

    merge_arrays(original, update)

    assert original == ["alpha", "beta"]
    assert original[0] is first


@pytest.mark.unit
def test_merge_collapses_duplicates_in_update():
    """A duplicate in the update matches the copy appended moments earlier"""
    original = A()

    merge_arrays(original, ["a", "a", "b"])

    assert original == ["a", "b"]


@pytest.mark.unit
def test_merge_with_custom_comparator_keeps_original_objects():
    """Items that match under the comparator are retained, not replaced"""
    old_one = {"id": 1, "name": "old"}
    two = {"id": 2, "name": "two"}
    original = A([old_one, two])

    merge_arrays(
        original,
        [{"id": 1, "name": "new"}, {"id": 3, "name": "three"}],
        comparator=lambda a, b: a["id"] == b["id"],
    )

    assert [item["id"] for item in original] == [1, 3]
    assert original[0] is old_one


@pytest.mark.unit
def test_merge_propagates_comparator_errors():
    """A failing comparator aborts the merge"""

    def broken(a, b):
        raise KeyError("boom")

    with pytest.raises(KeyError):
        merge_arrays(A(["a"]), ["b"], comparator=broken)


@pytest.mark.unit
@pytest.mark.observable
def test_merge_goes_through_notifying_mutators(splices):
    """Appends and removals on an ObservableArray are reported"""
    original = A(["a", "b"])
    original.add_array_observer(splices)

    merge_arrays(original, ["b", "c"])

    did_calls = [call for call in splices.calls if call[0] == "did"]
    assert did_calls == [
        ("did", ["a", "b", "c"], 2, 0, 1),
        ("did", ["b", "c"], 0, 1, 0),
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("tag", "".join(["t", "ag"]), True),
        (1, 1, True),
        (None, None, True),
        ((1, "x"), (1, "x"), True),
        ([1], [1], False),
        ({"id": 1}, {"id": 1}, False),
        ("1", 1, False),
    ],
)
def test_strict_equal_matches_values_and_identities(a, b, expected):
    """Immutable values match by value, mutable objects only by identity"""
    assert strict_equal(a, b) is expected
    assert strict_equal(a, a) is True


@pytest.mark.unit
def test_merge_replaces_equal_but_distinct_objects_by_default():
    """A new array with the same contents as an old one is not treated as the old one"""
    old = A([1])
    fresh = A([1])
    rows = A([old])

    merge_arrays(rows, [fresh])

    assert len(rows) == 1
    assert rows[0] is fresh


@pytest.mark.unit
def test_merge_keeps_the_same_object_when_it_is_reassigned():
    """An item present in both arrays by identity stays put"""
    item = {"id": 1}
    original = A([item])

    merge_arrays(original, [item, {"id": 1}])

    assert len(original) == 2
    assert original[0] is item
