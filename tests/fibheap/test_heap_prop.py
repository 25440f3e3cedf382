"""Property-based tests for FibHeap using Hypothesis."""

import math
from typing import Dict, List, Tuple

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fibheap import (
    EMPTY,
    DuplicateTag,
    FibHeap,
    KeyNotLarger,
    KeyNotSmaller,
    TagNotFound,
)
from tests.fibheap.hypo import configure_hypo

configure_hypo()


Op = Tuple[str, int, float]

tags = st.integers(min_value=0, max_value=30)
keys = st.one_of(st.integers(min_value=-50, max_value=50), st.just(math.inf))

ops = st.one_of(
    st.tuples(st.just("insert"), tags, keys),
    st.tuples(st.just("extract_min"), st.just(0), st.just(0)),
    st.tuples(st.just("decrease"), tags, keys),
    st.tuples(st.just("increase"), tags, keys),
    st.tuples(st.just("delete"), tags, st.just(0)),
    st.tuples(st.just("extract"), tags, st.just(0)),
)


@st.composite
def pairs_strategy(draw: st.DrawFn, max_size: int = 40) -> Dict[int, float]:
    """Generate a tag to key mapping."""
    return draw(
        st.dictionaries(
            st.integers(min_value=0, max_value=200), keys, max_size=max_size
        )
    )


def apply_op(heap: FibHeap[int], model: Dict[int, float], op: Op) -> None:
    """Apply one operation to both the heap and the dict model."""
    name, tag, key = op
    if name == "insert":
        if tag in model:
            with pytest.raises(DuplicateTag):
                heap.insert(tag, key)
        else:
            heap.insert(tag, key)
            model[tag] = key
    elif name == "extract_min":
        found = heap.extract_min()
        if not model:
            assert found == EMPTY
        else:
            found_tag, found_key = found
            assert found_key == min(model.values())
            assert model.pop(found_tag) == found_key
    elif name == "decrease":
        if tag not in model:
            with pytest.raises(TagNotFound):
                heap.decrease_key(tag, key)
        elif key >= model[tag]:
            with pytest.raises(KeyNotSmaller):
                heap.decrease_key(tag, key)
        else:
            heap.decrease_key(tag, key)
            model[tag] = key
    elif name == "increase":
        if tag not in model:
            with pytest.raises(TagNotFound):
                heap.increase_key(tag, key)
        elif key <= model[tag]:
            with pytest.raises(KeyNotLarger):
                heap.increase_key(tag, key)
        else:
            heap.increase_key(tag, key)
            model[tag] = key
    elif name == "delete":
        if tag not in model:
            with pytest.raises(TagNotFound):
                heap.delete(tag)
        else:
            heap.delete(tag)
            del model[tag]
    elif name == "extract":
        if tag not in model:
            assert heap.extract(tag) is None
        else:
            assert heap.extract(tag) == (tag, model.pop(tag))


def assert_matches(heap: FibHeap[int], model: Dict[int, float]) -> None:
    heap.validate()
    assert heap.count() == len(model)
    assert dict(heap.iter()) == model
    if model:
        assert heap.minimum()[1] == min(model.values())
    else:
        assert heap.minimum() == EMPTY


@given(st.lists(ops, max_size=80))
def test_operations_match_model(script: List[Op]) -> None:
    """Any sequence of operations agrees with a plain dict and keeps every invariant."""
    heap: FibHeap[int] = FibHeap.empty(int)
    model: Dict[int, float] = {}
    for op in script:
        apply_op(heap, model, op)
        assert_matches(heap, model)


@given(pairs_strategy(), st.lists(ops, max_size=40))
def test_drain_is_sorted_after_operations(
    pairs: Dict[int, float], script: List[Op]
) -> None:
    """After arbitrary updates, draining yields every live key in order."""
    heap = FibHeap.mk(pairs.items())
    model = dict(pairs)
    for op in script:
        apply_op(heap, model, op)

    drained = list(heap.drain())
    assert [key for _, key in drained] == sorted(model.values())
    assert dict(drained) == model
    assert heap.null()


@given(pairs_strategy())
def test_mk_size_and_minimum(pairs: Dict[int, float]) -> None:
    heap = FibHeap.mk(pairs.items())
    assert heap.size() == len(pairs)
    assert heap.null() == (len(pairs) == 0)
    if pairs:
        assert heap.minimum()[1] == min(pairs.values())
    heap.validate()


@given(pairs_strategy(), st.data())
def test_failed_decrease_leaves_state(pairs: Dict[int, float], data: st.DataObject) -> None:
    """A rejected decrease_key leaves the rendered forest untouched."""
    heap = FibHeap.mk(pairs.items())
    heap.extract_min()
    live = dict(heap.iter())
    if not live:
        return
    tag = data.draw(st.sampled_from(sorted(live)))
    before = heap.dump()
    with pytest.raises(KeyNotSmaller):
        heap.decrease_key(tag, live[tag])
    assert heap.dump() == before


@given(pairs_strategy(), pairs_strategy())
def test_union(first: Dict[int, float], second: Dict[int, float]) -> None:
    """Union is all or nothing, and a disjoint union sums counts and takes the smaller minimum."""
    heap = FibHeap.mk(first.items())
    other = FibHeap.mk(second.items())
    heap_min = heap.minimum()
    other_min = other.minimum()

    if first.keys() & second.keys():
        with pytest.raises(DuplicateTag):
            heap.union(other)
        assert heap.count() == len(first)
        assert heap.minimum() == heap_min
    else:
        heap.union(other)
        assert heap.count() == len(first) + len(second)
        merged = {**first, **second}
        if merged:
            assert heap.minimum()[1] == min(merged.values())
        assert dict(heap.iter()) == merged
        heap.validate()

    assert other.count() == len(second)
    assert other.minimum() == other_min
