"""
Tests for the CPS reduce engine: ordering, exhaustion, early termination and stack safety.
"""

import sys

import pytest

from deepwalk.driver import StepLimitExceeded, done, is_suspended, run, suspend
from deepwalk.forms import EMPTY, plist
from deepwalk.reduce_engine import (
    Reduced,
    fold,
    is_reduced,
    reduce,
    reduce_raw,
    reduced,
    unreduced,
)


def add(d, acc, x):
    return d(acc + x)


def collect(d, acc, x):
    return d(acc + [x])


# =============================================================================
# Basic folding
# =============================================================================


class TestReduce:
    def test_sum(self):
        assert reduce(add, 0, [1, 2, 3, 4]) == 10

    def test_empty_returns_init(self):
        assert reduce(add, 5, []) == 5

    def test_left_to_right(self):
        assert reduce(collect, [], "abc") == ["a", "b", "c"]

    def test_consumes_iterator_once(self):
        seen = []

        def gen():
            for i in range(3):
                seen.append(i)
                yield i

        assert reduce(add, 0, gen()) == 3
        assert seen == [0, 1, 2]

    def test_driven_shape_returns_step(self):
        """With k, nothing runs until the driver bounces the step."""
        calls = []

        def spy(d, acc, x):
            calls.append(x)
            return d(acc)

        step = reduce(spy, 0, [1, 2], done)
        assert is_suspended(step)
        assert calls == []
        assert run(step) == 0
        assert calls == [1, 2]

    def test_continuation_receives_result(self):
        assert run(reduce(add, 0, [1, 2], lambda total: total * 10)) == 30

    def test_asynchronous_step(self):
        """A step may call done from a later suspended step."""

        def later(d, acc, x):
            return suspend(lambda: d(acc + x))

        assert reduce(later, 0, range(10)) == 45

    def test_fold_plain_function(self):
        assert fold(lambda acc, x: acc * x, 1, [1, 2, 3, 4]) == 24


class TestExhaustion:
    def test_plist_accumulator_reversed_once(self):
        """Consing onto a PList then completing gives traversal order."""
        out = reduce(lambda d, acc, x: d(acc.cons(x)), EMPTY, [1, 2, 3])
        assert list(out) == [1, 2, 3]

    def test_list_accumulator_untouched(self):
        assert reduce(collect, [], [3, 1]) == [3, 1]

    def test_raw_reduce_skips_completion(self):
        out = run(reduce_raw(lambda d, acc, x: d(acc.cons(x)), EMPTY, [1, 2, 3], done))
        assert list(out) == [3, 2, 1]


# =============================================================================
# Early termination
# =============================================================================


class TestReduced:
    def test_stops_pulling(self):
        pulled = []

        def source():
            for i in range(100):
                pulled.append(i)
                yield i

        def until_three(d, acc, x):
            acc = acc + [x]
            return d(reduced(acc) if len(acc) == 3 else acc)

        assert reduce(until_three, [], source()) == [0, 1, 2]
        assert pulled == [0, 1, 2]

    def test_reduced_is_idempotent(self):
        r = reduced(1)
        assert reduced(r) is r

    def test_helpers(self):
        assert is_reduced(reduced(1))
        assert not is_reduced(1)
        assert unreduced(reduced(2)) == 2
        assert unreduced(2) == 2

    def test_reduced_plist_still_completed(self):
        def first_two(d, acc, x):
            acc = acc.cons(x)
            return d(reduced(acc) if len(acc) == 2 else acc)

        assert list(reduce(first_two, EMPTY, [1, 2, 3])) == [1, 2]

    def test_raw_reduce_passes_wrapper_through(self):
        out = run(reduce_raw(lambda d, acc, x: d(reduced(x)), None, [1, 2], done))
        assert isinstance(out, Reduced)
        assert out.value == 1


# =============================================================================
# Stack safety
# =============================================================================


class TestStackSafety:
    def test_long_input(self):
        n = sys.getrecursionlimit() * 20
        assert reduce(add, 0, range(n)) == n * (n - 1) // 2

    def test_nested_reductions(self):
        """A step that itself reduces (like the walk engine) stays flat."""

        def inner_sum(d, acc, row):
            return reduce(add, acc, row, d)

        rows = [[1] * 10 for _ in range(5000)]
        assert reduce(inner_sum, 0, rows) == 50000

    def test_step_budget_applies(self):
        with pytest.raises(StepLimitExceeded):
            run(reduce(add, 0, range(1000), done), max_steps=50)

    def test_plist_input(self):
        assert reduce(collect, [], plist(1, 2, 3)) == [1, 2, 3]
