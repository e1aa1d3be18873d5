"""
Tests for deep structural equality.
"""

from collections import OrderedDict, namedtuple
from dataclasses import dataclass

import pytest

from deepwalk.driver import StepLimitExceeded, done, is_suspended, run
from deepwalk.equality import (
    DEFAULT_EQUALITY,
    Equality,
    equal,
    equal_cps,
    register_equality,
    scalar_equal,
)
from deepwalk.forms import Entry, Keyword, plist
from deepwalk.walk_engine import postwalk

from conftest import nested_chain, nested_lists


Point = namedtuple("Point", ["x", "y"])
Vec = namedtuple("Vec", ["x", "y"])


@dataclass
class Cell:
    value: object


class Money:
    """Opaque scalar with no __eq__ of its own."""

    def __init__(self, cents, currency):
        self.cents = cents
        self.currency = currency


class Wrapper:
    def __init__(self, payload):
        self.payload = payload


# =============================================================================
# Core examples
# =============================================================================


class TestExamples:
    def test_unordered_maps(self):
        assert equal({"a": 1, "b": 2}, {"b": 2, "a": 1}) is True

    def test_sets_differ(self):
        assert equal({1, 2, 3}, {1, 2, 4}) is False

    def test_set_cardinality(self):
        assert equal({1, 2, 3}, {1, 2}) is False

    def test_nested_vectors_equal(self):
        assert equal([1, [2], 3], [1, [2], 3]) is True

    def test_nested_vectors_differ(self):
        assert equal([1, [2], 3], [1, [2], 4]) is False


# =============================================================================
# Rules
# =============================================================================


class TestIdentityAndNone:
    def test_identical_object(self):
        x = [1, {"a": [2]}]
        assert equal(x, x)

    def test_both_none(self):
        assert equal(None, None)

    def test_one_none(self):
        assert not equal(None, [])
        assert not equal(0, None)


class TestScalars:
    def test_numbers(self):
        assert equal(1, 1)
        assert equal(1, 1.0)
        assert not equal(1, 2)

    def test_bool_never_equals_int(self):
        assert not equal(True, 1)
        assert not equal(0, False)
        assert equal(True, True)

    def test_strings_are_scalars(self):
        assert equal("abc", "abc")
        assert not equal("abc", ["a", "b", "c"])

    def test_keyword_not_string(self):
        assert not equal(Keyword("a"), "a")
        assert equal(Keyword("a"), Keyword("a"))

    def test_scalar_equal_baseline(self):
        assert scalar_equal("x", "x")
        assert not scalar_equal(False, 0)


class TestUnordered:
    def test_map_value_mismatch(self):
        assert not equal({"a": 1}, {"a": 2})

    def test_map_key_mismatch(self):
        assert not equal({"a": 1}, {"b": 1})

    def test_map_kinds_interoperate(self):
        assert equal(OrderedDict([("a", 1)]), {"a": 1})

    def test_nested_unordered(self):
        assert equal({"a": {"x": 1, "y": [2]}}, {"a": {"y": [2], "x": 1}})

    def test_set_vs_frozenset(self):
        assert equal({1, 2}, frozenset({2, 1}))

    def test_composite_keys(self):
        assert equal({(1, 2): "a"}, {(1, 2): "a"})

    def test_set_of_tuples_structural(self):
        """Members are matched by recursive comparison, not hashing."""
        assert equal({(1, (2,)), (3,)}, {(3,), (1, (2,))})

    def test_set_vs_map(self):
        assert not equal({1}, {1: None})


class TestSequential:
    def test_length_mismatch(self):
        assert not equal([1, 2], [1, 2, 3])

    def test_order_matters(self):
        assert not equal([1, 2], [2, 1])

    def test_list_and_tuple(self):
        assert equal([1, (2, 3)], (1, [2, 3]))

    def test_plist_and_list(self):
        assert equal(plist(1, plist(2)), [1, [2]])

    def test_entry_pairs(self):
        assert equal(Entry("a", [1]), Entry("a", [1]))
        assert not equal(Entry("a", 1), Entry("b", 1))

    def test_empty(self):
        assert equal([], ())
        assert not equal([], {})


class TestRecords:
    def test_same_namedtuple(self):
        assert equal(Point(1, [2]), Point(1, [2]))
        assert not equal(Point(1, 2), Point(1, 3))

    def test_different_record_types(self):
        assert not equal(Point(1, 2), Vec(1, 2))

    def test_record_vs_tuple(self):
        assert not equal(Point(1, 2), (1, 2))

    def test_dataclass(self):
        assert equal(Cell([1, {"a": 2}]), Cell([1, {"a": 2}]))
        assert not equal(Cell(1), Cell(2))


class TestCrossKind:
    @pytest.mark.parametrize(
        "x, y",
        [
            ([1], {1}),
            ({"a": 1}, [("a", 1)]),
            (1, [1]),
            ("a", Keyword("a")),
            (Cell(1), {"value": 1}),
        ],
    )
    def test_cross_kind_is_false_not_error(self, x, y):
        assert equal(x, y) is False
        assert equal(y, x) is False


# =============================================================================
# Hooks
# =============================================================================


class TestHooks:
    def test_registered_hook_used(self):
        eq = Equality()
        eq.register(Money, lambda x, y, k: k(x.cents == y.cents and x.currency == y.currency))
        assert eq.equal(Money(100, "EUR"), Money(100, "EUR"))
        assert not eq.equal(Money(100, "EUR"), Money(100, "USD"))

    def test_hooks_reach_nested_values(self):
        eq = Equality()
        eq.register(Money, lambda x, y, k: k(x.cents == y.cents))
        assert eq.equal({"price": [Money(5, "EUR")]}, {"price": [Money(5, "EUR")]})

    def test_without_hook_falls_back_to_identity_eq(self):
        assert not Equality().equal(Money(1, "EUR"), Money(1, "EUR"))

    def test_hook_found_through_mro(self):
        class Euro(Money):
            pass

        eq = Equality()
        eq.register(Money, lambda x, y, k: k(x.cents == y.cents))
        assert eq.hook_for(Euro(1, "EUR")) is not None
        assert eq.equal(Euro(1, "EUR"), Euro(1, "EUR"))

    def test_hook_on_right_operand(self):
        seen = []

        def hook(x, y, k):
            seen.append((type(x).__name__, type(y).__name__))
            return k(True)

        eq = Equality()
        eq.register(Money, hook)
        assert eq.equal(5, Money(5, "EUR"))
        assert seen == [("Money", "int")]

    def test_hook_can_recurse_with_equal_cps(self):
        eq = Equality()
        eq.register(Wrapper, lambda x, y, k: eq.equal_cps(x.payload, y.payload, k))
        assert eq.equal(Wrapper([1, {"a": 2}]), Wrapper([1, {"a": 2}]))
        assert not eq.equal(Wrapper([1]), Wrapper([2]))

    def test_register_rejects_non_type(self):
        with pytest.raises(TypeError):
            Equality().register("Money", lambda x, y, k: k(True))

    def test_register_rejects_non_callable(self):
        with pytest.raises(TypeError):
            Equality().register(Money, "nope")

    def test_register_equality_decorator(self):
        class Token:
            def __init__(self, text):
                self.text = text

        @register_equality(Token)
        def token_equal(x, y, k):
            return k(x.text.lower() == y.text.lower())

        try:
            assert equal(Token("A"), Token("a"))
        finally:
            DEFAULT_EQUALITY._hooks.pop(Token, None)


# =============================================================================
# Driver integration
# =============================================================================


class TestDriven:
    def test_equal_cps_returns_step(self):
        step = equal_cps([1], [1], done)
        assert is_suspended(step)
        assert run(step) is True

    def test_step_budget(self):
        with pytest.raises(StepLimitExceeded):
            Equality().equal(list(range(100)), list(range(100)), max_steps=5)

    def test_walk_roundtrip(self):
        form = {"a": [1, (2, {3})], "b": Point(Cell("x"), None)}
        assert equal(form, postwalk(lambda x: x, form))

    def test_deep_plists_and_entries(self):
        """Nesting too deep for == on PList or Entry still compares."""

        def build(depth, leaf):
            node = plist(leaf)
            for i in range(depth):
                node = plist(i, Entry("k", node)) if i % 2 else plist(node)
            return node

        assert equal(build(20_000, 0), build(20_000, 0))
        assert not equal(build(20_000, 0), build(20_000, 1))

    def test_deep_lists(self):
        assert equal(nested_lists(5000), nested_lists(5000))
        assert not equal(nested_lists(5000), nested_lists(5000, leaf=1))

    def test_deep_maps_mismatch_at_bottom(self):
        a = nested_chain(3000)
        b = nested_chain(3000)
        node = b
        while "child" in node:
            node = node["child"]
        node["id"] = -1
        assert not equal(a, b)
