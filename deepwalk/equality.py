"""
Equality Checker - stack-safe deep structural equality.

    equal(x, y) -> bool

Comparison runs in continuation-passing style on the same driver as the
walk engine, so arbitrarily deep forms compare without recursion on the
host stack. Rules, in order:

    identical objects            -> True, without looking inside
    exactly one side is None     -> False
    SCALAR vs SCALAR             -> registered hook if any, else baseline
    ASSOCIATIVE / SET            -> same kind, same size, and every element
                                    of x matches some element of y
    RECORD                       -> same type, fields equal in order
    APPEND / PREPEND / ENTRY     -> same length, pairwise in order
    anything else (cross-kind)   -> False, never an error

Unordered matching is a linear existential scan with recursive
comparison, not a hash lookup: elements may be composites whose equality
is itself structural. Matched candidates are not removed from the pool.
Sets and maps cannot hold two equal elements, so this never pairs one
element of y with two of x; a multiset kind would need to consume matches.

The baseline scalar equality is == except that a bool is never equal to
a non-bool (Python's True == 1 coercion is not structural equality).
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from deepwalk.driver import done, run, suspend
from deepwalk.forms import FormKind, children, kind_of
from deepwalk.reduce_engine import Continuation

logger = logging.getLogger(__name__)

EqualityHook = Callable[[Any, Any, Continuation], Any]

UNORDERED = frozenset({FormKind.ASSOCIATIVE, FormKind.SET})
SEQUENTIAL = frozenset({FormKind.APPEND, FormKind.PREPEND, FormKind.ENTRY})

_END = object()


def scalar_equal(x: Any, y: Any) -> bool:
    """Baseline value equality for opaque scalars."""
    if isinstance(x, bool) or isinstance(y, bool):
        return isinstance(x, bool) and isinstance(y, bool) and x == y
    return bool(x == y)


class Equality:
    """
    Deep equality with a table of per-type scalar hooks.

    A hook has the CPS shape ``hook(x, y, k)`` and must call k(bool)
    exactly once. It may compare nested values through equal_cps() to
    stay stack-safe. Hooks are consulted only when both values are
    SCALAR; lookup follows the MRO of x, then of y.
    """

    def __init__(self) -> None:
        self._hooks: dict[type, EqualityHook] = {}

    # -------------------------------------------------------------------------
    # Hook Registration
    # -------------------------------------------------------------------------

    def register(self, cls: type, hook: EqualityHook) -> None:
        """Register a CPS equality hook for instances of cls."""
        if not isinstance(cls, type):
            raise TypeError(f"register() needs a type, got {cls!r}")
        if not callable(hook):
            raise TypeError(f"equality hook for {cls.__name__} must be callable")
        self._hooks[cls] = hook
        logger.debug("registered equality hook for %s", cls.__qualname__)

    def hook_for(self, value: Any) -> EqualityHook | None:
        """Most specific registered hook for value's type, or None."""
        for base in type(value).__mro__:
            hook = self._hooks.get(base)
            if hook is not None:
                return hook
        return None

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    def equal(self, x: Any, y: Any, max_steps: int | None = None) -> bool:
        """Eager deep equality."""
        return run(self.equal_cps(x, y, done), max_steps)

    def equal_cps(self, x: Any, y: Any, k: Continuation) -> Any:
        """Driven deep equality: returns a Suspended step that feeds k a bool."""
        return suspend(self._compare, x, y, k)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def _compare(self, x: Any, y: Any, k: Continuation) -> Any:
        if x is y:
            return k(True)
        if x is None or y is None:
            return k(False)

        kx, ky = kind_of(x), kind_of(y)

        if kx is FormKind.SCALAR or ky is FormKind.SCALAR:
            if kx is not ky:
                return k(False)
            hook = self.hook_for(x)
            if hook is not None:
                return hook(x, y, k)
            hook = self.hook_for(y)
            if hook is not None:
                return hook(y, x, k)
            return k(scalar_equal(x, y))

        if kx in UNORDERED or ky in UNORDERED:
            if kx is not ky or len(x) != len(y):
                return k(False)
            return self._every_matched(iter(children(x)), list(children(y)), k)

        if kx is FormKind.RECORD or ky is FormKind.RECORD:
            if type(x) is not type(y):
                return k(False)
            return self._pairwise(iter(children(x)), iter(children(y)), k)

        if kx in SEQUENTIAL and ky in SEQUENTIAL:
            if len(x) != len(y):
                return k(False)
            return self._pairwise(iter(x), iter(y), k)

        return k(False)

    def _pairwise(self, xs: Any, ys: Any, k: Continuation) -> Any:
        a = next(xs, _END)
        if a is _END:
            return k(True)
        b = next(ys)
        # a mismatch unwinds one level per bounce, never in one call chain
        return self.equal_cps(
            a, b, lambda same: suspend(self._pairwise, xs, ys, k) if same else suspend(k, False)
        )

    def _every_matched(self, xs: Any, candidates: list[Any], k: Continuation) -> Any:
        x = next(xs, _END)
        if x is _END:
            return k(True)
        return self._any_match(
            x,
            candidates,
            0,
            lambda found: suspend(self._every_matched, xs, candidates, k) if found else suspend(k, False),
        )

    def _any_match(self, x: Any, candidates: list[Any], i: int, k: Continuation) -> Any:
        if i == len(candidates):
            return k(False)
        return self.equal_cps(
            x,
            candidates[i],
            lambda same: k(True) if same else suspend(self._any_match, x, candidates, i + 1, k),
        )


# =============================================================================
# Module-level default
# =============================================================================


DEFAULT_EQUALITY = Equality()


def equal(x: Any, y: Any) -> bool:
    """Deep structural equality of x and y."""
    return DEFAULT_EQUALITY.equal(x, y)


def equal_cps(x: Any, y: Any, k: Continuation) -> Any:
    """Driven deep equality on the default registry."""
    return DEFAULT_EQUALITY.equal_cps(x, y, k)


def register_equality(cls: type, hook: EqualityHook | None = None) -> Any:
    """
    Register a CPS equality hook on the default registry.

    Usable directly, ``register_equality(Money, money_equal)``, or as a
    decorator, ``@register_equality(Money)``.
    """
    if hook is None:

        def decorator(fn: EqualityHook) -> EqualityHook:
            DEFAULT_EQUALITY.register(cls, fn)
            return fn

        return decorator
    DEFAULT_EQUALITY.register(cls, hook)
    return hook
