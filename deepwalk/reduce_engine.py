"""
Reduce Engine - a stack-safe, left-to-right fold in continuation-passing style.

    reduce(step, init, elements, k)

step is a CPS reducing function with the shape

    step(done, acc, element)

and must call done(new_acc) exactly once, either synchronously or from a
later Suspended step. The engine hands back a Suspended step between
every element, so the driver bounces once per element and the host stack
never grows with the number of elements or with the nesting depth of
whatever step recurses into.

On exhaustion the engine calls k(complete(acc)): one generic rule that
reverses a PREPEND accumulator and leaves every other kind alone,
whichever combinator is running.

Early termination: a step may call done(reduced(value)). The engine then
stops pulling elements and finishes with value.

Call shapes:
    driven - k supplied: returns a Suspended step for use inside a larger
             pipeline; nothing runs until a driver bounces it.
    eager  - k omitted: runs its own driver and returns the final value.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

from deepwalk.builders import complete
from deepwalk.driver import done, run, suspend

Continuation = Callable[[Any], Any]
Step = Callable[[Continuation, Any, Any], Any]


# =============================================================================
# Early Termination
# =============================================================================


class Reduced:
    """Wrapper a step passes to done() to stop the reduction early."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"reduced({self.value!r})"


def reduced(value: Any) -> Reduced:
    """Mark value as the final accumulator."""
    return value if isinstance(value, Reduced) else Reduced(value)


def is_reduced(value: Any) -> bool:
    return isinstance(value, Reduced)


def unreduced(value: Any) -> Any:
    """Strip a Reduced wrapper, if any."""
    return value.value if isinstance(value, Reduced) else value


# =============================================================================
# Engine
# =============================================================================


def reduce(
    step: Step,
    init: Any,
    elements: Iterable[Any],
    k: Continuation | None = None,
) -> Any:
    """
    Fold elements into init with the CPS reducing function step.

    Args:
        step: ``step(done, acc, element)``; must call done exactly once.
        init: Initial accumulator.
        elements: Any iterable; consumed strictly left to right, once.
        k: Continuation receiving the finished accumulator. When omitted
            the reduction is driven to completion here and its value
            returned.

    Returns:
        Driven: a Suspended step. Eager: the final accumulator.
    """
    if k is None:
        return run(reduce(step, init, elements, done))
    return reduce_raw(step, init, elements, lambda acc: k(complete(unreduced(acc))))


def reduce_raw(step: Step, init: Any, elements: Iterable[Any], k: Continuation) -> Any:
    """
    Driven fold without the exhaustion rule.

    k receives the accumulator as is: never completed, and still wrapped
    if a step asked for early termination. Nested reductions (cat) use
    this so an inner pass neither reverses a shared PREPEND accumulator
    nor swallows a stop request meant for the outer pass.
    """
    return suspend(_next, step, init, iter(elements), k)


_EXHAUSTED = object()


def _next(step: Step, acc: Any, it: Iterator[Any], k: Continuation) -> Any:
    if isinstance(acc, Reduced):
        return k(acc)
    element = next(it, _EXHAUSTED)
    if element is _EXHAUSTED:
        return k(acc)
    return step(lambda new_acc: suspend(_next, step, new_acc, it, k), acc, element)


def fold(fn: Callable[[Any, Any], Any], init: Any, elements: Iterable[Any]) -> Any:
    """Eager reduce with a plain two-argument function ``fn(acc, element)``."""
    return reduce(lambda d, acc, x: d(fn(acc, x)), init, elements)
