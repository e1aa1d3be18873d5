"""
Derived Combinators - map/filter/remove/keep/transduce/into over the reduce engine.

Everything here is a CPS reducing function (or a transformer of one)
layered onto deepwalk.reduce_engine. Element functions and predicates are CPS as
well:

    f(k, x)      must call k(result) exactly once

so a mapping function may itself suspend (the walk engine passes its own
recursive descent as f). lift() adapts an ordinary function.

A transducer is a function from one CPS reducing function to another:

    xform(rf) -> rf'        rf(done, acc, x)

transduce() applies the composed xform to the base reducing function
exactly once per call, so stateful transducers (taking) get fresh state
every run.

Every public combinator takes an optional trailing continuation k:
with k it returns a Suspended step (driven), without k it runs to
completion (eager).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from deepwalk.builders import builder_for, conj, start
from deepwalk.driver import done, run
from deepwalk.reduce_engine import Continuation, Step, reduce, reduce_raw, reduced

Transducer = Callable[[Step], Step]
CpsFn = Callable[[Continuation, Any], Any]


def lift(fn: Callable[[Any], Any]) -> CpsFn:
    """Turn a plain one-argument function into CPS shape ``f(k, x)``."""

    def cps(k: Continuation, x: Any) -> Any:
        return k(fn(x))

    cps.__name__ = f"lifted_{getattr(fn, '__name__', 'fn')}"
    return cps


def conj_step(d: Continuation, acc: Any, x: Any) -> Any:
    """Base reducing function: append x to the accumulator."""
    return d(conj(acc, x))


# =============================================================================
# Transducers
# =============================================================================


def mapping(f: CpsFn) -> Transducer:
    def xform(rf: Step) -> Step:
        def step(d: Continuation, acc: Any, x: Any) -> Any:
            return f(lambda v: rf(d, acc, v), x)

        return step

    return xform


def filtering(pred: CpsFn) -> Transducer:
    def xform(rf: Step) -> Step:
        def step(d: Continuation, acc: Any, x: Any) -> Any:
            return pred(lambda ok: rf(d, acc, x) if ok else d(acc), x)

        return step

    return xform


def removing(pred: CpsFn) -> Transducer:
    """filtering with the complement of pred."""
    return filtering(lambda k, x: pred(lambda ok: k(not ok), x))


def keeping(f: CpsFn) -> Transducer:
    """Pass on f(x) for every x where f(x) is not None."""

    def xform(rf: Step) -> Step:
        def step(d: Continuation, acc: Any, x: Any) -> Any:
            return f(lambda v: d(acc) if v is None else rf(d, acc, v), x)

        return step

    return xform


def taking(n: int) -> Transducer:
    """Pass on at most n elements, then stop the reduction."""
    if n < 0:
        raise ValueError(f"taking() needs n >= 0, got {n}")

    def xform(rf: Step) -> Step:
        remaining = n

        def step(d: Continuation, acc: Any, x: Any) -> Any:
            nonlocal remaining
            if remaining <= 0:
                return d(reduced(acc))
            remaining -= 1
            if remaining == 0:
                return rf(lambda a: d(reduced(a)), acc, x)
            return rf(d, acc, x)

        return step

    return xform


def taking_while(pred: CpsFn) -> Transducer:
    """Pass on elements while pred holds; stop at the first failure."""

    def xform(rf: Step) -> Step:
        def step(d: Continuation, acc: Any, x: Any) -> Any:
            return pred(lambda ok: rf(d, acc, x) if ok else d(reduced(acc)), x)

        return step

    return xform


def cat(rf: Step) -> Step:
    """Transducer that splices each element (an iterable) into the output."""

    def step(d: Continuation, acc: Any, coll: Any) -> Any:
        return reduce_raw(rf, acc, coll, d)

    return step


def compose(*xforms: Transducer) -> Transducer:
    """
    Compose transducers. Data flows through them left to right:
    compose(mapping(f), filtering(p)) maps first, then filters.
    """

    def xform(rf: Step) -> Step:
        for x in reversed(xforms):
            rf = x(rf)
        return rf

    return xform


def identity_xform(rf: Step) -> Step:
    return rf


# =============================================================================
# Transduce / Into
# =============================================================================


def transduce(
    xform: Transducer | None,
    rf: Step,
    init: Any,
    elements: Iterable[Any],
    k: Continuation | None = None,
) -> Any:
    """
    Reduce elements with xform(rf), composing xform exactly once.

    Args:
        xform: Transducer, or None for no transformation.
        rf: Base CPS reducing function ``rf(done, acc, x)``.
        init: Initial accumulator.
        elements: Input iterable.
        k: Optional continuation (driven shape).
    """
    step = (xform or identity_xform)(rf)
    return reduce(step, init, elements, k)


def into(
    target: Any,
    xform: Transducer | None,
    elements: Iterable[Any],
    k: Continuation | None = None,
) -> Any:
    """
    Append the transformed elements to a copy of target.

    target is never mutated and the result has target's concrete type
    (a tuple target gives a tuple, a frozenset a frozenset).
    """
    if k is None:
        return run(into(target, xform, elements, done))
    builder = builder_for(target)
    return transduce(
        xform,
        conj_step,
        start(target),
        elements,
        lambda acc: k(builder.seal(acc, target)),
    )


# =============================================================================
# Eager-or-driven list combinators
# =============================================================================


def mapv(f: CpsFn, elements: Iterable[Any], k: Continuation | None = None) -> Any:
    """List of f(x) for each x, in order."""
    return into([], mapping(f), elements, k)


def filterv(pred: CpsFn, elements: Iterable[Any], k: Continuation | None = None) -> Any:
    """List of the elements for which pred holds."""
    return into([], filtering(pred), elements, k)


def removev(pred: CpsFn, elements: Iterable[Any], k: Continuation | None = None) -> Any:
    """List of the elements for which pred does not hold."""
    return into([], removing(pred), elements, k)


def keepv(f: CpsFn, elements: Iterable[Any], k: Continuation | None = None) -> Any:
    """List of the non-None results of f."""
    return into([], keeping(f), elements, k)
