"""
Driver - the suspend/resume loop under every deepwalk traversal.

Every engine in this package is written in continuation-passing style.
Instead of calling the next piece of work directly (which would grow the
Python call stack with the depth of the structure), a function returns a
Suspended step: a deferred, zero-argument unit of work. The driver is the
only place that invokes those steps:

    result = initial
    while result is a Suspended step:
        result = result()
    return result

Because each step returns before the next one runs, the host stack depth
stays constant no matter how deep or wide the form is. Continuations live
on the heap as ordinary closures.

The driver knows nothing about forms, accumulators or hooks.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from deepwalk import config

logger = logging.getLogger(__name__)


# =============================================================================
# Suspension Primitives
# =============================================================================


class Suspended:
    """
    A deferred unit of work: ``fn(*args)`` not yet called.

    Only instances of this class are bounced by the driver. Terminal values
    are free to be callables themselves (a form may contain functions).
    """

    __slots__ = ("fn", "args")

    def __init__(self, fn: Callable[..., Any], *args: Any) -> None:
        self.fn = fn
        self.args = args

    def __call__(self) -> Any:
        return self.fn(*self.args)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__name__", repr(self.fn))
        return f"Suspended({name})"


def suspend(fn: Callable[..., Any], *args: Any) -> Suspended:
    """Defer ``fn(*args)`` until the driver resumes it."""
    return Suspended(fn, *args)


def is_suspended(value: Any) -> bool:
    """Return True if value is a Suspended step."""
    return isinstance(value, Suspended)


def done(value: Any) -> Any:
    """Terminal continuation: hand the value straight back to the driver."""
    return value


class StepLimitExceeded(RuntimeError):
    """Raised when a run uses more bounces than its budget allows."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Driver step limit exceeded ({limit} steps). "
            f"Raise max_steps or DEEPWALK_STEP_LIMIT for larger forms."
        )
        self.limit = limit


# =============================================================================
# Main Loop
# =============================================================================


def run(step: Any, max_steps: int | None = None) -> Any:
    """
    Bounce Suspended steps until a terminal value appears.

    Args:
        step: A Suspended step, or an already-terminal value (returned as is).
        max_steps: Optional bounce budget. None uses DEEPWALK_STEP_LIMIT;
            0 means unlimited.

    Returns:
        The first value produced that is not a Suspended step.

    Raises:
        StepLimitExceeded: If the budget is exhausted before completion.
        Exception: Anything raised by a user function inside a step
            propagates unchanged; partial accumulators are simply dropped.
    """
    limit = config.DEFAULT_STEP_LIMIT if max_steps is None else max_steps
    if limit < 0:
        raise ValueError(f"max_steps must be >= 0, got {limit}")

    result = step
    bounces = 0
    if limit:
        while isinstance(result, Suspended):
            if bounces >= limit:
                raise StepLimitExceeded(limit)
            result = result.fn(*result.args)
            bounces += 1
    else:
        while isinstance(result, Suspended):
            result = result.fn(*result.args)
            bounces += 1

    logger.debug("driver finished after %d bounces", bounces)
    return result
