"""
Walk Engine - generic structural traversal with pre-descent and post-rebuild hooks.

    walk(inner, outer, form)

inner(k, node) runs on every node before descent and must call k with the
node to descend into (possibly a different value, possibly of a different
kind). outer(node) is a plain function applied once the node's children
have all been rebuilt. Traversal is depth-first, left to right.

For each node:

    1. inner(k, node) -> node'          node' may differ in kind from node
    2. SCALAR node':    result = outer(node')
       ENTRY node':     walk key, then value, re-pair, outer
       RECORD node':    walk each field value, swap it back in by name,
                        outer; field names never reach the hooks
       other kinds:     reduce over children, walking each and appending
                        the rebuilt child to the builder's accumulator;
                        seal the accumulator, then outer

The kind is read from node' (the output of inner), so a pre-order hook
that turns a scalar into a list gets that list walked.

    prewalk(f, form)    inner applies f, outer is identity (top-down)
    postwalk(f, form)   inner is identity, outer applies f (bottom-up)

Every child is walked through a Suspended step handed to the driver, so
depth costs heap, not host stack.
"""

from __future__ import annotations

from typing import Any, Callable

from deepwalk.builders import BUILDERS
from deepwalk.driver import done, run, suspend
from deepwalk.forms import FormKind, kind_of, record_fields
from deepwalk.reduce_engine import Continuation, reduce

InnerHook = Callable[[Continuation, Any], Any]
OuterHook = Callable[[Any], Any]


def walk(
    inner: InnerHook,
    outer: OuterHook,
    form: Any,
    k: Continuation | None = None,
) -> Any:
    """
    Traverse form, rebuilding every composite of the same kind.

    Args:
        inner: CPS pre-descent hook ``inner(k, node)``.
        outer: Post-rebuild transform ``outer(node) -> node``.
        form: The form to walk.
        k: Optional continuation (driven shape).

    Returns:
        Driven: a Suspended step. Eager: the rebuilt form.
    """
    if k is None:
        return run(walk(inner, outer, form, done))
    return suspend(_visit, inner, outer, form, k)


def _visit(inner: InnerHook, outer: OuterHook, form: Any, k: Continuation) -> Any:
    return inner(lambda node: _descend(inner, outer, node, k), form)


def _descend(inner: InnerHook, outer: OuterHook, node: Any, k: Continuation) -> Any:
    kind = kind_of(node)

    if kind is FormKind.SCALAR:
        return k(outer(node))

    if kind is FormKind.ENTRY:
        # fixed two-step state machine: key, then value, then re-pair
        entries = BUILDERS[FormKind.ENTRY]
        return walk(
            inner,
            outer,
            node.key,
            lambda key: walk(
                inner,
                outer,
                node.value,
                lambda value: k(outer(entries.rebuild(key, value))),
            ),
        )

    if kind is FormKind.RECORD:
        # type and field names are fixed; only the values are walked
        records = BUILDERS[FormKind.RECORD]

        def field_step(d: Continuation, acc: Any, name: str) -> Any:
            return walk(
                inner,
                outer,
                getattr(node, name),
                lambda value: d(records.append(acc, (name, value))),
            )

        return reduce(
            field_step,
            records.empty(node),
            record_fields(node),
            lambda acc: k(outer(acc)),
        )

    builder = BUILDERS[kind]

    def step(d: Continuation, acc: Any, child: Any) -> Any:
        return walk(inner, outer, child, lambda rebuilt: d(builder.append(acc, rebuilt)))

    return reduce(
        step,
        builder.empty(node),
        builder.children(node),
        lambda acc: k(outer(builder.seal(acc, node))),
    )


# =============================================================================
# Pre-order / Post-order
# =============================================================================


def _pass_through(k: Continuation, node: Any) -> Any:
    return k(node)


def _identity(node: Any) -> Any:
    return node


def prewalk(f: Callable[[Any], Any], form: Any, k: Continuation | None = None) -> Any:
    """
    Top-down rewrite: f sees each node before its children are walked.

    Whatever f returns is what gets descended into.
    """
    return walk(lambda k2, node: k2(f(node)), _identity, form, k)


def postwalk(f: Callable[[Any], Any], form: Any, k: Continuation | None = None) -> Any:
    """
    Bottom-up rewrite: f sees each node after its children were rebuilt.
    """
    return walk(_pass_through, f, form, k)


# =============================================================================
# Visitation helpers
# =============================================================================


def walk_trace(order: str, form: Any) -> list[Any]:
    """
    Nodes in the order a pre- or post-order walk visits them.

    Args:
        order: "pre" or "post".
        form: The form to walk.
    """
    seen: list[Any] = []

    def record(node: Any) -> Any:
        seen.append(node)
        return node

    if order == "pre":
        prewalk(record, form)
    elif order == "post":
        postwalk(record, form)
    else:
        raise ValueError(f"order must be 'pre' or 'post', got {order!r}")
    return seen


def prewalk_demo(form: Any) -> Any:
    """Prewalk with identity, printing each node as it is walked."""

    def show(node: Any) -> Any:
        print(f"Walked: {node!r}")
        return node

    return prewalk(show, form)


def postwalk_demo(form: Any) -> Any:
    """Postwalk with identity, printing each node as it is walked."""

    def show(node: Any) -> Any:
        print(f"Walked: {node!r}")
        return node

    return postwalk(show, form)
