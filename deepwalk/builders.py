"""
Collection Builders - incremental rebuilding of composite forms.

For every FormKind there is one builder exposing the same four steps:

    empty(form)          -> acc     fresh accumulator for a rebuilt form
    append(acc, element) -> acc'    add one rebuilt child in traversal order
    finalize(acc)        -> acc''   kind-level finishing (PREPEND reverses)
    seal(acc, form)      -> form'   restore form's concrete Python type

| Kind        | empty                    | append                 | finalize |
|-------------|--------------------------|------------------------|----------|
| APPEND      | empty list/deque         | append                 | identity |
| PREPEND     | EMPTY                    | cons                   | reverse  |
| ASSOCIATIVE | empty dict of same type  | acc[key] = value       | identity |
| SET         | empty set                | add                    | identity |
| RECORD      | the original record      | functional field swap  | identity |

ENTRY has no accumulator: the walk engine rebuilds it with a fixed
two-step key/value state machine. SCALAR passes through untouched.

Prepend-then-reverse keeps every PREPEND append O(1); the reversal runs
once, from complete(), when the reduce engine exhausts its elements.

Accumulators are private to one traversal call, so mutable accumulators
(list, dict, set) are appended to in place.
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict, deque
from typing import Any, Iterable

from deepwalk.forms import (
    EMPTY,
    Entry,
    FormKind,
    PList,
    children,
    is_namedtuple,
    kind_of,
)


class Builder:
    """Base builder: the SCALAR behaviour (no accumulation at all)."""

    kind = FormKind.SCALAR

    def empty(self, form: Any) -> Any:
        raise TypeError(f"{self.kind.value} forms have no accumulator: {form!r}")

    def children(self, form: Any) -> Iterable[Any]:
        return children(form)

    def append(self, acc: Any, element: Any) -> Any:
        raise TypeError(f"cannot append to a {self.kind.value} form: {acc!r}")

    def finalize(self, acc: Any) -> Any:
        return acc

    def seal(self, acc: Any, form: Any) -> Any:
        return acc


class AppendBuilder(Builder):
    kind = FormKind.APPEND

    def empty(self, form: Any) -> Any:
        if isinstance(form, deque):
            return deque(maxlen=form.maxlen)
        if type(form) is list:
            return []
        if isinstance(form, list):
            return type(form)()
        # tuples accumulate into a list and are restored by seal()
        return []

    def append(self, acc: Any, element: Any) -> Any:
        acc.append(element)
        return acc

    def seal(self, acc: Any, form: Any) -> Any:
        if isinstance(form, tuple) and not isinstance(acc, tuple):
            return tuple(acc) if type(form) is tuple else type(form)(acc)
        return acc


class PrependBuilder(Builder):
    kind = FormKind.PREPEND

    def empty(self, form: Any) -> PList:
        return EMPTY

    def append(self, acc: PList, element: Any) -> PList:
        return acc.cons(element)

    def finalize(self, acc: PList) -> PList:
        return acc.reverse()


class AssociativeBuilder(Builder):
    kind = FormKind.ASSOCIATIVE

    def empty(self, form: Any) -> Any:
        if isinstance(form, defaultdict):
            return type(form)(form.default_factory)
        if type(form) is dict:
            return {}
        return type(form)()

    def append(self, acc: Any, element: Any) -> Any:
        # appending nothing leaves the map as it is
        if element is None:
            return acc
        key, value = _as_pair(element)
        acc[key] = value
        return acc


class SetBuilder(Builder):
    kind = FormKind.SET

    def empty(self, form: Any) -> Any:
        if isinstance(form, set):
            return set() if type(form) is set else type(form)()
        # frozensets accumulate into a set and are restored by seal()
        return set()

    def append(self, acc: Any, element: Any) -> Any:
        acc.add(element)
        return acc

    def seal(self, acc: Any, form: Any) -> Any:
        if isinstance(form, frozenset) and not isinstance(acc, frozenset):
            return frozenset(acc) if type(form) is frozenset else type(form)(acc)
        return acc


class RecordBuilder(Builder):
    kind = FormKind.RECORD

    def empty(self, form: Any) -> Any:
        # records cannot be built empty; the original is the scratch start
        return form

    def append(self, acc: Any, element: Any) -> Any:
        name, value = _as_pair(element)
        if not isinstance(name, str):
            raise TypeError(f"record field name must be str, got {name!r}")
        if is_namedtuple(acc):
            return acc._replace(**{name: value})
        return dataclasses.replace(acc, **{name: value})


class EntryBuilder(Builder):
    """Entries are rebuilt by the walk engine's key/value state machine."""

    kind = FormKind.ENTRY

    def empty(self, form: Any) -> Any:
        raise TypeError("entries are rebuilt slot by slot, not accumulated")

    def rebuild(self, key: Any, value: Any) -> Entry:
        return Entry(key, value)


def _as_pair(element: Any) -> tuple[Any, Any]:
    if isinstance(element, Entry):
        return element.key, element.value
    try:
        key, value = element
    except (TypeError, ValueError) as e:
        raise TypeError(f"expected an Entry or a key/value pair, got {element!r}") from e
    return key, value


# =============================================================================
# Dispatch
# =============================================================================


BUILDERS: dict[FormKind, Builder] = {
    FormKind.SCALAR: Builder(),
    FormKind.APPEND: AppendBuilder(),
    FormKind.PREPEND: PrependBuilder(),
    FormKind.ASSOCIATIVE: AssociativeBuilder(),
    FormKind.SET: SetBuilder(),
    FormKind.RECORD: RecordBuilder(),
    FormKind.ENTRY: EntryBuilder(),
}


def builder_for(form: Any) -> Builder:
    """Return the builder for form's kind."""
    return BUILDERS[kind_of(form)]


def complete(acc: Any) -> Any:
    """
    The single exhaustion rule of the reduce engine.

    Applies the finalisation of the accumulator's own kind: a PREPEND
    accumulator is reversed back into traversal order, everything else is
    returned unchanged.
    """
    return BUILDERS[kind_of(acc)].finalize(acc)


def start(target: Any) -> Any:
    """
    Accumulator that already holds target's elements, for into().

    The caller's target is never mutated. A PREPEND target is stored
    reversed so that complete() puts its elements back in front.
    """
    kind = kind_of(target)
    builder = BUILDERS[kind]
    if kind is FormKind.PREPEND:
        return target.reverse()
    if kind is FormKind.RECORD:
        return target
    acc = builder.empty(target)
    for x in builder.children(target):
        acc = builder.append(acc, x)
    return acc


def conj(acc: Any, element: Any) -> Any:
    """Append one element to an accumulator of any composite kind."""
    return builder_for(acc).append(acc, element)
