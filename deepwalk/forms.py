"""
Form Kinds - the closed set of shapes deepwalk knows how to take apart.

A Form is any Python value handed to walk, reduce or equal. Every
component dispatches on exactly one classifier, kind_of(), which maps a
value to one member of FormKind:

    SCALAR       opaque leaf (str, bytes, numbers, None, Keyword, ...)
    APPEND       list, tuple, deque            - append-ordered
    PREPEND      PList                         - only cons is O(1)
    ASSOCIATIVE  dict and subclasses           - children are Entry values
    SET          set, frozenset
    RECORD       dataclass / namedtuple        - fixed named fields
    ENTRY        Entry(key, value)             - exactly two slots

Strings are sequences in Python but are treated as SCALAR: walking never
descends into characters.

This module also defines the two structural types Python lacks: Entry (a
map entry) and PList (an immutable singly-linked list), plus Keyword, the
interned "tagged key" scalar.
"""

from __future__ import annotations

import dataclasses
import enum
from collections import deque
from typing import Any, Iterable, Iterator


class FormKind(enum.Enum):
    """The composite kind of a form."""

    SCALAR = "scalar"
    APPEND = "append"
    PREPEND = "prepend"
    ASSOCIATIVE = "associative"
    SET = "set"
    RECORD = "record"
    ENTRY = "entry"


# =============================================================================
# Entry
# =============================================================================


class Entry:
    """
    One key/value slot pair of an associative form.

    Unpacks like a 2-tuple (``k, v = entry``) but is its own kind, so a
    walk can tell a map entry apart from an ordinary pair.

    ==, hash() and repr() follow Python semantics and recurse into the
    key and value on the host stack; compare deeply nested entries with
    deepwalk.equal instead.
    """

    __slots__ = ("key", "value")

    def __init__(self, key: Any, value: Any) -> None:
        self.key = key
        self.value = value

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.value

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int) -> Any:
        if index in (0, -2):
            return self.key
        if index in (1, -1):
            return self.value
        raise IndexError(f"Entry index out of range: {index}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.key == other.key and self.value == other.value

    def __hash__(self) -> int:
        return hash((Entry, self.key, self.value))

    def __repr__(self) -> str:
        return f"Entry({self.key!r}, {self.value!r})"


# =============================================================================
# PList
# =============================================================================


class PList:
    """
    Immutable singly-linked list. Prepending (cons) is the only O(1) growth.

    EMPTY is the shared empty list; build others with plist(...) or
    EMPTY.cons(x). Length is cached per node so len() is O(1).

    Iteration is a loop, but ==, hash() and repr() recurse into nested
    elements like list and tuple do; use deepwalk.equal for deeply
    nested values.
    """

    __slots__ = ("_head", "_tail", "_count")

    def __init__(self, head: Any = None, tail: PList | None = None) -> None:
        self._head = head
        self._tail = tail
        self._count = 0 if tail is None else tail._count + 1

    # ---------- structural operations ----------

    def cons(self, x: Any) -> PList:
        """Return a new list with x in front of this one."""
        return PList(x, self)

    def first(self) -> Any:
        """Head element, or None for the empty list."""
        return self._head if self._tail is not None else None

    def rest(self) -> PList:
        """Everything after the head (EMPTY for lists of length <= 1)."""
        return self._tail if self._tail is not None else self

    def reverse(self) -> PList:
        """Return the elements in reverse order (O(n), iterative)."""
        out = EMPTY
        for x in self:
            out = out.cons(x)
        return out

    # ---------- protocol ----------

    def __iter__(self) -> Iterator[Any]:
        node = self
        while node._tail is not None:
            yield node._head
            node = node._tail

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PList):
            return NotImplemented
        if self._count != other._count:
            return False
        return all(a == b for a, b in zip(self, other))

    def __hash__(self) -> int:
        return hash((PList, tuple(self)))

    def __repr__(self) -> str:
        return "plist(" + ", ".join(repr(x) for x in self) + ")"


EMPTY = PList()


def plist(*items: Any) -> PList:
    """Build a PList holding items in the given order."""
    return from_iterable(items)


def from_iterable(items: Iterable[Any]) -> PList:
    """Build a PList from any iterable, preserving order."""
    out = EMPTY
    for x in reversed(list(items)):
        out = out.cons(x)
    return out


# =============================================================================
# Keyword
# =============================================================================


class Keyword:
    """
    Interned symbolic name, used as a tagged map key.

    Keyword("a") always returns the same object, so keywords compare and
    hash by identity. A keyword never equals the string with its name.
    """

    __slots__ = ("name", "__weakref__")

    _interned: dict[str, Keyword] = {}

    def __new__(cls, name: str) -> Keyword:
        if not isinstance(name, str):
            raise TypeError(f"Keyword name must be str, got {type(name).__name__}")
        existing = cls._interned.get(name)
        if existing is not None:
            return existing
        kw = super().__new__(cls)
        kw.name = name
        cls._interned[name] = kw
        return kw

    def __reduce__(self) -> tuple[Any, ...]:
        return (Keyword, (self.name,))

    def __repr__(self) -> str:
        return f":{self.name}"


# =============================================================================
# Classification
# =============================================================================


def is_namedtuple(value: Any) -> bool:
    """Return True if value is a namedtuple instance."""
    return isinstance(value, tuple) and hasattr(type(value), "_fields") and hasattr(value, "_replace")


def is_record(value: Any) -> bool:
    """Return True if value is a dataclass instance or a namedtuple."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return is_namedtuple(value)


def record_fields(record: Any) -> tuple[str, ...]:
    """
    Field names of a record, in declaration order.

    For dataclasses only init fields are listed: those are the ones a
    functional replace can rewrite.
    """
    if is_namedtuple(record):
        return tuple(type(record)._fields)
    return tuple(f.name for f in dataclasses.fields(record) if f.init)


def kind_of(form: Any) -> FormKind:
    """
    Classify a form. This is the one dispatch point for every engine.

    Order matters: Entry and PList are checked before the generic Python
    containers, strings before sequences, records before tuples.
    """
    if isinstance(form, Entry):
        return FormKind.ENTRY
    if isinstance(form, PList):
        return FormKind.PREPEND
    if form is None or isinstance(form, (str, bytes, bytearray, int, float, complex, Keyword)):
        return FormKind.SCALAR
    if is_record(form):
        return FormKind.RECORD
    if isinstance(form, dict):
        return FormKind.ASSOCIATIVE
    if isinstance(form, (set, frozenset)):
        return FormKind.SET
    if isinstance(form, (list, tuple, deque)):
        return FormKind.APPEND
    return FormKind.SCALAR


def is_composite(form: Any) -> bool:
    """Return True unless form is a SCALAR."""
    return kind_of(form) is not FormKind.SCALAR


def children(form: Any) -> Iterable[Any]:
    """
    The child forms of form, in traversal order.

    SCALAR forms have no children. RECORD children are Entry(field, value)
    pairs for comparison; the walk engine descends into the values only.
    """
    kind = kind_of(form)
    if kind is FormKind.ASSOCIATIVE:
        return (Entry(k, v) for k, v in form.items())
    if kind is FormKind.RECORD:
        return (Entry(name, getattr(form, name)) for name in record_fields(form))
    if kind is FormKind.ENTRY:
        return (form.key, form.value)
    if kind is FormKind.SCALAR:
        return ()
    return form
