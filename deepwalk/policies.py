"""
Policies - small rewriting passes built on the walk engine.

Each policy only supplies a per-node transform and takes the rebuilt form
back; all traversal, rebuilding and stack safety come from deepwalk.walk_engine.

    transform_keys / keywordize_keys / stringify_keys   map-key conversion
    snake_case_keys / camel_case_keys                   key casing
    prewalk_replace / postwalk_replace                  substitution maps
    expand_all                                          macro-like expansion
"""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from deepwalk.builders import BUILDERS
from deepwalk.forms import FormKind, Keyword, kind_of
from deepwalk.reduce_engine import Continuation
from deepwalk.walk_engine import postwalk, prewalk, walk


# =============================================================================
# Key Conversion
# =============================================================================


def transform_keys(fn: Callable[[Any], Any], form: Any) -> Any:
    """Rewrite every key of every map in form with fn, bottom-up."""

    maps = BUILDERS[FormKind.ASSOCIATIVE]

    def rekey(node: Any) -> Any:
        if kind_of(node) is not FormKind.ASSOCIATIVE:
            return node
        out = maps.empty(node)
        for k, v in node.items():
            out[fn(k)] = v
        return out

    return postwalk(rekey, form)


def keywordize_keys(form: Any) -> Any:
    """Turn every string map key into a Keyword. Other keys are kept."""
    return transform_keys(lambda k: Keyword(k) if isinstance(k, str) else k, form)


def stringify_keys(form: Any) -> Any:
    """Turn every Keyword map key back into its name. Other keys are kept."""
    return transform_keys(lambda k: k.name if isinstance(k, Keyword) else k, form)


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[_\-\s]+")


def to_snake_case(name: str) -> str:
    """camelCase / kebab-case / Title Case -> snake_case."""
    return _SEPARATORS.sub("_", _CAMEL_BOUNDARY.sub("_", name)).strip("_").lower()


def to_camel_case(name: str) -> str:
    """snake_case / kebab-case -> camelCase."""
    parts = [p for p in _SEPARATORS.split(name) if p]
    if not parts:
        return name
    return parts[0][:1].lower() + parts[0][1:] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


def _recase(fn: Callable[[str], str]) -> Callable[[Any], Any]:
    def convert(key: Any) -> Any:
        if isinstance(key, str):
            return fn(key)
        if isinstance(key, Keyword):
            return Keyword(fn(key.name))
        return key

    return convert


def snake_case_keys(form: Any) -> Any:
    """snake_case every string or Keyword map key."""
    return transform_keys(_recase(to_snake_case), form)


def camel_case_keys(form: Any) -> Any:
    """camelCase every string or Keyword map key."""
    return transform_keys(_recase(to_camel_case), form)


# =============================================================================
# Substitution
# =============================================================================


class _Replaced:
    """Scalar wrapper that shields a replacement from further descent."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value


_MISSING = object()


def _lookup(smap: Mapping[Any, Any], node: Any) -> Any:
    try:
        return smap.get(node, _MISSING)
    except TypeError:
        # unhashable nodes (lists, dicts, ...) are never keys
        return _MISSING


def prewalk_replace(smap: Mapping[Any, Any], form: Any, k: Continuation | None = None) -> Any:
    """
    Replace nodes found in smap with their values in one top-down pass.

    A replaced node is not descended into, so replacement values are never
    themselves matched again during the same pass.
    """

    def inner(k2: Continuation, node: Any) -> Any:
        found = _lookup(smap, node)
        return k2(node if found is _MISSING else _Replaced(found))

    def outer(node: Any) -> Any:
        return node.value if isinstance(node, _Replaced) else node

    return walk(inner, outer, form, k)


def postwalk_replace(smap: Mapping[Any, Any], form: Any, k: Continuation | None = None) -> Any:
    """Replace nodes found in smap with their values, bottom-up."""

    def replace(node: Any) -> Any:
        found = _lookup(smap, node)
        return node if found is _MISSING else found

    return postwalk(replace, form, k)


# =============================================================================
# Expansion
# =============================================================================


def expand_all(expand: Callable[[Any], Any], form: Any, k: Continuation | None = None) -> Any:
    """
    Fully expand every PList node of form, top-down.

    expand is applied to a PList node again and again until it returns the
    very same object (nothing left to expand); traversal then continues
    into the expansion.
    """

    def expand_node(node: Any) -> Any:
        while kind_of(node) is FormKind.PREPEND:
            expanded = expand(node)
            if expanded is node:
                break
            node = expanded
        return node

    return prewalk(expand_node, form, k)
