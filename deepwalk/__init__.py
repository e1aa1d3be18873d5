# deepwalk/__init__.py
"""
deepwalk public API surface.

Stack-safe traversal, reduction and comparison of arbitrarily deep
nested Python values:

    - Driver: Suspended, suspend, run, done, StepLimitExceeded
    - Forms: FormKind, kind_of, Entry, PList, plist, EMPTY, Keyword
    - Reduce: reduce, reduced, fold
    - Combinators: mapv, filterv, removev, keepv, transduce, into, lift,
                   mapping, filtering, removing, keeping, taking,
                   taking_while, cat, compose
    - Walk: walk, prewalk, postwalk, walk_trace, prewalk_demo, postwalk_demo
    - Equality: equal, equal_cps, register_equality, Equality
    - Policies: keywordize_keys, stringify_keys, transform_keys,
                snake_case_keys, camel_case_keys, prewalk_replace,
                postwalk_replace, expand_all

Every engine entry point has two call shapes: pass a continuation k to
get a Suspended step back (for composing inside a larger pipeline), or
omit it to run to completion and get the value.
"""

from __future__ import annotations

from .driver import Suspended, StepLimitExceeded, done, is_suspended, run, suspend
from .forms import EMPTY, Entry, FormKind, Keyword, PList, kind_of, plist
from .reduce_engine import fold, is_reduced, reduce, reduced, unreduced
from .combinators import (
    cat,
    compose,
    filtering,
    filterv,
    into,
    keeping,
    keepv,
    lift,
    mapping,
    mapv,
    removing,
    removev,
    taking,
    taking_while,
    transduce,
)
from .walk_engine import postwalk, postwalk_demo, prewalk, prewalk_demo, walk, walk_trace
from .equality import Equality, equal, equal_cps, register_equality
from .policies import (
    camel_case_keys,
    expand_all,
    keywordize_keys,
    postwalk_replace,
    prewalk_replace,
    snake_case_keys,
    stringify_keys,
    transform_keys,
)

__all__ = [
    # driver
    "Suspended",
    "StepLimitExceeded",
    "suspend",
    "is_suspended",
    "run",
    "done",

    # forms
    "FormKind",
    "kind_of",
    "Entry",
    "PList",
    "plist",
    "EMPTY",
    "Keyword",

    # reduce
    "reduce",
    "reduced",
    "is_reduced",
    "unreduced",
    "fold",

    # combinators
    "mapv",
    "filterv",
    "removev",
    "keepv",
    "transduce",
    "into",
    "lift",
    "mapping",
    "filtering",
    "removing",
    "keeping",
    "taking",
    "taking_while",
    "cat",
    "compose",

    # walk
    "walk",
    "prewalk",
    "postwalk",
    "walk_trace",
    "prewalk_demo",
    "postwalk_demo",

    # equality
    "Equality",
    "equal",
    "equal_cps",
    "register_equality",

    # policies
    "transform_keys",
    "keywordize_keys",
    "stringify_keys",
    "snake_case_keys",
    "camel_case_keys",
    "prewalk_replace",
    "postwalk_replace",
    "expand_all",
]
