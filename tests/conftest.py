"""
Pytest configuration for deepwalk tests.

Provides:
- Hypothesis profiles for deterministic fuzzing (select with HYPOTHESIS_PROFILE)
- Shared builders for deeply nested fixtures
"""

import os

from hypothesis import settings

# =============================================================================
# Hypothesis Configuration
# =============================================================================
# - print_blob=True makes failures easy to reproduce
# - "ci" derandomizes so CI runs are repeatable
# NOTE: Do NOT set database=None - that DISABLES the database. Omit to use default.

settings.register_profile(
    "default",
    print_blob=True,
    derandomize=False,
)

settings.register_profile(
    "ci",
    print_blob=True,
    derandomize=True,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


# =============================================================================
# Shared Test Utilities
# =============================================================================


def nested_chain(depth: int) -> dict:
    """
    Build {"id": 0, "child": {"id": 1, "child": ... {"id": depth-1}}} iteratively.

    Built bottom-up in a loop so constructing the fixture itself never
    recurses.
    """
    node: dict = {"id": depth - 1}
    for i in range(depth - 2, -1, -1):
        node = {"id": i, "child": node}
    return node


def nested_lists(depth: int, leaf=0) -> list:
    """[[[...[leaf]...]]] with the given number of list levels."""
    node = [leaf]
    for _ in range(depth - 1):
        node = [node]
    return node


def chain_depth(node: dict) -> int:
    """Count the levels of a nested_chain() result without recursion."""
    depth = 0
    while isinstance(node, dict):
        depth += 1
        node = node.get("child")
    return depth
