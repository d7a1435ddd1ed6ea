"""Role descendant graph.

A parent role "grants all of" its children, transitively. The graph is a
DAG by contract, but traversal never trusts that: every walk is guarded by
a visited set, so diamonds are visited once and a cycle cannot loop.

Provides:
- ``RoleGraph`` — descendant closure with per-instance memoization.
- ``RoleGraph.find_cycle()`` / ``RoleGraph.validate()`` — optional cycle
  detection, surfaced as :class:`~rolecore.exceptions.CyclicRoleGraphError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

from .exceptions import CyclicRoleGraphError

logger = logging.getLogger(__name__)

ChildrenOf = Callable[[int], Iterable[int]]


class RoleGraph:
    """Traversal over role → child role edges.

    Args:
        children_of: Callable returning the direct child role ids of a role
            (usually ``store.get_role_children``).
        strict: Validate each traversal root for cycles first and raise
            CyclicRoleGraphError instead of silently cutting the cycle.

    Example::

        graph = RoleGraph.from_mapping({1: [2], 2: [3]})
        graph.descendants(1)  # frozenset({2, 3})
    """

    __slots__ = ("_children_of", "_strict", "_children", "_closures")

    def __init__(self, children_of: ChildrenOf, *, strict: bool = False) -> None:
        self._children_of = children_of
        self._strict = strict
        self._children: dict[int, tuple[int, ...]] = {}
        self._closures: dict[int, frozenset[int]] = {}

    @classmethod
    def from_store(cls, store, *, strict: bool = False) -> RoleGraph:
        """Build a graph reading edges from an AssignmentStore."""
        return cls(store.get_role_children, strict=strict)

    @classmethod
    def from_mapping(cls, edges: Mapping[int, Iterable[int]], *, strict: bool = False) -> RoleGraph:
        """Build a graph from a ``{role_id: [child_ids]}`` mapping."""
        frozen = {parent: tuple(children) for parent, children in edges.items()}
        return cls(lambda role_id: frozen.get(role_id, ()), strict=strict)

    @property
    def strict(self) -> bool:
        return self._strict

    def children(self, role_id: int) -> tuple[int, ...]:
        """Direct children of a role (cached)."""
        cached = self._children.get(role_id)
        if cached is None:
            cached = tuple(self._children_of(role_id))
            self._children[role_id] = cached
        return cached

    def descendants(self, role_id: int) -> frozenset[int]:
        """Transitive closure of ``role_id``'s children, excluding itself.

        Returns an empty frozenset for a role without children.
        """
        cached = self._closures.get(role_id)
        if cached is not None:
            return cached

        if self._strict:
            self.validate((role_id,))

        seen: set[int] = set()
        stack = list(self.children(role_id))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(child for child in self.children(current) if child not in seen)

        if role_id in seen:
            logger.warning("Role %s is its own descendant; cycle cut during traversal", role_id)
            seen.discard(role_id)

        closure = frozenset(seen)
        self._closures[role_id] = closure
        return closure

    def closure(self, role_ids: Iterable[int]) -> frozenset[int]:
        """The given roles plus all of their descendants."""
        result: set[int] = set()
        for role_id in role_ids:
            result.add(role_id)
            result |= self.descendants(role_id)
        return frozenset(result)

    def find_cycle(self, role_ids: Iterable[int]) -> list[int] | None:
        """Find a cycle reachable from ``role_ids``.

        Returns the cycle as a list of role ids with the first id repeated at
        the end (``[1, 2, 1]``), or None if the reachable subgraph is acyclic.
        """
        done: set[int] = set()

        for root in role_ids:
            if root in done:
                continue
            path: list[int] = [root]
            on_path: set[int] = {root}
            iterators = [iter(self.children(root))]
            while iterators:
                child = next(iterators[-1], None)
                if child is None:
                    iterators.pop()
                    finished = path.pop()
                    on_path.discard(finished)
                    done.add(finished)
                    continue
                if child in on_path:
                    return path[path.index(child) :] + [child]
                if child in done:
                    continue
                path.append(child)
                on_path.add(child)
                iterators.append(iter(self.children(child)))
        return None

    def validate(self, role_ids: Iterable[int]) -> None:
        """Raise CyclicRoleGraphError if a cycle is reachable from ``role_ids``."""
        cycle = self.find_cycle(role_ids)
        if cycle is not None:
            raise CyclicRoleGraphError(cycle)


__all__ = ["ChildrenOf", "RoleGraph"]
