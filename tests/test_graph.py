"""Tests for role graph traversal and cycle detection."""

from __future__ import annotations

import pytest

from rolecore import CyclicRoleGraphError, RoleGraph


class TestDescendants:
    """Tests for RoleGraph.descendants()."""

    def test_leaf_has_no_descendants(self) -> None:
        """A role without children has an empty closure."""
        graph = RoleGraph.from_mapping({1: [2]})
        assert graph.descendants(2) == frozenset()

    def test_unknown_role_has_no_descendants(self) -> None:
        """Roles missing from the mapping have no children."""
        graph = RoleGraph.from_mapping({})
        assert graph.descendants(99) == frozenset()

    def test_transitive_closure(self) -> None:
        """1 → 2 → 3 → 4: all descendants are collected."""
        graph = RoleGraph.from_mapping({1: [2], 2: [3], 3: [4]})
        assert graph.descendants(1) == {2, 3, 4}
        assert graph.descendants(2) == {3, 4}

    def test_excludes_self(self) -> None:
        """The root role is never its own descendant."""
        graph = RoleGraph.from_mapping({1: [2, 3]})
        assert 1 not in graph.descendants(1)

    def test_diamond_visits_once(self) -> None:
        """Diamond inheritance: shared child is traversed once."""
        calls: list[int] = []
        edges = {1: [2, 3], 2: [4], 3: [4], 4: [5]}

        def children_of(role_id: int) -> list[int]:
            calls.append(role_id)
            return edges.get(role_id, [])

        graph = RoleGraph(children_of)
        assert graph.descendants(1) == {2, 3, 4, 5}
        assert calls.count(4) == 1

    def test_cycle_does_not_loop(self) -> None:
        """A cycle is cut by the visited set; root stays excluded."""
        graph = RoleGraph.from_mapping({1: [2], 2: [3], 3: [1]})
        assert graph.descendants(1) == {2, 3}
        assert graph.descendants(2) == {1, 3}

    def test_self_loop(self) -> None:
        """A role listing itself as a child terminates."""
        graph = RoleGraph.from_mapping({1: [1, 2]})
        assert graph.descendants(1) == {2}

    def test_closure_memoized(self) -> None:
        """Repeated calls reuse the cached closure."""
        calls: list[int] = []

        def children_of(role_id: int) -> list[int]:
            calls.append(role_id)
            return {1: [2]}.get(role_id, [])

        graph = RoleGraph(children_of)
        graph.descendants(1)
        graph.descendants(1)
        assert calls == [1, 2]


class TestClosure:
    """Tests for RoleGraph.closure()."""

    def test_includes_roots(self) -> None:
        graph = RoleGraph.from_mapping({1: [2], 5: [6]})
        assert graph.closure([1, 5]) == {1, 2, 5, 6}

    def test_empty(self) -> None:
        graph = RoleGraph.from_mapping({1: [2]})
        assert graph.closure([]) == frozenset()


class TestCycleDetection:
    """Tests for find_cycle() / validate() / strict mode."""

    def test_acyclic(self) -> None:
        graph = RoleGraph.from_mapping({1: [2, 3], 2: [4], 3: [4]})
        assert graph.find_cycle([1]) is None
        graph.validate([1])  # no raise

    def test_finds_cycle(self) -> None:
        graph = RoleGraph.from_mapping({1: [2], 2: [3], 3: [2]})
        assert graph.find_cycle([1]) == [2, 3, 2]

    def test_validate_raises(self) -> None:
        graph = RoleGraph.from_mapping({1: [2], 2: [1]})
        with pytest.raises(CyclicRoleGraphError) as exc_info:
            graph.validate([1])
        assert exc_info.value.cycle == [1, 2, 1]
        assert exc_info.value.code == "CYCLIC_ROLE_GRAPH"

    def test_strict_descendants_raise(self) -> None:
        graph = RoleGraph.from_mapping({1: [2], 2: [1]}, strict=True)
        with pytest.raises(CyclicRoleGraphError):
            graph.descendants(1)

    def test_strict_acyclic_ok(self) -> None:
        graph = RoleGraph.from_mapping({1: [2]}, strict=True)
        assert graph.descendants(1) == {2}

    def test_unreachable_cycle_ignored(self) -> None:
        """Only the subgraph reachable from the roots is checked."""
        graph = RoleGraph.from_mapping({1: [2], 5: [6], 6: [5]})
        assert graph.find_cycle([1]) is None
