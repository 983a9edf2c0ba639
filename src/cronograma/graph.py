"""Dependency graph construction, cycle detection and topological ordering."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import CircularDependencyError, DanglingReferenceError

if TYPE_CHECKING:
    from .models import Dependency, ScheduleSnapshot, Task


class _Mark(Enum):
    """DFS traversal state of a node."""

    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


class DependencyGraph:
    """Directed graph of tasks (nodes) and dependencies (edges).

    Holds task IDs only; the ``Task`` objects are looked up for display names.
    Edges whose origin or dependent is not a known task are not added to the
    graph and are kept in ``dangling`` instead.
    """

    def __init__(self, tasks: list[Task], dependencies: list[Dependency]) -> None:
        self._names: dict[str, str] = {task.id: task.name for task in tasks}
        self._outgoing: dict[str, list[Dependency]] = {task.id: [] for task in tasks}
        self._incoming: dict[str, list[Dependency]] = {task.id: [] for task in tasks}
        self._edges: dict[str, Dependency] = {}
        self.dangling: list[DanglingReferenceError] = []

        for dep in dependencies:
            missing = next(
                (tid for tid in (dep.origin_id, dep.dependent_id) if tid not in self._names),
                None,
            )
            if missing is not None:
                self.dangling.append(DanglingReferenceError(dep.id, missing))
                continue
            self._edges[dep.id] = dep
            self._outgoing[dep.origin_id].append(dep)
            self._incoming[dep.dependent_id].append(dep)

    @classmethod
    def from_snapshot(cls, snapshot: ScheduleSnapshot) -> DependencyGraph:
        """Build the graph for every task and dependency of a snapshot."""
        return cls(snapshot.tasks, snapshot.dependencies)

    @property
    def nodes(self) -> list[str]:
        """Task IDs in input order."""
        return list(self._names)

    @property
    def edges(self) -> list[Dependency]:
        """Active dependencies in input order."""
        return list(self._edges.values())

    def task_name(self, task_id: str) -> str:
        """Display name of a task (falls back to its ID)."""
        return self._names.get(task_id, task_id)

    def incoming(self, task_id: str) -> list[Dependency]:
        return list(self._incoming.get(task_id, []))

    def successors(self, task_id: str) -> list[str]:
        """Distinct dependent task IDs of a task, in edge order."""
        return list(dict.fromkeys(dep.dependent_id for dep in self._outgoing.get(task_id, [])))

    def predecessors(self, task_id: str) -> list[str]:
        """Distinct origin task IDs constraining a task, in edge order."""
        return list(dict.fromkeys(dep.origin_id for dep in self._incoming.get(task_id, [])))

    def remove_edges(self, edge_ids: set[str]) -> list[Dependency]:
        """Remove edges from the graph.

        Returns:
            The removed dependencies, in input order
        """
        removed = [dep for dep_id, dep in self._edges.items() if dep_id in edge_ids]
        for dep in removed:
            del self._edges[dep.id]
            self._outgoing[dep.origin_id].remove(dep)
            self._incoming[dep.dependent_id].remove(dep)
        return removed

    def topological_order(self) -> list[str]:
        """Order task IDs so every origin precedes its dependents (Kahn's algorithm).

        Ready tasks are taken first-in, first-out: every root in input order,
        then each task as its last predecessor is emitted. The result is
        deterministic for a given input order.

        Raises:
            CircularDependencyError: If the graph still contains a cycle
        """
        in_degree = {node: len(self.predecessors(node)) for node in self._names}
        queue: deque[str] = deque(node for node, degree in in_degree.items() if degree == 0)
        result: list[str] = []

        while queue:
            node = queue.popleft()
            result.append(node)
            for successor in self.successors(node):
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    queue.append(successor)

        if len(result) != len(self._names):
            stuck = [self.task_name(node) for node in self._names if in_degree[node] > 0]
            raise CircularDependencyError(
                f"Circular dependency detected among tasks: {', '.join(stuck)}"
            )
        return result

    def ordered_edges(self) -> list[Dependency]:
        """Active edges grouped by dependent, dependents in topological order.

        When an edge is visited every edge into its origin has already been
        visited, so one sweep settles an acyclic graph.
        """
        ordered: list[Dependency] = []
        for node in self.topological_order():
            ordered.extend(self._incoming[node])
        return ordered


class CycleDetector:
    """Find dependency cycles with a three-color depth-first search."""

    def __init__(self, graph: DependencyGraph) -> None:
        self.graph = graph

    def find_cycles(self) -> list[list[str]]:
        """Find cycles in the graph.

        Every back edge to a node that is still in progress closes one cycle,
        reported as the path from that node to the current node plus the node
        again (``[a, b, c, a]``). Disjoint cycles are reported separately.

        Returns:
            List of closed task-ID paths, in discovery order
        """
        marks = dict.fromkeys(self.graph.nodes, _Mark.UNVISITED)
        cycles: list[list[str]] = []

        for root in self.graph.nodes:
            if marks[root] != _Mark.UNVISITED:
                continue

            marks[root] = _Mark.IN_PROGRESS
            path = [root]
            stack: list[tuple[str, Iterator[str]]] = [(root, iter(self.graph.successors(root)))]

            while stack:
                node, successors = stack[-1]
                successor = next(successors, None)

                if successor is None:
                    marks[node] = _Mark.DONE
                    stack.pop()
                    path.pop()
                elif marks[successor] == _Mark.UNVISITED:
                    marks[successor] = _Mark.IN_PROGRESS
                    path.append(successor)
                    stack.append((successor, iter(self.graph.successors(successor))))
                elif marks[successor] == _Mark.IN_PROGRESS:
                    start = path.index(successor)
                    cycles.append([*path[start:], successor])

        return cycles

    def format_cycle(self, cycle: list[str]) -> str:
        """Render a cycle with task names: ``"A -> B -> A"``."""
        return " -> ".join(self.graph.task_name(node) for node in cycle)

    def cycle_edges(self, cycles: list[list[str]]) -> set[str]:
        """IDs of every active edge joining two consecutive nodes of a cycle."""
        pairs = {(cycle[i], cycle[i + 1]) for cycle in cycles for i in range(len(cycle) - 1)}
        return {
            dep.id for dep in self.graph.edges if (dep.origin_id, dep.dependent_id) in pairs
        }


def detect_cycles(snapshot: ScheduleSnapshot) -> list[str]:
    """List every dependency cycle of a snapshot as ``"A -> B -> A"`` strings."""
    detector = CycleDetector(DependencyGraph.from_snapshot(snapshot))
    return [detector.format_cycle(cycle) for cycle in detector.find_cycles()]
