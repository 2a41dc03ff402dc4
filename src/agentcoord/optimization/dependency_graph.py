"""Dependency graph resolution for issue batches.

Orders a batch of issues by their ``depends_on`` links: Kahn layering for a
global order plus parallel layers, longest-chain critical path, DFS cycle
detection, a ready/blocked partition for dispatch and per-issue start checks.

References to ids outside the batch ("dangling" references) are kept on the
graph but treated as already satisfied everywhere.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


class IssueStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    CLOSED = "closed"


class IssueType(StrEnum):
    TASK = "task"
    BUG = "bug"
    FEATURE = "feature"
    EPIC = "epic"
    CHORE = "chore"


E = TypeVar("E", IssueStatus, IssueType)


def _coerce(enum_type: type[E], value: Any, default: E, issue_id: str) -> E:
    """Map a tracker value onto ``enum_type``; values it does not know read as ``default``."""
    try:
        return enum_type(value)
    except ValueError:
        logger.debug(
            "Issue %s has unrecognized %s %r; reading it as %s",
            issue_id,
            enum_type.__name__,
            value,
            default,
        )
        return default


@dataclass
class Issue:
    """Externally tracked unit of work. Treated as read-only.

    Status and type values outside the known sets read as open and task.
    """

    id: str
    title: str
    description: str | None = None
    status: IssueStatus = IssueStatus.OPEN
    priority: int = 2
    type: IssueType = IssueType.TASK
    depends_on: list[str] = field(default_factory=list)
    blocked_by: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Issue id must not be empty")
        self.status = _coerce(IssueStatus, self.status, IssueStatus.OPEN, self.id)
        self.type = _coerce(IssueType, self.type, IssueType.TASK, self.id)
        # Naive timestamps are taken as UTC so tie-breaks can compare them
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)


@dataclass
class DependencyGraph:
    """Issues keyed by id; ``edges[x]`` is the set of ids ``x`` depends on."""

    nodes: dict[str, Issue]
    edges: dict[str, set[str]]
    dependents: dict[str, set[str]] = field(default_factory=dict)

    def dangling(self) -> dict[str, set[str]]:
        """Dependency references that point outside the batch, per issue."""
        return {
            node: missing
            for node, deps in self.edges.items()
            if (missing := {dep for dep in deps if dep not in self.nodes})
        }


@dataclass
class TopoOrder:
    """Execution order of a dependency graph."""

    sequential: list[str]
    parallel: list[list[str]]
    critical_path: list[str]
    unresolved: list[str] = field(default_factory=list)  # on or behind a cycle

    @property
    def is_complete(self) -> bool:
        return not self.unresolved


@dataclass
class ReadyIssues:
    """Dispatch partition of a batch. Closed issues appear nowhere."""

    ready: list[Issue] = field(default_factory=list)
    blocked: list[tuple[Issue, list[str]]] = field(default_factory=list)
    in_progress: list[Issue] = field(default_factory=list)


@dataclass
class ParallelExecutionSet:
    """Ready issues split by whether they can be dispatched side by side."""

    can_run_parallel: list[Issue]
    must_run_sequential: list[Issue]
    reasoning: str


@dataclass
class ExecutionCheck:
    """Whether one issue of a batch can be started now."""

    can_execute: bool
    blockers: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# GENERIC LAYERING
# ═══════════════════════════════════════════════════════════════════════════


def compute_layers(edges: Mapping[K, Iterable[K]]) -> list[list[K]]:
    """Group nodes into rounds of Kahn's algorithm.

    Layer 0 holds nodes without dependencies; layer k holds the remaining nodes
    whose dependencies all sit in layers 0..k-1. Dependencies that are not keys
    of ``edges`` count as satisfied. Nodes on or behind a cycle never become
    schedulable and are left out. Layers keep the insertion order of ``edges``.
    """
    pending = {node: {dep for dep in deps if dep in edges} for node, deps in edges.items()}
    done: set[K] = set()
    layers: list[list[K]] = []

    while pending:
        layer = [node for node, deps in pending.items() if deps <= done]
        if not layer:
            break
        layers.append(layer)
        done.update(layer)
        for node in layer:
            del pending[node]

    return layers


def longest_chain(
    edges: Mapping[K, Iterable[K]],
    tie_key: Callable[[K], Any],
    weight: Callable[[K], float] | None = None,
) -> list[K]:
    """Heaviest dependency chain, returned root to leaf.

    Every node weighs 1 unless ``weight`` is given, which makes the default the
    longest chain by edge count. Equal chains are resolved by the smallest
    ``tie_key``, both when picking a predecessor and when picking the end node.
    """
    order = [node for layer in compute_layers(edges) for node in layer]
    if not order:
        return []

    scheduled = set(order)
    best: dict[K, float] = {}
    predecessor: dict[K, K] = {}

    for node in order:
        cost = weight(node) if weight else 1.0
        deps = [dep for dep in edges[node] if dep in scheduled]
        if deps:
            pred = min(deps, key=lambda dep: (-best[dep], tie_key(dep)))
            predecessor[node] = pred
            best[node] = best[pred] + cost
        else:
            best[node] = cost

    end = min(order, key=lambda node: (-best[node], tie_key(node)))
    path = [end]
    while path[-1] in predecessor:
        path.append(predecessor[path[-1]])
    path.reverse()
    return path


# ═══════════════════════════════════════════════════════════════════════════
# GRAPH OPERATIONS
# ═══════════════════════════════════════════════════════════════════════════


def build_dependency_graph(issues: Iterable[Issue]) -> DependencyGraph:
    """Build the graph for a batch, keeping dangling references.

    A repeated id replaces the earlier issue with that id.
    """
    nodes: dict[str, Issue] = {}
    for issue in issues:
        if issue.id in nodes:
            logger.warning("Duplicate issue id %s in batch; keeping the last one", issue.id)
        nodes[issue.id] = issue

    edges = {issue_id: set(issue.depends_on) for issue_id, issue in nodes.items()}
    dependents: dict[str, set[str]] = {issue_id: set() for issue_id in nodes}
    for issue_id, deps in edges.items():
        for dep in deps:
            dependents.setdefault(dep, set()).add(issue_id)

    graph = DependencyGraph(nodes=nodes, edges=edges, dependents=dependents)
    for issue_id, missing in graph.dangling().items():
        logger.warning(
            "Issue %s depends on %s outside the batch; treating as satisfied",
            issue_id,
            ", ".join(sorted(missing)),
        )
    return graph


def _tie_key(graph: DependencyGraph) -> Callable[[str], tuple[datetime, str]]:
    return lambda issue_id: (graph.nodes[issue_id].created_at, issue_id)


def find_critical_path(graph: DependencyGraph) -> list[str]:
    """Longest chain by edge count; ties go to the earliest created, then lowest id."""
    return longest_chain(graph.edges, tie_key=_tie_key(graph))


def topological_sort(graph: DependencyGraph) -> TopoOrder:
    """Order the graph with Kahn's algorithm.

    Never loops on a cyclic graph: nodes that cannot be scheduled are reported
    in ``unresolved`` (batch order) and left out of every other field.
    """
    parallel = compute_layers(graph.edges)
    for number, layer in enumerate(parallel):
        logger.debug("Layer %d: %s", number, ", ".join(layer))

    sequential = [node for layer in parallel for node in layer]
    scheduled = set(sequential)
    unresolved = [node for node in graph.nodes if node not in scheduled]
    if unresolved:
        logger.warning(
            "Dependency cycle leaves %d issue(s) unscheduled: %s",
            len(unresolved),
            ", ".join(unresolved),
        )

    return TopoOrder(
        sequential=sequential,
        parallel=parallel,
        critical_path=find_critical_path(graph),
        unresolved=unresolved,
    )


def _components(edges: Mapping[str, list[str]]) -> dict[str, int]:
    """Strongly connected component number of every node (iterative Kosaraju)."""
    finished: list[str] = []
    seen: set[str] = set()
    for root in edges:
        if root in seen:
            continue
        seen.add(root)
        stack = [(root, iter(edges[root]))]
        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep not in seen:
                    seen.add(dep)
                    stack.append((dep, iter(edges[dep])))
                    break
            else:
                stack.pop()
                finished.append(node)

    reverse: dict[str, list[str]] = {node: [] for node in edges}
    for node, deps in edges.items():
        for dep in deps:
            reverse[dep].append(node)

    component: dict[str, int] = {}
    number = 0
    for root in reversed(finished):
        if root in component:
            continue
        number += 1
        component[root] = number
        pending = [root]
        while pending:
            for other in reverse[pending.pop()]:
                if other not in component:
                    component[other] = number
                    pending.append(other)
    return component


def detect_cycles(graph: DependencyGraph) -> list[list[str]]:
    """Enumerate every elementary dependency cycle, each exactly once.

    Cycles that share nodes are reported separately. Each cycle starts at
    its smallest id and is listed in dependency direction (each id depends
    on the next; the last depends on the first). Self-loops come back as
    single-element cycles. Cycles are ordered by starting id.

    The search runs from every id in sorted order and only walks through
    larger ids of the same strongly connected component, so acyclic parts
    of the batch are never explored and no cycle is found twice.
    """
    edges = {
        node: sorted(dep for dep in deps if dep in graph.nodes)
        for node, deps in graph.edges.items()
    }
    component = _components(edges)
    cycles: list[list[str]] = []

    for start in sorted(edges):
        path = [start]
        on_path = {start}
        stack = [iter(edges[start])]

        while stack:
            for dep in stack[-1]:
                if dep < start or component[dep] != component[start]:
                    continue
                if dep == start:
                    cycles.append(list(path))
                elif dep not in on_path:
                    on_path.add(dep)
                    path.append(dep)
                    stack.append(iter(edges[dep]))
                    break
            else:
                stack.pop()
                on_path.discard(path.pop())

    return cycles


def get_ready_issues(issues: Iterable[Issue]) -> ReadyIssues:
    """Split a batch into ready, blocked and in-progress issues.

    An open issue is ready when every in-batch issue it depends on (or is
    blocked by) is closed. Issues marked blocked stay blocked even when no
    in-batch blocker remains.
    """
    graph = build_dependency_graph(issues)
    result = ReadyIssues()

    for issue in graph.nodes.values():
        if issue.status == IssueStatus.CLOSED:
            continue
        if issue.status == IssueStatus.IN_PROGRESS:
            result.in_progress.append(issue)
            continue

        blockers = [
            dep
            for dep in dict.fromkeys([*issue.depends_on, *issue.blocked_by])
            if dep in graph.nodes and graph.nodes[dep].status != IssueStatus.CLOSED
        ]
        if blockers or issue.status == IssueStatus.BLOCKED:
            result.blocked.append((issue, blockers))
        else:
            result.ready.append(issue)

    return result


def parallel_execution_set(issues: Iterable[Issue]) -> ParallelExecutionSet:
    """Split the ready issues of a batch into parallel and sequential work.

    Ready issues never wait on each other (every in-batch blocker of a ready
    issue is closed), so two or more of them all run in parallel. A lone
    ready issue is sequential.
    """
    ready = get_ready_issues(issues).ready
    if not ready:
        return ParallelExecutionSet([], [], "No issues are ready for execution")
    if len(ready) == 1:
        return ParallelExecutionSet(
            [], ready, "Only one issue is ready, no parallelization possible"
        )
    return ParallelExecutionSet(
        can_run_parallel=ready,
        must_run_sequential=[],
        reasoning=f"{len(ready)} issues can run in parallel",
    )


def validate_execution(issue_id: str, issues: Iterable[Issue]) -> ExecutionCheck:
    """Check whether ``issue_id`` can be started given the rest of its batch."""
    graph = build_dependency_graph(issues)
    issue = graph.nodes.get(issue_id)
    if issue is None:
        return ExecutionCheck(can_execute=False, blockers=[f"Issue {issue_id} not found"])

    check = ExecutionCheck(can_execute=True)
    if issue.status == IssueStatus.IN_PROGRESS:
        check.warnings.append("Issue is already in progress")
    elif issue.status == IssueStatus.CLOSED:
        check.blockers.append("Issue is already closed")
    elif issue.status == IssueStatus.BLOCKED:
        check.blockers.append("Issue is marked blocked")

    for dep in dict.fromkeys([*issue.depends_on, *issue.blocked_by]):
        blocker = graph.nodes.get(dep)
        if blocker is None:
            check.warnings.append(f"Dependency {dep} is outside the batch")
        elif dep == issue_id:
            check.blockers.append("Issue depends on itself")
        elif blocker.status != IssueStatus.CLOSED:
            check.blockers.append(f"Blocked by {dep}: {blocker.title}")

    check.can_execute = not check.blockers
    return check
