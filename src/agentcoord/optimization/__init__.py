"""Dependency ordering for agentcoord."""

from __future__ import annotations

from .dependency_graph import (
    DependencyGraph,
    ExecutionCheck,
    Issue,
    IssueStatus,
    IssueType,
    ParallelExecutionSet,
    ReadyIssues,
    TopoOrder,
    build_dependency_graph,
    compute_layers,
    detect_cycles,
    find_critical_path,
    get_ready_issues,
    longest_chain,
    parallel_execution_set,
    topological_sort,
    validate_execution,
)

__all__ = [
    "DependencyGraph",
    "ExecutionCheck",
    "Issue",
    "IssueStatus",
    "IssueType",
    "ParallelExecutionSet",
    "ReadyIssues",
    "TopoOrder",
    "build_dependency_graph",
    "compute_layers",
    "detect_cycles",
    "find_critical_path",
    "get_ready_issues",
    "longest_chain",
    "parallel_execution_set",
    "topological_sort",
    "validate_execution",
]
