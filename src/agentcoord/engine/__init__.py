"""Load-aware agent assignment engine."""

from agentcoord.engine.assignment import (
    AgentAssignment,
    AgentAssignmentTracker,
    AssignmentOptions,
    AssignmentStats,
    ExecutionPhase,
    ExecutionPlan,
    WorkloadEntry,
)

__all__ = [
    "AgentAssignment",
    "AgentAssignmentTracker",
    "AssignmentOptions",
    "AssignmentStats",
    "ExecutionPhase",
    "ExecutionPlan",
    "WorkloadEntry",
]
