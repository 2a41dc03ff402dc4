"""Agent Assignment Tracker - load-aware agent assignment with a workload ledger."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from agentcoord.config import DEFAULT_CONFIG, HeuristicConfig
from agentcoord.delegation.models import (
    Agent,
    AgentComparison,
    AgentSelectionResult,
    TaskCategory,
)
from agentcoord.delegation.registry import ALL_AGENTS, coerce_agent, get_agent_capabilities
from agentcoord.delegation.router import (
    compare_agents_for_task,
    select_agent,
    select_agent_for_category,
)
from agentcoord.exceptions import UnknownAgentError
from agentcoord.optimization.dependency_graph import (
    Issue,
    IssueStatus,
    build_dependency_graph,
    get_ready_issues,
    topological_sort,
)

logger = logging.getLogger(__name__)


@dataclass
class AssignmentOptions:
    """Per-call selection preferences."""

    available_agents: list[str] | None = None
    prefer_fast_execution: bool = False
    prefer_quality: bool = False
    balance_load: bool = True
    max_parallel_agents: int | None = None


@dataclass
class AgentAssignment:
    """Agent reserved for one issue."""

    issue_id: str
    agent: Agent
    confidence: float
    reasoning: str
    category: TaskCategory | None = None
    alternatives: list[Agent] = field(default_factory=list)


@dataclass
class WorkloadEntry:
    """Outstanding reservations for one agent."""

    agent: Agent
    assigned_tasks: int = 0
    active: bool = False
    capacity: int = 5

    @property
    def estimated_load(self) -> float:
        """Assigned tasks normalised by capacity, capped at 1."""
        return min(1.0, self.assigned_tasks / self.capacity)


@dataclass
class AssignmentStats:
    """Aggregate workload snapshot."""

    total_assignments: int
    active_agents: int
    by_agent: dict[Agent, int]


@dataclass
class ExecutionPhase:
    """One dependency layer of an execution plan."""

    phase_number: int
    assignments: list[AgentAssignment]
    can_run_parallel: bool
    estimated_duration: str  # short/medium/long


@dataclass
class ExecutionPlan:
    """Layered agent assignments for an issue batch."""

    phases: list[ExecutionPhase] = field(default_factory=list)
    total_agent_sessions: int = 0
    estimated_parallelism: float = 0.0
    unresolved: list[str] = field(default_factory=list)


def _phase_duration(assignment_count: int) -> str:
    if assignment_count <= 2:
        return "short"
    if assignment_count <= 4:
        return "medium"
    return "long"


class AgentAssignmentTracker:
    """
    Picks an agent per issue and keeps a per-agent ledger of reservations.

    Every read-modify-write of the ledger happens under one instance lock, so
    a tracker can be shared by threads. Selection itself is pure and runs
    outside the lock.
    """

    def __init__(self, config: HeuristicConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._lock = threading.Lock()
        self._workloads: dict[Agent, WorkloadEntry] = {}
        self._outstanding: Counter[tuple[str, Agent]] = Counter()
        self._init_workloads()

    def _init_workloads(self) -> None:
        self._workloads = {
            agent: WorkloadEntry(agent=agent, capacity=self.config.load_capacity)
            for agent in ALL_AGENTS
        }
        self._outstanding.clear()

    # ═══════════════════════════════════════════════════════════════════════
    # ASSIGNMENT
    # ═══════════════════════════════════════════════════════════════════════

    def _apply_preferences(
        self,
        selection: AgentSelectionResult,
        options: AssignmentOptions,
    ) -> tuple[list[Agent], float]:
        """Return the ranked candidates (chosen first) and adjusted confidence."""
        ranked = selection.ranked
        confidence = selection.confidence

        for enabled, rating in [
            (options.prefer_fast_execution, "speed_rating"),
            (options.prefer_quality, "quality_rating"),
        ]:
            if not enabled:
                continue
            preferred = max(ranked, key=lambda agent: getattr(get_agent_capabilities(agent), rating))
            if preferred != ranked[0] and confidence < self.config.preference_override_threshold:
                ranked = [preferred] + [agent for agent in ranked if agent != preferred]
                confidence *= self.config.preference_confidence_factor

        return ranked, confidence

    def _pick_balanced(self, ranked: list[Agent]) -> Agent:
        """Lowest load among the top candidates; non-top candidates pay a margin."""
        top = ranked[: self.config.balance_top_n]
        margin = self.config.load_switch_margin
        # Ties go to the better-ranked agent
        _, _, agent = min(
            (self._workloads[agent].estimated_load + (margin if rank else 0.0), rank, agent)
            for rank, agent in enumerate(top)
        )
        return agent

    def assign_agent(
        self,
        issue: Issue,
        options: AssignmentOptions | None = None,
    ) -> AgentAssignment:
        """
        Choose an agent for an issue and reserve it.

        Raises:
            NoAvailableAgentError: the restriction list is empty or unknown.
        """
        options = options or AssignmentOptions()
        selection = select_agent(
            issue.title,
            issue.description,
            available_agents=options.available_agents,
            config=self.config,
        )
        ranked, confidence = self._apply_preferences(selection, options)
        reasoning = selection.reasoning

        with self._lock:
            chosen = self._pick_balanced(ranked) if options.balance_load else ranked[0]
            if chosen != ranked[0]:
                confidence *= self.config.load_switch_confidence_factor
                reasoning = (
                    f"{reasoning}. Rebalanced from {ranked[0]} to {chosen} "
                    f"(load {self._workloads[chosen].estimated_load:.0%})"
                )
            self._workloads[chosen].assigned_tasks += 1
            self._outstanding[(issue.id, chosen)] += 1

        logger.info("Assigned %s to %s (confidence %.2f)", issue.id, chosen, confidence)
        return AgentAssignment(
            issue_id=issue.id,
            agent=chosen,
            confidence=confidence,
            reasoning=reasoning,
            category=selection.category,
            alternatives=[agent for agent in ranked if agent != chosen],
        )

    def release_assignment(self, issue_id: str, agent: str) -> None:
        """Release one reservation. Unknown or never-assigned pairs are ignored."""
        try:
            agent = coerce_agent(agent)
        except UnknownAgentError:
            logger.debug("Release for unknown agent %r ignored", agent)
            return

        key = (issue_id, agent)
        with self._lock:
            if self._outstanding[key] <= 0:
                logger.debug("No outstanding assignment of %s to %s", issue_id, agent)
                return
            self._outstanding[key] -= 1
            if not self._outstanding[key]:
                del self._outstanding[key]
            workload = self._workloads[agent]
            workload.assigned_tasks = max(0, workload.assigned_tasks - 1)

        logger.info("Released %s from %s", issue_id, agent)

    def next_assignment(
        self,
        issues: Iterable[Issue],
        options: AssignmentOptions | None = None,
    ) -> AgentAssignment | None:
        """Assign the highest-priority ready issue, or return None."""
        ready = get_ready_issues(issues).ready
        if not ready:
            return None
        issue = min(ready, key=lambda item: (item.priority, item.created_at, item.id))
        return self.assign_agent(issue, options)

    def ready_assignments(
        self,
        issues: Iterable[Issue],
        options: AssignmentOptions | None = None,
    ) -> list[AgentAssignment]:
        """Assign every ready issue of a batch, in batch order."""
        return [self.assign_agent(issue, options) for issue in get_ready_issues(issues).ready]

    def plan_execution(
        self,
        issues: Iterable[Issue],
        options: AssignmentOptions | None = None,
    ) -> ExecutionPlan:
        """Assign every open issue of a batch, one phase per dependency layer."""
        options = options or AssignmentOptions()
        graph = build_dependency_graph(issues)
        order = topological_sort(graph)

        phases: list[ExecutionPhase] = []
        for layer in order.parallel:
            assignments = [
                self.assign_agent(graph.nodes[issue_id], options)
                for issue_id in layer
                if graph.nodes[issue_id].status != IssueStatus.CLOSED
            ]
            if not assignments:
                continue
            phases.append(
                ExecutionPhase(
                    phase_number=len(phases) + 1,
                    assignments=assignments,
                    can_run_parallel=len(assignments) > 1
                    and (
                        options.max_parallel_agents is None
                        or len(assignments) <= options.max_parallel_agents
                    ),
                    estimated_duration=_phase_duration(len(assignments)),
                )
            )

        total = sum(len(phase.assignments) for phase in phases)
        return ExecutionPlan(
            phases=phases,
            total_agent_sessions=total,
            estimated_parallelism=round(total / len(phases), 2) if phases else 0.0,
            unresolved=order.unresolved,
        )

    # ═══════════════════════════════════════════════════════════════════════
    # PASS-THROUGHS
    # ═══════════════════════════════════════════════════════════════════════

    def agent_for_category(
        self,
        category: TaskCategory,
        options: AssignmentOptions | None = None,
    ) -> AgentSelectionResult:
        options = options or AssignmentOptions()
        return select_agent_for_category(category, options.available_agents, self.config)

    def compare_agents(self, title: str, description: str | None = None) -> list[AgentComparison]:
        return compare_agents_for_task(title, description, self.config)

    # ═══════════════════════════════════════════════════════════════════════
    # WORKLOAD LEDGER
    # ═══════════════════════════════════════════════════════════════════════

    def get_workloads(self) -> list[WorkloadEntry]:
        """Copies of every agent's workload, in registry order."""
        with self._lock:
            return [replace(entry) for entry in self._workloads.values()]

    def mark_agent_active(self, agent: str, active: bool) -> None:
        """Toggle the reporting-only ``active`` flag."""
        agent = coerce_agent(agent)
        with self._lock:
            self._workloads[agent].active = active

    def get_assignment_stats(self) -> AssignmentStats:
        with self._lock:
            by_agent = {agent: entry.assigned_tasks for agent, entry in self._workloads.items()}
            active = sum(1 for entry in self._workloads.values() if entry.active)
        return AssignmentStats(
            total_assignments=sum(by_agent.values()),
            active_agents=active,
            by_agent=by_agent,
        )

    def reset_workloads(self) -> None:
        """Zero every counter, flag and outstanding reservation."""
        with self._lock:
            self._init_workloads()
        logger.info("Workloads reset")
