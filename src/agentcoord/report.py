"""Dashboard rendering of workloads, execution plans and decompositions."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from agentcoord.delegation.models import TaskDecomposition
from agentcoord.engine.assignment import AssignmentStats, ExecutionPlan, WorkloadEntry


def workload_table(workloads: list[WorkloadEntry]) -> Table:
    table = Table(title="Agent Workloads")
    table.add_column("Agent", style="cyan")
    table.add_column("Assigned", justify="right")
    table.add_column("Load")
    table.add_column("Active", style="yellow")

    for entry in workloads:
        table.add_row(
            str(entry.agent),
            str(entry.assigned_tasks),
            f"{entry.estimated_load:.0%}",
            "yes" if entry.active else "no",
        )
    return table


def execution_plan_table(plan: ExecutionPlan) -> Table:
    table = Table(title="Execution Plan")
    table.add_column("Phase", style="cyan")
    table.add_column("Issue")
    table.add_column("Agent", style="green")
    table.add_column("Confidence")
    table.add_column("Parallel")
    table.add_column("Duration", style="yellow")

    for phase in plan.phases:
        for assignment in phase.assignments:
            table.add_row(
                str(phase.phase_number),
                assignment.issue_id,
                str(assignment.agent),
                f"{assignment.confidence:.0%}",
                "yes" if phase.can_run_parallel else "no",
                phase.estimated_duration,
            )
    return table


def decomposition_table(decomposition: TaskDecomposition) -> Table:
    table = Table(title="Decomposition")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Subtask", max_width=50)
    table.add_column("Category", style="green")
    table.add_column("Complexity")
    table.add_column("Priority", justify="right")
    table.add_column("Depends On")

    critical = set(decomposition.critical_path)
    for subtask in decomposition.subtasks:
        marker = " [bold]*[/bold]" if subtask.index in critical else ""
        table.add_row(
            str(subtask.index),
            f"{subtask.title[:50]}{marker}",
            str(subtask.category),
            subtask.complexity,
            str(subtask.priority),
            ", ".join(str(dep) for dep in subtask.depends_on) or "-",
        )
    return table


def print_workloads(
    console: Console,
    workloads: list[WorkloadEntry],
    stats: AssignmentStats | None = None,
) -> None:
    console.print(workload_table(workloads))
    if stats is not None:
        console.print(
            f"\nTotal: {stats.total_assignments} assignments | "
            f"Active agents: {stats.active_agents}"
        )


def print_execution_plan(console: Console, plan: ExecutionPlan) -> None:
    if not plan.phases:
        console.print("[dim]Nothing to schedule.[/dim]")
    else:
        console.print(execution_plan_table(plan))
        console.print(
            f"\nPhases: {len(plan.phases)} | "
            f"Sessions: {plan.total_agent_sessions} | "
            f"Parallelism: {plan.estimated_parallelism:.2f}"
        )
    if plan.unresolved:
        console.print(f"[red]Unresolved (dependency cycle):[/red] {', '.join(plan.unresolved)}")
