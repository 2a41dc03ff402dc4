"""Shared helpers for agentcoord tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from agentcoord.engine.assignment import AgentAssignmentTracker
from agentcoord.optimization.dependency_graph import Issue

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_issue(
    issue_id: str,
    depends_on: list[str] | None = None,
    *,
    title: str | None = None,
    description: str | None = None,
    status: str = "open",
    priority: int = 2,
    minutes: int = 0,
    blocked_by: list[str] | None = None,
) -> Issue:
    """Build an issue with a deterministic creation time."""
    return Issue(
        id=issue_id,
        title=title or f"Implement feature {issue_id}",
        description=description,
        status=status,
        priority=priority,
        depends_on=depends_on or [],
        blocked_by=blocked_by or [],
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def tracker() -> AgentAssignmentTracker:
    return AgentAssignmentTracker()
