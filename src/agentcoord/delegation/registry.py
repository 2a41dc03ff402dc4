"""Agent Capability Registry - static per-agent capability profiles."""

from __future__ import annotations

from typing import Final, Literal

from agentcoord.exceptions import UnknownAgentError

from .models import Agent, AgentCapabilityProfile, TaskCategory

AGENT_CAPABILITIES: Final[dict[Agent, AgentCapabilityProfile]] = {
    Agent.CLAUDE: AgentCapabilityProfile(
        agent=Agent.CLAUDE,
        categories=frozenset(
            {TaskCategory.COMPLEX_CODE, TaskCategory.REVIEW, TaskCategory.REFACTORING}
        ),
        strengths=(
            "Complex multi-file changes",
            "Architectural decisions",
            "Code review and analysis",
            "Security considerations",
        ),
        weaknesses=("Can be verbose", "Slower for simple tasks"),
        speed_rating=3,
        quality_rating=5,
    ),
    Agent.GEMINI: AgentCapabilityProfile(
        agent=Agent.GEMINI,
        categories=frozenset(
            {TaskCategory.RESEARCH, TaskCategory.DOCUMENTATION, TaskCategory.GENERAL}
        ),
        strengths=(
            "Research and exploration",
            "Multi-file analysis",
            "Documentation generation",
            "Long context understanding",
        ),
        weaknesses=("Complex code changes", "Architectural decisions"),
        speed_rating=4,
        quality_rating=3,
    ),
    Agent.CODEX: AgentCapabilityProfile(
        agent=Agent.CODEX,
        categories=frozenset(
            {TaskCategory.QUICK_FIX, TaskCategory.TESTING, TaskCategory.REFACTORING}
        ),
        strengths=(
            "Fast execution",
            "Test generation",
            "Quick bug fixes",
            "Boilerplate code",
        ),
        weaknesses=("Complex architecture", "Multi-file reasoning"),
        speed_rating=5,
        quality_rating=3,
    ),
    Agent.OPENCODE: AgentCapabilityProfile(
        agent=Agent.OPENCODE,
        categories=frozenset({TaskCategory.GENERAL, TaskCategory.QUICK_FIX}),
        strengths=(
            "General purpose coding",
            "Good balance of speed and quality",
            "Wide language support",
        ),
        weaknesses=("May not match specialized agents",),
        speed_rating=4,
        quality_rating=4,
    ),
}

ALL_AGENTS: Final[tuple[Agent, ...]] = tuple(AGENT_CAPABILITIES)

# Which rating breaks ties between agents that share a category.
CATEGORY_RATING_FOCUS: Final[dict[TaskCategory, Literal["speed", "quality"]]] = {
    TaskCategory.RESEARCH: "quality",
    TaskCategory.COMPLEX_CODE: "quality",
    TaskCategory.QUICK_FIX: "speed",
    TaskCategory.TESTING: "speed",
    TaskCategory.REVIEW: "quality",
    TaskCategory.DOCUMENTATION: "quality",
    TaskCategory.REFACTORING: "quality",
    TaskCategory.GENERAL: "quality",
}


def coerce_agent(agent: Agent | str) -> Agent:
    """Convert a name to an ``Agent``; unknown names raise ``UnknownAgentError``."""
    try:
        return Agent(agent)
    except ValueError:
        raise UnknownAgentError(agent) from None


def get_agent_capabilities(agent: Agent | str) -> AgentCapabilityProfile:
    """Look up the capability profile of a single agent."""
    return AGENT_CAPABILITIES[coerce_agent(agent)]


def is_specialist(agent: Agent | str, category: TaskCategory) -> bool:
    return get_agent_capabilities(agent).handles(category)
