"""
Agent Router — Category Matching with Rating Tie-breaks

Scoring formula:
    fit_score = specialist_bonus * handles_category
              + focus_rating * focus_weight
              + secondary_rating * secondary_weight

The focus rating is speed for quick fixes and testing and quality for every
other category, so two specialists for the same category are separated by the
rating that matters for that kind of work.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from agentcoord.config import DEFAULT_CONFIG, HeuristicConfig
from agentcoord.exceptions import NoAvailableAgentError, UnknownAgentError

from .models import Agent, AgentComparison, AgentSelectionResult, TaskCategory
from .registry import (
    ALL_AGENTS,
    CATEGORY_RATING_FOCUS,
    coerce_agent,
    get_agent_capabilities,
)
from .taxonomy import classify_task

logger = logging.getLogger(__name__)


def _fit_score(agent: Agent, category: TaskCategory, config: HeuristicConfig) -> float:
    capability = get_agent_capabilities(agent)
    if CATEGORY_RATING_FOCUS[category] == "speed":
        focus, secondary = capability.speed_rating, capability.quality_rating
    else:
        focus, secondary = capability.quality_rating, capability.speed_rating

    score = focus * config.focus_rating_weight + secondary * config.secondary_rating_weight
    if capability.handles(category):
        score += config.specialist_bonus
    return score


def _resolve_candidates(available_agents: Optional[Iterable[str]]) -> List[Agent]:
    """Turn an optional restriction list into known, de-duplicated agents."""
    if available_agents is None:
        return list(ALL_AGENTS)

    requested = list(available_agents)
    if not requested:
        raise NoAvailableAgentError("available_agents is empty", requested=[])

    candidates: List[Agent] = []
    for name in requested:
        try:
            agent = coerce_agent(name)
        except UnknownAgentError:
            logger.warning("Ignoring unknown agent %r in restriction list", name)
            continue
        if agent not in candidates:
            candidates.append(agent)

    if not candidates:
        raise NoAvailableAgentError(
            f"None of the requested agents are known: {requested}",
            requested=[str(name) for name in requested],
        )
    return candidates


def rank_agents(
    category: TaskCategory,
    agents: Sequence[Agent] = ALL_AGENTS,
    config: Optional[HeuristicConfig] = None,
) -> List[Tuple[Agent, float]]:
    """Score agents for a category, best first; registry order breaks exact ties."""
    config = config or DEFAULT_CONFIG
    scored = [(agent, _fit_score(agent, category, config)) for agent in agents]
    # sorted() is stable, so equal scores keep the input order
    return sorted(scored, key=lambda item: item[1], reverse=True)


def select_agent_for_category(
    category: TaskCategory,
    available_agents: Optional[Iterable[str]] = None,
    config: Optional[HeuristicConfig] = None,
) -> AgentSelectionResult:
    """
    Select the best agent for a task category.

    Args:
        category: Category to route
        available_agents: Optional restriction list. When given, the
            recommendation always comes from it.
        config: Heuristic weights (defaults to ``DEFAULT_CONFIG``)

    Returns:
        AgentSelectionResult with alternatives ordered by descending score

    Raises:
        NoAvailableAgentError: ``available_agents`` is empty or holds no
            known agent.
    """
    config = config or DEFAULT_CONFIG
    category = TaskCategory(category)
    candidates = _resolve_candidates(available_agents)

    ranked = rank_agents(category, candidates, config)
    recommended = ranked[0][0]
    capability = get_agent_capabilities(recommended)

    if capability.handles(category):
        confidence = config.specialist_confidence
        reasoning = (
            f"{recommended} selected for {category}: "
            f"{', '.join(capability.strengths[:2])}"
        )
    else:
        confidence = config.non_specialist_confidence
        reasoning = (
            f"No specialist available for {category}, {recommended} selected "
            f"as best rated option: {', '.join(capability.strengths[:2])}"
        )

    logger.debug(
        "Ranked agents for %s: %s",
        category,
        ", ".join(f"{agent}={score:.2f}" for agent, score in ranked),
    )

    return AgentSelectionResult(
        recommended=recommended,
        confidence=confidence,
        alternatives=[agent for agent, _ in ranked[1:]],
        reasoning=reasoning,
        category=category,
    )


def select_agent(
    title: str,
    description: Optional[str] = None,
    available_agents: Optional[Iterable[str]] = None,
    config: Optional[HeuristicConfig] = None,
) -> AgentSelectionResult:
    """Classify free text, then select an agent for the resulting category.

    Combined confidence is the product of classification and selection
    confidence, both of which lie in (0, 1].
    """
    config = config or DEFAULT_CONFIG
    classification = classify_task(title, description, config=config)
    selection = select_agent_for_category(classification.category, available_agents, config)

    return AgentSelectionResult(
        recommended=selection.recommended,
        confidence=selection.confidence * classification.confidence,
        alternatives=selection.alternatives,
        reasoning=f"{classification.reasoning}. {selection.reasoning}",
        category=classification.category,
    )


def compare_agents_for_task(
    title: str,
    description: Optional[str] = None,
    config: Optional[HeuristicConfig] = None,
) -> List[AgentComparison]:
    """Rank all four agents for a task, best first."""
    config = config or DEFAULT_CONFIG
    category = classify_task(title, description, config=config).category

    comparisons = []
    for agent, score in rank_agents(category, ALL_AGENTS, config):
        if get_agent_capabilities(agent).handles(category):
            reasoning = f"{agent} is specialized for {category}"
        else:
            reasoning = f"{agent} is a general option for {category}"
        comparisons.append(
            AgentComparison(agent=agent, score=round(score, 1), reasoning=reasoning)
        )
    return comparisons
