"""
Delegation Heuristics — Classification, Routing & Decomposition

Decides which of the four coding agents should take a piece of work and how a
larger task splits into dependency-linked subtasks.

Core Components:
- models: TaskCategory/Agent enums and result dataclasses
- registry: static capability profile per agent
- taxonomy: ordered keyword-rule classification
- router: category-based agent selection and comparison
- decomposer: concern-driven task decomposition
"""

from .models import (
    Agent,
    AgentCapabilityProfile,
    AgentComparison,
    AgentSelectionResult,
    ClassificationResult,
    DecompositionPreview,
    PatternSuggestion,
    Subtask,
    TaskCategory,
    TaskDecomposition,
    TaskSpec,
)
from .registry import (
    AGENT_CAPABILITIES,
    ALL_AGENTS,
    coerce_agent,
    get_agent_capabilities,
    is_specialist,
)
from .taxonomy import CLASSIFICATION_RULES, ClassificationRule, classify_task
from .router import compare_agents_for_task, rank_agents, select_agent, select_agent_for_category
from .decomposer import decompose_task, detect_concerns, preview_decomposition, suggest_pattern

__all__ = [
    # Models
    "Agent",
    "AgentCapabilityProfile",
    "AgentComparison",
    "AgentSelectionResult",
    "ClassificationResult",
    "DecompositionPreview",
    "PatternSuggestion",
    "Subtask",
    "TaskCategory",
    "TaskDecomposition",
    "TaskSpec",
    # Registry
    "AGENT_CAPABILITIES",
    "ALL_AGENTS",
    "coerce_agent",
    "get_agent_capabilities",
    "is_specialist",
    # Taxonomy
    "CLASSIFICATION_RULES",
    "ClassificationRule",
    "classify_task",
    # Router
    "compare_agents_for_task",
    "rank_agents",
    "select_agent",
    "select_agent_for_category",
    # Decomposer
    "decompose_task",
    "detect_concerns",
    "preview_decomposition",
    "suggest_pattern",
]
