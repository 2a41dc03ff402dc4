"""
Delegation Data Models

Closed enumerations and result dataclasses shared by the classifier, the
complexity estimator, the agent selector and the task decomposer.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import FrozenSet, List, Literal, Optional, Tuple

from agentcoord.scoring.complexity_analyzer import ComplexityLevel


class TaskCategory(StrEnum):
    """Kinds of work an agent can be asked to do."""

    RESEARCH = "research"
    COMPLEX_CODE = "complex_code"
    QUICK_FIX = "quick_fix"
    TESTING = "testing"
    REVIEW = "review"
    DOCUMENTATION = "documentation"
    REFACTORING = "refactoring"
    GENERAL = "general"


class Agent(StrEnum):
    """Interchangeable AI coding backends."""

    CLAUDE = "claude"
    GEMINI = "gemini"
    CODEX = "codex"
    OPENCODE = "opencode"


def _check_confidence(name: str, value: float) -> None:
    if not 0.0 < value <= 1.0:
        raise ValueError(f"{name} must be in (0.0, 1.0], got {value}")


@dataclass(frozen=True)
class AgentCapabilityProfile:
    """Static description of what an agent is good at."""

    agent: Agent
    categories: FrozenSet[TaskCategory]
    strengths: Tuple[str, ...]
    weaknesses: Tuple[str, ...]
    speed_rating: int
    quality_rating: int

    def __post_init__(self) -> None:
        for field_name in ["categories", "strengths", "weaknesses"]:
            if not getattr(self, field_name):
                raise ValueError(f"{field_name} must not be empty for {self.agent}")
        for field_name in ["speed_rating", "quality_rating"]:
            value = getattr(self, field_name)
            if not 1 <= value <= 5:
                raise ValueError(f"{field_name} must be in [1, 5], got {value}")

    def handles(self, category: TaskCategory) -> bool:
        return category in self.categories


@dataclass
class ClassificationResult:
    """Outcome of classifying free text into a task category."""

    category: TaskCategory
    confidence: float
    keywords: List[str] = field(default_factory=list)
    reasoning: str = ""

    def __post_init__(self) -> None:
        _check_confidence("confidence", self.confidence)

    @property
    def is_fallback(self) -> bool:
        """True when no keyword rule matched."""
        return not self.keywords


@dataclass
class AgentSelectionResult:
    """Recommended agent plus ranked alternatives."""

    recommended: Agent
    confidence: float
    alternatives: List[Agent] = field(default_factory=list)
    reasoning: str = ""
    category: Optional[TaskCategory] = None

    def __post_init__(self) -> None:
        _check_confidence("confidence", self.confidence)
        if self.recommended in self.alternatives:
            raise ValueError(f"alternatives must not contain {self.recommended}")

    @property
    def ranked(self) -> List[Agent]:
        """Recommended agent followed by alternatives, best first."""
        return [self.recommended, *self.alternatives]


@dataclass
class AgentComparison:
    """Fit score of a single agent for a classified task."""

    agent: Agent
    score: float
    reasoning: str


@dataclass
class TaskSpec:
    """Body of work handed to the decomposer."""

    title: str
    description: str = ""
    type: Literal["epic", "feature", "task"] = "task"
    priority: int = 2


@dataclass
class Subtask:
    """Decomposition-internal unit of work addressed by index."""

    index: int
    title: str
    description: str
    category: TaskCategory
    priority: int
    depends_on: List[int] = field(default_factory=list)
    complexity: ComplexityLevel = "low"
    type: str = "task"

    def __post_init__(self) -> None:
        for dep in self.depends_on:
            if not 0 <= dep < self.index:
                raise ValueError(
                    f"subtask {self.index} may only depend on earlier subtasks, got {dep}"
                )


@dataclass
class TaskDecomposition:
    """Subtasks with their dependency layering."""

    subtasks: List[Subtask]
    parallel_groups: List[List[int]]
    critical_path: List[int] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    reasoning: str = ""

    @property
    def dependencies(self) -> List[Tuple[int, int]]:
        """``(from, to)`` pairs where ``from`` depends on ``to``."""
        return [(st.index, dep) for st in self.subtasks for dep in st.depends_on]


@dataclass
class DecompositionPreview:
    """Human-readable effort summary of a decomposition."""

    decomposition: TaskDecomposition
    estimated_effort: str
    parallelization: str


@dataclass
class PatternSuggestion:
    """Named decomposition pattern a task spec resembles."""

    pattern_name: str
    confidence: float
    reasoning: str

    def __post_init__(self) -> None:
        _check_confidence("confidence", self.confidence)
