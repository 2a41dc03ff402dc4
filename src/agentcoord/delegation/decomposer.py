"""
Task Decomposer — Concern-Driven Task Decomposition

Splits a task spec into one subtask per concern found in its text (schema,
backend, frontend, refactoring) framed by research up front and tests, docs
and review behind. Complexity decides how much framing is added:

    low     -> the task itself, plus a security review for auth work (1-2)
    medium  -> research + concern subtasks + tests + docs? + review? (3-5)
    high    -> research + design + concern subtasks + tests + docs
               + review (6+)

When a medium task names more concerns than its cap leaves room for, adjacent
concerns share one subtask ("Schema + Backend").

Each subtask's summary phrase is run through the classifier so categories come
from the same rule table used for incoming work.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Final, List, Optional, Tuple

from agentcoord.config import DEFAULT_CONFIG, HeuristicConfig
from agentcoord.optimization.dependency_graph import compute_layers, longest_chain
from agentcoord.scoring.complexity_analyzer import ComplexityLevel, estimate_complexity

from .models import (
    DecompositionPreview,
    PatternSuggestion,
    Subtask,
    TaskCategory,
    TaskDecomposition,
    TaskSpec,
)
from .taxonomy import classify_task

logger = logging.getLogger(__name__)

CONCERN_PATTERNS: Final[Dict[str, re.Pattern[str]]] = {
    "research": re.compile(r"\b(research|investigat\w*|explor\w*|analy[sz]\w*|evaluat\w*)\b"),
    "schema": re.compile(r"\b(database|migrations?|schemas?|models?|tables?)\b"),
    "backend": re.compile(r"\b(api|apis|endpoints?|backend|server|services?)\b"),
    "frontend": re.compile(r"\b(frontend|ui|components?|pages?|screens?|forms?)\b"),
    "refactor": re.compile(r"\b(refactor\w*|clean\w*|reorganiz\w*|restructur\w*|improv\w*)\b"),
    "security": re.compile(r"\b(auth\w*|login|signup|oauth|sso|security|permissions?)\b"),
    "docs": re.compile(r"\b(docs?|documentation|readme|guides?)\b"),
    "tests": re.compile(r"\b(tests?|testing|coverage)\b"),
}

# Concerns that each get an implementation subtask, in build order.
STRUCTURAL_CONCERNS: Final = ("schema", "backend", "frontend", "refactor")

# Earlier concern a subtask waits for; the first one already built wins.
PREREQUISITES: Final[Dict[str, Tuple[str, ...]]] = {
    "backend": ("schema",),
    "frontend": ("backend", "schema"),
}

# Most subtasks a level may produce; high is open-ended and starts at 6.
SUBTASK_CAPS: Final[Dict[str, int]] = {"low": 2, "medium": 5}

CRITICAL_PATH_WEIGHTS: Final[Dict[str, int]] = {"low": 1, "medium": 2, "high": 3}
EFFORT_POINTS: Final[Dict[str, int]] = {"low": 1, "medium": 3, "high": 5}

# First match wins; "generic-feature" otherwise.
PATTERN_CONCERNS: Final[Tuple[Tuple[str, Tuple[str, ...]], ...]] = (
    ("feature-with-api", ("backend", "frontend")),
    ("auth-feature", ("security",)),
    ("database-migration", ("schema",)),
    ("refactoring", ("refactor",)),
)
PATTERN_KEYWORDS: Final = ("api", "frontend", "backend", "auth", "database", "refactor")


@dataclass(frozen=True)
class _Template:
    prefix: str
    summary: str
    category_hint: TaskCategory
    priority_offset: int = 0


TEMPLATES: Final[Dict[str, _Template]] = {
    "research": _Template("Research", "Research and analyze requirements", TaskCategory.RESEARCH),
    "design": _Template("Design", "Design architecture and interfaces", TaskCategory.COMPLEX_CODE),
    "schema": _Template("Schema", "Design database schema and create migration", TaskCategory.COMPLEX_CODE),
    "backend": _Template("Backend", "Implement backend service endpoints", TaskCategory.COMPLEX_CODE),
    "frontend": _Template("Frontend", "Build user interface components", TaskCategory.COMPLEX_CODE),
    "refactor": _Template("Refactor", "Refactor and restructure existing code", TaskCategory.REFACTORING),
    "tests": _Template("Tests", "Write unit tests and check coverage", TaskCategory.TESTING, 1),
    "docs": _Template("Docs", "Document usage in the readme and guide", TaskCategory.DOCUMENTATION, 1),
    "review": _Template("Review", "Review and audit the changes", TaskCategory.REVIEW, 1),
    "security": _Template("Security review", "Security review and audit", TaskCategory.REVIEW),
}


def _spec_text(spec: TaskSpec) -> str:
    return f"{spec.title or ''} {spec.description or ''}".lower()


def detect_concerns(spec: TaskSpec) -> List[str]:
    """Names of the concerns mentioned in a spec, in ``CONCERN_PATTERNS`` order."""
    text = _spec_text(spec)
    return [name for name, pattern in CONCERN_PATTERNS.items() if pattern.search(text)]


def _template_category(template: _Template, config: HeuristicConfig) -> TaskCategory:
    classification = classify_task(template.summary, config=config)
    if classification.is_fallback:
        return template.category_hint
    return classification.category


class _Builder:
    """Accumulates subtasks and hands out their indices."""

    def __init__(self, spec: TaskSpec, config: HeuristicConfig):
        self.spec = spec
        self.config = config
        self.subtasks: List[Subtask] = []

    def add(
        self,
        template: _Template,
        complexity: ComplexityLevel,
        depends_on: List[int],
        category: Optional[TaskCategory] = None,
    ) -> int:
        index = len(self.subtasks)
        self.subtasks.append(
            Subtask(
                index=index,
                title=f"{template.prefix}: {self.spec.title}",
                description=f"{template.summary} for {self.spec.title}",
                category=category or _template_category(template, self.config),
                priority=self.spec.priority + template.priority_offset,
                depends_on=sorted(set(depends_on)),
                complexity=complexity,
            )
        )
        return index


def _single_subtask(spec: TaskSpec, config: HeuristicConfig) -> Subtask:
    return Subtask(
        index=0,
        title=spec.title,
        description=spec.description,
        category=classify_task(spec.title, spec.description, config=config).category,
        priority=spec.priority,
        complexity="low",
    )


def decompose_task(spec: TaskSpec, config: Optional[HeuristicConfig] = None) -> TaskDecomposition:
    """
    Decompose a task spec into dependency-linked subtasks.

    Subtasks only ever depend on earlier indices. ``parallel_groups`` holds the
    Kahn layers of those dependencies and ``critical_path`` the heaviest chain
    weighted by subtask complexity. Subtask counts never overlap between
    levels (see ``SUBTASK_CAPS``), so a more complex task always gets more
    subtasks than a simpler one.
    """
    config = config or DEFAULT_CONFIG
    level = estimate_complexity(spec.title, spec.description, config=config).level
    concerns = detect_concerns(spec)
    structural = [name for name in STRUCTURAL_CONCERNS if name in concerns]
    logger.debug("Concerns for %r (%s complexity): %s", spec.title, level, concerns)

    if level == "low":
        subtasks = _plan_low(spec, concerns, config)
    else:
        subtasks = _plan_subtasks(spec, level, concerns, structural, config)

    edges = {st.index: st.depends_on for st in subtasks}
    weights = {st.index: CRITICAL_PATH_WEIGHTS[st.complexity] for st in subtasks}
    covered = ", ".join(structural) if structural else "core implementation"

    return TaskDecomposition(
        subtasks=subtasks,
        parallel_groups=compute_layers(edges),
        critical_path=longest_chain(edges, tie_key=lambda index: index, weight=weights.__getitem__),
        concerns=concerns,
        reasoning=(
            f"Decomposed {spec.type} '{spec.title}' ({level} complexity) into "
            f"{len(subtasks)} subtask(s) covering {covered}"
        ),
    )


def _plan_low(spec: TaskSpec, concerns: List[str], config: HeuristicConfig) -> List[Subtask]:
    builder = _Builder(spec, config)
    builder.subtasks.append(_single_subtask(spec, config))
    if "security" in concerns:
        builder.add(TEMPLATES["security"], "low", [0])
    return builder.subtasks


def _chunk(names: List[str], limit: int) -> List[List[str]]:
    """Split ``names`` into at most ``limit`` contiguous groups, earlier groups larger."""
    count = min(len(names), limit)
    size, extra = divmod(len(names), count)
    groups: List[List[str]] = []
    start = 0
    for number in range(count):
        end = start + size + (1 if number < extra else 0)
        groups.append(names[start:end])
        start = end
    return groups


def _merged(group: List[str]) -> _Template:
    templates = [TEMPLATES[name] for name in group]
    if len(templates) == 1:
        return templates[0]
    return _Template(
        " + ".join(t.prefix for t in templates),
        "; ".join(t.summary for t in templates),
        templates[0].category_hint,
    )


def _plan_subtasks(
    spec: TaskSpec,
    level: ComplexityLevel,
    concerns: List[str],
    structural: List[str],
    config: HeuristicConfig,
) -> List[Subtask]:
    builder = _Builder(spec, config)

    roots = [builder.add(TEMPLATES["research"], "low", [])]
    if level == "high":
        roots = [builder.add(TEMPLATES["design"], "medium", roots)]
        closing = ["docs", "security" if "security" in concerns else "review"]
    else:
        closing = [name for name in ("docs", "security") if name in concerns]

    # Room left for implementation subtasks once tests and closing work are counted
    limit = len(structural)
    if level in SUBTASK_CAPS:
        limit = max(1, SUBTASK_CAPS[level] - len(builder.subtasks) - 1 - len(closing))

    built: Dict[str, int] = {}
    for group in _chunk(structural, limit) if structural else []:
        deps = list(roots)
        for name in group:
            # UI waits for the API when there is one, otherwise for the schema
            for prerequisite in PREREQUISITES.get(name, ()):
                if prerequisite in built:
                    deps.append(built[prerequisite])
                    break
        category = _template_category(TEMPLATES[group[0]], config)
        index = builder.add(_merged(group), level, deps, category=category)
        built.update(dict.fromkeys(group, index))

    if not built:
        implement = _Template("Implement", "Core implementation", TaskCategory.COMPLEX_CODE)
        category = classify_task(spec.title, spec.description, config=config).category
        built["implement"] = builder.add(implement, level, roots, category=category)

    implementation = sorted(set(built.values()))
    tests = builder.add(TEMPLATES["tests"], "medium" if level == "high" else "low", implementation)

    for name in closing:
        if name == "docs":
            builder.add(TEMPLATES["docs"], "low", implementation)
        else:
            builder.add(TEMPLATES[name], "medium" if name == "security" else "low", [tests])

    return builder.subtasks


def suggest_pattern(spec: TaskSpec) -> PatternSuggestion:
    """Name the decomposition pattern a task spec resembles.

    Confidence starts at 0.5 and rises by 0.1 per stack keyword mentioned
    (api, frontend, backend, auth, database, refactor).
    """
    concerns = set(detect_concerns(spec))
    text = _spec_text(spec)
    for name, required in PATTERN_CONCERNS:
        if concerns.issuperset(required):
            hits = sum(1 for keyword in PATTERN_KEYWORDS if keyword in text)
            return PatternSuggestion(
                pattern_name=name,
                confidence=min(0.5 + 0.1 * hits, 1.0),
                reasoning=f"Matched pattern '{name}' based on task description",
            )
    return PatternSuggestion(
        pattern_name="generic-feature",
        confidence=0.5,
        reasoning="Using generic decomposition pattern",
    )


def preview_decomposition(
    spec: TaskSpec, config: Optional[HeuristicConfig] = None
) -> DecompositionPreview:
    """Decompose and summarize effort (points: low=1, medium=3, high=5)."""
    decomposition = decompose_task(spec, config)
    total = len(decomposition.subtasks)
    points = sum(EFFORT_POINTS[st.complexity] for st in decomposition.subtasks)
    phases = len(decomposition.parallel_groups)
    ratio = round(phases / total * 100) if total else 0

    return DecompositionPreview(
        decomposition=decomposition,
        estimated_effort=f"{total} subtasks, ~{points} complexity points",
        parallelization=f"{phases} parallel phases ({ratio}% parallelization)",
    )
