"""
Task Taxonomy — Keyword Rule Classification

Maps free text to a ``TaskCategory`` by evaluating an ordered table of
(category, keywords, weight) rules against the lower-cased title and
description. The rule with the highest matched weight wins; earlier rules
win ties.
"""

import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Tuple

from agentcoord.config import DEFAULT_CONFIG, HeuristicConfig

from .models import ClassificationResult, TaskCategory

logger = logging.getLogger(__name__)

# Inflections accepted after a keyword stem ("test" matches "tests", "testing").
_SUFFIXES = r"(?:s|es|d|ed|ing|ion|ions|ation|ations|er|ers|ment|ments)?"


@dataclass(frozen=True)
class ClassificationRule:
    """One row of the classification table."""

    category: TaskCategory
    keywords: Tuple[str, ...]
    weight: float = 1.0

    @cached_property
    def _patterns(self) -> Tuple[Tuple[str, re.Pattern[str]], ...]:
        return tuple(
            (kw, re.compile(rf"\b{re.escape(kw)}{_SUFFIXES}\b")) for kw in self.keywords
        )

    def match(self, text: str) -> List[str]:
        """Return the keywords of this rule found in ``text`` (already lower-cased)."""
        return [kw for kw, pattern in self._patterns if pattern.search(text)]

    def max_weight(self, saturation: int) -> float:
        return self.weight * min(len(self.keywords), saturation)


CLASSIFICATION_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        TaskCategory.RESEARCH,
        (
            "research", "investigate", "investigation", "explore", "analyze",
            "analysis", "find", "compare", "evaluate", "study", "understand",
            "learn", "discover", "identify",
        ),
        weight=1.1,
    ),
    ClassificationRule(
        TaskCategory.COMPLEX_CODE,
        (
            "implement", "build", "create", "develop", "architecture", "architect",
            "design", "integrate", "feature", "system", "service", "module",
            "pattern", "component", "interface", "abstraction",
        ),
        weight=1.0,
    ),
    ClassificationRule(
        TaskCategory.QUICK_FIX,
        (
            "fix", "bug", "patch", "hotfix", "typo", "error", "broken", "issue",
            "update", "change", "debug", "crash", "troubleshoot", "diagnose",
        ),
        weight=1.0,
    ),
    ClassificationRule(
        TaskCategory.TESTING,
        (
            "test", "testing", "spec", "coverage", "unit", "integration", "e2e",
            "assertion", "mock", "stub",
        ),
        weight=1.2,
    ),
    ClassificationRule(
        TaskCategory.REVIEW,
        (
            "review", "audit", "check", "verify", "validate", "assess", "inspect",
            "security", "quality",
        ),
        weight=1.1,
    ),
    ClassificationRule(
        TaskCategory.DOCUMENTATION,
        (
            "document", "docs", "readme", "comment", "explain", "describe", "api",
            "guide", "tutorial", "reference",
        ),
        weight=1.0,
    ),
    ClassificationRule(
        TaskCategory.REFACTORING,
        (
            "refactor", "clean", "reorganize", "restructure", "simplify", "optimize",
            "improve", "extract", "rename",
        ),
        weight=1.2,
    ),
    ClassificationRule(
        TaskCategory.GENERAL,
        (
            "update", "modify", "add", "remove", "configure", "setup", "install",
            "deploy",
        ),
        weight=0.5,
    ),
)


def _fallback(config: HeuristicConfig) -> ClassificationResult:
    return ClassificationResult(
        category=TaskCategory.GENERAL,
        confidence=config.classification_fallback_confidence,
        keywords=[],
        reasoning=f"Task classified as '{TaskCategory.GENERAL}' based on keywords: none matched",
    )


def classify_task(
    title: str,
    description: Optional[str] = None,
    config: Optional[HeuristicConfig] = None,
    rules: Tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
) -> ClassificationResult:
    """
    Classify a task into a category.

    Args:
        title: Task title
        description: Optional longer description
        config: Heuristic thresholds (defaults to ``DEFAULT_CONFIG``)
        rules: Ordered rule table; earlier rules win ties

    Returns:
        ClassificationResult whose reasoning names the category and the
        matched keywords. Unmatched or empty text falls back to ``general``.
    """
    config = config or DEFAULT_CONFIG
    text = f"{title or ''} {description or ''}".lower()

    best_rule: Optional[ClassificationRule] = None
    best_keywords: List[str] = []
    best_weight = 0.0

    for rule in rules:
        matched = rule.match(text)
        weight = rule.weight * len(matched)
        if weight > best_weight:
            best_rule, best_keywords, best_weight = rule, matched, weight

    if best_rule is None or best_weight < config.classification_min_weight:
        logger.debug("No classification rule matched %r, falling back", title)
        return _fallback(config)

    max_weight = best_rule.max_weight(config.classification_saturation)
    confidence = min(1.0, best_weight / max_weight)

    reasoning = (
        f"Task classified as '{best_rule.category}' based on keywords: "
        f"{', '.join(best_keywords[:5])}"
    )
    logger.debug("Classified %r as %s (%.2f)", title, best_rule.category, confidence)

    return ClassificationResult(
        category=best_rule.category,
        confidence=confidence,
        keywords=best_keywords,
        reasoning=reasoning,
    )
