#!/usr/bin/env python3
"""Complexity Analyzer - implementation difficulty estimation for work items.

Scans a title and description for signals that raise difficulty (integration,
persistence, breadth, security) or lower it (narrow, single-item scope). Each
detected signal contributes a named factor and a signed weight on top of a base
score; the total maps to a low/medium/high level.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final, Literal

from agentcoord.config import DEFAULT_CONFIG, HeuristicConfig

ComplexityLevel = Literal["low", "medium", "high"]

# ═══════════════════════════════════════════════════════════════════════════
# COMPLEXITY SIGNALS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ComplexitySignal:
    """A named pattern with a signed score contribution."""

    factor: str
    pattern: re.Pattern[str]
    weight: float

    def detected(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _signal(factor: str, pattern: str, weight: float) -> ComplexitySignal:
    return ComplexitySignal(factor=factor, pattern=re.compile(pattern, re.IGNORECASE), weight=weight)


COMPLEXITY_SIGNALS: Final[tuple[ComplexitySignal, ...]] = (
    # Raising signals
    _signal("multiple items", r"\b(multiple|several|many|across)\b", 0.5),
    _signal("major changes", r"\b(refactor|redesign|rewrite)", 1.0),
    _signal("integration work", r"\bintegrat(e|es|ed|ing|ion|ions)\b", 0.7),
    _signal("security considerations", r"\b(security|auth)", 0.8),
    _signal("performance work", r"\b(performance|optimi[sz])", 0.6),
    _signal("database changes", r"\b(database|migration|schema)", 0.7),
    _signal("API work", r"\b(api|apis|endpoints?)\b", 0.4),
    _signal("testing required", r"\btest", 0.3),
    # Lowering signals
    _signal("simple change", r"\b(fix typo|update comment|rename)", -0.5),
    _signal("limited scope", r"\b(single|one|simple)\b", -0.3),
)


# ═══════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ComplexityEstimate:
    """Result of complexity estimation."""

    score: float
    level: ComplexityLevel
    factors: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# MAIN COMPLEXITY ESTIMATION
# ═══════════════════════════════════════════════════════════════════════════


def complexity_level(score: float, config: HeuristicConfig | None = None) -> ComplexityLevel:
    """Map a raw score to a level using the configured thresholds."""
    config = config or DEFAULT_CONFIG
    if score <= config.complexity_low_max:
        return "low"
    if score <= config.complexity_medium_max:
        return "medium"
    return "high"


def estimate_complexity(
    title: str,
    description: str | None = None,
    config: HeuristicConfig | None = None,
) -> ComplexityEstimate:
    """Estimate implementation difficulty of a work item.

    Returns ComplexityEstimate with:
        - score: base score plus signal weights, clamped to [0, max_score]
        - level: "low", "medium" or "high"
        - factors: names of every detected signal, in table order
    """
    config = config or DEFAULT_CONFIG
    text = f"{title or ''} {description or ''}"

    score = config.complexity_base_score
    factors: list[str] = []

    for signal in COMPLEXITY_SIGNALS:
        if signal.detected(text):
            score += signal.weight
            factors.append(signal.factor)

    # Level is taken before clamping so heavily loaded tasks stay "high"
    level = complexity_level(score, config)
    score = max(0.0, min(config.complexity_max_score, score))

    return ComplexityEstimate(score=round(score, 3), level=level, factors=factors)
