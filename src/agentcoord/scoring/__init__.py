"""Complexity analysis."""

from .complexity_analyzer import (
    COMPLEXITY_SIGNALS,
    ComplexityEstimate,
    ComplexityLevel,
    ComplexitySignal,
    complexity_level,
    estimate_complexity,
)

__all__ = [
    "estimate_complexity",
    "complexity_level",
    "ComplexityEstimate",
    "ComplexityLevel",
    "ComplexitySignal",
    "COMPLEXITY_SIGNALS",
]
