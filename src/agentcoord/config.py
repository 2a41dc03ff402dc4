"""Tunable heuristic thresholds and weights.

Every number the classifier, estimator, selector and tracker depend on lives in
``HeuristicConfig``. Overrides are read from a JSON file:

1. an explicit ``path`` argument,
2. the ``AGENTCOORD_CONFIG`` environment variable,
3. ``~/.coordinator/heuristics.json``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from agentcoord.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AGENTCOORD_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".coordinator" / "heuristics.json"


@dataclass(frozen=True)
class HeuristicConfig:
    """Centralized tuning table for all heuristics."""

    # Classification
    classification_min_weight: float = 0.5
    classification_fallback_confidence: float = 0.3
    classification_saturation: int = 3

    # Complexity estimation
    complexity_base_score: float = 1.0
    complexity_low_max: float = 1.5
    complexity_medium_max: float = 3.0
    complexity_max_score: float = 5.0

    # Agent selection
    specialist_bonus: float = 3.0
    focus_rating_weight: float = 0.4
    secondary_rating_weight: float = 0.3
    specialist_confidence: float = 0.9
    non_specialist_confidence: float = 0.6

    # Assignment / load balancing
    load_capacity: int = 5
    load_switch_margin: float = 0.3
    balance_top_n: int = 3
    load_switch_confidence_factor: float = 0.85
    preference_override_threshold: float = 0.8
    preference_confidence_factor: float = 0.9

    def __post_init__(self) -> None:
        for name in [
            "classification_fallback_confidence",
            "specialist_confidence",
            "non_specialist_confidence",
            "load_switch_confidence_factor",
            "preference_confidence_factor",
        ]:
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ConfigurationError(f"{name} must be in (0.0, 1.0], got {value}")

        for name in ["classification_saturation", "load_capacity", "balance_top_n"]:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

        if not self.complexity_low_max < self.complexity_medium_max <= self.complexity_max_score:
            raise ConfigurationError(
                "complexity thresholds must satisfy low_max < medium_max <= max_score, got "
                f"{self.complexity_low_max}, {self.complexity_medium_max}, "
                f"{self.complexity_max_score}"
            )

        if self.load_switch_margin < 0.0:
            raise ConfigurationError(
                f"load_switch_margin must be >= 0.0, got {self.load_switch_margin}"
            )

    def with_overrides(self, overrides: dict[str, Any]) -> HeuristicConfig:
        """Return a copy with known keys replaced; unknown keys are ignored."""
        known = {f.name: f.type for f in fields(self)}
        accepted: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                logger.warning("Ignoring unknown heuristic config key %r", key)
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{key} must be numeric, got {value!r}")
            accepted[key] = value
        return replace(self, **accepted)


DEFAULT_CONFIG = HeuristicConfig()


def _candidate_paths(path: str | Path | None) -> list[Path]:
    if path is not None:
        return [Path(path)]
    candidates: list[Path] = []
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path))
    candidates.append(DEFAULT_CONFIG_PATH)
    return candidates


def load_config(path: str | Path | None = None) -> HeuristicConfig:
    """Load heuristic overrides from the first readable JSON file.

    Missing files fall through to the next candidate; undecodable files are
    skipped with a warning. When nothing is found the defaults are returned.
    """
    for config_file in _candidate_paths(path):
        if not config_file.exists():
            continue
        try:
            data = json.loads(config_file.read_text())
        except json.JSONDecodeError as exc:
            logger.warning("Skipping unreadable heuristic config %s: %s", config_file, exc)
            continue
        if not isinstance(data, dict):
            logger.warning("Skipping heuristic config %s: expected a JSON object", config_file)
            continue
        logger.info("Loaded heuristic config from %s", config_file)
        return DEFAULT_CONFIG.with_overrides(data)

    return DEFAULT_CONFIG
