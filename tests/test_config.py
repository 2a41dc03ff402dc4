"""Tests for heuristic configuration loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from agentcoord import config as config_module
from agentcoord.config import CONFIG_ENV_VAR, DEFAULT_CONFIG, HeuristicConfig, load_config
from agentcoord.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the real ~/.coordinator out of the lookup."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    default_path = tmp_path / "home" / "heuristics.json"
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", default_path)
    return default_path


class TestHeuristicConfig:
    def test_defaults(self) -> None:
        assert DEFAULT_CONFIG.classification_fallback_confidence == 0.3
        assert DEFAULT_CONFIG.specialist_bonus == 3.0
        assert DEFAULT_CONFIG.load_capacity == 5

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.load_capacity = 10

    @pytest.mark.parametrize(
        "overrides",
        [
            {"specialist_confidence": 0.0},
            {"non_specialist_confidence": 1.5},
            {"load_capacity": 0},
            {"balance_top_n": 2.5},
            {"complexity_low_max": 3.5},
            {"load_switch_margin": -0.1},
        ],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ConfigurationError):
            HeuristicConfig(**overrides)

    def test_with_overrides(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            updated = DEFAULT_CONFIG.with_overrides({"load_capacity": 10, "bogus": 1})

        assert updated.load_capacity == 10
        assert DEFAULT_CONFIG.load_capacity == 5
        assert "bogus" in caplog.text

    def test_with_overrides_rejects_non_numeric(self) -> None:
        with pytest.raises(ConfigurationError):
            DEFAULT_CONFIG.with_overrides({"specialist_bonus": "lots"})


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nope.json") == DEFAULT_CONFIG

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "heuristics.json"
        path.write_text(json.dumps({"load_switch_margin": 0.5}))

        assert load_config(path).load_switch_margin == 0.5

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"balance_top_n": 2}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert load_config().balance_top_n == 2

    def test_default_location(self, isolated_home: Path) -> None:
        isolated_home.parent.mkdir(parents=True)
        isolated_home.write_text(json.dumps({"specialist_bonus": 4.0}))

        assert load_config().specialist_bonus == 4.0

    def test_bad_json_falls_through(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        isolated_home: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        broken = tmp_path / "broken.json"
        broken.write_text("{not json")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(broken))
        isolated_home.parent.mkdir(parents=True)
        isolated_home.write_text(json.dumps({"load_capacity": 7}))

        with caplog.at_level(logging.WARNING):
            loaded = load_config()

        assert loaded.load_capacity == 7
        assert "broken.json" in caplog.text

    def test_non_object_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")

        assert load_config(path) == DEFAULT_CONFIG

    def test_wrong_type_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "typed.json"
        path.write_text(json.dumps({"load_capacity": "five"}))

        with pytest.raises(ConfigurationError):
            load_config(path)
