"""
Tests for the delegation module.

Covers: models, registry, taxonomy, router.
"""

import logging

import pytest

from agentcoord.delegation.models import (
    Agent,
    AgentCapabilityProfile,
    AgentSelectionResult,
    ClassificationResult,
    TaskCategory,
)
from agentcoord.delegation.registry import (
    AGENT_CAPABILITIES,
    ALL_AGENTS,
    coerce_agent,
    get_agent_capabilities,
    is_specialist,
)
from agentcoord.delegation.router import (
    compare_agents_for_task,
    rank_agents,
    select_agent,
    select_agent_for_category,
)
from agentcoord.delegation.taxonomy import (
    CLASSIFICATION_RULES,
    ClassificationRule,
    classify_task,
)
from agentcoord.exceptions import CoordinatorError, NoAvailableAgentError, UnknownAgentError


# ═══════════════════════════════════════════════════════════════════════════
# MODELS
# ═══════════════════════════════════════════════════════════════════════════


class TestModels:
    def test_enums_compare_equal_to_strings(self):
        assert TaskCategory.QUICK_FIX == "quick_fix"
        assert Agent("gemini") is Agent.GEMINI

    def test_classification_confidence_must_be_positive(self):
        with pytest.raises(ValueError):
            ClassificationResult(category=TaskCategory.GENERAL, confidence=0.0)

    def test_classification_confidence_capped_at_one(self):
        with pytest.raises(ValueError):
            ClassificationResult(category=TaskCategory.GENERAL, confidence=1.2)

    def test_selection_rejects_recommended_in_alternatives(self):
        with pytest.raises(ValueError):
            AgentSelectionResult(
                recommended=Agent.CLAUDE,
                confidence=0.9,
                alternatives=[Agent.CLAUDE, Agent.CODEX],
            )

    def test_selection_ranked(self):
        result = AgentSelectionResult(
            recommended=Agent.CODEX, confidence=0.9, alternatives=[Agent.OPENCODE]
        )
        assert result.ranked == [Agent.CODEX, Agent.OPENCODE]

    def test_profile_rating_range(self):
        with pytest.raises(ValueError):
            AgentCapabilityProfile(
                agent=Agent.CODEX,
                categories=frozenset({TaskCategory.TESTING}),
                strengths=("fast",),
                weaknesses=("shallow",),
                speed_rating=6,
                quality_rating=3,
            )

    def test_profile_requires_strengths(self):
        with pytest.raises(ValueError):
            AgentCapabilityProfile(
                agent=Agent.CODEX,
                categories=frozenset({TaskCategory.TESTING}),
                strengths=(),
                weaknesses=("shallow",),
                speed_rating=5,
                quality_rating=3,
            )


# ═══════════════════════════════════════════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════════════════════════════════════════


class TestRegistry:
    def test_one_profile_per_agent(self):
        assert set(AGENT_CAPABILITIES) == set(Agent)
        assert ALL_AGENTS == (Agent.CLAUDE, Agent.GEMINI, Agent.CODEX, Agent.OPENCODE)

    def test_profiles_are_complete(self):
        for agent, profile in AGENT_CAPABILITIES.items():
            assert profile.agent == agent
            assert profile.categories
            assert profile.strengths
            assert profile.weaknesses
            assert 1 <= profile.speed_rating <= 5
            assert 1 <= profile.quality_rating <= 5

    def test_profiles_are_immutable(self):
        with pytest.raises(AttributeError):
            AGENT_CAPABILITIES[Agent.CLAUDE].speed_rating = 1

    def test_every_category_has_a_specialist(self):
        covered = set().union(*(p.categories for p in AGENT_CAPABILITIES.values()))
        assert covered == set(TaskCategory)

    def test_lookup_by_name(self):
        assert get_agent_capabilities("codex").speed_rating == 5
        assert get_agent_capabilities(Agent.CLAUDE).quality_rating == 5

    def test_unknown_agent(self):
        with pytest.raises(UnknownAgentError) as exc_info:
            get_agent_capabilities("gpt-9")
        assert isinstance(exc_info.value, KeyError)
        assert isinstance(exc_info.value, CoordinatorError)
        assert "gpt-9" in str(exc_info.value)

    def test_coerce_agent(self):
        assert coerce_agent("opencode") is Agent.OPENCODE
        with pytest.raises(UnknownAgentError):
            coerce_agent("")

    def test_is_specialist(self):
        assert is_specialist("gemini", TaskCategory.RESEARCH)
        assert not is_specialist("gemini", TaskCategory.COMPLEX_CODE)
        assert is_specialist("codex", TaskCategory.REFACTORING)
        assert is_specialist("claude", TaskCategory.REFACTORING)


# ═══════════════════════════════════════════════════════════════════════════
# TAXONOMY
# ═══════════════════════════════════════════════════════════════════════════


class TestClassifyTask:
    @pytest.mark.parametrize(
        "title, description, expected",
        [
            ("Research authentication patterns", None, TaskCategory.RESEARCH),
            ("Implement user service with caching", None, TaskCategory.COMPLEX_CODE),
            ("Fix typo in README", None, TaskCategory.QUICK_FIX),
            ("Write unit tests for the parser", None, TaskCategory.TESTING),
            ("Security review of payment flow", None, TaskCategory.REVIEW),
            ("Document the API", "Reference for every route", TaskCategory.DOCUMENTATION),
            ("Refactor and simplify the auth module", None, TaskCategory.REFACTORING),
            ("Configure and deploy staging", None, TaskCategory.GENERAL),
        ],
    )
    def test_categories(self, title, description, expected):
        result = classify_task(title, description)
        assert result.category == expected
        assert 0.0 < result.confidence <= 1.0
        assert str(expected) in result.reasoning

    def test_description_contributes(self):
        result = classify_task("Payments", "Investigate and compare providers")
        assert result.category == TaskCategory.RESEARCH
        assert result.keywords == ["investigate", "compare"]

    def test_keywords_are_from_winning_rule(self):
        result = classify_task("Fix typo in README")
        assert result.keywords == ["fix", "typo"]

    def test_inflections_match(self):
        result = classify_task("Fixed crashes on startup")
        assert result.category == TaskCategory.QUICK_FIX
        assert result.keywords == ["fix", "crash"]

    def test_word_boundaries(self):
        # "prefix" must not count as "fix"
        result = classify_task("prefix", "lorem ipsum")
        assert result.is_fallback
        assert result.category == TaskCategory.GENERAL

    def test_case_insensitive(self):
        assert classify_task("REFACTOR THE PARSER").category == TaskCategory.REFACTORING

    @pytest.mark.parametrize("title", ["", "   ", "Lorem ipsum dolor", "xyzzy"])
    def test_fallback(self, title):
        result = classify_task(title)
        assert result.category == TaskCategory.GENERAL
        assert result.confidence == pytest.approx(0.3)
        assert result.keywords == []
        assert "general" in result.reasoning
        assert "none matched" in result.reasoning

    def test_none_description(self):
        assert classify_task("Fix bug", None).category == TaskCategory.QUICK_FIX

    def test_earlier_rule_wins_ties(self):
        # complex_code "build" and documentation "docs" both weigh 1.0
        result = classify_task("build docs")
        assert result.category == TaskCategory.COMPLEX_CODE

    def test_confidence_saturates(self):
        result = classify_task("Fix bug patch hotfix crash")
        assert result.confidence == pytest.approx(1.0)

    def test_confidence_grows_with_matches(self):
        one = classify_task("Fix the login")
        two = classify_task("Fix the login bug")
        assert one.confidence < two.confidence

    def test_custom_rules(self):
        rules = (ClassificationRule(TaskCategory.TESTING, ("flaky",), weight=1.0),)
        result = classify_task("Flaky builds", rules=rules)
        assert result.category == TaskCategory.TESTING
        assert result.keywords == ["flaky"]

    def test_rule_table_covers_every_category(self):
        assert {rule.category for rule in CLASSIFICATION_RULES} == set(TaskCategory)


# ═══════════════════════════════════════════════════════════════════════════
# ROUTER
# ═══════════════════════════════════════════════════════════════════════════


class TestSelectAgentForCategory:
    @pytest.mark.parametrize(
        "category, expected",
        [
            (TaskCategory.RESEARCH, Agent.GEMINI),
            (TaskCategory.COMPLEX_CODE, Agent.CLAUDE),
            (TaskCategory.QUICK_FIX, Agent.CODEX),
            (TaskCategory.TESTING, Agent.CODEX),
            (TaskCategory.REVIEW, Agent.CLAUDE),
            (TaskCategory.DOCUMENTATION, Agent.GEMINI),
            (TaskCategory.REFACTORING, Agent.CLAUDE),
            (TaskCategory.GENERAL, Agent.OPENCODE),
        ],
    )
    def test_default_picks(self, category, expected):
        result = select_agent_for_category(category)
        assert result.recommended == expected
        assert result.confidence == pytest.approx(0.9)
        assert str(expected) in result.reasoning
        assert result.category == category

    def test_alternatives_exclude_recommended(self):
        result = select_agent_for_category(TaskCategory.QUICK_FIX)
        assert result.alternatives[0] == Agent.OPENCODE
        assert Agent.CODEX not in result.alternatives
        assert len(result.alternatives) == 3

    def test_accepts_plain_string_category(self):
        assert select_agent_for_category("testing").recommended == Agent.CODEX

    def test_restriction_without_specialist(self):
        result = select_agent_for_category(TaskCategory.RESEARCH, ["claude", "codex"])
        assert result.recommended == Agent.CLAUDE
        assert result.alternatives == [Agent.CODEX]
        assert result.confidence == pytest.approx(0.6)
        assert "No specialist" in result.reasoning

    def test_recommendation_comes_from_restriction(self):
        result = select_agent_for_category(TaskCategory.COMPLEX_CODE, ["gemini"])
        assert result.recommended == Agent.GEMINI
        assert result.alternatives == []

    def test_duplicate_restriction_entries(self):
        result = select_agent_for_category(TaskCategory.TESTING, ["codex", "codex"])
        assert result.recommended == Agent.CODEX
        assert result.alternatives == []

    def test_unknown_names_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="agentcoord.delegation.router"):
            result = select_agent_for_category(TaskCategory.TESTING, ["gpt-9", "opencode"])
        assert result.recommended == Agent.OPENCODE
        assert "gpt-9" in caplog.text

    def test_empty_restriction(self):
        with pytest.raises(NoAvailableAgentError):
            select_agent_for_category(TaskCategory.RESEARCH, [])

    def test_only_unknown_agents(self):
        with pytest.raises(NoAvailableAgentError) as exc_info:
            select_agent_for_category(TaskCategory.RESEARCH, ["gpt-9", "llama"])
        assert exc_info.value.requested == ["gpt-9", "llama"]
        assert isinstance(exc_info.value, ValueError)


class TestRankAgents:
    def test_scores_descending(self):
        ranked = rank_agents(TaskCategory.GENERAL)
        assert [agent for agent, _ in ranked] == [
            Agent.OPENCODE,
            Agent.GEMINI,
            Agent.CLAUDE,
            Agent.CODEX,
        ]
        scores = [score for _, score in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_speed_focus_for_quick_fix(self):
        ranked = dict(rank_agents(TaskCategory.QUICK_FIX))
        assert ranked[Agent.CODEX] == pytest.approx(5.9)
        assert ranked[Agent.OPENCODE] == pytest.approx(5.8)


class TestSelectAgent:
    def test_combines_confidences(self):
        classification = classify_task("Write unit tests for the parser")
        result = select_agent("Write unit tests for the parser")
        assert result.recommended == Agent.CODEX
        assert result.category == TaskCategory.TESTING
        assert result.confidence == pytest.approx(classification.confidence * 0.9)
        assert "codex" in result.reasoning

    def test_fallback_still_selects(self):
        result = select_agent("", "")
        assert result.recommended == Agent.OPENCODE
        assert result.confidence == pytest.approx(0.3 * 0.9)

    def test_restriction_passed_through(self):
        result = select_agent("Research caching strategies", available_agents=["codex"])
        assert result.recommended == Agent.CODEX

    def test_empty_restriction(self):
        with pytest.raises(NoAvailableAgentError):
            select_agent("Fix bug", available_agents=[])


class TestCompareAgents:
    @pytest.mark.parametrize(
        "title",
        ["Fix typo", "Research vector databases", "", "Refactor the scheduler"],
    )
    def test_four_ranked_entries(self, title):
        comparisons = compare_agents_for_task(title)
        assert len(comparisons) == 4
        assert {c.agent for c in comparisons} == set(Agent)
        scores = [c.score for c in comparisons]
        assert scores == sorted(scores, reverse=True)
        assert all(c.reasoning for c in comparisons)

    def test_specialist_scores_above_three(self):
        comparisons = compare_agents_for_task("Fix typo in README")
        top = comparisons[0]
        assert top.agent == Agent.CODEX
        assert top.score > 3
        assert "specialized" in top.reasoning

    def test_non_specialist_reasoning(self):
        comparisons = compare_agents_for_task("Research vector databases")
        by_agent = {c.agent: c for c in comparisons}
        assert "general option" in by_agent[Agent.CODEX].reasoning
        assert by_agent[Agent.CODEX].score < 3
