"""Tests for the skill matching engine."""

import pytest

from models.schemas.matching import FuzzyMatchType, JobSkill, SeekerSkill, SkillSource
from services.matching import (
    SkillSetScore,
    _round_half_up,
    _round_half_up_hundredths,
    compute_seeker_relevance,
    find_fuzzy_match,
    match_skills_enhanced,
    proficiency_multiplier,
    score_skill_set,
    source_multiplier,
)


def seeker(uri, title="", proficiency=3, source="explicit"):
    return SeekerSkill(uri=uri, title=title, proficiency=proficiency, source=source)


def job(uri, title="", essential=True):
    return JobSkill(uri=uri, title=title, is_essential=essential)


def run(seekers, jobs, co_map=None, titles=None):
    return match_skills_enhanced(seekers, jobs, co_map or {}, titles or {})


class TestExactMatches:
    def test_expert_exact_match(self):
        result = run([seeker("A", "Python", proficiency=5)], [job("A", "Python")])
        assert result.match_score == 92
        assert result.matched_skills == ["A"]
        assert result.missing_skills == []
        assert result.score_breakdown.essential_exact == 1
        assert result.score_breakdown.essential_fuzzy == 0
        assert result.score_breakdown.proficiency_bonus == pytest.approx(0.05)
        assert result.score_breakdown.max_possible == 1

    def test_inferred_source_discounted(self):
        result = run([seeker("A", "Python", source="inferred")], [job("A", "Python")])
        assert result.match_score == 68

    def test_low_proficiency_discounted_and_no_negative_bonus(self):
        result = run([seeker("A", "Python", proficiency=1)], [job("A", "Python")])
        assert result.match_score == 56
        assert result.score_breakdown.proficiency_bonus == 0.0

    def test_unknown_source_scores_neutral(self):
        skill = seeker("A", "Python", source="imported")
        assert skill.source == "imported"
        result = run([skill], [job("A", "Python")])
        assert result.match_score == 80

    def test_optional_only(self):
        result = run([seeker("A", "Python")], [job("A", "Python", essential=False)])
        assert result.match_score == 15
        assert result.optional_matched_skills == ["A"]
        assert result.matched_skills == []
        assert result.score_breakdown.optional_exact == 1

    def test_score_capped_at_100(self):
        seekers = [seeker("A", "Python", proficiency=5), seeker("B", "SQL", proficiency=5)]
        jobs = [job("A", "Python"), job("B", "SQL", essential=False)]
        assert run(seekers, jobs).match_score == 100

    def test_bonus_averaged_over_all_required(self):
        jobs = [job("A", "Python")] + [job(f"J{i}", f"unrelated {i}") for i in range(4)]
        result = run([seeker("A", "Python", proficiency=4)], jobs)
        assert result.score_breakdown.proficiency_bonus == pytest.approx(0.02)
        assert result.score_breakdown.max_possible == 5


class TestFuzzyMatches:
    def test_co_occurrence_match(self):
        result = run(
            [seeker("A", "Python")],
            [job("B", "Cooking")],
            co_map={"A": {"B": 0.2}},
        )
        assert result.match_score == 8
        assert result.score_breakdown.essential_fuzzy == 1
        assert result.matched_skills == []
        assert result.missing_skills == []
        fuzzy = result.fuzzy_matches[0]
        assert fuzzy.type == FuzzyMatchType.CO_OCCURRENCE
        assert fuzzy.similarity == pytest.approx(0.2)
        assert (fuzzy.seeker_uri, fuzzy.job_uri) == ("A", "B")

    def test_co_occurrence_below_threshold_is_missing(self):
        result = run(
            [seeker("A", "Python")],
            [job("B", "Cooking")],
            co_map={"A": {"B": 0.1}},
        )
        assert result.match_score == 0
        assert result.missing_skills == ["B"]
        assert result.fuzzy_matches == []

    def test_title_similarity_match(self):
        result = run([seeker("S", "Python Developer")], [job("J", "Senior Python Developer")])
        assert result.match_score == 19
        fuzzy = result.fuzzy_matches[0]
        assert fuzzy.type == FuzzyMatchType.TITLE_SIMILARITY
        assert fuzzy.similarity == pytest.approx(0.8)
        assert result.fuzzy_titles[0].seeker_title == "Python Developer"
        assert result.fuzzy_titles[0].job_title == "Senior Python Developer"

    def test_title_credit_beats_weaker_co_occurrence(self):
        result = run(
            [seeker("S", "python")],
            [job("J", "Python")],
            co_map={"S": {"J": 0.2}},
        )
        assert result.fuzzy_matches[0].type == FuzzyMatchType.TITLE_SIMILARITY

    def test_co_occurrence_wins_tie_with_title(self):
        # 0.6 x 0.5 == 1.0 x 0.3
        result = run(
            [seeker("S", "python")],
            [job("J", "Python")],
            co_map={"S": {"J": 0.6}},
        )
        assert result.fuzzy_matches[0].type == FuzzyMatchType.CO_OCCURRENCE

    def test_earlier_seeker_skill_wins_tie(self):
        seekers = [seeker("S1", "alpha"), seeker("S2", "beta")]
        found = find_fuzzy_match(job("J", "gamma"), seekers, {"S1": {"J": 0.4}, "S2": {"J": 0.4}})
        credit, detail, winner = found
        assert credit == pytest.approx(0.2)
        assert detail.seeker_uri == "S1"
        assert winner.uri == "S1"

    def test_strictly_better_later_skill_wins(self):
        seekers = [seeker("S1", "alpha"), seeker("S2", "beta")]
        _, detail, _ = find_fuzzy_match(
            job("J", "gamma"), seekers, {"S1": {"J": 0.2}, "S2": {"J": 0.4}}
        )
        assert detail.seeker_uri == "S2"

    def test_no_candidate(self):
        assert find_fuzzy_match(job("J", "gamma"), [seeker("S", "alpha")], {}) is None

    def test_seeker_skill_reused_across_job_skills(self):
        result = run(
            [seeker("S", "alpha")],
            [job("J1", "gamma"), job("J2", "delta", essential=False)],
            co_map={"S": {"J1": 0.4, "J2": 0.4}},
        )
        assert result.score_breakdown.essential_fuzzy == 1
        assert result.score_breakdown.optional_fuzzy == 1
        assert {f.job_uri for f in result.fuzzy_matches} == {"J1", "J2"}

    def test_fuzzy_is_a_third_bucket(self):
        seekers = [seeker("A", "alpha"), seeker("S", "beta")]
        jobs = [job("A", "alpha"), job("B", "gamma"), job("C", "delta")]
        result = run(seekers, jobs, co_map={"S": {"B": 0.5}})
        assert result.matched_skills == ["A"]
        assert result.missing_skills == ["C"]
        assert [f.job_uri for f in result.fuzzy_matches] == ["B"]
        assert "B" not in result.matched_skills + result.missing_skills
        total = len(result.matched_skills) + len(result.missing_skills) + len(result.fuzzy_matches)
        assert total == result.score_breakdown.max_possible

    def test_fuzzy_credit_uses_substitute_multipliers(self):
        result = run(
            [seeker("S", "alpha", proficiency=5, source="inferred")],
            [job("J", "gamma")],
            co_map={"S": {"J": 1.0}},
        )
        # 0.5 credit x 0.85 x 1.15 = 0.48875, then x 0.80 plus full bonus
        assert result.match_score == 39


class TestRelevanceAndTitles:
    def test_seeker_relevance(self):
        seekers = [seeker("A", "alpha"), seeker("X", "zzz"), seeker("T", "data analysis")]
        jobs = [job("A", "alpha"), job("B", "data analysis tools")]
        assert compute_seeker_relevance(seekers, jobs, {}) == 67

    def test_relevance_via_co_occurrence(self):
        assert compute_seeker_relevance([seeker("S", "x")], [job("J", "y")], {"S": {"J": 0.15}}) == 100

    def test_titles_resolved_with_uri_fallback(self):
        result = run(
            [seeker("A")],
            [job("A"), job("B"), job("C", essential=False)],
            titles={"A": "Python", "C": "SQL"},
        )
        assert result.matched_titles == ["Python"]
        assert result.missing_titles == ["B"]
        assert result.optional_missing_titles == ["SQL"]

    def test_order_follows_job_skills(self):
        result = run([seeker("C"), seeker("A")], [job("A"), job("B"), job("C"), job("D")])
        assert result.matched_skills == ["A", "C"]
        assert result.missing_skills == ["B", "D"]


class TestEdgeCases:
    def test_empty_inputs(self):
        result = run([], [])
        assert result.match_score == 0
        assert result.seeker_relevance == 0
        assert result.score_breakdown.max_possible == 0

    def test_no_job_skills(self):
        result = run([seeker("A", "Python")], [])
        assert result.match_score == 0
        assert result.seeker_relevance == 0

    def test_no_seeker_skills(self):
        result = run([], [job("A", "Python"), job("B", "SQL", essential=False)])
        assert result.match_score == 0
        assert result.missing_skills == ["A"]
        assert result.optional_missing_skills == ["B"]

    def test_deterministic(self):
        seekers = [seeker("A", "alpha", 4), seeker("S", "beta", 2, "inferred")]
        jobs = [job("A", "alpha"), job("B", "beta gamma"), job("C", "delta", essential=False)]
        co_map = {"S": {"C": 0.3}}
        assert run(seekers, jobs, co_map) == run(seekers, jobs, co_map)

    def test_score_bounds(self):
        seekers = [seeker(f"S{i}", f"skill {i}", proficiency=(i % 5) + 1) for i in range(8)]
        jobs = [job(f"S{i}", f"skill {i}", essential=i % 2 == 0) for i in range(0, 12, 2)]
        result = run(seekers, jobs)
        assert 0 <= result.match_score <= 100
        assert 0 <= result.seeker_relevance <= 100
        assert 0.0 <= result.score_breakdown.proficiency_bonus <= 0.05


class TestMultipliers:
    def test_proficiency_multiplier(self):
        assert [proficiency_multiplier(p) for p in range(1, 6)] == [0.70, 0.85, 1.00, 1.10, 1.15]

    def test_proficiency_clamped_on_construction(self):
        assert seeker("A", proficiency=9).proficiency == 5
        assert seeker("A", proficiency=0).proficiency == 1
        assert SeekerSkill(uri="A", proficiency=None).proficiency == 3
        assert SeekerSkill(uri="A", proficiency="high").proficiency == 3

    def test_source_multiplier(self):
        assert source_multiplier(SkillSource.EXPLICIT) == 1.0
        assert source_multiplier(SkillSource.INFERRED) == 0.85
        assert source_multiplier("something-else") == 1.0

    def test_source_parsed_case_insensitively(self):
        assert seeker("A", source="INFERRED").source == SkillSource.INFERRED

    def test_round_half_up(self):
        assert _round_half_up(2.5) == 3
        assert _round_half_up(47.5) == 48
        assert _round_half_up(0.49) == 0

    def test_round_half_up_hundredths(self):
        # round(0.125, 2) would give 0.12
        assert _round_half_up_hundredths(0.125) == 0.13
        assert _round_half_up_hundredths(0.05) == 0.05
        assert _round_half_up_hundredths(0.0) == 0.0


class TestNonLatinTitles:
    def test_identical_non_latin_titles_fuzzy_match(self):
        result = run([seeker("S", "日本語")], [job("J", "日本語")])
        assert result.missing_skills == []
        assert result.fuzzy_matches[0].type == FuzzyMatchType.TITLE_SIMILARITY
        assert result.fuzzy_matches[0].similarity == 1.0
        assert result.seeker_relevance == 100
        assert result.match_score == 24


def test_skill_set_score_accumulates():
    scored = score_skill_set(
        [job("A", "alpha"), job("B", "beta"), job("C", "gamma")],
        [seeker("A", "alpha", proficiency=4), seeker("S", "beta")],
        {},
    )
    assert isinstance(scored, SkillSetScore)
    assert scored.exact_uris == ["A"]
    assert scored.missing_uris == ["C"]
    assert [f.job_uri for f in scored.fuzzy_matches] == ["B"]
    assert scored.matched_count == 2
    assert scored.prof_multiplier_sum == pytest.approx(2.10)
    assert scored.total_score == pytest.approx(1.10 + 0.3)
    assert SkillSetScore().exact_uris == []
