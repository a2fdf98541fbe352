"""
Unit tests for the reaction time scorer.

Speed anchors: 280 ms -> 100, 800 ms -> 0.
Spread anchors: 60 ms -> 100, 250 ms -> 0.
Historical variants anchored the speed scale at 250/750 ms instead.
"""

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring.errors import InvalidInputError
from scoring.reaction_time import (
    INSUFFICIENT_DATA_MESSAGE,
    combine_reaction_scores,
    score_reaction
)
from scoring.results import ScoreStatus
from scoring.risk import REACTION_RISK_CUTS, RiskLevel, classify_risk


class TestReactionScoring:
    """Test scoring of complete trial sets."""

    def test_fast_and_steady(self):
        result = score_reaction([280, 280, 280])

        assert result.average_time == 280.0
        assert result.reaction_time_score == 100.0
        assert result.consistency_score == 100.0
        assert result.overall_score == 100.0
        assert result.risk_level is RiskLevel.LOW

    def test_slow_but_steady(self):
        result = score_reaction([800, 800, 800])

        assert result.reaction_time_score == 0.0
        assert result.consistency_score == 100.0
        assert result.overall_score == pytest.approx(40.0)
        assert result.risk_level is RiskLevel.HIGH

    def test_midpoint(self):
        result = score_reaction([540, 540, 540])
        assert result.reaction_time_score == pytest.approx(50.0)
        assert result.overall_score == pytest.approx(70.0)

    def test_variable_trials(self):
        """Population sd of [200, 400, 600] is ~163.3 ms."""
        result = score_reaction([200, 400, 600])

        assert result.average_time == 400.0
        assert result.reaction_time_score == pytest.approx(76.9)
        assert result.consistency_score == pytest.approx(45.6)
        assert result.overall_score == pytest.approx(64.4)
        assert result.risk_level is RiskLevel.MODERATE

    def test_very_slow_clamps_to_zero(self):
        result = score_reaction([1500, 2000, 2500])
        assert result.reaction_time_score == 0.0
        assert result.consistency_score == 0.0
        assert result.overall_score == 0.0


class TestEdgeCases:
    """Test sparse and malformed input."""

    def test_two_trials_is_insufficient(self):
        result = score_reaction([300, 320])

        assert result.status is ScoreStatus.INSUFFICIENT_DATA
        assert result.average_time == 0.0
        assert result.overall_score == 0.0
        assert result.risk_level is RiskLevel.LOW
        assert result.message == INSUFFICIENT_DATA_MESSAGE

    def test_empty_is_invalid(self):
        with pytest.raises(InvalidInputError):
            score_reaction([])

    @pytest.mark.parametrize("bad", [-10, float('inf'), "fast", None])
    def test_bad_trial_value(self, bad):
        with pytest.raises(InvalidInputError):
            score_reaction([300, bad, 320])

    @pytest.mark.parametrize("times", [5, "300,320,310", {"a": 300}])
    def test_not_a_sequence(self, times):
        with pytest.raises(InvalidInputError):
            score_reaction(times)


class TestMonotonicity:
    """Slower or more variable trials never improve a subscore."""

    def test_consistency_never_increases_with_spread(self):
        consistency = [
            score_reaction([400 - k, 400, 400 + k]).consistency_score
            for k in [0, 50, 100, 200, 400]
        ]
        assert consistency == sorted(consistency, reverse=True)
        assert consistency[0] == 100.0
        assert consistency[-1] == 0.0

    def test_speed_never_increases_with_latency(self):
        speed = [
            score_reaction([m - 20, m, m + 20]).reaction_time_score
            for m in [250, 280, 400, 600, 800, 900]
        ]
        assert speed == sorted(speed, reverse=True)
        assert speed[0] == 100.0
        assert speed[-1] == 0.0


class TestDeterminism:
    """Identical input gives identical output."""

    def test_repeated_calls(self):
        times = [312, 287, 455, 390, 301]
        first = score_reaction(times)

        assert score_reaction(times) == first
        assert score_reaction(tuple(times)) == first
        assert times == [312, 287, 455, 390, 301]


class TestRiskAgreement:
    """risk_level is derived from the reported overall score."""

    def test_rounded_to_cut_is_low(self):
        """Overall 69.96 is reported as 70.0 and therefore Low."""
        result = score_reaction([540.35] * 3)

        assert result.overall_score == 70.0
        assert result.risk_level is RiskLevel.LOW

    def test_agrees_across_latencies(self):
        for mean_ms in range(300, 900, 7):
            result = score_reaction([mean_ms - 30, mean_ms, mean_ms + 45])
            assert result.risk_level is classify_risk(result.overall_score, *REACTION_RISK_CUTS)


class TestCombine:
    """Test the weighted composite."""

    def test_weights(self):
        assert combine_reaction_scores(100.0, 0.0) == pytest.approx(60.0)
        assert combine_reaction_scores(0.0, 100.0) == pytest.approx(40.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
