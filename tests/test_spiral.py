"""
Unit tests for the spiral drawing scorer.

Tests cover:
- Insufficient-data fallback below 50 points
- Malformed input rejection
- Subscores on synthetic drawings (clean spiral, stationary pen, duplicate timestamps)
- Accepted point formats
- Anti-monotonicity and determinism
- Risk level agreeing with the reported overall score
"""

import pytest # pyright: ignore[reportMissingImports]
import numpy as np
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring.errors import InvalidInputError
from scoring.results import ScoreStatus
import scoring.spiral as spiral_module
from scoring.risk import SPIRAL_RISK_CUTS, RiskLevel, classify_risk
from scoring.spiral import (
    INSUFFICIENT_DATA_MESSAGE,
    SpiralPoint,
    combine_spiral_scores,
    score_spiral
)


def make_spiral(n_points=200, dt_ms=50.0):
    """Archimedean spiral sampled at a constant rate."""
    points = []
    for i in range(n_points):
        theta = i * 0.1
        r = 2.0 + 0.25 * i
        points.append({
            'x': 200.0 + r * np.cos(theta),
            'y': 200.0 + r * np.sin(theta),
            'timestamp': i * dt_ms
        })
    return points


class TestInsufficientData:
    """Test the sparse-sample fallback."""

    def test_49_points(self):
        result = score_spiral(make_spiral(49))

        assert result.status is ScoreStatus.INSUFFICIENT_DATA
        assert result.is_insufficient
        assert result.tremor_score == 0.0
        assert result.smoothness_score == 0.0
        assert result.speed_score == 0.0
        assert result.consistency_score == 0.0
        assert result.overall_score == 0.0
        assert result.risk_level is RiskLevel.LOW
        assert result.message == INSUFFICIENT_DATA_MESSAGE

    def test_50_points_is_scored(self):
        result = score_spiral(make_spiral(50))
        assert result.status is ScoreStatus.OK
        assert result.message is None


class TestInvalidInput:
    """Test malformed point buffers."""

    def test_empty(self):
        with pytest.raises(InvalidInputError):
            score_spiral([])

    def test_none(self):
        with pytest.raises(InvalidInputError):
            score_spiral(None)

    def test_missing_coordinate(self):
        points = make_spiral(60)
        points[10] = {'x': 1.0, 'timestamp': 500.0}
        with pytest.raises(InvalidInputError):
            score_spiral(points)

    def test_non_finite(self):
        points = make_spiral(60)
        points[3] = {'x': float('nan'), 'y': 0.0, 'timestamp': 150.0}
        with pytest.raises(InvalidInputError):
            score_spiral(points)

    @pytest.mark.parametrize("points", [5, "xyz", {"x": 1.0, "y": 2.0}])
    def test_not_a_sequence(self, points):
        with pytest.raises(InvalidInputError):
            score_spiral(points)


class TestSubscores:
    """Test subscores on synthetic drawings."""

    def test_clean_spiral(self):
        result = score_spiral(make_spiral())

        assert result.status is ScoreStatus.OK
        assert result.tremor_score < 1.0
        assert result.smoothness_score > 95.0
        assert result.consistency_score > 90.0
        assert result.overall_score >= 75.0
        assert result.risk_level is RiskLevel.LOW

    def test_stationary_pen(self):
        """No movement: no tremor, perfect smoothness, zero speed, flat radius."""
        points = [{'x': 10.0, 'y': 10.0, 'timestamp': i * 20.0} for i in range(60)]
        result = score_spiral(points)

        assert result.tremor_score == 0.0
        assert result.smoothness_score == 100.0
        assert result.speed_score == 0.0
        assert result.consistency_score == 100.0
        assert result.overall_score == pytest.approx(80.0)
        assert result.risk_level is RiskLevel.LOW

    def test_duplicate_timestamps_are_skipped(self):
        """Steps with dt <= 1 ms never divide by zero."""
        points = [{'x': float(i), 'y': 0.0, 'timestamp': 0.0} for i in range(60)]
        result = score_spiral(points)

        assert result.status is ScoreStatus.OK
        assert result.tremor_score == 0.0
        assert result.speed_score == 0.0
        assert result.smoothness_score == 100.0
        assert result.consistency_score == pytest.approx(0.0, abs=0.1)
        assert result.overall_score == pytest.approx(55.0, abs=0.1)
        assert result.risk_level is RiskLevel.MODERATE

    def test_scores_bounded_for_noise(self):
        rng = np.random.default_rng(0)
        points = [
            (float(x), float(y), float(i * 16))
            for i, (x, y) in enumerate(rng.normal(0, 200, size=(120, 2)))
        ]
        result = score_spiral(points)

        for value in result.subscores().values():
            assert 0.0 <= value <= 100.0
        assert 0.0 <= result.overall_score <= 100.0
        assert result.tremor_score == 100.0
        assert result.smoothness_score == 0.0


class TestPointFormats:
    """Test the accepted point representations."""

    def test_formats_agree(self):
        raw = make_spiral(80)
        as_points = [SpiralPoint(p['x'], p['y'], p['timestamp']) for p in raw]
        as_tuples = [(p['x'], p['y'], p['timestamp']) for p in raw]
        as_ms_keys = [{'x': p['x'], 'y': p['y'], 'timestamp_ms': p['timestamp']} for p in raw]

        expected = score_spiral(raw)
        assert score_spiral(as_points) == expected
        assert score_spiral(as_tuples) == expected
        assert score_spiral(as_ms_keys) == expected


def jittered_pen(scale, n_points=80, dt_ms=20.0):
    """Pen resting at (100, 100) plus a fixed noise pattern scaled by `scale`."""
    noise = np.random.default_rng(42).normal(0, 1, size=(n_points, 2))
    return [
        (100.0 + scale * dx, 100.0 + scale * dy, i * dt_ms)
        for i, (dx, dy) in enumerate(noise)
    ]


def uneven_line(unevenness, n_points=60, dt_ms=20.0):
    """Straight stroke whose step length alternates 1 +/- unevenness."""
    points = [(0.0, 0.0, 0.0)]
    for i in range(1, n_points):
        step = 1.0 + unevenness * (1 if i % 2 else -1)
        points.append((points[-1][0] + step, 0.0, i * dt_ms))
    return points


class TestMonotonicity:
    """More irregularity never improves a subscore."""

    SCALES = [0.0, 0.001, 0.01, 0.05, 0.2, 1.0, 5.0]

    def test_tremor_never_decreases_with_noise(self):
        tremor = [score_spiral(jittered_pen(s)).tremor_score for s in self.SCALES]
        assert tremor == sorted(tremor)
        assert tremor[0] == 0.0
        assert tremor[-1] > tremor[0]

    def test_smoothness_never_increases_with_jerk(self):
        smoothness = [score_spiral(jittered_pen(s)).smoothness_score for s in self.SCALES]
        assert smoothness == sorted(smoothness, reverse=True)
        assert smoothness[0] == 100.0
        assert smoothness[-1] < smoothness[0]

    def test_speed_never_increases_with_cv(self):
        speeds = [
            score_spiral(uneven_line(u)).speed_score
            for u in [0.0, 0.1, 0.3, 0.6, 0.9]
        ]
        assert speeds == sorted(speeds, reverse=True)
        assert speeds[0] == 100.0
        assert speeds[-1] < speeds[0]


class TestDeterminism:
    """Identical input gives identical output."""

    def test_repeated_calls(self):
        points = make_spiral()
        first = score_spiral(points)

        assert score_spiral(points) == first
        assert score_spiral(list(points)) == first
        assert points == make_spiral()


class TestRiskAgreement:
    """risk_level is derived from the reported overall score."""

    def test_rounded_to_cut_is_low(self, monkeypatch):
        monkeypatch.setattr(spiral_module, 'combine_spiral_scores', lambda *scores: 74.96)
        result = score_spiral(make_spiral(60))

        assert result.overall_score == 75.0
        assert result.risk_level is RiskLevel.LOW

    def test_just_below_cut_stays_moderate(self, monkeypatch):
        monkeypatch.setattr(spiral_module, 'combine_spiral_scores', lambda *scores: 74.94)
        result = score_spiral(make_spiral(60))

        assert result.overall_score == 74.9
        assert result.risk_level is RiskLevel.MODERATE

    def test_agrees_for_noisy_drawings(self):
        rng = np.random.default_rng(3)
        for scale in (0.5, 2.0, 10.0, 50.0):
            points = [(x, y, i * 16.0) for i, (x, y) in enumerate(rng.normal(0, scale, size=(80, 2)))]
            result = score_spiral(points)
            assert result.risk_level is classify_risk(result.overall_score, *SPIRAL_RISK_CUTS)


class TestCombine:
    """Test the weighted composite."""

    def test_best_and_worst(self):
        assert combine_spiral_scores(0.0, 100.0, 100.0, 100.0) == pytest.approx(100.0)
        assert combine_spiral_scores(100.0, 0.0, 0.0, 0.0) == pytest.approx(0.0)

    def test_weights(self):
        # (100 - 40) * 0.25 + 80 * 0.30 + 50 * 0.20 + 60 * 0.25
        assert combine_spiral_scores(40.0, 80.0, 50.0, 60.0) == pytest.approx(64.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
