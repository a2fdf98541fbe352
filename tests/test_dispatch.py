"""
Unit tests for payload dispatch and result serialization.
"""

import json

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring import TEST_TYPES, score_test
from scoring.errors import InvalidInputError
from scoring.results import ReactionResult, ScoreStatus, TappingResult, VoiceResult


class TestScoreTest:
    """Test modality dispatch."""

    def test_test_types(self):
        assert TEST_TYPES == ('spiral', 'tapping', 'reaction', 'voice')

    def test_reaction_snake_and_camel_case(self):
        snake = score_test('reaction', {'reaction_times': [300, 320, 310]})
        camel = score_test('reaction', {'reactionTimes': [300, 320, 310]})

        assert isinstance(snake, ReactionResult)
        assert snake == camel

    def test_reaction_bare_list(self):
        assert score_test('reaction', [300, 320, 310]).status is ScoreStatus.OK

    def test_tapping_default_duration(self):
        taps = [i * 200.0 for i in range(50)]
        result = score_test('tapping', {'tapTimestamps': taps}, default_duration=10)

        assert isinstance(result, TappingResult)
        assert result.taps_per_second == 5.0

    def test_tapping_payload_duration_wins(self):
        taps = [i * 200.0 for i in range(50)]
        result = score_test('tapping', {'tap_timestamps': taps, 'duration': 5}, default_duration=10)
        assert result.taps_per_second == 10.0

    def test_tapping_without_duration(self):
        with pytest.raises(InvalidInputError):
            score_test('tapping', {'tap_timestamps': [0, 100]})

    def test_tapping_requires_object(self):
        with pytest.raises(InvalidInputError):
            score_test('tapping', [0, 100, 200])

    def test_spiral_points_key(self):
        points = [{'x': 1.0, 'y': 2.0, 'timestamp': i * 10.0} for i in range(10)]
        result = score_test('spiral', {'points': points})
        assert result.is_insufficient

    def test_voice(self):
        result = score_test('voice', {'pitch': 'natural', 'volume': 'consistent', 'clarity': 'crisp', 'tremor': 'none'})
        assert isinstance(result, VoiceResult)

    def test_unknown_type(self):
        with pytest.raises(InvalidInputError, match="Unknown test type"):
            score_test('gait', {})


class TestSerialization:
    """Test flat JSON records."""

    def test_to_dict_is_json_ready(self):
        result = score_test('reaction', {'reaction_times': [300, 320, 310]})
        record = result.to_dict()

        assert record['test_type'] == "reaction"
        assert record['risk_level'] in ("Low", "Moderate", "High")
        assert record['status'] == "ok"
        assert record['message'] is None
        assert record['recommendation'] is None
        assert json.loads(json.dumps(record)) == record

    def test_insufficient_record_is_tagged(self):
        record = score_test('reaction', {'reaction_times': [300]}).to_dict()
        assert record['status'] == "insufficient_data"
        assert record['message']

    def test_subscores(self):
        result = score_test('reaction', {'reaction_times': [300, 320, 310]})
        assert set(result.subscores()) == {'reaction_time_score', 'consistency_score'}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
