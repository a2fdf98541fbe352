"""
Modality dispatch over raw JSON-like payloads.

Used by the CLI and the REST API, which both receive a test type and a
decoded JSON body. Payload keys follow the capture widgets:

- spiral:   {"points": [{"x", "y", "timestamp"}, ...]}
- tapping:  {"tap_timestamps": [...], "duration": 10}
- reaction: {"reaction_times": [...]}
- voice:    {"pitch", "volume", "clarity", "tremor"}

camelCase keys emitted by the web client (tapTimestamps, reactionTimes)
are accepted as well.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import InvalidInputError
from .reaction_time import score_reaction
from .spiral import score_spiral
from .tapping import score_tapping
from .voice import score_voice

logger = logging.getLogger(__name__)

TEST_TYPES = ('spiral', 'tapping', 'reaction', 'voice')


def score_test(
    test_type: str,
    payload: Any,
    default_duration: Optional[float] = None
):
    """
    Score a raw payload for the given modality.

    Args:
        test_type: One of TEST_TYPES
        payload: Decoded JSON body
        default_duration: Tapping duration used when the payload has none

    Returns:
        The modality's result dataclass

    Raises:
        InvalidInputError: Unknown test type or malformed payload
    """
    handlers: Dict[str, Callable] = {
        'spiral': _score_spiral_payload,
        'tapping': lambda body: _score_tapping_payload(body, default_duration),
        'reaction': _score_reaction_payload,
        'voice': score_voice,
    }

    if test_type not in handlers:
        raise InvalidInputError(
            f"Unknown test type {test_type!r} (expected one of: {', '.join(TEST_TYPES)})"
        )

    logger.debug(f"Dispatching {test_type} payload")
    return handlers[test_type](payload)


def _first_key(payload: Mapping, *keys: str):
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _score_spiral_payload(payload: Any):
    if isinstance(payload, Mapping):
        payload = _first_key(payload, 'points')
    return score_spiral(payload)


def _score_tapping_payload(payload: Any, default_duration: Optional[float]):
    if not isinstance(payload, Mapping):
        raise InvalidInputError("Tapping payload must be an object with tap timestamps and duration")

    taps = _first_key(payload, 'tap_timestamps', 'tapTimestamps', 'taps')
    duration = _first_key(payload, 'duration', 'duration_seconds')
    if duration is None:
        duration = default_duration

    return score_tapping(taps, duration)


def _score_reaction_payload(payload: Any):
    if isinstance(payload, Mapping):
        payload = _first_key(payload, 'reaction_times', 'reactionTimes')
    return score_reaction(payload)
