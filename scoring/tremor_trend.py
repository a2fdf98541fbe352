"""
Tremor trend analysis for wearable sensor readings.

Classifies a history of tremor readings (dominant frequency in Hz and an
arbitrary-unit amplitude) along two axes:

Severity:
- Severe: mean frequency within 4-6 Hz and mean amplitude > 40
- Moderate: mean frequency within 4-6 Hz and mean amplitude >= 20
- Mild: everything else

Stability:
- Worsening: amplitude rises with reading order (positive slope, R² >= 0.5)
  and the late-half mean exceeds the early-half mean by >= 10%
- Fluctuating: amplitude CV above 0.3 without a clear upward trend
- Stable: otherwise

Clinical rationale:
- Parkinsonian rest tremor typically occurs at 4-6 Hz
- Amplitude tracks tremor intensity; a sustained rise warrants review
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, Union

import numpy as np

from .errors import InvalidInputError, require_samples
from .numeric import coefficient_of_variation, linear_regression, mean, round_score
from .results import ScoreStatus, ScoreResultMixin

logger = logging.getLogger(__name__)

MIN_READINGS = 3

PARKINSONIAN_BAND_HZ = (4.0, 6.0)
SEVERE_AMPLITUDE = 40.0
MODERATE_AMPLITUDE = 20.0

TREND_MIN_R_SQUARED = 0.5
TREND_MIN_INCREASE_PERCENT = 10.0
FLUCTUATION_CV = 0.3

INSUFFICIENT_DATA_MESSAGE = (
    "Not enough tremor readings to assess a trend. Keep the sensor on for longer."
)


class TremorSeverity(Enum):
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"


class TremorStability(Enum):
    STABLE = "Stable"
    FLUCTUATING = "Fluctuating"
    WORSENING = "Worsening"


@dataclass(frozen=True)
class TremorReading:
    """Single wearable reading."""
    frequency_hz: float
    amplitude: float
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class TremorTrendResult(ScoreResultMixin):
    """
    Tremor history assessment.

    Attributes:
        severity: Mild / Moderate / Severe
        stability: Stable / Fluctuating / Worsening
        key_observation: Single most important takeaway
        mean_frequency_hz: Mean dominant frequency
        mean_amplitude: Mean amplitude
        amplitude_change_percent: Late-half vs early-half amplitude change
        reading_count: Number of readings analyzed
    """
    severity: TremorSeverity
    stability: TremorStability
    key_observation: str
    mean_frequency_hz: float
    mean_amplitude: float
    amplitude_change_percent: Optional[float]
    reading_count: int
    status: ScoreStatus = ScoreStatus.OK
    message: Optional[str] = None
    recommendation: Optional[str] = None

    test_type: ClassVar[str] = "tremor"


ReadingLike = Union[TremorReading, Mapping]


def analyze_tremor_trend(readings: Sequence[ReadingLike]) -> TremorTrendResult:
    """
    Assess severity and stability of a tremor reading history.

    Args:
        readings: TremorReading objects or mappings with 'frequency' /
                  'amplitude' (or 'tremor_frequency' / 'tremor_amplitude')
                  and an optional 'timestamp'

    Returns:
        TremorTrendResult with a deterministic recommendation attached

    Raises:
        InvalidInputError: Empty or malformed readings
    """
    parsed = _parse_readings(readings)

    if len(parsed) < MIN_READINGS:
        logger.warning(f"Only {len(parsed)} tremor readings (need {MIN_READINGS})")
        return _insufficient_result(parsed)

    logger.info(f"Analyzing tremor trend from {len(parsed)} readings")

    frequencies = np.array([r.frequency_hz for r in parsed])
    amplitudes = np.array([r.amplitude for r in parsed])

    mean_frequency = mean(frequencies)
    mean_amplitude = mean(amplitudes)
    change_percent = _amplitude_change_percent(amplitudes)

    severity = _classify_severity(mean_frequency, mean_amplitude)
    stability = _classify_stability(amplitudes, change_percent)
    observation = _key_observation(mean_frequency, change_percent, stability)

    logger.info(f"Tremor trend: {severity.value} severity, {stability.value}")

    return TremorTrendResult(
        severity=severity,
        stability=stability,
        key_observation=observation,
        mean_frequency_hz=round_score(mean_frequency),
        mean_amplitude=round_score(mean_amplitude),
        amplitude_change_percent=(
            round_score(change_percent) if change_percent is not None else None
        ),
        reading_count=len(parsed),
        recommendation=tremor_recommendation(severity, stability)
    )


def tremor_recommendation(severity: TremorSeverity, stability: TremorStability) -> str:
    """Deterministic guidance for a severity/stability pair."""
    if severity is TremorSeverity.SEVERE or stability is TremorStability.WORSENING:
        return (
            "Your tremor patterns show signs of worsening or high severity. "
            "We strongly recommend sharing these results with your healthcare "
            "provider for a closer look."
        )
    if severity is TremorSeverity.MODERATE or stability is TremorStability.FLUCTUATING:
        return (
            "Your tremor patterns are showing some fluctuation or moderate severity. "
            "Continue regular monitoring and consider discussing these patterns "
            "with your healthcare provider at your next appointment."
        )
    return (
        "Your tremor patterns appear to be stable and mild. This is a positive "
        "sign. Continue with your regular monitoring schedule."
    )


def _in_band(frequency: float) -> bool:
    low, high = PARKINSONIAN_BAND_HZ
    return low <= frequency <= high


def _classify_severity(mean_frequency: float, mean_amplitude: float) -> TremorSeverity:
    if _in_band(mean_frequency):
        if mean_amplitude > SEVERE_AMPLITUDE:
            return TremorSeverity.SEVERE
        if mean_amplitude >= MODERATE_AMPLITUDE:
            return TremorSeverity.MODERATE
    return TremorSeverity.MILD


def _amplitude_change_percent(amplitudes: np.ndarray) -> Optional[float]:
    """Percent change of the late-half mean over the early-half mean."""
    half = len(amplitudes) // 2
    early_mean = mean(amplitudes[:half])
    late_mean = mean(amplitudes[half:])

    if early_mean == 0:
        return None

    return (late_mean - early_mean) / early_mean * 100.0


def _classify_stability(
    amplitudes: np.ndarray,
    change_percent: Optional[float]
) -> TremorStability:
    fit = linear_regression(np.arange(len(amplitudes)), amplitudes)

    rising = (
        fit.slope > 0 and
        fit.r_squared >= TREND_MIN_R_SQUARED and
        change_percent is not None and
        change_percent >= TREND_MIN_INCREASE_PERCENT
    )
    if rising:
        return TremorStability.WORSENING

    cv = coefficient_of_variation(amplitudes)
    if cv is not None and cv > FLUCTUATION_CV:
        return TremorStability.FLUCTUATING

    return TremorStability.STABLE


def _key_observation(
    mean_frequency: float,
    change_percent: Optional[float],
    stability: TremorStability
) -> str:
    if change_percent is not None and (
        stability is TremorStability.WORSENING or abs(change_percent) >= TREND_MIN_INCREASE_PERCENT
    ):
        direction = "increased" if change_percent > 0 else "decreased"
        return (
            f"Tremor amplitude has {direction} by {abs(change_percent):.0f}% "
            f"in the latter half of the readings."
        )

    if _in_band(mean_frequency):
        return (
            f"Tremor frequency remains within the 4-6 Hz parkinsonian range "
            f"(mean {mean_frequency:.1f} Hz)."
        )

    return (
        f"Tremor frequency (mean {mean_frequency:.1f} Hz) lies outside the "
        f"4-6 Hz parkinsonian range."
    )


def _parse_readings(readings: Sequence[ReadingLike]) -> List[TremorReading]:
    readings = require_samples(readings, "Tremor readings")
    if len(readings) == 0:
        raise InvalidInputError("Tremor analysis requires at least one reading")

    parsed = []
    for index, reading in enumerate(readings):
        try:
            if isinstance(reading, TremorReading):
                values = (reading.frequency_hz, reading.amplitude, reading.timestamp)
            elif isinstance(reading, Mapping):
                values = (
                    reading.get('frequency', reading.get('tremor_frequency')),
                    reading.get('amplitude', reading.get('tremor_amplitude')),
                    reading.get('timestamp'),
                )
            else:
                raise TypeError(f"unsupported reading type {type(reading).__name__}")

            frequency = float(values[0])
            amplitude = float(values[1])
            timestamp = float(values[2]) if values[2] is not None else None
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Malformed tremor reading at index {index}: {reading!r}") from e

        if not (math.isfinite(frequency) and math.isfinite(amplitude)) or frequency < 0 or amplitude < 0:
            raise InvalidInputError(f"Invalid tremor reading at index {index}: {reading!r}")

        parsed.append(TremorReading(frequency, amplitude, timestamp))

    if all(r.timestamp is not None for r in parsed):
        parsed.sort(key=lambda r: r.timestamp)

    return parsed


def _insufficient_result(parsed: List[TremorReading]) -> TremorTrendResult:
    return TremorTrendResult(
        severity=TremorSeverity.MILD,
        stability=TremorStability.STABLE,
        key_observation=INSUFFICIENT_DATA_MESSAGE,
        mean_frequency_hz=round_score(mean([r.frequency_hz for r in parsed])),
        mean_amplitude=round_score(mean([r.amplitude for r in parsed])),
        amplitude_change_percent=None,
        reading_count=len(parsed),
        status=ScoreStatus.INSUFFICIENT_DATA,
        message=INSUFFICIENT_DATA_MESSAGE
    )
