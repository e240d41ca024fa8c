"""
Closeness score between a patient and the reference record for their age.

The score is a 0-100 match quality derived from the average percentage
deviation of weight (and height, when known) from the expected values:

    deviation <= 10%   -> 100
    10% .. 20%         -> 100 down to 90
    20% .. 30%         -> 90 down to 75
    30% .. 40%         -> 75 down to 60
    beyond 40%         -> one point per percent below 60, floored at 0
"""

from enum import Enum
from typing import Optional

from .config import (
    CLOSENESS_BANDS,
    CLOSENESS_FULL_SCORE_DEVIATION,
    CLOSENESS_LABEL_THRESHOLDS,
    CLOSENESS_TAIL_SCORE,
    CLOSENESS_TAIL_SLOPE,
)
from .reference import ReferenceRecord
from .units import round_half_up


class ClosenessLabel(str, Enum):
    EXCELLENT = "EXCELLENT"
    VERY_CLOSE = "VERY_CLOSE"
    CLOSE = "CLOSE"
    MODERATE = "MODERATE"
    SOME_DIFFERENCE = "SOME_DIFFERENCE"

    @property
    def text(self) -> str:
        """Default English wording; translations are resolved by the caller."""
        return _LABEL_TEXT[self]


_LABEL_TEXT = {
    ClosenessLabel.EXCELLENT: "Excellent match",
    ClosenessLabel.VERY_CLOSE: "Very close",
    ClosenessLabel.CLOSE: "Close match",
    ClosenessLabel.MODERATE: "Moderate",
    ClosenessLabel.SOME_DIFFERENCE: "Some difference",
}


def deviation_percent(actual: float, expected: float) -> float:
    """Absolute deviation of `actual` from `expected`, as a percentage."""
    return abs(actual - expected) / expected * 100


def closeness_from_deviation(deviation: float) -> int:
    """
    Map a percentage deviation to an integer closeness score.

    The mapping is continuous at every band boundary and non-increasing.
    """
    if deviation <= CLOSENESS_FULL_SCORE_DEVIATION:
        score = 100.0
    else:
        lower = CLOSENESS_FULL_SCORE_DEVIATION
        score = None
        for upper, start_score, slope in CLOSENESS_BANDS:
            if deviation <= upper:
                score = start_score - (deviation - lower) * slope
                break
            lower = upper
        if score is None:
            score = CLOSENESS_TAIL_SCORE - (deviation - lower) * CLOSENESS_TAIL_SLOPE

    return round_half_up(max(0.0, score))


def calculate_closeness(
    input_weight: float,
    input_height: Optional[float],
    age_matched: Optional[ReferenceRecord],
) -> int:
    """
    Score how close the patient is to the values expected for their age.

    Args:
        input_weight: Patient weight (kg)
        input_height: Patient height (cm), or None when unknown
        age_matched: Reference record matched by age

    Returns:
        Score from 0 to 100; 0 when there is no record to compare against
    """
    if age_matched is None:
        return 0

    deviation = deviation_percent(input_weight, age_matched.weight)
    if input_height is not None:
        height_deviation = deviation_percent(input_height, age_matched.height)
        deviation = (deviation + height_deviation) / 2

    return closeness_from_deviation(deviation)


def closeness_label(closeness: float) -> ClosenessLabel:
    for name, minimum in CLOSENESS_LABEL_THRESHOLDS.items():
        if closeness >= minimum:
            return ClosenessLabel[name]
    return ClosenessLabel.SOME_DIFFERENCE
