"""
Age unit normalization and growth stage classification.

Reference records and patient ages are expressed either in months or in
years. Every comparison is made on ages converted to months.
"""

from enum import Enum
import math

from .config import ADOLESCENT_MIN_MONTHS, INFANT_MAX_MONTHS


class Gender(str, Enum):
    BOY = "BOY"
    GIRL = "GIRL"


class AgeUnit(str, Enum):
    MONTH = "MONTH"
    YEAR = "YEAR"


class GrowthStage(str, Enum):
    """Coarse age bucket selecting the curve partition and metric."""

    INFANT = "INFANT"
    CHILD = "CHILD"
    ADOLESCENT = "ADOLESCENT"


def to_months(age: float, unit: AgeUnit) -> float:
    """
    Convert an age to months.

    Examples:
        to_months(2, AgeUnit.YEAR)  -> 24
        to_months(6, AgeUnit.MONTH) -> 6
    """
    return age if AgeUnit(unit) is AgeUnit.MONTH else age * 12


def age_in_years(age: float, unit: AgeUnit) -> float:
    return to_months(age, unit) / 12


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def rounded_years(age: float, unit: AgeUnit) -> int:
    """Age in whole years, used to index year-based curve data."""
    return round_half_up(age_in_years(age, unit))


def growth_stage(age: float, unit: AgeUnit) -> GrowthStage:
    """
    Classify an age into a growth stage.

    The age is always converted to months first, so 72 months and 6 years
    classify identically:
        INFANT      < 24 months
        CHILD       24-119 months
        ADOLESCENT  >= 120 months (10 years)

    Args:
        age: Age value
        unit: Unit of the age value

    Returns:
        GrowthStage for the age
    """
    months = to_months(age, unit)
    if months < INFANT_MAX_MONTHS:
        return GrowthStage.INFANT
    if months < ADOLESCENT_MIN_MONTHS:
        return GrowthStage.CHILD
    return GrowthStage.ADOLESCENT


def format_age(age: float, unit: AgeUnit) -> str:
    """
    Format an age for display.

    Examples:
        format_age(0, AgeUnit.MONTH) -> 'Newborn'
        format_age(6, AgeUnit.MONTH) -> '6 months'
        format_age(1, AgeUnit.YEAR)  -> '1 year'
    """
    value = int(age) if float(age).is_integer() else age
    if AgeUnit(unit) is AgeUnit.MONTH:
        if value == 0:
            return "Newborn"
        return f"{value} month{'' if value == 1 else 's'}"
    return f"{value} year{'' if value == 1 else 's'}"
