"""
Growth stage strategies for z-score curve lookups.

Each growth stage decides which curve metric applies and how an age is keyed
into its curve partition. Strategies are registered automatically by
introspecting StageStrategy subclasses.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Tuple, Type

from pydantic import BaseModel, ConfigDict, field_validator

from .units import AgeUnit, GrowthStage, rounded_years, to_months


class CurveMetric(str, Enum):
    WEIGHT = "weight"
    HEIGHT = "height"
    BMI = "bmi"


class AgeRange(BaseModel):
    """
    Ages covered by a growth stage's curve data.
    """

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    unit: AgeUnit = AgeUnit.MONTH

    @field_validator("max", mode="after")
    @classmethod
    def min_le_max(cls, v: float, info: Any) -> float:
        """Validate that min <= max."""
        if info.data.get("min", float("-inf")) > v:
            raise ValueError("age range min must be <= max")
        return v

    def contains_months(self, months: float) -> bool:
        return to_months(self.min, self.unit) <= months <= to_months(self.max, self.unit)


class StageStrategy(ABC):
    """
    Abstract base class for growth stage curve strategies.

    Subclasses are named after the stage they serve, e.g. InfantStrategy
    handles GrowthStage.INFANT.
    """

    def __init__(self, age_range: AgeRange) -> None:
        self.age_range = age_range

    @property
    def stage(self) -> GrowthStage:
        return GrowthStage(type(self).__name__.replace("Strategy", "").upper())

    @abstractmethod
    def curve_metric(self, requested: CurveMetric) -> CurveMetric:
        """
        Curve metric used for a requested metric at this stage.
        """
        pass

    def lookup_key(self, age: float, unit: AgeUnit) -> Tuple[float, AgeUnit]:
        """Age and unit identifying a curve entry; native values by default."""
        return age, AgeUnit(unit)

    def covers(self, age: float, unit: AgeUnit) -> bool:
        return self.age_range.contains_months(to_months(age, unit))


class InfantStrategy(StageStrategy):
    """Weight or height curves as requested, indexed by native age."""

    def curve_metric(self, requested: CurveMetric) -> CurveMetric:
        return CurveMetric(requested)


class ChildStrategy(StageStrategy):
    """Weight or height curves as requested, indexed by native age."""

    def curve_metric(self, requested: CurveMetric) -> CurveMetric:
        return CurveMetric(requested)


class AdolescentStrategy(StageStrategy):
    """BMI curves only, indexed by whole years."""

    def curve_metric(self, requested: CurveMetric) -> CurveMetric:
        return CurveMetric.BMI

    def lookup_key(self, age: float, unit: AgeUnit) -> Tuple[float, AgeUnit]:
        return rounded_years(age, unit), AgeUnit.YEAR


def _build_registry() -> Dict[GrowthStage, Type[StageStrategy]]:
    """Build the registry by discovering StageStrategy subclasses."""
    registry = {}
    for cls in StageStrategy.__subclasses__():
        # InfantStrategy -> GrowthStage.INFANT
        stage = GrowthStage(cls.__name__.replace("Strategy", "").upper())
        registry[stage] = cls
    return registry


registry = _build_registry()
