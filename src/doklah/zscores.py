"""
Z-Score Curve Utilities for Growth Metrics

This module looks up the discrete z-score curve points (z = -2, -1, 0, +1, +2)
supplied for each growth stage, age and gender, and places a measured value
on that curve by piecewise-linear interpolation. Values beyond the outermost
points are extrapolated with the slope of the nearest pair.

Infants and children are classified by weight-for-age and height-for-age;
adolescents by BMI-for-age, indexed by whole years.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging
import math

import numpy as np
from numba import jit
from pydantic import BaseModel, ConfigDict, Field, field_validator
from scipy import stats

from .config import Z_SCORE_POINTS
from .errors import CurveDataUnavailable
from .stages import AgeRange, CurveMetric, StageStrategy, registry
from .units import AgeUnit, Gender, GrowthStage, growth_stage, rounded_years

CurvePoints = Dict[int, float]

# Classification identifiers per metric, from severely low to severely high
CLASSIFICATION_LABELS: Dict[CurveMetric, Tuple[str, str, str, str, str]] = {
    CurveMetric.WEIGHT: (
        "SEVERELY_UNDERWEIGHT",
        "UNDERWEIGHT",
        "NORMAL",
        "OVERWEIGHT",
        "OBESE",
    ),
    CurveMetric.HEIGHT: (
        "SEVERELY_STUNTED",
        "STUNTED",
        "NORMAL",
        "TALL",
        "VERY_TALL",
    ),
    CurveMetric.BMI: (
        "SEVERELY_THIN",
        "THIN",
        "NORMAL",
        "OVERWEIGHT",
        "OBESE",
    ),
}


class CurveEntry(BaseModel):
    """
    Curve points for one gender at one age within a growth stage partition.

    Each metric curve maps z in {-2, -1, 0, 1, 2} to the expected measurement.
    `age_unit` may be omitted, in which case the entry matches the unit the
    stage indexes by.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    gender: Gender
    age: float = Field(ge=0)
    age_unit: Optional[AgeUnit] = Field(default=None, alias="ageUnit")
    weight: Optional[CurvePoints] = None
    height: Optional[CurvePoints] = None
    bmi: Optional[CurvePoints] = None
    median_height: Optional[float] = Field(default=None, gt=0, alias="medianHeight")

    @field_validator("weight", "height", "bmi", mode="after")
    @classmethod
    def validate_curve_points(cls, v: Optional[CurvePoints]) -> Optional[CurvePoints]:
        """Require all five z points with values strictly increasing in z."""
        if v is None:
            return v
        if set(v) != set(Z_SCORE_POINTS):
            raise ValueError(
                f"Curve must define z points {list(Z_SCORE_POINTS)}, got {sorted(v)}"
            )
        values = [v[z] for z in Z_SCORE_POINTS]
        if any(upper <= lower for lower, upper in zip(values, values[1:])):
            raise ValueError("Curve values must increase with z")
        return {z: v[z] for z in Z_SCORE_POINTS}

    def curve(self, metric: CurveMetric) -> Optional[CurvePoints]:
        metric = CurveMetric(metric)
        if metric is CurveMetric.WEIGHT:
            return self.weight
        if metric is CurveMetric.HEIGHT:
            return self.height
        return self.bmi

    def matches(self, gender: Gender, age: float, unit: AgeUnit) -> bool:
        if self.gender is not Gender(gender) or self.age != age:
            return False
        return self.age_unit is None or self.age_unit is AgeUnit(unit)


def _parse_stage(key: str) -> Optional[GrowthStage]:
    try:
        return GrowthStage(str(key).upper())
    except ValueError:
        return None


class ZScoreDataset:
    """
    Z-score curve entries partitioned by growth stage.

    The strategy map gives the age range each stage covers; a stage without
    a strategy has no usable curve data.

    Usage:
        dataset = ZScoreDataset.from_payload(payload)
        curves = curves_for(dataset, Gender.BOY, 6, AgeUnit.MONTH, CurveMetric.WEIGHT)
    """

    def __init__(
        self,
        partitions: Mapping[GrowthStage, Iterable[Union[CurveEntry, Dict[str, Any]]]],
        strategy: Mapping[GrowthStage, Union[AgeRange, Dict[str, Any]]],
    ) -> None:
        """
        Args:
            partitions: Curve entries per growth stage
            strategy: Age range per growth stage

        Raises:
            ValueError: If an entry is invalid or repeats a (gender, age, unit)
        """
        self._partitions: Dict[GrowthStage, Tuple[CurveEntry, ...]] = {}
        for stage, entries in partitions.items():
            stage = GrowthStage(stage)
            parsed: List[CurveEntry] = []
            seen = set()
            for raw in entries:
                entry = (
                    raw if isinstance(raw, CurveEntry) else CurveEntry.model_validate(raw)
                )
                key = (entry.gender, entry.age, entry.age_unit)
                if key in seen:
                    raise ValueError(
                        f"Duplicate {stage.value} curve entry for "
                        f"{entry.gender.value} at age {entry.age}"
                    )
                seen.add(key)
                parsed.append(entry)
            self._partitions[stage] = tuple(parsed)

        self._strategies: Dict[GrowthStage, StageStrategy] = {}
        for stage, age_range in strategy.items():
            stage = GrowthStage(stage)
            if not isinstance(age_range, AgeRange):
                age_range = AgeRange.model_validate(age_range)
            self._strategies[stage] = registry[stage](age_range)

        missing = [s.value for s in GrowthStage if s not in self._strategies]
        if missing:
            logging.warning(f"No z-score strategy for growth stages: {missing}")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ZScoreDataset":
        """
        Build a dataset from parsed JSON.

        Expected shape (stage keys are case-insensitive):
            {
                "strategy": {"infant": {"ageRange": {"min": 0, "max": 23, "unit": "MONTH"}}, ...},
                "infant": [{"gender": "BOY", "age": 0, "weight": {"-2": 2.5, ...}}, ...],
                ...
            }

        Partitions may also be nested under a "data" key.

        Raises:
            ValueError: If the payload structure or an entry is invalid
        """
        if not isinstance(payload, dict):
            raise ValueError("Z-score payload must be a mapping")

        strategy: Dict[GrowthStage, Dict[str, Any]] = {}
        for key, config in (payload.get("strategy") or {}).items():
            stage = _parse_stage(key)
            if stage is None:
                logging.warning(f"Ignoring strategy for unknown growth stage '{key}'")
                continue
            if not isinstance(config, dict):
                raise ValueError(f"Strategy for '{key}' must be a mapping")
            age_range = config.get("ageRange", config.get("age_range"))
            if age_range is None:
                raise ValueError(f"Strategy for '{key}' has no ageRange")
            strategy[stage] = age_range

        source = payload.get("data", payload)
        if not isinstance(source, dict):
            raise ValueError("Z-score partitions must be a mapping of growth stage to entries")
        partitions: Dict[GrowthStage, List[Dict[str, Any]]] = {}
        for key, entries in source.items():
            stage = _parse_stage(key)
            if stage is None:
                continue
            if not isinstance(entries, list):
                raise ValueError(f"Curve entries for '{key}' must be a list")
            partitions[stage] = entries

        return cls(partitions, strategy)

    def strategy_for(self, stage: GrowthStage) -> Optional[StageStrategy]:
        return self._strategies.get(GrowthStage(stage))

    def entries(self, stage: GrowthStage) -> Tuple[CurveEntry, ...]:
        return self._partitions.get(GrowthStage(stage), ())

    def find_entry(
        self, stage: GrowthStage, gender: Gender, age: float, unit: AgeUnit
    ) -> CurveEntry:
        """
        Entry for an already-keyed age within a stage partition.

        Raises:
            CurveDataUnavailable: If the partition or the entry is absent
        """
        stage = GrowthStage(stage)
        if stage not in self._partitions:
            raise CurveDataUnavailable(f"No {stage.value} curve partition")
        for entry in self._partitions[stage]:
            if entry.matches(gender, age, unit):
                return entry
        raise CurveDataUnavailable(
            f"No {stage.value} curve entry for {Gender(gender).value} at {age} {AgeUnit(unit).value}"
        )

    def __repr__(self) -> str:
        sizes = {stage.value: len(entries) for stage, entries in self._partitions.items()}
        return f"ZScoreDataset({sizes})"


def _lookup_curve(
    dataset: Optional[ZScoreDataset],
    gender: Gender,
    age: float,
    unit: AgeUnit,
    metric: CurveMetric,
) -> CurvePoints:
    """
    Resolve the curve points for a patient age.

    Raises:
        CurveDataUnavailable: If any step of the lookup has no data
    """
    if dataset is None:
        raise CurveDataUnavailable("Z-score data not loaded")

    stage = growth_stage(age, unit)
    strategy = dataset.strategy_for(stage)
    if strategy is None:
        raise CurveDataUnavailable(f"No strategy for growth stage {stage.value}")

    curve_metric = strategy.curve_metric(metric)
    key_age, key_unit = strategy.lookup_key(age, unit)
    entry = dataset.find_entry(stage, gender, key_age, key_unit)

    curve = entry.curve(curve_metric)
    if curve is None:
        raise CurveDataUnavailable(
            f"No {curve_metric.value} curve for {Gender(gender).value} at {key_age} {key_unit.value}"
        )
    return curve


def curves_for(
    dataset: Optional[ZScoreDataset],
    gender: Gender,
    age: float,
    unit: AgeUnit,
    metric: CurveMetric,
) -> CurvePoints:
    """
    Get the z-score curve points for a metric at a given age and gender.

    Adolescents always get the BMI curve regardless of the requested metric.

    Args:
        dataset: Z-score curve dataset
        gender: Patient gender
        age: Patient age value
        unit: Unit of `age`
        metric: Requested metric

    Returns:
        Mapping of z (-2..2) to the expected measurement; empty when no curve
        data exists for the request
    """
    try:
        return dict(_lookup_curve(dataset, gender, age, unit, metric))
    except CurveDataUnavailable as e:
        logging.debug(f"Curve data unavailable: {e}")
        return {}


@jit(nopython=True, cache=True)
def _fractional_z(z_points: np.ndarray, values: np.ndarray, x: float) -> float:
    """
    Interpolate z for x between the bracketing pair of curve points.

    Below the first point the first pair is used and above the last point the
    last pair, which extrapolates linearly. `values` must be strictly
    increasing.
    """
    n = values.shape[0]
    i = n - 2
    for k in range(n - 1):
        if x <= values[k + 1]:
            i = k
            break
    lower = values[i]
    upper = values[i + 1]
    return z_points[i] + (x - lower) / (upper - lower) * (z_points[i + 1] - z_points[i])


def zscore_from_curve(curve: CurvePoints, value: float) -> float:
    """Continuous z-score of a value against a complete set of curve points."""
    z_points = np.array(sorted(curve), dtype=np.float64)
    values = np.array([curve[z] for z in sorted(curve)], dtype=np.float64)
    return float(_fractional_z(z_points, values, float(value)))


def interpolate_zscore(
    dataset: Optional[ZScoreDataset],
    gender: Gender,
    age: float,
    unit: AgeUnit,
    metric: CurveMetric,
    value: float,
) -> Optional[float]:
    """
    Calculate a continuous z-score for a measurement.

    Returns:
        Interpolated z-score, or None if curve data is unavailable or the
        value is not finite
    """
    if value is None or not math.isfinite(value):
        logging.warning(f"Cannot interpolate z-score for non-finite value {value!r}")
        return None
    curve = curves_for(dataset, gender, age, unit, metric)
    if not curve:
        return None
    return zscore_from_curve(curve, value)


def percentage_from_zscore(z: float) -> float:
    """
    How typical a z-score is, from 0 to 100.

    Two-sided tail probability of the standard normal distribution as a
    percentage: 100 at the median, about 31.7 at |z| = 1 and 4.6 at |z| = 2.
    """
    return float(200.0 * stats.norm.sf(abs(z)))


def classification_label(metric: CurveMetric, z: float) -> str:
    """
    Classify a z-score for a metric.

        z < -2        severely low
        -2 <= z < -1  low
        -1 <= z <= 1  normal
        1 < z <= 2    high
        z > 2         severely high
    """
    labels = CLASSIFICATION_LABELS[CurveMetric(metric)]
    if z < -2:
        return labels[0]
    if z < -1:
        return labels[1]
    if z <= 1:
        return labels[2]
    if z <= 2:
        return labels[3]
    return labels[4]


def bmi(weight_kg: float, height_cm: float) -> float:
    """Body mass index (kg/m²) from weight in kg and height in cm."""
    if height_cm <= 0:
        raise ValueError("Height must be positive to calculate BMI")
    return weight_kg / (height_cm / 100.0) ** 2


def median_height_for_age(
    dataset: Optional[ZScoreDataset], gender: Gender, age: float, unit: AgeUnit
) -> Optional[float]:
    """
    Median height (cm) for an adolescent age, from the BMI curve data.

    Uses the entry's median height, or its z = 0 height point. Used in place
    of a missing patient height when computing BMI.

    Returns:
        Median height, or None if the adolescent data has no value for the age
    """
    if dataset is None:
        return None
    try:
        entry = dataset.find_entry(
            GrowthStage.ADOLESCENT, gender, rounded_years(age, unit), AgeUnit.YEAR
        )
    except CurveDataUnavailable as e:
        logging.debug(f"Median height unavailable: {e}")
        return None
    if entry.median_height is not None:
        return entry.median_height
    if entry.height is not None:
        return entry.height[0]
    return None
