"""
Patient assessment against the reference and z-score datasets.

An assessment runs two independent views over the same patient:
- reference matching: the record expected for the patient's age, the record
  closest to their weight/height, and a closeness score between the patient
  and the age-matched record;
- curve classification: a z-score, percentage and label per metric.
"""

from typing import Any, Dict, List, Optional
import logging

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .closeness import ClosenessLabel, calculate_closeness, closeness_label
from .config import HEIGHT_LIMITS_CM, WEIGHT_LIMITS_KG
from .matching import match_by_age, match_by_weight_height
from .reference import ReferenceDataset, ReferenceRecord
from .stages import CurveMetric
from .units import AgeUnit, Gender, GrowthStage, format_age, growth_stage, to_months
from .zscores import (
    ZScoreDataset,
    bmi,
    classification_label,
    curves_for,
    interpolate_zscore,
    median_height_for_age,
    percentage_from_zscore,
)


class PatientAge(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float = Field(ge=0)
    unit: AgeUnit

    @property
    def months(self) -> float:
        return to_months(self.value, self.unit)

    @property
    def label(self) -> str:
        return format_age(self.value, self.unit)


class PatientInput(BaseModel):
    """
    Measurements supplied for one assessment.

    Attributes:
        gender: BOY or GIRL
        weight: Weight in kg, 0.01-150
        height: Height in cm, 0.01-220, or None when unknown
        age: Age value and unit; also accepts the "6-MONTH" form value
    """

    model_config = ConfigDict(frozen=True)

    gender: Gender
    weight: float = Field(ge=WEIGHT_LIMITS_KG[0], le=WEIGHT_LIMITS_KG[1])
    height: Optional[float] = Field(
        default=None, ge=HEIGHT_LIMITS_CM[0], le=HEIGHT_LIMITS_CM[1]
    )
    age: PatientAge

    @field_validator("age", mode="before")
    @classmethod
    def parse_age_option(cls, v: Any) -> Any:
        """Split an age option value such as '6-MONTH' into value and unit."""
        if isinstance(v, str):
            value, sep, unit = v.partition("-")
            if not sep or not value.strip():
                raise ValueError(f"Age must look like '6-MONTH', got '{v}'")
            return {"value": value, "unit": unit.strip().upper()}
        return v

    @property
    def growth_stage(self) -> GrowthStage:
        return growth_stage(self.age.value, self.age.unit)


class MetricAssessment(BaseModel):
    """Position of one patient measurement on its z-score curve."""

    model_config = ConfigDict(frozen=True)

    metric: CurveMetric
    value: float
    z_score: float
    percentage: float
    label: str
    estimated_height: bool = False


class AssessmentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: PatientInput
    growth_stage: GrowthStage
    age_matched: ReferenceRecord
    weight_matched: ReferenceRecord
    closeness: int = Field(ge=0, le=100)
    closeness_label: ClosenessLabel
    classifications: Dict[CurveMetric, MetricAssessment] = Field(default_factory=dict)


def _metric_values(
    patient: PatientInput, zscores: Optional[ZScoreDataset], stage: GrowthStage
) -> List[tuple]:
    """(metric, value, estimated_height) to classify for the patient's stage."""
    if stage is not GrowthStage.ADOLESCENT:
        values = [(CurveMetric.WEIGHT, patient.weight, False)]
        if patient.height is not None:
            values.append((CurveMetric.HEIGHT, patient.height, False))
        return values

    height = patient.height
    estimated = False
    if height is None:
        height = median_height_for_age(
            zscores, patient.gender, patient.age.value, patient.age.unit
        )
        estimated = True
    if height is None:
        logging.debug("No height or median height available; skipping BMI classification")
        return []
    return [(CurveMetric.BMI, bmi(patient.weight, height), estimated)]


def classify_patient(
    patient: PatientInput, zscores: Optional[ZScoreDataset]
) -> Dict[CurveMetric, MetricAssessment]:
    """
    Classify each applicable metric of the patient against the z-score curves.

    Infants and children are classified by weight and, when known, height.
    Adolescents are classified by BMI, using the median height for their age
    when no height was supplied. Metrics without curve data are omitted.
    """
    stage = patient.growth_stage
    classifications: Dict[CurveMetric, MetricAssessment] = {}

    for metric, value, estimated in _metric_values(patient, zscores, stage):
        z = interpolate_zscore(
            zscores, patient.gender, patient.age.value, patient.age.unit, metric, value
        )
        if z is None:
            continue
        classifications[metric] = MetricAssessment(
            metric=metric,
            value=value,
            z_score=z,
            percentage=percentage_from_zscore(z),
            label=classification_label(metric, z),
            estimated_height=estimated,
        )

    return classifications


def assess(
    patient: PatientInput,
    reference: Optional[ReferenceDataset],
    zscores: Optional[ZScoreDataset] = None,
) -> AssessmentResult:
    """
    Run a complete assessment for one patient.

    Args:
        patient: Validated patient measurements
        reference: Reference dataset to match against
        zscores: Z-score curve dataset; without it no metric is classified

    Returns:
        AssessmentResult with both matched records, closeness and classifications

    Raises:
        DatasetNotLoaded: If the reference dataset is missing or empty
        NoCandidatesForGender: If the reference dataset has no record for the gender
    """
    age_matched = match_by_age(
        reference, patient.gender, patient.age.value, patient.age.unit
    )
    weight_matched = match_by_weight_height(
        reference, patient.gender, patient.weight, patient.height
    )
    closeness = calculate_closeness(patient.weight, patient.height, age_matched)

    return AssessmentResult(
        input=patient,
        growth_stage=patient.growth_stage,
        age_matched=age_matched,
        weight_matched=weight_matched,
        closeness=closeness,
        closeness_label=closeness_label(closeness),
        classifications=classify_patient(patient, zscores),
    )


def unique_ages(reference: Optional[ReferenceDataset]) -> List[Dict[str, Any]]:
    """
    Distinct ages in the reference data, youngest first.

    Returns:
        List of age options, e.g.
        [{"value": "0-MONTH", "label": "Newborn", "age": 0, "unit": AgeUnit.MONTH}, ...]
    """
    if reference is None:
        return []

    options: Dict[str, Dict[str, Any]] = {}
    for record in reference:
        age = int(record.age) if float(record.age).is_integer() else record.age
        key = f"{age}-{record.age_unit.value}"
        if key not in options:
            options[key] = {
                "value": key,
                "label": record.age_label,
                "age": age,
                "unit": record.age_unit,
            }

    return sorted(options.values(), key=lambda o: to_months(o["age"], o["unit"]))


CHART_COLUMNS = [
    "gender",
    "age",
    "age_unit",
    "weight",
    "height",
    "age_type",
    "normalized_age",
    "bmi",
]

CURVE_COLUMNS = {-2: "z_minus2", -1: "z_minus1", 0: "z_0", 1: "z_plus1", 2: "z_plus2"}


def chart_data_for_gender(
    reference: Optional[ReferenceDataset],
    gender: Gender,
    zscores: Optional[ZScoreDataset] = None,
    stage: Optional[GrowthStage] = None,
    metric: Optional[CurveMetric] = None,
) -> pd.DataFrame:
    """
    Reference series for one gender, ready for plotting.

    Parameters
    ----------
    reference : ReferenceDataset
        Reference records
    gender : Gender
        Gender to select
    zscores : ZScoreDataset, optional
        Curve data; needed for stage filtering and curve columns
    stage : GrowthStage, optional
        Restrict rows to the ages covered by this stage's strategy
    metric : CurveMetric, optional
        Add one column per z point with the curve value at each row's age

    Returns
    -------
    pd.DataFrame
        One row per record with `normalized_age` in years and `bmi`, sorted by
        `normalized_age`
    """
    if reference is None:
        return pd.DataFrame(columns=CHART_COLUMNS)

    records = reference.for_gender(gender)
    if stage is not None and zscores is not None:
        strategy = zscores.strategy_for(stage)
        if strategy is not None:
            records = [r for r in records if strategy.covers(r.age, r.age_unit)]

    if not records:
        return pd.DataFrame(columns=CHART_COLUMNS)

    df = pd.DataFrame([r.model_dump(mode="json") for r in records])
    df["normalized_age"] = [r.age_months / 12 for r in records]
    df["bmi"] = [bmi(r.weight, r.height) for r in records]
    df = df[CHART_COLUMNS].copy()

    if metric is not None:
        curves = [curves_for(zscores, gender, r.age, r.age_unit, metric) for r in records]
        for z, column in CURVE_COLUMNS.items():
            df[column] = [curve.get(z, float("nan")) for curve in curves]

    return df.sort_values("normalized_age", kind="stable").reset_index(drop=True)
