"""
Pediatric growth reference matching and z-score classification.
"""

from .assessment import (
    AssessmentResult,
    MetricAssessment,
    PatientAge,
    PatientInput,
    assess,
    chart_data_for_gender,
    classify_patient,
    unique_ages,
)
from .closeness import (
    ClosenessLabel,
    calculate_closeness,
    closeness_from_deviation,
    closeness_label,
)
from .errors import (
    CurveDataUnavailable,
    DatasetNotLoaded,
    DoklahError,
    NoCandidatesForGender,
    NotFound,
)
from .matching import (
    RecordMetric,
    closest_in_group,
    match_by_age,
    match_by_weight_height,
    match_combined,
)
from .reference import ReferenceDataset, ReferenceRecord
from .stages import AgeRange, CurveMetric
from .units import AgeUnit, Gender, GrowthStage, format_age, growth_stage, to_months
from .zscores import (
    CurveEntry,
    ZScoreDataset,
    bmi,
    classification_label,
    curves_for,
    interpolate_zscore,
    median_height_for_age,
    percentage_from_zscore,
)

__all__ = [
    "AgeRange",
    "AgeUnit",
    "AssessmentResult",
    "ClosenessLabel",
    "CurveDataUnavailable",
    "CurveEntry",
    "CurveMetric",
    "DatasetNotLoaded",
    "DoklahError",
    "Gender",
    "GrowthStage",
    "MetricAssessment",
    "NoCandidatesForGender",
    "NotFound",
    "PatientAge",
    "PatientInput",
    "RecordMetric",
    "ReferenceDataset",
    "ReferenceRecord",
    "ZScoreDataset",
    "assess",
    "bmi",
    "calculate_closeness",
    "chart_data_for_gender",
    "classification_label",
    "classify_patient",
    "closeness_from_deviation",
    "closeness_label",
    "closest_in_group",
    "curves_for",
    "format_age",
    "growth_stage",
    "interpolate_zscore",
    "match_by_age",
    "match_by_weight_height",
    "match_combined",
    "median_height_for_age",
    "percentage_from_zscore",
    "to_months",
    "unique_ages",
]
