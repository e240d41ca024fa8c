"""
Nearest-neighbour resolution of reference records.

Every query filters the dataset by gender and scans the remaining records in
dataset order. Ties are broken deterministically so that results do not
depend on the order records were supplied in.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence
import logging

from .config import WEIGHT_GROUP_TOLERANCE_KG
from .errors import DatasetNotLoaded, NoCandidatesForGender, NotFound
from .reference import ReferenceDataset, ReferenceRecord
from .units import AgeUnit, Gender, to_months


class RecordMetric(str, Enum):
    """Reference record attribute used as a matching criterion."""

    AGE = "age"
    WEIGHT = "weight"
    HEIGHT = "height"


# Ages are compared in months so that MONTH and YEAR records mix freely
METRIC_ACCESSORS: Dict[RecordMetric, Callable[[ReferenceRecord], float]] = {
    RecordMetric.AGE: lambda record: record.age_months,
    RecordMetric.WEIGHT: lambda record: record.weight,
    RecordMetric.HEIGHT: lambda record: record.height,
}


def _candidates(
    dataset: Optional[ReferenceDataset], gender: Gender
) -> List[ReferenceRecord]:
    """Gender-filtered records, raising when there is nothing to search."""
    if dataset is None or len(dataset) == 0:
        raise DatasetNotLoaded()
    candidates = dataset.for_gender(gender)
    if not candidates:
        raise NoCandidatesForGender(Gender(gender).value)
    return candidates


def closest_in_group(
    group: Sequence[ReferenceRecord],
    metric: RecordMetric,
    value: float,
    prefer_larger: bool = False,
) -> ReferenceRecord:
    """
    Find the record whose metric is closest to a target value.

    Args:
        group: Records to search, scanned in order
        metric: Record attribute to compare
        value: Target value (months when metric is AGE)
        prefer_larger: On equal distance, take the record with the larger
            metric value. Otherwise the first record seen is kept.

    Returns:
        Closest record

    Raises:
        NotFound: If the group is empty
    """
    if not group:
        raise NotFound(f"No records to compare by {RecordMetric(metric).value}")

    accessor = METRIC_ACCESSORS[RecordMetric(metric)]
    closest = group[0]
    min_diff = abs(accessor(closest) - value)

    for record in group[1:]:
        diff = abs(accessor(record) - value)
        if diff < min_diff:
            min_diff = diff
            closest = record
        elif diff == min_diff and prefer_larger and accessor(record) > accessor(closest):
            closest = record

    return closest


def _closest_by_weight(
    candidates: Sequence[ReferenceRecord], weight: float
) -> ReferenceRecord:
    """Closest weight, ties resolved to the older record."""
    closest = candidates[0]
    min_diff = abs(closest.weight - weight)

    for record in candidates[1:]:
        diff = abs(record.weight - weight)
        if diff < min_diff:
            min_diff = diff
            closest = record
        elif diff == min_diff and record.age_months > closest.age_months:
            closest = record

    return closest


def _weight_group(
    candidates: Sequence[ReferenceRecord], selected: ReferenceRecord
) -> List[ReferenceRecord]:
    return [
        record
        for record in candidates
        if abs(record.weight - selected.weight) < WEIGHT_GROUP_TOLERANCE_KG
    ]


def match_by_age(
    dataset: Optional[ReferenceDataset], gender: Gender, age: float, unit: AgeUnit
) -> ReferenceRecord:
    """
    Find the reference record closest to the patient's age.

    Distance is measured in months; equidistant records resolve to the one
    with the larger age.

    Args:
        dataset: Reference dataset
        gender: Patient gender
        age: Patient age value
        unit: Unit of `age`

    Returns:
        Closest record by age

    Raises:
        DatasetNotLoaded: If the dataset is missing or empty
        NoCandidatesForGender: If no record matches the gender
    """
    candidates = _candidates(dataset, gender)
    match = closest_in_group(
        candidates, RecordMetric.AGE, to_months(age, unit), prefer_larger=True
    )
    logging.debug(
        f"Age match for {Gender(gender).value} {age} {AgeUnit(unit).value}: {match.age_label}"
    )
    return match


def match_by_weight_height(
    dataset: Optional[ReferenceDataset],
    gender: Gender,
    weight: float,
    height: Optional[float] = None,
) -> ReferenceRecord:
    """
    Find the reference record closest to the patient's weight.

    Weight is the primary criterion. When a height is given and several
    records share the selected weight (within the weight group tolerance),
    the one with the closest height wins, ties going to the taller record.

    Raises:
        DatasetNotLoaded: If the dataset is missing or empty
        NoCandidatesForGender: If no record matches the gender
    """
    candidates = _candidates(dataset, gender)
    match = _closest_by_weight(candidates, weight)

    if height is not None:
        group = _weight_group(candidates, match)
        if len(group) > 1:
            match = closest_in_group(
                group, RecordMetric.HEIGHT, height, prefer_larger=True
            )

    return match


def match_combined(
    dataset: Optional[ReferenceDataset],
    gender: Gender,
    weight: float,
    age: Optional[float] = None,
    age_unit: AgeUnit = AgeUnit.MONTH,
    height: Optional[float] = None,
) -> ReferenceRecord:
    """
    Find the closest record by gender, then weight, then age or height.

    The weight group of the closest-weight record is refined by age when an
    age is given, otherwise by height. Age takes precedence over height.

    Raises:
        DatasetNotLoaded: If the dataset is missing or empty
        NoCandidatesForGender: If no record matches the gender
    """
    candidates = _candidates(dataset, gender)
    match = _closest_by_weight(candidates, weight)

    if age is None and height is None:
        return match

    group = _weight_group(candidates, match)
    if len(group) > 1:
        if age is not None:
            match = closest_in_group(
                group, RecordMetric.AGE, to_months(age, age_unit), prefer_larger=True
            )
        else:
            match = closest_in_group(
                group, RecordMetric.HEIGHT, height, prefer_larger=True
            )

    return match
