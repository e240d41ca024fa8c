from typing import Any, Dict

import pytest

from doklah.reference import ReferenceDataset
from doklah.zscores import ZScoreDataset


def _curve(*values: float) -> Dict[str, float]:
    return dict(zip(["-2", "-1", "0", "1", "2"], values))


REFERENCE_PAYLOAD: Dict[str, Any] = {
    "data": [
        {"gender": "BOY", "age": 0, "ageUnit": "MONTH", "weight": 3.3, "height": 49.9, "ageType": "INFANT"},
        {"gender": "BOY", "age": 6, "ageUnit": "MONTH", "weight": 7.9, "height": 67.6, "ageType": "INFANT"},
        {"gender": "BOY", "age": 12, "ageUnit": "MONTH", "weight": 9.6, "height": 75.7, "ageType": "INFANT"},
        {"gender": "BOY", "age": 2, "ageUnit": "YEAR", "weight": 12.2, "height": 87.8, "ageType": "CHILD"},
        {"gender": "BOY", "age": 5, "ageUnit": "YEAR", "weight": 18.3, "height": 110.0, "ageType": "CHILD"},
        {"gender": "BOY", "age": 10, "ageUnit": "YEAR", "weight": 31.2, "height": 137.8, "ageType": "ADOLESCENT"},
        {"gender": "BOY", "age": 12, "ageUnit": "YEAR", "weight": 39.9, "height": 149.1, "ageType": "ADOLESCENT"},
        {"gender": "GIRL", "age": 0, "ageUnit": "MONTH", "weight": 3.2, "height": 49.1, "ageType": "INFANT"},
        {"gender": "GIRL", "age": 6, "ageUnit": "MONTH", "weight": 7.3, "height": 65.7, "ageType": "INFANT"},
        {"gender": "GIRL", "age": 2, "ageUnit": "YEAR", "weight": 11.5, "height": 86.4, "ageType": "CHILD"},
        {"gender": "GIRL", "age": 10, "ageUnit": "YEAR", "weight": 31.9, "height": 138.6, "ageType": "ADOLESCENT"},
    ]
}


ZSCORE_PAYLOAD: Dict[str, Any] = {
    "strategy": {
        "infant": {"ageRange": {"min": 0, "max": 23, "unit": "MONTH"}},
        "child": {"ageRange": {"min": 2, "max": 9, "unit": "YEAR"}},
        "adolescent": {"ageRange": {"min": 10, "max": 19, "unit": "YEAR"}},
    },
    "infant": [
        {
            "gender": "BOY",
            "age": 0,
            "ageUnit": "MONTH",
            "weight": _curve(2.5, 2.9, 3.3, 3.9, 4.4),
        },
        {
            "gender": "BOY",
            "age": 6,
            "ageUnit": "MONTH",
            "weight": _curve(6.4, 7.1, 7.9, 8.8, 9.8),
            "height": _curve(63.3, 65.5, 67.6, 69.8, 71.9),
        },
        {
            "gender": "GIRL",
            "age": 6,
            "ageUnit": "MONTH",
            "weight": _curve(5.7, 6.5, 7.3, 8.2, 9.3),
        },
    ],
    "child": [
        {
            "gender": "BOY",
            "age": 2,
            "ageUnit": "YEAR",
            "weight": _curve(9.7, 10.8, 12.2, 13.6, 15.3),
            "height": _curve(81.0, 84.1, 87.1, 90.2, 93.2),
        },
        {
            "gender": "BOY",
            "age": 5,
            "ageUnit": "YEAR",
            "weight": _curve(14.1, 15.9, 18.3, 20.7, 23.7),
        },
    ],
    "adolescent": [
        {
            "gender": "BOY",
            "age": 10,
            "bmi": _curve(13.7, 14.6, 16.4, 18.5, 21.4),
            "medianHeight": 137.8,
        },
        {
            "gender": "BOY",
            "age": 12,
            "bmi": _curve(14.5, 15.8, 17.5, 19.9, 23.6),
            "height": _curve(137.6, 143.6, 149.1, 154.6, 160.6),
        },
    ],
}


@pytest.fixture
def reference_payload() -> Dict[str, Any]:
    """Reference records in the source JSON format."""
    return REFERENCE_PAYLOAD


@pytest.fixture
def reference() -> ReferenceDataset:
    """Reference dataset with boys and girls from newborn to 12 years."""
    return ReferenceDataset.from_payload(REFERENCE_PAYLOAD)


@pytest.fixture
def zscore_payload() -> Dict[str, Any]:
    return ZSCORE_PAYLOAD


@pytest.fixture
def zscores() -> ZScoreDataset:
    """Z-score curves for every growth stage."""
    return ZScoreDataset.from_payload(ZSCORE_PAYLOAD)
