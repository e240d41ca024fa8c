"""
Population reference records and the validated dataset holding them.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, Field

from .units import AgeUnit, Gender, format_age, to_months


class ReferenceRecord(BaseModel):
    """
    Expected weight and height for one gender at one age.

    Attributes:
        gender: BOY or GIRL
        age: Age value in `age_unit`
        age_unit: MONTH or YEAR
        weight: Expected weight (kg)
        height: Expected height (cm)
        age_type: Growth stage label carried by the source data
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    gender: Gender
    age: float = Field(ge=0)
    age_unit: AgeUnit = Field(alias="ageUnit")
    weight: float = Field(gt=0)
    height: float = Field(gt=0)
    age_type: Optional[str] = Field(default=None, alias="ageType")

    @property
    def age_months(self) -> float:
        return to_months(self.age, self.age_unit)

    @property
    def age_label(self) -> str:
        return format_age(self.age, self.age_unit)


RecordKey = Tuple[Gender, float, AgeUnit]


class ReferenceDataset:
    """
    Immutable, ordered collection of reference records.

    Construction rejects more than one record per (gender, age, age_unit) so
    that every lookup has a single answer. Input order is preserved and is
    the scan order used by the resolver.

    Usage:
        dataset = ReferenceDataset.from_payload({"data": [...]})
        boys = dataset.for_gender(Gender.BOY)
    """

    def __init__(self, records: Iterable[Union[ReferenceRecord, Dict[str, Any]]]) -> None:
        """
        Args:
            records: ReferenceRecord instances or mappings in the source format

        Raises:
            ValueError: If a record is invalid or duplicates another record's key
        """
        parsed: List[ReferenceRecord] = []
        seen: Dict[RecordKey, int] = {}
        for index, raw in enumerate(records):
            record = (
                raw
                if isinstance(raw, ReferenceRecord)
                else ReferenceRecord.model_validate(raw)
            )
            key = (record.gender, record.age, record.age_unit)
            if key in seen:
                raise ValueError(
                    f"Duplicate reference record at index {index}: "
                    f"{record.gender.value} {record.age_label} already defined at index {seen[key]}"
                )
            seen[key] = index
            parsed.append(record)

        self._records: Tuple[ReferenceRecord, ...] = tuple(parsed)
        if not self._records:
            logging.warning("Reference dataset constructed with no records")

    @classmethod
    def from_payload(
        cls, payload: Union[Dict[str, Any], List[Dict[str, Any]]]
    ) -> "ReferenceDataset":
        """
        Build a dataset from parsed JSON.

        Accepts either the bare record list or the `{"data": [...]}` envelope.

        Raises:
            ValueError: If the payload has no record list or a record is invalid
        """
        if isinstance(payload, dict):
            if "data" not in payload:
                raise ValueError("Reference payload must contain a 'data' list")
            payload = payload["data"]
        if not isinstance(payload, list):
            raise ValueError("Reference records must be a list")
        return cls(payload)

    @property
    def records(self) -> Tuple[ReferenceRecord, ...]:
        return self._records

    def for_gender(self, gender: Gender) -> List[ReferenceRecord]:
        """Records of one gender, in dataset order."""
        gender = Gender(gender)
        return [record for record in self._records if record.gender is gender]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ReferenceRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"ReferenceDataset({len(self._records)} records)"
