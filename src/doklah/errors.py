"""
Exceptions raised by the growth reference engine.
"""


class DoklahError(Exception):
    """Base class for engine errors."""


class DatasetNotLoaded(DoklahError):
    """Raised when a reference dataset is missing or holds no records."""

    def __init__(self, message: str = "Reference data not loaded") -> None:
        super().__init__(message)


class NotFound(DoklahError, LookupError):
    """Raised when a lookup has no candidate to return."""


class NoCandidatesForGender(NotFound):
    """Raised when the dataset holds no records for the requested gender."""

    def __init__(self, gender: str) -> None:
        self.gender = gender
        super().__init__(f"No data found for gender: {gender}")


class CurveDataUnavailable(DoklahError, LookupError):
    """
    Raised internally when no z-score curve matches a request.

    The public curve functions catch it and return empty results so callers
    can omit a classification instead of aborting an assessment.
    """
