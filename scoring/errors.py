"""Exceptions raised by the scoring engine and its collaborators."""

from collections.abc import Mapping
from typing import Any, List


class InvalidInputError(ValueError):
    """
    Raised when a raw sample buffer is malformed.

    Sparse but well-formed input is NOT an error: scorers return their
    insufficient-data result for it instead.
    """


class RecommendationUnavailable(RuntimeError):
    """
    Raised when no recommendation text could be produced for a result.

    The numeric result is still valid and is carried on the exception so
    callers can persist or display it without the narrative.
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


def require_samples(values: Any, name: str) -> List[Any]:
    """
    Materialize a raw sample buffer as a list.

    Raises:
        InvalidInputError: values is missing, a scalar, a string or a mapping
    """
    if values is None:
        raise InvalidInputError(f"{name} are required")

    if isinstance(values, (str, bytes, Mapping)):
        raise InvalidInputError(f"{name} must be a list, got {type(values).__name__}")

    try:
        return list(values)
    except TypeError as e:
        raise InvalidInputError(f"{name} must be a list, got {type(values).__name__}") from e
