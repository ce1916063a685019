"""External Result: tagged outcome of a call to an external service.

Invariants:
    - Exactly one variant per result: Success or Failure
    - Success always carries a non-None payload
    - Failure.message is safe to show to API clients (no stack detail)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from person_api.core.domain_types import FailureReason

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T

    def __post_init__(self):
        if self.data is None:
            raise ValueError("Success requires a payload")

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    reason: FailureReason
    message: str

    @property
    def ok(self) -> bool:
        return False


ExternalResult = Union[Success[T], Failure]
