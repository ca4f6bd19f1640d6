"""Fare domain model."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class FareType(Enum):
    """Passenger category a fare applies to."""

    ADULT = "adult"
    CHILD = "child"
    STUDENT = "student"
    SENIOR = "senior"
    BIKE = "bike"


@dataclass(frozen=True)
class Fare:
    """A price as reported by the backend."""

    label: str
    type: FareType
    currency: str
    amount: Decimal
