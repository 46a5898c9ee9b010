"""Aggregated intake metrics for a firm's dashboard."""

from pydantic import Field

from .base import IntakeDeskBaseModel


class CountBucket(IntakeDeskBaseModel):
    """One slice of a distribution."""

    name: str
    value: int


class DayCount(IntakeDeskBaseModel):
    """Intakes created on one UTC calendar day (``YYYY-MM-DD``)."""

    date: str
    intakes: int


class IntakeAnalytics(IntakeDeskBaseModel):
    """Metrics over the intakes created within the last ``days`` days."""

    days: int
    total_intakes: int = 0
    urgent_intakes: int = 0
    reviewed_intakes: int = 0
    response_rate: int = Field(default=0, description="Reviewed or archived, in whole percent")
    practice_areas: list[CountBucket] = Field(default_factory=list)
    urgency: list[CountBucket] = Field(default_factory=list)
    timeline: list[DayCount] = Field(default_factory=list)
