"""
Lesson data models.

This module provides the raw record shape handed over by the record
store (``LessonRecord``) and the ``Lesson`` dataclass the billing core
computes with. Cancellation state is an explicit tagged variant instead
of being re-derived from nullable timestamps at every call site.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, TypedDict, Union

from .fields import parse_date, parse_timestamp, format_timestamp


MINUTES_PER_HOUR = 60


class LessonStatus(Enum):
    """Lesson status."""
    PLANNED = "planned"
    DONE = "done"
    CANCELLED = "cancelled"


class CancellationCause(Enum):
    """Who caused a cancellation."""
    STUDENT = "student"
    TEACHER = "teacher"


@dataclass(frozen=True)
class NotRequested:
    """No cancellation has been requested (or a cancellation was undone)."""

    state = "none"


@dataclass(frozen=True)
class Pending:
    """Cancellation requested by the guardian, not yet processed by the teacher."""

    requested_at: datetime
    reason: Optional[str] = None
    caused_by: Optional[CancellationCause] = None

    state = "pending"


@dataclass(frozen=True)
class Approved:
    """
    Cancellation processed; the lesson is cancelled.

    ``processed_at`` is None when the lesson was cancelled directly by the
    teacher without a request and approval step.
    """

    processed_at: Optional[datetime]
    caused_by: Optional[CancellationCause]
    reason: Optional[str] = None
    requested_at: Optional[datetime] = None

    state = "approved"


@dataclass(frozen=True)
class Rejected:
    """Cancellation request declined; the lesson stays scheduled."""

    processed_at: datetime
    reason: Optional[str] = None
    requested_at: Optional[datetime] = None

    state = "rejected"


Cancellation = Union[NotRequested, Pending, Approved, Rejected]


class LessonRecord(TypedDict, total=False):
    """
    Lesson row as stored by the record store.

    Examples:
        >>> record: LessonRecord = {
        ...     "id": "lesson_001",
        ...     "student_id": "student_789",
        ...     "date": "2024-04-10",
        ...     "start_time": "17:00",
        ...     "end_time": "19:00",
        ...     "hours": 2,
        ...     "amount": 4000,
        ...     "transport_fee": 900,
        ...     "status": "planned",
        ...     "is_makeup": False,
        ...     "created_at": "2024-03-01T10:00:00+09:00"
        ... }
    """

    id: str
    student_id: str
    date: str
    start_time: str
    end_time: str
    hours: float
    amount: int
    transport_fee: int
    status: str
    is_makeup: bool
    created_at: Optional[str]
    memo: Optional[str]
    cancellation_requested_at: Optional[str]
    cancellation_processed_at: Optional[str]
    cancellation_reason: Optional[str]
    cancellation_cause: Optional[str]


@dataclass
class Lesson:
    """
    One scheduled or completed tutoring session.

    Attributes:
        id: Lesson identifier
        student_id: Student identifier
        date: Lesson date
        start_time: Start time (HH:MM)
        end_time: End time (HH:MM)
        hours: Duration in hours
        fee: Lesson fee in yen (always 0 for makeup lessons)
        transport_fee: Transport fee in yen
        status: Lesson status
        is_makeup: Whether this lesson consumes makeup credit
        cancellation: Cancellation workflow state
        created_at: When the lesson was created (None if unknown)
        memo: Free-text memo
    """

    id: str
    student_id: str
    date: date
    start_time: str
    end_time: str
    hours: float
    fee: int
    transport_fee: int = 0
    status: LessonStatus = LessonStatus.PLANNED
    is_makeup: bool = False
    cancellation: Cancellation = field(default_factory=NotRequested)
    created_at: Optional[datetime] = None
    memo: Optional[str] = None

    @property
    def minutes(self) -> int:
        """Duration in whole minutes."""
        return int(round(self.hours * MINUTES_PER_HOUR))

    @property
    def is_cancelled(self) -> bool:
        return self.status == LessonStatus.CANCELLED

    @property
    def billable_fee(self) -> int:
        """Fee that may be invoiced; makeup lessons never carry a fee."""
        return 0 if self.is_makeup else self.fee

    @property
    def billable_amount(self) -> int:
        """Invoiced fee plus transport."""
        return self.billable_fee + self.transport_fee

    @property
    def caused_by(self) -> Optional[CancellationCause]:
        """Cancellation cause if the cancellation was approved."""
        if isinstance(self.cancellation, Approved):
            return self.cancellation.caused_by
        return None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Lesson':
        """
        Build a Lesson from a record store row.

        The cancellation variant is derived once here from the stored
        timestamps. A processed cancellation on a cancelled lesson is
        ``Approved``, on any other status ``Rejected``. A cancelled lesson with
        a cause but no processing timestamp is also ``Approved``. A request
        without processing is ``Pending``. The free-text reason is never parsed for
        the cause; only the structured ``cancellation_cause`` column is read.

        Raises:
            ValueError: If a field cannot be converted
        """
        status = LessonStatus(d.get("status", LessonStatus.PLANNED.value))
        requested_at = parse_timestamp(
            d.get("cancellation_requested_at"), "cancellation_requested_at"
        )
        processed_at = parse_timestamp(
            d.get("cancellation_processed_at"), "cancellation_processed_at"
        )
        reason = d.get("cancellation_reason")
        cause_value = d.get("cancellation_cause")
        cause = CancellationCause(cause_value) if cause_value else None

        cancellation: Cancellation
        if processed_at and status == LessonStatus.CANCELLED:
            cancellation = Approved(
                processed_at=processed_at,
                caused_by=cause,
                reason=reason,
                requested_at=requested_at,
            )
        elif status == LessonStatus.CANCELLED and cause:
            cancellation = Approved(
                processed_at=None,
                caused_by=cause,
                reason=reason,
                requested_at=requested_at,
            )
        elif processed_at:
            cancellation = Rejected(
                processed_at=processed_at,
                reason=reason,
                requested_at=requested_at,
            )
        elif requested_at:
            cancellation = Pending(
                requested_at=requested_at, reason=reason, caused_by=cause
            )
        else:
            cancellation = NotRequested()

        fee = d.get("amount", d.get("fee", 0))

        return cls(
            id=str(d["id"]),
            student_id=str(d["student_id"]),
            date=parse_date(d["date"]),
            start_time=str(d.get("start_time", ""))[:5],
            end_time=str(d.get("end_time", ""))[:5],
            hours=float(d.get("hours", 0)),
            fee=int(fee or 0),
            transport_fee=int(d.get("transport_fee") or 0),
            status=status,
            is_makeup=bool(d.get("is_makeup", False)),
            cancellation=cancellation,
            created_at=parse_timestamp(d.get("created_at"), "created_at"),
            memo=d.get("memo"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the record store row format."""
        c = self.cancellation
        cause = getattr(c, "caused_by", None)
        return {
            "id": self.id,
            "student_id": self.student_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "hours": self.hours,
            "amount": self.fee,
            "transport_fee": self.transport_fee,
            "status": self.status.value,
            "is_makeup": self.is_makeup,
            "created_at": format_timestamp(self.created_at),
            "memo": self.memo,
            "cancellation_requested_at": format_timestamp(getattr(c, "requested_at", None)),
            "cancellation_processed_at": format_timestamp(getattr(c, "processed_at", None)),
            "cancellation_reason": getattr(c, "reason", None),
            "cancellation_cause": cause.value if cause else None,
        }
