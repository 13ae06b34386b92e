"""
Makeup credit models.

A makeup credit banks lesson minutes from a student-caused cancellation.
Credits are never deleted: exhausted and expired credits stay as audit
records and are only filtered out of the available balance.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .fields import align_timestamp, format_timestamp, parse_timestamp


@dataclass
class MakeupCredit:
    """
    Grant of banked lesson minutes.

    Attributes:
        id: Credit identifier
        student_id: Student identifier
        total_minutes: Minutes remaining on this credit
        expires_at: Instant after which the credit can no longer be used
        origin_lesson_id: Cancelled lesson that produced the credit
        created_at: When the credit was granted
    """

    id: str
    student_id: str
    total_minutes: int
    expires_at: datetime
    origin_lesson_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_available(self, now: datetime) -> bool:
        """Usable at ``now``: minutes remain and expiry is strictly later."""
        return self.total_minutes > 0 and align_timestamp(self.expires_at, now) > now

    def is_expired(self, now: datetime) -> bool:
        return align_timestamp(self.expires_at, now) <= now

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'MakeupCredit':
        """Build a credit from a record store row."""
        return cls(
            id=str(d["id"]),
            student_id=str(d["student_id"]),
            total_minutes=int(d["total_minutes"]),
            expires_at=parse_timestamp(d["expires_at"], "expires_at"),
            origin_lesson_id=d.get("origin_lesson_id"),
            created_at=parse_timestamp(d.get("created_at"), "created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "total_minutes": self.total_minutes,
            "expires_at": format_timestamp(self.expires_at),
            "origin_lesson_id": self.origin_lesson_id,
            "created_at": format_timestamp(self.created_at),
        }


@dataclass(frozen=True)
class CreditAllocation:
    """Minutes taken from one credit during a consumption."""

    credit_id: str
    minutes_taken: int
    minutes_remaining: int


@dataclass
class ConsumptionReceipt:
    """
    Record of a successful makeup credit consumption.

    Attributes:
        student_id: Student whose credits were consumed
        minutes_consumed: Total minutes deducted
        allocations: Per-credit deductions, soonest-expiring first
    """

    student_id: str
    minutes_consumed: int
    allocations: List[CreditAllocation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "student_id": self.student_id,
            "minutes_consumed": self.minutes_consumed,
            "allocations": [
                {
                    "credit_id": a.credit_id,
                    "minutes_taken": a.minutes_taken,
                    "minutes_remaining": a.minutes_remaining,
                }
                for a in self.allocations
            ],
        }
