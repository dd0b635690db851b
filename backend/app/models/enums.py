from __future__ import annotations

from enum import Enum as PyEnum


class PositionType(str, PyEnum):
    LONG = "long"
    SHORT = "short"
    SHORT_SCALP = "short_scalp"


SHORT_POSITION_TYPES = frozenset({PositionType.SHORT.value, PositionType.SHORT_SCALP.value})


class NotificationType(str, PyEnum):
    WEEKLY_RECAP = "weekly_recap"
    MONTHLY_REPORT = "monthly_report"
    SESSION_REMINDER = "session_reminder"


class SessionStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
