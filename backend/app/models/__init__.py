from app.models.enums import NotificationType, PositionType, SessionStatus
from app.models.mentoring_session import MentoringSession
from app.models.notification import Notification
from app.models.trade import Setup, Trade
from app.models.user import User
from app.models.verification_code import VerificationCode

__all__ = [
    "MentoringSession",
    "Notification",
    "NotificationType",
    "PositionType",
    "SessionStatus",
    "Setup",
    "Trade",
    "User",
    "VerificationCode",
]
