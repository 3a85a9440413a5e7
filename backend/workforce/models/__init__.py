from workforce.models.user import User
from workforce.models.schedule import Schedule
from workforce.models.shift import Shift
from workforce.models.time_off import TimeOffRequest
from workforce.models.document import Document
from workforce.models.notification import Notification
from workforce.models.message import Message
from workforce.models.audit import AuditLog

__all__ = [
    "User",
    "Schedule",
    "Shift",
    "TimeOffRequest",
    "Document",
    "Notification",
    "Message",
    "AuditLog",
]
