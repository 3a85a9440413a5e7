from workforce.schemas.auth import Token, LoginRequest, RefreshRequest, ChangePasswordRequest
from workforce.schemas.user import UserCreate, UserUpdate, UserOut, BulkUserCreate, BulkUserResult
from workforce.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleOut, ScheduleResetOut
from workforce.schemas.shift import ShiftCreate, ShiftUpdate, ShiftOut, ShiftBlockOut, DayViewOut
from workforce.schemas.generation import GenerationSettings, GenerationRequest, PreviewOut, GenerateOut
from workforce.schemas.time_off import TimeOffRequestCreate, TimeOffDecision, TimeOffRequestOut
from workforce.schemas.document import DocumentCreate, DocumentOut, DocumentSummaryOut
from workforce.schemas.notification import NotificationOut
from workforce.schemas.message import MessageCreate, MessageOut

__all__ = [
    "Token", "LoginRequest", "RefreshRequest", "ChangePasswordRequest",
    "UserCreate", "UserUpdate", "UserOut", "BulkUserCreate", "BulkUserResult",
    "ScheduleCreate", "ScheduleUpdate", "ScheduleOut", "ScheduleResetOut",
    "ShiftCreate", "ShiftUpdate", "ShiftOut", "ShiftBlockOut", "DayViewOut",
    "GenerationSettings", "GenerationRequest", "PreviewOut", "GenerateOut",
    "TimeOffRequestCreate", "TimeOffDecision", "TimeOffRequestOut",
    "DocumentCreate", "DocumentOut", "DocumentSummaryOut",
    "NotificationOut",
    "MessageCreate", "MessageOut",
]
