from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from skillsync.utils.clock import utcnow


class RequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class RequestSource(str, Enum):
    user = "user"
    admin = "admin"


class InstructorRequest(SQLModel, table=True):
    __tablename__ = "instructor_request"

    # several per user are allowed, history is kept
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)

    status: RequestStatus = Field(default=RequestStatus.pending, index=True)
    source: RequestSource = Field(default=RequestSource.user)
    message: str = ""

    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    decision_note: str = ""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
