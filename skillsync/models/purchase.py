from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum
from uuid import uuid4

from skillsync.utils.clock import utcnow


class PurchaseStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"


class Purchase(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    # no foreign keys: purchase history outlives course deletion
    course_id: int = Field(index=True)
    user_id: str = Field(index=True)

    amount: float = Field(nullable=False)  # snapshot at checkout
    status: PurchaseStatus = Field(default=PurchaseStatus.pending, index=True)

    checkout_session_id: Optional[str] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
