from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from skillsync.models.purchase import PurchaseStatus


class PurchaseCreate(BaseModel):
    course_id: int


class CheckoutResponse(BaseModel):
    purchase_id: str
    amount: float
    status: PurchaseStatus
    session_url: str


class PurchaseRead(BaseModel):
    id: str
    course_id: int
    user_id: str
    amount: float
    status: PurchaseStatus
    checkout_session_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    course_title: Optional[str] = None
