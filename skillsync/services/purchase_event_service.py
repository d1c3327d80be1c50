# skillsync/services/purchase_event_service.py

from typing import List, Optional
from uuid import uuid4
from sqlmodel import Session, select
from skillsync.models.purchase_event import PurchaseEvent
from skillsync.utils.clock import utcnow


def log_purchase_event(
    session: Session,
    purchase_id: str,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
):
    """
    Append-only audit trail for a purchase. Added to the session, committed
    together with the change it describes.
    """

    event = PurchaseEvent(
        id=str(uuid4()),
        purchase_id=purchase_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=utcnow(),
    )

    session.add(event)
    return event


def get_purchase_timeline(session: Session, purchase_id: str) -> List[PurchaseEvent]:
    return session.exec(
        select(PurchaseEvent)
        .where(PurchaseEvent.purchase_id == purchase_id)
        .order_by(PurchaseEvent.created_at)
    ).all()
