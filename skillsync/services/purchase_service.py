from typing import List, Optional, Tuple

from sqlmodel import Session, select

from skillsync.models.course import Course
from skillsync.models.purchase import Purchase, PurchaseStatus
from skillsync.models.user import User
from skillsync.schemas.purchase_schemas import PurchaseRead
from skillsync.services.gateway import PaymentGateway
from skillsync.services.purchase_event_service import log_purchase_event
from skillsync.utils.clock import utcnow


def create_purchase(session: Session, user: User, course: Course) -> Purchase:
    """Pending purchase with the discounted price frozen at checkout time."""
    purchase = Purchase(
        user_id=user.id,
        course_id=course.id,
        amount=course.effective_price,
        status=PurchaseStatus.pending,
    )
    session.add(purchase)
    log_purchase_event(
        session,
        purchase_id=purchase.id,
        event_type="purchase_created",
        label="Checkout started",
        created_by=user.id,
        meta={"amount": purchase.amount, "course_id": course.id},
    )
    session.commit()
    session.refresh(purchase)
    return purchase


def open_checkout(
    session: Session,
    gateway: PaymentGateway,
    purchase: Purchase,
    course: Course,
    origin: str,
) -> str:
    checkout = gateway.create_checkout_session(
        purchase_id=purchase.id,
        title=course.title,
        amount=purchase.amount,
        success_url=f"{origin}/my-enrollments",
        cancel_url=f"{origin}/course/{course.id}",
    )

    purchase.checkout_session_id = checkout["id"]
    purchase.updated_at = utcnow()
    session.add(purchase)
    session.commit()

    return checkout["url"]


def purchase_read(purchase: Purchase, course_title: Optional[str] = None) -> PurchaseRead:
    return PurchaseRead(**purchase.model_dump(), course_title=course_title)


def list_user_purchases(
    session: Session, user_id: str
) -> List[Tuple[Purchase, Optional[str]]]:
    """Newest first, with the course title when the course still exists."""
    return session.exec(
        select(Purchase, Course.title)
        .join(Course, Course.id == Purchase.course_id, isouter=True)
        .where(Purchase.user_id == user_id)
        .order_by(Purchase.created_at.desc())
    ).all()
