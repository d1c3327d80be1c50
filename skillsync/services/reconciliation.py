"""
Applies payment gateway outcomes to local purchases.

Gateways deliver events at least once and not necessarily in order, so every
operation here is idempotent and completion is never undone. Storage errors
are left to propagate: the webhook route turns them into a 5xx so the
gateway redelivers.
"""
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from sqlmodel import Session

from skillsync.constants.purchase_status import can_transition
from skillsync.models.course import Course
from skillsync.models.purchase import Purchase, PurchaseStatus
from skillsync.models.user import User
from skillsync.services.enrollment_service import enroll
from skillsync.services.purchase_event_service import log_purchase_event
from skillsync.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _resolve_purchase(session: Session, purchase_id: Any) -> Optional[Purchase]:
    if not isinstance(purchase_id, str) or not purchase_id.strip():
        return None
    return session.get(Purchase, purchase_id.strip())


def _set_status(
    session: Session,
    purchase: Purchase,
    status: PurchaseStatus,
    trigger: str,
) -> None:
    previous = purchase.status
    purchase.status = status
    purchase.updated_at = utcnow()
    session.add(purchase)

    log_purchase_event(
        session,
        purchase_id=purchase.id,
        event_type=f"purchase_{status.value}",
        label=f"Purchase {status.value}",
        created_by=trigger,
        meta={"from": PurchaseStatus(previous).value, "to": status.value},
    )
    logger.info(
        "Purchase %s: %s -> %s (%s)",
        purchase.id, PurchaseStatus(previous).value, status.value, trigger,
    )


def finalize_purchase(
    session: Session,
    purchase_id: Any,
    *,
    trigger: str = "system",
) -> None:
    """
    Mark a purchase completed and grant the course to its buyer.

    Unknown or blank ids are ignored. The enrollment is ensured even when the
    purchase was already completed, so a retry can repair a partial run.
    """
    purchase = _resolve_purchase(session, purchase_id)
    if purchase is None:
        return

    if can_transition(purchase.status, PurchaseStatus.completed):
        _set_status(session, purchase, PurchaseStatus.completed, trigger)

    # course or user may have been removed since checkout; nothing to link then
    if session.get(Course, purchase.course_id) and session.get(User, purchase.user_id):
        if enroll(session, purchase.user_id, purchase.course_id):
            log_purchase_event(
                session,
                purchase_id=purchase.id,
                event_type="enrollment_granted",
                label="Course access granted",
                created_by=trigger,
                meta={"user_id": purchase.user_id, "course_id": purchase.course_id},
            )
    else:
        logger.warning(
            "Purchase %s completed but course %s or user %s no longer exists",
            purchase.id, purchase.course_id, purchase.user_id,
        )

    session.commit()


def fail_purchase(
    session: Session,
    purchase_id: Any,
    *,
    trigger: str = "system",
) -> None:
    """
    Mark a purchase failed unless it already completed.

    A failure never overrides completion; a stale expiry arriving after the
    success event is dropped.
    """
    purchase = _resolve_purchase(session, purchase_id)
    if purchase is None:
        return

    if not can_transition(purchase.status, PurchaseStatus.failed):
        return

    _set_status(session, purchase, PurchaseStatus.failed, trigger)
    session.commit()


def _purchase_id_from(obj: Any, allow_client_reference: bool) -> Optional[Any]:
    if not isinstance(obj, dict):
        return None

    metadata = obj.get("metadata")
    purchase_id = metadata.get("purchaseId") if isinstance(metadata, dict) else None

    if not purchase_id and allow_client_reference:
        purchase_id = obj.get("client_reference_id")

    return purchase_id


Action = Callable[..., None]

# event type -> (action, may fall back to client_reference_id)
EVENT_ACTIONS: Dict[str, Tuple[Action, bool]] = {
    "checkout.session.completed": (finalize_purchase, True),
    # delayed methods (bank debits) confirm in a follow-up event
    "checkout.session.async_payment_succeeded": (finalize_purchase, True),
    "payment_intent.succeeded": (finalize_purchase, False),
    "checkout.session.expired": (fail_purchase, True),
    "checkout.session.async_payment_failed": (fail_purchase, True),
}


def handle_gateway_event(session: Session, event: Dict[str, Any]) -> bool:
    """
    Route a verified gateway event to finalize/fail.

    Returns False for event types this service does not act on.
    """
    event_type = event.get("type")
    entry = EVENT_ACTIONS.get(event_type)

    if entry is None:
        logger.info("Unhandled event type %s", event_type)
        return False

    action, allow_client_reference = entry
    data = event.get("data") or {}
    obj = data.get("object") if isinstance(data, dict) else None
    purchase_id = _purchase_id_from(obj, allow_client_reference)

    action(session, purchase_id, trigger=f"gateway:{event_type}")
    return True
