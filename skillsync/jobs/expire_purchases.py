import logging
from datetime import timedelta

from sqlmodel import Session, select

from skillsync.config import settings
from skillsync.database import engine
from skillsync.models.purchase import Purchase, PurchaseStatus
from skillsync.services.reconciliation import fail_purchase
from skillsync.utils.clock import utcnow

logger = logging.getLogger(__name__)


def expire_stale_purchases(session: Session, older_than: timedelta) -> int:
    """
    Fail purchases still pending after the checkout window. Covers expiry
    events the gateway never delivered.
    """
    cutoff = utcnow() - older_than

    stale_ids = session.exec(
        select(Purchase.id)
        .where(Purchase.status == PurchaseStatus.pending)
        .where(Purchase.created_at < cutoff)
    ).all()

    for purchase_id in stale_ids:
        fail_purchase(session, purchase_id, trigger="expiry_job")

    logger.info("Expired %s stale purchases", len(stale_ids))
    return len(stale_ids)


def run():
    with Session(engine) as session:
        return expire_stale_purchases(
            session, timedelta(hours=settings.purchase_expiry_hours)
        )


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    run()
