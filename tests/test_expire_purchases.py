"""Tests for the stale pending purchase sweep."""
from datetime import timedelta

from skillsync.jobs.expire_purchases import expire_stale_purchases
from skillsync.models import Purchase, PurchaseStatus
from skillsync.services.reconciliation import finalize_purchase
from skillsync.utils.clock import utcnow


class TestExpireStalePurchases:

    def test_fails_only_old_pending(self, session, scenario, make_purchase):
        old = utcnow() - timedelta(hours=30)
        user, course = scenario["user"], scenario["course"]
        make_purchase(user, course, id="OLD", created_at=old)
        make_purchase(user, course, id="OLD_DONE", created_at=old,
                      status=PurchaseStatus.completed)

        expired = expire_stale_purchases(session, timedelta(hours=24))

        assert expired == 1
        assert session.get(Purchase, "OLD").status == PurchaseStatus.failed
        assert session.get(Purchase, "OLD_DONE").status == PurchaseStatus.completed
        assert session.get(Purchase, "P1").status == PurchaseStatus.pending

    def test_late_success_after_sweep_is_honored(self, session, scenario, make_purchase):
        old = utcnow() - timedelta(hours=30)
        make_purchase(scenario["user"], scenario["course"], id="SLOW", created_at=old)

        expire_stale_purchases(session, timedelta(hours=24))
        finalize_purchase(session, "SLOW")

        assert session.get(Purchase, "SLOW").status == PurchaseStatus.completed
