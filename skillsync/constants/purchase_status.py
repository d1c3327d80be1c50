from skillsync.models.purchase import PurchaseStatus

# completed is final; a late success still overrides an earlier failure
ALLOWED_TRANSITIONS = {
    PurchaseStatus.pending: [PurchaseStatus.completed, PurchaseStatus.failed],
    PurchaseStatus.failed: [PurchaseStatus.completed],
    PurchaseStatus.completed: [],
}


def can_transition(current: PurchaseStatus, target: PurchaseStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])
