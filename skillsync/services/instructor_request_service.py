import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from skillsync.models.instructor_request import (
    InstructorRequest,
    RequestSource,
    RequestStatus,
)
from skillsync.models.user import User, UserRole
from skillsync.utils.clock import utcnow

logger = logging.getLogger(__name__)

DAILY_REQUEST_LIMIT = 2


class InstructorRequestError(Exception):
    pass


def _today_bounds():
    start = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def count_requests_today(session: Session, user_id: str) -> int:
    start, end = _today_bounds()
    return session.exec(
        select(func.count())
        .select_from(InstructorRequest)
        .where(InstructorRequest.user_id == user_id)
        .where(InstructorRequest.created_at >= start)
        .where(InstructorRequest.created_at < end)
    ).one()


def get_pending_request(session: Session, user_id: str) -> Optional[InstructorRequest]:
    return session.exec(
        select(InstructorRequest)
        .where(InstructorRequest.user_id == user_id)
        .where(InstructorRequest.status == RequestStatus.pending)
    ).first()


def submit_request(session: Session, user: User, message: str = "") -> InstructorRequest:
    if user.role == UserRole.instructor:
        raise InstructorRequestError("You are already an instructor.")
    if user.role == UserRole.admin:
        raise InstructorRequestError("Admins cannot request instructor role.")

    if get_pending_request(session, user.id):
        raise InstructorRequestError("You already have a pending request.")

    if count_requests_today(session, user.id) >= DAILY_REQUEST_LIMIT:
        raise InstructorRequestError(
            f"Daily limit reached. You can submit at most "
            f"{DAILY_REQUEST_LIMIT} instructor requests per day."
        )

    request = InstructorRequest(
        user_id=user.id,
        message=message,
        status=RequestStatus.pending,
        source=RequestSource.user,
    )
    session.add(request)
    session.commit()
    session.refresh(request)
    return request


def current_request_for(session: Session, user: User) -> Optional[InstructorRequest]:
    """
    Students see their pending request, else their latest rejection so they
    can resubmit. An old approval is hidden once an admin has demoted them.
    Instructors and admins get their latest request as history.
    """
    query = (
        select(InstructorRequest)
        .where(InstructorRequest.user_id == user.id)
        .order_by(InstructorRequest.created_at.desc())
    )

    if user.role != UserRole.student:
        return session.exec(query).first()

    pending = session.exec(
        query.where(InstructorRequest.status == RequestStatus.pending)
    ).first()
    if pending:
        return pending

    return session.exec(
        query.where(InstructorRequest.status == RequestStatus.rejected)
    ).first()


def approve_request(session: Session, request: InstructorRequest, admin: User) -> bool:
    """Returns False when the request was already approved."""
    if request.status == RequestStatus.approved:
        return False

    user = session.get(User, request.user_id)
    if user:
        user.role = UserRole.instructor
        session.add(user)

    request.status = RequestStatus.approved
    request.reviewed_by = admin.id
    request.reviewed_at = utcnow()
    request.decision_note = ""
    request.updated_at = utcnow()
    session.add(request)
    session.commit()

    logger.info("Instructor request %s approved by %s", request.id, admin.id)
    return True


def reject_request(
    session: Session,
    request: InstructorRequest,
    admin: User,
    decision_note: str = "",
) -> bool:
    """Returns False when the request was already rejected."""
    if request.status == RequestStatus.rejected:
        return False

    request.status = RequestStatus.rejected
    request.reviewed_by = admin.id
    request.reviewed_at = utcnow()
    request.decision_note = decision_note
    request.updated_at = utcnow()
    session.add(request)
    session.commit()

    logger.info("Instructor request %s rejected by %s", request.id, admin.id)
    return True
