import logging

from sqlmodel import Session, select

from skillsync.models.enrollment import Enrollment

logger = logging.getLogger(__name__)


def is_enrolled(session: Session, user_id: str, course_id: int) -> bool:
    return session.get(Enrollment, (user_id, course_id)) is not None


def enroll(session: Session, user_id: str, course_id: int) -> bool:
    """
    Add the (user, course) link if it is missing.

    Returns True when a new row was added. Does not commit.
    """
    if is_enrolled(session, user_id, course_id):
        return False

    session.add(Enrollment(user_id=user_id, course_id=course_id))
    session.flush()
    logger.info("Enrolled user %s in course %s", user_id, course_id)
    return True


def remove_course_enrollments(session: Session, course_id: int) -> int:
    """Drop every enrollment of a course. Does not commit."""
    enrollments = session.exec(
        select(Enrollment).where(Enrollment.course_id == course_id)
    ).all()

    for enrollment in enrollments:
        session.delete(enrollment)

    return len(enrollments)
