import logging

from sqlalchemy import func
from sqlmodel import Session, select

from skillsync.models.course import Course
from skillsync.models.enrollment import Enrollment
from skillsync.models.purchase import Purchase
from skillsync.services.enrollment_service import remove_course_enrollments
from skillsync.services.progress_service import remove_course_progress
from skillsync.services.rating_service import remove_course_ratings

logger = logging.getLogger(__name__)


def count_enrollments(session: Session, course_id: int) -> int:
    return session.exec(
        select(func.count())
        .select_from(Enrollment)
        .where(Enrollment.course_id == course_id)
    ).one()


def has_purchase_history(session: Session, course_id: int) -> bool:
    return session.exec(
        select(Purchase.id).where(Purchase.course_id == course_id)
    ).first() is not None


def delete_course(session: Session, course: Course) -> int:
    """
    Remove a course with its enrollments, progress records and ratings.

    Purchases are kept for audit and revenue reporting. Returns the number
    of enrollments dropped.
    """
    removed = remove_course_enrollments(session, course.id)
    remove_course_progress(session, course.id)
    remove_course_ratings(session, course.id)
    session.flush()
    session.delete(course)
    session.commit()

    logger.info("Deleted course %s, dropped %s enrollments", course.id, removed)
    return removed
