from typing import Dict

from sqlalchemy import func
from sqlmodel import Session, select

from skillsync.models.course_rating import CourseRating
from skillsync.utils.clock import utcnow


def rate_course(session: Session, user_id: str, course_id: int, rating: int) -> CourseRating:
    """Insert the user's rating, or overwrite the one they gave before."""
    course_rating = session.get(CourseRating, (user_id, course_id))

    if course_rating is None:
        course_rating = CourseRating(user_id=user_id, course_id=course_id, rating=rating)
    else:
        course_rating.rating = rating
        course_rating.updated_at = utcnow()

    session.add(course_rating)
    session.commit()
    session.refresh(course_rating)
    return course_rating


def rating_summary(session: Session, course_id: int) -> Dict[str, float]:
    average, count = session.exec(
        select(func.avg(CourseRating.rating), func.count())
        .where(CourseRating.course_id == course_id)
    ).one()

    return {
        "average_rating": round(float(average), 2) if average is not None else 0.0,
        "rating_count": count,
    }


def remove_course_ratings(session: Session, course_id: int) -> int:
    """Does not commit."""
    rows = session.exec(
        select(CourseRating).where(CourseRating.course_id == course_id)
    ).all()

    for row in rows:
        session.delete(row)

    return len(rows)
