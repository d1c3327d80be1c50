import logging
from typing import List, Optional

from sqlmodel import Session, select

from skillsync.models.course import Course
from skillsync.models.course_progress import CourseProgress
from skillsync.utils.clock import utcnow

logger = logging.getLogger(__name__)


def lecture_ids(course: Course) -> List[str]:
    """Every lecture id in the course content tree, in course order."""
    ids = []
    for chapter in course.content or []:
        for lecture in chapter.get("chapter_content") or []:
            if lecture.get("lecture_id"):
                ids.append(lecture["lecture_id"])
    return ids


def get_progress(session: Session, user_id: str, course_id: int) -> Optional[CourseProgress]:
    return session.get(CourseProgress, (user_id, course_id))


def mark_lecture_completed(
    session: Session,
    user_id: str,
    course_id: int,
    lecture_id: str,
) -> bool:
    """
    Record a completed lecture.

    Returns False when the lecture was already recorded; nothing is written
    in that case.
    """
    progress = get_progress(session, user_id, course_id)

    if progress is None:
        progress = CourseProgress(
            user_id=user_id,
            course_id=course_id,
            lecture_completed=[lecture_id],
        )
    elif lecture_id in progress.lecture_completed:
        return False
    else:
        # reassign so the JSON column is flagged dirty
        progress.lecture_completed = progress.lecture_completed + [lecture_id]
        progress.updated_at = utcnow()

    session.add(progress)
    session.commit()

    logger.info("User %s completed lecture %s of course %s", user_id, lecture_id, course_id)
    return True


def remove_course_progress(session: Session, course_id: int) -> int:
    """Does not commit."""
    rows = session.exec(
        select(CourseProgress).where(CourseProgress.course_id == course_id)
    ).all()

    for row in rows:
        session.delete(row)

    return len(rows)
