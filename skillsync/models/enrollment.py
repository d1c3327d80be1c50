from sqlmodel import SQLModel, Field
from datetime import datetime

from skillsync.utils.clock import utcnow


class Enrollment(SQLModel, table=True):
    """
    Grants a user access to a course.

    One row backs both User.enrolled_courses and Course.enrolled_students,
    so the two sides can never disagree.
    """

    user_id: str = Field(foreign_key="user.id", primary_key=True)
    course_id: int = Field(foreign_key="course.id", primary_key=True)

    created_at: datetime = Field(default_factory=utcnow)
