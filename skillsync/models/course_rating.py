from sqlmodel import SQLModel, Field
from datetime import datetime

from skillsync.utils.clock import utcnow


class CourseRating(SQLModel, table=True):
    """One rating per student per course; rating again overwrites it."""

    __tablename__ = "course_rating"

    user_id: str = Field(foreign_key="user.id", primary_key=True)
    course_id: int = Field(foreign_key="course.id", primary_key=True)
    rating: int

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
