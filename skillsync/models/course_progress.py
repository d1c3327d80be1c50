from sqlmodel import SQLModel, Field
from typing import List
from datetime import datetime
from sqlalchemy import Column, JSON

from skillsync.utils.clock import utcnow


class CourseProgress(SQLModel, table=True):
    __tablename__ = "course_progress"

    user_id: str = Field(foreign_key="user.id", primary_key=True)
    course_id: int = Field(foreign_key="course.id", primary_key=True)

    # lecture ids, in the order they were completed
    lecture_completed: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
