from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING, List
from datetime import datetime
from enum import Enum

from skillsync.models.enrollment import Enrollment
from skillsync.utils.clock import utcnow

if TYPE_CHECKING:
    from .course import Course


class UserRole(str, Enum):
    student = "student"
    instructor = "instructor"
    admin = "admin"


class User(SQLModel, table=True):
    # issued by the identity provider
    id: str = Field(primary_key=True)
    email: str = Field(index=True)
    name: str
    image_url: Optional[str] = None
    role: UserRole = Field(default=UserRole.student)
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)

    # rows are written through Enrollment directly
    enrolled_courses: List["Course"] = Relationship(
        link_model=Enrollment, sa_relationship_kwargs={"viewonly": True}
    )
