from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING, List
from datetime import datetime
from sqlalchemy import Column, JSON

from skillsync.models.enrollment import Enrollment
from skillsync.utils.clock import utcnow

if TYPE_CHECKING:
    from .user import User


class Course(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    thumbnail_url: Optional[str] = None

    # lecture video URLs live inside the content tree
    content: Optional[list] = Field(default=None, sa_column=Column(JSON))

    price: float
    discount: float = Field(default=0)  # percent, 0-100
    is_published: bool = Field(default=True)

    instructor_id: str = Field(foreign_key="user.id", index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    enrolled_students: List["User"] = Relationship(
        link_model=Enrollment, sa_relationship_kwargs={"viewonly": True}
    )

    @property
    def effective_price(self) -> float:
        return round(self.price * (1 - (self.discount or 0) / 100), 2)
