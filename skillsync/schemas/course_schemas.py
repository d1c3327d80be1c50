from typing import List, Optional

from pydantic import BaseModel, Field


class Lecture(BaseModel):
    lecture_id: str
    lecture_title: str
    lecture_duration: float = 0
    lecture_url: str = Field(min_length=1)
    is_preview_free: bool = False
    lecture_order: int = 0


class Chapter(BaseModel):
    chapter_id: str
    chapter_title: str
    chapter_order: int = 0
    chapter_content: List[Lecture] = []


class CourseCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    thumbnail_url: str
    price: float = Field(ge=0)
    discount: float = Field(default=0, ge=0, le=100)
    is_published: bool = True
    content: List[Chapter] = Field(min_length=1)


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    thumbnail_url: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0, le=100)
    content: Optional[List[Chapter]] = None
