from pydantic import BaseModel, Field


class ProgressUpdate(BaseModel):
    course_id: int
    lecture_id: str = Field(min_length=1)


class RatingCreate(BaseModel):
    course_id: int
    rating: int = Field(ge=1, le=5)
