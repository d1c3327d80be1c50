from pydantic import BaseModel, Field


class InstructorRequestCreate(BaseModel):
    message: str = Field(default="", max_length=1000)
