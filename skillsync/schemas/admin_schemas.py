from typing import Literal

from pydantic import BaseModel


class RoleUpdate(BaseModel):
    user_id: str
    # new admins cannot be minted through the API
    role: Literal["student", "instructor"]


class PublishToggle(BaseModel):
    is_published: bool


class RequestDecision(BaseModel):
    decision_note: str = ""


class LoginToggle(BaseModel):
    can_login: bool
