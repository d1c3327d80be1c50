from fastapi import Depends, HTTPException
from skillsync.models.user import User, UserRole
from skillsync.utils.token import get_current_user


def require_admin(current_user: User = Depends(get_current_user)):
    if current_user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


def require_instructor(current_user: User = Depends(get_current_user)):
    if current_user.role != UserRole.instructor:
        raise HTTPException(status_code=403, detail="Instructor access required")
    return current_user
