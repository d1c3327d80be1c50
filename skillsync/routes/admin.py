from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, select

from skillsync.config import settings
from skillsync.database import get_session
from skillsync.dependencies.auth import require_admin
from skillsync.models.course import Course
from skillsync.models.course_progress import CourseProgress
from skillsync.models.instructor_request import InstructorRequest, RequestStatus
from skillsync.models.purchase import Purchase, PurchaseStatus
from skillsync.models.user import User, UserRole
from skillsync.schemas.admin_schemas import (
    LoginToggle,
    PublishToggle,
    RequestDecision,
    RoleUpdate,
)
from skillsync.services.course_service import count_enrollments, delete_course
from skillsync.services.instructor_request_service import (
    approve_request,
    reject_request,
)
from skillsync.services.purchase_event_service import get_purchase_timeline
from skillsync.services.purchase_service import purchase_read
from skillsync.utils.pagination import paginate
from skillsync.utils.token import get_current_user

router = APIRouter()


def _count(session: Session, model, *conditions) -> int:
    query = select(func.count()).select_from(model)
    for condition in conditions:
        query = query.where(condition)
    return session.exec(query).one()


# -------- SETUP --------

@router.post("/bootstrap")
def bootstrap_admin_role(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Promote the configured ADMIN_USER_ID account to admin."""
    if not settings.admin_user_id:
        raise HTTPException(400, "ADMIN_USER_ID is not configured on server.")

    if current_user.id != settings.admin_user_id:
        raise HTTPException(403, "Unauthorized Access")

    current_user.role = UserRole.admin
    session.add(current_user)
    session.commit()

    return {"message": "Admin role bootstrapped successfully."}


# -------- DASHBOARD --------

@router.get("/dashboard")
def admin_dashboard(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    total_revenue = session.exec(
        select(func.coalesce(func.sum(Purchase.amount), 0.0))
        .where(Purchase.status == PurchaseStatus.completed)
    ).one()

    return {
        "total_users": _count(session, User),
        "total_courses": _count(session, Course),
        "published_courses": _count(session, Course, Course.is_published == True),  # noqa: E712
        "unpublished_courses": _count(session, Course, Course.is_published == False),  # noqa: E712
        "pending_purchases": _count(
            session, Purchase, Purchase.status == PurchaseStatus.pending
        ),
        "completed_purchases": _count(
            session, Purchase, Purchase.status == PurchaseStatus.completed
        ),
        "total_revenue": round(float(total_revenue), 2),
        "total_course_progress": _count(session, CourseProgress),
    }


# -------- USERS --------

@router.get("/users")
def list_users(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    users = session.exec(select(User).order_by(User.created_at.desc())).all()
    return {"users": users}


@router.put("/users/role")
def set_user_role(
    payload: RoleUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    user = session.get(User, payload.user_id)
    if not user:
        raise HTTPException(404, "User not found")

    user.role = UserRole(payload.role)
    session.add(user)
    session.commit()

    return {"message": f"User role updated to {payload.role}."}


@router.patch("/users/{user_id}/login")
def set_user_login(
    user_id: str,
    payload: LoginToggle,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id and not payload.can_login:
        raise HTTPException(400, "You cannot disable your own account.")

    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    user.can_login = payload.can_login
    session.add(user)
    session.commit()

    state = "enabled" if user.can_login else "disabled"
    return {"message": f"Login {state} for user."}


# -------- COURSES --------

@router.get("/courses")
def list_courses(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    courses = session.exec(select(Course).order_by(Course.created_at.desc())).all()

    return {
        "courses": [
            {
                "id": c.id,
                "title": c.title,
                "price": c.price,
                "discount": c.discount,
                "is_published": c.is_published,
                "instructor_id": c.instructor_id,
                "enrolled_count": count_enrollments(session, c.id),
                "created_at": c.created_at,
                "updated_at": c.updated_at,
            }
            for c in courses
        ]
    }


@router.patch("/courses/{course_id}/publish")
def toggle_course_publish(
    course_id: int,
    payload: PublishToggle,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    course = session.get(Course, course_id)
    if not course:
        raise HTTPException(404, "Course not found")

    course.is_published = payload.is_published
    session.add(course)
    session.commit()

    return {
        "message": "Course publish status updated.",
        "course": {"id": course.id, "title": course.title, "is_published": course.is_published},
    }


@router.delete("/courses/{course_id}")
def delete_course_admin(
    course_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    course = session.get(Course, course_id)
    if not course:
        raise HTTPException(404, "Course not found")

    removed = delete_course(session, course)
    return {"message": "Course deleted by admin.", "enrollments_removed": removed}


# -------- PURCHASES --------

@router.get("/purchases")
def list_purchases(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[PurchaseStatus] = None,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    query = select(Purchase, Course.title).join(
        Course, Course.id == Purchase.course_id, isouter=True
    )

    if status:
        query = query.where(Purchase.status == status)

    query = query.order_by(Purchase.created_at.desc())

    return paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serialize=lambda row: purchase_read(*row),
    )


@router.get("/purchases/{purchase_id}/timeline")
def purchase_timeline(
    purchase_id: str,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    purchase = session.get(Purchase, purchase_id)
    if not purchase:
        raise HTTPException(404, "Purchase not found")

    course = session.get(Course, purchase.course_id)

    return {
        "purchase": purchase_read(purchase, course.title if course else None),
        "events": get_purchase_timeline(session, purchase.id),
    }


# -------- INSTRUCTOR REQUESTS --------

@router.get("/instructor-requests")
def list_instructor_requests(
    status: str = Query("pending"),
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    status = status.lower()
    if status not in {"pending", "approved", "rejected", "all"}:
        raise HTTPException(400, "Invalid status filter.")

    query = select(InstructorRequest, User).join(
        User, User.id == InstructorRequest.user_id, isouter=True
    )
    if status != "all":
        query = query.where(InstructorRequest.status == RequestStatus(status))

    rows = session.exec(query.order_by(InstructorRequest.created_at.desc())).all()

    return {
        "requests": [
            {
                **request.model_dump(),
                "user": {
                    "id": user.id,
                    "name": user.name,
                    "email": user.email,
                    "image_url": user.image_url,
                    "role": user.role,
                } if user else None,
            }
            for request, user in rows
        ]
    }


def _get_request(session: Session, request_id: int) -> InstructorRequest:
    request = session.get(InstructorRequest, request_id)
    if not request:
        raise HTTPException(404, "Request not found.")
    return request


@router.post("/instructor-requests/{request_id}/approve")
def approve_instructor_request(
    request_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    request = _get_request(session, request_id)

    if not approve_request(session, request, admin):
        return {"message": "Request already approved."}

    return {"message": "Instructor request approved."}


@router.post("/instructor-requests/{request_id}/reject")
def reject_instructor_request(
    request_id: int,
    payload: Optional[RequestDecision] = None,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    request = _get_request(session, request_id)

    note = payload.decision_note if payload else ""

    if not reject_request(session, request, admin, note):
        return {"message": "Request already rejected."}

    return {"message": "Instructor request rejected."}
