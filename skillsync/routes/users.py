from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlmodel import Session, select

from skillsync.config import settings
from skillsync.database import get_session
from skillsync.models.course import Course
from skillsync.models.enrollment import Enrollment
from skillsync.models.user import User
from skillsync.schemas.instructor_request_schemas import InstructorRequestCreate
from skillsync.schemas.progress_schemas import ProgressUpdate, RatingCreate
from skillsync.schemas.purchase_schemas import CheckoutResponse, PurchaseCreate
from skillsync.services.enrollment_service import is_enrolled
from skillsync.services.gateway import (
    PaymentGateway,
    PaymentGatewayError,
    get_payment_gateway,
)
from skillsync.services.instructor_request_service import (
    DAILY_REQUEST_LIMIT,
    InstructorRequestError,
    count_requests_today,
    current_request_for,
    submit_request,
)
from skillsync.services.progress_service import (
    get_progress,
    lecture_ids,
    mark_lecture_completed,
)
from skillsync.services.purchase_service import (
    create_purchase,
    list_user_purchases,
    open_checkout,
    purchase_read,
)
from skillsync.services.rating_service import rate_course, rating_summary
from skillsync.services.reconciliation import fail_purchase
from skillsync.utils.token import get_current_user

router = APIRouter()


@router.get("/me")
def get_user_data(current_user: User = Depends(get_current_user)):
    return {
        "id": current_user.id,
        "email": current_user.email,
        "name": current_user.name,
        "image_url": current_user.image_url,
        "role": current_user.role,
        "created_at": current_user.created_at,
    }


@router.post("/purchase", response_model=CheckoutResponse)
def purchase_course(
    payload: PurchaseCreate,
    origin: Optional[str] = Header(None),
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_user),
):
    course = session.get(Course, payload.course_id)

    if not course or not course.is_published:
        raise HTTPException(404, "Course not found")

    if is_enrolled(session, current_user.id, course.id):
        raise HTTPException(400, "Already enrolled in this course")

    purchase = create_purchase(session, current_user, course)

    try:
        session_url = open_checkout(
            session,
            gateway,
            purchase,
            course,
            origin or settings.frontend_url,
        )
    except PaymentGatewayError:
        fail_purchase(session, purchase.id, trigger="checkout_error")
        raise HTTPException(502, "Payment gateway unavailable")

    return CheckoutResponse(
        purchase_id=purchase.id,
        amount=purchase.amount,
        status=purchase.status,
        session_url=session_url,
    )


@router.get("/enrolled-courses")
def user_enrolled_courses(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    courses = session.exec(
        select(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .where(Enrollment.user_id == current_user.id)
        .order_by(Enrollment.created_at.desc())
    ).all()
    return {"enrolled_courses": courses}


@router.get("/purchases")
def user_purchases(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    rows = list_user_purchases(session, current_user.id)
    return {"purchases": [purchase_read(purchase, title) for purchase, title in rows]}


@router.post("/instructor-request")
def request_instructor_role(
    payload: InstructorRequestCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        request = submit_request(session, current_user, payload.message)
    except InstructorRequestError as exc:
        raise HTTPException(400, str(exc))

    return {
        "message": "Instructor request submitted. Await admin approval.",
        "request_id": request.id,
    }


@router.get("/instructor-request")
def get_my_instructor_request(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    requests_today = count_requests_today(session, current_user.id)

    return {
        "request": current_request_for(session, current_user),
        "current_role": current_user.role,
        "limit": {
            "daily_max": DAILY_REQUEST_LIMIT,
            "requests_today": requests_today,
            "remaining_today": max(0, DAILY_REQUEST_LIMIT - requests_today),
        },
    }


def _enrolled_course(session: Session, user: User, course_id: int) -> Course:
    course = session.get(Course, course_id)
    if not course:
        raise HTTPException(404, "Course not found")

    if not is_enrolled(session, user.id, course.id):
        raise HTTPException(403, "You are not enrolled in this course")

    return course


@router.post("/course-progress")
def update_course_progress(
    payload: ProgressUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    course = _enrolled_course(session, current_user, payload.course_id)

    if payload.lecture_id not in lecture_ids(course):
        raise HTTPException(404, "Lecture not found in this course")

    if not mark_lecture_completed(session, current_user.id, course.id, payload.lecture_id):
        return {"message": "Lecture already completed"}

    return {"message": "Progress updated"}


@router.get("/course-progress/{course_id}")
def get_course_progress(
    course_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    course = _enrolled_course(session, current_user, course_id)
    progress = get_progress(session, current_user.id, course.id)

    return {
        "course_id": course.id,
        "lecture_completed": progress.lecture_completed if progress else [],
        "total_lectures": len(lecture_ids(course)),
    }


@router.post("/rating")
def add_course_rating(
    payload: RatingCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    course = _enrolled_course(session, current_user, payload.course_id)
    rate_course(session, current_user.id, course.id, payload.rating)

    return {"message": "Rating added", **rating_summary(session, course.id)}
