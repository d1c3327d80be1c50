from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from skillsync.database import get_session
from skillsync.dependencies.auth import require_instructor
from skillsync.models.course import Course
from skillsync.models.enrollment import Enrollment
from skillsync.models.purchase import Purchase, PurchaseStatus
from skillsync.models.user import User
from skillsync.schemas.course_schemas import CourseCreate, CourseUpdate
from skillsync.services.course_service import (
    count_enrollments,
    delete_course,
    has_purchase_history,
)
from skillsync.utils.clock import utcnow

router = APIRouter()


def _owned_course(session: Session, course_id: int, instructor: User) -> Course:
    course = session.get(Course, course_id)

    if not course:
        raise HTTPException(404, "Course not found")

    if course.instructor_id != instructor.id:
        raise HTTPException(403, "Unauthorized access")

    return course


@router.post("/courses")
def add_course(
    payload: CourseCreate,
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    data = payload.model_dump()
    course = Course(**data, instructor_id=instructor.id)

    session.add(course)
    session.commit()
    session.refresh(course)

    return {"message": "Course added", "course_id": course.id}


@router.get("/courses")
def get_instructor_courses(
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    courses = session.exec(
        select(Course)
        .where(Course.instructor_id == instructor.id)
        .order_by(Course.created_at.desc())
    ).all()
    return {"courses": courses}


@router.get("/courses/{course_id}")
def get_instructor_course(
    course_id: int,
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    return {"course": _owned_course(session, course_id, instructor)}


@router.put("/courses/{course_id}")
def update_course(
    course_id: int,
    payload: CourseUpdate,
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    course = _owned_course(session, course_id, instructor)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(course, field, value)

    course.updated_at = utcnow()
    session.add(course)
    session.commit()

    return {"message": "Course updated"}


@router.delete("/courses/{course_id}")
def delete_own_course(
    course_id: int,
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    course = _owned_course(session, course_id, instructor)

    if count_enrollments(session, course.id) > 0:
        raise HTTPException(
            400,
            "This course has enrolled students and cannot be deleted. "
            "Please unpublish it instead.",
        )

    if has_purchase_history(session, course.id):
        raise HTTPException(
            400,
            "This course has purchase history and cannot be deleted. "
            "Please unpublish it instead.",
        )

    delete_course(session, course)
    return {"message": "Course deleted"}


@router.get("/dashboard")
def instructor_dashboard(
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    courses = session.exec(
        select(Course).where(Course.instructor_id == instructor.id)
    ).all()
    course_ids = [c.id for c in courses]

    total_earnings = 0.0
    enrolled_students_data = []

    if course_ids:
        total_earnings = session.exec(
            select(func.coalesce(func.sum(Purchase.amount), 0.0))
            .where(Purchase.course_id.in_(course_ids))
            .where(Purchase.status == PurchaseStatus.completed)
        ).one()

        titles = {c.id: c.title for c in courses}
        rows = session.exec(
            select(Enrollment.course_id, User)
            .join(User, User.id == Enrollment.user_id)
            .where(Enrollment.course_id.in_(course_ids))
        ).all()

        enrolled_students_data = [
            {
                "course_title": titles[course_id],
                "student": {
                    "id": student.id,
                    "name": student.name,
                    "image_url": student.image_url,
                },
            }
            for course_id, student in rows
        ]

    return {
        "total_earnings": round(float(total_earnings), 2),
        "total_courses": len(courses),
        "enrolled_students_data": enrolled_students_data,
    }


@router.get("/enrolled-students")
def enrolled_students(
    session: Session = Depends(get_session),
    instructor: User = Depends(require_instructor),
):
    rows = session.exec(
        select(Purchase, Course, User)
        .join(Course, Course.id == Purchase.course_id)
        .join(User, User.id == Purchase.user_id)
        .where(Course.instructor_id == instructor.id)
        .where(Purchase.status == PurchaseStatus.completed)
        .order_by(Purchase.created_at.desc())
    ).all()

    return {
        "enrolled_students": [
            {
                "student": {
                    "id": student.id,
                    "name": student.name,
                    "image_url": student.image_url,
                },
                "course_title": course.title,
                "purchase_date": purchase.created_at,
            }
            for purchase, course, student in rows
        ]
    }
