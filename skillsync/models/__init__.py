from skillsync.models.enrollment import Enrollment
from skillsync.models.user import User, UserRole
from skillsync.models.course import Course
from skillsync.models.course_progress import CourseProgress
from skillsync.models.course_rating import CourseRating
from skillsync.models.purchase import Purchase, PurchaseStatus
from skillsync.models.purchase_event import PurchaseEvent
from skillsync.models.instructor_request import (
    InstructorRequest,
    RequestSource,
    RequestStatus,
)

# add ALL models here
