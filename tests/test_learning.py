"""Tests for lecture progress tracking and course ratings."""
import pytest
from sqlmodel import select

from skillsync.models import Course, CourseProgress, CourseRating, Enrollment, UserRole
from skillsync.services.course_service import delete_course
from skillsync.services.progress_service import lecture_ids
from tests.helpers import auth_headers

STUDENT = auth_headers("U1")

CONTENT = [
    {
        "chapter_id": "ch1",
        "chapter_title": "Basics",
        "chapter_content": [
            {"lecture_id": "l1", "lecture_title": "Hello"},
            {"lecture_id": "l2", "lecture_title": "Routing"},
        ],
    },
    {
        "chapter_id": "ch2",
        "chapter_title": "Data",
        "chapter_content": [{"lecture_id": "l3", "lecture_title": "Models"}],
    },
]


@pytest.fixture
def course(session, make_user, make_course):
    instructor = make_user("I1", role=UserRole.instructor)
    student = make_user("U1")
    course = make_course(instructor, content=CONTENT)
    session.add(Enrollment(user_id=student.id, course_id=course.id))
    session.commit()
    return course


class TestLectureIds:

    def test_walks_chapters_in_order(self):
        course = Course(title="C", description="d", price=1.0, instructor_id="I1",
                        content=CONTENT)

        assert lecture_ids(course) == ["l1", "l2", "l3"]

    def test_empty_content(self):
        course = Course(title="C", description="d", price=1.0, instructor_id="I1")

        assert lecture_ids(course) == []


class TestCourseProgress:

    def _complete(self, client, course_id, lecture_id, headers=STUDENT):
        return client.post(
            "/users/course-progress",
            json={"course_id": course_id, "lecture_id": lecture_id},
            headers=headers,
        )

    def test_first_lecture_creates_record(self, client, session, course):
        response = self._complete(client, course.id, "l1")

        assert response.json()["message"] == "Progress updated"
        progress = session.get(CourseProgress, ("U1", course.id))
        assert progress.lecture_completed == ["l1"]

    def test_lectures_accumulate_in_order(self, client, session, course):
        self._complete(client, course.id, "l3")
        self._complete(client, course.id, "l1")

        session.expire_all()
        progress = session.get(CourseProgress, ("U1", course.id))
        assert progress.lecture_completed == ["l3", "l1"]

    def test_completed_lecture_is_not_duplicated(self, client, session, course):
        self._complete(client, course.id, "l2")
        response = self._complete(client, course.id, "l2")

        assert response.status_code == 200
        assert response.json()["message"] == "Lecture already completed"
        session.expire_all()
        assert session.get(CourseProgress, ("U1", course.id)).lecture_completed == ["l2"]

    def test_unknown_lecture_404(self, client, session, course):
        response = self._complete(client, course.id, "l99")

        assert response.status_code == 404
        assert session.get(CourseProgress, ("U1", course.id)) is None

    def test_not_enrolled_forbidden(self, client, session, course, make_user):
        make_user("U2")

        response = self._complete(client, course.id, "l1", headers=auth_headers("U2"))

        assert response.status_code == 403
        assert session.exec(select(CourseProgress)).all() == []

    def test_unknown_course_404(self, client, course):
        response = self._complete(client, 999, "l1")

        assert response.status_code == 404

    def test_read_progress(self, client, course):
        self._complete(client, course.id, "l1")

        response = client.get(f"/users/course-progress/{course.id}", headers=STUDENT)

        assert response.json() == {
            "course_id": course.id,
            "lecture_completed": ["l1"],
            "total_lectures": 3,
        }

    def test_read_progress_before_any_lecture(self, client, course):
        response = client.get(f"/users/course-progress/{course.id}", headers=STUDENT)

        assert response.json()["lecture_completed"] == []


class TestCourseRating:

    def _rate(self, client, course_id, rating, headers=STUDENT):
        return client.post(
            "/users/rating",
            json={"course_id": course_id, "rating": rating},
            headers=headers,
        )

    def test_rating_recorded(self, client, session, course):
        response = self._rate(client, course.id, 4)

        assert response.json() == {
            "message": "Rating added",
            "average_rating": 4.0,
            "rating_count": 1,
        }
        assert session.get(CourseRating, ("U1", course.id)).rating == 4

    def test_second_rating_overwrites_first(self, client, session, course):
        self._rate(client, course.id, 2)
        response = self._rate(client, course.id, 5)

        assert response.json()["rating_count"] == 1
        assert response.json()["average_rating"] == 5.0
        assert len(session.exec(select(CourseRating)).all()) == 1

    def test_average_across_students(self, client, session, course, make_user):
        make_user("U2")
        session.add(Enrollment(user_id="U2", course_id=course.id))
        session.commit()

        self._rate(client, course.id, 5)
        response = self._rate(client, course.id, 2, headers=auth_headers("U2"))

        assert response.json()["average_rating"] == 3.5
        assert response.json()["rating_count"] == 2

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_out_of_range_rejected(self, client, course, rating):
        assert self._rate(client, course.id, rating).status_code == 422

    def test_not_enrolled_forbidden(self, client, session, course, make_user):
        make_user("U2")

        response = self._rate(client, course.id, 5, headers=auth_headers("U2"))

        assert response.status_code == 403
        assert session.exec(select(CourseRating)).all() == []


class TestCourseDeletionCleanup:

    def test_progress_and_ratings_removed_with_course(self, client, session, course):
        client.post("/users/course-progress",
                    json={"course_id": course.id, "lecture_id": "l1"}, headers=STUDENT)
        client.post("/users/rating", json={"course_id": course.id, "rating": 3},
                    headers=STUDENT)

        delete_course(session, session.get(Course, course.id))

        assert session.exec(select(CourseProgress)).all() == []
        assert session.exec(select(CourseRating)).all() == []
