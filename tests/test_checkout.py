"""Tests for purchase creation, checkout hand-off and student endpoints."""
from sqlmodel import select

from skillsync.models import (
    Course,
    Enrollment,
    Purchase,
    PurchaseEvent,
    PurchaseStatus,
    User,
    UserRole,
)
from tests.helpers import auth_headers


class TestPurchaseCourse:

    def test_creates_pending_purchase_with_price_snapshot(
        self, client, session, gateway, make_user, make_course
    ):
        instructor = make_user("I1", role=UserRole.instructor)
        course = make_course(instructor, price=80.0, discount=12.5, title="Async Python")

        response = client.post(
            "/users/purchase",
            json={"course_id": course.id},
            headers={**auth_headers("U1"), "Origin": "https://lms.example"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 70.0
        assert data["status"] == "pending"
        assert data["session_url"] == "https://checkout.test/cs_test_1"

        purchase = session.get(Purchase, data["purchase_id"])
        assert purchase.status == PurchaseStatus.pending
        assert purchase.checkout_session_id == "cs_test_1"
        assert purchase.user_id == "U1"

    def test_checkout_carries_purchase_id_and_return_urls(
        self, client, gateway, make_user, make_course
    ):
        instructor = make_user("I1", role=UserRole.instructor)
        course = make_course(instructor, price=49.99, title="SQL Basics")

        response = client.post(
            "/users/purchase",
            json={"course_id": course.id},
            headers={**auth_headers("U1"), "Origin": "https://lms.example"},
        )

        [checkout] = gateway.checkouts
        assert checkout["purchase_id"] == response.json()["purchase_id"]
        assert checkout["title"] == "SQL Basics"
        assert checkout["amount"] == 49.99
        assert checkout["success_url"] == "https://lms.example/my-enrollments"
        assert checkout["cancel_url"] == f"https://lms.example/course/{course.id}"

    def test_origin_falls_back_to_frontend_url(self, client, gateway, make_user, make_course):
        instructor = make_user("I1", role=UserRole.instructor)
        course = make_course(instructor)

        client.post("/users/purchase", json={"course_id": course.id},
                    headers=auth_headers("U1"))

        assert gateway.checkouts[0]["success_url"].endswith("/my-enrollments")
        assert gateway.checkouts[0]["success_url"].startswith("http")

    def test_purchase_is_logged(self, client, session, make_user, make_course):
        instructor = make_user("I1", role=UserRole.instructor)
        course = make_course(instructor)

        response = client.post("/users/purchase", json={"course_id": course.id},
                               headers=auth_headers("U1"))

        event = session.exec(
            select(PurchaseEvent)
            .where(PurchaseEvent.purchase_id == response.json()["purchase_id"])
        ).one()
        assert event.event_type == "purchase_created"
        assert event.created_by == "U1"

    def test_unknown_course_404(self, client):
        response = client.post("/users/purchase", json={"course_id": 999},
                               headers=auth_headers("U1"))

        assert response.status_code == 404

    def test_unpublished_course_404(self, client, make_user, make_course):
        instructor = make_user("I1", role=UserRole.instructor)
        course = make_course(instructor, is_published=False)

        response = client.post("/users/purchase", json={"course_id": course.id},
                               headers=auth_headers("U1"))

        assert response.status_code == 404

    def test_already_enrolled_rejected(self, client, session, gateway, make_user, make_course):
        instructor = make_user("I1", role=UserRole.instructor)
        student = make_user("U1")
        course = make_course(instructor)
        session.add(Enrollment(user_id=student.id, course_id=course.id))
        session.commit()

        response = client.post("/users/purchase", json={"course_id": course.id},
                               headers=auth_headers("U1"))

        assert response.status_code == 400
        assert gateway.checkouts == []

    def test_gateway_failure_fails_purchase(self, client, session, gateway, make_user,
                                            make_course):
        instructor = make_user("I1", role=UserRole.instructor)
        course = make_course(instructor)
        gateway.fail_checkout = True

        response = client.post("/users/purchase", json={"course_id": course.id},
                               headers=auth_headers("U1"))

        assert response.status_code == 502
        [purchase] = session.exec(select(Purchase)).all()
        assert purchase.status == PurchaseStatus.failed

    def test_requires_token(self, client):
        response = client.post("/users/purchase", json={"course_id": 1})

        assert response.status_code == 401


class TestCurrentUser:

    def test_first_request_creates_local_user(self, client, session):
        response = client.get(
            "/users/me",
            headers=auth_headers("U9", email="nine@example.com", name="Nine"),
        )

        assert response.status_code == 200
        assert response.json()["email"] == "nine@example.com"
        user = session.get(User, "U9")
        assert user.role == UserRole.student

    def test_local_role_wins_over_token_claim(self, client, make_user):
        make_user("U1", role=UserRole.instructor)

        response = client.get("/users/me", headers=auth_headers("U1", role="student"))

        assert response.json()["role"] == "instructor"

    def test_invalid_token_rejected(self, client):
        response = client.get("/users/me", headers={"Authorization": "Bearer junk"})

        assert response.status_code == 401

    def test_disabled_user_forbidden(self, client, make_user):
        make_user("U1", can_login=False)

        response = client.get("/users/me", headers=auth_headers("U1"))

        assert response.status_code == 403


class TestEnrolledCourses:

    def test_lists_enrolled_courses(self, client, session, make_user, make_course):
        instructor = make_user("I1", role=UserRole.instructor)
        student = make_user("U1")
        owned = make_course(instructor, title="Owned")
        make_course(instructor, title="Not owned")
        session.add(Enrollment(user_id=student.id, course_id=owned.id))
        session.commit()

        response = client.get("/users/enrolled-courses", headers=auth_headers("U1"))

        titles = [c["title"] for c in response.json()["enrolled_courses"]]
        assert titles == ["Owned"]

    def test_lists_own_purchases(self, client, scenario, make_user, make_purchase):
        other = make_user("U2")
        make_purchase(other, scenario["course"], id="P2")

        response = client.get("/users/purchases", headers=auth_headers("U1"))

        ids = [p["id"] for p in response.json()["purchases"]]
        assert ids == ["P1"]

    def test_purchase_survives_course_deletion(self, client, session, scenario):
        response = client.get("/users/purchases", headers=auth_headers("U1"))
        assert response.json()["purchases"][0]["course_title"] == "C1"

        session.delete(session.get(Course, scenario["course"].id))
        session.commit()

        response = client.get("/users/purchases", headers=auth_headers("U1"))
        [purchase] = response.json()["purchases"]
        assert purchase["id"] == "P1"
        assert purchase["course_title"] is None
