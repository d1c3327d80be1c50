"""Shared fixtures: in-memory database, fake gateway, model factories."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from skillsync.database import build_engine, create_db_and_tables, get_session
from skillsync.main import app
from skillsync.models import Course, Purchase, PurchaseStatus, User, UserRole
from skillsync.services.gateway import get_payment_gateway
from tests.helpers import FakeGateway


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session, gateway):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(user_id, role=UserRole.student, **kwargs):
        user = User(
            id=user_id,
            email=kwargs.pop("email", f"{user_id.lower()}@example.com"),
            name=kwargs.pop("name", user_id),
            role=role,
            **kwargs,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_course(session):
    def _make(instructor, price=100.0, discount=0.0, **kwargs):
        course = Course(
            title=kwargs.pop("title", "Intro to Testing"),
            description=kwargs.pop("description", "Learn to test"),
            price=price,
            discount=discount,
            instructor_id=instructor.id,
            **kwargs,
        )
        session.add(course)
        session.commit()
        session.refresh(course)
        return course
    return _make


@pytest.fixture
def make_purchase(session):
    def _make(user, course, status=PurchaseStatus.pending, **kwargs):
        purchase = Purchase(
            user_id=user.id,
            course_id=course.id,
            amount=kwargs.pop("amount", course.effective_price),
            status=status,
            **kwargs,
        )
        session.add(purchase)
        session.commit()
        session.refresh(purchase)
        return purchase
    return _make


@pytest.fixture
def scenario(make_user, make_course, make_purchase):
    """Pending purchase P1 of course C1 by user U1."""
    instructor = make_user("I1", role=UserRole.instructor)
    student = make_user("U1")
    course = make_course(instructor, price=200.0, discount=25.0, title="C1")
    purchase = make_purchase(student, course, id="P1")
    return {
        "instructor": instructor,
        "user": student,
        "course": course,
        "purchase": purchase,
    }
