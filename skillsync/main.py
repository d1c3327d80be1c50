import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillsync.config import settings
from skillsync.database import create_db_and_tables
from skillsync.routes import admin, health, instructor, users, webhooks

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield


app = FastAPI(title="SkillSync LMS API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(instructor.router, prefix="/instructor", tags=["Instructor"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "user_endpoints": [
            "/users/me", "/users/purchase", "/users/enrolled-courses",
            "/users/purchases", "/users/instructor-request",
            "/users/course-progress", "/users/course-progress/{course_id}",
            "/users/rating"
        ],
        "instructor_endpoints": [
            "/instructor/courses", "/instructor/courses/{course_id}",
            "/instructor/dashboard", "/instructor/enrolled-students"
        ],
        "admin_endpoints": [
            "/admin/bootstrap", "/admin/dashboard", "/admin/users",
            "/admin/users/role", "/admin/users/{user_id}/login",
            "/admin/courses", "/admin/courses/{course_id}",
            "/admin/courses/{course_id}/publish", "/admin/purchases",
            "/admin/purchases/{purchase_id}/timeline",
            "/admin/instructor-requests"
        ],
        "webhooks": ["/webhooks/stripe"],
    }
