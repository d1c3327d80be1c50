"""create lms tables

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-19 10:12:41.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum("student", "instructor", "admin", name="userrole")
purchase_status = sa.Enum("pending", "completed", "failed", name="purchasestatus")
request_status = sa.Enum("pending", "approved", "rejected", name="requeststatus")
request_source = sa.Enum("user", "admin", name="requestsource")


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("can_login", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "course",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("thumbnail_url", sa.String(), nullable=True),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("discount", sa.Float(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("instructor_id", sa.String(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_course_instructor_id", "course", ["instructor_id"])

    op.create_table(
        "enrollment",
        sa.Column("user_id", sa.String(), sa.ForeignKey("user.id"), primary_key=True),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("course.id"), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    # course_id/user_id deliberately carry no foreign keys
    op.create_table(
        "purchase",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("status", purchase_status, nullable=False),
        sa.Column("checkout_session_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_purchase_course_id", "purchase", ["course_id"])
    op.create_index("ix_purchase_user_id", "purchase", ["user_id"])
    op.create_index("ix_purchase_status", "purchase", ["status"])
    op.create_index("ix_purchase_checkout_session_id", "purchase", ["checkout_session_id"])

    op.create_table(
        "purchase_event",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("purchase_id", sa.String(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False, server_default="system"),
    )
    op.create_index("ix_purchase_event_purchase_id", "purchase_event", ["purchase_id"])
    op.create_index("ix_purchase_event_event_type", "purchase_event", ["event_type"])

    op.create_table(
        "instructor_request",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("status", request_status, nullable=False),
        sa.Column("source", request_source, nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("decision_note", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_instructor_request_user_id", "instructor_request", ["user_id"])
    op.create_index("ix_instructor_request_status", "instructor_request", ["status"])


def downgrade():
    op.drop_table("instructor_request")
    op.drop_table("purchase_event")
    op.drop_table("purchase")
    op.drop_table("enrollment")
    op.drop_table("course")
    op.drop_table("user")

    bind = op.get_bind()
    for enum in (request_source, request_status, purchase_status, user_role):
        enum.drop(bind, checkfirst=True)
