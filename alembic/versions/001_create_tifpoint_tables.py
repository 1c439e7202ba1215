"""create tifpoint tables

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision  = "001"
down_revision = None
branch_labels = None
depends_on    = None

user_role = sa.Enum("ADMIN", "MAHASISWA", name="user_role_enum")
activity_status = sa.Enum("PENDING", "APPROVED", "REJECTED", name="activity_status_enum")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id",                     sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("username",               sa.String(80),              nullable=False),
        sa.Column("email",                  sa.String(255),             nullable=False),
        sa.Column("name",                   sa.String(120),             nullable=False),
        sa.Column("nim",                    sa.String(30),              nullable=True),
        sa.Column("password_hash",          sa.Text(),                  nullable=False),
        sa.Column("role",                   user_role,                  nullable=False, server_default="MAHASISWA"),
        sa.Column("reset_password_token",   sa.String(64),              nullable=True),
        sa.Column("reset_password_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at",             sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",             sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_id",                   "users", ["id"],                   unique=False)
    op.create_index("ix_users_username",             "users", ["username"],             unique=True)
    op.create_index("ix_users_email",                "users", ["email"],                unique=True)
    op.create_index("ix_users_nim",                  "users", ["nim"],                  unique=True)
    op.create_index("ix_users_reset_password_token", "users", ["reset_password_token"], unique=False)

    op.create_table(
        "competencies",
        sa.Column("id",          sa.Integer(),               primary_key=True),
        sa.Column("name",        sa.String(120),             nullable=False),
        sa.Column("description", sa.String(500),             nullable=True),
        sa.Column("created_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_competencies_id",   "competencies", ["id"],   unique=False)
    op.create_index("ix_competencies_name", "competencies", ["name"], unique=False)

    op.create_table(
        "activity_types",
        sa.Column("id",          sa.Integer(),               primary_key=True),
        sa.Column("name",        sa.String(120),             nullable=False),
        sa.Column("description", sa.String(500),             nullable=True),
        sa.Column("created_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_activity_types_id",   "activity_types", ["id"],   unique=False)
    op.create_index("ix_activity_types_name", "activity_types", ["name"], unique=True)

    op.create_table(
        "recognized_courses",
        sa.Column("id",          sa.Integer(),               primary_key=True),
        sa.Column("name",        sa.String(200),             nullable=False),
        sa.Column("provider",    sa.String(120),             nullable=False),
        sa.Column("duration",    sa.Integer(),               nullable=False),
        sa.Column("point_value", sa.Integer(),               nullable=False),
        sa.Column("url",         sa.Text(),                  nullable=True),
        sa.Column("created_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_recognized_courses_id",          "recognized_courses", ["id"],          unique=False)
    op.create_index("ix_recognized_courses_point_value", "recognized_courses", ["point_value"], unique=False)

    op.create_table(
        "events",
        sa.Column("id",          sa.Integer(),               primary_key=True),
        sa.Column("title",       sa.String(200),             nullable=False),
        sa.Column("description", sa.Text(),                  nullable=True),
        sa.Column("date",        sa.DateTime(timezone=True), nullable=False),
        sa.Column("location",    sa.String(200),             nullable=True),
        sa.Column("organizer",   sa.String(200),             nullable=True),
        sa.Column("point_value", sa.Integer(),               nullable=True),
        sa.Column("created_at",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_events_id",   "events", ["id"],   unique=False)
    op.create_index("ix_events_date", "events", ["date"], unique=False)

    op.create_table(
        "activities",
        sa.Column("id",                   sa.Integer(),               primary_key=True),
        sa.Column("title",                sa.String(200),             nullable=False),
        sa.Column("description",          sa.Text(),                  nullable=True),
        sa.Column("user_id",              sa.Integer(),               sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("competency_id",        sa.Integer(),               sa.ForeignKey("competencies.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("activity_type_id",     sa.Integer(),               sa.ForeignKey("activity_types.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("recognized_course_id", sa.Integer(),               sa.ForeignKey("recognized_courses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("event_id",             sa.Integer(),               sa.ForeignKey("events.id", ondelete="SET NULL"), nullable=True),
        sa.Column("document_url",         sa.Text(),                  nullable=False),
        sa.Column("point",                sa.Integer(),               nullable=True),
        sa.Column("status",               activity_status,            nullable=False),
        sa.Column("comment",              sa.Text(),                  nullable=True),
        sa.Column("verified_by_id",       sa.Integer(),               sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("verified_at",          sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at",           sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",           sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_activities_id",               "activities", ["id"],                unique=False)
    op.create_index("ix_activities_user_id",          "activities", ["user_id"],           unique=False)
    op.create_index("ix_activities_competency_id",    "activities", ["competency_id"],     unique=False)
    op.create_index("ix_activities_activity_type_id", "activities", ["activity_type_id"],  unique=False)
    op.create_index("ix_activities_user_status",      "activities", ["user_id", "status"], unique=False)


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("events")
    op.drop_table("recognized_courses")
    op.drop_table("activity_types")
    op.drop_table("competencies")
    op.drop_table("users")
    activity_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
