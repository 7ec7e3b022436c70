"""Initial schema: users, clients, profiles, assessments, assignments

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("hashed_password", sa.String(length=1024), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_superuser", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "clients",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_clients_slug", "clients", ["slug"], unique=True)

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("client_id", sa.String(length=36), sa.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True),
        sa.Column("auth_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("access_level", sa.String(), nullable=False, server_default="member"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("auth_user_id"),
    )
    op.create_index("ix_profiles_client_id", "profiles", ["client_id"])
    op.create_index("ix_profiles_username", "profiles", ["username"])
    op.create_index("ix_profiles_email", "profiles", ["email"])

    op.create_table(
        "assessments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_360", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("number_of_questions", sa.Integer(), nullable=True),
        sa.Column("dimension_question_counts", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "dimensions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("assessment_id", sa.String(length=36), sa.ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=True),
    )
    op.create_index("ix_dimensions_assessment_id", "dimensions", ["assessment_id"])

    op.create_table(
        "fields",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("assessment_id", sa.String(length=36), sa.ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dimension_id", sa.String(length=36), sa.ForeignKey("dimensions.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", sa.String(), nullable=False, server_default="rich_text"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=True),
    )
    op.create_index("ix_fields_assessment_id", "fields", ["assessment_id"])
    op.create_index("ix_fields_dimension_id", "fields", ["dimension_id"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assessment_id", sa.String(length=36), sa.ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("target_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("custom_fields", sa.JSON(), nullable=True),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
        sa.Column("whitelabel", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("job_id", sa.String(), nullable=True),
        sa.Column("survey_id", sa.String(length=36), nullable=False),
        sa.Column("url", sa.String(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_frequency", sa.String(), nullable=True),
        sa.Column("next_reminder", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_assignments_user_id", "assignments", ["user_id"])
    op.create_index("ix_assignments_assessment_id", "assignments", ["assessment_id"])
    op.create_index("ix_assignments_target_id", "assignments", ["target_id"])
    op.create_index("ix_assignments_expires", "assignments", ["expires"])
    op.create_index("ix_assignments_survey_id", "assignments", ["survey_id"])
    op.create_index("ix_assignments_completed", "assignments", ["completed"])
    op.create_index("ix_assignments_reminder_due", "assignments", ["reminder", "completed", "next_reminder"])

    op.create_table(
        "assignment_fields",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("assignment_id", sa.String(length=36), sa.ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("field_id", sa.String(length=36), sa.ForeignKey("fields.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.UniqueConstraint("assignment_id", "field_id", name="uq_assignment_fields_assignment_field"),
    )
    op.create_index("ix_assignment_fields_id", "assignment_fields", ["id"])
    op.create_index("ix_assignment_fields_assignment_id", "assignment_fields", ["assignment_id"])


def downgrade() -> None:
    op.drop_table("assignment_fields")
    op.drop_table("assignments")
    op.drop_table("fields")
    op.drop_table("dimensions")
    op.drop_table("assessments")
    op.drop_table("profiles")
    op.drop_table("clients")
    op.drop_table("users")
