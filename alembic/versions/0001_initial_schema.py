"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "entity_status": ("ACTIVE", "INACTIVE"),
    "user_role": (
        "SYSTEM_ADMIN",
        "DIOCESAN_ADMIN",
        "PARISH_ADMIN",
        "COMMUNITY_COORDINATOR",
        "PASTORAL_COORDINATOR",
        "VOLUNTEER",
        "FAITHFUL",
    ),
    "member_status": ("ACTIVE", "INACTIVE", "VISITOR", "DECEASED", "TRANSFERRED"),
    "pastoral_role": ("COORDINATOR", "VICE_COORDINATOR", "SECRETARY", "MEMBER"),
    "event_type": (
        "MASS",
        "MEETING",
        "CELEBRATION",
        "RETREAT",
        "FORMATION",
        "SOCIAL",
        "PASTORAL_MEETING",
        "PASTORAL_ACTIVITY",
        "OTHER",
    ),
    "event_status": ("DRAFT", "PUBLISHED", "CANCELLED", "COMPLETED"),
    "recurrence_type": ("DAILY", "WEEKLY", "MONTHLY", "CUSTOM"),
    "assignment_status": ("PENDING", "CONFIRMED", "DECLINED"),
    "mass_intention_type": ("THANKSGIVING", "DECEASED", "HEALTH", "BIRTHDAY", "ANNIVERSARY", "SPECIAL", "OTHER"),
    "mass_schedule_type": ("REGULAR", "SPECIAL", "CONFESSION", "ADORATION"),
    "prayer_category": ("HEALTH", "FAMILY", "WORK", "SPIRITUAL", "THANKSGIVING", "OTHER"),
    "prayer_request_status": ("PENDING", "APPROVED", "REJECTED"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _contact_columns() -> list[sa.Column]:
    return [
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=60), nullable=True),
        sa.Column("zip_code", sa.String(length=20), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "dioceses",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_contact_columns(),
        sa.Column("bishop_name", sa.String(length=200), nullable=True),
        sa.Column("status", _enum("entity_status"), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )

    op.create_table(
        "parishes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("diocese_id", sa.Integer(), sa.ForeignKey("dioceses.id", ondelete="RESTRICT"), nullable=False),
        *_contact_columns(),
        sa.Column("priest_name", sa.String(length=200), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("status", _enum("entity_status"), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )
    op.create_index("ix_parishes_diocese_id", "parishes", ["diocese_id"])

    op.create_table(
        "communities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("parish_id", sa.Integer(), sa.ForeignKey("parishes.id", ondelete="RESTRICT"), nullable=False),
        *_contact_columns(),
        sa.Column("coordinator_name", sa.String(length=200), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("status", _enum("entity_status"), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )
    op.create_index("ix_communities_parish_id", "communities", ["parish_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False, server_default="FAITHFUL"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("force_password_change", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("diocese_id", sa.Integer(), sa.ForeignKey("dioceses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("parish_id", sa.Integer(), sa.ForeignKey("parishes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_diocese_id", "users", ["diocese_id"])
    op.create_index("ix_users_parish_id", "users", ["parish_id"])
    op.create_index("ix_users_community_id", "users", ["community_id"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token", sa.String(length=1024), nullable=False, unique=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("cpf", sa.String(length=14), nullable=True, unique=True),
        sa.Column("rg", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=60), nullable=True),
        sa.Column("zip_code", sa.String(length=20), nullable=True),
        sa.Column("father_name", sa.String(length=200), nullable=True),
        sa.Column("mother_name", sa.String(length=200), nullable=True),
        sa.Column("occupation", sa.String(length=120), nullable=True),
        sa.Column("spouse_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="SET NULL"), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", _enum("member_status"), nullable=False, server_default="ACTIVE"),
        sa.Column("consent_given", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("consent_date", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_members_community_id", "members", ["community_id"])

    op.create_table(
        "global_pastorals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("mission", sa.Text(), nullable=True),
        sa.Column("icon_url", sa.String(length=500), nullable=True),
        sa.Column("color_hex", sa.String(length=9), nullable=True),
        sa.Column("status", _enum("entity_status"), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )

    op.create_table(
        "community_pastorals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "global_pastoral_id",
            sa.Integer(),
            sa.ForeignKey("global_pastorals.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("mission", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("founded_at", sa.Date(), nullable=True),
        sa.Column("status", _enum("entity_status"), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
        sa.UniqueConstraint("global_pastoral_id", "community_id", name="uq_community_pastoral"),
    )
    op.create_index("ix_community_pastorals_community_id", "community_pastorals", ["community_id"])

    op.create_table(
        "pastoral_groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "community_pastoral_id",
            sa.Integer(),
            sa.ForeignKey("community_pastorals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("parent_group_id", sa.Integer(), sa.ForeignKey("pastoral_groups.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("status", _enum("entity_status"), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )
    op.create_index("ix_pastoral_groups_community_pastoral_id", "pastoral_groups", ["community_pastoral_id"])

    op.create_table(
        "pastoral_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "community_pastoral_id",
            sa.Integer(),
            sa.ForeignKey("community_pastorals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("pastoral_group_id", sa.Integer(), sa.ForeignKey("pastoral_groups.id", ondelete="SET NULL"), nullable=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", _enum("pastoral_role"), nullable=False, server_default="MEMBER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("joined_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("community_pastoral_id", "member_id", name="uq_pastoral_member"),
    )
    op.create_index("ix_pastoral_members_community_pastoral_id", "pastoral_members", ["community_pastoral_id"])
    op.create_index("ix_pastoral_members_member_id", "pastoral_members", ["member_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", _enum("event_type"), nullable=False, server_default="OTHER"),
        sa.Column("status", _enum("event_status"), nullable=False, server_default="PUBLISHED"),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_type", _enum("recurrence_type"), nullable=True),
        sa.Column("recurrence_interval", sa.Integer(), nullable=True),
        sa.Column("recurrence_days", sa.JSON(), nullable=True),
        sa.Column("recurrence_end_date", sa.Date(), nullable=True),
        sa.Column("parent_event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_events_community_id", "events", ["community_id"])
    op.create_index("ix_events_start_date", "events", ["start_date"])

    op.create_table(
        "event_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("registered_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("event_id", "member_id", name="uq_event_participant"),
    )
    op.create_index("ix_event_participants_event_id", "event_participants", ["event_id"])
    op.create_index("ix_event_participants_member_id", "event_participants", ["member_id"])

    op.create_table(
        "event_pastorals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "community_pastoral_id",
            sa.Integer(),
            sa.ForeignKey("community_pastorals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(length=120), nullable=True),
        sa.Column("is_leader", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "community_pastoral_id", name="uq_event_pastoral"),
    )
    op.create_index("ix_event_pastorals_event_id", "event_pastorals", ["event_id"])
    op.create_index("ix_event_pastorals_community_pastoral_id", "event_pastorals", ["community_pastoral_id"])

    op.create_table(
        "event_pastoral_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "event_pastoral_id",
            sa.Integer(),
            sa.ForeignKey("event_pastorals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("checked_in_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_event_pastoral_assignments_event_pastoral_id", "event_pastoral_assignments", ["event_pastoral_id"])
    op.create_index("ix_event_pastoral_assignments_member_id", "event_pastoral_assignments", ["member_id"])

    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_schedules_event_id", "schedules", ["event_id"])

    op.create_table(
        "schedule_assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=120), nullable=False),
        sa.Column("status", _enum("assignment_status"), nullable=False, server_default="PENDING"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("checked_in_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_schedule_assignments_schedule_id", "schedule_assignments", ["schedule_id"])
    op.create_index("ix_schedule_assignments_member_id", "schedule_assignments", ["member_id"])

    op.create_table(
        "mass_intentions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("intention_for", sa.String(length=255), nullable=False),
        sa.Column("type", _enum("mass_intention_type"), nullable=False, server_default="OTHER"),
        sa.Column("requested_date", sa.DateTime(), nullable=False),
        sa.Column("requested_by", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("payment_method", sa.String(length=60), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_mass_intentions_community_id", "mass_intentions", ["community_id"])
    op.create_index("ix_mass_intentions_requested_date", "mass_intentions", ["requested_date"])

    op.create_table(
        "mass_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("time", sa.String(length=5), nullable=False),
        sa.Column("type", _enum("mass_schedule_type"), nullable=False, server_default="REGULAR"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_special", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("special_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_mass_schedules_community_id", "mass_schedules", ["community_id"])

    op.create_table(
        "news",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("is_urgent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_news_community_id", "news", ["community_id"])
    op.create_index("ix_news_published_at", "news", ["published_at"])

    op.create_table(
        "prayer_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("community_id", sa.Integer(), sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", _enum("prayer_category"), nullable=False, server_default="OTHER"),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", _enum("prayer_request_status"), nullable=False, server_default="PENDING"),
        sa.Column("prayer_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("moderated_at", sa.DateTime(), nullable=True),
        sa.Column("moderated_by_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_prayer_requests_community_id", "prayer_requests", ["community_id"])


def downgrade() -> None:
    for table in (
        "prayer_requests",
        "news",
        "mass_schedules",
        "mass_intentions",
        "schedule_assignments",
        "schedules",
        "event_pastoral_assignments",
        "event_pastorals",
        "event_participants",
        "events",
        "pastoral_members",
        "pastoral_groups",
        "community_pastorals",
        "global_pastorals",
        "members",
        "refresh_tokens",
        "users",
        "communities",
        "parishes",
        "dioceses",
    ):
        op.drop_table(table)
    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name};")
