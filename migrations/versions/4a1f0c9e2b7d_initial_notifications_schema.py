"""initial notifications schema

Revision ID: 4a1f0c9e2b7d
Revises: 
Create Date: 2025-11-03 10:14:42.118305

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4a1f0c9e2b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum_col(name: str, nullable: bool = False) -> sa.Column:
    # Los enums se guardan como VARCHAR(20) (nombre del miembro).
    return sa.Column(name, sa.String(length=20), nullable=nullable)


def upgrade() -> None:
    """Create weddings, families, members, templates, tracking events and gifts."""
    op.create_table(
        "weddings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("couple_names", sa.String(length=200), nullable=False),
        sa.Column("wedding_date", sa.Date(), nullable=False),
        sa.Column("wedding_time", sa.String(length=20), nullable=False),
        sa.Column("location", sa.String(length=300), nullable=False),
        sa.Column("rsvp_cutoff_date", sa.DateTime(), nullable=False),
        _enum_col("default_language"),
        _enum_col("payment_tracking_mode"),
        _enum_col("status"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "families",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("wedding_id", sa.String(length=36), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("whatsapp_number", sa.String(length=32), nullable=True),
        sa.Column("magic_token", sa.String(length=64), nullable=False),
        sa.Column("reference_code", sa.String(length=16), nullable=True, unique=True),
        _enum_col("channel_preference", nullable=True),
        _enum_col("preferred_language", nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_families_wedding_id", "families", ["wedding_id"])
    op.create_index("ix_families_magic_token", "families", ["magic_token"], unique=True)
    op.create_index("ix_families_wedding_created", "families", ["wedding_id", "created_at"])

    op.create_table(
        "family_members",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("family_id", sa.String(length=36), sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        _enum_col("type"),
        sa.Column("attending", sa.Boolean(), nullable=True),
    )
    op.create_index("ix_family_members_family_id", "family_members", ["family_id"])

    op.create_table(
        "message_templates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("wedding_id", sa.String(length=36), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        _enum_col("type"),
        _enum_col("language"),
        _enum_col("channel"),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("wedding_id", "type", "language", "channel", name="uq_message_templates_key"),
    )
    op.create_index("ix_message_templates_wedding_id", "message_templates", ["wedding_id"])

    op.create_table(
        "tracking_events",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("family_id", sa.String(length=36), sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("wedding_id", sa.String(length=36), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        _enum_col("event_type"),
        _enum_col("channel", nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("admin_triggered", sa.Boolean(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_tracking_events_wedding_id", "tracking_events", ["wedding_id"])
    op.create_index("ix_tracking_events_timestamp", "tracking_events", ["timestamp"])
    op.create_index("ix_tracking_events_family_type", "tracking_events", ["family_id", "event_type"])
    op.create_index(
        "uq_tracking_events_invitation_once",
        "tracking_events",
        ["family_id"],
        unique=True,
        sqlite_where=sa.text("event_type = 'INVITATION_SENT'"),
        postgresql_where=sa.text("event_type = 'INVITATION_SENT'"),
    )

    op.create_table(
        "gifts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("family_id", sa.String(length=36), sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False),
        sa.Column("wedding_id", sa.String(length=36), sa.ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("reference_code_used", sa.String(length=64), nullable=True),
        sa.Column("auto_matched", sa.Boolean(), nullable=False),
        _enum_col("status"),
        sa.Column("transaction_date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_gifts_family_id", "gifts", ["family_id"])
    op.create_index("ix_gifts_wedding_id", "gifts", ["wedding_id"])


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_table("gifts")
    op.drop_index("uq_tracking_events_invitation_once", table_name="tracking_events")
    op.drop_table("tracking_events")
    op.drop_table("message_templates")
    op.drop_table("family_members")
    op.drop_table("families")
    op.drop_table("weddings")
