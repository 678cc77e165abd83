"""Initial schema: reference data, users, applications, nodes, measurements, activity and prizes.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# SQLite only auto-increments INTEGER PRIMARY KEY columns
BIG_ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    """Create all tables and seed the default roles."""
    roles = op.create_table(
        "roles",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(32), nullable=False, unique=True),
    )

    op.create_table(
        "town_halls",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("province", sa.String(128), nullable=True),
    )

    # --- Users & applications ---
    op.create_table(
        "users",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("points", sa.Integer(), server_default="0", nullable=False),
        sa.Column("active_hours", sa.Float(), server_default="0", nullable=False),
        sa.Column("total_distance", sa.Float(), server_default="0", nullable=False),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("role_id", BIG_ID, sa.ForeignKey("roles.id"), nullable=True),
        sa.Column("town_hall_id", BIG_ID, sa.ForeignKey("town_halls.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("login_count", sa.Integer(), server_default="0", nullable=True),
        sa.CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )

    op.create_table(
        "applications",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(128), nullable=False),
        sa.Column("last_name", sa.String(128), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("dni", sa.String(16), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("town_hall_id", BIG_ID, sa.ForeignKey("town_halls.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_applications_email", "applications", ["email"])

    # --- Nodes & measurements ---
    op.create_table(
        "nodes",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(128), nullable=False, unique=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("user_id", BIG_ID, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("last_status_update", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_nodes_user_id", "nodes", ["user_id"])

    op.create_table(
        "measurements",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("node_id", BIG_ID, sa.ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("co_value", sa.Float(), nullable=True),
        sa.Column("o3_value", sa.Float(), nullable=True),
        sa.Column("no2_value", sa.Float(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
    )
    op.create_index("ix_measurements_timestamp", "measurements", ["timestamp"])
    op.create_index("ix_measurements_node_time", "measurements", ["node_id", "timestamp"])

    # --- Activity ledger ---
    op.create_table(
        "daily_stats",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("user_id", BIG_ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("active_hours", sa.Float(), nullable=False),
        sa.Column("distance", sa.Float(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
    )
    op.create_index("ix_daily_stats_user_time", "daily_stats", ["user_id", "timestamp"])

    # --- Prizes ---
    op.create_table(
        "prizes",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("points_required", sa.Integer(), nullable=False),
        sa.Column("quantity_available", sa.Integer(), nullable=False),
        sa.Column("initial_quantity", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.CheckConstraint("quantity_available >= 0", name="ck_prizes_stock_non_negative"),
    )

    op.create_table(
        "winners",
        sa.Column("id", BIG_ID, primary_key=True, autoincrement=True),
        sa.Column("user_id", BIG_ID, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("prize_id", BIG_ID, sa.ForeignKey("prizes.id"), nullable=False),
        sa.Column("coupon_code", sa.String(14), nullable=False, unique=True),
        sa.Column("redemption_date", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_winners_user_id", "winners", ["user_id"])

    op.bulk_insert(roles, [{"name": "walker"}, {"name": "admin"}])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("winners")
    op.drop_table("prizes")
    op.drop_table("daily_stats")
    op.drop_table("measurements")
    op.drop_table("nodes")
    op.drop_table("applications")
    op.drop_table("users")
    op.drop_table("town_halls")
    op.drop_table("roles")
