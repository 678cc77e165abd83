"""ORM models for users, sensor nodes, measurements, activity and prizes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from airwalk.db.base import Base, BigId

NODE_ACTIVE = "active"
NODE_INACTIVE = "inactive"


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class Role(Base):
    """Maps to the 'roles' table (walker, admin, ...)."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)


class TownHall(Base):
    """Maps to the 'town_halls' table."""

    __tablename__ = "town_halls"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    province: Mapped[str | None] = mapped_column(String(128), nullable=True)


# ---------------------------------------------------------------------------
# Users & applications
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    active_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    total_distance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role_id: Mapped[int | None] = mapped_column(BigId, ForeignKey("roles.id"), nullable=True)
    town_hall_id: Mapped[int | None] = mapped_column(BigId, ForeignKey("town_halls.id"), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    login_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    role: Mapped[Role | None] = relationship("Role", lazy="joined")
    town_hall: Mapped[TownHall | None] = relationship("TownHall", lazy="joined")


class Application(Base):
    """A pending registration request, consumed when the user is created."""

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    dni: Mapped[str] = mapped_column(String(16), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    town_hall_id: Mapped[int | None] = mapped_column(BigId, ForeignKey("town_halls.id"), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Sensor nodes & measurements
# ---------------------------------------------------------------------------


class Node(Base):
    """An air-quality sensor, owned by at most one user while active."""

    __tablename__ = "nodes"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=NODE_ACTIVE)
    user_id: Mapped[int | None] = mapped_column(
        BigId, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    last_status_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User | None] = relationship("User")


class Measurement(Base):
    """One reading from a node. Append-only."""

    __tablename__ = "measurements"
    __table_args__ = (
        Index("ix_measurements_node_time", "node_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    node_id: Mapped[int] = mapped_column(BigId, ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    co_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    o3_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    no2_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)


# ---------------------------------------------------------------------------
# Activity ledger
# ---------------------------------------------------------------------------


class DailyStats(Base):
    """One walking session's deltas. Append-only."""

    __tablename__ = "daily_stats"
    __table_args__ = (
        Index("ix_daily_stats_user_time", "user_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    active_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    distance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ---------------------------------------------------------------------------
# Prizes
# ---------------------------------------------------------------------------


class Prize(Base):
    """A prize users can redeem points for."""

    __tablename__ = "prizes"
    __table_args__ = (
        CheckConstraint("quantity_available >= 0", name="ck_prizes_stock_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    points_required: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    initial_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())


class Winner(Base):
    """A prize redemption with its coupon code."""

    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    prize_id: Mapped[int] = mapped_column(BigId, ForeignKey("prizes.id"), nullable=False)
    coupon_code: Mapped[str] = mapped_column(String(14), unique=True, nullable=False)
    redemption_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    prize: Mapped[Prize] = relationship("Prize", lazy="joined")
