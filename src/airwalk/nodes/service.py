"""
Node lifecycle: linking sensors to users, status reconciliation and reports.

A node belongs to at most one user while ``active``. Unlinking clears the
owner and marks it ``inactive``; linking an inactive node hands it to the new
user. ``reconcile_node_statuses`` infers status from measurement activity and
is kept separate from ``list_nodes``, which never writes.
"""

from __future__ import annotations

import enum
import itertools
from collections.abc import Sequence
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select, update

from airwalk.auth.service import require_user
from airwalk.config import get_settings
from airwalk.db.models import NODE_ACTIVE, NODE_INACTIVE, Measurement, Node, User
from airwalk.errors import ConflictError, NotFoundError, ValidationError
from airwalk.nodes.anomaly import detect_anomalies
from airwalk.timeutils import as_utc, utcnow

if TYPE_CHECKING:
    from sqlalchemy.engine import Row
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class NodeReport(str, enum.Enum):
    """Views offered by the node report."""

    ALL = "todos"
    INACTIVE = "inactivos"
    ERRONEOUS = "erroneos"

    @classmethod
    def parse(cls, value: str) -> NodeReport:
        try:
            return cls(value.lower())
        except ValueError:
            msg = f"Invalid report type '{value}'. Expected one of: {', '.join(v.value for v in cls)}"
            raise ValidationError(msg) from None


# ---------------------------------------------------------------------------
# Linking
# ---------------------------------------------------------------------------


async def _active_node_of(db: AsyncSession, user_id: int) -> Node | None:
    result = await db.execute(
        select(Node).where(Node.user_id == user_id, Node.status == NODE_ACTIVE).order_by(Node.id).limit(1)
    )
    return result.scalar_one_or_none()


async def link_node(db: AsyncSession, user_id: int, node_name: str) -> tuple[Node, bool]:
    """
    Bind the node called ``node_name`` to a user.

    Returns the node and whether it was newly created.

    Raises:
        NotFoundError: Unknown user.
        ValidationError: Blank node name.
        ConflictError: The node is active for someone (including this user), or
            the user already has another active node.
    """
    node_name = node_name.strip()
    if not node_name:
        msg = "Node name is required"
        raise ValidationError(msg)
    await require_user(db, user_id)

    result = await db.execute(select(Node).where(Node.name == node_name))
    node = result.scalar_one_or_none()

    if node is not None and node.status == NODE_ACTIVE:
        if node.user_id == user_id:
            msg = "This node is already linked to the user"
        else:
            msg = "This node is already linked to another user"
        raise ConflictError(msg)

    current = await _active_node_of(db, user_id)
    if current is not None:
        msg = f"User already has an active node ({current.name}); unlink it first"
        raise ConflictError(msg)

    now = utcnow()
    if node is None:
        node = Node(name=node_name, status=NODE_ACTIVE, user_id=user_id, last_status_update=now)
        db.add(node)
        await db.flush()
        logger.info("node_linked", node_id=node.id, user_id=user_id, created=True)
        return node, True

    node.user_id = user_id
    node.status = NODE_ACTIVE
    node.last_status_update = now
    await db.flush()
    logger.info("node_linked", node_id=node.id, user_id=user_id, created=False)
    return node, False


async def get_linked_node(db: AsyncSession, user_id: int) -> Node:
    """
    The user's active node.

    Raises:
        NotFoundError: Unknown user, or the user has no active node.
    """
    await require_user(db, user_id)
    node = await _active_node_of(db, user_id)
    if node is None:
        msg = "User has no linked node"
        raise NotFoundError(msg)
    return node


async def unlink_node(db: AsyncSession, user_id: int) -> Node:
    """Release the user's active node: no owner, ``inactive``, timestamp refreshed."""
    node = await get_linked_node(db, user_id)
    node.user_id = None
    node.status = NODE_INACTIVE
    node.last_status_update = utcnow()
    await db.flush()
    logger.info("node_unlinked", node_id=node.id, user_id=user_id)
    return node


# ---------------------------------------------------------------------------
# Status reconciliation
# ---------------------------------------------------------------------------


async def reconcile_node_statuses(db: AsyncSession) -> dict[str, list[int]]:
    """
    Infer node status from measurement activity.

    - Active nodes whose status is older than the staleness threshold and that
      reported nothing within the recency window become ``inactive`` (the owner
      is kept so the node can come back).
    - Inactive nodes that still have an owner and reported within the recency
      window become ``active`` again, unless the owner already has another
      active node.

    Each change stamps ``last_status_update``. Returns the affected node ids.
    """
    settings = get_settings()
    now = utcnow()
    stale_cutoff = now - timedelta(hours=settings.node_stale_after_hours)
    recent_cutoff = now - timedelta(minutes=settings.node_recent_activity_minutes)

    reported_recently = (
        select(Measurement.id)
        .where(Measurement.node_id == Node.id, Measurement.timestamp >= recent_cutoff)
        .exists()
    )

    to_deactivate = list(
        (
            await db.execute(
                select(Node.id).where(
                    Node.status == NODE_ACTIVE,
                    Node.last_status_update < stale_cutoff,
                    ~reported_recently,
                )
            )
        ).scalars()
    )

    candidates = (
        await db.execute(
            select(Node.id, Node.user_id)
            .where(Node.status == NODE_INACTIVE, Node.user_id.is_not(None), reported_recently)
            .order_by(Node.id)
        )
    ).all()
    busy_owners = set(
        (
            await db.execute(
                select(Node.user_id).where(
                    Node.status == NODE_ACTIVE,
                    Node.user_id.is_not(None),
                    Node.id.not_in(to_deactivate),
                )
            )
        ).scalars()
    )
    to_activate: list[int] = []
    for node_id, owner_id in candidates:
        if owner_id in busy_owners:
            continue
        busy_owners.add(owner_id)
        to_activate.append(node_id)

    if to_deactivate:
        await db.execute(
            update(Node).where(Node.id.in_(to_deactivate)).values(status=NODE_INACTIVE, last_status_update=now)
        )
    if to_activate:
        await db.execute(
            update(Node).where(Node.id.in_(to_activate)).values(status=NODE_ACTIVE, last_status_update=now)
        )
    await db.flush()

    if to_deactivate or to_activate:
        logger.info("node_statuses_reconciled", deactivated=to_deactivate, activated=to_activate)
    return {"deactivated": to_deactivate, "activated": to_activate}


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


async def _all_nodes(db: AsyncSession) -> Sequence[Row[Any]]:
    result = await db.execute(
        select(Node.id, Node.name, User.username, Node.status, Node.last_status_update)
        .outerjoin(User, Node.user_id == User.id)
        .order_by(Node.id)
    )
    return result.all()


async def find_erroneous_node_ids(db: AsyncSession) -> set[int]:
    """Ids of nodes whose readings inside the anomaly window look wrong."""
    cutoff = utcnow() - timedelta(hours=get_settings().node_anomaly_window_hours)
    result = await db.execute(
        select(Measurement)
        .where(Measurement.timestamp >= cutoff)
        .order_by(Measurement.node_id, Measurement.timestamp)
    )
    flagged: set[int] = set()
    for node_id, group in itertools.groupby(result.scalars().all(), key=lambda m: m.node_id):
        anomalies = detect_anomalies(list(group))
        if anomalies:
            flagged.add(node_id)
            logger.debug("node_anomalies", node_id=node_id, anomalies=anomalies)
    return flagged


async def list_nodes(db: AsyncSession, view: NodeReport) -> list[Row[Any]]:
    """
    Nodes with owner username, status and last status change.

    ``INACTIVE`` keeps nodes marked inactive plus those whose status has not
    changed within the staleness threshold. ``ERRONEOUS`` keeps nodes flagged
    by the anomaly detector. Read-only.
    """
    nodes = await _all_nodes(db)
    if view is NodeReport.ALL:
        return list(nodes)

    if view is NodeReport.INACTIVE:
        stale_after = timedelta(hours=get_settings().node_stale_after_hours)
        now = utcnow()
        return [
            n for n in nodes
            if n.status == NODE_INACTIVE or now - as_utc(n.last_status_update) > stale_after
        ]

    flagged = await find_erroneous_node_ids(db)
    return [n for n in nodes if n.id in flagged]
