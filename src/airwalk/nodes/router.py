"""Node binding and node status report endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.database import get_session
from airwalk.nodes.schemas import (
    LinkedNodeResponse,
    LinkNodeRequest,
    LinkNodeResponse,
    NodeInfo,
    NodeReportEntry,
    NodeReportResponse,
)
from airwalk.nodes.service import (
    NodeReport,
    get_linked_node,
    link_node,
    list_nodes,
    reconcile_node_statuses,
    unlink_node,
)
from airwalk.schemas import SuccessResponse

router = APIRouter(tags=["Nodes"])


@router.post("/node/link", response_model=LinkNodeResponse, status_code=201)
async def post_link_node(
    body: LinkNodeRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> LinkNodeResponse:
    """Link a node to a user, creating or reactivating it as needed."""
    node, created = await link_node(db, body.user_id, body.node_name)
    await db.commit()
    message = "Node linked" if created else "Node linked (reactivated)"
    return LinkNodeResponse(message=message, node_id=node.id)


@router.get("/node/ofUser/{user_id}", response_model=LinkedNodeResponse)
async def get_node_of_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> LinkedNodeResponse:
    node = await get_linked_node(db, user_id)
    return LinkedNodeResponse(node=NodeInfo.model_validate(node))


@router.delete("/node/ofUser/{user_id}", response_model=SuccessResponse)
async def delete_node_of_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> SuccessResponse:
    """Unlink the user's active node."""
    await unlink_node(db, user_id)
    await db.commit()
    return SuccessResponse(message="Node unlinked")


@router.get("/informeNodos/{tipo}", response_model=NodeReportResponse)
async def node_report(
    tipo: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> NodeReportResponse:
    """
    Node report: ``todos``, ``inactivos`` or ``erroneos``.

    The inactive report first reconciles statuses against measurement
    activity, so it reflects (and persists) the current state.
    """
    view = NodeReport.parse(tipo)
    if view is NodeReport.INACTIVE:
        await reconcile_node_statuses(db)
        await db.commit()
    nodes = await list_nodes(db, view)
    return NodeReportResponse(
        report=view.value,
        nodes=[NodeReportEntry.model_validate(n) for n in nodes],
    )
