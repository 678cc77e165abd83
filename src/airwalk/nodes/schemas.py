"""Schemas for node endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from airwalk.schemas import SuccessResponse


class LinkNodeRequest(BaseModel):
    user_id: int
    node_name: str = Field(..., min_length=1, max_length=128)


class LinkNodeResponse(SuccessResponse):
    node_id: int


class NodeInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    status: str
    last_status_update: datetime


class LinkedNodeResponse(SuccessResponse):
    node: NodeInfo


class NodeReportEntry(BaseModel):
    """One row of the node report."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: str | None = None
    status: str
    last_status_update: datetime


class NodeReportResponse(SuccessResponse):
    report: str
    nodes: list[NodeReportEntry]
