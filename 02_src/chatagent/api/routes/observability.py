"""Observability API routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Application


class MemoryResponse(BaseModel):
    """Response model for a stored memory."""

    id: str
    user_id: str
    room_id: str
    text: str
    action: str | None
    created_at: datetime


class LogEntryResponse(BaseModel):
    """Response model for a log entry."""

    id: str
    user_id: str
    room_id: str
    type: str
    body: dict[str, Any]
    created_at: datetime


def create_observability_router(app: Application) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/rooms/{room_id}/memories", response_model=list[MemoryResponse])
    async def get_memories(
        room_id: str,
        count: int = Query(10, ge=1, le=1000),
        unique: bool = Query(False),
    ) -> list[dict]:
        """Recent memories of a room, newest first."""
        try:
            memories = await app.runtime.message_manager.get_memories(
                room_id, count=count, unique=unique
            )
            return [
                {
                    "id": m.id,
                    "user_id": m.user_id,
                    "room_id": m.room_id,
                    "text": m.content.text,
                    "action": m.content.action,
                    "created_at": m.created_at,
                }
                for m in memories
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.get("/logs", response_model=list[LogEntryResponse])
    async def get_logs(
        room_id: str | None = Query(None, description="Filter by room"),
        type: str | None = Query(None, description="Filter by log type"),
        limit: int = Query(100, ge=1, le=1000),
    ) -> list[dict]:
        """Structured decision logs, newest first."""
        try:
            entries = await app.storage.get_logs(room_id=room_id, type=type, limit=limit)
            return [
                {
                    "id": e.id,
                    "user_id": e.user_id,
                    "room_id": e.room_id,
                    "type": e.type,
                    "body": e.body,
                    "created_at": e.created_at,
                }
                for e in entries
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
