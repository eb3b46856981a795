"""Messaging API routes."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...models import Content, Memory


class MessageRequest(BaseModel):
    """Request model for sending a message."""

    user_id: str
    room_id: str
    text: str
    user_name: str | None = None


class ContentResponse(BaseModel):
    """One message produced by the agent."""

    text: str
    action: str | None = None


class MessageResponse(BaseModel):
    """Response model for message."""

    responses: list[ContentResponse]


def create_messaging_router(app: Application) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    @router.post("/messages", response_model=MessageResponse)
    async def send_message(request: MessageRequest) -> dict:
        """Send a message to the agent; returns the reply and any follow-ups."""
        try:
            runtime = app.runtime
            if request.user_name:
                await runtime.ensure_account(request.user_id, request.user_name)

            message = Memory(
                id=str(uuid.uuid4()),
                user_id=request.user_id,
                room_id=request.room_id,
                content=Content(text=request.text),
                created_at=datetime.now(timezone.utc),
            )
            responses = await runtime.handle_message(message)
            return {
                "responses": [{"text": c.text, "action": c.action} for c in responses]
            }
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
