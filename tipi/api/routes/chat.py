"""
api/routes/chat.py
------------------
POST /chat

Answers a follow-up question using the stored profile + itinerary.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from tipi.api.dependencies import get_conversation_handler
from tipi.modules.conversation.chat_handler import ConversationHandler

router = APIRouter()


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    user_id: str = Field("anonymous", alias="userId")
    destination: Optional[str] = None


@router.post("/chat", summary="Ask a follow-up question about the trip")
def chat(
    req: ChatRequest,
    handler: ConversationHandler = Depends(get_conversation_handler),
) -> dict:
    result = handler.reply(req.user_id, req.message, req.destination)
    if result.success:
        return {"success": True, "response": result.response}
    return {"success": False, "error": result.error}
