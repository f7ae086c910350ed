from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from loguru import logger

from app.dependencies import get_assistant, get_current_user_id, get_db, get_registered_user_id
from app.errors import ai_http_error
from app.v1.schemas import ConversationCreate, MessageCreate
from cvbooster_core.ai import CareerAssistant
from cvbooster_core.exceptions import AIServiceError
from cvbooster_core.server import PostgreSQLManager

router = APIRouter()

CONVERSATION_NOT_FOUND = "Conversation not found"


@router.get("/conversations")
async def list_conversations(
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        conversations = await db.get_user_conversations(user_id)
        return {"status": "success", "message": "Conversations retrieved", "data": conversations}
    except Exception as e:
        logger.error(f"Error fetching conversations for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch conversations")


@router.post("/conversations", status_code=201)
async def create_conversation(
    body: Optional[ConversationCreate] = Body(None),
    user_id: str = Depends(get_registered_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        conversation = await db.create_conversation(user_id, body.title if body else None)
        return {"status": "success", "message": "Conversation created", "data": conversation}
    except Exception as e:
        logger.error(f"Error creating conversation for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create conversation")


@router.get("/conversations/{conversation_id}/messages")
async def list_messages(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
):
    try:
        if not await db.get_conversation(conversation_id, user_id):
            raise HTTPException(status_code=404, detail=CONVERSATION_NOT_FOUND)
        messages = await db.get_conversation_messages(conversation_id)
        return {"status": "success", "message": "Messages retrieved", "data": messages}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching messages of {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch messages")


@router.post("/conversations/{conversation_id}/messages")
async def send_message(
    conversation_id: str,
    body: MessageCreate,
    user_id: str = Depends(get_current_user_id),
    db: PostgreSQLManager = Depends(get_db),
    assistant: CareerAssistant = Depends(get_assistant),
):
    """Store the user's message, ask the assistant, store and return its reply"""
    try:
        if not await db.get_conversation(conversation_id, user_id):
            raise HTTPException(status_code=404, detail=CONVERSATION_NOT_FOUND)

        user_message = await db.create_message(conversation_id, "user", body.content)
        history = await db.get_conversation_messages(conversation_id)
        cvs = await db.get_user_cvs(user_id)

        answer = await assistant.chat(
            [{"role": m.role, "content": m.content} for m in history], cvs
        )
        ai_message = await db.create_message(conversation_id, "assistant", answer)
        return {
            "status": "success",
            "message": "Message sent",
            "data": {"user_message": user_message, "ai_message": ai_message},
        }
    except HTTPException:
        raise
    except AIServiceError as e:
        raise ai_http_error(e)
    except Exception as e:
        logger.error(f"Error sending message to {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to send message")
