"""
对话与消息模型
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass
class Conversation:
    """对话模型"""
    id: str
    user_id: str
    title: str = "New Conversation"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Conversation":
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            title=record.get("title") or "New Conversation",
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass
class Message:
    """消息模型, role 为 user 或 assistant"""
    id: str
    conversation_id: str
    role: str
    content: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Message":
        return cls(
            id=record["id"],
            conversation_id=record["conversation_id"],
            role=record["role"],
            content=record["content"],
            created_at=record.get("created_at"),
        )
