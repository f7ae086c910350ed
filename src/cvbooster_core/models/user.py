"""
用户相关数据模型
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional
from datetime import datetime


@dataclass 
class User:
    """用户模型"""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "User":
        return cls(
            id=record["id"],
            email=record.get("email"),
            first_name=record.get("first_name"),
            last_name=record.get("last_name"),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )
