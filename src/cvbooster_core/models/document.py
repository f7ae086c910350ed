"""
简历与求职信模型
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class DocumentStatus(Enum):
    """文档状态枚举"""
    DRAFT = "draft"
    ANALYZING = "analyzing"
    OPTIMIZED = "optimized"


@dataclass
class Cv:
    """简历模型"""
    id: str
    user_id: str
    title: str
    content: str
    sector: Optional[str] = None
    position: Optional[str] = None
    score: int = 0
    suggestions: List[Dict[str, Any]] = field(default_factory=list)
    status: str = DocumentStatus.DRAFT.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Cv":
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            title=record["title"],
            content=record["content"],
            sector=record.get("sector"),
            position=record.get("position"),
            score=record.get("score") or 0,
            suggestions=record.get("suggestions") or [],
            status=record.get("status") or DocumentStatus.DRAFT.value,
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass
class CoverLetter:
    """求职信模型"""
    id: str
    user_id: str
    title: str
    content: str
    company_name: Optional[str] = None
    position: Optional[str] = None
    sector: Optional[str] = None
    score: int = 0
    suggestions: List[Dict[str, Any]] = field(default_factory=list)
    status: str = DocumentStatus.DRAFT.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CoverLetter":
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            title=record["title"],
            content=record["content"],
            company_name=record.get("company_name"),
            position=record.get("position"),
            sector=record.get("sector"),
            score=record.get("score") or 0,
            suggestions=record.get("suggestions") or [],
            status=record.get("status") or DocumentStatus.DRAFT.value,
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )
