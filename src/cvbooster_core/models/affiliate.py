"""
联盟推广计划模型 - 推广员、点击、推荐与佣金
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional


class CommissionStatus(Enum):
    """佣金状态枚举"""
    PENDING = "pending"
    VALIDATED = "validated"
    PAID = "paid"
    CANCELLED = "cancelled"


@dataclass
class Affiliate:
    """推广员模型"""
    id: str
    user_id: str
    affiliate_code: str
    commission_rate: int = 20
    status: str = "active"
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Affiliate":
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            affiliate_code=record["affiliate_code"],
            commission_rate=record.get("commission_rate", 20),
            status=record.get("status") or "active",
            created_at=record.get("created_at"),
        )


@dataclass
class AffiliateReferral:
    """推荐记录, 金额以分为单位"""
    id: str
    affiliate_id: str
    referred_user_id: str
    subscription_plan: str
    subscription_amount: int
    commission_amount: int
    status: str = CommissionStatus.PENDING.value
    referred_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AffiliateReferral":
        return cls(
            id=record["id"],
            affiliate_id=record["affiliate_id"],
            referred_user_id=record["referred_user_id"],
            subscription_plan=record["subscription_plan"],
            subscription_amount=record["subscription_amount"],
            commission_amount=record["commission_amount"],
            status=record.get("status") or CommissionStatus.PENDING.value,
            referred_at=record.get("referred_at"),
        )


@dataclass
class AffiliateCommission:
    """佣金记录, 金额以分为单位"""
    id: str
    affiliate_id: str
    referral_id: str
    amount: int
    status: str = CommissionStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AffiliateCommission":
        return cls(
            id=record["id"],
            affiliate_id=record["affiliate_id"],
            referral_id=record["referral_id"],
            amount=record["amount"],
            status=record.get("status") or CommissionStatus.PENDING.value,
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )
