"""
数据模型 - 核心数据结构定义

定义简历、求职信、对话和联盟推广计划使用的数据模型
"""

from .document import Cv, CoverLetter, DocumentStatus
from .conversation import Conversation, Message
from .user import User
from .affiliate import (
    Affiliate,
    AffiliateCommission,
    AffiliateReferral,
    CommissionStatus,
)

__all__ = [
    "Cv",
    "CoverLetter",
    "DocumentStatus",
    "Conversation",
    "Message",
    "User",
    "Affiliate",
    "AffiliateCommission",
    "AffiliateReferral",
    "CommissionStatus",
]
