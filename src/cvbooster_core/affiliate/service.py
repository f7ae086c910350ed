"""Affiliate referral tracking.

Click tracking and conversion attribution are a best-effort side channel:
their public methods never raise, they log and report a neutral outcome so
the page load or checkout that triggered them carries on.
"""

import hashlib
import secrets
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from loguru import logger

from ..exceptions import AffiliateError
from ..models import Affiliate, AffiliateCommission, AffiliateReferral, CommissionStatus
from .commission import cents_to_euros, check_transition, compute_commission

CODE_ALPHABET = string.ascii_uppercase + string.digits
RECENT_REFERRALS = 10


class ClickOutcome(str, Enum):
    RECORDED = "recorded"
    DUPLICATE = "duplicate"
    INVALID = "invalid"
    SELF_REFERRAL = "self_referral"
    ERROR = "error"


@dataclass
class Visitor:
    """Opaque visitor signal of an incoming request"""
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def fingerprint(self) -> str:
        raw = f"{self.ip or ''}|{self.user_agent or ''}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class AffiliateService:
    """推广计划服务 - 推广码、点击追踪、转化归因与佣金"""

    def __init__(self, db, config: Optional[Dict[str, Any]] = None, plans: Optional[Dict[str, int]] = None):
        config = config or {}
        self.db = db
        self.commission_rate = int(config.get("commission_rate", 20))
        self.attribution_window = int(config.get("attribution_window_hours", 24)) * 3600
        self.code_prefix = config.get("code_prefix", "CVB")
        self.code_length = int(config.get("code_length", 8))
        self.base_url = config.get("base_url", "http://localhost:5000").rstrip("/")
        self.plans = plans or {}

    def _generate_code(self) -> str:
        suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(self.code_length))
        return f"{self.code_prefix}{suffix}"

    def affiliate_link(self, affiliate: Affiliate, path: str = "/") -> str:
        return f"{self.base_url}{path}?ref={affiliate.affiliate_code}"

    async def join(self, user_id: str) -> Affiliate:
        """Enroll a user in the program; returns the existing affiliate if any."""
        existing = await self.db.get_affiliate_by_user(user_id)
        if existing:
            return existing

        for _ in range(5):
            code = self._generate_code()
            if not await self.db.get_affiliate_by_code(code):
                affiliate = await self.db.create_affiliate(user_id, code, self.commission_rate)
                logger.info(f"User {user_id} joined the affiliate program with code {code}")
                return affiliate
        raise AffiliateError("Could not generate a unique affiliate code")

    async def validate_code(self, code: str) -> bool:
        """True when the code belongs to an active affiliate."""
        try:
            affiliate = await self.db.get_affiliate_by_code(code)
            return bool(affiliate and affiliate.is_active)
        except Exception as e:
            logger.error(f"Affiliate code lookup failed for {code}: {e}")
            return False

    async def track_click(self, code: str, visitor: Visitor, user_id: Optional[str] = None) -> ClickOutcome:
        """Record one click for a referral code.

        Owners of the code get SELF_REFERRAL and nothing is stored; a visitor
        seen within the attribution window gets DUPLICATE.
        """
        try:
            affiliate = await self.db.get_affiliate_by_code(code)
            if not affiliate or not affiliate.is_active:
                return ClickOutcome.INVALID

            if user_id and affiliate.user_id == user_id:
                logger.warning(f"Self-referral attempt blocked for code {code}")
                return ClickOutcome.SELF_REFERRAL

            click_id = await self.db.record_affiliate_click(
                affiliate.id, visitor.fingerprint, visitor.user_agent, self.attribution_window
            )
            if click_id is None:
                return ClickOutcome.DUPLICATE

            logger.info(f"Affiliate click tracked for code: {code}")
            return ClickOutcome.RECORDED
        except Exception as e:
            logger.error(f"Failed to track affiliate click for {code}: {e}")
            return ClickOutcome.ERROR

    async def record_conversion(self, user_id: str, code: Optional[str], plan: str) -> Optional[AffiliateReferral]:
        """Attribute a paid subscription to the affiliate behind ``code``.

        Returns the stored referral, or None when nothing was attributed.
        """
        if not code:
            return None
        try:
            amount = self.plans.get(plan, 0)
            if amount <= 0:
                return None

            affiliate = await self.db.get_affiliate_by_code(code)
            if not affiliate or not affiliate.is_active:
                return None
            if affiliate.user_id == user_id:
                logger.warning(f"Self-referral conversion ignored for user {user_id}")
                return None
            if await self.db.get_referral_by_referred_user(user_id):
                logger.info(f"User {user_id} already attributed, conversion ignored")
                return None

            commission = compute_commission(amount, affiliate.commission_rate)
            referral = await self.db.create_referral(affiliate.id, user_id, plan, amount, commission)
            logger.info(
                f"Referral {referral.id}: plan {plan} ({amount} cents) -> commission {commission} cents"
            )
            return referral
        except Exception as e:
            logger.error(f"Failed to record affiliate conversion for user {user_id}: {e}")
            return None

    async def update_commission_status(self, commission_id: str, status: str) -> AffiliateCommission:
        """Advance a commission (used by billing reconciliation)."""
        commission = await self.db.get_commission(commission_id)
        if not commission:
            raise AffiliateError(f"Commission not found: {commission_id}")
        target = check_transition(commission.status, status)
        updated = await self.db.update_commission_status(commission_id, target.value)
        logger.info(f"Commission {commission_id}: {commission.status} -> {target.value}")
        return updated

    async def dashboard(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Affiliate info, aggregated stats and recent referrals; None for non-affiliates."""
        affiliate = await self.db.get_affiliate_by_user(user_id)
        if not affiliate:
            return None

        total_clicks = await self.db.count_affiliate_clicks(affiliate.id)
        referrals = await self.db.list_affiliate_referrals(affiliate.id)
        commissions = await self.db.list_affiliate_commissions(affiliate.id)

        def total(status: CommissionStatus) -> int:
            return sum(c.amount for c in commissions if c.status == status.value)

        pending = total(CommissionStatus.PENDING)
        validated = total(CommissionStatus.VALIDATED)
        paid = total(CommissionStatus.PAID)
        conversion_rate = round(len(referrals) / total_clicks * 100, 2) if total_clicks else 0.0

        return {
            "affiliate": {
                "id": affiliate.id,
                "affiliate_code": affiliate.affiliate_code,
                "commission_rate": affiliate.commission_rate,
                "status": affiliate.status,
                "affiliate_link": self.affiliate_link(affiliate),
            },
            "stats": {
                "total_clicks": total_clicks,
                "total_referrals": len(referrals),
                "paid_referrals": sum(1 for r in referrals if r.status == CommissionStatus.PAID.value),
                "conversion_rate": conversion_rate,
                "pending_commissions": cents_to_euros(pending),
                "validated_commissions": cents_to_euros(validated),
                "paid_commissions": cents_to_euros(paid),
                "total_earnings": cents_to_euros(validated + paid),
            },
            "recent_referrals": [
                {
                    "id": r.id,
                    "subscription_plan": r.subscription_plan,
                    "subscription_amount": cents_to_euros(r.subscription_amount),
                    "commission_amount": cents_to_euros(r.commission_amount),
                    "status": r.status,
                    "referred_at": r.referred_at,
                }
                for r in referrals[:RECENT_REFERRALS]
            ],
        }
