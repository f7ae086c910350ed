"""Unit tests for AffiliateService against the in-memory database."""

import asyncio
import re

import pytest

from cvbooster_core.affiliate import ClickOutcome, Visitor
from cvbooster_core.exceptions import AffiliateError, InvalidCommissionTransition
from cvbooster_core.models import User

ALICE = Visitor("203.0.113.7", "Mozilla/5.0")
BOB = Visitor("198.51.100.2", "Mozilla/5.0")


async def _affiliate(service, fake_db, user_id="owner"):
    fake_db.users[user_id] = User(id=user_id)
    return await service.join(user_id)


@pytest.mark.unit
def test_visitor_fingerprint_is_opaque_and_stable():
    assert ALICE.fingerprint == Visitor("203.0.113.7", "Mozilla/5.0").fingerprint
    assert ALICE.fingerprint != BOB.fingerprint
    assert re.fullmatch(r"[0-9a-f]{64}", ALICE.fingerprint)
    assert "203.0.113.7" not in ALICE.fingerprint


@pytest.mark.unit
async def test_join_is_idempotent(affiliate_service, fake_db):
    first = await _affiliate(affiliate_service, fake_db)
    second = await affiliate_service.join("owner")
    assert first.id == second.id
    assert re.fullmatch(r"CVB[A-Z0-9]{8}", first.affiliate_code)
    assert first.commission_rate == 20
    assert len(fake_db.affiliates) == 1


@pytest.mark.unit
async def test_join_gives_up_when_codes_keep_colliding(affiliate_service, fake_db, monkeypatch):
    await _affiliate(affiliate_service, fake_db)
    taken = next(iter(fake_db.affiliates.values())).affiliate_code
    monkeypatch.setattr(affiliate_service, "_generate_code", lambda: taken)
    fake_db.users["other"] = User(id="other")
    with pytest.raises(AffiliateError):
        await affiliate_service.join("other")


@pytest.mark.unit
async def test_validate_code(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    assert await affiliate_service.validate_code(affiliate.affiliate_code)
    assert not await affiliate_service.validate_code("CVBNOPE0000")

    affiliate.status = "suspended"
    assert not await affiliate_service.validate_code(affiliate.affiliate_code)


@pytest.mark.unit
async def test_validate_code_absorbs_storage_errors(affiliate_service, fake_db):
    fake_db.fail_with = ConnectionError("db down")
    assert await affiliate_service.validate_code("CVBANY") is False


@pytest.mark.unit
async def test_click_is_recorded_once_per_visitor(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    code = affiliate.affiliate_code

    assert await affiliate_service.track_click(code, ALICE) == ClickOutcome.RECORDED
    assert await affiliate_service.track_click(code, ALICE) == ClickOutcome.DUPLICATE
    assert await affiliate_service.track_click(code, BOB) == ClickOutcome.RECORDED
    assert await fake_db.count_affiliate_clicks(affiliate.id) == 2
    assert all(c["visitor_hash"] != ALICE.ip for c in fake_db.clicks)


@pytest.mark.unit
async def test_simultaneous_clicks_count_once(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    outcomes = await asyncio.gather(
        *(affiliate_service.track_click(affiliate.affiliate_code, ALICE) for _ in range(5))
    )
    assert outcomes.count(ClickOutcome.RECORDED) == 1
    assert outcomes.count(ClickOutcome.DUPLICATE) == 4
    assert await fake_db.count_affiliate_clicks(affiliate.id) == 1


@pytest.mark.unit
async def test_click_from_owner_is_self_referral(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    outcome = await affiliate_service.track_click(affiliate.affiliate_code, ALICE, user_id="owner")
    assert outcome == ClickOutcome.SELF_REFERRAL
    assert fake_db.clicks == []


@pytest.mark.unit
async def test_click_with_unknown_code_is_invalid(affiliate_service, fake_db):
    assert await affiliate_service.track_click("CVBUNKNOWN", ALICE) == ClickOutcome.INVALID
    assert fake_db.clicks == []


@pytest.mark.unit
async def test_click_never_raises(affiliate_service, fake_db):
    fake_db.fail_with = ConnectionError("db down")
    assert await affiliate_service.track_click("CVBANY", ALICE) == ClickOutcome.ERROR


@pytest.mark.unit
async def test_conversion_creates_referral_and_pending_commission(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    fake_db.users["buyer"] = User(id="buyer")

    referral = await affiliate_service.record_conversion("buyer", affiliate.affiliate_code, "pro")

    assert referral.subscription_amount == 2000
    assert referral.commission_amount == 400
    assert referral.status == "pending"
    commissions = await fake_db.list_affiliate_commissions(affiliate.id)
    assert [(c.amount, c.status) for c in commissions] == [(400, "pending")]


@pytest.mark.unit
async def test_conversion_is_attributed_once(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    code = affiliate.affiliate_code
    assert await affiliate_service.record_conversion("buyer", code, "pro")
    assert await affiliate_service.record_conversion("buyer", code, "expert") is None
    assert len(fake_db.referrals) == 1


@pytest.mark.unit
@pytest.mark.parametrize(
    "user_id, code, plan",
    [
        ("owner", "OWN", "pro"),      # self referral
        ("buyer", None, "pro"),       # no remembered code
        ("buyer", "OWN", "free"),     # nothing paid
        ("buyer", "OWN", "platinum"), # unknown plan
        ("buyer", "CVBBAD", "pro"),   # unknown code
    ],
)
async def test_conversion_ignored(affiliate_service, fake_db, user_id, code, plan):
    affiliate = await _affiliate(affiliate_service, fake_db)
    if code == "OWN":
        code = affiliate.affiliate_code
    assert await affiliate_service.record_conversion(user_id, code, plan) is None
    assert fake_db.referrals == {}


@pytest.mark.unit
async def test_conversion_absorbs_storage_errors(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    fake_db.fail_with = ConnectionError("db down")
    assert await affiliate_service.record_conversion("buyer", affiliate.affiliate_code, "pro") is None


@pytest.mark.unit
async def test_update_commission_status(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    await affiliate_service.record_conversion("buyer", affiliate.affiliate_code, "pro")
    commission_id = next(iter(fake_db.commissions))

    updated = await affiliate_service.update_commission_status(commission_id, "validated")
    assert updated.status == "validated"

    with pytest.raises(InvalidCommissionTransition):
        await affiliate_service.update_commission_status(commission_id, "pending")
    with pytest.raises(AffiliateError):
        await affiliate_service.update_commission_status("missing", "paid")


@pytest.mark.unit
async def test_dashboard(affiliate_service, fake_db):
    affiliate = await _affiliate(affiliate_service, fake_db)
    code = affiliate.affiliate_code
    for i in range(4):
        await affiliate_service.track_click(code, Visitor(f"10.0.0.{i}", "UA"))
    await affiliate_service.record_conversion("u1", code, "pro")
    await affiliate_service.record_conversion("u2", code, "expert")

    pro_commission = next(c for c in fake_db.commissions.values() if c.amount == 400)
    await affiliate_service.update_commission_status(pro_commission.id, "validated")
    await affiliate_service.update_commission_status(pro_commission.id, "paid")

    data = await affiliate_service.dashboard("owner")

    assert data["affiliate"]["affiliate_code"] == code
    assert data["affiliate"]["affiliate_link"] == f"https://cvbooster.test/?ref={code}"
    stats = data["stats"]
    assert stats["total_clicks"] == 4
    assert stats["total_referrals"] == 2
    assert stats["paid_referrals"] == 1
    assert stats["conversion_rate"] == 50.0
    assert stats["pending_commissions"] == 10.0
    assert stats["validated_commissions"] == 0.0
    assert stats["paid_commissions"] == 4.0
    assert stats["total_earnings"] == 4.0
    assert len(data["recent_referrals"]) == 2


@pytest.mark.unit
async def test_dashboard_for_non_affiliate(affiliate_service):
    assert await affiliate_service.dashboard("nobody") is None
