"""
Shared fixtures: an in-memory stand-in for PostgreSQLManager, a scripted
text provider and a TestClient wired to both.
"""

import copy
import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from cvbooster_core.affiliate import AffiliateService
from cvbooster_core.ai import BaseTextProvider, CareerAssistant
from cvbooster_core.models import (
    Affiliate,
    AffiliateCommission,
    AffiliateReferral,
    Conversation,
    CoverLetter,
    Cv,
    Message,
    User,
)
from cvbooster_core.server import CVBoosterServer

TEST_CONFIG = {
    "server_components": {"pg": {}},
    "ai": {"provider": "openai", "api_key": "test-key"},
    "auth": {"user_header": "X-User-Id", "email_header": "X-User-Email"},
    "affiliate": {
        "commission_rate": 20,
        "attribution_window_hours": 24,
        "code_prefix": "CVB",
        "code_length": 8,
        "cookie_name": "affiliate_ref",
        "base_url": "https://cvbooster.test",
    },
    "plans": {"pro": 2000, "expert": 5000, "free": 0},
    "export": {},
    "upload": {"max_size": 5 * 1024 * 1024},
    "logging": {"slow_request_ms": 2000},
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _id() -> str:
    return str(uuid.uuid4())


class FakeDatabase:
    """Dictionary-backed implementation of the PostgreSQLManager methods"""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.cvs: Dict[str, Cv] = {}
        self.cover_letters: Dict[str, CoverLetter] = {}
        self.conversations: Dict[str, Conversation] = {}
        self.messages: List[Message] = []
        self.affiliates: Dict[str, Affiliate] = {}
        self.clicks: List[Dict[str, Any]] = []
        self.referrals: Dict[str, AffiliateReferral] = {}
        self.commissions: Dict[str, AffiliateCommission] = {}
        self.fail_with: Optional[Exception] = None

    def _check(self):
        if self.fail_with:
            raise self.fail_with

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def ping(self) -> bool:
        self._check()
        return True

    # users
    async def upsert_user(self, user_id, email=None, first_name=None, last_name=None):
        self._check()
        user = self.users.get(user_id) or User(id=user_id, created_at=_now())
        user.email = email or user.email
        user.first_name = first_name or user.first_name
        user.last_name = last_name or user.last_name
        user.updated_at = _now()
        self.users[user_id] = user
        return user

    async def get_user(self, user_id):
        self._check()
        return self.users.get(user_id)

    # documents
    def _owned(self, table, doc_id, user_id):
        doc = table.get(doc_id)
        return doc if doc and doc.user_id == user_id else None

    def _list(self, table, user_id):
        docs = [d for d in table.values() if d.user_id == user_id]
        return sorted(docs, key=lambda d: d.updated_at, reverse=True)

    def _create(self, table, model, user_id, data):
        assert user_id in self.users, "user row must exist"
        fields = dict(data)
        fields.setdefault("score", 0)
        fields.setdefault("suggestions", [])
        fields.setdefault("status", "draft")
        doc = model(id=_id(), user_id=user_id, created_at=_now(), updated_at=_now(), **fields)
        table[doc.id] = doc
        return copy.deepcopy(doc)

    def _update(self, table, doc_id, user_id, updates):
        doc = self._owned(table, doc_id, user_id)
        if not doc:
            return None
        for key, value in updates.items():
            setattr(doc, key, value)
        doc.updated_at = _now()
        return copy.deepcopy(doc)

    def _delete(self, table, doc_id, user_id):
        if not self._owned(table, doc_id, user_id):
            return False
        del table[doc_id]
        return True

    async def get_user_cvs(self, user_id):
        self._check()
        return self._list(self.cvs, user_id)

    async def get_cv(self, cv_id, user_id):
        self._check()
        return copy.deepcopy(self._owned(self.cvs, cv_id, user_id))

    async def create_cv(self, user_id, data):
        self._check()
        return self._create(self.cvs, Cv, user_id, data)

    async def update_cv(self, cv_id, user_id, updates):
        self._check()
        return self._update(self.cvs, cv_id, user_id, updates)

    async def delete_cv(self, cv_id, user_id):
        self._check()
        return self._delete(self.cvs, cv_id, user_id)

    async def get_user_cover_letters(self, user_id):
        self._check()
        return self._list(self.cover_letters, user_id)

    async def get_cover_letter(self, letter_id, user_id):
        self._check()
        return copy.deepcopy(self._owned(self.cover_letters, letter_id, user_id))

    async def create_cover_letter(self, user_id, data):
        self._check()
        return self._create(self.cover_letters, CoverLetter, user_id, data)

    async def update_cover_letter(self, letter_id, user_id, updates):
        self._check()
        return self._update(self.cover_letters, letter_id, user_id, updates)

    async def delete_cover_letter(self, letter_id, user_id):
        self._check()
        return self._delete(self.cover_letters, letter_id, user_id)

    # conversations
    async def get_user_conversations(self, user_id):
        self._check()
        return self._list(self.conversations, user_id)

    async def get_conversation(self, conversation_id, user_id):
        self._check()
        return self._owned(self.conversations, conversation_id, user_id)

    async def create_conversation(self, user_id, title=None):
        self._check()
        conversation = Conversation(
            id=_id(), user_id=user_id, title=title or "New Conversation",
            created_at=_now(), updated_at=_now(),
        )
        self.conversations[conversation.id] = conversation
        return conversation

    async def get_conversation_messages(self, conversation_id):
        self._check()
        return [m for m in self.messages if m.conversation_id == conversation_id]

    async def create_message(self, conversation_id, role, content):
        self._check()
        message = Message(id=_id(), conversation_id=conversation_id, role=role,
                          content=content, created_at=_now())
        self.messages.append(message)
        self.conversations[conversation_id].updated_at = _now()
        return message

    # affiliates
    async def create_affiliate(self, user_id, affiliate_code, commission_rate):
        self._check()
        affiliate = Affiliate(id=_id(), user_id=user_id, affiliate_code=affiliate_code,
                              commission_rate=commission_rate, created_at=_now())
        self.affiliates[affiliate.id] = affiliate
        return affiliate

    async def get_affiliate_by_code(self, affiliate_code):
        self._check()
        return next((a for a in self.affiliates.values() if a.affiliate_code == affiliate_code), None)

    async def get_affiliate_by_user(self, user_id):
        self._check()
        return next((a for a in self.affiliates.values() if a.user_id == user_id), None)

    async def record_affiliate_click(self, affiliate_id, visitor_hash, user_agent=None, window_seconds=0):
        self._check()
        since = _now() - timedelta(seconds=window_seconds)
        if any(
            c["affiliate_id"] == affiliate_id and c["visitor_hash"] == visitor_hash
            and c["clicked_at"] >= since
            for c in self.clicks
        ):
            return None
        click_id = _id()
        self.clicks.append({
            "id": click_id,
            "affiliate_id": affiliate_id,
            "visitor_hash": visitor_hash,
            "user_agent": user_agent,
            "clicked_at": _now(),
        })
        return click_id

    async def count_affiliate_clicks(self, affiliate_id):
        self._check()
        return sum(1 for c in self.clicks if c["affiliate_id"] == affiliate_id)

    async def get_referral_by_referred_user(self, referred_user_id):
        self._check()
        return next((r for r in self.referrals.values() if r.referred_user_id == referred_user_id), None)

    async def create_referral(self, affiliate_id, referred_user_id, subscription_plan,
                              subscription_amount, commission_amount):
        self._check()
        referral = AffiliateReferral(
            id=_id(), affiliate_id=affiliate_id, referred_user_id=referred_user_id,
            subscription_plan=subscription_plan, subscription_amount=subscription_amount,
            commission_amount=commission_amount, referred_at=_now(),
        )
        self.referrals[referral.id] = referral
        commission = AffiliateCommission(
            id=_id(), affiliate_id=affiliate_id, referral_id=referral.id,
            amount=commission_amount, created_at=_now(), updated_at=_now(),
        )
        self.commissions[commission.id] = commission
        return referral

    async def list_affiliate_referrals(self, affiliate_id, limit=None):
        self._check()
        referrals = sorted(
            (r for r in self.referrals.values() if r.affiliate_id == affiliate_id),
            key=lambda r: r.referred_at, reverse=True,
        )
        return referrals[:limit] if limit else referrals

    async def get_commission(self, commission_id):
        self._check()
        return self.commissions.get(commission_id)

    async def list_affiliate_commissions(self, affiliate_id):
        self._check()
        return [c for c in self.commissions.values() if c.affiliate_id == affiliate_id]

    async def update_commission_status(self, commission_id, status):
        self._check()
        commission = self.commissions.get(commission_id)
        if not commission:
            return None
        commission.status = status
        commission.updated_at = _now()
        self.referrals[commission.referral_id].status = status
        return commission


class FakeProvider(BaseTextProvider):
    """Text provider answering from a queue of scripted replies"""

    def __init__(self):
        super().__init__(config=None)
        self.replies: List[Any] = []
        self.calls: List[Dict[str, Any]] = []

    def queue(self, reply: Any) -> None:
        self.replies.append(reply)

    def complete(self, messages, temperature=0.7, max_tokens=None, json_mode=False):
        self.calls.append({"messages": messages, "json_mode": json_mode, "max_tokens": max_tokens})
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply)
        return reply


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def affiliate_service(fake_db) -> AffiliateService:
    return AffiliateService(fake_db, TEST_CONFIG["affiliate"], TEST_CONFIG["plans"])


@pytest.fixture
def server(fake_db, fake_provider, affiliate_service) -> CVBoosterServer:
    server = CVBoosterServer(copy.deepcopy(TEST_CONFIG))
    server.db_manager = fake_db
    server.affiliate_service = affiliate_service
    server.assistant = CareerAssistant(fake_provider)
    return server


@pytest.fixture
def client(server):
    app = create_app(server=server, configure_logging=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"X-User-Id": "user-1", "X-User-Email": "alice@example.com"}


@pytest.fixture
def stored_cv(fake_db):
    """A CV owned by user-1"""
    fake_db.users["user-1"] = User(id="user-1")
    cv = Cv(
        id="cv-1",
        user_id="user-1",
        title="Marie Curie",
        content="• Recherche en physique\n• Prix Nobel ★ 1903\n\n\n\nLaboratoire @ Paris",
        sector="Recherche",
        position="Chercheuse",
        created_at=_now(),
        updated_at=_now(),
    )
    fake_db.cvs[cv.id] = cv
    return cv


