"""
PostgreSQL数据库管理器 - 处理简历、求职信、对话和联盟推广数据存储
"""

import json
import uuid
from typing import Any, Dict, List, Optional
from contextlib import asynccontextmanager

import asyncpg
from loguru import logger

from ..models import (
    Affiliate,
    AffiliateCommission,
    AffiliateReferral,
    Conversation,
    CoverLetter,
    Cv,
    Message,
    User,
)

CV_UPDATABLE_FIELDS = ("title", "content", "sector", "position", "score", "suggestions", "status")
COVER_LETTER_UPDATABLE_FIELDS = CV_UPDATABLE_FIELDS + ("company_name",)


def _new_id() -> str:
    return str(uuid.uuid4())


def _build_update(fields: Dict[str, Any], allowed: tuple, first_param: int) -> tuple:
    """Build the SET clause of an UPDATE from whitelisted columns"""
    columns = [name for name in allowed if name in fields]
    assignments = [f"{name} = ${first_param + i}" for i, name in enumerate(columns)]
    assignments.append("updated_at = CURRENT_TIMESTAMP")
    return ", ".join(assignments), [fields[name] for name in columns]


class PostgreSQLManager:
    """PostgreSQL数据库管理器"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None

    async def initialize(self) -> None:
        """初始化数据库连接池"""
        try:
            self.pool = await asyncpg.create_pool(
                host=self.config.get("host", "localhost"),
                port=self.config.get("port", 5432),
                database=self.config.get("database", "cvbooster"),
                user=self.config.get("user", "postgres"),
                password=self.config.get("password", ""),
                min_size=self.config.get("min_pool_size", 5),
                max_size=self.config.get("max_pool_size", 20),
                command_timeout=self.config.get("command_timeout", 30),
                init=self._init_connection,
                server_settings={
                    "jit": "off"
                }
            )
            await self._create_tables()
            logger.info("PostgreSQL连接池初始化成功")
        except Exception as e:
            logger.error(f"PostgreSQL连接池初始化失败: {e}")
            raise

    async def close(self) -> None:
        """关闭数据库连接池"""
        if self.pool:
            await self.pool.close()
            logger.info("PostgreSQL连接池已关闭")

    @staticmethod
    async def _init_connection(conn: asyncpg.Connection) -> None:
        """JSONB列与Python对象之间自动转换"""
        await conn.set_type_codec(
            "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
        )

    @asynccontextmanager
    async def get_connection(self):
        """获取数据库连接"""
        if not self.pool:
            raise RuntimeError("数据库连接池未初始化")

        async with self.pool.acquire() as connection:
            yield connection

    async def ping(self) -> bool:
        """检查数据库连接"""
        async with self.get_connection() as conn:
            return await conn.fetchval("SELECT 1") == 1

    async def _create_tables(self) -> None:
        """创建必要的数据表"""
        async with self.get_connection() as conn:
            # 用户表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id VARCHAR(50) PRIMARY KEY,
                    email VARCHAR(200) UNIQUE,
                    first_name VARCHAR(100),
                    last_name VARCHAR(100),
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 简历表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS cvs (
                    id VARCHAR(50) PRIMARY KEY,
                    user_id VARCHAR(50) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    sector TEXT,
                    position TEXT,
                    score INTEGER DEFAULT 0,
                    suggestions JSONB DEFAULT '[]',
                    status VARCHAR(20) DEFAULT 'draft',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 求职信表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS cover_letters (
                    id VARCHAR(50) PRIMARY KEY,
                    user_id VARCHAR(50) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    company_name TEXT,
                    position TEXT,
                    sector TEXT,
                    score INTEGER DEFAULT 0,
                    suggestions JSONB DEFAULT '[]',
                    status VARCHAR(20) DEFAULT 'draft',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 对话表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS conversations (
                    id VARCHAR(50) PRIMARY KEY,
                    user_id VARCHAR(50) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    title TEXT DEFAULT 'New Conversation',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 消息表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id VARCHAR(50) PRIMARY KEY,
                    conversation_id VARCHAR(50) NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
                    role VARCHAR(20) NOT NULL,
                    content TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 推广员表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliates (
                    id VARCHAR(50) PRIMARY KEY,
                    user_id VARCHAR(50) UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    affiliate_code VARCHAR(32) UNIQUE NOT NULL,
                    commission_rate INTEGER DEFAULT 20,
                    status VARCHAR(20) DEFAULT 'active',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 点击记录表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_clicks (
                    id VARCHAR(50) PRIMARY KEY,
                    affiliate_id VARCHAR(50) NOT NULL REFERENCES affiliates(id) ON DELETE CASCADE,
                    visitor_hash VARCHAR(64) NOT NULL,
                    user_agent TEXT,
                    clicked_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 推荐记录表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_referrals (
                    id VARCHAR(50) PRIMARY KEY,
                    affiliate_id VARCHAR(50) NOT NULL REFERENCES affiliates(id) ON DELETE CASCADE,
                    referred_user_id VARCHAR(50) UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    subscription_plan VARCHAR(20) NOT NULL,
                    subscription_amount INTEGER NOT NULL,
                    commission_amount INTEGER NOT NULL,
                    status VARCHAR(20) DEFAULT 'pending',
                    referred_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 佣金表
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_commissions (
                    id VARCHAR(50) PRIMARY KEY,
                    affiliate_id VARCHAR(50) NOT NULL REFERENCES affiliates(id) ON DELETE CASCADE,
                    referral_id VARCHAR(50) NOT NULL REFERENCES affiliate_referrals(id) ON DELETE CASCADE,
                    amount INTEGER NOT NULL,
                    status VARCHAR(20) DEFAULT 'pending',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 创建索引
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_cvs_user_id ON cvs(user_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_cover_letters_user_id ON cover_letters(user_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_conversations_user_id ON conversations(user_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_conversation_id ON messages(conversation_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_clicks_affiliate_visitor ON affiliate_clicks(affiliate_id, visitor_hash)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_referrals_affiliate_id ON affiliate_referrals(affiliate_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_commissions_affiliate_id ON affiliate_commissions(affiliate_id)")

            logger.info("数据表创建/更新完成")

    # ------------------------------------------------------------------
    # 用户
    # ------------------------------------------------------------------
    async def upsert_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """创建或更新用户"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO users (id, email, first_name, last_name)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (id) DO UPDATE SET
                        email = COALESCE(EXCLUDED.email, users.email),
                        first_name = COALESCE(EXCLUDED.first_name, users.first_name),
                        last_name = COALESCE(EXCLUDED.last_name, users.last_name),
                        updated_at = CURRENT_TIMESTAMP
                    RETURNING *
                """, user_id, email, first_name, last_name)
                return User.from_record(row)
        except Exception as e:
            logger.error(f"创建/更新用户失败: {e}")
            raise

    async def get_user(self, user_id: str) -> Optional[User]:
        """获取用户信息"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
                return User.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取用户信息失败: {e}")
            raise

    # ------------------------------------------------------------------
    # 简历
    # ------------------------------------------------------------------
    async def get_user_cvs(self, user_id: str) -> List[Cv]:
        """获取用户的简历列表"""
        try:
            async with self.get_connection() as conn:
                rows = await conn.fetch(
                    "SELECT * FROM cvs WHERE user_id = $1 ORDER BY updated_at DESC",
                    user_id
                )
                return [Cv.from_record(row) for row in rows]
        except Exception as e:
            logger.error(f"获取简历列表失败: {e}")
            raise

    async def get_cv(self, cv_id: str, user_id: str) -> Optional[Cv]:
        """获取单个简历, 仅限所有者"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM cvs WHERE id = $1 AND user_id = $2",
                    cv_id, user_id
                )
                return Cv.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取简历失败: {e}")
            raise

    async def create_cv(self, user_id: str, data: Dict[str, Any]) -> Cv:
        """创建简历记录"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO cvs (
                        id, user_id, title, content, sector, position, score, suggestions, status
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                    RETURNING *
                """,
                    _new_id(), user_id, data["title"], data["content"],
                    data.get("sector"), data.get("position"), data.get("score") or 0,
                    data.get("suggestions") or [], data.get("status") or "draft"
                )
                return Cv.from_record(row)
        except Exception as e:
            logger.error(f"创建简历记录失败: {e}")
            raise

    async def update_cv(self, cv_id: str, user_id: str, updates: Dict[str, Any]) -> Optional[Cv]:
        """更新简历, 不存在或不属于该用户时返回None"""
        set_clause, values = _build_update(updates, CV_UPDATABLE_FIELDS, first_param=3)
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    f"UPDATE cvs SET {set_clause} WHERE id = $1 AND user_id = $2 RETURNING *",
                    cv_id, user_id, *values
                )
                return Cv.from_record(row) if row else None
        except Exception as e:
            logger.error(f"更新简历失败: {e}")
            raise

    async def delete_cv(self, cv_id: str, user_id: str) -> bool:
        """删除简历"""
        try:
            async with self.get_connection() as conn:
                result = await conn.execute(
                    "DELETE FROM cvs WHERE id = $1 AND user_id = $2",
                    cv_id, user_id
                )
                return result.endswith("1")
        except Exception as e:
            logger.error(f"删除简历失败: {e}")
            raise

    # ------------------------------------------------------------------
    # 求职信
    # ------------------------------------------------------------------
    async def get_user_cover_letters(self, user_id: str) -> List[CoverLetter]:
        """获取用户的求职信列表"""
        try:
            async with self.get_connection() as conn:
                rows = await conn.fetch(
                    "SELECT * FROM cover_letters WHERE user_id = $1 ORDER BY updated_at DESC",
                    user_id
                )
                return [CoverLetter.from_record(row) for row in rows]
        except Exception as e:
            logger.error(f"获取求职信列表失败: {e}")
            raise

    async def get_cover_letter(self, letter_id: str, user_id: str) -> Optional[CoverLetter]:
        """获取单个求职信, 仅限所有者"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM cover_letters WHERE id = $1 AND user_id = $2",
                    letter_id, user_id
                )
                return CoverLetter.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取求职信失败: {e}")
            raise

    async def create_cover_letter(self, user_id: str, data: Dict[str, Any]) -> CoverLetter:
        """创建求职信记录"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO cover_letters (
                        id, user_id, title, content, company_name, position, sector,
                        score, suggestions, status
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                    RETURNING *
                """,
                    _new_id(), user_id, data["title"], data["content"],
                    data.get("company_name"), data.get("position"), data.get("sector"),
                    data.get("score") or 0, data.get("suggestions") or [],
                    data.get("status") or "draft"
                )
                return CoverLetter.from_record(row)
        except Exception as e:
            logger.error(f"创建求职信记录失败: {e}")
            raise

    async def update_cover_letter(
        self, letter_id: str, user_id: str, updates: Dict[str, Any]
    ) -> Optional[CoverLetter]:
        """更新求职信, 不存在或不属于该用户时返回None"""
        set_clause, values = _build_update(updates, COVER_LETTER_UPDATABLE_FIELDS, first_param=3)
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    f"UPDATE cover_letters SET {set_clause} WHERE id = $1 AND user_id = $2 RETURNING *",
                    letter_id, user_id, *values
                )
                return CoverLetter.from_record(row) if row else None
        except Exception as e:
            logger.error(f"更新求职信失败: {e}")
            raise

    async def delete_cover_letter(self, letter_id: str, user_id: str) -> bool:
        """删除求职信"""
        try:
            async with self.get_connection() as conn:
                result = await conn.execute(
                    "DELETE FROM cover_letters WHERE id = $1 AND user_id = $2",
                    letter_id, user_id
                )
                return result.endswith("1")
        except Exception as e:
            logger.error(f"删除求职信失败: {e}")
            raise

    # ------------------------------------------------------------------
    # 对话与消息
    # ------------------------------------------------------------------
    async def get_user_conversations(self, user_id: str) -> List[Conversation]:
        """获取用户的对话列表"""
        try:
            async with self.get_connection() as conn:
                rows = await conn.fetch(
                    "SELECT * FROM conversations WHERE user_id = $1 ORDER BY updated_at DESC",
                    user_id
                )
                return [Conversation.from_record(row) for row in rows]
        except Exception as e:
            logger.error(f"获取对话列表失败: {e}")
            raise

    async def get_conversation(self, conversation_id: str, user_id: str) -> Optional[Conversation]:
        """获取单个对话, 仅限所有者"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM conversations WHERE id = $1 AND user_id = $2",
                    conversation_id, user_id
                )
                return Conversation.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取对话失败: {e}")
            raise

    async def create_conversation(self, user_id: str, title: Optional[str] = None) -> Conversation:
        """创建对话"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO conversations (id, user_id, title)
                    VALUES ($1, $2, $3)
                    RETURNING *
                """, _new_id(), user_id, title or "New Conversation")
                return Conversation.from_record(row)
        except Exception as e:
            logger.error(f"创建对话失败: {e}")
            raise

    async def get_conversation_messages(self, conversation_id: str) -> List[Message]:
        """获取对话消息, 按时间顺序; 调用方负责校验对话归属"""
        try:
            async with self.get_connection() as conn:
                rows = await conn.fetch(
                    "SELECT * FROM messages WHERE conversation_id = $1 ORDER BY created_at",
                    conversation_id
                )
                return [Message.from_record(row) for row in rows]
        except Exception as e:
            logger.error(f"获取对话消息失败: {e}")
            raise

    async def create_message(self, conversation_id: str, role: str, content: str) -> Message:
        """创建消息并刷新对话更新时间"""
        try:
            async with self.get_connection() as conn:
                async with conn.transaction():
                    row = await conn.fetchrow("""
                        INSERT INTO messages (id, conversation_id, role, content)
                        VALUES ($1, $2, $3, $4)
                        RETURNING *
                    """, _new_id(), conversation_id, role, content)
                    await conn.execute(
                        "UPDATE conversations SET updated_at = CURRENT_TIMESTAMP WHERE id = $1",
                        conversation_id
                    )
                return Message.from_record(row)
        except Exception as e:
            logger.error(f"创建消息失败: {e}")
            raise

    # ------------------------------------------------------------------
    # 联盟推广
    # ------------------------------------------------------------------
    async def create_affiliate(self, user_id: str, affiliate_code: str, commission_rate: int) -> Affiliate:
        """创建推广员"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO affiliates (id, user_id, affiliate_code, commission_rate)
                    VALUES ($1, $2, $3, $4)
                    RETURNING *
                """, _new_id(), user_id, affiliate_code, commission_rate)
                return Affiliate.from_record(row)
        except Exception as e:
            logger.error(f"创建推广员失败: {e}")
            raise

    async def get_affiliate_by_code(self, affiliate_code: str) -> Optional[Affiliate]:
        """根据推广码获取推广员"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM affiliates WHERE affiliate_code = $1", affiliate_code
                )
                return Affiliate.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取推广员失败: {e}")
            raise

    async def get_affiliate_by_user(self, user_id: str) -> Optional[Affiliate]:
        """根据用户ID获取推广员"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow("SELECT * FROM affiliates WHERE user_id = $1", user_id)
                return Affiliate.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取推广员失败: {e}")
            raise

    async def record_affiliate_click(
        self,
        affiliate_id: str,
        visitor_hash: str,
        user_agent: Optional[str] = None,
        window_seconds: int = 0,
    ) -> Optional[str]:
        """记录一次点击, 返回点击ID

        同一访客在时间窗口内已有点击时不写入并返回 None. 事务级咨询锁
        保证同一 (推广员, 访客) 的并发请求只记录一次.
        """
        click_id = _new_id()
        try:
            async with self.get_connection() as conn:
                async with conn.transaction():
                    await conn.execute(
                        "SELECT pg_advisory_xact_lock(hashtext($1::text || ':' || $2::text))",
                        affiliate_id, visitor_hash,
                    )
                    return await conn.fetchval("""
                        INSERT INTO affiliate_clicks (id, affiliate_id, visitor_hash, user_agent)
                        SELECT $1::varchar, $2::varchar, $3::varchar, $4::text
                        WHERE NOT EXISTS (
                            SELECT 1 FROM affiliate_clicks
                            WHERE affiliate_id = $2 AND visitor_hash = $3
                              AND clicked_at > CURRENT_TIMESTAMP - make_interval(secs => $5)
                        )
                        RETURNING id
                    """, click_id, affiliate_id, visitor_hash, user_agent, float(window_seconds))
        except Exception as e:
            logger.error(f"记录推广点击失败: {e}")
            raise

    async def count_affiliate_clicks(self, affiliate_id: str) -> int:
        """统计推广员的点击总数"""
        try:
            async with self.get_connection() as conn:
                return await conn.fetchval(
                    "SELECT COUNT(*) FROM affiliate_clicks WHERE affiliate_id = $1", affiliate_id
                )
        except Exception as e:
            logger.error(f"统计推广点击失败: {e}")
            raise

    async def get_referral_by_referred_user(self, referred_user_id: str) -> Optional[AffiliateReferral]:
        """获取某个用户的推荐记录"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM affiliate_referrals WHERE referred_user_id = $1",
                    referred_user_id
                )
                return AffiliateReferral.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取推荐记录失败: {e}")
            raise

    async def create_referral(
        self,
        affiliate_id: str,
        referred_user_id: str,
        subscription_plan: str,
        subscription_amount: int,
        commission_amount: int,
    ) -> AffiliateReferral:
        """创建推荐记录及其待处理佣金"""
        referral_id = _new_id()
        try:
            async with self.get_connection() as conn:
                async with conn.transaction():
                    row = await conn.fetchrow("""
                        INSERT INTO affiliate_referrals (
                            id, affiliate_id, referred_user_id, subscription_plan,
                            subscription_amount, commission_amount
                        ) VALUES ($1, $2, $3, $4, $5, $6)
                        RETURNING *
                    """, referral_id, affiliate_id, referred_user_id, subscription_plan,
                        subscription_amount, commission_amount)
                    await conn.execute("""
                        INSERT INTO affiliate_commissions (id, affiliate_id, referral_id, amount)
                        VALUES ($1, $2, $3, $4)
                    """, _new_id(), affiliate_id, referral_id, commission_amount)
                return AffiliateReferral.from_record(row)
        except Exception as e:
            logger.error(f"创建推荐记录失败: {e}")
            raise

    async def list_affiliate_referrals(
        self, affiliate_id: str, limit: Optional[int] = None
    ) -> List[AffiliateReferral]:
        """获取推广员的推荐记录, 最新的在前"""
        try:
            async with self.get_connection() as conn:
                rows = await conn.fetch("""
                    SELECT * FROM affiliate_referrals
                    WHERE affiliate_id = $1
                    ORDER BY referred_at DESC
                    LIMIT $2
                """, affiliate_id, limit)
                return [AffiliateReferral.from_record(row) for row in rows]
        except Exception as e:
            logger.error(f"获取推荐记录列表失败: {e}")
            raise

    async def get_commission(self, commission_id: str) -> Optional[AffiliateCommission]:
        """获取佣金记录"""
        try:
            async with self.get_connection() as conn:
                row = await conn.fetchrow(
                    "SELECT * FROM affiliate_commissions WHERE id = $1", commission_id
                )
                return AffiliateCommission.from_record(row) if row else None
        except Exception as e:
            logger.error(f"获取佣金记录失败: {e}")
            raise

    async def list_affiliate_commissions(self, affiliate_id: str) -> List[AffiliateCommission]:
        """获取推广员的所有佣金"""
        try:
            async with self.get_connection() as conn:
                rows = await conn.fetch(
                    "SELECT * FROM affiliate_commissions WHERE affiliate_id = $1 ORDER BY created_at DESC",
                    affiliate_id
                )
                return [AffiliateCommission.from_record(row) for row in rows]
        except Exception as e:
            logger.error(f"获取佣金列表失败: {e}")
            raise

    async def update_commission_status(self, commission_id: str, status: str) -> Optional[AffiliateCommission]:
        """更新佣金状态, 同步更新对应的推荐记录"""
        try:
            async with self.get_connection() as conn:
                async with conn.transaction():
                    row = await conn.fetchrow("""
                        UPDATE affiliate_commissions
                        SET status = $1, updated_at = CURRENT_TIMESTAMP
                        WHERE id = $2
                        RETURNING *
                    """, status, commission_id)
                    if row:
                        await conn.execute(
                            "UPDATE affiliate_referrals SET status = $1 WHERE id = $2",
                            status, row["referral_id"]
                        )
                return AffiliateCommission.from_record(row) if row else None
        except Exception as e:
            logger.error(f"更新佣金状态失败: {e}")
            raise
