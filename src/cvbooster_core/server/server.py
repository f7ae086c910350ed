"""
CVBooster服务器 - 主要服务类，整合所有组件
"""

from typing import Any, Dict, Optional

from loguru import logger

from ..affiliate import AffiliateService
from ..ai import CareerAssistant, TextProviderFactory
from ..ai.config import OpenAIConfig
from ..utils.config_utils import read_config
from .database import PostgreSQLManager


class CVBoosterServer:
    """CVBooster服务器主类"""

    def __init__(self, config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        """
        初始化服务器

        Args:
            config: 已加载的配置字典
            config_path: 配置文件路径 (config 为空时使用)
        """
        self.config = config if config is not None else read_config(config_path)

        # 初始化组件
        self.db_manager = PostgreSQLManager(
            self.config.get("server_components", {}).get("pg", {})
        )
        self.affiliate_service = AffiliateService(
            self.db_manager,
            self.config.get("affiliate", {}),
            self.config.get("plans", {}),
        )

        ai_settings = self.config.get("ai", {})
        provider = TextProviderFactory.create_provider(
            ai_settings.get("provider", "openai"), OpenAIConfig(ai_settings)
        )
        self.assistant = CareerAssistant(provider)

        self._initialized = False

    async def initialize(self) -> None:
        """初始化服务器"""
        if self._initialized:
            logger.warning("CVBooster服务器已经初始化")
            return

        try:
            logger.info("正在初始化CVBooster服务器...")
            await self.db_manager.initialize()
            self._initialized = True
            logger.info("CVBooster服务器初始化完成")
        except Exception as e:
            logger.error(f"CVBooster服务器初始化失败: {e}")
            raise

    async def close(self) -> None:
        """关闭服务器"""
        if not self._initialized:
            return

        try:
            logger.info("正在关闭CVBooster服务器...")
            await self.db_manager.close()
            self._initialized = False
            logger.info("CVBooster服务器已关闭")
        except Exception as e:
            logger.error(f"关闭CVBooster服务器时出错: {e}")

    async def __aenter__(self):
        """异步上下文管理器入口"""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()

    def _check_initialized(self) -> None:
        """检查是否已初始化"""
        if not self._initialized:
            raise RuntimeError("CVBooster服务器未初始化，请先调用 initialize() 方法")

    @property
    def export_options(self) -> Dict[str, Any]:
        return self.config.get("export", {})

    @property
    def upload_max_size(self) -> Optional[int]:
        return self.config.get("upload", {}).get("max_size")

    async def health_check(self) -> Dict[str, Any]:
        """健康检查"""
        self._check_initialized()
        try:
            database_ok = await self.db_manager.ping()
        except Exception as e:
            logger.error(f"数据库健康检查失败: {e}")
            database_ok = False
        return {
            "status": "healthy" if database_ok else "degraded",
            "database": "ok" if database_ok else "unavailable",
        }
