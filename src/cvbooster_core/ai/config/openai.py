from typing import Any, Dict, Optional

from loguru import logger

from .base import BaseConfig


class OpenAIConfig(BaseConfig):
    """Configuration for the OpenAI chat completions provider"""

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        super().__init__(settings)
        self.api_key = self._setting("OPENAI_API_KEY", "api_key")
        self.model = self._setting("OPENAI_MODEL", "model", "gpt-4o-mini")
        self.base_url = self._setting("OPENAI_BASE_URL", "base_url")
        self.timeout = float(self.settings.get("timeout", 60))
        self.max_retries = int(self.settings.get("max_retries", 3))

    def validate(self) -> bool:
        if not self.api_key:
            logger.error("OPENAI_API_KEY is not set and ai.api_key is empty in config.yaml")
            return False
        return True

    def get_api_key(self) -> Optional[str]:
        return self.api_key

    def get_model(self) -> str:
        return self.model
