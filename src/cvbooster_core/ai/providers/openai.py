from typing import List, Optional

from loguru import logger
from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    InternalServerError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...exceptions import AIServiceError
from ..base import BaseTextProvider, ChatMessage
from ..config.openai import OpenAIConfig

_TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, InternalServerError)


class OpenAITextProvider(BaseTextProvider):
    """OpenAI chat completions provider implementation"""

    def __init__(self, config: OpenAIConfig = None):
        if config is None:
            config = OpenAIConfig()
        super().__init__(config)
        self.client = None

    def _get_client(self) -> OpenAI:
        """Get or create OpenAI client"""
        if self.client is None:
            self.client = OpenAI(
                api_key=self.config.get_api_key(),
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self.client

    @retry(
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    def _create(self, **kwargs):
        return self._get_client().chat.completions.create(**kwargs)

    def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        if not self.config.validate():
            raise AIServiceError("OpenAI API key is not configured", code="config_error")

        kwargs = {
            "model": self.config.get_model(),
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._create(**kwargs)
        except RateLimitError as e:
            logger.warning(f"OpenAI rate limit: {e}")
            code = "quota_exceeded" if "insufficient_quota" in str(e) else "rate_limit"
            raise AIServiceError(str(e), code=code)
        except AuthenticationError as e:
            logger.error(f"OpenAI authentication failed: {e}")
            raise AIServiceError(str(e), code="config_error")
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise AIServiceError(str(e))

        content = response.choices[0].message.content or ""
        logger.debug(f"OpenAI completion: {len(content)} chars, model {self.config.get_model()}")
        return content
