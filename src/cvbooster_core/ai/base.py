import asyncio
import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..exceptions import AIServiceError

if TYPE_CHECKING:
    from .config.base import BaseConfig

ChatMessage = Dict[str, str]


class BaseTextProvider(ABC):
    """Base text-generation provider class that defines the interface for all providers"""

    def __init__(self, config: "BaseConfig"):
        self.config = config

    @abstractmethod
    def complete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """Send chat messages and return the assistant's text answer"""
        pass

    def complete_json(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Ask for a JSON object answer and decode it"""
        raw = self.complete(messages, temperature, max_tokens, json_mode=True)
        try:
            result = json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            raise AIServiceError(f"Invalid JSON answer from model: {e}")
        if not isinstance(result, dict):
            raise AIServiceError("Model answer is not a JSON object")
        return result

    # --------------------
    # Async counterparts
    # --------------------
    async def acomplete(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """Async wrapper for complete using a thread to avoid blocking the event loop."""
        return await asyncio.to_thread(self.complete, messages, temperature, max_tokens, json_mode)

    async def acomplete_json(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Async wrapper for complete_json."""
        return await asyncio.to_thread(self.complete_json, messages, temperature, max_tokens)
