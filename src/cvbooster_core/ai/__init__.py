from .assistant import CareerAssistant
from .base import BaseTextProvider
from .config import BaseConfig, OpenAIConfig
from .factory import TextProviderFactory
from .providers import OpenAITextProvider

__all__ = [
    "BaseConfig",
    "BaseTextProvider",
    "CareerAssistant",
    "OpenAIConfig",
    "OpenAITextProvider",
    "TextProviderFactory",
]
