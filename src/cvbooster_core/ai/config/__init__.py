from .base import BaseConfig
from .openai import OpenAIConfig

__all__ = ["BaseConfig", "OpenAIConfig"]
