from .openai import OpenAITextProvider

__all__ = ["OpenAITextProvider"]
