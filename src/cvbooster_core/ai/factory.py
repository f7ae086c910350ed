from typing import Dict, Type

from .base import BaseTextProvider
from .config.openai import OpenAIConfig
from .providers.openai import OpenAITextProvider


class TextProviderFactory:
    """Factory class for creating text-generation provider instances"""

    _providers: Dict[str, Type[BaseTextProvider]] = {
        'openai': OpenAITextProvider,
    }

    _configs: Dict[str, Type] = {
        'openai': OpenAIConfig,
    }

    @classmethod
    def create_provider(cls, provider_name: str = 'openai', config=None) -> BaseTextProvider:
        """Create a text-generation provider instance

        Args:
            provider_name: Name of the provider (e.g., 'openai')
            config: Optional configuration instance

        Returns:
            BaseTextProvider: provider instance

        Raises:
            ValueError: If provider_name is not supported
        """
        if provider_name not in cls._providers:
            raise ValueError(f"Unsupported text provider: {provider_name}. "
                             f"Supported providers: {list(cls._providers.keys())}")

        provider_class = cls._providers[provider_name]

        # If no config provided, create default config for the provider
        if config is None:
            config_class = cls._configs.get(provider_name)
            if config_class:
                config = config_class()

        return provider_class(config)

    @classmethod
    def get_supported_providers(cls) -> list:
        """Get list of supported provider names"""
        return list(cls._providers.keys())
