import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from dotenv import load_dotenv


class BaseConfig(ABC):
    """Settings shared by text-generation providers

    Values are looked up in the process environment first (``.env`` included),
    then in the ``ai`` section of config.yaml handed to the constructor.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        load_dotenv()
        self.settings = settings or {}

    def _setting(self, env_key: str, name: str, default: Any = None) -> Any:
        value = os.getenv(env_key)
        if value:
            return value
        return self.settings.get(name, default)

    @abstractmethod
    def validate(self) -> bool:
        """Return False when the provider cannot be used"""

    @abstractmethod
    def get_api_key(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_model(self) -> str:
        pass
