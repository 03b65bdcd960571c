from abc import ABC, abstractmethod
from typing import Optional


class LLM(ABC):
    @abstractmethod
    def generate(self, prompt: str, system: Optional[str] = None, **kwargs) -> str:
        """Return the model's plain-text completion for `prompt`."""
        ...
