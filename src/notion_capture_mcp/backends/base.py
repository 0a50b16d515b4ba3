"""AI backend interface.

Every backend turns a GenerationRequest into the raw text of the model's
answer. Normalization and sentinel handling live above this interface in
``pipeline.py`` and are shared by all backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal

from ..models.inputs import InputFile

GenerationMode = Literal["process", "refine"]


@dataclass
class GenerationRequest:
    """Everything a backend needs for one generation call."""

    prompt: str
    schema: dict[str, Any]
    text: str = ""
    files: list[InputFile] = field(default_factory=list)
    mode: GenerationMode = "process"


class AIBackend(ABC):
    """A model provider that answers a GenerationRequest with raw text."""

    provider: str = ""

    def __init__(self, api_key: str, model: str) -> None:
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def send_generation(self, request: GenerationRequest) -> str:
        """Send *request* and return the model's raw response text.

        Raises:
            ConfigurationError: Missing API key, before any network call.
            TransportError: Network failure or non-success response.
        """
        raise NotImplementedError
