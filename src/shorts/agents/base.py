"""Base agent abstraction."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, Protocol, TypeVar

from ..config import config

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class TextClient(Protocol):
    """Anything that turns a prompt into response text."""

    @property
    def model(self) -> str:
        ...

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        ...


def default_text_client(provider: Optional[str] = None) -> TextClient:
    """Build the text client selected by SHORTS_SCRIPT_PROVIDER."""
    provider = provider or config.script_provider
    if provider == "anthropic":
        from ..services.anthropic import AnthropicClient

        return AnthropicClient()
    if provider == "gemini":
        from ..services.gemini import GeminiClient

        return GeminiClient()
    raise ValueError(f"Unknown script provider: {provider}. Use 'gemini' or 'anthropic'.")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for AI agents.

    Provides shared functionality for agents that generate structured text.
    Subclasses must implement the `run` method and define their prompts.
    """

    def __init__(self, client: Optional[TextClient] = None) -> None:
        """Initialize the agent.

        Args:
            client: Text client. Built from configuration if not provided.
        """
        self._client = client or default_text_client()
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        ...

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._client.model

    @abstractmethod
    async def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task.

        Args:
            input_data: Input data for the agent.

        Returns:
            Structured output from the agent.
        """
        ...

    async def _create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> str:
        """Send a prompt with the agent's system prompt.

        The blocking client call runs in a worker thread.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature.

        Returns:
            The text content of the response.
        """
        self._logger.debug(f"Creating message with prompt length: {len(prompt)}")

        try:
            response = await asyncio.to_thread(
                self._client.create_message,
                prompt=prompt,
                max_tokens=max_tokens,
                system=self.system_prompt,
                temperature=temperature,
            )
            self._logger.debug(f"Received response of length: {len(response)}")
            return response

        except Exception as e:
            self._logger.error(f"Error creating message: {e}")
            raise
