"""Abstract base class for text-generation service providers.

The answer service hands a fully assembled prompt to :meth:`generate` and
returns the model's text verbatim.  Implementations wrap Ollama, OpenAI
(or a compatible endpoint) and Anthropic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OllamaLLMProvider, OpenAILLMProvider, AnthropicLLMProvider
# Located in: epubrag/providers/llm/
class ILLMProvider(ABC):
    """Contract for generation services used by the answer service."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a completion for *prompt*.

        Parameters
        ----------
        prompt:
            The complete prompt, question and retrieved context included.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        epubrag.utils.errors.GenerationError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"ollama"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations should verify that credentials are present without
        making an inference call.
        """

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm the service accepts us.

        Unlike :meth:`is_available`, this method actively contacts the
        remote service.
        """
