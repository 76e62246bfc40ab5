"""
Completion Service Client Module.

This module wraps the external language-model completion service used
as an optional, untrusted field guesser. A single attempt is made per
call with a bounded timeout; any failure surfaces as
CompletionServiceError so the caller can fall back to pattern
extraction.

Author: ML Engineering Team
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import openai

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import CompletionServiceError, ConfigurationError

# Initialize module logger
logger = get_logger(__name__)


class CompletionClient(ABC):
    """Sends one prompt and returns the raw JSON text of the answer."""

    provider = "base"

    @abstractmethod
    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Request a structured (JSON) completion.

        Raises:
            CompletionServiceError: On transport errors, timeouts or an
                empty response.
        """


class OpenAICompletionClient(CompletionClient):
    """
    Completion client backed by the OpenAI chat completions API.

    Attributes:
        model: Chat model name
        timeout: Request timeout in seconds
        temperature: Sampling temperature
        max_tokens: Upper bound on the response length

    Example:
        >>> client = OpenAICompletionClient(api_key="sk-...")
        >>> raw_json = client.complete("Extract the invoice fields ...")
    """

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> None:
        self.model = model or get_config("completion.model", "gpt-4o-mini")
        self.timeout = timeout if timeout is not None else get_config("completion.timeout", 30)
        self.temperature = temperature if temperature is not None else get_config("completion.temperature", 0)
        self.max_tokens = max_tokens or get_config("completion.max_tokens", 800)

        # One attempt per call; the pattern extractors are the retry path
        self.client = openai.OpenAI(api_key=api_key, timeout=self.timeout, max_retries=0)

        logger.info(f"OpenAI completion client initialized (model={self.model}, timeout={self.timeout}s)")

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"}
            )
        except openai.APITimeoutError as e:
            raise CompletionServiceError(f"Request timed out after {self.timeout}s: {e}", self.provider)
        except openai.OpenAIError as e:
            raise CompletionServiceError(str(e), self.provider)

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise CompletionServiceError("Empty response", self.provider)

        return content.strip()


def build_completion_client() -> Optional[CompletionClient]:
    """
    Build the configured completion client.

    Returns:
        A client, or None when the service is disabled or no API key is
        configured.

    Raises:
        ConfigurationError: If completion.provider is unknown.
    """
    if not get_config("completion.enabled", True):
        logger.info("Completion service disabled by configuration")
        return None

    provider = get_config("completion.provider", OpenAICompletionClient.provider)
    if provider != OpenAICompletionClient.provider:
        raise ConfigurationError("completion.provider", provider, "Supported providers: ['openai']")

    api_key = get_config("completion.api_key")
    if not api_key:
        logger.info("No completion API key configured; using pattern extraction only")
        return None

    return OpenAICompletionClient(api_key=api_key)
