"""OpenAI-compatible chat completions generator.

Talks to any backend exposing ``POST {base_url}/chat/completions`` with
bearer authentication (DeepSeek, OpenAI, vLLM, Ollama's OpenAI endpoint).

Key behaviour:
- One system message followed by one user message per text, in order
- Runs inside the caller's task, so cancelling the request cancels the call
- No retries; transport faults surface as GenerationUnavailableError
- Empty completions surface as EmptyGenerationError
"""

import httpx

from textcache.config import Settings
from textcache.errors import EmptyGenerationError, GenerationUnavailableError
from textcache.logging_config import get_logger

logger = get_logger(__name__)


class ChatCompletionGenerator:
    """Chat completions implementation of the TextGenerator protocol.

    This class satisfies the TextGenerator protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        generator = ChatCompletionGenerator.create(settings)
        text = await generator.generate("You are a translator.", "hello")
        ```
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        model_name: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            api_key: Bearer token for the backend.
            base_url: API base URL, e.g. https://api.deepseek.com/v1
            model_name: Model identifier sent with every request.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_name = model_name
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, settings: Settings) -> "ChatCompletionGenerator":
        """Factory method to create ChatCompletionGenerator from settings.

        Args:
            settings: Application settings

        Returns:
            Configured ChatCompletionGenerator
        """
        return cls(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            model_name=settings.llm_model,
            timeout=settings.llm_timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            headers = {}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    @staticmethod
    def build_messages(system_prompt: str, *texts: str) -> list[dict[str, str]]:
        """Build the chat message sequence.

        Args:
            system_prompt: Instruction for the system message
            *texts: User messages, in order

        Returns:
            List of ``{"role", "content"}`` dicts
        """
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": "user", "content": text} for text in texts)
        return messages

    async def generate(self, system_prompt: str, *texts: str) -> str:
        """Generate a completion.

        Args:
            system_prompt: Instruction sent as the system message
            *texts: User messages, sent in order after the system message

        Returns:
            The text of the first completion

        Raises:
            GenerationUnavailableError: Transport error, timeout or non-2xx status
            EmptyGenerationError: No choices, or the first choice has no content
        """
        payload = {
            "model": self._model_name,
            "messages": self.build_messages(system_prompt, *texts),
        }

        try:
            response = await self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error("Chat completion timed out", model=self._model_name, error=str(e))
            raise GenerationUnavailableError(
                "Generative backend timed out", {"model": self._model_name}
            ) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "Chat completion rejected",
                model=self._model_name,
                status_code=e.response.status_code,
            )
            raise GenerationUnavailableError(
                f"Generative backend returned HTTP {e.response.status_code}",
                {"model": self._model_name, "status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error("Chat completion request failed", model=self._model_name, error=str(e))
            raise GenerationUnavailableError(
                f"Generative backend request failed: {e}", {"model": self._model_name}
            ) from e
        except ValueError as e:
            raise GenerationUnavailableError(
                "Generative backend returned invalid JSON", {"model": self._model_name}
            ) from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            logger.error("Chat completion returned no choices", model=self._model_name)
            raise EmptyGenerationError(details={"model": self._model_name})

        first = choices[0] if isinstance(choices[0], dict) else {}
        content = (first.get("message") or {}).get("content")
        if not content:
            logger.error("Chat completion returned empty content", model=self._model_name)
            raise EmptyGenerationError(details={"model": self._model_name})

        return content

    async def is_available(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if the model listing endpoint answers with 2xx, False otherwise
        """
        try:
            response = await self.client.get("/models")
            return response.is_success
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
