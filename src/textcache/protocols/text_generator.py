"""Text generation protocol.

Defines the interface for the generative backend: one system instruction
followed by any number of user texts in, one completion text out.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for generative text backends."""

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def generate(self, system_prompt: str, *texts: str) -> str:
        """Generate a completion.

        Args:
            system_prompt: Instruction sent as the system message
            *texts: User messages, sent in order after the system message

        Returns:
            The text of the first completion (never empty)

        Raises:
            GenerationUnavailableError: Transport or backend failure
            EmptyGenerationError: Backend answered without usable text
        """
        ...

    async def is_available(self) -> bool:
        """Check if the backend is reachable."""
        ...

    async def close(self) -> None:
        """Release connections held by the generator."""
        ...
