"""Text generator protocol definition.

The core never produces completions itself; callers supply any object
satisfying this protocol to the turn runner.
"""

from typing import Protocol, runtime_checkable

from dm_context.llm.response_types import GenerationOptions, GenerationResult


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for external text-generation services."""

    async def generate(
        self,
        prompt: str,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate a response for a prompt.

        Args:
            prompt: Assembled context followed by the player's input.
            options: Sampling options.

        Returns:
            GenerationResult with text and usage.
        """
        ...
