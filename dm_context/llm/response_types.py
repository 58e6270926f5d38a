"""Generation request and response types.

Immutable dataclasses exchanged with the external text generator.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling options passed to the generator.

    Attributes:
        max_tokens: Maximum tokens to generate.
        temperature: Sampling temperature (0.0-1.0).
        system_prompt: System-level instructions, if any.
    """

    max_tokens: int = 1024
    temperature: float = 0.7
    system_prompt: str | None = None


@dataclass(frozen=True)
class UsageStats:
    """Token usage statistics.

    Attributes:
        prompt_tokens: Tokens in the input.
        completion_tokens: Tokens in the output.
        total_tokens: Combined total.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "UsageStats") -> "UsageStats":
        return UsageStats(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


@dataclass(frozen=True)
class GenerationResult:
    """Text produced by the generator.

    Attributes:
        text: Generated response text.
        usage: Token usage statistics.
    """

    text: str
    usage: UsageStats = field(default_factory=UsageStats)
