"""Exception definitions for dm_context.

The assembly and validation core degrades instead of raising; these
exceptions exist for the turn runner's boundary with the text generator.
"""


class DMContextError(Exception):
    """Base exception for dm_context."""

    pass


class GenerationError(DMContextError):
    """The external text generator failed to produce a response.

    Attributes:
        attempt: 1-based attempt number that failed.
    """

    def __init__(self, message: str, attempt: int = 1) -> None:
        super().__init__(message)
        self.attempt = attempt
