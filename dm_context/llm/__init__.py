"""Boundary types for the external text generator."""

from dm_context.llm.base import TextGenerator
from dm_context.llm.response_types import GenerationOptions, GenerationResult, UsageStats

__all__ = [
    "GenerationOptions",
    "GenerationResult",
    "TextGenerator",
    "UsageStats",
]
