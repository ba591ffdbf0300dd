"""LLM provider adapters."""

from .capability import GenerationCapability, LLMGenerationCapability
from .runner import LLMRunner

__all__ = ["GenerationCapability", "LLMGenerationCapability", "LLMRunner"]
