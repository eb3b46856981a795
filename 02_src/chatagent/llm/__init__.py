"""LLM module."""

from .llm_provider import ILLMProvider, LLMProvider, apply_stop_sequences

__all__ = ["ILLMProvider", "LLMProvider", "apply_stop_sequences"]
