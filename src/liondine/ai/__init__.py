"""LLM-backed text structuring for LionDine menu pages."""

from liondine.ai.structurer import LLMStructurer

__all__ = ["LLMStructurer"]
