from .llm import LLMClientPort

__all__ = [
    "LLMClientPort",
]
