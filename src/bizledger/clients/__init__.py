"""LLM client implementations for bizledger."""

from bizledger.clients.openai_client import OpenAIClient, OpenAIResponse

__all__ = [
    "OpenAIClient",
    "OpenAIResponse",
]
