"""Persisted long-term memory for the agent."""

from .long_term import MemoryItem, MemoryStore

__all__ = ["MemoryItem", "MemoryStore"]
