# joker_arena/agents/__init__.py
from .base import JokerAgent
from .random_agent import RandomJokerAgent

__all__ = [
    "JokerAgent",
    "RandomJokerAgent",
]
