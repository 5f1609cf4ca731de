"""Provides agent policy interfaces and baselines."""

from .base import AgentPolicy, State
from .random_policy import RandomAgent

__all__ = ["AgentPolicy", "State", "RandomAgent"]
