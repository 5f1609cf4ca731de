"""
Reinforcement learning components for critter simulations.

This module contains DQN-related components including:
- Replay buffer for experience replay
- Epsilon-greedy exploration policy
- DQN agent implementation
"""

from critters_rl.rl.dqn_agent import AgentPhase, DQNAgent
from critters_rl.rl.policy import EpsilonGreedyPolicy
from critters_rl.rl.replay_buffer import Experience, ReplayBuffer

__all__ = [
    "AgentPhase",
    "DQNAgent",
    "EpsilonGreedyPolicy",
    "Experience",
    "ReplayBuffer",
]
