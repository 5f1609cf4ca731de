"""
Exploration policies for reinforcement learning.

This module provides the epsilon-greedy strategy used by the DQN agent
to balance exploration and exploitation.
"""

from __future__ import annotations

import numpy as np


class EpsilonGreedyPolicy:
    """
    Epsilon-greedy exploration policy.

    This policy selects random actions with probability epsilon (exploration)
    and greedy actions with probability 1-epsilon (exploitation). Epsilon
    decays multiplicatively towards its minimum.

    Parameters
    ----------
    epsilon_start : float, optional
        Initial exploration rate. Default is 1.0.
    epsilon_min : float, optional
        Minimum exploration rate. Default is 0.1.
    epsilon_decay : float, optional
        Multiplicative decay factor applied per ``decay()`` call.
        Default is 0.995.
    rng : np.random.Generator or None, optional
        Random number generator. Default is a fresh unseeded generator.

    Attributes
    ----------
    epsilon : float
        Current exploration rate.
    epsilon_start : float
        Initial exploration rate.
    epsilon_min : float
        Minimum exploration rate.
    epsilon_decay : float
        Decay factor.
    rng : np.random.Generator
        Random number generator.
    """

    def __init__(
        self,
        epsilon_start: float = 1.0,
        epsilon_min: float = 0.1,
        epsilon_decay: float = 0.995,
        rng: np.random.Generator | None = None,
    ):
        self.epsilon = float(epsilon_start)
        self.epsilon_start = float(epsilon_start)
        self.epsilon_min = float(epsilon_min)
        self.epsilon_decay = float(epsilon_decay)
        self.rng = rng if rng is not None else np.random.default_rng()

    def select_action(self, q_values: np.ndarray) -> int:
        """
        Select an action using epsilon-greedy policy.

        Parameters
        ----------
        q_values : np.ndarray
            Q-values for each action, shape (num_actions,).

        Returns
        -------
        int
            Selected action index. Greedy ties resolve to the lowest index.

        Raises
        ------
        ValueError
            If no Q-values are given.
        """
        q_values = np.asarray(q_values)
        if q_values.size == 0:
            raise ValueError("No actions available")

        if self.rng.random() < self.epsilon:
            return int(self.rng.integers(q_values.size))

        # np.argmax returns the first maximal index
        return int(np.argmax(q_values))

    def decay(self) -> None:
        """
        Decay epsilon by the decay factor.

        Epsilon is multiplied by decay factor but clamped to epsilon_min.
        """
        self.epsilon = max(self.epsilon_min, self.epsilon * self.epsilon_decay)

    def reset(self) -> None:
        """Reset epsilon to initial value."""
        self.epsilon = self.epsilon_start

    def get_epsilon(self) -> float:
        """
        Get current epsilon value.

        Returns
        -------
        float
            Current exploration rate.
        """
        return self.epsilon

    def set_epsilon(self, epsilon: float) -> None:
        """
        Set epsilon to a specific value.

        Parameters
        ----------
        epsilon : float
            New exploration rate, clipped to [0, 1].
        """
        self.epsilon = float(np.clip(epsilon, 0.0, 1.0))
