"""Random policy agent for baseline evaluation."""

from __future__ import annotations

import numpy as np

from .base import AgentPolicy, State


class RandomAgent(AgentPolicy):
    """
    Agent that selects uniformly among all actions.

    Parameters
    ----------
    action_size : int
        Number of discrete actions.
    rng : np.random.Generator or None, optional
        Random number generator. Defaults to np.random.default_rng() if not provided.
    name : str or None, optional
        Name of the agent. Defaults to the class name if not provided.
    """

    def __init__(
        self,
        action_size: int,
        rng: np.random.Generator | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if action_size <= 0:
            raise ValueError(f"action_size must be positive, got {action_size}")
        self.action_size = action_size
        self.rng = rng or np.random.default_rng()

    def select_action(self, state: State) -> int:
        """
        Select a random action; the state is ignored.

        Returns
        -------
        int
            Action index in ``[0, action_size)``.
        """
        return int(self.rng.integers(self.action_size))
