"""Abstract base class for agent policies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

State = Sequence[float] | np.ndarray


class AgentPolicy(ABC):
    """
    Unified policy API for action selection.

    Parameters
    ----------
    name : str or None, optional
        Name of the policy. Defaults to the class name if not provided.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name or self.__class__.__name__

    @abstractmethod
    def select_action(self, state: State) -> int:
        """
        Select an action for the given state.

        Parameters
        ----------
        state : State
            Fixed-length state vector supplied by the host simulation.

        Returns
        -------
        int
            Selected action index.
        """
