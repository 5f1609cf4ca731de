"""
Replay buffer for experience replay in DQN.

This module provides a bounded FIFO store of past transitions and
uniform sampling with replacement to break temporal correlations in
training.
"""

from __future__ import annotations

import copy
from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np


def _frozen_vector(values: Sequence[float] | np.ndarray, name: str) -> np.ndarray:
    if values is None:
        raise TypeError(f"{name} must not be None")
    vector = np.array(values, dtype=np.float64, copy=True)
    if vector.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {vector.shape}")
    vector.flags.writeable = False
    return vector


@dataclass(frozen=True, eq=False)
class Experience:
    """
    One environment transition.

    State arrays are copied on construction and made read-only, so an
    experience never aliases a caller-owned buffer.

    Parameters
    ----------
    state : array-like
        Observation before the action.
    action : int
        Action index taken.
    reward : float
        Reward received.
    next_state : array-like
        Observation after the action.
    done : bool
        Whether the transition ended the episode.
    """

    state: np.ndarray
    action: int
    reward: float
    next_state: np.ndarray
    done: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", _frozen_vector(self.state, "state"))
        object.__setattr__(
            self, "next_state", _frozen_vector(self.next_state, "next_state")
        )
        object.__setattr__(self, "action", int(self.action))
        object.__setattr__(self, "reward", float(self.reward))
        object.__setattr__(self, "done", bool(self.done))

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.tolist(),
            "action": self.action,
            "reward": self.reward,
            "next_state": self.next_state.tolist(),
            "done": self.done,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Experience:
        if data is None:
            raise TypeError("experience snapshot must not be None")
        try:
            return cls(
                state=data["state"],
                action=data["action"],
                reward=data["reward"],
                next_state=data["next_state"],
                done=data["done"],
            )
        except KeyError as exc:
            raise ValueError(f"experience snapshot is missing {exc}") from None


class ReplayBuffer:
    """
    Replay buffer for storing and sampling experiences.

    The buffer keeps at most ``capacity`` experiences; adding to a full
    buffer evicts the oldest one first. Uses a deque for O(1) eviction.

    Parameters
    ----------
    capacity : int
        Maximum number of experiences to store.
    rng : np.random.Generator or None, optional
        Random number generator for sampling. Default is a fresh unseeded
        generator.

    Attributes
    ----------
    capacity : int
        Maximum buffer capacity.
    buffer : deque
        Circular buffer storing experiences, oldest first.
    rng : np.random.Generator
        Random number generator for sampling.
    """

    def __init__(self, capacity: int, rng: np.random.Generator | None = None):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = int(capacity)
        self.buffer: deque[Experience] = deque(maxlen=self.capacity)
        self.rng = rng if rng is not None else np.random.default_rng()

    def add(
        self,
        state: Sequence[float] | np.ndarray,
        action: int,
        reward: float,
        next_state: Sequence[float] | np.ndarray,
        done: bool,
    ) -> None:
        """
        Add an experience to the buffer.

        If the buffer is full, the oldest experience is removed first.

        Parameters
        ----------
        state : array-like
            Current state observation.
        action : int
            Action taken.
        reward : float
            Reward received.
        next_state : array-like
            Next state observation.
        done : bool
            Whether the episode terminated.
        """
        self.buffer.append(Experience(state, action, reward, next_state, done))

    def sample_batch(self, batch_size: int) -> list[Experience]:
        """
        Sample experiences uniformly with replacement.

        The same experience may appear more than once in a batch.

        Parameters
        ----------
        batch_size : int
            Requested number of experiences.

        Returns
        -------
        list of Experience
            ``min(batch_size, len(self))`` sampled experiences.
        """
        count = min(batch_size, len(self.buffer))
        if count <= 0:
            return []

        indices = self.rng.integers(0, len(self.buffer), size=count)
        return [self.buffer[idx] for idx in indices]

    def __len__(self) -> int:
        """
        Get current number of experiences in buffer.

        Returns
        -------
        int
            Number of stored experiences.
        """
        return len(self.buffer)

    def __iter__(self) -> Iterator[Experience]:
        return iter(self.buffer)

    def clear(self) -> None:
        """Clear all experiences from the buffer."""
        self.buffer.clear()

    def is_ready(self, min_size: int) -> bool:
        """
        Check if buffer has enough experiences for training.

        Parameters
        ----------
        min_size : int
            Minimum number of experiences required.

        Returns
        -------
        bool
            True if buffer has at least min_size experiences.
        """
        return len(self.buffer) >= min_size

    def copy(self) -> ReplayBuffer:
        """
        Return an independent copy with its own generator state.

        Experiences are immutable, so they are shared by reference.
        """
        clone = ReplayBuffer(self.capacity, rng=copy.deepcopy(self.rng))
        clone.buffer.extend(self.buffer)
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {
            "capacity": self.capacity,
            "buffer": [experience.to_dict() for experience in self.buffer],
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], rng: np.random.Generator | None = None
    ) -> ReplayBuffer:
        """
        Rebuild a buffer from a ``to_dict`` snapshot.

        Raises
        ------
        TypeError
            If ``data`` is None.
        ValueError
            If capacity is missing or fewer slots than stored experiences.
        """
        if data is None:
            raise TypeError("replay buffer snapshot must not be None")
        if "capacity" not in data or "buffer" not in data:
            raise ValueError("replay buffer snapshot needs 'capacity' and 'buffer'")

        entries = data["buffer"]
        if len(entries) > data["capacity"]:
            raise ValueError(
                f"replay buffer snapshot holds {len(entries)} experiences "
                f"but capacity is {data['capacity']}"
            )

        replay_buffer = cls(data["capacity"], rng=rng)
        replay_buffer.buffer.extend(Experience.from_dict(entry) for entry in entries)
        return replay_buffer
