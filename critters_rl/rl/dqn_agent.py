"""
Deep Q-Network (DQN) agent implementation.

This module provides a DQN agent built on the from-scratch network in
:mod:`critters_rl.nn`. It learns from experience replay, bootstraps its
targets from a periodically synchronized target network and optionally
uses the Double DQN target rule.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Sequence
from enum import Enum
from numbers import Integral
from pathlib import Path
from typing import Any

import numpy as np

from critters_rl.agents.base import AgentPolicy
from critters_rl.nn.network import NetworkArchitecture, NeuralNetwork
from critters_rl.rl.policy import EpsilonGreedyPolicy
from critters_rl.rl.replay_buffer import Experience, ReplayBuffer
from critters_rl.utils.metrics import RunningAverage

logger = logging.getLogger(__name__)

_SNAPSHOT_KEYS = (
    "state_size",
    "action_size",
    "hyperparameters",
    "training_steps",
    "q_network",
    "target_network",
    "replay_buffer",
)


class AgentPhase(str, Enum):
    """Training readiness derived from the replay buffer fill level."""

    FRESH = "fresh"
    WARMING = "warming"
    TRAINING = "training"


class DQNAgent(AgentPolicy):
    """
    Deep Q-Network agent.

    The agent owns an online Q-network, a target network with identical
    architecture, a replay buffer and an epsilon-greedy policy. All
    randomness (weight initialization, exploration, replay sampling)
    comes from one generator owned by the agent.

    Parameters
    ----------
    state_size : int
        Length of state vectors.
    action_size : int
        Number of discrete actions.
    hidden_size : int, optional
        Width of the two default ReLU hidden layers. Ignored when
        ``architecture`` is given. Default is 64.
    buffer_capacity : int, optional
        Maximum number of stored transitions. Default is 10000.
    architecture : NetworkArchitecture or None, optional
        Custom hidden-layer architecture.
    learning_rate : float, optional
        SGD step size. Default is 0.001.
    gamma : float, optional
        Discount factor for future rewards. Default is 0.99.
    batch_size : int, optional
        Transitions sampled per training step. Default is 64.
    target_update_freq : int, optional
        Training steps between hard target-network syncs. Default is 1000.
    epsilon_start : float, optional
        Initial exploration rate. Default is 1.0.
    epsilon_min : float, optional
        Minimum exploration rate. Default is 0.1.
    epsilon_decay : float, optional
        Multiplicative epsilon decay per training step. Default is 0.995.
    double_dqn : bool, optional
        Whether to use the Double DQN target rule. Default is False.
    name : str or None, optional
        Human-readable identifier for the agent. Defaults to class name.
    seed : int or None, optional
        Seed for the agent's generator when ``rng`` is not given.
    rng : np.random.Generator or None, optional
        Explicit generator handle; takes precedence over ``seed``.

    Attributes
    ----------
    q_network : NeuralNetwork
        Online network for action selection and training.
    target_network : NeuralNetwork
        Delayed copy used to evaluate bootstrap targets.
    replay_buffer : ReplayBuffer
        Experience replay buffer.
    policy : EpsilonGreedyPolicy
        Epsilon-greedy exploration policy.
    training_steps : int
        Number of gradient passes performed.
    total_steps : int
        Number of transitions stored.
    episode_count : int
        Number of episodes finished.
    """

    METRICS_WINDOW = 1000

    def __init__(
        self,
        state_size: int,
        action_size: int,
        hidden_size: int = 64,
        buffer_capacity: int = 10000,
        architecture: NetworkArchitecture | None = None,
        learning_rate: float = 0.001,
        gamma: float = 0.99,
        batch_size: int = 64,
        target_update_freq: int = 1000,
        epsilon_start: float = 1.0,
        epsilon_min: float = 0.1,
        epsilon_decay: float = 0.995,
        double_dqn: bool = False,
        name: str | None = None,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ):
        super().__init__(name=name)

        for label, value in (
            ("state_size", state_size),
            ("action_size", action_size),
            ("hidden_size", hidden_size),
            ("buffer_capacity", buffer_capacity),
            ("batch_size", batch_size),
            ("target_update_freq", target_update_freq),
        ):
            if value <= 0:
                raise ValueError(f"{label} must be positive, got {value}")

        self.state_size = int(state_size)
        self.action_size = int(action_size)
        self.learning_rate = learning_rate
        self.gamma = gamma
        self.batch_size = int(batch_size)
        self.target_update_freq = int(target_update_freq)
        self.double_dqn = double_dqn

        self.rng = rng if rng is not None else np.random.default_rng(seed)

        # Initialize networks
        self.architecture = architecture or NetworkArchitecture.default(hidden_size)
        self.q_network = self.architecture.create_network(
            self.state_size, self.action_size, rng=self.rng
        )
        self.target_network = self.q_network.copy()

        self.replay_buffer = ReplayBuffer(capacity=buffer_capacity, rng=self.rng)

        self.policy = EpsilonGreedyPolicy(
            epsilon_start=epsilon_start,
            epsilon_min=epsilon_min,
            epsilon_decay=epsilon_decay,
            rng=self.rng,
        )

        # Training statistics
        self.training_steps = 0
        self.total_steps = 0
        self.episode_count = 0
        self.loss_average = RunningAverage(self.METRICS_WINDOW)
        self.q_value_average = RunningAverage(self.METRICS_WINDOW)

    @property
    def epsilon(self) -> float:
        return self.policy.epsilon

    @epsilon.setter
    def epsilon(self, value: float) -> None:
        self.policy.set_epsilon(value)

    @property
    def epsilon_min(self) -> float:
        return self.policy.epsilon_min

    @epsilon_min.setter
    def epsilon_min(self, value: float) -> None:
        self.policy.epsilon_min = float(value)

    @property
    def epsilon_decay(self) -> float:
        return self.policy.epsilon_decay

    @epsilon_decay.setter
    def epsilon_decay(self, value: float) -> None:
        self.policy.epsilon_decay = float(value)

    @property
    def average_loss(self) -> float:
        """Running mean of squared TD errors over the current window."""
        return self.loss_average.value

    @property
    def average_q_value(self) -> float:
        """Running mean of the greedy Q-value seen by ``select_action``."""
        return self.q_value_average.value

    @property
    def phase(self) -> AgentPhase:
        count = len(self.replay_buffer)
        if count == 0:
            return AgentPhase.FRESH
        if count < self.batch_size:
            return AgentPhase.WARMING
        return AgentPhase.TRAINING

    def select_action(self, state: Sequence[float] | np.ndarray) -> int:
        """
        Select an action given the current state.

        Parameters
        ----------
        state : array-like
            State vector of length ``state_size``.

        Returns
        -------
        int
            Selected action index in ``[0, action_size)``.

        Raises
        ------
        TypeError
            If ``state`` is None.
        ValueError
            If ``state`` has the wrong length.
        """
        state = self._check_state(state, "state")
        q_values = self.q_network.forward(state)
        self.q_value_average.update(float(np.max(q_values)))
        return self.policy.select_action(q_values)

    def get_all_q_values(self, state: Sequence[float] | np.ndarray) -> np.ndarray:
        """Q-values of every action from the online network."""
        state = self._check_state(state, "state")
        return self.q_network.forward(state).copy()

    def get_max_q(self, state: Sequence[float] | np.ndarray) -> float:
        """Largest Q-value from the online network."""
        return float(np.max(self.get_all_q_values(state)))

    def store_experience(
        self,
        state: Sequence[float] | np.ndarray,
        action: int,
        reward: float,
        next_state: Sequence[float] | np.ndarray,
        done: bool,
    ) -> None:
        """
        Store an experience in the replay buffer.

        Parameters
        ----------
        state : array-like
            State before the action.
        action : int
            Action taken.
        reward : float
            Reward received.
        next_state : array-like
            State after the action.
        done : bool
            Whether episode terminated.
        """
        state = self._check_state(state, "state")
        next_state = self._check_state(next_state, "next_state")
        self._check_action(action)

        self.replay_buffer.add(state, action, reward, next_state, done)
        self.total_steps += 1

    def compute_target(self, experience: Experience) -> np.ndarray:
        """
        Build the training target for one experience.

        The target equals the online network's current prediction except
        at the taken action, which holds the TD target.

        Parameters
        ----------
        experience : Experience
            Transition to build the target for.

        Returns
        -------
        np.ndarray
            Target vector of length ``action_size``.
        """
        return self._build_target(experience)[1]

    def _build_target(self, experience: Experience) -> tuple[np.ndarray, np.ndarray]:
        current = self.q_network.forward(experience.state).copy()
        target = current.copy()

        if experience.done:
            target[experience.action] = experience.reward
        else:
            target[experience.action] = (
                experience.reward
                + self.gamma * self._bootstrap_value(experience.next_state)
            )

        return current, target

    def _bootstrap_value(self, next_state: np.ndarray) -> float:
        next_q_values = self.target_network.forward(next_state)
        if self.double_dqn:
            # Double DQN: online network selects, target network evaluates
            best_action = int(np.argmax(self.q_network.forward(next_state)))
            return float(next_q_values[best_action])
        return float(np.max(next_q_values))

    def train(self) -> dict[str, float]:
        """
        Perform one training step using experience replay.

        Does nothing until the buffer holds at least ``batch_size``
        transitions. Otherwise samples one batch, fits the online network
        to the batch targets for one epoch, syncs the target network every
        ``target_update_freq`` steps and decays epsilon once.

        Returns
        -------
        dict
            Training metrics including 'loss', 'q_value_mean' and 'epsilon'.
            Returns empty dict if buffer not ready for training.
        """
        if not self.replay_buffer.is_ready(self.batch_size):
            return {}

        batch = self.replay_buffer.sample_batch(self.batch_size)

        training_data = []
        squared_errors = []
        taken_q_values = []
        for experience in batch:
            current, target = self._build_target(experience)
            td_error = target[experience.action] - current[experience.action]
            squared_errors.append(td_error * td_error)
            taken_q_values.append(current[experience.action])
            self.loss_average.update(td_error * td_error)
            training_data.append((experience.state, target))

        self.q_network.train(training_data, self.learning_rate, epochs=1)

        self.training_steps += 1
        if self.training_steps % self.target_update_freq == 0:
            self.update_target_network()

        self.policy.decay()

        return {
            "loss": float(np.mean(squared_errors)),
            "q_value_mean": float(np.mean(taken_q_values)),
            "epsilon": self.policy.get_epsilon(),
        }

    def update_target_network(self) -> None:
        """Replace the target network with a copy of the online network."""
        self.target_network = self.q_network.copy()
        logger.debug(
            "%s: target network synced at training step %d",
            self.name,
            self.training_steps,
        )

    def end_episode(self) -> None:
        """Called at the end of each episode."""
        self.episode_count += 1

    def clear(self) -> None:
        """Drop all stored experiences, returning the agent to the fresh phase."""
        self.replay_buffer.clear()

    def copy(self) -> DQNAgent:
        """
        Return a fully independent deep copy.

        The copy owns its own networks, buffer and generator state.
        """
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """
        Snapshot the complete agent state as JSON-compatible values.

        Returns
        -------
        dict
            Networks, replay buffer, hyperparameters, counters, metrics
            and generator state.
        """
        return {
            "name": self.name,
            "state_size": self.state_size,
            "action_size": self.action_size,
            "hyperparameters": {
                "learning_rate": self.learning_rate,
                "gamma": self.gamma,
                "batch_size": self.batch_size,
                "target_update_freq": self.target_update_freq,
                "epsilon": self.policy.epsilon,
                "epsilon_start": self.policy.epsilon_start,
                "epsilon_min": self.policy.epsilon_min,
                "epsilon_decay": self.policy.epsilon_decay,
                "double_dqn": self.double_dqn,
            },
            "training_steps": self.training_steps,
            "total_steps": self.total_steps,
            "episode_count": self.episode_count,
            "metrics": {
                "loss": self.loss_average.to_dict(),
                "q_value": self.q_value_average.to_dict(),
            },
            "q_network": self.q_network.to_dict(),
            "target_network": self.target_network.to_dict(),
            "replay_buffer": self.replay_buffer.to_dict(),
            "rng_state": self.rng.bit_generator.state,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DQNAgent:
        """
        Restore an agent from a ``to_dict`` snapshot.

        Raises
        ------
        TypeError
            If ``data`` is None.
        ValueError
            If required fields are missing or shapes are inconsistent.
        """
        if data is None:
            raise TypeError("agent snapshot must not be None")
        missing = [key for key in _SNAPSHOT_KEYS if key not in data]
        if missing:
            raise ValueError(f"agent snapshot is missing {missing}")

        state_size = int(data["state_size"])
        action_size = int(data["action_size"])
        q_network = NeuralNetwork.from_dict(data["q_network"])
        target_network = NeuralNetwork.from_dict(data["target_network"])
        for label, network in (
            ("q_network", q_network),
            ("target_network", target_network),
        ):
            if (network.input_size, network.output_size) != (state_size, action_size):
                raise ValueError(
                    f"{label} maps {network.input_size} -> {network.output_size}, "
                    f"expected {state_size} -> {action_size}"
                )

        rng = _generator_from_state(data.get("rng_state"))
        replay_buffer = ReplayBuffer.from_dict(data["replay_buffer"], rng=rng)
        for experience in replay_buffer:
            if (
                experience.state.shape != (state_size,)
                or experience.next_state.shape != (state_size,)
                or not 0 <= experience.action < action_size
            ):
                raise ValueError("replay buffer snapshot does not match agent shape")

        params = data["hyperparameters"]
        agent = cls.__new__(cls)
        AgentPolicy.__init__(agent, name=data.get("name"))
        agent.state_size = state_size
        agent.action_size = action_size
        agent.rng = rng
        agent.architecture = NetworkArchitecture.from_network(q_network)
        agent.q_network = q_network
        agent.target_network = target_network
        agent.replay_buffer = replay_buffer
        try:
            agent.learning_rate = params["learning_rate"]
            agent.gamma = params["gamma"]
            agent.batch_size = int(params["batch_size"])
            agent.target_update_freq = int(params["target_update_freq"])
            agent.double_dqn = bool(params["double_dqn"])
            agent.policy = EpsilonGreedyPolicy(
                epsilon_start=params.get("epsilon_start", params["epsilon"]),
                epsilon_min=params["epsilon_min"],
                epsilon_decay=params["epsilon_decay"],
                rng=rng,
            )
            agent.policy.epsilon = float(params["epsilon"])
        except KeyError as exc:
            raise ValueError(f"agent hyperparameters are missing {exc}") from None
        agent.training_steps = int(data["training_steps"])
        agent.total_steps = int(data.get("total_steps", 0))
        agent.episode_count = int(data.get("episode_count", 0))

        metrics = data.get("metrics", {})
        agent.loss_average = (
            RunningAverage.from_dict(metrics["loss"])
            if "loss" in metrics
            else RunningAverage(cls.METRICS_WINDOW)
        )
        agent.q_value_average = (
            RunningAverage.from_dict(metrics["q_value"])
            if "q_value" in metrics
            else RunningAverage(cls.METRICS_WINDOW)
        )
        return agent

    def save(self, path: str | Path) -> None:
        """
        Save agent state to a JSON file.

        Parameters
        ----------
        path : str or Path
            Path to save checkpoint file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f)
        logger.debug("Saved %s to %s", self.name, path)

    @classmethod
    def load(cls, path: str | Path) -> DQNAgent:
        """
        Load an agent from a JSON checkpoint written by ``save``.

        Parameters
        ----------
        path : str or Path
            Path to checkpoint file.
        """
        with Path(path).open(encoding="utf-8") as f:
            agent = cls.from_dict(json.load(f))
        logger.debug("Loaded %s from %s", agent.name, path)
        return agent

    def _check_state(self, state: Any, name: str) -> np.ndarray:
        if state is None:
            raise TypeError(f"{name} must not be None")
        vector = np.asarray(state, dtype=np.float64)
        if vector.shape != (self.state_size,):
            raise ValueError(
                f"{name} must have length {self.state_size}, got shape {vector.shape}"
            )
        return vector

    def _check_action(self, action: int) -> None:
        if isinstance(action, bool) or not isinstance(action, (Integral, np.integer)):
            raise ValueError(f"action must be an integer, got {action!r}")
        if not 0 <= action < self.action_size:
            raise ValueError(
                f"action must be in [0, {self.action_size}), got {action}"
            )


def _generator_from_state(state: dict[str, Any] | None) -> np.random.Generator:
    if state is None:
        return np.random.default_rng()
    name = state.get("bit_generator")
    bit_generator_cls = getattr(np.random, str(name), None)
    if not (
        isinstance(bit_generator_cls, type)
        and issubclass(bit_generator_cls, np.random.BitGenerator)
    ):
        raise ValueError(f"rng_state names an unknown bit generator {name!r}")
    bit_generator = bit_generator_cls()
    try:
        bit_generator.state = state
    except (KeyError, TypeError) as exc:
        raise ValueError(f"rng_state is malformed: {exc}") from None
    return np.random.Generator(bit_generator)
