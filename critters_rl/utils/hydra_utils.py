"""
Utilities for loading and managing Hydra configurations.

This module provides helper functions for working with Hydra
configuration files and initializing components from config.
"""

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf

from critters_rl.envs.heat_field import HeatFieldEnv
from critters_rl.nn.network import NetworkArchitecture
from critters_rl.rl.dqn_agent import DQNAgent


def load_config(config_path: str | Path) -> DictConfig:
    """
    Load a Hydra configuration file.

    Parameters
    ----------
    config_path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    DictConfig
        Loaded configuration as OmegaConf DictConfig.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return OmegaConf.load(config_file)


def create_architecture_from_config(cfg: DictConfig) -> NetworkArchitecture:
    """
    Build the hidden-layer architecture described by ``cfg.network``.

    Every hidden layer uses the same activation. Without a ``network``
    section the default two-layer ReLU architecture is returned.
    """
    network_cfg = cfg.get("network")
    if network_cfg is None:
        return NetworkArchitecture.default()

    activation = network_cfg.get("activation", "relu")
    architecture = NetworkArchitecture()
    for neurons in network_cfg.get("hidden_layers", [64, 64]):
        architecture.add_dense_layer(int(neurons), activation)
    return architecture


def create_dqn_agent_from_config(
    cfg: DictConfig,
    state_size: int,
    action_size: int,
) -> DQNAgent:
    """
    Create a DQN agent from Hydra configuration.

    Parameters
    ----------
    cfg : DictConfig
        Hydra configuration containing algorithm and network parameters.
    state_size : int
        Length of state observations.
    action_size : int
        Number of possible actions.

    Returns
    -------
    DQNAgent
        Initialized DQN agent.

    Examples
    --------
    >>> cfg = load_config("configs/train.yaml")
    >>> agent = create_dqn_agent_from_config(cfg, state_size=12, action_size=9)
    """
    algorithm_cfg = cfg.get("algorithm", {})
    experiment_cfg = cfg.get("experiment", {})

    return DQNAgent(
        state_size=state_size,
        action_size=action_size,
        architecture=create_architecture_from_config(cfg),
        buffer_capacity=algorithm_cfg.get("buffer_size", 10000),
        learning_rate=algorithm_cfg.get("learning_rate", 0.001),
        gamma=algorithm_cfg.get("gamma", 0.99),
        batch_size=algorithm_cfg.get("batch_size", 64),
        target_update_freq=algorithm_cfg.get("target_update_freq", 1000),
        epsilon_start=algorithm_cfg.get("epsilon_start", 1.0),
        epsilon_min=algorithm_cfg.get("epsilon_end", 0.1),
        epsilon_decay=algorithm_cfg.get("epsilon_decay", 0.995),
        double_dqn=bool(algorithm_cfg.get("double_dqn", False)),
        name=experiment_cfg.get("name"),
        seed=experiment_cfg.get("seed"),
    )


def create_env_from_config(cfg: DictConfig) -> HeatFieldEnv:
    """Create a heat field environment from the ``env`` section."""
    params = get_env_params(cfg)
    return HeatFieldEnv(**params)


def get_training_params(cfg: DictConfig) -> dict[str, Any]:
    """
    Extract training loop parameters from config.

    Parameters
    ----------
    cfg : DictConfig
        Hydra configuration.

    Returns
    -------
    dict
        Dictionary of training parameters.
    """
    training_cfg = cfg.get("training", {})
    return {
        "num_episodes": training_cfg.get("num_episodes", 500),
        "log_freq": training_cfg.get("log_freq", 10),
        "eval_freq": training_cfg.get("eval_freq", 50),
        "eval_episodes": training_cfg.get("eval_episodes", 5),
        "save_freq": training_cfg.get("save_freq", 100),
    }


def get_experiment_params(cfg: DictConfig) -> dict[str, Any]:
    """
    Extract experiment parameters from config.

    Parameters
    ----------
    cfg : DictConfig
        Hydra configuration.

    Returns
    -------
    dict
        Dictionary of experiment parameters.
    """
    experiment_cfg = cfg.get("experiment", {})
    return {
        "name": experiment_cfg.get("name", "heat_field_dqn"),
        "seed": experiment_cfg.get("seed", 42),
    }


def get_env_params(cfg: DictConfig) -> dict[str, Any]:
    """
    Extract environment parameters from config.

    Parameters
    ----------
    cfg : DictConfig
        Hydra configuration.

    Returns
    -------
    dict
        Keyword arguments for :class:`HeatFieldEnv`.
    """
    env_cfg = cfg.get("env", {})
    lamps = env_cfg.get("lamps")
    return {
        "ambient_temperature": env_cfg.get("ambient_temperature", 20.0),
        "optimal_temperature": env_cfg.get("optimal_temperature", 30.0),
        "lamps": None if lamps is None else [tuple(lamp) for lamp in lamps],
        "max_steps": env_cfg.get("max_steps", 500),
        "death_penalty": env_cfg.get("death_penalty", -20.0),
    }


def merge_configs(base_cfg: DictConfig, override_cfg: DictConfig) -> DictConfig:
    """
    Merge two configurations with override taking precedence.

    Parameters
    ----------
    base_cfg : DictConfig
        Base configuration.
    override_cfg : DictConfig
        Override configuration.

    Returns
    -------
    DictConfig
        Merged configuration.
    """
    return OmegaConf.merge(base_cfg, override_cfg)
