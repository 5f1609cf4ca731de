"""
Configuration validation utilities

Provides validation functions for Hydra configurations to catch
invalid parameter values early.
"""

from omegaconf import DictConfig

from critters_rl.nn.layers import ActivationType


def validate_env_config(cfg: DictConfig) -> None:
    """
    Validate environment configuration.

    Args:
        cfg: Full configuration containing an ``env`` section

    Raises:
        ValueError: If configuration is invalid
    """
    if cfg.env.max_steps <= 0:
        raise ValueError(f"env.max_steps must be positive, got {cfg.env.max_steps}")

    for i, lamp in enumerate(cfg.env.get("lamps") or []):
        if len(lamp) != 3:
            raise ValueError(f"env.lamps[{i}] must be [x, y, heat], got {list(lamp)}")
        if lamp[2] < 0:
            raise ValueError(f"env.lamps[{i}] heat must be >= 0, got {lamp[2]}")


def validate_training_config(cfg: DictConfig) -> None:
    """
    Validate training loop configuration.

    Args:
        cfg: Full configuration containing a ``training`` section

    Raises:
        ValueError: If configuration is invalid
    """
    for key in ("num_episodes", "log_freq", "eval_freq", "save_freq"):
        value = cfg.training[key]
        if value <= 0:
            raise ValueError(f"training.{key} must be positive, got {value}")


def validate_algorithm_config(cfg: DictConfig) -> None:
    """
    Validate DQN hyperparameters.

    Args:
        cfg: Full configuration containing an ``algorithm`` section

    Raises:
        ValueError: If configuration is invalid
    """
    algo = cfg.algorithm

    if algo.learning_rate <= 0:
        raise ValueError(
            f"algorithm.learning_rate must be positive, got {algo.learning_rate}"
        )

    if not 0 <= algo.gamma <= 1:
        raise ValueError(f"algorithm.gamma must be in [0, 1], got {algo.gamma}")

    if algo.batch_size <= 0:
        raise ValueError(
            f"algorithm.batch_size must be positive, got {algo.batch_size}"
        )

    if algo.buffer_size < algo.batch_size:
        raise ValueError(
            f"algorithm.buffer_size ({algo.buffer_size}) must be >= "
            f"batch_size ({algo.batch_size})"
        )

    if algo.target_update_freq <= 0:
        raise ValueError(
            f"algorithm.target_update_freq must be positive, "
            f"got {algo.target_update_freq}"
        )

    if not 0 <= algo.epsilon_start <= 1:
        raise ValueError(
            f"algorithm.epsilon_start must be in [0, 1], got {algo.epsilon_start}"
        )

    if not 0 <= algo.epsilon_end <= 1:
        raise ValueError(
            f"algorithm.epsilon_end must be in [0, 1], got {algo.epsilon_end}"
        )

    if algo.epsilon_end > algo.epsilon_start:
        raise ValueError(
            f"algorithm.epsilon_end ({algo.epsilon_end}) must be <= "
            f"epsilon_start ({algo.epsilon_start})"
        )

    if not 0 < algo.epsilon_decay <= 1:
        raise ValueError(
            f"algorithm.epsilon_decay must be in (0, 1], got {algo.epsilon_decay}"
        )


def validate_network_config(cfg: DictConfig) -> None:
    """
    Validate network configuration.

    Args:
        cfg: Full configuration containing a ``network`` section

    Raises:
        ValueError: If configuration is invalid
    """
    if not cfg.network.hidden_layers:
        raise ValueError("network.hidden_layers cannot be empty")

    for i, layer_size in enumerate(cfg.network.hidden_layers):
        if layer_size <= 0:
            raise ValueError(
                f"network.hidden_layers[{i}] must be positive, got {layer_size}"
            )

    valid_activations = [member.value for member in ActivationType]
    if str(cfg.network.activation).lower() not in valid_activations:
        raise ValueError(
            f"network.activation must be one of {valid_activations}, "
            f"got {cfg.network.activation}"
        )


def validate_experiment_config(cfg: DictConfig) -> None:
    """
    Validate experiment configuration.

    Args:
        cfg: Full configuration containing an ``experiment`` section

    Raises:
        ValueError: If configuration is invalid
    """
    seed = cfg.experiment.get("seed")
    if seed is not None and seed < 0:
        raise ValueError(f"experiment.seed must be >= 0, got {seed}")


def validate_config(cfg: DictConfig) -> None:
    """
    Validate all configuration sections.

    Args:
        cfg: Full Hydra configuration

    Raises:
        ValueError: If any configuration is invalid
    """
    validate_env_config(cfg)
    validate_training_config(cfg)
    validate_algorithm_config(cfg)
    validate_network_config(cfg)
    validate_experiment_config(cfg)
