"""Example script using Hydra for configuration management.

This script demonstrates how to build a DQN agent from a Hydra
configuration, run a short training burst and checkpoint the result.

Example usage::

    # Use the default configuration bundle
    python examples/train_dqn_with_hydra.py

    # Override algorithm hyperparameters
    python examples/train_dqn_with_hydra.py algorithm.learning_rate=0.01 algorithm.batch_size=32

    # Launch a sweep across multiple values
    python examples/train_dqn_with_hydra.py -m algorithm.double_dqn=false,true
"""

from __future__ import annotations

import logging

import hydra
from omegaconf import DictConfig, OmegaConf

from critters_rl.envs import NUM_ACTIONS, STATE_SIZE
from critters_rl.train_dqn import train_episode
from critters_rl.utils.hydra_utils import (
    create_dqn_agent_from_config,
    create_env_from_config,
)

logger = logging.getLogger(__name__)


@hydra.main(version_base=None, config_path="../configs", config_name="train")
def main(cfg: DictConfig) -> None:
    """Build and briefly train a DQN agent from Hydra configuration.

    Parameters
    ----------
    cfg : DictConfig
        Hydra configuration.
    """
    logger.info("Training configuration:\n%s", OmegaConf.to_yaml(cfg))

    algorithm_cfg = cfg.algorithm
    env = create_env_from_config(cfg)

    logger.info("Creating DQN agent...")
    agent = create_dqn_agent_from_config(
        cfg, state_size=STATE_SIZE, action_size=NUM_ACTIONS
    )

    logger.info(f"Agent created with epsilon={agent.epsilon:.3f}")
    logger.info("Algorithm parameters:")
    logger.info(f"  - Learning rate: {algorithm_cfg.learning_rate}")
    logger.info(f"  - Gamma: {algorithm_cfg.gamma}")
    logger.info(f"  - Batch size: {algorithm_cfg.batch_size}")
    logger.info(f"  - Architecture: {agent.architecture}")
    logger.info(f"  - Double DQN: {algorithm_cfg.double_dqn}")

    for episode in range(3):
        stats = train_episode(env, agent, logger, seed=cfg.experiment.seed + episode)
        logger.info(
            f"Episode {episode + 1}: reward={stats['episode_reward']:.2f} "
            f"steps={stats['episode_steps']} phase={agent.phase.value}"
        )

    agent.save("checkpoints/example_agent.json")
    logger.info("Saved checkpoints/example_agent.json")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
