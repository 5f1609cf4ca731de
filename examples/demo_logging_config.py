"""
Demo script for logging and configuration management

Demonstrates how to use:
- Hydra for configuration management
- Custom logger for structured logging
- Integration with the heat field environment
"""

import hydra
from omegaconf import DictConfig, OmegaConf

from critters_rl.agents import RandomAgent
from critters_rl.envs import NUM_ACTIONS
from critters_rl.utils import setup_logger_from_config
from critters_rl.utils.hydra_utils import create_env_from_config


@hydra.main(version_base=None, config_path="../configs", config_name="train")
def main(cfg: DictConfig) -> None:
    """
    Main function demonstrating logging and configuration.

    Args:
        cfg: Hydra configuration loaded from configs/train.yaml
    """
    logger = setup_logger_from_config("demo", cfg.logging)

    logger.info("=" * 70)
    logger.info("Critters RL - Logging & Configuration Demo")
    logger.info("=" * 70)

    logger.info("Configuration:")
    logger.info("\n" + OmegaConf.to_yaml(cfg))

    env = create_env_from_config(cfg)
    logger.info(f"Creating environment with {len(env.lamps)} lamps...")
    agent = RandomAgent(NUM_ACTIONS, name="random_critter")

    num_episodes = 3
    logger.info(f"Running {num_episodes} sample episodes...")

    for episode in range(num_episodes):
        logger.info(f"--- Episode {episode + 1}/{num_episodes} ---")
        observation, info = env.reset(seed=cfg.experiment.seed + episode)

        total_reward = 0.0
        terminated = truncated = False
        while not (terminated or truncated):
            action = agent.select_action(observation)
            observation, reward, terminated, truncated, info = env.step(action)
            total_reward += reward

        logger.info(f"Episode finished in {info['steps']} steps")
        logger.info(f"Died: {terminated}")
        logger.info(f"Total reward: {total_reward:.2f}")
        logger.info(f"Final temperature: {info['internal_temperature']:.2f}")

    logger.info("=" * 70)
    logger.info("Demo completed successfully!")
    logger.info("=" * 70)


if __name__ == "__main__":
    main()
