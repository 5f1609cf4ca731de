"""DQN Training Script with Hydra Configuration - Heat Field Version."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import hydra
import numpy as np
from hydra.core.hydra_config import HydraConfig
from omegaconf import DictConfig, OmegaConf

from critters_rl.agents import AgentPolicy, RandomAgent
from critters_rl.envs.heat_field import NUM_ACTIONS, STATE_SIZE, HeatFieldEnv
from critters_rl.rl.dqn_agent import DQNAgent
from critters_rl.utils.config_validator import validate_config
from critters_rl.utils.hydra_utils import (
    create_dqn_agent_from_config,
    create_env_from_config,
    get_experiment_params,
    get_training_params,
)
from critters_rl.utils.logger import format_metrics, setup_logger_from_config


def train_episode(
    env: HeatFieldEnv,
    agent: DQNAgent,
    logger: logging.Logger,
    seed: int | None = None,
) -> dict[str, Any]:
    """Train for one episode.

    Every transition is stored and followed by one ``agent.train()`` call.

    Parameters
    ----------
    env : HeatFieldEnv
        Heat field environment
    agent : DQNAgent
        Agent being trained
    logger : logging.Logger
        Logger instance
    seed : int | None, optional
        Seed passed to ``env.reset``

    Returns
    -------
    dict[str, Any]
        Dictionary with episode statistics
    """
    observation, _ = env.reset(seed=seed)
    episode_reward = 0.0
    episode_steps = 0
    training_losses = []
    training_q_values = []
    terminated = truncated = False

    while not (terminated or truncated):
        action = agent.select_action(observation)
        next_observation, reward, terminated, truncated, info = env.step(action)

        # Truncation is not a terminal state, keep bootstrapping from it
        agent.store_experience(
            observation, action, reward, next_observation, done=terminated
        )
        train_result = agent.train()
        if train_result:
            training_losses.append(train_result["loss"])
            training_q_values.append(train_result["q_value_mean"])

        observation = next_observation
        episode_reward += reward
        episode_steps += 1

    agent.end_episode()

    if terminated:
        logger.debug(
            "Episode %d: critter died after %d steps",
            agent.episode_count,
            episode_steps,
        )

    return {
        "episode_steps": episode_steps,
        "episode_reward": episode_reward,
        "terminated": terminated,
        "mean_loss": float(np.mean(training_losses)) if training_losses else 0.0,
        "mean_q_value": (
            float(np.mean(training_q_values)) if training_q_values else 0.0
        ),
        "epsilon": agent.epsilon,
    }


def evaluate_episode(
    env: HeatFieldEnv,
    policy: AgentPolicy,
    seed: int | None = None,
) -> dict[str, Any]:
    """Evaluate a policy for one episode (no training).

    DQN agents act greedily for the duration of the episode; their
    epsilon is restored afterwards.

    Parameters
    ----------
    env : HeatFieldEnv
        Heat field environment
    policy : AgentPolicy
        Policy to evaluate
    seed : int | None, optional
        Seed passed to ``env.reset``

    Returns
    -------
    dict[str, Any]
        Dictionary with episode statistics
    """
    original_epsilon = None
    if isinstance(policy, DQNAgent):
        original_epsilon = policy.epsilon
        policy.epsilon = 0.0

    try:
        observation, info = env.reset(seed=seed)
        episode_reward = 0.0
        episode_steps = 0
        terminated = truncated = False

        while not (terminated or truncated):
            action = policy.select_action(observation)
            observation, reward, terminated, truncated, info = env.step(action)
            episode_reward += reward
            episode_steps += 1
    finally:
        if original_epsilon is not None:
            policy.epsilon = original_epsilon

    return {
        "episode_steps": episode_steps,
        "episode_reward": episode_reward,
        "terminated": terminated,
        "final_health": info["health"],
        "final_temperature": info["internal_temperature"],
    }


def evaluate_policy(
    env: HeatFieldEnv,
    policy: AgentPolicy,
    num_episodes: int,
    seed: int | None = None,
) -> dict[str, float]:
    """Average ``evaluate_episode`` statistics over several episodes."""
    results = [
        evaluate_episode(env, policy, seed=None if seed is None else seed + i)
        for i in range(num_episodes)
    ]
    return {
        "reward": float(np.mean([r["episode_reward"] for r in results])),
        "steps": float(np.mean([r["episode_steps"] for r in results])),
        "survival_rate": float(np.mean([not r["terminated"] for r in results])),
    }


@hydra.main(version_base=None, config_path="../configs", config_name="train")
def main(cfg: DictConfig) -> None:
    """Main training function.

    Trains one DQN critter in the heat field and periodically compares
    it against a uniformly random baseline.

    Parameters
    ----------
    cfg : DictConfig
        Hydra configuration
    """
    validate_config(cfg)

    # Setup logging
    logger = setup_logger_from_config("train_dqn", cfg.get("logging"))
    logger.info("=" * 80)
    logger.info("Starting DQN Heat Field Training")
    logger.info("=" * 80)
    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    training_params = get_training_params(cfg)
    experiment_params = get_experiment_params(cfg)
    seed = experiment_params["seed"]

    env = create_env_from_config(cfg)
    logger.info(
        f"Environment created: ambient {env.ambient_temperature}, "
        f"optimal {env.optimal_temperature}, {len(env.lamps)} lamps"
    )
    logger.info(f"State size: {STATE_SIZE}")
    logger.info(f"Action size: {NUM_ACTIONS}")

    agent = create_dqn_agent_from_config(
        cfg, state_size=STATE_SIZE, action_size=NUM_ACTIONS
    )
    baseline = RandomAgent(
        NUM_ACTIONS,
        rng=np.random.default_rng(seed),
        name="random_baseline",
    )
    logger.info(f"Architecture: {agent.architecture}")
    logger.info(f"Q-Network parameters: {agent.q_network.get_num_parameters()}")

    # Setup output directories
    output_dir = Path(HydraConfig.get().runtime.output_dir)
    checkpoints_dir = output_dir / "checkpoints"
    checkpoints_dir.mkdir(exist_ok=True, parents=True)
    logger.info(f"Output directory: {output_dir}")
    logger.info(f"Checkpoints directory: {checkpoints_dir}")

    num_episodes = training_params["num_episodes"]
    eval_freq = training_params["eval_freq"]
    eval_episodes = training_params["eval_episodes"]
    save_freq = training_params["save_freq"]
    log_freq = training_params["log_freq"]

    logger.info("=" * 80)
    logger.info("Starting Training Loop")
    logger.info("=" * 80)

    episode_rewards_history = []

    for episode in range(1, num_episodes + 1):
        episode_seed = None if seed is None else seed + episode
        stats = train_episode(env, agent, logger, seed=episode_seed)
        episode_rewards_history.append(stats["episode_reward"])

        if episode % log_freq == 0:
            avg_reward = np.mean(episode_rewards_history[-log_freq:])
            logger.info(
                f"Episode {episode}/{num_episodes} | "
                f"Steps: {stats['episode_steps']} | "
                f"Reward: {avg_reward:.3f} | "
                f"Loss: {stats['mean_loss']:.4f} | "
                f"Q-value: {stats['mean_q_value']:.2f} | "
                f"Epsilon: {stats['epsilon']:.3f} | "
                f"Phase: {agent.phase.value}"
            )

        if episode % eval_freq == 0:
            agent_eval = evaluate_policy(env, agent, eval_episodes, seed=seed)
            baseline_eval = evaluate_policy(env, baseline, eval_episodes, seed=seed)
            logger.info(f"Evaluation (DQN)    | {format_metrics(agent_eval, 3)}")
            logger.info(f"Evaluation (random) | {format_metrics(baseline_eval, 3)}")

        if episode % save_freq == 0:
            checkpoint_path = checkpoints_dir / f"agent_{episode}.json"
            agent.save(checkpoint_path)
            logger.info(f"Saved checkpoint: {checkpoint_path}")

    final_model_path = checkpoints_dir / "agent_final.json"
    agent.save(final_model_path)
    logger.info(f"Saved final model: {final_model_path}")

    logger.info("=" * 80)
    logger.info("Training Session Complete")
    logger.info("=" * 80)


if __name__ == "__main__":
    main()
