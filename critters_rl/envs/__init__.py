"""Host simulations that drive the DQN agent."""

from critters_rl.envs.heat_field import NUM_ACTIONS, STATE_SIZE, HeatFieldEnv

__all__ = ["HeatFieldEnv", "NUM_ACTIONS", "STATE_SIZE"]
