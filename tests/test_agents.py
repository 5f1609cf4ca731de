"""Tests for baseline agent policies."""

import numpy as np
import pytest

from critters_rl.agents import AgentPolicy, RandomAgent
from critters_rl.rl.dqn_agent import DQNAgent


def test_random_agent_actions_in_range():
    """Test random actions are valid indices."""
    agent = RandomAgent(action_size=9, rng=np.random.default_rng(0))

    actions = [agent.select_action(np.zeros(12)) for _ in range(500)]

    assert min(actions) >= 0
    assert max(actions) < 9
    assert set(actions) == set(range(9))


def test_random_agent_is_reproducible():
    """Test the same seed gives the same action sequence."""
    agent1 = RandomAgent(action_size=4, rng=np.random.default_rng(3))
    agent2 = RandomAgent(action_size=4, rng=np.random.default_rng(3))

    assert [agent1.select_action(None) for _ in range(20)] == [
        agent2.select_action(None) for _ in range(20)
    ]


def test_random_agent_rejects_no_actions():
    """Test an agent needs at least one action."""
    with pytest.raises(ValueError, match="action_size must be positive"):
        RandomAgent(action_size=0)


def test_agent_names():
    """Test agents default their name to the class name."""
    assert RandomAgent(2).name == "RandomAgent"
    assert RandomAgent(2, name="baseline").name == "baseline"


def test_agents_share_policy_interface():
    """Test random and DQN agents are interchangeable policies."""
    agents = [RandomAgent(3), DQNAgent(state_size=2, action_size=3, seed=0)]

    for agent in agents:
        assert isinstance(agent, AgentPolicy)
        assert 0 <= agent.select_action(np.array([0.5, -0.5])) < 3


def test_agent_policy_is_abstract():
    """Test the base policy cannot be instantiated."""
    with pytest.raises(TypeError):
        AgentPolicy()
