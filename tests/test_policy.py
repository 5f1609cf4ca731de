"""Tests for the epsilon-greedy policy."""

import numpy as np
import pytest

from critters_rl.rl.policy import EpsilonGreedyPolicy


def test_epsilon_greedy_initialization():
    """Test epsilon-greedy policy initialization."""
    policy = EpsilonGreedyPolicy(epsilon_start=0.8, epsilon_min=0.05, epsilon_decay=0.9)

    assert policy.epsilon == 0.8
    assert policy.epsilon_start == 0.8
    assert policy.epsilon_min == 0.05
    assert policy.epsilon_decay == 0.9


def test_epsilon_greedy_exploitation():
    """Test zero epsilon always picks the best action."""
    policy = EpsilonGreedyPolicy(epsilon_start=0.0, rng=np.random.default_rng(0))
    q_values = np.array([0.1, 0.9, 0.3])

    actions = {policy.select_action(q_values) for _ in range(50)}

    assert actions == {1}


def test_epsilon_greedy_ties_pick_lowest_index():
    """Test greedy ties resolve to the first maximal action."""
    policy = EpsilonGreedyPolicy(epsilon_start=0.0)

    assert policy.select_action(np.array([0.2, 0.7, 0.7, 0.1])) == 1


def test_epsilon_greedy_exploration():
    """Test epsilon of one picks actions roughly uniformly."""
    policy = EpsilonGreedyPolicy(epsilon_start=1.0, rng=np.random.default_rng(42))
    q_values = np.array([10.0, 0.0, 0.0, 0.0])

    counts = np.bincount(
        [policy.select_action(q_values) for _ in range(4000)], minlength=4
    )

    assert counts.sum() == 4000
    assert np.all(counts > 800)
    assert np.all(counts < 1200)


def test_epsilon_greedy_no_actions():
    """Test empty Q-value vectors are rejected."""
    policy = EpsilonGreedyPolicy(epsilon_start=0.0)

    with pytest.raises(ValueError, match="No actions"):
        policy.select_action(np.array([]))


def test_epsilon_greedy_decay():
    """Test epsilon decays multiplicatively and stops at the minimum."""
    policy = EpsilonGreedyPolicy(epsilon_start=1.0, epsilon_min=0.5, epsilon_decay=0.9)

    policy.decay()
    assert policy.epsilon == pytest.approx(0.9)

    previous = policy.epsilon
    for _ in range(20):
        policy.decay()
        assert policy.epsilon <= previous
        previous = policy.epsilon

    assert policy.epsilon == 0.5


def test_epsilon_greedy_reset():
    """Test reset restores the starting epsilon."""
    policy = EpsilonGreedyPolicy(epsilon_start=1.0, epsilon_decay=0.5)
    policy.decay()
    policy.decay()

    policy.reset()

    assert policy.get_epsilon() == 1.0


def test_epsilon_greedy_set_epsilon_clips():
    """Test set_epsilon clips values into [0, 1]."""
    policy = EpsilonGreedyPolicy()

    policy.set_epsilon(0.3)
    assert policy.get_epsilon() == pytest.approx(0.3)

    policy.set_epsilon(1.5)
    assert policy.get_epsilon() == 1.0

    policy.set_epsilon(-0.2)
    assert policy.get_epsilon() == 0.0


def test_epsilon_greedy_reproducibility():
    """Test the same generator seed gives the same action sequence."""
    q_values = np.array([0.5, 0.2, 0.9, 0.1])
    policy1 = EpsilonGreedyPolicy(epsilon_start=0.5, rng=np.random.default_rng(7))
    policy2 = EpsilonGreedyPolicy(epsilon_start=0.5, rng=np.random.default_rng(7))

    actions1 = [policy1.select_action(q_values) for _ in range(30)]
    actions2 = [policy2.select_action(q_values) for _ in range(30)]

    assert actions1 == actions2
