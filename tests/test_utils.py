"""Tests for utility modules"""

import logging
import logging.handlers
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from critters_rl.envs import NUM_ACTIONS, STATE_SIZE, HeatFieldEnv
from critters_rl.nn import ActivationType
from critters_rl.rl.dqn_agent import DQNAgent
from critters_rl.utils import (
    RunningAverage,
    format_metrics,
    get_log_level,
    setup_logger,
    setup_logger_from_config,
    validate_config,
)
from critters_rl.utils.hydra_utils import (
    create_architecture_from_config,
    create_dqn_agent_from_config,
    create_env_from_config,
    get_env_params,
    get_experiment_params,
    get_training_params,
    load_config,
    merge_configs,
)

CONFIG_PATH = Path(__file__).parent.parent / "configs" / "train.yaml"


def make_config(**overrides):
    """Create a valid configuration with optional section overrides."""
    cfg = OmegaConf.create(
        {
            "env": {
                "ambient_temperature": 20.0,
                "optimal_temperature": 30.0,
                "lamps": [[0.0, 0.0, 400.0]],
                "max_steps": 200,
                "death_penalty": -20.0,
            },
            "training": {
                "num_episodes": 10,
                "log_freq": 1,
                "eval_freq": 5,
                "eval_episodes": 2,
                "save_freq": 5,
            },
            "network": {"hidden_layers": [16, 8], "activation": "tanh"},
            "algorithm": {
                "learning_rate": 0.001,
                "gamma": 0.99,
                "buffer_size": 1000,
                "batch_size": 32,
                "target_update_freq": 100,
                "epsilon_start": 1.0,
                "epsilon_end": 0.05,
                "epsilon_decay": 0.99,
                "double_dqn": True,
            },
            "experiment": {"name": "unit_test", "seed": 42},
        }
    )
    return OmegaConf.merge(cfg, OmegaConf.create(overrides))


def test_get_log_level_with_int():
    """Test get_log_level with integer input"""
    assert get_log_level(logging.INFO) == logging.INFO
    assert get_log_level(logging.DEBUG) == logging.DEBUG


def test_get_log_level_with_string():
    """Test get_log_level with string input"""
    assert get_log_level("INFO") == logging.INFO
    assert get_log_level("info") == logging.INFO
    assert get_log_level("DEBUG") == logging.DEBUG
    assert get_log_level("WARNING") == logging.WARNING
    assert get_log_level("ERROR") == logging.ERROR
    assert get_log_level("CRITICAL") == logging.CRITICAL


def test_get_log_level_invalid():
    """Test get_log_level with invalid input"""
    with pytest.raises(ValueError, match="Invalid log level"):
        get_log_level("INVALID")


def test_setup_logger_basic():
    """Test basic logger setup"""
    logger = setup_logger("test_logger", level="INFO")
    assert logger.name == "test_logger"
    assert logger.level == logging.INFO
    assert len(logger.handlers) > 0


def test_setup_logger_no_duplicates():
    """Test that setup_logger doesn't add duplicate handlers"""
    logger1 = setup_logger("test_no_dup", level="INFO")
    handler_count1 = len(logger1.handlers)

    logger2 = setup_logger("test_no_dup", level="INFO")
    handler_count2 = len(logger2.handlers)

    assert handler_count1 == handler_count2
    assert logger1 is logger2


def test_setup_logger_writes_file(tmp_path):
    """Test file logging creates the log directory"""
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logger("test_file_logger", level="DEBUG", log_file=log_file)

    logger.debug("hello from the critter")
    for handler in logger.handlers:
        handler.flush()

    assert "hello from the critter" in log_file.read_text(encoding="utf-8")


def test_setup_logger_from_config(tmp_path):
    """Test logger setup from a logging config section"""
    logging_cfg = OmegaConf.create(
        {
            "level": "WARNING",
            "log_dir": str(tmp_path),
            "log_file": "train.log",
            "use_rotation": True,
        }
    )

    logger = setup_logger_from_config("test_from_config", logging_cfg)

    assert logger.level == logging.WARNING
    assert any(
        isinstance(handler, logging.handlers.RotatingFileHandler)
        for handler in logger.handlers
    )


def test_format_metrics():
    """Test metric formatting"""
    text = format_metrics({"loss": 0.123456, "steps": 7}, precision=2)

    assert text == "loss=0.12 | steps=7"


def test_running_average_windows():
    """Test the running average restarts after each window"""
    average = RunningAverage(window=3)

    for value in (1.0, 2.0, 3.0):
        average.update(value)
    assert average.value == pytest.approx(2.0)

    average.update(10.0)
    assert average.count == 1
    assert average.value == pytest.approx(10.0)


def test_running_average_round_trip():
    """Test running average snapshots"""
    average = RunningAverage(window=5)
    average.update(4.0)

    restored = RunningAverage.from_dict(average.to_dict())

    assert restored.window == 5
    assert restored.value == 4.0
    assert restored.count == 1


def test_validate_config_valid():
    """Test config validation with valid configuration"""
    # Should not raise
    validate_config(make_config())


def test_validate_shipped_config():
    """Test the bundled training configuration is valid"""
    validate_config(load_config(CONFIG_PATH))


def test_validate_config_invalid_gamma():
    """Test config validation with invalid gamma"""
    cfg = make_config(algorithm={"gamma": 1.5})

    with pytest.raises(ValueError, match="gamma must be in"):
        validate_config(cfg)


def test_validate_config_invalid_activation():
    """Test config validation with invalid activation function"""
    cfg = make_config(network={"activation": "invalid_activation"})

    with pytest.raises(ValueError, match="activation must be one of"):
        validate_config(cfg)


def test_validate_config_buffer_smaller_than_batch():
    """Test config validation when the buffer cannot hold a batch"""
    cfg = make_config(algorithm={"buffer_size": 16})

    with pytest.raises(ValueError, match="buffer_size"):
        validate_config(cfg)


def test_validate_config_epsilon_order():
    """Test config validation when epsilon_end exceeds epsilon_start"""
    cfg = make_config(algorithm={"epsilon_start": 0.1, "epsilon_end": 0.5})

    with pytest.raises(ValueError, match="epsilon_end"):
        validate_config(cfg)


def test_validate_config_bad_lamp():
    """Test config validation with a malformed lamp"""
    cfg = make_config(env={"lamps": [[0.0, 0.0]]})

    with pytest.raises(ValueError, match=r"lamps\[0\]"):
        validate_config(cfg)


def test_validate_config_empty_hidden_layers():
    """Test config validation with no hidden layers"""
    cfg = make_config(network={"hidden_layers": []})

    with pytest.raises(ValueError, match="hidden_layers cannot be empty"):
        validate_config(cfg)


def test_load_config_missing_file(tmp_path):
    """Test loading a config that does not exist"""
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_create_architecture_from_config():
    """Test hidden layers and activation are taken from the network section"""
    architecture = create_architecture_from_config(make_config())

    assert architecture.hidden_layers == [
        (16, ActivationType.TANH),
        (8, ActivationType.TANH),
    ]


def test_create_dqn_agent_from_config():
    """Test agent construction from configuration"""
    agent = create_dqn_agent_from_config(
        make_config(), state_size=STATE_SIZE, action_size=NUM_ACTIONS
    )

    assert isinstance(agent, DQNAgent)
    assert agent.name == "unit_test"
    assert agent.batch_size == 32
    assert agent.replay_buffer.capacity == 1000
    assert agent.epsilon_min == 0.05
    assert agent.double_dqn is True
    assert agent.q_network.output_size == NUM_ACTIONS


def test_create_dqn_agent_from_config_is_seeded():
    """Test the experiment seed makes agent construction reproducible"""
    agent1 = create_dqn_agent_from_config(make_config(), STATE_SIZE, NUM_ACTIONS)
    agent2 = create_dqn_agent_from_config(make_config(), STATE_SIZE, NUM_ACTIONS)

    assert agent1.q_network.to_dict() == agent2.q_network.to_dict()


def test_create_env_from_config():
    """Test environment construction from configuration"""
    env = create_env_from_config(make_config())

    assert isinstance(env, HeatFieldEnv)
    assert env.max_steps == 200
    assert env.lamps == [(0.0, 0.0, 400.0)]


def test_get_params_defaults():
    """Test parameter extraction falls back to defaults"""
    cfg = OmegaConf.create({})

    assert get_training_params(cfg)["num_episodes"] == 500
    assert get_experiment_params(cfg) == {"name": "heat_field_dqn", "seed": 42}
    assert get_env_params(cfg)["lamps"] is None


def test_merge_configs():
    """Test override values take precedence"""
    merged = merge_configs(
        make_config(), OmegaConf.create({"algorithm": {"gamma": 0.5}})
    )

    assert merged.algorithm.gamma == 0.5
    assert merged.algorithm.batch_size == 32
