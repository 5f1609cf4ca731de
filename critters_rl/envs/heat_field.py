"""
Heat field environment using the Gymnasium API.

A critter moves around a plane warmed by lamps and tries to keep its
internal temperature close to an optimum:
- Temperature at a point is the ambient temperature plus each lamp's
  heat divided by the squared distance (at least 1)
- Moving costs stamina; resting near the optimum recovers it
- Being far from the optimum drains health; the episode ends when
  health runs out
"""

import math

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from configs.config import DEFAULT_LAMPS

# Movement directions: stay, N, NE, E, SE, S, SW, W, NW
DX = (0, 0, 1, 1, 1, 0, -1, -1, -1)
DY = (0, -1, -1, 0, 1, 1, 1, 0, -1)

NUM_ACTIONS = len(DX)
STATE_SIZE = 12

MAX_STAMINA = 100.0
MAX_HEALTH = 100.0
MOVE_STAMINA_COST = 1.0
STAMINA_RECOVERY = 10.0
TEMPERATURE_DAMAGE = 1.0
DANGER_TEMPERATURE_DIFFERENCE = 10.0
DEFAULT_INTERNAL_TEMPERATURE = 20.0
SENSE_DISTANCE = 2.0
MOVE_DISTANCE = 1.0


def shaped_reward(
    internal_temperature: float,
    optimal_temperature: float,
    stamina: float,
    moved_last_turn: bool,
) -> float:
    """
    Reward for one step, weighted heavily towards temperature.

    Parameters
    ----------
    internal_temperature : float
        Critter temperature after the step.
    optimal_temperature : float
        Target temperature.
    stamina : float
        Stamina after the step.
    moved_last_turn : bool
        Whether the critter moved during the step.

    Returns
    -------
    float
        Shaped reward.
    """
    difference = abs(internal_temperature - optimal_temperature)
    closeness = 3.0 * math.exp(-difference / 1.5)

    if difference < 1.0:
        temperature_reward = 2.0 * closeness
    elif difference < 3.0:
        temperature_reward = closeness
    elif difference < 5.0:
        temperature_reward = -0.5 * closeness
    else:
        temperature_reward = -2.5 * (1.0 - closeness)

    if difference > DANGER_TEMPERATURE_DIFFERENCE:
        temperature_reward -= 5.0

    stamina_reward = 0.0
    if difference < 2.0 and stamina < MAX_STAMINA * 0.5 and not moved_last_turn:
        stamina_reward = 0.2
    if stamina < MAX_STAMINA * 0.2 and moved_last_turn:
        stamina_reward = -0.3
    stamina_reward += (stamina / MAX_STAMINA) * 0.05

    return temperature_reward * 3.0 + stamina_reward


class HeatFieldEnv(gym.Env):
    """
    Single critter in a heat field (Gymnasium API).

    Parameters
    ----------
    ambient_temperature : float, optional
        Temperature far from every lamp. Default is 20.0.
    optimal_temperature : float, optional
        Internal temperature the critter should hold. Default is 30.0.
    lamps : list of (x, y, heat) or None, optional
        Heat sources. If None, uses DEFAULT_LAMPS. Default is None.
    max_steps : int, optional
        Steps before truncation. Default is 500.
    death_penalty : float, optional
        Reward of the terminal transition. Default is -20.0.
    spawn_radius : float, optional
        Half-width of the square the critter spawns in. Default is 15.0.
    """

    metadata = {"render_modes": [], "name": "heat_field_v0"}

    def __init__(
        self,
        ambient_temperature: float = 20.0,
        optimal_temperature: float = 30.0,
        lamps: list[tuple[float, float, float]] | None = None,
        max_steps: int = 500,
        death_penalty: float = -20.0,
        spawn_radius: float = 15.0,
    ):
        super().__init__()

        if max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {max_steps}")

        self.ambient_temperature = float(ambient_temperature)
        self.optimal_temperature = float(optimal_temperature)
        self.lamps = [
            tuple(float(v) for v in lamp)
            for lamp in (DEFAULT_LAMPS if lamps is None else lamps)
        ]
        self.max_steps = max_steps
        self.death_penalty = float(death_penalty)
        self.spawn_radius = float(spawn_radius)

        # state(12): cell temperature, 8 neighbour temperatures,
        # internal temperature, stamina (0-1), health (0-1)
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(STATE_SIZE,), dtype=np.float64
        )
        self.action_space = spaces.Discrete(NUM_ACTIONS)

        self.position = np.zeros(2)
        self.internal_temperature = DEFAULT_INTERNAL_TEMPERATURE
        self.stamina = MAX_STAMINA
        self.health = MAX_HEALTH
        self.moved_last_turn = False
        self.steps = 0

    def temperature_at(self, point: np.ndarray) -> float:
        """Ambient temperature plus inverse-square heat from every lamp."""
        total = self.ambient_temperature
        for x, y, heat in self.lamps:
            if heat <= 0:
                continue
            distance = max(1.0, math.hypot(point[0] - x, point[1] - y))
            total += heat / (distance * distance)
        return total

    def _observation(self) -> np.ndarray:
        state = np.empty(STATE_SIZE)
        state[0] = self.temperature_at(self.position)
        for i in range(1, NUM_ACTIONS):
            offset = np.array([DX[i], DY[i]], dtype=np.float64) * SENSE_DISTANCE
            state[i] = self.temperature_at(self.position + offset)
        state[9] = self.internal_temperature
        state[10] = self.stamina / MAX_STAMINA
        state[11] = self.health / MAX_HEALTH
        return state

    def _info(self) -> dict:
        return {
            "position": self.position.copy(),
            "internal_temperature": self.internal_temperature,
            "stamina": self.stamina,
            "health": self.health,
            "steps": self.steps,
        }

    def reset(self, seed: int | None = None, options: dict | None = None):
        """
        Place the critter at a random position with full stamina and health.

        Returns
        -------
        tuple
            (observation, info)
        """
        super().reset(seed=seed)

        self.position = self.np_random.uniform(
            -self.spawn_radius, self.spawn_radius, size=2
        )
        self.internal_temperature = DEFAULT_INTERNAL_TEMPERATURE
        self.stamina = MAX_STAMINA
        self.health = MAX_HEALTH
        self.moved_last_turn = False
        self.steps = 0

        return self._observation(), self._info()

    def step(self, action: int):
        """
        Advance the simulation by one tick.

        Parameters
        ----------
        action : int
            Movement direction index in ``[0, 9)``.

        Returns
        -------
        tuple
            (observation, reward, terminated, truncated, info)
        """
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action {action}")

        dx, dy = DX[action], DY[action]
        moved = False
        if (dx != 0 or dy != 0) and self.stamina >= MOVE_STAMINA_COST:
            self.position = self.position + np.array([dx, dy]) * MOVE_DISTANCE
            self.stamina -= MOVE_STAMINA_COST
            moved = True

        if not moved:
            difference = abs(self.internal_temperature - self.optimal_temperature)
            if difference < 8.0:
                self.stamina += STAMINA_RECOVERY * math.exp(-difference / 2.0)
            else:
                self.stamina -= STAMINA_RECOVERY * 0.5
        self.stamina = float(np.clip(self.stamina, 0.0, MAX_STAMINA))
        self.moved_last_turn = moved

        environment_temperature = self.temperature_at(self.position)
        self.internal_temperature = (
            0.9 * self.internal_temperature + 0.1 * environment_temperature
        )
        self.steps += 1

        terminated = False
        difference = abs(self.internal_temperature - self.optimal_temperature)
        if difference > DANGER_TEMPERATURE_DIFFERENCE:
            self.health -= TEMPERATURE_DAMAGE
            terminated = self.health <= 0

        if terminated:
            reward = self.death_penalty
        else:
            reward = shaped_reward(
                self.internal_temperature,
                self.optimal_temperature,
                self.stamina,
                moved,
            )

        truncated = not terminated and self.steps >= self.max_steps

        return self._observation(), reward, terminated, truncated, self._info()
