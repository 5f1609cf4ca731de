"""Heat field environment configuration and presets."""


# =============================================================================
# Lamp layouts
# =============================================================================

# Each lamp is (x, y, heat). Temperature contribution is heat / distance**2.
DEFAULT_LAMPS = [
    (0.0, 0.0, 400.0),
    (12.0, -6.0, 250.0),
]

SINGLE_LAMP = [
    (0.0, 0.0, 600.0),
]

NO_LAMPS: list[tuple[float, float, float]] = []


# =============================================================================
# Environment configuration
# =============================================================================

class HeatFieldConfig:
    """
    Configuration class for the heat field environment.

    Parameters
    ----------
    ambient_temperature : float, optional
        Temperature far from every lamp. Default is 20.0.
    optimal_temperature : float, optional
        Internal temperature the critter is rewarded for holding. Default is 30.0.
    lamps : list of (x, y, heat) or None, optional
        Heat sources. If None, uses DEFAULT_LAMPS. Default is None.
    max_steps : int, optional
        Steps before an episode is truncated. Default is 500.
    death_penalty : float, optional
        Reward for the terminal transition when health runs out. Default is -20.0.
    """

    def __init__(
        self,
        ambient_temperature: float = 20.0,
        optimal_temperature: float = 30.0,
        lamps: list[tuple[float, float, float]] = None,
        max_steps: int = 500,
        death_penalty: float = -20.0,
    ):
        self.ambient_temperature = ambient_temperature
        self.optimal_temperature = optimal_temperature
        self.max_steps = max_steps
        self.death_penalty = death_penalty

        if lamps is None:
            self.lamps = list(DEFAULT_LAMPS)
        else:
            self.lamps = [tuple(lamp) for lamp in lamps]

    def to_dict(self) -> dict:
        """
        Get configuration as dictionary.

        Returns
        -------
        dict
            Configuration dictionary.
        """
        return {
            'ambient_temperature': self.ambient_temperature,
            'optimal_temperature': self.optimal_temperature,
            'lamps': [list(lamp) for lamp in self.lamps],
            'max_steps': self.max_steps,
            'death_penalty': self.death_penalty,
        }


# =============================================================================
# Preset configurations
# =============================================================================

# Standard: two lamps, mild ambient temperature
DEFAULT_CONFIG = HeatFieldConfig()

# Training: longer episodes
TRAINING_CONFIG = HeatFieldConfig(max_steps=1000)

# Night: cold ambient, a single lamp is the only way to stay warm
COLD_NIGHT_CONFIG = HeatFieldConfig(
    ambient_temperature=5.0,
    lamps=SINGLE_LAMP,
)

# Midday: ambient already near optimal, no lamps
HOT_DAY_CONFIG = HeatFieldConfig(
    ambient_temperature=28.0,
    lamps=NO_LAMPS,
)
