"""Deep Q-learning engine for critter simulations."""

__version__ = "0.1.0"
