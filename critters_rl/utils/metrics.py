"""Windowed running averages for training diagnostics."""

from __future__ import annotations

from typing import Any


class RunningAverage:
    """
    Incremental mean that restarts every ``window`` observations.

    The value after a restart is the first observation of the new window,
    so the average always reflects recent data only.

    Parameters
    ----------
    window : int, optional
        Number of observations before the average restarts. Default is 1000.
    """

    def __init__(self, window: int = 1000):
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        self.window = int(window)
        self.value = 0.0
        self.count = 0

    def update(self, observation: float) -> float:
        if self.count >= self.window:
            self.count = 0
        self.count += 1
        self.value += (float(observation) - self.value) / self.count
        return self.value

    def reset(self) -> None:
        self.value = 0.0
        self.count = 0

    def to_dict(self) -> dict[str, Any]:
        return {"window": self.window, "value": self.value, "count": self.count}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunningAverage:
        average = cls(data.get("window", 1000))
        try:
            average.value = float(data["value"])
            average.count = int(data["count"])
        except KeyError as exc:
            raise ValueError(f"running average snapshot is missing {exc}") from None
        return average
