"""
Layer building blocks for the from-scratch Q-network.

This module provides the closed set of layer variants used by
:class:`~critters_rl.nn.network.NeuralNetwork`:

- ``InputLayer``: identity pass-through
- ``DenseLayer``: affine transform with learnable weights and biases
- ``ActivationLayer``: elementwise nonlinearity

Every layer computes its input gradient and applies its own SGD update
in a single ``backward`` call, one sample at a time.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import numpy as np


class ActivationType(str, Enum):
    """Supported elementwise activation functions."""

    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"
    LINEAR = "linear"

    @classmethod
    def parse(cls, value: ActivationType | str) -> ActivationType:
        """
        Convert a string (case-insensitive) or member into an ActivationType.

        Raises
        ------
        ValueError
            If the name is not a supported activation.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = [member.value for member in cls]
            raise ValueError(
                f"Unsupported activation: {value}. Must be one of {valid}"
            ) from None


def _as_vector(values: Any, expected: int, what: str) -> np.ndarray:
    if values is None:
        raise TypeError(f"{what} must not be None")
    vector = np.asarray(values, dtype=np.float64)
    if vector.ndim != 1 or vector.shape[0] != expected:
        raise ValueError(
            f"{what} must be a vector of length {expected}, got shape {vector.shape}"
        )
    return vector


def _check_size(name: str, value: int) -> int:
    if int(value) <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return int(value)


class InputLayer:
    """
    Identity layer placed at the front of every network.

    Parameters
    ----------
    size : int
        Width of the state vector.
    """

    def __init__(self, size: int):
        self.size = _check_size("size", size)
        self.last_input: np.ndarray | None = None

    @property
    def input_size(self) -> int:
        return self.size

    @property
    def output_size(self) -> int:
        return self.size

    @property
    def num_parameters(self) -> int:
        return 0

    def initialize_parameters(self, rng: np.random.Generator | None = None) -> None:
        """No parameters to initialize."""

    def forward(self, inputs: Any) -> np.ndarray:
        self.last_input = _as_vector(inputs, self.size, "inputs")
        return self.last_input

    def backward(self, output_gradient: Any, learning_rate: float) -> np.ndarray:
        return _as_vector(output_gradient, self.size, "output_gradient")

    def copy(self) -> InputLayer:
        clone = InputLayer(self.size)
        if self.last_input is not None:
            clone.last_input = self.last_input.copy()
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {"type": "input", "size": self.size}


class DenseLayer:
    """
    Fully connected layer: ``y[o] = b[o] + sum_i x[i] * W[o, i]``.

    Weights use Xavier-uniform initialization, ``scale = sqrt(6 / (in + out))``,
    and biases start at a small positive constant.

    Parameters
    ----------
    input_size : int
        Number of inputs.
    output_size : int
        Number of outputs.
    rng : np.random.Generator or None, optional
        Generator used for weight initialization. A fresh unseeded generator
        is used when omitted.

    Attributes
    ----------
    weights : np.ndarray
        Weight matrix of shape (output_size, input_size).
    biases : np.ndarray
        Bias vector of shape (output_size,).
    """

    INITIAL_BIAS = 0.01

    def __init__(
        self,
        input_size: int,
        output_size: int,
        rng: np.random.Generator | None = None,
    ):
        self._input_size = _check_size("input_size", input_size)
        self._output_size = _check_size("output_size", output_size)
        self.weights = np.zeros((self._output_size, self._input_size))
        self.biases = np.zeros(self._output_size)
        self.last_input: np.ndarray | None = None
        self.last_output: np.ndarray | None = None
        self.initialize_parameters(rng)

    @property
    def input_size(self) -> int:
        return self._input_size

    @property
    def output_size(self) -> int:
        return self._output_size

    @property
    def num_parameters(self) -> int:
        return self.weights.size + self.biases.size

    def initialize_parameters(self, rng: np.random.Generator | None = None) -> None:
        """
        Draw fresh Xavier-uniform weights and reset biases.

        Parameters
        ----------
        rng : np.random.Generator or None, optional
            Source of randomness. Default is a fresh unseeded generator.
        """
        rng = rng if rng is not None else np.random.default_rng()
        scale = np.sqrt(6.0 / (self._input_size + self._output_size))
        self.weights = rng.uniform(
            -scale, scale, size=(self._output_size, self._input_size)
        )
        self.biases = np.full(self._output_size, self.INITIAL_BIAS)

    def forward(self, inputs: Any) -> np.ndarray:
        x = _as_vector(inputs, self._input_size, "inputs")
        self.last_input = x
        self.last_output = self.biases + self.weights @ x
        return self.last_output

    def backward(self, output_gradient: Any, learning_rate: float) -> np.ndarray:
        """
        Propagate the gradient and apply one SGD step.

        The input gradient is computed from the weights as they were during
        the forward pass, before the update is applied.

        Parameters
        ----------
        output_gradient : array-like
            Gradient of the loss with respect to this layer's output.
        learning_rate : float
            Step size for the in-place weight update.

        Returns
        -------
        np.ndarray
            Gradient of the loss with respect to this layer's input.
        """
        if self.last_input is None:
            raise RuntimeError("backward called before forward")
        dy = _as_vector(output_gradient, self._output_size, "output_gradient")

        input_gradient = self.weights.T @ dy

        self.weights -= learning_rate * np.outer(dy, self.last_input)
        self.biases -= learning_rate * dy

        return input_gradient

    def copy(self) -> DenseLayer:
        clone = DenseLayer.__new__(DenseLayer)
        clone._input_size = self._input_size
        clone._output_size = self._output_size
        clone.weights = self.weights.copy()
        clone.biases = self.biases.copy()
        clone.last_input = None if self.last_input is None else self.last_input.copy()
        clone.last_output = (
            None if self.last_output is None else self.last_output.copy()
        )
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "dense",
            "input_size": self._input_size,
            "output_size": self._output_size,
            "weights": self.weights.tolist(),
            "biases": self.biases.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DenseLayer:
        layer = cls.__new__(cls)
        layer._input_size = _check_size("input_size", data["input_size"])
        layer._output_size = _check_size("output_size", data["output_size"])
        weights = np.asarray(data["weights"], dtype=np.float64)
        biases = np.asarray(data["biases"], dtype=np.float64)
        if weights.shape != (layer._output_size, layer._input_size):
            raise ValueError(
                f"Dense weights must have shape "
                f"{(layer._output_size, layer._input_size)}, got {weights.shape}"
            )
        if biases.shape != (layer._output_size,):
            raise ValueError(
                f"Dense biases must have shape {(layer._output_size,)}, "
                f"got {biases.shape}"
            )
        layer.weights = weights
        layer.biases = biases
        layer.last_input = None
        layer.last_output = None
        return layer


class ActivationLayer:
    """
    Elementwise activation.

    The backward pass derives the local slope from the stored activated
    output rather than the pre-activation input. Each supported function
    has a derivative expressible in terms of its own output:

    - sigmoid: ``a * (1 - a)``
    - tanh: ``1 - a**2``
    - relu: ``1 if a > 0 else 0`` (``a > 0`` exactly when the input was positive)
    - linear: ``1``

    Parameters
    ----------
    size : int
        Width of the input and output vectors.
    activation : ActivationType or str, optional
        Activation function. Default is sigmoid.
    """

    def __init__(
        self,
        size: int,
        activation: ActivationType | str = ActivationType.SIGMOID,
    ):
        self.size = _check_size("size", size)
        self.activation = ActivationType.parse(activation)
        self.last_input: np.ndarray | None = None
        self.last_output: np.ndarray | None = None

    @property
    def input_size(self) -> int:
        return self.size

    @property
    def output_size(self) -> int:
        return self.size

    @property
    def num_parameters(self) -> int:
        return 0

    def initialize_parameters(self, rng: np.random.Generator | None = None) -> None:
        """No parameters to initialize."""

    def forward(self, inputs: Any) -> np.ndarray:
        x = _as_vector(inputs, self.size, "inputs")
        self.last_input = x
        self.last_output = self._apply(x)
        return self.last_output

    def backward(self, output_gradient: Any, learning_rate: float) -> np.ndarray:
        if self.last_output is None:
            raise RuntimeError("backward called before forward")
        dy = _as_vector(output_gradient, self.size, "output_gradient")
        return dy * self._derivative(self.last_output)

    def _apply(self, x: np.ndarray) -> np.ndarray:
        if self.activation is ActivationType.SIGMOID:
            with np.errstate(over="ignore"):
                return 1.0 / (1.0 + np.exp(-x))
        if self.activation is ActivationType.TANH:
            return np.tanh(x)
        if self.activation is ActivationType.RELU:
            return np.maximum(0.0, x)
        return x.copy()

    def _derivative(self, activated: np.ndarray) -> np.ndarray:
        if self.activation is ActivationType.SIGMOID:
            return activated * (1.0 - activated)
        if self.activation is ActivationType.TANH:
            return 1.0 - activated * activated
        if self.activation is ActivationType.RELU:
            return (activated > 0).astype(np.float64)
        return np.ones_like(activated)

    def copy(self) -> ActivationLayer:
        clone = ActivationLayer(self.size, self.activation)
        if self.last_input is not None:
            clone.last_input = self.last_input.copy()
        if self.last_output is not None:
            clone.last_output = self.last_output.copy()
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "activation",
            "size": self.size,
            "activation": self.activation.value,
        }


Layer = InputLayer | DenseLayer | ActivationLayer


def layer_from_dict(data: dict[str, Any]) -> Layer:
    """
    Rebuild a layer from its ``to_dict`` snapshot.

    Parameters
    ----------
    data : dict
        Snapshot tagged with ``"type"``.

    Returns
    -------
    Layer
        The reconstructed layer.

    Raises
    ------
    TypeError
        If ``data`` is None or not a mapping.
    ValueError
        If the tag is unknown or required fields are missing or inconsistent.
    """
    if data is None:
        raise TypeError("layer snapshot must not be None")
    if not isinstance(data, dict):
        raise TypeError(f"layer snapshot must be a dict, got {type(data).__name__}")

    layer_type = data.get("type")
    try:
        if layer_type == "input":
            return InputLayer(data["size"])
        if layer_type == "dense":
            return DenseLayer.from_dict(data)
        if layer_type == "activation":
            return ActivationLayer(data["size"], data["activation"])
    except KeyError as exc:
        raise ValueError(f"{layer_type} layer snapshot is missing {exc}") from None

    raise ValueError(f"Unable to deserialize layer of type {layer_type!r}")
