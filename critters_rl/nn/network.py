"""
Feed-forward network composed of layers.

This module provides the layer container used for Q-value estimation
and a small builder describing hidden-layer architectures.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

from critters_rl.nn.layers import (
    ActivationLayer,
    ActivationType,
    DenseLayer,
    InputLayer,
    Layer,
    layer_from_dict,
)

Sample = tuple[Sequence[float], Sequence[float]]


class NeuralNetwork:
    """
    Ordered composition of layers trained one sample at a time.

    Training minimises squared error with plain SGD. The output error
    ``prediction - target`` is used directly as the output gradient (the
    factor of 2 from the squared loss is absorbed into the learning rate).

    Parameters
    ----------
    layers : iterable of Layer or None, optional
        Initial layers, front to back. Default is an empty network.

    Examples
    --------
    >>> net = NeuralNetwork([InputLayer(2), DenseLayer(2, 1)])
    >>> net.forward([0.5, -0.5]).shape
    (1,)
    """

    def __init__(self, layers: Iterable[Layer] | None = None):
        self._layers: list[Layer] = []
        for layer in layers or ():
            self.add_layer(layer)

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def input_size(self) -> int:
        if not self._layers:
            raise ValueError("Network has no layers")
        return self._layers[0].input_size

    @property
    def output_size(self) -> int:
        if not self._layers:
            raise ValueError("Network has no layers")
        return self._layers[-1].output_size

    def add_layer(self, layer: Layer) -> None:
        """
        Append a layer to the end of the network.

        Raises
        ------
        ValueError
            If the layer's input width does not match the current output width.
        """
        if self._layers and layer.input_size != self._layers[-1].output_size:
            raise ValueError(
                f"Layer input size {layer.input_size} does not match previous "
                f"output size {self._layers[-1].output_size}"
            )
        self._layers.append(layer)

    def get_num_parameters(self) -> int:
        """Total number of trainable parameters."""
        return sum(layer.num_parameters for layer in self._layers)

    def forward(self, inputs: Sequence[float] | np.ndarray) -> np.ndarray:
        """
        Run inference through every layer, front to back.

        Parameters
        ----------
        inputs : array-like
            Input vector of length ``input_size``.

        Returns
        -------
        np.ndarray
            Output vector of length ``output_size``.
        """
        if not self._layers:
            raise ValueError("Network has no layers")
        output = inputs
        for layer in self._layers:
            output = layer.forward(output)
        return output

    def train_sample(
        self,
        inputs: Sequence[float] | np.ndarray,
        target: Sequence[float] | np.ndarray,
        learning_rate: float,
    ) -> float:
        """
        Apply one forward/backward pass for a single example.

        Each layer produces the upstream gradient and updates its own
        parameters during the same backward call.

        Returns
        -------
        float
            Summed squared error of the prediction before the update.
        """
        prediction = self.forward(inputs)
        target = np.asarray(target, dtype=np.float64)
        if target.shape != prediction.shape:
            raise ValueError(
                f"target must have shape {prediction.shape}, got {target.shape}"
            )

        gradient = prediction - target
        loss = float(np.dot(gradient, gradient))

        for layer in reversed(self._layers):
            gradient = layer.backward(gradient, learning_rate)

        return loss

    def train(
        self,
        training_data: Sequence[Sample],
        learning_rate: float = 0.01,
        epochs: int = 1000,
    ) -> float:
        """
        Train on a dataset for a number of epochs.

        Samples are visited in the given order every epoch; no shuffling
        is performed.

        Parameters
        ----------
        training_data : sequence of (input, target) pairs
            Dataset to fit.
        learning_rate : float, optional
            SGD step size. Default is 0.01.
        epochs : int, optional
            Number of passes over the data. Default is 1000.

        Returns
        -------
        float
            Mean sample loss during the last epoch (0.0 for no data).
        """
        epoch_loss = 0.0
        for _ in range(epochs):
            epoch_loss = 0.0
            for inputs, target in training_data:
                epoch_loss += self.train_sample(inputs, target, learning_rate)
        if not training_data:
            return 0.0
        return epoch_loss / len(training_data)

    def evaluate(self, test_data: Sequence[Sample]) -> float:
        """
        Mean squared error over a dataset without updating weights.

        The squared error of each sample is summed over outputs, then
        averaged over samples.
        """
        if not test_data:
            raise ValueError("Cannot evaluate on an empty dataset")

        total_loss = 0.0
        for inputs, target in test_data:
            prediction = self.forward(inputs)
            target = np.asarray(target, dtype=np.float64)
            if target.shape != prediction.shape:
                raise ValueError(
                    f"target must have shape {prediction.shape}, got {target.shape}"
                )
            error = prediction - target
            total_loss += float(np.dot(error, error))
        return total_loss / len(test_data)

    def copy(self) -> NeuralNetwork:
        """Return an independent deep copy of the network."""
        clone = NeuralNetwork()
        clone._layers = [layer.copy() for layer in self._layers]
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {"layers": [layer.to_dict() for layer in self._layers]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NeuralNetwork:
        """
        Rebuild a network from a ``to_dict`` snapshot.

        Raises
        ------
        TypeError
            If ``data`` is None.
        ValueError
            If the snapshot has no layers or layer widths do not chain.
        """
        if data is None:
            raise TypeError("network snapshot must not be None")
        layers = data.get("layers")
        if not layers:
            raise ValueError("network snapshot must contain at least one layer")
        return cls(layer_from_dict(layer) for layer in layers)


class NetworkArchitecture:
    """
    Description of hidden layers used to build Q-networks.

    Each hidden layer is a dense layer followed by an activation. Networks
    built from an architecture always start with an input layer and end
    with a linear dense output layer.

    Examples
    --------
    >>> arch = NetworkArchitecture().add_dense_layer(32, "tanh")
    >>> net = arch.create_network(4, 2)
    >>> [type(layer).__name__ for layer in net.layers]
    ['InputLayer', 'DenseLayer', 'ActivationLayer', 'DenseLayer']
    """

    def __init__(self):
        self.hidden_layers: list[tuple[int, ActivationType]] = []

    @classmethod
    def default(cls, hidden_size: int = 64) -> NetworkArchitecture:
        """Two ReLU hidden layers of ``hidden_size`` units."""
        return (
            cls()
            .add_dense_layer(hidden_size, ActivationType.RELU)
            .add_dense_layer(hidden_size, ActivationType.RELU)
        )

    @classmethod
    def from_network(cls, network: NeuralNetwork) -> NetworkArchitecture:
        """Recover the hidden layers of a network built by ``create_network``."""
        architecture = cls()
        layers = network.layers
        for layer, following in zip(layers, layers[1:]):
            if isinstance(layer, DenseLayer) and isinstance(following, ActivationLayer):
                architecture.add_dense_layer(layer.output_size, following.activation)
        return architecture

    def add_dense_layer(
        self, neurons: int, activation: ActivationType | str
    ) -> NetworkArchitecture:
        if neurons <= 0:
            raise ValueError(f"neurons must be positive, got {neurons}")
        self.hidden_layers.append((int(neurons), ActivationType.parse(activation)))
        return self

    def create_network(
        self,
        input_size: int,
        output_size: int,
        rng: np.random.Generator | None = None,
    ) -> NeuralNetwork:
        """
        Build a freshly initialized network.

        Parameters
        ----------
        input_size : int
            State vector width.
        output_size : int
            Number of outputs (actions).
        rng : np.random.Generator or None, optional
            Generator for weight initialization.
        """
        network = NeuralNetwork()
        network.add_layer(InputLayer(input_size))

        previous = input_size
        for neurons, activation in self.hidden_layers:
            network.add_layer(DenseLayer(previous, neurons, rng=rng))
            network.add_layer(ActivationLayer(neurons, activation))
            previous = neurons

        network.add_layer(DenseLayer(previous, output_size, rng=rng))
        return network

    def __repr__(self) -> str:
        hidden = ", ".join(f"{n}:{act.value}" for n, act in self.hidden_layers)
        return f"NetworkArchitecture([{hidden}])"
