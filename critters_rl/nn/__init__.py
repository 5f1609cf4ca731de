"""
From-scratch neural network components.

This module contains the layer variants and the feed-forward network
used to approximate Q-values:
- Input, dense and activation layers
- Network composition, training and evaluation
- Hidden-layer architecture builder
"""

from critters_rl.nn.layers import (
    ActivationLayer,
    ActivationType,
    DenseLayer,
    InputLayer,
    Layer,
    layer_from_dict,
)
from critters_rl.nn.network import NetworkArchitecture, NeuralNetwork

__all__ = [
    "ActivationLayer",
    "ActivationType",
    "DenseLayer",
    "InputLayer",
    "Layer",
    "layer_from_dict",
    "NetworkArchitecture",
    "NeuralNetwork",
]
