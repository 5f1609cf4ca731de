"""Tests for the layer building blocks."""

import numpy as np
import pytest

from critters_rl.nn.layers import (
    ActivationLayer,
    ActivationType,
    DenseLayer,
    InputLayer,
    layer_from_dict,
)


def make_dense(weights, biases):
    """Create a dense layer with explicit parameters."""
    weights = np.asarray(weights, dtype=np.float64)
    layer = DenseLayer(weights.shape[1], weights.shape[0])
    layer.weights = weights.copy()
    layer.biases = np.asarray(biases, dtype=np.float64)
    return layer


def test_activation_type_parse_is_case_insensitive():
    """Test activation names parse regardless of case."""
    assert ActivationType.parse("ReLU") is ActivationType.RELU
    assert ActivationType.parse("TANH") is ActivationType.TANH
    assert ActivationType.parse(ActivationType.LINEAR) is ActivationType.LINEAR


def test_activation_type_parse_rejects_unknown():
    """Test unknown activation names are rejected."""
    with pytest.raises(ValueError, match="Unsupported activation"):
        ActivationType.parse("softmax")


def test_input_layer_is_identity():
    """Test input layer passes values through unchanged."""
    layer = InputLayer(3)
    output = layer.forward([1.0, -2.0, 3.5])

    np.testing.assert_array_equal(output, [1.0, -2.0, 3.5])
    np.testing.assert_array_equal(layer.backward([0.1, 0.2, 0.3], 0.5), [0.1, 0.2, 0.3])
    assert layer.num_parameters == 0


def test_layer_rejects_wrong_width():
    """Test layers reject vectors of the wrong length."""
    with pytest.raises(ValueError, match="length 3"):
        InputLayer(3).forward([1.0, 2.0])
    with pytest.raises(ValueError, match="length 2"):
        DenseLayer(2, 1).forward([1.0, 2.0, 3.0])


def test_layer_rejects_none_input():
    """Test None inputs raise TypeError."""
    with pytest.raises(TypeError):
        InputLayer(2).forward(None)


def test_layer_rejects_non_positive_size():
    """Test zero-width layers cannot be constructed."""
    with pytest.raises(ValueError, match="must be positive"):
        DenseLayer(0, 3)
    with pytest.raises(ValueError, match="must be positive"):
        ActivationLayer(0)


def test_dense_initialization_bounds():
    """Test Xavier-uniform weights and constant biases."""
    rng = np.random.default_rng(0)
    layer = DenseLayer(10, 6, rng=rng)
    scale = np.sqrt(6.0 / 16)

    assert layer.weights.shape == (6, 10)
    assert np.all(np.abs(layer.weights) <= scale)
    np.testing.assert_allclose(layer.biases, 0.01)
    assert layer.num_parameters == 66


def test_dense_initialization_is_reproducible():
    """Test the same generator seed gives the same weights."""
    layer1 = DenseLayer(4, 3, rng=np.random.default_rng(7))
    layer2 = DenseLayer(4, 3, rng=np.random.default_rng(7))

    np.testing.assert_array_equal(layer1.weights, layer2.weights)


def test_dense_forward():
    """Test dense output is bias plus weighted input sum."""
    layer = make_dense([[1.0, 2.0], [-1.0, 0.5]], [0.5, -0.5])

    output = layer.forward([2.0, 1.0])

    np.testing.assert_allclose(output, [4.5, -2.0])


def test_dense_backward_uses_weights_before_update():
    """Test input gradient is computed before the SGD step."""
    layer = make_dense([[1.0, 2.0], [3.0, 4.0]], [0.0, 0.0])
    layer.forward([1.0, -1.0])

    input_gradient = layer.backward([1.0, 0.5], learning_rate=0.1)

    # W^T @ dy with the original weights
    np.testing.assert_allclose(input_gradient, [2.5, 4.0])
    # W -= lr * outer(dy, x)
    np.testing.assert_allclose(layer.weights, [[0.9, 2.1], [2.95, 4.05]])
    np.testing.assert_allclose(layer.biases, [-0.1, -0.05])


def test_dense_backward_before_forward():
    """Test backward without a cached input is an error."""
    layer = DenseLayer(2, 2, rng=np.random.default_rng(0))

    with pytest.raises(RuntimeError, match="before forward"):
        layer.backward([1.0, 1.0], 0.1)


def test_dense_copy_is_independent():
    """Test copied dense layers do not share parameters."""
    layer = DenseLayer(3, 2, rng=np.random.default_rng(1))
    clone = layer.copy()

    clone.weights[0, 0] += 1.0
    clone.biases[0] += 1.0

    assert layer.weights[0, 0] != clone.weights[0, 0]
    assert layer.biases[0] != clone.biases[0]


@pytest.mark.parametrize(
    "activation, inputs, expected",
    [
        ("sigmoid", [0.0], [0.5]),
        ("tanh", [0.0], [0.0]),
        ("relu", [-1.0], [0.0]),
        ("relu", [2.0], [2.0]),
        ("linear", [-3.0], [-3.0]),
    ],
)
def test_activation_forward(activation, inputs, expected):
    """Test each activation function's forward value."""
    layer = ActivationLayer(1, activation)

    np.testing.assert_allclose(layer.forward(inputs), expected)


def test_sigmoid_derivative_from_output():
    """Test sigmoid slope is a * (1 - a) of the stored output."""
    layer = ActivationLayer(2, "sigmoid")
    output = layer.forward([0.0, 2.0])

    gradient = layer.backward([1.0, 1.0], learning_rate=0.1)

    np.testing.assert_allclose(gradient, output * (1.0 - output))
    assert gradient[0] == pytest.approx(0.25)


def test_tanh_derivative_from_output():
    """Test tanh slope is 1 - a**2 of the stored output."""
    layer = ActivationLayer(1, "tanh")
    output = layer.forward([0.5])

    gradient = layer.backward([2.0], learning_rate=0.1)

    np.testing.assert_allclose(gradient, 2.0 * (1.0 - output**2))


def test_relu_derivative_gates_by_output():
    """Test ReLU passes gradient only where the output was positive."""
    layer = ActivationLayer(3, "relu")
    layer.forward([-1.0, 0.0, 2.0])

    gradient = layer.backward([5.0, 5.0, 5.0], learning_rate=0.1)

    np.testing.assert_array_equal(gradient, [0.0, 0.0, 5.0])
    # output > 0 exactly when input > 0, so gating on the output matches
    # the derivative taken from the pre-activation input
    np.testing.assert_array_equal(layer.last_output > 0, layer.last_input > 0)
    np.testing.assert_array_equal(gradient, 5.0 * (layer.last_input > 0))


def test_linear_derivative_is_one():
    """Test linear activation passes the gradient through."""
    layer = ActivationLayer(2, "linear")
    layer.forward([-4.0, 4.0])

    np.testing.assert_array_equal(layer.backward([0.3, -0.3], 0.1), [0.3, -0.3])


def test_activation_backward_before_forward():
    """Test activation backward without a cached output is an error."""
    with pytest.raises(RuntimeError):
        ActivationLayer(2).backward([1.0, 1.0], 0.1)


def test_sigmoid_saturates_without_error():
    """Test large negative inputs saturate to zero."""
    layer = ActivationLayer(1, "sigmoid")

    output = layer.forward([-1000.0])

    assert output[0] == pytest.approx(0.0)


def test_layer_from_dict_rebuilds_each_variant():
    """Test every layer variant survives a snapshot."""
    dense = DenseLayer(3, 2, rng=np.random.default_rng(3))
    layers = [InputLayer(3), dense, ActivationLayer(2, "tanh")]

    rebuilt = [layer_from_dict(layer.to_dict()) for layer in layers]

    assert isinstance(rebuilt[0], InputLayer)
    assert rebuilt[0].size == 3
    np.testing.assert_array_equal(rebuilt[1].weights, dense.weights)
    np.testing.assert_array_equal(rebuilt[1].biases, dense.biases)
    assert rebuilt[2].activation is ActivationType.TANH


def test_layer_from_dict_errors():
    """Test malformed layer snapshots are rejected."""
    with pytest.raises(TypeError):
        layer_from_dict(None)
    with pytest.raises(ValueError, match="Unable to deserialize"):
        layer_from_dict({"type": "conv"})
    with pytest.raises(ValueError, match="missing"):
        layer_from_dict({"type": "activation", "size": 2})


def test_dense_from_dict_checks_shapes():
    """Test dense snapshots with mismatched weight shapes are rejected."""
    data = DenseLayer(2, 2, rng=np.random.default_rng(0)).to_dict()
    data["weights"] = [[1.0, 2.0, 3.0]]

    with pytest.raises(ValueError, match="weights must have shape"):
        layer_from_dict(data)
