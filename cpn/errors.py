"""
Errors raised by the Counter-Propagation Network package.
"""


class NeuralNetworkError(Exception):
    """Base exception for CPN errors."""
    pass


class ConfigurationMismatchError(NeuralNetworkError):
    """The training data does not fit the network it is meant to train."""

    def __init__(self, training_count, instar_count):
        self.training_count = training_count
        self.instar_count = instar_count
        super(ConfigurationMismatchError, self).__init__(
            "If the weights are to be set from the training data, then there must be one "
            f"instar neuron for each training element (got {training_count} training "
            f"elements for {instar_count} instar neurons)."
        )


class ShapeMismatchError(NeuralNetworkError):
    """An input vector does not have the network's input dimension."""

    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super(ShapeMismatchError, self).__init__(
            f"Expected input vectors of length {expected}, got length {actual}"
        )
