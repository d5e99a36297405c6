"""
Counter-Propagation Network (CPN) Model

This module implements the network that instar trainers operate on. The network owns the
input-to-instar weight matrix; trainers receive a reference to it and update it in place.
"""

import torch
import torch.nn as nn

from .layers import InstarLayer, index_of_largest


class CPN(nn.Module):
    """
    Counter-Propagation Network (competitive half)

    Args:
        input_count (int): Dimension of the input vectors
        instar_count (int): Number of competitive (instar) units
        dtype (torch.dtype, optional): Weight dtype. Defaults to torch.float64.
    """

    def __init__(self, input_count, instar_count, dtype=torch.float64):
        super(CPN, self).__init__()
        self.instar = InstarLayer(input_count, instar_count, dtype=dtype)

    @property
    def input_count(self):
        return self.instar.input_count

    @property
    def instar_count(self):
        return self.instar.instar_count

    @property
    def weights_input_to_instar(self):
        """The live (input_count, instar_count) weight tensor, not a copy."""
        return self.instar.weight

    def reset(self, seed=None):
        self.instar.reset(seed)

    def compute_instar(self, x):
        return self.instar.compute(x)

    def winner(self, x):
        """
        Index of the instar unit with the largest activation for a single input

        Args:
            x (array-like): Input vector of length input_count

        Returns:
            int: Index of the winning unit
        """
        return index_of_largest(self.compute_instar(x))

    def forward(self, x):
        """
        Winner-take-all output: 1.0 for the winning unit, 0.0 for every other unit

        Args:
            x (torch.Tensor): Input vector (input_count,) or batch (batch_size, input_count)

        Returns:
            torch.Tensor: One-hot tensor of shape (..., instar_count)
        """
        activations = self.compute_instar(x)
        output = torch.zeros_like(activations)
        if activations.dim() == 1:
            output[index_of_largest(activations)] = 1.0
        else:
            for i, row in enumerate(activations):
                output[i, index_of_largest(row)] = 1.0
        return output
