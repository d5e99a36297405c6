"""
Counter-Propagation Layers

This module implements the competitive layer of a Counter-Propagation Network.
The layer owns the input-to-instar weight matrix and computes the activation of every
instar unit for an input vector.
"""

import torch
import torch.nn as nn

from .errors import ShapeMismatchError


class InstarLayer(nn.Module):
    """
    Instar Layer

    A competitive layer whose weight matrix has one row per input dimension and one
    column per instar unit. The weights are not learned by gradient descent; trainers
    mutate them in place.

    Args:
        input_count (int): Dimension of the input vectors
        instar_count (int): Number of competitive (instar) units
        dtype (torch.dtype, optional): Weight dtype. Defaults to torch.float64.
    """

    def __init__(self, input_count, instar_count, dtype=torch.float64):
        super(InstarLayer, self).__init__()

        if input_count < 1 or instar_count < 1:
            raise ValueError(
                f"input_count and instar_count must be positive, got {input_count} and {instar_count}"
            )

        self.input_count = input_count
        self.instar_count = instar_count

        # Rows = input dimension, columns = instar units
        self.weight = nn.Parameter(
            torch.zeros(input_count, instar_count, dtype=dtype), requires_grad=False
        )

    def reset(self, seed=None):
        """
        Randomize the weights in place

        Args:
            seed (int, optional): Seed for the random generator. Defaults to None.
        """
        if seed is not None:
            torch.manual_seed(seed)
        with torch.no_grad():
            nn.init.xavier_normal_(self.weight)

    def check_input(self, x):
        """
        Convert an input to a tensor matching the weights and validate its length

        Args:
            x (array-like): Input vector (input_count,) or batch (batch_size, input_count)

        Returns:
            torch.Tensor: Input tensor with the weight dtype and device
        """
        x = torch.as_tensor(x, dtype=self.weight.dtype, device=self.weight.device)
        if x.dim() == 0 or x.shape[-1] != self.input_count:
            actual = 1 if x.dim() == 0 else x.shape[-1]
            raise ShapeMismatchError(self.input_count, actual)
        return x

    def compute(self, x):
        """
        Compute the activation of every instar unit

        Args:
            x (array-like): Input vector or batch

        Returns:
            torch.Tensor: Dot product of the input with each weight column, shape (..., instar_count)
        """
        x = self.check_input(x)
        return torch.matmul(x, self.weight)


def index_of_largest(values):
    """
    Find the index of the largest value

    Scans left to right with a strict comparison, so the first index holding the
    maximum wins any tie.

    Args:
        values (array-like): 1-D sequence of activations

    Returns:
        int: Index of the first maximal value
    """
    if isinstance(values, torch.Tensor):
        values = values.tolist()
    if len(values) == 0:
        raise ValueError("Cannot select a winner from an empty activation vector")

    result = 0
    for i in range(1, len(values)):
        if values[i] > values[result]:
            result = i
    return result
