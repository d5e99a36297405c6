"""
Training data for Counter-Propagation Networks.

Instar training is unsupervised, so only the input half of every pair is ever read.
The ideal half is kept so that the same data set can feed a supervised trainer.
"""

from typing import NamedTuple, Optional

import torch
from torch.utils.data import Dataset


class TrainingPair(NamedTuple):
    input: torch.Tensor
    ideal: Optional[torch.Tensor] = None


class BasicDataSet(Dataset):
    """
    Ordered, re-iterable collection of training pairs

    Args:
        inputs (array-like): Input vectors, shape (n_samples, input_size)
        ideals (array-like, optional): Ideal vectors, shape (n_samples, ideal_size). Defaults to None.
        dtype (torch.dtype, optional): Storage dtype. Defaults to torch.float64.
    """

    def __init__(self, inputs, ideals=None, dtype=torch.float64):
        self.inputs = torch.as_tensor(inputs, dtype=dtype)
        if self.inputs.dim() == 1:
            self.inputs = self.inputs.unsqueeze(1)

        if ideals is None:
            self.ideals = None
        else:
            self.ideals = torch.as_tensor(ideals, dtype=dtype)
            if self.ideals.dim() == 1:
                self.ideals = self.ideals.unsqueeze(1)
            if self.ideals.shape[0] != self.inputs.shape[0]:
                raise ValueError(
                    f"Got {self.inputs.shape[0]} inputs but {self.ideals.shape[0]} ideals"
                )

    @property
    def input_size(self):
        return self.inputs.shape[1]

    @property
    def ideal_size(self):
        return 0 if self.ideals is None else self.ideals.shape[1]

    def __len__(self):
        return self.inputs.shape[0]

    def __getitem__(self, index):
        ideal = None if self.ideals is None else self.ideals[index]
        return TrainingPair(self.inputs[index], ideal)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]
