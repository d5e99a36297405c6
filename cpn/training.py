"""
Instar Training

This module implements unsupervised (instar) training for the competitive half of a
Counter-Propagation Network, plus the generic trainer contract and host loop that drive it.

Each iteration makes one online pass over the training data. For every exemplar the
instar unit with the largest activation wins, and only the winner's weight column moves
a fraction `learning_rate` of the way toward the exemplar. The error of an iteration is
the largest Euclidean distance seen between an exemplar and its winning column.
"""

import logging
from abc import ABC, abstractmethod

import torch
from tqdm import tqdm

from .errors import ConfigurationMismatchError, ShapeMismatchError
from .layers import index_of_largest

logger = logging.getLogger(__name__)


class BasicTraining(ABC):
    """
    Base class for iterative trainers

    A host loop calls `iteration()` repeatedly and reads `error` after each call to
    decide when to stop.

    Args:
        training: Ordered, re-iterable training data
    """

    def __init__(self, training):
        self.training = training
        self.iteration_number = 0
        self.is_training_done = False
        self._error = None

    @property
    def error(self):
        """Error of the last iteration, None until an iteration has run."""
        return self._error

    @property
    @abstractmethod
    def method(self):
        """The model being trained."""

    @property
    @abstractmethod
    def can_continue(self):
        """Whether a paused trainer can resume from its own state."""

    @abstractmethod
    def iteration(self):
        """Perform one training iteration."""

    @abstractmethod
    def pause(self):
        """Pause training and return a continuation token, or None."""

    @abstractmethod
    def resume(self, state):
        """Resume training from a continuation token."""

    def finish_training(self):
        """Called once by the host loop when training stops."""
        self.is_training_done = True


class TrainInstar(BasicTraining):
    """
    Instar trainer for a Counter-Propagation Network

    The network's `weights_input_to_instar` tensor is updated in place; the trainer never
    copies it.

    Args:
        network (CPN): Network to train
        training: Training pairs; only the input of each pair is used
        learning_rate (float): Fraction of the distance the winner moves toward each exemplar
        init_weights (bool): Seed instar unit i with the input of training element i on the
            first iteration. Requires exactly one training element per instar unit.
    """

    def __init__(self, network, training, learning_rate, init_weights):
        super(TrainInstar, self).__init__(training)
        self.network = network
        self._learning_rate = learning_rate
        self._must_init = init_weights

    @classmethod
    def from_config(cls, network, training, config):
        """Build a trainer from an InstarConfig."""
        return cls(network, training, config.learning_rate, config.init_weights)

    @property
    def method(self):
        return self.network

    @property
    def can_continue(self):
        return False

    @property
    def learning_rate(self):
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, value):
        self._learning_rate = value

    @property
    def must_init(self):
        return self._must_init

    def _exemplar(self, pair):
        weights = self.network.weights_input_to_instar
        x = torch.as_tensor(pair[0], dtype=weights.dtype, device=weights.device).reshape(-1)
        if x.numel() != self.network.input_count:
            raise ShapeMismatchError(self.network.input_count, x.numel())
        return x

    def _init_weights(self):
        """Use each training element's input as the weight column of one instar unit."""
        if len(self.training) != self.network.instar_count:
            raise ConfigurationMismatchError(len(self.training), self.network.instar_count)

        # Validate every exemplar before the first column is written
        exemplars = [self._exemplar(pair) for pair in self.training]

        weights = self.network.weights_input_to_instar
        with torch.no_grad():
            for i, x in enumerate(exemplars):
                weights[:, i] = x

        self._must_init = False
        logger.info(f"Seeded {len(exemplars)} instar units from the training data")

    def iteration(self):
        if self._must_init:
            self._init_weights()

        weights = self.network.weights_input_to_instar
        learning_rate = float(self._learning_rate)
        worst_distance = float('-inf')

        with torch.no_grad():
            for pair in self.training:
                x = self._exemplar(pair)

                winner = index_of_largest(self.network.compute_instar(x))
                column = weights[:, winner]

                distance = torch.sqrt(torch.sum((x - column) ** 2)).item()
                if distance > worst_distance:
                    worst_distance = distance

                # w += lr * (x - w), exact at lr == 0 and lr == 1
                column.lerp_(x, learning_rate)

        self._error = worst_distance
        self.iteration_number += 1
        logger.debug(f"Iteration {self.iteration_number}: worst distance {worst_distance:.6f}")

    def pause(self):
        return None

    def resume(self, state):
        pass


def train_to_error(trainer, target_error, max_iterations=None, show_progress=True):
    """
    Run a trainer until its error falls to a target

    Args:
        trainer (BasicTraining): Trainer to drive
        target_error (float): Stop once `trainer.error <= target_error`
        max_iterations (int, optional): Stop after this many iterations. Defaults to None (no cap).
        show_progress (bool, optional): Display a progress bar. Defaults to True.

    Returns:
        list: Error after each iteration
    """
    if max_iterations is not None and max_iterations < 0:
        raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

    errors = []
    reached_target = False

    with tqdm(total=max_iterations, desc="Training", disable=not show_progress) as pbar:
        while max_iterations is None or len(errors) < max_iterations:
            trainer.iteration()
            errors.append(trainer.error)

            pbar.update(1)
            pbar.set_postfix({"error": trainer.error})

            if trainer.error <= target_error:
                reached_target = True
                break

    if reached_target:
        logger.info(f"Reached error {errors[-1]:.6f} after {len(errors)} iterations")
    else:
        logger.info(f"Stopped after {len(errors)} iterations without reaching error {target_error}")

    trainer.finish_training()
    return errors
