"""
Configuration for instar training.

Both the examples and the tests build trainers from these objects so that default
hyperparameters live in one place.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InstarConfig:
    """Configuration for the instar training engine.

    Attributes:
        learning_rate: Fraction of the distance the winning unit moves toward
                       each exemplar. Values outside (0, 1] are accepted as-is.
        init_weights: Seed one instar unit from each training exemplar before
                      the first iteration. Requires exactly one exemplar per unit.
    """
    learning_rate: float = 0.1
    init_weights: bool = True


@dataclass(frozen=True)
class TrainingConfig:
    """Configuration for the host training loop.

    Attributes:
        target_error: Stop once the worst quantization distance is at or below this.
        max_iterations: Hard cap on the number of iterations (None = no cap).
        show_progress: Display a tqdm progress bar.
    """
    target_error: float = 0.01
    max_iterations: Optional[int] = 1000
    show_progress: bool = True


# Preset configurations
DEFAULT_INSTAR = InstarConfig()
DEFAULT_TRAINING = TrainingConfig()
