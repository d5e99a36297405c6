"""
Tests for instar training of the Counter-Propagation Network.
"""

import math

import torch
import pytest
import sys
import os

# Add parent directory to path to import cpn
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cpn.model import CPN
from cpn.data import BasicDataSet
from cpn.config import InstarConfig, TrainingConfig, DEFAULT_INSTAR, DEFAULT_TRAINING
from cpn.errors import ConfigurationMismatchError, ShapeMismatchError
from cpn.training import TrainInstar, train_to_error


def make_network(columns):
    """Build a CPN whose instar weight columns are the given vectors"""
    weights = torch.tensor(columns, dtype=torch.float64).T
    network = CPN(weights.shape[0], weights.shape[1])
    with torch.no_grad():
        network.weights_input_to_instar.copy_(weights)
    return network


def column(network, i):
    return network.weights_input_to_instar[:, i]


def test_init_weights_from_training_data():
    """Test seeding one instar unit per training element"""
    inputs = [[0.2, 0.4, 0.6], [1.0, -1.0, 0.5], [0.0, 0.3, 0.9]]
    network = CPN(input_count=3, instar_count=3)
    train = TrainInstar(network, BasicDataSet(inputs), learning_rate=0.5, init_weights=True)

    assert train.must_init
    train._init_weights()
    assert not train.must_init

    for i, x in enumerate(inputs):
        assert torch.equal(column(network, i), torch.tensor(x, dtype=torch.float64))


def test_xor_scenario():
    """Test the two-unit scenario: seeded weights already match the data"""
    network = CPN(input_count=2, instar_count=2)
    data = BasicDataSet([[1.0, 0.0], [0.0, 1.0]], [[1.0], [0.0]])
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=True)

    train.iteration()

    assert torch.equal(column(network, 0), torch.tensor([1.0, 0.0], dtype=torch.float64))
    assert torch.equal(column(network, 1), torch.tensor([0.0, 1.0], dtype=torch.float64))
    assert train.error == 0.0
    assert not train.must_init


def test_init_mismatch_is_rejected():
    """Test that a training set with the wrong size cannot seed the weights"""
    network = make_network([[0.5, 0.5], [0.1, 0.9]])
    before = network.weights_input_to_instar.clone()
    data = BasicDataSet([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=True)

    with pytest.raises(ConfigurationMismatchError) as excinfo:
        train.iteration()

    assert excinfo.value.training_count == 3
    assert excinfo.value.instar_count == 2
    assert torch.equal(network.weights_input_to_instar, before)
    assert train.must_init
    assert train.error is None

    # Still unusable on retry
    with pytest.raises(ConfigurationMismatchError):
        train.iteration()


def test_init_validates_every_exemplar_before_writing():
    """Test that a malformed exemplar aborts seeding with no column written"""
    network = CPN(input_count=2, instar_count=2)
    before = network.weights_input_to_instar.clone()
    data = [([1.0, 0.0], None), ([0.0, 1.0, 2.0], None)]
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=True)

    with pytest.raises(ShapeMismatchError):
        train.iteration()

    assert torch.equal(network.weights_input_to_instar, before)
    assert train.must_init


def test_shape_mismatch_during_iteration():
    """Test that a malformed exemplar fails the iteration"""
    network = make_network([[1.0, 0.0], [0.0, 1.0]])
    data = [([1.0, 0.0], None), ([1.0], None)]
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=False)

    with pytest.raises(ShapeMismatchError) as excinfo:
        train.iteration()

    assert excinfo.value.expected == 2
    assert excinfo.value.actual == 1


def test_learning_rate_zero_leaves_weights_unchanged():
    """Test that a zero learning rate only measures the distance"""
    network = make_network([[0.3, 0.1], [0.2, 0.9]])
    before = network.weights_input_to_instar.clone()
    data = BasicDataSet([[1.0, 0.0], [0.0, 1.0], [0.5, 0.5]])
    train = TrainInstar(network, data, learning_rate=0.0, init_weights=False)

    train.iteration()

    assert torch.equal(network.weights_input_to_instar, before)

    # [1, 0] -> unit 0 (0.3 > 0.2), [0, 1] -> unit 1, [0.5, 0.5] -> unit 1 (0.55 > 0.2)
    expected = max(
        math.dist([1.0, 0.0], [0.3, 0.1]),
        math.dist([0.0, 1.0], [0.2, 0.9]),
        math.dist([0.5, 0.5], [0.2, 0.9]),
    )
    assert train.error == pytest.approx(expected)


def test_learning_rate_one_moves_winner_onto_exemplar():
    """Test that a unit learning rate copies the exemplar into the winner"""
    network = make_network([[0.1, 0.2], [0.9, 0.8]])
    train = TrainInstar(network, [([0.3, 0.7], None)], learning_rate=1.0, init_weights=False)

    train.iteration()

    assert torch.equal(column(network, 1), torch.tensor([0.3, 0.7], dtype=torch.float64))
    assert torch.equal(column(network, 0), torch.tensor([0.1, 0.2], dtype=torch.float64))


def test_only_winner_is_updated():
    """Test the update rule on the winning column only"""
    network = make_network([[0.2, 0.2], [1.0, 0.0]])
    train = TrainInstar(network, [([2.0, 0.0], None)], learning_rate=0.25, init_weights=False)

    train.iteration()

    # Winner is unit 1: w += 0.25 * ([2, 0] - [1, 0])
    assert torch.allclose(column(network, 1), torch.tensor([1.25, 0.0], dtype=torch.float64))
    assert torch.equal(column(network, 0), torch.tensor([0.2, 0.2], dtype=torch.float64))
    assert train.error == pytest.approx(1.0)


def test_tied_activations_pick_lowest_index():
    """Test that a tie at the maximum updates the first tied unit"""
    network = make_network([[1.0, 0.0], [0.0, 1.0], [1.0, 0.0]])
    train = TrainInstar(network, [([1.0, 1.0], None)], learning_rate=0.5, init_weights=False)

    train.iteration()

    assert torch.allclose(column(network, 0), torch.tensor([1.0, 0.5], dtype=torch.float64))
    assert torch.equal(column(network, 1), torch.tensor([0.0, 1.0], dtype=torch.float64))
    assert torch.equal(column(network, 2), torch.tensor([1.0, 0.0], dtype=torch.float64))


def test_updates_are_visible_within_a_pass():
    """Test that each exemplar sees the updates made by the exemplars before it"""
    # With the starting weights, [0, 1] would also go to unit 0 (0.5 > 0.4).
    # After [1, 0] pulls unit 0 onto itself, [0, 1] goes to unit 1 instead.
    network = make_network([[0.5, 0.5], [0.0, 0.4]])
    data = BasicDataSet([[1.0, 0.0], [0.0, 1.0]])
    train = TrainInstar(network, data, learning_rate=1.0, init_weights=False)

    train.iteration()

    assert torch.equal(column(network, 0), torch.tensor([1.0, 0.0], dtype=torch.float64))
    assert torch.equal(column(network, 1), torch.tensor([0.0, 1.0], dtype=torch.float64))


def test_error_is_worst_distance_not_average():
    """Test that the error is the maximum distance over the pass"""
    network = make_network([[1.0, 0.0], [0.0, 1.0]])
    data = BasicDataSet([[1.0, 0.0], [0.0, 3.0], [2.0, 0.0]])
    train = TrainInstar(network, data, learning_rate=0.0, init_weights=False)

    train.iteration()

    # Distances 0, 2, 1
    assert train.error == pytest.approx(2.0)


def test_learning_rate_change_takes_effect_next_iteration():
    """Test that learning_rate is live configuration"""
    network = make_network([[0.0, 0.0], [5.0, 5.0]])
    data = [([1.0, 1.0], None)]
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=False)

    train.iteration()
    assert torch.allclose(column(network, 1), torch.tensor([3.0, 3.0], dtype=torch.float64))

    train.learning_rate = 0.0
    assert train.learning_rate == 0.0
    after_first = network.weights_input_to_instar.clone()

    train.iteration()
    assert torch.equal(network.weights_input_to_instar, after_first)
    assert train.error == pytest.approx(math.dist([1.0, 1.0], [3.0, 3.0]))


def test_trainer_contract():
    """Test the generic trainer surface"""
    network = CPN(input_count=2, instar_count=2)
    data = BasicDataSet([[1.0, 0.0], [0.0, 1.0]])
    train = TrainInstar(network, data, learning_rate=0.3, init_weights=True)

    assert train.method is network
    assert train.can_continue is False
    assert train.error is None
    assert train.iteration_number == 0

    assert train.pause() is None
    train.resume(None)
    train.resume("anything")

    train.iteration()
    train.iteration()
    assert train.iteration_number == 2
    assert train.error is not None


def test_weights_are_updated_in_place():
    """Test that training mutates the network's own weight tensor"""
    network = CPN(input_count=2, instar_count=2)
    weights = network.weights_input_to_instar
    data = BasicDataSet([[1.0, 2.0], [3.0, 4.0]])
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=True)

    train.iteration()

    assert network.weights_input_to_instar is weights
    assert torch.equal(weights[:, 0], torch.tensor([1.0, 2.0], dtype=torch.float64))


def test_empty_training_set():
    """Test that an empty pass reports negative infinity"""
    network = make_network([[1.0, 0.0]])
    train = TrainInstar(network, [], learning_rate=0.5, init_weights=False)

    train.iteration()

    assert train.error == float('-inf')

    # Seeding needs one element per unit
    train = TrainInstar(network, [], learning_rate=0.5, init_weights=True)
    with pytest.raises(ConfigurationMismatchError):
        train.iteration()


def test_from_config():
    """Test building a trainer from InstarConfig"""
    network = CPN(input_count=2, instar_count=2)
    data = BasicDataSet([[1.0, 0.0], [0.0, 1.0]])
    config = InstarConfig(learning_rate=0.25, init_weights=False)

    train = TrainInstar.from_config(network, data, config)

    assert train.learning_rate == 0.25
    assert not train.must_init


def test_train_to_error_reaches_target():
    """Test the host loop stops once the target error is reached"""
    network = CPN(input_count=2, instar_count=4)
    data = BasicDataSet([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    train = TrainInstar(network, data, learning_rate=0.5, init_weights=True)

    errors = train_to_error(train, target_error=0.01, max_iterations=100, show_progress=False)

    assert len(errors) >= 1
    assert errors[-1] <= 0.01
    assert train.iteration_number == len(errors)
    assert train.is_training_done


def test_train_to_error_respects_max_iterations():
    """Test the host loop stops at the iteration cap"""
    network = make_network([[0.0, 0.0], [0.0, 1.0]])
    data = BasicDataSet([[5.0, 0.0], [0.0, 5.0]])
    train = TrainInstar(network, data, learning_rate=0.0, init_weights=False)

    errors = train_to_error(train, target_error=0.01, max_iterations=5, show_progress=False)

    assert len(errors) == 5
    assert all(e == errors[0] for e in errors)
    assert train.is_training_done

    with pytest.raises(ValueError):
        train_to_error(train, target_error=0.01, max_iterations=-1, show_progress=False)


def test_converges_toward_cluster_centers():
    """Test that repeated iterations shrink the worst distance"""
    torch.manual_seed(0)
    centers = torch.tensor([[5.0, 0.0], [0.0, 5.0]], dtype=torch.float64)
    inputs = torch.cat([c + 0.1 * torch.randn(20, 2, dtype=torch.float64) for c in centers])

    network = make_network([[1.0, 0.0], [0.0, 1.0]])
    train = TrainInstar(network, BasicDataSet(inputs), learning_rate=0.1, init_weights=False)

    errors = train_to_error(train, target_error=0.0, max_iterations=50, show_progress=False)

    assert errors[-1] < errors[0]
    assert errors[-1] < 1.0


def test_config_presets():
    """Test the default configurations"""
    assert DEFAULT_INSTAR == InstarConfig(learning_rate=0.1, init_weights=True)
    assert DEFAULT_TRAINING == TrainingConfig(target_error=0.01, max_iterations=1000, show_progress=True)

    with pytest.raises(AttributeError):
        DEFAULT_INSTAR.learning_rate = 0.5
