"""
XOR Example for the Counter-Propagation Network

This script seeds one instar unit from each XOR input pattern, runs instar training until
the worst quantization distance reaches a target, and prints the winning unit for each
pattern. Only the competitive (unsupervised) half of the network is trained; the XOR
ideals are carried in the data set but never read.
"""

import logging
import os
import argparse

import torch

# Add parent directory to path to import cpn
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cpn.model import CPN
from cpn.data import BasicDataSet
from cpn.config import InstarConfig, TrainingConfig
from cpn.training import TrainInstar, train_to_error
from cpn.utils import compute_quantization_statistics, plot_training_curves


XOR_INPUT = [
    [0.0, 0.0],
    [1.0, 0.0],
    [0.0, 1.0],
    [1.0, 1.0],
]

XOR_IDEAL = [
    [0.0],
    [1.0],
    [1.0],
    [0.0],
]


def main():
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='CPN XOR Example')
    parser.add_argument('--learning-rate', type=float, default=0.1, help='Instar learning rate')
    parser.add_argument('--target-error', type=float, default=0.01, help='Stop at this worst distance')
    parser.add_argument('--max-iterations', type=int, default=1000, help='Iteration cap')
    parser.add_argument('--plot', type=str, default=None, help='Save the error curve to this file')
    parser.add_argument('--verbose', action='store_true', help='Log every iteration')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    training = BasicDataSet(XOR_INPUT, XOR_IDEAL)
    network = CPN(input_count=training.input_size, instar_count=len(training))

    instar_config = InstarConfig(learning_rate=args.learning_rate, init_weights=True)
    training_config = TrainingConfig(target_error=args.target_error, max_iterations=args.max_iterations)

    # Train the competitive layer
    train = TrainInstar.from_config(network, training, instar_config)
    errors = train_to_error(train, training_config.target_error,
                            max_iterations=training_config.max_iterations,
                            show_progress=training_config.show_progress)
    print(f"Finished after {len(errors)} iterations, error: {train.error:.6f}")

    # Test the neural network
    print("Neural Network Results:")
    with torch.no_grad():
        for pair in training:
            winner = network.winner(pair.input)
            print(f"{pair.input.tolist()}, winner={winner}, ideal={pair.ideal.tolist()}")

    stats = compute_quantization_statistics(network, training)
    print(f"Mean distance: {stats['mean']:.6f}, worst distance: {stats['max']:.6f}")

    if args.plot:
        fig = plot_training_curves(errors, title='XOR Instar Training Error')
        fig.savefig(args.plot)
        print(f"Saved error curve to {args.plot}")


if __name__ == '__main__':
    main()
