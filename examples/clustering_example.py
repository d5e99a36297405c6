"""
Clustering Example for the Counter-Propagation Network

This script generates noisy Gaussian clusters, starts the instar units from random weights,
and trains them until every point is close to its winning unit. The learned weight vectors
end up near the cluster centers.
"""

import logging
import os
import argparse

import numpy as np

# Add parent directory to path to import cpn
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cpn.model import CPN
from cpn.data import BasicDataSet
from cpn.training import TrainInstar, train_to_error
from cpn.utils import (
    compute_quantization_statistics,
    plot_training_curves,
    visualize_instar_weights,
    visualize_clusters
)


def make_clusters(n_clusters=3, points_per_cluster=50, input_count=2, spread=0.2, seed=0):
    """
    Generate points around random cluster centers

    Args:
        n_clusters (int, optional): Number of clusters. Defaults to 3.
        points_per_cluster (int, optional): Points per cluster. Defaults to 50.
        input_count (int, optional): Dimension of each point. Defaults to 2.
        spread (float, optional): Standard deviation around each center. Defaults to 0.2.
        seed (int, optional): Random seed. Defaults to 0.

    Returns:
        tuple: (points, labels, centers)
    """
    rng = np.random.default_rng(seed)
    centers = rng.uniform(1.0, 5.0, size=(n_clusters, input_count))

    points = []
    labels = []
    for i, center in enumerate(centers):
        points.append(center + spread * rng.standard_normal((points_per_cluster, input_count)))
        labels.extend([i] * points_per_cluster)

    points = np.concatenate(points)
    order = rng.permutation(len(points))
    return points[order], np.array(labels)[order], centers


def main():
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='CPN Clustering Example')
    parser.add_argument('--clusters', type=int, default=3, help='Number of clusters and instar units')
    parser.add_argument('--points', type=int, default=50, help='Points per cluster')
    parser.add_argument('--learning-rate', type=float, default=0.05, help='Instar learning rate')
    parser.add_argument('--target-error', type=float, default=0.5, help='Stop at this worst distance')
    parser.add_argument('--max-iterations', type=int, default=200, help='Iteration cap')
    parser.add_argument('--seed', type=int, default=0, help='Random seed')
    parser.add_argument('--output-dir', type=str, default='.', help='Directory for saved figures')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    points, _, centers = make_clusters(n_clusters=args.clusters, points_per_cluster=args.points,
                                       seed=args.seed)
    training = BasicDataSet(points)

    network = CPN(input_count=training.input_size, instar_count=args.clusters)
    network.reset(seed=args.seed)

    # Train from random weights
    train = TrainInstar(network, training, learning_rate=args.learning_rate, init_weights=False)
    errors = train_to_error(train, args.target_error, max_iterations=args.max_iterations)
    print(f"Finished after {len(errors)} iterations, error: {train.error:.6f}")

    stats = compute_quantization_statistics(network, training)
    print(f"Mean distance: {stats['mean']:.6f}, worst distance: {stats['max']:.6f}")
    print(f"Points per unit: {stats['winner_counts'].tolist()}")
    print("Cluster centers:")
    print(np.round(centers, 3))
    print("Instar weights (one row per unit):")
    print(np.round(network.weights_input_to_instar.detach().numpy().T, 3))

    # Visualize results
    os.makedirs(args.output_dir, exist_ok=True)
    plot_training_curves(errors).savefig(os.path.join(args.output_dir, 'clustering_error.png'))
    visualize_instar_weights(network).savefig(os.path.join(args.output_dir, 'clustering_weights.png'))
    visualize_clusters(network, training).savefig(os.path.join(args.output_dir, 'clustering_clusters.png'))
    print(f"Saved visualizations to {args.output_dir}")


if __name__ == '__main__':
    main()
