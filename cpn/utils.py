"""
Utilities for Counter-Propagation Networks

This module provides utility functions for visualization, monitoring, and analysis
of the competitive layer of a Counter-Propagation Network.
"""

import torch
import numpy as np
import matplotlib.pyplot as plt


def _winners_and_distances(network, training):
    weights = network.weights_input_to_instar
    inputs = []
    winners = []
    distances = []

    with torch.no_grad():
        for pair in training:
            x = torch.as_tensor(pair[0], dtype=weights.dtype, device=weights.device).reshape(-1)
            winner = network.winner(x)
            inputs.append(x.cpu().numpy())
            winners.append(winner)
            distances.append(torch.linalg.norm(x - weights[:, winner]).item())

    return np.array(inputs), np.array(winners, dtype=int), np.array(distances)


def compute_quantization_statistics(network, training):
    """
    Compute statistics of the distance between each exemplar and its winning unit

    Args:
        network (CPN): Trained network
        training: Training pairs

    Returns:
        dict: Dictionary with distance statistics and the number of exemplars won by each unit
    """
    _, winners, distances = _winners_and_distances(network, training)

    if len(distances) == 0:
        raise ValueError("Cannot compute statistics of an empty training set")

    return {
        'mean': np.mean(distances),
        'std': np.std(distances),
        'min': np.min(distances),
        'max': np.max(distances),
        'median': np.median(distances),
        'winner_counts': np.bincount(winners, minlength=network.instar_count),
    }


def plot_training_curves(errors, title='Instar Training Error'):
    """
    Plot the error of each training iteration

    Args:
        errors (list): List of per-iteration errors
        title (str, optional): Plot title. Defaults to 'Instar Training Error'.

    Returns:
        plt.Figure: Matplotlib figure with plot
    """
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(range(1, len(errors) + 1), errors)
    ax.set_title(title)
    ax.set_xlabel('Iteration')
    ax.set_ylabel('Worst Distance')
    ax.grid(True)
    plt.tight_layout()
    return fig


def visualize_instar_weights(network):
    """
    Visualize the input-to-instar weight matrix as a heat map

    Args:
        network (CPN): Network whose weights to plot

    Returns:
        plt.Figure: Matplotlib figure with visualization
    """
    weights = network.weights_input_to_instar.detach().cpu().numpy()

    fig, ax = plt.subplots(figsize=(max(4, network.instar_count), max(3, network.input_count * 0.5)))
    im = ax.imshow(weights, cmap='viridis', aspect='auto')
    ax.set_xlabel('Instar Unit')
    ax.set_ylabel('Input')
    ax.set_xticks(range(network.instar_count))
    ax.set_yticks(range(network.input_count))
    ax.set_title('Input-to-Instar Weights')
    plt.colorbar(im, ax=ax)

    plt.tight_layout()
    return fig


def visualize_clusters(network, training, n_components=2):
    """
    Visualize exemplars colored by winning unit, with the instar weight vectors overlaid

    Inputs with more than `n_components` dimensions are projected with PCA fitted on the
    exemplars.

    Args:
        network (CPN): Trained network
        training: Training pairs
        n_components (int, optional): Number of plotted dimensions. Defaults to 2.

    Returns:
        plt.Figure: Matplotlib figure with visualization
    """
    from sklearn.decomposition import PCA

    inputs, winners, _ = _winners_and_distances(network, training)
    centers = network.weights_input_to_instar.detach().cpu().numpy().T

    if inputs.shape[1] > n_components:
        pca = PCA(n_components=n_components)
        inputs = pca.fit_transform(inputs)
        centers = pca.transform(centers)
    elif inputs.shape[1] < 2:
        inputs = np.hstack([inputs, np.zeros((len(inputs), 1))])
        centers = np.hstack([centers, np.zeros((len(centers), 1))])

    fig = plt.figure(figsize=(10, 8))

    if n_components == 3 and inputs.shape[1] >= 3:
        ax = fig.add_subplot(111, projection='3d')
        scatter = ax.scatter(inputs[:, 0], inputs[:, 1], inputs[:, 2],
                             c=winners, cmap='tab10', alpha=0.7)
        ax.scatter(centers[:, 0], centers[:, 1], centers[:, 2],
                   c='black', marker='x', s=120, label='Instar weights')
        ax.set_zlabel('Component 3')
    else:
        ax = fig.add_subplot(111)
        scatter = ax.scatter(inputs[:, 0], inputs[:, 1], c=winners, cmap='tab10', alpha=0.7)
        ax.scatter(centers[:, 0], centers[:, 1], c='black', marker='x', s=120, label='Instar weights')
    ax.set_xlabel('Component 1')
    ax.set_ylabel('Component 2')

    # Add legend
    legend = ax.legend(*scatter.legend_elements(), title="Winner", loc='upper left')
    ax.add_artist(legend)
    ax.legend(loc='lower right')

    ax.set_title('Instar Clusters')
    plt.tight_layout()
    return fig
