"""Isolation forest over a numpy feature matrix.

Trees split on a uniformly random feature at a uniformly random threshold in
``[min, max)`` of the current partition. Points that are isolated after few
splits are anomalous.
"""

import math
from dataclasses import dataclass

import numpy as np


EULER_GAMMA = 0.5772156649


def expected_path_length(n: int) -> float:
    """Average path length of an unsuccessful BST search over ``n`` points.

    ``c(n) = 2(ln(n-1) + gamma) - 2(n-1)/n`` for n > 1, else 0.
    """
    if n <= 1:
        return 0.0
    return 2 * (math.log(n - 1) + EULER_GAMMA) - (2 * (n - 1)) / n


@dataclass(frozen=True)
class Node:
    """Tree node; leaves have ``feature == -1`` and no children."""

    feature: int
    threshold: float
    size: int
    left: 'Node | None' = None
    right: 'Node | None' = None

    @property
    def is_leaf(self) -> bool:
        return self.feature == -1


def build_tree(X: np.ndarray, rng: np.random.Generator, max_depth: int, depth: int = 0) -> Node:
    """Grow one isolation tree over the rows of ``X``.

    Stops when a partition holds at most one row or ``depth`` reaches
    ``max_depth``. A constant column still splits; every row then goes right.
    """
    X = np.asarray(X, dtype=float)
    n_rows = X.shape[0]
    if n_rows <= 1 or depth >= max_depth:
        return Node(feature=-1, threshold=0.0, size=n_rows)

    feature = int(rng.integers(X.shape[1]))
    values = X[:, feature]
    threshold = float(rng.uniform(values.min(), values.max()))
    mask = values < threshold

    return Node(
        feature=feature,
        threshold=threshold,
        size=n_rows,
        left=build_tree(X[mask], rng, max_depth, depth + 1),
        right=build_tree(X[~mask], rng, max_depth, depth + 1),
    )


def grow_forest(X: np.ndarray, n_estimators: int, max_depth: int, rng: np.random.Generator) -> tuple[Node, ...]:
    return tuple(build_tree(X, rng, max_depth) for _ in range(n_estimators))


def path_length(row, root: Node) -> float:
    """Edges walked to reach a leaf plus ``c(leaf.size)`` for the unbuilt subtree."""
    node = root
    depth = 0
    while not node.is_leaf:
        node = node.left if row[node.feature] < node.threshold else node.right
        depth += 1
    return depth + expected_path_length(node.size)


def path_lengths(X: np.ndarray, node: Node, depth: int = 0) -> np.ndarray:
    """``path_length`` for every row of ``X``, routing rows down the tree with masks."""
    if node.is_leaf:
        return np.full(X.shape[0], depth + expected_path_length(node.size))
    lengths = np.empty(X.shape[0])
    mask = X[:, node.feature] < node.threshold
    lengths[mask] = path_lengths(X[mask], node.left, depth + 1)
    lengths[~mask] = path_lengths(X[~mask], node.right, depth + 1)
    return lengths


def score_rows(X: np.ndarray, trees: tuple[Node, ...], n_samples: int) -> np.ndarray:
    """Anomaly score per row: ``-mean(2 ** (-h(x) / c(n)))`` over the trees.

    ``n_samples`` is the number of rows the trees were grown on. Lower scores
    are more anomalous, following the ``score_samples`` convention of
    scikit-learn.
    """
    X = np.asarray(X, dtype=float)
    if not trees:
        return np.zeros(X.shape[0])
    # c(1) is 0; a single-row forest has every path at depth 0
    normalizer = expected_path_length(n_samples) or 1.0
    depths = np.array([path_lengths(X, tree) for tree in trees])
    return -np.mean(2.0 ** (-depths / normalizer), axis=0)
