"""
Descriptor distances and FAISS-backed gallery search.

Two metrics are supported:
    l1  — sum of absolute per-pixel differences over every channel
    l2  — per-channel Euclidean distance, averaged over channels

For a whole gallery the distances are computed with exhaustive FAISS
flat indexes and written back in gallery order, so the caller can run
its own ordered scan for the best match.
"""

import logging
from typing import Sequence

import faiss
import numpy as np

logger = logging.getLogger(__name__)


def _check_metric(metric: str) -> None:
    if metric not in ("l1", "l2"):
        raise ValueError(f"Unknown metric '{metric}', expected 'l1' or 'l2'")


def _check_shapes(query: np.ndarray, descriptors: Sequence[np.ndarray]) -> None:
    for i, descriptor in enumerate(descriptors):
        if descriptor.shape != query.shape:
            raise ValueError(
                f"Descriptor shape {descriptor.shape} at gallery index {i} "
                f"doesn't match query shape {query.shape}"
            )


def l1_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Sum of absolute element-wise differences."""
    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.abs(diff).sum())


def l2_distance(a: np.ndarray, b: np.ndarray) -> float:
    """
    Euclidean distance per channel, averaged over channels.

    Inputs are (C, H, W) descriptors; for C = 1 this is the plain
    root-sum-of-squares of the differences.
    """
    diff = a.astype(np.float64) - b.astype(np.float64)
    per_channel = np.sqrt(np.square(diff).reshape(len(diff), -1).sum(axis=1))
    return float(per_channel.mean())


def pairwise_distance(a: np.ndarray, b: np.ndarray, metric: str = "l1") -> float:
    """
    Distance between two descriptors of identical shape.

    Raises:
        ValueError: On shape mismatch or unknown metric.
    """
    _check_metric(metric)
    _check_shapes(a, [b])
    if metric == "l1":
        return l1_distance(a, b)
    return l2_distance(a, b)


def _search_flat_index(index: faiss.Index,
                       gallery_vectors: np.ndarray,
                       query_vector: np.ndarray) -> np.ndarray:
    """
    Exhaustive search returning one distance per gallery row, in row order.
    """
    index.add(np.ascontiguousarray(gallery_vectors, dtype=np.float32))

    query = np.ascontiguousarray(query_vector, dtype=np.float32).reshape(1, -1)
    k = index.ntotal
    distances, indices = index.search(query, k)

    ordered = np.empty(k, dtype=np.float64)
    ordered[indices[0]] = distances[0]
    return ordered


def gallery_distances(query: np.ndarray,
                      descriptors: Sequence[np.ndarray],
                      metric: str = "l1") -> np.ndarray:
    """
    Compute the distance from a query to every gallery descriptor.

    Args:
        query: (C, H, W) query descriptor.
        descriptors: Gallery descriptors, each with the query's shape.
        metric: "l1" or "l2".

    Returns:
        float64 array of length len(descriptors), in gallery order.

    Raises:
        ValueError: On shape mismatch or unknown metric.
    """
    _check_metric(metric)
    if len(descriptors) == 0:
        return np.empty(0, dtype=np.float64)
    _check_shapes(query, descriptors)

    channels = query.shape[0]
    gallery = np.stack(descriptors).reshape(len(descriptors), channels, -1)
    query_flat = query.reshape(channels, -1)
    logger.debug(
        f"Computing {metric} distances: {len(gallery)} entries, "
        f"{channels} channel(s)"
    )

    if metric == "l1":
        dim = gallery.shape[1] * gallery.shape[2]
        index = faiss.IndexFlat(dim, faiss.METRIC_L1)
        return _search_flat_index(index, gallery.reshape(len(gallery), dim),
                                  query_flat.reshape(-1))

    # l2: compare each channel independently, then average
    total = np.zeros(len(gallery), dtype=np.float64)
    for c in range(channels):
        index = faiss.IndexFlatL2(gallery.shape[2])
        squared = _search_flat_index(index, gallery[:, c], query_flat[c])
        total += np.sqrt(np.maximum(squared, 0.0))
    return total / channels
