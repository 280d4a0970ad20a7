"""Resampling of amplitude sequences to an exact point count."""

import numpy as np
from typing import Sequence, Union

ArrayLike = Union[Sequence[float], np.ndarray]


def bucket_edges(length: int, target_count: int) -> np.ndarray:
    """
    Bucket boundaries for reducing ``length`` values to ``target_count`` points.

    Boundaries are computed in floating point and truncated per bucket, so
    bucket sizes may differ by one. The last edge is always ``length``.

    Returns:
        Integer array of ``target_count + 1`` edges.
    """
    if length <= 0 or target_count <= 0:
        return np.zeros(1, dtype=np.int64)

    per_bucket = length / target_count
    edges = (np.arange(target_count + 1) * per_bucket).astype(np.int64)
    edges = np.minimum(edges, length)
    edges[-1] = length
    return edges


def resample(values: ArrayLike, target_count: int) -> np.ndarray:
    """
    Resample ``values`` to exactly ``target_count`` points.

    Upsampling interpolates linearly between neighbours. Downsampling keeps
    the peak absolute value of each bucket so transients stay visible when
    zoomed out.

    Args:
        values: Input amplitudes
        target_count: Number of output points

    Returns:
        float64 array of length ``target_count`` (empty for empty input or a
        non-positive target). When the length already matches, the input is
        returned unchanged.
    """
    if isinstance(values, np.ndarray) and len(values) == target_count:
        return values

    data = np.asarray(values, dtype=np.float64)
    n = len(data)

    if n == 0 or target_count <= 0:
        return np.zeros(0, dtype=np.float64)
    if n == target_count:
        return data

    if n < target_count:
        positions = np.arange(target_count) * (n - 1) / max(1, target_count - 1)
        return np.interp(positions, np.arange(n), data)

    # Each bucket holds at least one value here, so the edges are strictly
    # increasing and reduceat never sees an empty slice.
    edges = bucket_edges(n, target_count)
    return np.maximum.reduceat(np.abs(data), edges[:-1])
