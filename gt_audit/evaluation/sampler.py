"""
Deterministic image sampling for large datasets.
"""

from typing import List, Sequence

import numpy as np


def sample(image_ids: Sequence[str], size: int, seed: int) -> List[str]:
    """
    Select a reproducible subset of image ids.

    Runs a seeded Fisher-Yates partial shuffle over a copy of the ids and
    returns the first ``size`` of them. Swap indices are drawn from the raw
    64-bit output of numpy's PCG64 bit generator. numpy keeps that stream
    fixed across releases, unlike the ``Generator`` distribution methods, so
    the same ids, size and seed give the same output with any numpy version.

    Args:
        image_ids: Candidate ids, in a stable order
        size: Number of ids to keep (0 keeps all)
        seed: Random seed

    Returns:
        Sampled ids; all ids unchanged when size is 0 or covers the list
    """
    if size < 0:
        raise ValueError(f"Sample size must be non-negative, got {size}")

    ids = list(image_ids)
    n = len(ids)
    if size == 0 or size >= n:
        return ids

    bit_generator = np.random.PCG64(seed)
    for i in range(size):
        j = i + int(bit_generator.random_raw()) % (n - i)
        ids[i], ids[j] = ids[j], ids[i]
    return ids[:size]
