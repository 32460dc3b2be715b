"""
Random number generation utilities.

Site generation draws from numpy Generators created here, one per call.
String seeds are hashed so that the same seed always yields the same sites.
"""

import hashlib
from typing import Union

import numpy as np

from ..config import settings

Seed = Union[str, int, None]


def seed_to_int(seed: Union[str, int]) -> int:
    """Turn a string or integer seed into a non-negative integer seed."""
    if isinstance(seed, (int, np.integer)):
        return int(seed) & 0xFFFFFFFFFFFFFFFF
    digest = hashlib.sha256(str(seed).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "little")


def make_rng(seed: Seed = None) -> np.random.Generator:
    """
    Create an independent generator.

    Args:
        seed: String or integer seed, settings.default_seed when None

    Returns:
        numpy Generator
    """
    if seed is None:
        seed = settings.default_seed
    return np.random.default_rng(seed_to_int(seed))

