"""Type aliases and shared constants for PyConjoint."""

from typing import TypeAlias, Union

import numpy as np
from numpy.typing import NDArray

# Matrix types
FloatArray: TypeAlias = NDArray[np.float64]

# Raw feature value as supplied by the collaborator
FeatureValue: TypeAlias = Union[float, int, str, bool]

# Anything accepted where a random source is injectable
RandomSource: TypeAlias = Union[np.random.Generator, int, None]

# Sentinel for the "none of these" choice
NONE_CHOICE = "NONE"

FEATURE_TYPES = ("continuous", "categorical", "binary")


def as_generator(rng: RandomSource = None) -> np.random.Generator:
    """Return a numpy Generator for an injected random source.

    Accepts an existing Generator (returned unchanged, so state is shared
    with the caller), an integer seed, or None for fresh OS entropy.
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)
