"""
Pathological fixtures for EVALs.

Each fixture creates data that targets one degenerate case of the pipeline.
"""

import numpy as np
import pytest

from pyconjoint import Alternative, Feature, Response, Segment
from pyconjoint.algorithms.mnl import Observation


# =============================================================================
# DEGENERATE ALTERNATIVE SETS
# =============================================================================


@pytest.fixture
def single_alternative():
    """One alternative - every choice set has size 1."""
    return [Alternative("A", "Alpha", {"price": 100, "quality": 5})]


@pytest.fixture
def constant_price_alternatives():
    """Price has zero variance across alternatives and encodes as 0."""
    return [
        Alternative("A", features={"price": 100, "quality": 2}),
        Alternative("B", features={"price": 100, "quality": 8}),
        Alternative("C", features={"price": 100, "quality": 5}),
    ]


@pytest.fixture
def simple_features():
    return [Feature("price", min=0, max=300, unit="USD"), Feature("quality", min=0, max=10)]


# =============================================================================
# DEGENERATE RESPONSES
# =============================================================================


@pytest.fixture
def all_none_responses():
    """Every respondent opted out."""
    return [Response(f"t{i}", f"s_{i}", "NONE", 0.5) for i in range(10)]


@pytest.fixture
def unanimous_responses():
    """Perfectly separable data: everybody chooses B."""
    return [Response(f"t{i}", f"s_{i}", "B", 0.9, ("quality",)) for i in range(40)]


@pytest.fixture
def nested_segments():
    """Segment ids where one is a prefix of the other."""
    return [Segment("loyal", count=2), Segment("loyal_fans", count=2)]


# =============================================================================
# NUMERICAL FIXTURES
# =============================================================================


@pytest.fixture
def random_observations():
    """Random designs with noise-free choices under a fixed beta."""
    rng = np.random.default_rng(2024)
    beta = np.array([1.0, -2.0, 0.5])
    observations = []
    for _ in range(50):
        design = rng.normal(size=(3, 3))
        observations.append(Observation(design, int(np.argmax(design @ beta))))
    return observations
