"""Pytest fixtures for PyConjoint tests."""

import numpy as np
import pytest

from pyconjoint import (
    Agent,
    Alternative,
    Experiment,
    Feature,
    Response,
    Segment,
    TaskPlan,
    Traits,
    expand_segments,
)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def features() -> list[Feature]:
    """Price, quality, brand and an eco flag."""
    return [
        Feature(key="price", type="continuous", min=0, max=300, unit="USD"),
        Feature(key="quality", type="continuous", min=0, max=10),
        Feature(key="brand", type="categorical", categories=("Acme", "Zeta")),
        Feature(key="eco", type="binary"),
    ]


@pytest.fixture
def alternatives() -> list[Alternative]:
    return [
        Alternative("A", "Alpha", {"price": 100, "quality": 6, "brand": "Acme", "eco": True}),
        Alternative("B", "Bravo", {"price": 200, "quality": 8, "brand": "Zeta", "eco": False}),
        Alternative("C", "Charlie", {"price": 150, "quality": 5, "brand": "Acme", "eco": False}),
        Alternative("D", "Delta", {"price": 250, "quality": 9, "brand": "Zeta", "eco": True}),
    ]


@pytest.fixture
def segments() -> list[Segment]:
    """Two segments; the second id contains an underscore on purpose."""
    return [
        Segment(
            segment_id="budget",
            label="Budget",
            count=3,
            traits=Traits(price_sensitivity=0.9, risk_tolerance=0.2, consistency=0.8),
        ),
        Segment(
            segment_id="premium_buyers",
            label="Premium",
            count=2,
            traits=Traits(price_sensitivity=0.1, risk_tolerance=0.8, consistency=0.8),
        ),
    ]


@pytest.fixture
def agents(segments) -> list[Agent]:
    return expand_segments(segments)


@pytest.fixture
def noiseless_agent() -> Agent:
    """Fully price-sensitive agent whose choices carry no noise."""
    return Agent(
        id="strict_1",
        segment_id="strict",
        traits=Traits(price_sensitivity=1.0, risk_tolerance=0.5, consistency=1.0),
    )


@pytest.fixture
def experiment(features, alternatives, segments) -> Experiment:
    return Experiment(
        features=features,
        alternatives=alternatives,
        segments=segments,
        task_plan=TaskPlan(tasks_per_agent=8, include_holdouts=2, include_repeats=2),
    )


@pytest.fixture
def hand_responses() -> list[Response]:
    """Six hand-written responses across both segments, one NONE."""
    return [
        Response("t0", "budget_1", "A", 0.9, ("price",), segment_id="budget"),
        Response("t1", "budget_2", "A", 0.8, ("price", "eco"), segment_id="budget"),
        Response("t2", "budget_3", "C", 0.6, ("price",), segment_id="budget"),
        Response("t3", "premium_buyers_1", "B", 0.7, ("quality", "brand"), segment_id="premium_buyers"),
        Response("t4", "premium_buyers_2", "D", None, ("quality",), segment_id="premium_buyers"),
        Response("t5", "premium_buyers_2", "NONE", 0.5, (), segment_id="premium_buyers"),
    ]


def make_mnl_responses(
    alternatives: list[Alternative],
    utilities: dict[str, float],
    n: int,
    rng: np.random.Generator,
) -> list[Response]:
    """Draw n responses from an MNL with the given alternative utilities."""
    ids = [a.id for a in alternatives]
    u = np.array([utilities[i] for i in ids])
    p = np.exp(u - u.max())
    p /= p.sum()
    draws = rng.choice(len(ids), size=n, p=p)
    return [
        Response(task_id=f"t{i}", agent_id=f"seg_{i}", chosen=ids[d], confidence=0.7)
        for i, d in enumerate(draws)
    ]


@pytest.fixture
def mnl_responses():
    """Factory fixture wrapping make_mnl_responses."""
    return make_mnl_responses
