"""
EVAL: Minimal and empty data.

Every stage must produce a well-formed result when there is nothing or
almost nothing to estimate from.
"""

import warnings

import pytest

from pyconjoint import (
    Agent,
    DataQualityWarning,
    Experiment,
    Response,
    Segment,
    TaskPlan,
    compute_results,
    generate_tasks,
    run_simulation,
)
from pyconjoint.algorithms.drivers import compute_choice_drivers
from pyconjoint.algorithms.inference import compute_share_intervals
from pyconjoint.algorithms.shares import compute_shares


class TestSingleAlternative:
    """EVAL: One alternative cannot form a pairwise task."""

    def test_no_tasks_generated(self, single_alternative):
        with pytest.warns(DataQualityWarning, match="Not enough alternatives"):
            tasks = generate_tasks([Agent("a_1", "a")], single_alternative, 2, TaskPlan(), rng=0)
        assert tasks == []

    def test_results_with_one_alternative(self, single_alternative, simple_features):
        responses = [Response(f"t{i}", f"s_{i}", "A") for i in range(10)]
        summary = compute_results(responses, single_alternative, simple_features, rng=0)
        assert summary.shares.overall == {"A": 1.0}
        # A single-row choice set has zero gradient: beta stays at zero
        assert summary.part_worths.overall.fitted
        assert summary.part_worths.overall.as_dict() == {"price": 0.0, "quality": 0.0}
        assert summary.wtp is None


class TestAllNone:
    """EVAL: Nobody chose an alternative."""

    def test_shares(self, all_none_responses, constant_price_alternatives):
        shares = compute_shares(all_none_responses, constant_price_alternatives)
        assert shares.overall["NONE"] == 1.0
        assert shares.overall["A"] == 0.0

    def test_no_mnl_and_no_drivers(self, all_none_responses, constant_price_alternatives, simple_features):
        summary = compute_results(all_none_responses, constant_price_alternatives, simple_features, rng=0)
        assert not summary.part_worths.overall.fitted
        assert summary.part_worths.overall.n_observations == 0
        assert summary.choice_drivers.top_drivers == {"A": [], "B": [], "C": []}
        assert summary.response_stats.none_rate == 1.0

    def test_interval_for_none(self, all_none_responses, constant_price_alternatives):
        ci = compute_share_intervals(all_none_responses, constant_price_alternatives, rng=0)
        assert ci["NONE"].lo == ci["NONE"].hi == 1.0

    def test_drivers_without_qualifying_responses(self, all_none_responses, constant_price_alternatives, simple_features):
        drivers = compute_choice_drivers(all_none_responses, constant_price_alternatives, simple_features)
        assert drivers.coverage.responses_with_reasons == 0
        assert all(v == 0.0 for row in drivers.heatmap.values() for v in row.values())


class TestEmptyPopulation:
    """EVAL: Segments that create no agents."""

    def test_zero_count_segment(self, constant_price_alternatives, simple_features):
        experiment = Experiment(
            features=simple_features,
            alternatives=constant_price_alternatives,
            segments=[Segment("ghosts", count=0)],
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            run = run_simulation(experiment, rng=0)
        assert run.tasks == ()
        summary = run.results(rng=0)
        assert summary.shares.by_segment["ghosts"] == {"A": 0.0, "B": 0.0, "C": 0.0}
        assert summary.validation.holdout_accuracy is None
        assert summary.validation.repeat_consistency is None

    def test_no_agents(self, constant_price_alternatives):
        assert generate_tasks([], constant_price_alternatives, 2, TaskPlan(), rng=0) == []
