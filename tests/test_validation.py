"""Tests for holdout accuracy and repeat consistency."""

import pytest

from pyconjoint import (
    Agent,
    EstimationConfig,
    FeatureEncoder,
    Response,
    Task,
    TaskPlan,
    Traits,
    batch_simulate,
    generate_tasks,
)
from pyconjoint.algorithms.validation import (
    compute_holdout_accuracy,
    compute_repeat_consistency,
    compute_validation,
)


@pytest.fixture
def encoder(features, alternatives):
    return FeatureEncoder(features).fit(alternatives)


@pytest.fixture
def noiseless_run(features, alternatives):
    traits = Traits(price_sensitivity=0.9, risk_tolerance=0.5, consistency=1.0)
    agents = [Agent(f"strict_{i}", "strict", traits) for i in range(1, 11)]
    plan = TaskPlan(tasks_per_agent=10, include_holdouts=2, include_repeats=2)
    tasks = generate_tasks(agents, alternatives, 2, plan, rng=21)
    responses = batch_simulate(tasks, agents, alternatives, features, rng=22)
    return tasks, responses


class TestRepeatConsistency:
    def test_noiseless_population_is_fully_consistent(self, noiseless_run):
        tasks, responses = noiseless_run
        consistency, pairs = compute_repeat_consistency(responses, tasks)
        assert consistency == 1.0
        assert pairs == 20

    def test_mismatch(self):
        tasks = [
            Task("a_task_0", "a", ("A", "B")),
            Task("a_task_1", "a", ("A", "B"), is_repeat_of="a_task_0"),
            Task("a_task_2", "a", ("C", "D")),
            Task("a_task_3", "a", ("C", "D"), is_repeat_of="a_task_2"),
        ]
        responses = [
            Response("a_task_0", "a", "A"),
            Response("a_task_1", "a", "A"),
            Response("a_task_2", "a", "C"),
            Response("a_task_3", "a", "D"),
        ]
        assert compute_repeat_consistency(responses, tasks) == (0.5, 2)

    def test_unanswered_source_not_counted(self):
        tasks = [
            Task("a_task_0", "a", ("A", "B")),
            Task("a_task_1", "a", ("A", "B"), is_repeat_of="a_task_0"),
        ]
        assert compute_repeat_consistency([Response("a_task_1", "a", "A")], tasks) == (None, 0)


class TestHoldoutAccuracy:
    def test_noiseless_population_is_predictable(self, noiseless_run, alternatives, encoder):
        tasks, responses = noiseless_run
        accuracy, n, fit = compute_holdout_accuracy(responses, tasks, alternatives, encoder)
        assert fit.fitted
        assert n > 0
        assert accuracy >= 0.5

    def test_no_holdouts(self, alternatives, encoder):
        tasks = [Task("a_task_0", "a", ("A", "B"))]
        assert compute_holdout_accuracy([Response("a_task_0", "a", "A")], tasks, alternatives, encoder) == (
            None,
            0,
            None,
        )

    def test_too_little_calibration_data(self, alternatives, encoder):
        tasks = [Task("a_task_0", "a", ("A", "B")), Task("a_task_1", "a", ("A", "B"), is_holdout=True)]
        responses = [Response("a_task_0", "a", "A"), Response("a_task_1", "a", "A")]
        accuracy, n, fit = compute_holdout_accuracy(responses, tasks, alternatives, encoder)
        assert accuracy is None
        assert n == 0
        assert not fit.fitted

    def test_shown_choice_set_for_calibration(self, noiseless_run, alternatives, encoder):
        tasks, responses = noiseless_run
        config = EstimationConfig(choice_set="shown")
        accuracy, n, _ = compute_holdout_accuracy(responses, tasks, alternatives, encoder, config)
        assert 0.0 <= accuracy <= 1.0
        assert n > 0


class TestComputeValidation:
    def test_combines_metrics(self, noiseless_run, alternatives, encoder):
        tasks, responses = noiseless_run
        result = compute_validation(responses, tasks, alternatives, encoder)
        assert result.repeat_consistency == 1.0
        assert result.n_repeat_pairs == 20
        assert result.holdout_accuracy is not None

    def test_unmeasurable_metrics_are_none(self, alternatives, encoder):
        result = compute_validation([], [], alternatives, encoder)
        assert result.to_dict() == {
            "holdoutAccuracy": None,
            "repeatConsistency": None,
            "holdoutCount": 0,
            "repeatCount": 0,
        }
