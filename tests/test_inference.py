"""Tests for bootstrap share intervals."""

import numpy as np
import pytest

from pyconjoint import Response
from pyconjoint.algorithms.inference import compute_share_intervals


@pytest.fixture
def balanced():
    return [Response(f"t{i}", "x_1", "A" if i % 2 else "B") for i in range(100)]


class TestShareIntervals:
    def test_bounds_bracket_mean(self, balanced, alternatives):
        ci = compute_share_intervals(balanced, alternatives, rng=7)
        for alt_id in ("A", "B"):
            interval = ci[alt_id]
            assert 0.0 <= interval.lo <= interval.mean <= interval.hi <= 1.0
            assert interval.mean == pytest.approx(0.5, abs=0.05)

    def test_unchosen_alternative_collapses_to_zero(self, balanced, alternatives):
        ci = compute_share_intervals(balanced, alternatives, rng=7)
        assert ci["C"].to_dict() == {"lo": 0.0, "hi": 0.0, "mean": 0.0}

    def test_same_seed_same_intervals(self, balanced, alternatives):
        a = compute_share_intervals(balanced, alternatives, rng=np.random.default_rng(3))
        b = compute_share_intervals(balanced, alternatives, rng=np.random.default_rng(3))
        assert a.to_dict() == b.to_dict()

    def test_wider_level_gives_wider_interval(self, balanced, alternatives):
        narrow = compute_share_intervals(balanced, alternatives, confidence_level=0.5, rng=1)
        wide = compute_share_intervals(balanced, alternatives, confidence_level=0.99, rng=1)
        assert wide["A"].hi - wide["A"].lo >= narrow["A"].hi - narrow["A"].lo

    def test_none_included_only_when_chosen(self, balanced, alternatives):
        assert "NONE" not in compute_share_intervals(balanced, alternatives, rng=0)
        with_none = balanced + [Response("tn", "x_1", "NONE")]
        assert "NONE" in compute_share_intervals(with_none, alternatives, rng=0)

    def test_unknown_choice_in_denominator(self, alternatives):
        responses = [Response("t0", "x_1", "A"), Response("t1", "x_1", "Z")] * 10
        ci = compute_share_intervals(responses, alternatives, rng=0)
        assert ci["A"].mean == pytest.approx(0.5, abs=0.1)
        assert "Z" not in ci

    def test_empty_responses(self, alternatives):
        ci = compute_share_intervals([], alternatives, rng=0)
        assert len(ci) == 0
        assert ci.to_dict() == {}

    def test_zero_resamples(self, balanced, alternatives):
        assert len(compute_share_intervals(balanced, alternatives, n_bootstrap=0)) == 0

    def test_metadata(self, balanced, alternatives):
        ci = compute_share_intervals(balanced, alternatives, n_bootstrap=50, confidence_level=0.8, rng=0)
        assert ci.n_bootstrap == 50
        assert ci.confidence_level == 0.8
        assert "A" in ci
