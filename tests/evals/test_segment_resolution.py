"""
EVAL: Ambiguous segment ids.

Agent ids are ``segmentId_ordinal`` while segment ids may contain
underscores themselves.
"""

import warnings

import pytest

from pyconjoint import Alternative, Response, SegmentResolutionWarning, expand_segments
from pyconjoint.algorithms.shares import compute_shares, resolve_segments


@pytest.fixture
def two_alternatives():
    return [Alternative("A"), Alternative("B")]


class TestNestedSegmentIds:
    def test_parse_strips_only_the_ordinal(self, nested_segments):
        responses = [Response("t0", "loyal_1", "A"), Response("t1", "loyal_fans_2", "B")]
        with pytest.warns(SegmentResolutionWarning):
            assert resolve_segments(responses, nested_segments) == ["loyal", "loyal_fans"]

    def test_single_warning_per_call(self, nested_segments):
        responses = [Response(f"t{i}", "loyal_fans_1", "A") for i in range(5)]
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            resolve_segments(responses, nested_segments)
        assert len([w for w in caught if issubclass(w.category, SegmentResolutionWarning)]) == 1

    def test_agents_resolve_without_warning(self, nested_segments, two_alternatives):
        agents = expand_segments(nested_segments)
        responses = [Response(f"t{i}", a.id, "A") for i, a in enumerate(agents)]
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            shares = compute_shares(responses, two_alternatives, nested_segments, agents)
        assert shares.segment_totals == {"loyal": 2, "loyal_fans": 2}

    def test_segment_id_on_response_overrides_agent_id(self, nested_segments):
        response = Response("t0", "loyal_fans_1", "A", segment_id="loyal")
        assert resolve_segments([response], nested_segments) == ["loyal"]
