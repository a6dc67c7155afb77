"""Reason-code feature importance.

Counts how often each schema feature is cited as a reason and scales the
counts by the largest count in the same scope. The result is a relative
citation frequency (the top feature is 1.0), not an effect size.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pyconjoint.algorithms.shares import resolve_segments
from pyconjoint.core.result import FeatureImportanceResult
from pyconjoint.core.schema import Agent, Feature, Response, Segment

logger = logging.getLogger(__name__)


def _max_normalized(counts: dict[str, int]) -> dict[str, float]:
    peak = max(max(counts.values(), default=0), 1)
    return {key: count / peak for key, count in counts.items()}


def compute_feature_importance(
    responses: Sequence[Response],
    features: Sequence[Feature],
    segments: Sequence[Segment] = (),
    agents: Sequence[Agent] | None = None,
    segment_ids: Sequence[str | None] | None = None,
) -> FeatureImportanceResult:
    """
    Compute citation-frequency importance per feature, overall and per segment.

    Reason codes that are not schema feature keys are ignored.

    Args:
        responses: Recorded responses
        features: Feature schema
        segments: Declared segments
        agents: Run agents, used for segment resolution
        segment_ids: Pre-resolved segment per response

    Returns:
        FeatureImportanceResult; values are count / max(scope max, 1)
    """
    if segment_ids is None:
        segment_ids = resolve_segments(responses, segments, agents)

    keys = [f.key for f in features]
    overall = {key: 0 for key in keys}
    by_segment = {s.segment_id: {key: 0 for key in keys} for s in segments}

    for response, seg_id in zip(responses, segment_ids):
        seg_counts = by_segment.get(seg_id) if seg_id is not None else None
        for code in response.reason_codes:
            if code not in overall:
                continue
            overall[code] += 1
            if seg_counts is not None:
                seg_counts[code] += 1

    return FeatureImportanceResult(
        overall=_max_normalized(overall),
        by_segment={seg_id: _max_normalized(c) for seg_id, c in by_segment.items()},
        overall_counts=dict(overall),
    )
