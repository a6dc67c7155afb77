"""Choice-driver attribution from reason codes.

Links each chosen alternative to the features cited when it was chosen,
and records which features tend to be cited together.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pyconjoint.core.result import ChoiceDriversResult, DriverCoverage, DriverEntry
from pyconjoint.core.schema import Alternative, Feature, Response

logger = logging.getLogger(__name__)


def compute_choice_drivers(
    responses: Sequence[Response],
    alternatives: Sequence[Alternative],
    features: Sequence[Feature],
    top_n: int = 3,
) -> ChoiceDriversResult:
    """
    Attribute choices to the features cited as reasons.

    Only responses that chose a known alternative qualify. Within a response
    each feature is counted once, and codes that are not schema feature keys
    are ignored.

    Args:
        responses: Recorded responses
        alternatives: Alternatives of the experiment
        features: Feature schema
        top_n: Drivers reported per alternative

    Returns:
        ChoiceDriversResult. ``top_drivers[alt]`` lists up to ``top_n``
        features with count > 0, each with ``share = count / qualifying
        responses``.
    """
    keys = [f.key for f in features]
    key_set = set(keys)
    alt_ids = [a.id for a in alternatives]

    alt_feature_counts = {alt_id: {key: 0 for key in keys} for alt_id in alt_ids}
    alt_choice_counts = {alt_id: 0 for alt_id in alt_ids}
    co_occurrence = {a: {b: 0 for b in keys} for a in keys}

    qualifying = 0
    with_reasons = 0
    for response in responses:
        if response.reason_codes:
            with_reasons += 1
        if response.is_none or response.chosen not in alt_choice_counts:
            continue
        qualifying += 1
        alt_choice_counts[response.chosen] += 1

        cited = [k for k in dict.fromkeys(response.reason_codes) if k in key_set]
        for key in cited:
            alt_feature_counts[response.chosen][key] += 1
        for a in cited:
            for b in cited:
                co_occurrence[a][b] += 1

    heatmap = {}
    top_drivers = {}
    for alt_id, counts in alt_feature_counts.items():
        peak = max(max(counts.values(), default=0), 1)
        heatmap[alt_id] = {key: count / peak for key, count in counts.items()}
        ranked = sorted((kc for kc in counts.items() if kc[1] > 0), key=lambda kc: -kc[1])
        top_drivers[alt_id] = [
            DriverEntry(feature=key, count=count, share=count / max(qualifying, 1))
            for key, count in ranked[:top_n]
        ]

    total = len(responses)
    coverage = DriverCoverage(
        total_responses=total,
        responses_with_reasons=with_reasons,
        coverage_rate=with_reasons / max(total, 1),
    )
    logger.debug("Choice drivers: %d qualifying response(s), coverage %.2f", qualifying, coverage.coverage_rate)

    return ChoiceDriversResult(
        alt_feature_counts=alt_feature_counts,
        alt_choice_counts=alt_choice_counts,
        co_occurrence=co_occurrence,
        heatmap=heatmap,
        top_drivers=top_drivers,
        coverage=coverage,
    )
