"""Choice shares, segment resolution and response statistics.

Shares are plain frequencies: the fraction of responses choosing each
alternative, overall and within each declared segment. "NONE" appears as a
bucket only when somebody chose it.
"""

from __future__ import annotations

import logging
import warnings
from typing import Sequence

from pyconjoint.core.exceptions import SegmentResolutionWarning
from pyconjoint.core.result import ResponseStats, SharesResult
from pyconjoint.core.schema import Agent, Alternative, Response, Segment
from pyconjoint.core.types import NONE_CHOICE

logger = logging.getLogger(__name__)


# =============================================================================
# SEGMENT RESOLUTION
# =============================================================================


def resolve_segments(
    responses: Sequence[Response],
    segments: Sequence[Segment],
    agents: Sequence[Agent] | None = None,
) -> list[str | None]:
    """
    Resolve the segment of every response.

    Resolution order:
        1. ``response.segment_id`` when set
        2. the agent's ``segment_id`` when ``agents`` are given
        3. the agent id with its trailing ``_<ordinal>`` stripped, accepted
           only if that names a declared segment

    Step 3 emits one SegmentResolutionWarning per call, since segment ids
    containing underscores make the parse ambiguous.

    Returns:
        Segment id per response (None when unresolved), aligned with
        ``responses``
    """
    known = {s.segment_id for s in segments}
    agent_segment = {a.id: a.segment_id for a in agents} if agents else {}

    resolved: list[str | None] = []
    parsed = 0
    for response in responses:
        if response.segment_id is not None:
            resolved.append(response.segment_id)
            continue
        if response.agent_id in agent_segment:
            resolved.append(agent_segment[response.agent_id])
            continue
        candidate = response.agent_id.rsplit("_", 1)[0] if "_" in response.agent_id else None
        if candidate is not None and candidate in known:
            resolved.append(candidate)
            parsed += 1
        else:
            resolved.append(None)

    if parsed:
        warnings.warn(
            f"Segment of {parsed} response(s) was parsed from the agent id. "
            "Pass agents or set Response.segment_id to resolve segments explicitly.",
            SegmentResolutionWarning,
            stacklevel=3,
        )
    unresolved = resolved.count(None)
    if unresolved and segments:
        logger.debug("%d response(s) could not be assigned to a segment", unresolved)
    return resolved


# =============================================================================
# SHARES
# =============================================================================


def _share_map(counts: dict[str, int], total: int) -> dict[str, float]:
    denom = max(total, 1)
    return {
        alt_id: count / denom
        for alt_id, count in counts.items()
        if alt_id != NONE_CHOICE or count > 0
    }


def compute_shares(
    responses: Sequence[Response],
    alternatives: Sequence[Alternative],
    segments: Sequence[Segment] = (),
    agents: Sequence[Agent] | None = None,
    segment_ids: Sequence[str | None] | None = None,
) -> SharesResult:
    """
    Compute overall and per-segment choice shares.

    Every alternative appears in every scope (zero if never chosen). A
    response whose chosen id is unknown is counted in the denominators only.

    Args:
        responses: Recorded responses
        alternatives: Alternatives of the experiment
        segments: Declared segments
        agents: Run agents, used for segment resolution
        segment_ids: Pre-resolved segment per response (skips resolution)

    Returns:
        SharesResult with overall and per-segment shares

    Example:
        >>> shares = compute_shares(responses, alternatives, segments)
        >>> shares.overall
        {'A': 0.62, 'B': 0.38}
    """
    if segment_ids is None:
        segment_ids = resolve_segments(responses, segments, agents)

    def empty_counts() -> dict[str, int]:
        counts = {alt.id: 0 for alt in alternatives}
        counts[NONE_CHOICE] = 0
        return counts

    overall = empty_counts()
    by_segment = {s.segment_id: empty_counts() for s in segments}
    segment_totals = {s.segment_id: 0 for s in segments}

    for response, seg_id in zip(responses, segment_ids):
        if response.chosen in overall:
            overall[response.chosen] += 1
        if seg_id in by_segment:
            segment_totals[seg_id] += 1
            if response.chosen in by_segment[seg_id]:
                by_segment[seg_id][response.chosen] += 1

    return SharesResult(
        overall=_share_map(overall, len(responses)),
        by_segment={
            seg_id: _share_map(counts, segment_totals[seg_id])
            for seg_id, counts in by_segment.items()
        },
        segment_totals=segment_totals,
        total_responses=len(responses),
    )


def compute_response_stats(responses: Sequence[Response]) -> ResponseStats:
    """Total responses, NONE count and rate, and mean confidence (missing = 0)."""
    total = len(responses)
    none_count = sum(1 for r in responses if r.is_none)
    confidence_sum = sum(r.confidence or 0.0 for r in responses)
    return ResponseStats(
        total_responses=total,
        none_count=none_count,
        none_rate=none_count / max(total, 1),
        avg_confidence=round(confidence_sum / max(total, 1), 2),
    )
