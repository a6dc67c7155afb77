"""ResultsEstimator: turn recorded choices into a results document.

Runs the estimation stages in a fixed order over one set of responses:

    encode -> shares -> importance -> MNL part-worths -> WTP
           -> choice drivers -> bootstrap intervals -> response stats
           -> validation (when tasks are given)

Every stage is a pure function of its inputs; the estimator only wires them
together and keeps the fitted encoder so hypothetical concepts can be scored
on the same scale afterwards.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

from pyconjoint.algorithms.drivers import compute_choice_drivers
from pyconjoint.algorithms.encoding import FeatureEncoder
from pyconjoint.algorithms.importance import compute_feature_importance
from pyconjoint.algorithms.inference import compute_share_intervals
from pyconjoint.algorithms.mnl import build_observations, fit_mnl, fit_mnl_by_segment, predict_shares
from pyconjoint.algorithms.shares import compute_response_stats, compute_shares, resolve_segments
from pyconjoint.algorithms.validation import compute_validation, holdout_task_ids
from pyconjoint.algorithms.wtp import compute_wtp
from pyconjoint.core.config import EstimationConfig
from pyconjoint.core.exceptions import NotFittedError
from pyconjoint.core.result import PartWorthResult, ResultsSummary
from pyconjoint.core.schema import Agent, Alternative, Feature, Response, Segment, Task
from pyconjoint.core.types import RandomSource, as_generator

logger = logging.getLogger(__name__)


def _estimate(
    responses: Sequence[Response],
    alternatives: Sequence[Alternative],
    features: Sequence[Feature],
    segments: Sequence[Segment],
    tasks: Sequence[Task] | None,
    agents: Sequence[Agent] | None,
    config: EstimationConfig,
    rng: RandomSource,
) -> tuple[ResultsSummary, FeatureEncoder]:
    start_time = time.perf_counter()
    responses = list(responses)
    alternatives = list(alternatives)
    features = list(features)
    segments = list(segments)

    encoder = FeatureEncoder(features).fit(alternatives)
    segment_ids = resolve_segments(responses, segments, agents)

    shares = compute_shares(responses, alternatives, segments, segment_ids=segment_ids)
    importance = compute_feature_importance(responses, features, segments, segment_ids=segment_ids)

    training, training_segment_ids = responses, segment_ids
    if tasks is not None:
        # Holdout answers are kept out of the part-worths; validation scores them
        holdout_ids = holdout_task_ids(tasks)
        kept = [i for i, r in enumerate(responses) if r.task_id not in holdout_ids]
        training = [responses[i] for i in kept]
        training_segment_ids = [segment_ids[i] for i in kept]

    overall_fit = fit_mnl(
        build_observations(training, alternatives, encoder, tasks, config.choice_set),
        encoder.labels,
        config,
    )
    observations_by_segment = {
        seg.segment_id: build_observations(
            [r for r, s in zip(training, training_segment_ids) if s == seg.segment_id],
            alternatives,
            encoder,
            tasks,
            config.choice_set,
        )
        for seg in segments
    }
    part_worths = PartWorthResult(
        overall=overall_fit,
        by_segment=fit_mnl_by_segment(observations_by_segment, encoder.labels, config),
    )

    wtp = compute_wtp(overall_fit, features, encoder, config.price_pattern, config.wtp_min_price_beta)
    drivers = compute_choice_drivers(responses, alternatives, features, config.top_drivers)
    confidence = compute_share_intervals(
        responses,
        alternatives,
        n_bootstrap=config.n_bootstrap,
        confidence_level=config.confidence_level,
        rng=as_generator(rng),
    )
    stats = compute_response_stats(responses)

    validation = None
    if tasks is not None:
        validation = compute_validation(responses, tasks, alternatives, encoder, config)

    computation_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Estimated results for %d responses (%d alternatives, %d segments) in %.1f ms",
        len(responses),
        len(alternatives),
        len(segments),
        computation_time,
    )

    summary = ResultsSummary(
        shares=shares,
        feature_importance=importance,
        part_worths=part_worths,
        wtp=wtp,
        choice_drivers=drivers,
        confidence=confidence,
        response_stats=stats,
        validation=validation,
        computation_time_ms=computation_time,
    )
    return summary, encoder


def compute_results(
    responses: Sequence[Response],
    alternatives: Sequence[Alternative],
    features: Sequence[Feature],
    segments: Sequence[Segment] = (),
    tasks: Sequence[Task] | None = None,
    agents: Sequence[Agent] | None = None,
    config: EstimationConfig | None = None,
    rng: RandomSource = None,
) -> ResultsSummary:
    """
    Compute the full results document from recorded responses.

    Never raises on empty or tiny input: missing data yields empty maps,
    zero vectors or None.

    Args:
        responses: Recorded responses
        alternatives: Alternatives of the experiment
        features: Feature schema
        segments: Declared segments
        tasks: Run tasks; enables the validation block and
            ``choice_set="shown"``
        agents: Run agents; used for segment resolution
        config: Estimation settings (defaults to ``EstimationConfig()``)
        rng: numpy Generator or seed for the bootstrap

    Returns:
        ResultsSummary

    Example:
        >>> summary = compute_results(responses, alternatives, features, segments, rng=1)
        >>> print(summary.summary())
        >>> summary.to_dict()["partWorths"]["overall"]
    """
    summary, _ = _estimate(
        responses,
        alternatives,
        features,
        segments,
        tasks,
        agents,
        config or EstimationConfig(),
        rng,
    )
    return summary


class ResultsEstimator:
    """
    Fit/predict interface over ``compute_results``.

    Example:
        >>> estimator = ResultsEstimator(EstimationConfig(n_bootstrap=500), rng=3)
        >>> estimator.fit(responses, alternatives, features, segments, tasks=tasks)
        >>> estimator.results_.wtp
        >>> estimator.predict_shares([concept_x, concept_y])
        {'X': 0.71, 'Y': 0.29}

    Attributes:
        config: Estimation settings
        results_: ResultsSummary from the last fit
        encoder_: FeatureEncoder fitted on the experiment's alternatives
    """

    def __init__(self, config: EstimationConfig | None = None, rng: RandomSource = None) -> None:
        self.config = config or EstimationConfig()
        self.rng = rng
        self.results_: ResultsSummary | None = None
        self.encoder_: FeatureEncoder | None = None

    @property
    def is_fitted(self) -> bool:
        return self.results_ is not None

    def fit(
        self,
        responses: Sequence[Response],
        alternatives: Sequence[Alternative],
        features: Sequence[Feature],
        segments: Sequence[Segment] = (),
        tasks: Sequence[Task] | None = None,
        agents: Sequence[Agent] | None = None,
    ) -> ResultsEstimator:
        """Estimate results and keep the fitted encoder. Returns self."""
        self.results_, self.encoder_ = _estimate(
            responses,
            alternatives,
            features,
            segments,
            tasks,
            agents,
            self.config,
            self.rng,
        )
        return self

    def _check_fitted(self, method: str) -> None:
        if self.results_ is None or self.encoder_ is None:
            raise NotFittedError(f"ResultsEstimator must be fitted before {method}")

    def predict_shares(
        self,
        concepts: Sequence[Alternative],
        segment_id: str | None = None,
    ) -> dict[str, float]:
        """
        Predict choice shares among hypothetical concepts.

        Args:
            concepts: Hypothetical alternatives
            segment_id: Use this segment's part-worths instead of the overall
                fit (falls back to overall when the segment was not fitted)

        Returns:
            concept id -> predicted share
        """
        self._check_fitted("predict_shares")
        part_worths = self.results_.part_worths
        fit = part_worths.by_segment.get(segment_id, part_worths.overall) if segment_id else part_worths.overall
        return predict_shares(fit, concepts, self.encoder_)

    def summary(self) -> str:
        self._check_fitted("summary")
        return self.results_.summary()

    def __repr__(self) -> str:
        state = repr(self.results_) if self.results_ is not None else "unfitted"
        return f"ResultsEstimator({state})"
