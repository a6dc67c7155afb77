"""Holdout accuracy and repeat consistency."""

from __future__ import annotations

import logging
from typing import Sequence

from pyconjoint.algorithms.encoding import FeatureEncoder
from pyconjoint.algorithms.mnl import build_observations, fit_mnl, predict_choice
from pyconjoint.core.config import EstimationConfig
from pyconjoint.core.result import MNLResult, ValidationResult
from pyconjoint.core.schema import Alternative, Response, Task

logger = logging.getLogger(__name__)


def holdout_task_ids(tasks: Sequence[Task]) -> set[str]:
    """Ids of the tasks reserved for validation."""
    return {t.id for t in tasks if t.is_holdout}


def compute_repeat_consistency(
    responses: Sequence[Response],
    tasks: Sequence[Task],
) -> tuple[float | None, int]:
    """
    Fraction of answered repeat tasks whose choice matches the source task's.

    Returns:
        (consistency or None when no pair was answered, number of pairs)
    """
    by_task = {r.task_id: r for r in responses}
    pairs = 0
    matches = 0
    for task in tasks:
        if not task.is_repeat_of:
            continue
        repeat = by_task.get(task.id)
        source = by_task.get(task.is_repeat_of)
        if repeat is None or source is None:
            continue
        pairs += 1
        if repeat.chosen == source.chosen:
            matches += 1
    return (matches / pairs if pairs else None), pairs


def compute_holdout_accuracy(
    responses: Sequence[Response],
    tasks: Sequence[Task],
    alternatives: Sequence[Alternative],
    encoder: FeatureEncoder,
    config: EstimationConfig | None = None,
) -> tuple[float | None, int, MNLResult | None]:
    """
    Score an MNL fitted without the holdouts against the holdout answers.

    The model is fitted on responses to non-holdout tasks. Each holdout
    response that chose a shown alternative is predicted as the argmax of
    utility over that task's shown alternatives.

    Returns:
        (accuracy or None, holdout responses scored, the fit used or None)
    """
    config = config or EstimationConfig()
    holdout_ids = holdout_task_ids(tasks)

    holdout = [r for r in responses if r.task_id in holdout_ids and not r.is_none]
    if not holdout:
        return None, 0, None

    training = [r for r in responses if r.task_id not in holdout_ids]
    fit = fit_mnl(
        build_observations(training, alternatives, encoder, tasks, config.choice_set),
        encoder.labels,
        config,
    )
    if not fit.fitted:
        logger.debug("Holdout accuracy not measured: calibration fit has too few observations")
        return None, 0, fit

    observations = build_observations(holdout, alternatives, encoder, tasks, "shown")
    if not observations:
        return None, 0, fit
    hits = sum(1 for obs in observations if predict_choice(fit.coefficients, obs.design) == obs.chosen)
    return hits / len(observations), len(observations), fit


def compute_validation(
    responses: Sequence[Response],
    tasks: Sequence[Task],
    alternatives: Sequence[Alternative],
    encoder: FeatureEncoder,
    config: EstimationConfig | None = None,
) -> ValidationResult:
    """
    Compute predictive-validity and reliability metrics.

    Metrics that cannot be measured (no holdouts, no answered repeat pairs,
    too little calibration data) are None rather than a default value.

    Example:
        >>> v = compute_validation(responses, tasks, alternatives, encoder)
        >>> v.repeat_consistency
        0.9
    """
    consistency, n_pairs = compute_repeat_consistency(responses, tasks)
    accuracy, n_holdout, _ = compute_holdout_accuracy(responses, tasks, alternatives, encoder, config)
    return ValidationResult(
        holdout_accuracy=accuracy,
        repeat_consistency=consistency,
        n_holdout=n_holdout,
        n_repeat_pairs=n_pairs,
    )
