"""Multinomial logit part-worth estimation.

Each non-NONE response is one observation: the encoded vectors of the
choice set plus the index of the chosen alternative. Under the MNL,

    P(j | set) = exp(x_j . beta) / sum_i exp(x_i . beta)

and beta is found by batch gradient ascent on the ridge-penalized mean
log-likelihood. The gradient for one observation is ``x_chosen - sum_j p_j x_j``.

Observations are grouped by choice-set size so each iteration is a handful
of vectorized tensor operations, regardless of how many responses there are.

References:
    McFadden, D. (1974). Conditional logit analysis of qualitative choice
    behavior. Frontiers in Econometrics, 105-142.
    Train, K. (2009). Discrete Choice Methods with Simulation. Cambridge
    University Press.
"""

from __future__ import annotations

import logging
import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp, softmax

from pyconjoint.algorithms.encoding import FeatureEncoder
from pyconjoint.core.config import EstimationConfig
from pyconjoint.core.exceptions import (
    ConfigurationError,
    InsufficientDataError,
    NumericalInstabilityWarning,
)
from pyconjoint.core.result import MNLResult
from pyconjoint.core.schema import Alternative, Response, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observation:
    """One usable choice: encoded choice set (J x K) and the chosen row."""

    design: NDArray[np.float64]
    chosen: int


# =============================================================================
# OBSERVATIONS
# =============================================================================


def build_observations(
    responses: Sequence[Response],
    alternatives: Sequence[Alternative],
    encoder: FeatureEncoder,
    tasks: Sequence[Task] | None = None,
    choice_set: str = "universe",
) -> list[Observation]:
    """
    Turn responses into MNL observations.

    NONE responses and responses whose chosen id is not a known alternative
    are skipped.

    Args:
        responses: Recorded responses
        alternatives: Alternatives of the experiment
        encoder: Fitted FeatureEncoder
        tasks: Tasks of the run; required when ``choice_set="shown"``
        choice_set: "universe" uses every alternative as the choice set,
            "shown" uses each response's task's shown alternatives

    Returns:
        Observations in response order
    """
    vectors = encoder.encode_by_id(alternatives)

    if choice_set == "universe":
        ids = [alt.id for alt in alternatives]
        index = {alt_id: i for i, alt_id in enumerate(ids)}
        design = np.vstack([vectors[i] for i in ids]) if ids else np.zeros((0, encoder.n_labels))
        return [
            Observation(design, index[r.chosen])
            for r in responses
            if not r.is_none and r.chosen in index
        ]

    if choice_set != "shown":
        raise ConfigurationError(f"choice_set must be 'universe' or 'shown', got {choice_set!r}")
    if tasks is None:
        raise ConfigurationError("choice_set='shown' requires the run's tasks")

    tasks_by_id = {t.id: t for t in tasks}
    observations = []
    for response in responses:
        task = tasks_by_id.get(response.task_id)
        if response.is_none or task is None:
            continue
        shown = [alt_id for alt_id in task.shown_alternatives if alt_id in vectors]
        if response.chosen not in shown:
            continue
        design = np.vstack([vectors[alt_id] for alt_id in shown])
        observations.append(Observation(design, shown.index(response.chosen)))
    return observations


def _group_by_size(
    observations: Sequence[Observation],
) -> list[tuple[NDArray[np.float64], NDArray[np.int64]]]:
    # (n, J, K) design tensor and chosen indices per choice-set size
    groups: dict[int, list[Observation]] = {}
    for obs in observations:
        groups.setdefault(obs.design.shape[0], []).append(obs)
    return [
        (
            np.stack([o.design for o in group]),
            np.array([o.chosen for o in group], dtype=np.int64),
        )
        for _, group in sorted(groups.items())
    ]


def _log_likelihood(
    beta: NDArray[np.float64],
    groups: list[tuple[NDArray[np.float64], NDArray[np.int64]]],
) -> float:
    total = 0.0
    for X, chosen in groups:
        U = X @ beta
        total += float(np.sum(U[np.arange(len(chosen)), chosen] - logsumexp(U, axis=1)))
    return total


def mnl_log_likelihood(beta: NDArray[np.float64], observations: Sequence[Observation]) -> float:
    """Log-likelihood of the observations under beta."""
    if not observations:
        return 0.0
    return _log_likelihood(np.asarray(beta, dtype=np.float64), _group_by_size(observations))


# =============================================================================
# FITTING
# =============================================================================


def fit_mnl(
    observations: Sequence[Observation],
    labels: Sequence[str],
    config: EstimationConfig | None = None,
    strict: bool = False,
) -> MNLResult:
    """
    Fit MNL part-worths by batch gradient ascent.

    With fewer than ``config.min_observations`` observations the result is
    an all-zero vector with ``fitted=False``; nothing is raised unless
    ``strict=True``. Starting from zero with a fixed iteration count, the
    fit is fully deterministic.

    Args:
        observations: Observations from ``build_observations``
        labels: Encoded feature labels (length K)
        config: Hyperparameters (learning_rate, n_iterations, l2_penalty,
            min_observations)
        strict: Raise InsufficientDataError instead of returning zeros

    Returns:
        MNLResult with coefficients aligned to labels

    Example:
        >>> obs = build_observations(responses, alternatives, encoder)
        >>> fit = fit_mnl(obs, encoder.labels)
        >>> fit["price"]
        -1.73
    """
    config = config or EstimationConfig()
    labels = tuple(labels)
    k = len(labels)
    n = len(observations)

    if n < config.min_observations:
        if strict:
            raise InsufficientDataError(
                f"Need at least {config.min_observations} observations for MNL, got {n}"
            )
        logger.debug("Skipping MNL fit: %d observation(s) < %d", n, config.min_observations)
        return MNLResult(
            coefficients=np.zeros(k),
            labels=labels,
            n_observations=n,
            log_likelihood=0.0,
            fitted=False,
        )

    start_time = time.perf_counter()
    groups = _group_by_size(observations)
    beta = np.zeros(k)

    for _ in range(config.n_iterations):
        grad = np.zeros(k)
        for X, chosen in groups:
            P = softmax(X @ beta, axis=1)
            x_chosen = X[np.arange(len(chosen)), chosen]
            expected = np.einsum("nj,njk->nk", P, X)
            grad += np.sum(x_chosen - expected, axis=0)
        grad = grad / n - config.l2_penalty * beta
        beta = beta + config.learning_rate * grad

    if not np.all(np.isfinite(beta)):
        warnings.warn(
            "MNL gradient ascent produced non-finite coefficients; "
            "returning zeros. Try a smaller learning_rate.",
            NumericalInstabilityWarning,
            stacklevel=2,
        )
        return MNLResult(
            coefficients=np.zeros(k),
            labels=labels,
            n_observations=n,
            log_likelihood=0.0,
            fitted=False,
            n_iterations=config.n_iterations,
        )

    log_likelihood = _log_likelihood(beta, groups)
    logger.debug(
        "MNL fit: n=%d k=%d LL=%.4f in %.1f ms",
        n,
        k,
        log_likelihood,
        (time.perf_counter() - start_time) * 1000,
    )
    return MNLResult(
        coefficients=beta,
        labels=labels,
        n_observations=n,
        log_likelihood=log_likelihood,
        fitted=True,
        n_iterations=config.n_iterations,
    )


def fit_mnl_by_segment(
    observations_by_segment: Mapping[str, Sequence[Observation]],
    labels: Sequence[str],
    config: EstimationConfig | None = None,
) -> dict[str, MNLResult]:
    """
    Fit one MNL per segment.

    Segments with fewer than ``config.min_observations`` observations are
    left out of the result. With ``config.n_jobs > 1`` the fits run on a
    thread pool; results are identical either way.

    Returns:
        segment id -> MNLResult, in input order
    """
    config = config or EstimationConfig()
    eligible = [
        (seg_id, obs)
        for seg_id, obs in observations_by_segment.items()
        if len(obs) >= config.min_observations
    ]
    skipped = len(observations_by_segment) - len(eligible)
    if skipped:
        logger.debug("%d segment(s) below %d observations; not fitted", skipped, config.min_observations)

    if config.n_jobs > 1 and len(eligible) > 1:
        with ThreadPoolExecutor(max_workers=config.n_jobs) as pool:
            futures = [pool.submit(fit_mnl, obs, labels, config) for _, obs in eligible]
            fits = [f.result() for f in futures]
    else:
        fits = [fit_mnl(obs, labels, config) for _, obs in eligible]

    return {seg_id: fit for (seg_id, _), fit in zip(eligible, fits)}


# =============================================================================
# PREDICTION
# =============================================================================


def _beta_vector(beta: MNLResult | Mapping[str, float], labels: Sequence[str]) -> NDArray[np.float64]:
    if isinstance(beta, MNLResult):
        beta = beta.as_dict()
    return np.array([float(beta.get(label, 0.0)) for label in labels], dtype=np.float64)


def predict_shares(
    beta: MNLResult | Mapping[str, float],
    concepts: Sequence[Alternative],
    encoder: FeatureEncoder,
) -> dict[str, float]:
    """
    Predict MNL choice shares for hypothetical concepts.

    Concepts are encoded with the experiment's fitted encoder, so continuous
    values are standardized against the original alternatives. Labels absent
    from ``beta`` count as 0.

    Args:
        beta: Part-worths as an MNLResult or ``{label: beta}``
        concepts: Hypothetical alternatives
        encoder: Encoder fitted on the experiment's alternatives

    Returns:
        concept id -> share (sums to 1); empty when there are no concepts

    Example:
        >>> predict_shares(fit, [Alternative("X", features={"price": 150})], encoder)
        {'X': 1.0}
    """
    if len(concepts) == 0:
        return {}
    b = _beta_vector(beta, encoder.labels)
    probabilities = softmax(encoder.transform(concepts) @ b)
    return {concept.id: float(p) for concept, p in zip(concepts, probabilities)}


def predict_choice(beta: NDArray[np.float64], design: NDArray[np.float64]) -> int:
    """Index of the highest-utility row (first on ties)."""
    return int(np.argmax(design @ beta))
