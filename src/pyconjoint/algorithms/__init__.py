"""Core algorithms for choice simulation and estimation."""

from pyconjoint.algorithms.taskgen import (
    generate_tasks,
    task_stats,
    choice_set_size_for,
    includes_none,
)
from pyconjoint.algorithms.simulate import (
    normalize_value,
    score_alternative,
    simulate_choice,
    batch_simulate,
    ScoringRule,
    ScoringRules,
    default_rules,
    ChoiceProducer,
    HeuristicChoiceProducer,
)
from pyconjoint.algorithms.encoding import FeatureEncoder
from pyconjoint.algorithms.shares import (
    resolve_segments,
    compute_shares,
    compute_response_stats,
)
from pyconjoint.algorithms.importance import compute_feature_importance
from pyconjoint.algorithms.mnl import (
    Observation,
    build_observations,
    fit_mnl,
    fit_mnl_by_segment,
    mnl_log_likelihood,
    predict_shares,
)
from pyconjoint.algorithms.wtp import compute_wtp, find_price_feature, raw_part_worths
from pyconjoint.algorithms.drivers import compute_choice_drivers
from pyconjoint.algorithms.inference import compute_share_intervals
from pyconjoint.algorithms.validation import (
    compute_validation,
    compute_repeat_consistency,
    compute_holdout_accuracy,
    holdout_task_ids,
)

__all__ = [
    # Task generation
    "generate_tasks",
    "task_stats",
    "choice_set_size_for",
    "includes_none",
    # Simulation
    "normalize_value",
    "score_alternative",
    "simulate_choice",
    "batch_simulate",
    "ScoringRule",
    "ScoringRules",
    "default_rules",
    "ChoiceProducer",
    "HeuristicChoiceProducer",
    # Estimation
    "FeatureEncoder",
    "resolve_segments",
    "compute_shares",
    "compute_response_stats",
    "compute_feature_importance",
    "Observation",
    "build_observations",
    "fit_mnl",
    "fit_mnl_by_segment",
    "mnl_log_likelihood",
    "predict_shares",
    "compute_wtp",
    "find_price_feature",
    "raw_part_worths",
    "compute_choice_drivers",
    "compute_share_intervals",
    "compute_validation",
    "compute_repeat_consistency",
    "compute_holdout_accuracy",
    "holdout_task_ids",
]
