"""
PyConjoint: Simulated Choice Experiments and Conjoint Estimation.

Generate choice tasks, simulate respondents, and estimate shares, MNL
part-worths, willingness-to-pay and choice drivers from recorded choices.
"""

import logging

from pyconjoint.core.schema import (
    Feature,
    Alternative,
    Traits,
    Segment,
    Agent,
    TaskPlan,
    Task,
    Response,
    Experiment,
    expand_segments,
    load_experiment,
)
from pyconjoint.core.config import EstimationConfig
from pyconjoint.core.result import (
    TaskStats,
    SharesResult,
    FeatureImportanceResult,
    MNLResult,
    PartWorthResult,
    WTPResult,
    ChoiceDriversResult,
    ShareIntervalResult,
    ResponseStats,
    ValidationResult,
    ResultsSummary,
)
from pyconjoint.core.exceptions import (
    PyConjointError,
    DataValidationError,
    SchemaError,
    UnknownReferenceError,
    ConfigurationError,
    NotFittedError,
    InsufficientDataError,
    DataQualityWarning,
    NumericalInstabilityWarning,
    SegmentResolutionWarning,
)
from pyconjoint.core.validation import (
    ValidationReport,
    validate_schema,
    validate_alternatives,
    validate_task,
    validate_response,
    validate_traits,
    validate_experiment,
)
from pyconjoint.algorithms.taskgen import generate_tasks, task_stats
from pyconjoint.algorithms.simulate import (
    simulate_choice,
    batch_simulate,
    ScoringRules,
    default_rules,
    ChoiceProducer,
    HeuristicChoiceProducer,
)
from pyconjoint.algorithms.encoding import FeatureEncoder
from pyconjoint.algorithms.mnl import fit_mnl, predict_shares
from pyconjoint.estimator import ResultsEstimator, compute_results
from pyconjoint.runner import SimulationRun, run_simulation
from pyconjoint.presets import generate_segments_from_config, get_personality_preset

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Records
    "Feature",
    "Alternative",
    "Traits",
    "Segment",
    "Agent",
    "TaskPlan",
    "Task",
    "Response",
    "Experiment",
    "expand_segments",
    "load_experiment",
    "EstimationConfig",
    # Result types
    "TaskStats",
    "SharesResult",
    "FeatureImportanceResult",
    "MNLResult",
    "PartWorthResult",
    "WTPResult",
    "ChoiceDriversResult",
    "ShareIntervalResult",
    "ResponseStats",
    "ValidationResult",
    "ResultsSummary",
    # Exceptions
    "PyConjointError",
    "DataValidationError",
    "SchemaError",
    "UnknownReferenceError",
    "ConfigurationError",
    "NotFittedError",
    "InsufficientDataError",
    "DataQualityWarning",
    "NumericalInstabilityWarning",
    "SegmentResolutionWarning",
    # Upstream validation
    "ValidationReport",
    "validate_schema",
    "validate_alternatives",
    "validate_task",
    "validate_response",
    "validate_traits",
    "validate_experiment",
    # Task generation and simulation
    "generate_tasks",
    "task_stats",
    "simulate_choice",
    "batch_simulate",
    "ScoringRules",
    "default_rules",
    "ChoiceProducer",
    "HeuristicChoiceProducer",
    "run_simulation",
    "SimulationRun",
    # Estimation
    "FeatureEncoder",
    "fit_mnl",
    "predict_shares",
    "compute_results",
    "ResultsEstimator",
    # Presets
    "generate_segments_from_config",
    "get_personality_preset",
]
