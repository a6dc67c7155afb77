"""Core data structures for PyConjoint."""

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
    # Results
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
    # Warnings
    "DataQualityWarning",
    "NumericalInstabilityWarning",
    "SegmentResolutionWarning",
]
