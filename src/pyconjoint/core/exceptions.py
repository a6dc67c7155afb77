"""Custom exceptions and warnings for PyConjoint.

All exceptions inherit from ValueError so that callers which already catch
ValueError keep working.

Exception Hierarchy:
    PyConjointError (ValueError)
    ├── DataValidationError
    │   ├── SchemaError
    │   └── UnknownReferenceError
    ├── ConfigurationError
    ├── NotFittedError
    └── InsufficientDataError

Warning Classes:
    DataQualityWarning (UserWarning)
    NumericalInstabilityWarning (UserWarning)
    SegmentResolutionWarning (UserWarning)

Note that the estimation pipeline itself never raises on small or empty
inputs. Too little data produces empty, zero or None results. The exceptions
below are raised by the record constructors, the configuration objects and
the opt-in ``strict`` modes.
"""

from __future__ import annotations


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class PyConjointError(ValueError):
    """Base exception for all PyConjoint errors.

    Example:
        >>> try:
        ...     feature = Feature.from_dict({"key": "price", "type": "float"})
        ... except PyConjointError as e:
        ...     print(f"PyConjoint error: {e}")
    """

    pass


# =============================================================================
# DATA VALIDATION EXCEPTIONS
# =============================================================================


class DataValidationError(PyConjointError):
    """Raised when input records fail validation checks.

    Base class for all record-shape errors. Use the more specific subclasses
    when possible.
    """

    pass


class SchemaError(DataValidationError):
    """Raised when a feature schema is illegal.

    Common causes:
        - Feature type not in {continuous, categorical, binary}
        - Categorical feature declared without categories
        - Duplicate feature keys

    Example:
        >>> Feature.from_dict({"key": "brand", "type": "categorical"})
        SchemaError: Categorical feature 'brand' must have categories
    """

    pass


class UnknownReferenceError(DataValidationError):
    """Raised when a record references an id that does not exist.

    Common causes:
        - Task showing an alternative id that is not in the alternative set
        - Response for an agent that was never created
    """

    pass


# =============================================================================
# CONFIGURATION / COMPUTATION EXCEPTIONS
# =============================================================================


class ConfigurationError(PyConjointError):
    """Raised when an estimation or task-plan setting is out of range.

    Example:
        >>> EstimationConfig(learning_rate=-1.0)
        ConfigurationError: learning_rate must be positive, got -1.0
    """

    pass


class NotFittedError(PyConjointError):
    """Raised when an operation requires a fitted estimator.

    Example:
        >>> estimator = ResultsEstimator()
        >>> estimator.predict_shares(concepts)  # forgot to fit first!
        NotFittedError: ResultsEstimator must be fitted before predict_shares
    """

    pass


class InsufficientDataError(PyConjointError):
    """Raised when an operation explicitly requires more data than given.

    The default pipeline never raises this. Instead it returns zero vectors
    or None. It is only raised when a caller opts in with ``strict=True``.

    Example:
        >>> fit_mnl(observations[:3], labels, strict=True)
        InsufficientDataError: Need at least 5 observations for MNL, got 3
    """

    pass


# =============================================================================
# WARNINGS
# =============================================================================


class DataQualityWarning(UserWarning):
    """Warning for data quality issues that don't prevent computation.

    Emitted when:
        - Fewer alternatives exist than the requested choice-set size
        - A task plan reserves more holdout/repeat tasks than it has room for

    Example:
        >>> import warnings
        >>> warnings.filterwarnings('ignore', category=DataQualityWarning)
    """

    pass


class NumericalInstabilityWarning(UserWarning):
    """Warning for potential numerical issues in computations.

    Emitted when gradient descent diverges to non-finite coefficients. The
    offending fit is replaced by a zero vector.
    """

    pass


class SegmentResolutionWarning(UserWarning):
    """Warning emitted when segment membership is parsed from an agent id.

    Agent ids follow the ``segmentId_ordinal`` convention, but segment ids
    may themselves contain underscores. Resolving membership by stripping
    the trailing suffix is therefore ambiguous. Pass ``segment_id`` on
    responses, or pass the run's agents, to avoid it.
    """

    pass
