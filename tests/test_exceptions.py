"""Tests for the exception and warning hierarchy."""

import pytest

from pyconjoint import (
    ConfigurationError,
    DataQualityWarning,
    DataValidationError,
    EstimationConfig,
    Feature,
    InsufficientDataError,
    NotFittedError,
    NumericalInstabilityWarning,
    PyConjointError,
    SchemaError,
    SegmentResolutionWarning,
    UnknownReferenceError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [DataValidationError, SchemaError, UnknownReferenceError, ConfigurationError,
         NotFittedError, InsufficientDataError],
    )
    def test_all_are_pyconjoint_errors(self, exc):
        assert issubclass(exc, PyConjointError)
        assert issubclass(exc, ValueError)

    def test_schema_errors_are_validation_errors(self):
        assert issubclass(SchemaError, DataValidationError)
        assert issubclass(UnknownReferenceError, DataValidationError)

    @pytest.mark.parametrize(
        "warning",
        [DataQualityWarning, NumericalInstabilityWarning, SegmentResolutionWarning],
    )
    def test_warnings_are_user_warnings(self, warning):
        assert issubclass(warning, UserWarning)


class TestCatching:
    def test_value_error_catches_schema_error(self):
        with pytest.raises(ValueError):
            Feature("brand", type="categorical")

    def test_base_catches_configuration_error(self):
        with pytest.raises(PyConjointError):
            EstimationConfig(n_jobs=0)
