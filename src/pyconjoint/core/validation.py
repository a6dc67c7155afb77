"""Upstream validators for experiment documents.

These checks run on the raw camelCase documents before records are built.
Unlike the record constructors they never raise: each returns a
ValidationReport listing every problem found, so an editor can show all of
them at once. The estimation pipeline does not call them and assumes its
inputs are already well formed.

Functions:
    - validate_schema(): Feature schema shape, key uniqueness, types
    - validate_value(): One value against its feature definition
    - validate_alternatives(): Alternatives against a schema
    - validate_task(): Task references and choice-set size
    - validate_response(): Required fields and confidence range
    - validate_traits(): Numeric traits in [0, 1]
    - validate_experiment(): Readiness to run (errors plus warnings)
"""

from __future__ import annotations

import logging
import numbers
import warnings
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pyconjoint.core.exceptions import DataQualityWarning
from pyconjoint.core.types import FEATURE_TYPES

logger = logging.getLogger(__name__)

# Fewer agents than this triggers a sample-size warning
MIN_RECOMMENDED_AGENTS = 10

NUMERIC_TRAITS = ("priceSensitivity", "riskTolerance", "consistency")


@dataclass(frozen=True)
class ValidationReport:
    """
    Outcome of an upstream validation check.

    Attributes:
        errors: Problems that must be fixed before running
        warnings: Problems that degrade results but do not block a run
    """

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def __bool__(self) -> bool:
        return self.valid

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _schema_features(schema: Any) -> list[Mapping[str, Any]] | None:
    # Accept {"features": [...]} or a bare list of feature dicts
    if isinstance(schema, Mapping):
        features = schema.get("features")
    else:
        features = schema
    if isinstance(features, (list, tuple)):
        return list(features)
    return None


def validate_schema(schema: Any) -> ValidationReport:
    """
    Validate a feature schema document.

    Args:
        schema: ``{"features": [...]}`` or a list of feature dicts

    Returns:
        ValidationReport whose errors name every offending feature
    """
    if schema is None:
        return ValidationReport(errors=("Schema is required",))

    features = _schema_features(schema)
    if features is None:
        return ValidationReport(errors=("Schema must have a features array",))

    errors: list[str] = []
    keys: set[str] = set()
    for index, feature in enumerate(features):
        key = feature.get("key")
        if not key:
            errors.append(f"Feature at index {index} is missing a key")
        elif key in keys:
            errors.append(f"Duplicate feature key: {key}")
        else:
            keys.add(key)

        ftype = feature.get("type")
        if not ftype:
            errors.append(f'Feature "{key}" is missing a type')
        elif ftype not in FEATURE_TYPES:
            errors.append(f'Feature "{key}" has invalid type: {ftype}')

        if ftype == "categorical" and not feature.get("categories"):
            errors.append(f'Categorical feature "{key}" must have categories')

    return ValidationReport(errors=tuple(errors))


def validate_value(feature: Mapping[str, Any], value: Any) -> str | None:
    """
    Check one raw value against its feature definition.

    Returns:
        An error message, or None if the value is acceptable
    """
    if value is None:
        return "Value is required"

    ftype = feature.get("type")
    if ftype == "continuous":
        if not _is_number(value):
            return "Value must be a number"
        lo, hi = feature.get("min"), feature.get("max")
        if lo is not None and value < lo:
            return f"Value must be at least {lo}"
        if hi is not None and value > hi:
            return f"Value must be at most {hi}"
        return None
    if ftype == "categorical":
        categories = feature.get("categories")
        if categories and value not in categories:
            return f"Value must be one of: {', '.join(map(str, categories))}"
        return None
    if ftype == "binary":
        if not isinstance(value, bool):
            return "Value must be true or false"
        return None
    return "Unknown feature type"


def validate_alternatives(
    alternatives: Iterable[Mapping[str, Any]],
    schema: Any,
) -> ValidationReport:
    """
    Validate alternatives against a schema.

    Missing feature values are warnings (they encode as 0 downstream);
    out-of-domain values, duplicate ids and the reserved "NONE" id are errors.
    """
    features = _schema_features(schema) or []
    errors: list[str] = []
    warns: list[str] = []
    seen: set[str] = set()

    for alt in alternatives:
        alt_id = alt.get("id")
        name = alt.get("name") or alt_id
        if not alt_id:
            errors.append(f'Alternative "{name}" is missing an id')
        elif alt_id == "NONE":
            errors.append('"NONE" is reserved and cannot be an alternative id')
        elif alt_id in seen:
            errors.append(f"Duplicate alternative id: {alt_id}")
        else:
            seen.add(alt_id)

        values = alt.get("features") or {}
        missing = [f["key"] for f in features if f.get("key") and values.get(f["key"]) is None]
        if missing:
            warns.append(f'Alternative "{name}" is missing features: {", ".join(missing)}')
        for feature in features:
            key = feature.get("key")
            if key in values and values[key] is not None:
                problem = validate_value(feature, values[key])
                if problem:
                    errors.append(f'Alternative "{name}", feature "{key}": {problem}')

    return ValidationReport(errors=tuple(errors), warnings=tuple(warns))


def validate_task(task: Mapping[str, Any], alternative_ids: Iterable[str]) -> ValidationReport:
    """Validate a task document against the known alternative ids."""
    known = set(alternative_ids)
    errors: list[str] = []

    if not task.get("agentId"):
        errors.append("Task must have an agentId")

    shown = task.get("shownAlternatives")
    if not isinstance(shown, (list, tuple)):
        errors.append("Task must have shownAlternatives array")
    else:
        unknown = [alt_id for alt_id in shown if alt_id not in known]
        if unknown:
            errors.append(f"Task references unknown alternatives: {', '.join(map(str, unknown))}")
        if len(shown) < 2:
            errors.append("Task must show at least 2 alternatives")

    return ValidationReport(errors=tuple(errors))


def validate_response(response: Mapping[str, Any]) -> ValidationReport:
    """Validate a response document."""
    errors: list[str] = []

    if not response.get("taskId"):
        errors.append("Response must have a taskId")
    if not response.get("agentId"):
        errors.append("Response must have an agentId")
    if not response.get("chosen"):
        errors.append("Response must have a chosen value")

    confidence = response.get("confidence")
    if confidence is not None and (not _is_number(confidence) or not 0 <= confidence <= 1):
        errors.append("Confidence must be a number between 0 and 1")

    reason_codes = response.get("reasonCodes")
    if reason_codes is not None and not isinstance(reason_codes, (list, tuple)):
        errors.append("reasonCodes must be an array")

    return ValidationReport(errors=tuple(errors))


def validate_traits(traits: Mapping[str, Any]) -> ValidationReport:
    """Check that each numeric trait present is a number in [0, 1]."""
    errors = []
    for trait in NUMERIC_TRAITS:
        value = traits.get(trait)
        if value is None:
            continue
        if not _is_number(value) or not 0 <= value <= 1:
            errors.append(f"{trait} must be a number between 0 and 1")
    return ValidationReport(errors=tuple(errors))


def validate_experiment(
    experiment: Mapping[str, Any],
    alternatives: Iterable[Mapping[str, Any]] | None = None,
    emit_warnings: bool = False,
) -> ValidationReport:
    """
    Check that an experiment document is ready to run.

    Args:
        experiment: Document with name, featureSchema (or features) and
            agentPlan.segments (or segments)
        alternatives: Alternative documents; defaults to
            ``experiment["alternatives"]``
        emit_warnings: Also surface each warning as a DataQualityWarning

    Returns:
        ValidationReport with blocking errors and non-blocking warnings

    Example:
        >>> report = validate_experiment(doc)
        >>> if not report.valid:
        ...     print("\\n".join(report.errors))
    """
    if alternatives is None:
        alternatives = experiment.get("alternatives") or []
    alternatives = list(alternatives)

    errors: list[str] = []
    warns: list[str] = []

    if not experiment.get("name"):
        errors.append("Experiment must have a name")

    schema = experiment.get("featureSchema")
    if schema is None:
        schema = {"features": experiment.get("features") or []}
    features = _schema_features(schema) or []
    if not features:
        errors.append("Experiment must have at least one feature defined")
    else:
        errors.extend(validate_schema(schema).errors)

    if len(alternatives) < 2:
        errors.append("Experiment must have at least 2 alternatives")

    segments = experiment.get("segments")
    if segments is None:
        segments = (experiment.get("agentPlan") or {}).get("segments") or []
    if not segments:
        errors.append("Experiment must have at least one agent segment")

    total_agents = 0
    for segment in segments:
        total_agents += int(segment.get("count") or 0)
        for problem in validate_traits(segment.get("traits") or {}).errors:
            errors.append(f'Segment "{segment.get("segmentId")}": {problem}')
    if total_agents == 0:
        errors.append("Experiment must have at least one agent")
    if total_agents < MIN_RECOMMENDED_AGENTS:
        warns.append("Small sample size may lead to unreliable results")

    alt_report = validate_alternatives(alternatives, features)
    errors.extend(alt_report.errors)
    warns.extend(alt_report.warnings)

    report = ValidationReport(errors=tuple(errors), warnings=tuple(warns))
    logger.debug(
        "Experiment validation: %d error(s), %d warning(s)",
        len(report.errors),
        len(report.warnings),
    )
    if emit_warnings:
        for message in report.warnings:
            warnings.warn(message, DataQualityWarning, stacklevel=2)
    return report
