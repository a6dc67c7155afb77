"""Core data records for choice experiments.

This module provides the typed inputs exchanged with the surrounding
application: the feature schema, the alternatives being compared, the agent
segments, and the tasks and responses produced during a run.

Every record can be built from the collaborator's camelCase document shape
with ``from_dict`` and converted back with ``to_dict``.

Records:
    - Feature: One typed attribute of the schema
    - Alternative: A choosable option described by feature values
    - Traits / Segment / Agent: The simulated respondent population
    - TaskPlan: How many and which kinds of tasks each agent sees
    - Task / Response: One choice-set instance and its recorded outcome
    - Experiment: Bundle of schema, alternatives, segments and task plan
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pyconjoint.core.exceptions import (
    ConfigurationError,
    DataValidationError,
    SchemaError,
)
from pyconjoint.core.types import FEATURE_TYPES, NONE_CHOICE, FeatureValue


CHOICE_FORMATS = {
    "AB": (2, False),
    "AB_NONE": (2, True),
    "ABC": (3, False),
    "ABC_NONE": (3, True),
}


# =============================================================================
# FEATURE SCHEMA
# =============================================================================


@dataclass(frozen=True)
class Feature:
    """
    One typed attribute of the feature schema.

    Attributes:
        key: Identifier, unique within a schema (e.g. "price")
        label: Human-readable name (defaults to key)
        type: One of "continuous", "categorical", "binary"
        min: Lower bound for continuous features (None = 0 when normalizing)
        max: Upper bound for continuous features (None = 100 when normalizing)
        categories: Ordered category list for categorical features
        unit: Unit string for display and WTP reporting (e.g. "USD")

    Example:
        >>> price = Feature(key="price", type="continuous", min=0, max=500, unit="USD")
        >>> brand = Feature(key="brand", type="categorical", categories=("Acme", "Zeta"))
    """

    key: str
    type: str = "continuous"
    label: str = ""
    min: float | None = None
    max: float | None = None
    categories: tuple[str, ...] = ()
    unit: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            raise SchemaError("Feature is missing a key")
        if self.type not in FEATURE_TYPES:
            raise SchemaError(
                f"Feature '{self.key}' has invalid type: {self.type}. "
                f"Use one of {', '.join(FEATURE_TYPES)}."
            )
        if self.type == "categorical" and len(self.categories) == 0:
            raise SchemaError(f"Categorical feature '{self.key}' must have categories")
        if not self.label:
            object.__setattr__(self, "label", self.key)
        object.__setattr__(self, "categories", tuple(self.categories))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Feature:
        """Build a Feature from a schema document entry."""
        return cls(
            key=data.get("key", ""),
            type=data.get("type", "continuous"),
            label=data.get("label") or "",
            min=data.get("min"),
            max=data.get("max"),
            categories=tuple(data.get("categories") or ()),
            unit=data.get("unit") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Return dictionary representation for serialization."""
        out: dict[str, Any] = {"key": self.key, "label": self.label, "type": self.type}
        if self.type == "continuous":
            out["min"] = self.min
            out["max"] = self.max
        if self.type == "categorical":
            out["categories"] = list(self.categories)
        if self.unit:
            out["unit"] = self.unit
        return out


def check_unique_keys(features: list[Feature]) -> None:
    """Raise SchemaError if two features share a key."""
    seen: set[str] = set()
    for feature in features:
        if feature.key in seen:
            raise SchemaError(f"Duplicate feature key: {feature.key}")
        seen.add(feature.key)


@dataclass(frozen=True)
class Alternative:
    """
    A choosable option described by feature values.

    Attributes:
        id: Identifier referenced by tasks and responses
        name: Display name used in explanations
        features: Mapping of feature key to raw value
    """

    id: str
    name: str = ""
    features: dict[str, FeatureValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.id == NONE_CHOICE:
            raise DataValidationError(
                f"'{NONE_CHOICE}' is reserved for the no-choice option and cannot be an alternative id"
            )
        if not self.name:
            object.__setattr__(self, "name", self.id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Alternative:
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            features=dict(data.get("features") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "features": dict(self.features)}


# =============================================================================
# POPULATION
# =============================================================================


@dataclass(frozen=True)
class Traits:
    """
    Behavioral traits shared by all agents of a segment.

    Attributes:
        price_sensitivity: 0..1, weight on low prices
        risk_tolerance: 0..1, low values favor warranty/support features
        consistency: 0..1, 1.0 disables choice noise entirely
        personality: Free-text personality label (e.g. "ISTJ", "Analytical")
        location: Free-text location label
    """

    price_sensitivity: float = 0.5
    risk_tolerance: float = 0.5
    consistency: float = 0.7
    personality: str = ""
    location: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Traits:
        data = data or {}
        defaults = cls()

        def _trait(name: str, default: float) -> float:
            value = data.get(name)
            return default if value is None else float(value)

        return cls(
            price_sensitivity=_trait("priceSensitivity", defaults.price_sensitivity),
            risk_tolerance=_trait("riskTolerance", defaults.risk_tolerance),
            consistency=_trait("consistency", defaults.consistency),
            personality=data.get("personality") or "",
            location=data.get("location") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceSensitivity": self.price_sensitivity,
            "riskTolerance": self.risk_tolerance,
            "consistency": self.consistency,
            "personality": self.personality,
            "location": self.location,
        }


@dataclass(frozen=True)
class Segment:
    """A group of identically-configured agents."""

    segment_id: str
    label: str = ""
    count: int = 1
    traits: Traits = field(default_factory=Traits)

    def __post_init__(self) -> None:
        if self.count < 0:
            raise DataValidationError(f"Segment {self.segment_id!r} has negative count {self.count}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Segment:
        return cls(
            segment_id=str(data["segmentId"]),
            label=data.get("label") or "",
            count=int(data["count"]) if data.get("count") is not None else 1,
            traits=Traits.from_dict(data.get("traits")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "segmentId": self.segment_id,
            "label": self.label,
            "count": self.count,
            "traits": self.traits.to_dict(),
        }


@dataclass(frozen=True)
class Agent:
    """
    One simulated respondent.

    The id follows the ``segment_id + "_" + ordinal`` convention, but
    segment membership is also stored explicitly in ``segment_id`` so that
    downstream code never has to parse it back out of the id.
    """

    id: str
    segment_id: str
    traits: Traits = field(default_factory=Traits)
    name: str = ""


def expand_segments(segments: list[Segment]) -> list[Agent]:
    """
    Create one Agent per unit of each segment's count.

    Agent ids are ``f"{segment_id}_{ordinal}"`` with a 1-based ordinal per
    segment. Names read like "Analytical #2 (Berlin)".

    Args:
        segments: Segment definitions

    Returns:
        Agents in segment order (callers shuffle if they need interleaving)
    """
    agents = []
    for segment in segments:
        personality = segment.traits.personality or "Agent"
        location = segment.traits.location
        for ordinal in range(1, max(segment.count, 0) + 1):
            name = f"{personality} #{ordinal}"
            if location:
                name = f"{name} ({location})"
            agents.append(
                Agent(
                    id=f"{segment.segment_id}_{ordinal}",
                    segment_id=segment.segment_id,
                    traits=segment.traits,
                    name=name,
                )
            )
    return agents


# =============================================================================
# TASKS AND RESPONSES
# =============================================================================


@dataclass(frozen=True)
class TaskPlan:
    """
    Per-agent task allocation.

    Attributes:
        tasks_per_agent: Total tasks each agent sees
        randomize_order: Shuffle alternative order within each task
        include_holdouts: Number of holdout tasks per agent
        include_repeats: Number of repeat tasks per agent
        choice_format: "AB", "AB_NONE", "ABC" or "ABC_NONE"
    """

    tasks_per_agent: int = 10
    randomize_order: bool = True
    include_holdouts: int = 0
    include_repeats: int = 0
    choice_format: str = "AB"

    def __post_init__(self) -> None:
        for name in ("tasks_per_agent", "include_holdouts", "include_repeats"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        if self.choice_format not in CHOICE_FORMATS:
            raise ConfigurationError(
                f"Unknown choice_format: {self.choice_format}. "
                f"Use one of {', '.join(CHOICE_FORMATS)}."
            )

    @property
    def choice_set_size(self) -> int:
        return CHOICE_FORMATS[self.choice_format][0]

    @property
    def include_none(self) -> bool:
        return CHOICE_FORMATS[self.choice_format][1]

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TaskPlan:
        data = data or {}
        defaults = cls()

        def _count(name: str, default: int) -> int:
            value = data.get(name)
            return default if value is None else int(value)

        return cls(
            tasks_per_agent=_count("tasksPerAgent", defaults.tasks_per_agent),
            randomize_order=data.get("randomizeOrder") is not False,
            include_holdouts=_count("includeHoldouts", defaults.include_holdouts),
            include_repeats=_count("includeRepeats", defaults.include_repeats),
            choice_format=data.get("choiceFormat") or "AB",
        )


@dataclass(frozen=True)
class Task:
    """
    One choice-set instance shown to one agent.

    Attributes:
        id: ``f"{agent_id}_task_{index}"``
        agent_id: Agent that sees the task
        shown_alternatives: Ordered alternative ids (at least 2)
        is_holdout: Excluded from model fitting, used for validation
        is_repeat_of: Id of the task this one duplicates, or None
    """

    id: str
    agent_id: str
    shown_alternatives: tuple[str, ...]
    is_holdout: bool = False
    is_repeat_of: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "shown_alternatives", tuple(self.shown_alternatives))
        if len(self.shown_alternatives) < 2:
            raise DataValidationError(
                f"Task {self.id} must show at least 2 alternatives, "
                f"got {len(self.shown_alternatives)}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=str(data["id"]),
            agent_id=str(data["agentId"]),
            shown_alternatives=tuple(data.get("shownAlternatives") or ()),
            is_holdout=bool(data.get("isHoldout", False)),
            is_repeat_of=data.get("isRepeatOf"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "agentId": self.agent_id,
            "shownAlternatives": list(self.shown_alternatives),
            "isHoldout": self.is_holdout,
            "isRepeatOf": self.is_repeat_of,
        }


@dataclass(frozen=True)
class Response:
    """
    The recorded outcome of one task.

    Attributes:
        task_id: Task answered
        agent_id: Agent that answered
        chosen: Alternative id, or "NONE"
        confidence: 0..1, optional
        reason_codes: Feature keys cited as reasons, optional
        explanation: Free-text justification, optional
        segment_id: Explicit segment membership of the agent, optional
    """

    task_id: str
    agent_id: str
    chosen: str
    confidence: float | None = None
    reason_codes: tuple[str, ...] = ()
    explanation: str = ""
    segment_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "reason_codes", tuple(self.reason_codes))

    @property
    def is_none(self) -> bool:
        return self.chosen == NONE_CHOICE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Response:
        confidence = data.get("confidence")
        return cls(
            task_id=str(data["taskId"]),
            agent_id=str(data["agentId"]),
            chosen=str(data["chosen"]),
            confidence=float(confidence) if confidence is not None else None,
            reason_codes=tuple(data.get("reasonCodes") or ()),
            explanation=data.get("explanation") or "",
            segment_id=data.get("segmentId"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "taskId": self.task_id,
            "agentId": self.agent_id,
            "chosen": self.chosen,
            "confidence": self.confidence,
            "reasonCodes": list(self.reason_codes),
            "explanation": self.explanation,
        }
        if self.segment_id is not None:
            out["segmentId"] = self.segment_id
        return out


# =============================================================================
# EXPERIMENT BUNDLE
# =============================================================================


@dataclass(frozen=True)
class Experiment:
    """Everything needed to run and analyze one experiment."""

    features: tuple[Feature, ...]
    alternatives: tuple[Alternative, ...]
    segments: tuple[Segment, ...] = ()
    task_plan: TaskPlan = field(default_factory=TaskPlan)

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", tuple(self.features))
        object.__setattr__(self, "alternatives", tuple(self.alternatives))
        object.__setattr__(self, "segments", tuple(self.segments))
        check_unique_keys(list(self.features))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Experiment:
        """Build from a document with features, alternatives, segments, taskPlan.

        ``features`` may also be nested as ``featureSchema.features`` and
        ``segments`` as ``agentPlan.segments``.
        """
        features = data.get("features")
        if features is None:
            features = (data.get("featureSchema") or {}).get("features", [])
        segments = data.get("segments")
        if segments is None:
            segments = (data.get("agentPlan") or {}).get("segments", [])
        return cls(
            features=tuple(Feature.from_dict(f) for f in features),
            alternatives=tuple(Alternative.from_dict(a) for a in data.get("alternatives", [])),
            segments=tuple(Segment.from_dict(s) for s in segments),
            task_plan=TaskPlan.from_dict(data.get("taskPlan")),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> Experiment:
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def load_experiment(path: str | Path) -> Experiment:
    """Read an experiment definition from a JSON file."""
    return Experiment.from_json(path)
