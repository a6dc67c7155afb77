"""Result dataclasses for choice simulation and estimation.

This module provides result containers for every stage of the estimator,
plus the combined ResultsSummary document handed back to the collaborator.

Result types:
    - TaskStats: Composition of a generated task list
    - SharesResult: Overall and per-segment choice shares
    - FeatureImportanceResult: Reason-code citation frequency (max-normalized)
    - MNLResult / PartWorthResult: Multinomial-logit part-worth utilities
    - WTPResult: Willingness-to-pay relative to the price feature
    - ChoiceDriversResult: Per-alternative reason-code attribution
    - ShareIntervalResult: Bootstrap confidence intervals for shares
    - ResponseStats: Counts, NONE rate and mean confidence
    - ValidationResult: Holdout accuracy and repeat consistency
    - ResultsSummary: Everything above in one document
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyconjoint.core.mixins import ResultSummaryMixin


@dataclass(frozen=True)
class TaskStats:
    """Composition of a generated task list."""

    total: int
    regular: int
    holdouts: int
    repeats: int
    unique_agents: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "regular": self.regular,
            "holdouts": self.holdouts,
            "repeats": self.repeats,
            "uniqueAgents": self.unique_agents,
        }


@dataclass(frozen=True)
class SharesResult:
    """
    Choice shares.

    Attributes:
        overall: alternative id (and "NONE" when chosen) -> fraction of all responses
        by_segment: segment id -> alternative id -> fraction of that segment's responses
        segment_totals: segment id -> number of responses attributed to it
        total_responses: Number of responses counted
    """

    overall: dict[str, float]
    by_segment: dict[str, dict[str, float]]
    segment_totals: dict[str, int]
    total_responses: int

    def summary(self) -> str:
        m = ResultSummaryMixin
        lines = [m._format_header("CHOICE SHARES")]
        lines.append(m._format_metric("Responses", self.total_responses))
        lines.append(m._format_section("Overall"))
        lines.extend(m._format_mapping(self.overall, percent=True))
        for seg_id, shares in self.by_segment.items():
            lines.append(m._format_section(f"Segment {seg_id} (n={self.segment_totals.get(seg_id, 0)})"))
            lines.extend(m._format_mapping(shares, percent=True))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {"overall": dict(self.overall), "bySegment": {k: dict(v) for k, v in self.by_segment.items()}}


@dataclass(frozen=True)
class FeatureImportanceResult:
    """
    Reason-code citation frequency per feature.

    Values are counts divided by the largest count in the same scope, so the
    most-cited feature in each scope is exactly 1.0. This is a relative
    citation frequency, not a causal effect size and not a probability; the
    scale is not comparable across experiments or across segments.
    """

    overall: dict[str, float]
    by_segment: dict[str, dict[str, float]]
    overall_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"overall": dict(self.overall), "bySegment": {k: dict(v) for k, v in self.by_segment.items()}}


@dataclass(frozen=True)
class MNLResult:
    """
    Result of a multinomial-logit fit by batch gradient ascent.

    Attributes:
        coefficients: Part-worth vector beta, aligned with labels
        labels: Encoded feature labels ("price", "brand:Acme", ...)
        n_observations: Qualifying observations used in the fit
        log_likelihood: Log-likelihood at the final beta (0.0 when not fitted)
        fitted: False when the minimum-observation guard returned zeros
        n_iterations: Gradient steps taken
    """

    coefficients: NDArray[np.float64]
    labels: tuple[str, ...]
    n_observations: int
    log_likelihood: float
    fitted: bool
    n_iterations: int = 0

    def as_dict(self) -> dict[str, float]:
        """Return {encoded label: beta}."""
        return {label: float(b) for label, b in zip(self.labels, self.coefficients)}

    def __getitem__(self, label: str) -> float:
        return self.as_dict()[label]

    def summary(self) -> str:
        m = ResultSummaryMixin
        lines = [m._format_header("MNL PART-WORTH REPORT")]
        status = m._format_status(self.fitted, "FITTED", "NOT FITTED (insufficient data)")
        lines.append(f"\nStatus: {status}")
        lines.append(m._format_section("Fit"))
        lines.append(m._format_metric("Observations", self.n_observations))
        lines.append(m._format_metric("Iterations", self.n_iterations))
        lines.append(m._format_metric("Log-Likelihood", self.log_likelihood))
        lines.append(m._format_section("Part-Worths"))
        lines.extend(m._format_mapping(self.as_dict(), max_items=20))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "coefficients": self.as_dict(),
            "nObservations": self.n_observations,
            "logLikelihood": self.log_likelihood,
            "fitted": self.fitted,
        }

    def __repr__(self) -> str:
        status = "fitted" if self.fitted else "unfitted"
        return f"MNLResult({status}, k={len(self.labels)}, n={self.n_observations})"


@dataclass(frozen=True)
class PartWorthResult:
    """Overall MNL fit plus one fit per segment that met the observation minimum."""

    overall: MNLResult
    by_segment: dict[str, MNLResult]

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall.as_dict(),
            "bySegment": {seg: fit.as_dict() for seg, fit in self.by_segment.items()},
        }


@dataclass(frozen=True)
class WTPResult:
    """
    Willingness-to-pay for each encoded feature dimension.

    WTP_k = -beta_k / beta_price. With a negative price coefficient a positive
    part-worth yields a positive WTP.

    Attributes:
        price_feature: Key of the detected price feature
        price_unit: Unit declared on the price feature
        price_beta: Overall part-worth per unit of the price feature
        values: encoded label -> WTP in the price unit (price feature
            itself excluded)
    """

    price_feature: str
    price_unit: str
    price_beta: float
    values: dict[str, float]

    def summary(self) -> str:
        m = ResultSummaryMixin
        lines = [m._format_header("WILLINGNESS-TO-PAY REPORT")]
        lines.append(m._format_metric("Price Feature", self.price_feature))
        lines.append(m._format_metric("Price Unit", self.price_unit or "(none)"))
        lines.append(m._format_metric("Price Part-Worth", self.price_beta))
        lines.append(m._format_section("WTP per Feature"))
        lines.extend(m._format_mapping(self.values, max_items=20))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceFeature": self.price_feature,
            "priceUnit": self.price_unit,
            "values": dict(self.values),
        }


@dataclass(frozen=True)
class DriverEntry:
    """One feature cited as a driver of an alternative's choices."""

    feature: str
    count: int
    share: float

    def to_dict(self) -> dict[str, Any]:
        return {"feature": self.feature, "count": self.count, "share": self.share}


@dataclass(frozen=True)
class DriverCoverage:
    """How many responses carried usable reason codes."""

    total_responses: int
    responses_with_reasons: int
    coverage_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "responsesWithReasons": self.responses_with_reasons,
            "coverageRate": self.coverage_rate,
        }


@dataclass(frozen=True)
class ChoiceDriversResult:
    """
    Reason-code attribution per chosen alternative.

    Attributes:
        alt_feature_counts: alt id -> feature key -> citations
        alt_choice_counts: alt id -> times chosen
        co_occurrence: feature -> feature -> responses citing both
            (symmetric; the diagonal is the feature's own citation count)
        heatmap: alt_feature_counts divided by each alternative's max count
        top_drivers: alt id -> most-cited features with count and share
        coverage: Reason-code coverage across all responses
    """

    alt_feature_counts: dict[str, dict[str, int]]
    alt_choice_counts: dict[str, int]
    co_occurrence: dict[str, dict[str, int]]
    heatmap: dict[str, dict[str, float]]
    top_drivers: dict[str, list[DriverEntry]]
    coverage: DriverCoverage

    def to_dict(self) -> dict[str, Any]:
        return {
            "altFeatureCounts": {a: dict(c) for a, c in self.alt_feature_counts.items()},
            "altChoiceCounts": dict(self.alt_choice_counts),
            "coOccurrence": {f: dict(c) for f, c in self.co_occurrence.items()},
            "heatmap": {a: dict(h) for a, h in self.heatmap.items()},
            "topDrivers": {a: [d.to_dict() for d in ds] for a, ds in self.top_drivers.items()},
            "coverage": self.coverage.to_dict(),
        }


@dataclass(frozen=True)
class ShareInterval:
    """Bootstrap interval for one alternative's share."""

    lo: float
    hi: float
    mean: float

    def to_dict(self) -> dict[str, float]:
        return {"lo": self.lo, "hi": self.hi, "mean": self.mean}


@dataclass(frozen=True)
class ShareIntervalResult:
    """
    Percentile bootstrap intervals for overall choice shares.

    Attributes:
        intervals: alternative id -> ShareInterval
        n_bootstrap: Number of resamples drawn
        confidence_level: Interval level (0.90 -> 5th and 95th percentiles)
        computation_time_ms: Time taken in milliseconds
    """

    intervals: dict[str, ShareInterval]
    n_bootstrap: int
    confidence_level: float
    computation_time_ms: float = 0.0

    def __getitem__(self, alt_id: str) -> ShareInterval:
        return self.intervals[alt_id]

    def __contains__(self, alt_id: object) -> bool:
        return alt_id in self.intervals

    def __len__(self) -> int:
        return len(self.intervals)

    def summary(self) -> str:
        m = ResultSummaryMixin
        lines = [m._format_header("SHARE CONFIDENCE INTERVALS")]
        lines.append(m._format_metric("Resamples", self.n_bootstrap))
        lines.append(m._format_percent("Level", self.confidence_level))
        lines.append(m._format_section("Intervals"))
        if not self.intervals:
            lines.append("  (none)")
        for alt_id, ci in self.intervals.items():
            lines.append(
                f"  {alt_id}: mean {ci.mean * 100:.1f}% "
                f"[{ci.lo * 100:.1f}%, {ci.hi * 100:.1f}%]"
            )
        lines.append(m._format_footer(self.computation_time_ms))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {alt_id: ci.to_dict() for alt_id, ci in self.intervals.items()}


@dataclass(frozen=True)
class ResponseStats:
    """Headline response counts."""

    total_responses: int
    none_count: int
    none_rate: float
    avg_confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "noneCount": self.none_count,
            "noneRate": self.none_rate,
            "avgConfidence": self.avg_confidence,
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Predictive-validity and reliability checks.

    Attributes:
        holdout_accuracy: Share of holdout responses matching the MNL argmax
            over the task's shown alternatives, or None if not measurable
        repeat_consistency: Share of repeat tasks answered like their source,
            or None if no repeat pairs were answered
        n_holdout: Holdout responses scored
        n_repeat_pairs: Repeat/source pairs compared
    """

    holdout_accuracy: float | None
    repeat_consistency: float | None
    n_holdout: int = 0
    n_repeat_pairs: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "holdoutAccuracy": self.holdout_accuracy,
            "repeatConsistency": self.repeat_consistency,
            "holdoutCount": self.n_holdout,
            "repeatCount": self.n_repeat_pairs,
        }


@dataclass(frozen=True)
class ResultsSummary:
    """
    Complete results document for one run.

    Derived only from responses, alternatives, features and segments (plus
    tasks for the validation block); recompute it whenever responses change.
    """

    shares: SharesResult
    feature_importance: FeatureImportanceResult
    part_worths: PartWorthResult
    wtp: WTPResult | None
    choice_drivers: ChoiceDriversResult
    confidence: ShareIntervalResult
    response_stats: ResponseStats
    validation: ValidationResult | None = None
    computation_time_ms: float = 0.0

    def summary(self) -> str:
        """Return human-readable summary report."""
        m = ResultSummaryMixin
        lines = [m._format_header("CHOICE EXPERIMENT RESULTS")]

        lines.append(m._format_section("Responses"))
        lines.append(m._format_metric("Total", self.response_stats.total_responses))
        lines.append(m._format_metric("None Chosen", self.response_stats.none_count))
        lines.append(m._format_percent("None Rate", self.response_stats.none_rate))
        lines.append(m._format_metric("Avg Confidence", self.response_stats.avg_confidence))

        lines.append(m._format_section("Overall Shares"))
        for alt_id, share in self.shares.overall.items():
            ci = self.confidence.intervals.get(alt_id)
            interval = f" [{ci.lo * 100:.1f}%, {ci.hi * 100:.1f}%]" if ci else ""
            lines.append(f"  {alt_id}: {share * 100:.1f}%{interval}")

        lines.append(m._format_section("Part-Worths"))
        if self.part_worths.overall.fitted:
            lines.extend(m._format_mapping(self.part_worths.overall.as_dict()))
        else:
            lines.append("  Not estimated (too few qualifying responses)")

        lines.append(m._format_section("Willingness to Pay"))
        if self.wtp is None:
            lines.append("  Undefined (no price feature or zero price part-worth)")
        else:
            unit = f" {self.wtp.price_unit}" if self.wtp.price_unit else ""
            for key, value in self.wtp.values.items():
                lines.append(f"  {key}: {value:,.2f}{unit}")

        lines.append(m._format_section("Top Cited Features"))
        lines.extend(m._format_mapping(self.feature_importance.overall, max_items=5))

        if self.validation is not None:
            lines.append(m._format_section("Validation"))
            lines.append(m._format_percent("Holdout Accuracy", self.validation.holdout_accuracy))
            lines.append(m._format_percent("Repeat Consistency", self.validation.repeat_consistency))
            lines.append(f"  Reliability: {m._format_quality(self.validation.repeat_consistency)}")

        lines.append(m._format_footer(self.computation_time_ms))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase results document consumed by the application."""
        return {
            "shares": self.shares.to_dict(),
            "featureImportance": self.feature_importance.to_dict(),
            "partWorths": self.part_worths.to_dict(),
            "wtp": self.wtp.to_dict() if self.wtp is not None else None,
            "choiceDrivers": self.choice_drivers.to_dict(),
            "confidence": self.confidence.to_dict(),
            "responseStats": self.response_stats.to_dict(),
            "validation": self.validation.to_dict() if self.validation is not None else None,
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"ResultsSummary(responses={self.response_stats.total_responses}, "
            f"alternatives={len(self.shares.overall)}, "
            f"fitted={self.part_worths.overall.fitted})"
        )
