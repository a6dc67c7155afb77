"""Estimation configuration.

Every tunable used by the results estimator lives in one frozen dataclass so
runs can be reproduced from a single object (or JSON file).
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from pyconjoint.core.exceptions import ConfigurationError


DEFAULT_PRICE_PATTERN = r"price|cost|fee|premium"


@dataclass(frozen=True)
class EstimationConfig:
    """
    Configuration for the results estimator.

    Attributes:
        learning_rate: Gradient step size for the MNL fit
        n_iterations: Number of batch gradient steps
        l2_penalty: Ridge penalty lambda applied to beta
        min_observations: Minimum qualifying responses before an MNL is fitted
        n_bootstrap: Number of bootstrap resamples for share intervals
        confidence_level: Two-sided interval level (0.90 -> 5th/95th percentiles)
        price_pattern: Case-insensitive regex identifying the price feature
        wtp_min_price_beta: |beta_price| below this leaves WTP undefined
        top_drivers: Number of drivers reported per alternative
        choice_set: "universe" (all alternatives) or "shown" (each task's set)
        n_jobs: Worker threads for per-segment MNL fits (1 = sequential)

    Example:
        >>> config = EstimationConfig(n_iterations=1000, n_bootstrap=500)
        >>> config = EstimationConfig.from_json("estimation.json")
    """

    learning_rate: float = 0.05
    n_iterations: int = 400
    l2_penalty: float = 0.001
    min_observations: int = 5
    n_bootstrap: int = 200
    confidence_level: float = 0.90
    price_pattern: str = DEFAULT_PRICE_PATTERN
    wtp_min_price_beta: float = 1e-6
    top_drivers: int = 3
    choice_set: str = "universe"
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.learning_rate <= 0:
            raise ConfigurationError(
                f"learning_rate must be positive, got {self.learning_rate}"
            )
        if self.n_iterations < 0:
            raise ConfigurationError(
                f"n_iterations must be non-negative, got {self.n_iterations}"
            )
        if self.l2_penalty < 0:
            raise ConfigurationError(f"l2_penalty must be non-negative, got {self.l2_penalty}")
        if self.min_observations < 1:
            raise ConfigurationError(
                f"min_observations must be at least 1, got {self.min_observations}"
            )
        if self.n_bootstrap < 0:
            raise ConfigurationError(f"n_bootstrap must be non-negative, got {self.n_bootstrap}")
        if not 0.0 < self.confidence_level < 1.0:
            raise ConfigurationError(
                f"confidence_level must be in (0, 1), got {self.confidence_level}"
            )
        if self.choice_set not in ("universe", "shown"):
            raise ConfigurationError(
                f"choice_set must be 'universe' or 'shown', got {self.choice_set!r}"
            )
        if self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be at least 1, got {self.n_jobs}")
        try:
            re.compile(self.price_pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid price_pattern {self.price_pattern!r}: {e}") from e

    @property
    def percentiles(self) -> tuple[float, float]:
        """Lower/upper percentiles (0-100) for the bootstrap interval."""
        alpha = 1.0 - self.confidence_level
        return 100.0 * alpha / 2.0, 100.0 * (1.0 - alpha / 2.0)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EstimationConfig:
        """Build from a dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown estimation settings: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> EstimationConfig:
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
