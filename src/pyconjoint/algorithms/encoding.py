"""Feature encoding for the MNL design matrix.

Turns each alternative into a fixed-length numeric vector:

- continuous features are z-scored against the alternatives the encoder was
  fitted on (population std; a constant feature encodes as 0),
- categorical features are one-hot with labels ``"key:category"``,
- binary features are 0/1.

The fitted statistics are kept so that hypothetical concepts can later be
encoded on exactly the same scale as the experiment's alternatives.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from pyconjoint.core.exceptions import DataValidationError
from pyconjoint.core.schema import Alternative, Feature
from pyconjoint.core.types import FeatureValue

logger = logging.getLogger(__name__)


class FeatureEncoder:
    """
    Encodes alternatives into the vectors used by the MNL.

    Follows the fit/transform pattern: ``fit()`` learns the continuous
    feature statistics from the experiment's alternatives, then
    ``transform()`` encodes those or any other concepts.

    Example:
        >>> encoder = FeatureEncoder(features).fit(alternatives)
        >>> X = encoder.transform(alternatives)   # (n_alternatives, n_labels)
        >>> encoder.labels
        ('price', 'brand:Acme', 'brand:Zeta', 'eco')

    Attributes:
        features: Feature schema in declaration order
        labels: Encoded column labels
        means / stds: Fitted statistics per continuous feature key
    """

    def __init__(self, features: Sequence[Feature]) -> None:
        self.features = tuple(features)
        self.means: dict[str, float] = {}
        self.stds: dict[str, float] = {}
        self._fitted = False

        labels: list[str] = []
        for feature in self.features:
            if feature.type == "categorical":
                labels.extend(f"{feature.key}:{cat}" for cat in feature.categories)
            else:
                labels.append(feature.key)
        self.labels: tuple[str, ...] = tuple(labels)
        self._index = {label: i for i, label in enumerate(self.labels)}

    @property
    def is_fitted(self) -> bool:
        return self._fitted

    @property
    def n_labels(self) -> int:
        return len(self.labels)

    def fit(self, alternatives: Sequence[Alternative]) -> FeatureEncoder:
        """Learn mean and std of each continuous feature across the alternatives."""
        for feature in self.features:
            if feature.type != "continuous":
                continue
            values = np.array(
                [
                    float(alt.features[feature.key])
                    for alt in alternatives
                    if alt.features.get(feature.key) is not None
                ],
                dtype=np.float64,
            )
            if values.size == 0:
                self.means[feature.key] = 0.0
                self.stds[feature.key] = 0.0
            else:
                self.means[feature.key] = float(np.mean(values))
                self.stds[feature.key] = float(np.std(values))
        self._fitted = True
        logger.debug(
            "Fitted encoder on %d alternatives: %d encoded columns",
            len(alternatives),
            self.n_labels,
        )
        return self

    def encode(self, values: Mapping[str, FeatureValue]) -> NDArray[np.float64]:
        """Encode one concept's raw feature values. Missing values encode as 0."""
        if not self._fitted:
            raise DataValidationError("FeatureEncoder must be fitted before encoding")

        x = np.zeros(self.n_labels, dtype=np.float64)
        for feature in self.features:
            value = values.get(feature.key)
            if value is None:
                continue
            if feature.type == "continuous":
                std = self.stds.get(feature.key, 0.0)
                if std > 0:
                    x[self._index[feature.key]] = (float(value) - self.means[feature.key]) / std
            elif feature.type == "categorical":
                column = self._index.get(f"{feature.key}:{value}")
                if column is not None:
                    x[column] = 1.0
            else:
                x[self._index[feature.key]] = 1.0 if value else 0.0
        return x

    def transform(self, alternatives: Sequence[Alternative]) -> NDArray[np.float64]:
        """Encode alternatives into an (n_alternatives, n_labels) matrix."""
        if len(alternatives) == 0:
            return np.zeros((0, self.n_labels), dtype=np.float64)
        return np.vstack([self.encode(alt.features) for alt in alternatives])

    def fit_transform(self, alternatives: Sequence[Alternative]) -> NDArray[np.float64]:
        return self.fit(alternatives).transform(alternatives)

    def encode_by_id(self, alternatives: Sequence[Alternative]) -> dict[str, NDArray[np.float64]]:
        """Return ``{alternative id: encoded vector}``."""
        return {alt.id: self.encode(alt.features) for alt in alternatives}

    def __repr__(self) -> str:
        state = "fitted" if self._fitted else "unfitted"
        return f"FeatureEncoder({state}, features={len(self.features)}, labels={self.n_labels})"
