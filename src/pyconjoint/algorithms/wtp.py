"""Willingness-to-pay from MNL part-worths."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from pyconjoint.algorithms.encoding import FeatureEncoder
from pyconjoint.core.config import DEFAULT_PRICE_PATTERN
from pyconjoint.core.result import MNLResult, WTPResult
from pyconjoint.core.schema import Feature

logger = logging.getLogger(__name__)


def find_price_feature(
    features: Sequence[Feature],
    pattern: str = DEFAULT_PRICE_PATTERN,
) -> Feature | None:
    """First continuous feature whose key or label matches ``pattern`` (case-insensitive)."""
    regex = re.compile(pattern, re.IGNORECASE)
    for feature in features:
        if feature.type != "continuous":
            continue
        if regex.search(feature.key) or regex.search(feature.label):
            return feature
    return None


def raw_part_worths(part_worths: MNLResult, encoder: FeatureEncoder | None) -> dict[str, float]:
    """
    Part-worths per raw unit of each feature.

    Continuous columns are z-scored by the encoder, so their betas are
    divided by the fitted std. One-hot and binary columns are already in
    raw units. Without an encoder the betas are returned as fitted.
    """
    betas = part_worths.as_dict()
    if encoder is None:
        return betas
    for key, std in encoder.stds.items():
        if key in betas and std > 0:
            betas[key] = betas[key] / std
    return betas


def compute_wtp(
    part_worths: MNLResult,
    features: Sequence[Feature],
    encoder: FeatureEncoder | None = None,
    pattern: str = DEFAULT_PRICE_PATTERN,
    min_price_beta: float = 1e-6,
) -> WTPResult | None:
    """
    Compute WTP_k = -beta_k / beta_price for every other encoded label.

    Both betas are first taken back to raw units with ``raw_part_worths``,
    so a value is the change in price, in the price feature's unit, that
    offsets a one-unit change in the label: one point of a continuous
    feature, or switching a category or binary flag on.

    Args:
        part_worths: Overall MNL fit
        features: Feature schema
        encoder: Encoder the fit was made with; None when the
            coefficients are already per raw unit
        pattern: Regex identifying the price feature
        min_price_beta: ``|beta_price|`` of the fit below this leaves WTP
            undefined

    Returns:
        WTPResult, or None when there is no price feature or its
        part-worth is effectively zero

    Example:
        >>> wtp = compute_wtp(fit, features, encoder)
        >>> wtp.values["quality"]
        27.9
    """
    price = find_price_feature(features, pattern)
    if price is None:
        logger.debug("No price-like continuous feature; WTP undefined")
        return None

    fitted_price_beta = part_worths.as_dict().get(price.key, 0.0)
    if abs(fitted_price_beta) < min_price_beta:
        logger.debug("Price part-worth %.3g below %.3g; WTP undefined", fitted_price_beta, min_price_beta)
        return None

    betas = raw_part_worths(part_worths, encoder)
    price_beta = betas[price.key]
    values = {
        label: -beta / price_beta
        for label, beta in betas.items()
        if label != price.key
    }
    return WTPResult(
        price_feature=price.key,
        price_unit=price.unit,
        price_beta=float(price_beta),
        values=values,
    )
