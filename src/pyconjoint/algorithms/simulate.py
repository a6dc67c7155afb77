"""Heuristic choice simulation.

Stands in for a real respondent: each shown alternative gets a trait-weighted
utility built from its normalized feature values, uniform noise scaled by the
agent's inconsistency is added, and the highest noisy score wins.

The feature-to-utility mapping is a replaceable ScoringRules object, and
anything implementing the ChoiceProducer protocol can replace the heuristic
altogether (for example an adapter around an external judge) as long as it
returns the same Response shape.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Protocol, Sequence, runtime_checkable

from pyconjoint.core.exceptions import UnknownReferenceError
from pyconjoint.core.schema import Agent, Alternative, Feature, Response, Task, Traits
from pyconjoint.core.types import NONE_CHOICE, FeatureValue, RandomSource, as_generator

logger = logging.getLogger(__name__)

Scorer = Callable[[float, Traits], float]


# =============================================================================
# NORMALIZATION
# =============================================================================


def normalize_value(feature: Feature, value: FeatureValue) -> float:
    """
    Map a raw feature value onto [0, 1] for scoring.

    - continuous: ``(v - min) / (max - min)`` with min/max defaulting to
      0/100; a zero range gives 0.5
    - categorical: category index / max(n_categories - 1, 1); unknown -> 0
    - binary: 1.0 if truthy else 0.0
    """
    if feature.type == "continuous":
        lo = 0.0 if feature.min is None else float(feature.min)
        hi = 100.0 if feature.max is None else float(feature.max)
        span = hi - lo
        if span == 0:
            return 0.5
        return (float(value) - lo) / span
    if feature.type == "categorical":
        try:
            index = feature.categories.index(value)
        except ValueError:
            return 0.0
        return index / max(len(feature.categories) - 1, 1)
    if feature.type == "binary":
        return 1.0 if value else 0.0
    return 0.0


# =============================================================================
# SCORING RULES
# =============================================================================


def _price_score(v: float, traits: Traits) -> float:
    return (1.0 - v) * traits.price_sensitivity * 2.0


def _assurance_score(v: float, traits: Traits) -> float:
    return v * (1.0 - traits.risk_tolerance) * 1.5


def _quality_score(v: float, traits: Traits) -> float:
    return v * 1.5


def _identity_score(v: float, traits: Traits) -> float:
    return v


@dataclass(frozen=True)
class ScoringRule:
    """Scorer applied to every feature whose key matches one of ``keys``."""

    keys: tuple[str, ...]
    scorer: Scorer
    phrase: str | None = None


@dataclass(frozen=True)
class ScoringRules:
    """
    Strategy mapping feature keys to utility contributions.

    Rules are tried in order and the first match wins; unmatched features use
    ``default_scorer``. Keys are compared case-insensitively, either exactly
    or (``match="substring"``) by containment, so "base_price" can be treated
    as a price.

    Attributes:
        rules: Ordered scoring rules
        default_scorer: Scorer for features no rule matches
        match: "exact" or "substring"
        none_threshold: "NONE" is chosen when every shown alternative's
            raw score is below this
        noise_scale: Multiplier on ``(u - 0.5) * (1 - consistency)``
        n_reasons: Maximum number of reason codes reported

    Example:
        >>> rules = default_rules().with_rule(("eco",), lambda v, t: v * 2.0)
        >>> simulate_choice(agent, shown, features, rules=rules)
    """

    rules: tuple[ScoringRule, ...] = ()
    default_scorer: Scorer = _identity_score
    match: str = "exact"
    none_threshold: float = 0.3
    noise_scale: float = 0.5
    n_reasons: int = 3
    phrases: Mapping[str, str] = field(default_factory=dict)

    def _matches(self, key: str, candidate: str) -> bool:
        if self.match == "substring":
            return candidate in key
        return candidate == key

    def scorer_for(self, key: str) -> Scorer:
        key = key.lower()
        for rule in self.rules:
            if any(self._matches(key, k) for k in rule.keys):
                return rule.scorer
        return self.default_scorer

    def score(self, key: str, normalized: float, traits: Traits) -> float:
        return float(self.scorer_for(key)(normalized, traits))

    def phrase_for(self, key: str) -> str:
        """Human-readable reason phrase for an explanation."""
        phrase = self.phrases.get(key.lower())
        if phrase:
            return phrase
        return f"the {key} offering"

    def with_rule(self, keys: Sequence[str], scorer: Scorer, phrase: str | None = None) -> ScoringRules:
        """Return a copy with a rule prepended (it takes precedence)."""
        rule = ScoringRule(tuple(k.lower() for k in keys), scorer, phrase)
        phrases = dict(self.phrases)
        if phrase:
            phrases.update({k.lower(): phrase for k in keys})
        return dataclasses.replace(self, rules=(rule,) + self.rules, phrases=phrases)

    def replace_rules(self, rules: Sequence[ScoringRule]) -> ScoringRules:
        return dataclasses.replace(self, rules=tuple(rules))


def default_rules(match: str = "exact") -> ScoringRules:
    """The stock trait-weighted rules."""
    return ScoringRules(
        rules=(
            ScoringRule(("price", "cost"), _price_score),
            ScoringRule(("warranty", "guarantee", "support"), _assurance_score),
            ScoringRule(("quality", "reliability"), _quality_score),
        ),
        match=match,
        phrases={
            "price": "better pricing",
            "cost": "better pricing",
            "warranty": "better warranty coverage",
            "quality": "higher quality",
            "support": "better support options",
        },
    )


DEFAULT_RULES = default_rules()


# =============================================================================
# SINGLE CHOICE
# =============================================================================


def score_alternative(
    traits: Traits,
    alternative: Alternative,
    features: Sequence[Feature],
    rules: ScoringRules = DEFAULT_RULES,
) -> tuple[float, dict[str, float]]:
    """Return the raw utility of an alternative and each feature's contribution."""
    contributions: dict[str, float] = {}
    for feature in features:
        value = alternative.features.get(feature.key)
        if value is None:
            continue
        contributions[feature.key] = rules.score(
            feature.key, normalize_value(feature, value), traits
        )
    return sum(contributions.values()), contributions


def _explain(chosen: Alternative | None, reason_codes: list[str], rules: ScoringRules) -> str:
    if chosen is None:
        return "None of the options met my requirements."
    if not reason_codes:
        return f"Chose {chosen.name} based on overall evaluation."
    return f"Chose {chosen.name} primarily due to {rules.phrase_for(reason_codes[0])}."


def simulate_choice(
    agent: Agent,
    shown_alternatives: Sequence[Alternative],
    features: Sequence[Feature],
    include_none: bool = False,
    rng: RandomSource = None,
    rules: ScoringRules | None = None,
) -> Response:
    """
    Simulate one agent's choice among the shown alternatives.

    Args:
        agent: Agent making the choice (its traits drive the scoring)
        shown_alternatives: Alternatives in the order shown
        features: Feature schema
        include_none: Whether "NONE" may be chosen
        rng: numpy Generator or seed for the choice noise
        rules: Scoring strategy (defaults to ``default_rules()``)

    Returns:
        Response with an empty ``task_id``; callers that know the task fill it
        in (``batch_simulate`` does).

    Example:
        >>> response = simulate_choice(agent, [alt_a, alt_b], features, rng=0)
        >>> response.chosen, response.confidence
        ('A', 0.83)
    """
    rules = rules or DEFAULT_RULES
    gen = as_generator(rng)
    traits = agent.traits
    inconsistency = 1.0 - traits.consistency

    scored = []
    contributions: dict[str, dict[str, float]] = {}
    for alt in shown_alternatives:
        raw, contrib = score_alternative(traits, alt, features, rules)
        noise = (gen.random() - 0.5) * inconsistency * rules.noise_scale
        scored.append((raw + noise, raw, alt))
        contributions[alt.id] = contrib

    # Stable sort keeps display order on exact ties
    scored.sort(key=lambda s: -s[0])

    chosen: Alternative | None = scored[0][2] if scored else None
    if include_none and scored and max(s[1] for s in scored) < rules.none_threshold:
        chosen = None

    if len(scored) >= 2:
        confidence = min(0.5 + (scored[0][0] - scored[1][0]), 0.99)
    elif len(scored) == 1:
        confidence = 0.8
    else:
        confidence = 0.5

    reason_codes: list[str] = []
    if chosen is not None:
        positive = [(k, c) for k, c in contributions[chosen.id].items() if c > 0]
        positive.sort(key=lambda kc: -kc[1])
        reason_codes = [k for k, _ in positive[: rules.n_reasons]]

    return Response(
        task_id="",
        agent_id=agent.id,
        chosen=chosen.id if chosen is not None else NONE_CHOICE,
        confidence=round(float(confidence), 2),
        reason_codes=tuple(reason_codes),
        explanation=_explain(chosen, reason_codes, rules),
        segment_id=agent.segment_id,
    )


# =============================================================================
# PRODUCERS
# =============================================================================


@runtime_checkable
class ChoiceProducer(Protocol):
    """Anything that can answer a choice task with a Response."""

    def choose(
        self,
        agent: Agent,
        shown_alternatives: Sequence[Alternative],
        features: Sequence[Feature],
        include_none: bool,
    ) -> Response:
        ...


class HeuristicChoiceProducer:
    """
    ChoiceProducer backed by ``simulate_choice``.

    Holds one Generator for the whole run so that a seeded producer
    reproduces the same responses for the same task sequence.
    """

    def __init__(self, rules: ScoringRules | None = None, rng: RandomSource = None):
        self.rules = rules or DEFAULT_RULES
        self.rng = as_generator(rng)

    def choose(
        self,
        agent: Agent,
        shown_alternatives: Sequence[Alternative],
        features: Sequence[Feature],
        include_none: bool,
    ) -> Response:
        return simulate_choice(
            agent,
            shown_alternatives,
            features,
            include_none=include_none,
            rng=self.rng,
            rules=self.rules,
        )

    def __repr__(self) -> str:
        return f"HeuristicChoiceProducer(rules={len(self.rules.rules)}, match={self.rules.match!r})"


def batch_simulate(
    tasks: Sequence[Task],
    agents: Sequence[Agent],
    alternatives: Sequence[Alternative],
    features: Sequence[Feature],
    include_none: bool = False,
    producer: ChoiceProducer | None = None,
    rng: RandomSource = None,
    strict: bool = False,
) -> list[Response]:
    """
    Answer every task whose agent is known, in task order.

    Tasks for unknown agents are skipped. Shown ids that match no alternative
    are dropped from that task's choice set.

    Args:
        tasks: Tasks to answer
        agents: All agents of the run
        alternatives: All alternatives
        features: Feature schema
        include_none: Whether "NONE" may be chosen
        producer: Choice producer; defaults to a HeuristicChoiceProducer
            seeded from ``rng``
        rng: Seed or Generator for the default producer
        strict: Raise UnknownReferenceError instead of skipping unknown
            agents or dropping unknown alternative ids

    Returns:
        One Response per answered task, stamped with the task id
    """
    producer = producer or HeuristicChoiceProducer(rng=rng)
    agents_by_id = {a.id: a for a in agents}
    alts_by_id = {a.id: a for a in alternatives}

    responses = []
    skipped = 0
    for task in tasks:
        agent = agents_by_id.get(task.agent_id)
        if agent is None:
            if strict:
                raise UnknownReferenceError(f"Task {task.id!r} references unknown agent {task.agent_id!r}")
            skipped += 1
            continue
        unknown = [i for i in task.shown_alternatives if i not in alts_by_id]
        if unknown and strict:
            raise UnknownReferenceError(f"Task {task.id!r} shows unknown alternatives: {unknown}")
        shown = [alts_by_id[i] for i in task.shown_alternatives if i in alts_by_id]
        response = producer.choose(agent, shown, features, include_none)
        responses.append(
            dataclasses.replace(
                response,
                task_id=task.id,
                agent_id=task.agent_id,
                segment_id=response.segment_id or agent.segment_id,
            )
        )

    if skipped:
        logger.debug("Skipped %d task(s) with unknown agents", skipped)
    return responses
