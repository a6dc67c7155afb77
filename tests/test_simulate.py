"""Tests for the heuristic choice simulator."""

import dataclasses

import numpy as np
import pytest

from pyconjoint import (
    Agent,
    Alternative,
    ChoiceProducer,
    Feature,
    HeuristicChoiceProducer,
    Response,
    Task,
    Traits,
    UnknownReferenceError,
    batch_simulate,
    default_rules,
    simulate_choice,
)
from pyconjoint.algorithms.shares import compute_shares
from pyconjoint.algorithms.simulate import normalize_value, score_alternative


class TestNormalizeValue:
    def test_continuous_defaults_to_0_100(self):
        assert normalize_value(Feature("x"), 50) == pytest.approx(0.5)

    def test_continuous_with_bounds(self):
        assert normalize_value(Feature("x", min=100, max=300), 150) == pytest.approx(0.25)

    def test_zero_range(self):
        assert normalize_value(Feature("x", min=5, max=5), 5) == 0.5

    def test_explicit_zero_bounds_are_used(self):
        # min=0 max=0 is a zero range, not the 0..100 default
        assert normalize_value(Feature("x", min=0, max=0), 3) == 0.5

    def test_categorical_index(self):
        f = Feature("size", type="categorical", categories=("S", "M", "L"))
        assert normalize_value(f, "S") == 0.0
        assert normalize_value(f, "M") == 0.5
        assert normalize_value(f, "L") == 1.0
        assert normalize_value(f, "XL") == 0.0

    def test_single_category(self):
        f = Feature("c", type="categorical", categories=("only",))
        assert normalize_value(f, "only") == 0.0

    def test_binary(self):
        f = Feature("eco", type="binary")
        assert normalize_value(f, True) == 1.0
        assert normalize_value(f, False) == 0.0


class TestScoringRules:
    def test_price_rule(self):
        rules = default_rules()
        traits = Traits(price_sensitivity=0.8)
        assert rules.score("price", 0.25, traits) == pytest.approx(0.75 * 0.8 * 2)

    def test_warranty_rule_uses_risk_aversion(self):
        rules = default_rules()
        assert rules.score("Warranty", 1.0, Traits(risk_tolerance=0.2)) == pytest.approx(0.8 * 1.5)

    def test_quality_rule(self):
        assert default_rules().score("reliability", 0.5, Traits()) == pytest.approx(0.75)

    def test_unmatched_key_is_identity(self):
        assert default_rules().score("battery", 0.4, Traits()) == pytest.approx(0.4)

    def test_exact_match_ignores_compound_keys(self):
        assert default_rules().score("base_price", 0.0, Traits()) == 0.0

    def test_substring_match(self):
        rules = default_rules(match="substring")
        assert rules.score("base_price", 0.0, Traits(price_sensitivity=1.0)) == pytest.approx(2.0)

    def test_with_rule_takes_precedence(self):
        rules = default_rules().with_rule(("price",), lambda v, t: -5.0, phrase="the deal")
        assert rules.score("price", 0.3, Traits()) == -5.0
        assert rules.phrase_for("price") == "the deal"

    def test_phrases(self):
        rules = default_rules()
        assert rules.phrase_for("Cost") == "better pricing"
        assert rules.phrase_for("support") == "better support options"
        assert rules.phrase_for("battery") == "the battery offering"


class TestSimulateChoice:
    @pytest.fixture
    def price_only(self):
        return [Feature("price", min=0, max=300)]

    @pytest.fixture
    def cheap_and_dear(self):
        return [Alternative("A", "Alpha", {"price": 100}), Alternative("B", "Bravo", {"price": 200})]

    def test_noiseless_agent_picks_cheaper(self, noiseless_agent, price_only, cheap_and_dear):
        r = simulate_choice(noiseless_agent, cheap_and_dear, price_only, rng=0)
        assert r.chosen == "A"
        assert r.confidence == 0.99
        assert r.reason_codes == ("price",)
        assert r.explanation == "Chose Alpha primarily due to better pricing."
        assert r.agent_id == noiseless_agent.id
        assert r.segment_id == "strict"

    def test_confidence_from_gap(self, price_only):
        agent = Agent("a_1", "a", Traits(price_sensitivity=0.5, consistency=1.0))
        alts = [Alternative("A", features={"price": 150}), Alternative("B", features={"price": 180})]
        # scores 0.5 and 0.4 -> 0.5 + 0.1
        assert simulate_choice(agent, alts, price_only, rng=0).confidence == 0.6

    def test_single_alternative_confidence(self, noiseless_agent, price_only, cheap_and_dear):
        r = simulate_choice(noiseless_agent, cheap_and_dear[:1], price_only, rng=0)
        assert r.confidence == 0.8

    def test_no_alternatives(self, noiseless_agent, price_only):
        r = simulate_choice(noiseless_agent, [], price_only, rng=0)
        assert r.chosen == "NONE"
        assert r.confidence == 0.5

    def test_none_when_top_raw_score_below_threshold(self, noiseless_agent):
        features = [Feature("quality", min=0, max=10)]
        alts = [Alternative("A", features={"quality": 1}), Alternative("B", features={"quality": 0})]
        r = simulate_choice(noiseless_agent, alts, features, include_none=True, rng=0)
        assert r.chosen == "NONE"
        assert r.reason_codes == ()
        assert r.explanation == "None of the options met my requirements."

    def test_none_threshold_uses_best_raw_score(self):
        # A clears the threshold; B does not but wins often under heavy noise
        agent = Agent("n_1", "n", Traits(consistency=0.0))
        features = [Feature("appeal", min=0, max=1)]
        alts = [Alternative("A", features={"appeal": 0.35}), Alternative("B", features={"appeal": 0.0})]
        rules = dataclasses.replace(default_rules(), noise_scale=10.0)
        chosen = [
            simulate_choice(agent, alts, features, include_none=True, rng=seed, rules=rules).chosen
            for seed in range(60)
        ]
        assert "NONE" not in chosen
        assert "B" in chosen

    def test_none_not_offered(self, noiseless_agent):
        features = [Feature("quality", min=0, max=10)]
        alts = [Alternative("A", features={"quality": 1}), Alternative("B", features={"quality": 0})]
        assert simulate_choice(noiseless_agent, alts, features, include_none=False, rng=0).chosen == "A"

    def test_overall_evaluation_when_nothing_positive(self, noiseless_agent):
        features = [Feature("quality", min=0, max=10)]
        alts = [Alternative("A", "Alpha", {"quality": 0}), Alternative("B", "Bravo", {"quality": 0})]
        r = simulate_choice(noiseless_agent, alts, features, rng=0)
        assert r.chosen == "A"
        assert r.reason_codes == ()
        assert r.explanation == "Chose Alpha based on overall evaluation."

    def test_at_most_three_reasons_in_descending_order(self, noiseless_agent):
        features = [Feature(k, min=0, max=10) for k in ("a", "b", "c", "d")]
        alts = [
            Alternative("A", features={"a": 2, "b": 9, "c": 5, "d": 7}),
            Alternative("B", features={"a": 0, "b": 0, "c": 0, "d": 0}),
        ]
        r = simulate_choice(noiseless_agent, alts, features, rng=0)
        assert r.reason_codes == ("b", "d", "c")

    def test_missing_feature_values_are_skipped(self, noiseless_agent):
        features = [Feature("price", min=0, max=300), Feature("quality", min=0, max=10)]
        total, contributions = score_alternative(
            noiseless_agent.traits, Alternative("A", features={"quality": 10}), features
        )
        assert contributions == {"quality": pytest.approx(1.5)}
        assert total == pytest.approx(1.5)

    def test_seeded_noise_is_reproducible(self, price_only, cheap_and_dear):
        agent = Agent("n_1", "n", Traits(consistency=0.0))
        a = [simulate_choice(agent, cheap_and_dear, price_only, rng=np.random.default_rng(4)) for _ in range(3)]
        b = [simulate_choice(agent, cheap_and_dear, price_only, rng=np.random.default_rng(4)) for _ in range(3)]
        assert a == b


class TestProducers:
    def test_heuristic_producer_is_a_choice_producer(self):
        assert isinstance(HeuristicChoiceProducer(rng=0), ChoiceProducer)

    def test_custom_producer_plugs_into_batch(self, features, alternatives):
        class AlwaysLast:
            def choose(self, agent, shown_alternatives, features, include_none):
                return Response("", agent.id, shown_alternatives[-1].id, 1.0)

        agent = Agent("s_1", "s")
        tasks = [Task("s_1_task_0", "s_1", ("A", "B")), Task("s_1_task_1", "s_1", ("C", "D"))]
        responses = batch_simulate(tasks, [agent], alternatives, features, producer=AlwaysLast())
        assert [r.chosen for r in responses] == ["B", "D"]
        assert [r.task_id for r in responses] == ["s_1_task_0", "s_1_task_1"]
        assert all(r.segment_id == "s" for r in responses)


class TestBatchSimulate:
    def test_unknown_agents_are_skipped(self, features, alternatives, agents):
        tasks = [
            Task("budget_1_task_0", "budget_1", ("A", "B")),
            Task("ghost_1_task_0", "ghost_1", ("A", "B")),
            Task("budget_2_task_0", "budget_2", ("C", "D")),
        ]
        responses = batch_simulate(tasks, agents, alternatives, features, rng=0)
        assert [r.task_id for r in responses] == ["budget_1_task_0", "budget_2_task_0"]
        assert all(r.segment_id == "budget" for r in responses)

    def test_price_sensitive_population_prefers_cheaper(self):
        features = [Feature("price", min=0, max=300)]
        alts = [Alternative("A", features={"price": 100}), Alternative("B", features={"price": 200})]
        traits = Traits(price_sensitivity=1.0, consistency=1.0)
        agents = [Agent(f"p_{i}", "p", traits) for i in range(1, 101)]
        tasks = [Task(f"p_{i}_task_0", f"p_{i}", ("B", "A")) for i in range(1, 101)]

        responses = batch_simulate(tasks, agents, alts, features, rng=11)

        chose_a = sum(1 for r in responses if r.chosen == "A")
        assert chose_a >= 95
        assert compute_shares(responses, alts).overall["A"] > 0.9

    def test_strict_rejects_unknown_references(self, features, alternatives, agents):
        with pytest.raises(UnknownReferenceError, match="unknown agent"):
            batch_simulate([Task("g_task_0", "ghost_1", ("A", "B"))], agents, alternatives, features, strict=True)
        with pytest.raises(UnknownReferenceError, match="unknown alternatives"):
            batch_simulate([Task("b_task_0", "budget_1", ("A", "Q"))], agents, alternatives, features, strict=True)
