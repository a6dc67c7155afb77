"""Tests for population presets."""

from pyconjoint import Traits
from pyconjoint.presets import (
    ALL_PERSONALITY_PRESETS,
    BEHAVIORAL_ARCHETYPES,
    LOCATION_PRESETS,
    MBTI_PERSONALITIES,
    PersonalityPreset,
    generate_segments_from_config,
    get_location_preset,
    get_personality_preset,
    locations_by_region,
    total_agents,
)


class TestPresetTables:
    def test_sizes(self):
        assert len(MBTI_PERSONALITIES) == 16
        assert len(BEHAVIORAL_ARCHETYPES) == 5
        assert len(ALL_PERSONALITY_PRESETS) == 21
        assert len(LOCATION_PRESETS) == 20

    def test_traits_in_unit_interval(self):
        for preset in ALL_PERSONALITY_PRESETS.values():
            t = preset.traits
            assert 0 <= t.price_sensitivity <= 1
            assert 0 <= t.risk_tolerance <= 1
            assert 0 <= t.consistency <= 1

    def test_lookup(self):
        assert get_personality_preset("ISTJ").traits.consistency == 0.95
        assert get_personality_preset("nope") is None
        assert get_location_preset("sao_paulo").label == "São Paulo"
        assert get_location_preset("atlantis") is None

    def test_regions(self):
        grouped = locations_by_region()
        assert len(grouped["Asia"]) == 7
        assert sum(len(v) for v in grouped.values()) == 20


class TestGenerateSegments:
    def test_grid(self):
        segments = generate_segments_from_config(["ISTJ", "RISK_TAKER"], ["berlin", "tokyo"], 5)
        assert [s.segment_id for s in segments] == [
            "ISTJ_berlin",
            "ISTJ_tokyo",
            "RISK_TAKER_berlin",
            "RISK_TAKER_tokyo",
        ]
        assert all(s.count == 5 for s in segments)
        assert segments[0].label == "ISTJ - Logistician in Berlin"
        assert segments[0].traits.location == "Berlin"
        assert segments[0].traits.personality == "ISTJ"

    def test_free_text_location(self):
        segment = generate_segments_from_config(["BALANCED"], ["Rural Ohio"])[0]
        assert segment.segment_id == "BALANCED_Rural_Ohio"
        assert segment.traits.location == "Rural Ohio"

    def test_unknown_personality_skipped(self):
        assert generate_segments_from_config(["XXXX"], ["berlin"]) == []

    def test_custom_personality(self):
        custom = PersonalityPreset("FRUGAL", "Frugal", "Very careful", Traits(price_sensitivity=1.0))
        segment = generate_segments_from_config(["FRUGAL"], ["paris"], custom_personalities=[custom])[0]
        assert segment.traits.price_sensitivity == 1.0

    def test_total_agents(self):
        assert total_agents(["ISTJ", "ENFP"], ["berlin", "paris", "tokyo"], 4) == 24
