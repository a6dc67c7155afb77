"""Population presets.

Trait presets for simulated respondents (the 16 MBTI types and five
behavioral archetypes), a list of location labels, and a helper that builds
one segment per personality x location combination.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from pyconjoint.core.schema import Segment, Traits

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonalityPreset:
    """A named trait profile."""

    id: str
    label: str
    description: str
    traits: Traits


@dataclass(frozen=True)
class LocationPreset:
    id: str
    label: str
    region: str


def _preset(pid: str, label: str, description: str, personality: str,
            price: float, risk: float, consistency: float) -> PersonalityPreset:
    return PersonalityPreset(
        id=pid,
        label=label,
        description=description,
        traits=Traits(
            price_sensitivity=price,
            risk_tolerance=risk,
            consistency=consistency,
            personality=personality,
        ),
    )


# =============================================================================
# MBTI PERSONALITIES
# =============================================================================

MBTI_PERSONALITIES: dict[str, PersonalityPreset] = {
    p.id: p
    for p in (
        # Analysts
        _preset("INTJ", "INTJ - Architect", "Strategic, independent", "INTJ", 0.4, 0.6, 0.9),
        _preset("INTP", "INTP - Logician", "Analytical, curious", "INTP", 0.5, 0.5, 0.7),
        _preset("ENTJ", "ENTJ - Commander", "Bold, decisive", "ENTJ", 0.2, 0.8, 0.9),
        _preset("ENTP", "ENTP - Debater", "Smart, curious", "ENTP", 0.3, 0.7, 0.5),
        # Diplomats
        _preset("INFJ", "INFJ - Advocate", "Idealistic, principled", "INFJ", 0.6, 0.4, 0.8),
        _preset("INFP", "INFP - Mediator", "Poetic, kind", "INFP", 0.7, 0.3, 0.6),
        _preset("ENFJ", "ENFJ - Protagonist", "Charismatic, inspiring", "ENFJ", 0.4, 0.5, 0.8),
        _preset("ENFP", "ENFP - Campaigner", "Enthusiastic, creative", "ENFP", 0.4, 0.6, 0.4),
        # Sentinels
        _preset("ISTJ", "ISTJ - Logistician", "Practical, reliable", "ISTJ", 0.7, 0.2, 0.95),
        _preset("ISFJ", "ISFJ - Defender", "Dedicated, warm", "ISFJ", 0.8, 0.2, 0.9),
        _preset("ESTJ", "ESTJ - Executive", "Organized, logical", "ESTJ", 0.5, 0.4, 0.9),
        _preset("ESFJ", "ESFJ - Consul", "Caring, social", "ESFJ", 0.6, 0.3, 0.8),
        # Explorers
        _preset("ISTP", "ISTP - Virtuoso", "Bold, practical", "ISTP", 0.5, 0.7, 0.6),
        _preset("ISFP", "ISFP - Adventurer", "Flexible, charming", "ISFP", 0.6, 0.5, 0.5),
        _preset("ESTP", "ESTP - Entrepreneur", "Smart, energetic", "ESTP", 0.3, 0.8, 0.4),
        _preset("ESFP", "ESFP - Entertainer", "Spontaneous, fun", "ESFP", 0.4, 0.6, 0.3),
    )
}


# =============================================================================
# BEHAVIORAL ARCHETYPES
# =============================================================================

BEHAVIORAL_ARCHETYPES: dict[str, PersonalityPreset] = {
    p.id: p
    for p in (
        _preset("BUDGET_CONSCIOUS", "Budget-Conscious", "Prioritizes value and savings",
                "Budget-Conscious", 0.9, 0.2, 0.8),
        _preset("RISK_TAKER", "Risk-Taker", "Willing to take chances for potential gains",
                "Risk-Taker", 0.2, 0.9, 0.5),
        _preset("BALANCED", "Balanced", "Moderate approach to decisions",
                "Balanced", 0.5, 0.5, 0.7),
        _preset("IMPULSIVE_BUYER", "Impulsive Buyer", "Makes quick, spontaneous decisions",
                "Impulsive Buyer", 0.2, 0.6, 0.3),
        _preset("ANALYTICAL", "Analytical", "Carefully researches before deciding",
                "Analytical", 0.5, 0.4, 0.95),
    )
}

ALL_PERSONALITY_PRESETS: dict[str, PersonalityPreset] = {
    **MBTI_PERSONALITIES,
    **BEHAVIORAL_ARCHETYPES,
}


def get_personality_preset(preset_id: str) -> PersonalityPreset | None:
    """Look up an MBTI type or archetype by id."""
    return ALL_PERSONALITY_PRESETS.get(preset_id)


# =============================================================================
# LOCATIONS
# =============================================================================

LOCATION_PRESETS: tuple[LocationPreset, ...] = (
    LocationPreset("san_francisco", "San Francisco", "North America"),
    LocationPreset("new_york", "New York", "North America"),
    LocationPreset("los_angeles", "Los Angeles", "North America"),
    LocationPreset("chicago", "Chicago", "North America"),
    LocationPreset("toronto", "Toronto", "North America"),
    LocationPreset("london", "London", "Europe"),
    LocationPreset("berlin", "Berlin", "Europe"),
    LocationPreset("paris", "Paris", "Europe"),
    LocationPreset("amsterdam", "Amsterdam", "Europe"),
    LocationPreset("mumbai", "Mumbai", "Asia"),
    LocationPreset("bangalore", "Bangalore", "Asia"),
    LocationPreset("delhi", "Delhi", "Asia"),
    LocationPreset("tokyo", "Tokyo", "Asia"),
    LocationPreset("singapore", "Singapore", "Asia"),
    LocationPreset("shanghai", "Shanghai", "Asia"),
    LocationPreset("seoul", "Seoul", "Asia"),
    LocationPreset("sydney", "Sydney", "Australia"),
    LocationPreset("melbourne", "Melbourne", "Australia"),
    LocationPreset("sao_paulo", "São Paulo", "South America"),
    LocationPreset("dubai", "Dubai", "Middle East"),
)


def get_location_preset(location_id: str) -> LocationPreset | None:
    for location in LOCATION_PRESETS:
        if location.id == location_id:
            return location
    return None


def locations_by_region() -> dict[str, list[LocationPreset]]:
    grouped: dict[str, list[LocationPreset]] = {}
    for location in LOCATION_PRESETS:
        grouped.setdefault(location.region, []).append(location)
    return grouped


# =============================================================================
# SEGMENT GENERATION
# =============================================================================


def generate_segments_from_config(
    personalities: Sequence[str],
    locations: Sequence[str],
    agents_per_combo: int = 1,
    custom_personalities: Iterable[PersonalityPreset] = (),
) -> list[Segment]:
    """
    Build one segment per personality x location combination.

    Unknown personality ids are skipped. Unknown location ids are used
    verbatim as the location label.

    Args:
        personalities: Preset ids (MBTI type, archetype or custom id)
        locations: Location preset ids or free-text locations
        agents_per_combo: Agent count of every generated segment
        custom_personalities: Extra presets looked up after the built-ins

    Returns:
        Segments with ids ``f"{personality}_{location}"`` (whitespace
        replaced by underscores)

    Example:
        >>> segs = generate_segments_from_config(["ISTJ", "RISK_TAKER"], ["berlin"], 5)
        >>> [s.segment_id for s in segs]
        ['ISTJ_berlin', 'RISK_TAKER_berlin']
    """
    custom = {p.id: p for p in custom_personalities}
    segments = []
    for personality_id in personalities:
        preset = ALL_PERSONALITY_PRESETS.get(personality_id) or custom.get(personality_id)
        if preset is None:
            logger.debug("Unknown personality preset %r skipped", personality_id)
            continue
        for location_id in locations:
            location = get_location_preset(location_id)
            location_label = location.label if location else location_id
            segment_id = re.sub(r"\s+", "_", f"{personality_id}_{location_id}")
            segments.append(
                Segment(
                    segment_id=segment_id,
                    label=f"{preset.label} in {location_label}",
                    count=agents_per_combo,
                    traits=Traits(
                        price_sensitivity=preset.traits.price_sensitivity,
                        risk_tolerance=preset.traits.risk_tolerance,
                        consistency=preset.traits.consistency,
                        personality=preset.traits.personality,
                        location=location_label,
                    ),
                )
            )
    return segments


def total_agents(personalities: Sequence[str], locations: Sequence[str], agents_per_combo: int = 1) -> int:
    """Number of agents a personality x location grid would create."""
    return len(personalities) * len(locations) * agents_per_combo
