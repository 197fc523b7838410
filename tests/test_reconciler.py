from __future__ import annotations

import pytest

from cropadvisor.models.enums import ConfidenceEnum, ProvenanceEnum, SeasonEnum
from cropadvisor.schemas.recommend import AdvisoryEntry, InputConditions, ScoredCandidate
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.reconciler import fallback_narrative, reconcile, synthesize_fallback
from cropadvisor.services.yield_estimator import estimate_yield

CANDIDATES = [
    ScoredCandidate(name="Rice", score=41.5, seasons=[SeasonEnum.kharif]),
    ScoredCandidate(name="Maize", score=22.0, seasons=[SeasonEnum.kharif, SeasonEnum.rabi]),
    ScoredCandidate(name="Jute", score=18.25, seasons=[SeasonEnum.kharif]),
    ScoredCandidate(name="Cotton", score=12.0, seasons=[SeasonEnum.kharif]),
]


def test_entries_pair_by_name_case_insensitively(rice_conditions: InputConditions) -> None:
    entries = [
        AdvisoryEntry(name="JUTE", reason="Fibre demand is strong", confidence=ConfidenceEnum.low),
        AdvisoryEntry(name="rice", reason="Monsoon rainfall suits paddy", pros="Staple", cons="Water heavy"),
        AdvisoryEntry(name="Maize", growth="90-110 day cycle"),
    ]
    recs = reconcile(CANDIDATES, entries, rice_conditions)

    assert [r.name for r in recs] == ["Rice", "Maize", "Jute"]
    assert [r.rank for r in recs] == [1, 2, 3]
    assert recs[0].reason == "Monsoon rainfall suits paddy"
    assert recs[1].growth == "90-110 day cycle"
    assert recs[2].confidence is ConfidenceEnum.low
    assert all(r.provenance is ProvenanceEnum.advisory for r in recs)


def test_unmatched_entries_pair_by_position(rice_conditions: InputConditions) -> None:
    entries = [
        AdvisoryEntry(name="Maize", reason="maize narrative"),
        AdvisoryEntry(name="Paddy rice", reason="second slot narrative"),
        AdvisoryEntry(reason="third slot narrative"),
    ]
    rice, maize, jute = reconcile(CANDIDATES, entries, rice_conditions)

    # entries[0] is claimed by Maize, so Rice gets no positional entry
    assert rice.provenance is ProvenanceEnum.fallback
    assert maize.reason == "maize narrative"
    assert jute.reason == "third slot narrative"
    assert jute.provenance is ProvenanceEnum.advisory


def test_alias_names_pair_with_their_canonical_crop(rice_conditions: InputConditions) -> None:
    candidates = [
        ScoredCandidate(name="Rice", score=41.7),
        ScoredCandidate(name="Jute", score=20.0),
        ScoredCandidate(name="Bitter Gourd", score=15.0),
    ]
    entries = [
        AdvisoryEntry(name="Jute", reason="jute narrative"),
        AdvisoryEntry(name="Paddy", reason="paddy narrative"),
        AdvisoryEntry(name="bitter gourd", reason="gourd narrative"),
    ]
    rice, jute, gourd = reconcile(candidates, entries, rice_conditions)

    assert rice.name == "Rice"
    assert rice.reason == "paddy narrative"
    assert rice.provenance is ProvenanceEnum.advisory
    assert jute.reason == "jute narrative"
    assert gourd.reason == "gourd narrative"


def test_hallucinated_crops_never_surface(rice_conditions: InputConditions) -> None:
    entries = [
        AdvisoryEntry(name="Dragonfruit", reason="exotic"),
        AdvisoryEntry(name="Quinoa", reason="trendy"),
        AdvisoryEntry(name="Saffron", reason="lucrative"),
        AdvisoryEntry(name="Vanilla", reason="premium"),
    ]
    recs = reconcile(CANDIDATES, entries, rice_conditions)
    names = {r.name for r in recs}
    assert names == {"Rice", "Maize", "Jute"}
    assert names <= set(get_knowledge_base().names())


def test_numbers_are_always_local(rice_conditions: InputConditions) -> None:
    entries = [
        AdvisoryEntry(
            name="Rice",
            reason="Good fit",
            thresholds={"ph": {"min": 0, "opt": 1, "max": 2}, "rainfall_mm": "9000"},
        ),
    ]
    rice = reconcile(CANDIDATES, entries, rice_conditions, count=1)[0]
    profile = get_knowledge_base().require("Rice")

    assert rice.score == 41.5
    assert rice.yield_estimate_t_per_ha == estimate_yield("Rice", rice_conditions)
    assert rice.thresholds.ph == profile.ph
    assert rice.thresholds.rainfall == profile.rainfall


def test_partial_entry_keeps_valid_fields_and_fills_the_rest(rice_conditions: InputConditions) -> None:
    entries = [AdvisoryEntry(name="Rice", pros="Assured procurement")]
    rice = reconcile(CANDIDATES, entries, rice_conditions, count=1)[0]
    fallback = fallback_narrative(get_knowledge_base().require("Rice"), CANDIDATES[0], rice_conditions)

    assert rice.pros == "Assured procurement"
    assert rice.reason == fallback["reason"]
    assert rice.cons == fallback["cons"]
    assert rice.growth == fallback["growth"]
    assert rice.confidence is ConfidenceEnum.medium
    assert rice.provenance is ProvenanceEnum.advisory


def test_count_caps_output_and_short_shortlists_are_kept(rice_conditions: InputConditions) -> None:
    assert len(reconcile(CANDIDATES, [], rice_conditions, count=2)) == 2
    assert len(reconcile(CANDIDATES[:1], [], rice_conditions, count=3)) == 1


def test_synthesize_fallback_is_complete_and_deterministic(rice_conditions: InputConditions) -> None:
    first = synthesize_fallback(CANDIDATES, rice_conditions)
    second = synthesize_fallback(CANDIDATES, rice_conditions)

    assert [r.model_dump() for r in first] == [r.model_dump() for r in second]
    assert len(first) == 3
    for rec in first:
        assert rec.provenance is ProvenanceEnum.fallback
        assert rec.confidence is ConfidenceEnum.medium
        assert rec.reason and rec.pros and rec.cons and rec.growth
        assert rec.name in rec.reason


def test_missing_profile_is_a_lookup_error(rice_conditions: InputConditions) -> None:
    only_wheat = KnowledgeBase([get_knowledge_base().require("Wheat")])
    with pytest.raises(LookupError, match="Rice"):
        synthesize_fallback(CANDIDATES, rice_conditions, knowledge_base=only_wheat)
