from datetime import date

import pytest

from engines.content import generate_assessments, generate_module_content, generate_modules
from engines.profile import derive_profile

TODAY = date(2026, 3, 14)


def test_all_level_returns_every_seeded_module(catalog):
    modules = generate_modules(catalog, "all")

    assert [module.id for module in modules] == [
        "nasa-data-intro",
        "satellite-imagery",
        "ndvi-analysis",
        "soil-moisture",
        "climate-adaptation",
    ]
    assert generate_modules(catalog) == modules


@pytest.mark.parametrize(
    "level, expected",
    [
        ("beginner", ["nasa-data-intro"]),
        ("intermediate", ["satellite-imagery", "ndvi-analysis"]),
        ("advanced", ["soil-moisture", "climate-adaptation"]),
    ],
)
def test_level_filter_is_exact_match(catalog, level, expected):
    modules = generate_modules(catalog, level)

    assert [module.id for module in modules] == expected
    assert all(module.difficulty == level for module in modules)


@pytest.mark.parametrize("level", ["expert", "Intermediate", "ALL"])
def test_unrecognised_level_yields_empty_list(catalog, level):
    assert generate_modules(catalog, level) == []


def test_completed_flag_follows_profile(catalog):
    modules = generate_modules(catalog, "all", completed=["satellite-imagery"])
    flags = {module.id: module.completed for module in modules}

    assert flags["satellite-imagery"] is True
    assert sum(flags.values()) == 1
    # catalog entries stay untouched
    assert all(not module.completed for module in catalog.modules)


def test_assessment_filter(catalog):
    assert len(generate_assessments(catalog)) == 2
    assert [item.id for item in generate_assessments(catalog, "intermediate")] == ["satellite-analysis"]
    assert generate_assessments(catalog, "advanced") == []


def test_module_content_for_new_high_level_learner(catalog):
    content = generate_module_content(derive_profile("guest", catalog, today=TODAY))

    assert content.recommended_next == "nasa-data-intro"
    assert content.difficulty_adjustment == "advanced"
    assert content.estimated_time == "15 min"
    assert content.personalized_tips[0] == "Great job reaching Level 3! Keep up the momentum."
    assert any("13-day streak" in tip for tip in content.personalized_tips)


def test_module_content_for_beginner_without_streak(catalog):
    content = generate_module_content(derive_profile("alice", catalog, today=TODAY))

    assert content.difficulty_adjustment == "beginner"
    assert content.estimated_time == "25 min"
    assert len(content.personalized_tips) == 2


def test_recommendation_skips_completed_modules(catalog):
    bob = generate_module_content(derive_profile("bob", catalog, today=TODAY))
    dave = generate_module_content(derive_profile("dave", catalog, today=TODAY))

    assert bob.recommended_next == "satellite-imagery"
    assert dave.recommended_next == "ndvi-analysis"
    assert dave.difficulty_adjustment == "intermediate"
    assert dave.estimated_time == "25 min"
    assert dave.to_wire()["recommendedNext"] == "ndvi-analysis"
