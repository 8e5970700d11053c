from __future__ import annotations

from hirescout.core.keyword_heuristics import (
    heuristic_keywords,
    match_experience_years,
    match_location,
    match_skills,
)


def test_extracts_all_fields_from_typical_description() -> None:
    keywords = heuristic_keywords(
        "Senior Python engineer. Location: Sydney, hybrid. 5+ years of experience with FastAPI and Postgres.",
        "Backend Engineer",
    )

    assert keywords.role == "Backend Engineer"
    assert keywords.skills == ["Python", "FastAPI", "Postgres"]
    assert keywords.min_experience_years == 5
    assert keywords.location == "Sydney"


def test_empty_input_uses_defaults() -> None:
    keywords = heuristic_keywords("", "")

    assert keywords.role == "Software Engineer"
    assert keywords.skills == ["General Programming"]
    assert keywords.min_experience_years == 3
    assert keywords.location == "Remote"


def test_skill_matching_respects_word_boundaries() -> None:
    assert match_skills("experience with javascript and golang") == ["JavaScript"]
    assert match_skills("c++ and c# developers") == ["C++", "C#"]


def test_skill_list_is_capped_at_eight() -> None:
    text = "python javascript typescript java rust ruby php swift kotlin scala"
    assert len(match_skills(text)) == 8


def test_experience_patterns_are_tried_in_order() -> None:
    assert match_experience_years("minimum 7 years in industry") == 7
    assert match_experience_years("3-5 years in a similar role") == 3
    assert match_experience_years("at least 2 years shipping product") == 2
    assert match_experience_years("10+ years experience, minimum 4 years python") == 10
    assert match_experience_years("no numbers here") == 3


def test_location_patterns_and_city_fallback() -> None:
    assert match_location("we are based in melbourne.") == "Melbourne"
    assert match_location("fully remote team") == "Remote"
    assert match_location("our office near london bridge") == "London"
    assert match_location("nothing useful") == "Remote"
