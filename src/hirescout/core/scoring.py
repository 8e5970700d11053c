from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from hirescout.types import (
    BreakdownItem,
    Candidate,
    ExperienceItem,
    ExtractedKeywords,
    RawProfile,
    ScoreResult,
    ScoringRatios,
)

ROLE_POINTS = 30
SKILL_POINTS = 40
LOCATION_POINTS = 15
EXPERIENCE_POINTS = 15

OSS_STAR_CEILING = 500

STARTUP_TERMS = ("startup", "start-up", "founder", "seed", "series a", "early-stage", "early stage")
FOUNDER_TERMS = ("founder", "co-founder", "cofounder")
STARTUP_POSITIONS_FOR_FULL_CREDIT = 2
STARTUP_MENTION_SCORE = 50.0


def lenient_match(left: str, right: str) -> bool:
    """True when either string, lower-cased, contains the other.

    An empty string is contained in everything and therefore matches.
    """
    a, b = (left or "").lower(), (right or "").lower()
    return a in b or b in a


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def matched_skills(candidate_skills: Iterable[str], required_skills: Sequence[str]) -> list[str]:
    return [
        skill
        for skill in candidate_skills
        if any(lenient_match(skill, required) for required in required_skills)
    ]


def score_relevance(profile: RawProfile, keywords: ExtractedKeywords) -> ScoreResult:
    """Sourcing-time relevance of one raw profile against a job's keywords.

    Four fixed budgets (role 30, skills 40, location 15, experience 15). The
    total is rounded once from the unrounded contributions; breakdown values
    are rounded individually and may not add up to the total.
    """
    role_hit = lenient_match(profile.headline, keywords.role)
    role_score = ROLE_POINTS if role_hit else 0

    required = keywords.skills
    matched = matched_skills(profile.skills, required)
    if required:
        skill_score = SKILL_POINTS * min(len(matched) / len(required), 1.0)
    else:
        skill_score = 0.0

    required_location = keywords.location or ""
    location_hit = (
        lenient_match(profile.location, required_location) or required_location.lower() == "remote"
    )
    location_score = LOCATION_POINTS if location_hit else 0

    years = profile.effective_years
    required_years = keywords.min_experience_years or 0
    if years >= required_years:
        experience_score = float(EXPERIENCE_POINTS)
    elif required_years > 0:
        experience_score = years / required_years * EXPERIENCE_POINTS
    else:
        experience_score = 0.0

    breakdown = [
        BreakdownItem(
            signal="role_match",
            value=role_score,
            reason=f"Role matches: {profile.headline}" if role_hit else "Role does not match",
        ),
        BreakdownItem(
            signal="skill_match",
            value=round_half_up(skill_score),
            reason=(
                f"Matched {len(matched)} skills: {', '.join(matched)}"
                if matched
                else "No direct skill matches"
            ),
        ),
        BreakdownItem(
            signal="location",
            value=location_score,
            reason=f"Location: {profile.location} vs {keywords.location}",
        ),
        BreakdownItem(
            signal="experience",
            value=round_half_up(experience_score),
            reason=f"{years} years of experience (required: {required_years})",
        ),
    ]
    total = round_half_up(role_score + skill_score + location_score + experience_score)
    return ScoreResult(score=max(0, min(100, total)), breakdown=breakdown, matched_skills=matched)


def startup_signal(experience: Sequence[ExperienceItem], fallback_text: str = "") -> float:
    """0-100 estimate of early-stage company exposure.

    Each position at a startup-flavoured company or title earns one point and
    founder titles earn two; two points is full credit. Without any work
    history a startup mention in the bio or headline scores half.
    """
    if experience:
        points = 0
        for item in experience:
            position = item.position.lower()
            text = f"{position} {item.company_name} {item.description}".lower()
            if any(term in position for term in FOUNDER_TERMS):
                points += 2
            elif any(term in text for term in STARTUP_TERMS):
                points += 1
        return min(points / STARTUP_POSITIONS_FOR_FULL_CREDIT, 1.0) * 100

    text = fallback_text.lower()
    return STARTUP_MENTION_SCORE if any(term in text for term in STARTUP_TERMS) else 0.0


def _candidate_experience(candidate: Candidate) -> list[ExperienceItem]:
    raw = (candidate.model_extra or {}).get("experience") or []
    items: list[ExperienceItem] = []
    for entry in raw:
        if isinstance(entry, dict):
            items.append(ExperienceItem.model_validate(entry))
    return items


def score_pool_fit(
    candidate: Candidate, keywords: ExtractedKeywords, ratios: ScoringRatios
) -> ScoreResult:
    """Weighted job-fit score used to rank the stored candidate pool."""
    required = keywords.skills
    matched = matched_skills(candidate.keywords.skills, required)
    tech_score = len(matched) / max(len(required), 1) * 100

    stars = candidate.enrichment.total_stars if candidate.enrichment else 0
    oss_score = min(stars / OSS_STAR_CEILING, 1.0) * 100

    fallback_text = f"{candidate.bio} {candidate.headline or ''} {candidate.keywords.role}"
    startup_score = startup_signal(_candidate_experience(candidate), fallback_text)

    weighted = (
        ratios.tech_match_weight * tech_score
        + ratios.oss_activity_weight * oss_score
        + ratios.startup_exp_weight * startup_score
    )
    breakdown = [
        BreakdownItem(
            signal="Tech Match",
            value=round_half_up(tech_score),
            reason=f"Matched {len(matched)}/{len(required)} skills",
        ),
        BreakdownItem(signal="OSS Activity", value=round_half_up(oss_score), reason=f"{stars} GitHub stars"),
        BreakdownItem(
            signal="Startup Experience",
            value=round_half_up(startup_score),
            reason="Based on work history",
        ),
    ]
    return ScoreResult(
        score=round_half_up(max(0.0, min(100.0, weighted))),
        breakdown=breakdown,
        matched_skills=matched,
    )
