"""Synthetic candidate pool for demos and local development."""
from __future__ import annotations

import random
import uuid
from datetime import UTC, datetime

from hirescout.core.scoring import score_relevance
from hirescout.types import (
    Candidate,
    CandidateKeywords,
    Enrichment,
    Job,
    RawProfile,
    ScoreEntry,
)

FIRST_NAMES = [
    "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Alex", "Sam", "Jamie",
    "Cameron", "Dakota", "Quinn", "Avery", "Blake", "Sage", "River", "Phoenix",
    "Skylar", "Rowan", "Finley", "Emery", "Reese", "Hayden", "Parker", "Drew",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Wilson", "Anderson", "Thomas",
    "Jackson", "White", "Harris", "Martin", "Thompson", "Moore", "Young", "Lee", "Walker",
]
LOCATIONS = ["Sydney", "Melbourne", "Brisbane", "Perth", "Adelaide", "Remote", "Canberra", "Darwin"]
ROLES = [
    "Software Engineer",
    "Backend Engineer",
    "Frontend Engineer",
    "Full Stack Engineer",
    "DevOps Engineer",
    "ML Engineer",
    "Data Engineer",
]
SKILL_COMBINATIONS: dict[str, list[str]] = {
    "Python Backend": ["Python", "FastAPI", "Postgres", "Docker", "REST APIs"],
    "Go Infrastructure": ["Go", "Kubernetes", "Redis", "Docker", "Terraform"],
    "JavaScript Full Stack": ["JavaScript", "TypeScript", "React", "Node.js", "Postgres"],
    "Python ML": ["Python", "TensorFlow", "PyTorch", "Postgres", "Docker"],
    "Java Backend": ["Java", "Spring Boot", "MySQL", "Docker", "Kubernetes"],
    "Node.js Backend": ["Node.js", "Express", "MongoDB", "Docker", "AWS"],
    "React Frontend": ["React", "TypeScript", "Next.js", "Tailwind CSS", "GraphQL"],
    "Vue Frontend": ["Vue.js", "JavaScript", "Nuxt.js", "CSS", "Webpack"],
    "DevOps": ["Docker", "Kubernetes", "AWS", "Terraform", "CI/CD"],
    "Data Engineering": ["Python", "Postgres", "Airflow", "Spark", "Docker"],
}
EXTRA_SKILLS = ["Git", "Agile", "CI/CD", "AWS", "Docker", "Kubernetes", "Postgres", "MongoDB", "Redis", "GraphQL", "REST APIs"]
EMAIL_DOMAINS = ["gmail.com", "outlook.com", "yahoo.com", "protonmail.com"]


def headline_for(role: str, years: int) -> str:
    if years >= 8:
        level = "Principal"
    elif years >= 5:
        level = "Senior"
    elif years >= 3:
        level = "Mid-level"
    else:
        level = "Junior"
    return f"{level} {role}"


def bio_for(full_name: str, role: str, skills: list[str], location: str, years: int) -> str:
    first_name = full_name.split(" ")[0]
    return (
        f"{first_name} is an experienced {role} with {years} years of professional experience, "
        f"currently based in {location}. Specializing in {', '.join(skills[:3])}, {first_name} has a "
        "proven track record of building scalable systems and delivering high-quality software solutions."
    )


def generate_candidates(
    count: int,
    jobs: list[Job],
    *,
    seed: int | None = None,
    now: datetime | None = None,
) -> list[Candidate]:
    """Build ``count`` random candidates, each scored against every job.

    The same seed and ``now`` always produce the same pool.
    """
    rng = random.Random(seed)
    updated_at = (now or datetime.now(UTC)).isoformat()
    candidates: list[Candidate] = []

    for _ in range(count):
        first_name = rng.choice(FIRST_NAMES)
        last_name = rng.choice(LAST_NAMES)
        full_name = f"{first_name} {last_name}"
        email = f"{first_name.lower()}.{last_name.lower()}@{rng.choice(EMAIL_DOMAINS)}"

        role = rng.choice(ROLES)
        skills = list(SKILL_COMBINATIONS[rng.choice(list(SKILL_COMBINATIONS))])
        extras = [skill for skill in EXTRA_SKILLS if skill not in skills]
        skills.extend(extras[: rng.randrange(3)])

        years = rng.randint(1, 10)
        location = rng.choice(LOCATIONS)
        open_to_work = rng.random() > 0.3
        candidate_id = str(uuid.UUID(int=rng.getrandbits(128), version=4))
        headline = headline_for(role, years)
        github_username = f"{first_name.lower()}-{last_name.lower()}-{rng.randrange(1000)}"

        profile = RawProfile(
            id=candidate_id,
            full_name=full_name,
            headline=headline,
            location=location,
            skills=skills,
            years_of_experience=years,
        )
        scores = []
        for job in jobs:
            result = score_relevance(profile, job.extracted_keywords)
            scores.append(
                ScoreEntry(
                    job_id=job.job_id,
                    score=result.score,
                    breakdown_json=result.breakdown,
                    outreach_messages=[],
                )
            )

        candidates.append(
            Candidate(
                id=candidate_id,
                full_name=full_name,
                email=email,
                bio=bio_for(full_name, role, skills, location, years),
                github_username=github_username,
                open_to_work=open_to_work,
                keywords=CandidateKeywords(
                    role=role, skills=skills, years_of_experience=years, location=location
                ),
                headline=headline,
                enrichment=Enrichment(
                    public_repos=rng.randint(5, 54),
                    total_stars=rng.randrange(500),
                    recent_activity_days=rng.randrange(30),
                    updated_at=updated_at,
                ),
                scores=scores,
                notificationSettings=[],
            )
        )
    return candidates
