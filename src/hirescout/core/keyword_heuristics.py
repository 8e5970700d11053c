from __future__ import annotations

import re

from hirescout.types import ExtractedKeywords

DEFAULT_ROLE = "Software Engineer"
DEFAULT_EXPERIENCE_YEARS = 3
DEFAULT_LOCATION = "Remote"
FALLBACK_SKILLS = ["General Programming"]
MAX_SKILLS = 8

# display name -> pattern, grouped the way recruiters read a stack
SKILL_VOCABULARY: dict[str, list[tuple[str, str]]] = {
    "languages": [
        ("Python", r"python"),
        ("JavaScript", r"javascript"),
        ("TypeScript", r"typescript"),
        ("Java", r"java"),
        ("C++", r"c\+\+"),
        ("C#", r"c#"),
        ("Go", r"go"),
        ("Rust", r"rust"),
        ("Ruby", r"ruby"),
        ("PHP", r"php"),
        ("Swift", r"swift"),
        ("Kotlin", r"kotlin"),
        ("Scala", r"scala"),
    ],
    "frameworks": [
        ("React", r"react"),
        ("Angular", r"angular"),
        ("Vue", r"vue"),
        ("Next.js", r"next\.?js"),
        ("Node.js", r"node\.?js"),
        ("Django", r"django"),
        ("Flask", r"flask"),
        ("FastAPI", r"fastapi"),
        ("Spring", r"spring"),
        ("Express", r"express"),
        ("Laravel", r"laravel"),
        ("Rails", r"rails"),
    ],
    "databases": [
        ("Postgres", r"postgres"),
        ("PostgreSQL", r"postgresql"),
        ("MySQL", r"mysql"),
        ("MongoDB", r"mongodb"),
        ("Redis", r"redis"),
        ("Elasticsearch", r"elasticsearch"),
        ("DynamoDB", r"dynamodb"),
        ("Cassandra", r"cassandra"),
        ("Oracle", r"oracle"),
    ],
    "cloud": [
        ("AWS", r"aws"),
        ("Azure", r"azure"),
        ("GCP", r"gcp"),
        ("Google Cloud", r"google cloud"),
        ("Heroku", r"heroku"),
        ("DigitalOcean", r"digitalocean"),
    ],
    "devops": [
        ("Docker", r"docker"),
        ("Kubernetes", r"kubernetes"),
        ("K8s", r"k8s"),
        ("Jenkins", r"jenkins"),
        ("GitLab", r"gitlab"),
        ("GitHub Actions", r"github actions"),
        ("Terraform", r"terraform"),
        ("Ansible", r"ansible"),
    ],
    "other": [
        ("Git", r"git"),
        ("GraphQL", r"graphql"),
        ("REST API", r"rest api"),
        ("Microservices", r"microservices"),
        ("Agile", r"agile"),
        ("Scrum", r"scrum"),
        ("CI/CD", r"ci/cd"),
        ("TDD", r"tdd"),
        ("Machine Learning", r"machine learning"),
        ("ML", r"ml"),
        ("AI", r"ai"),
    ],
}

# word boundaries that also hold next to symbols such as "+" and "#"
_SKILL_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (name, re.compile(rf"(?<![a-z0-9]){pattern}(?![a-z0-9])", re.IGNORECASE))
    for group in SKILL_VOCABULARY.values()
    for name, pattern in group
]

_EXPERIENCE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(\d+)\s*\+?\s*years?\s+(?:of\s+)?experience", re.IGNORECASE),
    re.compile(r"minimum\s+(\d+)\s*years?", re.IGNORECASE),
    re.compile(r"(\d+)\s*-\s*\d+\s*years?", re.IGNORECASE),
    re.compile(r"at least\s+(\d+)\s*years?", re.IGNORECASE),
]

_LOCATION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\blocation[:\s]+([a-z\s]+?)(?:\.|,|$)", re.IGNORECASE),
    re.compile(r"\bbased in ([a-z\s]+?)(?:\.|,|$)", re.IGNORECASE),
    re.compile(r"\b(remote|hybrid|onsite|on-site)\b", re.IGNORECASE),
]

CITY_LIST: list[str] = [
    "remote",
    "hybrid",
    "sydney",
    "melbourne",
    "brisbane",
    "perth",
    "adelaide",
    "san francisco",
    "new york",
    "london",
    "berlin",
    "singapore",
    "bangalore",
    "toronto",
    "austin",
    "seattle",
    "boston",
    "amsterdam",
    "dublin",
    "paris",
]


def heuristic_keywords(description: str, title: str) -> ExtractedKeywords:
    text = f"{description or ''} {title or ''}".lower()
    return ExtractedKeywords(
        role=title or DEFAULT_ROLE,
        skills=match_skills(text),
        min_experience_years=match_experience_years(text),
        location=match_location(text),
    )


def match_skills(text: str) -> list[str]:
    found: list[str] = []
    for name, pattern in _SKILL_PATTERNS:
        if pattern.search(text) and name not in found:
            found.append(name)
    return found[:MAX_SKILLS] or list(FALLBACK_SKILLS)


def match_experience_years(text: str) -> int:
    for pattern in _EXPERIENCE_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return DEFAULT_EXPERIENCE_YEARS


def match_location(text: str) -> str:
    location = DEFAULT_LOCATION
    for pattern in _LOCATION_PATTERNS:
        match = pattern.search(text)
        if match:
            candidate = _title_case(match.group(1))
            if candidate:
                location = candidate
                break

    if location == DEFAULT_LOCATION:
        lowered = text.lower()
        for city in CITY_LIST:
            if city in lowered:
                return _title_case(city)
    return location


def _title_case(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in value.strip().split())
