"""Apify actors: LinkedIn profile search and GitHub profile scraping."""
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

import requests

from hirescout.config import Settings, get_settings
from hirescout.retry import retry
from hirescout.sources.base import ProfileEnricher, ProfileSearchProvider
from hirescout.types import EducationItem, Enrichment, ExperienceItem, RawProfile

logger = logging.getLogger(__name__)

INACTIVE_DAYS = 365


class ApifyClient:
    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.settings.apify_token)

    @retry(max_attempts=2, base_delay=2.0, retryable=(requests.ConnectionError, requests.Timeout))
    def run_actor(self, actor: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        response = self.session.post(
            f"{self.settings.apify_base_url.rstrip('/')}/acts/{actor}/run-sync-get-dataset-items",
            params={"token": self.settings.apify_token},
            json=payload,
            timeout=self.settings.apify_timeout_sec,
        )
        response.raise_for_status()
        items = response.json()
        if not isinstance(items, list):
            raise ValueError(f"actor {actor} returned {type(items).__name__}, expected a list")
        return [item for item in items if isinstance(item, dict)]


def _skill_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("name") or "")
    return ""


def map_linkedin_item(item: dict[str, Any]) -> RawProfile:
    location = item.get("location")
    if isinstance(location, dict):
        location = location.get("linkedinText") or ""

    full_name = f"{item.get('firstName') or ''} {item.get('lastName') or ''}".strip()
    return RawProfile(
        id=item.get("publicIdentifier") or str(uuid.uuid4()),
        full_name=full_name or "Unknown User",
        email=item.get("email") or None,
        headline=item.get("headline") or "",
        location=location or "",
        linkedin_url=item.get("linkedinUrl") or item.get("url") or "",
        skills=[name for name in (_skill_name(skill) for skill in item.get("skills") or []) if name],
        experience=[
            ExperienceItem(
                position=exp.get("position") or exp.get("title") or "",
                company_name=exp.get("companyName") or "",
                duration=exp.get("duration") or "",
                description=exp.get("description") or "",
            )
            for exp in item.get("experience") or []
            if isinstance(exp, dict)
        ],
        education=[
            EducationItem(
                school_name=edu.get("schoolName") or "",
                degree=edu.get("degree") or "",
                field_of_study=edu.get("fieldOfStudy") or "",
            )
            for edu in item.get("education") or []
            if isinstance(edu, dict)
        ],
    )


class ApifyLinkedInSource(ProfileSearchProvider):
    name = "apify-linkedin"

    def __init__(self, client: ApifyClient | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.client = client or ApifyClient(self.settings)

    @property
    def available(self) -> bool:
        return self.client.configured

    def search(self, *, role: str, skills: list[str], location: str, limit: int) -> list[RawProfile]:
        payload = {
            "generalSearchQuery": f"({' OR '.join(skills)}) {role}",
            "currentJobTitles": [role],
            "locations": [location],
            "maxItems": limit,
            "mode": "short",
        }
        logger.info("Searching LinkedIn profiles role=%r skills=%s location=%r", role, skills, location)
        items = self.client.run_actor(self.settings.apify_linkedin_actor, payload)
        return [map_linkedin_item(item) for item in items]


def days_since(timestamp: str | None, now: datetime | None = None) -> int:
    if not timestamp:
        return INACTIVE_DAYS
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return INACTIVE_DAYS
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    return max(0, (now - moment).days)


class ApifyGithubEnricher(ProfileEnricher):
    def __init__(self, client: ApifyClient | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.client = client or ApifyClient(self.settings)

    def enrich(self, usernames: list[str]) -> dict[str, Enrichment]:
        usernames = [name for name in usernames if name]
        if not usernames or not self.client.configured:
            return {}

        payload = {
            "repo_link": "",
            "peoples_links": [f"https://github.com/{name}" for name in usernames],
        }
        items = self.client.run_actor(self.settings.apify_github_actor, payload)
        updated_at = datetime.now(UTC).isoformat()

        result: dict[str, Enrichment] = {}
        for name in usernames:
            profile = next(
                (
                    item
                    for item in items
                    if item.get("username") == name or name in str(item.get("profileUrl") or "")
                ),
                None,
            )
            if profile is None:
                result[name] = Enrichment(recent_activity_days=INACTIVE_DAYS, updated_at=updated_at)
                continue
            result[name] = Enrichment(
                public_repos=int(profile.get("public_repos") or 0),
                total_stars=int(profile.get("stars") or profile.get("total_stars") or 0),
                recent_activity_days=days_since(profile.get("last_commit_date") or profile.get("updated_at")),
                updated_at=updated_at,
            )
        return result
