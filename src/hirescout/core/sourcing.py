from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from hirescout.config import Settings, get_settings
from hirescout.core.scoring import score_pool_fit, score_relevance
from hirescout.sources.apify import ApifyGithubEnricher, ApifyLinkedInSource
from hirescout.sources.base import ProfileEnricher, ProfileSearchProvider
from hirescout.sources.mock import MockProfileSource
from hirescout.storage.datastore import Datastore
from hirescout.types import (
    Candidate,
    CandidateKeywords,
    CandidateScoreView,
    Enrichment,
    Job,
    JobUpdate,
    RawProfile,
    ScoreEntry,
)

logger = logging.getLogger(__name__)

INITIAL_STAGE = "new"


@dataclass(slots=True)
class SourcingReport:
    job_id: str
    source: str
    candidates: list[Candidate] = field(default_factory=list)
    stored: int = 0


def _email_for(full_name: str) -> str:
    local = re.sub(r"\s+", ".", full_name.strip().lower())
    return f"{local}@example.com"


def _bio_for(profile: RawProfile) -> str:
    positions = ". ".join(f"{item.position} at {item.company_name}" for item in profile.experience[:2])
    return f"{profile.headline}. {positions}"


def outreach_message(full_name: str, matched: list[str], job: Job) -> str:
    first_name = full_name.split(" ")[0]
    company = job.company_name or "our company"
    if matched:
        opener = f"I noticed your experience with {', '.join(matched[:3])}"
    else:
        opener = "I noticed your background"
    return (
        f"Hi {first_name}, {opener} and thought you might be interested in our "
        f"{job.job_title} role at {company}."
    )


def score_sourced_candidates(
    job: Job,
    profiles: list[RawProfile],
    enrichment: dict[str, Enrichment] | None = None,
) -> list[Candidate]:
    """Score raw profiles against a job and shape them as stored candidates.

    Each candidate carries exactly one score entry, for ``job``. The result is
    sorted by score, highest first; ties keep provider order.
    """
    enrichment = enrichment or {}
    keywords = job.extracted_keywords
    candidates: list[Candidate] = []

    for profile in profiles:
        result = score_relevance(profile, keywords)
        full_name = profile.full_name or "Unknown User"
        entry = ScoreEntry(
            job_id=job.job_id,
            score=result.score,
            breakdown_json=result.breakdown,
            outreach_messages=[outreach_message(full_name, result.matched_skills, job)],
            conversation_history=[],
            pipeline_stage=INITIAL_STAGE,
        )
        candidates.append(
            Candidate(
                id=profile.id,
                full_name=full_name,
                email=profile.email or _email_for(full_name),
                bio=_bio_for(profile),
                github_username=profile.github_username,
                open_to_work=True,
                headline=profile.headline or None,
                keywords=CandidateKeywords(
                    role=profile.headline or keywords.role,
                    skills=list(profile.skills),
                    years_of_experience=profile.effective_years,
                    location=profile.location,
                ),
                enrichment=enrichment.get(profile.github_username) if profile.github_username else None,
                scores=[entry],
                linkedin_url=profile.linkedin_url,
                experience=[item.model_dump() for item in profile.experience],
                notificationSettings=[],
                mailbox=[],
            )
        )

    candidates.sort(key=lambda candidate: candidate.scores[0].score, reverse=True)
    return candidates


class SourcingOrchestrator:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        datastore: Datastore | None = None,
        search_provider: ProfileSearchProvider | None = None,
        fallback_provider: ProfileSearchProvider | None = None,
        enricher: ProfileEnricher | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = datastore or Datastore(settings=self.settings)
        self.search_provider = search_provider or ApifyLinkedInSource(settings=self.settings)
        self.fallback_provider = fallback_provider or MockProfileSource()
        self.enricher = enricher or ApifyGithubEnricher(settings=self.settings)

    def source_candidates_for_job(self, job_id: str) -> SourcingReport | None:
        job = self.store.get_job_by_id(job_id)
        if job is None:
            return None

        keywords = job.extracted_keywords
        profiles, source = self._search(keywords.role, keywords.skills, keywords.location)
        enrichment = self._enrich(profiles)

        candidates = score_sourced_candidates(job, profiles, enrichment)
        stored = self.store.upsert_candidates(job.job_id, candidates)
        self.store.update_job(job.job_id, JobUpdate(status="SOURCING_INITIATED"))

        top = candidates[0].scores[0].score if candidates else 0
        logger.info(
            "Sourced %d candidates for job %s from %s, top score %s", len(candidates), job.job_id, source, top
        )
        return SourcingReport(job_id=job.job_id, source=source, candidates=candidates, stored=stored)

    def rank_candidate_pool(self, job_id: str) -> list[CandidateScoreView] | None:
        """Rank every stored candidate with the job's weights. Nothing is persisted."""
        job = self.store.get_job_by_id(job_id)
        if job is None:
            return None

        views: list[CandidateScoreView] = []
        for candidate in self.store.list_candidates():
            result = score_pool_fit(candidate, job.extracted_keywords, job.scoring_ratios)
            views.append(
                CandidateScoreView(
                    candidate_id=candidate.id,
                    full_name=candidate.full_name,
                    headline=candidate.headline or "",
                    github_username=candidate.github_username,
                    open_to_work=candidate.open_to_work,
                    score=result.score,
                    breakdown_json=result.breakdown,
                    enrichment=candidate.enrichment,
                    outreach_messages=[
                        f"Hi {candidate.full_name}, we're impressed by your "
                        f"{', '.join(result.matched_skills)} skills and think you'd be a great fit "
                        f"for our {job.job_title} role."
                    ],
                )
            )
        views.sort(key=lambda view: view.score, reverse=True)
        return views

    def _search(self, role: str, skills: list[str], location: str) -> tuple[list[RawProfile], str]:
        limit = self.settings.sourcing_max_items
        if not self.search_provider.available:
            logger.warning("Profile search provider %s is not configured; using mock profiles", self.search_provider.name)
        else:
            try:
                profiles = self.search_provider.search(role=role, skills=skills, location=location, limit=limit)
            except Exception as exc:
                logger.warning("Profile search via %s failed: %s", self.search_provider.name, exc)
            else:
                if profiles:
                    return profiles, self.search_provider.name
                logger.warning("Profile search via %s returned no results", self.search_provider.name)

        return (
            self.fallback_provider.search(role=role, skills=skills, location=location, limit=limit),
            self.fallback_provider.name,
        )

    def _enrich(self, profiles: list[RawProfile]) -> dict[str, Enrichment]:
        if not self.settings.github_enrichment_enabled:
            return {}
        usernames = [profile.github_username for profile in profiles if profile.github_username]
        if not usernames:
            return {}
        try:
            return self.enricher.enrich(usernames)
        except Exception as exc:
            logger.warning("GitHub enrichment failed: %s", exc)
            return {}
