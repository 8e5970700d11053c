from __future__ import annotations

import pytest

from hirescout.core.sourcing import SourcingOrchestrator, outreach_message, score_sourced_candidates
from hirescout.sources.base import ProfileEnricher, ProfileSearchProvider
from hirescout.sources.mock import MockProfileSource
from hirescout.types import Candidate, Enrichment, ExperienceItem, RawProfile


class StaticSource(ProfileSearchProvider):
    name = "static"

    def __init__(self, profiles=None, *, error: Exception | None = None, available: bool = True):
        self.profiles = profiles or []
        self.error = error
        self._available = available
        self.calls: list[dict] = []

    @property
    def available(self) -> bool:
        return self._available

    def search(self, *, role, skills, location, limit):
        self.calls.append({"role": role, "skills": skills, "location": location, "limit": limit})
        if self.error is not None:
            raise self.error
        return list(self.profiles)


class StaticEnricher(ProfileEnricher):
    def __init__(self, result=None, *, error: Exception | None = None):
        self.result = result or {}
        self.error = error
        self.requested: list[list[str]] = []

    def enrich(self, usernames):
        self.requested.append(list(usernames))
        if self.error is not None:
            raise self.error
        return {name: value for name, value in self.result.items() if name in usernames}


@pytest.fixture
def saved_job(datastore, python_job):
    datastore.save_new_job(python_job)
    return python_job


def _orchestrator(settings, datastore, source, enricher=None) -> SourcingOrchestrator:
    return SourcingOrchestrator(
        settings=settings,
        datastore=datastore,
        search_provider=source,
        fallback_provider=MockProfileSource(),
        enricher=enricher or StaticEnricher(),
    )


def test_unconfigured_provider_falls_back_to_mock_profiles(settings, datastore, saved_job) -> None:
    source = StaticSource(available=False)
    report = _orchestrator(settings, datastore, source).source_candidates_for_job(saved_job.job_id)

    assert report.source == "mock"
    assert report.stored == 3
    assert source.calls == []
    assert [c.full_name for c in report.candidates] == ["Alex Chen", "Taylor Lee", "Jordan Smith"]
    assert [c.scores[0].score for c in report.candidates] == [91, 76, 60]

    views = datastore.get_candidates_by_job_id(saved_job.job_id)
    assert len(views) == 3
    assert {view.pipeline_stage for view in views} == {"new"}
    assert all(view.conversation_history == [] for view in views)
    assert datastore.get_job_by_id(saved_job.job_id).status == "SOURCING_INITIATED"


def test_failing_or_empty_provider_falls_back_to_mock(settings, datastore, saved_job) -> None:
    failing = StaticSource(error=RuntimeError("actor timed out"))
    assert _orchestrator(settings, datastore, failing).source_candidates_for_job(saved_job.job_id).source == "mock"

    empty = StaticSource([])
    assert _orchestrator(settings, datastore, empty).source_candidates_for_job(saved_job.job_id).source == "mock"
    assert empty.calls[0] == {
        "role": "Backend Engineer",
        "skills": ["Python", "FastAPI", "Postgres"],
        "location": "Sydney",
        "limit": settings.sourcing_max_items,
    }


def test_live_profiles_are_enriched_and_stored(settings, datastore, saved_job) -> None:
    profile = RawProfile(
        id="dana-park",
        full_name="Dana Park",
        headline="Backend Engineer",
        location="Sydney",
        skills=["Python", "Postgres"],
        experience=[ExperienceItem(position="Engineer", company_name="Seed Co")],
        github_username="dpark",
    )
    enricher = StaticEnricher({"dpark": Enrichment(public_repos=9, total_stars=120)})

    report = _orchestrator(settings, datastore, StaticSource([profile]), enricher).source_candidates_for_job(
        saved_job.job_id
    )

    assert report.source == "static"
    assert enricher.requested == [["dpark"]]
    stored = datastore.get_candidate_by_id("dana-park")
    assert stored.enrichment.total_stars == 120
    assert stored.email == "dana.park@example.com"
    assert stored.model_extra["experience"][0]["company_name"] == "Seed Co"
    assert stored.scores[0].outreach_messages == [
        "Hi Dana, I noticed your experience with Python, Postgres and thought you might be "
        "interested in our Backend Engineer role at Acme."
    ]


def test_enrichment_failure_does_not_block_sourcing(settings, datastore, saved_job) -> None:
    enricher = StaticEnricher(error=RuntimeError("github actor down"))
    report = _orchestrator(settings, datastore, StaticSource(available=False), enricher).source_candidates_for_job(
        saved_job.job_id
    )

    assert report.stored == 3
    assert all(candidate.enrichment is None for candidate in report.candidates)


def test_resourcing_keeps_pipeline_progress(settings, datastore, saved_job) -> None:
    orchestrator = _orchestrator(settings, datastore, StaticSource(available=False))
    first = orchestrator.source_candidates_for_job(saved_job.job_id)
    alex = first.candidates[0].id
    datastore.update_candidate_pipeline_stage(alex, saved_job.job_id, "engaged")

    orchestrator.source_candidates_for_job(saved_job.job_id)

    assert len(datastore.list_candidates()) == 3
    assert datastore.get_candidate_score_for_job(alex, saved_job.job_id).pipeline_stage == "engaged"


def test_unknown_job_returns_none(settings, datastore) -> None:
    orchestrator = _orchestrator(settings, datastore, StaticSource(available=False))
    assert orchestrator.source_candidates_for_job("missing") is None
    assert orchestrator.rank_candidate_pool("missing") is None


def test_rank_candidate_pool_uses_job_weights(settings, datastore, saved_job, make_candidate) -> None:
    datastore.upsert_candidates(
        saved_job.job_id,
        [
            Candidate.model_validate(
                make_candidate(
                    "oss",
                    keywords={"skills": ["Python", "FastAPI", "Postgres"]},
                    enrichment={"total_stars": 500},
                )
            ),
            Candidate.model_validate(make_candidate("plain")),
        ],
    )

    ranked = _orchestrator(settings, datastore, StaticSource()).rank_candidate_pool(saved_job.job_id)

    assert [view.candidate_id for view in ranked] == ["oss", "plain"]
    # 0.2 * 100 + 0.5 * 100 + 0.3 * 0
    assert ranked[0].score == 70
    assert ranked[1].score == 7
    assert datastore.get_candidate_by_id("plain").scores == []


def test_scored_candidates_without_matches_get_generic_opener(python_job) -> None:
    profile = RawProfile(id="p1", full_name="Sam", headline="Designer", skills=["Figma"])
    (candidate,) = score_sourced_candidates(python_job, [profile])

    assert candidate.scores[0].pipeline_stage == "new"
    assert candidate.keywords.role == "Designer"
    assert outreach_message("Sam", [], python_job).startswith("Hi Sam, I noticed your background")
