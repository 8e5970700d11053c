from __future__ import annotations

import logging

from hirescout.config import Settings, get_settings
from hirescout.storage.base import CandidateStore, JobStore
from hirescout.storage.json_store import JsonCandidateStore, JsonJobStore
from hirescout.types import (
    AIAnalysisUpdate,
    Candidate,
    CandidateScoreView,
    CandidateSearchFilters,
    ConversationMessage,
    Job,
    JobUpdate,
)

logger = logging.getLogger(__name__)


def build_candidate_store(settings: Settings | None = None) -> CandidateStore:
    settings = settings or get_settings()
    if settings.use_elasticsearch:
        from hirescout.storage.elasticsearch_store import ElasticsearchCandidateStore

        logger.info("Using Elasticsearch candidate store at %s", settings.elasticsearch_node)
        return ElasticsearchCandidateStore(settings=settings)
    return JsonCandidateStore(settings.candidates_file)


class Datastore:
    """Jobs always live in the JSON job store; candidates go wherever configured."""

    def __init__(
        self,
        jobs: JobStore | None = None,
        candidates: CandidateStore | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.jobs = jobs if jobs is not None else JsonJobStore(settings.jobs_file)
        self.candidates = candidates if candidates is not None else build_candidate_store(settings)

    def save_new_job(self, job: Job) -> None:
        self.jobs.save_new_job(job)

    def get_job_by_id(self, job_id: str) -> Job | None:
        return self.jobs.get_job_by_id(job_id)

    def update_job(self, job_id: str, updates: JobUpdate) -> Job | None:
        return self.jobs.update_job(job_id, updates)

    def get_all_jobs(self) -> list[Job]:
        return self.jobs.get_all_jobs()

    def get_candidate_by_id(self, candidate_id: str) -> Candidate | None:
        return self.candidates.get_candidate_by_id(candidate_id)

    def get_candidates_by_job_id(self, job_id: str) -> list[CandidateScoreView]:
        return self.candidates.get_candidates_by_job_id(job_id)

    def get_candidate_score_for_job(self, candidate_id: str, job_id: str) -> CandidateScoreView | None:
        return self.candidates.get_candidate_score_for_job(candidate_id, job_id)

    def update_candidate_pipeline_stage(self, candidate_id: str, job_id: str, stage: str) -> bool:
        return self.candidates.update_candidate_pipeline_stage(candidate_id, job_id, stage)

    def batch_update_candidate_stages(self, job_id: str, candidate_ids: list[str], stage: str) -> int:
        return self.candidates.batch_update_candidate_stages(job_id, candidate_ids, stage)

    def add_message_to_conversation(
        self, candidate_id: str, job_id: str, message: ConversationMessage
    ) -> bool:
        return self.candidates.add_message_to_conversation(candidate_id, job_id, message)

    def update_candidate_ai_analysis(
        self, candidate_id: str, job_id: str, analysis: AIAnalysisUpdate
    ) -> bool:
        return self.candidates.update_candidate_ai_analysis(candidate_id, job_id, analysis)

    def upsert_candidates(self, job_id: str, candidates: list[Candidate]) -> int:
        return self.candidates.upsert_candidates(job_id, candidates)

    def list_candidates(self) -> list[Candidate]:
        return self.candidates.list_candidates()

    def search_candidates(
        self, query: str, filters: CandidateSearchFilters | None = None
    ) -> list[Candidate]:
        return self.candidates.search_candidates(query, filters)
