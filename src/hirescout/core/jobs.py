from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from hirescout.config import Settings, get_settings
from hirescout.llm.router import LLMRouter
from hirescout.storage.datastore import Datastore
from hirescout.types import (
    ExtractedKeywords,
    Job,
    JobUpdate,
    PipelineStageDefinition,
    ScoringRatios,
)

logger = logging.getLogger(__name__)

DEFAULT_PIPELINE_STAGES = [
    PipelineStageDefinition(id="new", name="New", order=0),
    PipelineStageDefinition(id="engaged", name="Engaged", order=1),
    PipelineStageDefinition(id="closing", name="Closing", order=2),
]


class JobService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        datastore: Datastore | None = None,
        llm: LLMRouter | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = datastore or Datastore(settings=self.settings)
        self.llm = llm or LLMRouter(self.settings)

    def default_ratios(self) -> ScoringRatios:
        return ScoringRatios(
            tech_match_weight=self.settings.default_tech_match_weight,
            oss_activity_weight=self.settings.default_oss_activity_weight,
            startup_exp_weight=self.settings.default_startup_exp_weight,
        )

    def create_job(self, description: str, title: str, company_name: str | None = None) -> Job:
        keywords = self.llm.extract_keywords(description=description, title=title)
        job = Job(
            job_id=str(uuid.uuid4()),
            jd_text=description,
            job_title=title,
            company_name=company_name,
            status="PROCESSED_KEYWORDS",
            extracted_keywords=keywords,
            scoring_ratios=self.default_ratios(),
            recruiter_id=1,
            created_at=datetime.now(UTC).isoformat(),
            pipeline_stages=[stage.model_copy() for stage in DEFAULT_PIPELINE_STAGES],
        )
        self.store.save_new_job(job)
        logger.info("Created job %s (%s) with %d required skills", job.job_id, title, len(keywords.skills))
        return job

    def get_job(self, job_id: str) -> Job | None:
        return self.store.get_job_by_id(job_id)

    def list_jobs(self) -> list[Job]:
        return self.store.get_all_jobs()

    def update_filters(
        self,
        job_id: str,
        *,
        keywords: ExtractedKeywords | None = None,
        ratios: ScoringRatios | None = None,
    ) -> Job | None:
        return self.store.update_job(
            job_id,
            JobUpdate(extracted_keywords=keywords, scoring_ratios=ratios, status="FILTERS_SAVED"),
        )
