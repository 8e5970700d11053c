from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

JobStatus = Literal[
    "PENDING_KEYWORDS",
    "PROCESSING_KEYWORDS",
    "PROCESSED_KEYWORDS",
    "FILTERS_SAVED",
    "SOURCING_INITIATED",
]
MessageSender = Literal["founder", "candidate"]


class ExtractedKeywords(BaseModel):
    role: str
    skills: list[str] = Field(default_factory=list)
    min_experience_years: int = 0
    location: str

    @field_validator("min_experience_years")
    @classmethod
    def validate_experience(cls, value: int) -> int:
        if value < 0:
            raise ValueError("min_experience_years must be non-negative")
        return value


class ScoringRatios(BaseModel):
    tech_match_weight: float = 0.2
    oss_activity_weight: float = 0.5
    startup_exp_weight: float = 0.3

    @field_validator("tech_match_weight", "oss_activity_weight", "startup_exp_weight")
    @classmethod
    def validate_weight(cls, value: float) -> float:
        if value < 0 or value > 1:
            raise ValueError("scoring weights must be between 0 and 1")
        return value


class PipelineStageDefinition(BaseModel):
    id: str
    name: str
    order: int
    color: str | None = None


class Job(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    job_id: str = Field(alias="jobId")
    jd_text: str
    job_title: str
    company_name: str | None = None
    status: JobStatus = "PENDING_KEYWORDS"
    extracted_keywords: ExtractedKeywords
    scoring_ratios: ScoringRatios = Field(default_factory=ScoringRatios)
    recruiter_id: int = Field(default=1, alias="recruiterId")
    created_at: str = Field(alias="createdAt")
    pipeline_stages: list[PipelineStageDefinition] | None = Field(default=None, alias="pipelineStages")
    message: str | None = None


class JobUpdate(BaseModel):
    """Mutable job fields. Id and creation time never change."""

    model_config = ConfigDict(populate_by_name=True)

    extracted_keywords: ExtractedKeywords | None = None
    scoring_ratios: ScoringRatios | None = None
    status: JobStatus | None = None
    pipeline_stages: list[PipelineStageDefinition] | None = Field(default=None, alias="pipelineStages")
    message: str | None = None


class CandidateKeywords(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: str = ""
    skills: list[str] = Field(default_factory=list)
    years_of_experience: int = Field(
        default=0,
        validation_alias=AliasChoices("years_of_experience", "min_experience_years"),
    )
    location: str = ""


class Enrichment(BaseModel):
    public_repos: int = 0
    total_stars: int = 0
    recent_activity_days: int = 0
    updated_at: str = ""


class BreakdownItem(BaseModel):
    signal: str
    value: int | float
    reason: str


class ConversationMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: MessageSender = Field(alias="from")
    content: str
    timestamp: str
    ai_drafted: bool | None = Field(default=None, alias="aiDrafted")


class ScoreEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    job_id: str
    score: int | float = 0
    breakdown_json: list[BreakdownItem] = Field(default_factory=list)
    outreach_messages: list[str] | None = None
    pipeline_stage: str | None = Field(default=None, alias="pipelineStage")
    conversation_history: list[ConversationMessage] | None = Field(
        default=None, alias="conversationHistory"
    )
    ai_fit_score: int | float | None = Field(default=None, alias="aiFitScore")
    ai_summary: str | None = Field(default=None, alias="aiSummary")
    ai_recommendation: str | None = Field(default=None, alias="aiRecommendation")


class Candidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    full_name: str
    email: str = ""
    bio: str = ""
    github_username: str = ""
    open_to_work: bool = False
    keywords: CandidateKeywords = Field(default_factory=CandidateKeywords)
    headline: str | None = None
    enrichment: Enrichment | None = None
    scores: list[ScoreEntry] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CandidateScoreView(BaseModel):
    """A candidate flattened together with its entry for one job."""

    model_config = ConfigDict(populate_by_name=True)

    candidate_id: str = Field(alias="candidateId")
    full_name: str
    headline: str = ""
    github_username: str = ""
    open_to_work: bool = False
    score: int | float = 0
    breakdown_json: list[BreakdownItem] = Field(default_factory=list)
    outreach_messages: list[str] | None = None
    enrichment: Enrichment | None = None
    pipeline_stage: str | None = Field(default=None, alias="pipelineStage")
    conversation_history: list[ConversationMessage] | None = Field(
        default=None, alias="conversationHistory"
    )
    ai_fit_score: int | float | None = Field(default=None, alias="aiFitScore")
    ai_summary: str | None = Field(default=None, alias="aiSummary")
    ai_recommendation: str | None = Field(default=None, alias="aiRecommendation")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AIAnalysisUpdate(BaseModel):
    fit_score: float | None = None
    summary: str | None = None
    recommendation: str | None = None


class CandidateAnalysis(BaseModel):
    fit_score: float
    summary: str
    recommendation: str
    confidence: float = 0.0


class CandidateSearchFilters(BaseModel):
    skills: list[str] = Field(default_factory=list)
    location: str | None = None
    min_experience: int | None = None
    open_to_work: bool | None = None


class ExperienceItem(BaseModel):
    position: str = ""
    company_name: str = ""
    duration: str = ""
    description: str = ""


class EducationItem(BaseModel):
    school_name: str = ""
    degree: str = ""
    field_of_study: str = ""


class RawProfile(BaseModel):
    id: str
    full_name: str = "Unknown User"
    email: str | None = None
    headline: str = ""
    location: str = ""
    linkedin_url: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceItem] = Field(default_factory=list)
    education: list[EducationItem] = Field(default_factory=list)
    github_username: str = ""
    years_of_experience: int | None = None

    @property
    def effective_years(self) -> int:
        if self.years_of_experience is not None:
            return self.years_of_experience
        return len(self.experience)


class ScoreResult(BaseModel):
    score: int
    breakdown: list[BreakdownItem] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)


class BucketCount(BaseModel):
    key: str
    count: int


class OpenToWorkStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    open: int = 0
    not_open: int = Field(default=0, alias="notOpen")
    percentage: int = 0


class ScoreDistribution(BaseModel):
    average: int = 0
    min: int | float = 0
    max: int | float = 0
    ranges: list[BucketCount] = Field(default_factory=list)


class PoolAnalytics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_candidates: int = Field(default=0, alias="totalCandidates")
    locations: list[BucketCount] = Field(default_factory=list)
    skills: list[BucketCount] = Field(default_factory=list)
    experience: list[BucketCount] = Field(default_factory=list)
    open_to_work: OpenToWorkStats = Field(default_factory=OpenToWorkStats, alias="openToWorkStats")
    score_distribution: ScoreDistribution | None = Field(default=None, alias="scoreDistribution")
