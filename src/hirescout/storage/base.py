from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from hirescout.errors import UnknownStageError
from hirescout.types import (
    AIAnalysisUpdate,
    Candidate,
    CandidateScoreView,
    CandidateSearchFilters,
    ConversationMessage,
    Job,
    JobUpdate,
)

PIPELINE_STAGES: tuple[str, ...] = ("new", "engaged", "closing", "hired", "rejected", "archived")
SEARCHABLE_FIELDS = ("full_name", "bio", "headline", "github_username")


class JobStore(ABC):
    @abstractmethod
    def save_new_job(self, job: Job) -> None: ...

    @abstractmethod
    def get_job_by_id(self, job_id: str) -> Job | None: ...

    @abstractmethod
    def update_job(self, job_id: str, updates: JobUpdate) -> Job | None: ...

    @abstractmethod
    def get_all_jobs(self) -> list[Job]: ...


class CandidateStore(ABC):
    """Candidate persistence with one nested score entry per evaluated job."""

    @abstractmethod
    def get_candidate_by_id(self, candidate_id: str) -> Candidate | None: ...

    @abstractmethod
    def get_candidates_by_job_id(self, job_id: str) -> list[CandidateScoreView]: ...

    @abstractmethod
    def get_candidate_score_for_job(self, candidate_id: str, job_id: str) -> CandidateScoreView | None: ...

    @abstractmethod
    def update_candidate_pipeline_stage(self, candidate_id: str, job_id: str, stage: str) -> bool: ...

    @abstractmethod
    def batch_update_candidate_stages(self, job_id: str, candidate_ids: list[str], stage: str) -> int: ...

    @abstractmethod
    def add_message_to_conversation(
        self, candidate_id: str, job_id: str, message: ConversationMessage
    ) -> bool: ...

    @abstractmethod
    def update_candidate_ai_analysis(
        self, candidate_id: str, job_id: str, analysis: AIAnalysisUpdate
    ) -> bool: ...

    @abstractmethod
    def upsert_candidates(self, job_id: str, candidates: list[Candidate]) -> int: ...

    @abstractmethod
    def list_candidates(self) -> list[Candidate]: ...

    @abstractmethod
    def search_candidates(
        self, query: str, filters: CandidateSearchFilters | None = None
    ) -> list[Candidate]: ...


def ensure_known_stage(stage: str) -> str:
    if stage not in PIPELINE_STAGES:
        raise UnknownStageError(stage)
    return stage


def find_score_entry(document: dict[str, Any], job_id: str) -> dict[str, Any] | None:
    for entry in document.get("scores") or []:
        if entry.get("job_id") == job_id:
            return entry
    return None


def get_or_create_score_entry(document: dict[str, Any], job_id: str) -> dict[str, Any]:
    scores = document.get("scores")
    if not isinstance(scores, list):
        scores = []
        document["scores"] = scores

    entry = find_score_entry(document, job_id)
    if entry is None:
        entry = {"job_id": job_id, "score": 0, "breakdown_json": []}
        scores.append(entry)
    return entry


def apply_ai_analysis(entry: dict[str, Any], analysis: AIAnalysisUpdate) -> None:
    if analysis.fit_score is not None:
        entry["aiFitScore"] = analysis.fit_score
    if analysis.summary is not None:
        entry["aiSummary"] = analysis.summary
    if analysis.recommendation is not None:
        entry["aiRecommendation"] = analysis.recommendation


def append_message(entry: dict[str, Any], message: ConversationMessage) -> None:
    history = entry.get("conversationHistory")
    if not isinstance(history, list):
        history = []
        entry["conversationHistory"] = history
    history.append(message.model_dump(by_alias=True, exclude_none=True))


def build_score_view(
    document: dict[str, Any], entry: dict[str, Any], *, include_outreach: bool = False
) -> CandidateScoreView:
    """Flatten a candidate document and one of its score entries.

    Stage, summary and recommendation appear only when non-empty, the fit
    score whenever it is set, and the conversation whenever the list exists.
    """
    view: dict[str, Any] = {
        "candidateId": document.get("_id", ""),
        "full_name": document.get("full_name") or "",
        "headline": document.get("headline") or "",
        "github_username": document.get("github_username") or "",
        "open_to_work": bool(document.get("open_to_work", False)),
        "score": entry.get("score", 0),
        "breakdown_json": entry.get("breakdown_json") or [],
        "enrichment": document.get("enrichment"),
    }
    if include_outreach:
        view["outreach_messages"] = entry.get("outreach_messages")

    if entry.get("pipelineStage"):
        view["pipelineStage"] = entry["pipelineStage"]
    if entry.get("conversationHistory") is not None:
        view["conversationHistory"] = entry["conversationHistory"]
    if entry.get("aiFitScore") is not None:
        view["aiFitScore"] = entry["aiFitScore"]
    if entry.get("aiSummary"):
        view["aiSummary"] = entry["aiSummary"]
    if entry.get("aiRecommendation"):
        view["aiRecommendation"] = entry["aiRecommendation"]
    return CandidateScoreView.model_validate(view)


def merge_sourced_candidate(
    existing: dict[str, Any] | None, incoming: dict[str, Any], job_id: str
) -> dict[str, Any]:
    """Fold a freshly sourced document into whatever is already stored.

    Profile fields are refreshed from the incoming document. Entries for other
    jobs are kept untouched; the entry for ``job_id`` takes the new score,
    breakdown and outreach while keeping any stage, conversation and AI
    fields recorded earlier.
    """
    if existing is None:
        return incoming

    merged = {**existing, **{key: value for key, value in incoming.items() if key != "scores"}}
    merged["scores"] = [dict(entry) for entry in existing.get("scores") or []]

    fresh = find_score_entry(incoming, job_id)
    if fresh is None:
        return merged

    entry = get_or_create_score_entry(merged, job_id)
    for key in ("score", "breakdown_json", "outreach_messages"):
        if key in fresh:
            entry[key] = fresh[key]
    for key in ("pipelineStage", "conversationHistory"):
        if key not in entry and key in fresh:
            entry[key] = fresh[key]
    return merged


def matches_search(
    document: dict[str, Any], query: str, filters: CandidateSearchFilters | None
) -> bool:
    """In-memory equivalent of the search engine query.

    Any query term found in a searchable field or a skill is a hit; filters
    are all required.
    """
    keywords = document.get("keywords") or {}
    skills = [str(skill) for skill in keywords.get("skills") or []]

    terms = [term for term in (query or "").lower().split() if term]
    if terms:
        haystack = " ".join(
            [str(document.get(field) or "") for field in SEARCHABLE_FIELDS] + skills
        ).lower()
        if not any(term in haystack for term in terms):
            return False

    if filters is None:
        return True
    if filters.skills and not set(filters.skills) & set(skills):
        return False
    if filters.location and keywords.get("location") != filters.location:
        return False
    if filters.min_experience is not None:
        years = keywords.get("years_of_experience", keywords.get("min_experience_years", 0)) or 0
        if years < filters.min_experience:
            return False
    if filters.open_to_work is not None and bool(document.get("open_to_work")) != filters.open_to_work:
        return False
    return True
