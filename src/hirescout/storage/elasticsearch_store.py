from __future__ import annotations

import logging
from typing import Any

from elasticsearch import Elasticsearch

from hirescout.config import Settings, get_settings
from hirescout.storage.base import (
    CandidateStore,
    append_message,
    apply_ai_analysis,
    build_score_view,
    ensure_known_stage,
    find_score_entry,
    get_or_create_score_entry,
    merge_sourced_candidate,
)
from hirescout.types import (
    AIAnalysisUpdate,
    Candidate,
    CandidateScoreView,
    CandidateSearchFilters,
    ConversationMessage,
)

logger = logging.getLogger(__name__)

MAX_JOB_HITS = 10000
MAX_SEARCH_HITS = 1000
SEARCH_FIELDS = ["full_name^2", "bio", "headline^2", "keywords.skills", "github_username"]

INDEX_MAPPINGS: dict[str, Any] = {
    "properties": {
        "full_name": {"type": "text", "fields": {"keyword": {"type": "keyword"}}},
        "email": {"type": "keyword"},
        "bio": {"type": "text"},
        "github_username": {"type": "keyword"},
        "open_to_work": {"type": "boolean"},
        "headline": {"type": "text", "fields": {"keyword": {"type": "keyword"}}},
        "keywords": {
            "properties": {
                "role": {"type": "keyword"},
                "skills": {"type": "keyword"},
                "years_of_experience": {"type": "integer"},
                "location": {"type": "keyword"},
            }
        },
        "enrichment": {
            "properties": {
                "public_repos": {"type": "integer"},
                "total_stars": {"type": "integer"},
                "recent_activity_days": {"type": "integer"},
                "updated_at": {"type": "date"},
            }
        },
        "notificationSettings": {"type": "object", "enabled": False},
        "scores": {
            "type": "nested",
            "properties": {
                "job_id": {"type": "keyword"},
                "score": {"type": "integer"},
                "breakdown_json": {"type": "object", "enabled": False},
                "outreach_messages": {"type": "keyword"},
                "pipelineStage": {"type": "keyword"},
                "conversationHistory": {"type": "object", "enabled": False},
                "aiFitScore": {"type": "float"},
                "aiSummary": {"type": "text"},
                "aiRecommendation": {"type": "keyword"},
            },
        },
    }
}


def build_client(settings: Settings | None = None) -> Elasticsearch:
    settings = settings or get_settings()
    kwargs: dict[str, Any] = {"request_timeout": settings.elasticsearch_timeout_sec}
    if settings.elasticsearch_username and settings.elasticsearch_password:
        kwargs["basic_auth"] = (settings.elasticsearch_username, settings.elasticsearch_password)
    return Elasticsearch(settings.elasticsearch_node, **kwargs)


def _hit_to_document(hit: dict[str, Any]) -> dict[str, Any]:
    return {"_id": hit["_id"], **(hit.get("_source") or {})}


def _failed_items(body: dict[str, Any], action: str) -> list[dict[str, Any]]:
    results = (item.get(action, {}) for item in body.get("items", []))
    return [result for result in results if result.get("error")]


def _source_of(document: dict[str, Any]) -> dict[str, Any]:
    # _id is index metadata and cannot live in _source
    return {key: value for key, value in document.items() if key != "_id"}


class ElasticsearchCandidateStore(CandidateStore):
    """Candidates as documents in one index, score entries as a nested array.

    Score entries cannot be edited in place by path, so every mutation fetches
    the document, edits ``scores`` in memory and pushes it back as a partial
    update. There is no optimistic locking; concurrent writers to the same
    candidate race and the last update wins.
    """

    def __init__(self, client: Elasticsearch | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.client = client if client is not None else build_client(self.settings)
        self.index = self.settings.elasticsearch_index
        self.refresh = self.settings.elasticsearch_refresh

    def ensure_index(self) -> bool:
        """Create the index with its mapping. Returns True when it was created."""
        if self.client.indices.exists(index=self.index):
            return False
        self.client.indices.create(index=self.index, mappings=INDEX_MAPPINGS)
        logger.info("Created Elasticsearch index %s", self.index)
        return True

    def health(self) -> bool:
        try:
            status = self.client.cluster.health().body.get("status")
        except Exception as exc:
            logger.warning("Elasticsearch health check failed: %s", exc)
            return False
        return status in {"green", "yellow"}

    def refresh_index(self) -> None:
        self.client.indices.refresh(index=self.index)

    def count(self) -> int:
        return int(self.client.count(index=self.index).body.get("count", 0))

    def bulk_index_candidates(self, documents: list[dict[str, Any]], *, refresh: str | None = None) -> int:
        """Index whole candidate documents; returns how many were accepted."""
        if not documents:
            return 0
        operations: list[dict[str, Any]] = []
        for document in documents:
            operations.append({"index": {"_index": self.index, "_id": document["_id"]}})
            operations.append(_source_of(document))

        body = self.client.bulk(operations=operations, refresh=refresh or self.refresh).body
        failed = _failed_items(body, "index")
        for item in failed:
            logger.warning("Failed to index candidate %s: %s", item.get("_id"), item["error"])
        return len(documents) - len(failed)

    def get_candidate_by_id(self, candidate_id: str) -> Candidate | None:
        document = self._get_document(candidate_id)
        return Candidate.model_validate(document) if document is not None else None

    def get_candidates_by_job_id(self, job_id: str) -> list[CandidateScoreView]:
        response = self.client.search(
            index=self.index,
            query={"nested": {"path": "scores", "query": {"term": {"scores.job_id": job_id}}}},
            size=MAX_JOB_HITS,
        )
        views: list[CandidateScoreView] = []
        for hit in response.body["hits"]["hits"]:
            document = _hit_to_document(hit)
            entry = find_score_entry(document, job_id)
            if entry is not None:
                views.append(build_score_view(document, entry))
        return views

    def get_candidate_score_for_job(self, candidate_id: str, job_id: str) -> CandidateScoreView | None:
        document = self._get_document(candidate_id)
        if document is None:
            return None
        entry = find_score_entry(document, job_id)
        if entry is None:
            return None
        return build_score_view(document, entry, include_outreach=True)

    def update_candidate_pipeline_stage(self, candidate_id: str, job_id: str, stage: str) -> bool:
        ensure_known_stage(stage)
        document = self._get_document(candidate_id)
        if document is None:
            return False
        get_or_create_score_entry(document, job_id)["pipelineStage"] = stage
        self._push_scores(candidate_id, document)
        return True

    def batch_update_candidate_stages(self, job_id: str, candidate_ids: list[str], stage: str) -> int:
        ensure_known_stage(stage)
        if not candidate_ids:
            return 0

        response = self.client.mget(index=self.index, ids=list(dict.fromkeys(candidate_ids)))
        operations: list[dict[str, Any]] = []
        for hit in response.body.get("docs", []):
            if not hit.get("found"):
                continue
            document = _hit_to_document(hit)
            get_or_create_score_entry(document, job_id)["pipelineStage"] = stage
            operations.append({"update": {"_index": self.index, "_id": hit["_id"]}})
            operations.append({"doc": {"scores": document["scores"]}})

        if not operations:
            return 0
        body = self.client.bulk(operations=operations, refresh=self.refresh).body
        failed = _failed_items(body, "update")
        for item in failed:
            logger.warning("Failed to move candidate %s to %s: %s", item.get("_id"), stage, item["error"])
        return len(operations) // 2 - len(failed)

    def add_message_to_conversation(
        self, candidate_id: str, job_id: str, message: ConversationMessage
    ) -> bool:
        document = self._get_document(candidate_id)
        if document is None:
            return False
        append_message(get_or_create_score_entry(document, job_id), message)
        self._push_scores(candidate_id, document)
        return True

    def update_candidate_ai_analysis(
        self, candidate_id: str, job_id: str, analysis: AIAnalysisUpdate
    ) -> bool:
        document = self._get_document(candidate_id)
        if document is None:
            return False
        apply_ai_analysis(get_or_create_score_entry(document, job_id), analysis)
        self._push_scores(candidate_id, document)
        return True

    def upsert_candidates(self, job_id: str, candidates: list[Candidate]) -> int:
        if not candidates:
            return 0

        ids = list(dict.fromkeys(candidate.id for candidate in candidates))
        response = self.client.mget(index=self.index, ids=ids)
        existing = {
            hit["_id"]: _hit_to_document(hit)
            for hit in response.body.get("docs", [])
            if hit.get("found")
        }

        documents: dict[str, dict[str, Any]] = {}
        for candidate in candidates:
            previous = documents.get(candidate.id) or existing.get(candidate.id)
            documents[candidate.id] = merge_sourced_candidate(previous, candidate.to_document(), job_id)

        indexed = self.bulk_index_candidates(list(documents.values()))
        logger.info("Upserted %d candidates for job %s into index %s", indexed, job_id, self.index)
        return indexed

    def list_candidates(self) -> list[Candidate]:
        response = self.client.search(index=self.index, query={"match_all": {}}, size=MAX_JOB_HITS)
        return [Candidate.model_validate(_hit_to_document(hit)) for hit in response.body["hits"]["hits"]]

    def search_candidates(
        self, query: str, filters: CandidateSearchFilters | None = None
    ) -> list[Candidate]:
        response = self.client.search(
            index=self.index, query=build_search_query(query, filters), size=MAX_SEARCH_HITS
        )
        return [Candidate.model_validate(_hit_to_document(hit)) for hit in response.body["hits"]["hits"]]

    def _get_document(self, candidate_id: str) -> dict[str, Any] | None:
        response = self.client.options(ignore_status=404).get(index=self.index, id=candidate_id)
        body = response.body
        if not body.get("found"):
            return None
        return _hit_to_document(body)

    def _push_scores(self, candidate_id: str, document: dict[str, Any]) -> None:
        self.client.update(
            index=self.index,
            id=candidate_id,
            doc={"scores": document["scores"]},
            refresh=self.refresh,
        )


def build_search_query(query: str, filters: CandidateSearchFilters | None) -> dict[str, Any]:
    must: list[dict[str, Any]] = []
    if query:
        must.append(
            {
                "multi_match": {
                    "query": query,
                    "fields": SEARCH_FIELDS,
                    "type": "best_fields",
                    "fuzziness": "AUTO",
                }
            }
        )

    if filters is not None:
        if filters.skills:
            must.append({"terms": {"keywords.skills": filters.skills}})
        if filters.location:
            must.append({"term": {"keywords.location": filters.location}})
        if filters.min_experience is not None:
            must.append({"range": {"keywords.years_of_experience": {"gte": filters.min_experience}}})
        if filters.open_to_work is not None:
            must.append({"term": {"open_to_work": filters.open_to_work}})

    if not must:
        return {"match_all": {}}
    return {"bool": {"must": must}}
