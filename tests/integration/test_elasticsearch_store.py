from __future__ import annotations

import copy
from types import SimpleNamespace

import pytest

from hirescout.config import Settings
from hirescout.errors import HirescoutError, UnknownStageError
from hirescout.storage.elasticsearch_store import (
    INDEX_MAPPINGS,
    ElasticsearchCandidateStore,
    build_search_query,
)
from hirescout.storage.json_store import JsonCandidateStore
from hirescout.storage.migrate import migrate_candidates_to_elasticsearch
from hirescout.types import AIAnalysisUpdate, Candidate, CandidateSearchFilters, ConversationMessage


def _response(body):
    return SimpleNamespace(body=body)


class FakeIndices:
    def __init__(self):
        self.created: dict[str, dict] = {}
        self.refreshed: list[str] = []

    def exists(self, *, index):
        return index in self.created

    def create(self, *, index, mappings):
        self.created[index] = mappings

    def refresh(self, *, index):
        self.refreshed.append(index)


class FakeElasticsearch:
    """In-memory stand-in for the handful of client calls the store makes."""

    def __init__(self, *, status: str = "green", reject_ids: set[str] | None = None):
        self.docs: dict[str, dict] = {}
        self.indices = FakeIndices()
        self.cluster = SimpleNamespace(health=lambda: _response({"status": status}))
        self.reject_ids = reject_ids or set()
        self.queries: list[dict] = []
        self.refreshes: list[str] = []

    def options(self, **kwargs):
        assert kwargs == {"ignore_status": 404}
        return self

    def get(self, *, index, id):
        if id not in self.docs:
            return _response({"_index": index, "_id": id, "found": False})
        return _response({"_index": index, "_id": id, "found": True, "_source": copy.deepcopy(self.docs[id])})

    def mget(self, *, index, ids):
        return _response({"docs": [self.get(index=index, id=doc_id).body for doc_id in ids]})

    def update(self, *, index, id, doc, refresh):
        self.refreshes.append(refresh)
        self.docs[id].update(copy.deepcopy(doc))

    def bulk(self, *, operations, refresh):
        self.refreshes.append(refresh)
        items = []
        for action, payload in zip(operations[::2], operations[1::2]):
            (kind, meta), = action.items()
            doc_id = meta["_id"]
            if doc_id in self.reject_ids:
                items.append({kind: {"_id": doc_id, "error": {"type": "mapper_parsing_exception"}}})
                continue
            if kind == "index":
                assert "_id" not in payload
                self.docs[doc_id] = copy.deepcopy(payload)
            else:
                self.docs[doc_id].update(copy.deepcopy(payload["doc"]))
            items.append({kind: {"_id": doc_id, "result": "ok"}})
        return _response({"errors": any("error" in next(iter(i.values())) for i in items), "items": items})

    def count(self, *, index):
        return _response({"count": len(self.docs)})

    def search(self, *, index, query, size):
        self.queries.append(query)
        hits = []
        for doc_id, source in self.docs.items():
            nested = query.get("nested")
            if nested is not None:
                job_id = nested["query"]["term"]["scores.job_id"]
                if not any(entry.get("job_id") == job_id for entry in source.get("scores", [])):
                    continue
            hits.append({"_id": doc_id, "_source": copy.deepcopy(source)})
        return _response({"hits": {"hits": hits[:size]}})


@pytest.fixture
def es_settings() -> Settings:
    return Settings(elasticsearch_index="test-candidates", elasticsearch_refresh="wait_for")


@pytest.fixture
def es_client() -> FakeElasticsearch:
    return FakeElasticsearch()


@pytest.fixture
def es_store(es_client, es_settings) -> ElasticsearchCandidateStore:
    return ElasticsearchCandidateStore(client=es_client, settings=es_settings)


def _load(es_client: FakeElasticsearch, *documents: dict) -> None:
    for document in documents:
        es_client.docs[document["_id"]] = {key: value for key, value in document.items() if key != "_id"}


def test_ensure_index_creates_mapping_once(es_store, es_client) -> None:
    assert es_store.ensure_index() is True
    assert es_store.ensure_index() is False
    assert es_client.indices.created["test-candidates"] is INDEX_MAPPINGS
    assert INDEX_MAPPINGS["properties"]["scores"]["type"] == "nested"


def test_health_reports_cluster_status(es_settings) -> None:
    assert ElasticsearchCandidateStore(client=FakeElasticsearch(status="yellow"), settings=es_settings).health()
    assert not ElasticsearchCandidateStore(client=FakeElasticsearch(status="red"), settings=es_settings).health()


def test_job_listing_uses_nested_query(es_store, es_client, make_candidate) -> None:
    _load(es_client, make_candidate("c1", job_id="job-a"), make_candidate("c2", job_id="job-b"))

    views = es_store.get_candidates_by_job_id("job-a")

    assert [view.candidate_id for view in views] == ["c1"]
    assert es_client.queries[-1] == {
        "nested": {"path": "scores", "query": {"term": {"scores.job_id": "job-a"}}}
    }


def test_missing_document_reads_as_none(es_store) -> None:
    assert es_store.get_candidate_by_id("ghost") is None
    assert es_store.get_candidate_score_for_job("ghost", "job-a") is None
    assert es_store.update_candidate_pipeline_stage("ghost", "job-a", "engaged") is False


def test_stage_update_writes_scores_back(es_store, es_client, make_candidate) -> None:
    _load(es_client, make_candidate("c1", job_id="job-a"))

    assert es_store.update_candidate_pipeline_stage("c1", "job-a", "engaged")
    assert es_store.update_candidate_pipeline_stage("c1", "job-b", "new")

    scores = es_client.docs["c1"]["scores"]
    assert [(entry["job_id"], entry["pipelineStage"]) for entry in scores] == [
        ("job-a", "engaged"),
        ("job-b", "new"),
    ]
    assert es_client.refreshes == ["wait_for", "wait_for"]
    with pytest.raises(UnknownStageError):
        es_store.update_candidate_pipeline_stage("c1", "job-a", "interviewing")


def test_batch_update_skips_unknown_ids(es_store, es_client, make_candidate) -> None:
    _load(es_client, make_candidate("c1", job_id="job-a"), make_candidate("c2"))

    assert es_store.batch_update_candidate_stages("job-a", ["c1", "c2", "ghost", "c1"], "archived") == 2
    assert es_client.docs["c2"]["scores"][0]["pipelineStage"] == "archived"
    assert es_store.batch_update_candidate_stages("job-a", ["ghost"], "archived") == 0
    assert es_store.batch_update_candidate_stages("job-a", [], "archived") == 0


def test_batch_update_excludes_rejected_items(es_settings, make_candidate) -> None:
    client = FakeElasticsearch(reject_ids={"c2"})
    store = ElasticsearchCandidateStore(client=client, settings=es_settings)
    _load(client, make_candidate("c1", job_id="job-a"), make_candidate("c2", job_id="job-a"))

    assert store.batch_update_candidate_stages("job-a", ["c1", "c2"], "closing") == 1
    assert client.docs["c1"]["scores"][0]["pipelineStage"] == "closing"
    assert "pipelineStage" not in client.docs["c2"]["scores"][0]


def test_message_and_analysis_updates(es_store, es_client, make_candidate) -> None:
    _load(es_client, make_candidate("c1", job_id="job-a"))
    message = ConversationMessage(id="m1", sender="candidate", content="Yes!", timestamp="2026-01-01T00:00:00Z")

    assert es_store.add_message_to_conversation("c1", "job-a", message)
    assert es_store.update_candidate_ai_analysis("c1", "job-a", AIAnalysisUpdate(fit_score=0))

    view = es_store.get_candidate_score_for_job("c1", "job-a")
    assert view.conversation_history[0].sender == "candidate"
    assert view.ai_fit_score == 0


def test_upsert_merges_with_stored_documents(es_store, es_client, make_candidate) -> None:
    stored = make_candidate("c1", job_id="job-a")
    stored["scores"][0]["pipelineStage"] = "closing"
    _load(es_client, stored)

    fresh = make_candidate("c1", job_id="job-a", full_name="Renamed")
    fresh["scores"][0]["score"] = 91
    count = es_store.upsert_candidates(
        "job-a", [Candidate.model_validate(fresh), Candidate.model_validate(make_candidate("c2", job_id="job-a"))]
    )

    assert count == 2
    assert es_client.docs["c1"]["full_name"] == "Renamed"
    assert es_client.docs["c1"]["scores"][0]["score"] == 91
    assert es_client.docs["c1"]["scores"][0]["pipelineStage"] == "closing"
    assert "c2" in es_client.docs


def test_bulk_index_counts_rejected_documents(es_settings, make_candidate) -> None:
    client = FakeElasticsearch(reject_ids={"bad"})
    store = ElasticsearchCandidateStore(client=client, settings=es_settings)

    accepted = store.bulk_index_candidates([make_candidate("good"), make_candidate("bad")])

    assert accepted == 1
    assert set(client.docs) == {"good"}


def test_build_search_query() -> None:
    assert build_search_query("", None) == {"match_all": {}}

    query = build_search_query(
        "rust",
        CandidateSearchFilters(skills=["Rust"], location="Sydney", min_experience=3, open_to_work=True),
    )
    must = query["bool"]["must"]
    assert must[0]["multi_match"]["query"] == "rust"
    assert must[0]["multi_match"]["fuzziness"] == "AUTO"
    assert must[1:] == [
        {"terms": {"keywords.skills": ["Rust"]}},
        {"term": {"keywords.location": "Sydney"}},
        {"range": {"keywords.years_of_experience": {"gte": 3}}},
        {"term": {"open_to_work": True}},
    ]


def test_migrate_json_candidates(tmp_path, es_client, make_candidate) -> None:
    es_store = ElasticsearchCandidateStore(
        client=es_client, settings=Settings(elasticsearch_index="test-candidates", elasticsearch_refresh="false")
    )
    source = JsonCandidateStore(tmp_path / "candidates.json")
    source.upsert_candidates(
        "job-a", [Candidate.model_validate(make_candidate(f"c{i}", job_id="job-a")) for i in range(5)]
    )

    report = migrate_candidates_to_elasticsearch(tmp_path / "candidates.json", es_store, batch_size=2)

    assert (report.total, report.indexed, report.failed, report.searchable) == (5, 5, 0, 5)
    assert "test-candidates" in es_client.indices.created
    assert len(es_client.docs) == 5
    assert set(es_client.refreshes) == {"wait_for"}
    assert es_client.indices.refreshed == ["test-candidates"]


def test_migrate_refuses_unhealthy_cluster(tmp_path, es_settings) -> None:
    store = ElasticsearchCandidateStore(client=FakeElasticsearch(status="red"), settings=es_settings)
    with pytest.raises(HirescoutError):
        migrate_candidates_to_elasticsearch(tmp_path / "none.json", store)
