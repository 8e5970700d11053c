from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from hirescout.errors import StoreReadError
from hirescout.storage.base import (
    CandidateStore,
    JobStore,
    append_message,
    apply_ai_analysis,
    build_score_view,
    ensure_known_stage,
    find_score_entry,
    get_or_create_score_entry,
    matches_search,
    merge_sourced_candidate,
)
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

_LOCKS: dict[Path, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCKS[key] = lock
        return lock


class JsonFile:
    """A JSON array on disk, rewritten whole on every change."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.dirty = False

    def read(self) -> list[dict[str, Any]]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.error("Failed to read %s: %s", self.path, exc)
            raise StoreReadError(str(self.path), str(exc)) from exc

        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt JSON in %s: %s", self.path, exc)
            raise StoreReadError(str(self.path), f"invalid JSON: {exc}") from exc

        if not isinstance(data, list):
            logger.error("Expected a JSON array in %s, found %s", self.path, type(data).__name__)
            raise StoreReadError(str(self.path), "top-level value is not an array")
        return data

    def write(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @contextmanager
    def editing(self) -> Iterator[list[dict[str, Any]]]:
        """Hold the file lock across a read-modify-write cycle.

        The caller mutates the yielded list in place; it is written back on
        clean exit unless the caller cleared ``self.dirty``.
        """
        with _lock_for(self.path):
            records = self.read()
            self.dirty = True
            yield records
            if self.dirty:
                self.write(records)


class JsonJobStore(JobStore):
    def __init__(self, path: Path | str):
        self.file = JsonFile(path)

    def save_new_job(self, job: Job) -> None:
        with self.file.editing() as jobs:
            jobs.append(job.model_dump(by_alias=True, exclude_none=True))

    def get_job_by_id(self, job_id: str) -> Job | None:
        for record in self.file.read():
            if record.get("jobId") == job_id:
                return Job.model_validate(record)
        return None

    def update_job(self, job_id: str, updates: JobUpdate) -> Job | None:
        changes = updates.model_dump(by_alias=True, exclude_none=True)
        with self.file.editing() as jobs:
            for record in jobs:
                if record.get("jobId") == job_id:
                    record.update(changes)
                    return Job.model_validate(record)
            self.file.dirty = False
        return None

    def get_all_jobs(self) -> list[Job]:
        return [Job.model_validate(record) for record in self.file.read()]


class JsonCandidateStore(CandidateStore):
    def __init__(self, path: Path | str):
        self.file = JsonFile(path)

    def get_candidate_by_id(self, candidate_id: str) -> Candidate | None:
        document = self._find(self.file.read(), candidate_id)
        return Candidate.model_validate(document) if document is not None else None

    def get_candidates_by_job_id(self, job_id: str) -> list[CandidateScoreView]:
        views: list[CandidateScoreView] = []
        for document in self.file.read():
            entry = find_score_entry(document, job_id)
            if entry is not None:
                views.append(build_score_view(document, entry))
        return views

    def get_candidate_score_for_job(self, candidate_id: str, job_id: str) -> CandidateScoreView | None:
        document = self._find(self.file.read(), candidate_id)
        if document is None:
            return None
        entry = find_score_entry(document, job_id)
        if entry is None:
            return None
        return build_score_view(document, entry, include_outreach=True)

    def update_candidate_pipeline_stage(self, candidate_id: str, job_id: str, stage: str) -> bool:
        ensure_known_stage(stage)
        with self.file.editing() as candidates:
            document = self._find(candidates, candidate_id)
            if document is None:
                self.file.dirty = False
                return False
            get_or_create_score_entry(document, job_id)["pipelineStage"] = stage
        return True

    def batch_update_candidate_stages(self, job_id: str, candidate_ids: list[str], stage: str) -> int:
        ensure_known_stage(stage)
        wanted = set(candidate_ids)
        updated = 0
        with self.file.editing() as candidates:
            for document in candidates:
                if document.get("_id") in wanted:
                    get_or_create_score_entry(document, job_id)["pipelineStage"] = stage
                    updated += 1
            self.file.dirty = updated > 0
        return updated

    def add_message_to_conversation(
        self, candidate_id: str, job_id: str, message: ConversationMessage
    ) -> bool:
        with self.file.editing() as candidates:
            document = self._find(candidates, candidate_id)
            if document is None:
                self.file.dirty = False
                return False
            append_message(get_or_create_score_entry(document, job_id), message)
        return True

    def update_candidate_ai_analysis(
        self, candidate_id: str, job_id: str, analysis: AIAnalysisUpdate
    ) -> bool:
        with self.file.editing() as candidates:
            document = self._find(candidates, candidate_id)
            if document is None:
                self.file.dirty = False
                return False
            apply_ai_analysis(get_or_create_score_entry(document, job_id), analysis)
        return True

    def upsert_candidates(self, job_id: str, candidates: list[Candidate]) -> int:
        if not candidates:
            return 0
        with self.file.editing() as stored:
            positions = {document.get("_id"): index for index, document in enumerate(stored)}
            for candidate in candidates:
                incoming = candidate.to_document()
                index = positions.get(candidate.id)
                if index is None:
                    positions[candidate.id] = len(stored)
                    stored.append(incoming)
                else:
                    stored[index] = merge_sourced_candidate(stored[index], incoming, job_id)
        logger.info("Upserted %d candidates for job %s into %s", len(candidates), job_id, self.file.path)
        return len(candidates)

    def list_candidates(self) -> list[Candidate]:
        return [Candidate.model_validate(document) for document in self.file.read()]

    def search_candidates(
        self, query: str, filters: CandidateSearchFilters | None = None
    ) -> list[Candidate]:
        return [
            Candidate.model_validate(document)
            for document in self.file.read()
            if matches_search(document, query, filters)
        ]

    @staticmethod
    def _find(candidates: list[dict[str, Any]], candidate_id: str) -> dict[str, Any] | None:
        for document in candidates:
            if document.get("_id") == candidate_id:
                return document
        return None
