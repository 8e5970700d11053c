from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from hirescout.config import Settings, get_settings
from hirescout.db.models import CandidateWorkflow, HiringDecision
from hirescout.db.repositories import WorkflowRepository
from hirescout.errors import IllegalStageTransitionError
from hirescout.storage.base import PIPELINE_STAGES, ensure_known_stage
from hirescout.storage.datastore import Datastore

logger = logging.getLogger(__name__)

INITIAL_STAGE = "new"
TERMINAL_STAGES = frozenset({"hired", "rejected", "archived"})

TRANSITIONS: dict[str, frozenset[str]] = {
    "new": frozenset({"engaged", "archived"}),
    "engaged": frozenset({"closing", "archived"}),
    "closing": frozenset({"hired", "rejected", "archived"}),
    "hired": frozenset(),
    "rejected": frozenset(),
    "archived": frozenset(),
}


def allowed_transitions(stage: str) -> frozenset[str]:
    return TRANSITIONS[ensure_known_stage(stage)]


def can_transition(current: str, target: str) -> bool:
    ensure_known_stage(target)
    return current == target or target in allowed_transitions(current)


class PipelineService:
    """Stage moves for a candidate within one job, plus the workflow around them.

    ``move_candidate`` follows the transition table. ``override_stage`` and
    ``batch_move`` are operator moves that accept any known stage.
    """

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        datastore: Datastore | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = datastore or Datastore(settings=self.settings)
        self.workflows = WorkflowRepository(session)

    def current_stage(self, candidate_id: str, job_id: str) -> str | None:
        """Stage of the candidate for this job; None when the candidate is unknown."""
        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        if view is not None:
            return view.pipeline_stage or INITIAL_STAGE
        if self.store.get_candidate_by_id(candidate_id) is None:
            return None
        return INITIAL_STAGE

    def move_candidate(self, candidate_id: str, job_id: str, stage: str) -> bool:
        ensure_known_stage(stage)
        current = self.current_stage(candidate_id, job_id)
        if current is None:
            return False
        if current == stage:
            return True
        if stage not in allowed_transitions(current):
            raise IllegalStageTransitionError(current, stage)

        moved = self.store.update_candidate_pipeline_stage(candidate_id, job_id, stage)
        if moved:
            logger.info("Moved candidate %s for job %s: %s -> %s", candidate_id, job_id, current, stage)
        return moved

    def override_stage(self, candidate_id: str, job_id: str, stage: str) -> bool:
        moved = self.store.update_candidate_pipeline_stage(candidate_id, job_id, stage)
        if moved:
            logger.info("Operator set candidate %s for job %s to %s", candidate_id, job_id, stage)
        return moved

    def batch_move(self, job_id: str, candidate_ids: list[str], stage: str) -> int:
        updated = self.store.batch_update_candidate_stages(job_id, candidate_ids, stage)
        logger.info("Batch moved %d/%d candidates for job %s to %s", updated, len(candidate_ids), job_id, stage)
        return updated

    def board(self, job_id: str) -> dict[str, list[str]]:
        columns: dict[str, list[str]] = {stage: [] for stage in PIPELINE_STAGES}
        for view in self.store.get_candidates_by_job_id(job_id):
            stage = view.pipeline_stage or INITIAL_STAGE
            columns.setdefault(stage, []).append(view.candidate_id)
        return columns

    def set_step(
        self, candidate_id: str, job_id: str, step: int, *, completed: bool | None = None
    ) -> CandidateWorkflow:
        workflow = self.workflows.set_current_step(candidate_id, job_id, step)
        if completed is not None:
            workflow = self.workflows.mark_step(candidate_id, job_id, step, completed=completed)
        return workflow

    def save_draft(self, candidate_id: str, job_id: str, message: str) -> CandidateWorkflow:
        return self.workflows.save_draft(candidate_id, job_id, message)

    def set_notes(self, candidate_id: str, job_id: str, notes: str) -> CandidateWorkflow:
        return self.workflows.set_notes(candidate_id, job_id, notes)

    def schedule_call(self, candidate_id: str, job_id: str, when: datetime) -> CandidateWorkflow:
        return self.workflows.schedule_call(candidate_id, job_id, when)

    def record_decision(
        self, job_id: str, candidate_id: str, decision: str, message: str = ""
    ) -> HiringDecision | None:
        """Close out a candidate as hired or rejected.

        The stage move is checked, so the candidate must already be closing.
        """
        if decision not in {"hired", "rejected"}:
            raise ValueError(f"unsupported hiring decision '{decision}'")

        candidate = self.store.get_candidate_by_id(candidate_id)
        if candidate is None:
            return None
        if not self.move_candidate(candidate_id, job_id, decision):
            return None

        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        fit_score = None
        if view is not None:
            fit_score = float(view.ai_fit_score if view.ai_fit_score is not None else view.score)

        return self.workflows.record_decision(
            candidate_id=candidate_id,
            job_id=job_id,
            decision=decision,
            candidate_name=candidate.full_name,
            candidate_email=candidate.email,
            candidate_headline=candidate.headline or "",
            fit_score=fit_score,
            message=message,
        )

    def list_decisions(self, job_id: str, decision: str | None = None) -> list[HiringDecision]:
        return self.workflows.list_decisions(job_id, decision)

    def mark_feedback_sent(self, decision_id: int) -> HiringDecision | None:
        record = self.workflows.mark_feedback_sent(decision_id)
        if record is not None:
            logger.info("Feedback sent for decision %d (candidate %s)", decision_id, record.candidate_id)
        return record


def serialize_workflow(workflow: CandidateWorkflow) -> dict[str, Any]:
    return {
        "candidate_id": workflow.candidate_id,
        "job_id": workflow.job_id,
        "current_step": workflow.current_step,
        "completed_steps": list(workflow.completed_steps_json or []),
        "draft_message": workflow.draft_message,
        "notes": workflow.notes,
        "scheduled_call_at": workflow.scheduled_call_at.isoformat() if workflow.scheduled_call_at else None,
    }


def serialize_decision(record: HiringDecision) -> dict[str, Any]:
    return {
        "id": record.id,
        "job_id": record.job_id,
        "candidate_id": record.candidate_id,
        "candidate_name": record.candidate_name,
        "candidate_email": record.candidate_email,
        "candidate_headline": record.candidate_headline,
        "decision": record.decision,
        "decision_date": record.created_at.isoformat() if record.created_at else None,
        "fit_score": record.fit_score,
        "message": record.message,
        "feedback_sent": record.feedback_sent,
    }
