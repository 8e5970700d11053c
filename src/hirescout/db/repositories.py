from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from hirescout.db.models import CandidateWorkflow, HiringDecision


class WorkflowRepository:
    """Per-(candidate, job) hiring workflow bookkeeping."""

    def __init__(self, session: Session):
        self.session = session

    def get_workflow(self, candidate_id: str, job_id: str) -> CandidateWorkflow | None:
        return self.session.scalar(
            select(CandidateWorkflow).where(
                CandidateWorkflow.candidate_id == candidate_id,
                CandidateWorkflow.job_id == job_id,
            )
        )

    def get_or_create_workflow(self, candidate_id: str, job_id: str) -> CandidateWorkflow:
        workflow = self.get_workflow(candidate_id, job_id)
        if workflow is None:
            workflow = CandidateWorkflow(
                candidate_id=candidate_id,
                job_id=job_id,
                current_step=0,
                completed_steps_json=[],
                draft_message="",
                notes="",
            )
            self.session.add(workflow)
            self.session.commit()
            self.session.refresh(workflow)
        return workflow

    def set_current_step(self, candidate_id: str, job_id: str, step: int) -> CandidateWorkflow:
        workflow = self.get_or_create_workflow(candidate_id, job_id)
        workflow.current_step = step
        return self._save(workflow)

    def mark_step(
        self, candidate_id: str, job_id: str, step: int, *, completed: bool = True
    ) -> CandidateWorkflow:
        workflow = self.get_or_create_workflow(candidate_id, job_id)
        steps = set(workflow.completed_steps_json or [])
        if completed:
            steps.add(step)
        else:
            steps.discard(step)
        # reassign so the JSON column is flagged dirty
        workflow.completed_steps_json = sorted(steps)
        return self._save(workflow)

    def save_draft(self, candidate_id: str, job_id: str, message: str) -> CandidateWorkflow:
        workflow = self.get_or_create_workflow(candidate_id, job_id)
        workflow.draft_message = message
        return self._save(workflow)

    def clear_draft(self, candidate_id: str, job_id: str) -> CandidateWorkflow:
        return self.save_draft(candidate_id, job_id, "")

    def set_notes(self, candidate_id: str, job_id: str, notes: str) -> CandidateWorkflow:
        workflow = self.get_or_create_workflow(candidate_id, job_id)
        workflow.notes = notes
        return self._save(workflow)

    def schedule_call(self, candidate_id: str, job_id: str, when: datetime) -> CandidateWorkflow:
        workflow = self.get_or_create_workflow(candidate_id, job_id)
        workflow.scheduled_call_at = when
        return self._save(workflow)

    def record_decision(
        self,
        *,
        candidate_id: str,
        job_id: str,
        decision: str,
        candidate_name: str = "",
        candidate_email: str = "",
        candidate_headline: str = "",
        fit_score: float | None = None,
        message: str = "",
    ) -> HiringDecision:
        if decision not in {"hired", "rejected"}:
            raise ValueError(f"unsupported hiring decision '{decision}'")

        record = HiringDecision(
            candidate_id=candidate_id,
            job_id=job_id,
            decision=decision,
            candidate_name=candidate_name,
            candidate_email=candidate_email,
            candidate_headline=candidate_headline,
            fit_score=fit_score,
            message=message,
            feedback_sent=False,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def list_decisions(self, job_id: str, decision: str | None = None) -> list[HiringDecision]:
        statement = select(HiringDecision).where(HiringDecision.job_id == job_id)
        if decision is not None:
            statement = statement.where(HiringDecision.decision == decision)
        statement = statement.order_by(HiringDecision.created_at.desc(), HiringDecision.id.desc())
        return list(self.session.scalars(statement).all())

    def mark_feedback_sent(self, decision_id: int) -> HiringDecision | None:
        record = self.session.get(HiringDecision, decision_id)
        if record is None:
            return None
        record.feedback_sent = True
        self.session.commit()
        self.session.refresh(record)
        return record

    def _save(self, workflow: CandidateWorkflow) -> CandidateWorkflow:
        self.session.commit()
        self.session.refresh(workflow)
        return workflow
