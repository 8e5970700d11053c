from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hirescout.db.base import Base, TimestampMixin


class CandidateWorkflow(TimestampMixin, Base):
    __tablename__ = "candidate_workflows"
    __table_args__ = (UniqueConstraint("candidate_id", "job_id", name="uq_candidate_workflow"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    candidate_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    job_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    current_step: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_steps_json: Mapped[list[int]] = mapped_column(JSON, default=list, nullable=False)
    draft_message: Mapped[str] = mapped_column(Text, default="", nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    scheduled_call_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class HiringDecision(TimestampMixin, Base):
    __tablename__ = "hiring_decisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    candidate_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    job_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    candidate_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    candidate_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    candidate_headline: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    decision: Mapped[str] = mapped_column(String(20), nullable=False)
    fit_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    message: Mapped[str] = mapped_column(Text, default="", nullable=False)
    feedback_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
