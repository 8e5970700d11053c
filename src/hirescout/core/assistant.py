from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from hirescout.config import Settings, get_settings
from hirescout.db.repositories import WorkflowRepository
from hirescout.llm.router import LLMRouter
from hirescout.storage.datastore import Datastore
from hirescout.types import AIAnalysisUpdate, CandidateAnalysis, ConversationMessage

logger = logging.getLogger(__name__)

NO_HISTORY_SUMMARY = "No conversation history available."
FALLBACK_SUMMARY = "Candidate has shown interest. Next step: schedule technical interview."
DEFAULT_SALARY = "$120,000 - $150,000"
DEFAULT_START_DATE = "TBD"
INTERVIEW_DAYS_AHEAD = 3
INTERVIEW_HOURS = (10, 14)
MAX_INTERVIEW_SLOTS = 6


def fallback_analysis(score: float) -> CandidateAnalysis:
    fit = min(100.0, float(score))
    if fit >= 80:
        recommendation, verdict = "reach_out", "Highly recommended."
    elif fit >= 60:
        recommendation, verdict = "wait", "Worth considering."
    else:
        recommendation, verdict = "archive", "May not be the best fit."
    return CandidateAnalysis(
        fit_score=fit,
        summary=f"Candidate has a match score of {score}. {verdict}",
        recommendation=recommendation,
        confidence=min(100.0, fit + 10),
    )


def fallback_first_message(full_name: str, job_title: str, company_name: str | None) -> str:
    first_name = full_name.split(" ")[0]
    return (
        f"Hi {first_name},\n\n"
        f"I noticed your background and thought you might be interested in our {job_title} role "
        f"at {company_name or 'our company'}.\n\n"
        "Would you be open to a brief conversation?\n\n"
        "Best regards"
    )


def fallback_reply(last_message: str) -> str:
    lowered = last_message.lower()
    if "interested" in lowered or "yes" in lowered:
        return "Great! Let's schedule a time to chat. Are you available this week?"
    return "Thank you for your interest. Would you like to learn more about the role?"


def fallback_negotiation(request: str) -> str:
    lowered = request.lower()
    if "salary" in lowered:
        return "We have some flexibility within our range. What are your expectations?"
    if "remote" in lowered:
        return "We're open to discussing remote work arrangements."
    return "Let's discuss how we can make this work for both of us."


def fallback_offer(full_name: str, job_title: str, company_name: str | None, salary: str, start_date: str) -> str:
    return (
        f"Dear {full_name},\n\n"
        f"We are excited to extend an offer for the {job_title} position at {company_name or 'our company'}.\n\n"
        f"Salary: {salary}\n"
        f"Start Date: {start_date}\n\n"
        "We look forward to having you on board.\n\n"
        "Best regards"
    )


def fallback_decision_summary(full_name: str, score: float, decision: str) -> str:
    if decision == "hired":
        return (
            f"Decision: HIRE\n\n{full_name} demonstrated strong technical skills with a match score "
            f"of {score}. Recommendation: Extend offer."
        )
    return f"Decision: REJECT\n\nWhile {full_name} has relevant experience, there were concerns about fit."


def interview_slots(now: datetime) -> list[datetime]:
    """Morning and afternoon slots on the next few days, weekends skipped."""
    slots: list[datetime] = []
    for offset in range(1, INTERVIEW_DAYS_AHEAD + 1):
        day = now + timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        for hour in INTERVIEW_HOURS:
            slots.append(day.replace(hour=hour, minute=0, second=0, microsecond=0))
    return slots[:MAX_INTERVIEW_SLOTS]


class CandidateAssistant:
    """AI-assisted actions on one candidate within one job.

    Every action works without a configured model: the router returns an
    empty result and a fixed template or score-based rule is used instead.
    """

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        datastore: Datastore | None = None,
        llm: LLMRouter | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = datastore or Datastore(settings=self.settings)
        self.llm = llm or LLMRouter(self.settings)
        self.workflows = WorkflowRepository(session)

    def analyze_candidate(self, job_id: str, candidate_id: str) -> CandidateAnalysis | None:
        job = self.store.get_job_by_id(job_id)
        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        if job is None or view is None:
            return None

        analysis = self.llm.analyze_candidate(job=job, view=view)
        if analysis is None:
            logger.info("Using score-based analysis for candidate %s on job %s", candidate_id, job_id)
            analysis = fallback_analysis(view.score)

        self.store.update_candidate_ai_analysis(
            candidate_id,
            job_id,
            AIAnalysisUpdate(
                fit_score=analysis.fit_score,
                summary=analysis.summary,
                recommendation=analysis.recommendation,
            ),
        )
        return analysis

    def draft_first_message(self, job_id: str, candidate_id: str) -> str | None:
        job = self.store.get_job_by_id(job_id)
        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        if job is None or view is None:
            return None

        message = self.llm.draft_first_message(job=job, view=view)
        if not message:
            message = fallback_first_message(view.full_name, job.job_title, job.company_name)
        self.workflows.save_draft(candidate_id, job_id, message)
        return message

    def summarize_conversation(self, job_id: str, candidate_id: str) -> str | None:
        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        if view is None:
            return None
        history = view.conversation_history or []
        if not history:
            return NO_HISTORY_SUMMARY
        return self.llm.summarize_conversation(messages=history) or FALLBACK_SUMMARY

    def suggest_reply(self, last_message: str) -> str:
        return self.llm.suggest_reply(last_message=last_message) or fallback_reply(last_message)

    def suggest_interview_times(
        self, job_id: str, candidate_id: str, *, now: datetime | None = None
    ) -> list[datetime] | None:
        if self.store.get_candidate_score_for_job(candidate_id, job_id) is None:
            return None
        return interview_slots(now or datetime.now(UTC))

    def draft_offer(
        self,
        job_id: str,
        candidate_id: str,
        *,
        salary: str | None = None,
        start_date: str | None = None,
    ) -> str | None:
        """Offer letter for a closing candidate, saved as the workflow draft."""
        job = self.store.get_job_by_id(job_id)
        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        if job is None or view is None:
            return None

        salary = salary or DEFAULT_SALARY
        start_date = start_date or DEFAULT_START_DATE
        letter = self.llm.draft_offer(job=job, view=view, salary=salary, start_date=start_date)
        if not letter:
            letter = fallback_offer(view.full_name, job.job_title, job.company_name, salary, start_date)
        self.workflows.save_draft(candidate_id, job_id, letter)
        return letter

    def help_negotiate(self, request: str) -> str:
        return self.llm.help_negotiate(request=request) or fallback_negotiation(request)

    def summarize_decision(self, job_id: str, candidate_id: str, decision: str) -> str | None:
        if decision not in {"hired", "rejected"}:
            raise ValueError(f"unsupported hiring decision '{decision}'")
        job = self.store.get_job_by_id(job_id)
        view = self.store.get_candidate_score_for_job(candidate_id, job_id)
        if job is None or view is None:
            return None
        summary = self.llm.summarize_decision(job=job, view=view, decision=decision)
        return summary or fallback_decision_summary(view.full_name, view.score, decision)

    def send_message(
        self, job_id: str, candidate_id: str, content: str | None = None
    ) -> ConversationMessage | None:
        """Send the given text, or the saved draft, as a founder message."""
        if self.store.get_candidate_by_id(candidate_id) is None:
            return None
        workflow = self.workflows.get_or_create_workflow(candidate_id, job_id)
        text = content if content is not None else workflow.draft_message
        if not text.strip():
            raise ValueError("message content is empty and no draft is saved")

        now = datetime.now(UTC)
        message = ConversationMessage(
            id=f"msg-{int(now.timestamp() * 1000)}",
            sender="founder",
            content=text,
            timestamp=now.isoformat(),
            ai_drafted=content is None,
        )
        if not self.store.add_message_to_conversation(candidate_id, job_id, message):
            return None
        self.workflows.clear_draft(candidate_id, job_id)
        return message

    def record_reply(self, job_id: str, candidate_id: str, content: str) -> ConversationMessage | None:
        now = datetime.now(UTC)
        message = ConversationMessage(
            id=f"msg-{int(now.timestamp() * 1000)}",
            sender="candidate",
            content=content,
            timestamp=now.isoformat(),
        )
        if not self.store.add_message_to_conversation(candidate_id, job_id, message):
            return None
        return message
