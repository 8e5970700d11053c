from __future__ import annotations

import json
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from hirescout.core.assistant import (
    FALLBACK_SUMMARY,
    NO_HISTORY_SUMMARY,
    DEFAULT_SALARY,
    CandidateAssistant,
    fallback_analysis,
    interview_slots,
)
from hirescout.db.repositories import WorkflowRepository
from hirescout.llm.router import LLMRouter
from hirescout.types import CandidateAnalysis


@pytest.fixture
def seeded(settings, datastore, python_job, make_candidate):
    datastore.save_new_job(python_job)
    settings.candidates_file.write_text(
        json.dumps([make_candidate("c1", job_id=python_job.job_id, full_name="Alex Chen")]), encoding="utf-8"
    )
    return python_job


@pytest.fixture
def assistant(db_session, settings, datastore) -> CandidateAssistant:
    return CandidateAssistant(db_session, settings=settings, datastore=datastore, llm=LLMRouter(settings))


@pytest.mark.parametrize(
    ("score", "recommendation"),
    [(95, "reach_out"), (80, "reach_out"), (60, "wait"), (59.5, "archive")],
)
def test_fallback_analysis_thresholds(score, recommendation) -> None:
    analysis = fallback_analysis(score)
    assert analysis.recommendation == recommendation
    assert analysis.confidence == min(100.0, float(score) + 10)


def test_analysis_without_models_uses_score_rule(assistant, datastore, seeded) -> None:
    analysis = assistant.analyze_candidate(seeded.job_id, "c1")

    assert analysis.fit_score == 50
    assert analysis.recommendation == "archive"
    view = datastore.get_candidate_score_for_job("c1", seeded.job_id)
    assert view.ai_fit_score == 50
    assert view.ai_summary == "Candidate has a match score of 50. May not be the best fit."
    assert view.ai_recommendation == "archive"


def test_model_analysis_is_persisted(db_session, settings, datastore, seeded) -> None:
    llm = SimpleNamespace(
        analyze_candidate=lambda **kwargs: CandidateAnalysis(
            fit_score=83, summary="Ships Python services", recommendation="reach_out", confidence=70
        )
    )
    assistant = CandidateAssistant(db_session, settings=settings, datastore=datastore, llm=llm)

    assert assistant.analyze_candidate(seeded.job_id, "c1").fit_score == 83
    assert datastore.get_candidate_score_for_job("c1", seeded.job_id).ai_recommendation == "reach_out"


def test_unknown_candidate_or_job(assistant, seeded) -> None:
    assert assistant.analyze_candidate(seeded.job_id, "ghost") is None
    assert assistant.analyze_candidate("missing-job", "c1") is None
    assert assistant.draft_first_message(seeded.job_id, "ghost") is None
    assert assistant.summarize_conversation(seeded.job_id, "ghost") is None


def test_draft_is_saved_then_sent(assistant, db_session, datastore, seeded) -> None:
    draft = assistant.draft_first_message(seeded.job_id, "c1")

    assert draft.startswith("Hi Alex,")
    assert "Backend Engineer role at Acme" in draft
    assert WorkflowRepository(db_session).get_workflow("c1", seeded.job_id).draft_message == draft

    sent = assistant.send_message(seeded.job_id, "c1")

    assert sent.content == draft
    assert sent.sender == "founder"
    assert sent.ai_drafted is True
    assert sent.id.startswith("msg-")
    assert WorkflowRepository(db_session).get_workflow("c1", seeded.job_id).draft_message == ""
    history = datastore.get_candidate_score_for_job("c1", seeded.job_id).conversation_history
    assert [message.content for message in history] == [draft]


def test_sending_without_text_or_draft_fails(assistant, seeded) -> None:
    with pytest.raises(ValueError, match="no draft"):
        assistant.send_message(seeded.job_id, "c1")


def test_typed_message_and_reply(assistant, datastore, seeded) -> None:
    sent = assistant.send_message(seeded.job_id, "c1", "Are you open to a chat?")
    reply = assistant.record_reply(seeded.job_id, "c1", "Yes, interested!")

    assert sent.ai_drafted is False
    assert reply.sender == "candidate"
    assert assistant.record_reply(seeded.job_id, "ghost", "hello") is None

    history = datastore.get_candidate_score_for_job("c1", seeded.job_id).conversation_history
    assert [message.sender for message in history] == ["founder", "candidate"]


def test_summary_and_reply_fallbacks(assistant, seeded) -> None:
    assert assistant.summarize_conversation(seeded.job_id, "c1") == NO_HISTORY_SUMMARY

    assistant.record_reply(seeded.job_id, "c1", "Sounds good")
    assert assistant.summarize_conversation(seeded.job_id, "c1") == FALLBACK_SUMMARY

    assert assistant.suggest_reply("Yes, I'm interested").startswith("Great!")
    assert assistant.suggest_reply("Tell me more").startswith("Thank you for your interest")


def test_unknown_candidate_send_leaves_no_workflow(assistant, db_session, seeded) -> None:
    assert assistant.send_message(seeded.job_id, "ghost", "Hello?") is None
    assert WorkflowRepository(db_session).get_workflow("ghost", seeded.job_id) is None


def test_interview_slots_skip_weekends() -> None:
    thursday = datetime(2026, 1, 1, 16, 30, tzinfo=UTC)
    assert interview_slots(thursday) == [
        datetime(2026, 1, 2, 10, 0, tzinfo=UTC),
        datetime(2026, 1, 2, 14, 0, tzinfo=UTC),
    ]

    monday = datetime(2026, 1, 5, 8, 0, tzinfo=UTC)
    slots = interview_slots(monday)
    assert len(slots) == 6
    assert [slot.day for slot in slots] == [6, 6, 7, 7, 8, 8]
    assert {slot.hour for slot in slots} == {10, 14}


def test_interview_times_need_a_score_entry(assistant, seeded) -> None:
    now = datetime(2026, 1, 5, 8, 0, tzinfo=UTC)
    assert len(assistant.suggest_interview_times(seeded.job_id, "c1", now=now)) == 6
    assert assistant.suggest_interview_times(seeded.job_id, "ghost", now=now) is None


def test_offer_fallback_is_saved_as_draft(assistant, db_session, seeded) -> None:
    letter = assistant.draft_offer(seeded.job_id, "c1")

    assert letter.startswith("Dear Alex Chen,")
    assert "Backend Engineer position at Acme" in letter
    assert f"Salary: {DEFAULT_SALARY}" in letter
    assert "Start Date: TBD" in letter
    assert WorkflowRepository(db_session).get_workflow("c1", seeded.job_id).draft_message == letter

    custom = assistant.draft_offer(seeded.job_id, "c1", salary="$160,000", start_date="2026-03-01")
    assert "Salary: $160,000" in custom
    assert "Start Date: 2026-03-01" in custom
    assert assistant.draft_offer(seeded.job_id, "ghost") is None


def test_model_offer_is_used_when_available(db_session, settings, datastore, seeded) -> None:
    llm = SimpleNamespace(draft_offer=lambda **kwargs: f"Offer at {kwargs['salary']}")
    assistant = CandidateAssistant(db_session, settings=settings, datastore=datastore, llm=llm)

    assert assistant.draft_offer(seeded.job_id, "c1", salary="$150,000") == "Offer at $150,000"


def test_negotiation_fallbacks(assistant) -> None:
    assert assistant.help_negotiate("Can we talk salary?").startswith("We have some flexibility")
    assert assistant.help_negotiate("I'd like to work remote") == "We're open to discussing remote work arrangements."
    assert assistant.help_negotiate("More vacation please") == "Let's discuss how we can make this work for both of us."


def test_decision_summary_fallbacks(assistant, seeded) -> None:
    hired = assistant.summarize_decision(seeded.job_id, "c1", "hired")
    rejected = assistant.summarize_decision(seeded.job_id, "c1", "rejected")

    assert hired.startswith("Decision: HIRE")
    assert "match score of 50" in hired
    assert rejected.startswith("Decision: REJECT")
    assert "Alex Chen" in rejected
    assert assistant.summarize_decision(seeded.job_id, "ghost", "hired") is None
    with pytest.raises(ValueError, match="unsupported hiring decision"):
        assistant.summarize_decision(seeded.job_id, "c1", "archived")
