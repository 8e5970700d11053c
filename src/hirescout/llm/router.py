from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from hirescout.config import Settings, get_settings
from hirescout.core.keyword_heuristics import DEFAULT_EXPERIENCE_YEARS, DEFAULT_ROLE, heuristic_keywords
from hirescout.llm.prompts import (
    CANDIDATE_ANALYSIS_PROMPT,
    CONVERSATION_SUMMARY_PROMPT,
    DECISION_SUMMARY_PROMPT,
    FIRST_MESSAGE_PROMPT,
    KEYWORD_EXTRACTION_PROMPT,
    NEGOTIATION_PROMPT,
    OFFER_LETTER_PROMPT,
    REPLY_SUGGESTION_PROMPT,
)
from hirescout.llm.providers import LLMProvider, ProviderPool
from hirescout.types import (
    CandidateAnalysis,
    CandidateScoreView,
    ConversationMessage,
    ExtractedKeywords,
    Job,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_SKILLS = ["Python", "FastAPI", "Postgres"]
KEYWORD_FIELDS = ("role", "skills", "min_experience_years", "location")
ANALYSIS_FIELDS = ("fitScore", "summary", "recommendation")


class LLMRouter:
    """Routes generative calls through the provider chain.

    Each call walks the configured providers in order and skips any without
    credentials. A provider that raises, or whose output fails the caller's
    validator, is treated as unavailable and the next one is tried. Callers
    get an empty result back when the chain is exhausted and supply their own
    deterministic fallback.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.pool = ProviderPool(self.settings)

    def extract_keywords(self, *, description: str, title: str) -> ExtractedKeywords:
        prompt = KEYWORD_EXTRACTION_PROMPT.format(job_title=title, job_text=description)
        data = self._call_json(
            task="extract_keywords",
            prompt=prompt,
            validate=lambda payload: all(key in payload for key in KEYWORD_FIELDS),
        )
        if not data:
            logger.info("Using heuristic keyword extraction for title=%r", title)
            return heuristic_keywords(description, title)

        try:
            return self._normalize_keywords(data, title=title)
        except Exception:
            logger.warning("Invalid structured keyword output; falling back to heuristic")
            return heuristic_keywords(description, title)

    def analyze_candidate(self, *, job: Job, view: CandidateScoreView) -> CandidateAnalysis | None:
        prompt = CANDIDATE_ANALYSIS_PROMPT.format(
            job_title=job.job_title,
            company_name=job.company_name or "Company",
            job_text=job.jd_text[:500],
            required_skills=", ".join(job.extracted_keywords.skills),
            min_experience_years=job.extracted_keywords.min_experience_years,
            full_name=view.full_name,
            headline=view.headline,
            score=view.score,
            breakdown_json=json.dumps(
                [item.model_dump() for item in view.breakdown_json[:5]], ensure_ascii=True
            ),
        )
        data = self._call_json(
            task="analyze_candidate",
            prompt=prompt,
            validate=lambda payload: all(key in payload for key in ANALYSIS_FIELDS),
        )
        if not data:
            return None

        try:
            fit_score = max(0.0, min(100.0, float(data["fitScore"])))
            confidence = float(data.get("confidence", 0.0) or 0.0)
        except (TypeError, ValueError):
            logger.warning("Invalid candidate analysis payload; ignoring model output")
            return None

        return CandidateAnalysis(
            fit_score=fit_score,
            summary=str(data["summary"]),
            recommendation=str(data["recommendation"]),
            confidence=max(0.0, min(100.0, confidence)),
        )

    def draft_first_message(self, *, job: Job, view: CandidateScoreView) -> str:
        ranked = sorted(view.breakdown_json, key=lambda item: item.value or 0, reverse=True)[:5]
        top_reasons = "\n".join(f"- {item.signal}: {item.reason}" for item in ranked)
        job_summary = job.jd_text[:400] + ("..." if len(job.jd_text) > 400 else "")

        prompt = FIRST_MESSAGE_PROMPT.format(
            job_title=job.job_title,
            company_name=job.company_name or "Company",
            job_summary=job_summary or "No job description available",
            required_skills=", ".join(job.extracted_keywords.skills) or "Not specified",
            min_experience_years=job.extracted_keywords.min_experience_years,
            full_name=view.full_name,
            headline=view.headline or "Not available",
            score=view.score,
            ai_summary_line=f"AI Fit Summary: {view.ai_summary}" if view.ai_summary else "",
            top_reasons=top_reasons or "No specific breakdown available",
        )
        return self._call_text(task="draft_message", prompt=prompt).strip()

    def summarize_conversation(self, *, messages: list[ConversationMessage]) -> str:
        conversation = "\n".join(f"{message.sender}: {message.content}" for message in messages)
        prompt = CONVERSATION_SUMMARY_PROMPT.format(conversation=conversation)
        return self._call_text(task="summarize", prompt=prompt).strip()

    def suggest_reply(self, *, last_message: str) -> str:
        prompt = REPLY_SUGGESTION_PROMPT.format(last_message=last_message)
        return self._call_text(task="suggest_reply", prompt=prompt).strip()

    def draft_offer(self, *, job: Job, view: CandidateScoreView, salary: str, start_date: str) -> str:
        prompt = OFFER_LETTER_PROMPT.format(
            job_title=job.job_title,
            company_name=job.company_name or "Company",
            full_name=view.full_name,
            salary=salary,
            start_date=start_date,
        )
        return self._call_text(task="draft_offer", prompt=prompt).strip()

    def help_negotiate(self, *, request: str) -> str:
        prompt = NEGOTIATION_PROMPT.format(request=request)
        return self._call_text(task="negotiate", prompt=prompt).strip()

    def summarize_decision(self, *, job: Job, view: CandidateScoreView, decision: str) -> str:
        prompt = DECISION_SUMMARY_PROMPT.format(
            decision_verb="hiring" if decision == "hired" else "rejecting",
            job_title=job.job_title,
            full_name=view.full_name,
            score=view.score,
            decision=decision,
        )
        return self._call_text(task="decision_summary", prompt=prompt).strip()

    def _available_providers(self) -> list[LLMProvider]:
        return [provider for provider in self.pool.ordered() if provider.config.configured]

    def _call_json(
        self,
        *,
        task: str,
        prompt: str,
        validate: Callable[[dict[str, Any]], bool] | None = None,
    ) -> dict[str, Any]:
        for provider in self._available_providers():
            try:
                data = provider.complete_json(prompt=prompt)
            except Exception as exc:
                logger.warning(
                    "LLM JSON call failed task=%s provider=%s error=%s", task, provider.config.name, exc
                )
                continue

            if not data or (validate is not None and not validate(data)):
                logger.warning(
                    "LLM JSON output rejected task=%s provider=%s", task, provider.config.name
                )
                continue
            return data
        return {}

    def _call_text(self, *, task: str, prompt: str) -> str:
        for provider in self._available_providers():
            try:
                text = provider.complete_text(prompt=prompt).content
            except Exception as exc:
                logger.warning(
                    "LLM text call failed task=%s provider=%s error=%s", task, provider.config.name, exc
                )
                continue
            if text.strip():
                return text
        return ""

    def _normalize_keywords(self, data: dict[str, Any], *, title: str) -> ExtractedKeywords:
        skills = data.get("skills")
        if not isinstance(skills, list) or not skills:
            skills = list(PLACEHOLDER_SKILLS)

        try:
            years = int(data.get("min_experience_years") or 0)
        except (TypeError, ValueError):
            years = 0

        return ExtractedKeywords(
            role=str(data.get("role") or title or DEFAULT_ROLE),
            skills=[str(skill) for skill in skills if str(skill).strip()] or list(PLACEHOLDER_SKILLS),
            min_experience_years=years if years > 0 else DEFAULT_EXPERIENCE_YEARS,
            location=str(data.get("location") or self.settings.default_location),
        )
