from __future__ import annotations

import json
from types import SimpleNamespace

from hirescout.config import Settings
from hirescout.llm.router import PLACEHOLDER_SKILLS, LLMRouter
from hirescout.types import BreakdownItem, CandidateScoreView, ConversationMessage


class ScriptedClient:
    """Answers every completion call with the next scripted reply."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.responses = SimpleNamespace(create=self._responses)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat))

    def _next(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply if isinstance(reply, str) else json.dumps(reply)

    def _responses(self, *, model, input):
        text = self._next(input[0]["content"][0]["text"])
        return SimpleNamespace(output_text=text, model_dump=lambda: {})

    def _chat(self, *, model, messages, temperature):
        text = self._next(messages[0]["content"])
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=text))], model_dump=lambda: {}
        )


def _router(*, gemini: ScriptedClient | None = None, openai: ScriptedClient | None = None) -> LLMRouter:
    settings = Settings(
        gemini_api_key="g-key" if gemini else "",
        openai_api_key="o-key" if openai else "",
        llm_primary_provider="gemini",
    )
    router = LLMRouter(settings=settings)
    if gemini:
        router.pool.gemini().client = gemini
    if openai:
        router.pool.openai().client = openai
    return router


def _view() -> CandidateScoreView:
    return CandidateScoreView(
        candidate_id="c1",
        full_name="Alex Chen",
        headline="Senior Backend Engineer",
        score=71,
        breakdown_json=[BreakdownItem(signal="skill_match", value=27, reason="Matched 2 skills: Python, FastAPI")],
    )


def test_falls_back_to_heuristic_when_no_provider_available() -> None:
    router = _router()

    keywords = router.extract_keywords(
        description="Senior Python engineer. Location: Melbourne. 4+ years of experience with Django.",
        title="Platform Engineer",
    )

    assert keywords.role == "Platform Engineer"
    assert keywords.skills == ["Python", "Django"]
    assert keywords.min_experience_years == 4
    assert keywords.location == "Melbourne"


def test_model_keywords_are_normalized() -> None:
    client = ScriptedClient({"role": "", "skills": [], "min_experience_years": 0, "location": ""})
    keywords = _router(gemini=client).extract_keywords(description="Build things.", title="Staff Engineer")

    assert keywords.role == "Staff Engineer"
    assert keywords.skills == PLACEHOLDER_SKILLS
    assert keywords.min_experience_years == 3
    assert keywords.location == "Remote"
    assert "Staff Engineer" in client.prompts[0]


def test_incomplete_model_output_falls_through_to_heuristic() -> None:
    client = ScriptedClient({"role": "Backend Engineer", "skills": ["Go"]})
    keywords = _router(gemini=client).extract_keywords(description="Rust services. Remote.", title="SRE")

    assert keywords.skills == ["Rust"]
    assert keywords.location == "Remote"


def test_failing_primary_provider_falls_back_to_secondary() -> None:
    gemini = ScriptedClient(RuntimeError("quota exceeded"))
    openai = ScriptedClient(
        {"role": "Data Engineer", "skills": ["Spark"], "min_experience_years": 6, "location": "Berlin"}
    )

    keywords = _router(gemini=gemini, openai=openai).extract_keywords(description="...", title="Data Engineer")

    assert keywords.skills == ["Spark"]
    assert keywords.min_experience_years == 6
    assert keywords.location == "Berlin"


def test_candidate_analysis_is_clamped(python_job) -> None:
    client = ScriptedClient(
        {"fitScore": 140, "summary": "Great fit", "recommendation": "reach_out", "confidence": -5}
    )
    analysis = _router(openai=client).analyze_candidate(job=python_job, view=_view())

    assert analysis.fit_score == 100.0
    assert analysis.confidence == 0.0
    assert analysis.recommendation == "reach_out"
    assert "Alex Chen" in client.prompts[0]


def test_candidate_analysis_without_providers_is_none(python_job) -> None:
    assert _router().analyze_candidate(job=python_job, view=_view()) is None


def test_text_tasks_return_model_output_or_empty(python_job) -> None:
    client = ScriptedClient("  Hi Alex, quick note about our role.  ", "")
    router = _router(gemini=client)

    assert router.draft_first_message(job=python_job, view=_view()) == "Hi Alex, quick note about our role."
    message = ConversationMessage(id="m1", sender="candidate", content="I'm keen", timestamp="t")
    assert router.summarize_conversation(messages=[message]) == ""
    assert _router().suggest_reply(last_message="yes please") == ""
