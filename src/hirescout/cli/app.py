from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from hirescout.config import get_settings
from hirescout.core.analytics import AnalyticsService
from hirescout.core.assistant import CandidateAssistant
from hirescout.core.candidate_generator import generate_candidates
from hirescout.core.jobs import JobService
from hirescout.core.pipeline import PipelineService, serialize_decision, serialize_workflow
from hirescout.core.sourcing import SourcingOrchestrator
from hirescout.db.init import init_database
from hirescout.db.session import SessionLocal
from hirescout.errors import HirescoutError, IllegalStageTransitionError, UnknownStageError
from hirescout.logging_config import configure_logging
from hirescout.storage.datastore import Datastore
from hirescout.types import CandidateSearchFilters, ExtractedKeywords, ScoringRatios

app = typer.Typer(help="hirescout CLI")
jobs_app = typer.Typer(help="Job requisitions")
candidates_app = typer.Typer(help="Candidates and their pipeline stage per job")
workflow_app = typer.Typer(help="Per-candidate hiring workflow")
es_app = typer.Typer(help="Elasticsearch candidate index")
analytics_app = typer.Typer(help="Talent pool statistics")

app.add_typer(jobs_app, name="jobs")
app.add_typer(candidates_app, name="candidates")
app.add_typer(workflow_app, name="workflow")
app.add_typer(es_app, name="es")
app.add_typer(analytics_app, name="analytics")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _dump(model: Any) -> Any:
    return model.model_dump(by_alias=True, exclude_none=True)


@app.command("init")
def init_cmd() -> None:
    """Create data directories and the workflow tables."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@jobs_app.command("create")
def jobs_create(
    title: str = typer.Option(..., "--title"),
    description_file: Path = typer.Option(..., "--description-file", exists=True, readable=True),
    company: str | None = typer.Option(None, "--company"),
) -> None:
    configure_logging()
    service = JobService()
    job = service.create_job(description_file.read_text(encoding="utf-8"), title, company)
    _echo(_dump(job))


@jobs_app.command("show")
def jobs_show(job_id: str = typer.Option(..., "--job-id")) -> None:
    configure_logging()
    job = Datastore().get_job_by_id(job_id)
    if job is None:
        raise typer.BadParameter(f"job {job_id} not found")
    _echo(_dump(job))


@jobs_app.command("list")
def jobs_list() -> None:
    configure_logging()
    _echo(
        [
            {"jobId": job.job_id, "job_title": job.job_title, "status": job.status, "createdAt": job.created_at}
            for job in Datastore().get_all_jobs()
        ]
    )


@jobs_app.command("update-filters")
def jobs_update_filters(
    job_id: str = typer.Option(..., "--job-id"),
    role: str | None = typer.Option(None, "--role"),
    skills: list[str] = typer.Option(None, "--skill"),
    min_experience: int | None = typer.Option(None, "--min-experience"),
    location: str | None = typer.Option(None, "--location"),
    tech_weight: float | None = typer.Option(None, "--tech-weight"),
    oss_weight: float | None = typer.Option(None, "--oss-weight"),
    startup_weight: float | None = typer.Option(None, "--startup-weight"),
) -> None:
    configure_logging()
    service = JobService()
    job = service.get_job(job_id)
    if job is None:
        raise typer.BadParameter(f"job {job_id} not found")

    current = job.extracted_keywords
    keywords = ExtractedKeywords(
        role=role or current.role,
        skills=skills or current.skills,
        min_experience_years=current.min_experience_years if min_experience is None else min_experience,
        location=location or current.location,
    )
    ratios = ScoringRatios(
        tech_match_weight=job.scoring_ratios.tech_match_weight if tech_weight is None else tech_weight,
        oss_activity_weight=job.scoring_ratios.oss_activity_weight if oss_weight is None else oss_weight,
        startup_exp_weight=job.scoring_ratios.startup_exp_weight if startup_weight is None else startup_weight,
    )
    updated = service.update_filters(job_id, keywords=keywords, ratios=ratios)
    _echo(_dump(updated))


@app.command("source")
def source_cmd(job_id: str = typer.Option(..., "--job-id")) -> None:
    """Search, score and store candidates for a job."""
    configure_logging()
    report = SourcingOrchestrator().source_candidates_for_job(job_id)
    if report is None:
        raise typer.BadParameter(f"job {job_id} not found")
    _echo(
        {
            "job_id": report.job_id,
            "source": report.source,
            "stored": report.stored,
            "candidates": [
                {"candidateId": c.id, "full_name": c.full_name, "score": c.scores[0].score}
                for c in report.candidates
            ],
        }
    )


@candidates_app.command("list")
def candidates_list(job_id: str = typer.Option(..., "--job-id")) -> None:
    configure_logging()
    views = Datastore().get_candidates_by_job_id(job_id)
    views.sort(key=lambda view: view.score, reverse=True)
    _echo([view.to_document() for view in views])


@candidates_app.command("show")
def candidates_show(
    candidate_id: str = typer.Option(..., "--candidate-id"),
    job_id: str | None = typer.Option(None, "--job-id"),
) -> None:
    configure_logging()
    store = Datastore()
    if job_id is None:
        candidate = store.get_candidate_by_id(candidate_id)
        if candidate is None:
            raise typer.BadParameter(f"candidate {candidate_id} not found")
        _echo(candidate.to_document())
        return

    view = store.get_candidate_score_for_job(candidate_id, job_id)
    if view is None:
        raise typer.BadParameter(f"candidate {candidate_id} has no entry for job {job_id}")
    _echo(view.to_document())


@candidates_app.command("stage")
def candidates_stage(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    stage: str = typer.Option(..., "--stage"),
) -> None:
    """Move a candidate along the pipeline."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            moved = PipelineService(db).move_candidate(candidate_id, job_id, stage)
        except (IllegalStageTransitionError, UnknownStageError) as exc:
            raise typer.BadParameter(str(exc)) from exc
    if not moved:
        raise typer.BadParameter(f"candidate {candidate_id} not found")
    _echo({"candidate_id": candidate_id, "job_id": job_id, "pipelineStage": stage})


@candidates_app.command("override-stage")
def candidates_override_stage(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    stage: str = typer.Option(..., "--stage"),
) -> None:
    """Set any stage directly, bypassing the transition rules."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            moved = PipelineService(db).override_stage(candidate_id, job_id, stage)
        except UnknownStageError as exc:
            raise typer.BadParameter(str(exc)) from exc
    _echo({"candidate_id": candidate_id, "job_id": job_id, "pipelineStage": stage, "updated": moved})


@candidates_app.command("batch-stage")
def candidates_batch_stage(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_ids: list[str] = typer.Option(..., "--candidate-id"),
    stage: str = typer.Option(..., "--stage"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            updated = PipelineService(db).batch_move(job_id, candidate_ids, stage)
        except UnknownStageError as exc:
            raise typer.BadParameter(str(exc)) from exc
    _echo({"job_id": job_id, "pipelineStage": stage, "updated": updated})


@candidates_app.command("message")
def candidates_message(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    content: str | None = typer.Option(None, "--content", help="Defaults to the saved draft"),
    from_candidate: bool = typer.Option(False, "--from-candidate"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        assistant = CandidateAssistant(db)
        try:
            if from_candidate:
                if not content:
                    raise typer.BadParameter("--content is required for candidate replies")
                message = assistant.record_reply(job_id, candidate_id, content)
            else:
                message = assistant.send_message(job_id, candidate_id, content)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    if message is None:
        raise typer.BadParameter(f"candidate {candidate_id} not found")
    _echo(message.model_dump(by_alias=True, exclude_none=True))


@candidates_app.command("analyze")
def candidates_analyze(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        analysis = CandidateAssistant(db).analyze_candidate(job_id, candidate_id)
    if analysis is None:
        raise typer.BadParameter(f"no score entry for candidate {candidate_id} on job {job_id}")
    _echo(analysis.model_dump())


@candidates_app.command("draft")
def candidates_draft(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        message = CandidateAssistant(db).draft_first_message(job_id, candidate_id)
    if message is None:
        raise typer.BadParameter(f"no score entry for candidate {candidate_id} on job {job_id}")
    _echo({"candidate_id": candidate_id, "job_id": job_id, "draft_message": message})


@candidates_app.command("summarize")
def candidates_summarize(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        summary = CandidateAssistant(db).summarize_conversation(job_id, candidate_id)
    if summary is None:
        raise typer.BadParameter(f"no score entry for candidate {candidate_id} on job {job_id}")
    _echo({"candidate_id": candidate_id, "job_id": job_id, "summary": summary})


@candidates_app.command("suggest-reply")
def candidates_suggest_reply(last_message: str = typer.Option(..., "--last-message")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        reply = CandidateAssistant(db).suggest_reply(last_message)
    _echo({"suggested_reply": reply})


@candidates_app.command("interview-times")
def candidates_interview_times(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        slots = CandidateAssistant(db).suggest_interview_times(job_id, candidate_id)
    if slots is None:
        raise typer.BadParameter(f"no score entry for candidate {candidate_id} on job {job_id}")
    _echo([slot.isoformat() for slot in slots])


@candidates_app.command("offer")
def candidates_offer(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    salary: str | None = typer.Option(None, "--salary"),
    start_date: str | None = typer.Option(None, "--start-date"),
) -> None:
    """Draft an offer letter and keep it as the workflow draft."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        letter = CandidateAssistant(db).draft_offer(job_id, candidate_id, salary=salary, start_date=start_date)
    if letter is None:
        raise typer.BadParameter(f"no score entry for candidate {candidate_id} on job {job_id}")
    _echo({"candidate_id": candidate_id, "job_id": job_id, "offer": letter})


@candidates_app.command("negotiate")
def candidates_negotiate(request: str = typer.Option(..., "--request")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        response = CandidateAssistant(db).help_negotiate(request)
    _echo({"suggested_response": response})


@candidates_app.command("decision-summary")
def candidates_decision_summary(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    decision: str = typer.Option(..., "--decision", help="hired or rejected"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            summary = CandidateAssistant(db).summarize_decision(job_id, candidate_id, decision)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    if summary is None:
        raise typer.BadParameter(f"no score entry for candidate {candidate_id} on job {job_id}")
    _echo({"candidate_id": candidate_id, "job_id": job_id, "decision": decision, "summary": summary})


@candidates_app.command("rank")
def candidates_rank(job_id: str = typer.Option(..., "--job-id")) -> None:
    """Rank the whole candidate pool with the job's scoring weights."""
    configure_logging()
    views = SourcingOrchestrator().rank_candidate_pool(job_id)
    if views is None:
        raise typer.BadParameter(f"job {job_id} not found")
    _echo([view.to_document() for view in views])


@candidates_app.command("search")
def candidates_search(
    query: str = typer.Option("", "--query"),
    skills: list[str] = typer.Option(None, "--skill"),
    location: str | None = typer.Option(None, "--location"),
    min_experience: int | None = typer.Option(None, "--min-experience"),
    open_to_work: bool | None = typer.Option(None, "--open-to-work/--not-open-to-work"),
) -> None:
    configure_logging()
    filters = CandidateSearchFilters(
        skills=skills or [],
        location=location,
        min_experience=min_experience,
        open_to_work=open_to_work,
    )
    results = Datastore().search_candidates(query, filters)
    _echo(
        [
            {
                "candidateId": c.id,
                "full_name": c.full_name,
                "headline": c.headline or "",
                "skills": c.keywords.skills,
                "location": c.keywords.location,
            }
            for c in results
        ]
    )


@workflow_app.command("step")
def workflow_step(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    step: int = typer.Option(..., "--step"),
    completed: bool | None = typer.Option(None, "--completed/--uncompleted"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        workflow = PipelineService(db).set_step(candidate_id, job_id, step, completed=completed)
        _echo(serialize_workflow(workflow))


@workflow_app.command("draft")
def workflow_draft(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    message: str = typer.Option(..., "--message"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        workflow = PipelineService(db).save_draft(candidate_id, job_id, message)
        _echo(serialize_workflow(workflow))


@workflow_app.command("notes")
def workflow_notes(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    notes: str = typer.Option(..., "--notes"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        workflow = PipelineService(db).set_notes(candidate_id, job_id, notes)
        _echo(serialize_workflow(workflow))


@workflow_app.command("schedule")
def workflow_schedule(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    at: datetime = typer.Option(..., "--at", formats=["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        workflow = PipelineService(db).schedule_call(candidate_id, job_id, at)
        _echo(serialize_workflow(workflow))


@workflow_app.command("decide")
def workflow_decide(
    job_id: str = typer.Option(..., "--job-id"),
    candidate_id: str = typer.Option(..., "--candidate-id"),
    decision: str = typer.Option(..., "--decision", help="hired or rejected"),
    message: str = typer.Option("", "--message"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            record = PipelineService(db).record_decision(job_id, candidate_id, decision, message)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        if record is None:
            raise typer.BadParameter(f"candidate {candidate_id} not found")
        _echo(serialize_decision(record))


@workflow_app.command("decisions")
def workflow_decisions(
    job_id: str = typer.Option(..., "--job-id"),
    decision: str | None = typer.Option(None, "--decision"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        records = PipelineService(db).list_decisions(job_id, decision)
        _echo([serialize_decision(record) for record in records])


@workflow_app.command("feedback-sent")
def workflow_feedback_sent(decision_id: int = typer.Option(..., "--decision-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        record = PipelineService(db).mark_feedback_sent(decision_id)
        if record is None:
            raise typer.BadParameter(f"decision {decision_id} not found")
        _echo(serialize_decision(record))


@analytics_app.command("pool")
def analytics_pool() -> None:
    configure_logging()
    _echo(AnalyticsService().talent_pool().model_dump(by_alias=True, exclude_none=True))


@analytics_app.command("job")
def analytics_job(job_id: str = typer.Option(..., "--job-id")) -> None:
    configure_logging()
    service = AnalyticsService()
    if service.store.get_job_by_id(job_id) is None:
        raise typer.BadParameter(f"job {job_id} not found")
    _echo(service.job(job_id).model_dump(by_alias=True, exclude_none=True))


@app.command("seed")
def seed_cmd(
    count: int = typer.Option(20, "--count"),
    seed: int | None = typer.Option(None, "--seed"),
) -> None:
    """Add synthetic candidates scored against every stored job."""
    configure_logging()
    store = Datastore()
    jobs = store.get_all_jobs()
    candidates = generate_candidates(count, jobs, seed=seed)
    stored = store.upsert_candidates(jobs[0].job_id if jobs else "", candidates)
    _echo({"generated": len(candidates), "stored": stored, "jobs": len(jobs)})


@es_app.command("health")
def es_health() -> None:
    configure_logging()
    from hirescout.storage.elasticsearch_store import ElasticsearchCandidateStore

    store = ElasticsearchCandidateStore()
    _echo({"node": get_settings().elasticsearch_node, "index": store.index, "healthy": store.health()})


@es_app.command("migrate")
def es_migrate(
    source: Path | None = typer.Option(None, "--source", help="Defaults to the configured candidates file"),
) -> None:
    """Copy candidates from the JSON file into Elasticsearch."""
    configure_logging()
    from hirescout.storage.elasticsearch_store import ElasticsearchCandidateStore
    from hirescout.storage.migrate import migrate_candidates_to_elasticsearch

    settings = get_settings()
    try:
        report = migrate_candidates_to_elasticsearch(
            source or settings.candidates_file, ElasticsearchCandidateStore(settings=settings)
        )
    except HirescoutError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    _echo(
        {"total": report.total, "indexed": report.indexed, "failed": report.failed, "searchable": report.searchable}
    )


if __name__ == "__main__":
    app()
