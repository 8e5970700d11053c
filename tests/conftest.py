from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="hirescout-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATA_DIR"] = str(_TEST_ROOT)
os.environ["JOBS_FILE"] = str(_TEST_ROOT / "jobs.json")
os.environ["CANDIDATES_FILE"] = str(_TEST_ROOT / "candidates.json")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'workflow.db'}"
os.environ["USE_ELASTICSEARCH"] = "false"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["APIFY_TOKEN"] = ""

import pytest  # noqa: E402

from hirescout.config import Settings  # noqa: E402
from hirescout.db.base import Base  # noqa: E402
from hirescout.db.session import SessionLocal, engine  # noqa: E402
from hirescout.db import models  # noqa: E402,F401
from hirescout.storage.datastore import Datastore  # noqa: E402
from hirescout.storage.json_store import JsonCandidateStore, JsonJobStore  # noqa: E402
from hirescout.types import ExtractedKeywords, Job, ScoringRatios  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        jobs_file=tmp_path / "jobs.json",
        candidates_file=tmp_path / "candidates.json",
        gemini_api_key="",
        openai_api_key="",
        apify_token="",
        use_elasticsearch=False,
    )


@pytest.fixture
def datastore(settings: Settings) -> Datastore:
    return Datastore(
        jobs=JsonJobStore(settings.jobs_file),
        candidates=JsonCandidateStore(settings.candidates_file),
        settings=settings,
    )


@pytest.fixture
def python_job() -> Job:
    return Job(
        job_id="job-python",
        jd_text="Backend engineer. 5+ years of experience with Python, FastAPI and Postgres. Location: Sydney.",
        job_title="Backend Engineer",
        company_name="Acme",
        status="PROCESSED_KEYWORDS",
        extracted_keywords=ExtractedKeywords(
            role="Backend Engineer",
            skills=["Python", "FastAPI", "Postgres"],
            min_experience_years=5,
            location="Sydney",
        ),
        scoring_ratios=ScoringRatios(),
        created_at="2026-01-05T09:00:00+00:00",
    )


def candidate_document(candidate_id: str, *, job_id: str | None = None, **extra) -> dict:
    document = {
        "_id": candidate_id,
        "full_name": extra.pop("full_name", f"Candidate {candidate_id}"),
        "email": f"{candidate_id}@example.com",
        "bio": "",
        "github_username": candidate_id,
        "open_to_work": True,
        "keywords": {"role": "Engineer", "skills": ["Python"], "years_of_experience": 4, "location": "Sydney"},
        "scores": [],
    }
    if job_id is not None:
        document["scores"].append({"job_id": job_id, "score": 50, "breakdown_json": []})
    document.update(extra)
    return document


@pytest.fixture
def make_candidate():
    return candidate_document
