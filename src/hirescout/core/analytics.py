from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from hirescout.config import Settings, get_settings
from hirescout.core.scoring import round_half_up
from hirescout.storage.datastore import Datastore
from hirescout.types import (
    BucketCount,
    Candidate,
    OpenToWorkStats,
    PoolAnalytics,
    ScoreDistribution,
)

logger = logging.getLogger(__name__)

TOP_SKILLS = 20
EXPERIENCE_BUCKETS: tuple[tuple[str, int | None], ...] = (("0-2", 3), ("3-5", 6), ("6-8", 9), ("9+", None))
SCORE_BUCKETS: tuple[tuple[str, int | None], ...] = (
    ("0-20", 20),
    ("21-40", 40),
    ("41-60", 60),
    ("61-80", 80),
    ("81-100", None),
)


def experience_bucket(years: int) -> str:
    for key, below in EXPERIENCE_BUCKETS:
        if below is None or years < below:
            return key
    return EXPERIENCE_BUCKETS[-1][0]


def score_bucket(score: float) -> str:
    for key, upper in SCORE_BUCKETS:
        if upper is None or score <= upper:
            return key
    return SCORE_BUCKETS[-1][0]


def _ranked(counter: Counter[str], limit: int | None = None) -> list[BucketCount]:
    return [BucketCount(key=key, count=count) for key, count in counter.most_common(limit)]


def _fixed(counter: Counter[str], buckets: Iterable[tuple[str, int | None]]) -> list[BucketCount]:
    return [BucketCount(key=key, count=counter[key]) for key, _ in buckets]


def summarize_candidates(candidates: list[Candidate]) -> PoolAnalytics:
    """Location, skill, experience and availability counts for a set of candidates."""
    locations: Counter[str] = Counter()
    skills: Counter[str] = Counter()
    experience: Counter[str] = Counter()
    open_count = 0

    for candidate in candidates:
        locations[candidate.keywords.location] += 1
        skills.update(candidate.keywords.skills)
        experience[experience_bucket(candidate.keywords.years_of_experience)] += 1
        if candidate.open_to_work:
            open_count += 1

    total = len(candidates)
    return PoolAnalytics(
        total_candidates=total,
        locations=_ranked(locations),
        skills=_ranked(skills, TOP_SKILLS),
        experience=_fixed(experience, EXPERIENCE_BUCKETS),
        open_to_work=OpenToWorkStats(
            open=open_count,
            not_open=total - open_count,
            percentage=round_half_up(open_count / total * 100) if total else 0,
        ),
    )


def score_distribution(scores: list[int | float]) -> ScoreDistribution:
    if not scores:
        return ScoreDistribution(ranges=_fixed(Counter(), SCORE_BUCKETS))
    buckets = Counter(score_bucket(score) for score in scores)
    return ScoreDistribution(
        average=round_half_up(sum(scores) / len(scores)),
        min=min(scores),
        max=max(scores),
        ranges=_fixed(buckets, SCORE_BUCKETS),
    )


class AnalyticsService:
    """Aggregate views over the talent pool, whole or per job.

    Counts are computed in memory from the candidate store, so both backends
    give the same answer.
    """

    def __init__(self, settings: Settings | None = None, datastore: Datastore | None = None):
        self.settings = settings or get_settings()
        self.store = datastore or Datastore(settings=self.settings)

    def talent_pool(self) -> PoolAnalytics:
        candidates = self.store.list_candidates()
        logger.info("Computing talent pool analytics over %d candidates", len(candidates))
        return summarize_candidates(candidates)

    def job(self, job_id: str) -> PoolAnalytics:
        views = self.store.get_candidates_by_job_id(job_id)
        candidates = []
        for view in views:
            candidate = self.store.get_candidate_by_id(view.candidate_id)
            if candidate is not None:
                candidates.append(candidate)

        report = summarize_candidates(candidates)
        report.total_candidates = len(views)
        report.score_distribution = score_distribution([view.score for view in views])
        return report
