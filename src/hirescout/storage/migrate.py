from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from elasticsearch import ApiError, TransportError

from hirescout.errors import HirescoutError
from hirescout.storage.elasticsearch_store import ElasticsearchCandidateStore
from hirescout.storage.json_store import JsonFile

logger = logging.getLogger(__name__)

BATCH_SIZE = 100
MIGRATION_REFRESH = "wait_for"


@dataclass(slots=True)
class MigrationReport:
    total: int = 0
    indexed: int = 0
    failed: int = 0
    searchable: int = 0


def migrate_candidates_to_elasticsearch(
    source: Path | str,
    store: ElasticsearchCandidateStore,
    *,
    batch_size: int = BATCH_SIZE,
) -> MigrationReport:
    """Copy every candidate document from a JSON file into the search index."""
    if not store.health():
        raise HirescoutError("Elasticsearch is not available")
    store.ensure_index()

    documents = JsonFile(source).read()
    report = MigrationReport(total=len(documents))
    logger.info("Migrating %d candidates from %s to index %s", report.total, source, store.index)

    for start in range(0, len(documents), batch_size):
        batch = documents[start : start + batch_size]
        try:
            indexed = store.bulk_index_candidates(batch, refresh=MIGRATION_REFRESH)
        except (ApiError, TransportError) as exc:
            logger.error("Bulk request for candidates %d-%d failed: %s", start, start + len(batch) - 1, exc)
            report.failed += len(batch)
            continue
        report.indexed += indexed
        report.failed += len(batch) - indexed
        logger.info("Migrated %d/%d candidates", min(start + batch_size, report.total), report.total)

    store.refresh_index()
    report.searchable = store.count()
    logger.info(
        "Migration finished: %d indexed, %d failed, %d searchable in %s",
        report.indexed,
        report.failed,
        report.searchable,
        store.index,
    )
    return report
