"""
Listing resolver - serves job pages from the cache snapshot or the database
"""
import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from jobboard.core.exceptions import DatabaseUnavailableError
from jobboard.core.redis_client import CacheOutcome, JobCache
from jobboard.jobs.deadlines import is_active
from jobboard.jobs.normalizer import (
    CacheRecordSource,
    RowSource,
    matches,
    normalize,
    searchable_columns,
)
from jobboard.jobs.schemas import JobFilters, JobPosting
from jobboard.models.job import Job

logger = structlog.get_logger()

PAGE_SIZE = 9

# Largest OFFSET a signed 64-bit driver parameter can carry
MAX_SQL_OFFSET = 2 ** 63 - 1


class DatabaseOutcome(str, enum.Enum):
    OK = "ok"
    ERROR = "error"


@dataclass
class CacheStageResult:
    outcome: CacheOutcome
    postings: List[JobPosting] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass
class DatabaseStageResult:
    outcome: DatabaseOutcome
    postings: List[JobPosting] = field(default_factory=list)
    error: Optional[Exception] = None


def page_window(page: int, page_size: int = PAGE_SIZE) -> slice:
    offset = (page - 1) * page_size
    return slice(offset, offset + page_size)


def build_filter_clause(filters: Dict[str, str]):
    """AND of one OR-group per active dimension, or None with no filters"""
    groups = []
    for dimension, term in filters.items():
        columns = [Job.__table__.c[name] for name in searchable_columns(dimension)]
        groups.append(or_(*(column.icontains(term, autoescape=True) for column in columns)))
    return and_(*groups) if groups else None


def row_to_dict(job: Job) -> dict:
    return {column.name: getattr(job, column.name) for column in Job.__table__.columns}


class ListingResolver:
    """Resolve a page of postings, cache first, database second"""

    def __init__(
        self,
        cache: Optional[JobCache],
        page_size: int = PAGE_SIZE,
        today: Callable[[], date] = date.today,
    ):
        self.cache = cache
        self.page_size = page_size
        self.today = today

    def list_jobs(self, db: Session, page: int, filters: JobFilters) -> List[JobPosting]:
        active_filters = filters.active()

        cached = self.from_cache(page, active_filters)
        if cached.outcome == CacheOutcome.HIT:
            logger.info("jobs_cache_hit", page=page, count=len(cached.postings))
            return cached.postings
        if cached.outcome == CacheOutcome.ERROR:
            logger.warning("jobs_cache_fallback", page=page, reason=cached.reason)
        else:
            logger.info("jobs_cache_miss", page=page)

        stored = self.from_database(db, page, active_filters)
        if stored.outcome == DatabaseOutcome.ERROR:
            raise DatabaseUnavailableError(details={"error": str(stored.error)})
        return stored.postings

    def from_cache(self, page: int, filters: Dict[str, str]) -> CacheStageResult:
        """Filter, expire, paginate and normalize the snapshot in memory"""
        if self.cache is None:
            return CacheStageResult(CacheOutcome.MISS)

        lookup = self.cache.fetch_snapshot()
        if lookup.outcome != CacheOutcome.HIT:
            return CacheStageResult(lookup.outcome, reason=lookup.reason)

        try:
            today = self.today()
            sources = [CacheRecordSource(record) for record in lookup.records]
            sources = [source for source in sources if matches(source, filters)]
            sources = [source for source in sources if is_active(source.get("deadline"), today)]
            postings = [normalize(source) for source in sources[page_window(page, self.page_size)]]
        except (AttributeError, TypeError, ValueError) as e:
            return CacheStageResult(CacheOutcome.ERROR, reason=f"processing: {e}")

        return CacheStageResult(CacheOutcome.HIT, postings=postings)

    def from_database(self, db: Session, page: int, filters: Dict[str, str]) -> DatabaseStageResult:
        """Filter and paginate in SQL, newest first"""
        query = db.query(Job)
        clause = build_filter_clause(filters)
        if clause is not None:
            query = query.filter(clause)

        window = page_window(page, self.page_size)
        if window.start > MAX_SQL_OFFSET:
            return DatabaseStageResult(DatabaseOutcome.OK)

        try:
            jobs = (
                query.order_by(Job.id.desc())
                .limit(self.page_size)
                .offset(window.start)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("jobs_database_error", page=page, filters=filters, error=str(e), exc_info=True)
            return DatabaseStageResult(DatabaseOutcome.ERROR, error=e)

        postings = [normalize(RowSource.from_row(row_to_dict(job))) for job in jobs]
        return DatabaseStageResult(DatabaseOutcome.OK, postings=postings)
