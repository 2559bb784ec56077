"""SQLAlchemy-backed marketplace repository.

Stores jobs, saved searches, and digests in three tables.  List-valued
fields (tags, locations, filters, digest rows) are JSON columns.
SQLite is the default backend; any SQLAlchemy URL works.

Timestamps are stored as naive UTC and returned timezone-aware.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    create_engine,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from jobmarket_scoring.digest.generator import Digest, DigestRow
from jobmarket_scoring.errors import ActionableError
from jobmarket_scoring.models import (
    JobPosting,
    SalaryRange,
    SavedSearch,
    Schedule,
    SearchFilters,
)
from jobmarket_scoring.storage.repository import MarketplaceRepository

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger(__name__)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class JobRecord(Base):
    """Job posting row."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    company = Column(String, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    locations = Column(JSON, nullable=False, default=list)
    remote = Column(Boolean, nullable=False, default=False)
    employment_type = Column(String, nullable=True)
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String, nullable=False, default="USD")
    employer_id = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class SavedSearchRecord(Base):
    """Saved search row."""

    __tablename__ = "saved_searches"

    id = Column(String, primary_key=True)
    owner_id = Column(String, nullable=False)
    name = Column(String, nullable=False, default="Saved search")
    query = Column(Text, nullable=False, default="")
    filters = Column(JSON, nullable=False, default=dict)
    schedule = Column(String, nullable=False, default=Schedule.DAILY.value)
    last_run_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class SearchDigestRecord(Base):
    """Generated digest row."""

    __tablename__ = "search_digests"

    id = Column(String, primary_key=True)
    saved_search_id = Column(String, ForeignKey("saved_searches.id"), nullable=False, index=True)
    generated_at = Column(DateTime, nullable=False)
    rows = Column(JSON, nullable=False, default=list)


def _to_db(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _from_db(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class SqlMarketplaceRepository(MarketplaceRepository):
    """:class:`MarketplaceRepository` over a SQLAlchemy engine.

    Call :meth:`create_schema` once before first use.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self._engine = create_engine(url, echo=echo)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    # ------------------------------------------------------------------
    # Schema and seeding
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        """Create any missing tables (and the SQLite file's directory)."""
        parsed = make_url(self.url)
        if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        with self._upstream("database", "create_schema"):
            Base.metadata.create_all(self._engine)
        logger.info("Schema ready at %s", parsed.render_as_string(hide_password=True))

    def add_job(self, job: JobPosting) -> None:
        """Insert or replace a job posting."""
        salary = job.salary
        record = JobRecord(
            id=job.id,
            title=job.title,
            description=job.description,
            company=job.company,
            tags=list(job.tags),
            locations=list(job.locations),
            remote=job.remote,
            employment_type=job.employment_type,
            salary_min=salary.min if salary else None,
            salary_max=salary.max if salary else None,
            salary_currency=salary.currency if salary else "USD",
            employer_id=job.employer_id,
            active=job.active,
            created_at=_to_db(job.created_at) or _utcnow(),
        )
        with self._upstream("jobs", "add_job"), self._session_factory.begin() as session:
            session.merge(record)

    def add_saved_search(self, search: SavedSearch) -> None:
        """Insert or replace a saved search."""
        record = SavedSearchRecord(
            id=search.id,
            owner_id=search.owner_id,
            name=search.name,
            query=search.query,
            filters=search.filters.to_dict(),
            schedule=Schedule(search.schedule).value,
            last_run_at=_to_db(search.last_run_at),
        )
        with self._upstream("saved_searches", "add_saved_search"), self._session_factory.begin() as session:
            session.merge(record)

    # ------------------------------------------------------------------
    # MarketplaceRepository
    # ------------------------------------------------------------------

    def get_saved_search(self, search_id: str) -> SavedSearch | None:
        with self._upstream("saved_searches", "get_saved_search"), self._session_factory() as session:
            record = session.get(SavedSearchRecord, search_id)
            return _search_from_record(record) if record is not None else None

    def list_saved_searches(self) -> list[SavedSearch]:
        with self._upstream("saved_searches", "list_saved_searches"), self._session_factory() as session:
            records = (
                session.query(SavedSearchRecord)
                .order_by(SavedSearchRecord.created_at, SavedSearchRecord.id)
                .all()
            )
            return [_search_from_record(r) for r in records]

    def active_jobs(self) -> list[JobPosting]:
        with self._upstream("jobs", "active_jobs"), self._session_factory() as session:
            records = (
                session.query(JobRecord)
                .filter(JobRecord.active.is_(True))
                .order_by(JobRecord.created_at, JobRecord.id)
                .all()
            )
            return [_job_from_record(r) for r in records]

    def record_digest(
        self,
        search: SavedSearch,
        rows: Sequence[DigestRow],
        generated_at: datetime,
    ) -> Digest:
        digest_id = uuid4().hex
        with self._upstream("search_digests", "record_digest"), self._session_factory.begin() as session:
            search_record = session.get(SavedSearchRecord, search.id)
            if search_record is None:
                raise ActionableError.upstream(
                    resource="saved_searches",
                    operation="record_digest",
                    raw_error=f"saved search '{search.id}' no longer exists",
                )
            session.add(
                SearchDigestRecord(
                    id=digest_id,
                    saved_search_id=search.id,
                    generated_at=_to_db(generated_at),
                    rows=[row.to_dict() for row in rows],
                )
            )
            search_record.last_run_at = _to_db(generated_at)

        return Digest(
            id=digest_id,
            saved_search_id=search.id,
            generated_at=generated_at,
            rows=tuple(rows),
            search_name=search.name,
        )

    def list_digests(self, search_id: str) -> list[Digest]:
        with self._upstream("search_digests", "list_digests"), self._session_factory() as session:
            search_record = session.get(SavedSearchRecord, search_id)
            name = search_record.name if search_record is not None else "Saved search"
            records = (
                session.query(SearchDigestRecord)
                .filter_by(saved_search_id=search_id)
                .order_by(SearchDigestRecord.generated_at, SearchDigestRecord.id)
                .all()
            )
            return [
                Digest(
                    id=r.id,
                    saved_search_id=r.saved_search_id,
                    generated_at=_from_db(r.generated_at),
                    rows=tuple(DigestRow.from_dict(row) for row in r.rows),
                    search_name=name,
                )
                for r in records
            ]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @contextmanager
    def _upstream(self, resource: str, operation: str) -> Iterator[None]:
        """Re-raise SQLAlchemy failures as UPSTREAM ``ActionableError``."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.debug("%s failed on %s: %s", operation, resource, exc)
            raise ActionableError.upstream(
                resource=resource,
                operation=operation,
                raw_error=str(getattr(exc, "orig", None) or exc),
            ) from exc


def _job_from_record(record: JobRecord) -> JobPosting:
    salary = None
    if record.salary_min is not None or record.salary_max is not None:
        salary = SalaryRange(
            min=record.salary_min,
            max=record.salary_max,
            currency=record.salary_currency,
        )
    return JobPosting(
        id=record.id,
        title=record.title,
        description=record.description or "",
        tags=tuple(record.tags or ()),
        locations=tuple(record.locations or ()),
        remote=bool(record.remote),
        employment_type=record.employment_type,
        salary=salary,
        employer_id=record.employer_id,
        company=record.company or "",
        active=bool(record.active),
        created_at=_from_db(record.created_at),
    )


def _search_from_record(record: SavedSearchRecord) -> SavedSearch:
    try:
        schedule = Schedule(record.schedule)
    except ValueError:
        schedule = Schedule.DAILY
    return SavedSearch(
        id=record.id,
        owner_id=record.owner_id,
        query=record.query or "",
        filters=SearchFilters.from_dict(record.filters),
        schedule=schedule,
        name=record.name,
        last_run_at=_from_db(record.last_run_at),
    )
