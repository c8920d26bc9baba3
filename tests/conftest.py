import json
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from jobboard.core.config import Settings
from jobboard.core.database import Database
from jobboard.core.redis_client import JobCache
from jobboard.jobs.service import ListingResolver
from jobboard.main import create_app
from jobboard.models.job import Job

TODAY = date(2025, 6, 1)


class FakeRedis:
    """Just enough of redis.Redis for the snapshot cache"""

    def __init__(self, data=None, error=None):
        self.data = dict(data or {})
        self.error = error
        self.calls = []
        self.closed = False

    def ping(self):
        return True

    def get(self, key):
        self.calls.append(("get", key))
        if self.error is not None:
            raise self.error
        return self.data.get(key)

    def delete(self, *keys):
        self.calls.append(("delete",) + keys)
        if self.error is not None:
            raise self.error
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def close(self):
        self.closed = True


def cache_record(job_id, **fields):
    record = {
        "id": job_id,
        "role": f"Role {job_id}",
        "company": f"Company {job_id}",
        "tech_park": "Technopark",
        "company_profile": "",
        "description": "",
        "email": "",
        "deadline": None,
    }
    record.update(fields)
    return record


def job_row(job_id, cleaned=None, **fields):
    row = {
        "id": job_id,
        "role": f"Role {job_id}",
        "company": f"Company {job_id}",
        "tech_park": "Infopark",
        "company_profile": "",
        "description": "",
        "email": "",
        "deadline": None,
        "cleaned_data": json.dumps(cleaned) if isinstance(cleaned, dict) else cleaned,
    }
    row.update(fields)
    return row


def make_cache(records=None, raw=None, error=None):
    """JobCache backed by a FakeRedis; records are serialized, raw is stored as is"""
    data = {}
    if records is not None:
        data["jobs_data"] = json.dumps(records)
    elif raw is not None:
        data["jobs_data"] = raw
    return JobCache("redis://fake:6379", key="jobs_data", client=FakeRedis(data, error=error))


def add_jobs(database, rows):
    with database.session() as session:
        session.add_all([Job(**row) for row in rows])
        session.commit()


@pytest.fixture
def database():
    db = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def empty_database():
    """Engine with no tables, so every query fails"""
    db = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def make_resolver():
    def _make(cache=None):
        return ListingResolver(cache, today=lambda: TODAY)
    return _make


@pytest.fixture
def make_client(database):
    def _make(cache=None, db=None):
        app = create_app(
            config=Settings(DATABASE_URL="sqlite://"),
            database=db or database,
            cache=cache or make_cache(),
        )
        app.state.listing_resolver.today = lambda: TODAY
        return TestClient(app)
    return _make
