"""
Normalization of cached records and database rows into JobPosting

Both sources are read through a small adapter exposing get(key). Which
keys feed which output field, and in what order, is declared per source
in a precedence table; the first non-blank value wins.
"""
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from jobboard.jobs.schemas import JobPosting

logger = structlog.get_logger()

CACHE_SOURCE = "cache"
DATABASE_SOURCE = "database"

PRECEDENCE: Dict[str, Dict[str, Tuple[str, ...]]] = {
    CACHE_SOURCE: {
        "id": ("id",),
        "role": ("job_title", "role"),
        "company": ("company",),
        "tech_park": ("tech_park",),
        "description": ("clean_description", "original_description", "description"),
        "email": ("clean_email", "email"),
        "company_profile": ("job_summary", "summary", "company_profile"),
        "skills": ("skills",),
        "experience": ("experience_required", "experience"),
        "address": ("clean_address", "address"),
        "deadline": ("deadline",),
    },
    DATABASE_SOURCE: {
        "id": ("row.id",),
        "role": ("cleaned.job_title", "row.role"),
        "company": ("row.company",),
        "tech_park": ("row.tech_park",),
        "description": ("cleaned.clean_description", "row.description"),
        "email": ("cleaned.clean_email", "row.email"),
        "company_profile": ("cleaned.job_summary", "row.company_profile"),
        "skills": ("cleaned.skills",),
        "experience": ("cleaned.experience_required",),
        "address": ("cleaned.clean_address",),
        "deadline": ("row.deadline",),
    },
}

# Output fields searched by each filter dimension. A source only searches
# the keys it can reach; the database path cannot see inside cleaned_data,
# so skills and address are matched on the cache path alone.
MATCH_FIELDS: Dict[str, Tuple[str, ...]] = {
    "role": ("role", "company", "tech_park", "skills"),
    "company": ("company",),
    "location": ("tech_park", "company_profile", "address"),
}

# Search reads raw company_profile only; the cleaned summaries are display text
SEARCH_CHAINS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    CACHE_SOURCE: {"company_profile": ("company_profile",)},
    DATABASE_SOURCE: {"company_profile": ("row.company_profile",)},
}

NULLABLE_FIELDS = {"id", "experience", "address", "deadline"}


def is_blank(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple, set)) and not value)


class CacheRecordSource:
    """Flat record from the cache snapshot"""

    name = CACHE_SOURCE

    def __init__(self, record: Mapping[str, Any]):
        self.record = record

    def get(self, key: str) -> Any:
        return self.record.get(key)


class RowSource:
    """Database row plus its decoded cleaned_data side column"""

    name = DATABASE_SOURCE

    def __init__(self, row: Mapping[str, Any], cleaned: Optional[Mapping[str, Any]] = None):
        self.row = row
        self.cleaned = cleaned or {}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RowSource":
        return cls(row, parse_cleaned_data(row.get("cleaned_data"), job_id=row.get("id")))

    def get(self, key: str) -> Any:
        namespace, _, name = key.partition(".")
        if namespace == "cleaned":
            return self.cleaned.get(name)
        return self.row.get(name)


def parse_cleaned_data(value: Any, job_id: Any = None) -> Optional[Dict[str, Any]]:
    """Decode the side column; unreadable payloads count as absent"""
    if is_blank(value):
        return None
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning("cleaned_data_parse_failed", job_id=job_id, error=str(e))
        return None
    if not isinstance(decoded, dict):
        logger.warning("cleaned_data_parse_failed", job_id=job_id, error="not a JSON object")
        return None
    return decoded


def candidates(source, field: str) -> List[Any]:
    """Every non-blank value in the field's precedence chain, best first"""
    chain = PRECEDENCE[source.name][field]
    return [value for value in (source.get(key) for key in chain) if not is_blank(value)]


def search_chain(source_name: str, field: str) -> Tuple[str, ...]:
    return SEARCH_CHAINS[source_name].get(field) or PRECEDENCE[source_name][field]


def search_values(source, field: str) -> List[Any]:
    """Non-blank values a filter may match for an output field"""
    chain = search_chain(source.name, field)
    return [value for value in (source.get(key) for key in chain) if not is_blank(value)]


def resolve(source, field: str) -> Any:
    values = candidates(source, field)
    if values:
        return values[0]
    if field == "skills":
        return []
    return None if field in NULLABLE_FIELDS else ""


def normalize(source) -> JobPosting:
    """Map a source record to the canonical posting shape"""
    values = {}
    for field in PRECEDENCE[source.name]:
        value = resolve(source, field)
        if field not in ("id", "skills") and value is not None:
            value = str(value)
        values[field] = value
    return JobPosting(**values)


def _contains(value: Any, term: str) -> bool:
    if isinstance(value, (list, tuple, set)):
        return any(_contains(item, term) for item in value)
    return value is not None and term in str(value).lower()


def matches(source, filters: Mapping[str, str]) -> bool:
    """AND across dimensions, OR across each dimension's fields"""
    for dimension, term in filters.items():
        term = term.lower()
        found = any(
            _contains(value, term)
            for field in MATCH_FIELDS[dimension]
            for value in search_values(source, field)
        )
        if not found:
            return False
    return True


def searchable_columns(dimension: str) -> Iterable[str]:
    """Native row columns a database query can match for a dimension"""
    for field in MATCH_FIELDS[dimension]:
        for key in search_chain(DATABASE_SOURCE, field):
            namespace, _, name = key.partition(".")
            if namespace == "row":
                yield name
