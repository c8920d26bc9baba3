"""
Job listing routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session
import structlog

from jobboard.core.database import get_db
from jobboard.core.exceptions import MethodNotAllowedError
from jobboard.jobs.schemas import JobFilters, JobPosting, parse_page
from jobboard.jobs.service import ListingResolver

router = APIRouter(prefix="/api", tags=["Jobs"])
logger = structlog.get_logger()


def get_listing_resolver(request: Request) -> ListingResolver:
    """Resolver built at startup and kept on the application state"""
    return request.app.state.listing_resolver


@router.get("/jobs", response_model=List[JobPosting])
def list_jobs(
    page: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    company: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    resolver: ListingResolver = Depends(get_listing_resolver),
    db: Session = Depends(get_db),
):
    """List job postings, newest first, nine per page"""
    filters = JobFilters(role=role, company=company, location=location)
    return resolver.list_jobs(db, parse_page(page), filters)


@router.options("/jobs", include_in_schema=False)
def jobs_options():
    return Response(status_code=status.HTTP_200_OK)


@router.api_route("/jobs", methods=["POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def jobs_method_not_allowed(request: Request):
    logger.info("jobs_method_rejected", method=request.method)
    raise MethodNotAllowedError()
