"""
Job posting model
"""
from sqlalchemy import Column, Integer, String, Text
from jobboard.core.database import Base


class Job(Base):
    """Job posting as written by the ingestion process"""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(255), index=True)
    company = Column(String(255), index=True)
    tech_park = Column(String(255), index=True)
    company_profile = Column(Text)
    description = Column(Text)
    email = Column(String(255))
    deadline = Column(String(64))  # Free text as scraped, e.g. "24-10-2025"

    # JSON object with the cleaned fields (job_title, clean_description, ...)
    cleaned_data = Column(Text)
