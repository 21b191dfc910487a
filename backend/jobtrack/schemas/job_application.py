from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class JobStatus(str, Enum):
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


class JobApplicationIn(BaseModel):
    """
    Create/update payload. Fields stay loosely typed; the jobs service reports
    bad values as field-keyed InvalidInput errors.
    Unknown keys (e.g. a client-supplied owner) are ignored.
    """

    company: Optional[str] = None
    position: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    application_date: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class JobApplicationOut(BaseModel):
    id: str
    user_id: str
    company: str
    position: str
    status: str
    notes: Optional[str] = None
    application_date: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JobStatsOut(BaseModel):
    applied: int = 0
    interview: int = 0
    rejected: int = 0
    offer: int = 0


class JobDeletedOut(BaseModel):
    message: str
    job: JobApplicationOut
