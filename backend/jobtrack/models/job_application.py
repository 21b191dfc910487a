from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from jobtrack.core.base import Base
from jobtrack.models.user import new_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(String(36), primary_key=True, default=new_id)

    # ownership
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    company = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)

    # One of JobStatus; older rows may carry other casings.
    status = Column(String(50), nullable=False, default="Applied")
    notes = Column(Text, nullable=True)
    application_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Python-side defaults keep sub-second ordering for the list tie-break.
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", back_populates="job_applications")
