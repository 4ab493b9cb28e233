import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Integer, Float, DateTime, Enum as SQLEnum, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from app.core.database.base import Base
from .types import JobStatus, EnrichmentStatus


def utc_now():
    return datetime.now(timezone.utc)


class JobModel(Base):
    """
    One video transcription request and, once READY, its transcript header.
    """
    __tablename__ = "jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    source_url = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    status = Column(SQLEnum(JobStatus), default=JobStatus.UPLOAD, nullable=False, index=True)
    error_message = Column(Text, nullable=True)

    # Request parameters (model, language, temperature)
    payload = Column(JSON, default=dict)

    # Transcript header, filled when the job reaches READY
    transcription_model = Column(String, nullable=True)
    language = Column(String, nullable=True)
    full_text = Column(Text, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    segments_count = Column(Integer, nullable=True)
    chunks_processed = Column(Integer, nullable=True)
    usage = Column(JSON, default=dict)
    file_size_bytes = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    segments = relationship(
        "TranscriptionSegmentModel",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="TranscriptionSegmentModel.segment_index",
    )
    enrichment_jobs = relationship("EnrichmentJobModel", back_populates="job", cascade="all, delete-orphan")


class EnrichmentJobModel(Base):
    """
    Hand-off record for post-pipeline enrichment (segmentation, embeddings).
    Created PENDING once a transcript is READY; an external worker picks it up.
    """
    __tablename__ = "enrichment_jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, index=True)
    status = Column(SQLEnum(EnrichmentStatus), default=EnrichmentStatus.PENDING, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    job = relationship("JobModel", back_populates="enrichment_jobs")
