import uuid
from sqlalchemy import Column, Integer, Text, Float, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database.base import Base


class TranscriptionSegmentModel(Base):
    """
    The Atomic Unit.
    One timestamped span of the merged transcript, in the time domain of the unsplit source.
    Engine-specific fields (tokens, avg_logprob, ...) live in meta_data.
    """
    __tablename__ = "transcription_segments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, index=True)

    # Merged, zero-based, contiguous segment id
    segment_index = Column(Integer, nullable=False)

    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=False)
    seek = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)

    meta_data = Column(JSON, default=dict)

    job = relationship("JobModel", back_populates="segments")
