from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle of one video transcription job, as persisted in the record store."""
    UPLOAD = "upload"
    INGESTION = "ingestion"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class EnrichmentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
