# File: app/core/exceptions.py


class PipelineFailure(Exception):
    """
    Base for every fatal pipeline error.
    Carries a human-readable message that ends up in the job's error_message.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AcquisitionFailure(PipelineFailure):
    """Source audio could not be obtained, or is empty/corrupt."""


class SegmentationFailure(PipelineFailure):
    """A chunk extraction failed. The whole split is discarded."""


class TranscriptionFailure(PipelineFailure):
    """A remote transcription call failed. No partial transcript is returned."""


class PipelineTimeout(PipelineFailure):
    """The invocation exceeded its wall-clock ceiling."""


class CleanupFailure(Exception):
    """
    Raised internally when a temporary artifact cannot be removed.
    Always logged and dropped, never propagated to the caller.
    """
