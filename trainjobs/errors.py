"""
Error taxonomy for the job store.

Every error carries the operation name and, when known, the job id so a
failure can be diagnosed without inspecting the database directly.
"""

from typing import Optional


class JobStoreError(Exception):
    """Base class for all job store failures."""

    def __init__(self, message: str, operation: Optional[str] = None, job_id: Optional[str] = None):
        self.operation = operation
        self.job_id = job_id
        self.detail = message
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        prefix = self.operation or "jobstore"
        if self.job_id:
            prefix = f"{prefix} {self.job_id}"
        return f"{prefix}: {message}"


class SerializationError(JobStoreError):
    """Request could not be encoded for storage."""
    pass


class DeserializationError(JobStoreError):
    """Stored payload is malformed (corrupt row or schema mismatch)."""
    pass


class NotFoundError(JobStoreError):
    """No matching record."""
    pass


class PersistenceError(JobStoreError):
    """Backend failure. Not retried here; the caller decides."""
    pass
