"""
Job store: persistence for training job submissions.

Responsibilities:
- Create, read, list, status-update and soft-delete of job records.
- Translation between JobRequest/JobResponse and the stored row.

Non-Responsibilities:
- No status transition rules; status strings pass through untouched.
- No retries. Backend failures surface as PersistenceError.

Every operation uses one session from the injected factory and closes it
before returning.
"""

import json
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .database import JobRecord
from .errors import (
    DeserializationError,
    JobStoreError,
    NotFoundError,
    PersistenceError,
    SerializationError,
)
from .logger import StructuredLogger, get_logger
from .models import (
    DEFAULT_NAMESPACE,
    STATUS_PENDING,
    TERMINAL_STATUSES,
    JobRequest,
    JobResponse,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_response(record: JobRecord) -> JobResponse:
    """
    Rebuild the API response for a stored record.

    Args:
        record: Stored job

    Returns:
        JobResponse with the original request reconstructed

    Raises:
        DeserializationError: request_payload or target_clusters is malformed
    """
    try:
        request = JobRequest.model_validate_json(record.request_payload)
    except ValidationError as e:
        raise DeserializationError(
            f"failed to decode request payload: {e}", "to_response", record.id
        ) from e

    try:
        target_clusters = json.loads(record.target_clusters)
    except (TypeError, ValueError) as e:
        raise DeserializationError(
            f"failed to decode target clusters: {e}", "to_response", record.id
        ) from e
    if not isinstance(target_clusters, list) or not all(isinstance(c, str) for c in target_clusters):
        raise DeserializationError(
            "target clusters must be a JSON array of strings", "to_response", record.id
        )

    return JobResponse(
        id=record.id,
        job_name=record.job_name,
        namespace=record.namespace,
        algorithm=record.algorithm,
        priority=record.priority or 0,
        request=request,
        target_clusters=target_clusters,
        status=record.status,
        message=record.message or "",
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class JobStore:
    """
    Sole reader and writer of JobRecord rows.

    The session factory is owned by the caller (see database.get_session_factory);
    the store keeps no connection of its own between calls.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._session_factory = session_factory
        self._logger = logger or get_logger()
        self._clock = clock or utc_now

    def create(self, request: JobRequest, job_id: str) -> JobRecord:
        """
        Persist a new job submission with status Pending.

        Args:
            request: Submitted job request
            job_id: Unique id generated by the caller

        Returns:
            The stored record

        Raises:
            SerializationError: request cannot be encoded as JSON
            PersistenceError: insert failed (duplicate id, connectivity)
        """
        self._logger.record_operation("create")
        try:
            # NaN and Infinity have no JSON form; refuse them instead of writing null
            request_payload = json.dumps(request.model_dump(by_alias=True), allow_nan=False)
            target_clusters = json.dumps(request.target_clusters)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise self._fail(
                SerializationError(f"failed to encode request: {e}", "create", job_id)
            ) from e

        now = self._clock()
        record = JobRecord(
            id=job_id,
            job_name=request.job_name,
            namespace=request.namespace or DEFAULT_NAMESPACE,
            algorithm=request.algorithm.algorithm_name,
            priority=request.priority,
            request_payload=request_payload,
            target_clusters=target_clusters,
            status=STATUS_PENDING,
            message="",
            created_at=now,
            updated_at=now,
        )

        try:
            with self._session_factory.begin() as session:
                session.add(record)
        except SQLAlchemyError as e:
            raise self._fail(
                PersistenceError(f"failed to create training job: {e}", "create", job_id)
            ) from e

        self._logger.info(
            "Created training job",
            job_id=job_id,
            job_name=record.job_name,
            namespace=record.namespace,
            algorithm=record.algorithm,
        )
        return record

    def get(self, job_id: str, include_deleted: bool = False) -> JobRecord:
        """
        Fetch one job by id.

        Args:
            job_id: Job id
            include_deleted: Also return a soft-deleted record

        Raises:
            NotFoundError: no matching record
            PersistenceError: backend failure
        """
        self._logger.record_operation("get")
        try:
            with self._session_factory() as session:
                query = session.query(JobRecord).filter(JobRecord.id == job_id)
                if not include_deleted:
                    query = query.filter(JobRecord.deleted_at.is_(None))
                record = query.first()
        except SQLAlchemyError as e:
            raise self._fail(
                PersistenceError(f"failed to get training job: {e}", "get", job_id)
            ) from e

        if record is None:
            raise self._fail(NotFoundError("training job not found", "get", job_id))
        return record

    def list_jobs(self, namespace: str = "", include_deleted: bool = False) -> List[JobRecord]:
        """
        List jobs, newest first.

        Args:
            namespace: Exact namespace to restrict to; empty means all
            include_deleted: Also return soft-deleted records

        Raises:
            PersistenceError: backend failure
        """
        self._logger.record_operation("list")
        try:
            with self._session_factory() as session:
                query = session.query(JobRecord)
                if not include_deleted:
                    query = query.filter(JobRecord.deleted_at.is_(None))
                if namespace:
                    query = query.filter(JobRecord.namespace == namespace)
                return query.order_by(JobRecord.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise self._fail(
                PersistenceError(f"failed to list training jobs: {e}", "list")
            ) from e

    def update_status(self, job_id: str, status: str, message: str = "") -> None:
        """
        Set status and message and refresh updated_at.

        This is an update by filter: an unknown id is not an error and
        nothing is written. Callers that need to know whether the job exists
        must call get() first.

        Raises:
            PersistenceError: backend failure
        """
        self._logger.record_operation("update_status")
        now = self._clock()
        try:
            with self._session_factory.begin() as session:
                matched = (
                    session.query(JobRecord)
                    .filter(JobRecord.id == job_id, JobRecord.deleted_at.is_(None))
                    .update(
                        {
                            JobRecord.status: status,
                            JobRecord.message: message,
                            JobRecord.updated_at: now,
                        },
                        synchronize_session=False,
                    )
                )
        except SQLAlchemyError as e:
            raise self._fail(
                PersistenceError(f"failed to update training job status: {e}", "update_status", job_id)
            ) from e

        if matched:
            self._logger.info("Updated training job status", job_id=job_id, status=status)
        else:
            self._logger.debug("Status update matched no training job", job_id=job_id, status=status)

    def delete(self, job_id: str) -> None:
        """
        Soft-delete a job. Deleting a missing or already deleted job is a no-op.

        Raises:
            PersistenceError: backend failure
        """
        self._logger.record_operation("delete")
        now = self._clock()
        try:
            with self._session_factory.begin() as session:
                matched = (
                    session.query(JobRecord)
                    .filter(JobRecord.id == job_id, JobRecord.deleted_at.is_(None))
                    .update({JobRecord.deleted_at: now}, synchronize_session=False)
                )
        except SQLAlchemyError as e:
            raise self._fail(
                PersistenceError(f"failed to delete training job: {e}", "delete", job_id)
            ) from e

        self._logger.info("Deleted training job", job_id=job_id, matched=matched)

    def list_active(self) -> List[JobRecord]:
        """
        List jobs not yet in a terminal status (Succeeded, Failed), newest first.

        Unrecognized statuses count as active.

        Raises:
            PersistenceError: backend failure
        """
        self._logger.record_operation("list_active")
        try:
            with self._session_factory() as session:
                return (
                    session.query(JobRecord)
                    .filter(
                        JobRecord.deleted_at.is_(None),
                        JobRecord.status.notin_(TERMINAL_STATUSES),
                    )
                    .order_by(JobRecord.created_at.desc())
                    .all()
                )
        except SQLAlchemyError as e:
            raise self._fail(
                PersistenceError(f"failed to list active training jobs: {e}", "list_active")
            ) from e

    def to_response(self, record: JobRecord) -> JobResponse:
        """Build the API response for a record. See module-level to_response."""
        self._logger.record_operation("to_response")
        try:
            return to_response(record)
        except DeserializationError as e:
            self._fail(e)
            raise

    def _fail(self, error: JobStoreError) -> JobStoreError:
        """Log and count an error, then hand it back for raising."""
        operation = error.operation or "unknown"
        self._logger.record_failure(operation, type(error).__name__)

        context = {"operation": operation, "job_id": error.job_id, "error": error.detail}
        if isinstance(error, DeserializationError):
            self._logger.critical("Stored training job is corrupt", **context)
        elif isinstance(error, NotFoundError):
            self._logger.debug("Training job not found", **context)
        else:
            self._logger.error("Job store operation failed", **context)
        return error
