"""
Collaborator interfaces for the sealing core, with in-memory references.

Production deployments back these with a database. The seal store MUST
implement put() as a conditional insert (unique key / compare-and-swap) so
that at most one seal per job can ever be written, even with concurrent
callers. The in-memory classes hold a lock for the same guarantee within a
single process.
"""

import copy
import logging
import threading
from dataclasses import replace
from typing import Any, Iterable, Protocol

from .errors import SealConflict, SealedJobError
from .models import Caller, JobSnapshot, SealRecord

logger = logging.getLogger(__name__)


class JobStore(Protocol):
    """Job read model owned by the application."""

    def get_job(self, job_id: str) -> JobSnapshot | None: ...

    def update_job(self, job_id: str, patch: dict[str, Any]) -> JobSnapshot:
        """Patch an unsealed job; raise SealedJobError once it is sealed."""
        ...


class SealStore(Protocol):
    """Seal records keyed by job id."""

    def get(self, job_id: str) -> SealRecord | None: ...

    def put(self, job_id: str, record: SealRecord) -> None:
        """Insert record; raise SealConflict if one already exists."""
        ...

    def remove(self, job_id: str) -> None:
        """Drop a record written by a seal that failed to commit."""
        ...


class TokenService(Protocol):
    """Magic-link token issuer."""

    def invalidate_links(self, job_id: str) -> int: ...


class IdentityProvider(Protocol):
    """Session lookup used when the caller identity is not passed in."""

    def current_caller(self) -> Caller | None: ...


class InMemoryJobStore:
    """Dict-backed JobStore."""

    def __init__(self, jobs: Iterable[JobSnapshot] = ()):
        self._jobs: dict[str, JobSnapshot] = {job.id: job for job in jobs}
        self._lock = threading.Lock()

    def add(self, job: JobSnapshot) -> None:
        with self._lock:
            self._jobs[job.id] = job

    def get_job(self, job_id: str) -> JobSnapshot | None:
        with self._lock:
            return self._jobs.get(job_id)

    def update_job(self, job_id: str, patch: dict[str, Any]) -> JobSnapshot:
        """
        Apply patch to a job.

        Raises:
            KeyError: unknown job
            SealedJobError: the job is already sealed
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise KeyError(job_id)
            if job.is_sealed:
                raise SealedJobError(job_id, job.sealed_at)
            updated = replace(job, **patch)
            self._jobs[job_id] = updated
            return updated

    def delete_job(self, job_id: str) -> None:
        """Remove an unsealed job. Sealed evidence is never deleted."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None and job.is_sealed:
                raise SealedJobError(job_id, job.sealed_at)
            self._jobs.pop(job_id, None)


class InMemorySealStore:
    """
    Dict-backed SealStore.

    Records are deep-copied on the way in and out so a caller holding a
    returned record cannot alter what is stored.
    """

    def __init__(self) -> None:
        self._records: dict[str, SealRecord] = {}
        self._lock = threading.Lock()

    def get(self, job_id: str) -> SealRecord | None:
        with self._lock:
            record = self._records.get(job_id)
        return copy.deepcopy(record) if record is not None else None

    def put(self, job_id: str, record: SealRecord) -> None:
        stored = copy.deepcopy(record)
        with self._lock:
            if job_id in self._records:
                raise SealConflict(job_id)
            self._records[job_id] = stored
        logger.debug("Stored seal record for job %s", job_id)

    def remove(self, job_id: str) -> None:
        with self._lock:
            self._records.pop(job_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryTokenService:
    """Tracks active magic-link tokens per job."""

    def __init__(self) -> None:
        self._tokens: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def issue(self, job_id: str, token: str) -> None:
        with self._lock:
            self._tokens.setdefault(job_id, set()).add(token)

    def is_active(self, token: str) -> bool:
        with self._lock:
            return any(token in tokens for tokens in self._tokens.values())

    def invalidate_links(self, job_id: str) -> int:
        with self._lock:
            revoked = self._tokens.pop(job_id, set())
        return len(revoked)


class StaticIdentityProvider:
    """Returns a fixed caller (or None for an anonymous session)."""

    def __init__(self, caller: Caller | None = None):
        self._caller = caller

    def current_caller(self) -> Caller | None:
        return self._caller
