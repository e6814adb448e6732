"""
Error codes and types for jobproof-kernel.

Operations never raise these codes at their callers: they come back as a
SealError inside a SealResult or VerificationResult. The exception classes
below are only raised across collaborator boundaries (stores, hashing,
configuration) and are converted into codes by the operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers and audit trails."""
    NOT_FOUND = "NOT_FOUND"
    NOT_SEALED = "NOT_SEALED"
    ALREADY_SEALED = "ALREADY_SEALED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CRYPTO_UNAVAILABLE = "CRYPTO_UNAVAILABLE"
    HASH_MISMATCH = "HASH_MISMATCH"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    COLLABORATOR_UNAVAILABLE = "COLLABORATOR_UNAVAILABLE"


@dataclass
class SealError:
    """
    A single typed failure with a human-readable message and audit details.
    """
    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class JobProofError(Exception):
    """Base class for exceptions raised inside jobproof-kernel."""


class CanonicalizationError(JobProofError):
    """A value cannot be serialized deterministically."""


class CryptoUnavailable(JobProofError):
    """The SHA-256 primitive could not be invoked."""


class CollaboratorUnavailable(JobProofError):
    """A job store, seal store or token service could not be reached."""


class SealConflict(JobProofError):
    """A seal record already exists for the job (conditional write lost)."""

    def __init__(self, job_id: str):
        super().__init__(f"Seal record already exists for job {job_id}")
        self.job_id = job_id


class ConfigError(JobProofError):
    """Configuration is missing, malformed or inconsistent."""


class SealedJobError(JobProofError):
    """A sealed job was asked to change or disappear."""

    def __init__(self, job_id: str, sealed_at: str | None = None):
        super().__init__(
            f"Cannot modify sealed job {job_id} (sealed at {sealed_at}); sealed evidence is immutable"
        )
        self.job_id = job_id
        self.sealed_at = sealed_at
