"""
Seal verification and seal status lookup.

Verification recomputes the digest from the stored bundle snapshot and
compares it with the stored hash, then checks the signature token. It is
strictly read-only: no outcome writes to the seal store or the job store,
and a mismatch is reported, never repaired.

A HASH_MISMATCH or INVALID_SIGNATURE result is a *successful* verification
call (success=True) whose verdict is negative (is_valid=False).
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from .backend import SealBackend
from .hashing import digest_bundle, safe_equal
from .errors import (
    CanonicalizationError,
    CollaboratorUnavailable,
    CryptoUnavailable,
    ErrorCode,
    SealError,
)
from .seal import Clock, iso_timestamp
from .store import JobStore, SealStore

logger = logging.getLogger(__name__)

MESSAGE_VALID = "Evidence verified - no tampering detected"
MESSAGE_TAMPERED = "Evidence has been tampered with - hash does not match"
MESSAGE_FORGED = "Invalid signature - seal may be forged"


@dataclass
class VerificationResult:
    """
    Result of verifying a job's seal.

    success reports whether the verification call itself completed;
    is_valid reports whether the evidence passed.
    """
    success: bool
    is_valid: bool = False
    message: str = ""
    evidence_hash: str | None = None
    recomputed_hash: str | None = None
    algorithm: str | None = None
    sealed_at: str | None = None
    sealed_by: str | None = None
    checks: dict[str, Any] = field(default_factory=dict)
    error: SealError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "is_valid": self.is_valid,
            "message": self.message,
            "evidence_hash": self.evidence_hash,
            "recomputed_hash": self.recomputed_hash,
            "algorithm": self.algorithm,
            "sealed_at": self.sealed_at,
            "sealed_by": self.sealed_by,
            "checks": dict(self.checks),
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class SealStatus:
    """Display-oriented seal metadata. No integrity check is implied."""
    is_sealed: bool
    sealed_at: str | None = None
    sealed_by: str | None = None
    evidence_hash: str | None = None
    signature: str | None = None
    algorithm: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_sealed": self.is_sealed,
            "sealed_at": self.sealed_at,
            "sealed_by": self.sealed_by,
            "evidence_hash": self.evidence_hash,
            "signature": self.signature,
            "algorithm": self.algorithm,
        }


def _call_failed(code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> VerificationResult:
    return VerificationResult(
        success=False,
        is_valid=False,
        message=message,
        error=SealError(code=code, message=message, details=details or {}),
    )


def verify_job(
    job_id: str,
    *,
    jobs: JobStore,
    seals: SealStore,
    backend: SealBackend,
    clock: Clock | None = None,
) -> VerificationResult:
    """
    Verify the seal of a job.

    Args:
        job_id: Job whose seal is checked
        jobs: Job read model (only consulted when no seal record exists)
        seals: Seal record store
        backend: Signature strategy matching the one used at seal time
        clock: Time source for the verification timestamp

    Returns:
        VerificationResult. success=False with NOT_FOUND / NOT_SEALED /
        CRYPTO_UNAVAILABLE / COLLABORATOR_UNAVAILABLE when the check could
        not run; success=True with is_valid and, on a negative verdict,
        HASH_MISMATCH or INVALID_SIGNATURE otherwise.
    """
    try:
        record = seals.get(job_id)
    except CollaboratorUnavailable as exc:
        return _call_failed(ErrorCode.COLLABORATOR_UNAVAILABLE, f"Seal store unavailable: {exc}")

    if record is None:
        try:
            job = jobs.get_job(job_id)
        except CollaboratorUnavailable as exc:
            return _call_failed(ErrorCode.COLLABORATOR_UNAVAILABLE, f"Job store unavailable: {exc}")
        if job is None:
            return _call_failed(ErrorCode.NOT_FOUND, f"Job {job_id} not found", {"job_id": job_id})
        return _call_failed(ErrorCode.NOT_SEALED, f"Job {job_id} is not sealed", {"job_id": job_id})

    try:
        recomputed = digest_bundle(record.bundle)
    except CryptoUnavailable as exc:
        return _call_failed(ErrorCode.CRYPTO_UNAVAILABLE, str(exc), {"job_id": job_id})
    except CanonicalizationError as exc:
        # A stored bundle that no longer serializes has been altered
        logger.warning("Stored bundle for job %s is not canonicalizable: %s", job_id, exc)
        recomputed = None

    common = {
        "evidence_hash": record.evidence_hash,
        "recomputed_hash": recomputed,
        "algorithm": record.algorithm,
        "sealed_at": record.sealed_at,
        "sealed_by": record.sealed_by,
    }

    if recomputed is None or not safe_equal(recomputed, record.evidence_hash):
        logger.warning(
            "Tamper detected for job %s: stored=%s recomputed=%s",
            job_id, record.evidence_hash, recomputed,
        )
        return VerificationResult(
            success=True,
            is_valid=False,
            message=MESSAGE_TAMPERED,
            checks={"hash_match": False, "signature_valid": False, "verified_at": iso_timestamp(clock)},
            error=SealError(
                code=ErrorCode.HASH_MISMATCH,
                message=MESSAGE_TAMPERED,
                details={"stored_hash": record.evidence_hash, "recomputed_hash": recomputed},
            ),
            **common,
        )

    if record.algorithm != backend.algorithm:
        signature_valid = False
        reason = f"Seal algorithm {record.algorithm} does not match verifier {backend.algorithm}"
    else:
        signature_valid = backend.verify(recomputed, record.signature)
        reason = "Signature does not match evidence hash"

    if not signature_valid:
        logger.warning("Invalid signature for job %s: %s", job_id, reason)
        return VerificationResult(
            success=True,
            is_valid=False,
            message=MESSAGE_FORGED,
            checks={"hash_match": True, "signature_valid": False, "verified_at": iso_timestamp(clock)},
            error=SealError(
                code=ErrorCode.INVALID_SIGNATURE,
                message=MESSAGE_FORGED,
                details={"reason": reason, "algorithm": record.algorithm},
            ),
            **common,
        )

    return VerificationResult(
        success=True,
        is_valid=True,
        message=MESSAGE_VALID,
        checks={"hash_match": True, "signature_valid": True, "verified_at": iso_timestamp(clock)},
        **common,
    )


def get_seal_status(job_id: str, *, jobs: JobStore, seals: SealStore) -> SealStatus:
    """
    Report seal metadata for display. Performs no recomputation.

    Collaborator failures propagate as CollaboratorUnavailable.
    """
    record = seals.get(job_id)
    if record is not None:
        return SealStatus(
            is_sealed=True,
            sealed_at=record.sealed_at,
            sealed_by=record.sealed_by,
            evidence_hash=record.evidence_hash,
            signature=record.signature,
            algorithm=record.algorithm,
        )

    job = jobs.get_job(job_id)
    if job is None or not job.is_sealed:
        return SealStatus(is_sealed=False)
    # Job marked sealed but its record is not visible (yet)
    return SealStatus(
        is_sealed=True,
        sealed_at=job.sealed_at,
        sealed_by=job.sealed_by,
        evidence_hash=job.evidence_hash,
    )


def get_evidence_bundle(job_id: str, *, seals: SealStore) -> dict[str, Any] | None:
    """
    Return the evidence bundle captured when the job was sealed.

    Returns None when the job has no seal record. The bundle is returned
    as stored; callers wanting an integrity verdict use verify_job().
    """
    record = seals.get(job_id)
    if record is None:
        return None
    return copy.deepcopy(record.bundle)
