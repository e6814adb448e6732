"""
Evidence bundle construction and the sealing operation.

Sealing freezes a job's evidence into a canonical bundle, hashes it,
writes a SealRecord exactly once and advances the job to Archived.
Failures are returned as typed results; nothing is raised to the caller.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from .backend import SealBackend
from .config import SealConfig
from .hashing import digest_bundle
from .eligibility import can_seal
from .errors import (
    CanonicalizationError,
    CollaboratorUnavailable,
    CryptoUnavailable,
    ErrorCode,
    SealConflict,
    SealError,
    SealedJobError,
)
from .models import Caller, JobSnapshot, JobStatus, SealRecord
from .store import IdentityProvider, JobStore, SealStore, TokenService

logger = logging.getLogger(__name__)

BUNDLE_VERSION = "1.0"

# Lifecycle status a job is moved to once sealed
SEALED_STATUS = JobStatus.ARCHIVED

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(clock: Clock | None = None) -> str:
    """Current time as an ISO-8601 UTC string."""
    moment = (clock or utc_now)()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


@dataclass
class SealResult:
    """Result of a seal attempt."""
    success: bool
    evidence_hash: str | None = None
    signature: str | None = None
    algorithm: str | None = None
    sealed_at: str | None = None
    bundle: dict[str, Any] | None = None
    job_status: str | None = None
    warnings: list[str] = field(default_factory=list)
    error: SealError | None = None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return "Evidence sealed successfully"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "evidence_hash": self.evidence_hash,
            "signature": self.signature,
            "algorithm": self.algorithm,
            "sealed_at": self.sealed_at,
            "bundle": self.bundle,
            "job_status": self.job_status,
            "warnings": list(self.warnings),
            "message": self.message,
            "error": self.error.to_dict() if self.error else None,
        }


def _failure(
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
) -> SealResult:
    return SealResult(
        success=False,
        warnings=list(warnings or []),
        error=SealError(code=code, message=message, details=details or {}),
    )


def build_evidence_bundle(
    job: JobSnapshot,
    sealed_at: str,
    sealed_by: str,
    version: str = BUNDLE_VERSION,
) -> dict[str, Any]:
    """
    Build the evidence bundle that gets hashed.

    Photo order is preserved. Photo sync state is excluded because it is
    mutable bookkeeping, not evidence.

    Args:
        job: Snapshot of the job being sealed
        sealed_at: ISO-8601 UTC seal timestamp
        sealed_by: Identity of the sealer
        version: Bundle format version

    Returns:
        JSON-serializable dict with job, photos, signature and metadata
    """
    signature = job.signature
    return {
        "job": {
            "id": job.id,
            "title": job.title,
            "client": job.client,
            "client_id": job.client_id,
            "technician": job.technician,
            "technician_id": job.technician_id,
            "date": job.scheduled_date,
            "address": job.address,
            "notes": job.notes,
            "work_summary": job.work_summary,
            "status": job.status.value,
            "safety_checklist": [item.to_dict() for item in job.safety_checklist],
            "site_hazards": list(job.site_hazards),
            "lat": job.lat,
            "lng": job.lng,
            "completed_at": job.completed_at or sealed_at,
        },
        "photos": [photo.to_bundle_entry() for photo in job.photos],
        "signature": signature.to_bundle_entry() if signature else {"url": None},
        "metadata": {
            "sealed_at": sealed_at,
            "sealed_by": sealed_by,
            "version": version,
        },
    }


def _resolve_caller(caller: Caller | None, identity: IdentityProvider | None) -> Caller | None:
    if caller is not None:
        return caller
    if identity is None:
        return None
    return identity.current_caller()


def seal_job(
    job_id: str,
    *,
    jobs: JobStore,
    seals: SealStore,
    backend: SealBackend,
    tokens: TokenService | None = None,
    config: SealConfig | None = None,
    caller: Caller | None = None,
    identity: IdentityProvider | None = None,
    clock: Clock | None = None,
) -> SealResult:
    """
    Seal a job's evidence.

    Args:
        job_id: Job to seal
        jobs: Job read model
        seals: Seal record store (conditional insert)
        backend: Signature strategy
        tokens: Magic-link service, invalidated best-effort after sealing
        config: Sealing options
        caller: Authenticated caller; skips the identity lookup when given
        identity: Session lookup used when caller is None
        clock: Time source (default: UTC now)

    Returns:
        SealResult; on failure error holds NOT_AUTHENTICATED, NOT_FOUND,
        ALREADY_SEALED, VALIDATION_FAILED, CRYPTO_UNAVAILABLE or
        COLLABORATOR_UNAVAILABLE

    Note:
        ALREADY_SEALED from a lost seal-store race reflects the store at the
        moment of the write. If the winning call then fails its job update
        and rolls back, the job ends up unsealed and may be sealed again.
    """
    config = config or SealConfig()

    try:
        who = _resolve_caller(caller, identity)
    except CollaboratorUnavailable as exc:
        return _failure(ErrorCode.COLLABORATOR_UNAVAILABLE, f"Identity lookup failed: {exc}")
    if who is None:
        return _failure(
            ErrorCode.NOT_AUTHENTICATED,
            "Not authenticated - please log in to seal evidence",
        )

    try:
        job = jobs.get_job(job_id)
    except CollaboratorUnavailable as exc:
        return _failure(ErrorCode.COLLABORATOR_UNAVAILABLE, f"Job store unavailable: {exc}")
    if job is None:
        return _failure(ErrorCode.NOT_FOUND, f"Job {job_id} not found", {"job_id": job_id})

    if who.workspace_id and job.workspace_id and who.workspace_id != job.workspace_id:
        return _failure(
            ErrorCode.NOT_AUTHENTICATED,
            "Unauthorized - cannot seal job in different workspace",
            {"job_id": job_id},
        )

    if job.is_sealed:
        logger.info("Refusing to seal job %s: already sealed at %s", job_id, job.sealed_at)
        return _failure(
            ErrorCode.ALREADY_SEALED,
            f"Job {job_id} is already sealed",
            {"job_id": job_id, "sealed_at": job.sealed_at},
        )

    eligibility = can_seal(job, config)
    if not eligibility.can_seal:
        logger.info("Job %s cannot be sealed: %s", job_id, "; ".join(eligibility.reasons))
        return _failure(
            ErrorCode.VALIDATION_FAILED,
            f"Job {job_id} cannot be sealed: " + "; ".join(eligibility.reasons),
            {"job_id": job_id, "reasons": list(eligibility.reasons)},
            warnings=eligibility.warnings,
        )

    sealed_at = iso_timestamp(clock)
    bundle = build_evidence_bundle(job, sealed_at, who.identity, config.bundle_version)

    try:
        evidence_hash = digest_bundle(bundle)
    except CryptoUnavailable as exc:
        logger.error("Cannot seal job %s: %s", job_id, exc)
        return _failure(ErrorCode.CRYPTO_UNAVAILABLE, str(exc), {"job_id": job_id})
    except CanonicalizationError as exc:
        return _failure(
            ErrorCode.VALIDATION_FAILED,
            f"Evidence bundle for job {job_id} is not canonicalizable: {exc}",
            {"job_id": job_id, "reasons": [str(exc)]},
        )

    signature = backend.sign(evidence_hash)
    record = SealRecord(
        job_id=job_id,
        evidence_hash=evidence_hash,
        signature=signature,
        algorithm=backend.algorithm,
        sealed_at=sealed_at,
        sealed_by=who.identity,
        bundle=bundle,
        workspace_id=job.workspace_id,
    )

    try:
        seals.put(job_id, record)
    except SealConflict:
        logger.info("Lost seal race for job %s: record already exists", job_id)
        return _failure(
            ErrorCode.ALREADY_SEALED,
            f"Job {job_id} is already sealed",
            {"job_id": job_id},
        )
    except CollaboratorUnavailable as exc:
        return _failure(ErrorCode.COLLABORATOR_UNAVAILABLE, f"Seal store unavailable: {exc}")

    try:
        jobs.update_job(job_id, {
            "sealed_at": sealed_at,
            "sealed_by": who.identity,
            "evidence_hash": evidence_hash,
            "status": SEALED_STATUS,
        })
    except Exception as exc:  # any store failure: the record must not outlive it
        logger.error("Failed to update job %s after sealing, rolling back seal: %s", job_id, exc)
        try:
            seals.remove(job_id)
        except Exception as rollback_exc:
            logger.error("Rollback of seal record for job %s failed: %s", job_id, rollback_exc)
        if isinstance(exc, KeyError):
            return _failure(ErrorCode.NOT_FOUND, f"Job {job_id} not found", {"job_id": job_id})
        if isinstance(exc, SealedJobError):
            return _failure(
                ErrorCode.ALREADY_SEALED,
                f"Job {job_id} is already sealed",
                {"job_id": job_id, "sealed_at": exc.sealed_at},
            )
        return _failure(ErrorCode.COLLABORATOR_UNAVAILABLE, f"Failed to seal job: {exc}")

    warnings = list(eligibility.warnings)
    if tokens is not None:
        try:
            revoked = tokens.invalidate_links(job_id)
            logger.debug("Invalidated %s access token(s) for job %s", revoked, job_id)
        except Exception as exc:  # best-effort: the seal is already committed
            logger.warning("Failed to invalidate access tokens for job %s: %s", job_id, exc)
            warnings.append(f"Failed to invalidate access links: {exc}")

    logger.info("Sealed job %s hash=%s by %s", job_id, evidence_hash, who.identity)
    return SealResult(
        success=True,
        evidence_hash=evidence_hash,
        signature=signature,
        algorithm=backend.algorithm,
        sealed_at=sealed_at,
        bundle=bundle,
        job_status=SEALED_STATUS.value,
        warnings=warnings,
    )
