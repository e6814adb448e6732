"""
Seal eligibility checks.

Blocking reasons are structural gaps that would make a seal meaningless or
unsafe (no evidence, unsynced uploads, bad coordinates, unmet safety
requirements). Warnings are evidentiary quality gaps a reviewer may accept.
Every reason and warning is collected so an operator can fix all of them in
one pass.
"""

from dataclasses import dataclass, field
from typing import Any

from .config import SealConfig
from .models import JobSnapshot, JobStatus

REASON_ALREADY_SEALED = "Job is already sealed"
REASON_NO_PHOTOS = "Job must have at least one photo"
REASON_PHOTOS_NOT_SYNCED = "All photos must be synced to cloud storage"
REASON_NO_SIGNATURE = "Job must have a signature"
REASON_SIGNATURE_NOT_SYNCED = "Signature must be synced to cloud storage"
REASON_NO_SIGNER_NAME = "Signature must have signer name"
REASON_INVALID_LATITUDE = "Invalid GPS coordinates: latitude must be between -90 and 90"
REASON_INVALID_LONGITUDE = "Invalid GPS coordinates: longitude must be between -180 and 180"

WARNING_SIGNATURE_HASH = "Signature missing integrity hash"
WARNING_LOCATION_UNVERIFIED = "Location not verified (manual or mock coordinates)"
WARNING_NO_GPS = "GPS coordinates not captured"


@dataclass
class EligibilityResult:
    """Outcome of can_seal."""
    can_seal: bool
    reasons: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "can_seal": self.can_seal,
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
        }


def allowed_statuses(config: SealConfig | None = None) -> tuple[JobStatus, ...]:
    """Statuses a job may be sealed from."""
    if config is not None and config.seal_on_dispatch:
        return (JobStatus.SUBMITTED, JobStatus.PENDING)
    return (JobStatus.SUBMITTED,)


def _status_reason(allowed: tuple[JobStatus, ...]) -> str:
    names = " or ".join(status.value for status in allowed)
    return f"Job must be in {names} status"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_gps(job: JobSnapshot, reasons: list[str], warnings: list[str]) -> None:
    if job.lat is None and job.lng is None:
        warnings.append(WARNING_NO_GPS)
        return

    if job.lat is not None and not (_is_number(job.lat) and -90 <= job.lat <= 90):
        reasons.append(REASON_INVALID_LATITUDE)
    if job.lng is not None and not (_is_number(job.lng) and -180 <= job.lng <= 180):
        reasons.append(REASON_INVALID_LONGITUDE)


def can_seal(job: JobSnapshot, config: SealConfig | None = None) -> EligibilityResult:
    """
    Decide whether a job may be sealed.

    Args:
        job: Snapshot of the job
        config: Sealing options (seal_on_dispatch widens the allowed statuses)

    Returns:
        EligibilityResult with can_seal, blocking reasons and warnings
    """
    reasons: list[str] = []
    warnings: list[str] = []

    if job.is_sealed:
        reasons.append(REASON_ALREADY_SEALED)

    allowed = allowed_statuses(config)
    if job.status not in allowed:
        reasons.append(_status_reason(allowed))

    # Photos
    if not job.photos:
        reasons.append(REASON_NO_PHOTOS)
    else:
        if any(not photo.is_synced for photo in job.photos):
            reasons.append(REASON_PHOTOS_NOT_SYNCED)
        unhashed = sum(1 for photo in job.photos if not photo.photo_hash)
        if unhashed:
            warnings.append(f"{unhashed} photo(s) missing integrity hash")

    # Signature
    signature = job.signature
    if signature is None or not signature.url:
        reasons.append(REASON_NO_SIGNATURE)
    else:
        if signature.is_local_ref:
            reasons.append(REASON_SIGNATURE_NOT_SYNCED)
        if not signature.signer_name or not signature.signer_name.strip():
            reasons.append(REASON_NO_SIGNER_NAME)
        if not signature.signature_hash:
            warnings.append(WARNING_SIGNATURE_HASH)

    # Location
    _check_gps(job, reasons, warnings)
    if job.location_verified is False:
        warnings.append(WARNING_LOCATION_UNVERIFIED)

    # Safety checklist
    unchecked = sum(1 for item in job.safety_checklist if item.required and not item.checked)
    if unchecked:
        reasons.append(f"{unchecked} required safety checklist item(s) not completed")

    return EligibilityResult(can_seal=not reasons, reasons=reasons, warnings=warnings)
