"""
Read models consumed by the sealing core and the seal record it produces.

Jobs arrive from the external job store as JobSnapshot values. from_dict
accepts both snake_case keys and the camelCase shape used by the web
application's job records.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    SUBMITTED = "Submitted"
    COMPLETE = "Complete"
    ARCHIVED = "Archived"


class SyncStatus(str, Enum):
    PENDING = "pending"
    SYNCING = "syncing"
    SYNCED = "synced"
    FAILED = "failed"


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (snake_case first, then camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class EvidencePhoto:
    """A captured photo and its upload state."""
    id: str
    url: str
    timestamp: str
    type: str = "Evidence"
    verified: bool = False
    sync_status: SyncStatus = SyncStatus.PENDING
    is_local_ref: bool = False
    photo_hash: str | None = None
    lat: float | None = None
    lng: float | None = None

    @property
    def is_synced(self) -> bool:
        return self.sync_status == SyncStatus.SYNCED and not self.is_local_ref

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvidencePhoto":
        return cls(
            id=str(_pick(data, "id", default="")),
            url=str(_pick(data, "url", default="")),
            timestamp=str(_pick(data, "timestamp", default="")),
            type=str(_pick(data, "type", default="Evidence")),
            verified=bool(_pick(data, "verified", default=False)),
            sync_status=SyncStatus(_pick(data, "sync_status", "syncStatus", default="pending")),
            is_local_ref=bool(_pick(data, "is_local_ref", "isIndexedDBRef", default=False)),
            photo_hash=_pick(data, "photo_hash", "photoHash"),
            lat=_pick(data, "lat"),
            lng=_pick(data, "lng"),
        )

    def to_bundle_entry(self) -> dict[str, Any]:
        """Evidentiary descriptor; the mutable sync state is not part of it."""
        return {
            "id": self.id,
            "url": self.url,
            "timestamp": self.timestamp,
            "type": self.type,
            "verified": self.verified,
            "lat": self.lat,
            "lng": self.lng,
            "photo_hash": self.photo_hash,
        }


@dataclass(frozen=True)
class Signature:
    """Client or technician sign-off."""
    url: str
    signer_name: str = ""
    signer_role: str | None = None
    signature_hash: str | None = None
    is_local_ref: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Signature":
        return cls(
            url=str(_pick(data, "url", default="")),
            signer_name=str(_pick(data, "signer_name", "signerName", default="")),
            signer_role=_pick(data, "signer_role", "signerRole"),
            signature_hash=_pick(data, "signature_hash", "signatureHash"),
            is_local_ref=bool(_pick(data, "is_local_ref", "isIndexedDBRef", default=False)),
        )

    def to_bundle_entry(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "signer_name": self.signer_name,
            "signer_role": self.signer_role,
            "signature_hash": self.signature_hash,
        }


@dataclass(frozen=True)
class SafetyCheck:
    id: str
    label: str
    required: bool = False
    checked: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SafetyCheck":
        return cls(
            id=str(_pick(data, "id", default="")),
            label=str(_pick(data, "label", default="")),
            required=bool(_pick(data, "required", default=False)),
            checked=bool(_pick(data, "checked", default=False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "required": self.required,
            "checked": self.checked,
        }


@dataclass(frozen=True)
class JobSnapshot:
    """Read-only view of a job as seen by the sealing core."""
    id: str
    status: JobStatus
    title: str = ""
    client: str = ""
    client_id: str = ""
    technician: str = ""
    technician_id: str = ""
    scheduled_date: str = ""
    address: str = ""
    notes: str = ""
    work_summary: str = ""
    site_hazards: tuple[str, ...] = ()
    photos: tuple[EvidencePhoto, ...] = ()
    signature: Signature | None = None
    lat: float | None = None
    lng: float | None = None
    # None means the capture flow never said either way
    location_verified: bool | None = None
    safety_checklist: tuple[SafetyCheck, ...] = ()
    completed_at: str | None = None
    sealed_at: str | None = None
    sealed_by: str | None = None
    evidence_hash: str | None = None
    workspace_id: str | None = None

    @property
    def is_sealed(self) -> bool:
        return bool(self.sealed_at)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobSnapshot":
        """
        Build a snapshot from a job record.

        The signature may be given either as a nested mapping or, as the web
        application stores it, as a URL string with separate signer fields.
        """
        raw_signature = _pick(data, "signature", "signature_url", "signatureUrl")
        signature: Signature | None
        if isinstance(raw_signature, dict):
            signature = Signature.from_dict(raw_signature)
        elif raw_signature:
            signature = Signature(
                url=str(raw_signature),
                signer_name=str(_pick(data, "signer_name", "signerName", default="")),
                signer_role=_pick(data, "signer_role", "signerRole"),
                signature_hash=_pick(data, "signature_hash", "signatureHash"),
                is_local_ref=bool(_pick(data, "signature_is_local_ref", "signatureIsIndexedDBRef", default=False)),
            )
        else:
            signature = None

        return cls(
            id=str(_pick(data, "id", default="")),
            status=JobStatus(_pick(data, "status", default=JobStatus.PENDING.value)),
            title=str(_pick(data, "title", default="")),
            client=str(_pick(data, "client", "client_name", "clientName", default="")),
            client_id=str(_pick(data, "client_id", "clientId", default="")),
            technician=str(_pick(data, "technician", "technician_name", "technicianName", default="")),
            technician_id=str(_pick(data, "technician_id", "techId", "technicianId", default="")),
            scheduled_date=str(_pick(data, "scheduled_date", "date", default="")),
            address=str(_pick(data, "address", default="")),
            notes=str(_pick(data, "notes", default="")),
            work_summary=str(_pick(data, "work_summary", "workSummary", default="")),
            site_hazards=tuple(_pick(data, "site_hazards", "siteHazards", default=())),
            photos=tuple(EvidencePhoto.from_dict(p) for p in _pick(data, "photos", default=())),
            signature=signature,
            lat=_pick(data, "lat"),
            lng=_pick(data, "lng"),
            location_verified=_pick(data, "location_verified", "locationVerified"),
            safety_checklist=tuple(
                SafetyCheck.from_dict(c) for c in _pick(data, "safety_checklist", "safetyChecklist", default=())
            ),
            completed_at=_pick(data, "completed_at", "completedAt"),
            sealed_at=_pick(data, "sealed_at", "sealedAt"),
            sealed_by=_pick(data, "sealed_by", "sealedBy"),
            evidence_hash=_pick(data, "evidence_hash", "evidenceHash"),
            workspace_id=_pick(data, "workspace_id", "workspaceId"),
        )


@dataclass(frozen=True)
class SealRecord:
    """
    Immutable record of a sealed job.

    bundle is the exact snapshot that was hashed; verification recomputes
    evidence_hash from it.
    """
    job_id: str
    evidence_hash: str
    signature: str
    algorithm: str
    sealed_at: str
    sealed_by: str
    bundle: dict[str, Any]
    is_valid: bool = True
    workspace_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "evidence_hash": self.evidence_hash,
            "signature": self.signature,
            "algorithm": self.algorithm,
            "sealed_at": self.sealed_at,
            "sealed_by": self.sealed_by,
            "bundle": self.bundle,
            "is_valid": self.is_valid,
            "workspace_id": self.workspace_id,
        }


@dataclass(frozen=True)
class Caller:
    """Authenticated identity performing a seal."""
    user_id: str
    email: str = ""
    workspace_id: str | None = None

    @property
    def identity(self) -> str:
        return self.email or self.user_id
