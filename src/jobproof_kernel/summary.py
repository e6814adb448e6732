"""
Seal summary utilities for human-readable inspection.

Extracts key metadata from seal records without modifying them.
"""

from typing import Any

from .models import SealRecord


def format_hash(evidence_hash: str | None, length: int = 16) -> str:
    """
    Truncate a hash for display.

    Returns "N/A" for a missing hash and the hash unchanged when it is
    no longer than length.
    """
    if not evidence_hash:
        return "N/A"
    if len(evidence_hash) <= length:
        return evidence_hash
    return f"{evidence_hash[:length]}..."


def seal_summary(record: SealRecord) -> dict[str, Any]:
    """
    Extract a human-readable summary from a seal record.

    Args:
        record: A stored seal record

    Returns:
        Dict with job_id, sealed_at, sealed_by, algorithm, evidence_hash,
        photo_count, signer_name and bundle_version
    """
    bundle = record.bundle or {}
    signature = bundle.get("signature") or {}
    metadata = bundle.get("metadata") or {}

    return {
        "job_id": record.job_id,
        "sealed_at": record.sealed_at,
        "sealed_by": record.sealed_by,
        "algorithm": record.algorithm,
        "evidence_hash": record.evidence_hash,
        "photo_count": len(bundle.get("photos") or []),
        "signer_name": signature.get("signer_name", ""),
        "bundle_version": metadata.get("version", ""),
    }


def format_seal_summary(record: SealRecord) -> str:
    """
    Format a seal record as a single-line human-readable string.

    Returns:
        String like "job-3 | 2 photos | signed by J. Doe | SHA256-HMAC 3f2a9c... | 2026-01-05T10:00:00+00:00"
    """
    s = seal_summary(record)
    signer = s["signer_name"] or "unknown signer"
    return (
        f"{s['job_id']} | {s['photo_count']} photos | signed by {signer} | "
        f"{s['algorithm']} {format_hash(s['evidence_hash'])} | {s['sealed_at']}"
    )
