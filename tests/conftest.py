"""Shared fixtures for jobproof-kernel tests."""

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add parent src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jobproof_kernel import (
    Caller,
    EvidencePhoto,
    InMemoryJobStore,
    InMemorySealStore,
    InMemoryTokenService,
    JobSnapshot,
    JobStatus,
    MockSealBackend,
    SafetyCheck,
    SealKernel,
    Signature,
    SyncStatus,
)

SEALED_AT = "2026-01-05T10:00:00+00:00"


def fixed_clock() -> datetime:
    return datetime(2026, 1, 5, 10, 0, 0, tzinfo=timezone.utc)


def synced_photo(photo_id: str = "p1", **overrides) -> EvidencePhoto:
    photo = EvidencePhoto(
        id=photo_id,
        url=f"https://storage.example.com/jobs/{photo_id}.jpg",
        timestamp="2026-01-05T09:30:00+00:00",
        type="After",
        verified=True,
        sync_status=SyncStatus.SYNCED,
        photo_hash="a" * 64,
    )
    return replace(photo, **overrides)


def ready_job(job_id: str = "job-3", **overrides) -> JobSnapshot:
    """A Submitted job with one synced photo, a named signature and no GPS."""
    job = JobSnapshot(
        id=job_id,
        status=JobStatus.SUBMITTED,
        title="Boiler service",
        client="Acme Property",
        client_id="client-1",
        technician="Sam Tech",
        technician_id="tech-1",
        scheduled_date="2026-01-05",
        address="1 High Street",
        photos=(synced_photo("p1"),),
        signature=Signature(
            url="https://storage.example.com/jobs/sig.png",
            signer_name="J. Doe",
            signer_role="Site Manager",
            signature_hash="b" * 64,
        ),
        safety_checklist=(
            SafetyCheck(id="sc-1", label="Isolate supply", required=True, checked=True),
            SafetyCheck(id="sc-2", label="Photograph meter", required=False, checked=False),
        ),
    )
    return replace(job, **overrides)


@pytest.fixture
def caller() -> Caller:
    return Caller(user_id="user-1", email="manager@example.com")


@pytest.fixture
def jobs() -> InMemoryJobStore:
    return InMemoryJobStore([
        ready_job("job-3"),
        ready_job("job-1", status=JobStatus.PENDING),
        ready_job("job-4", status=JobStatus.ARCHIVED, sealed_at="2026-01-01T00:00:00+00:00"),
    ])


@pytest.fixture
def seals() -> InMemorySealStore:
    return InMemorySealStore()


@pytest.fixture
def tokens() -> InMemoryTokenService:
    service = InMemoryTokenService()
    service.issue("job-3", "mock-token-123")
    return service


@pytest.fixture
def kernel(jobs, seals, tokens) -> SealKernel:
    return SealKernel(
        jobs=jobs,
        seals=seals,
        backend=MockSealBackend(),
        tokens=tokens,
        clock=fixed_clock,
    )
