"""
SealKernel: the sealing core with its collaborators wired in.
"""

from dataclasses import dataclass, field
from typing import Any

from .backend import SealBackend, build_backend
from .config import SealConfig
from .eligibility import EligibilityResult, can_seal
from .models import Caller, JobSnapshot
from .seal import Clock, SealResult, seal_job, utc_now
from .store import IdentityProvider, JobStore, SealStore, TokenService
from .verify import (
    SealStatus,
    VerificationResult,
    get_evidence_bundle,
    get_seal_status,
    verify_job,
)


@dataclass
class SealKernel:
    """
    Exposes can_seal, seal, verify, get_seal_status and get_evidence_bundle
    over one set of collaborators. The backend defaults to the one selected by config.
    """
    jobs: JobStore
    seals: SealStore
    config: SealConfig = field(default_factory=SealConfig)
    backend: SealBackend | None = None
    tokens: TokenService | None = None
    identity: IdentityProvider | None = None
    clock: Clock = utc_now

    def __post_init__(self) -> None:
        if self.backend is None:
            self.backend = build_backend(self.config)

    def can_seal(self, job: JobSnapshot) -> EligibilityResult:
        return can_seal(job, self.config)

    def seal(self, job_id: str, caller: Caller | None = None) -> SealResult:
        return seal_job(
            job_id,
            jobs=self.jobs,
            seals=self.seals,
            backend=self.backend,
            tokens=self.tokens,
            config=self.config,
            caller=caller,
            identity=self.identity,
            clock=self.clock,
        )

    def verify(self, job_id: str) -> VerificationResult:
        return verify_job(
            job_id,
            jobs=self.jobs,
            seals=self.seals,
            backend=self.backend,
            clock=self.clock,
        )

    def get_seal_status(self, job_id: str) -> SealStatus:
        return get_seal_status(job_id, jobs=self.jobs, seals=self.seals)

    def get_evidence_bundle(self, job_id: str) -> dict[str, Any] | None:
        return get_evidence_bundle(job_id, seals=self.seals)
