"""
jobproof-kernel: tamper-evident sealing and verification of field-job evidence.

A job's photos, signature and metadata are frozen into a canonical
evidence bundle, hashed with SHA-256 and recorded once. Verification
recomputes the hash from the stored bundle to detect later tampering.
"""

from .backend import (
    HMAC_ALGORITHM,
    MOCK_ALGORITHM,
    HmacSealBackend,
    MockSealBackend,
    SealBackend,
    build_backend,
)
from .canonical import canonical_bytes, canonical_json, canonicalize
from .config import SealConfig, load_config
from .hashing import digest, digest_artifact, digest_bundle, is_evidence_hash
from .eligibility import EligibilityResult, can_seal
from .errors import (
    CanonicalizationError,
    CollaboratorUnavailable,
    ConfigError,
    CryptoUnavailable,
    ErrorCode,
    JobProofError,
    SealConflict,
    SealedJobError,
    SealError,
)
from .kernel import SealKernel
from .models import (
    Caller,
    EvidencePhoto,
    JobSnapshot,
    JobStatus,
    SafetyCheck,
    SealRecord,
    Signature,
    SyncStatus,
)
from .seal import SealResult, build_evidence_bundle, seal_job
from .store import (
    InMemoryJobStore,
    InMemorySealStore,
    InMemoryTokenService,
    StaticIdentityProvider,
)
from .summary import format_hash, format_seal_summary, seal_summary
from .verify import (
    SealStatus,
    VerificationResult,
    get_evidence_bundle,
    get_seal_status,
    verify_job,
)

__version__ = "0.1.0"
__all__ = [
    # Canonical JSON
    "canonicalize",
    "canonical_json",
    "canonical_bytes",
    # Digests
    "digest",
    "digest_bundle",
    "digest_artifact",
    "is_evidence_hash",
    # Models
    "Caller",
    "EvidencePhoto",
    "JobSnapshot",
    "JobStatus",
    "SafetyCheck",
    "SealRecord",
    "Signature",
    "SyncStatus",
    # Config and backends
    "SealConfig",
    "load_config",
    "SealBackend",
    "MockSealBackend",
    "HmacSealBackend",
    "MOCK_ALGORITHM",
    "HMAC_ALGORITHM",
    "build_backend",
    # Operations
    "EligibilityResult",
    "can_seal",
    "SealResult",
    "build_evidence_bundle",
    "seal_job",
    "VerificationResult",
    "SealStatus",
    "verify_job",
    "get_seal_status",
    "get_evidence_bundle",
    "SealKernel",
    # Stores
    "InMemoryJobStore",
    "InMemorySealStore",
    "InMemoryTokenService",
    "StaticIdentityProvider",
    # Display
    "format_hash",
    "seal_summary",
    "format_seal_summary",
    # Errors
    "ErrorCode",
    "SealError",
    "JobProofError",
    "CanonicalizationError",
    "CryptoUnavailable",
    "CollaboratorUnavailable",
    "SealConflict",
    "SealedJobError",
    "ConfigError",
]
