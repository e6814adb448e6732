"""
SHA-256 digests over canonical bundles and raw artifact payloads.

Pure functions: identical input bytes always give the identical
64-character lowercase hex digest.
"""

import hashlib
import hmac
import re
from typing import Any

from .canonical import canonical_bytes
from .errors import CryptoUnavailable

HASH_ALGORITHM = "sha256"

_HEX_DIGEST = re.compile(r"^[0-9a-f]{64}$")


def digest(data: bytes) -> str:
    """
    Compute the SHA-256 digest of raw bytes.

    Raises:
        CryptoUnavailable: the runtime cannot provide SHA-256
    """
    try:
        hasher = hashlib.new(HASH_ALGORITHM)
    except ValueError as exc:
        raise CryptoUnavailable(f"{HASH_ALGORITHM} is not available: {exc}") from exc
    hasher.update(data)
    return hasher.hexdigest()


def digest_bundle(bundle: Any) -> str:
    """Digest of the canonical JSON encoding of a bundle."""
    return digest(canonical_bytes(bundle))


def digest_artifact(payload: str | bytes) -> str:
    """
    Digest of a single artifact payload (photo or signature data URL).

    The payload is hashed as-is, without canonicalization.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return digest(payload)


def safe_equal(left: str, right: str) -> bool:
    """
    Constant-time string comparison to prevent timing side-channel attacks.
    """
    left = left if isinstance(left, str) else str(left or "")
    right = right if isinstance(right, str) else str(right or "")
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def is_evidence_hash(value: Any) -> bool:
    """True when value is a 64-character lowercase hex digest."""
    return isinstance(value, str) and bool(_HEX_DIGEST.match(value))
