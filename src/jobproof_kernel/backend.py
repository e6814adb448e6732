"""
Seal signature backends.

A backend turns an evidence hash into a signature token and checks a token
against a recomputed hash. Backends are passed explicitly to the sealing
and verification operations; there is no process-wide mock switch.

- MockSealBackend: "sig_" + first 16 hex chars of the hash. Offers no
  forgery resistance beyond the hash itself; meant for tests and demos.
- HmacSealBackend: base64 HMAC-SHA256 of the hash under a shared secret.

Neither is an asymmetric signature: anyone holding the secret (or, for
the mock backend, anyone at all) can mint a valid token.
"""

import base64
import binascii
import hashlib
import hmac
from typing import Protocol

from .config import SealConfig
from .hashing import safe_equal
from .errors import ConfigError

MOCK_ALGORITHM = "SHA256-MOCK"
HMAC_ALGORITHM = "SHA256-HMAC"

MOCK_SIGNATURE_PREFIX = "sig_"
MOCK_SIGNATURE_HEX_CHARS = 16


class SealBackend(Protocol):
    """Signature strategy used when sealing and verifying."""

    @property
    def algorithm(self) -> str: ...

    def sign(self, evidence_hash: str) -> str: ...

    def verify(self, evidence_hash: str, signature: str) -> bool: ...


class MockSealBackend:
    """Derives the token from a prefix of the hash."""

    algorithm = MOCK_ALGORITHM

    def sign(self, evidence_hash: str) -> str:
        return MOCK_SIGNATURE_PREFIX + evidence_hash[:MOCK_SIGNATURE_HEX_CHARS]

    def verify(self, evidence_hash: str, signature: str) -> bool:
        return safe_equal(signature, self.sign(evidence_hash))


class HmacSealBackend:
    """
    HMAC-SHA256 over the hex evidence hash.

    SECURITY: The shared secret MUST come from a secrets manager or the
    process environment. Never hardcode or commit secrets.
    """

    algorithm = HMAC_ALGORITHM

    def __init__(self, secret: str):
        if not isinstance(secret, str) or not secret:
            raise ValueError("HMAC secret must be a non-empty string")
        self._key = secret.encode("utf-8")

    def _mac(self, evidence_hash: str) -> bytes:
        return hmac.new(self._key, evidence_hash.encode("utf-8"), hashlib.sha256).digest()

    def sign(self, evidence_hash: str) -> str:
        return base64.b64encode(self._mac(evidence_hash)).decode("ascii")

    def verify(self, evidence_hash: str, signature: str) -> bool:
        try:
            provided = base64.b64decode(signature or "", validate=True)
        except (binascii.Error, ValueError):
            return False
        return hmac.compare_digest(provided, self._mac(evidence_hash))


def build_backend(config: SealConfig) -> SealBackend:
    """
    Instantiate the backend selected by config.

    Raises:
        ConfigError: live backend requested without a string secret key
    """
    if config.backend == "live":
        if not isinstance(config.secret_key, str) or not config.secret_key:
            raise ConfigError(
                "Live seal backend requires a secret key (JOBPROOF_SEAL_SECRET_KEY)"
            )
        return HmacSealBackend(config.secret_key)
    return MockSealBackend()
