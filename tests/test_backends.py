"""Signature backend tests."""

import base64
import hashlib
import hmac

import pytest

from jobproof_kernel import HmacSealBackend, MockSealBackend, digest

EVIDENCE_HASH = digest(b"bundle")


class TestMockBackend:
    """Hash-derived placeholder tokens."""

    def test_token_format(self):
        backend = MockSealBackend()
        token = backend.sign(EVIDENCE_HASH)

        assert token == "sig_" + EVIDENCE_HASH[:16]
        assert backend.algorithm == "SHA256-MOCK"
        assert backend.verify(EVIDENCE_HASH, token)

    def test_rejects_other_hash(self):
        """A token only verifies against the hash it was made from."""
        backend = MockSealBackend()
        token = backend.sign(EVIDENCE_HASH)
        assert not backend.verify(digest(b"other"), token)


class TestHmacBackend:
    """Keyed HMAC-SHA256 signatures."""

    def test_signature_value(self):
        backend = HmacSealBackend("s3cret")
        expected = base64.b64encode(
            hmac.new(b"s3cret", EVIDENCE_HASH.encode("utf-8"), hashlib.sha256).digest()
        ).decode("ascii")

        assert backend.sign(EVIDENCE_HASH) == expected
        assert backend.verify(EVIDENCE_HASH, expected)
        assert backend.algorithm == "SHA256-HMAC"

    def test_tampered_signature_fails(self):
        """Garbage or truncated tokens are rejected, not raised."""
        backend = HmacSealBackend("s3cret")
        assert not backend.verify(EVIDENCE_HASH, "AAAA")
        assert not backend.verify(EVIDENCE_HASH, "not base64!")
        assert not backend.verify(EVIDENCE_HASH, "")

    @pytest.mark.parametrize("secret", ["", None, 123456])
    def test_requires_string_secret(self, secret):
        with pytest.raises(ValueError):
            HmacSealBackend(secret)
