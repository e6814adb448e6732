"""Verification and seal status tests."""

import copy
from dataclasses import replace

from conftest import SEALED_AT

from jobproof_kernel import (
    ErrorCode,
    HmacSealBackend,
    MockSealBackend,
    SealKernel,
    format_hash,
    format_seal_summary,
    seal_summary,
    verify_job,
)


def _tamper(seals, job_id, mutate):
    """Rewrite a stored record's bundle without touching its hash."""
    record = seals.get(job_id)
    bundle = copy.deepcopy(record.bundle)
    mutate(bundle)
    seals.remove(job_id)
    seals.put(job_id, replace(record, bundle=bundle))


class TestVerifyRoundTrip:

    def test_seal_then_verify(self, kernel, caller):
        sealed = kernel.seal("job-3", caller)
        result = kernel.verify("job-3")

        assert result.success
        assert result.is_valid
        assert result.error is None
        assert result.evidence_hash == sealed.evidence_hash
        assert result.recomputed_hash == sealed.evidence_hash
        assert "verified" in result.message

    def test_metadata_included(self, kernel, caller):
        kernel.seal("job-3", caller)
        result = kernel.verify("job-3")

        assert result.sealed_at == SEALED_AT
        assert result.sealed_by == "manager@example.com"
        assert result.algorithm == "SHA256-MOCK"
        assert result.checks["hash_match"] is True
        assert result.checks["signature_valid"] is True
        assert result.checks["verified_at"] == SEALED_AT

    def test_hmac_round_trip(self, jobs, seals, caller):
        kernel = SealKernel(jobs=jobs, seals=seals, backend=HmacSealBackend("s3cret"))
        sealed = kernel.seal("job-3", caller)
        result = kernel.verify("job-3")

        assert result.is_valid
        assert result.algorithm == "SHA256-HMAC"
        assert result.evidence_hash == sealed.evidence_hash


class TestTamperDetection:

    def test_mutated_bundle_is_hash_mismatch(self, kernel, seals, caller):
        sealed = kernel.seal("job-3", caller)

        def shift_timestamp(bundle):
            bundle["photos"][0]["timestamp"] = "2026-01-04T09:30:00+00:00"

        _tamper(seals, "job-3", shift_timestamp)
        result = kernel.verify("job-3")

        assert result.success
        assert not result.is_valid
        assert result.error.code == ErrorCode.HASH_MISMATCH
        assert "tampered" in result.message
        assert result.evidence_hash == sealed.evidence_hash
        assert result.error.details["stored_hash"] == sealed.evidence_hash
        assert result.recomputed_hash != sealed.evidence_hash

    def test_mismatch_is_not_repaired(self, kernel, seals, caller):
        sealed = kernel.seal("job-3", caller)
        _tamper(seals, "job-3", lambda b: b["job"].update(address="2 Low Road"))

        kernel.verify("job-3")
        kernel.verify("job-3")

        record = seals.get("job-3")
        assert record.evidence_hash == sealed.evidence_hash
        assert record.bundle["job"]["address"] == "2 Low Road"

    def test_uncanonicalizable_bundle_is_hash_mismatch(self, kernel, seals, caller):
        kernel.seal("job-3", caller)
        _tamper(seals, "job-3", lambda b: b["job"].update(lat=float("inf")))

        result = kernel.verify("job-3")
        assert result.success
        assert result.error.code == ErrorCode.HASH_MISMATCH


class TestSignatureCheck:

    def test_forged_signature(self, kernel, seals, caller):
        kernel.seal("job-3", caller)
        record = seals.get("job-3")
        seals.remove("job-3")
        seals.put("job-3", replace(record, signature="sig_0000000000000000"))

        result = kernel.verify("job-3")

        assert result.success
        assert not result.is_valid
        assert result.error.code == ErrorCode.INVALID_SIGNATURE
        assert result.checks["hash_match"] is True
        assert "forged" in result.message

    def test_wrong_hmac_secret(self, jobs, seals, caller):
        SealKernel(jobs=jobs, seals=seals, backend=HmacSealBackend("right")).seal("job-3", caller)
        result = verify_job("job-3", jobs=jobs, seals=seals, backend=HmacSealBackend("wrong"))

        assert result.error.code == ErrorCode.INVALID_SIGNATURE

    def test_algorithm_mismatch(self, jobs, seals, caller):
        SealKernel(jobs=jobs, seals=seals, backend=HmacSealBackend("right")).seal("job-3", caller)
        result = verify_job("job-3", jobs=jobs, seals=seals, backend=MockSealBackend())

        assert result.error.code == ErrorCode.INVALID_SIGNATURE
        assert "SHA256-HMAC" in result.error.details["reason"]


class TestVerifyFailures:

    def test_not_sealed(self, kernel):
        result = kernel.verify("job-1")
        assert not result.success
        assert result.error.code == ErrorCode.NOT_SEALED
        assert "not sealed" in result.message

    def test_not_found(self, kernel):
        result = kernel.verify("non-existent-job")
        assert not result.success
        assert result.error.code == ErrorCode.NOT_FOUND
        assert "not found" in result.message

    def test_verify_is_read_only(self, kernel, jobs, seals, caller):
        kernel.seal("job-3", caller)
        job_before = jobs.get_job("job-3")
        record_before = seals.get("job-3")

        kernel.verify("job-3")
        kernel.verify("job-1")

        assert jobs.get_job("job-3") == job_before
        assert seals.get("job-3") == record_before
        assert seals.get("job-1") is None
        assert not jobs.get_job("job-1").is_sealed


class TestSealStatus:

    def test_unsealed(self, kernel):
        status = kernel.get_seal_status("job-1")
        assert status.is_sealed is False
        assert status.evidence_hash is None

    def test_unknown_job(self, kernel):
        assert kernel.get_seal_status("nope").to_dict()["is_sealed"] is False

    def test_sealed(self, kernel, caller):
        sealed = kernel.seal("job-3", caller)
        status = kernel.get_seal_status("job-3")

        assert status.is_sealed
        assert status.sealed_at == SEALED_AT
        assert status.sealed_by == "manager@example.com"
        assert status.evidence_hash == sealed.evidence_hash
        assert status.signature == sealed.signature
        assert status.algorithm == "SHA256-MOCK"

    def test_status_does_not_recompute(self, kernel, seals, caller):
        """Status is display metadata only; tampering is verify's job."""
        sealed = kernel.seal("job-3", caller)
        _tamper(seals, "job-3", lambda b: b["job"].update(title="Changed"))

        assert kernel.get_seal_status("job-3").evidence_hash == sealed.evidence_hash

    def test_job_flag_without_record(self, kernel):
        status = kernel.get_seal_status("job-4")
        assert status.is_sealed
        assert status.sealed_at == "2026-01-01T00:00:00+00:00"


class TestSummary:

    def test_format_hash(self):
        assert format_hash(None) == "N/A"
        assert format_hash("abc") == "abc"
        assert format_hash("0123456789abcdef0123") == "0123456789abcdef..."

    def test_seal_summary(self, kernel, seals, caller):
        sealed = kernel.seal("job-3", caller)
        summary = seal_summary(seals.get("job-3"))

        assert summary["photo_count"] == 1
        assert summary["signer_name"] == "J. Doe"
        assert summary["bundle_version"] == "1.0"
        line = format_seal_summary(seals.get("job-3"))
        assert line.startswith("job-3 | 1 photos | signed by J. Doe | SHA256-MOCK ")
        assert sealed.evidence_hash[:16] + "..." in line
