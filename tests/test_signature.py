"""Tests for webhook HMAC verification."""

import hashlib
import hmac

import pytest

from payrail.errors.exceptions import ConfigurationError, SignatureError
from payrail.services.signature import compute_signature, verify_signature

BODY = b'{"event":"deposit.success","data":{"amount":"100"}}'


def test_compute_signature_is_hmac_sha512_hex():
    expected = hmac.new(b"key", BODY, hashlib.sha512).hexdigest()
    assert compute_signature(BODY, "key") == expected


def test_verify_accepts_matching_signature():
    verify_signature(BODY, compute_signature(BODY, "key"), "key")


def test_verify_accepts_uppercase_hex():
    verify_signature(BODY, compute_signature(BODY, "key").upper(), "key")


def test_verify_rejects_tampered_body():
    signature = compute_signature(BODY, "key")
    with pytest.raises(SignatureError) as exc_info:
        verify_signature(BODY + b" ", signature, "key")
    assert exc_info.value.status_code == 401


def test_verify_rejects_wrong_key():
    with pytest.raises(SignatureError):
        verify_signature(BODY, compute_signature(BODY, "other"), "key")


def test_verify_missing_signature():
    with pytest.raises(SignatureError, match="Missing signature"):
        verify_signature(BODY, None, "key")


def test_verify_missing_secret_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        verify_signature(BODY, "deadbeef", "")
    assert exc_info.value.status_code == 500


def test_verify_sha256_variant():
    signature = hmac.new(b"offramp", BODY, hashlib.sha256).hexdigest()
    verify_signature(BODY, signature, "offramp", hashlib.sha256)
    with pytest.raises(SignatureError):
        verify_signature(BODY, signature, "offramp")
