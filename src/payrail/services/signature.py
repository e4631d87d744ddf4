"""HMAC verification of inbound webhook bodies."""

import hashlib
import hmac

from payrail.errors.exceptions import ConfigurationError, SignatureError


def compute_signature(body: bytes, secret: str, digestmod=hashlib.sha512) -> str:
    """Hex HMAC of the exact raw body."""
    return hmac.new(secret.encode("utf-8"), body, digestmod).hexdigest()


def verify_signature(
    body: bytes,
    signature: str | None,
    secret: str | None,
    digestmod=hashlib.sha512,
) -> None:
    """Raise unless ``signature`` is the hex HMAC of ``body`` keyed by ``secret``.

    The custodial provider signs with HMAC-SHA512 keyed by its API key; the
    offramp provider uses HMAC-SHA256 with a dedicated webhook secret.

    Raises:
        ConfigurationError: ``secret`` is not configured.
        SignatureError: ``signature`` is missing or does not match.
    """
    if not secret:
        raise ConfigurationError("Webhook signing secret is not configured")
    if not signature:
        raise SignatureError("Missing signature")

    expected = compute_signature(body, secret, digestmod)
    if not hmac.compare_digest(expected, signature.strip().lower()):
        raise SignatureError("Invalid signature")
