import hashlib
import hmac
from typing import Optional

from gifflow import settings


SIGNATURE_PREFIX = "sha256="


def sign(payload: bytes, secret: str) -> str:
    """
    X-Hub-Signature-256 value GitHub would send for `payload`.
    """
    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(
    payload: bytes,
    signature: Optional[str],
    secret: Optional[str] = None,
) -> bool:
    """
    Check a delivery against the app's webhook secret.

    An unset secret rejects every delivery. Malformed headers and
    non-ASCII signatures count as mismatches, never as errors.
    """
    if secret is None:
        secret = settings.GITHUB_WEBHOOK_SECRET

    if not secret or not isinstance(signature, str):
        return False

    signature = signature.strip()
    if not signature.startswith(SIGNATURE_PREFIX):
        return False

    try:
        return hmac.compare_digest(sign(payload, secret), signature)
    except TypeError:
        # compare_digest refuses non-ASCII str
        return False
