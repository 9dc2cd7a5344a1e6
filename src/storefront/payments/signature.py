"""MercadoPago webhook signature verification.

The processor signs ``id:{data_id};request-id:{request_id};ts:{ts};`` with
HMAC-SHA256 and sends ``ts=...,v1=<hexdigest>`` in the ``x-signature`` header.
Missing material is a failed check, never a pass.
"""

import hashlib
import hmac

import structlog

logger = structlog.get_logger(__name__)


def parse_signature_header(header: str | None) -> dict[str, str]:
    parts = {}
    for chunk in (header or "").split(","):
        key, sep, value = chunk.strip().partition("=")
        if sep and key:
            parts[key.strip()] = value.strip()
    return parts


def build_manifest(data_id: str, request_id: str, ts: str) -> str:
    return f"id:{data_id};request-id:{request_id};ts:{ts};"


def sign(secret: str, data_id: str, request_id: str, ts: str) -> str:
    manifest = build_manifest(data_id, request_id, ts)
    return hmac.new(secret.encode(), manifest.encode(), hashlib.sha256).hexdigest()


def verify_signature(
    secret: str | None,
    signature_header: str | None,
    request_id: str | None,
    data_id: str | None,
) -> bool:
    if not secret:
        logger.error("Webhook secret is not configured; rejecting notification")
        return False

    parts = parse_signature_header(signature_header)
    ts = parts.get("ts")
    received = parts.get("v1")
    if not (ts and received and request_id and data_id):
        logger.warning(
            "Webhook signature material missing",
            has_ts=bool(ts),
            has_v1=bool(received),
            has_request_id=bool(request_id),
            has_data_id=bool(data_id),
        )
        return False

    expected = sign(secret, data_id, request_id, ts)
    if not hmac.compare_digest(expected, received):
        logger.warning("Webhook signature mismatch", data_id=data_id, request_id=request_id)
        return False
    return True
