"""Shared AWS helpers for service clients."""

from __future__ import annotations

import base64
from typing import Any, Optional

import boto3

from agrovoice.config.settings import settings


def decode_bedrock_api_key(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode a base64 ``access:secret`` pair such as BEDROCK_API_KEY."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except ValueError:
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    if not access_key or not secret_key:
        return None
    return access_key, secret_key


def static_credentials() -> tuple[str, str] | None:
    """Return the S3 key pair when both halves are configured."""

    if settings.s3.access_key and settings.s3.secret_key:
        return settings.s3.access_key, settings.s3.secret_key
    return None


def default_credentials_available() -> bool:
    """Return whether boto3 resolves credentials (env, profile, instance role)."""

    return boto3.Session().get_credentials() is not None


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
    credentials: tuple[str, str] | None = None,
) -> Any:
    """Instantiate a boto3 client using explicit or configured credentials."""

    client_kwargs: dict[str, Any] = {"region_name": region_name or settings.s3.region}
    key_pair = credentials or static_credentials()
    if key_pair:
        client_kwargs["aws_access_key_id"] = key_pair[0]
        client_kwargs["aws_secret_access_key"] = key_pair[1]
    return boto3.client(service_name, **client_kwargs)


__all__ = [
    "create_boto3_client",
    "decode_bedrock_api_key",
    "default_credentials_available",
    "static_credentials",
]
