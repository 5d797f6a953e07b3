"""Storage backend clients: S3 (or S3-compatible) via boto3, or local disk."""

from __future__ import annotations

import os
from pathlib import Path

import boto3
from botocore.client import BaseClient
from botocore.config import Config

from desktown.core.config import settings


def _endpoint() -> str | None:
    return settings.S3_ENDPOINT_URL.rstrip("/") if settings.S3_ENDPOINT_URL else None


def _s3_config() -> Config | None:
    style = (settings.S3_URL_STYLE or "").strip().lower()
    if style in {"path", "virtual"}:
        return Config(s3={"addressing_style": style})
    return None


def get_s3_client() -> BaseClient:
    """S3 client for the object bucket; honours S3_ENDPOINT_URL for MinIO/R2."""
    return boto3.client(
        "s3",
        region_name=settings.S3_REGION or None,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        endpoint_url=_endpoint(),
        config=_s3_config(),
    )


def backend() -> str:
    return (settings.STORAGE_BACKEND or "local").strip().lower()


def local_root() -> Path:
    root = Path(settings.LOCAL_STORAGE_PATH)
    os.makedirs(root, exist_ok=True)
    return root.resolve()


def local_path(object_path: str) -> Path:
    """
    Absolute path for an object on local disk.

    Raises:
        ValueError: object_path escapes the storage root
    """
    root = local_root()
    path = (root / object_path).resolve()
    if root not in path.parents:
        raise ValueError("Invalid object path")
    return path
