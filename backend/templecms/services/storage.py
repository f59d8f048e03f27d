"""S3 / MinIO object storage for admin uploads.

Keys are always server-built as ``uploads/{uuid}-{safe_name}``; the client
only supplies the original file name.
"""

import logging
import os
import uuid
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from templecms.core.config import settings
from templecms.core.exceptions import GatewayUnavailableError

logger = logging.getLogger(__name__)

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
    }
)


_minio_cred_warned = False


def _get_s3_client():  # type: ignore[no-untyped-def]
    global _minio_cred_warned  # noqa: PLW0603
    config_kwargs: dict = {"signature_version": "s3v4"}
    if settings.S3_ENDPOINT_URL:
        config_kwargs["s3"] = {"addressing_style": "path"}
    kwargs: dict = {
        "service_name": "s3",
        "region_name": settings.AWS_REGION,
        "config": Config(**config_kwargs),
    }
    if settings.S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY

    if settings.S3_ENDPOINT_URL and not _minio_cred_warned:
        env_key = os.environ.get("AWS_ACCESS_KEY_ID", "")
        if env_key.startswith("AKIA") and (
            not settings.AWS_ACCESS_KEY_ID or settings.AWS_ACCESS_KEY_ID.startswith("AKIA")
        ):
            logger.warning(
                "S3_ENDPOINT_URL points to MinIO but AWS_ACCESS_KEY_ID looks like a real "
                "AWS key (AKIA...). Uploads will be signed with AWS creds and fail "
                "against MinIO."
            )
        _minio_cred_warned = True

    return boto3.client(**kwargs)


def build_upload_key(file_name: str) -> str:
    safe_name = quote(os.path.basename(file_name).strip().replace(" ", "_"), safe="._-")
    return f"uploads/{uuid.uuid4()}-{safe_name or 'file'}"


def public_url(key: str) -> str:
    """URL browsers use to fetch an uploaded object."""
    endpoint = settings.S3_PUBLIC_ENDPOINT or settings.S3_ENDPOINT_URL
    if endpoint:
        return f"{endpoint.rstrip('/')}/{settings.S3_BUCKET}/{key}"
    return f"https://{settings.S3_BUCKET}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


def put_object(key: str, data: bytes, content_type: str) -> str:
    """Store bytes under ``key`` and return the public URL."""
    client = _get_s3_client()
    try:
        client.put_object(
            Bucket=settings.S3_BUCKET,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("S3 put_object failed for %s: %s", key, exc)
        raise GatewayUnavailableError("File storage is unavailable, please retry") from exc
    logger.info("Stored upload %s (%d bytes)", key, len(data))
    return public_url(key)


def delete_object(key: str) -> None:
    """Best-effort delete of an S3 object."""
    client = _get_s3_client()
    try:
        client.delete_object(Bucket=settings.S3_BUCKET, Key=key)
    except (BotoCoreError, ClientError) as exc:
        logger.warning("S3 delete_object failed for %s: %s", key, exc)
