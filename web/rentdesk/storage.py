# web/rentdesk/storage.py
import datetime
import io
import logging
import pathlib
import re
import time

from minio import Minio
from minio.error import S3Error

from .core import get_settings, ValidationError

logger = logging.getLogger(__name__)

settings = get_settings()

ENDPOINT = settings.S3_ENDPOINT
BUCKET = settings.S3_BUCKET
PUBLIC_ENDPOINT = settings.PUBLIC_S3_ENDPOINT or ENDPOINT

SECURE_ENV = settings.S3_SECURE
# Choose secure flag automatically unless explicitly specified
if not SECURE_ENV:
    SECURE_ENV = not ENDPOINT.startswith("minio") and not ENDPOINT.startswith("localhost")

client_kwargs = {
    "access_key": settings.S3_ACCESS_KEY,
    "secret_key": settings.S3_SECRET_KEY,
    "secure": SECURE_ENV,
}
if settings.S3_REGION:
    client_kwargs["region"] = settings.S3_REGION

client = Minio(ENDPOINT, **client_kwargs)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(filename: str | None) -> str:
    name = pathlib.Path(filename or "file").name
    return _UNSAFE.sub("_", name) or "file"


def _size_of(upload_file) -> int:
    upload_file.file.seek(0, 2)
    size = upload_file.file.tell()
    upload_file.file.seek(0)
    return size


def validate_image(upload_file, max_bytes: int | None = None) -> None:
    """Reject anything that is not an image or is larger than the image limit"""
    max_bytes = max_bytes or settings.MAX_IMAGE_BYTES
    if not (upload_file.content_type or "").startswith("image/"):
        raise ValidationError(f"{upload_file.filename} is not an image", field="files")
    if _size_of(upload_file) > max_bytes:
        raise ValidationError(
            f"{upload_file.filename} exceeds {max_bytes // (1024 * 1024)}MB", field="files"
        )


def validate_attachment(upload_file, max_bytes: int | None = None) -> None:
    max_bytes = max_bytes or settings.MAX_ATTACHMENT_BYTES
    if _size_of(upload_file) > max_bytes:
        raise ValidationError(
            f"{upload_file.filename} exceeds {max_bytes // (1024 * 1024)}MB", field="attachments"
        )


def upload_file(upload_file, prefix: str) -> str:
    """Upload FastAPI UploadFile under *prefix* → returns object key"""
    object_name = f"{prefix}/{int(time.time() * 1000)}_{_safe_name(upload_file.filename)}"
    upload_file.file.seek(0)
    client.put_object(
        bucket_name=BUCKET,
        object_name=object_name,
        data=upload_file.file,
        length=-1,                      # multipart
        part_size=10 * 1024 * 1024,
        content_type=upload_file.content_type or "application/octet-stream",
    )
    return object_name


def put_bytes(object_name: str, data: bytes, content_type: str = "application/pdf") -> str:
    """Store raw bytes (generated documents) → returns object key"""
    client.put_object(
        bucket_name=BUCKET,
        object_name=object_name,
        data=io.BytesIO(data),
        length=len(data),
        content_type=content_type,
    )
    return object_name


def delete_object(object_name: str) -> bool:
    """Remove *object_name* from the bucket; a missing object is only logged."""
    try:
        client.remove_object(BUCKET, object_name)
    except S3Error as exc:
        logger.warning("Could not delete %s from storage: %s", object_name, exc)
        return False
    return True


def presigned(object_name, seconds=3600):
    # For browser access, use the public endpoint
    if PUBLIC_ENDPOINT != ENDPOINT:
        scheme = "https" if SECURE_ENV else "http"
        return f"{scheme}://{PUBLIC_ENDPOINT}/{BUCKET}/{object_name}"
    return client.presigned_get_object(
        BUCKET, object_name,
        expires=datetime.timedelta(seconds=seconds)
    )


def bucket_ok() -> bool:
    return client.bucket_exists(BUCKET)
