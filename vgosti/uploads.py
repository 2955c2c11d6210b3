# vgosti/uploads.py
"""Image storage shared by the upload API and the admin console."""

import logging
import os
import random
import re
import time
from typing import List, Optional

from fastapi import UploadFile

from vgosti.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class UploadRejected(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def upload_dir() -> str:
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    return settings.UPLOAD_DIR


def safe_extension(filename: Optional[str]) -> str:
    """Extension of the bare file name only; directory parts are dropped."""
    base = os.path.basename((filename or "").replace("\\", "/"))
    ext = os.path.splitext(base)[1]
    return ext.lower() if _EXTENSION.match(ext) else ""


def generate_filename(original: Optional[str], field: str = "image") -> str:
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
    return f"{field}-{unique_suffix}{safe_extension(original)}"


def is_image(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


class CheckedImage:
    """An upload that passed the type and size checks, held in memory until written."""

    def __init__(self, filename: str, data: bytes, field: str = "image"):
        self.filename = filename
        self.data = data
        self.field = field


def read_image(upload: Optional[UploadFile], field: str = "image") -> CheckedImage:
    """Check type and size and buffer the content. Nothing touches the disk here."""
    if upload is None or not upload.filename:
        raise UploadRejected(400, "No file uploaded")
    if not is_image(upload.content_type):
        raise UploadRejected(415, "Only image files are allowed!")

    data = bytearray()
    while True:
        chunk = upload.file.read(CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > settings.MAX_UPLOAD_SIZE:
            raise UploadRejected(413, f"File exceeds the {settings.MAX_UPLOAD_SIZE} byte limit")

    return CheckedImage(upload.filename, bytes(data), field)


def write_image(image: CheckedImage) -> str:
    filename = generate_filename(image.filename, image.field)
    path = os.path.join(upload_dir(), filename)
    with open(path, "wb") as f:
        f.write(image.data)

    logger.info(f"Stored upload {filename} ({len(image.data)} bytes)")
    return f"{settings.UPLOAD_URL_PREFIX}/{filename}"


def store_image(upload: Optional[UploadFile], field: str = "image") -> str:
    """Validate and persist one uploaded image, returning its public URL."""
    return write_image(read_image(upload, field))


def discard_images(urls: List[str]) -> None:
    """Remove files written for a request that was not accepted after all."""
    prefix = settings.UPLOAD_URL_PREFIX + "/"
    for url in urls:
        if not url.startswith(prefix):
            continue
        path = os.path.join(settings.UPLOAD_DIR, os.path.basename(url))
        if os.path.exists(path):
            os.remove(path)
            logger.info(f"Discarded upload {os.path.basename(url)}")
