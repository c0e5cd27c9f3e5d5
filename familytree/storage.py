"""Photo uploads stored on local disk under generated names."""
import logging
import os
import time
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

UPLOAD_DIR = Path(os.environ.get("UPLOAD_DIR", "./uploads"))
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
UPLOAD_URL_PREFIX = "/uploads"
DEFAULT_EXTENSION = "jpg"
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
READ_CHUNK_BYTES = 64 * 1024


def file_extension(filename: str | None) -> str:
    """
    Lower-cased image extension of the client filename, jpg when there is none.
    Raises ValueError for anything that is not an image extension.
    """
    if not filename or "." not in filename:
        return DEFAULT_EXTENSION
    ext = filename.rsplit(".", 1)[1].strip().lower()
    if ext not in IMAGE_EXTENSIONS:
        raise ValueError("Only image uploads are accepted (jpg, jpeg, png, gif, webp)")
    return ext


def generate_filename(filename: str | None) -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{file_extension(filename)}"


def save_upload(filename: str | None, data: bytes) -> str:
    """Write an uploaded file and return the URL it is served from."""
    if not data:
        raise ValueError("Uploaded file is empty")
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValueError(f"File is too large (max {MAX_UPLOAD_BYTES} bytes)")
    name = generate_filename(filename)
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    (UPLOAD_DIR / name).write_bytes(data)
    logger.info("Stored upload %s (%d bytes)", name, len(data))
    return f"{UPLOAD_URL_PREFIX}/{name}"


def upload_path(name: str) -> Path | None:
    """Path of a stored upload, or None for unknown or unsafe names."""
    if not name or Path(name).name != name or name.startswith("."):
        return None
    if name.rsplit(".", 1)[-1].lower() not in IMAGE_EXTENSIONS:
        return None
    path = UPLOAD_DIR / name
    if not path.is_file():
        return None
    return path


async def read_limited(upload, limit: int | None = None) -> bytes:
    """Read an UploadFile in chunks, giving up as soon as it exceeds the limit."""
    limit = MAX_UPLOAD_BYTES if limit is None else limit
    data = bytearray()
    while True:
        chunk = await upload.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > limit:
            raise ValueError(f"File is too large (max {limit} bytes)")
    return bytes(data)
