import mimetypes
import time
from pathlib import Path

from fastapi import UploadFile
from loguru import logger

from ..core.exceptions import UploadRejectedError
from .invoice_types import StoredUpload


def guess_mime_type(file_name: str, declared: str | None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or "application/octet-stream"


async def save_upload(
    file: UploadFile | None,
    upload_dir: str | Path,
    allowed_extensions: set[str],
    max_bytes: int,
) -> StoredUpload:
    """
    Validate an uploaded file and write it to the upload directory.

    The stored name is prefixed with the upload time in milliseconds so two
    uploads with the same original name do not collide. The file is kept on
    disk even if extraction fails later.

    Raises:
        UploadRejectedError: no file, disallowed extension or file too large
    """
    if file is None or not file.filename:
        raise UploadRejectedError("No file uploaded")

    original_name = Path(file.filename).name
    extension = Path(original_name).suffix.lower()
    if extension not in allowed_extensions:
        allowed = " / ".join(sorted(ext.lstrip(".").upper() for ext in allowed_extensions))
        logger.warning("Rejected upload with disallowed extension", file=original_name)
        raise UploadRejectedError(f"Only {allowed} allowed")

    # Read one byte past the limit to detect oversized files without buffering them whole
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        logger.warning("Rejected oversized upload", file=original_name, limit=max_bytes)
        raise UploadRejectedError("File too large", details=f"Maximum upload size is {max_bytes} bytes")

    target_dir = Path(upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = (target_dir / f"{int(time.time() * 1000)}-{original_name}").resolve()
    target.write_bytes(content)

    logger.info("Stored upload", file=original_name, path=str(target), size=len(content))
    return StoredUpload(
        path=target,
        original_name=original_name,
        mime_type=guess_mime_type(original_name, file.content_type),
        size=len(content),
    )
