import logging

from starlette.datastructures import UploadFile

from schemas.insurance_policy import UploadedDocument
from services.errors import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "policy_file"

# Room for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def file_extension(file_name: str) -> str:
    """Lowercase final dot-segment of a filename, or "" when there is none."""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def read_upload(upload: UploadFile, max_bytes: int) -> UploadedDocument:
    """Read the spooled upload fully into memory."""
    upload.file.seek(0)
    # One byte past the cap is enough to know the file is too big
    content = upload.file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError(
            f"File too large (maximum {max_bytes // (1024 * 1024)} MB)",
            status_code=413,
        )

    file_name = upload.filename or ""
    document = UploadedDocument(
        content=content,
        filename=file_name,
        extension=file_extension(file_name),
    )
    logger.info(
        "Processing file: %s (%s, %d bytes)",
        document.filename, document.extension or "no extension", document.size,
    )
    return document


def check_content_length(content_length, max_bytes: int) -> None:
    """Reject a request whose declared body is bigger than any allowed upload."""
    if content_length is None:
        return
    try:
        declared = int(content_length)
    except ValueError:
        return
    if declared > max_bytes + MULTIPART_OVERHEAD_BYTES:
        raise ValidationError(
            f"File too large (maximum {max_bytes // (1024 * 1024)} MB)",
            status_code=413,
        )
