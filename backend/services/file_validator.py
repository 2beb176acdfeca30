"""Upload shape checks, run before any byte decoding."""

from models.requests import AnalyzeProfileRequest, FileUpload
from services.pdf_parser import decoded_size


def validate_upload(upload: FileUpload, max_bytes: int) -> str | None:
    """Return the first problem with an upload, or None if it is acceptable.

    The size limit applies to both the declared size and the length the
    payload actually decodes to.
    """
    if not upload.name.strip():
        return "File name is required"
    if "pdf" not in upload.mime_type:
        return "File must be a PDF"
    if upload.size_bytes <= 0:
        return "File size must be positive"
    too_large = f"File size exceeds maximum allowed size ({max_bytes / 1024 / 1024:g}MB)"
    if upload.size_bytes > max_bytes:
        return too_large
    if not upload.data:
        return "File data is required"
    if decoded_size(upload.data) > max_bytes:
        return too_large
    return None


def validate_request(request: AnalyzeProfileRequest, max_bytes: int) -> list[str]:
    """Validate both documents; each message names the file it belongs to."""
    problems = []
    for label, upload in (
        ("Job description file", request.job_description),
        ("CV file", request.cv),
    ):
        error = validate_upload(upload, max_bytes)
        if error:
            problems.append(f"{label}: {error}")
    return problems
