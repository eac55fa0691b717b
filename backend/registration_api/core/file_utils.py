"""File handling utilities for multipart uploads."""

from starlette.datastructures import UploadFile

from registration_api.core.exceptions import FileTooLargeError


async def read_file_with_size_limit(
    file: UploadFile,
    max_size_bytes: int,
    chunk_size: int = 64 * 1024,
) -> bytes:
    """
    Read file content with streaming size validation.

    Uses the part's declared size when available, and otherwise stops reading
    as soon as the running total passes the limit.

    Args:
        file: Starlette/FastAPI UploadFile object
        max_size_bytes: Maximum allowed file size in bytes
        chunk_size: Size of chunks to read (default 64KB)

    Returns:
        File content as bytes

    Raises:
        FileTooLargeError: If the file exceeds max_size_bytes
    """
    max_mb = max_size_bytes / (1024 * 1024)
    message = f"File too large. Maximum size is {max_mb:.0f}MB"

    if file.size is not None and file.size > max_size_bytes:
        raise FileTooLargeError(message, filename=file.filename)

    chunks: list[bytes] = []
    total_size = 0

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break

        total_size += len(chunk)
        if total_size > max_size_bytes:
            raise FileTooLargeError(message, filename=file.filename)

        chunks.append(chunk)

    return b"".join(chunks)
