"""
Upload Storage
==============
Writes files received in multipart PUT bodies to the upload directory.

Client filenames are reduced to their base name and never overwrite an
existing file; a random suffix is added on collision.
"""

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

MAX_COLLISION_ATTEMPTS = 5


@dataclass
class StoredUpload:
    """A file written out of band while normalizing a body."""
    field: str
    client_filename: str
    path: Path
    size: int


def safe_filename(filename: str) -> Optional[str]:
    """
    Reduce a client-supplied filename to a bare name.

    Returns:
        The base name, or None if nothing usable is left
    """
    name = os.path.basename(filename.replace("\\", "/")).strip()
    if name in ("", ".", ".."):
        return None
    if "\x00" in name:
        return None
    return name


def _with_suffix(name: str) -> str:
    stem, ext = os.path.splitext(name)
    return f"{stem}-{uuid.uuid4().hex[:8]}{ext}"


def store_upload(
    directory: Union[str, Path],
    field: str,
    filename: str,
    content: bytes,
) -> Optional[StoredUpload]:
    """
    Write upload content verbatim into ``directory``.

    Args:
        directory: Upload directory, created if missing
        field: Form field the file came from
        filename: Filename sent by the client
        content: Raw part content

    Returns:
        StoredUpload, or None if the filename was rejected
    """
    name = safe_filename(filename)
    if name is None:
        logger.warning("upload_rejected_filename", field=field, filename=filename)
        return None

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    candidate = name
    for _ in range(MAX_COLLISION_ATTEMPTS):
        path = target_dir / candidate
        try:
            with open(path, "xb") as handle:
                handle.write(content)
        except FileExistsError:
            candidate = _with_suffix(name)
            continue
        logger.info("upload_stored", field=field, path=str(path), size=len(content))
        return StoredUpload(field=field, client_filename=filename, path=path, size=len(content))

    raise FileExistsError(f"Could not find a free name for upload {name!r} in {target_dir}")


def discard_uploads(uploads: Iterable[StoredUpload], reason: str) -> None:
    """Remove files stored for a request that was rejected afterwards."""
    for upload in uploads:
        upload.path.unlink(missing_ok=True)
        logger.warning("upload_discarded", field=upload.field, path=str(upload.path), reason=reason)
