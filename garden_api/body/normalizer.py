"""
Body Normalizer
===============
Decodes raw PUT bodies into the same field mapping POST requests get.

Most transports only decode form data for POST, so PUT bodies arrive as raw
bytes, either URL-encoded or multipart.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
from urllib.parse import parse_qsl

import structlog

from .uploads import StoredUpload, store_upload

logger = structlog.get_logger(__name__)

CRLF = b"\r\n"
HEADER_SEPARATOR = b"\r\n\r\n"
CLOSING_SENTINEL = b"--\r\n"
UPLOAD_FIELD = "userfile"

DISPOSITION_PATTERN = re.compile(r'^(.+); *name="([^"]+)"(; *filename="([^"]+)")?')
BOUNDARY_PARAM_PATTERN = re.compile(r'boundary="?([^";]+)"?', re.IGNORECASE)


@dataclass
class NormalizedBody:
    """Decoded body fields plus any files written while decoding."""
    fields: Dict[str, str] = field(default_factory=dict)
    uploads: List[StoredUpload] = field(default_factory=list)


def detect_boundary(raw_body: bytes, content_type: Optional[str] = None) -> bytes:
    """
    Find the multipart boundary line at the start of a body.

    The first line of the body is authoritative. A ``boundary=`` parameter
    in the content type is only used to confirm it.

    Returns:
        The boundary line (including its leading dashes), or ``b""``
    """
    end = raw_body.find(CRLF)
    if end <= 0:
        return b""

    boundary = raw_body[:end]
    if not boundary.startswith(b"--"):
        return b""

    if content_type:
        match = BOUNDARY_PARAM_PATTERN.search(content_type)
        if match and boundary != b"--" + match.group(1).encode():
            logger.warning(
                "multipart_boundary_mismatch",
                declared=match.group(1),
                found=boundary.decode("latin-1"),
            )
    return boundary


def parse_urlencoded(raw_body: bytes) -> Dict[str, str]:
    """Parse a URL-encoded form body; chunks without ``=`` are ignored."""
    text = raw_body.decode("utf-8", errors="replace")
    pairs = [chunk for chunk in text.split("&") if "=" in chunk]
    return dict(parse_qsl("&".join(pairs), keep_blank_values=True))


def parse_part_headers(raw_headers: bytes) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for line in raw_headers.split(CRLF):
        name, sep, value = line.decode("utf-8", errors="replace").partition(":")
        if not sep:
            continue
        headers[name.strip().lower()] = value.lstrip(" ")
    return headers


def parse_multipart(
    raw_body: bytes,
    boundary: bytes,
    upload_dir: Union[str, Path, None] = None,
) -> NormalizedBody:
    """
    Split a multipart body on its boundary and decode each part.

    Parts without a header block or with an unrecognised
    ``content-disposition`` are skipped.
    """
    result = NormalizedBody()

    for index, part in enumerate(raw_body.split(boundary)[1:]):
        if part.startswith(CLOSING_SENTINEL) or part == b"--":
            break

        part = part.lstrip(CRLF)
        if HEADER_SEPARATOR not in part:
            logger.warning("multipart_part_skipped", part=index, reason="no_header_block")
            continue

        raw_headers, content = part.split(HEADER_SEPARATOR, 1)
        headers = parse_part_headers(raw_headers)

        disposition = headers.get("content-disposition")
        if disposition is None:
            logger.warning("multipart_part_skipped", part=index, reason="no_disposition")
            continue

        match = DISPOSITION_PATTERN.match(disposition)
        if match is None:
            logger.warning(
                "multipart_part_skipped",
                part=index,
                reason="unrecognised_disposition",
                disposition=disposition,
            )
            continue

        name, filename = match.group(2), match.group(4)

        if name == UPLOAD_FIELD:
            if filename is None:
                logger.warning("multipart_part_skipped", part=index, reason="upload_without_filename")
                continue
            stored = store_upload(upload_dir or ".", name, filename, content)
            if stored is not None:
                result.uploads.append(stored)
            continue

        # Drop the line terminator that precedes the next boundary
        result.fields[name] = content[:-2].decode("utf-8", errors="replace")

    return result


def normalize_body(
    raw_body: bytes,
    content_type: Optional[str] = None,
    upload_dir: Union[str, Path, None] = None,
) -> NormalizedBody:
    """
    Decode a raw request body into form fields.

    Args:
        raw_body: Body bytes as received
        content_type: Content-Type header, if any
        upload_dir: Where ``userfile`` uploads are written

    Returns:
        NormalizedBody with the decoded fields and stored uploads
    """
    if not raw_body:
        return NormalizedBody()

    boundary = detect_boundary(raw_body, content_type)
    if not boundary:
        return NormalizedBody(fields=parse_urlencoded(raw_body))

    return parse_multipart(raw_body, boundary, upload_dir)
