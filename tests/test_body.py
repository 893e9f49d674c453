"""
Unit Tests for Body Normalization
=================================
URL-encoded and multipart PUT bodies, and upload storage.
"""

from garden_api.body import (
    detect_boundary,
    normalize_body,
    safe_filename,
    store_upload,
)

BOUNDARY = b"------WebKitFormBoundary7MA4YWxkTrZu0gW"


def multipart(*parts: bytes) -> bytes:
    body = b""
    for part in parts:
        body += BOUNDARY + b"\r\n" + part + b"\r\n"
    return body + BOUNDARY + b"--\r\n"


def field_part(name: str, value: bytes) -> bytes:
    return (
        f'Content-Disposition: form-data; name="{name}"'.encode()
        + b"\r\n\r\n"
        + value
    )


def file_part(name: str, filename: str, content: bytes) -> bytes:
    return (
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"'.encode()
        + b"\r\nContent-Type: text/plain\r\n\r\n"
        + content
    )


class TestURLEncoded:
    """Tests for the URL-encoded fallback."""

    def test_simple_pairs(self):
        assert normalize_body(b"a=1&b=2").fields == {"a": "1", "b": "2"}

    def test_percent_decoding(self):
        body = b"title=Hello+World&tag=%C3%A9t%C3%A9"

        assert normalize_body(body).fields == {"title": "Hello World", "tag": "été"}

    def test_blank_value_kept(self):
        assert normalize_body(b"a=&b=2").fields == {"a": "", "b": "2"}

    def test_no_pairs_gives_empty_mapping(self):
        assert normalize_body(b"just some text").fields == {}

    def test_empty_body(self):
        result = normalize_body(b"")

        assert result.fields == {}
        assert result.uploads == []

    def test_repeated_key_last_wins(self):
        assert normalize_body(b"a=1&a=2").fields == {"a": "2"}


class TestMultipart:
    """Tests for multipart bodies."""

    def test_single_field(self):
        """name="a" with body x normalizes to {a: x}."""
        body = multipart(field_part("a", b"x"))

        assert normalize_body(body).fields == {"a": "x"}

    def test_several_fields(self):
        body = multipart(
            field_part("title", b"Release notes"),
            field_part("body", b"line one\r\nline two"),
        )

        assert normalize_body(body).fields == {
            "title": "Release notes",
            "body": "line one\r\nline two",
        }

    def test_boundary_detection(self):
        body = multipart(field_part("a", b"x"))

        assert detect_boundary(body) == BOUNDARY
        assert detect_boundary(b"a=1&b=2") == b""

    def test_content_type_hint_does_not_override_body(self):
        body = multipart(field_part("a", b"x"))
        content_type = "multipart/form-data; boundary=something-else"

        assert normalize_body(body, content_type).fields == {"a": "x"}

    def test_unmatched_disposition_skipped(self):
        body = multipart(
            b"Content-Disposition: attachment\r\n\r\nignored",
            field_part("a", b"kept"),
        )

        assert normalize_body(body).fields == {"a": "kept"}

    def test_part_without_headers_skipped(self):
        body = multipart(b"no header block here", field_part("a", b"kept"))

        assert normalize_body(body).fields == {"a": "kept"}

    def test_part_without_disposition_skipped(self):
        body = multipart(b"Content-Type: text/plain\r\n\r\nvalue", field_part("a", b"kept"))

        assert normalize_body(body).fields == {"a": "kept"}

    def test_file_in_other_field_is_kept_as_value(self):
        body = multipart(file_part("attachment", "notes.txt", b"hello"))

        assert normalize_body(body).fields == {"attachment": "hello"}


class TestUploads:
    """Tests for userfile uploads."""

    def test_userfile_written_and_excluded(self, tmp_path):
        body = multipart(
            file_part("userfile", "avatar.txt", b"file content"),
            field_part("a", b"x"),
        )

        result = normalize_body(body, upload_dir=tmp_path)

        assert result.fields == {"a": "x"}
        assert len(result.uploads) == 1
        upload = result.uploads[0]
        assert upload.path == tmp_path / "avatar.txt"
        # written verbatim, terminator included
        assert upload.path.read_bytes() == b"file content\r\n"

    def test_path_traversal_reduced_to_basename(self, tmp_path):
        body = multipart(file_part("userfile", "../../etc/passwd", b"x"))

        result = normalize_body(body, upload_dir=tmp_path)

        assert result.uploads[0].path == tmp_path / "passwd"
        assert result.uploads[0].client_filename == "../../etc/passwd"

    def test_existing_file_not_overwritten(self, tmp_path):
        (tmp_path / "avatar.txt").write_bytes(b"original")
        body = multipart(file_part("userfile", "avatar.txt", b"new"))

        result = normalize_body(body, upload_dir=tmp_path)

        assert (tmp_path / "avatar.txt").read_bytes() == b"original"
        stored = result.uploads[0].path
        assert stored != tmp_path / "avatar.txt"
        assert stored.name.startswith("avatar-")
        assert stored.suffix == ".txt"

    def test_userfile_without_filename_skipped(self, tmp_path):
        body = multipart(field_part("userfile", b"data"), field_part("a", b"x"))

        result = normalize_body(body, upload_dir=tmp_path)

        assert result.fields == {"a": "x"}
        assert result.uploads == []

    def test_safe_filename(self):
        assert safe_filename("report.pdf") == "report.pdf"
        assert safe_filename("..\\..\\boot.ini") == "boot.ini"
        assert safe_filename("..") is None
        assert safe_filename("dir/") is None

    def test_store_upload_rejects_bad_name(self, tmp_path):
        assert store_upload(tmp_path, "userfile", "..", b"x") is None
        assert list(tmp_path.iterdir()) == []
