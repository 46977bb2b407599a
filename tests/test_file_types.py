import pytest

from pagemark.core.document import FileType, read_file, read_image_size, sniff_file_type
from pagemark.core.errors import UnsupportedFileType


def test_sniffs_png(make_png):
    assert sniff_file_type(make_png(4, 4)) is FileType.PNG


def test_sniffs_jpeg_marker():
    assert sniff_file_type(b"\xff\xd8\xff\xe0\x00\x10JFIF") is FileType.JPEG


def test_sniffs_pdf(make_pdf):
    assert sniff_file_type(make_pdf()) is FileType.PDF


def test_pdf_header_may_follow_leading_bytes():
    assert sniff_file_type(b"\x00" * 100 + b"%PDF-1.7\n") is FileType.PDF


@pytest.mark.parametrize("data", [b"", b"GIF89a", b"plain text", b"\x00" * 2000 + b"%PDF-1.7"])
def test_unsupported_data(data):
    with pytest.raises(UnsupportedFileType):
        sniff_file_type(data)


def test_error_names_the_file():
    with pytest.raises(UnsupportedFileType, match="notes.txt"):
        sniff_file_type(b"hello", "notes.txt")


def test_mime_types():
    assert FileType.PNG.mime_type == "image/png"
    assert FileType.JPEG.mime_type == "image/jpeg"
    assert FileType.PDF.is_image is False
    assert FileType.JPEG.is_image is True


def test_read_file(tmp_path, make_png):
    path = tmp_path / "figure.png"
    data = make_png(3, 2)
    path.write_bytes(data)
    assert read_file(path) == (FileType.PNG, data)


def test_read_file_rejects_other_formats(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(UnsupportedFileType):
        read_file(path)


def test_image_size(make_png):
    assert read_image_size(make_png(40, 25)) == (40, 25)


def test_corrupt_image_is_unsupported():
    with pytest.raises(UnsupportedFileType):
        read_image_size(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)
