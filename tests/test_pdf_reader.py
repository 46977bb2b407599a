import pytest

from pagemark.core.document import PDFDocumentReader
from pagemark.core.errors import DocumentLoadFailure


def test_load_bytes_reports_page_count(make_pdf):
    reader = PDFDocumentReader()
    assert reader.load_bytes(make_pdf((400, 600), (300, 300))) == 2
    assert reader.is_open
    assert reader.page_size(1) == (400, 600)
    assert reader.page_size(2) == (300, 300)


def test_invalid_pages(make_pdf):
    reader = PDFDocumentReader()
    reader.load_bytes(make_pdf())
    assert reader.get_page(0) is None
    assert reader.get_page(2) is None
    assert reader.page_size(5) == (0.0, 0.0)
    assert reader.render_page(2, 1.0) is None


def test_render_page_at_scale(make_pdf):
    reader = PDFDocumentReader()
    reader.load_bytes(make_pdf((400, 600)))
    pix = reader.render_page(1, 2.0)
    assert (pix.width, pix.height) == (800, 1200)
    assert pix.alpha == 0


def test_garbage_fails_and_leaves_nothing_open(make_pdf):
    reader = PDFDocumentReader()
    reader.load_bytes(make_pdf())
    with pytest.raises(DocumentLoadFailure):
        reader.load_bytes(b"%PDF-1.7 this is not a document")
    assert not reader.is_open
    assert reader.source_bytes is None


def test_load_pdf_from_disk(tmp_path, make_pdf):
    path = tmp_path / "doc.pdf"
    path.write_bytes(make_pdf())
    reader = PDFDocumentReader()
    assert reader.load_pdf(path) == 1
    assert reader.current_file_path == str(path)


def test_missing_file_fails(tmp_path):
    with pytest.raises(DocumentLoadFailure):
        PDFDocumentReader().load_pdf(tmp_path / "missing.pdf")


def test_close_document(make_pdf):
    reader = PDFDocumentReader()
    reader.load_bytes(make_pdf())
    reader.close_document()
    assert not reader.is_open
    assert reader.total_pages == 0
