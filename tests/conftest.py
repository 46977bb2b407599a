"""Shared pytest fixtures for the pagemark test suite.

Fixtures:
    session: Session with a three-page document loaded, page 1 displayed
        at 800 x 1000 px, and deterministic annotation ids (t-1, t-2, ...)
    machine: Interaction state machine bound to that session
    make_png: Factory for PNG bytes of a given size, encoded by PyMuPDF
    make_pdf: Factory for PDF bytes with pages of given sizes
    qapp: The Qt application object that signals and worker threads need
"""
import fitz  # PyMuPDF
import pytest
from PyQt5.QtCore import QCoreApplication

from pagemark.core.annotations import AnnotationStore, SequentialIds, Viewport
from pagemark.core.interaction import InteractionStateMachine
from pagemark.core.session import AnnotationSession

VIEWPORT = Viewport(800, 1000)


@pytest.fixture
def store():
    return AnnotationStore(id_factory=SequentialIds("t"))


@pytest.fixture
def session(store):
    session = AnnotationSession(store=store)
    session.start_document(3)
    session.set_page_geometry(1, VIEWPORT)
    return session


@pytest.fixture
def machine(session):
    return InteractionStateMachine(session)


@pytest.fixture
def make_png():
    def _make(width, height):
        pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
        pix.clear_with(200)
        return pix.tobytes("png")
    return _make


@pytest.fixture
def make_pdf():
    def _make(*sizes):
        doc = fitz.open()
        for width, height in sizes or [(400, 600)]:
            doc.new_page(width=width, height=height)
        data = doc.tobytes()
        doc.close()
        return data
    return _make


@pytest.fixture
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])
