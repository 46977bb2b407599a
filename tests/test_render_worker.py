from pagemark.core.document.render_worker import RenderWorker


def _run(worker):
    rendered, failed = [], []
    worker.rendered.connect(lambda page, image, scale: rendered.append((page, image, scale)))
    worker.failed.connect(lambda page, message: failed.append((page, message)))
    worker.run()
    return rendered, failed


def test_renders_page_at_scale(qapp, make_pdf):
    rendered, failed = _run(RenderWorker(make_pdf((400, 600), (200, 200)), 2, 1.5))

    assert failed == []
    ((page, image, scale),) = rendered
    assert (page, scale) == (2, 1.5)
    assert (image.width(), image.height()) == (300, 300)


def test_missing_page_is_reported(qapp, make_pdf):
    rendered, failed = _run(RenderWorker(make_pdf(), 4, 1.0))
    assert rendered == []
    assert failed[0][0] == 4
    assert "page 4" in failed[0][1]


def test_unreadable_document_is_reported(qapp):
    rendered, failed = _run(RenderWorker(b"not a pdf", 1, 1.0))
    assert rendered == []
    assert len(failed) == 1
