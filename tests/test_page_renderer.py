"""Unit tests for PageRenderer."""
import base64
import sys
sys.path.insert(0, 'backend')

import fitz  # PyMuPDF
import pytest
from unittest.mock import Mock, patch

from pdf_helpers import make_pdf
from models.errors import RenderError
from services.page_renderer import PageRenderer, RendererConfig


@pytest.fixture
def open_pdf():
    """Open PDF bytes and close them after the test."""
    opened = []

    def _open(data):
        doc = fitz.open(stream=data, filetype="pdf")
        opened.append(doc)
        return doc

    yield _open
    for doc in opened:
        doc.close()


class TestPageRenderer:
    """Test suite for PageRenderer."""

    def test_renders_one_page_per_physical_page(self, open_pdf, five_page_pdf):
        renderer = PageRenderer()

        pages = renderer.render_all(open_pdf(five_page_pdf), five_page_pdf)

        assert len(pages) == 5
        assert [page.index for page in pages] == [0, 1, 2, 3, 4]

    def test_thumbnail_is_jpeg_data_uri(self, open_pdf, three_page_pdf):
        """Test that thumbnails are lossy JPEG data URIs."""
        renderer = PageRenderer()

        page = renderer.render_all(open_pdf(three_page_pdf), three_page_pdf)[0]

        prefix = "data:image/jpeg;base64,"
        assert page.thumbnail.startswith(prefix)
        image = base64.b64decode(page.thumbnail[len(prefix):])
        assert image[:2] == b"\xff\xd8"

    def test_thumbnail_is_half_resolution(self, open_pdf):
        """Test that the default viewport is half the page's native size."""
        data = make_pdf(["Sized page"])
        renderer = PageRenderer()

        page = renderer.render_all(open_pdf(data), data)[0]

        prefix = "data:image/jpeg;base64,"
        pixmap = fitz.Pixmap(base64.b64decode(page.thumbnail[len(prefix):]))
        assert pixmap.width == 150
        assert pixmap.height == 200

    def test_text_content_joins_runs_with_spaces(self, open_pdf):
        """Test that text runs are joined with single spaces in content order."""
        doc = fitz.open()
        page = doc.new_page()
        page.insert_text((40, 60), "First line")
        page.insert_text((40, 120), "Second line")
        data = doc.tobytes()
        doc.close()

        rendered = PageRenderer().render_all(open_pdf(data), data)[0]

        assert rendered.text_content == "First line Second line"

    def test_text_content_keeps_empty_runs(self):
        page = Mock()
        page.get_text.return_value = {"blocks": [
            {"type": 0, "lines": [{"spans": [{"text": "Total"}, {"text": ""}, {"text": "42"}]}]},
            {"type": 1},
        ]}

        assert PageRenderer._extract_text(page) == "Total  42"

    def test_blank_page_has_empty_text(self, open_pdf):
        doc = fitz.open()
        doc.new_page()
        data = doc.tobytes()
        doc.close()

        rendered = PageRenderer().render_all(open_pdf(data), data)[0]

        assert rendered.text_content == ""
        assert rendered.thumbnail.startswith("data:image/jpeg;base64,")

    def test_concurrent_rendering_keeps_index_order(self, open_pdf):
        """Test that a worker pool assembles pages in strictly increasing order."""
        data = make_pdf([f"Concurrent {i}" for i in range(12)])

        sequential = PageRenderer(RendererConfig(workers=1)).render_all(open_pdf(data), data)
        concurrent = PageRenderer(RendererConfig(workers=4)).render_all(open_pdf(data), data)

        assert [p.index for p in concurrent] == list(range(12))
        assert [p.text_content for p in concurrent] == [p.text_content for p in sequential]

    def test_page_failure_raises_render_error(self, open_pdf, five_page_pdf):
        """Test that the first failing page aborts rendering."""
        renderer = PageRenderer()

        def fail_on_third(page):
            if page.number == 2:
                raise RuntimeError("corrupt content stream")
            return "text"

        with patch.object(PageRenderer, "_extract_text", side_effect=fail_on_third):
            with pytest.raises(RenderError) as exc_info:
                renderer.render_all(open_pdf(five_page_pdf), five_page_pdf)

        assert exc_info.value.page_index == 2
        assert "corrupt content stream" in str(exc_info.value)

    def test_page_failure_in_worker_pool_raises_render_error(self, open_pdf, five_page_pdf):
        renderer = PageRenderer(RendererConfig(workers=3))

        def fail_on_second(page):
            if page.number == 1:
                raise RuntimeError("bad page")
            return "text"

        with patch.object(PageRenderer, "_extract_text", side_effect=fail_on_second):
            with pytest.raises(RenderError) as exc_info:
                renderer.render_all(open_pdf(five_page_pdf), five_page_pdf)

        assert exc_info.value.page_index == 1

    def test_invalid_worker_count_rejected(self):
        with pytest.raises(ValueError, match="workers"):
            PageRenderer(RendererConfig(workers=0))
