"""Page rendering service: thumbnails and plain text for every page."""
import base64
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

import fitz  # PyMuPDF

from config import THUMBNAIL_SCALE, THUMBNAIL_QUALITY, RENDER_WORKERS
from models.document import Page
from models.errors import RenderError

logger = logging.getLogger(__name__)


@dataclass
class RendererConfig:
    """Rendering parameters for page thumbnails."""
    scale: float = 0.5  # half of native resolution
    quality: int = 80  # JPEG quality
    workers: int = 1  # 1 renders pages strictly in sequence

    @classmethod
    def from_env(cls) -> "RendererConfig":
        return cls(scale=THUMBNAIL_SCALE, quality=THUMBNAIL_QUALITY, workers=RENDER_WORKERS)


class PageRenderer:
    """Produces one Page record per physical page, in page order.

    Any single page failure aborts the whole render with a RenderError, so a
    caller either gets every page or none of them.
    """

    def __init__(self, config: Optional[RendererConfig] = None):
        self.config = config or RendererConfig()
        if self.config.workers < 1:
            raise ValueError("workers must be at least 1")
        self._matrix = fitz.Matrix(self.config.scale, self.config.scale)

    def render_all(self, pdf_document: fitz.Document, raw_bytes: bytes) -> List[Page]:
        """
        Render every page of an open document.

        Args:
            pdf_document: Open PyMuPDF document (used by the sequential path)
            raw_bytes: Original bytes, reopened per worker thread when rendering concurrently

        Returns:
            List of Page objects with indices 0..page_count-1 in increasing order

        Raises:
            RenderError: If any page fails to render
        """
        start_time = time.time()
        page_count = pdf_document.page_count

        if self.config.workers == 1 or page_count <= 1:
            pages = [self.render_page(pdf_document, i) for i in range(page_count)]
        else:
            pages = self._render_concurrently(raw_bytes, page_count)

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Rendered {len(pages)} pages: workers={self.config.workers}, latency={latency_ms}ms"
        )
        return pages

    def render_page(self, pdf_document: fitz.Document, index: int) -> Page:
        """Render a single page into a thumbnail and extract its text."""
        try:
            page = pdf_document[index]
            return Page(
                index=index,
                thumbnail=self._render_thumbnail(page),
                text_content=self._extract_text(page),
            )
        except RenderError:
            raise
        except Exception as e:
            logger.error(f"Failed to render page {index}: {e}", exc_info=True)
            raise RenderError(index, str(e)) from e

    def _render_thumbnail(self, page: fitz.Page) -> str:
        pixmap = page.get_pixmap(matrix=self._matrix, alpha=False)
        data = pixmap.tobytes("jpeg", jpg_quality=self.config.quality)
        return "data:image/jpeg;base64," + base64.b64encode(data).decode("ascii")

    @staticmethod
    def _extract_text(page: fitz.Page) -> str:
        # Text runs in content order, no line or paragraph structure
        runs = []
        for block in page.get_text("dict").get("blocks", []):
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    runs.append(span.get("text", ""))
        return " ".join(runs)

    def _render_concurrently(self, raw_bytes: bytes, page_count: int) -> List[Page]:
        # PyMuPDF documents must not be shared between threads
        local = threading.local()
        opened: List[fitz.Document] = []
        opened_lock = threading.Lock()

        def worker(index: int) -> Page:
            doc = getattr(local, "doc", None)
            if doc is None:
                try:
                    doc = fitz.open(stream=raw_bytes, filetype="pdf")
                except Exception as e:
                    raise RenderError(index, f"cannot reopen document: {e}") from e
                local.doc = doc
                with opened_lock:
                    opened.append(doc)
            return self.render_page(doc, index)

        executor = ThreadPoolExecutor(max_workers=self.config.workers)
        try:
            futures = [executor.submit(worker, i) for i in range(page_count)]
            pages = []
            for future in futures:
                try:
                    pages.append(future.result())
                except Exception:
                    for pending in futures:
                        pending.cancel()
                    raise
            return pages
        finally:
            executor.shutdown(wait=True)
            for doc in opened:
                doc.close()
