"""Page extraction service: assembles a new PDF from selected pages."""
import logging
import time
from typing import Sequence

import fitz  # PyMuPDF

from config import EXPORT_PREFIX
from models.errors import ExtractError

logger = logging.getLogger(__name__)


class PageExtractor:
    """Copies pages from a source PDF into a fresh, independent PDF."""

    def extract(self, raw_bytes: bytes, page_indices: Sequence[int]) -> bytes:
        """
        Build a new PDF holding exactly the given pages in the given order.

        Pages are copied, not re-rendered. The extractor does not sort: callers
        pass ascending indices when they want document order.

        Args:
            raw_bytes: Complete bytes of the original PDF
            page_indices: Duplicate-free 0-based page indices

        Returns:
            Bytes of the new PDF

        Raises:
            ExtractError: If the source is invalid or any index is bad
        """
        start_time = time.time()
        indices = list(page_indices)
        if not indices:
            raise ExtractError("No pages selected")

        try:
            source = fitz.open(stream=raw_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open source PDF for extraction: {e}")
            raise ExtractError(f"Source is not a valid PDF: {e}") from e

        try:
            if not source.is_pdf or source.needs_pass:
                raise ExtractError("Source is not an accessible PDF")
            self._validate_indices(indices, source.page_count)

            output = fitz.open()
            try:
                for index in indices:
                    output.insert_pdf(source, from_page=index, to_page=index)
                data = output.tobytes(garbage=3, deflate=True)
            except Exception as e:
                logger.error(f"Failed to assemble output PDF: {e}", exc_info=True)
                raise ExtractError(f"Failed to assemble output: {e}") from e
            finally:
                output.close()
        finally:
            source.close()

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Extracted {len(indices)} pages: output_bytes={len(data)}, latency={latency_ms}ms"
        )
        return data

    @staticmethod
    def _validate_indices(indices: Sequence[int], page_count: int) -> None:
        seen = set()
        for index in indices:
            if isinstance(index, bool) or not isinstance(index, int):
                raise ExtractError(f"Page index must be an integer, got {index!r}")
            if index < 0 or index >= page_count:
                raise ExtractError(
                    f"Page index {index} out of range for {page_count}-page document"
                )
            if index in seen:
                raise ExtractError(f"Page index {index} listed more than once")
            seen.add(index)


def export_filename(name: str) -> str:
    """Download name for an extracted document."""
    return f"{EXPORT_PREFIX}{name}"
