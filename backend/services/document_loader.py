"""Document loading service for PDF processing."""
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union

import fitz  # PyMuPDF

from models.document import Document
from models.errors import LoadError, RenderError
from services.page_renderer import PageRenderer

logger = logging.getLogger(__name__)

ByteSource = Union[bytes, bytearray, memoryview, BinaryIO]


@dataclass
class LoadedDocument:
    """An open PDF together with its Document record (pages not yet rendered)."""
    document: Document
    pdf: fitz.Document

    def close(self) -> None:
        self.pdf.close()


class DocumentLoader:
    """Reads PDF bytes into memory and verifies they can be parsed."""

    def __init__(self, renderer: Optional[PageRenderer] = None):
        """
        Initialize DocumentLoader.

        Args:
            renderer: PageRenderer used by load_with_pages (defaults to sequential rendering)
        """
        self.renderer = renderer or PageRenderer()

    def load(self, source: ByteSource, name: str) -> LoadedDocument:
        """
        Open a PDF from bytes or a binary file-like object.

        Args:
            source: Raw PDF bytes or a readable binary stream
            name: Original filename

        Returns:
            LoadedDocument whose Document has an empty pages list

        Raises:
            LoadError: If the bytes are empty, corrupt, truncated, encrypted, or not a PDF
        """
        raw_bytes = self._read_bytes(source, name)
        if not raw_bytes:
            raise LoadError("File is empty", name=name)

        try:
            pdf_document = fitz.open(stream=raw_bytes, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open PDF {name}: {str(e)}")
            raise LoadError(f"Cannot parse PDF: {e}", name=name) from e

        try:
            self._validate(pdf_document, name)
        except LoadError:
            pdf_document.close()
            raise

        document = Document(name=name, size_bytes=len(raw_bytes), raw_bytes=raw_bytes)
        logger.info(f"Opened {name}: {pdf_document.page_count} pages, {len(raw_bytes)} bytes")
        return LoadedDocument(document=document, pdf=pdf_document)

    def load_with_pages(self, source: ByteSource, name: str) -> Document:
        """
        Load a PDF and render every page.

        A failure on any page aborts the load, so no partial Document is returned.

        Raises:
            LoadError: If the document cannot be opened or any page fails to render
        """
        loaded = self.load(source, name)
        try:
            pages = self.renderer.render_all(loaded.pdf, loaded.document.raw_bytes)
        except RenderError as e:
            logger.error(f"Aborting load of {name}: {e}")
            raise LoadError(f"Failed to render {name}: {e}", name=name) from e
        finally:
            loaded.close()

        loaded.document.pages = pages
        logger.info(f"Loaded {name}: {loaded.document.total_pages} pages")
        return loaded.document

    @staticmethod
    def _read_bytes(source: ByteSource, name: str) -> bytes:
        if isinstance(source, (bytes, bytearray, memoryview)):
            return bytes(source)
        try:
            data = source.read()
        except Exception as e:
            raise LoadError(f"Cannot read file: {e}", name=name) from e
        if not isinstance(data, (bytes, bytearray)):
            raise LoadError("Source must yield bytes", name=name)
        return bytes(data)

    @staticmethod
    def _validate(pdf_document: fitz.Document, name: str) -> None:
        if not pdf_document.is_pdf:
            raise LoadError("Not a PDF document", name=name)
        # MuPDF rebuilds a damaged xref silently and drops the unreachable pages
        if pdf_document.is_repaired:
            raise LoadError("PDF is damaged or truncated", name=name)
        # An empty user password is tried automatically; anything else stays locked
        if pdf_document.needs_pass:
            raise LoadError("PDF is password-protected", name=name)
        if pdf_document.page_count == 0:
            raise LoadError("PDF has no pages", name=name)
