"""Shared fixtures: small PDFs built in memory with PyMuPDF."""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import fitz  # PyMuPDF
import pytest

from pdf_helpers import make_pdf


@pytest.fixture
def three_page_pdf():
    return make_pdf(["Alpha invoice one", "Bravo report two", "Charlie invoice three"])


@pytest.fixture
def five_page_pdf():
    return make_pdf([f"Page number {i}" for i in range(5)])


@pytest.fixture
def encrypted_pdf():
    doc = fitz.open()
    doc.new_page().insert_text((40, 60), "Secret content")
    data = doc.tobytes(
        encryption=fitz.PDF_ENCRYPT_AES_256,
        user_pw="user-secret",
        owner_pw="owner-secret"
    )
    doc.close()
    return data
