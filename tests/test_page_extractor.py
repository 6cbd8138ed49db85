"""Unit tests for PageExtractor."""
import sys
sys.path.insert(0, 'backend')

import pytest

from pdf_helpers import page_texts_of
from models.errors import ExtractError
from models.selection import PageSelection
from services.page_extractor import PageExtractor, export_filename


@pytest.fixture
def extractor():
    return PageExtractor()


def test_extract_keeps_given_order(extractor, five_page_pdf):
    """Test that [2, 0, 1] yields original pages 2, 0, 1 in that order."""
    output = extractor.extract(five_page_pdf, [2, 0, 1])

    assert page_texts_of(output) == ["Page number 2", "Page number 0", "Page number 1"]


def test_extract_ascending_selection(extractor, three_page_pdf):
    output = extractor.extract(three_page_pdf, [0, 2])

    assert page_texts_of(output) == ["Alpha invoice one", "Charlie invoice three"]


def test_output_is_independent_document(extractor, five_page_pdf):
    """Test that the output opens on its own and differs from the source."""
    output = extractor.extract(five_page_pdf, [4])

    assert output != five_page_pdf
    assert page_texts_of(output) == ["Page number 4"]


def test_extract_is_repeatable(extractor, five_page_pdf):
    first = extractor.extract(five_page_pdf, [3, 1])
    second = extractor.extract(five_page_pdf, [3, 1])

    assert page_texts_of(first) == page_texts_of(second)


def test_out_of_range_index_raises_and_leaves_selection(extractor, five_page_pdf):
    """Test that index 10 on a 5-page document fails without touching the selection."""
    selection = PageSelection([0, 10])

    with pytest.raises(ExtractError, match="out of range"):
        extractor.extract(five_page_pdf, selection.sorted_indices())

    assert selection.sorted_indices() == [0, 10]


def test_negative_index_raises(extractor, five_page_pdf):
    with pytest.raises(ExtractError):
        extractor.extract(five_page_pdf, [-1])


def test_duplicate_index_raises(extractor, five_page_pdf):
    with pytest.raises(ExtractError, match="more than once"):
        extractor.extract(five_page_pdf, [1, 1])


def test_non_integer_index_raises(extractor, five_page_pdf):
    with pytest.raises(ExtractError, match="integer"):
        extractor.extract(five_page_pdf, [True])


def test_empty_selection_raises(extractor, five_page_pdf):
    with pytest.raises(ExtractError, match="No pages"):
        extractor.extract(five_page_pdf, [])


def test_invalid_source_raises(extractor):
    with pytest.raises(ExtractError):
        extractor.extract(b"not a pdf at all", [0])


def test_export_filename_prefixes_original():
    assert export_filename("report.pdf") == "extracted_report.pdf"
