"""Tests for document extraction, math normalisation and file chunking."""

import docx
import pytest

from docanalyzer.document_processor import DocumentProcessor, process_math_notation
from docanalyzer.extractors import detect_mime, extract, extract_from_pdf


@pytest.fixture
def processor():
    return DocumentProcessor(max_words=5)


class TestMathNotation:
    def test_fractions_powers_and_symbols(self):
        text = "1/2 and x^2 and alpha <= beta"

        assert process_math_notation(text) == "$\\frac{1}{2}$ and $x^{2}$ and $\\alpha$ ≤ $\\beta$"

    @pytest.mark.parametrize("text, expected", [
        ("sqrt(x+1)", "$\\sqrt{x+1}$"),
        ("x_1", "$x_{1}$"),
        ("3^2", "3²"),
        ("a != b", "a ≠ b"),
        ("+/- 5", "± 5"),
        ("to infinity", "to ∞"),
    ])
    def test_single_replacements(self, text, expected):
        assert process_math_notation(text) == expected

    def test_words_containing_letter_names_are_untouched(self):
        assert process_math_notation("alphabet and summary") == "alphabet and summary"


class TestExtractors:
    def test_txt(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Plain words.\n\nMore words.", encoding="utf-8")

        assert extract(str(path), "txt") == "Plain words.\n\nMore words."
        assert extract(str(path), "text/plain") == "Plain words.\n\nMore words."

    def test_docx_paragraphs_are_joined_by_newlines(self, tmp_path):
        path = tmp_path / "doc.docx"
        document = docx.Document()
        document.add_paragraph("Hello world")
        document.add_paragraph("Second paragraph.")
        document.save(str(path))

        assert extract(str(path), "docx") == "Hello world\nSecond paragraph."

    def test_unreadable_pdf_raises(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"not a pdf at all")

        with pytest.raises(ValueError):
            extract_from_pdf(str(path))

    def test_unsupported_type(self, tmp_path):
        path = tmp_path / "slides.pptx"
        path.write_bytes(b"")

        with pytest.raises(ValueError, match="Unsupported file type"):
            extract(str(path), "pptx")

    def test_detect_mime_for_text(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello world", encoding="utf-8")

        assert detect_mime(str(path)) == "text/plain"


class TestDocumentProcessor:
    def test_process_file_returns_text_and_chunks(self, processor, tmp_path):
        path = tmp_path / "story.txt"
        path.write_text("one two three four\n\nfive six seven\n\neight", encoding="utf-8")

        text, chunked = processor.process_file(str(path))

        assert text == "one two three four\n\nfive six seven\n\neight"
        assert chunked.total_word_count == 8
        assert [c.word_count for c in chunked.chunks] == [4, 4]
        for chunk in chunked.chunks:
            assert text[chunk.start_position:chunk.end_position] == chunk.content

    def test_math_processing_can_be_disabled(self, processor, tmp_path):
        path = tmp_path / "math.txt"
        path.write_text("1/2 of x^2", encoding="utf-8")

        assert processor.extract_text(str(path)) == "$\\frac{1}{2}$ of $x^{2}$"
        assert processor.extract_text(str(path), process_math=False) == "1/2 of x^2"

    def test_missing_file(self, processor, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            processor.extract_text(str(tmp_path / "nope.txt"))

    def test_directory_is_rejected(self, processor, tmp_path):
        folder = tmp_path / "folder.txt"
        folder.mkdir()

        with pytest.raises(ValueError, match="is not a file"):
            processor.extract_text(str(folder))

    def test_disallowed_extension(self, processor, tmp_path):
        path = tmp_path / "tool.exe"
        path.write_bytes(b"MZ")

        with pytest.raises(ValueError, match="not allowed"):
            processor.extract_text(str(path))

    def test_default_word_cap_comes_from_settings(self):
        from docanalyzer.config import settings

        assert DocumentProcessor().max_words == settings.default_max_words
