"""Tests for the word-count chunker and document reconstruction."""

import pytest

from docanalyzer.chunker import (
    chunk_document,
    chunk_document_by_words,
    find_chunk_by_position,
    get_chunk_by_index,
    get_chunk_stats,
    reconstruct_document,
)
from docanalyzer.config import settings
from tests.conftest import make_paragraph

MESSY_TEXT = "  \n\nFirst para here.\n\n\n  Second para has more words  \n \nThird\n\n\n\tfourth one\n"


def assert_exact_offsets(text, chunked):
    """Every chunk is the exact slice it claims, in order, without overlap."""
    previous_end = 0
    for expected_index, chunk in enumerate(chunked.chunks):
        assert chunk.chunk_index == expected_index
        assert text[chunk.start_position:chunk.end_position] == chunk.content
        assert chunk.start_position >= previous_end
        previous_end = chunk.end_position


class TestChunkDocument:
    """Paragraph-aware chunking."""

    def test_short_document_is_one_chunk(self):
        text = "One short paragraph.\n\nAnd another one."
        chunked = chunk_document(text, 500)

        assert chunked.chunk_count == 1
        assert chunked.total_word_count == 6
        assert chunked.chunks[0].word_count == 6
        assert chunked.chunks[0].content == text

    def test_empty_document_yields_single_empty_chunk(self):
        chunked = chunk_document("")

        assert chunked.chunk_count == 1
        chunk = chunked.chunks[0]
        assert chunk.content == ""
        assert chunk.word_count == 0
        assert (chunk.start_position, chunk.end_position) == (0, 0)

    def test_whitespace_around_single_chunk_stays_outside_it(self):
        text = "\n\n  Hello world  \n"
        chunk = chunk_document(text, 10).chunks[0]

        assert chunk.content == "Hello world"
        assert text[chunk.start_position:chunk.end_position] == "Hello world"

    def test_paragraphs_are_grouped_under_the_cap(self):
        text = "\n\n".join(make_paragraph(100) for _ in range(12))
        chunked = chunk_document(text, 250)

        assert chunked.chunk_count == 6
        assert all(c.word_count == 200 for c in chunked.chunks)
        assert chunked.total_word_count == 1200
        assert_exact_offsets(text, chunked)

    def test_oversized_paragraph_is_not_split(self):
        text = "Short one here.\n\n" + make_paragraph(600, "big") + "\n\nShort two here."
        chunked = chunk_document(text, 500)

        assert [c.word_count for c in chunked.chunks] == [3, 600, 3]
        assert chunked.chunks[1].content == make_paragraph(600, "big")
        assert_exact_offsets(text, chunked)

    def test_unbroken_text_over_cap_uses_word_window(self):
        text = "para1 word " * 600
        chunked = chunk_document(text, 500)

        assert chunked.chunk_count >= 2
        assert all(c.word_count <= 500 for c in chunked.chunks)
        assert sum(c.word_count for c in chunked.chunks) == 1200
        assert_exact_offsets(text, chunked)

    def test_word_count_at_cap_is_one_chunk(self):
        text = make_paragraph(50)
        assert chunk_document(text, 50).chunk_count == 1
        assert chunk_document(text, 49).chunk_count == 2

    def test_chunk_ids_carry_kind_and_index(self):
        text = "\n\n".join(make_paragraph(10) for _ in range(3))
        ids = [c.id for c in chunk_document(text, 10).chunks]

        assert ids[0].startswith("para_0_")
        assert ids[2].startswith("para_2_")
        assert chunk_document("tiny").chunks[0].id.startswith("full_0_")

    def test_rejects_non_positive_cap(self):
        with pytest.raises(ValueError):
            chunk_document("some text", 0)

    def test_default_cap_comes_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "default_max_words", 2)
        text = "one two\n\nthree four\n\nfive"

        assert [c.word_count for c in chunk_document(text).chunks] == [2, 2, 1]
        assert [c.word_count for c in chunk_document_by_words(text).chunks] == [2, 2, 1]


class TestChunkDocumentByWords:
    """Fixed word-window chunking."""

    def test_windows_have_exact_word_counts(self):
        text = make_paragraph(25)
        chunked = chunk_document_by_words(text, 10)

        assert [c.word_count for c in chunked.chunks] == [10, 10, 5]
        assert chunked.chunks[0].id.startswith("word_0_")

    def test_repeated_words_get_their_own_offsets(self):
        text = "alpha beta alpha beta alpha beta"
        chunked = chunk_document_by_words(text, 2)

        assert [c.start_position for c in chunked.chunks] == [0, 11, 22]
        assert all(c.content == "alpha beta" for c in chunked.chunks)

    def test_window_ignores_paragraph_breaks(self):
        text = "one two\n\nthree four\n\nfive"
        chunked = chunk_document_by_words(text, 3)

        assert chunked.chunks[0].content == "one two\n\nthree"
        assert chunked.chunks[1].content == "four\n\nfive"


class TestReconstructDocument:
    """Rebuilding documents from (possibly edited) chunks."""

    @pytest.mark.parametrize("max_words", [1, 2, 3, 100])
    def test_round_trip_without_modifications(self, max_words):
        chunked = chunk_document(MESSY_TEXT, max_words)

        assert reconstruct_document(chunked) == MESSY_TEXT
        assert reconstruct_document(chunked, {}) == MESSY_TEXT

    @pytest.mark.parametrize("max_words", [1, 2, 3, 100])
    def test_gaps_are_copied_verbatim(self, max_words):
        chunked = chunk_document(MESSY_TEXT, max_words)
        identity = {c.chunk_index: c.content for c in chunked.chunks}

        assert reconstruct_document(chunked, identity) == MESSY_TEXT

    def test_only_the_targeted_chunk_changes(self):
        text = "\n\n".join(f"Paragraph {i} " + make_paragraph(8) for i in range(4))
        chunked = chunk_document(text, 10)
        target = chunked.chunks[1]

        rebuilt = reconstruct_document(chunked, {1: "REWRITTEN"})

        assert rebuilt == text[:target.start_position] + "REWRITTEN" + text[target.end_position:]

    def test_clean_markup_strips_markdown_from_replacements(self):
        text = "First paragraph here.\n\nSecond paragraph here."
        chunked = chunk_document(text, 3)

        rebuilt = reconstruct_document(chunked, {0: "**Bold** rewrite"}, clean_markup=True)

        assert rebuilt == "Bold rewrite\n\nSecond paragraph here."

    def test_word_window_round_trip(self):
        chunked = chunk_document_by_words(MESSY_TEXT, 2)
        identity = {c.chunk_index: c.content for c in chunked.chunks}

        assert reconstruct_document(chunked, identity) == MESSY_TEXT


class TestChunkLookup:
    """Index/position lookups and viewer statistics."""

    def setup_method(self):
        self.text = "\n\n".join(make_paragraph(5, f"p{i}") for i in range(3))
        self.chunked = chunk_document(self.text, 5)

    def test_get_chunk_by_index(self):
        assert get_chunk_by_index(self.chunked, 2).content == make_paragraph(5, "p2")
        assert get_chunk_by_index(self.chunked, 7) is None

    def test_find_chunk_by_position(self):
        second = self.chunked.chunks[1]

        assert find_chunk_by_position(self.chunked, second.start_position + 1) == second
        assert find_chunk_by_position(self.chunked, second.end_position) == second
        assert find_chunk_by_position(self.chunked, len(self.text) + 10) is None

    def test_chunk_stats(self):
        stats = get_chunk_stats(self.chunked)

        assert stats.total_chunks == 3
        assert stats.total_words == 15
        assert stats.avg_words_per_chunk == 5
        assert [c.words for c in stats.chunks] == [5, 5, 5]

    def test_preview_is_truncated(self):
        chunked = chunk_document(make_paragraph(60, "longword"), 100)
        preview = get_chunk_stats(chunked).chunks[0].preview

        assert len(preview) == 103
        assert preview.endswith("...")
