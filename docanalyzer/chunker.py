"""
Word-count chunker for AI prompt windows and paginated viewing.

Two variants:
- chunk_document: paragraph-aware, prefers blank-line boundaries over hard cuts.
- chunk_document_by_words: fixed window of max_words words, no paragraph awareness.

Every chunk records exact character offsets into the original text, so
reconstruct_document can rebuild it byte-for-byte.
"""
import logging
import time
from typing import Dict, List, Optional

from docanalyzer.config import settings
from docanalyzer.models import ChunkedDocument, ChunkPreview, ChunkStats, DocumentChunk
from docanalyzer.text_utils import (
    count_words,
    paragraph_spans,
    remove_markup_symbols,
    trimmed_span,
    word_spans,
)

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 100


def chunk_document(text: str, max_words: Optional[int] = None) -> ChunkedDocument:
    """Split text into chunks of at most max_words words along paragraph breaks.

    A paragraph longer than max_words is kept whole and becomes an oversized
    chunk. A document with no paragraph breaks at all is handed to the word
    window instead, since there is no boundary to prefer.
    """
    max_words = _resolve_max_words(max_words)
    total_word_count = count_words(text)
    if total_word_count <= max_words:
        return _single_chunk(text, total_word_count)

    paragraphs = paragraph_spans(text)
    if len(paragraphs) < 2:
        logger.debug(f"No paragraph breaks in {total_word_count}-word document, using word window")
        return chunk_document_by_words(text, max_words)

    chunks: List[DocumentChunk] = []
    group_start: Optional[int] = None
    group_end = 0
    group_words = 0
    for start, end in paragraphs:
        words = count_words(text[start:end])
        # close the running chunk before it overflows
        if group_start is not None and group_words + words > max_words:
            chunks.append(_make_chunk(text, "para", len(chunks), group_start, group_end, group_words))
            group_start = None
            group_words = 0
        if group_start is None:
            group_start = start
        group_end = end
        group_words += words

    chunks.append(_make_chunk(text, "para", len(chunks), group_start, group_end, group_words))
    logger.info(f"Chunked {total_word_count} words into {len(chunks)} paragraph chunks (max {max_words})")
    return _chunked(text, chunks, total_word_count)


def chunk_document_by_words(text: str, max_words: Optional[int] = None) -> ChunkedDocument:
    """Split text into consecutive windows of exactly max_words words (last may be short)."""
    max_words = _resolve_max_words(max_words)
    spans = word_spans(text)
    if len(spans) <= max_words:
        return _single_chunk(text, len(spans))

    chunks: List[DocumentChunk] = []
    for i in range(0, len(spans), max_words):
        window = spans[i:i + max_words]
        chunks.append(_make_chunk(text, "word", len(chunks), window[0][0], window[-1][1], len(window)))
    return _chunked(text, chunks, len(spans))


def reconstruct_document(
    chunked: ChunkedDocument,
    modified_chunks: Optional[Dict[int, str]] = None,
    clean_markup: bool = False,
) -> str:
    """Rebuild the document, substituting modified chunk content by chunk index.

    Text between chunks is copied verbatim from the original. With no
    modifications the original text is returned unchanged.

    Args:
        chunked: Result of chunk_document / chunk_document_by_words
        modified_chunks: Mapping of chunk_index -> replacement content
        clean_markup: Strip markdown from replacements before inserting them
    """
    if not modified_chunks:
        return chunked.original_content

    original = chunked.original_content
    parts: List[str] = []
    last_position = 0
    for chunk in sorted(chunked.chunks, key=lambda c: c.chunk_index):
        if chunk.start_position > last_position:
            parts.append(original[last_position:chunk.start_position])

        replacement = modified_chunks.get(chunk.chunk_index)
        if replacement is None:
            parts.append(chunk.content)
        else:
            parts.append(remove_markup_symbols(replacement) if clean_markup else replacement)
        last_position = chunk.end_position

    if last_position < len(original):
        parts.append(original[last_position:])
    return "".join(parts)


def get_chunk_by_index(chunked: ChunkedDocument, index: int) -> Optional[DocumentChunk]:
    return next((c for c in chunked.chunks if c.chunk_index == index), None)


def find_chunk_by_position(chunked: ChunkedDocument, position: int) -> Optional[DocumentChunk]:
    """Return the chunk whose span contains position (end offset inclusive)."""
    return next(
        (c for c in chunked.chunks if c.start_position <= position <= c.end_position),
        None,
    )


def get_chunk_stats(chunked: ChunkedDocument) -> ChunkStats:
    count = chunked.chunk_count or 1
    return ChunkStats(
        total_chunks=chunked.chunk_count,
        total_words=chunked.total_word_count,
        avg_words_per_chunk=int(chunked.total_word_count / count + 0.5),
        chunks=[
            ChunkPreview(
                index=c.chunk_index,
                words=c.word_count,
                preview=c.content[:PREVIEW_CHARS] + ("..." if len(c.content) > PREVIEW_CHARS else ""),
            )
            for c in chunked.chunks
        ],
    )


def _resolve_max_words(max_words: Optional[int]) -> int:
    """Fall back to settings.default_max_words; reject caps below 1."""
    if max_words is None:
        max_words = settings.default_max_words
    if max_words < 1:
        raise ValueError(f"max_words must be a positive integer, got {max_words}")
    return max_words


def _single_chunk(text: str, word_count: int) -> ChunkedDocument:
    start, end = trimmed_span(text, 0, len(text))
    return _chunked(text, [_make_chunk(text, "full", 0, start, end, word_count)], word_count)


def _make_chunk(text: str, kind: str, index: int, start: int, end: int, word_count: int) -> DocumentChunk:
    return DocumentChunk(
        id=f"{kind}_{index}_{int(time.time() * 1000)}",
        chunk_index=index,
        content=text[start:end],
        word_count=word_count,
        start_position=start,
        end_position=end,
    )


def _chunked(text: str, chunks: List[DocumentChunk], total_word_count: int) -> ChunkedDocument:
    return ChunkedDocument(
        original_content=text,
        chunks=chunks,
        total_word_count=total_word_count,
        chunk_count=len(chunks),
    )
