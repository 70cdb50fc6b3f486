"""Small text helpers shared by the chunker and the segmenter."""
import re
from typing import List, Tuple

Span = Tuple[int, int]

_WORD = re.compile(r"\S+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

# Markdown left behind by LLM rewrites, applied in order.
_MARKUP_PATTERNS = [
    (re.compile(r"\*\*"), ""),
    (re.compile(r"\*"), ""),
    (re.compile(r"#{1,6}\s?"), ""),
    (re.compile(r"`{1,3}"), ""),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^\s*>\s?", re.MULTILINE), ""),
    (re.compile(r"\|"), " "),
    (re.compile(r"---+"), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
]

# Trailing editorial notes such as "(The debate continues...)".
_TRAILING_NOTES = [
    re.compile(r"\(.*continues.*\)$", re.IGNORECASE),
    re.compile(r"\(.*debate.*continues.*\)$", re.IGNORECASE),
    re.compile(r"\(.*reader.*to.*weigh.*\)$", re.IGNORECASE),
    re.compile(r"\(.*leaving.*reader.*\)$", re.IGNORECASE),
    re.compile(r"\(.*end.*of.*rewrite.*\)$", re.IGNORECASE),
    re.compile(r"\(.*note:.*\)$", re.IGNORECASE),
    re.compile(r"\(.*commentary.*\)$", re.IGNORECASE),
    re.compile(r"\(.*analysis.*\)$", re.IGNORECASE),
]
_ORPHAN_PAREN = re.compile(r"\s*\.\s*\)$")


def count_words(text: str) -> int:
    """Number of whitespace-delimited words in text."""
    return len(text.split())


def word_spans(text: str) -> List[Span]:
    """Return the (start, end) offsets of every word in text."""
    return [m.span() for m in _WORD.finditer(text)]


def paragraph_spans(text: str) -> List[Span]:
    """Return the offsets of each non-blank, blank-line separated paragraph.

    Each span is trimmed of surrounding whitespace, so
    ``text[start:end]`` is the paragraph without its padding.
    """
    spans: List[Span] = []
    position = 0
    for match in _PARAGRAPH_BREAK.finditer(text):
        _append_trimmed(text, position, match.start(), spans)
        position = match.end()
    _append_trimmed(text, position, len(text), spans)
    return spans


def trimmed_span(text: str, start: int, end: int) -> Span:
    """Shrink [start, end) so it excludes leading and trailing whitespace."""
    piece = text[start:end]
    stripped = piece.strip()
    if not stripped:
        return start, start
    lead = len(piece) - len(piece.lstrip())
    return start + lead, start + lead + len(stripped)


def _append_trimmed(text: str, start: int, end: int, spans: List[Span]) -> None:
    span = trimmed_span(text, start, end)
    if span[1] > span[0]:
        spans.append(span)


def remove_markup_symbols(text: str) -> str:
    """Strip markdown and trailing editorial notes from an AI rewrite."""
    cleaned = text
    for pattern, replacement in _MARKUP_PATTERNS:
        cleaned = pattern.sub(replacement, cleaned)
    cleaned = cleaned.strip()

    for pattern in _TRAILING_NOTES:
        cleaned = pattern.sub("", cleaned)
    cleaned = _ORPHAN_PAREN.sub(".", cleaned)
    return cleaned.strip()
