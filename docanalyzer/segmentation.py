"""Text segmentation: find the logical joints of a document for mind-map generation.

Each strategy is a pure function from text to an ordered list of TextSegment.
segment_text picks one of them; in auto mode it walks AUTO_POLICY in order and
takes the first strategy whose segment count falls inside its accepted range.
"""
import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from docanalyzer.models import SegmentationMethod, SegmentationResult, SegmentType, TextSegment
from docanalyzer.text_utils import paragraph_spans, trimmed_span

logger = logging.getLogger(__name__)

MERGE_SEPARATOR = "\n\n---\n\n"
THEMATIC_MIN_CHARS = 500
DIALOGUE_MIN_CHARS = 200
DIALOGUE_MIN_LINES = 3
PARAGRAPHS_PER_SEGMENT = 4

CHAPTER_PATTERNS = [
    re.compile(r"^Chapter\s+\d+", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Part\s+\d+", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Section\s+\d+", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\d+\.\s+[A-Z]", re.MULTILINE),
    re.compile(r"^[A-Z][A-Z \t]{10,}", re.MULTILINE),  # all-caps headings
]

TRANSITION_MARKER = re.compile(
    r"(However|Nevertheless|On the other hand|In contrast|Furthermore|Moreover|Therefore|Thus|Consequently),",
    re.IGNORECASE,
)
SEPARATOR_MARKER = re.compile(r"^(\*\s*\*\s*\*|-{3,})\s*$")

DIALOGUE_PATTERNS = [
    re.compile(r'^"[^"]+"'),  # quoted speech
    re.compile(r"^[A-Z][a-z]+:\s"),  # Name: ...
    re.compile(r"said\s+[A-Z][a-z]+"),
    re.compile(r"replied\s+[A-Z][a-z]+"),
]


def extract_title(text: str) -> str:
    """Short title for a segment: its first sentence if 10-80 chars, else the first 50 chars."""
    cleaned = re.sub(r"\s+", " ", text).strip()
    first_sentence = re.split(r"[.!?]", cleaned)[0].strip()
    if 10 < len(first_sentence) < 80:
        return first_sentence
    return cleaned[:50] + ("..." if len(cleaned) > 50 else "")


def identify_chapter_breaks(text: str) -> List[TextSegment]:
    """Carve text at chapter/part/section headers and all-caps headings.

    Each header starts a segment that runs to the next header; text before the
    first header is not covered. With no headers at all the whole text is one
    segment.
    """
    positions = sorted({m.start() for pattern in CHAPTER_PATTERNS for m in pattern.finditer(text)})
    if not positions:
        positions = [0]
    boundaries = positions + [len(text)]

    segments: List[TextSegment] = []
    for start, end in zip(boundaries, boundaries[1:]):
        content = text[start:end].strip()
        if not content:
            continue
        segments.append(
            TextSegment(
                id=f"chapter_{len(segments) + 1}",
                content=content,
                type=SegmentType.CHAPTER,
                start_position=start,
                end_position=end,
                title=extract_title(text[start:min(start + 100, end)]),
            )
        )
    return segments


def identify_thematic_breaks(text: str) -> List[TextSegment]:
    """Split at transition words and explicit separators once a segment is long enough."""
    segments: List[TextSegment] = []
    current_start = current_end = None
    for start, end in paragraph_spans(text):
        paragraph = text[start:end]
        has_break = bool(TRANSITION_MARKER.search(paragraph[:50]) or SEPARATOR_MARKER.match(paragraph))
        if has_break and current_start is not None and current_end - current_start > THEMATIC_MIN_CHARS:
            segments.append(_span_segment(text, "theme", len(segments) + 1, SegmentType.THEMATIC_BREAK,
                                          current_start, current_end, title_chars=100))
            current_start = None
        if current_start is None:
            current_start = start
        current_end = end

    if current_start is not None:
        segments.append(_span_segment(text, "theme", len(segments) + 1, SegmentType.THEMATIC_BREAK,
                                      current_start, current_end, title_chars=100))
    return segments


def identify_speaker_changes(text: str) -> List[TextSegment]:
    """Split dialogue at speaker lines; returns [] unless the text reads as dialogue."""
    lines = _line_spans(text)
    dialogue_lines = [span for span in lines if _is_dialogue(text[span[0]:span[1]])]
    if len(dialogue_lines) < DIALOGUE_MIN_LINES:
        return []

    segments: List[TextSegment] = []
    current_start = lines[0][0]
    current_end = lines[0][0]
    for start, end in lines:
        line = text[start:end]
        if _is_dialogue(line) and current_end - current_start > DIALOGUE_MIN_CHARS:
            _append_if_content(segments, text, current_start, current_end)
            current_start = start
        current_end = end

    _append_if_content(segments, text, current_start, current_end)
    return segments


def create_paragraph_segments(text: str) -> List[TextSegment]:
    """Fallback: group paragraphs PARAGRAPHS_PER_SEGMENT at a time."""
    paragraphs = paragraph_spans(text)
    segments: List[TextSegment] = []
    for i in range(0, len(paragraphs), PARAGRAPHS_PER_SEGMENT):
        group = paragraphs[i:i + PARAGRAPHS_PER_SEGMENT]
        segments.append(_span_segment(text, "para", len(segments) + 1, SegmentType.PARAGRAPH,
                                      group[0][0], group[-1][1]))
    return segments


Strategy = Callable[[str], List[TextSegment]]

STRATEGIES: Dict[SegmentationMethod, Strategy] = {
    SegmentationMethod.CHAPTER: identify_chapter_breaks,
    SegmentationMethod.THEMATIC: identify_thematic_breaks,
    SegmentationMethod.DIALOGUE: identify_speaker_changes,
    SegmentationMethod.PARAGRAPH: create_paragraph_segments,
}

# Auto mode: (method, min segments, max segments), tried in this order.
AUTO_POLICY: Sequence[Tuple[SegmentationMethod, int, int]] = (
    (SegmentationMethod.CHAPTER, 2, 20),
    (SegmentationMethod.THEMATIC, 3, 15),
    (SegmentationMethod.DIALOGUE, 2, 25),
)


def segment_text(text: str, method: SegmentationMethod = SegmentationMethod.AUTO) -> SegmentationResult:
    """Segment text with the given method, falling back to paragraph groups.

    Auto mode is a fixed-priority policy, not a ranking: the first strategy in
    AUTO_POLICY whose count lies in its range wins.
    """
    method = SegmentationMethod(method)
    segments: List[TextSegment] = []
    chosen = method

    if method == SegmentationMethod.AUTO:
        chosen = SegmentationMethod.PARAGRAPH
        for candidate, low, high in AUTO_POLICY:
            found = STRATEGIES[candidate](text)
            if low <= len(found) <= high:
                segments, chosen = found, candidate
                break
            logger.debug(f"{candidate.value} segmentation gave {len(found)} segments, outside [{low}, {high}]")
    else:
        segments = STRATEGIES[method](text)

    if not segments:
        segments = create_paragraph_segments(text)
        chosen = SegmentationMethod.PARAGRAPH

    logger.info(f"Segmented {len(text)} chars into {len(segments)} segments using {chosen.value}")
    return SegmentationResult(segments=segments, total_segments=len(segments), segmentation_method=chosen)


def merge_segments(segments: List[TextSegment], segment_ids: List[str]) -> TextSegment:
    """Combine the selected segments, in document order, into one chapter segment.

    Raises:
        ValueError: If none of segment_ids matches a segment.
    """
    wanted = set(segment_ids)
    selected = sorted((s for s in segments if s.id in wanted), key=lambda s: s.start_position)
    if not selected:
        raise ValueError("No segments selected for merging")

    first, last = selected[0], selected[-1]
    return TextSegment(
        id="merged_" + "_".join(segment_ids),
        content=MERGE_SEPARATOR.join(s.content for s in selected),
        type=SegmentType.CHAPTER,
        start_position=first.start_position,
        end_position=last.end_position,
        title=f"Merged: {first.title}",
        summary=f"Combined {len(selected)} segments",
    )


def _is_dialogue(line: str) -> bool:
    return any(pattern.search(line) for pattern in DIALOGUE_PATTERNS)


def _line_spans(text: str) -> List[Tuple[int, int]]:
    spans = []
    position = 0
    for line in text.split("\n"):
        spans.append((position, position + len(line)))
        position += len(line) + 1
    return spans


def _append_if_content(segments: List[TextSegment], text: str, start: int, end: int) -> None:
    start, end = trimmed_span(text, start, end)
    if end > start:
        segments.append(_span_segment(text, "speaker", len(segments) + 1, SegmentType.SPEAKER_CHANGE,
                                      start, end, title_chars=50))


def _span_segment(text: str, prefix: str, number: int, segment_type: SegmentType,
                  start: int, end: int, title_chars: Optional[int] = None) -> TextSegment:
    content = text[start:end]
    return TextSegment(
        id=f"{prefix}_{number}",
        content=content,
        type=segment_type,
        start_position=start,
        end_position=end,
        title=extract_title(content[:title_chars] if title_chars else content),
    )
