"""Data models shared by the chunker, segmenter and TTS pipeline.

Attributes are snake_case in Python; JSON uses camelCase aliases
(``chunkIndex``, ``startPosition``, ...) to match what the web client reads.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentChunk(CamelModel):
    """A bounded-size contiguous slice of a document."""

    id: str = Field(description="Chunk identifier (e.g. para_0_1700000000000)")
    chunk_index: int = Field(description="Zero-based order in the document")
    content: str = Field(description="Exact text of the slice")
    word_count: int
    start_position: int = Field(description="Offset of the first character in the original text")
    end_position: int = Field(description="Offset just past the last character")


class ChunkedDocument(CamelModel):
    original_content: str
    chunks: List[DocumentChunk]
    total_word_count: int
    chunk_count: int


class ChunkPreview(CamelModel):
    index: int
    words: int
    preview: str


class ChunkStats(CamelModel):
    """Chunk summary shown next to the document viewer."""

    total_chunks: int
    total_words: int
    avg_words_per_chunk: int
    chunks: List[ChunkPreview]


class SegmentType(str, Enum):
    CHAPTER = "chapter"
    SECTION = "section"
    PARAGRAPH = "paragraph"
    THEMATIC_BREAK = "thematic_break"
    SPEAKER_CHANGE = "speaker_change"


class SegmentationMethod(str, Enum):
    AUTO = "auto"
    CHAPTER = "chapter"
    THEMATIC = "thematic"
    DIALOGUE = "dialogue"
    PARAGRAPH = "paragraph"


class TextSegment(CamelModel):
    """A semantically delimited slice of a document, used for mind maps."""

    id: str
    content: str
    type: SegmentType
    start_position: int
    end_position: int
    title: Optional[str] = None
    summary: Optional[str] = None


class SegmentationResult(CamelModel):
    segments: List[TextSegment]
    total_segments: int
    segmentation_method: SegmentationMethod


class SpeakerTurn(BaseModel):
    """One line of a two-speaker dialogue script."""

    speaker: str = Field(description='"1" (host) or "2" (guest)')
    text: str


class PodcastScript(CamelModel):
    title: str
    summary: str
    strengths_weaknesses: str
    reader_gains: str
    quotations: List[str] = Field(default_factory=list)
    full_script: str
