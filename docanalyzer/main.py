"""FastAPI application for the document analyzer."""
import logging
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import Field

from docanalyzer.chunker import chunk_document, chunk_document_by_words, get_chunk_stats, reconstruct_document
from docanalyzer.config import settings
from docanalyzer.document_processor import DocumentProcessor
from docanalyzer.models import (
    CamelModel,
    ChunkedDocument,
    ChunkStats,
    DocumentChunk,
    PodcastScript,
    SegmentationMethod,
    SegmentationResult,
    TextSegment,
)
from docanalyzer.podcast import build_podcast_prompt, parse_podcast_response, truncate_script_for_unregistered
from docanalyzer.segmentation import merge_segments, segment_text
from docanalyzer.tts import (
    AzureSpeechSynthesizer,
    Synthesizer,
    generate_dialogue_audio,
    generate_simple_audio,
    load_speech_config,
    speech_credentials_status,
    truncate_audio_for_unregistered,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Document Analyzer",
    description="Chunking, segmentation and speech synthesis for uploaded documents",
    version="0.1.0",
)

# Initialize components
document_processor = DocumentProcessor()
_synthesizer: Optional[Synthesizer] = None
_synthesizer_lock = threading.Lock()


def get_speech_synthesizer() -> Synthesizer:
    """Build the Azure synthesizer on first use; 503 when credentials are missing."""
    global _synthesizer
    # sync TTS routes run in the threadpool; build a single instance
    with _synthesizer_lock:
        if _synthesizer is None:
            try:
                _synthesizer = AzureSpeechSynthesizer(load_speech_config(settings))
            except ValueError as e:
                logger.error(f"Speech synthesis unavailable: {e}")
                raise HTTPException(status_code=503, detail=str(e))
        return _synthesizer


class ChunkRequest(CamelModel):
    """Request model for chunking raw text."""
    content: str
    max_words: int = Field(default_factory=lambda: settings.default_max_words, gt=0)
    strategy: Literal["paragraph", "words"] = "paragraph"


class ReconstructRequest(CamelModel):
    """Request model for rebuilding a document from edited chunks."""
    chunked_document: ChunkedDocument
    modified_chunks: Dict[int, str] = Field(default_factory=dict)
    clean_markup: bool = False


class ReconstructResponse(CamelModel):
    content: str


class SegmentRequest(CamelModel):
    content: str
    method: SegmentationMethod = SegmentationMethod.AUTO


class MergeRequest(CamelModel):
    """Request model for merging user-selected segments."""
    segments: List[TextSegment]
    segment_ids: List[str]


class PodcastPromptRequest(CamelModel):
    selected_text: str
    document_title: str
    custom_instructions: Optional[str] = None


class PodcastPromptResponse(CamelModel):
    prompt: str


class PodcastScriptRequest(CamelModel):
    """Request model for parsing an LLM podcast response."""
    response: str
    registered: bool = True


class DialogueAudioRequest(CamelModel):
    dialogue: str
    registered: bool = True


class SpeakRequest(CamelModel):
    text: str
    voice: Optional[str] = None


class UploadResponse(CamelModel):
    """Response model for file upload."""
    status: str
    filename: str
    file_type: str
    size_bytes: int
    content: str
    total_word_count: int
    chunks: List[DocumentChunk]


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Document Analyzer API",
        "version": "0.1.0",
        "endpoints": {
            "/upload": "Upload a PDF, DOCX or TXT file and get its text and chunks",
            "/chunks": "Chunk raw text by word count",
            "/chunks/stats": "Chunk statistics for the viewer",
            "/chunks/reconstruct": "Rebuild a document from edited chunks",
            "/segments": "Segment text for mind-map generation",
            "/segments/merge": "Merge selected segments into one",
            "/podcast/prompt": "Build the podcast script prompt for a passage",
            "/podcast/script": "Parse a podcast script response into sections",
            "/tts/dialogue": "Synthesize a two-speaker dialogue to MP3",
            "/tts/speak": "Synthesize a single text to MP3",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "speech_credentials": speech_credentials_status(settings)}


@app.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    process_math: bool = Query(True, description="Convert plain-text math notation"),
):
    """Extract text from an uploaded document and chunk it.

    The file is written to the upload directory only for the duration of
    the extraction.
    """
    filename = Path(file.filename or "unnamed_file").name
    file_ext = Path(filename).suffix.lower()
    if file_ext not in settings.allowed_extensions:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Please upload {', '.join(settings.allowed_extensions)} files."
        )

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large")

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    save_path = upload_dir / f"{uuid.uuid4().hex}{file_ext}"
    try:
        with open(save_path, "wb") as f:
            f.write(content)
        text, chunked = document_processor.process_file(str(save_path), process_math=process_math)
        return UploadResponse(
            status="success",
            filename=filename,
            file_type=file_ext.lstrip("."),
            size_bytes=len(content),
            content=text,
            total_word_count=chunked.total_word_count,
            chunks=chunked.chunks,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error uploading file: {e}")
        raise HTTPException(status_code=500, detail=f"Error processing upload: {str(e)}")
    finally:
        save_path.unlink(missing_ok=True)


def _chunk(request: ChunkRequest) -> ChunkedDocument:
    if request.strategy == "words":
        return chunk_document_by_words(request.content, request.max_words)
    return chunk_document(request.content, request.max_words)


@app.post("/chunks", response_model=ChunkedDocument)
async def create_chunks(request: ChunkRequest):
    """Chunk text by word count (paragraph-aware or fixed word window)."""
    try:
        return _chunk(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error chunking document: {str(e)}")


@app.post("/chunks/stats", response_model=ChunkStats)
async def chunk_stats(request: ChunkRequest):
    try:
        return get_chunk_stats(_chunk(request))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error chunking document: {str(e)}")


@app.post("/chunks/reconstruct", response_model=ReconstructResponse)
async def reconstruct(request: ReconstructRequest):
    """Rebuild a document, substituting edited chunks by index."""
    try:
        content = reconstruct_document(
            request.chunked_document,
            request.modified_chunks,
            clean_markup=request.clean_markup,
        )
        return ReconstructResponse(content=content)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error reconstructing document: {str(e)}")


@app.post("/segments", response_model=SegmentationResult)
async def create_segments(request: SegmentRequest):
    """Segment text into chapters, themes, dialogue or paragraph groups."""
    try:
        return segment_text(request.content, request.method)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error segmenting text: {str(e)}")


@app.post("/segments/merge", response_model=TextSegment)
async def merge(request: MergeRequest):
    try:
        return merge_segments(request.segments, request.segment_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error merging segments: {str(e)}")


@app.post("/podcast/prompt", response_model=PodcastPromptResponse)
async def podcast_prompt(request: PodcastPromptRequest):
    prompt = build_podcast_prompt(request.selected_text, request.document_title, request.custom_instructions)
    return PodcastPromptResponse(prompt=prompt)


@app.post("/podcast/script", response_model=PodcastScript)
async def podcast_script(request: PodcastScriptRequest):
    """Parse a structured podcast response; previews are truncated for unregistered users."""
    try:
        script = parse_podcast_response(request.response)
        if not request.registered:
            script = truncate_script_for_unregistered(script)
        return script
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error parsing podcast script: {str(e)}")


@app.post("/tts/dialogue")
def dialogue_audio(
    request: DialogueAudioRequest,
    synthesizer: Synthesizer = Depends(get_speech_synthesizer),
):
    """Synthesize a HOST/GUEST (or Speaker 1/2) script to a single MP3."""
    try:
        audio = generate_dialogue_audio(request.dialogue, synthesizer)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Dialogue synthesis failed: {e}")
        raise HTTPException(status_code=500, detail=f"Error generating audio: {str(e)}")

    if not request.registered:
        audio = truncate_audio_for_unregistered(audio)
    return Response(content=audio, media_type="audio/mpeg")


@app.post("/tts/speak")
def speak(
    request: SpeakRequest,
    synthesizer: Synthesizer = Depends(get_speech_synthesizer),
):
    try:
        audio = generate_simple_audio(request.text, request.voice or settings.default_voice, synthesizer)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Speech synthesis failed: {e}")
        raise HTTPException(status_code=500, detail=f"Error generating audio: {str(e)}")
    return Response(content=audio, media_type="audio/mpeg")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "docanalyzer.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
