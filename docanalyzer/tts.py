"""
Text-to-speech for podcast dialogue scripts via the Azure Speech REST API.

Flow:
- parse_dialogue turns a markdown-flavoured script into speaker turns
- each turn is cleaned (clean_text_for_speech) and synthesized in order
- turns are joined with a fixed silence buffer; a failing turn is logged and skipped

Credentials are checked explicitly (load_speech_config) when a synthesizer is
built, not when this module is imported.
"""
import logging
import re
from typing import Dict, List, Optional, Protocol, Tuple
from xml.sax.saxutils import escape, quoteattr

import requests
from pydantic import BaseModel

from docanalyzer.config import Settings, settings
from docanalyzer.models import SpeakerTurn

logger = logging.getLogger(__name__)

MP3_BYTES_PER_SECOND = 4000  # 32 kbps MP3

# Applied in order; the last two keep only characters the voices read cleanly.
_SPEECH_CLEANUP = [
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"#{1,6}\s*"), ""),
    (re.compile(r"\[([^\]]*)\]"), r"\1"),
    (re.compile(r"\([^)]*\)"), ""),
    (re.compile(r"[^\w\s.,!?;:\-'\"]"), ""),
    (re.compile(r"\s+"), " "),
]

_HOST_LINE = re.compile(r"^HOST:\s*", re.IGNORECASE)
_GUEST_LINE = re.compile(r"^GUEST:\s*", re.IGNORECASE)

# Speaker N formats, tried in order after HOST/GUEST.
SPEAKER_PATTERNS = [
    re.compile(r"^\*?\*?Speaker\s+([12])(?:\s*\([^)]*\))?\s*:\*?\*?\s*(.+)$", re.IGNORECASE),  # **Speaker 1:** text
    re.compile(r"^Speaker\s+([12]):\s*(.+)$", re.IGNORECASE),  # Speaker 1: text
    re.compile(r"^\*\*Speaker\s+([12])(?:\s*\([^)]*\))?\*\*:\s*(.+)$", re.IGNORECASE),  # **Speaker 1**: text
    re.compile(r"^([12]):\s*(.+)$"),  # 1: text
]


class SpeechConfig(BaseModel):
    """Resolved Azure Speech settings for one synthesizer."""

    key: str
    region: str
    endpoint: Optional[str] = None
    output_format: str = "audio-16khz-32kbitrate-mono-mp3"
    timeout: int = 60

    @property
    def url(self) -> str:
        if self.endpoint:
            return self.endpoint.rstrip("/") + "/cognitiveservices/v1"
        return f"https://{self.region}.tts.speech.microsoft.com/cognitiveservices/v1"


def speech_credentials_status(settings: Settings) -> Dict[str, str]:
    """Report which Azure Speech credentials are present, without raising."""
    return {
        "key": "OK" if settings.azure_speech_key else "MISSING",
        "region": settings.azure_speech_region or "MISSING",
        "endpoint": settings.azure_speech_endpoint or "default",
    }


def load_speech_config(settings: Settings) -> SpeechConfig:
    """Build a SpeechConfig from settings.

    Raises:
        ValueError: If the key or region is not configured.
    """
    if not settings.azure_speech_key or not settings.azure_speech_region:
        status = speech_credentials_status(settings)
        raise ValueError(
            f"Azure Speech credentials not configured. Key: {status['key']}, Region: {status['region']}"
        )
    return SpeechConfig(
        key=settings.azure_speech_key,
        region=settings.azure_speech_region,
        endpoint=settings.azure_speech_endpoint,
        output_format=settings.speech_output_format,
        timeout=settings.speech_timeout,
    )


class Synthesizer(Protocol):
    def synthesize(self, text: str, voice: str) -> bytes:
        ...


class AzureSpeechSynthesizer:
    """Calls the Azure Speech REST endpoint, one request per utterance."""

    def __init__(self, config: SpeechConfig):
        self.config = config
        self.session = requests.Session()

    def _ssml(self, text: str, voice: str) -> str:
        return (
            "<speak version='1.0' xml:lang='en-US'>"
            f"<voice name={quoteattr(voice)}>{escape(text)}</voice>"
            "</speak>"
        )

    def synthesize(self, text: str, voice: str) -> bytes:
        """Return MP3 bytes for text spoken by voice.

        Raises:
            requests.RequestException: On transport or HTTP errors.
            RuntimeError: If the service answers without audio.
        """
        response = self.session.post(
            self.config.url,
            data=self._ssml(text, voice).encode("utf-8"),
            headers={
                "Ocp-Apim-Subscription-Key": self.config.key,
                "Content-Type": "application/ssml+xml",
                "X-Microsoft-OutputFormat": self.config.output_format,
                "User-Agent": "docanalyzer",
            },
            timeout=self.config.timeout,
        )
        response.raise_for_status()
        if not response.content:
            raise RuntimeError("No audio data received")
        logger.info(f"Generated {len(response.content)} bytes of audio with {voice}")
        return response.content


def clean_text_for_speech(text: str) -> str:
    """Strip markdown and unsafe characters so the voice reads only prose."""
    cleaned = text
    for pattern, replacement in _SPEECH_CLEANUP:
        cleaned = pattern.sub(replacement, cleaned)
    return cleaned.strip()


def parse_dialogue(dialogue: str) -> List[SpeakerTurn]:
    """Split a two-speaker script into turns, ignoring lines with no speaker label."""
    turns: List[SpeakerTurn] = []
    for line in dialogue.split("\n"):
        if not line.strip():
            continue
        speaker, text = _match_speaker(line)
        if speaker is None:
            continue
        text = text.replace("*", "").strip()
        if text:
            turns.append(SpeakerTurn(speaker=speaker, text=text))
    return turns


def _match_speaker(line: str) -> Tuple[Optional[str], str]:
    if _HOST_LINE.match(line):
        return "1", _HOST_LINE.sub("", line, count=1)
    if _GUEST_LINE.match(line):
        return "2", _GUEST_LINE.sub("", line, count=1)
    for pattern in SPEAKER_PATTERNS:
        match = pattern.match(line)
        if match:
            return match.group(1), match.group(2)
    return None, ""


def generate_simple_audio(text: str, voice: str, synthesizer: Synthesizer) -> bytes:
    """Clean text and synthesize it with a single voice."""
    clean = clean_text_for_speech(text)
    if not clean:
        raise ValueError("No valid text to synthesize")
    logger.info(f"Generating audio for: {clean[:50]}...")
    return synthesizer.synthesize(clean, voice)


def generate_dialogue_audio(
    dialogue: str,
    synthesizer: Synthesizer,
    host_voice: Optional[str] = None,
    guest_voice: Optional[str] = None,
    silence_bytes: Optional[int] = None,
) -> bytes:
    """Synthesize every turn in order and join them with silence padding.

    A turn whose synthesis fails is logged and left out; the rest still play.
    Voices and silence length default to the values in settings.

    Raises:
        ValueError: If no turn produced audio.
    """
    turns = parse_dialogue(dialogue)
    logger.info(f"Parsed dialogue into {len(turns)} speaker turns")

    buffers: List[bytes] = []
    host_voice = host_voice or settings.host_voice
    guest_voice = guest_voice or settings.guest_voice
    if silence_bytes is None:
        silence_bytes = settings.silence_bytes
    silence = b"\x00" * silence_bytes
    for turn in turns:
        voice = host_voice if turn.speaker == "1" else guest_voice
        try:
            audio = generate_simple_audio(turn.text, voice, synthesizer)
        except Exception as e:
            logger.error(f"Failed to generate audio for Speaker {turn.speaker}: {e}")
            continue
        buffers.append(audio)
        buffers.append(silence)

    if not buffers:
        sample = [line for line in dialogue.split("\n") if line.strip()][:10]
        logger.error(f"No speaker segments found in dialogue; sample lines: {sample}")
        raise ValueError("No valid speaker segments found. Please check dialogue format.")

    combined = b"".join(buffers)
    logger.info(f"Combined audio: {len(combined)} bytes from {len(buffers) // 2} speaker segments")
    return combined


def truncate_audio_for_unregistered(audio: bytes, max_duration_seconds: Optional[int] = None) -> bytes:
    """Cut an MP3 buffer down to roughly max_duration_seconds (settings.unregistered_audio_seconds)."""
    if max_duration_seconds is None:
        max_duration_seconds = settings.unregistered_audio_seconds
    return audio[:max_duration_seconds * MP3_BYTES_PER_SECOND]
