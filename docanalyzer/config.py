from typing import Optional, List
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    upload_dir: str = Field("./uploads", description="Scratch directory for uploaded files")
    max_upload_bytes: int = Field(50 * 1024 * 1024, description="Upload size limit (50MB)")
    allowed_extensions: List[str] = Field(default=[".pdf", ".docx", ".txt"])

    api_host: str = Field("0.0.0.0")
    api_port: int = Field(8000)

    # Chunking
    default_max_words: int = Field(1000, description="Word cap per chunk")

    # Azure Speech (text-to-speech). Credentials are checked when the
    # synthesizer is first built, never at import time.
    azure_speech_key: Optional[str] = Field(None)
    azure_speech_region: Optional[str] = Field(None)
    azure_speech_endpoint: Optional[str] = Field(None, description="Overrides the regional TTS endpoint")
    speech_output_format: str = Field("audio-16khz-32kbitrate-mono-mp3")
    speech_timeout: int = Field(60, description="Seconds to wait for one synthesis request")
    host_voice: str = Field("en-US-DavisNeural")
    guest_voice: str = Field("en-US-JennyNeural")
    default_voice: str = Field("en-US-JennyNeural")
    silence_bytes: int = Field(1500, description="Zero bytes inserted after each dialogue turn")

    # Preview limits for unregistered users
    unregistered_audio_seconds: int = Field(30)
    unregistered_script_words: int = Field(100)

    # pydantic-settings configuration: env file and encoding
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

# instantiate settings
settings = Settings()
