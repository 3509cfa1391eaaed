"""
Configuration settings for the mock interview service.
All settings can be overridden via environment variables.
"""
import os
from typing import List
from dataclasses import dataclass, field


def _env_bool(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LLMConfig:
    """Generative model server configuration (OpenAI-compatible chat API)."""
    base_url: str = field(default_factory=lambda: os.getenv("LLM_URL", "http://localhost:9000"))
    chat_endpoint: str = "/v1/chat/completions"
    model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "llama-3.1-8b-instant"))
    api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    timeout: int = 60
    max_retries: int = 3

    # Generation parameters
    question_temperature: float = 0.3
    evaluation_temperature: float = 0.3
    presence_penalty: float = 1.0
    frequency_penalty: float = 0.7

    def chat_url_for(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}{self.chat_endpoint}"


@dataclass
class WhisperConfig:
    """Whisper STT configuration."""
    model_path: str = field(default_factory=lambda: os.getenv("WHISPER_MODEL_PATH", "base"))
    device: str = field(default_factory=lambda: os.getenv("WHISPER_DEVICE", "cpu"))
    compute_type: str = field(default_factory=lambda: os.getenv("WHISPER_COMPUTE_TYPE", "int8"))
    language: str = "en"


@dataclass
class SpeechConfig:
    """Text-to-speech configuration."""
    enabled: bool = field(default_factory=lambda: _env_bool("TTS_ENABLED"))
    model: str = field(default_factory=lambda: os.getenv("TTS_MODEL", "tts-1"))
    voice: str = field(default_factory=lambda: os.getenv("TTS_VOICE", "alloy"))
    response_format: str = "mp3"


@dataclass
class InterviewConfig:
    """Interview flow configuration."""
    # Joins user answers for the whole-session evaluation
    answer_separator: str = "\n\n---\n\n"
    cors_origins: List[str] = field(default_factory=lambda: [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ])


class Config:
    """Main configuration class combining all config sections."""

    def __init__(self):
        self.llm = LLMConfig()
        self.whisper = WhisperConfig()
        self.speech = SpeechConfig()
        self.interview = InterviewConfig()
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


# Global config instance
config = Config()
