"""
Speech-to-text collaborator backed by faster-whisper.
"""
import os
import logging
import tempfile
import threading
from typing import Optional

from mockinterview.utils.config import config
from mockinterview.utils.errors import TranscriptionError

logger = logging.getLogger(__name__)


class WhisperTranscriber:
    """
    Transcribes recorded answers. The Whisper model is loaded lazily on the
    first call to avoid startup delay.
    """

    def __init__(self, model_path: Optional[str] = None, device: Optional[str] = None,
                 compute_type: Optional[str] = None):
        self.model_path = model_path or config.whisper.model_path
        self.device = device or config.whisper.device
        self.compute_type = compute_type or config.whisper.compute_type
        self._model = None
        self._load_lock = threading.Lock()

    def _get_model(self):
        if self._model is None:
            with self._load_lock:
                if self._model is None:
                    from faster_whisper import WhisperModel
                    logger.info(f"Loading Whisper model {self.model_path} on {self.device}")
                    self._model = WhisperModel(
                        self.model_path,
                        device=self.device,
                        compute_type=self.compute_type
                    )
        return self._model

    def transcribe(self, audio_bytes: bytes) -> str:
        """
        Transcribe raw audio.

        Raises:
            TranscriptionError: the model failed or heard nothing usable
        """
        if not audio_bytes:
            raise TranscriptionError("No audio received")

        audio_path = None
        try:
            with tempfile.NamedTemporaryFile(delete=False, suffix=".webm") as tmp:
                tmp.write(audio_bytes)
                audio_path = tmp.name

            segments, _ = self._get_model().transcribe(audio_path, language=config.whisper.language)
            text = " ".join(segment.text for segment in segments).strip()
        except TranscriptionError:
            raise
        except Exception as e:
            logger.error(f"Transcription failed: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e
        finally:
            if audio_path:
                try:
                    os.unlink(audio_path)
                except OSError:
                    logger.warning(f"Could not remove temp audio file {audio_path}")

        if not text:
            raise TranscriptionError("I didn't catch that. Could you please repeat your answer?")

        logger.info(f"Transcribed {len(audio_bytes)} bytes: {text[:80]}")
        return text
