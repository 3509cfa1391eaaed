"""
Text-to-speech collaborator backed by the OpenAI speech API.
"""
import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from mockinterview.utils.config import config
from mockinterview.utils.errors import SynthesisError

logger = logging.getLogger(__name__)


class OpenAISpeechSynthesizer:
    """Speaks interviewer turns. The API client is created on first use."""

    def __init__(self, model: Optional[str] = None, voice: Optional[str] = None, client=None):
        self.model = model or config.speech.model
        self.voice = voice or config.speech.voice
        self._client = client

    def _get_client(self):
        if self._client is None:
            try:
                self._client = OpenAI()
            except OpenAIError as e:
                raise SynthesisError(f"Speech client unavailable: {e}") from e
        return self._client

    def synthesize(self, text: str) -> bytes:
        """
        Returns encoded audio for `text`.

        Raises:
            SynthesisError: the speech API failed
        """
        if not text:
            raise SynthesisError("Nothing to synthesize")
        try:
            response = self._get_client().audio.speech.create(
                model=self.model,
                voice=self.voice,
                input=text,
                response_format=config.speech.response_format,
            )
            return response.content
        except OpenAIError as e:
            raise SynthesisError(f"Speech synthesis failed: {e}") from e
