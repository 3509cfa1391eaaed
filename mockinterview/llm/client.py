"""
LLM client wrapper for an OpenAI-compatible chat completions server
(llama.cpp, vLLM, Groq, ...). Handles retries and response cleaning.
"""
import time
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from mockinterview.models.schemas import ConversationTurn
from mockinterview.utils.cleaning import ResponseCleaner
from mockinterview.utils.config import config
from mockinterview.utils.errors import GenerationError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Generative model collaborator.

    `complete(system_prompt, turns)` sends the system prompt followed by the
    conversation turns and returns the assistant text, or raises GenerationError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        self.base_url = base_url or config.llm.base_url
        self.chat_url = config.llm.chat_url_for(self.base_url)
        self.model = model or config.llm.model
        self.api_key = api_key if api_key is not None else config.llm.api_key
        self.timeout = timeout or config.llm.timeout
        self.max_retries = config.llm.max_retries if max_retries is None else max_retries
        logger.info(f"LLM Client initialized: {self.chat_url} (model={self.model}, timeout={self.timeout}s)")

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _make_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request to the LLM server with retries."""
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                response = requests.post(
                    self.chat_url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()
            except requests.exceptions.Timeout as e:
                last_error = e
                if attempt < self.max_retries:
                    logger.warning(f"LLM request timed out (attempt {attempt + 1}), retrying")
                    time.sleep(1 * (attempt + 1))
            except (requests.exceptions.RequestException, ValueError) as e:
                last_error = e
                if attempt < self.max_retries:
                    logger.warning(f"LLM request failed (attempt {attempt + 1}): {e}")
                    time.sleep(0.5 * (attempt + 1))

        raise GenerationError(
            f"LLM server unavailable after {self.max_retries + 1} attempts: {last_error}"
        )

    @staticmethod
    def build_messages(system_prompt: str, turns: Sequence[ConversationTurn] = ()) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(turn.as_message() for turn in turns)
        return messages

    def complete(
        self,
        system_prompt: str,
        turns: Sequence[ConversationTurn] = (),
        temperature: Optional[float] = None,
        max_tokens: int = 600,
    ) -> str:
        """
        Generate the next assistant message.

        Args:
            system_prompt: Instructions for this call (the prompt role)
            turns: Conversation history used as context
            temperature: Sampling temperature (None uses the question default)
            max_tokens: Maximum tokens to generate

        Returns:
            Raw assistant text with reasoning blocks removed
        """
        payload = {
            "model": self.model,
            "messages": self.build_messages(system_prompt, turns),
            "temperature": config.llm.question_temperature if temperature is None else temperature,
            "max_tokens": max_tokens,
            "presence_penalty": config.llm.presence_penalty,
            "frequency_penalty": config.llm.frequency_penalty,
        }

        data = self._make_request(payload)
        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            raise GenerationError(f"Malformed LLM response: {str(data)[:200]}")

        content = ResponseCleaner.strip_reasoning(content)
        if not content:
            raise GenerationError("LLM returned an empty response")

        logger.info(f"LLM response: {content[:100]}...")
        return content

    def health_check(self) -> bool:
        """Check if LLM server is responding."""
        try:
            return bool(self.complete("Reply with OK.", max_tokens=5))
        except GenerationError:
            return False
