"""
Text cleaning utilities for model outputs and free-text labels.
Handles reasoning-block removal for models that think out loud (DeepSeek R1 style).
"""
import re


class ResponseCleaner:
    """
    Cleans generative model responses before they become interview turns.
    """

    THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
    # Unterminated reasoning block at the start of a truncated response
    OPEN_THINK = re.compile(r"^\s*<think>.*", re.DOTALL | re.IGNORECASE)
    STRAY_TAG = re.compile(r"</?\s*think\s*>", re.IGNORECASE)

    FILLER_PREFIXES = [
        r"^here'?s (?:your|the|my) (?:next |first )?question\s*[:\-]\s*",
        r"^next question\s*[:\-]\s*",
        r"^interviewer\s*:\s*",
    ]

    @classmethod
    def strip_reasoning(cls, text: str) -> str:
        """Remove <think> blocks and stray think tags."""
        if not text:
            return ""
        cleaned = cls.THINK_BLOCK.sub("", text)
        cleaned = cls.OPEN_THINK.sub("", cleaned)
        cleaned = cls.STRAY_TAG.sub("", cleaned)
        return cleaned.strip()

    @classmethod
    def clean_interviewer_response(cls, text: str) -> str:
        """
        Full cleaning pipeline for spoken interviewer turns.

        Removes reasoning, markdown emphasis, filler lead-ins and wrapping quotes,
        and collapses whitespace. Returns "" when nothing usable is left.
        """
        cleaned = cls.strip_reasoning(text)
        if not cleaned:
            return ""

        cleaned = re.sub(r"\*\*(.*?)\*\*", r"\1", cleaned)
        cleaned = re.sub(r"__(.*?)__", r"\1", cleaned)

        for pattern in cls.FILLER_PREFIXES:
            cleaned = re.sub(pattern, "", cleaned, flags=re.IGNORECASE)

        cleaned = re.sub(r"\s+", " ", cleaned).strip()

        if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in "\"'":
            cleaned = cleaned[1:-1].strip()

        return cleaned

    @classmethod
    def clean_evaluation_response(cls, text: str) -> str:
        """Evaluations keep their line structure; only reasoning is removed."""
        return cls.strip_reasoning(text)


def clean_label(label: str) -> str:
    """Lowercase a free-text label, drop periods and commas, collapse whitespace."""
    if not label:
        return ""
    cleaned = label.lower()
    cleaned = re.sub(r"[.,]", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.strip()
