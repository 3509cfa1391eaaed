"""
Parser for free-text evaluation output from the generative model.

The model is asked for lines like::

    • Correctness: 7/10 – Explains the approach well
    Overall Feedback: Solid answer that could use more detail.
    Rating: Good

but nothing guarantees the format, so the parser works line by line with a
single open capture section and degrades to a sparser result instead of failing.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from mockinterview.models.schemas import CATEGORY_KEYS

logger = logging.getLogger(__name__)


# Optional bullet, label, colon, integer "/10", optional dash, explanation
SCORED_LINE = re.compile(
    r"^\s*(?:[•\-*·]\s*)?(?P<label>.+?)\s*:\s*(?P<score>\d+)\s*/\s*10\s*[–—-]?\s*(?P<explanation>.*)$"
)

# Substring -> canonical category, checked in order
CATEGORY_ALIASES: List[Tuple[str, str]] = [
    ("clarity", "Clarity & Structure"),
    ("confidence", "Confidence & Tone"),
    ("communication", "Communication Skills"),
    ("correctness", "Correctness"),
    ("completeness", "Completeness"),
    ("relevance", "Relevance"),
]

# Header prefix -> output field, checked in order
SECTION_HEADERS: List[Tuple[str, str]] = [
    ("overall feedback", "Overall Feedback Summary"),
    ("model answer", "Model Answer"),
    ("improvement suggestions", "Improvement Suggestions"),
    ("key points", "Key Points"),
    ("rating", "Rating"),
    ("suggestion", "Suggestion"),
]

SECTION_FIELDS = tuple(name for _, name in SECTION_HEADERS)

MAX_SCORE = 10

_LEADING_MARKUP = re.compile(r"^[\s•\-*·#>]+")


def normalize_category(label: str) -> str:
    """Map a scored-line label onto a canonical category, or return it stripped."""
    lowered = label.lower().replace("&", "and")
    for needle, canonical in CATEGORY_ALIASES:
        if needle in lowered:
            return canonical
    return label.strip()


def _header_for(line: str) -> Optional[str]:
    lowered = _LEADING_MARKUP.sub("", line).lower()
    for prefix, field_name in SECTION_HEADERS:
        if lowered.startswith(prefix):
            return field_name
    return None


def _text_after_colon(line: str) -> str:
    if ":" not in line:
        return ""
    return line.split(":", 1)[1].strip().strip("*").strip()


class EvaluationParser:
    """
    Capture-section state machine over the lines of one evaluation block.

    A scored-category line closes any open section. A section header opens a
    section seeded with the text after its first colon. Inside a section,
    non-blank lines are appended and a blank line ends the capture.
    """

    def parse(self, text: Any) -> Dict[str, Any]:
        if not isinstance(text, str) or not text.strip():
            return {}

        result: Dict[str, Any] = {}
        buffers: Dict[str, str] = {}
        current: Optional[str] = None

        for line in text.splitlines():
            match = SCORED_LINE.match(line)
            if match:
                key = normalize_category(match.group("label"))
                if key in CATEGORY_KEYS:
                    score = min(int(match.group("score")), MAX_SCORE)
                    result[key] = {
                        "score": f"{score}/10",
                        "explanation": match.group("explanation").strip(),
                    }
                else:
                    logger.debug(f"Ignoring scored line with unknown label: {key!r}")
                current = None
                continue

            header = _header_for(line)
            if header:
                current = header
                buffers[header] = _text_after_colon(line)
                continue

            if current is None:
                continue

            stripped = line.strip()
            if not stripped:
                current = None
                continue

            buffers[current] = f"{buffers[current]} {stripped}".strip()

        for field_name in SECTION_FIELDS:
            value = buffers.get(field_name, "").strip()
            if value:
                result[field_name] = value

        return result


# Module-level parser; it holds no state between calls
evaluation_parser = EvaluationParser()


def parse_evaluation_text(text: Any) -> Dict[str, Any]:
    """Parse one evaluation block into a partial evaluation map."""
    return evaluation_parser.parse(text)
