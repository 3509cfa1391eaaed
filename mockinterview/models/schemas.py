"""
Pydantic models for the interview service: conversation turns, evaluation
records, persisted interviews, dashboard statistics, and API payloads.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# The six scored evaluation categories, in display order
CATEGORY_KEYS = (
    "Correctness",
    "Clarity & Structure",
    "Completeness",
    "Relevance",
    "Confidence & Tone",
    "Communication Skills",
)


class TurnRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    """Lifecycle of one interview."""
    CREATED = "created"
    INTRODUCED = "introduced"
    AWAITING_ANSWER = "awaiting_answer"
    ANSWER_RECEIVED = "answer_received"
    ENDED = "ended"


class Rating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    SATISFACTORY = "Satisfactory"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    POOR = "Poor"


class ConversationTurn(BaseModel):
    """One message in the interview transcript. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    role: TurnRole
    content: str

    def as_message(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class CategoryScore(BaseModel):
    score: str = ""  # "<n>/10"; empty when the model omitted the category
    explanation: str = ""


def _known_categories(scores: Dict[str, CategoryScore]) -> Dict[str, CategoryScore]:
    return {key: value for key, value in (scores or {}).items() if key in CATEGORY_KEYS}


class EvaluationRecord(BaseModel):
    """Structured evaluation of a single answer."""
    question: str = ""
    user_response: str = ""
    scores: Dict[str, CategoryScore] = Field(default_factory=dict)
    overall_feedback: str = ""
    model_answer: str = ""
    improvement_suggestions: str = ""
    key_points: str = ""
    rating: str = ""
    suggestion: str = ""

    @field_validator("scores")
    @classmethod
    def drop_unknown_categories(cls, value):
        return _known_categories(value)


class SessionAnalysis(BaseModel):
    """Whole-interview evaluation attached when the interview ends."""
    scores: Dict[str, CategoryScore] = Field(default_factory=dict)
    overall_feedback_summary: str = ""

    @field_validator("scores")
    @classmethod
    def drop_unknown_categories(cls, value):
        return _known_categories(value)


class InterviewRecord(BaseModel):
    """Persisted form of one interview session."""
    interview_id: str
    user_id: str
    company: str
    role: str
    level: str
    created_at: datetime
    state: SessionState = SessionState.CREATED
    turns: List[ConversationTurn] = Field(default_factory=list)
    evaluations: List[EvaluationRecord] = Field(default_factory=list)
    analysis: Optional[SessionAnalysis] = None
    ended_at: Optional[datetime] = None


# ================================================================
# Dashboard statistics
# ================================================================

class AverageScores(BaseModel):
    correctness: float = 0.0
    clarity_structure: float = 0.0
    completeness: float = 0.0
    relevance: float = 0.0
    confidence_tone: float = 0.0
    communication_skills: float = 0.0
    overall: float = 0.0


class TrendSeries(BaseModel):
    dates: List[str] = Field(default_factory=list)
    scores: List[float] = Field(default_factory=list)


class AggregateStats(BaseModel):
    total_interviews: int = 0
    average_scores: AverageScores = Field(default_factory=AverageScores)
    trends_over_time: TrendSeries = Field(default_factory=TrendSeries)
    role_distribution: Dict[str, int] = Field(default_factory=dict)
    level_distribution: Dict[str, int] = Field(default_factory=dict)
    company_distribution: Dict[str, int] = Field(default_factory=dict)


# ================================================================
# API payloads
# ================================================================

class StartInterviewRequest(BaseModel):
    user_id: str
    company: str
    role: str
    level: str


class StartInterviewResponse(BaseModel):
    interview_id: str
    state: SessionState


class TurnResponse(BaseModel):
    text: str
    audio: Optional[str] = None  # base64 encoded speech


class SubmitAnswerRequest(BaseModel):
    text: Optional[str] = None
    audio: Optional[str] = None  # base64 encoded recording
    turn_history: Optional[List[ConversationTurn]] = None


class SubmitAnswerResponse(BaseModel):
    transcript: str
    next_question_text: str
    audio: Optional[str] = None
    evaluation: EvaluationRecord
    state: SessionState


class EndInterviewRequest(BaseModel):
    turn_history: Optional[List[ConversationTurn]] = None


class EndInterviewResponse(BaseModel):
    analysis: SessionAnalysis
    state: SessionState


class InterviewSummary(BaseModel):
    """Row in a user's interview history."""
    interview_id: str
    company: str
    role: str
    level: str
    created_at: datetime
    state: SessionState
    answers: int
    analysis: Optional[SessionAnalysis] = None


class SuggestionRequest(BaseModel):
    question: str
    answer: str


class SuggestionResponse(BaseModel):
    suggestion: str
