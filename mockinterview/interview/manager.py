"""
Session registry and service operations used by the HTTP layer.
"""
import base64
import binascii
import logging
import threading
from typing import Dict, List, Optional, Sequence

from mockinterview.analytics.aggregation import AggregationEngine, aggregation_engine
from mockinterview.interview.agents import AgentController
from mockinterview.interview.state import ConversationSession
from mockinterview.models.schemas import (
    AggregateStats,
    ConversationTurn,
    EndInterviewResponse,
    InterviewRecord,
    InterviewSummary,
    SubmitAnswerResponse,
    TurnResponse,
)
from mockinterview.utils.errors import PersistenceError, SessionNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _require_text(name: str, value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{name} is required")
    return value


class SessionManager:
    """
    Keeps live sessions keyed by interview id and persists them after every
    committed transition. Sessions missing from the registry are resumed from
    storage.
    """

    def __init__(self, storage, agents: AgentController, aggregation: AggregationEngine = None):
        self.storage = storage
        self.agents = agents
        self.aggregation = aggregation or aggregation_engine
        self._sessions: Dict[str, ConversationSession] = {}
        self._registry_lock = threading.Lock()

    # ========================================
    # Registry
    # ========================================

    def get(self, interview_id: str) -> ConversationSession:
        with self._registry_lock:
            session = self._sessions.get(interview_id)
        if session is not None:
            return session

        record = self.storage.load_interview(interview_id)
        session = ConversationSession.from_record(record, self.agents)
        with self._registry_lock:
            # Another request may have resumed it meanwhile
            session = self._sessions.setdefault(interview_id, session)
        logger.info(f"Resumed interview {interview_id} from storage ({session.state.value})")
        return session

    def _persist(self, session: ConversationSession) -> InterviewRecord:
        """
        Snapshot and save as one step per session, so an older snapshot can
        never overwrite a newer one or re-create a deleted interview.
        """
        with session.persist_lock:
            if session.deleted:
                raise SessionNotFoundError(f"Interview {session.interview_id} was deleted",
                                           interview_id=session.interview_id)
            record = session.to_record()
            try:
                return self.storage.save_interview(record)
            except PersistenceError as e:
                logger.error(f"Saving interview {session.interview_id} failed: {e}")
                raise

    # ========================================
    # Interview flow
    # ========================================

    def start_interview(self, user_id: str, company: str, role: str, level: str) -> ConversationSession:
        """
        Create and store a new interview.

        Raises:
            ValidationError: a required field is blank
        """
        user_id = _require_text("user_id", user_id)
        company = _require_text("company", company)
        role = _require_text("role", role)
        level = _require_text("level", level)

        session = ConversationSession.create(user_id, company, role, level, self.agents)
        self.storage.create_interview(session.to_record())
        with self._registry_lock:
            self._sessions[session.interview_id] = session

        logger.info(f"Started interview {session.interview_id}: {role} at {company} ({level})")
        return session

    def opening_turn(self, interview_id: str) -> TurnResponse:
        session = self.get(interview_id)
        opening = session.open()
        self._persist(session)
        return TurnResponse(text=opening, audio=self.agents.speak(opening))

    def submit_answer(
        self,
        interview_id: str,
        text: Optional[str] = None,
        audio: Optional[str] = None,
        turn_history: Optional[Sequence[ConversationTurn]] = None,
    ) -> SubmitAnswerResponse:
        """
        Submit a typed answer or a base64 encoded recording.
        """
        session = self.get(interview_id)
        audio_bytes = None
        if audio:
            try:
                audio_bytes = base64.b64decode(audio, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError(f"Audio is not valid base64: {e}", interview_id=interview_id) from e
        return self._answer(session, text, audio_bytes, turn_history)

    def submit_audio(self, interview_id: str, audio_bytes: bytes) -> SubmitAnswerResponse:
        session = self.get(interview_id)
        if not audio_bytes:
            raise ValidationError("Uploaded audio is empty", interview_id=interview_id)
        return self._answer(session, None, audio_bytes, None)

    def _answer(self, session: ConversationSession, text: Optional[str],
                audio_bytes: Optional[bytes],
                turn_history: Optional[Sequence[ConversationTurn]]) -> SubmitAnswerResponse:
        outcome = session.submit_answer(text=text, audio=audio_bytes, turn_history=turn_history)
        self._persist(session)
        return SubmitAnswerResponse(
            transcript=outcome.transcript,
            next_question_text=outcome.next_question,
            audio=self.agents.speak(outcome.next_question),
            evaluation=outcome.evaluation,
            state=session.state,
        )

    def end_interview(self, interview_id: str,
                      turn_history: Optional[Sequence[ConversationTurn]] = None) -> EndInterviewResponse:
        session = self.get(interview_id)
        analysis = session.end(turn_history)
        self._persist(session)
        return EndInterviewResponse(analysis=analysis, state=session.state)

    def save(self, interview_id: str) -> InterviewRecord:
        """Write the live session to storage again, e.g. after a failed save."""
        return self._persist(self.get(interview_id))

    # ========================================
    # History / Dashboard
    # ========================================

    def get_interview(self, interview_id: str) -> InterviewRecord:
        return self.get(interview_id).to_record()

    def delete_interview(self, interview_id: str) -> None:
        with self._registry_lock:
            session = self._sessions.pop(interview_id, None)
        if session is None:
            self.storage.delete_interview(interview_id)
            return
        # Waits for a save in flight, and stops any later one
        with session.persist_lock:
            session.deleted = True
            self.storage.delete_interview(interview_id)

    def list_interviews(self, user_id: str) -> List[InterviewSummary]:
        return [
            InterviewSummary(
                interview_id=record.interview_id,
                company=record.company,
                role=record.role,
                level=record.level,
                created_at=record.created_at,
                state=record.state,
                answers=len(record.evaluations),
                analysis=record.analysis,
            )
            for record in self.storage.load_interviews(user_id)
        ]

    def dashboard(self, user_id: str) -> AggregateStats:
        interviews = self.storage.load_interviews(user_id)
        logger.info(f"Building dashboard for {user_id} from {len(interviews)} interviews")
        return self.aggregation.aggregate(interviews)

    def suggest(self, question: str, answer: str) -> str:
        question = _require_text("question", question)
        answer = _require_text("answer", answer)
        return self.agents.coach.suggest(question, answer)
