"""
Interview state machine for one mock interview.
Owns the append-only transcript and the evaluation records, and drives the
agents through each turn.
"""
import uuid
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from mockinterview.interview.agents import AgentController
from mockinterview.llm.prompts import Prompts
from mockinterview.models.schemas import (
    ConversationTurn,
    EvaluationRecord,
    InterviewRecord,
    SessionAnalysis,
    SessionState,
    TurnRole,
)
from mockinterview.utils.errors import (
    InvalidStateError,
    SessionBusyError,
    StaleHistoryError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class AnswerOutcome:
    """What one accepted answer produced."""
    transcript: str
    next_question: str
    evaluation: EvaluationRecord


class ConversationSession:
    """
    Manages the state of an interview session.

    States: created -> introduced -> (awaiting_answer <-> answer_received) -> ended.
    At most one turn is in flight at a time. A collaborator failure during a
    turn leaves the transcript, the records and the state as they were.
    """

    ACCEPTS_ANSWERS = (SessionState.INTRODUCED, SessionState.AWAITING_ANSWER)

    def __init__(
        self,
        interview_id: str,
        user_id: str,
        company: str,
        role: str,
        level: str,
        agents: AgentController,
        created_at: Optional[datetime] = None,
        turns: Optional[Sequence[ConversationTurn]] = None,
        evaluations: Sequence[EvaluationRecord] = (),
        state: SessionState = SessionState.CREATED,
        analysis: Optional[SessionAnalysis] = None,
        ended_at: Optional[datetime] = None,
    ):
        self.interview_id = interview_id
        self.user_id = user_id
        self.company = company
        self.role = role
        self.level = level
        self.agents = agents
        self.created_at = created_at or datetime.now()

        if turns is None:
            turns = [ConversationTurn(
                role=TurnRole.SYSTEM,
                content=Prompts.interview_context(company, role, level),
            )]
        self._turns: Tuple[ConversationTurn, ...] = tuple(turns)
        self._evaluations: Tuple[EvaluationRecord, ...] = tuple(evaluations)

        # A turn that was in flight when the process stopped was never committed
        if state == SessionState.ANSWER_RECEIVED:
            state = SessionState.AWAITING_ANSWER
        self._state = state
        self._analysis = analysis
        self.ended_at = ended_at

        self._lock = threading.Lock()
        # Held by the manager while snapshotting and saving this session
        self.persist_lock = threading.Lock()
        self.deleted = False

    # ========================================
    # Construction / Serialization
    # ========================================

    @classmethod
    def create(cls, user_id: str, company: str, role: str, level: str,
               agents: AgentController) -> "ConversationSession":
        return cls(
            interview_id=f"interview-{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            company=company,
            role=role,
            level=level,
            agents=agents,
        )

    @classmethod
    def from_record(cls, record: InterviewRecord, agents: AgentController) -> "ConversationSession":
        """Resume a session from its stored form."""
        return cls(
            interview_id=record.interview_id,
            user_id=record.user_id,
            company=record.company,
            role=record.role,
            level=record.level,
            agents=agents,
            created_at=record.created_at,
            turns=record.turns,
            evaluations=record.evaluations,
            state=record.state,
            analysis=record.analysis,
            ended_at=record.ended_at,
        )

    def to_record(self) -> InterviewRecord:
        return InterviewRecord(
            interview_id=self.interview_id,
            user_id=self.user_id,
            company=self.company,
            role=self.role,
            level=self.level,
            created_at=self.created_at,
            state=self._state,
            turns=list(self._turns),
            evaluations=list(self._evaluations),
            analysis=self._analysis,
            ended_at=self.ended_at,
        )

    # ========================================
    # Read access
    # ========================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        return self._turns

    @property
    def evaluations(self) -> Tuple[EvaluationRecord, ...]:
        return self._evaluations

    @property
    def analysis(self) -> Optional[SessionAnalysis]:
        return self._analysis

    @property
    def is_ended(self) -> bool:
        return self._state == SessionState.ENDED

    def last_question(self) -> str:
        """Most recent interviewer turn."""
        for turn in reversed(self._turns):
            if turn.role == TurnRole.ASSISTANT:
                return turn.content
        return ""

    def user_answers(self) -> List[str]:
        return [turn.content for turn in self._turns if turn.role == TurnRole.USER]

    # ========================================
    # Concurrency guards
    # ========================================

    @contextmanager
    def _single_flight(self):
        if not self._lock.acquire(blocking=False):
            raise SessionBusyError(
                "Another answer is still being processed for this interview",
                interview_id=self.interview_id,
            )
        try:
            yield
        finally:
            self._lock.release()

    def _check_snapshot(self, turn_history: Optional[Sequence[ConversationTurn]]) -> None:
        """
        Reject callers working from an outdated transcript. System turns are
        server-side context and are not compared.
        """
        if turn_history is None:
            return
        theirs = [turn for turn in turn_history if turn.role != TurnRole.SYSTEM]
        ours = [turn for turn in self._turns if turn.role != TurnRole.SYSTEM]
        if theirs != ours:
            raise StaleHistoryError(
                f"Turn history is out of date ({len(theirs)} turns sent, {len(ours)} recorded)",
                interview_id=self.interview_id,
            )

    def _require(self, *allowed: SessionState) -> None:
        if self._state not in allowed:
            raise InvalidStateError(
                f"Cannot do that while the interview is {self._state.value}",
                interview_id=self.interview_id,
            )

    # ========================================
    # Transitions
    # ========================================

    def open(self) -> str:
        """
        Produce the opening question and record it as the first assistant turn.

        Returns:
            The opening text
        """
        with self._single_flight():
            self._require(SessionState.CREATED)
            opening = self.agents.interviewer.opening_question(
                self.company, self.role, self.level, self._turns
            )
            self._turns = self._turns + (ConversationTurn(role=TurnRole.ASSISTANT, content=opening),)
            self._state = SessionState.INTRODUCED
            logger.info(f"[{self.interview_id}] introduced")
            return opening

    def submit_answer(
        self,
        text: Optional[str] = None,
        audio: Optional[bytes] = None,
        turn_history: Optional[Sequence[ConversationTurn]] = None,
    ) -> AnswerOutcome:
        """
        Accept one answer, evaluate it, and ask the next question.

        Args:
            text: Typed answer, used verbatim
            audio: Recorded answer, transcribed when no text is given
            turn_history: The caller's view of the transcript, checked for staleness

        Returns:
            AnswerOutcome with transcript, next question and evaluation
        """
        typed = text.strip() if text is not None else ""
        if text is not None and not typed and not audio:
            raise ValidationError("Answer text is empty", interview_id=self.interview_id)
        if not typed and not audio:
            raise ValidationError("Either answer text or audio is required", interview_id=self.interview_id)

        with self._single_flight():
            self._require(*self.ACCEPTS_ANSWERS)
            self._check_snapshot(turn_history)

            previous_state = self._state
            self._state = SessionState.ANSWER_RECEIVED
            committed = False
            try:
                answer = typed or self.agents.transcribe(audio)
                question = self.last_question()

                evaluation = self.agents.evaluator.evaluate_answer(
                    self.company, self.role, self.level, question, answer
                )

                user_turn = ConversationTurn(role=TurnRole.USER, content=answer)
                next_question = self.agents.interviewer.next_question(
                    self.company, self.role, self.level, self._turns + (user_turn,)
                )

                self._turns = self._turns + (
                    user_turn,
                    ConversationTurn(role=TurnRole.ASSISTANT, content=next_question),
                )
                self._evaluations = self._evaluations + (evaluation,)
                self._state = SessionState.AWAITING_ANSWER
                committed = True
            finally:
                if not committed:
                    self._state = previous_state
                    logger.warning(f"[{self.interview_id}] turn aborted, state kept at {previous_state.value}")

            logger.info(f"[{self.interview_id}] answer {len(self._evaluations)} recorded")
            return AnswerOutcome(transcript=answer, next_question=next_question, evaluation=evaluation)

    def end(self, turn_history: Optional[Sequence[ConversationTurn]] = None) -> SessionAnalysis:
        """
        End the interview and attach the whole-session analysis.
        """
        with self._single_flight():
            self._require(
                SessionState.CREATED,
                SessionState.INTRODUCED,
                SessionState.AWAITING_ANSWER,
            )
            self._check_snapshot(turn_history)

            analysis = self.agents.evaluator.evaluate_session(self.user_answers())

            self._analysis = analysis
            self._state = SessionState.ENDED
            self.ended_at = datetime.now()
            logger.info(f"[{self.interview_id}] ended after {len(self._evaluations)} answers")
            return analysis
