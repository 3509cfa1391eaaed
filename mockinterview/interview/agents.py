"""
Agent orchestration for the mock interviewer.
Each agent turns one piece of interview work into prompts for the generative
model and interprets what comes back.
"""
import base64
import logging
from typing import List, Optional, Sequence

from mockinterview.interview.evaluation import EvaluationParser, evaluation_parser
from mockinterview.interview.scoring import build_evaluation_record, build_session_analysis
from mockinterview.llm.prompts import Prompts
from mockinterview.models.schemas import (
    ConversationTurn,
    EvaluationRecord,
    SessionAnalysis,
    TurnRole,
)
from mockinterview.utils.cleaning import ResponseCleaner
from mockinterview.utils.config import config
from mockinterview.utils.errors import GenerationError, SynthesisError, TranscriptionError

logger = logging.getLogger(__name__)


class InterviewerAgent:
    """
    Generates the opening line and follow-up questions.
    """

    def __init__(self, llm):
        self.llm = llm

    def _ask(self, prompt: str, turns: Sequence[ConversationTurn]) -> str:
        raw = self.llm.complete(prompt, turns, temperature=config.llm.question_temperature)
        question = ResponseCleaner.clean_interviewer_response(raw)
        if not question:
            raise GenerationError("Interviewer response was empty after cleaning")
        return question

    def opening_question(self, company: str, role: str, level: str,
                         turns: Sequence[ConversationTurn] = ()) -> str:
        logger.info(f"Generating opening for {role} at {company} ({level})")
        return self._ask(Prompts.opening(company, role, level), turns)

    def next_question(self, company: str, role: str, level: str,
                      turns: Sequence[ConversationTurn]) -> str:
        """
        Generate the next question with the whole transcript as context.

        Args:
            company: Interview company
            role: Interview role
            level: Interview level
            turns: Every turn so far, including the answer just given

        Returns:
            The cleaned question text
        """
        logger.info(f"Generating next question from {len(turns)} turns")
        return self._ask(Prompts.next_question(company, role, level), turns)


class EvaluationAgent:
    """
    Scores answers by asking the model for a free-text evaluation and parsing it.
    """

    def __init__(self, llm, parser: EvaluationParser = None):
        self.llm = llm
        self.parser = parser or evaluation_parser

    def evaluate_answer(self, company: str, role: str, level: str,
                        question: str, answer: str) -> EvaluationRecord:
        prompt = Prompts.answer_evaluation(company, role, level, question, answer)
        raw = self.llm.complete(prompt, (), temperature=config.llm.evaluation_temperature)
        parsed = self.parser.parse(ResponseCleaner.clean_evaluation_response(raw))
        if not parsed:
            logger.warning("Answer evaluation produced no recognizable fields")
        return build_evaluation_record(question, answer, parsed)

    def evaluate_session(self, answers: List[str]) -> SessionAnalysis:
        """Evaluate the interview as a whole from every user answer."""
        if not answers:
            return build_session_analysis({})

        joined = config.interview.answer_separator.join(answers)
        turns = [ConversationTurn(role=TurnRole.USER, content=Prompts.session_answers(joined))]
        raw = self.llm.complete(Prompts.session_evaluation(), turns,
                                temperature=config.llm.evaluation_temperature)
        parsed = self.parser.parse(ResponseCleaner.clean_evaluation_response(raw))
        return build_session_analysis(parsed)


class CoachAgent:
    """Stand-alone improvement suggestions for a question/answer pair."""

    def __init__(self, llm):
        self.llm = llm

    def suggest(self, question: str, answer: str) -> str:
        raw = self.llm.complete(Prompts.suggestion(question, answer), (),
                                temperature=config.llm.evaluation_temperature)
        return raw.strip() or "No suggestion generated."


class AgentController:
    """
    Bundles the agents with the speech collaborators used during a turn.
    """

    def __init__(self, llm, transcriber=None, synthesizer=None, speech_enabled: Optional[bool] = None):
        self.interviewer = InterviewerAgent(llm)
        self.evaluator = EvaluationAgent(llm)
        self.coach = CoachAgent(llm)
        self.transcriber = transcriber
        self.synthesizer = synthesizer
        self.speech_enabled = config.speech.enabled if speech_enabled is None else speech_enabled

    def transcribe(self, audio_bytes: bytes) -> str:
        if self.transcriber is None:
            raise TranscriptionError("Voice answers are not available on this server")
        return self.transcriber.transcribe(audio_bytes)

    def speak(self, text: str) -> Optional[str]:
        """
        Base64 speech for `text`, or None. Failures are logged and never raised.
        """
        if not self.speech_enabled or self.synthesizer is None or not text:
            return None
        try:
            audio = self.synthesizer.synthesize(text)
        except SynthesisError as e:
            logger.warning(f"Speech synthesis skipped: {e}")
            return None
        return base64.b64encode(audio).decode("utf-8")
