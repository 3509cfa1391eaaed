import threading

import pytest

from mockinterview.interview.state import ConversationSession
from mockinterview.models.schemas import CATEGORY_KEYS, ConversationTurn, SessionState, TurnRole
from mockinterview.utils.errors import (
    GenerationError,
    InvalidStateError,
    SessionBusyError,
    StaleHistoryError,
    TranscriptionError,
    ValidationError,
)

from conftest import OPENING

EVALUATION_MARKER = "Evaluate the following candidate response"
QUESTION_MARKER = "You are a professional and friendly mock interviewer."


def _snapshot(session):
    return session.turns, session.evaluations, session.state


def test_new_session_starts_with_system_context(session):
    assert session.state == SessionState.CREATED
    assert len(session.turns) == 1
    assert session.turns[0].role == TurnRole.SYSTEM
    assert "Data Scientist" in session.turns[0].content


def test_open_records_first_assistant_turn(session):
    opening = session.open()

    assert opening == OPENING
    assert session.state == SessionState.INTRODUCED
    assert session.turns[-1] == ConversationTurn(role=TurnRole.ASSISTANT, content=OPENING)


def test_open_twice_is_rejected(session):
    session.open()
    with pytest.raises(InvalidStateError):
        session.open()


def test_answer_before_intro_is_rejected(session, llm):
    with pytest.raises(InvalidStateError):
        session.submit_answer(text="Hello")
    assert llm.calls == []


def test_typed_answer_is_evaluated_and_followed_up(session, llm, transcriber):
    session.open()
    outcome = session.submit_answer(text="  I used pandas and sklearn  ")

    assert outcome.transcript == "I used pandas and sklearn"
    assert outcome.next_question == "Question 1: How did you validate your model?"
    assert outcome.evaluation.question == OPENING
    assert outcome.evaluation.scores["Correctness"].score == "7/10"
    assert outcome.evaluation.rating == "Good"

    assert session.state == SessionState.AWAITING_ANSWER
    assert [turn.role for turn in session.turns] == [
        TurnRole.SYSTEM, TurnRole.ASSISTANT, TurnRole.USER, TurnRole.ASSISTANT,
    ]
    assert len(session.evaluations) == 1
    assert transcriber.calls == []

    # The follow-up question sees the whole transcript including the new answer
    _, turns = llm.calls[-1]
    assert turns[-1].content == "I used pandas and sklearn"


def test_audio_answer_is_transcribed(session, transcriber):
    session.open()
    outcome = session.submit_answer(audio=b"RIFF")

    assert transcriber.calls == [b"RIFF"]
    assert outcome.transcript == "I used pandas and sklearn"


@pytest.mark.parametrize("kwargs", [{}, {"text": "   "}, {"text": None, "audio": b""}])
def test_empty_answer_is_rejected_before_any_call(session, llm, kwargs):
    session.open()
    calls_before = len(llm.calls)

    with pytest.raises(ValidationError):
        session.submit_answer(**kwargs)

    assert len(llm.calls) == calls_before
    assert session.state == SessionState.INTRODUCED


def test_transcription_failure_leaves_session_untouched(session, transcriber, llm):
    session.open()
    before = _snapshot(session)
    transcriber.error = TranscriptionError("could not decode audio")

    with pytest.raises(TranscriptionError):
        session.submit_answer(audio=b"noise")

    assert _snapshot(session) == before
    assert llm.prompts_containing(EVALUATION_MARKER) == []


@pytest.mark.parametrize("marker", [EVALUATION_MARKER, QUESTION_MARKER])
def test_generation_failure_leaves_session_untouched_and_retry_succeeds(session, llm, marker):
    session.open()
    before = _snapshot(session)
    llm.fail(marker)

    with pytest.raises(GenerationError):
        session.submit_answer(text="My answer")

    assert _snapshot(session) == before

    session.submit_answer(text="My answer")
    assert len(session.evaluations) == 1
    assert session.state == SessionState.AWAITING_ANSWER


def test_stale_history_is_rejected(session):
    session.open()
    session.submit_answer(text="First answer")
    stale = list(session.turns[:2])

    with pytest.raises(StaleHistoryError):
        session.submit_answer(text="Second answer", turn_history=stale)

    assert len(session.evaluations) == 1
    session.submit_answer(text="Second answer", turn_history=list(session.turns))
    assert len(session.evaluations) == 2


def test_history_without_system_turn_is_accepted(session):
    session.open()
    client_view = [turn for turn in session.turns if turn.role != TurnRole.SYSTEM]
    session.submit_answer(text="Answer", turn_history=client_view)
    assert session.state == SessionState.AWAITING_ANSWER


def test_concurrent_submission_is_rejected(session, llm):
    session.open()
    gate = llm.block_next_question()
    errors = []

    def submit():
        try:
            session.submit_answer(text="First answer")
        except Exception as e:
            errors.append(e)

    worker = threading.Thread(target=submit)
    worker.start()
    assert llm.entered.wait(timeout=5)

    assert session.state == SessionState.ANSWER_RECEIVED
    with pytest.raises(SessionBusyError):
        session.submit_answer(text="Second answer")

    gate.set()
    worker.join(timeout=5)

    assert errors == []
    assert len(session.evaluations) == 1
    assert session.user_answers() == ["First answer"]


def test_end_runs_session_evaluation(session, llm):
    session.open()
    session.submit_answer(text="First answer")
    session.submit_answer(text="Second answer")

    analysis = session.end()

    assert session.state == SessionState.ENDED
    assert session.is_ended
    assert session.ended_at is not None
    assert analysis.scores["Communication Skills"].score == "6/10"
    assert analysis.overall_feedback_summary == "Consistent answers with room for more depth."

    _, turns = llm.calls[-1]
    assert "First answer\n\n---\n\nSecond answer" in turns[0].content


def test_end_without_answers_makes_no_model_call(session, llm):
    session.open()
    calls_before = len(llm.calls)

    analysis = session.end()

    assert len(llm.calls) == calls_before
    assert set(analysis.scores) == set(CATEGORY_KEYS)
    assert all(score.score == "" for score in analysis.scores.values())
    assert analysis.overall_feedback_summary == ""


def test_nothing_is_accepted_after_end(session):
    session.open()
    session.end()

    with pytest.raises(InvalidStateError):
        session.end()
    with pytest.raises(InvalidStateError):
        session.submit_answer(text="Late answer")


def test_session_resumes_from_record(session, agents):
    session.open()
    session.submit_answer(text="First answer")

    resumed = ConversationSession.from_record(session.to_record(), agents)

    assert resumed.turns == session.turns
    assert resumed.evaluations == session.evaluations
    assert resumed.state == SessionState.AWAITING_ANSWER
    resumed.submit_answer(text="Second answer")
    assert resumed.user_answers() == ["First answer", "Second answer"]


def test_in_flight_state_is_not_restored(session, agents):
    session.open()
    record = session.to_record().model_copy(update={"state": SessionState.ANSWER_RECEIVED})

    resumed = ConversationSession.from_record(record, agents)
    assert resumed.state == SessionState.AWAITING_ANSWER
