"""
Mock Interview Coach - FastAPI Backend

- Role/company/level specific interviews driven by an LLM interviewer
- Voice answers via faster-whisper, spoken questions via TTS
- Per-answer and whole-session scoring
- Dashboard analytics over a user's interviews

Compatible with any OpenAI-compatible chat server (llama.cpp, vLLM, Groq).
"""
import logging
from typing import List

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mockinterview.interview.agents import AgentController
from mockinterview.interview.manager import SessionManager
from mockinterview.llm.client import LLMClient
from mockinterview.models.schemas import (
    AggregateStats,
    EndInterviewRequest,
    EndInterviewResponse,
    InterviewRecord,
    InterviewSummary,
    StartInterviewRequest,
    StartInterviewResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
    SuggestionRequest,
    SuggestionResponse,
    TurnResponse,
)
from mockinterview.speech.synthesis import OpenAISpeechSynthesizer
from mockinterview.speech.transcription import WhisperTranscriber
from mockinterview.storage.memory import InMemoryStorage
from mockinterview.utils.config import config
from mockinterview.utils.errors import InterviewError

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def build_manager() -> SessionManager:
    """Wire the production collaborators."""
    agents = AgentController(
        LLMClient(),
        transcriber=WhisperTranscriber(),
        synthesizer=OpenAISpeechSynthesizer(),
    )
    return SessionManager(InMemoryStorage(), agents)


def create_app(manager: SessionManager = None) -> FastAPI:
    manager = manager or build_manager()

    # ================================================================
    # FastAPI App Initialization
    # ================================================================

    app = FastAPI(
        title="Mock Interview API",
        description="AI mock interviewer with per-answer scoring and dashboard analytics",
        version=VERSION,
    )
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.interview.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InterviewError)
    async def interview_error_handler(request: Request, exc: InterviewError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # ================================================================
    # API Endpoints
    # ================================================================

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"status": "running", "version": VERSION, "service": "Mock Interview"}

    @app.post("/interviews", response_model=StartInterviewResponse)
    def start_interview(request: StartInterviewRequest):
        session = manager.start_interview(request.user_id, request.company, request.role, request.level)
        return StartInterviewResponse(interview_id=session.interview_id, state=session.state)

    @app.post("/interviews/{interview_id}/intro", response_model=TurnResponse)
    def opening_turn(interview_id: str):
        return manager.opening_turn(interview_id)

    @app.post("/interviews/{interview_id}/answer", response_model=SubmitAnswerResponse)
    def submit_answer(interview_id: str, request: SubmitAnswerRequest):
        """
        Submit an answer as typed text or a base64 encoded recording.

        `turn_history`, when sent, must match the interview's recorded turns.
        """
        return manager.submit_answer(
            interview_id,
            text=request.text,
            audio=request.audio,
            turn_history=request.turn_history,
        )

    @app.post("/interviews/{interview_id}/answer/audio", response_model=SubmitAnswerResponse)
    def submit_audio(interview_id: str, file: UploadFile = File(...)):
        """Submit a recorded answer as a file upload."""
        audio_bytes = file.file.read()
        logger.info(f"Received {len(audio_bytes)} bytes of audio for {interview_id}")
        return manager.submit_audio(interview_id, audio_bytes)

    @app.post("/interviews/{interview_id}/end", response_model=EndInterviewResponse)
    def end_interview(interview_id: str, request: EndInterviewRequest = None):
        turn_history = request.turn_history if request else None
        return manager.end_interview(interview_id, turn_history)

    @app.post("/interviews/{interview_id}/save", response_model=InterviewRecord)
    def save_interview(interview_id: str):
        return manager.save(interview_id)

    @app.get("/interviews/{interview_id}", response_model=InterviewRecord)
    def get_interview(interview_id: str):
        return manager.get_interview(interview_id)

    @app.delete("/interviews/{interview_id}")
    def delete_interview(interview_id: str):
        manager.delete_interview(interview_id)
        return {"status": "deleted", "interview_id": interview_id}

    @app.get("/users/{user_id}/interviews", response_model=List[InterviewSummary])
    def list_interviews(user_id: str):
        return manager.list_interviews(user_id)

    @app.get("/users/{user_id}/dashboard", response_model=AggregateStats)
    def dashboard(user_id: str):
        return manager.dashboard(user_id)

    @app.post("/suggestions", response_model=SuggestionResponse)
    def suggest(request: SuggestionRequest):
        return SuggestionResponse(suggestion=manager.suggest(request.question, request.answer))

    return app


app = create_app()


# ================================================================
# Main Entry Point
# ================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
