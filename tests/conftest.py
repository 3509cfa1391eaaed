import threading

import pytest
from fastapi.testclient import TestClient

from mockinterview.interview.agents import AgentController
from mockinterview.interview.manager import SessionManager
from mockinterview.interview.state import ConversationSession
from mockinterview.main import create_app
from mockinterview.storage.memory import InMemoryStorage
from mockinterview.utils.errors import GenerationError, PersistenceError, SynthesisError

ANSWER_EVALUATION = """• Correctness: 7/10 – Mentions the right libraries
• Clarity & Structure: 6/10 – Reasonably organized
• Completeness: 5/10 – Misses evaluation metrics
• Relevance: 8/10 – Stays on topic
• Confidence & Tone: 6/10 – Steady delivery
• Communication Skills: 7/10 – Clear wording

Overall Feedback: Good grounding in tooling.
Needs more depth on validation.

Rating: Good
Suggestion: Talk about how you validated the model.

Model Answer: I cleaned the data with pandas and compared sklearn models with cross-validation.
Key Points: pandas, sklearn, cross-validation"""

SESSION_EVALUATION = """<think>Let me weigh the answers.</think>
Correctness: 6/10 - Mostly accurate
Clarity & Structure: 6/10 - Organized
Completeness: 6/10 - Some gaps
Relevance: 6/10 - On topic
Confidence & Tone: 6/10 - Calm
Communication Skills: 6/10 - Clear

Overall Feedback: Consistent answers with room for more depth."""

OPENING = "Hi, I'm Rachel. This is a Senior level interview for the Data Scientist position at Acme. How are you doing?"
SUGGESTION = "Quantify the impact of your model."


class FakeLLM:
    """Answers by prompt type and records every call."""

    def __init__(self):
        self.calls = []
        self.fail_on = None
        self.gate = None
        self.entered = threading.Event()
        self.questions_asked = 0

    def fail(self, marker):
        """Raise GenerationError on the next prompt containing `marker`."""
        self.fail_on = marker

    def block_next_question(self):
        self.gate = threading.Event()
        return self.gate

    def complete(self, system_prompt, turns=(), temperature=None, max_tokens=600):
        self.calls.append((system_prompt, tuple(turns)))

        if self.fail_on and self.fail_on in system_prompt:
            self.fail_on = None
            raise GenerationError("model unavailable")

        if "Evaluate the following candidate response" in system_prompt:
            return ANSWER_EVALUATION
        if "Evaluate the candidate's overall performance" in system_prompt:
            return SESSION_EVALUATION
        if "You are an interview coach" in system_prompt:
            return SUGGESTION
        if "You are Rachel" in system_prompt:
            return OPENING

        if self.gate is not None:
            self.entered.set()
            self.gate.wait(timeout=5)
        self.questions_asked += 1
        return f"**Question {self.questions_asked}:** How did you validate your model?"

    def prompts_containing(self, marker):
        return [prompt for prompt, _ in self.calls if marker in prompt]


class FakeTranscriber:
    def __init__(self, text="I used pandas and sklearn"):
        self.text = text
        self.calls = []
        self.error = None

    def transcribe(self, audio_bytes):
        self.calls.append(audio_bytes)
        if self.error:
            raise self.error
        return self.text


class FakeSynthesizer:
    def __init__(self):
        self.calls = []
        self.fail = False

    def synthesize(self, text):
        self.calls.append(text)
        if self.fail:
            raise SynthesisError("speech API down")
        return b"mp3-bytes"


class FlakyStorage(InMemoryStorage):
    """Fails the next `failures` saves."""

    def __init__(self):
        super().__init__()
        self.failures = 0

    def save_interview(self, record):
        if self.failures:
            self.failures -= 1
            raise PersistenceError("database unavailable", interview_id=record.interview_id)
        return super().save_interview(record)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def agents(llm, transcriber, synthesizer):
    return AgentController(llm, transcriber=transcriber, synthesizer=synthesizer, speech_enabled=True)


@pytest.fixture
def storage():
    return FlakyStorage()


@pytest.fixture
def manager(storage, agents):
    return SessionManager(storage, agents)


@pytest.fixture
def session(agents):
    return ConversationSession.create("user-1", "Acme", "Data Scientist", "Senior", agents)


@pytest.fixture
def client(manager):
    return TestClient(create_app(manager))
