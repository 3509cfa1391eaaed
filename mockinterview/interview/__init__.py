# Interview module
from .evaluation import EvaluationParser, parse_evaluation_text
from .state import ConversationSession
from .agents import AgentController
