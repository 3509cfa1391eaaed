"""
Prompt templates for the interviewer, evaluator and coach agents.
Evaluation prompts pin down the line format the evaluation parser expects.
"""

CATEGORY_LINES = """• Correctness: 6/10 – One sentence explaining the score
• Clarity & Structure: 5/10 – One sentence explaining the score
• Completeness: 4/10 – One sentence explaining the score
• Relevance: 7/10 – One sentence explaining the score
• Confidence & Tone: 6/10 – One sentence explaining the score
• Communication Skills: 5/10 – One sentence explaining the score"""


class Prompts:
    """Collection of all agent prompts."""

    # ============================================================
    # INTERVIEWER PROMPTS
    # ============================================================

    @staticmethod
    def interview_context(company: str, role: str, level: str) -> str:
        """System turn stored at the head of every transcript."""
        return f"This is a mock interview for a {role} position at {company}, level: {level}."

    @staticmethod
    def opening(company: str, role: str, level: str) -> str:
        """Prompt for the greeting that opens the interview."""
        return f"""You are Rachel, a professional and friendly mock interviewer.

Candidate interview details:
- Company: {company}
- Role: {role}
- Level: {level}

YOUR TASK:
- Greet the candidate.
- Say: "This is a {level} level interview for the {role} position at {company}."
- Ask how they are doing.

RULES:
1. Keep it under 3 sentences.
2. Do not make up information about the company.
3. Respond with ONLY your spoken words."""

    @staticmethod
    def next_question(company: str, role: str, level: str) -> str:
        """Prompt for the follow-up question, sent with the full transcript."""
        return f"""You are a professional and friendly mock interviewer.

You are interviewing a candidate for the role of {role} at {company}, at the {level} level.

YOUR TASK:
- Ask ONE realistic, relevant interview question.
- Tailor it to what {company} is known for, if anything.
- Build on the candidate's last answer so the conversation flows.

RULES:
1. Do not give feedback or commentary. Only ask the question.
2. Do not say "Here's your next question" or similar.
3. Keep it to 1-2 sentences, as a human interviewer would say it."""

    # ============================================================
    # EVALUATION PROMPTS
    # ============================================================

    @staticmethod
    def answer_evaluation(company: str, role: str, level: str, question: str, answer: str) -> str:
        """Prompt for scoring a single answer."""
        return f"""Evaluate the following candidate response for a {role} position at {company} (Level: {level}).

QUESTION: "{question}"
ANSWER: "{answer}"

Score each category out of 10 with a one-sentence explanation, using exactly this format:

{CATEGORY_LINES}

Overall Feedback: A short paragraph on strengths and areas for improvement.

Rating: One of Excellent, Good, Satisfactory, Needs Improvement, Poor
Suggestion: 2-3 sentences of specific, actionable advice.

Model Answer: A comprehensive, well-structured answer to the question.
Improvement Suggestions: 2-3 specific ways to improve.
Key Points: 3-5 concepts the answer should mention."""

    @staticmethod
    def session_evaluation() -> str:
        """Prompt for the whole-interview evaluation; answers go in a user turn."""
        return f"""Evaluate the candidate's overall performance across all answers.

Score each category out of 10 with a short explanation, using exactly this format:

{CATEGORY_LINES}

Overall Feedback: A one-paragraph summary."""

    @staticmethod
    def session_answers(answers: str) -> str:
        return f"Candidate responses:\n\n{answers}"

    # ============================================================
    # COACH PROMPT
    # ============================================================

    @staticmethod
    def suggestion(question: str, answer: str) -> str:
        """Prompt for a stand-alone improvement suggestion."""
        return f"""You are an interview coach.
The user was asked the following interview question:

Question: {question}
Answer: {answer}

Give one clear, constructive suggestion for improving this answer.
Keep it concise, actionable and in plain English. Do NOT give a rating."""
