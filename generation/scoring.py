"""
Quiz attempt scoring

score = 100 * correct / total, where an answer is correct when
trim+lowercase(user answer) == trim+lowercase(correct answer).
"""

from typing import Dict, Iterable, Optional

from generation.schemas import QuizQuestion


def _fold(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def is_correct(question: QuizQuestion, user_answer: Optional[str]) -> bool:
    return _fold(user_answer) == _fold(question.correct_answer)


def score_attempt(questions: Iterable[QuizQuestion], user_answers: Dict[str, str]) -> float:
    """Percentage of questions answered correctly, in [0, 100]. No questions → 0.0."""
    questions = list(questions)
    if not questions:
        return 0.0
    correct = sum(1 for q in questions if is_correct(q, user_answers.get(q.id)))
    return 100.0 * correct / len(questions)
