"""
Tests for quiz attempt scoring.
"""

import pytest

from generation.schemas import QuizQuestion
from generation.scoring import is_correct, score_attempt


def _saq(qid, answer):
    return QuizQuestion(id=qid, type="saq", question=f"Question {qid}?", correct_answer=answer)


QUESTIONS = [_saq("q1", "Mitochondria"), _saq("q2", "ATP"), _saq("q3", "Glucose"), _saq("q4", "Oxygen")]


def test_answers_compare_trimmed_and_case_insensitive():
    assert is_correct(QUESTIONS[0], "  mitochondria ")
    assert not is_correct(QUESTIONS[0], "mitochondrion")
    assert not is_correct(QUESTIONS[0], None)


@pytest.mark.parametrize("answers, expected", [
    ({}, 0.0),
    ({"q1": "mitochondria"}, 25.0),
    ({"q1": "Mitochondria", "q2": "atp", "q3": "GLUCOSE"}, 75.0),
    ({"q1": "Mitochondria", "q2": "ATP", "q3": "Glucose", "q4": "oxygen"}, 100.0),
])
def test_score_is_percentage_correct(answers, expected):
    assert score_attempt(QUESTIONS, answers) == expected


def test_unknown_question_ids_are_ignored():
    assert score_attempt(QUESTIONS, {"q99": "ATP"}) == 0.0


def test_no_questions_scores_zero():
    assert score_attempt([], {"q1": "x"}) == 0.0
