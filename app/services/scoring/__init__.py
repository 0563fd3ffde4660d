from fractions import Fraction
from math import floor
from typing import Mapping

from app.schemas import TestRecord


def score(test: TestRecord, answers: Mapping[int, str]) -> int:
    """Score an answer set against a test's answer key.

    Each question is worth `max_marks / question_count`; an answer earns it
    only on exact equality with the correct option. The sum is rounded half
    up. Missing answers and answers for unknown indices earn nothing.
    """
    question_count = len(test.questions)
    if question_count == 0:
        return 0

    correct = sum(
        1 for index, question in enumerate(test.questions)
        if answers.get(index) == question.correct_answer
    )
    raw = Fraction(test.max_marks) * correct / question_count
    return floor(raw + Fraction(1, 2))
