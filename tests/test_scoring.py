from datetime import datetime, timezone

import pytest

from app.schemas import TestRecord
from app.services.scoring import score
from tests.factories import make_question


def _test(correct: list[str], max_marks: int) -> TestRecord:
    return TestRecord(
        id=1,
        name="Scoring",
        teacher_id="teacher-1",
        questions=tuple(make_question(f"Q{i}", correct=answer) for i, answer in enumerate(correct)),
        max_marks=max_marks,
        created_at=datetime.now(timezone.utc),
    )


class TestScore:
    def test_three_of_four_rounds_half_up(self):
        test = _test(["A", "B", "C", "D"], max_marks=10)
        assert score(test, {0: "A", 1: "B", 2: "C", 3: "A"}) == 8

    def test_all_correct_scores_max_marks(self):
        test = _test(["A", "B", "C", "D"], max_marks=10)
        assert score(test, {0: "A", 1: "B", 2: "C", 3: "D"}) == 10

    def test_all_wrong_scores_zero(self):
        test = _test(["A", "B", "C", "D"], max_marks=10)
        assert score(test, {0: "D", 1: "C", 2: "B", 3: "A"}) == 0

    def test_empty_answers_score_zero(self):
        assert score(_test(["A", "B"], max_marks=10), {}) == 0

    def test_no_questions_scores_zero(self):
        assert score(_test([], max_marks=10), {0: "A"}) == 0

    def test_unknown_indices_are_ignored(self):
        test = _test(["A", "B"], max_marks=10)
        assert score(test, {0: "A", 5: "B", -1: "A"}) == 5

    def test_exact_string_match_only(self):
        test = _test(["A"], max_marks=10)
        assert score(test, {0: "a"}) == 0
        assert score(test, {0: " A"}) == 0

    @pytest.mark.parametrize(
        "correct_count, expected",
        [(0, 0), (1, 3), (2, 7), (3, 10)],
    )
    def test_thirds_round_to_nearest(self, correct_count, expected):
        test = _test(["A", "A", "A"], max_marks=10)
        answers = {i: "A" for i in range(correct_count)}
        assert score(test, answers) == expected

    def test_exact_half_rounds_up(self):
        test = _test(["A", "A"], max_marks=1)
        assert score(test, {0: "A"}) == 1

    def test_half_rounds_up_on_even_base(self):
        # 2.5 would round to 2 under bankers' rounding
        test = _test(["A", "A"], max_marks=5)
        assert score(test, {0: "A"}) == 3

    def test_is_deterministic(self):
        test = _test(["A", "B", "C", "D", "A", "B", "C"], max_marks=17)
        answers = {0: "A", 2: "C", 4: "B", 6: "C"}
        assert score(test, answers) == score(test, dict(answers))
