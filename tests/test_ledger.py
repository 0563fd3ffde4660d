import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.repositories.memory import MemorySubmissionRepository
from app.services.catalog import TestCatalog
from app.services.errors import Conflict, Forbidden, Internal, NotFound, ValidationError
from app.services.ledger import SubmissionLedger
from tests.factories import OTHER_STUDENT, STUDENT, TEACHER, make_question


@pytest.fixture
def ledger(catalog_repo, submission_repo) -> SubmissionLedger:
    return SubmissionLedger(catalog_repo, submission_repo)


@pytest.fixture
def quiz(catalog_repo):
    questions = [make_question(f"Q{i}", correct=answer) for i, answer in enumerate("ABCD")]
    return TestCatalog(catalog_repo).create_test(TEACHER, name="Letters", questions=questions, max_marks=10)


class TestSubmitExam:
    def test_accepts_and_scores_submission(self, ledger, quiz):
        submission = ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "A", 1: "B", 2: "C", 3: "X"})
        assert submission.test_id == quiz.id
        assert submission.student_id == STUDENT.user_id
        assert submission.answers == {0: "A", 1: "B", 2: "C", 3: "X"}
        assert submission.score == 8

    def test_client_score_is_ignored(self, ledger, quiz):
        submission = ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "D"}, claimed_score=10)
        assert submission.score == 0

    def test_string_index_keys_are_accepted(self, ledger, quiz):
        submission = ledger.submit_exam(STUDENT, test_id=quiz.id, answers={"0": "A", "1": "B"})
        assert submission.answers == {0: "A", 1: "B"}
        assert submission.score == 5

    def test_empty_answers_score_zero(self, ledger, quiz):
        assert ledger.submit_exam(STUDENT, test_id=quiz.id, answers={}).score == 0

    def test_second_submission_conflicts_and_keeps_first(self, ledger, submission_repo, quiz):
        first = ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "A"})
        with pytest.raises(Conflict):
            ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "A", 1: "B", 2: "C", 3: "D"})
        stored = submission_repo.find_by_pair(quiz.id, STUDENT.user_id)
        assert stored == first
        assert stored.score == 3

    def test_pairs_are_independent(self, ledger, catalog_repo, quiz):
        other = TestCatalog(catalog_repo).create_test(TEACHER, name="Other", questions=[make_question("Q")], max_marks=5)
        ledger.submit_exam(STUDENT, test_id=quiz.id, answers={})
        ledger.submit_exam(OTHER_STUDENT, test_id=quiz.id, answers={})
        ledger.submit_exam(STUDENT, test_id=other.id, answers={0: "A"})

    def test_unknown_test_is_not_found(self, ledger):
        with pytest.raises(NotFound):
            ledger.submit_exam(STUDENT, test_id=9999, answers={0: "A"})

    def test_teacher_is_forbidden(self, ledger, quiz):
        with pytest.raises(Forbidden):
            ledger.submit_exam(TEACHER, test_id=quiz.id, answers={0: "A"})

    def test_role_is_checked_before_payload(self, ledger):
        with pytest.raises(Forbidden):
            ledger.submit_exam(TEACHER, test_id="nope", answers=None, claimed_score="x")

    @pytest.mark.parametrize(
        "test_id, answers, claimed_score, bad_field",
        [
            ("1", {0: "A"}, None, "testId"),
            (True, {0: "A"}, None, "testId"),
            (1, None, None, "answers"),
            (1, ["A", "B"], None, "answers"),
            (1, {"first": "A"}, None, "answers"),
            (1, {0: 3}, None, "answers"),
            (1, {0: "A"}, "ten", "score"),
        ],
    )
    def test_malformed_input_is_rejected(self, ledger, quiz, test_id, answers, claimed_score, bad_field):
        with pytest.raises(ValidationError) as exc_info:
            ledger.submit_exam(STUDENT, test_id=test_id, answers=answers, claimed_score=claimed_score)
        assert exc_info.value.errors[0]["loc"][0] == bad_field

    def test_validation_precedes_lookup(self, ledger):
        with pytest.raises(ValidationError):
            ledger.submit_exam(STUDENT, test_id=9999, answers=None)

    def test_concurrent_duplicates_store_one_submission(self, ledger, submission_repo, quiz):
        barrier = threading.Barrier(8)

        def attempt(answer):
            barrier.wait()
            try:
                return ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: answer})
            except Conflict:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, ["A", "B", "C", "D"] * 2))

        accepted = [r for r in results if r is not None]
        assert len(accepted) == 1
        assert submission_repo.find_by_pair(quiz.id, STUDENT.user_id) == accepted[0]


class _BlindSubmissions(MemorySubmissionRepository):
    """Never sees existing rows, as when two requests race past the lookup."""

    def find_by_pair(self, test_id, student_id):
        return None


class _BrokenSubmissions(MemorySubmissionRepository):
    def create(self, test_id, student_id, answers, score):
        raise Internal("insert failed")


class TestStorageGuarantees:
    def test_store_constraint_rejects_duplicate_missed_by_lookup(self, store, catalog_repo, quiz):
        ledger = SubmissionLedger(catalog_repo, _BlindSubmissions(store))
        ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "A"})
        with pytest.raises(Conflict):
            ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "B"})
        assert len(store.submissions) == 1

    def test_datastore_failure_surfaces_as_internal(self, store, catalog_repo, quiz):
        ledger = SubmissionLedger(catalog_repo, _BrokenSubmissions(store))
        with pytest.raises(Internal):
            ledger.submit_exam(STUDENT, test_id=quiz.id, answers={0: "A"})
        assert store.submissions == {}
