import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from exam_portal.schemas.exam_schemas import AnswerOption, Exam, ExamAttempt, Question, StudentAnswer
from exam_portal.services.errors import NotFoundError

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def exam(exam_id, title="Exam", created_by="t1"):
    return Exam(id=exam_id, title=title, description="", created_by=created_by, questions_count=1, created_at=NOW)


def question(question_id, exam_id, position=0):
    return Question(id=question_id, exam_id=exam_id, text=f"Text {question_id}", position=position)


def attempt(attempt_id, exam_id, student_id="s1", score=50):
    return ExamAttempt(
        id=attempt_id, exam_id=exam_id, student_id=student_id, score=score,
        total_questions=2, started_at=NOW, completed_at=NOW, time_taken=30,
    )


class TestLocalStorage:
    def test_missing_key_reads_as_none(self, storage):
        assert storage.get_item("nothing") is None

    def test_set_overwrites_and_remove_deletes(self, storage):
        storage.set_item("k", "1")
        storage.set_item("k", "2")
        assert storage.get_item("k") == "2"
        storage.remove_item("k")
        assert storage.get_item("k") is None


class TestUpsert:
    def test_empty_store_lists_nothing(self, records):
        assert records.get_exams() == []
        assert records.get_questions() == []
        assert records.get_answer_options() == []
        assert records.get_attempts() == []
        assert records.get_answers() == []

    def test_last_write_wins_per_id(self, records):
        records.save_attempt(attempt("a1", "e1", score=10))
        records.save_attempt(attempt("a2", "e1", score=20))
        records.save_attempt(attempt("a1", "e1", score=90))

        stored = records.get_attempts()
        assert [a.id for a in stored] == ["a1", "a2"]
        assert stored[0].score == 90

    def test_save_many_upserts_each_element(self, records):
        records.save_questions([question("q1", "e1", 0), question("q2", "e1", 1)])
        records.save_questions([question("q2", "e1", 5), question("q3", "e1", 2)])

        stored = records.get_questions("e1")
        assert [q.id for q in stored] == ["q1", "q2", "q3"]
        assert stored[1].position == 5

    def test_replacing_exam_stamps_updated_at(self, records):
        first = records.save_exam(exam("e1", "Old"))
        assert first.updated_at is None

        second = records.save_exam(exam("e1", "New"))
        assert second.updated_at is not None
        stored = records.get_exam("e1")
        assert stored.title == "New"
        assert stored.updated_at == second.updated_at

    def test_save_answer_and_answers(self, records):
        records.save_answer(StudentAnswer(id="x1", attempt_id="a1", question_id="q1", selected_option_id="o1", is_correct=True))
        records.save_answers([
            StudentAnswer(id="x1", attempt_id="a1", question_id="q1", selected_option_id="o2", is_correct=False),
            StudentAnswer(id="x2", attempt_id="a2", question_id="q1", is_correct=False),
        ])
        assert [a.selected_option_id for a in records.get_answers("a1")] == ["o2"]
        assert records.get_answers("a2")[0].selected_option_id == ""


class TestFiltering:
    def test_filters_by_foreign_key(self, records):
        records.save_exam(exam("e1", created_by="t1"))
        records.save_exam(exam("e2", created_by="t2"))
        records.save_answer_options([
            AnswerOption(id="o1", question_id="q1", text="a", is_correct=True, option_letter="A"),
            AnswerOption(id="o2", question_id="q2", text="b", is_correct=False, option_letter="B"),
        ])

        assert [e.id for e in records.get_exams("t2")] == ["e2"]
        assert [o.id for o in records.get_answer_options("q1")] == ["o1"]

    def test_get_missing_returns_none_and_require_raises(self, records):
        assert records.get_exam("nope") is None
        assert records.get_attempt("nope") is None
        with pytest.raises(NotFoundError, match="Exam not found"):
            records.require_exam("nope")
        with pytest.raises(NotFoundError, match="Result not found"):
            records.require_attempt("nope")

    def test_total_students_counts_distinct_ids(self, records):
        records.save_attempt(attempt("a1", "e1", student_id="s1"))
        records.save_attempt(attempt("a2", "e2", student_id="s1"))
        records.save_attempt(attempt("a3", "e1", student_id="s2"))
        assert records.get_total_students() == 2


class TestDeleteExam:
    def test_cascades_to_questions_and_attempts_only(self, records):
        records.save_exam(exam("e1"))
        records.save_exam(exam("e2"))
        records.save_questions([question("q1", "e1"), question("q2", "e2")])
        records.save_answer_options([
            AnswerOption(id="o1", question_id="q1", text="a", is_correct=True, option_letter="A"),
        ])
        records.save_attempt(attempt("a1", "e1"))
        records.save_attempt(attempt("a2", "e2"))
        records.save_answer(StudentAnswer(id="x1", attempt_id="a1", question_id="q1", selected_option_id="o1", is_correct=True))

        records.delete_exam("e1")

        assert [e.id for e in records.get_exams()] == ["e2"]
        assert [q.id for q in records.get_questions()] == ["q2"]
        assert [a.id for a in records.get_attempts()] == ["a2"]
        # options and answers of the deleted exam are left dangling
        assert [o.id for o in records.get_answer_options()] == ["o1"]
        assert [a.id for a in records.get_answers()] == ["x1"]


class TestStoredFormat:
    def test_collections_are_json_lists(self, records, storage):
        records.save_exam(exam("e1"))
        blob = json.loads(storage.get_item("exams"))
        assert blob[0]["id"] == "e1"
        assert blob[0]["created_by"] == "t1"
        assert blob[0]["questions_count"] == 1

    def test_round_trip_preserves_records(self, records):
        original_exam = exam("e1")
        options = [
            AnswerOption(id=f"q1-opt{i}", question_id="q1", text=t, is_correct=i == 2, option_letter="ABCD"[i])
            for i, t in enumerate(["w", "x", "y", "z"])
        ]
        questions = [
            question("q2", "e1", position=1),
            Question(id="q1", exam_id="e1", text="First", position=0, answer_options=options),
        ]
        records.save_exam(original_exam)
        records.save_questions(questions)
        records.save_answer_options(options)

        assert records.get_exam("e1") == original_exam
        reloaded = sorted(records.get_questions("e1"), key=lambda q: q.position)
        assert [q.id for q in reloaded] == ["q1", "q2"]
        assert reloaded[0] == questions[1]
        assert sorted(o.id for o in records.get_answer_options("q1")) == sorted(o.id for o in options)

    def test_malformed_blob_raises_on_read(self, records, storage):
        storage.set_item("attempts", "{not json")
        with pytest.raises(json.JSONDecodeError):
            records.get_attempts()

    def test_records_not_matching_schema_raise(self, records, storage):
        storage.set_item("exams", json.dumps([{"id": "e1"}]))
        with pytest.raises(ValidationError):
            records.get_exams()


class TestReplaceAnswerOptions:
    def test_replaces_only_the_given_questions(self, records):
        records.save_answer_options([
            AnswerOption(id="q1-opt0", question_id="q1", text="a", is_correct=False, option_letter="A"),
            AnswerOption(id="q1-opt1", question_id="q1", text="b", is_correct=True, option_letter="B"),
            AnswerOption(id="q2-opt0", question_id="q2", text="c", is_correct=True, option_letter="A"),
        ])

        records.replace_answer_options(["q1"], [
            AnswerOption(id="q1-opt0", question_id="q1", text="new", is_correct=True, option_letter="A"),
        ])

        assert [(o.id, o.text) for o in records.get_answer_options("q1")] == [("q1-opt0", "new")]
        assert [o.id for o in records.get_answer_options("q2")] == ["q2-opt0"]
