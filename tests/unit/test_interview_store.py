import sqlite3

import pytest

from interviews.errors import InvalidStateError, NotFoundError, StorageError
from interviews.models import Question
from storage.sqlite import get_conn


def _new(store, **kwargs):
    return store.create("Build APIs in Go", "Backend Engineer", "mid", "technical", tech_stack=("Go", "SQL"), **kwargs)


def test_create_persists_ongoing_interview_and_sets_pointer(store):
    interview = _new(store)
    assert interview.status == "ongoing"
    assert interview.questions == []
    assert interview.tech_stack == ["Go", "SQL"]
    assert store.get(interview.id) == interview
    assert store.get_current_session_id() == interview.id


def test_get_unknown_returns_none_and_require_raises(store):
    assert store.get("missing") is None
    with pytest.raises(NotFoundError):
        store.require("missing")


def test_append_question_assigns_id_and_timestamp(store):
    interview = _new(store)
    updated = store.append_question(interview.id, Question(question="What is a goroutine?"))
    appended = updated.questions[0]
    assert appended.id
    assert appended.created_at
    assert store.require(interview.id).questions[0].id == appended.id


def test_append_preserves_order(store):
    interview = _new(store)
    for idx in range(3):
        store.append_question(interview.id, Question(question=f"Q{idx}"))
    assert [q.question for q in store.require(interview.id).questions] == ["Q0", "Q1", "Q2"]


def test_record_answer_updates_only_target_round(store):
    interview = _new(store)
    store.append_question(interview.id, Question(question="Q0"))
    second = store.append_question(interview.id, Question(question="Q1")).questions[1]
    updated = store.record_answer(interview.id, second.id, "Channels", 7, "Good", ideal_answer="Use channels.")
    first, answered = updated.questions
    assert not first.answered
    assert answered.user_answer == "Channels"
    assert answered.score == 7
    assert answered.feedback == "Good"
    assert answered.ideal_answer == "Use channels."


def test_record_answer_unknown_question_raises(store):
    interview = _new(store)
    with pytest.raises(NotFoundError):
        store.record_answer(interview.id, "nope", "a", 5, "f")


def test_record_answer_unknown_interview_raises(store):
    with pytest.raises(NotFoundError):
        store.record_answer("nope", "nope", "a", 5, "f")


def test_record_answer_rejects_out_of_range_score(store):
    interview = _new(store)
    question = store.append_question(interview.id, Question(question="Q0")).questions[0]
    with pytest.raises(ValueError):
        store.record_answer(interview.id, question.id, "a", 11, "f")
    assert not store.require(interview.id).questions[0].answered


def test_update_rejects_immutable_fields(store):
    interview = _new(store)
    with pytest.raises(ValueError):
        store.update(interview.id, id="other")
    with pytest.raises(ValueError):
        store.update(interview.id, created_at="2020-01-01T00:00:00+00:00")


def test_complete_then_reopen_is_rejected(store):
    interview = _new(store)
    completed = store.complete(interview.id, 6.5, "Nice", ["a"], ["b"], recommendations=["c"])
    assert completed.status == "completed"
    assert completed.overall_score == 6.5
    assert completed.recommendations == ["c"]
    with pytest.raises(InvalidStateError):
        store.update(interview.id, status="ongoing")
    with pytest.raises(InvalidStateError):
        store.append_question(interview.id, Question(question="late"))


def test_list_all_newest_first(store):
    first = _new(store)
    second = _new(store)
    ids = [i.id for i in store.list_all()]
    assert ids == [second.id, first.id]


def test_delete_reports_whether_a_row_was_removed(store):
    interview = _new(store)
    assert store.delete(interview.id) is True
    assert store.delete(interview.id) is False
    assert store.get(interview.id) is None


def test_current_session_pointer_roundtrip(store):
    assert store.get_current_session_id() is None
    store.set_current_session_id("abc")
    assert store.get_current_session_id() == "abc"
    store.clear_current_session_id()
    assert store.get_current_session_id() is None


def test_sqlite_errors_surface_as_storage_error(tmp_db):
    with pytest.raises(StorageError):
        with get_conn(tmp_db) as conn:
            conn.execute("SELECT * FROM no_such_table")


def test_payload_row_is_json(store, tmp_db):
    interview = _new(store)
    conn = sqlite3.connect(tmp_db)
    try:
        row = conn.execute("SELECT status, job_title, payload FROM interviews WHERE id = ?", (interview.id,)).fetchone()
    finally:
        conn.close()
    assert row[0] == "ongoing"
    assert row[1] == "Backend Engineer"
    assert '"job_title":"Backend Engineer"' in row[2]


def test_create_with_first_question_is_one_write(store):
    interview = _new(store, first_question=Question(question="Warm-up?"))
    assert [q.question for q in interview.questions] == ["Warm-up?"]
    assert interview.questions[0].id
    assert store.require(interview.id) == interview
