from __future__ import annotations  # SQLite-backed interview session store

import sqlite3
import uuid
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from interviews.errors import InvalidStateError, NotFoundError
from interviews.models import Interview, Question, utc_now

from .migrate import migrate
from .sqlite import get_conn

CURRENT_SESSION_KEY = "current_session"
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class InterviewStore:  # Durable CRUD over interview records plus the current-session pointer
    def __init__(self, path: Path) -> None:
        self._path = path
        migrate(path)

    @property
    def path(self) -> Path:
        return self._path

    def create(
        self,
        job_description: str,
        job_title: str,
        difficulty: str,
        mode: str,
        *,
        tech_stack: Sequence[str] = (),
        first_question: Optional[Question] = None,
    ) -> Interview:  # Insert a new ongoing interview (and its first round) and make it current
        questions = [_stamp(first_question)] if first_question is not None else []
        interview = Interview(
            id=str(uuid.uuid4()),
            job_description=job_description,
            job_title=job_title,
            tech_stack=list(tech_stack),
            difficulty=difficulty,
            mode=mode,
            status="ongoing",
            created_at=utc_now(),
            questions=questions,
        )
        # Row and pointer commit together or not at all
        with get_conn(self._path) as conn:
            conn.execute(
                "INSERT INTO interviews (id, created_at, status, job_title, payload) VALUES (?, ?, ?, ?, ?)",
                (interview.id, interview.created_at, interview.status, interview.job_title, interview.model_dump_json()),
            )
            _write_pointer(conn, interview.id)
        return interview

    def get(self, interview_id: str) -> Optional[Interview]:
        with get_conn(self._path) as conn:
            return _load(conn, interview_id)

    def require(self, interview_id: str) -> Interview:
        interview = self.get(interview_id)
        if interview is None:
            raise NotFoundError(f"Interview '{interview_id}' not found")
        return interview

    def update(self, interview_id: str, **fields: Any) -> Interview:  # Shallow merge of top-level fields
        frozen = IMMUTABLE_FIELDS.intersection(fields)
        if frozen:
            raise ValueError(f"Immutable interview fields: {', '.join(sorted(frozen))}")

        def _merge(current: Interview) -> Interview:
            if current.completed and fields.get("status", "completed") != "completed":
                raise InvalidStateError(f"Interview '{interview_id}' is completed and cannot be reopened")
            return Interview.model_validate({**current.model_dump(), **fields})

        return self._mutate(interview_id, _merge)

    def append_question(self, interview_id: str, question: Question) -> Interview:
        def _append(current: Interview) -> Interview:
            if current.completed:
                raise InvalidStateError(f"Interview '{interview_id}' is completed; no further rounds allowed")
            return current.model_copy(update={"questions": [*current.questions, _stamp(question)]})

        return self._mutate(interview_id, _append)

    def record_answer(
        self,
        interview_id: str,
        question_id: str,
        answer: str,
        score: int,
        feedback: str,
        *,
        ideal_answer: Optional[str] = None,
    ) -> Interview:  # Attach answer, score and feedback to one round
        def _answer(current: Interview) -> Interview:
            if current.find_question(question_id) is None:
                raise NotFoundError(f"Question '{question_id}' not found in interview '{interview_id}'")
            questions = [
                Question.model_validate(
                    {
                        **question.model_dump(),
                        "user_answer": answer,
                        "score": score,
                        "feedback": feedback,
                        "ideal_answer": ideal_answer,
                    }
                )
                if question.id == question_id
                else question
                for question in current.questions
            ]
            return current.model_copy(update={"questions": questions})

        return self._mutate(interview_id, _answer)

    def complete(
        self,
        interview_id: str,
        overall_score: float,
        overall_feedback: str,
        strengths: Sequence[str],
        weaknesses: Sequence[str],
        *,
        recommendations: Sequence[str] = (),
    ) -> Interview:
        return self.update(
            interview_id,
            status="completed",
            overall_score=overall_score,
            overall_feedback=overall_feedback,
            strengths=list(strengths),
            weaknesses=list(weaknesses),
            recommendations=list(recommendations),
        )

    def list_all(self) -> List[Interview]:  # Newest first
        with get_conn(self._path) as conn:
            rows = conn.execute("SELECT payload FROM interviews ORDER BY created_at DESC, rowid DESC").fetchall()
        return [Interview.model_validate_json(row["payload"]) for row in rows]

    def delete(self, interview_id: str) -> bool:
        with get_conn(self._path) as conn:
            cur = conn.execute("DELETE FROM interviews WHERE id = ?", (interview_id,))
            return cur.rowcount > 0

    def set_current_session_id(self, interview_id: str) -> None:
        with get_conn(self._path) as conn:
            _write_pointer(conn, interview_id)

    def get_current_session_id(self) -> Optional[str]:
        with get_conn(self._path) as conn:
            row = conn.execute("SELECT value FROM app_state WHERE key = ?", (CURRENT_SESSION_KEY,)).fetchone()
        return row["value"] if row else None

    def clear_current_session_id(self) -> None:
        with get_conn(self._path) as conn:
            conn.execute("DELETE FROM app_state WHERE key = ?", (CURRENT_SESSION_KEY,))

    def _mutate(self, interview_id: str, change: Callable[[Interview], Interview]) -> Interview:
        # Read-modify-write inside one immediate transaction; the row is replaced whole.
        with get_conn(self._path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            current = _load(conn, interview_id)
            if current is None:
                raise NotFoundError(f"Interview '{interview_id}' not found")
            updated = change(current)
            conn.execute(
                "UPDATE interviews SET status = ?, job_title = ?, payload = ? WHERE id = ?",
                (updated.status, updated.job_title, updated.model_dump_json(), interview_id),
            )
        return updated


def _load(conn: sqlite3.Connection, interview_id: str) -> Optional[Interview]:
    row = conn.execute("SELECT payload FROM interviews WHERE id = ?", (interview_id,)).fetchone()
    return Interview.model_validate_json(row["payload"]) if row else None


def _stamp(question: Question) -> Question:  # Fresh id and timestamp when unset
    return question.model_copy(
        update={
            "id": question.id or str(uuid.uuid4()),
            "created_at": question.created_at or utc_now(),
        }
    )


def _write_pointer(conn: sqlite3.Connection, interview_id: str) -> None:
    conn.execute(
        "INSERT INTO app_state (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (CURRENT_SESSION_KEY, interview_id),
    )


__all__ = ["CURRENT_SESSION_KEY", "InterviewStore"]
