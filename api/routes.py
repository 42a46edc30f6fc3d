"""FastAPI routes for interview sessions, reports and analytics."""
from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, HTTPException, Response

from agents.types import AnswerEvaluation
from api.schemas import (
    AnswerReq,
    ChatReq,
    ChatResp,
    CurrentSessionResp,
    EvaluationPayload,
    InterviewSummary,
    ResetResp,
    SessionResp,
    StartReq,
)
from interviews.errors import CollaboratorError, InvalidStateError, NotFoundError, StorageError
from interviews.models import Interview
from services import sessions
from services.scoring import AnalyticsSummary, analytics, summarize_scores
from services.session_controller import MAX_ROUNDS, InterviewSessionController
from session_reports import InterviewReport, build_report, generate_interview_report_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except CollaboratorError as exc:
        logger.warning("Collaborator failure surfaced to client: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except StorageError as exc:
        logger.exception("Storage failure")
        raise HTTPException(status_code=500, detail="Storage unavailable") from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _session_resp(
    controller: InterviewSessionController,
    evaluation: Optional[AnswerEvaluation] = None,
) -> SessionResp:
    interview = controller.interview
    if interview is None:
        raise InvalidStateError("Controller has no active interview")
    return SessionResp(
        interview_id=interview.id,
        phase=controller.phase,
        round=controller.current_round,
        max_rounds=MAX_ROUNDS,
        job_title=interview.job_title,
        tech_stack=interview.tech_stack,
        difficulty=interview.difficulty,
        mode=interview.mode,
        question=controller.current_question,
        evaluation=EvaluationPayload(**{**evaluation.model_dump(), "score": int(evaluation.score)}) if evaluation else None,
        warnings=controller.warnings,
        event_log=controller.events,
    )


def _summary(interview: Interview) -> InterviewSummary:
    scores = summarize_scores(interview.questions)
    return InterviewSummary(
        interview_id=interview.id,
        job_title=interview.job_title,
        mode=interview.mode,
        difficulty=interview.difficulty,
        status=interview.status,
        created_at=interview.created_at,
        total_questions=scores.total,
        answered=scores.answered,
        overall_score=interview.overall_score,
    )


def _safe_slug(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "-", value).strip("-").lower()


@router.post("/interviews/start", response_model=SessionResp, status_code=201)
def start(req: StartReq) -> SessionResp:
    with _domain_errors():
        controller = sessions.new_controller(sessions.open_store())
        controller.start(req.job_description, req.mode)
        sessions.register(controller)
        return _session_resp(controller)


@router.post("/interviews/{interview_id}/answer", response_model=SessionResp)
def answer(interview_id: str, req: AnswerReq) -> SessionResp:
    with _domain_errors():
        controller = sessions.controller_for(interview_id, sessions.open_store())
        evaluation = controller.submit_answer(req.answer)
        return _session_resp(controller, evaluation)


@router.post("/interviews/{interview_id}/next", response_model=SessionResp)
def next_question(interview_id: str) -> SessionResp:
    with _domain_errors():
        controller = sessions.controller_for(interview_id, sessions.open_store())
        controller.next_question()
        return _session_resp(controller)


@router.post("/interviews/{interview_id}/finish", response_model=InterviewReport)
def finish(interview_id: str) -> InterviewReport:
    with _domain_errors():
        controller = sessions.controller_for(interview_id, sessions.open_store())
        finished = controller.finish()
        sessions.discard(interview_id)
        return build_report(finished)


@router.post("/interviews/{interview_id}/reset", response_model=ResetResp)
def reset(interview_id: str) -> ResetResp:
    with _domain_errors():
        controller = sessions.live(interview_id)
        if controller is None:
            sessions.open_store().require(interview_id)
        else:
            controller.reset()
            sessions.discard(interview_id)
        return ResetResp(interview_id=interview_id, phase="uninitialized")


@router.get("/interviews", response_model=List[InterviewSummary])
def list_interviews() -> List[InterviewSummary]:
    with _domain_errors():
        return [_summary(interview) for interview in sessions.open_store().list_all()]


@router.get("/interviews/current", response_model=CurrentSessionResp)
def current_session() -> CurrentSessionResp:
    with _domain_errors():
        return CurrentSessionResp(interview_id=sessions.open_store().get_current_session_id())


@router.get("/interviews/{interview_id}", response_model=Interview)
def get_interview(interview_id: str) -> Interview:
    with _domain_errors():
        return sessions.open_store().require(interview_id)


@router.delete("/interviews/{interview_id}", status_code=204)
def delete_interview(interview_id: str) -> Response:
    with _domain_errors():
        sessions.discard(interview_id)
        if not sessions.open_store().delete(interview_id):
            raise NotFoundError(f"Interview '{interview_id}' not found")
        return Response(status_code=204)


@router.get("/interviews/{interview_id}/report", response_model=InterviewReport)
def report(interview_id: str) -> InterviewReport:
    with _domain_errors():
        return build_report(sessions.open_store().require(interview_id))


@router.get("/interviews/{interview_id}/report.pdf")
def report_pdf(interview_id: str) -> Response:
    with _domain_errors():
        interview = sessions.open_store().require(interview_id)
    payload = generate_interview_report_pdf(build_report(interview))
    filename = f"interview-report-{_safe_slug(interview.job_title) or 'role'}-{interview.id[:8]}.pdf"
    headers = {"Content-Disposition": f"attachment; filename=\"{filename}\""}
    return Response(content=payload, media_type="application/pdf", headers=headers)


@router.get("/analytics", response_model=AnalyticsSummary)
def analytics_summary() -> AnalyticsSummary:
    with _domain_errors():
        return analytics(sessions.open_store().list_all())


@router.post("/career-chat", response_model=ChatResp)
def career_chat(req: ChatReq) -> ChatResp:
    with _domain_errors():
        reply = sessions.career_advisor().reply(req.history, req.message)
        return ChatResp(reply=reply)
