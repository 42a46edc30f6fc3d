import threading

import pytest

from agents.types import AnswerEvaluation, JobProfile, OverallFeedback
from conftest import FakeEvaluator, FakeGenerator, FakeSummarizer
from interviews.errors import InvalidStateError, NotFoundError, StorageError
from services.session_controller import MAX_ROUNDS, InterviewSessionController


def _controller(store, generator=None, evaluator=None, summarizer=None):
    return InterviewSessionController(
        store,
        generator=generator or FakeGenerator(),
        evaluator=evaluator or FakeEvaluator(),
        summarizer=summarizer or FakeSummarizer(),
    )


def test_start_creates_round_one(store):
    controller = _controller(store)
    interview = controller.start("Senior Go engineer, 5+ years", "technical")
    assert controller.phase == "awaiting_answer"
    assert controller.current_round == 1
    assert interview.job_title == "Backend Engineer"
    assert interview.difficulty == "senior"
    assert len(interview.questions) == 1
    assert controller.current_question.question == "Question 1?"
    assert store.get_current_session_id() == interview.id
    assert controller.warnings == []
    assert [e["span"] for e in controller.events] == ["parse", "generate"]


def test_start_passes_empty_history_and_mode(store):
    generator = FakeGenerator()
    _controller(store, generator=generator).start("jd", "behavioral")
    call = generator.calls[0]
    assert call["round_number"] == 1
    assert call["prior_rounds"] == []
    assert call["mode"] == "behavioral"
    assert call["tech_stack"] == ["Go", "Postgres"]


def test_start_twice_is_rejected(store):
    controller = _controller(store)
    controller.start("jd", "technical")
    with pytest.raises(InvalidStateError):
        controller.start("jd", "technical")


def test_start_validates_inputs(store):
    controller = _controller(store)
    with pytest.raises(ValueError):
        controller.start("jd", "pairing")
    with pytest.raises(ValueError):
        controller.start("   ", "technical")
    assert controller.phase == "uninitialized"
    assert store.list_all() == []


def test_start_falls_back_when_collaborators_fail(store):
    generator = FakeGenerator(fail_parse=True, fail_generate=True)
    controller = _controller(store, generator=generator)
    interview = controller.start("anything", "screening")
    assert interview.job_title == "Software Engineer"
    assert interview.tech_stack == ["JavaScript", "Python"]
    assert interview.difficulty == "mid"
    question = interview.questions[0]
    assert question.question == "Tell me about your experience with JavaScript and how you've used it in production."
    assert question.expected_keywords == ["experience", "production", "challenges", "solutions"]
    assert question.follow_ups == ["Can you elaborate on that?", "What would you do differently?"]
    assert len(controller.warnings) == 2


def test_submit_answer_scores_and_does_not_advance(store):
    evaluator = FakeEvaluator(scores=[7.5])
    controller = _controller(store, evaluator=evaluator)
    controller.start("jd", "technical")
    result = controller.submit_answer("Goroutines are lightweight threads")
    assert result.score == 8
    assert controller.phase == "awaiting_answer"
    assert controller.current_round == 1
    stored = store.require(controller.interview.id).questions[0]
    assert stored.user_answer == "Goroutines are lightweight threads"
    assert stored.score == 8
    assert stored.ideal_answer == "Ideal."
    assert evaluator.calls[0][2] == ["k1", "k2"]


@pytest.mark.parametrize(
    "raw, stored",
    [(0, 1), (0.2, 1), (0.4, 1), (0.5, 1), (1, 1), (5.5, 6), (9.6, 10), (10, 10), (11, 10), (14, 10), (-3, 1)],
)
def test_submit_answer_clamps_scores(store, raw, stored):
    controller = _controller(store, evaluator=FakeEvaluator(scores=[raw]))
    controller.start("jd", "technical")
    controller.submit_answer("answer")
    assert controller.current_question.score == stored


def test_submit_answer_twice_is_rejected(store):
    controller = _controller(store)
    controller.start("jd", "technical")
    controller.submit_answer("first")
    with pytest.raises(InvalidStateError):
        controller.submit_answer("second")
    assert store.require(controller.interview.id).questions[0].user_answer == "first"


def test_blank_answer_is_rejected(store):
    controller = _controller(store)
    controller.start("jd", "technical")
    with pytest.raises(ValueError):
        controller.submit_answer("   ")
    assert not controller.current_question.answered


def test_submit_before_start_is_rejected(store):
    with pytest.raises(InvalidStateError):
        _controller(store).submit_answer("hello")


def test_evaluation_fallback_uses_neutral_score(store):
    controller = _controller(store, evaluator=FakeEvaluator(fail=True))
    controller.start("jd", "technical")
    result = controller.submit_answer("answer")
    assert result.score == 5
    assert result.feedback == "Answer received. Unable to provide detailed evaluation at this time."
    assert controller.current_question.score == 5
    assert controller.warnings


def test_non_finite_raw_score_falls_back(store):
    class NanEvaluator:
        def evaluate(self, *args):
            return AnswerEvaluation(score=float("nan"), feedback="odd")

    controller = _controller(store, evaluator=NanEvaluator())
    controller.start("jd", "technical")
    assert controller.submit_answer("answer").score == 5


def test_next_question_passes_prior_rounds_with_not_answered(store):
    generator = FakeGenerator()
    controller = _controller(store, generator=generator)
    controller.start("jd", "technical")
    controller.submit_answer("first answer")
    controller.next_question()
    controller.next_question()
    prior = generator.calls[-1]["prior_rounds"]
    assert [p.user_answer for p in prior] == ["first answer", "Not answered"]
    assert generator.calls[-1]["round_number"] == 3
    assert controller.current_round == 3


def test_next_question_uses_fallback_stack_when_profile_has_none(store):
    generator = FakeGenerator(profile=JobProfile(job_title="Generalist", tech_stack=[], difficulty="junior"))
    controller = _controller(store, generator=generator)
    controller.start("jd", "technical")
    assert generator.calls[0]["tech_stack"] == []
    controller.next_question()
    assert generator.calls[1]["tech_stack"] == ["JavaScript", "Python"]


def test_generation_fallback_without_stack_mentions_software_development(store):
    generator = FakeGenerator(profile=JobProfile(job_title="Generalist", tech_stack=[], difficulty="junior"), fail_generate=True)
    controller = _controller(store, generator=generator)
    controller.start("jd", "technical")
    assert "software development" in controller.current_question.question


def test_round_limit(store):
    controller = _controller(store)
    controller.start("jd", "technical")
    for _ in range(MAX_ROUNDS - 1):
        controller.next_question()
    assert controller.current_round == MAX_ROUNDS
    with pytest.raises(InvalidStateError):
        controller.next_question()
    assert len(store.require(controller.interview.id).questions) == MAX_ROUNDS


def test_finish_scores_over_all_rounds(store):
    evaluator = FakeEvaluator(scores=[8, 6, 7, 9])
    summarizer = FakeSummarizer()
    controller = _controller(store, evaluator=evaluator, summarizer=summarizer)
    controller.start("jd", "technical")
    for round_number in range(1, 6):
        if round_number > 1:
            controller.next_question()
        if round_number < 5:
            controller.submit_answer(f"answer {round_number}")
    finished = controller.finish()
    assert finished.status == "completed"
    assert finished.overall_score == 6.0
    assert finished.overall_feedback == "Solid interview."
    assert finished.strengths == ["Communication"]
    assert finished.weaknesses == ["Skipped 1 question(s) without answering"]
    assert finished.recommendations == ["Practice system design"]
    assert controller.phase == "finished"
    assert store.get_current_session_id() is None
    job_title, answered, total = summarizer.calls[0]
    assert job_title == "Backend Engineer"
    assert len(answered) == 4
    assert total == 5


def test_finish_keeps_summarizer_weaknesses(store):
    summarizer = FakeSummarizer(
        OverallFeedback(overall_feedback="ok", strengths=[], weaknesses=["Depth"], recommendations=[])
    )
    controller = _controller(store, summarizer=summarizer)
    controller.start("jd", "technical")
    assert controller.finish().weaknesses == ["Depth"]


def test_finish_fallback_summary(store):
    controller = _controller(store, summarizer=FakeSummarizer(fail=True))
    controller.start("jd", "technical")
    controller.submit_answer("answer")
    controller.next_question()
    finished = controller.finish()
    assert finished.overall_feedback == "Interview completed. Thank you for your participation."
    assert finished.strengths == ["Completed some interview questions"]
    assert finished.weaknesses == ["Skipped 1 question(s) without answering"]
    assert finished.recommendations == [
        "Practice answering all interview questions",
        "Avoid skipping questions during interviews",
    ]
    assert finished.overall_score == 4.0


def test_finish_fallback_with_everything_answered(store):
    controller = _controller(store, summarizer=FakeSummarizer(fail=True))
    controller.start("jd", "technical")
    controller.submit_answer("answer")
    assert controller.finish().weaknesses == ["Unable to provide detailed analysis"]


def test_operations_after_finish_are_rejected(store):
    controller = _controller(store)
    controller.start("jd", "technical")
    controller.finish()
    snapshot = store.require(controller.interview.id)
    for call in (lambda: controller.submit_answer("x"), controller.next_question, controller.finish):
        with pytest.raises(InvalidStateError):
            call()
    assert store.require(controller.interview.id) == snapshot


def test_reset_keeps_record(store):
    controller = _controller(store)
    interview = controller.start("jd", "technical")
    controller.reset()
    assert controller.phase == "uninitialized"
    assert controller.interview is None
    assert store.get(interview.id) is not None
    controller.start("another jd", "behavioral")
    assert controller.current_round == 1


def test_storage_failure_restores_phase(store, monkeypatch):
    controller = _controller(store)
    controller.start("jd", "technical")

    def broken(*args, **kwargs):
        raise StorageError("disk full")

    monkeypatch.setattr(store, "record_answer", broken)
    with pytest.raises(StorageError):
        controller.submit_answer("answer")
    assert controller.phase == "awaiting_answer"
    assert not controller.current_question.answered


def test_concurrent_call_is_rejected(store):
    entered = threading.Event()
    release = threading.Event()

    class SlowEvaluator:
        def evaluate(self, *args):
            entered.set()
            release.wait(timeout=5)
            return AnswerEvaluation(score=6, feedback="slow")

    controller = _controller(store, evaluator=SlowEvaluator())
    controller.start("jd", "technical")
    worker = threading.Thread(target=controller.submit_answer, args=("answer",))
    worker.start()
    try:
        assert entered.wait(timeout=5)
        assert controller.phase == "evaluating"
        with pytest.raises(InvalidStateError):
            controller.next_question()
    finally:
        release.set()
        worker.join(timeout=5)
    assert controller.current_question.score == 6
    assert len(store.require(controller.interview.id).questions) == 1


def test_resume_rebuilds_phase(store):
    controller = _controller(store)
    interview = controller.start("jd", "technical")
    controller.next_question()

    resumed = InterviewSessionController.resume(
        store, interview.id, generator=FakeGenerator(), evaluator=FakeEvaluator(), summarizer=FakeSummarizer()
    )
    assert resumed.phase == "awaiting_answer"
    assert resumed.current_round == 2

    controller.finish()
    finished = InterviewSessionController.resume(
        store, interview.id, generator=FakeGenerator(), evaluator=FakeEvaluator(), summarizer=FakeSummarizer()
    )
    assert finished.phase == "finished"


def test_resume_unknown_interview(store):
    with pytest.raises(NotFoundError):
        InterviewSessionController.resume(
            store, "missing", generator=FakeGenerator(), evaluator=FakeEvaluator(), summarizer=FakeSummarizer()
        )


def test_reset_during_evaluation_is_rejected(store):
    entered = threading.Event()
    release = threading.Event()

    class SlowEvaluator:
        def evaluate(self, *args):
            entered.set()
            release.wait(timeout=5)
            return AnswerEvaluation(score=7, feedback="slow")

    controller = _controller(store, evaluator=SlowEvaluator())
    interview = controller.start("jd", "technical")
    worker = threading.Thread(target=controller.submit_answer, args=("answer",))
    worker.start()
    try:
        assert entered.wait(timeout=5)
        with pytest.raises(InvalidStateError):
            controller.reset()
    finally:
        release.set()
        worker.join(timeout=5)
    assert controller.phase == "awaiting_answer"
    assert controller.current_round == 1
    assert controller.current_question.score == 7

    controller.reset()
    assert controller.phase == "uninitialized"
    assert controller.current_round == 0
    with pytest.raises(InvalidStateError):
        controller.next_question()
    assert len(store.require(interview.id).questions) == 1


def test_current_round_follows_stored_rounds(store):
    controller = _controller(store)
    interview = controller.start("jd", "technical")
    controller.next_question()
    assert controller.current_round == len(store.require(interview.id).questions) == 2
    assert controller.current_question.question == "Question 2?"


def test_failed_start_leaves_no_record_or_pointer(store, monkeypatch):
    import storage.interviews as interviews_store

    def broken(*args, **kwargs):
        raise StorageError("disk full")

    monkeypatch.setattr(interviews_store, "_write_pointer", broken)
    controller = _controller(store)
    with pytest.raises(StorageError):
        controller.start("jd", "technical")
    assert controller.phase == "uninitialized"
    assert controller.interview is None
    assert store.list_all() == []
    assert store.get_current_session_id() is None


def test_ten_rounds_with_six_answered_scores_over_all_rounds(store):
    controller = _controller(store, evaluator=FakeEvaluator(scores=[8, 7, 9, 6, 8, 7]))
    controller.start("jd", "technical")
    for round_number in range(1, MAX_ROUNDS + 1):
        if round_number > 1:
            controller.next_question()
        if round_number <= 6:
            controller.submit_answer(f"answer {round_number}")
    finished = controller.finish()
    assert len(finished.questions) == MAX_ROUNDS
    assert finished.overall_score == 4.5
    assert finished.weaknesses == ["Skipped 4 question(s) without answering"]
