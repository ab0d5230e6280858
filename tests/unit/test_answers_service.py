from evaluation.types import Question, RawAnswerSubmission
from pipeline.fallback_chain import FallbackChain
from pipeline.retry import RetryPolicy
from providers.base import ProviderError
from services.answers import submit_answer
from storage.answers import get_answer
from storage.audio import LocalAudioStore
from storage.sessions import create_session, get_session

AUDIO = b"\x42" * 32000
QUESTION = Question(
    id="q-1",
    question_text="Describe a hard bug you fixed.",
    rubric={"technical_fit": "Names the debugging tools used"},
)


def _chain(transcribers, evaluators):
    return FallbackChain(transcribers, evaluators, policy=RetryPolicy(max_attempts=2, delay_s=0, sleep=lambda _: None))


def _submission(session_id, index=0, audio=AUDIO):
    return RawAnswerSubmission(
        session_id=session_id,
        question_id=QUESTION.id,
        question_index=index,
        audio=audio,
        mime_type="audio/webm",
        tab_switches=1,
    )


def test_submit_evaluates_normalizes_and_aggregates(fakes, tmp_path):
    FakeProvider, make_transcription, make_evaluation = fakes
    provider = FakeProvider("groq", [make_transcription(duration=7.0)], [make_evaluation(scores=(5, 4, 3, 2, 1))])
    session_id = create_session("org-1")

    outcome = submit_answer(
        _submission(session_id),
        QUESTION,
        pipeline=_chain([provider], [provider]),
        org_id="org-1",
        audio_store=LocalAudioStore(str(tmp_path)),
    )

    assert outcome.success
    assert outcome.status == "evaluated"
    assert outcome.scores == {"clarity": 100, "relevance": 80, "confidence": 60, "technical_fit": 40, "communication": 20}
    assert outcome.average_score == 60
    assert outcome.aggregate.total_score == 60.0
    assert outcome.aggregate.ai_recommendation == "maybe"

    row = get_answer(session_id, 0)
    assert row["transcript"] == make_transcription().transcript
    assert row["raw_scores"]["clarity"] == 5.0
    assert row["audio_duration_seconds"] == 7.0
    assert row["audio_url"].startswith("audio/org-1/")
    assert row["tab_switches_during"] == 1
    assert get_session(session_id)["ai_summary"] == "Solid, specific answer."


def test_total_provider_failure_is_flagged_for_review(fakes):
    FakeProvider, _, _ = fakes
    broken = FakeProvider("groq", [ProviderError("down")], [ProviderError("down")])
    session_id = create_session("org-1")

    outcome = submit_answer(_submission(session_id), QUESTION, pipeline=_chain([broken], [broken]), org_id="org-1")

    assert outcome.success
    assert outcome.status == "pending_review"
    assert outcome.average_score is None
    assert outcome.aggregate.total_score is None
    row = get_answer(session_id, 0)
    assert row["status"] == "pending_review"
    assert row["average_score"] is None
    assert row["ai_evaluation"]["provider"] == "fallback"
    assert row["scores"]["clarity"] == 60


def test_pipeline_crash_keeps_answer_and_reports_error():
    class CrashingPipeline:
        def process_answer(self, *args, **kwargs):
            raise RuntimeError("pipeline exploded")

    session_id = create_session("org-1")
    outcome = submit_answer(_submission(session_id), QUESTION, pipeline=CrashingPipeline(), org_id="org-1")

    assert outcome.success
    assert outcome.ai_error == "pipeline exploded"
    assert outcome.transcript is None
    row = get_answer(session_id, 0)
    assert row is not None
    assert row["status"] == "submitted"
    assert row["transcript"] is None


def test_submission_without_audio_skips_pipeline(fakes):
    FakeProvider, make_transcription, make_evaluation = fakes
    provider = FakeProvider("groq", [make_transcription()], [make_evaluation()])
    session_id = create_session("org-1")

    outcome = submit_answer(_submission(session_id, audio=b""), None, pipeline=_chain([provider], [provider]), org_id="org-1")

    assert outcome.status == "submitted"
    assert outcome.transcript is None
    assert provider.transcribe_calls == 0
    assert get_answer(session_id, 0) is not None


def test_resubmission_keeps_single_answer_and_latest_scores(fakes):
    FakeProvider, make_transcription, make_evaluation = fakes
    session_id = create_session("org-1")
    first = FakeProvider("groq", [make_transcription("first")], [make_evaluation(scores=(1, 1, 1, 1, 1))])
    second = FakeProvider("groq", [make_transcription("second")], [make_evaluation(scores=(5, 5, 5, 5, 5))])

    a = submit_answer(_submission(session_id), QUESTION, pipeline=_chain([first], [first]), org_id="org-1")
    b = submit_answer(_submission(session_id), QUESTION, pipeline=_chain([second], [second]), org_id="org-1")

    assert a.answer_id == b.answer_id
    assert get_answer(session_id, 0)["transcript"] == "second"
    assert b.aggregate.total_score == 100.0
    assert b.aggregate.ai_recommendation == "strong_hire"


def test_unknown_question_uses_placeholder_text(fakes):
    FakeProvider, make_transcription, make_evaluation = fakes
    seen = {}

    class Recording(FakeProvider):
        def evaluate(self, transcript, question_text, rubric):
            seen["question"] = question_text
            seen["rubric"] = rubric
            return super().evaluate(transcript, question_text, rubric)

    provider = Recording("groq", [make_transcription()], [make_evaluation()])
    session_id = create_session("org-1")
    submit_answer(_submission(session_id), None, pipeline=_chain([provider], [provider]), org_id="org-1")
    assert seen == {"question": "Unknown question", "rubric": {}}


def test_resubmission_without_audio_clears_session_total(fakes):
    FakeProvider, make_transcription, make_evaluation = fakes
    provider = FakeProvider("groq", [make_transcription()], [make_evaluation(scores=(5, 5, 5, 5, 5))])
    session_id = create_session("org-1")
    scored = submit_answer(_submission(session_id), QUESTION, pipeline=_chain([provider], [provider]), org_id="org-1")
    assert scored.aggregate.total_score == 100.0

    outcome = submit_answer(_submission(session_id, audio=b""), QUESTION, pipeline=_chain([provider], [provider]), org_id="org-1")

    assert outcome.aggregate.total_score is None
    session = get_session(session_id)
    assert session["total_score"] is None
    assert session["ai_recommendation"] is None
    assert get_answer(session_id, 0)["average_score"] is None


def test_resubmission_with_pipeline_crash_recomputes_session_total(fakes):
    FakeProvider, make_transcription, make_evaluation = fakes

    class CrashingPipeline:
        def process_answer(self, *args, **kwargs):
            raise RuntimeError("pipeline exploded")

    session_id = create_session("org-1")
    for index, scores in ((0, (5, 5, 5, 5, 5)), (1, (3, 3, 3, 3, 3))):
        provider = FakeProvider("groq", [make_transcription()], [make_evaluation(scores=scores)])
        submit_answer(_submission(session_id, index=index), QUESTION, pipeline=_chain([provider], [provider]), org_id="org-1")
    assert get_session(session_id)["total_score"] == 80.0

    outcome = submit_answer(_submission(session_id, index=0), QUESTION, pipeline=CrashingPipeline(), org_id="org-1")

    assert outcome.ai_error == "pipeline exploded"
    assert outcome.aggregate.total_score == 60.0
    session = get_session(session_id)
    assert session["total_score"] == 60.0
    assert session["ai_recommendation"] == "maybe"
