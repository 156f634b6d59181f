import asyncio

import pytest

from app.core.enums import SubmissionErrorKind
from app.core.errors import SessionStateError, SubmissionInProgress
from app.pipeline.status import ANALYSIS_COMPLETE, IDLE, Error, Processing
from app.pipeline.submission import SubmissionOutcome
from app.services.sessions import SessionRegistry, SubmissionSession
from app.services.storage import FileBlob

PDF = FileBlob(filename="resume.pdf", content=b"%PDF-1.7\n%test", content_type="application/pdf")


class _StubPipeline:
    def __init__(self, *, succeed: bool = True) -> None:
        self.succeed = succeed
        self.contexts = []

    async def run(self, context, *, on_status, on_success):
        self.contexts.append(context)
        on_status(Processing("Uploading resume"))
        if not self.succeed:
            on_status(Error("bad pdf", SubmissionErrorKind.CONVERSION_FAILED))
            return SubmissionOutcome()
        on_status(Processing(ANALYSIS_COMPLETE))
        await on_success("sub-42")
        return SubmissionOutcome(submission_id="sub-42")


def _filled_session(pipeline=None, **overrides) -> SubmissionSession:
    session = SubmissionSession(pipeline or _StubPipeline(), max_upload_bytes=1024)
    fields = {
        "company_name": "Acme",
        "job_title": "Data Engineer",
        "job_description": "Pipelines and SQL",
        "file": PDF,
    }
    fields.update(overrides)
    session.fill(**fields)
    return session


def test_missing_text_field_sets_validation_error_without_running_pipeline():
    pipeline = _StubPipeline()
    session = _filled_session(pipeline, job_title="  ")

    outcome = asyncio.run(session.submit())

    assert outcome is None
    assert pipeline.contexts == []
    assert session.status == Error("Please fill out all fields.", SubmissionErrorKind.INVALID_INPUT)


def test_missing_file_asks_for_resume():
    session = _filled_session(file=None)

    asyncio.run(session.submit())

    assert session.error == "Please upload your resume."


def test_non_pdf_and_oversized_files_are_rejected():
    not_pdf = _filled_session(file=FileBlob(filename="resume.docx", content=b"PK\x03\x04", content_type="application/zip"))
    asyncio.run(not_pdf.submit())
    assert not_pdf.error == "Please upload your resume as a PDF file."

    too_big = _filled_session(file=FileBlob(filename="resume.pdf", content=b"%PDF" + b"0" * 2048))
    asyncio.run(too_big.submit())
    assert too_big.error.startswith("Resume is too large")


def test_successful_submit_records_redirect_and_navigates():
    navigated = []
    session = SubmissionSession(_StubPipeline(), navigate=navigated.append)
    session.fill(company_name="Acme", job_title="Engineer", job_description="Python", file=PDF)

    outcome = asyncio.run(session.submit())

    assert outcome.submission_id == "sub-42"
    assert session.status == Processing(ANALYSIS_COMPLETE)
    assert session.submission_id == "sub-42"
    assert session.redirect_path == "/resume/sub-42"
    assert navigated == ["sub-42"]


def test_status_observer_sees_every_transition():
    seen = []
    session = SubmissionSession(_StubPipeline(succeed=False), on_status=seen.append)
    session.fill(company_name="Acme", job_title="Engineer", job_description="Python", file=PDF)

    asyncio.run(session.submit())

    assert seen == [
        Processing("Uploading resume"),
        Error("bad pdf", SubmissionErrorKind.CONVERSION_FAILED),
    ]


def test_reset_from_error_is_idempotent():
    session = _filled_session(_StubPipeline(succeed=False))
    asyncio.run(session.submit())
    assert session.error == "bad pdf"

    for _ in range(3):
        session.reset()
        assert session.status == IDLE
        assert session.status.text == ""
        assert session.error is None
        assert session.file is None
        assert (session.company_name, session.job_title, session.job_description) == ("", "", "")


def test_submit_is_rejected_while_processing():
    session = _filled_session()
    session.status = Processing("Uploading resume")

    with pytest.raises(SubmissionInProgress):
        asyncio.run(session.submit())
    with pytest.raises(SubmissionInProgress):
        session.reset()


def test_submit_from_error_requires_reset():
    pipeline = _StubPipeline(succeed=False)
    session = _filled_session(pipeline)
    asyncio.run(session.submit())

    with pytest.raises(SessionStateError):
        asyncio.run(session.submit())

    session.reset()
    session.fill(company_name="Acme", job_title="Engineer", job_description="Python", file=PDF)
    asyncio.run(session.submit())
    assert len(pipeline.contexts) == 2


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_uploaded_bytes_are_released_after_run():
    succeeded = _filled_session()
    asyncio.run(succeeded.submit())
    assert succeeded.file is None
    assert succeeded.is_finished

    failed = _filled_session(_StubPipeline(succeed=False))
    asyncio.run(failed.submit())
    assert failed.file is None
    assert failed.is_finished


def test_registry_expires_finished_sessions_after_ttl():
    clock = _Clock()
    registry = SessionRegistry(ttl_seconds=60, clock=clock)
    pipeline = _StubPipeline()

    done = registry.create(pipeline, max_upload_bytes=1024)
    done.fill(company_name="Acme", job_title="Engineer", job_description="Python", file=PDF)
    asyncio.run(done.submit())
    running = registry.create(pipeline, max_upload_bytes=1024)
    running.set_status(Processing("Uploading resume"))

    clock.now += 61
    registry.create(pipeline, max_upload_bytes=1024)

    assert registry.get(done.session_id) is None
    assert registry.get(running.session_id) is running
    assert len(registry) == 2


def test_registry_drops_oldest_idle_sessions_at_capacity():
    clock = _Clock()
    registry = SessionRegistry(max_sessions=2, clock=clock)
    pipeline = _StubPipeline()

    oldest = registry.create(pipeline, max_upload_bytes=1024)
    clock.now += 1
    newer = registry.create(pipeline, max_upload_bytes=1024)
    clock.now += 1
    newest = registry.create(pipeline, max_upload_bytes=1024)

    assert registry.get(oldest.session_id) is None
    assert registry.get(newer.session_id) is newer
    assert registry.get(newest.session_id) is newest
    assert len(registry) == 2


def test_registry_never_evicts_running_sessions():
    registry = SessionRegistry(max_sessions=1, ttl_seconds=0, clock=_Clock())
    pipeline = _StubPipeline()

    running = registry.create(pipeline, max_upload_bytes=1024)
    running.set_status(Processing("Analyzing your resume with AI"))
    registry.create(pipeline, max_upload_bytes=1024)

    assert registry.get(running.session_id) is running
    assert len(registry) == 2
