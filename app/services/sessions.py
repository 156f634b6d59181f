import inspect
import time
import uuid
from typing import Any, Callable

from app.core.errors import InvalidSubmission, SessionStateError, SubmissionInProgress
from app.core.logging import get_logger, log_fields
from app.pipeline.state import SubmissionContext
from app.pipeline.status import IDLE, Error, Idle, PipelineStatus, Processing
from app.pipeline.submission import SubmissionOutcome, SubmissionPipeline
from app.services.storage import FileBlob

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"
PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def resume_path_for(submission_id: str) -> str:
    return f"/resume/{submission_id}"


class SubmissionSession:
    """Caller-side state of one upload form: fields, selected file and pipeline status."""

    def __init__(
        self,
        pipeline: SubmissionPipeline,
        *,
        session_id: str | None = None,
        max_upload_bytes: int = 20 * 1024 * 1024,
        navigate: Callable[[str], Any] | None = None,
        on_status: Callable[[PipelineStatus], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.pipeline = pipeline
        self.session_id = session_id or uuid.uuid4().hex
        self.max_upload_bytes = max_upload_bytes
        self._navigate = navigate
        self._on_status = on_status
        self._clock = clock
        self.status: PipelineStatus = IDLE
        self.company_name = ""
        self.job_title = ""
        self.job_description = ""
        self.file: FileBlob | None = None
        self.submission_id: str | None = None
        self.redirect_path: str | None = None
        self.updated_at = clock()

    @property
    def is_processing(self) -> bool:
        return isinstance(self.status, Processing)

    @property
    def error(self) -> str | None:
        if isinstance(self.status, Error):
            return self.status.message
        return None

    def fill(self, *, company_name: str, job_title: str, job_description: str, file: FileBlob | None) -> None:
        self._ensure_not_processing("edit the form")
        self.company_name = company_name
        self.job_title = job_title
        self.job_description = job_description
        self.file = file

    def validate(self) -> SubmissionContext | None:
        """Check the form; on failure set an Error status and return None."""
        try:
            context = self._build_context()
        except InvalidSubmission as exc:
            self.set_status(Error(exc.message, exc.kind))
            return None
        return context

    def _build_context(self) -> SubmissionContext:
        fields = (self.company_name, self.job_title, self.job_description)
        if not all(value and value.strip() for value in fields):
            raise InvalidSubmission("Please fill out all fields.")
        if self.file is None or self.file.size == 0:
            raise InvalidSubmission("Please upload your resume.")
        if not self.file.content.startswith(PDF_MAGIC) and self.file.content_type not in PDF_CONTENT_TYPES:
            raise InvalidSubmission("Please upload your resume as a PDF file.")
        if self.file.size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            raise InvalidSubmission(f"Resume is too large; the limit is {limit_mb:g} MB.")
        return SubmissionContext(
            company_name=self.company_name,
            job_title=self.job_title,
            job_description=self.job_description,
            file=self.file,
        )

    @property
    def is_finished(self) -> bool:
        return isinstance(self.status, Error) or self.submission_id is not None

    def set_status(self, status: PipelineStatus) -> None:
        self.status = status
        self.updated_at = self._clock()
        logger.info(
            "Submission status changed",
            extra=log_fields(
                session_id=self.session_id,
                status=type(status).__name__,
                label=status.text or None,
                error=self.error,
            ),
        )
        if self._on_status is not None:
            self._on_status(status)

    async def submit(self) -> SubmissionOutcome | None:
        self._ensure_idle()
        context = self.validate()
        if context is None:
            return None
        return await self.run(context)

    async def run(self, context: SubmissionContext) -> SubmissionOutcome:
        self._ensure_idle()
        try:
            return await self.pipeline.run(context, on_status=self.set_status, on_success=self._on_success)
        finally:
            # The uploaded bytes are not needed once the run has ended.
            self.file = None

    async def _on_success(self, submission_id: str) -> None:
        self.submission_id = submission_id
        self.redirect_path = resume_path_for(submission_id)
        if self._navigate is not None:
            result = self._navigate(submission_id)
            if inspect.isawaitable(result):
                await result

    def reset(self) -> None:
        """Return to Idle and clear the form. Stored records are left untouched."""
        self._ensure_not_processing("reset")
        self.set_status(IDLE)
        self.file = None
        self.company_name = ""
        self.job_title = ""
        self.job_description = ""
        self.submission_id = None
        self.redirect_path = None

    def _ensure_not_processing(self, action: str) -> None:
        if self.is_processing:
            raise SubmissionInProgress(f"Cannot {action} while a submission is processing")

    def _ensure_idle(self) -> None:
        self._ensure_not_processing("submit")
        if not isinstance(self.status, Idle):
            raise SessionStateError("Reset the form before submitting again")


class SessionRegistry:
    """Sessions by id. Idle and finished sessions expire after ``ttl_seconds``; the oldest
    of them are dropped first once ``max_sessions`` is reached. Running sessions are kept."""

    def __init__(
        self,
        *,
        ttl_seconds: float = 3600,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: dict[str, SubmissionSession] = {}

    def create(self, pipeline: SubmissionPipeline, *, max_upload_bytes: int) -> SubmissionSession:
        self.evict()
        session = SubmissionSession(pipeline, max_upload_bytes=max_upload_bytes, clock=self._clock)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> SubmissionSession | None:
        return self._sessions.get(session_id)

    def evict(self) -> int:
        now = self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if self._is_evictable(session) and now - session.updated_at >= self.ttl_seconds
        ]
        for session_id in expired:
            del self._sessions[session_id]

        evicted = len(expired)
        if len(self._sessions) >= self.max_sessions:
            candidates = sorted(
                (session for session in self._sessions.values() if self._is_evictable(session)),
                key=lambda session: session.updated_at,
            )
            for session in candidates[: len(self._sessions) - self.max_sessions + 1]:
                del self._sessions[session.session_id]
                evicted += 1

        if evicted:
            logger.info("Evicted submission sessions", extra=log_fields(count=evicted, remaining=len(self._sessions)))
        return evicted

    @staticmethod
    def _is_evictable(session: SubmissionSession) -> bool:
        return session.is_finished or not session.is_processing

    def __len__(self) -> int:
        return len(self._sessions)
