from typing import Any, Literal

from pydantic import BaseModel

from app.core.enums import AnalysisStatus, SubmissionErrorKind
from app.pipeline.status import Error, Processing
from app.services.sessions import SubmissionSession


class SubmissionStatusResponse(BaseModel):
    session_id: str
    state: Literal["idle", "processing", "error"]
    label: str = ""
    message: str | None = None
    error_kind: SubmissionErrorKind | None = None
    submission_id: str | None = None
    redirect_to: str | None = None

    @classmethod
    def from_session(cls, session: SubmissionSession) -> "SubmissionStatusResponse":
        status = session.status
        if isinstance(status, Processing):
            state = "processing"
        elif isinstance(status, Error):
            state = "error"
        else:
            state = "idle"
        return cls(
            session_id=session.session_id,
            state=state,
            label=status.text,
            message=status.message if isinstance(status, Error) else None,
            error_kind=status.kind if isinstance(status, Error) else None,
            submission_id=session.submission_id,
            redirect_to=session.redirect_path,
        )


class SubmissionRecordResponse(BaseModel):
    id: str
    resumePath: str
    imagePath: str
    companyName: str
    jobTitle: str
    jobDescription: str
    feedback: Any
    analysisStatus: AnalysisStatus


class SubmissionRecordListResponse(BaseModel):
    count: int
    records: list[SubmissionRecordResponse]
